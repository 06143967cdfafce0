"""
Redirección de vehículos por congestión.

Cuando la cola en la dirección de salida de un vehículo supera el umbral
configurado, se busca una dirección perpendicular menos cargada y se
recalcula la ruta desde el vecino en esa dirección.
"""

import logging
from typing import Optional

from .geometry import CARDINAL_DIRECTIONS, Direction, determine_cardinal_direction, \
    find_neighbor_in_direction
from .router import Router
from .traffic_light import TrafficLight
from .traffic_network import TrafficNetwork
from .vehicle import Vehicle

logger = logging.getLogger(__name__)


class CongestionRerouter:
    """
    Redirige vehículos que salen de un semáforo por una dirección congestionada.

    Se evalúa a lo sumo una vez por cada visita de un vehículo a un nodo.
    """

    def __init__(self, network: TrafficNetwork, router: Router, threshold: int):
        """
        Args:
            network: Red vial
            router: Calculador de rutas
            threshold: Largo de cola a partir del cual se intenta redirigir
                       (0 desactiva la redirección)
        """
        self.network = network
        self.router = router
        self.threshold = threshold
        self.redirects_performed = 0
        self.redirects_failed = 0

    @property
    def enabled(self) -> bool:
        return self.threshold > 0

    def redirect_if_needed(self, vehicle: Vehicle, light: Optional[TrafficLight]) -> bool:
        """
        Evalúa y, si corresponde, redirige al vehículo.

        Args:
            vehicle: Vehículo detenido sobre el nodo del semáforo
            light: Semáforo del nodo actual del vehículo

        Returns:
            bool: True si la ruta del vehículo fue modificada
        """
        if not self.enabled or vehicle is None or light is None:
            return False

        node_id = vehicle.current_node
        if vehicle.last_reroute_node == node_id:
            return False

        next_node = vehicle.get_next_node()
        if next_node is None:
            return False

        outgoing = determine_cardinal_direction(self.network, node_id, next_node)
        if outgoing == Direction.UNKNOWN:
            return False

        queue_sizes = light.get_all_queue_sizes()
        current_queue = queue_sizes.get(outgoing, 0)
        if current_queue <= self.threshold:
            return False

        vehicle.last_reroute_node = node_id
        logger.info(f"Vehículo {vehicle.id} en {node_id}: salida {outgoing.value} "
                    f"congestionada (cola {current_queue}), buscando alternativa")

        previous_node = vehicle.get_previous_node()
        best_direction = None
        best_neighbor = None
        min_queue = current_queue

        for direction in CARDINAL_DIRECTIONS:
            if direction in (outgoing, outgoing.opposite):
                continue
            neighbor = find_neighbor_in_direction(self.network, node_id, direction)
            if neighbor is None or neighbor.id == previous_node:
                continue
            if queue_sizes.get(direction, 0) < min_queue:
                min_queue = queue_sizes.get(direction, 0)
                best_direction = direction
                best_neighbor = neighbor

        if best_neighbor is None:
            self.redirects_failed += 1
            logger.info(f"  -> Sin dirección alternativa viable para {vehicle.id}")
            return False

        sub_route = self.router.calculate_route(best_neighbor.id, vehicle.destination)
        if not sub_route:
            self.redirects_failed += 1
            logger.info(f"  -> Sin ruta alternativa para {vehicle.id} vía {best_neighbor.id}")
            return False

        vehicle.splice_route(sub_route)
        self.redirects_performed += 1
        logger.info(f"  -> {vehicle.id} redirigido hacia {best_direction.value} "
                    f"(nodo {best_neighbor.id}, cola {min_queue}); nueva ruta {vehicle.route}")
        return True

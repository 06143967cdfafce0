"""
Modelo de movimiento de vehículos.

Aplica, en cada paso de simulación, las reglas de avance de un vehículo:
espera en semáforos no verdes (con cola FIFO por aproximación), recorrido
fraccional de aristas y contabilidad de tiempos y combustible.
"""

import logging
import math
from typing import Dict

from .errors import RouteTopologyError
from .geometry import Direction, determine_cardinal_direction
from .traffic_light import TrafficLight
from .traffic_network import TrafficNetwork
from .vehicle import Vehicle, VehicleState

logger = logging.getLogger(__name__)

# Tolerancia para completar una arista pese a la deriva de sumas en flotante
POSITION_EPSILON = 1e-9


class MovementModel:
    """
    Avanza vehículos un paso de tiempo sobre la red.

    Sólo el hilo del simulador lo invoca; modifica el vehículo y las colas
    de los semáforos pero nunca las fases.
    """

    def __init__(self, network: TrafficNetwork, traffic_lights: Dict[str, TrafficLight],
                 rerouter=None):
        """
        Args:
            network: Red vial
            traffic_lights: Semáforos indexados por ID de nodo
            rerouter: CongestionRerouter opcional
        """
        self.network = network
        self.traffic_lights = traffic_lights
        self.rerouter = rerouter

    def approach_direction(self, vehicle: Vehicle) -> Direction:
        """
        Dirección con la que el vehículo se aproxima a su nodo actual.

        Se deriva del nodo anterior de la ruta; en el primer nodo se usa la
        dirección hacia el próximo nodo.
        """
        previous_node = vehicle.get_previous_node()
        if previous_node is not None:
            return determine_cardinal_direction(self.network, previous_node, vehicle.current_node)
        return determine_cardinal_direction(self.network, vehicle.current_node,
                                            vehicle.get_next_node())

    def advance(self, vehicle: Vehicle, delta_time: float):
        """
        Avanza un vehículo un paso de tiempo.

        Args:
            vehicle: Vehículo activo
            delta_time: Paso de tiempo (segundos)

        Raises:
            RouteTopologyError: Si no existe la arista hacia el próximo nodo de la ruta
        """
        if not vehicle.is_active():
            return

        vehicle.increment_travel_time(delta_time)

        if vehicle.is_at_node():
            next_node = vehicle.get_next_node()
            if next_node is None:
                self._handle_route_end(vehicle, delta_time)
                return

            light = self.traffic_lights.get(vehicle.current_node)
            if light is not None and not self._may_leave_intersection(vehicle, light, delta_time):
                return

        self._traverse(vehicle, delta_time)

    def _handle_route_end(self, vehicle: Vehicle, delta_time: float):
        if vehicle.current_node == vehicle.destination:
            # Detenido en destino: no consume
            return

        self._leave_queue(vehicle)
        vehicle.consume_fuel_idle(delta_time)
        vehicle.state = VehicleState.STALLED
        logger.warning(f"Vehículo {vehicle.id}: ruta agotada en {vehicle.current_node} "
                       f"sin llegar a {vehicle.destination}")

    def _may_leave_intersection(self, vehicle: Vehicle, light: TrafficLight,
                                delta_time: float) -> bool:
        """
        Decide si el vehículo puede cruzar el semáforo de su nodo actual.

        Si no puede, acumula espera y consumo en ralentí y queda encolado.
        """
        if self.rerouter is not None and self.rerouter.enabled:
            self.rerouter.redirect_if_needed(vehicle, light)

        direction = self.approach_direction(vehicle)
        self._sync_queue(vehicle, direction)

        green = light.can_vehicle_pass(direction)
        queue_head = light.peek_queue(direction)
        blocked_by_queue = queue_head is not None and queue_head.id != vehicle.id

        if green and not blocked_by_queue:
            if vehicle.queued_at is not None:
                light.pop_vehicle_from_queue(direction)
                vehicle.queued_at = None
            return True

        if vehicle.state != VehicleState.WAITING_AT_LIGHT:
            vehicle.state = VehicleState.WAITING_AT_LIGHT
            vehicle.num_stops += 1
            if light.add_vehicle_to_queue(direction, vehicle):
                vehicle.queued_at = (light.node_id, direction)
            logger.debug(f"Vehículo {vehicle.id} espera en {light.node_id} "
                         f"(aproximación {direction.value})")

        vehicle.increment_wait_time(delta_time)
        vehicle.consume_fuel_idle(delta_time)
        return False

    def _sync_queue(self, vehicle: Vehicle, direction: Direction):
        """Mueve al vehículo de cola si su aproximación cambió (p. ej. tras redirigirlo)."""
        if vehicle.queued_at is None:
            return
        node_id, queued_direction = vehicle.queued_at
        if node_id == vehicle.current_node and queued_direction == direction:
            return

        self._leave_queue(vehicle)
        light = self.traffic_lights.get(vehicle.current_node)
        if light is not None and light.add_vehicle_to_queue(direction, vehicle):
            vehicle.queued_at = (light.node_id, direction)

    def _leave_queue(self, vehicle: Vehicle):
        if vehicle.queued_at is None:
            return
        node_id, direction = vehicle.queued_at
        light = self.traffic_lights.get(node_id)
        if light is not None:
            light.remove_vehicle_from_queue(direction, vehicle)
        vehicle.queued_at = None

    def _traverse(self, vehicle: Vehicle, delta_time: float):
        """Recorre la arista hacia el próximo nodo de la ruta."""
        next_node = vehicle.get_next_node()
        edge = self.network.get_edge(vehicle.current_node, next_node)
        if edge is None:
            raise RouteTopologyError(vehicle.id, vehicle.current_node, next_node)

        travel_time = edge.travel_time
        if travel_time is None or math.isnan(travel_time) or travel_time <= 0:
            travel_time = delta_time

        vehicle.state = VehicleState.MOVING
        vehicle.position += delta_time / travel_time
        vehicle.consume_fuel_moving(delta_time)

        if vehicle.position >= 1.0 - POSITION_EPSILON:
            vehicle.advance_to_next_node()
            vehicle.state = VehicleState.AT_NODE
            logger.debug(f"Vehículo {vehicle.id} llegó a {vehicle.current_node}")

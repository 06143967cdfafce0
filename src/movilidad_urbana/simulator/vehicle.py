"""
Modelo de vehículo.

Este módulo implementa el estado de un vehículo individual: su ruta en
la red vial, su posición fraccional sobre el tramo actual y las
estadísticas que acumula durante el viaje (tiempo de viaje, de espera y
combustible consumido).
"""

import logging
from enum import Enum
from typing import List, Optional

from ..utils.config import VehicleConfig

logger = logging.getLogger(__name__)


class VehicleState(Enum):
    """Estados posibles de un vehículo."""
    AT_NODE = "at_node"                    # Detenido sobre un nodo, listo para salir
    MOVING = "moving"                      # Recorriendo una arista
    WAITING_AT_LIGHT = "waiting_at_light"  # Detenido en un semáforo no verde
    ARRIVED = "arrived"                    # Llegó a destino
    STALLED = "stalled"                    # Ruta agotada sin llegar a destino


class Vehicle:
    """
    Representa un vehículo individual en la simulación.

    La posición es la fracción recorrida de la arista hacia el próximo nodo
    de la ruta: 0.0 significa que el vehículo está sobre current_node.
    """

    def __init__(self, vehicle_id: str, origin: str, destination: str,
                 route: Optional[List[str]], spawn_time: float = 0.0,
                 fuel_rate_moving: float = VehicleConfig.FUEL_RATE_MOVING,
                 fuel_rate_idle: float = VehicleConfig.FUEL_RATE_IDLE):
        """
        Inicializa un vehículo.

        Args:
            vehicle_id: Identificador del vehículo (ej: "V12")
            origin: ID del nodo de origen
            destination: ID del nodo de destino
            route: Lista de IDs de nodos desde origen hasta destino
            spawn_time: Tiempo de generación (segundos de simulación)
            fuel_rate_moving: Consumo en movimiento (litros/segundo)
            fuel_rate_idle: Consumo en ralentí (litros/segundo)
        """
        self.id = vehicle_id
        self.origin = origin
        self.destination = destination
        self.route: List[str] = list(route) if route else []

        # Ubicación
        self.current_node = origin
        self.route_index = 0
        self.position = 0.0

        # Consumo
        self.fuel_rate_moving = fuel_rate_moving
        self.fuel_rate_idle = fuel_rate_idle

        # Estado
        self.state = VehicleState.AT_NODE
        self.spawn_time = spawn_time
        self.arrival_time: Optional[float] = None

        # Cola en la que está esperando: (node_id, Direction) o None
        self.queued_at = None
        # Último nodo donde se evaluó una redirección por congestión
        self.last_reroute_node: Optional[str] = None

        # Estadísticas
        self.travel_time = 0.0
        self.wait_time = 0.0
        self.fuel_consumed = 0.0
        self.num_stops = 0
        self.reroute_count = 0

    def set_route(self, route: Optional[List[str]], route_index: int = 0):
        """Reemplaza la ruta; una ruta nula se registra y se toma como vacía."""
        if route is None:
            logger.warning(f"Asignación de ruta nula para el vehículo {self.id}")
            route = []
        self.route = list(route)
        self.route_index = route_index

    def splice_route(self, new_tail: List[str]):
        """
        Reemplaza la parte de la ruta posterior al nodo actual.

        Args:
            new_tail: Nodos que siguen al nodo actual, terminando en el destino
        """
        self.route = self.route[:self.route_index + 1] + list(new_tail)
        self.reroute_count += 1

    def get_next_node(self) -> Optional[str]:
        """ID del próximo nodo de la ruta, o None si la ruta terminó."""
        if self.route_index + 1 < len(self.route):
            return self.route[self.route_index + 1]
        return None

    def get_previous_node(self) -> Optional[str]:
        """ID del nodo anterior en la ruta, o None en el primer nodo."""
        if 0 < self.route_index < len(self.route):
            return self.route[self.route_index - 1]
        return None

    def advance_to_next_node(self):
        """Completa la arista actual: el vehículo queda sobre el próximo nodo."""
        next_node = self.get_next_node()
        if next_node is None:
            return
        self.route_index += 1
        self.current_node = next_node
        self.position = 0.0
        self.last_reroute_node = None

    def increment_travel_time(self, delta_time: float):
        self.travel_time += delta_time

    def increment_wait_time(self, delta_time: float):
        self.wait_time += delta_time

    def consume_fuel_moving(self, delta_time: float):
        self.fuel_consumed += self.fuel_rate_moving * delta_time

    def consume_fuel_idle(self, delta_time: float):
        self.fuel_consumed += self.fuel_rate_idle * delta_time

    def is_at_node(self) -> bool:
        return self.position == 0.0

    def has_arrived(self) -> bool:
        """True si está sobre su nodo de destino."""
        return self.current_node == self.destination and self.position == 0.0

    def is_active(self) -> bool:
        return self.state not in (VehicleState.ARRIVED, VehicleState.STALLED)

    def __str__(self) -> str:
        return f"Vehicle({self.id}: {self.origin} → {self.destination})"

    def __repr__(self) -> str:
        return (f"Vehicle(id='{self.id}', node='{self.current_node}', "
                f"position={self.position:.2f}, state={self.state.value})")

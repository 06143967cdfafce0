"""
Cálculo de rutas por menor tiempo de viaje.

Implementa Dijkstra sobre la red vial usando el tiempo de viaje nominal de
cada arista como peso. Las distancias tentativas se guardan como enteros
en centésimas de segundo para evitar derivas de comparación en flotantes.
"""

import heapq
import logging
import math
from typing import Dict, List, Optional

from .traffic_network import TrafficNetwork

logger = logging.getLogger(__name__)

# Escala de tiempo a enteros (centésimas de segundo)
TIME_SCALE = 100


def is_routable(travel_time: float) -> bool:
    """Una arista sólo se usa para rutear si su tiempo es finito y positivo."""
    return travel_time is not None and math.isfinite(travel_time) and travel_time > 0


def calculate_route(network: Optional[TrafficNetwork], origin_id: Optional[str],
                    destination_id: Optional[str]) -> List[str]:
    """
    Calcula la ruta de menor tiempo de viaje acumulado entre dos nodos.

    Nunca lanza excepciones por entradas inválidas: retorna una lista vacía
    si la red está vacía, si algún ID no existe o si no hay camino.

    Args:
        network: Red vial
        origin_id: ID del nodo de origen
        destination_id: ID del nodo de destino

    Returns:
        Lista de IDs de nodos desde origen hasta destino (inclusive)
    """
    if network is None or network.is_empty() or not origin_id or not destination_id:
        logger.warning("Ruteo: red vacía o IDs nulos")
        return []

    if network.get_node(origin_id) is None:
        logger.warning(f"Ruteo: nodo de origen '{origin_id}' no encontrado")
        return []
    if network.get_node(destination_id) is None:
        logger.warning(f"Ruteo: nodo de destino '{destination_id}' no encontrado")
        return []

    if origin_id == destination_id:
        return [origin_id]

    distances: Dict[str, int] = {origin_id: 0}
    previous: Dict[str, str] = {}
    visited = set()

    # La cola puede tener entradas obsoletas; se descartan al extraerlas
    heap = [(0, origin_id)]

    while heap:
        current_dist, current_id = heapq.heappop(heap)
        if current_id in visited:
            continue
        if current_id == destination_id:
            break

        visited.add(current_id)

        current_node = network.get_node(current_id)
        if current_node is None:
            continue

        for edge in current_node.edges:
            if edge is None:
                continue
            neighbor_id = edge.target
            if neighbor_id in visited or network.get_node(neighbor_id) is None:
                continue
            if not is_routable(edge.travel_time):
                continue

            new_dist = current_dist + int(edge.travel_time * TIME_SCALE)
            if new_dist < distances.get(neighbor_id, math.inf):
                distances[neighbor_id] = new_dist
                previous[neighbor_id] = current_id
                heapq.heappush(heap, (new_dist, neighbor_id))

    if destination_id not in previous:
        logger.warning(f"Ruteo: no existe camino de {origin_id} a {destination_id}")
        return []

    return _build_path(previous, origin_id, destination_id)


def _build_path(previous: Dict[str, str], origin_id: str, destination_id: str) -> List[str]:
    """Reconstruye el camino recorriendo el mapa de predecesores hacia atrás."""
    path = [destination_id]
    current = destination_id
    while current != origin_id:
        current = previous.get(current)
        if current is None:
            return []
        path.append(current)
    path.reverse()
    return path


class Router:
    """
    Calculador de rutas ligado a una red vial.

    Lleva la cuenta de rutas calculadas y fallidas para el reporte final.
    """

    def __init__(self, network: TrafficNetwork):
        self.network = network
        self.routes_calculated = 0
        self.routes_failed = 0

    def calculate_route(self, origin_id: str, destination_id: str) -> List[str]:
        route = calculate_route(self.network, origin_id, destination_id)
        if route:
            self.routes_calculated += 1
        else:
            self.routes_failed += 1
        return route

    def route_travel_time(self, route: List[str]) -> float:
        """Tiempo nominal de la ruta en segundos."""
        return self.network.get_path_travel_time(route)

    def get_statistics(self) -> Dict:
        return {
            'routes_calculated': self.routes_calculated,
            'routes_failed': self.routes_failed,
        }

"""
Direcciones cardinales entre nodos de la red.

La dirección se deriva comparando los deltas absolutos de latitud y
longitud; los casos casi diagonales se resuelven como UNKNOWN, que los
semáforos tratan como rojo.
"""

from enum import Enum
from typing import Optional

from .traffic_network import Node, TrafficNetwork

# Umbral para decidir qué eje domina
DIRECTION_EPSILON = 0.000001


class Direction(Enum):
    """Direcciones cardinales de aproximación a una intersección."""
    NORTH = "north"
    EAST = "east"
    SOUTH = "south"
    WEST = "west"
    UNKNOWN = "unknown"

    @classmethod
    def from_name(cls, name: Optional[str]) -> "Direction":
        """Convierte un nombre ("North", "east", ...) en Direction; UNKNOWN si no se reconoce."""
        if isinstance(name, Direction):
            return name
        if not isinstance(name, str) or not name:
            return cls.UNKNOWN
        try:
            return cls(name.strip().lower())
        except ValueError:
            return cls.UNKNOWN

    @property
    def opposite(self) -> "Direction":
        return _OPPOSITES[self]

    @property
    def is_north_south(self) -> bool:
        return self in (Direction.NORTH, Direction.SOUTH)

    @property
    def is_east_west(self) -> bool:
        return self in (Direction.EAST, Direction.WEST)


_OPPOSITES = {
    Direction.NORTH: Direction.SOUTH,
    Direction.SOUTH: Direction.NORTH,
    Direction.EAST: Direction.WEST,
    Direction.WEST: Direction.EAST,
    Direction.UNKNOWN: Direction.UNKNOWN,
}

# Orden fijo de las cuatro colas de un semáforo
CARDINAL_DIRECTIONS = (Direction.NORTH, Direction.EAST, Direction.SOUTH, Direction.WEST)


def bearing_direction(from_node: Optional[Node], to_node: Optional[Node]) -> Direction:
    """
    Determina la dirección cardinal de from_node hacia to_node.

    Returns:
        Direction: Eje dominante del desplazamiento, o UNKNOWN si los deltas
                   son casi iguales o algún nodo falta
    """
    if from_node is None or to_node is None or from_node.id == to_node.id:
        return Direction.UNKNOWN

    delta_lat = to_node.latitude - from_node.latitude
    delta_lon = to_node.longitude - from_node.longitude
    abs_lat = abs(delta_lat)
    abs_lon = abs(delta_lon)

    if abs_lat > abs_lon + DIRECTION_EPSILON:
        return Direction.NORTH if delta_lat > 0 else Direction.SOUTH
    if abs_lon > abs_lat + DIRECTION_EPSILON:
        return Direction.EAST if delta_lon > 0 else Direction.WEST
    return Direction.UNKNOWN


def determine_cardinal_direction(network: TrafficNetwork, from_id: Optional[str],
                                 to_id: Optional[str]) -> Direction:
    """Igual que bearing_direction pero recibiendo IDs de nodos."""
    if not from_id or not to_id or from_id == to_id:
        return Direction.UNKNOWN
    return bearing_direction(network.get_node(from_id), network.get_node(to_id))


def direction_score(source: Node, neighbor: Node, direction: Direction) -> float:
    """
    Puntaje de qué tan bien un vecino se ubica en la dirección pedida.

    Es el avance sobre el eje pedido menos el desvío en el eje perpendicular;
    0 si el vecino está del lado contrario.
    """
    delta_lat = neighbor.latitude - source.latitude
    delta_lon = neighbor.longitude - source.longitude

    if direction == Direction.NORTH and delta_lat > 0:
        return delta_lat - abs(delta_lon)
    if direction == Direction.SOUTH and delta_lat < 0:
        return -delta_lat - abs(delta_lon)
    if direction == Direction.EAST and delta_lon > 0:
        return delta_lon - abs(delta_lat)
    if direction == Direction.WEST and delta_lon < 0:
        return -delta_lon - abs(delta_lat)
    return 0.0


def find_neighbor_in_direction(network: TrafficNetwork, source_id: str,
                               direction: Direction) -> Optional[Node]:
    """
    Busca el vecino saliente que mejor se alinea con una dirección.

    Args:
        network: Red vial
        source_id: ID del nodo de partida
        direction: Dirección cardinal buscada

    Returns:
        Node: Vecino con mayor puntaje positivo, o None
    """
    source = network.get_node(source_id)
    if source is None or direction == Direction.UNKNOWN:
        return None

    best_neighbor = None
    best_score = 0.0
    for edge in source.edges:
        if edge is None:
            continue
        neighbor = network.get_node(edge.target)
        if neighbor is None:
            continue
        score = direction_score(source, neighbor, direction)
        if score > best_score:
            best_score = score
            best_neighbor = neighbor
    return best_neighbor

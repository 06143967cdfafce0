"""
Modelo de red vial como grafo dirigido.

Este módulo implementa la representación de la red de calles de la ciudad
como un grafo dirigido donde los nodos son intersecciones (algunas con
semáforo) y las aristas son tramos de calle con tiempo de viaje nominal.
"""

import logging
from collections import deque
from typing import Dict, List, Optional

import networkx as nx

logger = logging.getLogger(__name__)


class Node:
    """
    Representa un nodo (intersección) de la red vial.

    El nodo es inmutable después de la carga, salvo la marca de semáforo.
    Sus aristas salientes forman la lista de adyacencia.
    """

    def __init__(self, node_id: str, latitude: float, longitude: float,
                 is_traffic_light: bool = False, light_direction: str = "unknown"):
        """
        Inicializa un nodo.

        Args:
            node_id: Identificador único del nodo
            latitude: Latitud en grados decimales
            longitude: Longitud en grados decimales
            is_traffic_light: True si el nodo es una intersección semaforizada
            light_direction: Dirección de aproximación registrada por el cargador
                             del mapa (define la fase inicial del semáforo)
        """
        self.id = node_id
        self.latitude = latitude
        self.longitude = longitude
        self.is_traffic_light = is_traffic_light
        self.light_direction = (light_direction or "unknown").lower()

        # Aristas salientes
        self.edges: List["Edge"] = []

    def add_edge(self, edge: "Edge"):
        """Agrega una arista saliente a la lista de adyacencia."""
        if edge is not None:
            self.edges.append(edge)

    def set_is_traffic_light(self, is_traffic_light: bool):
        self.is_traffic_light = is_traffic_light

    def __str__(self) -> str:
        return f"Node({self.id})"

    def __repr__(self) -> str:
        return (f"Node(id='{self.id}', coords=({self.latitude:.6f}, {self.longitude:.6f}), "
                f"traffic_light={self.is_traffic_light})")


class Edge:
    """
    Representa un tramo de calle dirigido entre dos nodos.

    Una calle de doble mano se modela como dos aristas, una por sentido.
    """

    def __init__(self, edge_id: str, source: str, target: str, length: float,
                 travel_time: float, oneway: bool = False, max_speed: float = 0.0,
                 capacity: int = 0):
        """
        Inicializa una arista.

        Args:
            edge_id: Identificador de la arista
            source: ID del nodo de origen
            target: ID del nodo de destino
            length: Longitud del tramo en metros
            travel_time: Tiempo de viaje nominal en segundos
            oneway: True si la calle es de mano única
            max_speed: Velocidad máxima permitida
            capacity: Capacidad del tramo en vehículos
        """
        self.id = edge_id
        self.source = source
        self.target = target
        self.length = length
        self.travel_time = travel_time
        self.oneway = oneway
        self.max_speed = max_speed
        self.capacity = capacity

    @property
    def average_speed(self) -> float:
        """Velocidad promedio (longitud / tiempo de viaje), 0 si el tiempo no es positivo."""
        return self.length / self.travel_time if self.travel_time > 0 else 0.0

    @property
    def is_bidirectional(self) -> bool:
        return not self.oneway

    def __str__(self) -> str:
        return f"Edge({self.source} → {self.target}, {self.travel_time}s)"

    def __repr__(self) -> str:
        return (f"Edge(id='{self.id}', source='{self.source}', target='{self.target}', "
                f"length={self.length}, travel_time={self.travel_time})")


class TrafficNetwork:
    """
    Representa la red vial completa como un grafo dirigido G = (V, E).

    Mantiene los nodos en orden de inserción junto con un índice id → Node
    para búsquedas O(1), y una lista plana con todas las aristas. Un
    DiGraph de networkx espeja la topología para estadísticas de la red.
    """

    def __init__(self, name: str = ""):
        """
        Inicializa una red vacía.

        Args:
            name: Nombre descriptivo de la red
        """
        self.name = name
        self.nodes: List[Node] = []
        self.edges: List[Edge] = []
        self._node_index: Dict[str, Node] = {}
        self._edge_ids = set()
        self.graph = nx.DiGraph()

    def add_node(self, node: Optional[Node]):
        """
        Agrega un nodo a la red.

        Los nodos nulos o sin ID se registran como advertencia y se ignoran.
        Un ID duplicado se ignora en silencio (gana el primero, no se fusionan).

        Args:
            node: Nodo a agregar
        """
        if node is None or not node.id:
            logger.warning("Intento de agregar un nodo nulo o con ID inválido")
            return
        if node.id in self._node_index:
            return

        self.nodes.append(node)
        self._node_index[node.id] = node
        self.graph.add_node(node.id, lat=node.latitude, lon=node.longitude,
                            traffic_light=node.is_traffic_light)

    def add_edge(self, edge: Optional[Edge]):
        """
        Agrega una arista a la red y a la adyacencia de su nodo de origen.

        Las aristas que referencian nodos inexistentes se conservan pero se
        registran como advertencia: el ruteo simplemente las ignora.

        Args:
            edge: Arista a agregar
        """
        if edge is None:
            logger.warning("Intento de agregar una arista nula")
            return
        if edge.id is not None and edge.id in self._edge_ids:
            return

        if edge.id is not None:
            self._edge_ids.add(edge.id)
        self.edges.append(edge)

        source_node = self._node_index.get(edge.source)
        if source_node is None:
            logger.warning(f"Arista {edge.id}: nodo de origen '{edge.source}' inexistente")
        else:
            source_node.add_edge(edge)

        if edge.target not in self._node_index:
            logger.warning(f"Arista {edge.id}: nodo de destino '{edge.target}' inexistente")

        if source_node is not None and edge.target in self._node_index:
            self.graph.add_edge(edge.source, edge.target,
                                travel_time=edge.travel_time, length=edge.length,
                                weight=edge.travel_time)

    def add_road(self, source: str, target: str, length: float, travel_time: float,
                 max_speed: float = 0.0, capacity: int = 0):
        """
        Agrega una calle de doble mano como dos aristas dirigidas.

        Args:
            source: ID de un extremo
            target: ID del otro extremo
            length: Longitud en metros
            travel_time: Tiempo de viaje en segundos (igual en ambos sentidos)
        """
        self.add_edge(Edge(f"{source}->{target}", source, target, length, travel_time,
                           oneway=False, max_speed=max_speed, capacity=capacity))
        self.add_edge(Edge(f"{target}->{source}", target, source, length, travel_time,
                           oneway=False, max_speed=max_speed, capacity=capacity))

    def get_node(self, node_id: Optional[str]) -> Optional[Node]:
        """Retorna el nodo con el ID dado, o None."""
        if not node_id:
            return None
        return self._node_index.get(node_id)

    def contains_node(self, node_id: Optional[str]) -> bool:
        if not node_id:
            return False
        return node_id in self._node_index

    def contains_edge(self, source: Optional[str], target: Optional[str]) -> bool:
        """
        Verifica si existe una arista source → target.

        Recorre la lista plana de aristas; se usa poco frente a la tasa de ticks.
        """
        if not source or not target:
            return False
        return any(edge.source == source and edge.target == target for edge in self.edges)

    def get_edge(self, source: Optional[str], target: Optional[str]) -> Optional[Edge]:
        """Retorna la arista source → target buscando en la adyacencia del origen."""
        node = self.get_node(source)
        if node is None or not target:
            return None
        for edge in node.edges:
            if edge is not None and edge.target == target:
                return edge
        return None

    def get_all_node_ids(self) -> List[str]:
        """Retorna la lista de IDs de nodos en orden de inserción."""
        return [node.id for node in self.nodes]

    def get_traffic_light_nodes(self) -> List[Node]:
        """Retorna los nodos marcados como intersecciones semaforizadas."""
        return [node for node in self.nodes if node.is_traffic_light]

    def get_neighbors(self, node_id: str) -> List[str]:
        """Retorna los IDs de los nodos alcanzables por una arista saliente."""
        node = self.get_node(node_id)
        if node is None:
            return []
        return [edge.target for edge in node.edges if edge is not None]

    def get_path_travel_time(self, path: List[str]) -> float:
        """
        Calcula el tiempo de viaje nominal de una ruta.

        Args:
            path: Lista de IDs de nodos

        Returns:
            float: Tiempo en segundos (sin considerar semáforos ni colas)
        """
        total_time = 0.0
        for i in range(len(path) - 1):
            edge = self.get_edge(path[i], path[i + 1])
            if edge:
                total_time += edge.travel_time
        return total_time

    def is_empty(self) -> bool:
        return not self.nodes

    def is_fully_reachable(self) -> bool:
        """
        Verifica que todos los nodos sean alcanzables desde el primero (BFS).

        La búsqueda se acota a tantas iteraciones como nodos tiene la red.

        Returns:
            bool: True si la BFS visita todos los nodos
        """
        if not self.nodes:
            logger.warning("BFS: red sin nodos")
            return False

        start_id = self.nodes[0].id
        visited = {start_id}
        queue = deque([start_id])

        iterations = 0
        max_iterations = len(self.nodes)

        while queue and iterations < max_iterations:
            iterations += 1
            current = self._node_index.get(queue.popleft())
            if current is None:
                continue
            for edge in current.edges:
                if edge is None:
                    continue
                neighbor_id = edge.target
                if neighbor_id in self._node_index and neighbor_id not in visited:
                    visited.add(neighbor_id)
                    queue.append(neighbor_id)

        connected = len(visited) == len(self.nodes)
        logger.info(f"BFS: nodos visitados {len(visited)} de {len(self.nodes)}. "
                    f"Red conectada: {connected}")
        return connected

    def get_network_stats(self) -> Dict:
        """
        Calcula estadísticas de la red.

        Returns:
            dict: Diccionario con estadísticas de la red
        """
        total_length = sum(edge.length for edge in self.edges)
        avg_edge_length = total_length / len(self.edges) if self.edges else 0

        return {
            'name': self.name,
            'num_nodes': len(self.nodes),
            'num_edges': len(self.edges),
            'num_traffic_lights': len(self.get_traffic_light_nodes()),
            'total_length_km': total_length / 1000,
            'avg_edge_length_m': avg_edge_length,
            'is_strongly_connected': (nx.is_strongly_connected(self.graph)
                                      if self.graph.number_of_nodes() else False),
        }

    @classmethod
    def grid(cls, rows: int, cols: int, spacing_deg: float = 0.001,
             length_m: float = 100.0, travel_time_s: float = 10.0,
             traffic_lights: bool = True, name: str = "grid") -> "TrafficNetwork":
        """
        Construye una red cuadriculada de calles de doble mano.

        Los IDs de nodos son "r{fila}c{columna}"; la fila crece hacia el
        norte y la columna hacia el este. Las intersecciones interiores
        (con cuatro vecinos) llevan semáforo si traffic_lights es True.

        Args:
            rows: Cantidad de filas
            cols: Cantidad de columnas
            spacing_deg: Separación entre nodos en grados
            length_m: Longitud de cada cuadra
            travel_time_s: Tiempo de viaje de cada cuadra
            traffic_lights: Si se semaforizan las intersecciones interiores
            name: Nombre de la red

        Returns:
            TrafficNetwork: Red construida
        """
        if rows < 1 or cols < 1:
            raise ValueError(f"Dimensiones de cuadrícula inválidas: {rows}x{cols}")

        network = cls(name=name)
        for r in range(rows):
            for c in range(cols):
                interior = 0 < r < rows - 1 and 0 < c < cols - 1
                network.add_node(Node(
                    f"r{r}c{c}",
                    latitude=r * spacing_deg,
                    longitude=c * spacing_deg,
                    is_traffic_light=traffic_lights and interior,
                    light_direction="north" if (r + c) % 2 == 0 else "east",
                ))

        for r in range(rows):
            for c in range(cols):
                if c + 1 < cols:
                    network.add_road(f"r{r}c{c}", f"r{r}c{c + 1}", length_m, travel_time_s)
                if r + 1 < rows:
                    network.add_road(f"r{r}c{c}", f"r{r + 1}c{c}", length_m, travel_time_s)

        return network

    def __len__(self) -> int:
        return len(self.nodes)

    def __str__(self) -> str:
        return f"TrafficNetwork('{self.name}', {len(self.nodes)} nodes)"

    def __repr__(self) -> str:
        return (f"TrafficNetwork(name='{self.name}', nodes={len(self.nodes)}, "
                f"edges={len(self.edges)})")

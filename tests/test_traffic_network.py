"""
Tests para el módulo de red vial (TrafficNetwork).
"""

import pytest
import sys
from pathlib import Path

# Agregar src al path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from movilidad_urbana.simulator.traffic_network import TrafficNetwork, Node, Edge


def build_line_network():
    """Red A - B - C en línea recta hacia el este, calles de doble mano."""
    network = TrafficNetwork(name="linea")
    network.add_node(Node("A", 0.0, 0.000))
    network.add_node(Node("B", 0.0, 0.001))
    network.add_node(Node("C", 0.0, 0.002))
    network.add_road("A", "B", 100.0, 10.0)
    network.add_road("B", "C", 100.0, 10.0)
    return network


class TestNode:
    """Tests para la clase Node."""

    def test_node_creation(self):
        """Test de creación de nodo."""
        node = Node("n1", -34.9, -56.16, is_traffic_light=True, light_direction="East")

        assert node.id == "n1"
        assert node.latitude == -34.9
        assert node.longitude == -56.16
        assert node.is_traffic_light
        assert node.light_direction == "east"
        assert node.edges == []

    def test_traffic_light_flag_is_mutable(self):
        """Test de cambio de la marca de semáforo."""
        node = Node("n1", 0.0, 0.0)
        assert not node.is_traffic_light

        node.set_is_traffic_light(True)
        assert node.is_traffic_light


class TestEdge:
    """Tests para la clase Edge."""

    def test_edge_creation(self):
        """Test de creación de arista."""
        edge = Edge("e1", "A", "B", length=200.0, travel_time=20.0, oneway=True,
                    max_speed=50.0, capacity=30)

        assert edge.source == "A"
        assert edge.target == "B"
        assert edge.oneway
        assert not edge.is_bidirectional
        assert edge.capacity == 30

    def test_average_speed(self):
        """Test de velocidad promedio del tramo."""
        assert Edge("e1", "A", "B", 200.0, 20.0).average_speed == 10.0
        assert Edge("e2", "A", "B", 200.0, 0.0).average_speed == 0.0


class TestTrafficNetwork:
    """Tests para la clase TrafficNetwork."""

    def test_empty_network_creation(self):
        """Test de creación de red vacía."""
        network = TrafficNetwork()

        assert network.is_empty()
        assert len(network) == 0
        assert network.edges == []

    def test_add_node(self):
        """Test de agregado de nodos."""
        network = TrafficNetwork()
        network.add_node(Node("A", 0.0, 0.0))

        assert network.contains_node("A")
        assert network.get_node("A").id == "A"
        assert network.get_node("Z") is None
        assert network.graph.has_node("A")

    def test_add_null_or_invalid_node_is_ignored(self):
        """Test de nodos nulos o sin ID."""
        network = TrafficNetwork()
        network.add_node(None)
        network.add_node(Node("", 0.0, 0.0))

        assert network.is_empty()

    def test_duplicate_node_first_wins(self):
        """Test de ID duplicado: se conserva el primero sin fusionar."""
        network = TrafficNetwork()
        network.add_node(Node("A", 1.0, 1.0))
        network.add_node(Node("A", 2.0, 2.0, is_traffic_light=True))

        assert len(network) == 1
        assert network.get_node("A").latitude == 1.0
        assert not network.get_node("A").is_traffic_light

    def test_add_edge(self):
        """Test de agregado de aristas."""
        network = build_line_network()

        assert len(network.edges) == 4
        assert network.contains_edge("A", "B")
        assert network.contains_edge("B", "A")
        assert not network.contains_edge("A", "C")
        assert network.get_edge("A", "B").travel_time == 10.0
        assert network.get_edge("A", "C") is None
        assert len(network.get_node("B").edges) == 2

    def test_duplicate_and_null_edges_are_ignored(self):
        """Test de aristas nulas o con ID repetido."""
        network = build_line_network()
        network.add_edge(None)
        network.add_edge(Edge("A->B", "A", "B", 1.0, 1.0))

        assert len(network.edges) == 4
        assert network.get_edge("A", "B").travel_time == 10.0

    def test_edge_with_missing_endpoint_is_kept(self):
        """Test de arista con nodo inexistente: se conserva pero no va al grafo."""
        network = build_line_network()
        network.add_edge(Edge("C->Z", "C", "Z", 50.0, 5.0))

        assert network.contains_edge("C", "Z")
        assert network.get_edge("C", "Z") is not None
        assert not network.graph.has_edge("C", "Z")

    def test_neighbors(self):
        """Test de vecinos salientes."""
        network = build_line_network()

        assert set(network.get_neighbors("B")) == {"A", "C"}
        assert network.get_neighbors("Z") == []

    def test_path_travel_time(self):
        """Test de tiempo nominal de una ruta."""
        network = build_line_network()

        assert network.get_path_travel_time(["A", "B", "C"]) == 20.0
        assert network.get_path_travel_time(["A"]) == 0.0

    def test_full_reachability(self):
        """Test de alcanzabilidad desde el primer nodo."""
        assert build_line_network().is_fully_reachable()

        isolated = TrafficNetwork()
        isolated.add_node(Node("A", 0.0, 0.0))
        isolated.add_node(Node("B", 0.0, 0.001))
        assert not isolated.is_fully_reachable()

        assert not TrafficNetwork().is_fully_reachable()

    def test_dangling_edge_does_not_count_as_reachable(self):
        """Test de arista hacia un nodo inexistente: no oculta un nodo aislado."""
        network = TrafficNetwork()
        network.add_node(Node("A", 0.0, 0.0))
        network.add_node(Node("B", 0.0, 0.001))
        network.add_edge(Edge("A->Z", "A", "Z", 100.0, 10.0, oneway=True))

        assert not network.is_fully_reachable()

    def test_reachability_only_from_first_node(self):
        """Test de BFS desde el primer nodo: una arista de mano única alcanza."""
        network = TrafficNetwork()
        network.add_node(Node("A", 0.0, 0.0))
        network.add_node(Node("B", 0.0, 0.001))
        network.add_edge(Edge("A->B", "A", "B", 100.0, 10.0, oneway=True))

        assert network.is_fully_reachable()
        assert not network.get_network_stats()['is_strongly_connected']

    def test_network_stats(self):
        """Test de estadísticas de red."""
        stats = build_line_network().get_network_stats()

        assert stats['num_nodes'] == 3
        assert stats['num_edges'] == 4
        assert stats['num_traffic_lights'] == 0
        assert stats['total_length_km'] == pytest.approx(0.4)
        assert stats['is_strongly_connected']

    def test_grid_builder(self):
        """Test de construcción de cuadrícula."""
        network = TrafficNetwork.grid(3, 4)

        assert len(network) == 12
        # Calles horizontales 3*3 y verticales 2*4, dos sentidos cada una
        assert len(network.edges) == 2 * (3 * 3 + 2 * 4)
        lights = [node.id for node in network.get_traffic_light_nodes()]
        assert lights == ["r1c1", "r1c2"]
        assert network.get_node("r2c3").latitude == pytest.approx(0.002)
        assert network.get_node("r2c3").longitude == pytest.approx(0.003)
        assert network.is_fully_reachable()

    def test_grid_invalid_dimensions(self):
        """Test de dimensiones inválidas."""
        with pytest.raises(ValueError):
            TrafficNetwork.grid(0, 3)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

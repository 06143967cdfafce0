"""
Tests para el módulo de vehículos (Vehicle) y su modelo de movimiento.
"""

import pytest
import sys
from pathlib import Path

# Agregar src al path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from movilidad_urbana.simulator.errors import RouteTopologyError
from movilidad_urbana.simulator.geometry import Direction
from movilidad_urbana.simulator.movement import MovementModel
from movilidad_urbana.simulator.traffic_light import TrafficLight, LightPhase
from movilidad_urbana.simulator.traffic_network import TrafficNetwork, Node
from movilidad_urbana.simulator.vehicle import Vehicle, VehicleState
from movilidad_urbana.utils.config import SimulationConfig, TrafficLightMode


def build_line_network(light_at_b=False):
    """Red A - B - C hacia el este, 10 segundos por cuadra."""
    network = TrafficNetwork(name="linea")
    network.add_node(Node("A", 0.0, 0.000))
    network.add_node(Node("B", 0.0, 0.001, is_traffic_light=light_at_b,
                          light_direction="north"))
    network.add_node(Node("C", 0.0, 0.002))
    network.add_road("A", "B", 100.0, 10.0)
    network.add_road("B", "C", 100.0, 10.0)
    return network


def build_light_at_b(network):
    """Semáforo de tiempo fijo en B que arranca con verde norte-sur (rojo este-oeste)."""
    config = SimulationConfig(traffic_light_mode=TrafficLightMode.FIXED_TIME)
    return {"B": TrafficLight("B", config, initial_direction="north")}


class TestVehicle:
    """Tests para la clase Vehicle."""

    def test_vehicle_creation(self):
        """Test de creación básica de vehículo."""
        vehicle = Vehicle("V1", "A", "C", ["A", "B", "C"], spawn_time=5.0)

        assert vehicle.id == "V1"
        assert vehicle.current_node == "A"
        assert vehicle.position == 0.0
        assert vehicle.state == VehicleState.AT_NODE
        assert vehicle.spawn_time == 5.0
        assert vehicle.fuel_rate_moving == 0.0005
        assert vehicle.fuel_rate_idle == 0.0002
        assert vehicle.is_active()

    def test_route_navigation(self):
        """Test de nodos siguiente y anterior."""
        vehicle = Vehicle("V1", "A", "C", ["A", "B", "C"])

        assert vehicle.get_next_node() == "B"
        assert vehicle.get_previous_node() is None

        vehicle.advance_to_next_node()
        assert vehicle.current_node == "B"
        assert vehicle.get_previous_node() == "A"
        assert vehicle.get_next_node() == "C"

        vehicle.advance_to_next_node()
        assert vehicle.get_next_node() is None
        assert vehicle.has_arrived()

    def test_null_route(self):
        """Test de ruta nula: se toma como vacía."""
        vehicle = Vehicle("V1", "A", "C", None)
        assert vehicle.route == []
        assert vehicle.get_next_node() is None

        vehicle.set_route(None)
        assert vehicle.route == []

    def test_splice_route(self):
        """Test de reemplazo de la ruta posterior al nodo actual."""
        vehicle = Vehicle("V1", "A", "D", ["A", "B", "C", "D"])
        vehicle.advance_to_next_node()

        vehicle.splice_route(["X", "D"])

        assert vehicle.route == ["A", "B", "X", "D"]
        assert vehicle.get_next_node() == "X"
        assert vehicle.reroute_count == 1

    def test_fuel_accounting(self):
        """Test de consumo exacto en movimiento y en ralentí."""
        vehicle = Vehicle("V1", "A", "B", ["A", "B"])

        vehicle.consume_fuel_moving(4.0)
        vehicle.consume_fuel_idle(5.0)

        assert vehicle.fuel_consumed == pytest.approx(4.0 * 0.0005 + 5.0 * 0.0002)


class TestMovementModel:
    """Tests para el avance de vehículos por paso de tiempo."""

    def test_line_scenario(self):
        """Test A-B-C: en B tras 10 pasos y en destino tras 20."""
        network = build_line_network()
        movement = MovementModel(network, {})
        vehicle = Vehicle("V1", "A", "C", ["A", "B", "C"])

        movement.advance(vehicle, 1.0)
        assert vehicle.state == VehicleState.MOVING
        assert vehicle.position == pytest.approx(0.1)

        for _ in range(9):
            movement.advance(vehicle, 1.0)
        assert vehicle.current_node == "B"
        assert vehicle.position == 0.0

        for _ in range(10):
            movement.advance(vehicle, 1.0)
        assert vehicle.current_node == "C"
        assert vehicle.has_arrived()
        assert vehicle.travel_time == 20.0
        assert vehicle.wait_time == 0.0
        assert vehicle.fuel_consumed == pytest.approx(20 * 0.0005)

    def test_stopped_at_destination_burns_nothing(self):
        """Test de vehículo detenido en su destino."""
        network = build_line_network()
        movement = MovementModel(network, {})
        vehicle = Vehicle("V1", "A", "B", ["A", "B"])
        for _ in range(10):
            movement.advance(vehicle, 1.0)
        fuel = vehicle.fuel_consumed

        movement.advance(vehicle, 1.0)

        assert vehicle.fuel_consumed == fuel
        assert vehicle.travel_time == 11.0

    def test_non_positive_travel_time_is_floored(self):
        """Test de arista con tiempo no positivo: se recorre en un paso."""
        network = build_line_network()
        network.get_edge("A", "B").travel_time = 0.0
        movement = MovementModel(network, {})
        vehicle = Vehicle("V1", "A", "B", ["A", "B"])

        movement.advance(vehicle, 1.0)

        assert vehicle.current_node == "B"

    def test_waits_at_red_light(self):
        """Test de espera en rojo: tiempo de espera, ralentí y una sola entrada en cola."""
        network = build_line_network(light_at_b=True)
        lights = build_light_at_b(network)
        movement = MovementModel(network, lights)
        vehicle = Vehicle("V1", "A", "C", ["A", "B", "C"])

        for _ in range(10):
            movement.advance(vehicle, 1.0)
        assert vehicle.current_node == "B"
        assert movement.approach_direction(vehicle) == Direction.EAST

        movement.advance(vehicle, 1.0)
        movement.advance(vehicle, 1.0)

        assert vehicle.state == VehicleState.WAITING_AT_LIGHT
        assert vehicle.position == 0.0
        assert vehicle.wait_time == 2.0
        assert vehicle.num_stops == 1
        assert lights["B"].get_queue_size("east") == 1
        assert vehicle.fuel_consumed == pytest.approx(10 * 0.0005 + 2 * 0.0002)

    def test_leaves_queue_on_green(self):
        """Test de salida de la cola al ponerse verde."""
        network = build_line_network(light_at_b=True)
        lights = build_light_at_b(network)
        movement = MovementModel(network, lights)
        vehicle = Vehicle("V1", "A", "C", ["A", "B", "C"])
        for _ in range(11):
            movement.advance(vehicle, 1.0)
        assert lights["B"].get_queue_size("east") == 1

        lights["B"].set_current_phase(LightPhase.NS_RED_EW_GREEN, 15.0)
        movement.advance(vehicle, 1.0)

        assert lights["B"].get_queue_size("east") == 0
        assert vehicle.queued_at is None
        assert vehicle.state == VehicleState.MOVING
        assert vehicle.position == pytest.approx(0.1)

    def test_queue_is_fifo(self):
        """Test de que sólo sale el primero de la cola."""
        network = build_line_network(light_at_b=True)
        lights = build_light_at_b(network)
        movement = MovementModel(network, lights)
        first = Vehicle("V1", "A", "C", ["A", "B", "C"])
        second = Vehicle("V2", "A", "C", ["A", "B", "C"])
        for _ in range(11):
            movement.advance(first, 1.0)
            movement.advance(second, 1.0)
        assert [v.id for v in lights["B"].queues[Direction.EAST]] == ["V1", "V2"]

        lights["B"].set_current_phase(LightPhase.NS_RED_EW_GREEN, 15.0)
        movement.advance(second, 1.0)
        assert second.state == VehicleState.WAITING_AT_LIGHT
        assert second.position == 0.0

        movement.advance(first, 1.0)
        movement.advance(second, 1.0)
        assert first.state == VehicleState.MOVING
        assert second.state == VehicleState.MOVING
        assert lights["B"].get_total_vehicles_in_queues() == 0

    def test_yellow_is_not_green(self):
        """Test de que en amarillo el vehículo no avanza."""
        network = build_line_network(light_at_b=True)
        lights = build_light_at_b(network)
        lights["B"].set_current_phase(LightPhase.NS_RED_EW_YELLOW, 3.0)
        movement = MovementModel(network, lights)
        vehicle = Vehicle("V1", "A", "C", ["A", "B", "C"])

        for _ in range(11):
            movement.advance(vehicle, 1.0)

        assert vehicle.current_node == "B"
        assert vehicle.wait_time == 1.0

    def test_exhausted_route_stalls(self):
        """Test de ruta agotada antes del destino."""
        network = build_line_network()
        movement = MovementModel(network, {})
        vehicle = Vehicle("V1", "A", "C", ["A", "B"])
        for _ in range(10):
            movement.advance(vehicle, 1.0)

        movement.advance(vehicle, 1.0)

        assert vehicle.state == VehicleState.STALLED
        assert not vehicle.is_active()
        assert vehicle.fuel_consumed == pytest.approx(10 * 0.0005 + 0.0002)

    def test_missing_edge_raises(self):
        """Test de ruta que usa un tramo inexistente."""
        network = build_line_network()
        movement = MovementModel(network, {})
        vehicle = Vehicle("V1", "A", "C", ["A", "C"])

        with pytest.raises(RouteTopologyError) as excinfo:
            movement.advance(vehicle, 1.0)

        assert excinfo.value.vehicle_id == "V1"
        assert excinfo.value.source == "A"
        assert excinfo.value.target == "C"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

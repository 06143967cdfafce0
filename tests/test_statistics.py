"""
Tests para las estadísticas de simulación y el índice de congestión.
"""

import threading
import pytest
import sys
from pathlib import Path

# Agregar src al path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from movilidad_urbana.simulator.statistics import SimulationStatistics


class TestSimulationStatistics:
    """Tests para SimulationStatistics."""

    def test_initial_state(self):
        """Test de estadísticas vacías."""
        stats = SimulationStatistics()
        snap = stats.snapshot()

        assert snap.vehicles_generated == 0
        assert snap.vehicles_arrived == 0
        assert snap.average_travel_time == 0.0
        assert snap.average_congestion == 0.0

    def test_arrival_averages(self):
        """Test de promedios por vehículo llegado."""
        stats = SimulationStatistics()
        stats.vehicle_generated()
        stats.vehicle_generated()
        stats.vehicle_arrived(20.0, 4.0, 0.01)
        stats.vehicle_arrived(40.0, 0.0, 0.03)

        assert stats.get_average_travel_time() == 30.0
        assert stats.get_average_wait_time() == 2.0
        assert stats.get_average_fuel_consumed() == pytest.approx(0.02)
        assert stats.snapshot().total_fuel_consumed == pytest.approx(0.04)

    def test_stalled_not_in_averages(self):
        """Test de vehículos varados fuera de los promedios."""
        stats = SimulationStatistics()
        stats.vehicle_arrived(10.0, 0.0, 0.005)
        stats.vehicle_stalled()

        snap = stats.snapshot()
        assert snap.vehicles_stalled == 1
        assert snap.vehicles_arrived == 1
        assert snap.average_travel_time == 10.0

    def test_congestion_smoothing(self):
        """Test del suavizado 0.3 * nuevo + 0.7 * anterior."""
        stats = SimulationStatistics()

        # Densidad 1 y todos encolados: índice instantáneo 100
        assert stats.calculate_current_congestion(10, 10, 10) == pytest.approx(30.0)
        assert stats.calculate_current_congestion(10, 10, 10) == pytest.approx(51.0)
        assert stats.calculate_current_congestion(0, 10, 0) == pytest.approx(35.7)

        snap = stats.snapshot()
        assert snap.peak_congestion == pytest.approx(51.0)
        assert snap.average_congestion == pytest.approx((30.0 + 51.0 + 35.7) / 3)
        assert stats.get_current_congestion() == pytest.approx(35.7)

    def test_congestion_components(self):
        """Test de ponderación de densidad y colas."""
        stats = SimulationStatistics()

        # Densidad 0.5 sin colas: 0.4 * 0.5 = 0.2 → 20
        assert stats.calculate_current_congestion(5, 10, 0) == pytest.approx(0.3 * 20.0)
        stats.reset()
        assert stats.calculate_current_congestion(5, 10, 3) == pytest.approx(
            0.3 * (0.4 * 0.5 + 0.6 * 0.6) * 100)

    @pytest.mark.parametrize("active, nodes, queued", [
        (0, 0, 0), (1000, 5, 1000), (3, 100, 0), (50, 50, 25),
    ])
    def test_congestion_bounds(self, active, nodes, queued):
        """Test de índice siempre en [0, 100]."""
        stats = SimulationStatistics()
        for _ in range(30):
            value = stats.calculate_current_congestion(active, nodes, queued)
            assert 0.0 <= value <= 100.0

    def test_history(self):
        """Test de historial por paso."""
        stats = SimulationStatistics()
        stats.update_current_time(1.0)
        stats.calculate_current_congestion(2, 4, 1)

        history = stats.get_history()
        assert len(history) == 1
        assert history[0]['time'] == 1.0
        assert history[0]['active_vehicles'] == 2
        assert history[0]['queued_vehicles'] == 1

    def test_summary_keys(self):
        """Test del resumen para la capa de reporte."""
        summary = SimulationStatistics().summary()

        for key in ['vehicles_generated', 'vehicles_arrived', 'vehicles_stalled',
                    'avg_travel_time', 'avg_wait_time', 'total_fuel_consumed',
                    'avg_fuel_consumed', 'current_congestion', 'avg_congestion',
                    'peak_congestion', 'simulation_time']:
            assert key in summary

    def test_concurrent_updates(self):
        """Test de escrituras concurrentes protegidas por lock."""
        stats = SimulationStatistics()

        def worker():
            for _ in range(1000):
                stats.vehicle_generated()
                stats.vehicle_arrived(1.0, 0.0, 0.0)

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        snap = stats.snapshot()
        assert snap.vehicles_generated == 4000
        assert snap.vehicles_arrived == 4000
        assert snap.average_travel_time == 1.0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

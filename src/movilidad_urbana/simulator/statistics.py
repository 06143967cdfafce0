"""
Estadísticas acumuladas de una corrida de simulación.

El hilo del simulador es el único que escribe; la capa de reporte lee
concurrentemente. Todas las operaciones se protegen con un mismo lock y
los lectores reciben copias inmutables (StatisticsSnapshot).
"""

import threading
from dataclasses import dataclass
from typing import Dict, List

from ..utils.config import CongestionConfig


@dataclass(frozen=True)
class StatisticsSnapshot:
    """Vista inmutable de las estadísticas en un instante."""
    current_time: float
    vehicles_generated: int
    vehicles_arrived: int
    vehicles_stalled: int
    average_travel_time: float
    average_wait_time: float
    total_fuel_consumed: float
    average_fuel_consumed: float
    current_congestion: float
    average_congestion: float
    peak_congestion: float


class SimulationStatistics:
    """
    Contadores de la simulación e índice de congestión suavizado.

    El índice combina densidad (vehículos activos por nodo) y proporción de
    vehículos detenidos en colas, escalado a [0, 100] y suavizado con un
    promedio exponencial.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._reset_unlocked()

    def _reset_unlocked(self):
        self.current_time = 0.0
        self.vehicles_generated = 0
        self.vehicles_arrived = 0
        self.vehicles_stalled = 0
        self.total_travel_time = 0.0
        self.total_wait_time = 0.0
        self.total_fuel_consumed = 0.0

        self.current_congestion = 0.0
        self.peak_congestion = 0.0
        self._congestion_sum = 0.0
        self._congestion_samples = 0

        self.history: List[Dict] = []

    def reset(self):
        with self._lock:
            self._reset_unlocked()

    def update_current_time(self, current_time: float):
        with self._lock:
            self.current_time = current_time

    def vehicle_generated(self):
        with self._lock:
            self.vehicles_generated += 1

    def vehicle_arrived(self, travel_time: float, wait_time: float, fuel_consumed: float):
        """
        Registra la llegada de un vehículo a su destino.

        Args:
            travel_time: Tiempo total de viaje (segundos)
            wait_time: Tiempo total detenido en semáforos (segundos)
            fuel_consumed: Combustible consumido (litros)
        """
        with self._lock:
            self.vehicles_arrived += 1
            self.total_travel_time += travel_time
            self.total_wait_time += wait_time
            self.total_fuel_consumed += fuel_consumed

    def vehicle_stalled(self):
        """Registra un vehículo cuya ruta se agotó antes del destino."""
        with self._lock:
            self.vehicles_stalled += 1

    def calculate_current_congestion(self, active_vehicles: int, total_nodes: int,
                                     total_queued: int) -> float:
        """
        Recalcula el índice de congestión suavizado.

        Args:
            active_vehicles: Vehículos activos en la red
            total_nodes: Cantidad de nodos de la red
            total_queued: Vehículos en colas de semáforos

        Returns:
            float: Índice suavizado en [0, 100]
        """
        density = active_vehicles / total_nodes if total_nodes > 0 else 0.0
        queued_ratio = total_queued / active_vehicles if active_vehicles > 0 else 0.0

        raw = (CongestionConfig.DENSITY_WEIGHT * density
               + CongestionConfig.QUEUE_WEIGHT * queued_ratio)
        new_index = min(1.0, raw) * CongestionConfig.MAX_INDEX

        with self._lock:
            alpha = CongestionConfig.SMOOTHING_FACTOR
            self.current_congestion = alpha * new_index + (1 - alpha) * self.current_congestion
            self.peak_congestion = max(self.peak_congestion, self.current_congestion)
            self._congestion_sum += self.current_congestion
            self._congestion_samples += 1

            self.history.append({
                'time': self.current_time,
                'active_vehicles': active_vehicles,
                'queued_vehicles': total_queued,
                'congestion_index': self.current_congestion,
            })
            return self.current_congestion

    def get_current_congestion(self) -> float:
        with self._lock:
            return self.current_congestion

    def get_average_travel_time(self) -> float:
        with self._lock:
            return self._average(self.total_travel_time)

    def get_average_wait_time(self) -> float:
        with self._lock:
            return self._average(self.total_wait_time)

    def get_average_fuel_consumed(self) -> float:
        with self._lock:
            return self._average(self.total_fuel_consumed)

    def get_history(self) -> List[Dict]:
        with self._lock:
            return list(self.history)

    def _average(self, total: float) -> float:
        return total / self.vehicles_arrived if self.vehicles_arrived > 0 else 0.0

    def snapshot(self) -> StatisticsSnapshot:
        """Copia consistente de todas las estadísticas."""
        with self._lock:
            avg_congestion = (self._congestion_sum / self._congestion_samples
                              if self._congestion_samples > 0 else 0.0)
            return StatisticsSnapshot(
                current_time=self.current_time,
                vehicles_generated=self.vehicles_generated,
                vehicles_arrived=self.vehicles_arrived,
                vehicles_stalled=self.vehicles_stalled,
                average_travel_time=self._average(self.total_travel_time),
                average_wait_time=self._average(self.total_wait_time),
                total_fuel_consumed=self.total_fuel_consumed,
                average_fuel_consumed=self._average(self.total_fuel_consumed),
                current_congestion=self.current_congestion,
                average_congestion=avg_congestion,
                peak_congestion=self.peak_congestion,
            )

    def summary(self) -> Dict:
        """Resumen en diccionario, como lo consume la capa de reporte."""
        snap = self.snapshot()
        return {
            'simulation_time': snap.current_time,
            'vehicles_generated': snap.vehicles_generated,
            'vehicles_arrived': snap.vehicles_arrived,
            'vehicles_stalled': snap.vehicles_stalled,
            'avg_travel_time': snap.average_travel_time,
            'avg_wait_time': snap.average_wait_time,
            'total_fuel_consumed': snap.total_fuel_consumed,
            'avg_fuel_consumed': snap.average_fuel_consumed,
            'current_congestion': snap.current_congestion,
            'avg_congestion': snap.average_congestion,
            'peak_congestion': snap.peak_congestion,
        }

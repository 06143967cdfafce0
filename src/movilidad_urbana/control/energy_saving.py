"""
Estrategia de ahorro de energía.

Con poco tráfico en el eje que se abre (y fuera de hora pico) el verde
baja al mínimo configurado. La duración sólo se acota por arriba con
max_green: fuera de la rama de poco tráfico no se garantiza el piso.
"""

from typing import Dict, Optional

from ..simulator.geometry import Direction
from ..utils.config import EnergySavingParams, TrafficLightConfig
from .base import NextPhaseDecision, TrafficLightControlStrategy


class EnergySavingStrategy(TrafficLightControlStrategy):
    """Control que acorta los verdes cuando hay poco tráfico."""

    PEAK_BONUS = TrafficLightConfig.ENERGY_SAVING_PEAK_BONUS

    def __init__(self, params: Optional[EnergySavingParams] = None):
        self.params = params or EnergySavingParams()

    def initialize(self, light) -> None:
        duration = self.params.base_green + (self.PEAK_BONUS if light.peak_hour else 0.0)
        duration = min(max(duration, self.params.min_green), self.params.max_green)
        light.set_current_phase(self.initial_phase_for(light), duration)

    def decide_next_phase(self, light, delta_time: float,
                          queue_sizes: Dict[Direction, int],
                          is_peak_hour: bool) -> NextPhaseDecision:
        return self.decide_cycle(light, queue_sizes, is_peak_hour, self.params.yellow_time)

    def green_time(self, queue_sizes: Dict[Direction, int], east_west_green: bool,
                   is_peak_hour: bool) -> float:
        duration = self.params.base_green + (self.PEAK_BONUS if is_peak_hour else 0.0)
        traffic_count = sum(self.relevant_queues(queue_sizes, east_west_green))

        if traffic_count <= self.params.low_traffic_threshold and not is_peak_hour:
            duration = self.params.min_green

        return min(duration, self.params.max_green)

    def __repr__(self) -> str:
        return (f"EnergySavingStrategy(base={self.params.base_green}s, "
                f"min={self.params.min_green}s, max={self.params.max_green}s)")

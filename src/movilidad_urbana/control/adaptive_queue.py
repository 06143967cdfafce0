"""
Estrategia adaptativa por largo de cola.

El verde parte de una duración base (más larga en hora pico) y se
extiende por cada vehículo que la cola más larga del eje supera el
umbral. Sin vehículos esperando, fuera de hora pico, el verde se acorta.
El resultado siempre queda dentro de [min_green, max_green].
"""

from typing import Dict, Optional

from ..simulator.geometry import Direction
from ..utils.config import AdaptiveQueueParams, TrafficLightConfig
from .base import NextPhaseDecision, TrafficLightControlStrategy


class AdaptiveQueueStrategy(TrafficLightControlStrategy):
    """Control que ajusta el verde al largo de las colas."""

    PEAK_BONUS = TrafficLightConfig.ADAPTIVE_PEAK_BONUS
    EMPTY_QUEUE_FACTOR = TrafficLightConfig.ADAPTIVE_EMPTY_QUEUE_FACTOR

    def __init__(self, params: Optional[AdaptiveQueueParams] = None):
        self.params = params or AdaptiveQueueParams()

    def _clamp(self, duration: float) -> float:
        duration = min(duration, self.params.max_green)
        return max(duration, self.params.min_green)

    def initialize(self, light) -> None:
        duration = self.params.base_green + (self.PEAK_BONUS if light.peak_hour else 0.0)
        light.set_current_phase(self.initial_phase_for(light), self._clamp(duration))

    def decide_next_phase(self, light, delta_time: float,
                          queue_sizes: Dict[Direction, int],
                          is_peak_hour: bool) -> NextPhaseDecision:
        return self.decide_cycle(light, queue_sizes, is_peak_hour, self.params.yellow_time)

    def green_time(self, queue_sizes: Dict[Direction, int], east_west_green: bool,
                   is_peak_hour: bool) -> float:
        """
        Calcula el verde adaptativo.

        Ejemplo: base=15, umbral=5, incremento=2 y cola máxima 8 da
        15 + (8 - 5) * 2 = 21 segundos.
        """
        duration = self.params.base_green + (self.PEAK_BONUS if is_peak_hour else 0.0)
        max_queue = max(self.relevant_queues(queue_sizes, east_west_green))

        if max_queue == 0 and not is_peak_hour:
            return self._clamp(max(self.params.min_green, duration * self.EMPTY_QUEUE_FACTOR))

        if max_queue > self.params.queue_threshold:
            duration += (max_queue - self.params.queue_threshold) * self.params.increment_per_vehicle

        return self._clamp(duration)

    def __repr__(self) -> str:
        return (f"AdaptiveQueueStrategy(base={self.params.base_green}s, "
                f"range=[{self.params.min_green}, {self.params.max_green}]s)")

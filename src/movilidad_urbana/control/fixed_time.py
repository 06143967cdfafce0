"""
Estrategia de tiempo fijo.

Alterna los ejes con duraciones constantes; en hora pico usa un verde
más largo sin mirar las colas.
"""

from typing import Dict, Optional

from ..simulator.geometry import Direction
from ..utils.config import FixedTimeParams
from .base import NextPhaseDecision, TrafficLightControlStrategy


class FixedTimeStrategy(TrafficLightControlStrategy):
    """Control por tiempos fijos de verde y amarillo."""

    def __init__(self, params: Optional[FixedTimeParams] = None):
        self.params = params or FixedTimeParams()

    def initialize(self, light) -> None:
        duration = self.params.peak_green_time if light.peak_hour else self.params.green_time
        light.set_current_phase(self.initial_phase_for(light), duration)

    def decide_next_phase(self, light, delta_time: float,
                          queue_sizes: Dict[Direction, int],
                          is_peak_hour: bool) -> NextPhaseDecision:
        return self.decide_cycle(light, queue_sizes, is_peak_hour, self.params.yellow_time)

    def green_time(self, queue_sizes: Dict[Direction, int], east_west_green: bool,
                   is_peak_hour: bool) -> float:
        return self.params.peak_green_time if is_peak_hour else self.params.green_time

    def __repr__(self) -> str:
        return (f"FixedTimeStrategy(green={self.params.green_time}s, "
                f"yellow={self.params.yellow_time}s)")

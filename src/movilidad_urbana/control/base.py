"""
Interfaz común de las estrategias de control de semáforos.

Una estrategia decide la fase inicial de un semáforo, la próxima fase
con su duración cuando vence el temporizador, y el estado de la luz que
ve cada dirección de aproximación.
"""

from abc import ABC, abstractmethod
from typing import Dict, NamedTuple, Optional

from ..simulator.geometry import Direction
from ..simulator.traffic_light import LightPhase, LightState


class NextPhaseDecision(NamedTuple):
    """Próxima fase decidida por una estrategia y su duración en segundos."""
    next_phase: LightPhase
    duration: float


class TrafficLightControlStrategy(ABC):
    """Estrategia de control intercambiable de un semáforo."""

    @abstractmethod
    def initialize(self, light) -> None:
        """Fija la fase inicial y su duración en el semáforo."""

    @abstractmethod
    def decide_next_phase(self, light, delta_time: float,
                          queue_sizes: Dict[Direction, int],
                          is_peak_hour: bool) -> Optional[NextPhaseDecision]:
        """Decide la fase siguiente a la actual del semáforo."""

    def get_light_state_for_approach(self, light, direction: Direction) -> LightState:
        """Estado de la luz para una aproximación; rojo si la fase o la dirección son desconocidas."""
        if light.current_phase is None or direction is None:
            return LightState.RED
        return light.current_phase.state_for(direction)

    @staticmethod
    def initial_phase_for(light) -> LightPhase:
        """Fase inicial según la dirección registrada en el mapa (este/oeste arranca en verde EW)."""
        direction = light.initial_direction
        if "east" in direction or "west" in direction:
            return LightPhase.NS_RED_EW_GREEN
        return LightPhase.NS_GREEN_EW_RED

    @staticmethod
    def relevant_queues(queue_sizes: Dict[Direction, int], east_west_green: bool):
        """Largos de las dos colas del eje que está por pasar a verde."""
        if east_west_green:
            return queue_sizes.get(Direction.EAST, 0), queue_sizes.get(Direction.WEST, 0)
        return queue_sizes.get(Direction.NORTH, 0), queue_sizes.get(Direction.SOUTH, 0)

    def decide_cycle(self, light, queue_sizes: Dict[Direction, int], is_peak_hour: bool,
                     yellow_time: float) -> NextPhaseDecision:
        """
        Avanza el ciclo estricto de cuatro fases.

        Las fases amarillas duran yellow_time; las verdes las calcula
        green_time() de cada estrategia.
        """
        next_phase = light.current_phase.next_phase()
        if next_phase.is_green:
            east_west = next_phase == LightPhase.NS_RED_EW_GREEN
            duration = self.green_time(queue_sizes, east_west, is_peak_hour)
        else:
            duration = yellow_time
        return NextPhaseDecision(next_phase, duration)

    @abstractmethod
    def green_time(self, queue_sizes: Dict[Direction, int], east_west_green: bool,
                   is_peak_hour: bool) -> float:
        """Duración del verde para el eje que está por abrirse."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"

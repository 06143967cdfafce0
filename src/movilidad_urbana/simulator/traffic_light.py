"""
Modelo de semáforo con máquina de estados de cuatro fases.

Este módulo implementa el semáforo de una intersección: el ciclo estricto
de fases norte-sur / este-oeste, el temporizador de fase, las cuatro
colas FIFO por dirección de aproximación y la delegación en una
estrategia de control intercambiable.
"""

import logging
from collections import deque
from enum import Enum
from typing import Dict, Iterator, List, Optional

from .geometry import CARDINAL_DIRECTIONS, Direction

logger = logging.getLogger(__name__)


class LightState(Enum):
    """Estados posibles de un semáforo para una aproximación."""
    GREEN = "green"
    YELLOW = "yellow"
    RED = "red"


class LightPhase(Enum):
    """Fases del ciclo del semáforo."""
    NS_GREEN_EW_RED = "NS_GREEN_EW_RED"
    NS_YELLOW_EW_RED = "NS_YELLOW_EW_RED"
    NS_RED_EW_GREEN = "NS_RED_EW_GREEN"
    NS_RED_EW_YELLOW = "NS_RED_EW_YELLOW"

    def next_phase(self) -> "LightPhase":
        """Única transición legal desde esta fase."""
        return _NEXT_PHASE[self]

    @property
    def is_green(self) -> bool:
        return self in (LightPhase.NS_GREEN_EW_RED, LightPhase.NS_RED_EW_GREEN)

    def state_for(self, direction: Direction) -> LightState:
        """Estado de la luz para una dirección de aproximación (rojo si es desconocida)."""
        if direction.is_north_south:
            return _PHASE_STATES[self][0]
        if direction.is_east_west:
            return _PHASE_STATES[self][1]
        return LightState.RED


_NEXT_PHASE = {
    LightPhase.NS_GREEN_EW_RED: LightPhase.NS_YELLOW_EW_RED,
    LightPhase.NS_YELLOW_EW_RED: LightPhase.NS_RED_EW_GREEN,
    LightPhase.NS_RED_EW_GREEN: LightPhase.NS_RED_EW_YELLOW,
    LightPhase.NS_RED_EW_YELLOW: LightPhase.NS_GREEN_EW_RED,
}

# (estado norte-sur, estado este-oeste) por fase
_PHASE_STATES = {
    LightPhase.NS_GREEN_EW_RED: (LightState.GREEN, LightState.RED),
    LightPhase.NS_YELLOW_EW_RED: (LightState.YELLOW, LightState.RED),
    LightPhase.NS_RED_EW_GREEN: (LightState.RED, LightState.GREEN),
    LightPhase.NS_RED_EW_YELLOW: (LightState.RED, LightState.YELLOW),
}


class VehicleQueue:
    """
    Cola FIFO de vehículos detenidos en una aproximación.

    Es un contenedor independiente del vehículo: un vehículo no guarda
    enlaces a otros vehículos. Un mismo vehículo no puede estar dos veces.
    """

    def __init__(self):
        self._items = deque()
        self._ids = set()

    def enqueue(self, vehicle) -> bool:
        """Agrega un vehículo al final; retorna False si ya estaba en la cola."""
        if vehicle is None or vehicle.id in self._ids:
            return False
        self._items.append(vehicle)
        self._ids.add(vehicle.id)
        return True

    def dequeue(self):
        """Extrae el vehículo del frente, o None si la cola está vacía."""
        if not self._items:
            return None
        vehicle = self._items.popleft()
        self._ids.discard(vehicle.id)
        return vehicle

    def peek(self):
        return self._items[0] if self._items else None

    def remove(self, vehicle) -> bool:
        """Remueve un vehículo en cualquier posición (p. ej. si fue redirigido)."""
        if vehicle is None or vehicle.id not in self._ids:
            return False
        self._items.remove(vehicle)
        self._ids.discard(vehicle.id)
        return True

    def clear(self):
        self._items.clear()
        self._ids.clear()

    def is_empty(self) -> bool:
        return not self._items

    def __contains__(self, vehicle) -> bool:
        return vehicle is not None and vehicle.id in self._ids

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator:
        return iter(list(self._items))


class TrafficLight:
    """
    Semáforo de una intersección controlado por una estrategia.

    La fase y su temporizador sólo cambian en update(), según la decisión
    de la estrategia activa. Las colas las modifica el simulador cuando un
    vehículo llega a la intersección en rojo o la abandona en verde.
    """

    def __init__(self, node_id: str, config, initial_direction: str = "unknown",
                 strategy=None):
        """
        Inicializa un semáforo.

        Args:
            node_id: ID del nodo que controla
            config: SimulationConfig con el modo y los parámetros de control
            initial_direction: Dirección de aproximación registrada en el mapa;
                               la estrategia la usa para elegir la fase inicial
            strategy: Estrategia de control; si es None se crea según el modo
                      configurado
        """
        self.node_id = node_id
        self.config = config
        self.initial_direction = (initial_direction or "unknown").lower()
        self.peak_hour = config.peak_hour

        self.current_phase: Optional[LightPhase] = None
        self.phase_timer = 0.0

        self.queues: Dict[Direction, VehicleQueue] = {
            direction: VehicleQueue() for direction in CARDINAL_DIRECTIONS
        }

        if strategy is None:
            from ..control import create_strategy
            strategy = create_strategy(config)
        self.strategy = strategy

        # Estadísticas
        self.total_cycles_completed = 0
        self.phase_change_history: List[Dict] = []
        self.fallback_count = 0

        self.strategy.initialize(self)
        if self.current_phase is None:
            logger.warning(f"Semáforo {node_id}: la estrategia no definió fase inicial, "
                           f"usando {LightPhase.NS_GREEN_EW_RED.value}")
            self.set_current_phase(LightPhase.NS_GREEN_EW_RED, config.fallback_green_time)
        self._initial_phase = self.current_phase
        self._initial_timer = self.phase_timer

    def set_current_phase(self, phase: LightPhase, duration: float):
        self.current_phase = phase
        self.phase_timer = duration

    def update(self, delta_time: float, is_peak_hour: bool, current_time: float = 0.0):
        """
        Avanza el temporizador y, al vencer, pide la próxima fase a la estrategia.

        Si la estrategia no decide (o propone una transición ilegal) se
        mantiene la fase actual con una duración segura.

        Args:
            delta_time: Paso de tiempo (segundos)
            is_peak_hour: Si la simulación está en hora pico
            current_time: Tiempo de simulación, sólo para el historial
        """
        self.peak_hour = is_peak_hour
        self.phase_timer -= delta_time

        if self.phase_timer > 0:
            return

        decision = self.strategy.decide_next_phase(
            self, delta_time, self.get_all_queue_sizes(), is_peak_hour
        )

        expected = self.current_phase.next_phase()
        if decision is None or decision.next_phase is None:
            self._hold_phase("la estrategia no retornó decisión")
            return
        if decision.next_phase != expected:
            self._hold_phase(f"transición ilegal {self.current_phase.value} → "
                             f"{decision.next_phase.value}")
            return

        self.set_current_phase(decision.next_phase, decision.duration)
        if decision.next_phase == LightPhase.NS_GREEN_EW_RED:
            self.total_cycles_completed += 1

        self.phase_change_history.append({
            'time': current_time,
            'phase': decision.next_phase.value,
            'duration': decision.duration,
        })
        logger.debug(f"Semáforo {self.node_id}: nueva fase {decision.next_phase.value} "
                     f"({decision.duration:.1f}s)")

    def _hold_phase(self, reason: str):
        self.fallback_count += 1
        self.phase_timer = self.config.fallback_green_time
        logger.warning(f"Semáforo {self.node_id}: {reason}; se mantiene "
                       f"{self.current_phase.value} por {self.phase_timer:.1f}s")

    def get_light_state_for_approach(self, direction) -> LightState:
        """
        Retorna el estado de la luz para una dirección de aproximación.

        Args:
            direction: Direction o nombre ("north", "east", ...)

        Returns:
            LightState: GREEN, YELLOW o RED (RED para direcciones desconocidas)
        """
        return self.strategy.get_light_state_for_approach(self, Direction.from_name(direction))

    def can_vehicle_pass(self, direction) -> bool:
        return self.get_light_state_for_approach(direction) == LightState.GREEN

    def add_vehicle_to_queue(self, direction, vehicle) -> bool:
        """
        Encola un vehículo en la aproximación dada.

        Returns:
            bool: True si quedó encolado; False si la dirección no es
                  reconocida o el vehículo ya estaba en esa cola
        """
        queue = self.queues.get(Direction.from_name(direction))
        if queue is None:
            logger.warning(f"Semáforo {self.node_id}: dirección '{direction}' desconocida, "
                           f"no se encola el vehículo {getattr(vehicle, 'id', None)}")
            return False
        return queue.enqueue(vehicle)

    def pop_vehicle_from_queue(self, direction):
        """Extrae el primer vehículo de la cola de una dirección, o None."""
        queue = self.queues.get(Direction.from_name(direction))
        if queue is None:
            return None
        return queue.dequeue()

    def peek_queue(self, direction):
        queue = self.queues.get(Direction.from_name(direction))
        return queue.peek() if queue is not None else None

    def remove_vehicle_from_queue(self, direction, vehicle) -> bool:
        queue = self.queues.get(Direction.from_name(direction))
        return queue.remove(vehicle) if queue is not None else False

    def get_queue_size(self, direction) -> int:
        queue = self.queues.get(Direction.from_name(direction))
        return len(queue) if queue is not None else 0

    def get_all_queue_sizes(self) -> Dict[Direction, int]:
        """Retorna el largo de cada cola en orden norte, este, sur, oeste."""
        return {direction: len(queue) for direction, queue in self.queues.items()}

    def get_total_vehicles_in_queues(self) -> int:
        return sum(len(queue) for queue in self.queues.values())

    def clear_queues(self):
        for queue in self.queues.values():
            queue.clear()

    def reset(self):
        """Reinicia el semáforo a su fase inicial y vacía las colas."""
        self.set_current_phase(self._initial_phase, self._initial_timer)
        self.clear_queues()
        self.total_cycles_completed = 0
        self.fallback_count = 0
        self.phase_change_history.clear()

    def get_status_string(self) -> str:
        sizes = self.get_all_queue_sizes()
        queues = " ".join(f"{d.value[0].upper()}={n}" for d, n in sizes.items())
        return (f"Semáforo {self.node_id} | Fase: {self.current_phase.value} | "
                f"Timer: {self.phase_timer:.1f}s | Colas: {queues} | "
                f"Ciclos: {self.total_cycles_completed}")

    def __str__(self) -> str:
        return f"TrafficLight({self.node_id}, {self.current_phase.value})"

    def __repr__(self) -> str:
        return (f"TrafficLight(node_id='{self.node_id}', phase={self.current_phase.value}, "
                f"timer={self.phase_timer:.1f}, strategy={type(self.strategy).__name__})")

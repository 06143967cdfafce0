"""
Instantáneas inmutables del estado de la simulación.

Al final de cada paso el simulador construye una SimulationSnapshot y la
publica; la capa de visualización o reporte sólo lee estas copias, nunca
los objetos vivos que el hilo del simulador sigue modificando.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from .statistics import StatisticsSnapshot
from .traffic_light import TrafficLight
from .vehicle import Vehicle


@dataclass(frozen=True)
class VehicleSnapshot:
    vehicle_id: str
    origin: str
    destination: str
    route: Tuple[str, ...]
    current_node: str
    next_node: Optional[str]
    position: float
    state: str
    travel_time: float
    wait_time: float
    fuel_consumed: float

    @classmethod
    def from_vehicle(cls, vehicle: Vehicle) -> "VehicleSnapshot":
        return cls(
            vehicle_id=vehicle.id,
            origin=vehicle.origin,
            destination=vehicle.destination,
            route=tuple(vehicle.route),
            current_node=vehicle.current_node,
            next_node=vehicle.get_next_node(),
            position=vehicle.position,
            state=vehicle.state.value,
            travel_time=vehicle.travel_time,
            wait_time=vehicle.wait_time,
            fuel_consumed=vehicle.fuel_consumed,
        )


@dataclass(frozen=True)
class TrafficLightSnapshot:
    node_id: str
    phase: str
    phase_timer: float
    # Largo de cola por dirección, en orden norte, este, sur, oeste
    queue_sizes: Tuple[Tuple[str, int], ...]

    @classmethod
    def from_light(cls, light: TrafficLight) -> "TrafficLightSnapshot":
        return cls(
            node_id=light.node_id,
            phase=light.current_phase.value,
            phase_timer=light.phase_timer,
            queue_sizes=tuple((d.value, n) for d, n in light.get_all_queue_sizes().items()),
        )

    @property
    def total_queued(self) -> int:
        return sum(n for _, n in self.queue_sizes)


@dataclass(frozen=True)
class SimulationSnapshot:
    """Estado completo de un paso de simulación."""
    tick: int
    time: float
    running: bool
    vehicles: Tuple[VehicleSnapshot, ...]
    traffic_lights: Tuple[TrafficLightSnapshot, ...]
    statistics: StatisticsSnapshot

    @property
    def active_vehicle_count(self) -> int:
        return len(self.vehicles)

    def light_phases(self) -> Dict[str, str]:
        return {light.node_id: light.phase for light in self.traffic_lights}

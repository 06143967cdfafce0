"""
Motor principal de simulación de tráfico vehicular.

Este módulo implementa el simulador que coordina todos los componentes:
red vial, semáforos, generación y movimiento de vehículos, estadísticas
y publicación de instantáneas para la capa de visualización.
"""

import logging
import threading
import time as timer
from typing import Dict, List, Optional

from ..utils.config import SimulationConfig
from .errors import EmptyNetworkError, NetworkConnectivityError, RouteTopologyError
from .movement import MovementModel
from .rerouting import CongestionRerouter
from .router import Router
from .snapshot import SimulationSnapshot, TrafficLightSnapshot, VehicleSnapshot
from .statistics import SimulationStatistics
from .traffic_generator import VehicleGenerator
from .traffic_light import TrafficLight
from .traffic_network import TrafficNetwork
from .vehicle import Vehicle, VehicleState

logger = logging.getLogger(__name__)


class TrafficSimulator:
    """
    Motor principal de simulación de tráfico.

    Avanza la simulación en pasos fijos de tiempo. Un único hilo (el que
    llama a run() o step()) modifica el estado; otros hilos leen mediante
    get_snapshot() y las estadísticas, que están protegidas por lock.
    """

    def __init__(self, network: TrafficNetwork, config: Optional[SimulationConfig] = None):
        """
        Inicializa el simulador.

        Args:
            network: Red vial ya cargada
            config: Configuración de la corrida (por defecto SimulationConfig())

        Raises:
            EmptyNetworkError: Si la red no tiene nodos
            NetworkConnectivityError: Si algún nodo no es alcanzable desde el primero
        """
        if network is None or network.is_empty():
            raise EmptyNetworkError("La red vial está vacía; no se puede simular")
        if not network.is_fully_reachable():
            raise NetworkConnectivityError(
                f"La red '{network.name}' no es conexa: hay nodos inalcanzables"
            )

        self.network = network
        self.config = config or SimulationConfig()
        self.dt = self.config.time_step

        self.router = Router(network)
        self.generator = VehicleGenerator(network, self.router, self.config)
        self.stats = SimulationStatistics()

        # Semáforos
        self.traffic_lights: Dict[str, TrafficLight] = {}
        self._initialize_traffic_lights()

        self.rerouter = CongestionRerouter(network, self.router, self.config.redirect_threshold)
        self.movement = MovementModel(network, self.traffic_lights, self.rerouter)

        # Vehículos
        self.active_vehicles: List[Vehicle] = []
        self.completed_vehicles: List[Vehicle] = []
        self.stalled_vehicles: List[Vehicle] = []

        # Estado de simulación
        self.current_time = 0.0
        self.tick = 0
        self.running = False
        self.fatal_error: Optional[Exception] = None
        self.real_time_start: Optional[float] = None

        # Concurrencia
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._snapshot_lock = threading.Lock()
        self._snapshot = self._build_snapshot()

        logger.info(f"Simulador inicializado | Red: {network.name or 'sin nombre'} | "
                    f"Nodos: {len(network.nodes)} | Aristas: {len(network.edges)} | "
                    f"Semáforos: {len(self.traffic_lights)} | "
                    f"Modo: {self.config.traffic_light_mode}")

    def _initialize_traffic_lights(self):
        """Crea un semáforo por cada nodo marcado como intersección semaforizada."""
        for node in self.network.get_traffic_light_nodes():
            self.traffic_lights[node.id] = TrafficLight(
                node_id=node.id,
                config=self.config,
                initial_direction=node.light_direction,
            )

    def get_traffic_light(self, node_id: str) -> Optional[TrafficLight]:
        return self.traffic_lights.get(node_id)

    def add_vehicle(self, vehicle: Vehicle):
        """Incorpora un vehículo creado externamente a la simulación."""
        self.active_vehicles.append(vehicle)
        self.stats.vehicle_generated()

    def is_running(self) -> bool:
        return self.running

    # ------------------------------------------------------------------
    # Bucle principal
    # ------------------------------------------------------------------

    def run(self) -> Dict:
        """
        Ejecuta la simulación hasta la duración configurada o hasta stop().

        Returns:
            dict: Resumen final (también ante una detención forzada o un error fatal)
        """
        logger.info(f"Iniciando simulación: {self.config.simulation_duration:.0f}s "
                    f"({self.config.simulation_duration / 60:.1f} minutos)")

        self.running = True
        self.real_time_start = timer.time()
        pause = self.dt * self.config.tick_sleep_factor

        while self.running and self.current_time < self.config.simulation_duration:
            if self._stop_event.is_set():
                break
            self.step()
            if pause > 0 and self._stop_event.wait(pause):
                break

        self.running = False
        self._publish_snapshot()

        metrics = self.calculate_final_metrics()
        logger.info(f"Simulación finalizada en T={self.current_time:.0f}s | "
                    f"Generados: {metrics['vehicles_generated']} | "
                    f"Llegados: {metrics['vehicles_arrived']} | "
                    f"Congestión pico: {metrics['peak_congestion']:.1f}")
        return metrics

    def step(self):
        """
        Ejecuta un paso de simulación.

        Orden: avanzar el reloj, generar vehículos, actualizar semáforos,
        mover vehículos, recalcular congestión y publicar la instantánea.
        """
        self.current_time += self.dt
        self.tick += 1
        self.stats.update_current_time(self.current_time)

        # 1. Generar nuevos vehículos
        self._spawn_vehicles()

        # 2. Actualizar semáforos
        for light in self.traffic_lights.values():
            light.update(self.dt, self.config.peak_hour, self.current_time)

        # 3. Mover vehículos
        try:
            self._update_vehicles()
        except RouteTopologyError as e:
            logger.error(f"Error fatal de topología en T={self.current_time:.0f}s: {e}")
            self.fatal_error = e
            self.running = False

        # 4. Congestión
        total_queued = sum(light.get_total_vehicles_in_queues()
                           for light in self.traffic_lights.values())
        self.stats.calculate_current_congestion(
            len(self.active_vehicles), len(self.network.nodes), total_queued
        )

        # 5. Publicar estado
        self._publish_snapshot()

        if self.tick % 60 == 0:
            logger.debug(self.get_status_string())

    def _spawn_vehicles(self):
        """Genera nuevos vehículos mientras no se alcance el tiempo de corte."""
        if not self.generator.is_generation_active(self.current_time):
            return

        for _ in range(self.generator.number_to_generate(self.dt)):
            vehicle_id = f"V{self.stats.vehicles_generated + 1}"
            vehicle = self.generator.generate_vehicle(vehicle_id, self.current_time)
            if vehicle is not None:
                self.add_vehicle(vehicle)

    def _update_vehicles(self):
        """Mueve todos los vehículos activos y reconstruye la lista de activos."""
        still_active = []
        try:
            for index, vehicle in enumerate(self.active_vehicles):
                self.movement.advance(vehicle, self.dt)

                if vehicle.has_arrived():
                    vehicle.state = VehicleState.ARRIVED
                    vehicle.arrival_time = self.current_time
                    self.stats.vehicle_arrived(vehicle.travel_time, vehicle.wait_time,
                                               vehicle.fuel_consumed)
                    self.completed_vehicles.append(vehicle)
                    logger.debug(f"Vehículo {vehicle.id} llegó a destino en "
                                 f"{vehicle.travel_time:.0f}s")
                elif vehicle.state == VehicleState.STALLED:
                    self.stats.vehicle_stalled()
                    self.stalled_vehicles.append(vehicle)
                else:
                    still_active.append(vehicle)
        except RouteTopologyError:
            # Se conservan el vehículo que falló y los no procesados
            still_active.extend(self.active_vehicles[index:])
            raise
        finally:
            self.active_vehicles = still_active

    # ------------------------------------------------------------------
    # Ejecución en segundo plano
    # ------------------------------------------------------------------

    def start(self) -> threading.Thread:
        """Ejecuta run() en un hilo daemon y lo retorna."""
        if self._thread is not None and self._thread.is_alive():
            logger.warning("La simulación ya está en ejecución")
            return self._thread

        self._stop_event.clear()
        self._thread = threading.Thread(target=self.run, name="traffic-simulator", daemon=True)
        self._thread.start()
        return self._thread

    def stop(self):
        """Pide la detención cooperativa; interrumpe la pausa entre pasos."""
        logger.info("Deteniendo simulación...")
        self.running = False
        self._stop_event.set()

    def join(self, timeout: Optional[float] = None) -> bool:
        """
        Espera a que termine el hilo de simulación.

        Returns:
            bool: True si el hilo terminó (o nunca se inició)
        """
        if self._thread is None:
            return True
        self._thread.join(timeout)
        return not self._thread.is_alive()

    # ------------------------------------------------------------------
    # Instantáneas y métricas
    # ------------------------------------------------------------------

    def _build_snapshot(self) -> SimulationSnapshot:
        return SimulationSnapshot(
            tick=self.tick,
            time=self.current_time,
            running=self.running,
            vehicles=tuple(VehicleSnapshot.from_vehicle(v) for v in self.active_vehicles),
            traffic_lights=tuple(TrafficLightSnapshot.from_light(light)
                                 for light in self.traffic_lights.values()),
            statistics=self.stats.snapshot(),
        )

    def _publish_snapshot(self):
        snapshot = self._build_snapshot()
        with self._snapshot_lock:
            self._snapshot = snapshot

    def get_snapshot(self) -> SimulationSnapshot:
        """Última instantánea publicada; es inmutable y segura entre hilos."""
        with self._snapshot_lock:
            return self._snapshot

    def calculate_final_metrics(self) -> Dict:
        """
        Calcula métricas finales de la simulación.

        Returns:
            dict: Resumen de estadísticas más métricas derivadas de los
                  vehículos completados
        """
        metrics = self.stats.summary()
        spawn = self.generator.get_spawn_statistics(self.current_time)

        computation_time = 0.0
        if self.real_time_start:
            computation_time = timer.time() - self.real_time_start

        # Retrasos respecto del tiempo nominal de la ruta
        delays = [v.travel_time - self.network.get_path_travel_time(v.route)
                  for v in self.completed_vehicles]
        avg_delay = sum(delays) / len(delays) if delays else 0.0

        stops = [v.num_stops for v in self.completed_vehicles]
        avg_stops = sum(stops) / len(stops) if stops else 0.0

        history = self.stats.get_history()
        queue_lengths = [h['queued_vehicles'] for h in history]
        avg_queue_length = sum(queue_lengths) / len(queue_lengths) if queue_lengths else 0.0
        max_queue_length = max(queue_lengths) if queue_lengths else 0

        throughput = metrics['vehicles_arrived']
        throughput_per_hour = (throughput / self.current_time) * 3600 if self.current_time > 0 else 0

        metrics.update({
            'vehicles_active': len(self.active_vehicles),
            'failed_generations': spawn['failed_generations'],
            'avg_delay': avg_delay,
            'avg_stops': avg_stops,
            'avg_queue_length': avg_queue_length,
            'max_queue_length': max_queue_length,
            'throughput_per_hour': throughput_per_hour,
            'reroutes': self.rerouter.redirects_performed,
            'light_fallbacks': sum(light.fallback_count for light in self.traffic_lights.values()),
            'traffic_light_mode': int(self.config.traffic_light_mode),
            'computation_time': computation_time,
            'stopped_by_error': self.fatal_error is not None,
        })
        return metrics

    def summary(self) -> Dict:
        return self.calculate_final_metrics()

    def reset(self):
        """Reinicia el simulador al estado inicial."""
        if self._thread is not None and self._thread.is_alive():
            raise RuntimeError("No se puede reiniciar una simulación en ejecución")

        self.current_time = 0.0
        self.tick = 0
        self.running = False
        self.fatal_error = None
        self.real_time_start = None
        self._stop_event.clear()

        self.active_vehicles.clear()
        self.completed_vehicles.clear()
        self.stalled_vehicles.clear()

        self.stats.reset()
        self.generator.reset()
        for light in self.traffic_lights.values():
            light.reset()

        self._publish_snapshot()

    def get_status_string(self) -> str:
        snap = self.stats.snapshot()
        return (f"[T={self.current_time:6.0f}s] "
                f"Activos: {len(self.active_vehicles):3d} | "
                f"Llegados: {snap.vehicles_arrived:3d} | "
                f"Generados: {snap.vehicles_generated:3d} | "
                f"Congestión: {snap.current_congestion:5.1f}")

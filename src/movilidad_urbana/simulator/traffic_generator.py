"""
Generador de vehículos.

Este módulo decide cuántos vehículos nacen en cada paso de simulación
(cantidad esperada = paso × tasa, con la fracción resuelta por un sorteo
de Bernoulli) y crea cada vehículo con un par origen-destino aleatorio y
su ruta de menor tiempo.
"""

import logging
from typing import Dict, Optional, Tuple

import numpy as np

from ..utils.config import SimulationConfig, SimulatorConfig
from .router import Router
from .traffic_network import TrafficNetwork
from .vehicle import Vehicle

logger = logging.getLogger(__name__)


class VehicleGenerator:
    """
    Genera vehículos con rutas calculadas sobre la red.

    Usa un generador de números aleatorios propio (numpy) para que una
    corrida con semilla fija sea reproducible.
    """

    def __init__(self, network: TrafficNetwork, router: Router, config: SimulationConfig,
                 seed: Optional[int] = None):
        """
        Inicializa el generador.

        Args:
            network: Red vial
            router: Calculador de rutas
            config: Configuración de la simulación
            seed: Semilla aleatoria (por defecto config.random_seed)
        """
        self.network = network
        self.router = router
        self.config = config
        self.seed = config.random_seed if seed is None else seed
        self.rng = np.random.default_rng(self.seed)

        self.total_vehicles_generated = 0
        self.failed_generations = 0

    def set_random_seed(self, seed: int):
        """
        Establece semilla para reproducibilidad.

        Args:
            seed: Semilla para el generador aleatorio
        """
        self.seed = seed
        self.rng = np.random.default_rng(seed)

    def is_generation_active(self, current_time: float) -> bool:
        """La generación se detiene pasado el tiempo de corte configurado."""
        return current_time <= self.config.vehicle_generation_stop_time

    def number_to_generate(self, delta_time: float) -> int:
        """
        Cantidad de vehículos a generar en este paso.

        La parte entera de delta_time × tasa se genera siempre; la parte
        fraccionaria es la probabilidad de un vehículo adicional.

        Args:
            delta_time: Paso de tiempo (segundos)

        Returns:
            int: Número de vehículos
        """
        expected = delta_time * self.config.vehicle_generation_rate
        count = int(expected)
        fraction = expected - count
        if fraction > 0 and self.rng.random() < fraction:
            count += 1
        return count

    def generate_origin_destination(self) -> Optional[Tuple[str, str]]:
        """
        Elige un par origen-destino distinto al azar.

        Returns:
            tuple: (origen, destino), o None si la red tiene menos de dos
                   nodos o no se encontró un par distinto
        """
        node_ids = self.network.get_all_node_ids()
        if len(node_ids) < 2:
            logger.warning("La red necesita al menos 2 nodos para generar vehículos")
            return None

        origin = node_ids[self.rng.integers(len(node_ids))]
        for _ in range(SimulatorConfig.MAX_ORIGIN_DESTINATION_RETRIES):
            destination = node_ids[self.rng.integers(len(node_ids))]
            if destination != origin:
                return origin, destination

        logger.warning(f"No se encontró un destino distinto de {origin}")
        return None

    def generate_vehicle(self, vehicle_id: str, current_time: float) -> Optional[Vehicle]:
        """
        Genera un nuevo vehículo con ruta calculada.

        Args:
            vehicle_id: Identificador a asignar
            current_time: Tiempo actual de simulación

        Returns:
            Vehicle: Nuevo vehículo, o None si no se pudo crear una ruta
        """
        pair = self.generate_origin_destination()
        if pair is None:
            self.failed_generations += 1
            return None
        origin, destination = pair

        route = self.router.calculate_route(origin, destination)
        if len(route) < 2:
            self.failed_generations += 1
            logger.info(f"Sin ruta de {origin} a {destination}; no se genera {vehicle_id}")
            return None

        vehicle = Vehicle(
            vehicle_id=vehicle_id,
            origin=origin,
            destination=destination,
            route=route,
            spawn_time=current_time,
            fuel_rate_moving=self.config.fuel_rate_moving,
            fuel_rate_idle=self.config.fuel_rate_idle,
        )
        self.total_vehicles_generated += 1
        logger.debug(f"T={current_time:.0f}s: generado {vehicle} (ruta: {route})")
        return vehicle

    def get_spawn_statistics(self, current_time: float) -> Dict:
        """
        Retorna estadísticas de generación de vehículos.

        Returns:
            dict: Estadísticas de generación
        """
        if current_time > 0:
            actual_rate = (self.total_vehicles_generated / current_time) * 3600
        else:
            actual_rate = 0.0

        return {
            'total_generated': self.total_vehicles_generated,
            'failed_generations': self.failed_generations,
            'target_rate_per_hour': self.config.vehicle_generation_rate * 3600,
            'actual_rate_per_hour': actual_rate,
            'random_seed': self.seed,
        }

    def reset(self):
        """Reinicia el generador (y su secuencia aleatoria)."""
        self.total_vehicles_generated = 0
        self.failed_generations = 0
        self.rng = np.random.default_rng(self.seed)

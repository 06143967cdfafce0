"""
Configuración global del simulador de movilidad urbana.

Este módulo contiene las constantes por defecto del proyecto y el objeto
de configuración inmutable (SimulationConfig) que consumen todos los
componentes del motor de simulación.
"""

import json
import logging
from dataclasses import dataclass, field, replace
from enum import IntEnum
from pathlib import Path
from typing import Any, Dict, Optional, Union

# Rutas del proyecto
PROJECT_ROOT = Path(__file__).parent.parent.parent.parent
RESULTS_DIR = PROJECT_ROOT / "experiments" / "results"


# Parámetros del simulador
class SimulatorConfig:
    """Configuración del bucle de simulación."""

    # Tiempo
    TIME_STEP = 1.0  # Paso de simulación en segundos
    DEFAULT_SIMULATION_DURATION = 600.0  # 10 minutos
    TICK_SLEEP_FACTOR = 0.1  # segundos reales por segundo simulado

    # Generación de vehículos
    VEHICLE_GENERATION_RATE = 0.3  # vehículos por segundo
    VEHICLE_GENERATION_STOP_TIME = 300.0  # segundos
    MAX_ORIGIN_DESTINATION_RETRIES = 100

    # Redirección por congestión (0 = desactivada)
    REDIRECT_THRESHOLD = 0


# Parámetros de vehículos
class VehicleConfig:
    """Consumo de combustible de los vehículos."""

    FUEL_RATE_MOVING = 0.0005  # litros por segundo en movimiento
    FUEL_RATE_IDLE = 0.0002    # litros por segundo en ralentí


# Parámetros de semáforos
class TrafficLightConfig:
    """Duraciones por defecto de cada estrategia de control."""

    # Tiempo fijo
    FIXED_GREEN_TIME = 15.0
    FIXED_YELLOW_TIME = 3.0
    PEAK_HOUR_GREEN_TIME = 20.0

    # Adaptativo por cola
    ADAPTIVE_BASE_GREEN = 15.0
    ADAPTIVE_YELLOW_TIME = 3.0
    ADAPTIVE_MAX_GREEN = 40.0
    ADAPTIVE_MIN_GREEN = 10.0
    ADAPTIVE_QUEUE_THRESHOLD = 5
    ADAPTIVE_INCREMENT = 2.0
    ADAPTIVE_PEAK_BONUS = 5.0
    ADAPTIVE_EMPTY_QUEUE_FACTOR = 0.66

    # Ahorro de energía
    ENERGY_SAVING_BASE_GREEN = 20.0
    ENERGY_SAVING_YELLOW_TIME = 3.0
    ENERGY_SAVING_MIN_GREEN = 7.0
    ENERGY_SAVING_THRESHOLD = 1
    ENERGY_SAVING_MAX_GREEN = 40.0
    ENERGY_SAVING_PEAK_BONUS = 2.0


# Índice de congestión
class CongestionConfig:
    """Ponderaciones del índice de congestión suavizado."""

    SMOOTHING_FACTOR = 0.3
    DENSITY_WEIGHT = 0.4
    QUEUE_WEIGHT = 0.6
    MAX_INDEX = 100.0


# Logging
class LoggingConfig:
    """Configuración de logging."""

    LOG_LEVEL = "INFO"
    LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    LOG_FILE = PROJECT_ROOT / "simulation.log"


class TrafficLightMode(IntEnum):
    """Modos de control de semáforos reconocidos por la configuración."""
    FIXED_TIME = 1
    ADAPTIVE_QUEUE = 2
    ENERGY_SAVING = 3


@dataclass(frozen=True)
class FixedTimeParams:
    green_time: float = TrafficLightConfig.FIXED_GREEN_TIME
    yellow_time: float = TrafficLightConfig.FIXED_YELLOW_TIME
    peak_green_time: float = TrafficLightConfig.PEAK_HOUR_GREEN_TIME


@dataclass(frozen=True)
class AdaptiveQueueParams:
    base_green: float = TrafficLightConfig.ADAPTIVE_BASE_GREEN
    yellow_time: float = TrafficLightConfig.ADAPTIVE_YELLOW_TIME
    max_green: float = TrafficLightConfig.ADAPTIVE_MAX_GREEN
    queue_threshold: int = TrafficLightConfig.ADAPTIVE_QUEUE_THRESHOLD
    min_green: float = TrafficLightConfig.ADAPTIVE_MIN_GREEN
    increment_per_vehicle: float = TrafficLightConfig.ADAPTIVE_INCREMENT


@dataclass(frozen=True)
class EnergySavingParams:
    base_green: float = TrafficLightConfig.ENERGY_SAVING_BASE_GREEN
    yellow_time: float = TrafficLightConfig.ENERGY_SAVING_YELLOW_TIME
    min_green: float = TrafficLightConfig.ENERGY_SAVING_MIN_GREEN
    low_traffic_threshold: int = TrafficLightConfig.ENERGY_SAVING_THRESHOLD
    max_green: float = TrafficLightConfig.ENERGY_SAVING_MAX_GREEN


@dataclass(frozen=True)
class SimulationConfig:
    """
    Parámetros de una corrida de simulación.

    Es inmutable después de construida; todos los componentes la leen
    pero ninguno la modifica. Para variar un parámetro usar with_overrides().

    Raises:
        ValueError: Si algún parámetro está fuera de rango
    """

    simulation_duration: float = SimulatorConfig.DEFAULT_SIMULATION_DURATION
    vehicle_generation_rate: float = SimulatorConfig.VEHICLE_GENERATION_RATE
    vehicle_generation_stop_time: float = SimulatorConfig.VEHICLE_GENERATION_STOP_TIME
    traffic_light_mode: int = TrafficLightMode.ADAPTIVE_QUEUE
    fixed_time: FixedTimeParams = field(default_factory=FixedTimeParams)
    adaptive_queue: AdaptiveQueueParams = field(default_factory=AdaptiveQueueParams)
    energy_saving: EnergySavingParams = field(default_factory=EnergySavingParams)
    peak_hour: bool = False
    redirect_threshold: int = SimulatorConfig.REDIRECT_THRESHOLD
    time_step: float = SimulatorConfig.TIME_STEP
    tick_sleep_factor: float = SimulatorConfig.TICK_SLEEP_FACTOR
    fuel_rate_moving: float = VehicleConfig.FUEL_RATE_MOVING
    fuel_rate_idle: float = VehicleConfig.FUEL_RATE_IDLE
    random_seed: Optional[int] = None

    def __post_init__(self):
        # Validación
        if self.simulation_duration <= 0:
            raise ValueError(f"Duración de simulación inválida: {self.simulation_duration}s")
        if self.time_step <= 0:
            raise ValueError(f"Paso de tiempo inválido: {self.time_step}s")
        if self.vehicle_generation_rate < 0:
            raise ValueError(f"Tasa de generación negativa: {self.vehicle_generation_rate}")
        if self.tick_sleep_factor < 0:
            raise ValueError(f"Factor de pausa negativo: {self.tick_sleep_factor}")
        if self.redirect_threshold < 0:
            raise ValueError(f"Umbral de redirección negativo: {self.redirect_threshold}")
        if self.fuel_rate_moving < 0 or self.fuel_rate_idle < 0:
            raise ValueError("Las tasas de consumo de combustible no pueden ser negativas")

    @property
    def fallback_green_time(self) -> float:
        """Duración segura usada cuando una estrategia no decide la próxima fase."""
        return self.fixed_time.green_time

    def with_overrides(self, **changes) -> "SimulationConfig":
        """Retorna una copia de la configuración con los campos dados reemplazados."""
        return replace(self, **changes)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SimulationConfig":
        """
        Construye la configuración desde un diccionario anidado.

        Estructura esperada (todas las claves son opcionales):
            {
              "global_parameters": {"simulation_duration_s": 600,
                                    "vehicle_generation_rate": 0.3,
                                    "vehicle_generation_stop_time_s": 300,
                                    "peak_hour": true,
                                    "redirect_threshold": 5,
                                    "random_seed": 42},
              "traffic_lights": {"mode": 2,
                                 "fixed_time": {...},
                                 "adaptive_queue": {...},
                                 "energy_saving": {...}}
            }

        Args:
            data: Diccionario con los parámetros

        Returns:
            SimulationConfig: Configuración construida
        """
        params = data.get('global_parameters', {})
        lights = data.get('traffic_lights', {})

        kwargs: Dict[str, Any] = {}
        key_map = {
            'simulation_duration_s': 'simulation_duration',
            'vehicle_generation_rate': 'vehicle_generation_rate',
            'vehicle_generation_stop_time_s': 'vehicle_generation_stop_time',
            'peak_hour': 'peak_hour',
            'redirect_threshold': 'redirect_threshold',
            'time_step_s': 'time_step',
            'tick_sleep_factor': 'tick_sleep_factor',
            'fuel_rate_moving': 'fuel_rate_moving',
            'fuel_rate_idle': 'fuel_rate_idle',
            'random_seed': 'random_seed',
        }
        for json_key, attr in key_map.items():
            if json_key in params:
                kwargs[attr] = params[json_key]

        if 'mode' in lights:
            kwargs['traffic_light_mode'] = int(lights['mode'])
        if 'fixed_time' in lights:
            kwargs['fixed_time'] = FixedTimeParams(**lights['fixed_time'])
        if 'adaptive_queue' in lights:
            kwargs['adaptive_queue'] = AdaptiveQueueParams(**lights['adaptive_queue'])
        if 'energy_saving' in lights:
            kwargs['energy_saving'] = EnergySavingParams(**lights['energy_saving'])

        return cls(**kwargs)

    @classmethod
    def from_json(cls, filepath: Union[str, Path]) -> "SimulationConfig":
        """
        Carga la configuración desde un archivo JSON.

        Raises:
            FileNotFoundError: Si el archivo no existe
            json.JSONDecodeError: Si el archivo no es JSON válido
        """
        path = Path(filepath)
        if not path.exists():
            raise FileNotFoundError(f"No se encontró el archivo de configuración: {filepath}")

        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)

        return cls.from_dict(data)


def setup_logging(level: Optional[str] = None,
                  log_file: Optional[Union[str, Path]] = None) -> logging.Logger:
    """
    Configura el logger raíz del paquete.

    Args:
        level: Nivel de logging (por defecto LoggingConfig.LOG_LEVEL)
        log_file: Archivo adicional donde escribir el log (opcional)

    Returns:
        logging.Logger: Logger del paquete movilidad_urbana
    """
    logger = logging.getLogger("movilidad_urbana")
    logger.setLevel(level or LoggingConfig.LOG_LEVEL)

    formatter = logging.Formatter(LoggingConfig.LOG_FORMAT)
    if not logger.handlers:
        console = logging.StreamHandler()
        console.setFormatter(formatter)
        logger.addHandler(console)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def ensure_directories():
    """Crea los directorios de resultados si no existen."""
    RESULTS_DIR.mkdir(parents=True, exist_ok=True)

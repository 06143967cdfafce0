"""
Estrategias de control de semáforos.

Este módulo contiene las tres estrategias intercambiables:
- Tiempo fijo: verdes y amarillos constantes
- Adaptativa por cola: extiende el verde según la cola más larga
- Ahorro de energía: acorta el verde cuando hay poco tráfico
"""

import logging

from ..utils.config import TrafficLightMode
from .base import NextPhaseDecision, TrafficLightControlStrategy
from .fixed_time import FixedTimeStrategy
from .adaptive_queue import AdaptiveQueueStrategy
from .energy_saving import EnergySavingStrategy

logger = logging.getLogger(__name__)


def create_strategy(config) -> TrafficLightControlStrategy:
    """
    Crea la estrategia correspondiente al modo configurado.

    Un modo no reconocido se registra como advertencia y usa tiempo fijo.

    Args:
        config: SimulationConfig

    Returns:
        TrafficLightControlStrategy: Nueva instancia (una por semáforo)
    """
    mode = config.traffic_light_mode
    if mode == TrafficLightMode.FIXED_TIME:
        return FixedTimeStrategy(config.fixed_time)
    if mode == TrafficLightMode.ADAPTIVE_QUEUE:
        return AdaptiveQueueStrategy(config.adaptive_queue)
    if mode == TrafficLightMode.ENERGY_SAVING:
        return EnergySavingStrategy(config.energy_saving)

    logger.warning(f"Modo de semáforo inválido ({mode}); usando tiempo fijo")
    return FixedTimeStrategy(config.fixed_time)


__all__ = [
    'TrafficLightControlStrategy',
    'NextPhaseDecision',
    'FixedTimeStrategy',
    'AdaptiveQueueStrategy',
    'EnergySavingStrategy',
    'create_strategy'
]

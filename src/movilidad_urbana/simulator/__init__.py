"""
Simulador de tráfico vehicular.

Este módulo contiene el motor de simulación que modela:
- Red vial como grafo dirigido y ruteo por menor tiempo
- Semáforos de cuatro fases con colas por aproximación
- Movimiento de vehículos y redirección por congestión
- Generación de vehículos, estadísticas e instantáneas
"""

from .errors import (EmptyNetworkError, NetworkConnectivityError, RouteTopologyError,
                     SimulationError)
from .geometry import Direction, determine_cardinal_direction
from .router import Router, calculate_route
from .snapshot import SimulationSnapshot, TrafficLightSnapshot, VehicleSnapshot
from .statistics import SimulationStatistics, StatisticsSnapshot
from .traffic_light import LightPhase, LightState, TrafficLight, VehicleQueue
from .traffic_network import Edge, Node, TrafficNetwork
from .traffic_simulator import TrafficSimulator
from .vehicle import Vehicle, VehicleState

__all__ = [
    'SimulationError',
    'EmptyNetworkError',
    'NetworkConnectivityError',
    'RouteTopologyError',
    'Direction',
    'determine_cardinal_direction',
    'Router',
    'calculate_route',
    'SimulationSnapshot',
    'TrafficLightSnapshot',
    'VehicleSnapshot',
    'SimulationStatistics',
    'StatisticsSnapshot',
    'LightPhase',
    'LightState',
    'TrafficLight',
    'VehicleQueue',
    'Edge',
    'Node',
    'TrafficNetwork',
    'TrafficSimulator',
    'Vehicle',
    'VehicleState'
]

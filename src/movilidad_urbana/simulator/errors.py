"""
Jerarquía de errores del motor de simulación.

Los errores de construcción (red vacía o desconectada) abortan la creación
del simulador; las inconsistencias de topología detectadas durante la
simulación detienen la corrida completa.
"""


class SimulationError(Exception):
    """Error base del simulador."""


class EmptyNetworkError(SimulationError, ValueError):
    """La red vial está vacía o no fue cargada."""


class NetworkConnectivityError(SimulationError, ValueError):
    """No todos los nodos de la red son alcanzables."""


class RouteTopologyError(SimulationError, RuntimeError):
    """La ruta de un vehículo usa un tramo que no existe en la red."""

    def __init__(self, vehicle_id: str, source: str, target: str):
        self.vehicle_id = vehicle_id
        self.source = source
        self.target = target
        super().__init__(
            f"Vehículo {vehicle_id}: no existe la arista {source} → {target} de su ruta"
        )

"""
Simulador de movilidad urbana.

Motor de simulación de tráfico en tiempo discreto: red vial, ruteo por
menor tiempo, semáforos con estrategias de control intercambiables y
movimiento de vehículos paso a paso.
"""

__version__ = "0.1.0"

"""
Script de ejemplo: Simulación de una cuadrícula urbana con semáforos

Este script construye una red cuadriculada, ejecuta el simulador en un
hilo de fondo y consulta las instantáneas publicadas cada 100 ms, como
lo haría una capa de visualización.
"""

import argparse
import sys
import time
from pathlib import Path

# Agregar src al path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from movilidad_urbana.simulator import TrafficNetwork, TrafficSimulator
from movilidad_urbana.utils.config import SimulationConfig, setup_logging
from movilidad_urbana.utils.metrics import MetricsCalculator

# Intervalo de sondeo de la capa de reporte (segundos reales)
POLL_INTERVAL = 0.1


def parse_args():
    parser = argparse.ArgumentParser(description="Simulación de tráfico en cuadrícula")
    parser.add_argument("--rows", type=int, default=5, help="Filas de la cuadrícula")
    parser.add_argument("--cols", type=int, default=5, help="Columnas de la cuadrícula")
    parser.add_argument("--config", type=str, default=None,
                        help="Archivo JSON con la configuración")
    parser.add_argument("--duration", type=float, default=None,
                        help="Duración de la simulación en segundos")
    parser.add_argument("--mode", type=int, default=None, choices=[1, 2, 3],
                        help="Modo de semáforos: 1=fijo, 2=adaptativo, 3=ahorro")
    parser.add_argument("--seed", type=int, default=42, help="Semilla aleatoria")
    parser.add_argument("--log-level", type=str, default="INFO")
    return parser.parse_args()


def build_config(args) -> SimulationConfig:
    config = SimulationConfig.from_json(args.config) if args.config else SimulationConfig()

    overrides = {'random_seed': args.seed, 'tick_sleep_factor': 0.01}
    if args.duration is not None:
        overrides['simulation_duration'] = args.duration
    if args.mode is not None:
        overrides['traffic_light_mode'] = args.mode
    return config.with_overrides(**overrides)


def main():
    """Función principal del ejemplo."""
    args = parse_args()
    setup_logging(args.log_level)

    print("=" * 70)
    print("SIMULACIÓN DE MOVILIDAD URBANA")
    print("=" * 70)

    network = TrafficNetwork.grid(args.rows, args.cols, name=f"cuadricula {args.rows}x{args.cols}")
    config = build_config(args)
    simulator = TrafficSimulator(network, config)

    stats = network.get_network_stats()
    print(f"Red: {stats['name']} | Nodos: {stats['num_nodes']} | "
          f"Aristas: {stats['num_edges']} | Semáforos: {stats['num_traffic_lights']}")

    simulator.start()
    last_tick = -1
    try:
        while not simulator.join(timeout=POLL_INTERVAL):
            snapshot = simulator.get_snapshot()
            if snapshot.tick != last_tick and snapshot.tick % 60 == 0:
                s = snapshot.statistics
                print(f"[T={snapshot.time:6.0f}s] Activos: {snapshot.active_vehicle_count:3d} | "
                      f"Llegados: {s.vehicles_arrived:3d} | "
                      f"Congestión: {s.current_congestion:5.1f}")
            last_tick = snapshot.tick
    except KeyboardInterrupt:
        simulator.stop()
        simulator.join()

    metrics = simulator.calculate_final_metrics()
    history = simulator.stats.get_history()

    print(f"\n{'=' * 70}")
    print("RESUMEN")
    print(f"{'=' * 70}")
    print(f"  Generados:            {metrics['vehicles_generated']}")
    print(f"  Llegados:             {metrics['vehicles_arrived']}")
    print(f"  Activos al final:     {metrics['vehicles_active']}")
    print(f"  Viaje promedio:       {metrics['avg_travel_time']:.2f} s")
    print(f"  Espera promedio:      {metrics['avg_wait_time']:.2f} s")
    print(f"  Combustible total:    {metrics['total_fuel_consumed']:.3f} L")
    print(f"  CO2 estimado:         "
          f"{MetricsCalculator.co2_emissions_estimate(metrics['total_fuel_consumed']):.3f} kg")
    print(f"  Congestión promedio:  {metrics['avg_congestion']:.1f}")
    print(f"  Congestión P95:       {MetricsCalculator.percentile_congestion(history, 95):.1f}")
    print(f"  Congestión pico:      {metrics['peak_congestion']:.1f}")
    print(f"  Redirecciones:        {metrics['reroutes']}")

    busiest = sorted(simulator.traffic_lights.values(),
                     key=lambda light: light.get_total_vehicles_in_queues(), reverse=True)[:3]
    print("\nSemáforos con más cola al final:")
    for light in busiest:
        print(f"  {light.get_status_string()}")


if __name__ == "__main__":
    main()

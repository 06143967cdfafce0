"""
Sistema de métricas y análisis de resultados.

Este módulo proporciona funciones para analizar el historial de una
corrida (congestión y colas por paso), los vehículos completados y para
comparar corridas con distintos modos de control de semáforos.
"""

from typing import Dict, List

import numpy as np
import pandas as pd
from scipy import stats

# kg de CO2 emitidos por litro de combustible
CO2_KG_PER_LITER = 2.3


class MetricsCalculator:
    """
    Calculadora de métricas de evaluación para simulaciones de tráfico.

    Proporciona métodos estáticos; el historial es la lista de registros
    por paso de SimulationStatistics.get_history().
    """

    @staticmethod
    def history_dataframe(history: List[Dict]) -> pd.DataFrame:
        """
        Convierte el historial por paso en un DataFrame indexado por tiempo.

        Args:
            history: Registros con claves time, active_vehicles,
                     queued_vehicles y congestion_index

        Returns:
            pd.DataFrame: Una fila por paso de simulación
        """
        columns = ['time', 'active_vehicles', 'queued_vehicles', 'congestion_index']
        df = pd.DataFrame(history, columns=columns)
        return df.set_index('time')

    @staticmethod
    def average_congestion(history: List[Dict]) -> float:
        if not history:
            return 0.0
        return float(np.mean([h['congestion_index'] for h in history]))

    @staticmethod
    def peak_congestion(history: List[Dict]) -> float:
        if not history:
            return 0.0
        return float(np.max([h['congestion_index'] for h in history]))

    @staticmethod
    def percentile_congestion(history: List[Dict], percentile: float = 95) -> float:
        """
        Calcula un percentil del índice de congestión.

        Args:
            history: Historial por paso
            percentile: Percentil a calcular (0-100)

        Returns:
            float: Índice de congestión en el percentil dado
        """
        if not history:
            return 0.0
        return float(np.percentile([h['congestion_index'] for h in history], percentile))

    @staticmethod
    def average_queue_length(history: List[Dict]) -> float:
        """
        Calcula la cantidad promedio de vehículos encolados en semáforos.

        Args:
            history: Historial por paso

        Returns:
            float: Vehículos encolados promedio por paso
        """
        if not history:
            return 0.0
        return float(np.mean([h['queued_vehicles'] for h in history]))

    @staticmethod
    def max_queue_length(history: List[Dict]) -> int:
        if not history:
            return 0
        return int(max(h['queued_vehicles'] for h in history))

    @staticmethod
    def average_wait_time(vehicles: List) -> float:
        """Tiempo de espera promedio en semáforos de los vehículos completados."""
        if not vehicles:
            return 0.0
        return float(np.mean([v.wait_time for v in vehicles]))

    @staticmethod
    def percentile_wait_time(vehicles: List, percentile: float = 95) -> float:
        if not vehicles:
            return 0.0
        return float(np.percentile([v.wait_time for v in vehicles], percentile))

    @staticmethod
    def average_stops(vehicles: List) -> float:
        if not vehicles:
            return 0.0
        return float(np.mean([v.num_stops for v in vehicles]))

    @staticmethod
    def throughput_per_hour(vehicles_arrived: int, simulation_time: float) -> float:
        """
        Calcula el throughput (vehículos que llegaron a destino por hora).

        Args:
            vehicles_arrived: Cantidad de vehículos llegados
            simulation_time: Tiempo total de simulación en segundos

        Returns:
            float: Vehículos por hora
        """
        if simulation_time <= 0:
            return 0.0
        return (vehicles_arrived / simulation_time) * 3600

    @staticmethod
    def co2_emissions_estimate(fuel_liters: float) -> float:
        """
        Estima emisiones de CO2.

        Asume 2.3 kg CO2 por litro de combustible.

        Args:
            fuel_liters: Combustible consumido en litros

        Returns:
            float: Emisiones estimadas en kg de CO2
        """
        return fuel_liters * CO2_KG_PER_LITER

    @staticmethod
    def create_summary_dataframe(results: Dict[str, Dict]) -> pd.DataFrame:
        """
        Crea un DataFrame con resumen comparativo de modos de control.

        Args:
            results: Dict {nombre_modo: métricas finales del simulador}

        Returns:
            pd.DataFrame: DataFrame ordenado por espera promedio (menor es mejor)
        """
        data = []

        for mode_name, metrics in results.items():
            data.append({
                'Mode': mode_name,
                'Avg Travel (s)': metrics.get('avg_travel_time', 0),
                'Avg Wait (s)': metrics.get('avg_wait_time', 0),
                'Avg Queue': metrics.get('avg_queue_length', 0),
                'Max Queue': metrics.get('max_queue_length', 0),
                'Throughput (veh/h)': metrics.get('throughput_per_hour', 0),
                'Fuel (L)': metrics.get('total_fuel_consumed', 0),
                'CO2 (kg)': MetricsCalculator.co2_emissions_estimate(
                    metrics.get('total_fuel_consumed', 0)),
                'Avg Congestion': metrics.get('avg_congestion', 0),
                'Peak Congestion': metrics.get('peak_congestion', 0),
                'Arrived Vehicles': metrics.get('vehicles_arrived', 0),
            })

        df = pd.DataFrame(data)
        if not df.empty:
            df = df.sort_values('Avg Wait (s)').reset_index(drop=True)

        return df

    @staticmethod
    def calculate_improvement(baseline_metrics: Dict, candidate_metrics: Dict) -> Dict:
        """
        Calcula mejoras porcentuales respecto a un modo de referencia.

        Args:
            baseline_metrics: Métricas del modo de referencia
            candidate_metrics: Métricas del modo evaluado

        Returns:
            dict: Mejora porcentual por métrica (positivo = mejor)
        """
        improvements = {}

        # Métricas donde menor es mejor
        for metric in ['avg_travel_time', 'avg_wait_time', 'avg_queue_length',
                       'total_fuel_consumed', 'avg_congestion']:
            baseline_val = baseline_metrics.get(metric, 0)
            candidate_val = candidate_metrics.get(metric, 0)

            if baseline_val > 0:
                improvements[metric] = ((baseline_val - candidate_val) / baseline_val) * 100
            else:
                improvements[metric] = 0.0

        # Métricas donde mayor es mejor
        for metric in ['throughput_per_hour', 'vehicles_arrived']:
            baseline_val = baseline_metrics.get(metric, 0)
            candidate_val = candidate_metrics.get(metric, 0)

            if baseline_val > 0:
                improvements[metric] = ((candidate_val - baseline_val) / baseline_val) * 100
            else:
                improvements[metric] = 0.0

        return improvements

    @staticmethod
    def statistical_significance_test(results1: List[float], results2: List[float]) -> Dict:
        """
        Realiza test de significancia estadística entre dos conjuntos de resultados.

        Usa test t de Student para muestras independientes.

        Args:
            results1: Lista de valores del primer grupo
            results2: Lista de valores del segundo grupo

        Returns:
            dict: Resultado del test con p-value y conclusión
        """
        if len(results1) < 2 or len(results2) < 2:
            return {
                'test': 't-test',
                'statistic': None,
                'p_value': None,
                'significant': False,
                'message': 'Muestras insuficientes'
            }

        statistic, p_value = stats.ttest_ind(results1, results2)

        # Nivel de significancia típico: α = 0.05
        significant = bool(p_value < 0.05)

        return {
            'test': 't-test',
            'statistic': float(statistic),
            'p_value': float(p_value),
            'significant': significant,
            'message': f"{'Diferencia significativa' if significant else 'No hay diferencia significativa'} (p={p_value:.4f})"
        }

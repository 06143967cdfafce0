"""Configuración y métricas del simulador."""

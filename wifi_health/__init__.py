"""Analítica y predicción de calidad WiFi."""

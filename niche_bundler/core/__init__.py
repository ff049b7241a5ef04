"""Configuración, logging y cableado de la aplicación FastAPI."""

"""Routers HTTP de la API."""

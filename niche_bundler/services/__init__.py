"""
Servicios de negocio: motor de precios y manejo de webhooks.
"""

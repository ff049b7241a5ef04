"""
Domain layer for the bundle merchandising service.

This layer contains business entities, value objects, and domain logic
following Domain-Driven Design principles.
"""

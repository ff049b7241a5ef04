"""
Domain models for business entities.

These models represent core business concepts and contain
business logic and invariants.
"""

from .bundle import BundleDomain, BundleLineItemDomain

__all__ = ["BundleDomain", "BundleLineItemDomain"]

"""
Domain value objects.
"""

from monnayeur.domain.value_objects.platform import Platform

__all__ = ["Platform"]

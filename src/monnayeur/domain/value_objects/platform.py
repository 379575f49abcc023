"""
Platform value object - which front end a user or mint came from.
"""

from enum import Enum


class Platform(str, Enum):
    """Identity namespaces and mint origins."""

    TELEGRAM = "telegram"
    FARCASTER = "farcaster"

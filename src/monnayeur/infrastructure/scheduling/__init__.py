"""
Background maintenance tasks.
"""

from monnayeur.infrastructure.scheduling.session_sweeper import SessionSweeper

__all__ = ["SessionSweeper"]

"""
Connectors for the systems kept in sync.
"""

from .base import BaseConnector, ConnectorCapability
from .clickup import ClickUpConnector
from .motion import MotionConnector

__all__ = [
    "BaseConnector",
    "ConnectorCapability",
    "ClickUpConnector",
    "MotionConnector",
]

"""Gateway to the external environment CLI."""

from .base import EnvironmentGateway
from .sfdx import SfdxGateway

__all__ = [
    "EnvironmentGateway",
    "SfdxGateway",
]

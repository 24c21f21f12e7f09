"""Repository layer for data access."""

from .api import ApiRepository
from .protocol import BoardRepositoryProtocol

__all__ = [
    "ApiRepository",
    "BoardRepositoryProtocol",
]

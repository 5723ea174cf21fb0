"""Repository layer for data access."""

from .team_repository import TeamRepository
from .deal_repository import DealRepository

__all__ = ["TeamRepository", "DealRepository"]

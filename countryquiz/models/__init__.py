"""Database models."""
from countryquiz.models.base import RoundStatus
from countryquiz.models.player import Player
from countryquiz.models.round import Round

__all__ = ["RoundStatus", "Player", "Round"]

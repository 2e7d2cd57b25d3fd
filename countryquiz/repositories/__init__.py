"""Persistence layer."""
from countryquiz.repositories.quiz_repository import QuizRepository

__all__ = ["QuizRepository"]

"""Custom exceptions for the quiz core.

Routers translate these into HTTP responses; ``code`` is a stable machine-readable
identifier and ``message`` is safe to show to players.
"""


class QuizError(Exception):
    """Base exception for quiz errors."""

    code = "quiz_error"
    message = "Something went wrong. Please try again."

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)
        if message:
            self.message = message


class NotFoundError(QuizError):
    """A player, round, or country lookup missed."""

    code = "not_found"
    message = "Not found."


class PlayerNotFoundError(NotFoundError):
    """No player registered for the external key."""

    code = "player_not_found"
    message = "Player not found. Register first."


class RoundNotFoundError(NotFoundError):
    """Round does not exist."""

    code = "round_not_found"
    message = "Round not found."


class CountryNotFoundError(NotFoundError):
    """No country with that code in the catalog."""

    code = "country_not_found"
    message = "Country not found."


class InvalidStateError(QuizError):
    """Operation is not allowed in the current round state."""

    code = "invalid_state"
    message = "That action is not possible right now."


class RoundAlreadyResolvedError(InvalidStateError):
    """Round is no longer pending."""

    code = "round_already_resolved"
    message = "This question has already been answered."


class NoActiveRoundError(InvalidStateError):
    """Player has no pending round."""

    code = "no_active_round"
    message = "No active round. Start a new game first."


class ConcurrentRoundError(InvalidStateError):
    """Another pending round was created for the player at the same time."""

    code = "concurrent_round"
    message = "A game is already being started. Please try again."


class CatalogEmptyError(QuizError):
    """Country catalog has no entries; fallback data is missing or corrupt."""

    code = "catalog_empty"
    message = "The game is temporarily unavailable."


class StorageError(QuizError):
    """Persistence layer failed."""

    code = "storage_error"
    message = "Something went wrong. Please try again."


class LockTimeoutError(StorageError):
    """Could not acquire a lock in time."""

    code = "lock_timeout"
    message = "The server is busy. Please try again."


class UpstreamUnavailableError(QuizError):
    """Remote country source could not be loaded. Never leaves the catalog."""

    code = "upstream_unavailable"
    message = "Country data source unavailable."

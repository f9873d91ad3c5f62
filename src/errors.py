"""Error taxonomy shared by the draft and scoring services."""


class FantasyError(Exception):
    """Base exception for all fantasy platform errors."""

    pass


class ValidationError(FantasyError):
    """Raised when caller input is invalid (never retried)."""

    pass


class ConflictError(FantasyError):
    """Raised when an operation conflicts with the current draft state."""

    pass


class NotFoundError(FantasyError):
    """Raised when a draft, squad or round does not exist."""

    pass


class UpstreamUnavailable(FantasyError):
    """Raised when the match-data provider cannot be reached or parsed."""

    pass


class PersistenceError(FantasyError):
    """Raised when the database rejects or fails an operation."""

    pass


class InsufficientCandidatesError(FantasyError):
    """Raised when a position pool is too small for the requested draw."""

    pass

"""Error taxonomy shared by the rating, ledger and reign modules."""


class LadderError(Exception):
    """Base class for all ladderkeeper errors."""


class InvalidInputError(LadderError, ValueError):
    """Raised for negative scores, self-matches or malformed timestamps."""


class NotFoundError(LadderError, LookupError):
    """Raised when a champion, competitor or match does not exist."""


class PersistenceError(LadderError):
    """Raised when the backing store fails; the transaction has been rolled back.

    The underlying driver exception is kept as ``__cause__``.
    """

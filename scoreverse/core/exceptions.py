"""Domain errors raised by the services and translated to HTTP codes by the routers."""


class ScoreVerseError(Exception):
    """Base class for all scoreverse errors."""


class ReferentialConflictError(ScoreVerseError):
    """A delete was declined because other records still reference the target."""


class MatchValidationError(ScoreVerseError, ValueError):
    """A match did not pass validation at creation or correction time."""


class StoreWriteError(ScoreVerseError):
    """A document write could not be persisted."""


class AISuggestionError(ScoreVerseError):
    """An AI suggestion flow failed. The message is safe to show to users."""

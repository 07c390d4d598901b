"""Exceptions raised by the typing game core."""


class KanaStrikeError(Exception):
    """Base class for all game core errors."""


class DataLoadError(KanaStrikeError):
    """Dictionary or question pool is missing or malformed."""


class EmptyPoolError(KanaStrikeError):
    """The difficulty filter left no questions to ask."""


class SessionError(KanaStrikeError):
    """A session operation was called in the wrong lifecycle state."""


class RankingIneligibleError(SessionError):
    """The session cannot be submitted to a ranking (aborted or practice)."""

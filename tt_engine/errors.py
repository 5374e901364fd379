class GameError(Exception):
    """Base class for errors raised by the table tennis engine."""


class InvalidConfiguration(GameError, ValueError):
    """Settings that cannot describe a playable match."""


class InvalidOperation(GameError):
    """A call that the current match or session state does not allow."""

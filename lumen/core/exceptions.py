"""Exceptions raised by the launcher core."""


class LumenError(Exception):
    """Base class for all launcher errors."""


class InterpretationError(LumenError):
    """An input was recognised as smart content but could not be computed.

    These are shown to the user instead of falling back to search.
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ExpressionError(InterpretationError):
    """Invalid arithmetic syntax or a math domain error."""


class ConversionError(InterpretationError):
    """Unit conversion between incompatible or unknown units."""


class CurrencyUnavailableError(ConversionError):
    """No currency rates are cached and fetching them failed."""

    def __init__(self, message: str = "Currency data unavailable"):
        super().__init__(message)


class CurrencyFetchError(LumenError):
    """Fetching or decoding currency data failed."""

"""Conversion error taxonomy"""


EMPTY_INPUT_MESSAGE = "Please provide content to convert"


class ConversionError(Exception):
    """Base class for failures reported through ConversionFailure."""


class EmptyInputError(ConversionError):
    """Raised when content is blank or whitespace-only."""

    def __init__(self, message: str = EMPTY_INPUT_MESSAGE):
        super().__init__(message)

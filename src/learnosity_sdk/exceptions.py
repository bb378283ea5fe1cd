"""Exceptions raised by learnosity_sdk."""


class ValidationError(ValueError):
    """Raised when the arguments used to initialise a request are invalid.

    This is the only error kind the SDK raises for caller input. The message
    is human readable; no structured codes are attached.
    """
    pass

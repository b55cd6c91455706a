"""Argument validation errors raised at call entry."""


class ArgumentError(ValueError):
    """A required argument was missing or empty."""

    def __init__(self, param_name: str, message: str | None = None):
        self.param_name = param_name
        super().__init__(message or f"Argument '{param_name}' must not be empty")


class ArgumentNullError(ArgumentError):
    """A required argument was None."""

    def __init__(self, param_name: str, message: str | None = None):
        super().__init__(param_name, message or f"Argument '{param_name}' must not be None")

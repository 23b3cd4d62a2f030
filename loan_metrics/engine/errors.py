"""Engine exceptions."""


class InvalidInputError(ValueError):
    """A numeric input is missing, non-finite, or outside its domain."""

    def __init__(self, field: str, message: str):
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message

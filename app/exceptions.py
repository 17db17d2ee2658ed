from typing import Any


class InvalidIdentifierError(ValueError):
    """Raised when an identifier argument is not a base-10 integer."""

    def __init__(self, field: str, value: Any) -> None:
        self.field = field
        self.value = value
        super().__init__(f"{field} must be an integer, got {value!r}")

"""
Typed key/value fields attached to log records.

A field value is one of str, int, float or bool; the kind is recorded so
encoders can render it faithfully (JSON keeps numbers and booleans native).
"""

import enum
from dataclasses import dataclass
from beartype.typing import Any, Union

FieldValue = Union[str, int, float, bool]


class FieldKind(enum.Enum):
    STRING = "string"
    INT = "int"
    FLOAT = "float"
    BOOL = "bool"


@dataclass(frozen=True)
class Field:
    key: str
    value: FieldValue
    kind: FieldKind = FieldKind.STRING

    @classmethod
    def of(cls, key: str, value: Any) -> "Field":
        """
        Build a field, inferring its kind from the value.

        Values of any other type are stored as their str() so that logging
        never fails on an unexpected argument.
        """
        # bool first: it is a subclass of int
        if isinstance(value, bool):
            return boolean(key, value)
        if isinstance(value, int):
            return integer(key, value)
        if isinstance(value, float):
            return floating(key, value)
        return string(key, value if isinstance(value, str) else str(value))

    def render(self) -> str:
        """Text representation used by the human-readable encoder."""
        if self.kind is FieldKind.BOOL:
            return "true" if self.value else "false"
        return str(self.value)


def string(key: str, value: str) -> Field:
    return Field(str(key), str(value), FieldKind.STRING)


def integer(key: str, value: int) -> Field:
    return Field(str(key), int(value), FieldKind.INT)


def floating(key: str, value: float) -> Field:
    return Field(str(key), float(value), FieldKind.FLOAT)


def boolean(key: str, value: bool) -> Field:
    return Field(str(key), bool(value), FieldKind.BOOL)


def get_field(key: str, value: str) -> Field:
    """
    Create a single string key/value field.

    Example:
        logger.info("User logged in", get_field("user", "alice"))
    """
    return string(key, value)

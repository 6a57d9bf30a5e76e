"""Generic KRDS value tree.

A KRDS document is a flat run of typed values. Scalars carry their kind
explicitly so integer widths survive a round trip. Objects carry a name
(their type tag) and an ordered list of child values; the codec gives them
meaning by position.
"""

from dataclasses import dataclass, field
from enum import StrEnum


class PrimitiveKind(StrEnum):
    """Scalar kinds carried by a KRDS value tree."""

    BOOL = "bool"
    BYTE = "i8"
    SHORT = "i16"
    INT = "i32"
    LONG = "i64"
    FLOAT = "f32"
    DOUBLE = "f64"
    CHAR = "char"
    STRING = "string"


@dataclass(frozen=True)
class Scalar:
    """A single typed value. A STRING scalar may hold None (null string)."""

    kind: PrimitiveKind
    value: bool | int | float | str | None


@dataclass
class KRDSObject:
    """A named object whose children are addressed by position."""

    name: str
    values: list["Value"] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.values)

    def __getitem__(self, index: int) -> "Value":
        return self.values[index]

    def find(self, name: str) -> "KRDSObject | None":
        """Return the first child object called `name`, if any."""
        for value in self.values:
            if isinstance(value, KRDSObject) and value.name == name:
                return value
        return None


Value = Scalar | KRDSObject


def describe(value: Value) -> str:
    """Short human readable kind of a value, used in error messages."""
    if isinstance(value, KRDSObject):
        return f"object '{value.name}'"
    if value.kind is PrimitiveKind.STRING and value.value is None:
        return "null string"
    return str(value.kind)

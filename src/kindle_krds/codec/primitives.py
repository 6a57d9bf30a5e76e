"""Scalar reading and writing, including the NoteType enumeration."""

from kindle_krds.errors import (
    TypeMismatchError,
    UnknownEnumValueError,
    ValueRangeError,
)
from kindle_krds.models import NoteType
from kindle_krds.values import PrimitiveKind, Scalar, Value, describe

INTEGER_RANGES: dict[PrimitiveKind, tuple[int, int]] = {
    PrimitiveKind.BYTE: (-(2**7), 2**7 - 1),
    PrimitiveKind.SHORT: (-(2**15), 2**15 - 1),
    PrimitiveKind.INT: (-(2**31), 2**31 - 1),
    PrimitiveKind.LONG: (-(2**63), 2**63 - 1),
}

_NOTE_TYPES: dict[int, NoteType] = {int(note_type): note_type for note_type in NoteType}


def read_scalar(value: Value, kind: PrimitiveKind, where: str | None = None):
    """
    Extract the Python value of a scalar slot.

    Args:
        value: Slot taken from the value tree
        kind: Kind the schema expects at this position
        where: Record name used in error messages

    Returns:
        The scalar's value

    Raises:
        TypeMismatchError: If the slot is an object, a null string, or a
            scalar of any other kind (no widening between integer widths)
    """
    if isinstance(value, Scalar) and value.kind is kind and value.value is not None:
        return value.value
    raise TypeMismatchError(str(kind), describe(value), where)


def make_scalar(kind: PrimitiveKind, value) -> Scalar:
    """
    Build a scalar slot, checking the Python type and the on-disk range.

    Raises:
        TypeMismatchError: If the Python type does not match the kind
        ValueRangeError: If an integer does not fit the width
    """
    match kind:
        case PrimitiveKind.BOOL:
            ok = isinstance(value, bool)
        case PrimitiveKind.FLOAT | PrimitiveKind.DOUBLE:
            ok = isinstance(value, float)
        case PrimitiveKind.STRING:
            ok = isinstance(value, str)
        case PrimitiveKind.CHAR:
            ok = isinstance(value, str) and len(value) == 1 and ord(value) <= 0xFFFF
        case _:
            ok = isinstance(value, int) and not isinstance(value, bool)

    if not ok:
        raise TypeMismatchError(str(kind), type(value).__name__)

    if kind in INTEGER_RANGES:
        low, high = INTEGER_RANGES[kind]
        if not low <= value <= high:
            raise ValueRangeError(f"{value} does not fit in {kind} ({low}..{high})")

    return Scalar(kind, value)


def read_note_type(value: Value, where: str | None = None) -> NoteType:
    """Decode a NoteType from an i32 slot, rejecting unknown values."""
    raw = read_scalar(value, PrimitiveKind.INT, where)
    try:
        return _NOTE_TYPES[raw]
    except KeyError:
        raise UnknownEnumValueError(raw, sorted(_NOTE_TYPES)) from None


def make_note_type(note_type: NoteType) -> Scalar:
    """Encode a NoteType as an i32 slot."""
    if not isinstance(note_type, NoteType):
        raise TypeMismatchError("NoteType", type(note_type).__name__)
    return Scalar(PrimitiveKind.INT, int(note_type))

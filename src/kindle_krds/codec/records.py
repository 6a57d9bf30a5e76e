"""Positional record codec.

Records are addressed by position only. A layout lists the slots of a
record in on-disk order; decoding binds them to the dataclass fields in
declaration order. Sequences and maps are written as an i32 count followed
by their items.
"""

from dataclasses import fields
from typing import Any

from kindle_krds.codec.primitives import make_note_type, make_scalar, read_note_type, read_scalar
from kindle_krds.errors import (
    ArityMismatchError,
    KRDSDecodeError,
    MissingRequiredFieldError,
    TypeMismatchError,
)
from kindle_krds.models import (
    APNXKey,
    BookInfoStore,
    FPR,
    FontPreferences,
    LanguageStore,
    LPR,
    PageHistoryRecord,
    TimerAverageCalculator,
    TimerAverageDistributionNormal,
    TimerAverageOutliers,
    TimerModel,
    WhisperstoreMigrationStatus,
)
from kindle_krds.values import KRDSObject, PrimitiveKind, Value, describe


class FieldReader:
    """Cursor over the values of one object."""

    def __init__(self, values: list[Value], owner: str) -> None:
        self.values = values
        self.owner = owner
        self.position = 0

    @property
    def exhausted(self) -> bool:
        return self.position >= len(self.values)

    def take(self) -> Value:
        if self.exhausted:
            raise ArityMismatchError(self.owner, self.position + 1, len(self.values))
        value = self.values[self.position]
        self.position += 1
        return value

    def finish(self) -> None:
        """Fail if values are left over after the last slot."""
        if not self.exhausted:
            raise ArityMismatchError(self.owner, self.position, len(self.values))


class Slot:
    """One position (or run of positions) in a record."""

    optional = False

    def read(self, reader: FieldReader) -> Any:
        raise NotImplementedError

    def write(self, value: Any, out: list[Value]) -> None:
        raise NotImplementedError


class Primitive(Slot):
    def __init__(self, kind: PrimitiveKind) -> None:
        self.kind = kind

    def read(self, reader: FieldReader) -> Any:
        return read_scalar(reader.take(), self.kind, reader.owner)

    def write(self, value: Any, out: list[Value]) -> None:
        out.append(make_scalar(self.kind, value))


BOOL = Primitive(PrimitiveKind.BOOL)
BYTE = Primitive(PrimitiveKind.BYTE)
INT = Primitive(PrimitiveKind.INT)
LONG = Primitive(PrimitiveKind.LONG)
DOUBLE = Primitive(PrimitiveKind.DOUBLE)
STRING = Primitive(PrimitiveKind.STRING)


class NoteTypeSlot(Slot):
    def read(self, reader: FieldReader) -> Any:
        return read_note_type(reader.take(), reader.owner)

    def write(self, value: Any, out: list[Value]) -> None:
        out.append(make_note_type(value))


class TrailingOptional(Slot):
    """Last slot of a record that may be left out entirely."""

    optional = True

    def __init__(self, inner: Slot) -> None:
        self.inner = inner

    def read(self, reader: FieldReader) -> Any:
        if reader.exhausted:
            return None
        return self.inner.read(reader)

    def write(self, value: Any, out: list[Value]) -> None:
        if value is not None:
            self.inner.write(value, out)


def _read_count(reader: FieldReader) -> int:
    count = read_scalar(reader.take(), PrimitiveKind.INT, reader.owner)
    if count < 0:
        raise ArityMismatchError(reader.owner, 0, count)
    remaining = len(reader.values) - reader.position
    if count > remaining:
        raise MissingRequiredFieldError(
            f"{reader.owner}: declared {count} item(s), only {remaining} value(s) left"
        )
    return count


class SequenceOf(Slot):
    def __init__(self, item: Slot) -> None:
        self.item = item

    def read(self, reader: FieldReader) -> list:
        count = _read_count(reader)
        return [self.item.read(reader) for _ in range(count)]

    def write(self, value: list, out: list[Value]) -> None:
        if not isinstance(value, list):
            raise TypeMismatchError("list", type(value).__name__)
        out.append(make_scalar(PrimitiveKind.INT, len(value)))
        for item in value:
            self.item.write(item, out)


class MappingOf(Slot):
    """Count-prefixed key/value pairs. Entry order is kept."""

    def __init__(self, key: Slot, value: Slot) -> None:
        self.key = key
        self.value = value

    def read(self, reader: FieldReader) -> dict:
        count = _read_count(reader)
        result: dict = {}
        for _ in range(count):
            key = self.key.read(reader)
            if key in result:
                raise KRDSDecodeError(f"{reader.owner}: duplicate key {key!r}")
            result[key] = self.value.read(reader)
        return result

    def write(self, value: dict, out: list[Value]) -> None:
        if not isinstance(value, dict):
            raise TypeMismatchError("dict", type(value).__name__)
        out.append(make_scalar(PrimitiveKind.INT, len(value)))
        for key, item in value.items():
            self.key.write(key, out)
            self.value.write(item, out)


class Positional(Slot):
    """A record whose fields are bound by position."""

    def __init__(self, record_cls: type, slots: tuple[Slot, ...]) -> None:
        if len(fields(record_cls)) < len(slots):
            raise ValueError(f"{record_cls.__name__} has fewer fields than slots")
        self.record_cls = record_cls
        self.slots = slots

    def read(self, reader: FieldReader) -> Any:
        values = []
        for index, slot in enumerate(self.slots):
            if reader.exhausted and not slot.optional:
                raise ArityMismatchError(reader.owner, len(self.slots), index)
            values.append(slot.read(reader))
        return self.record_cls(*values)

    def write(self, value: Any, out: list[Value]) -> None:
        if not isinstance(value, self.record_cls):
            raise TypeMismatchError(self.record_cls.__name__, type(value).__name__)
        names = [f.name for f in fields(self.record_cls)]
        for name, slot in zip(names, self.slots):
            slot.write(getattr(value, name), out)


class Wrapped(Slot):
    """A nested object whose name is a fixed tag and whose values are `body`."""

    def __init__(self, tag: str, body: Slot) -> None:
        self.tag = tag
        self.body = body

    def read(self, reader: FieldReader) -> Any:
        value = reader.take()
        if not isinstance(value, KRDSObject) or value.name != self.tag:
            raise TypeMismatchError(f"object '{self.tag}'", describe(value), reader.owner)
        return read_object(value, self.body)

    def write(self, value: Any, out: list[Value]) -> None:
        out.append(write_object(self.tag, value, self.body))


def read_object(obj: KRDSObject, body: Slot) -> Any:
    """Decode every value of `obj` with `body`, enforcing arity."""
    reader = FieldReader(obj.values, obj.name)
    value = body.read(reader)
    reader.finish()
    return value


def write_object(name: str, value: Any, body: Slot) -> KRDSObject:
    values: list[Value] = []
    body.write(value, values)
    return KRDSObject(name, values)


FONT_PREFERENCES = Positional(
    FontPreferences,
    (STRING, INT, INT, INT, INT, INT, INT, INT, INT, INT, STRING, INT, STRING, BOOL, STRING, INT),
)

APNX_KEY = Positional(
    APNXKey,
    (STRING, STRING, BOOL, SequenceOf(INT), INT, INT, INT, STRING),
)

LANGUAGE_STORE = Positional(LanguageStore, (STRING, INT))

TIMER_AVERAGE_DISTRIBUTION_NORMAL = Wrapped(
    "timer.average.calculator.distribution.normal",
    Positional(TimerAverageDistributionNormal, (LONG, DOUBLE, DOUBLE)),
)

TIMER_AVERAGE_OUTLIERS = Wrapped(
    "timer.average.calculator.outliers",
    Positional(TimerAverageOutliers, (INT, DOUBLE, DOUBLE)),
)

TIMER_AVERAGE_CALCULATOR = Wrapped(
    "timer.average.calculator",
    Positional(
        TimerAverageCalculator,
        (
            INT,
            INT,
            SequenceOf(TIMER_AVERAGE_DISTRIBUTION_NORMAL),
            SequenceOf(TIMER_AVERAGE_OUTLIERS),
        ),
    ),
)

TIMER_MODEL = Positional(TimerModel, (LONG, LONG, LONG, DOUBLE, TIMER_AVERAGE_CALCULATOR))

BOOK_INFO_STORE = Positional(BookInfoStore, (LONG, DOUBLE))

PAGE_HISTORY_RECORD = Wrapped("page.history.record", Positional(PageHistoryRecord, (STRING, LONG)))

WHISPERSTORE_MIGRATION_STATUS = Positional(WhisperstoreMigrationStatus, (BOOL, BOOL))

FPR_RECORD = Positional(FPR, (STRING, LONG, LONG, STRING, STRING))

LPR_RECORD = Positional(LPR, (BYTE, STRING, LONG))

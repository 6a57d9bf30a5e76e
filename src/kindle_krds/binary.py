"""KRDS byte framing.

Layout of a document:

    signature   8 bytes, 00 00 00 00 00 1A B1 26
    version     typed i64, always 1
    count       typed i32, number of top-level objects
    objects     `count` objects

Every value starts with a signed type byte followed by a big-endian payload.
Strings are a null flag byte (0 = present, 1 = null) then, when present, a
u16 byte length and UTF-8 data. An object is the OBJECT_BEGIN byte, its name
as a string, its values, then the OBJECT_END byte.
"""

import struct

from kindle_krds.config import Config
from kindle_krds.errors import FramingError, TypeMismatchError
from kindle_krds.values import KRDSObject, PrimitiveKind, Scalar, Value

OBJECT_BEGIN = -2
OBJECT_END = -1

TYPE_CODES: dict[PrimitiveKind, int] = {
    PrimitiveKind.BOOL: 0,
    PrimitiveKind.INT: 1,
    PrimitiveKind.LONG: 2,
    PrimitiveKind.STRING: 3,
    PrimitiveKind.DOUBLE: 4,
    PrimitiveKind.SHORT: 5,
    PrimitiveKind.FLOAT: 6,
    PrimitiveKind.BYTE: 7,
    PrimitiveKind.CHAR: 9,
}

KINDS: dict[int, PrimitiveKind] = {code: kind for kind, code in TYPE_CODES.items()}

# struct formats for fixed-size payloads
FORMATS: dict[PrimitiveKind, str] = {
    PrimitiveKind.BOOL: ">?",
    PrimitiveKind.INT: ">i",
    PrimitiveKind.LONG: ">q",
    PrimitiveKind.DOUBLE: ">d",
    PrimitiveKind.SHORT: ">h",
    PrimitiveKind.FLOAT: ">f",
    PrimitiveKind.BYTE: ">b",
    PrimitiveKind.CHAR: ">H",
}


class _Reader:
    """Sequential reader over a byte buffer."""

    def __init__(self, data: bytes) -> None:
        self.data = data
        self.offset = 0

    def extract(self, size: int) -> bytes:
        end = self.offset + size
        if end > len(self.data):
            raise FramingError(
                f"unexpected end of data at offset {self.offset} (need {size} byte(s))"
            )
        chunk = self.data[self.offset : end]
        self.offset = end
        return chunk

    def unpack(self, fmt: str):
        return struct.unpack(fmt, self.extract(struct.calcsize(fmt)))[0]

    def read_string(self) -> str | None:
        flag = self.unpack(">B")
        if flag == 1:
            return None
        if flag != 0:
            raise FramingError(f"invalid string flag {flag} at offset {self.offset - 1}")
        length = self.unpack(">H")
        raw = self.extract(length)
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise FramingError(f"invalid UTF-8 string at offset {self.offset - length}") from e

    def read_value(self, depth: int = 0) -> Value:
        code = self.unpack(">b")
        if code == OBJECT_BEGIN:
            return self.read_object_body(depth + 1)
        if code == OBJECT_END:
            raise FramingError(f"unexpected object end at offset {self.offset - 1}")

        kind = KINDS.get(code)
        if kind is None:
            raise FramingError(f"unknown type code {code} at offset {self.offset - 1}")
        if kind is PrimitiveKind.STRING:
            return Scalar(kind, self.read_string())
        if kind is PrimitiveKind.BOOL:
            raw = self.unpack(">B")
            if raw not in (0, 1):
                raise FramingError(f"invalid boolean {raw} at offset {self.offset - 1}")
            return Scalar(kind, raw == 1)

        value = self.unpack(FORMATS[kind])
        if kind is PrimitiveKind.CHAR:
            value = chr(value)
        return Scalar(kind, value)

    def read_object_body(self, depth: int) -> KRDSObject:
        if depth > Config.MAX_DEPTH:
            raise FramingError(
                f"objects nested deeper than {Config.MAX_DEPTH} at offset {self.offset - 1}"
            )
        name = self.read_string()
        if name is None:
            raise FramingError(f"object without a name at offset {self.offset - 1}")
        values: list[Value] = []
        while True:
            if self.offset >= len(self.data):
                raise FramingError(f"object '{name}' is not terminated")
            if struct.unpack_from(">b", self.data, self.offset)[0] == OBJECT_END:
                self.offset += 1
                return KRDSObject(name, values)
            values.append(self.read_value(depth))


class _Writer:
    def __init__(self) -> None:
        self.out = bytearray()

    def write_string(self, value: str | None) -> None:
        if value is None:
            self.out.append(1)
            return
        raw = value.encode("utf-8")
        if len(raw) > 0xFFFF:
            raise FramingError(f"string too long for KRDS ({len(raw)} bytes)")
        self.out.append(0)
        self.out.extend(struct.pack(">H", len(raw)))
        self.out.extend(raw)

    def write_value(self, value: Value, depth: int = 0) -> None:
        if isinstance(value, KRDSObject):
            if depth >= Config.MAX_DEPTH:
                raise FramingError(f"objects nested deeper than {Config.MAX_DEPTH}")
            self.out.extend(struct.pack(">b", OBJECT_BEGIN))
            self.write_string(value.name)
            for child in value.values:
                self.write_value(child, depth + 1)
            self.out.extend(struct.pack(">b", OBJECT_END))
            return
        if not isinstance(value, Scalar):
            raise TypeMismatchError("KRDS value", type(value).__name__)

        self.out.extend(struct.pack(">b", TYPE_CODES[value.kind]))
        if value.kind is PrimitiveKind.STRING:
            self.write_string(value.value)
        elif value.kind is PrimitiveKind.CHAR:
            self.out.extend(struct.pack(">H", ord(value.value)))
        else:
            try:
                self.out.extend(struct.pack(FORMATS[value.kind], value.value))
            except struct.error as e:
                raise FramingError(f"cannot pack {value.value!r} as {value.kind}: {e}") from e


def read_document(data: bytes) -> list[KRDSObject]:
    """
    Parse a KRDS document into its top-level objects.

    Args:
        data: Raw file contents

    Returns:
        Top-level objects in file order

    Raises:
        FramingError: If the signature, header or any value is malformed
    """
    reader = _Reader(data)
    signature = reader.extract(len(Config.SIGNATURE))
    if signature != Config.SIGNATURE:
        raise FramingError(f"not a KRDS file (signature {signature.hex()})")

    version = reader.read_value()
    if version != Scalar(PrimitiveKind.LONG, Config.FILE_VERSION):
        raise FramingError(f"unsupported KRDS version marker {version!r}")

    count = reader.read_value()
    if not isinstance(count, Scalar) or count.kind is not PrimitiveKind.INT or count.value < 0:
        raise FramingError(f"invalid top-level object count {count!r}")

    objects = []
    for _ in range(count.value):
        value = reader.read_value()
        if not isinstance(value, KRDSObject):
            raise FramingError(f"expected a top-level object, got {value!r}")
        objects.append(value)

    if reader.offset != len(data):
        raise FramingError(f"{len(data) - reader.offset} trailing byte(s) after last object")
    return objects


def write_document(objects: list[KRDSObject]) -> bytes:
    """Serialize top-level objects into a KRDS document."""
    writer = _Writer()
    writer.out.extend(Config.SIGNATURE)
    writer.write_value(Scalar(PrimitiveKind.LONG, Config.FILE_VERSION))
    writer.write_value(Scalar(PrimitiveKind.INT, len(objects)))
    for obj in objects:
        writer.write_value(obj)
    return bytes(writer.out)

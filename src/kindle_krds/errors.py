"""Errors raised while decoding or encoding KRDS data."""


class KRDSError(Exception):
    """Base class for every KRDS codec failure."""

    pass


class KRDSDecodeError(KRDSError):
    """Raised when a value tree does not match the expected schema."""

    pass


class KRDSEncodeError(KRDSError):
    """Raised when a model value cannot be written."""

    pass


class ArityMismatchError(KRDSDecodeError):
    """Raised when a positional record has the wrong number of fields."""

    def __init__(self, record: str, expected: int, actual: int) -> None:
        self.record = record
        self.expected = expected
        self.actual = actual
        super().__init__(f"{record}: expected {expected} field(s), found {actual}")


class TypeMismatchError(KRDSDecodeError, KRDSEncodeError):
    """Raised when a slot holds a value of the wrong kind."""

    def __init__(self, expected: str, actual: str, where: str | None = None) -> None:
        self.expected = expected
        self.actual = actual
        self.where = where
        message = f"expected {expected}, got {actual}"
        super().__init__(f"{where}: {message}" if where else message)


class UnknownEnumValueError(KRDSDecodeError):
    """Raised when an integer is not a known NoteType."""

    def __init__(self, value: int, allowed: list[int]) -> None:
        self.value = value
        self.allowed = allowed
        choices = ", ".join(str(v) for v in allowed)
        super().__init__(f"note type out of range: {value} (expected one of {choices})")


class UnknownVariantTagError(KRDSDecodeError):
    """Raised when an annotation object has an unrecognized tag."""

    def __init__(self, tag: str) -> None:
        self.tag = tag
        super().__init__(f"unknown annotation variant: '{tag}'")


class MissingRequiredFieldError(KRDSDecodeError):
    """Raised when a required value is absent from the source."""

    pass


class FramingError(KRDSDecodeError):
    """Raised when raw bytes are not a well-formed KRDS document."""

    pass


class ValueRangeError(KRDSEncodeError):
    """Raised when a model value does not fit its on-disk representation."""

    pass

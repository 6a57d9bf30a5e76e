"""Annotation variants, dispatched by object tag."""

from typing import Any

from kindle_krds.codec.records import (
    LONG,
    STRING,
    FieldReader,
    Positional,
    Slot,
    TrailingOptional,
    read_object,
    write_object,
)
from kindle_krds.errors import TypeMismatchError, UnknownVariantTagError, ValueRangeError
from kindle_krds.models import (
    AnnotationData,
    BookmarkNote,
    HandwrittenNote,
    HighlightNote,
    Note,
    StickyNote,
    TypedNote,
)
from kindle_krds.values import KRDSObject, Value, describe

NOTE_VARIANTS: dict[str, type[Note]] = {
    variant.TAG: variant
    for variant in (BookmarkNote, HighlightNote, TypedNote, HandwrittenNote, StickyNote)
}

# Shared by every variant. Highlights and bookmarks are written without the
# trailing content string, but one is still accepted when reading them.
ANNOTATION_DATA = Positional(
    AnnotationData, (STRING, STRING, LONG, LONG, STRING, TrailingOptional(STRING))
)


def decode_note(obj: KRDSObject) -> Note:
    """
    Decode one annotation object.

    Args:
        obj: Object whose name is one of the annotation tags

    Returns:
        The matching Note variant

    Raises:
        UnknownVariantTagError: If the tag is not a known annotation kind
        ArityMismatchError: If the payload has fewer than five or more than six fields
    """
    variant = NOTE_VARIANTS.get(obj.name)
    if variant is None:
        raise UnknownVariantTagError(obj.name)
    return variant(read_object(obj, ANNOTATION_DATA))


def encode_note(note: Note) -> KRDSObject:
    """
    Encode one annotation as an object named by its variant tag.

    Raises:
        ValueRangeError: If a highlight or bookmark carries content, which
            those variants never write
    """
    variant = type(note)
    if NOTE_VARIANTS.get(getattr(variant, "TAG", None)) is not variant:
        raise TypeMismatchError("Note variant", variant.__name__)
    if not variant.HAS_CONTENT and note.data.content is not None:
        raise ValueRangeError(f"{variant.__name__} cannot carry note content")
    return write_object(variant.TAG, note.data, ANNOTATION_DATA)


class NoteSlot(Slot):
    """Position holding any annotation variant."""

    def read(self, reader: FieldReader) -> Any:
        value = reader.take()
        if not isinstance(value, KRDSObject):
            raise TypeMismatchError("annotation object", describe(value), reader.owner)
        return decode_note(value)

    def write(self, value: Any, out: list[Value]) -> None:
        if not isinstance(value, Note):
            raise TypeMismatchError("Note", type(value).__name__)
        out.append(encode_note(value))

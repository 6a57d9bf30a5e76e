"""Utility functions for KRDS data."""

from dataclasses import fields, is_dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from kindle_krds.models import AnnotationCache, Note, NoteType, ReaderDataFile
from kindle_krds.values import KRDSObject, Scalar


def to_jsonable(value: Any) -> Any:
    """
    Convert models and value trees to plain JSON-compatible structures.

    Notes gain a "variant" key holding their tag. Enum keys and values are
    written by name. Unknown top-level objects keep their scalar kinds.

    Args:
        value: Model, value tree node, or plain Python value

    Returns:
        Structure made of dicts, lists, strings, numbers, booleans and None
    """
    if isinstance(value, Note):
        return {"variant": value.TAG, **to_jsonable(value.data)}
    if isinstance(value, KRDSObject):
        return {"name": value.name, "values": [to_jsonable(v) for v in value.values]}
    if isinstance(value, Scalar):
        return {"kind": str(value.kind), "value": value.value}
    if is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_jsonable(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, Enum):
        return value.name
    if isinstance(value, dict):
        return {
            (k.name if isinstance(k, Enum) else str(k)): to_jsonable(v) for k, v in value.items()
        }
    if isinstance(value, list | tuple):
        return [to_jsonable(v) for v in value]
    return value


def format_timestamp(millis: int) -> str:
    """
    Format a device timestamp (milliseconds since the epoch) in UTC.

    Values outside the range of datetime are returned as the raw integer.

    Example:
        >>> format_timestamp(1700000000000)
        "2023-11-14 22:13:20"
    """
    try:
        moment = datetime.fromtimestamp(millis / 1000, tz=UTC)
    except (ValueError, OverflowError, OSError):
        return str(millis)
    return moment.strftime("%Y-%m-%d %H:%M:%S")


def preview(text: str | None, max_length: int = 60) -> str:
    """Single-line preview of note content, truncated with an ellipsis."""
    if not text:
        return ""
    text = " ".join(text.split())
    if len(text) > max_length:
        return text[: max_length - 1].rstrip() + "…"
    return text


def count_annotations(data: ReaderDataFile) -> dict[NoteType, int]:
    """Number of annotations per type, in cache order."""
    if not data.annotation_cache:
        return {}
    return {note_type: len(notes) for note_type, notes in data.annotation_cache.items()}


def find_misfiled_notes(cache: AnnotationCache) -> list[tuple[NoteType, Note]]:
    """
    Find notes stored under a key that does not match their variant.

    The codec does not enforce this pairing, so a file can legally hold a
    highlight under the bookmark key.

    Returns:
        (key, note) pairs that disagree, in cache order
    """
    return [
        (note_type, note)
        for note_type, notes in cache.items()
        for note in notes
        if note.NOTE_TYPE is not note_type
    ]

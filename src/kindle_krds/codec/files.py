"""Top-level reader and timer data file codecs.

A file is a list of named objects, one per field. Every field is optional.
Unknown fields are kept on the model and written back after the known ones.
"""

import logging
from dataclasses import dataclass
from typing import Any

from kindle_krds.binary import read_document, write_document
from kindle_krds.codec.containers import ANNOTATION_CACHE, STRING_MAP
from kindle_krds.codec.records import (
    APNX_KEY,
    BOOK_INFO_STORE,
    BOOL,
    FONT_PREFERENCES,
    FPR_RECORD,
    LANGUAGE_STORE,
    LPR_RECORD,
    PAGE_HISTORY_RECORD,
    STRING,
    TIMER_MODEL,
    WHISPERSTORE_MIGRATION_STATUS,
    SequenceOf,
    Slot,
    read_object,
    write_object,
)
from kindle_krds.errors import KRDSDecodeError, TypeMismatchError
from kindle_krds.models import ReaderDataFile, TimerDataFile
from kindle_krds.values import KRDSObject

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TopLevelField:
    """Maps an on-disk field name to a model attribute."""

    name: str
    attr: str
    body: Slot


READER_FIELDS: tuple[TopLevelField, ...] = (
    TopLevelField("font.prefs", "font_preferences", FONT_PREFERENCES),
    TopLevelField("sync_lpr", "sync_lpr", BOOL),
    TopLevelField("next.in.series.info.data", "nis_info_data", STRING),
    TopLevelField("annotation.cache.object", "annotation_cache", ANNOTATION_CACHE),
    TopLevelField("apnx.key", "apnx_key", APNX_KEY),
    TopLevelField("language.store", "language_store", LANGUAGE_STORE),
    TopLevelField("ReaderMetrics", "reader_metrics", STRING_MAP),
)

TIMER_FIELDS: tuple[TopLevelField, ...] = (
    TopLevelField("timer.model", "timer_model", TIMER_MODEL),
    TopLevelField("fpr", "fpr", FPR_RECORD),
    TopLevelField("book.info.store", "book_info_store", BOOK_INFO_STORE),
    TopLevelField("page.history.store", "page_history_store", SequenceOf(PAGE_HISTORY_RECORD)),
    TopLevelField(
        "whisperstore.migration.status",
        "whisperstore_migration_status",
        WHISPERSTORE_MIGRATION_STATUS,
    ),
    TopLevelField("lpr", "lpr", LPR_RECORD),
)


def _decode(objects: list[KRDSObject], schema: tuple[TopLevelField, ...], model_cls: type) -> Any:
    by_name = {entry.name: entry for entry in schema}
    values: dict[str, Any] = {}
    extra: list[KRDSObject] = []

    for obj in objects:
        if not isinstance(obj, KRDSObject):
            raise TypeMismatchError("top-level object", type(obj).__name__)
        entry = by_name.get(obj.name)
        if entry is None:
            logger.debug("Keeping unknown field '%s' (%d value(s))", obj.name, len(obj.values))
            extra.append(obj)
            continue
        if entry.attr in values:
            raise KRDSDecodeError(f"field '{obj.name}' appears more than once")
        values[entry.attr] = read_object(obj, entry.body)

    return model_cls(**values, extra_fields=extra)


def _encode(model: Any, schema: tuple[TopLevelField, ...]) -> list[KRDSObject]:
    objects = []
    for entry in schema:
        value = getattr(model, entry.attr)
        if value is None:
            continue
        objects.append(write_object(entry.name, value, entry.body))
    objects.extend(model.extra_fields)
    return objects


def decode_reader_data(objects: list[KRDSObject]) -> ReaderDataFile:
    """
    Build a ReaderDataFile from the top-level objects of a document.

    Args:
        objects: Top-level objects, one per field

    Returns:
        ReaderDataFile with absent fields left as None

    Raises:
        KRDSDecodeError: If any known field is malformed
    """
    data = _decode(objects, READER_FIELDS, ReaderDataFile)
    if data.annotation_cache:
        total = sum(len(notes) for notes in data.annotation_cache.values())
        logger.debug("Decoded %d annotation(s)", total)
    return data


def encode_reader_data(data: ReaderDataFile) -> list[KRDSObject]:
    """Write the set fields of a ReaderDataFile, in declared order."""
    if not isinstance(data, ReaderDataFile):
        raise TypeMismatchError("ReaderDataFile", type(data).__name__)
    return _encode(data, READER_FIELDS)


def decode_timer_data(objects: list[KRDSObject]) -> TimerDataFile:
    """Build a TimerDataFile from the top-level objects of a document."""
    return _decode(objects, TIMER_FIELDS, TimerDataFile)


def encode_timer_data(data: TimerDataFile) -> list[KRDSObject]:
    """Write the set fields of a TimerDataFile, in declared order."""
    if not isinstance(data, TimerDataFile):
        raise TypeMismatchError("TimerDataFile", type(data).__name__)
    return _encode(data, TIMER_FIELDS)


def load_reader_data(raw: bytes) -> ReaderDataFile:
    return decode_reader_data(read_document(raw))


def dump_reader_data(data: ReaderDataFile) -> bytes:
    return write_document(encode_reader_data(data))


def load_timer_data(raw: bytes) -> TimerDataFile:
    return decode_timer_data(read_document(raw))


def dump_timer_data(data: TimerDataFile) -> bytes:
    return write_document(encode_timer_data(data))

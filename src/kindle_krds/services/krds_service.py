"""KRDS file service for both the CLI and library callers."""

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from kindle_krds.binary import read_document
from kindle_krds.codec import (
    decode_reader_data,
    decode_timer_data,
    dump_reader_data,
    dump_timer_data,
)
from kindle_krds.config import Config
from kindle_krds.errors import KRDSError
from kindle_krds.models import FileKind, ReaderDataFile, TimerDataFile
from kindle_krds.utils import to_jsonable
from kindle_krds.values import KRDSObject

logger = logging.getLogger(__name__)

KRDSFile = ReaderDataFile | TimerDataFile


@dataclass
class LoadResult:
    """Result of load operation."""

    success: bool
    message: str
    kind: FileKind | None = None
    data: KRDSFile | None = None
    error: str | None = None


@dataclass
class TreeResult:
    """Result of reading the raw value tree."""

    success: bool
    message: str
    objects: list[KRDSObject] | None = None
    error: str | None = None


@dataclass
class SaveResult:
    """Result of save operation."""

    success: bool
    message: str
    bytes_written: int = 0
    error: str | None = None


@dataclass
class VerifyResult:
    """Result of round-trip verification."""

    success: bool
    message: str
    original_size: int = 0
    encoded_size: int = 0
    first_difference: int | None = None
    error: str | None = None


class KRDSService:
    """Service for reading, writing and checking KRDS files."""

    @staticmethod
    def resolve_kind(path: str | Path, kind: FileKind | None = None) -> FileKind:
        """Use the explicit kind if given, otherwise guess from the extension."""
        return kind if kind is not None else Config.get_file_kind(path)

    @staticmethod
    def decode(raw: bytes, kind: FileKind) -> KRDSFile:
        """Decode raw bytes as the given file family."""
        objects = read_document(raw)
        match kind:
            case FileKind.READER:
                return decode_reader_data(objects)
            case FileKind.TIMER:
                return decode_timer_data(objects)
            case _:
                raise ValueError(f"Unsupported file kind: {kind}")

    @staticmethod
    def encode(data: KRDSFile) -> bytes:
        """Encode a reader or timer data file to bytes."""
        if isinstance(data, ReaderDataFile):
            return dump_reader_data(data)
        if isinstance(data, TimerDataFile):
            return dump_timer_data(data)
        raise ValueError(f"Unsupported data type: {type(data).__name__}")

    @staticmethod
    def load(path: str | Path, kind: FileKind | None = None) -> LoadResult:
        """Read and decode a KRDS file."""
        file_path = Path(path).expanduser()
        try:
            file_kind = KRDSService.resolve_kind(file_path, kind)
        except ValueError as e:
            return LoadResult(success=False, message="Unknown file type", error=str(e))

        try:
            raw = file_path.read_bytes()
        except OSError as e:
            return LoadResult(success=False, message="Failed to read file", error=str(e))

        try:
            data = KRDSService.decode(raw, file_kind)
        except KRDSError as e:
            logger.debug("Decoding %s failed", file_path, exc_info=True)
            return LoadResult(
                success=False, message="Unparseable file", kind=file_kind, error=str(e)
            )

        if data.extra_fields:
            names = ", ".join(obj.name for obj in data.extra_fields)
            logger.info("%s: kept unknown field(s): %s", file_path.name, names)

        return LoadResult(
            success=True,
            message=f"Loaded {file_kind} data from {file_path.name}",
            kind=file_kind,
            data=data,
        )

    @staticmethod
    def load_tree(path: str | Path) -> TreeResult:
        """Read the raw value tree of a KRDS file without interpreting it."""
        file_path = Path(path).expanduser()
        try:
            objects = read_document(file_path.read_bytes())
        except OSError as e:
            return TreeResult(success=False, message="Failed to read file", error=str(e))
        except KRDSError as e:
            return TreeResult(success=False, message="Unparseable file", error=str(e))

        return TreeResult(
            success=True, message=f"Read {len(objects)} top-level object(s)", objects=objects
        )

    @staticmethod
    def save(path: str | Path, data: KRDSFile) -> SaveResult:
        """Encode and write a KRDS file."""
        file_path = Path(path).expanduser()
        try:
            raw = KRDSService.encode(data)
        except (KRDSError, ValueError) as e:
            return SaveResult(success=False, message="Failed to encode data", error=str(e))

        try:
            file_path.write_bytes(raw)
        except OSError as e:
            return SaveResult(success=False, message="Failed to write file", error=str(e))

        return SaveResult(
            success=True, message=f"Wrote {file_path.name}", bytes_written=len(raw)
        )

    @staticmethod
    def verify(path: str | Path, kind: FileKind | None = None) -> VerifyResult:
        """Decode a file, encode it again and compare the bytes."""
        file_path = Path(path).expanduser()
        try:
            file_kind = KRDSService.resolve_kind(file_path, kind)
            original = file_path.read_bytes()
        except (ValueError, OSError) as e:
            return VerifyResult(success=False, message="Failed to read file", error=str(e))

        try:
            encoded = KRDSService.encode(KRDSService.decode(original, file_kind))
        except KRDSError as e:
            return VerifyResult(
                success=False,
                message="Round trip failed",
                original_size=len(original),
                error=str(e),
            )

        if encoded == original:
            return VerifyResult(
                success=True,
                message="Round trip is byte-identical",
                original_size=len(original),
                encoded_size=len(encoded),
            )

        first_difference = next(
            (i for i, (a, b) in enumerate(zip(original, encoded)) if a != b),
            min(len(original), len(encoded)),
        )
        return VerifyResult(
            success=False,
            message="Round trip differs",
            original_size=len(original),
            encoded_size=len(encoded),
            first_difference=first_difference,
            error=f"First difference at byte {first_difference}",
        )

    @staticmethod
    def dump_json(data: KRDSFile, indent: int = Config.DUMP_INDENT) -> str:
        """Serialize a decoded file to JSON."""
        return json.dumps(to_jsonable(data), indent=indent, ensure_ascii=False)

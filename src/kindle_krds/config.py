"""Configuration for the KRDS codec and tools."""

from pathlib import Path

from kindle_krds.models import FileKind


class Config:
    """Application configuration."""

    # File format
    SIGNATURE: bytes = b"\x00\x00\x00\x00\x00\x1a\xb1\x26"
    FILE_VERSION: int = 1
    ANNOTATION_TEMPLATE: str = "0\ufffc0"
    # Deepest object nesting read or written
    MAX_DEPTH: int = 64

    # Extensions per file family
    EXTENSIONS: dict[FileKind, tuple[str, ...]] = {
        FileKind.READER: (".yjr", ".azw3r"),
        FileKind.TIMER: (".yjf", ".azw3f"),
    }

    # Output settings
    DUMP_INDENT: int = 2
    NOTE_PREVIEW_LENGTH: int = 60
    LOG_FORMAT: str = "%(message)s"

    @classmethod
    def get_file_kind(cls, path: str | Path) -> FileKind:
        """
        Guess the file family from its extension.

        Args:
            path: Path of a KRDS file

        Returns:
            FileKind for the extension

        Raises:
            ValueError: If the extension is not a KRDS one
        """
        suffix = Path(path).suffix.lower()
        for kind, extensions in cls.EXTENSIONS.items():
            if suffix in extensions:
                return kind

        supported = [ext for extensions in cls.EXTENSIONS.values() for ext in extensions]
        raise ValueError(
            f"Unsupported extension: {suffix or '(none)'}. Supported: {', '.join(supported)}"
        )

    @classmethod
    def expand_path(cls, path: str) -> Path:
        """
        Expand ~ in paths.

        Args:
            path: Path string potentially containing ~

        Returns:
            Expanded Path object
        """
        return Path(path).expanduser()

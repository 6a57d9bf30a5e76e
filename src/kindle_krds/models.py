"""Data models for KRDS reader and timer data files."""

from dataclasses import dataclass, field
from enum import IntEnum, StrEnum
from typing import ClassVar

from kindle_krds.values import KRDSObject


class FileKind(StrEnum):
    """KRDS file families."""

    READER = "reader"  # .yjr, .azw3r
    TIMER = "timer"  # .yjf, .azw3f


class NoteType(IntEnum):
    """Annotation kinds, used as keys of the annotation cache.

    Stored as a 32 bit integer. The values are not contiguous.
    """

    BOOKMARK = 0
    HIGHLIGHT = 1
    TYPED = 2
    HANDWRITTEN = 10
    STICKY = 11


@dataclass
class AnnotationData:
    """Payload shared by every annotation variant."""

    start: str
    end: str
    created: int
    modified: int
    template: str  # always "0\ufffc0" so far
    # NBK reference for handwritten notes, plaintext for typed ones.
    # Never written for highlights and bookmarks.
    content: str | None = None


@dataclass
class Note:
    """A single annotation. Use one of the concrete variants below."""

    TAG: ClassVar[str]
    NOTE_TYPE: ClassVar[NoteType]
    HAS_CONTENT: ClassVar[bool] = True

    data: AnnotationData


@dataclass
class BookmarkNote(Note):
    TAG: ClassVar[str] = "annotation.personal.bookmark"
    NOTE_TYPE: ClassVar[NoteType] = NoteType.BOOKMARK
    HAS_CONTENT: ClassVar[bool] = False


@dataclass
class HighlightNote(Note):
    TAG: ClassVar[str] = "annotation.personal.highlight"
    NOTE_TYPE: ClassVar[NoteType] = NoteType.HIGHLIGHT
    HAS_CONTENT: ClassVar[bool] = False


@dataclass
class TypedNote(Note):
    TAG: ClassVar[str] = "annotation.personal.note"
    NOTE_TYPE: ClassVar[NoteType] = NoteType.TYPED


@dataclass
class HandwrittenNote(Note):
    TAG: ClassVar[str] = "annotation.personal.handwritten_note"
    NOTE_TYPE: ClassVar[NoteType] = NoteType.HANDWRITTEN


@dataclass
class StickyNote(Note):
    TAG: ClassVar[str] = "annotation.personal.sticky_note"
    NOTE_TYPE: ClassVar[NoteType] = NoteType.STICKY


AnnotationCache = dict[NoteType, list[Note]]


@dataclass
class FontPreferences:
    """Font configuration of the document.

    Only a few positions are understood. The rest are kept as-is.
    """

    font: str
    unknown_1: int
    font_size: int
    unknown_3: int
    unknown_4: int
    unknown_5: int
    unknown_6: int
    unknown_7: int
    unknown_8: int
    bold_level: int
    unknown_10: str
    unknown_11: int
    unknown_12: str
    unknown_13: bool
    unknown_14: str
    unknown_15: int


@dataclass
class APNXKey:
    """Reference to the auxiliary page number index of a book."""

    key: str
    type: str
    unknown_2: bool
    unknown_3: list[int]
    unknown_4: int
    unknown_5: int
    unknown_6: int
    unknown_7: str


@dataclass
class LanguageStore:
    """System language of the device that wrote the file."""

    language: str
    unknown: int


@dataclass
class TimerAverageDistributionNormal:
    """Normal distribution of reading speed samples."""

    count: int
    sum: float  # words per minute
    sum_of_squares: float


@dataclass
class TimerAverageOutliers:
    count: int
    sum: float
    sum_of_squares: float


@dataclass
class TimerAverageCalculator:
    """Reading speed statistics used to estimate the time left."""

    samples1: int
    samples2: int
    normal_distributions: list[TimerAverageDistributionNormal]
    outliers: list[TimerAverageOutliers]


@dataclass
class TimerModel:
    version: int
    total_time: int  # ms
    total_words: int
    total_percent: float
    calculator: TimerAverageCalculator


@dataclass
class BookInfoStore:
    num_words: int
    percent_of_book: float


@dataclass
class PageHistoryRecord:
    """When a page was read."""

    position: str
    time: int


@dataclass
class WhisperstoreMigrationStatus:
    first: bool
    second: bool


@dataclass
class FPR:
    """Opaque record, field meaning unknown."""

    unknown_0: str
    unknown_1: int
    unknown_2: int
    unknown_3: str
    unknown_4: str


@dataclass
class LPR:
    """Opaque record, field meaning unknown."""

    unknown_0: int  # i8
    unknown_1: str
    unknown_2: int


@dataclass
class ReaderDataFile:
    """Reader data file (.yjr, .azw3r).

    Holds the font configuration and every annotation the user made
    (handwritten, sticky and typed notes, highlights and bookmarks).
    """

    font_preferences: FontPreferences | None = None
    sync_lpr: bool | None = None
    nis_info_data: str | None = None
    annotation_cache: AnnotationCache | None = None
    apnx_key: APNXKey | None = None
    language_store: LanguageStore | None = None
    reader_metrics: dict[str, str] | None = None
    # Top-level fields we do not understand, written back unchanged
    extra_fields: list[KRDSObject] = field(default_factory=list)


@dataclass
class TimerDataFile:
    """Timer data file (.yjf, .azw3f) with reading statistics."""

    timer_model: TimerModel | None = None
    fpr: FPR | None = None
    book_info_store: BookInfoStore | None = None
    page_history_store: list[PageHistoryRecord] | None = None
    whisperstore_migration_status: WhisperstoreMigrationStatus | None = None
    lpr: LPR | None = None
    extra_fields: list[KRDSObject] = field(default_factory=list)

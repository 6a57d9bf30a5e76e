"""Shared pytest fixtures for all tests."""

import tempfile
from pathlib import Path

import pytest

from kindle_krds.codec import dump_reader_data, dump_timer_data
from kindle_krds.config import Config
from kindle_krds.models import (
    APNXKey,
    AnnotationData,
    BookInfoStore,
    BookmarkNote,
    FontPreferences,
    FPR,
    HighlightNote,
    LanguageStore,
    LPR,
    NoteType,
    PageHistoryRecord,
    ReaderDataFile,
    TimerAverageCalculator,
    TimerAverageDistributionNormal,
    TimerAverageOutliers,
    TimerDataFile,
    TimerModel,
    TypedNote,
    WhisperstoreMigrationStatus,
)


def make_annotation(
    start: str, end: str, created: int = 1700000000000, content: str | None = None
) -> AnnotationData:
    """Build annotation data with the usual template."""
    return AnnotationData(
        start=start,
        end=end,
        created=created,
        modified=created + 1000,
        template=Config.ANNOTATION_TEMPLATE,
        content=content,
    )


@pytest.fixture
def annotation_factory():
    """Factory for annotation data."""
    return make_annotation


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_font_preferences():
    """Create sample font preferences."""
    return FontPreferences(
        font="Bookerly",
        unknown_1=-1,
        font_size=6,
        unknown_3=0,
        unknown_4=40,
        unknown_5=40,
        unknown_6=40,
        unknown_7=40,
        unknown_8=0,
        bold_level=1,
        unknown_10="",
        unknown_11=-1,
        unknown_12="",
        unknown_13=False,
        unknown_14="",
        unknown_15=0,
    )


@pytest.fixture
def sample_annotation_cache():
    """Create an annotation cache with highlights, a typed note and a bookmark."""
    return {
        NoteType.HIGHLIGHT: [
            HighlightNote(make_annotation("AQAAAEIAAAA:2000", "AQAAAEIAAAA:2100")),
            HighlightNote(make_annotation("AQAAAEIAAAA:1000", "AQAAAEIAAAA:1050")),
        ],
        NoteType.TYPED: [
            TypedNote(
                make_annotation(
                    "AQAAAEIAAAA:1050", "AQAAAEIAAAA:1050", content="Compare with chapter 2"
                )
            ),
        ],
        NoteType.BOOKMARK: [
            BookmarkNote(make_annotation("AQAAAEIAAAA:3000", "AQAAAEIAAAA:3000")),
        ],
    }


@pytest.fixture
def sample_reader_data(sample_font_preferences, sample_annotation_cache):
    """Create a reader data file with every field set."""
    return ReaderDataFile(
        font_preferences=sample_font_preferences,
        sync_lpr=True,
        nis_info_data="",
        annotation_cache=sample_annotation_cache,
        apnx_key=APNXKey(
            key="B00H25FCSQ",
            type="PAGE",
            unknown_2=True,
            unknown_3=[1, 250, 512],
            unknown_4=3,
            unknown_5=0,
            unknown_6=0,
            unknown_7="",
        ),
        language_store=LanguageStore(language="en-US", unknown=4),
        reader_metrics={"booklaunchedbefore": "true"},
    )


@pytest.fixture
def sample_timer_data():
    """Create a timer data file with every field set."""
    return TimerDataFile(
        timer_model=TimerModel(
            version=1,
            total_time=3600000,
            total_words=12000,
            total_percent=42.5,
            calculator=TimerAverageCalculator(
                samples1=10,
                samples2=3,
                normal_distributions=[TimerAverageDistributionNormal(25, 6250.0, 1600000.0)],
                outliers=[TimerAverageOutliers(2, 900.0, 410000.0)],
            ),
        ),
        fpr=FPR("AQAAAEIAAAA:1200", 1024, -1, "", ""),
        book_info_store=BookInfoStore(num_words=85000, percent_of_book=42.5),
        page_history_store=[
            PageHistoryRecord("AQAAAEIAAAA:1000", 1700000000000),
            PageHistoryRecord("AQAAAEIAAAA:1200", 1700000060000),
        ],
        whisperstore_migration_status=WhisperstoreMigrationStatus(False, True),
        lpr=LPR(2, "AQAAAEIAAAA:1200", 1700000100000),
    )


@pytest.fixture
def reader_file(temp_dir, sample_reader_data):
    """Write the sample reader data to a .yjr file."""
    path = temp_dir / "book.yjr"
    path.write_bytes(dump_reader_data(sample_reader_data))
    return path


@pytest.fixture
def timer_file(temp_dir, sample_timer_data):
    """Write the sample timer data to a .yjf file."""
    path = temp_dir / "book.yjf"
    path.write_bytes(dump_timer_data(sample_timer_data))
    return path

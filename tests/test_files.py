"""Tests for the top-level reader and timer file codecs."""

import pytest

from kindle_krds.codec import (
    decode_reader_data,
    decode_timer_data,
    encode_reader_data,
    encode_timer_data,
)
from kindle_krds.errors import (
    ArityMismatchError,
    KRDSDecodeError,
    TypeMismatchError,
    UnknownEnumValueError,
)
from kindle_krds.models import (
    BookmarkNote,
    HighlightNote,
    NoteType,
    ReaderDataFile,
    TimerDataFile,
)
from kindle_krds.values import KRDSObject, PrimitiveKind, Scalar


class TestReaderData:
    """Tests for reader data files."""

    def test_round_trip(self, sample_reader_data):
        """Test that a fully populated file decodes back to an equal value."""
        objects = encode_reader_data(sample_reader_data)

        assert decode_reader_data(objects) == sample_reader_data

    def test_field_order(self, sample_reader_data):
        """Test that fields are written in their declared order."""
        names = [obj.name for obj in encode_reader_data(sample_reader_data)]

        assert names == [
            "font.prefs",
            "sync_lpr",
            "next.in.series.info.data",
            "annotation.cache.object",
            "apnx.key",
            "language.store",
            "ReaderMetrics",
        ]

    def test_only_font_preferences(self, sample_font_preferences):
        """Test that unset fields are skipped entirely on encode."""
        data = ReaderDataFile(font_preferences=sample_font_preferences)

        objects = encode_reader_data(data)

        assert [obj.name for obj in objects] == ["font.prefs"]
        decoded = decode_reader_data(objects)
        assert decoded == data
        assert decoded.sync_lpr is None
        assert decoded.annotation_cache is None
        assert decoded.reader_metrics is None

    def test_empty_file(self):
        """Test that a file with no fields round-trips to an empty model."""
        assert encode_reader_data(ReaderDataFile()) == []
        assert decode_reader_data([]) == ReaderDataFile()

    def test_scalar_fields(self):
        """Test the single-value fields."""
        data = ReaderDataFile(sync_lpr=False, nis_info_data="series")

        objects = encode_reader_data(data)

        assert objects == [
            KRDSObject("sync_lpr", [Scalar(PrimitiveKind.BOOL, False)]),
            KRDSObject("next.in.series.info.data", [Scalar(PrimitiveKind.STRING, "series")]),
        ]
        assert decode_reader_data(objects) == data

    def test_reader_metrics_map(self):
        """Test that reader metrics are a count-prefixed string map."""
        data = ReaderDataFile(reader_metrics={"booklaunchedbefore": "true", "b": "c"})

        (obj,) = encode_reader_data(data)

        assert obj.values[0] == Scalar(PrimitiveKind.INT, 2)
        assert obj.values[1] == Scalar(PrimitiveKind.STRING, "booklaunchedbefore")
        assert decode_reader_data([obj]).reader_metrics == data.reader_metrics

    def test_font_preferences_arity(self, sample_reader_data):
        """Test that a short font.prefs record aborts the whole decode."""
        objects = encode_reader_data(sample_reader_data)
        objects[0].values.pop()

        with pytest.raises(ArityMismatchError):
            decode_reader_data(objects)

    def test_duplicate_field(self, sample_font_preferences):
        """Test that a known field may only appear once."""
        objects = encode_reader_data(ReaderDataFile(font_preferences=sample_font_preferences))

        with pytest.raises(KRDSDecodeError, match="more than once"):
            decode_reader_data(objects + objects)

    def test_top_level_scalar_rejected(self):
        """Test that a bare scalar is not a valid top-level field."""
        with pytest.raises(TypeMismatchError):
            decode_reader_data([Scalar(PrimitiveKind.INT, 1)])


class TestAnnotationCache:
    """Tests for the annotation cache inside reader data files."""

    def test_layout(self, annotation_factory):
        """Test the count, key and interval tree layout."""
        note = HighlightNote(annotation_factory("a", "b"))
        data = ReaderDataFile(annotation_cache={NoteType.HIGHLIGHT: [note]})

        (obj,) = encode_reader_data(data)

        assert obj.name == "annotation.cache.object"
        assert obj.values[0] == Scalar(PrimitiveKind.INT, 1)
        assert obj.values[1] == Scalar(PrimitiveKind.INT, 1)
        tree = obj.values[2]
        assert tree.name == "saved.avl.interval.tree"
        assert tree.values[0] == Scalar(PrimitiveKind.INT, 1)
        assert tree.values[1].name == "annotation.personal.highlight"

    def test_order_preserved(self, annotation_factory):
        """Test that notes come back in write order, not position or time order."""
        a1 = HighlightNote(annotation_factory("pos:300", "pos:310", created=3))
        a2 = HighlightNote(annotation_factory("pos:100", "pos:110", created=1))
        a3 = HighlightNote(annotation_factory("pos:200", "pos:210", created=2))
        data = ReaderDataFile(annotation_cache={NoteType.HIGHLIGHT: [a1, a2, a3]})

        decoded = decode_reader_data(encode_reader_data(data))

        assert decoded.annotation_cache[NoteType.HIGHLIGHT] == [a1, a2, a3]

    def test_duplicate_positions_kept(self, annotation_factory):
        """Test that two annotations at the same position are both kept."""
        first = HighlightNote(annotation_factory("pos:1", "pos:2", created=1))
        second = HighlightNote(annotation_factory("pos:1", "pos:2", created=2))
        data = ReaderDataFile(annotation_cache={NoteType.HIGHLIGHT: [first, second]})

        decoded = decode_reader_data(encode_reader_data(data))

        assert decoded.annotation_cache[NoteType.HIGHLIGHT] == [first, second]

    def test_key_order_preserved(self, sample_reader_data):
        """Test that note type keys keep their order."""
        decoded = decode_reader_data(encode_reader_data(sample_reader_data))

        assert list(decoded.annotation_cache) == [
            NoteType.HIGHLIGHT,
            NoteType.TYPED,
            NoteType.BOOKMARK,
        ]

    def test_unknown_note_type(self, annotation_factory):
        """Test that an unknown note type key fails the decode."""
        data = ReaderDataFile(
            annotation_cache={NoteType.HIGHLIGHT: [HighlightNote(annotation_factory("a", "b"))]}
        )
        (obj,) = encode_reader_data(data)
        obj.values[1] = Scalar(PrimitiveKind.INT, 3)

        with pytest.raises(UnknownEnumValueError):
            decode_reader_data([obj])

    def test_duplicate_note_type(self):
        """Test that a note type key may only appear once."""
        tree = KRDSObject("saved.avl.interval.tree", [Scalar(PrimitiveKind.INT, 0)])
        obj = KRDSObject(
            "annotation.cache.object",
            [
                Scalar(PrimitiveKind.INT, 2),
                Scalar(PrimitiveKind.INT, 1),
                tree,
                Scalar(PrimitiveKind.INT, 1),
                tree,
            ],
        )

        with pytest.raises(KRDSDecodeError, match="duplicate key"):
            decode_reader_data([obj])

    def test_mismatched_key_not_validated(self, annotation_factory):
        """Test that a note stored under another type's key still decodes."""
        note = HighlightNote(annotation_factory("a", "b"))
        data = ReaderDataFile(annotation_cache={NoteType.BOOKMARK: [note]})

        decoded = decode_reader_data(encode_reader_data(data))

        assert decoded.annotation_cache == {NoteType.BOOKMARK: [note]}
        assert not isinstance(decoded.annotation_cache[NoteType.BOOKMARK][0], BookmarkNote)


class TestUnknownFields:
    """Tests for forward compatibility with unknown top-level fields."""

    def test_unknown_field_kept(self, sample_font_preferences):
        """Test that an unknown field does not abort decoding the rest."""
        unknown = KRDSObject("future.field", [Scalar(PrimitiveKind.INT, 5)])
        objects = [unknown] + encode_reader_data(
            ReaderDataFile(font_preferences=sample_font_preferences)
        )

        decoded = decode_reader_data(objects)

        assert decoded.font_preferences == sample_font_preferences
        assert decoded.extra_fields == [unknown]

    def test_unknown_field_written_last(self, sample_font_preferences):
        """Test that unknown fields are written back after the known ones."""
        unknown = KRDSObject("future.field", [Scalar(PrimitiveKind.STRING, "x")])
        data = ReaderDataFile(font_preferences=sample_font_preferences, extra_fields=[unknown])

        objects = encode_reader_data(data)

        assert [obj.name for obj in objects] == ["font.prefs", "future.field"]
        assert decode_reader_data(objects) == data

    def test_timer_fields_unknown_to_reader(self, sample_timer_data):
        """Test that timer fields decoded as reader data are all kept as unknown."""
        objects = encode_timer_data(sample_timer_data)

        decoded = decode_reader_data(objects)

        assert decoded.font_preferences is None
        assert [obj.name for obj in decoded.extra_fields] == [obj.name for obj in objects]


class TestTimerData:
    """Tests for timer data files."""

    def test_round_trip(self, sample_timer_data):
        """Test that a fully populated file decodes back to an equal value."""
        assert decode_timer_data(encode_timer_data(sample_timer_data)) == sample_timer_data

    def test_field_order(self, sample_timer_data):
        """Test that fields are written in their declared order."""
        names = [obj.name for obj in encode_timer_data(sample_timer_data)]

        assert names == [
            "timer.model",
            "fpr",
            "book.info.store",
            "page.history.store",
            "whisperstore.migration.status",
            "lpr",
        ]

    def test_page_history_records(self, sample_timer_data):
        """Test that each page history entry is wrapped in its own object."""
        data = TimerDataFile(page_history_store=sample_timer_data.page_history_store)

        (obj,) = encode_timer_data(data)

        assert obj.values[0] == Scalar(PrimitiveKind.INT, 2)
        assert [v.name for v in obj.values[1:]] == ["page.history.record"] * 2
        assert decode_timer_data([obj]) == data

    def test_partial_file(self, sample_timer_data):
        """Test that absent fields stay absent after a round trip."""
        data = TimerDataFile(book_info_store=sample_timer_data.book_info_store)

        decoded = decode_timer_data(encode_timer_data(data))

        assert decoded == data
        assert decoded.timer_model is None
        assert decoded.page_history_store is None

    def test_empty_page_history(self):
        """Test that an empty page history is kept distinct from an absent one."""
        data = TimerDataFile(page_history_store=[])

        decoded = decode_timer_data(encode_timer_data(data))

        assert decoded.page_history_store == []

    def test_wrong_model_type(self, sample_reader_data):
        """Test that reader data cannot be encoded as timer data."""
        with pytest.raises(TypeMismatchError):
            encode_timer_data(sample_reader_data)

"""Collection layouts: the annotation cache and small string maps."""

from kindle_krds.codec.notes import NoteSlot
from kindle_krds.codec.records import STRING, MappingOf, NoteTypeSlot, SequenceOf, Wrapped

INTERVAL_TREE_TAG = "saved.avl.interval.tree"

# Despite the name this is a plain list in write order, no tree invariant.
INTERVAL_TREE = Wrapped(INTERVAL_TREE_TAG, SequenceOf(NoteSlot()))

# NoteType -> notes, entries kept in file order
ANNOTATION_CACHE = MappingOf(NoteTypeSlot(), INTERVAL_TREE)

STRING_MAP = MappingOf(STRING, STRING)

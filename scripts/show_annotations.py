"""Script to print every annotation stored in a reader data file."""

import sys
from pathlib import Path

# Add src directory to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from kindle_krds.models import FileKind
from kindle_krds.services import KRDSService
from kindle_krds.utils import format_timestamp


def main():
    """Decode a .yjr/.azw3r file and print its annotations."""
    if len(sys.argv) < 2:
        print("Usage: python show_annotations.py <FILE>")
        print("\nExample: python show_annotations.py MyBook.sdr/MyBook.yjr")
        sys.exit(1)

    path = Path(sys.argv[1])
    if not path.exists():
        print(f"File not found: {path}")
        sys.exit(1)

    result = KRDSService.load(path, FileKind.READER)
    if not result.success:
        print(f"Error decoding {path}: {result.error}")
        sys.exit(1)

    cache = result.data.annotation_cache or {}
    total = sum(len(notes) for notes in cache.values())

    print("=" * 80)
    print(f"File: {path}")
    print("=" * 80)
    print()
    print(f"Total annotations: {total}")
    print()

    for note_type, notes in cache.items():
        for i, note in enumerate(notes, 1):
            print(f"[{note_type.name.lower()} {i}] " + "=" * 60)
            print(f"Variant: {note.TAG}")
            print(f"Start: {note.data.start}")
            print(f"End: {note.data.end}")
            print(f"Created: {format_timestamp(note.data.created)}")
            print(f"Modified: {format_timestamp(note.data.modified)}")

            if note.data.content is not None:
                print()
                print("Content:")
                print(f"  {note.data.content}")

            print()

    if result.data.extra_fields:
        print("Unknown fields: " + ", ".join(obj.name for obj in result.data.extra_fields))


if __name__ == "__main__":
    main()

"""KRDS codec.

Maps between the KRDS value tree and the typed models in
`kindle_krds.models`. Decode and encode are pure functions, safe to call from
several threads at once.
"""

from kindle_krds.codec.files import (
    decode_reader_data,
    decode_timer_data,
    dump_reader_data,
    dump_timer_data,
    encode_reader_data,
    encode_timer_data,
    load_reader_data,
    load_timer_data,
)
from kindle_krds.codec.notes import decode_note, encode_note

__all__ = [
    "decode_reader_data",
    "encode_reader_data",
    "decode_timer_data",
    "encode_timer_data",
    "load_reader_data",
    "dump_reader_data",
    "load_timer_data",
    "dump_timer_data",
    "decode_note",
    "encode_note",
]

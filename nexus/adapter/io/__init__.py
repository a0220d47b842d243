"""I/O layer for the line-delimited JSON protocol streams."""

from .jsonl import (
    JSONLWriter,
    decode_json_line,
    encode_record,
    iter_lines,
    read_lines,
)

__all__ = [
    "JSONLWriter",
    "decode_json_line",
    "encode_record",
    "iter_lines",
    "read_lines",
]

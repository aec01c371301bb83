"""
Record parser: one JSONL line in, one typed record out.

A bad line is a failure for that line only. The caller decides whether to
continue; the ingestion pipeline always does.
"""
import msgspec
from typing import Union

from core.schemas import Record, decode_record


class RecordParseError(Exception):
    """Raised when a line is not a valid node or edge record."""
    def __init__(self, lineno: int, reason: str):
        self.lineno = lineno
        self.reason = reason
        super().__init__(f"line {lineno}: {reason}")


def parse_line(line: Union[str, bytes], lineno: int) -> Record:
    """
    Decode a single line of the input stream.

    Args:
        line: Raw line text (trailing newline allowed)
        lineno: 1-based line number, used only for diagnostics

    Returns:
        NodeRecord or EdgeRecord

    Raises:
        RecordParseError: malformed JSON, missing or unknown `type`,
            or missing/invalid required fields for the given type
    """
    text = line.strip()
    if not text:
        raise RecordParseError(lineno, "empty line")

    try:
        return decode_record(text)
    except msgspec.ValidationError as e:
        raise RecordParseError(lineno, f"invalid record: {e}") from e
    except msgspec.DecodeError as e:
        raise RecordParseError(lineno, f"malformed JSON: {e}") from e

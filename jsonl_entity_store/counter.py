from __future__ import annotations
from typing import BinaryIO, Optional

from .config import DEFAULT_CHUNK_SIZE, MIN_CHUNK_SIZE

LF = b"\n"
CR = b"\r"


def detect_terminator(chunk: bytes) -> Optional[bytes]:
    """Return whichever of LF/CR occurs first in ``chunk``, or None."""
    lf = chunk.find(LF)
    cr = chunk.find(CR)
    if lf < 0 and cr < 0:
        return None
    if cr < 0 or (0 <= lf < cr):
        return LF
    return CR


def count_lines(stream: BinaryIO, chunk_size: int = DEFAULT_CHUNK_SIZE) -> int:
    """
    Count line terminators in a binary stream read from its current position.

    The first LF or CR seen fixes the terminator style; only that byte is
    counted afterwards, so a CRLF file counts its CRs. A non-empty stream that
    does not end in the detected terminator counts one extra partial line.
    Mixed terminator styles give undefined results.
    """
    chunk_size = max(MIN_CHUNK_SIZE, chunk_size)
    terminator: Optional[bytes] = None
    count = 0
    last = b""
    while True:
        chunk = stream.read(chunk_size)
        if not chunk:
            break
        if terminator is None:
            terminator = detect_terminator(chunk)
            if terminator is None:
                last = chunk[-1:]
                continue
        count += chunk.count(terminator)
        last = chunk[-1:]
    if last and last not in (LF, CR):
        count += 1
    return count


def count_file_lines(path: str, chunk_size: int = DEFAULT_CHUNK_SIZE) -> int:
    with open(path, "rb") as f:
        return count_lines(f, chunk_size)

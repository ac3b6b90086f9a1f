from __future__ import annotations

from typing import BinaryIO, Iterator, Optional, Tuple

# (char, width). char is None for a byte that does not start a valid UTF-8 sequence.
CodePoint = Tuple[Optional[str], int]

INVALID: CodePoint = (None, 1)


class MalformedSequenceError(ValueError):
    def __init__(self, offset: int, byte: int):
        super().__init__(f"malformed UTF-8 sequence at byte offset {offset} (0x{byte:02x})")
        self.offset = offset
        self.byte = byte


def _sequence_length(lead: int) -> int:
    """Expected length of a UTF-8 sequence from its lead byte, 0 if it cannot lead one."""
    if lead < 0x80:
        return 1
    if 0xC2 <= lead <= 0xDF:
        return 2
    if 0xE0 <= lead <= 0xEF:
        return 3
    if 0xF0 <= lead <= 0xF4:
        return 4
    return 0


def iter_code_points(
    stream: BinaryIO,
    *,
    chunk_size: int = 64 * 1024,
    strict: bool = False,
) -> Iterator[CodePoint]:
    """
    Decode a binary stream as UTF-8, one code point at a time.

    Yields (char, width) where width is the number of bytes consumed. A byte
    that cannot start a valid sequence (bad lead, bad continuation, overlong
    form, surrogate, truncated at end of stream) yields (None, 1) and decoding
    resumes at the following byte. With strict=True it raises
    MalformedSequenceError instead.

    Errors raised by stream.read() propagate unchanged.
    """
    pending = b""
    consumed = 0  # bytes yielded before `pending`

    while True:
        chunk = stream.read(chunk_size)
        eof = not chunk
        data = pending + chunk if pending else chunk
        n = len(data)
        i = 0

        while i < n:
            b = data[i]
            if b < 0x80:
                yield chr(b), 1
                i += 1
                continue

            need = _sequence_length(b)
            if need and i + need > n and not eof:
                # Sequence continues in the next chunk.
                break

            ch = None
            if need and i + need <= n:
                try:
                    ch = data[i:i + need].decode("utf-8")
                except UnicodeDecodeError:
                    ch = None

            if ch is None:
                if strict:
                    raise MalformedSequenceError(consumed + i, b)
                yield INVALID
                i += 1
            else:
                yield ch, need
                i += need

        consumed += i
        pending = data[i:]
        if eof:
            return

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, TextIO, Union

from textruns.model import StringRecord
from textruns.scanner import format_record


class TextSink:
    def __init__(self, stream: TextIO, *, show_offset: bool = True):
        self.stream = stream
        self.show_offset = show_offset

    def write(self, record: StringRecord) -> None:
        self.stream.write(format_record(record, self.show_offset) + "\n")

    def flush(self) -> None:
        self.stream.flush()


class JsonLinesSink:
    def __init__(self, stream: TextIO):
        self.stream = stream

    def write(self, record: StringRecord) -> None:
        self.stream.write(record.model_dump_json() + "\n")

    def flush(self) -> None:
        self.stream.flush()


@contextmanager
def open_sink(kind: str, stream: TextIO, *, show_offset: bool = True) -> Iterator[Union[TextSink, JsonLinesSink]]:
    """Yields the sink for `kind` ("text" or "jsonl") and flushes it on exit, halted or not."""
    if kind == "jsonl":
        sink: Union[TextSink, JsonLinesSink] = JsonLinesSink(stream)
    elif kind == "text":
        sink = TextSink(stream, show_offset=show_offset)
    else:
        raise ValueError(f"Unknown output format: {kind}")
    try:
        yield sink
    finally:
        sink.flush()

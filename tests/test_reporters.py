import io
import json

import pytest
from rich.console import Console

from textruns.model import ScanReport, SourceSummary, StringRecord
from textruns.reporters.console import render_summary
from textruns.reporters.text import JsonLinesSink, TextSink, open_sink

REC = StringRecord(source="a.bin", offset=3, text="some text")


def test_text_sink_formats_lines():
    buf = io.StringIO()
    TextSink(buf).write(REC)
    TextSink(buf, show_offset=False).write(REC)
    assert buf.getvalue() == "a.bin:#3:\tsome text\nsome text\n"


def test_json_lines_sink():
    buf = io.StringIO()
    JsonLinesSink(buf).write(REC)
    assert json.loads(buf.getvalue()) == {"source": "a.bin", "offset": 3, "text": "some text"}


class _CountingBuffer(io.StringIO):
    flushes = 0

    def flush(self):
        self.flushes += 1
        super().flush()


def test_open_sink_flushes_on_exit_even_on_error():
    buf = _CountingBuffer()
    with pytest.raises(RuntimeError):
        with open_sink("text", buf) as sink:
            sink.write(REC)
            raise RuntimeError("boom")
    assert buf.flushes == 1
    assert buf.getvalue() == "a.bin:#3:\tsome text\n"


def test_open_sink_rejects_unknown_format():
    with pytest.raises(ValueError):
        with open_sink("xml", io.StringIO()):
            pass


def test_render_summary_lists_sources():
    out = Console(file=io.StringIO(), width=120)
    report = ScanReport(
        sources=[
            SourceSummary(source="a.bin", bytes_read=40, emitted=2),
            SourceSummary(source="gone.bin", errors=[{"code": "E_OPEN_FAILED"}]),
        ],
    )
    render_summary(report, out)
    text = out.file.getvalue()
    assert "a.bin" in text
    assert "E_OPEN_FAILED" in text
    assert "Match limit reached" not in text

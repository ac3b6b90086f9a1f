from __future__ import annotations

import io
import sys
from enum import Enum
from pathlib import Path
from typing import Any, BinaryIO, Callable, Dict, List, Optional, Protocol, Sequence, Union

from textruns.config import ScanConfig
from textruns.decode import MalformedSequenceError, iter_code_points
from textruns.model import ScanReport, SourceSummary, StringRecord

STDIN_NAME = "<stdin>"

ErrorHook = Callable[[Dict[str, Any]], None]


class RecordSink(Protocol):
    def write(self, record: StringRecord) -> None: ...

    def flush(self) -> None: ...


class ScanOutcome(str, Enum):
    CONTINUE = "continue"
    HALT_ALL = "halt_all"


def is_printable(ch: str, ascii_only: bool = False) -> bool:
    if ascii_only and ord(ch) >= 0xFF:
        return False
    return ch.isprintable()


def format_record(record: StringRecord, show_offset: bool = True) -> str:
    if show_offset:
        return f"{record.source}:#{record.offset}:\t{record.text}"
    return record.text


class RunScanner:
    """
    Accumulates runs of printable code points and flushes them to a sink.

    Every way out of a run (non-printable code point, max_length reached, end
    of stream, read error) goes through _flush(). The run buffer is reused
    for the lifetime of the scanner.
    """

    def __init__(self, config: ScanConfig, sink: RecordSink):
        self.config = config
        self.sink = sink
        self.matches = 0
        self._run: List[str] = []

    def scan(self, name: str, stream: BinaryIO) -> SourceSummary:
        cfg = self.config
        if cfg.limit_scope == "source":
            self.matches = 0
        matches_before = self.matches

        summary = SourceSummary(source=name)
        run = self._run
        run.clear()
        pos = 0
        outcome = ScanOutcome.CONTINUE

        try:
            for ch, width in iter_code_points(stream, chunk_size=cfg.chunk_size, strict=cfg.stop_on_malformed):
                if ch is None or not is_printable(ch, cfg.ascii_only):
                    outcome = self._flush(name, pos, summary)
                else:
                    if len(run) >= cfg.max_length:
                        outcome = self._flush(name, pos, summary)
                    run.append(ch)
                pos += width
                if outcome is ScanOutcome.HALT_ALL:
                    break
        except MalformedSequenceError as e:
            summary.errors.append(
                {
                    "code": "E_MALFORMED_SEQUENCE",
                    "message": str(e),
                    "source": name,
                    "offset": e.offset,
                }
            )
        except OSError as e:
            summary.errors.append(
                {
                    "code": "E_READ_FAILED",
                    "message": f"{type(e).__name__}: {e}",
                    "source": name,
                    "offset": pos,
                }
            )

        if outcome is ScanOutcome.CONTINUE:
            outcome = self._flush(name, pos, summary)

        summary.bytes_read = pos
        summary.matches = self.matches - matches_before
        summary.halted = outcome is ScanOutcome.HALT_ALL
        return summary

    def _flush(self, name: str, pos: int, summary: SourceSummary) -> ScanOutcome:
        cfg = self.config
        run = self._run
        if len(run) < cfg.min_length:
            run.clear()
            return ScanOutcome.CONTINUE

        text = "".join(run)
        run.clear()
        if cfg.search and cfg.search not in text:
            return ScanOutcome.CONTINUE

        # pos is the offset just past the run.
        record = StringRecord(source=name, offset=pos - len(text.encode("utf-8")), text=text)
        self.sink.write(record)
        summary.emitted += 1

        if cfg.search:
            self.matches += 1
            if cfg.match_limit > 0 and self.matches >= cfg.match_limit:
                return ScanOutcome.HALT_ALL
        return ScanOutcome.CONTINUE


def scan_sources(
    paths: Sequence[Union[str, Path]],
    sink: RecordSink,
    config: ScanConfig,
    *,
    stdin: Optional[BinaryIO] = None,
    on_error: Optional[ErrorHook] = None,
) -> ScanReport:
    """
    Scan each path in order, or stdin when no paths are given.

    Sources that cannot be opened are reported and skipped. The sink is
    flushed after every source. Scanning stops at the first source whose scan
    reaches the match limit; report.halted is then True.
    """
    report = ScanReport()
    scanner = RunScanner(config, sink)

    def _report(summary: SourceSummary) -> bool:
        report.sources.append(summary)
        if on_error is not None:
            for err in summary.errors:
                on_error(err)
        if summary.halted:
            report.halted = True
        return summary.halted

    if not paths:
        stream = stdin if stdin is not None else sys.stdin.buffer
        summary = scanner.scan(STDIN_NAME, stream)
        sink.flush()
        _report(summary)
        return report

    for p in paths:
        name = str(p)
        try:
            f = open(p, "rb")
        except OSError as e:
            _report(
                SourceSummary(
                    source=name,
                    errors=[
                        {
                            "code": "E_OPEN_FAILED",
                            "message": f"{type(e).__name__}: {e}",
                            "source": name,
                        }
                    ],
                )
            )
            continue

        with f:
            summary = scanner.scan(name, f)
        sink.flush()
        if _report(summary):
            break

    return report


class _Collector:
    def __init__(self) -> None:
        self.records: List[StringRecord] = []

    def write(self, record: StringRecord) -> None:
        self.records.append(record)

    def flush(self) -> None:
        pass


def scan_bytes(data: bytes, config: Optional[ScanConfig] = None, *, name: str = "<bytes>") -> List[StringRecord]:
    """In-memory scan. Stops at the match limit like a file scan would."""
    sink = _Collector()
    RunScanner(config or ScanConfig(), sink).scan(name, io.BytesIO(data))
    return sink.records

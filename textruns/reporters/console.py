from __future__ import annotations
from rich.console import Console
from rich.table import Table
from typing import Optional

from textruns.model import ScanReport

console = Console(stderr=True)

def render_summary(report: ScanReport, out: Optional[Console] = None) -> None:
    out = out or console
    t = Table(title="textruns scan summary")
    t.add_column("Source", overflow="fold")
    t.add_column("Bytes", justify="right")
    t.add_column("Emitted", justify="right")
    t.add_column("Matches", justify="right")
    t.add_column("Halted")
    t.add_column("Errors", overflow="fold")
    for s in report.sources:
        t.add_row(
            s.source,
            str(s.bytes_read),
            str(s.emitted),
            str(s.matches),
            "yes" if s.halted else "",
            ", ".join(str(e.get("code", "")) for e in s.errors),
        )
    out.print(t)
    if report.halted:
        out.print("[yellow]Match limit reached; remaining input was not scanned.[/yellow]")

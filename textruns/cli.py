from __future__ import annotations

import sys
from importlib import metadata
from pathlib import Path
from typing import Any, Dict, List, Optional

import typer
import yaml
from pydantic import ValidationError

from textruns.config import apply_overrides, load_config
from textruns.reporters.console import render_summary
from textruns.reporters.text import open_sink
from textruns.scanner import scan_sources

app = typer.Typer(add_completion=False)


def version_callback(value: bool):
    if value:
        try:
            v = metadata.version("textruns")
        except metadata.PackageNotFoundError:
            v = "0.1.0-dev"
        typer.echo(f"textruns version: {v}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None, "--version", callback=version_callback, is_eager=True, help="Show version and exit."
    ),
):
    """
    Print the printable UTF-8 text runs found in binary input.
    """
    pass


def _report_error(err: Dict[str, Any]) -> None:
    typer.secho(f"textruns: {err.get('source', '')}: {err.get('message', '')}", fg=typer.colors.YELLOW, err=True)


@app.command()
def scan(
    files: Optional[List[Path]] = typer.Argument(None, help="Input files. Reads stdin when none are given."),
    ascii_only: Optional[bool] = typer.Option(
        None, "--ascii/--no-ascii", help="Restrict strings to code points below 0xFF. [default: no-ascii]"
    ),
    search: Optional[str] = typer.Option(None, "--search", help="Only print strings containing this text."),
    min_length: Optional[int] = typer.Option(
        None, "--min", help="Minimum string length, in code points; <= 0 prints every run. [default: 6]"
    ),
    max_length: Optional[int] = typer.Option(None, "--max", help="Maximum string length, in code points. [default: 256]"),
    match_limit: Optional[int] = typer.Option(
        None, "-n", "--limit", help="Stop after this many search matches; <= 0 means no limit. [default: 1]"
    ),
    show_offset: Optional[bool] = typer.Option(
        None, "--offset/--no-offset", help="Show file name and byte offset of each string. [default: offset]"
    ),
    limit_scope: Optional[str] = typer.Option(
        None, "--limit-scope", help="Count matches per 'source' or across the whole run ('global')."
    ),
    strict: Optional[bool] = typer.Option(
        None, "--strict/--no-strict", help="Stop reading a source at the first malformed UTF-8 byte. [default: no-strict]"
    ),
    json_lines: bool = typer.Option(False, "--json", help="Write JSON Lines records instead of text."),
    summary: bool = typer.Option(False, "--summary", help="Print a per-source summary table on stderr."),
    config: str = typer.Option(None, "--config", help="Path to YAML config."),
):
    try:
        cfg = apply_overrides(
            load_config(config),
            ascii_only=ascii_only,
            search=search,
            min_length=min_length,
            max_length=max_length,
            match_limit=match_limit,
            show_offset=show_offset,
            limit_scope=limit_scope,
            stop_on_malformed=strict,
            format="jsonl" if json_lines else None,
            summary=summary or None,
        )
    except (ValidationError, yaml.YAMLError, OSError) as e:
        raise typer.BadParameter(str(e))

    with open_sink(cfg.output.format, sys.stdout, show_offset=cfg.scan.show_offset) as sink:
        report = scan_sources(
            files or [],
            sink,
            cfg.scan,
            stdin=typer.get_binary_stream("stdin"),
            on_error=_report_error,
        )

    if cfg.output.summary:
        render_summary(report)


if __name__ == "__main__":
    app()

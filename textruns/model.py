from __future__ import annotations

from typing import Any, Dict, List

from pydantic import BaseModel, Field


class StringRecord(BaseModel):
    source: str
    offset: int  # byte offset of the run's first byte within the source
    text: str


class SourceSummary(BaseModel):
    source: str
    bytes_read: int = 0
    emitted: int = 0
    matches: int = 0
    halted: bool = False
    errors: List[Dict[str, Any]] = Field(default_factory=list)


class ScanReport(BaseModel):
    sources: List[SourceSummary] = Field(default_factory=list)
    halted: bool = False

    @property
    def errors(self) -> List[Dict[str, Any]]:
        return [e for s in self.sources for e in s.errors]

    @property
    def emitted(self) -> int:
        return sum(s.emitted for s in self.sources)

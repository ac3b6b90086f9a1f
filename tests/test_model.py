from textruns.model import ScanReport, SourceSummary, StringRecord


def test_string_record_round_trip_validation():
    rec = StringRecord(source="a.bin", offset=7, text="héllo wörld")
    assert StringRecord.model_validate_json(rec.model_dump_json()) == rec


def test_report_aggregates_sources():
    report = ScanReport(
        sources=[
            SourceSummary(source="a.bin", emitted=2),
            SourceSummary(
                source="missing.bin",
                errors=[{"code": "E_OPEN_FAILED", "message": "FileNotFoundError", "source": "missing.bin"}],
            ),
            SourceSummary(source="b.bin", emitted=1, matches=1, halted=True),
        ],
        halted=True,
    )
    assert report.emitted == 3
    assert [e["code"] for e in report.errors] == ["E_OPEN_FAILED"]


def test_summary_defaults():
    s = SourceSummary(source="x")
    assert s.bytes_read == 0
    assert s.errors == []
    assert not s.halted

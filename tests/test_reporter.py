"""Tests for console reporting and JSON output."""

import json

import pytest

from library_recap.aggregator import process_library_stats
from library_recap.config import EngineConfig
from library_recap.models import ProcessedStats, RawSwipeRecord
from library_recap.reporter import (
    format_duration,
    format_minutes,
    generate_json_output,
    print_breakdowns,
    print_highlights,
    print_summary,
    save_json_output,
)


@pytest.fixture
def stats():
    records = [
        RawSwipeRecord("07/01/2025", "19:30", "In"),
        RawSwipeRecord("08/01/2025", "01:15", "Out"),
        RawSwipeRecord("09/01/2025", "10:00", "In"),
        RawSwipeRecord("09/01/2025", "10:05", "Out"),
    ]
    return process_library_stats(records, EngineConfig())


@pytest.mark.parametrize("minutes, expected", [
    (0, "0 min"),
    (45, "45 min"),
    (120, "2 h"),
    (125, "2 h 5 min"),
])
def test_format_duration(minutes, expected):
    assert format_duration(minutes) == expected


def test_format_minutes():
    assert format_minutes(125) == {"hours": 2, "mins": 5, "display": "2h 5m"}
    assert format_minutes(40) == {"hours": 0, "mins": 40, "display": "40m"}


class TestJsonOutput:
    def test_dates_serialised(self, stats):
        output = generate_json_output(stats)
        assert output["metadata"]["empty"] is False
        assert output["stats"]["longest_session_date"] == "2025-01-07"
        assert output["stats"]["latest_departure_post_midnight"] is True
        assert output["stats"]["top_sessions"][0]["start_hhmm"] == "19:30"

    def test_empty_snapshot(self):
        output = generate_json_output(ProcessedStats())
        assert output["metadata"]["empty"] is True
        assert output["stats"]["total_minutes"] == 0

    def test_save(self, stats, tmp_path):
        path = tmp_path / "out.json"
        save_json_output(generate_json_output(stats), str(path))
        saved = json.loads(path.read_text())
        assert saved["stats"]["total_minutes"] == 350


class TestConsoleOutput:
    def test_sections_print(self, stats, capsys):
        print_summary(stats)
        print_breakdowns(stats)
        print_highlights(stats)
        out = capsys.readouterr().out
        assert "LIBRARY RECAP" in out
        assert "5 h 50 min" in out
        assert "Busiest day: Tuesday" in out
        assert "No-seat sessions" in out
        assert "2025-01-07 19:30-01:15: 5h 45m" in out

    def test_empty_prints_no_data(self, capsys):
        print_summary(ProcessedStats())
        assert "No data for this period." in capsys.readouterr().out

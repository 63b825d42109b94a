"""Tests for engine configuration and term loading."""

from datetime import date

import pytest

from library_recap.config import (
    DEFAULT_TERMS,
    EngineConfig,
    TermDefinition,
    load_terms_yaml,
    parse_terms,
)


class TestEngineConfig:
    def test_defaults(self):
        config = EngineConfig()
        assert config.no_seat_max_minutes == 15.0
        assert config.merge_gap_minutes == 60.0
        assert config.debug is False

    @pytest.mark.parametrize("field", ["no_seat_max_minutes", "merge_gap_minutes"])
    @pytest.mark.parametrize("value", [-1, float("nan"), float("inf"), "60", True])
    def test_rejects_invalid_thresholds(self, field, value):
        with pytest.raises(ValueError):
            EngineConfig(**{field: value})

    def test_zero_thresholds_allowed(self):
        config = EngineConfig(no_seat_max_minutes=0, merge_gap_minutes=0)
        assert config.merge_gap_minutes == 0

    def test_from_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("engine:\n  merge_gap_minutes: 30\n  debug: true\n")
        config = EngineConfig.from_yaml(path)
        assert config.merge_gap_minutes == 30
        assert config.no_seat_max_minutes == 15.0
        assert config.debug is True

    def test_from_yaml_rejects_unknown_keys(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("engine:\n  gap: 30\n")
        with pytest.raises(TypeError):
            EngineConfig.from_yaml(path)

    def test_from_yaml_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            EngineConfig.from_yaml(tmp_path / "missing.yaml")


class TestTerms:
    def test_default_terms(self):
        assert [t.name for t in DEFAULT_TERMS] == ["Spring Term 2025", "Summer Term 2025", "Autumn Term 2025"]
        assert DEFAULT_TERMS[0].total_days == 77

    def test_term_validation(self):
        with pytest.raises(ValueError):
            TermDefinition("Backwards", date(2025, 2, 1), date(2025, 1, 1))
        with pytest.raises(ValueError):
            TermDefinition("", date(2025, 1, 1), date(2025, 2, 1))

    def test_contains_is_inclusive(self):
        term = TermDefinition("T", date(2025, 1, 1), date(2025, 1, 31))
        assert term.contains(date(2025, 1, 1))
        assert term.contains(date(2025, 1, 31))
        assert not term.contains(date(2025, 2, 1))

    def test_parse_terms_accepts_strings(self):
        terms = parse_terms([{"name": "T", "start": "2025-01-01", "end": "2025-01-31"}])
        assert terms == (TermDefinition("T", date(2025, 1, 1), date(2025, 1, 31)),)

    def test_parse_terms_missing_field(self):
        with pytest.raises(ValueError):
            parse_terms([{"name": "T", "start": "2025-01-01"}])

    def test_load_terms_yaml(self, tmp_path):
        path = tmp_path / "terms.yaml"
        path.write_text(
            "terms:\n"
            "  - name: Winter\n"
            "    start: 2025-01-06\n"
            "    end: 2025-03-14\n"
        )
        assert load_terms_yaml(path) == (TermDefinition("Winter", date(2025, 1, 6), date(2025, 3, 14)),)

    def test_load_terms_yaml_timestamps_become_dates(self, tmp_path):
        path = tmp_path / "terms.yaml"
        path.write_text(
            "terms:\n"
            "  - name: Winter\n"
            "    start: 2025-01-06 00:00:00\n"
            "    end: 2025-03-14 18:30:00\n"
        )
        assert load_terms_yaml(path) == (TermDefinition("Winter", date(2025, 1, 6), date(2025, 3, 14)),)

    def test_load_terms_yaml_falls_back_to_default(self, tmp_path):
        path = tmp_path / "terms.yaml"
        path.write_text("engine:\n  debug: false\n")
        assert load_terms_yaml(path) == DEFAULT_TERMS

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "terms.yaml"
        path.write_text("terms: [unclosed\n")
        with pytest.raises(ValueError):
            load_terms_yaml(path)

"""Tests for environment-driven settings."""

import pytest

from utils.config import CompressorSettings


def test_defaults(monkeypatch):
    """Unset variables give INFO, level 9 and no metrics."""
    for name in ("IMGC_LOG_LEVEL", "IMGC_PNG_COMPRESSION", "IMGC_REPORT_METRICS"):
        monkeypatch.delenv(name, raising=False)
    settings = CompressorSettings.from_env()
    assert settings == CompressorSettings(log_level="INFO", png_compression=9, report_metrics=False)


@pytest.mark.parametrize("raw, expected", [("3", 3), ("-1", 0), ("42", 9), ("fast", 9), ("", 9)])
def test_png_compression(monkeypatch, raw, expected):
    """Out-of-range levels are clamped, malformed ones fall back to 9."""
    monkeypatch.setenv("IMGC_PNG_COMPRESSION", raw)
    assert CompressorSettings.from_env().png_compression == expected


@pytest.mark.parametrize("raw, expected", [("debug", "DEBUG"), ("WARNING", "WARNING"), ("loud", "INFO")])
def test_log_level(monkeypatch, raw, expected):
    """Unknown level names fall back to INFO."""
    monkeypatch.setenv("IMGC_LOG_LEVEL", raw)
    assert CompressorSettings.from_env().log_level == expected


def test_report_metrics_flag(monkeypatch):
    monkeypatch.setenv("IMGC_REPORT_METRICS", "yes")
    assert CompressorSettings.from_env().report_metrics

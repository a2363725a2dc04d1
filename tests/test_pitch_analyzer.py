from __future__ import annotations

import logging

import numpy as np
import pytest

from yinpitch.note_helper import frequency_for_note
from yinpitch.pitch_analyzer import NO_RESULT, PitchAnalyzer


def _tone(freq: float, sample_rate: float = 44100, n: int = 2048, amp: float = 0.5, offset: float = 0.0) -> np.ndarray:
    t = np.arange(n) / sample_rate
    return amp * np.sin(2 * np.pi * freq * t) + offset


def test_in_tune_note_is_ok() -> None:
    analyzer = PitchAnalyzer()
    result = analyzer.process(_tone(frequency_for_note("A", 4)))
    assert result.frequency is not None
    assert (result.note.note, result.note.octave) == ("A", 4)
    assert abs(result.cents) < 5
    assert result.label == "OK"


def test_sharp_and_flat_labels() -> None:
    analyzer = PitchAnalyzer({"ok_cents": 5.0})
    sharp = analyzer.process(_tone(440.0 * 2 ** (30 / 1200)))
    flat = analyzer.process(_tone(440.0 * 2 ** (-30 / 1200)))
    assert sharp.note.note == "A" and sharp.label == "高い"
    assert flat.note.note == "A" and flat.label == "低い"
    assert 20 < sharp.cents < 40
    assert -40 < flat.cents < -20


def test_dc_offset_is_removed() -> None:
    analyzer = PitchAnalyzer()
    result = analyzer.process(_tone(220.0, offset=3.0))
    assert result.frequency is not None
    assert abs(result.frequency - 220.0) < 1.0


def test_int16_pcm_bytes() -> None:
    analyzer = PitchAnalyzer()
    pcm = (_tone(330.0, amp=12000.0)).astype("<i2").tobytes()
    result = analyzer.process(pcm)
    assert result.frequency is not None
    assert abs(result.frequency - 330.0) < 1.0
    assert result.note.note == "E"


def test_noise_gives_no_result(caplog) -> None:
    analyzer = PitchAnalyzer()
    noise = np.random.default_rng(99).uniform(-1.0, 1.0, 2048)
    with caplog.at_level(logging.DEBUG):
        result = analyzer.process(noise)
    assert result == NO_RESULT
    assert "no estimate" in caplog.text


def test_update_settings_rebuilds_processor() -> None:
    analyzer = PitchAnalyzer()
    old = analyzer.processor
    assert analyzer.update_settings({"ok_cents": 10.0}) is False
    assert analyzer.processor is old
    assert analyzer.update_settings({"sample_rate": 22050, "yin_threshold": 0.2}) is True
    assert analyzer.processor.sample_rate == 22050.0
    assert analyzer.processor.threshold == 0.2


@pytest.mark.parametrize("bad", [{"sample_rate": 0}, {"yin_threshold": float("nan")}, {"sample_rate": -1.0, "ok_cents": 20.0}])
def test_rejected_settings_leave_analyzer_unchanged(bad) -> None:
    analyzer = PitchAnalyzer()
    old_processor = analyzer.processor
    old_settings = dict(analyzer.settings)
    with pytest.raises(ValueError):
        analyzer.update_settings(bad)
    assert analyzer.processor is old_processor
    assert analyzer.settings == old_settings
    assert analyzer.settings["sample_rate"] == analyzer.processor.sample_rate


def test_match_frequency() -> None:
    analyzer = PitchAnalyzer({"nearest_note_window": 100.0})
    analyzer.set_tuning_frequencies({"E4": 329.63, "A2": 110.0})
    name, cents = analyzer.match_frequency(111.0)
    assert name == "A2"
    assert 0 < cents < 20
    assert analyzer.match_frequency(200.0) == (None, 0.0)
    assert analyzer.match_frequency(0.0) == (None, 0.0)

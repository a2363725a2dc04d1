"""
yinpitch: YIN アルゴリズムによる基本周波数推定と音名ユーティリティ。
"""
from yinpitch.yin_processor import YinProcessor, estimate_fundamental_frequency
from yinpitch.note_helper import Note, frequency_for_note, closest_note_to_frequency, difference_in_cents
from yinpitch.pitch_analyzer import PitchAnalyzer, AnalysisResult
from yinpitch.config_manager import ConfigManager
from yinpitch.utils.logger_manager import LoggerManager

__version__ = "1.0.0"

__all__ = [
    "YinProcessor",
    "estimate_fundamental_frequency",
    "Note",
    "frequency_for_note",
    "closest_note_to_frequency",
    "difference_in_cents",
    "PitchAnalyzer",
    "AnalysisResult",
    "ConfigManager",
    "LoggerManager",
]

# v1.0
import numpy as np
import math
import logging
from typing import Optional, Tuple, Dict, Any, NamedTuple, Union, Sequence

from yinpitch.yin_processor import YinProcessor, DEFAULT_THRESHOLD
from yinpitch.note_helper import Note, closest_note_to_frequency, difference_in_cents

logger = logging.getLogger(__name__)


class AnalysisResult(NamedTuple):
    frequency: Optional[float]
    note: Optional[Note]
    cents: Optional[float]
    label: str


NO_RESULT = AnalysisResult(frequency=None, note=None, cents=None, label="---")


class PitchAnalyzer:
    """
    1ブロック分の信号を解析するオーケストレーター。

    処理の流れ:
      1. 入力変換 (int16 PCM の bytes または実数配列)
      2. 直流成分の除去とピーク正規化
      3. YinProcessor による基本周波数推定
      4. 最も近い音名とセント値の算出
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.settings: Dict[str, Any] = {
            "sample_rate": 44100.0,
            "yin_threshold": DEFAULT_THRESHOLD,
            "ok_cents": 5.0,
            "nearest_note_window": 300.0
        }
        if config:
            self.settings.update(config)

        self.target_frequencies: Dict[str, float] = {}
        self.processor: YinProcessor = self._build_processor()

    def _build_processor(self, settings: Optional[Dict[str, Any]] = None) -> YinProcessor:
        settings = self.settings if settings is None else settings
        return YinProcessor(
            sample_rate=float(settings["sample_rate"]),
            threshold=float(settings["yin_threshold"])
        )

    def set_tuning_frequencies(self, frequencies: Dict[str, float]):
        self.target_frequencies = dict(frequencies)

    def update_settings(self, new_config: Dict[str, Any]) -> bool:
        """設定を更新する。プロセッサの再生成が必要だった場合 True。"""
        rebuild_keys = ["sample_rate", "yin_threshold"]
        needs_rebuild = any(key in new_config for key in rebuild_keys)

        merged = {**self.settings, **new_config}
        if needs_rebuild:
            # 不正な値なら ValueError。その場合は settings も processor も変更しない
            self.processor = self._build_processor(merged)
            logger.info(
                f"PitchAnalyzer: processor rebuilt "
                f"(rate={self.processor.sample_rate}, threshold={self.processor.threshold})"
            )
        self.settings = merged
        return needs_rebuild

    def process(self, samples: Union[bytes, np.ndarray, Sequence[float]]) -> AnalysisResult:
        if isinstance(samples, (bytes, bytearray)):
            data = np.frombuffer(samples, dtype='<i2').astype(np.float64)
        else:
            data = np.asarray(samples, dtype=np.float64)

        freq = self.processor.process(self._prepare(data))
        if freq is None or not (math.isfinite(freq) and freq > 0):
            logger.debug(f"PitchAnalyzer: no estimate (freq={freq})")
            return NO_RESULT

        note = closest_note_to_frequency(freq)
        cents = difference_in_cents(note.frequency, freq)
        return AnalysisResult(frequency=freq, note=note, cents=cents, label=self._label(cents))

    def _prepare(self, data: np.ndarray) -> np.ndarray:
        if data.ndim != 1 or len(data) == 0:
            # 検証は YinProcessor 側に任せる
            return data
        return self._normalize_signal(data - np.mean(data))

    def _normalize_signal(self, data: np.ndarray) -> np.ndarray:
        max_val = np.max(np.abs(data))
        if max_val > 1e-6: return data / max_val
        return data

    def _label(self, cents: float) -> str:
        ok_cents = float(self.settings.get("ok_cents", 5.0))
        if abs(cents) < ok_cents:
            return "OK"
        return "高い" if cents > 0 else "低い"

    def match_frequency(self, freq: float) -> Tuple[Optional[str], float]:
        """登録済みターゲット (弦など) のうち最も近いものと、そのセント差を返す。"""
        if not (freq > 0): return None, 0.0

        best_match_name = None
        min_diff_cents = float('inf')

        for name, base_freq in self.target_frequencies.items():
            if base_freq <= 0:
                continue
            diff_cents = difference_in_cents(base_freq, freq)
            if abs(diff_cents) < abs(min_diff_cents):
                min_diff_cents = diff_cents
                best_match_name = name

        if best_match_name is None: return None, 0.0

        limit = float(self.settings.get("nearest_note_window", 300.0))
        if abs(min_diff_cents) > limit:
            return None, 0.0

        return best_match_name, min_diff_cents

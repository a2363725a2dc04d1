# v1.0
import configparser
import logging
import json
from pathlib import Path
from typing import Dict, List, Any, Union

logger = logging.getLogger(__name__)

class ConfigManager:
    """
    config.ini ファイルの読み書きを管理するクラス。
    PitchAnalyzer に渡す解析設定 (サンプリング周波数, YIN閾値, 判定幅) と
    チューニングプリセットを保持する。
    """
    SEC_SETTINGS = "SETTINGS"
    SEC_TUNINGS = "TUNING_PRESETS"

    DEFAULTS = {
        "sample_rate": "44100",
        "yin_threshold": "0.10",
        "ok_cents": "5.0",
        "nearest_note_window": "300.0",
    }

    def __init__(self, config_path: Union[str, Path] = "config.ini"):
        self.config_path = Path(config_path)
        self.config = configparser.ConfigParser()
        self._load_config()

    def _load_config(self):
        if self.config_path.exists():
            try:
                self.config.read(self.config_path, encoding="utf-8")
            except (configparser.Error, UnicodeDecodeError) as e:
                logger.error(f"Config read error: {e}")
                self.config = configparser.ConfigParser()

        if not self.config.has_section(self.SEC_SETTINGS):
            self._create_default_config()

    def _create_default_config(self):
        self._ensure_section(self.SEC_SETTINGS)
        self.config[self.SEC_SETTINGS] = dict(self.DEFAULTS)

        if not self.config.has_section(self.SEC_TUNINGS):
            self.config.add_section(self.SEC_TUNINGS)
            self.config[self.SEC_TUNINGS]["Standard"] = json.dumps([
                ["1弦 (E4)", 329.63],
                ["2弦 (B3)", 246.94],
                ["3弦 (G3)", 196.00],
                ["4弦 (D3)", 146.83],
                ["5弦 (A2)", 110.00],
                ["6弦 (E2)", 82.41]
            ])
        self._save_to_disk()

    def _save_to_disk(self):
        try:
            with open(self.config_path, "w", encoding="utf-8") as f:
                self.config.write(f)
        except OSError as e:
            logger.error(f"Config save error: {e}")

    def _ensure_section(self, section: str):
        if not self.config.has_section(section):
            self.config.add_section(section)

    # --- Analysis Settings ---
    def get_sample_rate(self) -> float:
        return self.config.getfloat(self.SEC_SETTINGS, "sample_rate", fallback=44100.0)

    def set_sample_rate(self, value: float):
        if value <= 0:
            raise ValueError(f"sample_rate must be positive (got {value})")
        self._ensure_section(self.SEC_SETTINGS)
        self.config[self.SEC_SETTINGS]["sample_rate"] = str(value)
        self._save_to_disk()

    def get_yin_threshold(self) -> float:
        return self.config.getfloat(self.SEC_SETTINGS, "yin_threshold", fallback=0.10)

    def set_yin_threshold(self, value: float):
        if not 0.0 < value < 1.0:
            raise ValueError(f"yin_threshold must be in (0, 1) (got {value})")
        self._ensure_section(self.SEC_SETTINGS)
        self.config[self.SEC_SETTINGS]["yin_threshold"] = f"{value:.2f}"
        self._save_to_disk()

    def get_ok_cents(self) -> float:
        return self.config.getfloat(self.SEC_SETTINGS, "ok_cents", fallback=5.0)

    def set_ok_cents(self, value: float):
        self._ensure_section(self.SEC_SETTINGS)
        self.config[self.SEC_SETTINGS]["ok_cents"] = str(value)
        self._save_to_disk()

    def get_nearest_note_window(self) -> float:
        return self.config.getfloat(self.SEC_SETTINGS, "nearest_note_window", fallback=300.0)

    def set_nearest_note_window(self, value: float):
        self._ensure_section(self.SEC_SETTINGS)
        self.config[self.SEC_SETTINGS]["nearest_note_window"] = str(value)
        self._save_to_disk()

    # --- Tuning Presets ---
    def get_tuning_presets(self) -> Dict[str, List[List[Any]]]:
        presets = {}
        if self.config.has_section(self.SEC_TUNINGS):
            for name, data_str in self.config.items(self.SEC_TUNINGS):
                try:
                    presets[name.capitalize()] = json.loads(data_str)
                except json.JSONDecodeError:
                    logger.warning(f"Skipping broken tuning preset: {name}")
                    continue
        return presets

    def get_tuning_frequencies(self, name: str) -> Dict[str, float]:
        """プリセット名から {ラベル: 周波数} を作成 (PitchAnalyzer.set_tuning_frequencies 用)"""
        rows = self.get_tuning_presets().get(name.capitalize(), [])
        return {str(row[0]): float(row[1]) for row in rows}

    def save_tuning(self, name: str, data: List[List[Any]]):
        self._ensure_section(self.SEC_TUNINGS)
        self.config[self.SEC_TUNINGS][name] = json.dumps(data)
        self._save_to_disk()

    def get_all_settings_dict(self) -> Dict[str, Any]:
        """PitchAnalyzerへ渡すための全設定辞書を作成"""
        return {
            "sample_rate": self.get_sample_rate(),
            "yin_threshold": self.get_yin_threshold(),
            "ok_cents": self.get_ok_cents(),
            "nearest_note_window": self.get_nearest_note_window()
        }

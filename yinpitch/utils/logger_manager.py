# v1.0
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List

PACKAGE_LOGGER = "yinpitch"

class LoggerManager:
    """
    yinpitch パッケージ用ロガーの出力先を設定するクラス。

    設定対象は "yinpitch" ロガーのみ。ルートロガーや利用側アプリが追加した
    ハンドラには触れない。再設定時は、前回ここで追加したハンドラだけを外して閉じる。
    """
    _installed: List[logging.Handler] = []

    @staticmethod
    def setup_logging(log_dir: Path, log_file: str = "yinpitch.log", level: int = logging.INFO) -> Path:
        """
        yinpitch ロガーにファイル出力 (1MB x 3世代ローテーション) と標準出力を追加し、
        ログファイルのパスを返します。
        推定失敗 (None) は DEBUG で出力されるため、確認したい場合は level=logging.DEBUG。
        """
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        log_path = log_dir / log_file

        formatter = logging.Formatter(
            fmt='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=1024 * 1024,
            backupCount=3,
            encoding='utf-8'
        )
        console_handler = logging.StreamHandler(sys.stdout)
        for handler in (file_handler, console_handler):
            handler.setFormatter(formatter)
            handler.setLevel(level)

        package_logger = logging.getLogger(PACKAGE_LOGGER)
        LoggerManager.teardown_logging()

        package_logger.setLevel(level)
        package_logger.addHandler(file_handler)
        package_logger.addHandler(console_handler)
        LoggerManager._installed = [file_handler, console_handler]

        package_logger.info(f"Logging to {log_path} (level={logging.getLevelName(level)})")
        return log_path

    @staticmethod
    def teardown_logging():
        """setup_logging で追加したハンドラを外して閉じる。"""
        package_logger = logging.getLogger(PACKAGE_LOGGER)
        for handler in LoggerManager._installed:
            package_logger.removeHandler(handler)
            handler.close()
        LoggerManager._installed = []

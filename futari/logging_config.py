"""ロギング設定モジュール

Cloud Run 環境ではJSON形式、ローカルではテキスト形式でログを出力する。

使い方:
    from futari.logging_config import setup_logging
    setup_logging()            # LOG_LEVEL に従う
    setup_logging("DEBUG")     # CLI の --verbose など明示指定

環境変数:
    LOG_LEVEL: ログレベル (DEBUG, INFO, WARNING, ERROR, CRITICAL) デフォルト: INFO
    K_SERVICE / CLOUD_RUN_JOB: Cloud Run 環境判定（自動設定される）
"""

import json
import logging
import os

_SEVERITIES = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})
_SOURCE_LOCATION = "logging.googleapis.com/sourceLocation"
_NOISY_LOGGERS = ("google.auth", "google.api_core", "urllib3", "grpc", "cachecontrol")


class CloudLoggingFormatter(logging.Formatter):
    """Cloud Logging互換のJSONフォーマッタ

    `severity` と `sourceLocation` は Cloud Logging の特別なフィールドとして解釈される。
    `extra={"extra_fields": {...}}` で渡した値（entity_kind 等）はトップレベルに展開する。
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict = {
            "severity": record.levelname if record.levelname in _SEVERITIES else "DEFAULT",
            "message": record.getMessage(),
            "logger": record.name,
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            _SOURCE_LOCATION: {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            },
        }
        if record.exc_info and record.exc_info[0]:
            log_entry["exception"] = self.formatException(record.exc_info)
        if hasattr(record, "extra_fields"):
            log_entry.update(record.extra_fields)
        return json.dumps(log_entry, ensure_ascii=False, default=str)


def setup_logging(level: str | None = None) -> None:
    """ログ設定を初期化する

    Args:
        level: ログレベル。None の場合は LOG_LEVEL 環境変数（デフォルト INFO）
    """
    log_level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    is_cloud = bool(os.getenv("K_SERVICE") or os.getenv("CLOUD_RUN_JOB"))

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level, logging.INFO))

    handler = logging.StreamHandler()
    if is_cloud:
        handler.setFormatter(CloudLoggingFormatter())
    else:
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )

    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    # Firestore / Firebase クライアントの通信ログは DEBUG 時以外は抑える
    quiet_level = logging.WARNING if root_logger.level > logging.DEBUG else logging.NOTSET
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(quiet_level)

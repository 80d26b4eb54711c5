"""로깅 설정 모듈 — JSON/텍스트 포맷터와 초기화.

Logging configuration — JSON formatter and one-time setup.
JSON lines in production, human-readable text in development.
setup_logging is called once from the FastAPI lifespan.
"""

import json
import logging
from datetime import datetime, timezone

# 로그 레코드에서 추출할 추가 필드 — Extra record attributes surfaced in JSON output
_EXTRA_KEYS: tuple[str, ...] = (
    "collection", "document_id", "operation", "method", "path",
    "status_code", "duration_ms",
)


class JSONFormatter(logging.Formatter):
    """로그를 JSON 한 줄로 출력하는 포맷터 (One JSON object per record)."""

    def format(self, record: logging.LogRecord) -> str:
        log: dict = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in _EXTRA_KEYS:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False)


def setup_logging(level: str = "INFO", fmt: str = "json") -> None:
    """루트 로거를 설정합니다.

    Configure the root logger.

    Args:
        level: 로그 레벨 이름 (Level name, e.g. "INFO")
        fmt: "json" 또는 "text" (Output format)
    """
    handler = logging.StreamHandler()
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s: %(message)s",
        ))
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))

# campaign_access/logging_config.py
import json
import logging
import sys

from campaign_access import config


class JsonFormatter(logging.Formatter):
    """로그 레코드를 한 줄짜리 JSON 문자열로 출력합니다."""
    def format(self, record):
        payload = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
        }
        # 요청 처리 중 주입된 경우에만 포함
        if hasattr(record, "request_id"):
            payload["request_id"] = record.request_id
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def setup_logging(level: str = None, json_output: bool = None):
    """
    루트 로거를 설정합니다. 애플리케이션 시작 시 한 번만 호출합니다.

    Args:
        level: 로그 레벨 이름 (기본값: config.LOG_LEVEL).
        json_output: True이면 JSON 포맷으로 출력 (기본값: config.LOG_JSON).
    """
    level = level or config.LOG_LEVEL
    json_output = config.LOG_JSON if json_output is None else json_output

    handler = logging.StreamHandler(sys.stdout)
    if json_output:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s"))

    root = logging.getLogger()
    root.setLevel(level)
    # 중복 출력을 막기 위해 기존 핸들러 제거
    root.handlers.clear()
    root.addHandler(handler)

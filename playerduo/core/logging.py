import logging
import json
import sys
from datetime import datetime, timezone
from typing import List, Optional

class JsonFormatter(logging.Formatter):
    """JSON 형식의 로그 포맷터"""

    def format(self, record: logging.LogRecord) -> str:
        """LogRecord를 JSON 문자열로 포맷"""
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "location": f"{record.pathname}:{record.lineno}",
            "function": record.funcName,
            "process": record.process,
            "thread": record.threadName
        }

        request_id = getattr(record, "request_id", None)
        if request_id:
            log_data["request_id"] = request_id

        if record.exc_info and record.exc_info[0] is not None:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": self.formatException(record.exc_info) if record.levelno >= logging.ERROR else None
            }
        elif record.exc_text:
            log_data["exception"] = {"message": record.exc_text}

        try:
            return json.dumps(log_data, ensure_ascii=False, default=str)
        except (TypeError, ValueError) as e:
            fallback_log = {
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "level": "ERROR",
                "message": f"Failed to serialize log record: {e}. Original message: {record.getMessage()}",
                "logger": "JsonFormatter.Error",
            }
            return json.dumps(fallback_log)

def configure_logging(
    log_level: str = "INFO",
    json_logs: bool = True,
    log_file: Optional[str] = None
):
    """애플리케이션 로깅 설정

    Args:
        log_level: 로그 레벨 문자열 (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_logs: JSON 형식 로그 사용 여부
        log_file: 로그 파일 경로 (None이면 콘솔만 사용)
    """
    log_level_int = getattr(logging, log_level.upper(), logging.INFO)

    # 기존 핸들러 제거 (설정 중복 방지)
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    root_logger.setLevel(log_level_int)

    handlers: List[logging.Handler] = [logging.StreamHandler()]

    if log_file:
        try:
            handlers.append(logging.FileHandler(log_file, encoding='utf-8'))
        except OSError as e:
            print(f"Warning: Could not create log file handler at {log_file}: {e}", file=sys.stderr)

    if json_logs:
        formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(
            '%(asctime)s [%(levelname)-8s] %(name)s:%(lineno)d - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

    for handler in handlers:
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    # 주요 라이브러리 로그 레벨 조정
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    logging.info(f"Logging configured: level={log_level}, json_logs={json_logs}, file={log_file or 'None'}")

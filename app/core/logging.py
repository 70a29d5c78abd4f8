"""
structlog 기반 로깅 설정

- 개발 환경: 컬러풀한 콘솔 출력
- 프로덕션 환경: JSON 형식 출력
- 컨텍스트 자동 주입: request_id
- GitHub 토큰 마스킹: 토큰 키는 항상, 값 패턴은 프로덕션에서
"""

import logging
import re
import sys

import structlog

from app.core.config import settings
from app.core.context import get_request_id

MASK = "***"

SENSITIVE_KEYS = frozenset({"token", "github_token", "authorization"})

SENSITIVE_PATTERNS = [
    (re.compile(r"(token=)[^&\s]+", re.IGNORECASE), rf"\1{MASK}"),
    (re.compile(r"(Bearer\s+)[^\s]+", re.IGNORECASE), rf"\1{MASK}"),
    (re.compile(r"\b(gh[pousr]_|github_pat_)[A-Za-z0-9_]+"), rf"\1{MASK}"),
]

NOISY_LOGGERS = ("httpcore", "httpx", "urllib3", "anyio")
UVICORN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


def _mask_sensitive_data(value: str) -> str:
    """민감한 정보 마스킹"""
    for pattern, replacement in SENSITIVE_PATTERNS:
        value = pattern.sub(replacement, value)
    return value


def add_context_processor(logger: logging.Logger, method_name: str, event_dict: dict) -> dict:
    """request_id를 로그에 자동 주입"""
    request_id = get_request_id()
    if request_id:
        event_dict["request_id"] = request_id
    return event_dict


def drop_sensitive_keys_processor(
    logger: logging.Logger, method_name: str, event_dict: dict
) -> dict:
    """토큰을 담는 키는 환경과 무관하게 가림"""
    for key in SENSITIVE_KEYS.intersection(event_dict):
        event_dict[key] = MASK
    return event_dict


def mask_sensitive_processor(logger: logging.Logger, method_name: str, event_dict: dict) -> dict:
    """프로덕션에서 문자열 값 안의 토큰 패턴 마스킹"""
    if not settings.is_production:
        return event_dict

    for key, value in event_dict.items():
        if isinstance(value, str):
            event_dict[key] = _mask_sensitive_data(value)

    return event_dict


def _shared_processors() -> list:
    processors: list = [
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        add_context_processor,
        drop_sensitive_keys_processor,
        mask_sensitive_processor,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    if settings.is_production:
        processors.append(structlog.processors.format_exc_info)
    return processors


def _renderer():
    if settings.is_production:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=True)


def setup_logging(level: str | None = None) -> None:
    """structlog 설정 초기화"""
    log_level = getattr(logging, (level or settings.log_level).upper(), logging.INFO)
    shared_processors = _shared_processors()

    structlog.configure(
        processors=shared_processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(),
            ],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level)

    # uvicorn 로그는 root 핸들러로 전달
    for logger_name in UVICORN_LOGGERS:
        logging.getLogger(logger_name).handlers.clear()

    for logger_name in NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """structlog 로거 반환"""
    return structlog.get_logger(name)

"""
Function/decorators.py

서비스 진입점의 실행 시간 측정 및 예외 기록을 위한 데코레이터 모듈입니다.
"""
from __future__ import annotations

import functools
import logging
import time
import traceback
from typing import Any, Callable, ParamSpec, TypeVar, Optional

P = ParamSpec("P")
R = TypeVar("R")


def _resolve_custom_logger(instance: Any) -> Optional[Any]:
    """
    인스턴스(self)가 `_logger` 또는 `logger` 속성으로 log 메서드를 가진 로거를 보유하면 반환합니다.
    """
    if instance is None:
        return None

    for attr in ("_logger", "logger"):
        candidate = getattr(instance, attr, None)
        if candidate is not None and hasattr(candidate, "log"):
            return candidate

    return None


def _emit(custom_logger: Optional[Any], msg: str, level: str) -> None:
    if custom_logger:
        custom_logger.log(msg, level=level)
    else:
        logging.getLogger(__name__).log(getattr(logging, level), msg)


def log_execution_time(func: Callable[P, R]) -> Callable[P, R]:
    """
    함수의 시작과 종료 시점을 기록하고 실행 시간을 측정하는 데코레이터입니다.
    """

    @functools.wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        custom_logger = _resolve_custom_logger(args[0] if args else None)
        func_name = func.__qualname__

        _emit(custom_logger, f"▶ [시작] {func_name}", "DEBUG")
        start_time = time.perf_counter()

        result = func(*args, **kwargs)

        elapsed = time.perf_counter() - start_time
        _emit(custom_logger, f"◀ [완료] {func_name} (소요 시간: {elapsed:.4f}초)", "INFO")
        return result

    return wrapper


def safe_run(func: Callable[P, R]) -> Callable[P, R]:
    """
    함수 실행 중 발생하는 예외의 Traceback을 로그에 기록하고 예외를 재전파합니다.

    Raises:
        Exception: 원본 함수에서 발생한 예외
    """

    @functools.wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        custom_logger = _resolve_custom_logger(args[0] if args else None)

        try:
            return func(*args, **kwargs)
        except Exception:
            log_msg = f"'{func.__qualname__}' 실행 중 치명적 오류 발생\n[Traceback]\n{traceback.format_exc()}"
            _emit(custom_logger, log_msg, "ERROR")
            raise

    return wrapper

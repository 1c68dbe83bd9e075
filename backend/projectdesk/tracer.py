"""
Follow-Through Tracer

Step-by-step tracing of the write path: primary commit, mirror call,
outbox record. Enabled with FOLLOW_THROUGH=true.
"""
import asyncio
import functools
import logging
from typing import Any, Callable
from datetime import datetime

from .config import settings

# Dedicated logger for follow-through tracing
tracer = logging.getLogger("followthrough")


def _preview(data: Any, max_len: int = 60) -> str:
    """Create a short preview of data."""
    if data is None:
        return "<None>"
    text = str(data)
    if len(text) > max_len:
        return f"{text[:max_len]}..."
    return text


def _format_step(icon: str, step: str, module: str, detail: str = "") -> str:
    timestamp = datetime.now().strftime("%H:%M:%S.%f")[:-3]
    base = f"[{timestamp}] {icon} [{module}] {step}"
    if detail:
        return f"{base}: {detail}"
    return base


def trace_step(module: str, description: str):
    """Log a general step in processing."""
    if not settings.follow_through:
        return
    tracer.info(_format_step("•", "STEP", module, description))


def trace_call(module: str, function: str, args_preview: str = ""):
    """Log that an outbound call is being made."""
    if not settings.follow_through:
        return
    detail = f"calling {function}()"
    if args_preview:
        detail += f" with {args_preview}"
    tracer.info(_format_step("▶", "CALL", module, detail))


def trace_result(module: str, function: str, success: bool, result_preview: Any = None):
    """Log the result of a call."""
    if not settings.follow_through:
        return
    status = "✓ SUCCESS" if success else "✗ FAILED"
    detail = f"{function}() {status}"
    if result_preview is not None:
        detail += f" => {_preview(result_preview)}"
    tracer.info(_format_step("◀", "RESULT", module, detail))


def traced(module: str):
    """
    Decorator to trace coroutine entry/exit.

    Usage:
        @traced("mirror.outbox")
        async def replay(...):
            ...
    """
    def decorator(func: Callable) -> Callable:
        if not asyncio.iscoroutinefunction(func):
            raise TypeError("traced() only wraps coroutine functions")

        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            if not settings.follow_through:
                return await func(*args, **kwargs)

            trace_call(module, func.__name__)
            try:
                result = await func(*args, **kwargs)
                trace_result(module, func.__name__, True, result)
                return result
            except Exception as e:
                trace_result(module, func.__name__, False, str(e))
                raise

        return wrapper

    return decorator


def setup_follow_through_logging():
    """Configure the follow-through logger."""
    if settings.follow_through:
        handler = logging.StreamHandler()
        handler.setLevel(logging.INFO)
        handler.setFormatter(logging.Formatter('%(message)s'))

        tracer.addHandler(handler)
        tracer.setLevel(logging.INFO)
        tracer.propagate = False  # Don't propagate to root logger

        tracer.info("\n" + "=" * 50)
        tracer.info("  FOLLOW-THROUGH MODE ENABLED")
        tracer.info("  Tracing primary and mirror writes...")
        tracer.info("=" * 50 + "\n")

import time
import logging
from functools import wraps
from typing import Optional

from flask import current_app, has_app_context

# Seuils par défaut hors contexte applicatif (scripts, tests de services)
DEFAULT_THRESHOLDS_MS = {
    'permission': 50.0,
    'general': 100.0,
}

performance_logger = logging.getLogger('performance')
permission_logger = logging.getLogger('performance.permissions')


def _threshold_ms(operation_type: str) -> float:
    default = DEFAULT_THRESHOLDS_MS.get(operation_type, DEFAULT_THRESHOLDS_MS['general'])
    if not has_app_context():
        return default
    key = 'PERMISSION_QUERY_THRESHOLD_MS' if operation_type == 'permission' else 'SLOW_QUERY_THRESHOLD_MS'
    return current_app.config.get(key, default)


def performance_monitor(operation_name: Optional[str] = None,
                        log_threshold_ms: Optional[float] = None,
                        operation_type: str = "general"):
    """
    Log a warning when the decorated call is slower than its threshold.

    Permission checks log on `performance.permissions` against
    PERMISSION_QUERY_THRESHOLD_MS, everything else on `performance` against
    SLOW_QUERY_THRESHOLD_MS, unless `log_threshold_ms` is given.
    """
    logger = permission_logger if operation_type == "permission" else performance_logger

    def decorator(func):
        op_name = operation_name or f"{func.__module__}.{func.__name__}"

        @wraps(func)
        def wrapper(*args, **kwargs):
            threshold = log_threshold_ms if log_threshold_ms is not None else _threshold_ms(operation_type)
            start_time = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                logger.error(f"{op_name} failed after {(time.perf_counter() - start_time) * 1000:.2f}ms: {e}")
                raise

            duration_ms = (time.perf_counter() - start_time) * 1000
            if duration_ms >= threshold:
                logger.warning(f"SLOW {op_name}: {duration_ms:.2f}ms (threshold {threshold}ms)")
            else:
                logger.debug(f"{op_name}: {duration_ms:.2f}ms")
            return result

        return wrapper
    return decorator


def log_permission_decision(user_id: Optional[int], resource: str, required: str,
                            granted: bool, rule: str):
    """
    Log which rule decided an access check.

    The rule is only written to the log, never returned to the caller.
    """
    permission_logger.debug(
        f"PERMISSION_DECISION - user_id: {user_id}, resource: {resource}, "
        f"required: {required}, granted: {granted}, rule: {rule}"
    )

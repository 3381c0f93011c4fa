"""
Модуль: `utils/rate_limit.py`.
Назначение: Ограничение частоты попыток входа и регистрации.
"""

import time
from collections import defaultdict, deque
from threading import Lock

from flask import current_app, request


class InMemoryRateLimiter:
    """Простой in-memory rate limiter (sliding window) в пределах одного процесса.

    Ключ удаляется, как только в его окне не остаётся событий; ключи, к
    которым больше не обращаются, вычищаются периодическим обходом.
    """

    def __init__(self, sweep_interval_seconds: int = 60):
        self._events = defaultdict(deque)
        self._windows = {}
        self._lock = Lock()
        self._sweep_interval = sweep_interval_seconds
        self._last_sweep = time.monotonic()

    def is_allowed(self, key: str, limit: int, window_seconds: int) -> bool:
        """Учитывает попытку и возвращает False, если лимит окна исчерпан."""
        if limit <= 0 or window_seconds <= 0:
            return False

        now = time.monotonic()

        with self._lock:
            if now - self._last_sweep >= self._sweep_interval:
                self._sweep(now)

            self._windows[key] = window_seconds
            events = self._prune(key, now)
            if events is not None and len(events) >= limit:
                return False

            self._events[key].append(now)
            return True

    def _prune(self, key: str, now: float):
        """Отбрасывает события вне окна; пустой ключ удаляется целиком."""
        events = self._events.get(key)
        if events is None:
            return None

        cutoff = now - self._windows.get(key, 0)
        while events and events[0] <= cutoff:
            events.popleft()
        if events:
            return events

        del self._events[key]
        return None

    def _sweep(self, now: float) -> None:
        """Обходит все ключи и удаляет те, у которых окно опустело."""
        for key in list(self._events):
            self._prune(key, now)
        for key in [key for key in self._windows if key not in self._events]:
            del self._windows[key]
        self._last_sweep = now


def get_client_identifier() -> str:
    """Возвращает IP клиента с учетом X-Forwarded-For."""
    forwarded_for = request.headers.get("X-Forwarded-For", "")
    if forwarded_for:
        first_ip = forwarded_for.split(",", 1)[0].strip()
        if first_ip:
            return first_ip
    return request.remote_addr or "unknown"


def is_rate_limited(bucket: str, limit: int, window_seconds: int, identity: str | None = None) -> bool:
    """True, если лимит для пары (bucket, identity) исчерпан."""
    if not current_app.config.get("RATE_LIMIT_ENABLED", True):
        return False

    limiter = current_app.extensions.get("rate_limiter")
    if limiter is None:
        return False

    rate_identity = identity or get_client_identifier()
    rate_key = f"{bucket}:{rate_identity}"
    if limiter.is_allowed(rate_key, limit, window_seconds):
        return False

    current_app.logger.warning("Превышен лимит запросов %s", rate_key)
    return True

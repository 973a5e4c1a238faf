from __future__ import annotations

from contextvars import ContextVar, Token
from dataclasses import dataclass
import logging
import time
from typing import Optional

_request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def set_request_id(request_id: Optional[str]) -> Token[str]:
    return _request_id_var.set(request_id or "")


def reset_request_id(token: Token[str]) -> None:
    _request_id_var.reset(token)


def get_request_id_value(default: str = "no-request") -> str:
    value = _request_id_var.get()
    return value if value else default


class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = get_request_id_value()
        return True


def attach_request_id_filter(logger: Optional[logging.Logger] = None) -> None:
    target = logger or logging.getLogger()
    for handler in target.handlers:
        handler.addFilter(RequestIdFilter())


@dataclass(frozen=True)
class Deadline:
    """
    Request-scoped time budget handed down to datastore calls.

    Built once per request; every phase asks how much is left and
    stops early instead of starting work the caller has given up on.
    """

    expires_at: float

    @classmethod
    def after_ms(cls, budget_ms: int) -> "Deadline":
        return cls(expires_at=time.monotonic() + budget_ms / 1000.0)

    def remaining_ms(self) -> int:
        return max(0, int((self.expires_at - time.monotonic()) * 1000))

    @property
    def expired(self) -> bool:
        return time.monotonic() >= self.expires_at

# Filename: errors.py

import re


class WatcherError(Exception):
    """Base class for every error raised inside the detection pipeline."""


class DecodeError(WatcherError):
    """Malformed or truncated binary metadata."""

    TRUNCATED = "truncated"
    MALFORMED = "malformed"

    def __init__(self, reason: str, message: str = ""):
        self.reason = reason
        super().__init__(message or reason)


class NotFoundError(WatcherError):
    """Missing account, transaction or signature."""


class RateLimitError(WatcherError):
    """Upstream provider answered with a throttling response."""


class TransientNetworkError(WatcherError):
    """RPC, HTTP or store failure that is worth logging and skipping."""


RATE_LIMIT_STATUS = 429
_STATUS_429 = re.compile(r"\b429\b")


def _status_code(error: BaseException):
    response = getattr(error, "response", None)
    return getattr(response, "status_code", None) if response is not None else None


def is_rate_limit_error(error: BaseException) -> bool:
    """
    True for throttling responses. Errors already classified by the chain
    client are trusted as-is: their messages carry addresses and signatures,
    which may contain "429" by chance.
    """
    if isinstance(error, RateLimitError):
        return True
    if isinstance(error, WatcherError):
        return False

    current = error
    while current is not None:
        if _status_code(current) == RATE_LIMIT_STATUS:
            return True
        text = str(current)
        if "too many requests" in text.lower() or _STATUS_429.search(text):
            return True
        current = current.__cause__ or current.__context__
    return False

"""Exceptions raised below the inbound handler boundary."""

from typing import Any


class MaildropError(Exception):
    """Base exception for maildrop."""

    def __init__(self, message: str, **context: Any) -> None:
        self.message = message
        self.context = context
        super().__init__(message)

    def __str__(self) -> str:
        if self.context:
            context_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({context_str})"
        return self.message


class ConfigurationError(MaildropError):
    """Required configuration is missing at startup."""


class MultipartParseError(MaildropError):
    """Request body could not be decoded as multipart/form-data."""


class StoreWriteError(MaildropError):
    """Object store rejected or failed an attachment write."""

    def __init__(self, key: str, bucket: str, reason: str) -> None:
        self.key = key
        self.bucket = bucket
        super().__init__(f"Failed to store attachment: {reason}", key=key, bucket=bucket)

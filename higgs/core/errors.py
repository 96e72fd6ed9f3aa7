"""Exception hierarchy for the static data loader."""

from typing import Optional


class HiggsError(Exception):
    """Base class for all loader errors."""


class ConfigError(HiggsError):
    """Configuration is missing or invalid."""


class FetchError(HiggsError):
    """A logical fetch against ESI could not be completed."""

    def __init__(self, url: str, message: str):
        super().__init__(message)
        self.url = url


class RetryLimitExceeded(FetchError):
    """The retry budget for a URL was exhausted."""

    def __init__(
        self,
        url: str,
        attempts: int,
        last_error: Optional[BaseException] = None,
        last_status: Optional[int] = None,
    ):
        if last_error is not None:
            reason = f"{type(last_error).__name__}: {last_error}"
        elif last_status is not None:
            reason = f"HTTP {last_status}"
        else:
            reason = "no attempts made"
        super().__init__(
            url, f"Max retries exceeded for url: {url} after {attempts} attempts; {reason}"
        )
        self.attempts = attempts
        self.last_error = last_error
        self.last_status = last_status


class DecodeError(HiggsError):
    """A response body did not match the expected shape."""

    def __init__(self, url: str, body: bytes, message: str):
        super().__init__(message)
        self.url = url
        self.body = body


class ListDecodeError(DecodeError):
    """An identifier list page could not be decoded."""


class RecordDecodeError(DecodeError):
    """A detail record could not be decoded."""


class StoreError(HiggsError):
    """The store rejected an operation for a reason other than a duplicate key."""


class StageFailedError(HiggsError):
    """A crawl stage failed in a way that stops the snapshot run.

    ``result`` holds the partial crawl result when the pipeline raised it.
    """

    def __init__(self, stage: str, message: str, cause: Optional[BaseException] = None):
        super().__init__(f"Stage '{stage}' failed: {message}")
        self.stage = stage
        self.cause = cause
        self.result = None

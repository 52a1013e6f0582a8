from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Dict, Literal, Optional, Sequence, Union
from urllib.parse import urlparse

import requests

from ..errors import FetchTimeout, PermanentFetchError, TransientNetworkError
from ..utils.logging import get_logger
from ..utils.pipeline_config import DEFAULT_USER_AGENT
from ..utils.retry import with_retries

logger = get_logger("civicnews.fetchers.http")

FailureKind = Literal["timeout", "http_error", "network_error", "invalid_url", "circuit_open"]


@dataclass(slots=True)
class FetchSuccess:
    url: str
    content: bytes
    status: int = 200
    attempts: int = 1

    @property
    def ok(self) -> bool:
        return True


@dataclass(slots=True)
class FetchFailure:
    url: str
    kind: FailureKind
    status: Optional[int] = None
    detail: str = ""
    attempts: int = 0

    @property
    def ok(self) -> bool:
        return False


FetchResult = Union[FetchSuccess, FetchFailure]


def _validated_url(url: str) -> str:
    parsed = urlparse(url or "")
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise PermanentFetchError(f"Invalid URL for HTTP fetch: {url!r}", url=url or "")
    return url


class HttpFetcher:
    """GET with a timeout ceiling and a retry policy for transient failures.

    5xx responses and connection errors are retried once per entry in
    ``retry_delays``. 4xx responses, malformed URLs and timeouts are not.
    ``fetch`` never raises; it returns ``FetchSuccess`` or ``FetchFailure``.
    """

    def __init__(
        self,
        *,
        timeout: float = 10.0,
        user_agent: str = DEFAULT_USER_AGENT,
        retry_delays: Sequence[float] = (0.5, 2.0),
        get: Optional[Callable[..., requests.Response]] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.timeout = timeout
        self.headers: Dict[str, str] = {"User-Agent": user_agent}
        self.retry_delays = tuple(retry_delays)
        self._get = get or requests.get
        self._sleep = sleep

    def _get_once(self, url: str) -> FetchSuccess:
        try:
            resp = self._get(url, headers=self.headers, timeout=self.timeout)
        except requests.Timeout as exc:
            raise FetchTimeout(f"Timed out after {self.timeout}s: {exc}", url=url) from exc
        except (requests.exceptions.InvalidURL, requests.exceptions.MissingSchema, requests.exceptions.InvalidSchema) as exc:
            raise PermanentFetchError(f"Malformed URL: {exc}", url=url) from exc
        except requests.RequestException as exc:
            raise TransientNetworkError(f"Network error: {exc}", url=url) from exc

        status = resp.status_code
        if status >= 500:
            raise TransientNetworkError(f"HTTP {status}", url=url, status=status)
        if status >= 400:
            raise PermanentFetchError(f"HTTP {status}", url=url, status=status)
        return FetchSuccess(url=url, content=resp.content or b"", status=status)

    def fetch(self, url: str) -> FetchResult:
        attempts = 0

        def _attempt() -> FetchSuccess:
            nonlocal attempts
            attempts += 1
            return self._get_once(url)

        try:
            _validated_url(url)
            result = with_retries(
                _attempt,
                delays=self.retry_delays,
                retry_on=(TransientNetworkError,),
                sleep=self._sleep,
                label=f"GET {url}",
            )
        except FetchTimeout as exc:
            logger.warning("Timeout fetching %s: %s", url, exc)
            return FetchFailure(url=url, kind="timeout", detail=str(exc), attempts=attempts)
        except PermanentFetchError as exc:
            kind: FailureKind = "http_error" if exc.status else "invalid_url"
            logger.warning("Permanent failure fetching %s: %s", url, exc)
            return FetchFailure(url=url, kind=kind, status=exc.status, detail=str(exc), attempts=attempts)
        except TransientNetworkError as exc:
            kind = "http_error" if exc.status else "network_error"
            logger.warning("Giving up on %s after %d attempt(s): %s", url, attempts, exc)
            return FetchFailure(url=url, kind=kind, status=exc.status, detail=str(exc), attempts=attempts)

        result.attempts = attempts
        logger.debug("Fetched %s (%d bytes, %d attempt(s))", url, len(result.content), attempts)
        return result

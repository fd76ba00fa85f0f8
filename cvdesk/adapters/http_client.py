"""Shared HTTP transport utilities for REST adapters.

This module provides a thin wrapper around ``requests.Session`` so adapter
implementations can share timeout policy, optional retry behavior, API-key
header construction, and transport error classification.

Dependencies:
    - ``requests`` for network I/O.
    - ``urllib3`` (shipped with ``requests``) to encode multipart bodies that
      report upload progress while they are streamed.

Call context:
    - Constructed by ``ParserRestAdapter``, ``SearchRestAdapter`` and
      ``ContactListRestAdapter``.
    - Used only inside adapter layer methods; use cases interact through ports.
    - Methods block; use cases run them on an executor thread.
"""

from __future__ import annotations

import io
import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Sequence, Tuple, Union

import requests
from requests import exceptions as req_exc
from urllib3.filepost import encode_multipart_formdata

from cvdesk.adapters.api_errors import ApiTimeoutError, ApiUnreachableError

LOGGER = logging.getLogger(__name__)

Params = Union[Dict[str, Any], Sequence[Tuple[str, Any]]]


@dataclass
class HttpConfig:
    """Timeout and retry configuration for adapter HTTP calls.

    Attributes:
        request_timeout_s: Default timeout in seconds for JSON API calls.
        search_timeout_s: Timeout in seconds for keyword searches.
        upload_timeout_s: Timeout in seconds for resume uploads.
        retries: Retry attempts after the initial request. Defaults to ``0``:
            timeouts surface to the operator instead of being retried.
    """
    request_timeout_s: float = 10
    search_timeout_s: float = 15
    upload_timeout_s: float = 15
    retries: int = 0


class ProgressBody(io.BytesIO):
    """In-memory request body that reports bytes handed to the socket.

    ``http.client`` reads file-like bodies in blocks, so every ``read`` call is
    one progress tick.
    """

    def __init__(
        self, data: bytes, on_progress: Optional[Callable[[int, int], None]] = None
    ) -> None:
        super().__init__(data)
        self._total = len(data)
        self._on_progress = on_progress

    def __len__(self) -> int:
        return self._total

    def read(self, size: Optional[int] = -1) -> bytes:
        chunk = super().read(-1 if size is None else size)
        if chunk and self._on_progress is not None:
            self._on_progress(self.tell(), self._total)
        return chunk


class RetryingSession:
    """Shared requests wrapper with API-key headers and error classification.

    This class is intentionally transport-only. Callers provide endpoint URLs and
    decide how to map non-2xx responses into domain/use-case errors.
    """

    def __init__(self, api_key: Optional[str], cfg: HttpConfig) -> None:
        """Create a session.

        Args:
            api_key: API key value to place in ``X-API-Key`` headers, or ``None``.
            cfg: Shared timeout and retry settings.

        Side Effects:
            Creates a persistent ``requests.Session`` object.
        """
        self.session = requests.Session()
        self.api_key = api_key
        self.cfg = cfg

    def _headers(
        self, accept: str = "application/json", content_type: Optional[str] = None
    ) -> Dict[str, str]:
        """Build request headers for adapter calls."""
        headers = {"Accept": accept}
        if self.api_key:
            headers["X-API-Key"] = self.api_key
        if content_type:
            headers["Content-Type"] = content_type
        return headers

    def get(
        self,
        url: str,
        *,
        params: Optional[Params] = None,
        timeout: Optional[float] = None,
    ) -> requests.Response:
        """Send a GET request.

        Raises:
            ApiTimeoutError: If the bounded wait expires.
            ApiUnreachableError: If the endpoint cannot be reached.
        """
        return self._send(
            "GET",
            url,
            params=params,
            headers=self._headers(),
            timeout=timeout or self.cfg.request_timeout_s,
        )

    def post(
        self,
        url: str,
        *,
        json_body: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> requests.Response:
        """Send a JSON POST request.

        Side Effects:
            Serializes ``json_body`` with ``json.dumps`` before sending.
        """
        data = None if json_body is None else json.dumps(json_body)
        content_type = "application/json" if json_body is not None else None
        return self._send(
            "POST",
            url,
            data=data,
            headers=self._headers(content_type=content_type),
            timeout=timeout or self.cfg.request_timeout_s,
        )

    def post_multipart(
        self,
        url: str,
        *,
        field: str,
        filename: str,
        content: bytes,
        mime_type: str = "application/octet-stream",
        on_progress: Optional[Callable[[int, int], None]] = None,
        timeout: Optional[float] = None,
    ) -> requests.Response:
        """Send a single-file multipart POST, reporting upload progress.

        Args:
            url: Absolute endpoint URL.
            field: Form field name of the file part.
            filename: File name sent in the part headers.
            content: File bytes.
            mime_type: Content type of the file part.
            on_progress: Optional ``(sent, total)`` callback invoked on the
                calling thread while the body is streamed.
            timeout: Optional timeout override in seconds.
        """
        body, content_type = encode_multipart_formdata(
            {field: (filename, content, mime_type)}
        )

        def _attempt_body() -> ProgressBody:
            # Each attempt needs a fresh stream positioned at offset 0.
            return ProgressBody(body, on_progress)

        return self._send(
            "POST",
            url,
            data=_attempt_body,
            headers=self._headers(content_type=content_type),
            timeout=timeout or self.cfg.upload_timeout_s,
        )

    def _send(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        """Issue one request, classifying transport failures.

        Call Chain:
            ``get``/``post``/``post_multipart`` -> ``_send`` ->
            ``requests.Session.request``.
        """
        context = f"{method} {url}"
        body_factory = kwargs.get("data")
        last_err: Optional[Exception] = None
        attempts = max(0, int(self.cfg.retries)) + 1
        for attempt in range(attempts):
            if callable(body_factory):
                kwargs["data"] = body_factory()
            try:
                return self.session.request(method, url, **kwargs)
            # ConnectTimeout derives from both; it is reported as a timeout.
            except req_exc.Timeout:
                last_err = ApiTimeoutError(f"Timeout contacting {url}", context=context)
            except req_exc.ConnectionError:
                last_err = ApiUnreachableError(
                    f"Cannot connect to {url}", endpoint=url, context=context
                )
            LOGGER.debug("%s failed (attempt %d/%d): %s", context, attempt + 1, attempts, last_err)
        raise last_err


__all__ = ["HttpConfig", "ProgressBody", "RetryingSession"]

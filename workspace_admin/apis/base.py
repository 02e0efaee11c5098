"""Shared request plumbing for the Admin SDK clients."""

from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable, Iterator, Optional

import google_auth_httplib2
import httplib2
from googleapiclient.errors import HttpError

from workspace_admin.config import WorkspaceAdminConfig
from workspace_admin.errors import is_retryable

logger = logging.getLogger("workspace_admin.api")


class BaseAdminAPI:
    """Holds a discovery Resource and runs its requests with bounded retries.

    httplib2 is not thread-safe, so when credentials are available each
    worker thread executes requests over its own authorized transport.
    """

    API_NAME: str = ""

    def __init__(
        self,
        service: Any,
        config: WorkspaceAdminConfig,
        credentials: Any = None,
    ) -> None:
        self.service = service
        self.config = config
        self.admin_email = config.admin_email
        self.domain = config.domain
        self._credentials = credentials
        self._local = threading.local()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(admin_email={self.admin_email!r})"

    # ------------------------------------------------------------------
    # Request execution / retry helpers
    # ------------------------------------------------------------------

    def _thread_http(self) -> Optional[google_auth_httplib2.AuthorizedHttp]:
        if self._credentials is None:
            return None
        http = getattr(self._local, "http", None)
        if http is None:
            http = google_auth_httplib2.AuthorizedHttp(
                self._credentials, http=httplib2.Http()
            )
            self._local.http = http
        return http

    def _backoff_sleep(self, attempt: int) -> None:
        """Exponential backoff sleep, capped at backoff_max_seconds."""
        delay = self.config.backoff_base_seconds * (2 ** attempt)
        delay = min(delay, self.config.backoff_max_seconds)
        logger.warning(
            "Backing off %.1fs (attempt %d)", delay, attempt + 1,
            extra={"api": self.API_NAME, "attempt": attempt + 1},
        )
        time.sleep(delay)

    def _execute(self, request: Any, description: str = "request") -> Any:
        """Execute ``request``, retrying rate-limit and server errors.

        Raises the last HttpError once max_retries is exhausted; errors that
        are not retryable propagate on the first attempt.
        """
        http = self._thread_http()
        attempt = 0
        while True:
            try:
                if http is not None:
                    return request.execute(http=http)
                return request.execute()
            except HttpError as exc:
                if not is_retryable(exc) or attempt >= self.config.max_retries:
                    if attempt:
                        logger.error(
                            "%s failed after %d retries: %s", description, attempt, exc,
                            extra={"api": self.API_NAME, "attempt": attempt},
                        )
                    raise
                logger.warning(
                    "%s failed, retrying: %s", description, exc,
                    extra={"api": self.API_NAME, "attempt": attempt + 1},
                )
                self._backoff_sleep(attempt)
                attempt += 1

    def _paginate(
        self,
        request: Any,
        next_request: Callable[[Any, Any], Any],
        key: str,
        description: str = "list",
    ) -> Iterator[list[dict]]:
        """Yield one page of ``key`` items per response until no next page.

        ``next_request`` is the collection's generated ``*_next`` method.
        """
        while request is not None:
            response = self._execute(request, description)
            yield response.get(key) or []
            request = next_request(request, response)

"""
Base provider client: one GET per call over a shared requests session.

All providers inherit from BaseProvider and get:
- A lazily created requests.Session (or one shared by the application)
- Transport failures and bad status codes mapped to UpstreamTransportError
- Normalizer failures on malformed payloads mapped the same way
- Structured logging

No retry or backoff: each call is fire-once.
"""

import abc
from typing import Any, Callable, Optional

import requests

from city_explorer.config import ProviderSettings, settings
from city_explorer.logging_config import get_logger
from city_explorer.exceptions import UpstreamTransportError

logger = get_logger(__name__)


class BaseProvider(abc.ABC):
    """
    Abstract base class for all upstream providers.

    Subclasses must implement:
        - search(...) -> normalized records
        - NAME: str: Provider name used in logs and error details
    """

    NAME: str = ""  # Override in subclasses

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        config: Optional[ProviderSettings] = None,
    ):
        self.config = config or settings.providers
        self._session = session
        self._owns_session = session is None

    @abc.abstractmethod
    def search(self, *args, **kwargs) -> Any:
        """Fetch from the provider and return normalized records."""
        ...

    # ─── HTTP ───────────────────────────────────────────────

    @property
    def session(self) -> requests.Session:
        """Lazy-init a requests session."""
        if self._session is None:
            self._session = requests.Session()
        return self._session

    def fetch(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """
        Issue one GET and return the decoded JSON body.

        Raises:
            UpstreamTransportError: On network errors, timeouts, non-2xx
                responses and bodies that are not JSON.
        """
        logger.debug("%s GET %s", self.NAME, url)
        try:
            response = self.session.get(
                url,
                params=params,
                headers=headers,
                timeout=self.config.provider_timeout,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            status = getattr(getattr(e, "response", None), "status_code", None)
            logger.error("%s request failed (status=%s): %s", self.NAME, status, e)
            raise UpstreamTransportError(
                message=f"{self.NAME} request failed: {e}",
                details={"provider": self.NAME, "status": status},
            ) from e

        try:
            return response.json()
        except ValueError as e:
            logger.error("%s returned a non-JSON body", self.NAME)
            raise UpstreamTransportError(
                message=f"{self.NAME} returned an unreadable response",
                details={"provider": self.NAME, "status": response.status_code},
            ) from e

    def parse(self, normalizer: Callable[..., Any], payload: Any, *args, **kwargs) -> Any:
        """Run a normalizer, reporting malformed payloads as transport errors."""
        try:
            return normalizer(payload, *args, **kwargs)
        except (KeyError, IndexError, TypeError, AttributeError, ValueError) as e:
            logger.error("%s payload has an unexpected shape: %r", self.NAME, e)
            raise UpstreamTransportError(
                message=f"{self.NAME} returned an unexpected payload: {e!r}",
                details={"provider": self.NAME},
            ) from e

    # ─── Context Manager ────────────────────────────────────

    def close(self) -> None:
        """Close the session if this provider created it."""
        if self._owns_session and self._session is not None:
            self._session.close()
            self._session = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

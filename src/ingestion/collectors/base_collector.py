"""Abstract base class for all upstream price collectors.

Collectors are thin HTTP clients around free or keyed JSON price APIs.
They never raise to callers for network, HTTP or payload problems: those
are logged and reported as ``None`` so the price service can move on to the
next source in its fallback chain.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from src.shared.config import Config
from src.shared.utils import setup_logger


class BaseCollector(ABC):
    """Base class for all price collectors.

    Subclasses must define:
        SOURCE_NAME (str): identifier reported with every price (e.g. "yahoo").

    Subclasses must implement:
        health_check(): verify the source is reachable.

    The _get_json() helper handles retries, timeouts and JSON decoding.
    """

    SOURCE_NAME: str  # e.g. "yahoo", "frankfurter"

    MAX_RETRIES = 2
    RETRY_BACKOFF = 0.5
    DEFAULT_HEADERS: dict[str, str] = {}

    def __init__(
        self,
        session: requests.Session | None = None,
        timeout: int | None = None,
        log_file: Path | None = None,
    ) -> None:
        """Initialize the collector.

        Args:
            session: HTTP session to use (a retrying session when omitted).
            timeout: Request timeout in seconds (default: Config.REQUEST_TIMEOUT).
            log_file: Optional path for file-based logging.
        """
        self._session = session or self._create_session()
        self.timeout = timeout or Config.REQUEST_TIMEOUT
        self.logger = setup_logger(self.__class__.__name__, log_file)

    @abstractmethod
    def health_check(self) -> bool:
        """Verify the price source is reachable and responding.

        Returns:
            True if the source is available, False otherwise.
        """
        ...

    # ------------------------------------------------------------------
    # Private: HTTP layer
    # ------------------------------------------------------------------

    def _create_session(self) -> requests.Session:
        session = requests.Session()
        retry = Retry(
            total=self.MAX_RETRIES,
            backoff_factor=self.RETRY_BACKOFF,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["GET"],
        )
        adapter = HTTPAdapter(max_retries=retry)
        session.mount("https://", adapter)
        session.mount("http://", adapter)
        return session

    def _get_json(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any | None:
        """GET ``url`` and decode the JSON body.

        Returns:
            Decoded payload, or None on any network, HTTP or decoding failure.
        """
        self.logger.debug("GET %s", url)
        try:
            response = self._session.get(
                url,
                params=params,
                headers={**self.DEFAULT_HEADERS, **(headers or {})},
                timeout=self.timeout,
            )
            response.raise_for_status()
            return response.json()
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else "?"
            self.logger.error("%s returned HTTP %s", self.SOURCE_NAME, status)
        except requests.exceptions.RequestException as e:
            self.logger.error("%s request failed: %s", self.SOURCE_NAME, e)
        except ValueError as e:
            self.logger.error("%s returned invalid JSON: %s", self.SOURCE_NAME, e)
        return None

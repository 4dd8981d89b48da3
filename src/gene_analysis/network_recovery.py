"""Resilient HTTP fetching with bounded retries and relay fallback."""

import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple
from urllib.parse import quote

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .config import Config
from .error_handler import NetworkError, NotFoundError
from .logging_config import get_logger, LogTimer

logger = get_logger('network_recovery')

DEFAULT_HEADERS = {'Content-Type': 'application/json'}
USER_AGENT = 'gene-analysis-platform/1.0 (+https://github.com/gene-analysis-platform)'


@dataclass
class NetworkConfig:
    """Configuration for network operations."""
    timeout: float = 30.0
    max_attempts: int = 3
    retry_delay_ms: int = 1000
    connection_pool_size: int = 10

    @classmethod
    def from_config(cls, config: Config) -> 'NetworkConfig':
        return cls(
            timeout=float(config.api.timeout_seconds),
            max_attempts=config.api.retry_attempts,
            retry_delay_ms=config.api.retry_delay_ms,
        )


@dataclass
class GatewaySelector:
    """Prioritized relay list that remembers which relay last worked."""
    gateways: List[str] = field(default_factory=list)
    last_good: int = 0

    def __bool__(self) -> bool:
        return bool(self.gateways)

    def order(self) -> List[int]:
        """Gateway indices starting at the last-known-good one, wrapping around."""
        count = len(self.gateways)
        if count == 0:
            return []
        start = self.last_good % count
        return [(start + offset) % count for offset in range(count)]

    def mark_success(self, index: int) -> None:
        self.last_good = index

    def route(self, index: int, target_url: str) -> str:
        """Build the relay URL that forwards to target_url."""
        template = self.gateways[index]
        encoded = quote(target_url, safe='')
        if '{url}' in template:
            return template.replace('{url}', encoded)
        return f"{template}{encoded}"


def is_terminal(response: requests.Response) -> bool:
    """2xx responses and 404 end the retry loop."""
    return 200 <= response.status_code < 300 or response.status_code == 404


class ResilientSession:
    """HTTP session with bounded retries and relay fallback."""

    def __init__(self, config: Optional[NetworkConfig] = None,
                 selector: Optional[GatewaySelector] = None):
        """
        Initialize resilient session.

        Args:
            config: Network configuration
            selector: Relay gateways to fall back on; None disables relays
        """
        self.config = config or NetworkConfig()
        self.selector = selector if selector is not None else GatewaySelector()
        self.session = self._create_session()

    def _create_session(self) -> requests.Session:
        """Create a pooled session; retries are counted here, not by urllib3."""
        session = requests.Session()

        adapter = HTTPAdapter(
            pool_connections=self.config.connection_pool_size,
            pool_maxsize=self.config.connection_pool_size,
            max_retries=Retry(total=0, read=False)
        )
        session.mount("http://", adapter)
        session.mount("https://", adapter)
        session.headers.update({'User-Agent': USER_AGENT})

        return session

    def _delay(self, attempt: int) -> None:
        wait_time = attempt * self.config.retry_delay_ms / 1000.0
        if wait_time > 0:
            logger.debug(f"Waiting {wait_time:.1f}s before retry")
            time.sleep(wait_time)

    def _attempt_series(self,
                        method: str,
                        url: str,
                        headers: Dict[str, str],
                        body: Optional[Any],
                        max_attempts: int,
                        throttle: Optional[Callable[[], None]] = None) -> Tuple[Optional[requests.Response], Optional[int], str]:
        """
        Run up to max_attempts requests against one URL.

        throttle, if given, is called before every attempt.

        Returns:
            (terminal response or None, last status seen, last error message)
        """
        last_status = None
        last_message = ""

        for attempt in range(1, max_attempts + 1):
            if throttle is not None:
                throttle()
            try:
                with LogTimer(f"{method} {url} (attempt {attempt}/{max_attempts})", logger):
                    response = self.session.request(
                        method,
                        url,
                        headers=headers,
                        json=body,
                        timeout=self.config.timeout
                    )
            except requests.RequestException as e:
                last_status = None
                last_message = str(e) or type(e).__name__
                logger.debug(f"Attempt {attempt} for {url} raised {type(e).__name__}: {e}")
            else:
                if is_terminal(response):
                    return response, response.status_code, ""
                last_status = response.status_code
                last_message = f"HTTP {response.status_code}: {response.reason}"
                logger.debug(f"Attempt {attempt} for {url} returned {response.status_code}")

            if attempt < max_attempts:
                self._delay(attempt)

        return None, last_status, last_message

    def fetch_resilient(self,
                        url: str,
                        method: str = 'GET',
                        headers: Optional[Dict[str, str]] = None,
                        params: Optional[Dict[str, Any]] = None,
                        json: Optional[Any] = None,
                        max_attempts: Optional[int] = None,
                        selector: Optional[GatewaySelector] = None,
                        throttle: Optional[Callable[[], None]] = None) -> requests.Response:
        """
        Fetch a URL directly, then through relays, with bounded retries.

        Args:
            url: Target URL
            method: HTTP method (GET or POST)
            headers: Headers merged over the default Content-Type
            params: Query parameters, folded into the URL before relaying
            json: JSON body for POST requests
            max_attempts: Attempts per route (direct and each relay)
            selector: Relay selector; defaults to the session's own
            throttle: Called before every attempt, direct or relayed

        Returns:
            A 2xx or 404 response

        Raises:
            NetworkError: If every direct and relay attempt failed
        """
        attempts = max_attempts or self.config.max_attempts
        selector = selector if selector is not None else self.selector
        merged_headers = dict(DEFAULT_HEADERS)
        merged_headers.update(headers or {})
        target = requests.Request(method, url, params=params).prepare().url

        response, last_status, last_message = self._attempt_series(
            method, target, merged_headers, json, attempts, throttle
        )
        if response is not None:
            return response

        for index in selector.order():
            relay_url = selector.route(index, target)
            logger.info(f"Direct request to {target} failed, trying relay {index + 1}/{len(selector.gateways)}")
            response, status, message = self._attempt_series(
                method, relay_url, merged_headers, json, attempts, throttle
            )
            if response is not None:
                selector.mark_success(index)
                return response
            last_status, last_message = status, message

        raise NetworkError(
            f"Request to {target} failed: {last_message or 'no response'}",
            url=target,
            status=last_status
        )

    def get_json(self, url: str, **kwargs) -> Any:
        """
        GET a URL and decode its JSON body.

        Raises:
            NotFoundError: On HTTP 404
            NetworkError: If retries are exhausted or the body is not JSON
        """
        response = self.fetch_resilient(url, **kwargs)
        if response.status_code == 404:
            raise NotFoundError(f"No record at {response.url or url}")
        try:
            return response.json()
        except ValueError as e:
            raise NetworkError(f"Invalid JSON from {url}: {e}", url=url, status=response.status_code) from e

    def close(self):
        """Close the session."""
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

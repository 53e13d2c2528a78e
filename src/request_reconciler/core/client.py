import logging
import threading

import requests

from ..config import Config
from ..errors import TransportError
from ..models import HttpDetails, HttpRequest, HttpResponse

logger = logging.getLogger(__name__)


class HttpClient:
    def __init__(self, config: Config):
        self.config = config
        self._thread_local = threading.local()

    @property
    def session(self) -> requests.Session:
        """Accessor for the current thread's session."""
        return self._get_session()

    def _get_session(self) -> requests.Session:
        """Get or create a thread-local requests.Session."""
        if not hasattr(self._thread_local, "session"):
            self._thread_local.session = self._create_session()
        return self._thread_local.session

    def _create_session(self) -> requests.Session:
        session = requests.Session()
        session.verify = not self.config.insecure
        return session

    def send_request(
        self,
        method: str,
        url: str,
        body: str = "",
        headers: dict[str, list[str]] | None = None,
        skip_tls_verify: bool = False,
        cancel: threading.Event | None = None,
    ) -> HttpDetails:
        """
        Send an HTTP request and return the exchange.

        Non-2xx responses are returned like any other response; only a
        failure to complete the exchange raises.

        Args:
            method: HTTP method (GET, POST, PUT, DELETE).
            url: Fully resolved URL.
            body: Request body text; empty means no body.
            headers: Header values keyed by name.
            skip_tls_verify: Disable TLS verification for this request.
            cancel: Set by the caller to abandon the request before it is
                sent. It is checked once, before any I/O; a request already
                in flight runs until it completes or the configured
                (connect_timeout, timeout) pair expires.

        Returns:
            HttpDetails with the request sent and the response received.

        Raises:
            TransportError: On cancellation, timeout, or connection failure.
        """
        headers = headers or {}
        request = HttpRequest(
            method=method, url=url, body=body, headers=headers
        )

        if cancel is not None and cancel.is_set():
            raise TransportError(f"{method} {url}: request cancelled")

        logger.debug("Sending %s %s", method, url)
        session = self._get_session()
        try:
            response = session.request(
                method,
                url,
                data=body.encode("utf-8") if body else None,
                headers={k: ", ".join(v) for k, v in headers.items()},
                verify=False
                if skip_tls_verify or self.config.insecure
                else True,
                timeout=(self.config.connect_timeout, self.config.timeout),
            )
        except requests.RequestException as e:
            raise TransportError(f"{method} {url}: {e}") from e

        logger.debug(
            "%s %s returned HTTP %d", method, url, response.status_code
        )
        return HttpDetails(
            request=request,
            response=HttpResponse(
                status_code=response.status_code,
                body=response.text,
                headers={
                    k: [v] for k, v in response.headers.items()
                },
            ),
        )

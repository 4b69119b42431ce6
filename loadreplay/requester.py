"""Per-worker HTTP client issuing GET requests over a pooled session."""

import logging
from http.cookiejar import DefaultCookiePolicy

import requests
from requests.adapters import HTTPAdapter
from requests.cookies import RequestsCookieJar

from loadreplay.config import Config

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


class HttpRequester:
    """Issues GETs through a private requests.Session.

    The session (connection pool and cookie jar) belongs to one worker only.
    With keep_cookies the jar retains cookies set by successful responses;
    cookies set by a failed response are removed again. Otherwise a policy
    that accepts no domain keeps the jar empty.
    """

    def __init__(self, config: Config, worker_id: int = 0):
        self._config = config
        self._worker_id = worker_id
        self._session = requests.Session()

        adapter = HTTPAdapter(
            pool_connections=config.pool_size,
            pool_maxsize=config.pool_size,
            max_retries=0,
        )
        self._session.mount("http://", adapter)
        self._session.mount("https://", adapter)

        if not config.keep_cookies:
            self._session.cookies.set_policy(DefaultCookiePolicy(allowed_domains=[]))

    @property
    def cookies(self) -> RequestsCookieJar:
        return self._session.cookies

    def fetch(self, url: str) -> bool:
        """GET the URL, drain and discard the body. Returns True on success."""
        if self._config.verbose:
            logger.info("[worker %d] URL %s", self._worker_id, url)

        response = None
        try:
            with self._session.get(
                url, stream=True, timeout=self._config.request_timeout
            ) as response:
                for _ in response.iter_content(chunk_size=CHUNK_SIZE):
                    pass
        except requests.RequestException as e:
            self._report_error("Request to %s failed: %s", url, e)
            if response is not None:
                self._discard_cookies(response)
            return False

        if not response.ok:
            self._report_error("Request to %s returned HTTP %d", url, response.status_code)
            self._discard_cookies(response)
            return False
        return True

    def close(self):
        """Release pooled connections."""
        self._session.close()

    def _discard_cookies(self, response: requests.Response):
        """Remove cookies that a failed response (or its redirects) stored."""
        if not self._config.keep_cookies:
            return
        for r in [*response.history, response]:
            for cookie in r.cookies:
                try:
                    self._session.cookies.clear(cookie.domain, cookie.path, cookie.name)
                except KeyError:
                    pass

    def _report_error(self, msg: str, *args):
        if not self._config.suppress_errors:
            logger.warning("[worker %d] " + msg, self._worker_id, *args)

import logging
from typing import Optional

import requests

from videoai.client.auth import TokenStore
from videoai.client.config import ClientConfig
from videoai.client.envelope import ApiResponse, handle_response
from videoai.core.errors import TransportError

logger = logging.getLogger(__name__)


class ApiTransport:
    """
    thin wrapper over a requests session bound to the api base url.
    connection failures and timeouts raise TransportError, every
    response that reaches us becomes an ApiResponse.
    """

    def __init__(self, config: ClientConfig, tokens: TokenStore, session: Optional[requests.Session] = None):
        self.config = config
        self.tokens = tokens
        self.session = session or requests.Session()

    def url(self, path: str) -> str:
        return self.config.api_url.rstrip("/") + path

    def auth_headers(self) -> dict:
        if self.tokens.token:
            return {"Authorization": f"Bearer {self.tokens.token}"}
        return {}

    def request(
        self,
        method: str,
        path: str,
        json=None,
        data=None,
        params: Optional[dict] = None,
        headers: Optional[dict] = None,
        timeout: Optional[float] = None,
        authenticated: bool = True
    ) -> ApiResponse:
        all_headers = self.auth_headers() if authenticated else {}
        all_headers.update(headers or {})
        try:
            response = self.session.request(
                method,
                self.url(path),
                json=json,
                data=data,
                params=params,
                headers=all_headers,
                timeout=timeout or self.config.request_timeout,
            )
        except (requests.ConnectionError, requests.Timeout) as e:
            logger.debug(f"{method} {path} failed: {e}")
            raise TransportError(f"Could not reach the API server: {e}") from e
        return handle_response(response)

    def close(self):
        self.session.close()

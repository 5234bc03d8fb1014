"""Authentication for Yep API requests."""

from typing import Generator

import httpx


class TokenAuth(httpx.Auth):
    """Sends the v1 access token in the ``Authorization`` header."""

    def __init__(self, token: str):
        """Initialize token auth.

        Args:
            token: Yep v1 access token

        Raises:
            ValueError: If the token is empty
        """
        if not token:
            raise ValueError("Yep API token must not be empty")
        self.token = token

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        request.headers["Authorization"] = f'Token token="{self.token}"'
        yield request

"""HTTP client for the portfolio API, used by the builder session."""
from __future__ import annotations

import os
from typing import Any, Dict, List, Optional

import httpx

from schemas.portfolio import PortfolioOut


class PortfolioApiError(Exception):
    """Raised when the API answers with an error status."""

    def __init__(self, message: str, status_code: Optional[int] = None, code: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.code = code


class PortfolioApiClient:
    """
    Talks to the portfolio endpoints over HTTP.

    Args:
        api_base_url: Base URL of the API server. Defaults to the
            PORTFOLIO_API_URL env var or http://127.0.0.1:8000.
        session_token: Session token sent as a Bearer credential.
        timeout: Seconds before a request is abandoned.
        client: Pre-built ``httpx.AsyncClient`` (e.g. one bound to an ASGI
            transport). When given, base URL and timeout are taken from it.
    """

    def __init__(
        self,
        api_base_url: Optional[str] = None,
        session_token: Optional[str] = None,
        *,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_base_url = (
            api_base_url
            or os.getenv("PORTFOLIO_API_URL")
            or "http://127.0.0.1:8000"
        ).rstrip("/")
        self._session_token = session_token
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(base_url=self.api_base_url, timeout=timeout)

    def set_session_token(self, token: Optional[str]) -> None:
        self._session_token = token

    def _get_headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._session_token:
            headers["Authorization"] = f"Bearer {self._session_token}"
        return headers

    def _raise_for_error(self, response: httpx.Response, operation: str) -> None:
        if response.status_code < 400:
            return
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            message = body.get("error") or response.text
            code = body.get("code")
        else:
            message = response.text or f"HTTP {response.status_code}"
            code = None
        raise PortfolioApiError(
            f"{operation} failed (HTTP {response.status_code}): {message}",
            status_code=response.status_code,
            code=code,
        )

    async def list_portfolios(self) -> List[PortfolioOut]:
        response = await self.client.get("/portfolios", headers=self._get_headers())
        self._raise_for_error(response, "list portfolios")
        return [PortfolioOut.model_validate(item) for item in response.json().get("portfolios", [])]

    async def create_portfolio(self, name: str) -> PortfolioOut:
        response = await self.client.post("/portfolios", json={"name": name}, headers=self._get_headers())
        self._raise_for_error(response, "create portfolio")
        return PortfolioOut.model_validate(response.json()["portfolio"])

    async def get_portfolio(self, portfolio_id: str) -> Optional[PortfolioOut]:
        """Fetches one portfolio; None when it is missing or not ours."""
        response = await self.client.get(f"/portfolios/{portfolio_id}", headers=self._get_headers())
        if response.status_code == 404:
            return None
        self._raise_for_error(response, "fetch portfolio")
        return PortfolioOut.model_validate(response.json()["portfolio"])

    async def update_portfolio(self, portfolio_id: str, updates: Dict[str, Any]) -> PortfolioOut:
        response = await self.client.put(
            f"/portfolios/{portfolio_id}",
            json=updates,
            headers=self._get_headers(),
        )
        self._raise_for_error(response, "update portfolio")
        return PortfolioOut.model_validate(response.json()["portfolio"])

    async def delete_portfolio(self, portfolio_id: str) -> bool:
        response = await self.client.delete(f"/portfolios/{portfolio_id}", headers=self._get_headers())
        if response.status_code == 404:
            return False
        self._raise_for_error(response, "delete portfolio")
        return True

    async def publish_portfolio(self, portfolio_id: str) -> Optional[PortfolioOut]:
        response = await self.client.post(f"/portfolios/{portfolio_id}/publish", headers=self._get_headers())
        if response.status_code == 404:
            return None
        self._raise_for_error(response, "publish portfolio")
        return PortfolioOut.model_validate(response.json()["portfolio"])

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

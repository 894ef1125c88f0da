"""
JobBoard Backend - Supabase Backend Client
===========================================

What:  BackendService implementation for a Supabase project, using its
       REST APIs directly over httpx.
How:   Auth calls go to GoTrue under /auth/v1; table calls go to PostgREST
       under /rest/v1. Every request carries the project key as `apikey`
       and a bearer token (the caller's access token when acting for a
       user, otherwise the project key).
Who:   Instantiated once per app in create_app() and stored on app.state.

Error Handling:
    Transport failure          → translate_transport_error (UNAVAILABLE)
    HTTP status >= 400         → translate_provider_error (kind by message)
    No retries: a failed call surfaces immediately.

PostgREST query syntax used here:
    GET    /rest/v1/jobs?select=*&employer_id=eq.<uuid>&order=created_at.desc
    POST   /rest/v1/jobs                 (Prefer: return=representation)
    PATCH  /rest/v1/jobs?id=eq.<uuid>    (Prefer: return=representation)
    DELETE /rest/v1/jobs?id=eq.<uuid>    (Prefer: return=representation)
"""

import logging
from typing import Any, Dict, List, Mapping, Optional

import httpx

from jobboard.config import settings
from jobboard.services.backend_base import BackendService
from jobboard.services.error_translation import (
    translate_provider_error,
    translate_transport_error,
)

logger = logging.getLogger(__name__)

AUTH_PREFIX = "/auth/v1"
REST_PREFIX = "/rest/v1"


def _eq_filters(filters: Optional[Mapping[str, str]]) -> Dict[str, str]:
    return {column: f"eq.{value}" for column, value in (filters or {}).items()}


def _error_message(response: httpx.Response) -> str:
    """Pull the human-readable message out of a GoTrue or PostgREST error body."""
    try:
        payload = response.json()
    except ValueError:
        return response.text
    if not isinstance(payload, dict):
        return response.text
    for key in ("msg", "error_description", "message", "error"):
        value = payload.get(key)
        if isinstance(value, str) and value:
            return value
    return response.text


class SupabaseService(BackendService):
    """
    Async client for one Supabase project.

    Args:
        url:     Project base URL (defaults to settings.supabase_url)
        api_key: Project anon key (defaults to settings.supabase_anon_key)
        client:  Pre-built httpx.AsyncClient (tests pass one with a MockTransport)
    """

    def __init__(
        self,
        url: Optional[str] = None,
        api_key: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.url = (url if url is not None else settings.supabase_url).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.supabase_anon_key
        self._client = client or httpx.AsyncClient(
            base_url=self.url,
            timeout=httpx.Timeout(settings.http_timeout_seconds),
        )

    def _headers(self, access_token: Optional[str] = None) -> Dict[str, str]:
        return {
            "apikey": self.api_key,
            "Authorization": f"Bearer {access_token or self.api_key}",
        }

    async def _request(
        self,
        method: str,
        path: str,
        operation: str,
        *,
        access_token: Optional[str] = None,
        params: Optional[Mapping[str, str]] = None,
        json: Any = None,
        extra_headers: Optional[Mapping[str, str]] = None,
    ) -> httpx.Response:
        headers = self._headers(access_token)
        if extra_headers:
            headers.update(extra_headers)

        try:
            response = await self._client.request(
                method,
                path,
                params=params,
                json=json,
                headers=headers,
            )
        except httpx.HTTPError as exc:
            raise translate_transport_error(exc, operation=operation) from exc

        if response.status_code >= 400:
            raise translate_provider_error(
                _error_message(response),
                status_code=response.status_code,
                operation=operation,
            )

        logger.debug("%s %s → %d", method, path, response.status_code)
        return response

    # ── Auth ──────────────────────────────────────────────────────────────

    async def get_user(self, access_token: str) -> Optional[Dict[str, Any]]:
        response = await self._request(
            "GET", f"{AUTH_PREFIX}/user", "get_user", access_token=access_token
        )
        user = response.json()
        if not isinstance(user, dict) or not user.get("id"):
            return None
        return user

    async def sign_in_with_password(self, email: str, password: str) -> Dict[str, Any]:
        response = await self._request(
            "POST",
            f"{AUTH_PREFIX}/token",
            "sign_in",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )
        return response.json()

    async def sign_up(
        self, email: str, password: str, metadata: Mapping[str, Any]
    ) -> Dict[str, Any]:
        response = await self._request(
            "POST",
            f"{AUTH_PREFIX}/signup",
            "sign_up",
            json={"email": email, "password": password, "data": dict(metadata)},
        )
        payload = response.json()
        # With email auto-confirm the provider answers with a session wrapping the user
        if isinstance(payload, dict) and isinstance(payload.get("user"), dict):
            return payload["user"]
        return payload

    async def reset_password_for_email(self, email: str, redirect_to: str) -> None:
        await self._request(
            "POST",
            f"{AUTH_PREFIX}/recover",
            "reset_password",
            params={"redirect_to": redirect_to},
            json={"email": email},
        )

    # ── Tables ────────────────────────────────────────────────────────────

    async def select(
        self,
        table: str,
        *,
        columns: str = "*",
        filters: Optional[Mapping[str, str]] = None,
        order: Optional[str] = None,
        access_token: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        params = {"select": columns, **_eq_filters(filters)}
        if order:
            params["order"] = order
        response = await self._request(
            "GET",
            f"{REST_PREFIX}/{table}",
            f"select {table}",
            access_token=access_token,
            params=params,
        )
        return response.json()

    async def insert(
        self,
        table: str,
        row: Mapping[str, Any],
        *,
        access_token: Optional[str] = None,
    ) -> Dict[str, Any]:
        response = await self._request(
            "POST",
            f"{REST_PREFIX}/{table}",
            f"insert {table}",
            access_token=access_token,
            json=dict(row),
            extra_headers={"Prefer": "return=representation"},
        )
        rows = response.json()
        if not rows:
            raise translate_provider_error(
                "Insert returned no row", status_code=response.status_code,
                operation=f"insert {table}",
            )
        return rows[0]

    async def update(
        self,
        table: str,
        values: Mapping[str, Any],
        *,
        filters: Mapping[str, str],
        access_token: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        response = await self._request(
            "PATCH",
            f"{REST_PREFIX}/{table}",
            f"update {table}",
            access_token=access_token,
            params=_eq_filters(filters),
            json=dict(values),
            extra_headers={"Prefer": "return=representation"},
        )
        return response.json()

    async def delete(
        self,
        table: str,
        *,
        filters: Mapping[str, str],
        access_token: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        response = await self._request(
            "DELETE",
            f"{REST_PREFIX}/{table}",
            f"delete {table}",
            access_token=access_token,
            params=_eq_filters(filters),
            extra_headers={"Prefer": "return=representation"},
        )
        return response.json()

    # ── Lifecycle ─────────────────────────────────────────────────────────

    async def health_check(self) -> bool:
        """Probe the auth server's health endpoint; never raises."""
        try:
            response = await self._client.get(
                f"{AUTH_PREFIX}/health", headers=self._headers()
            )
        except httpx.HTTPError as exc:
            logger.warning("Backend health check failed: %s", type(exc).__name__)
            return False
        return response.status_code < 400

    async def close(self) -> None:
        await self._client.aclose()

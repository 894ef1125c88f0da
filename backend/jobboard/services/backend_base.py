"""
JobBoard Backend - Abstract Hosted Backend Interface
=====================================================

What:  Contract for the hosted database + auth provider.
How:   Concrete implementations (SupabaseService) speak the provider's API
       and convert every provider failure into ExternalServiceError through
       the error translation layer. Callers never see raw provider errors.
Who:   The auth gate (token verification), domain handlers (table access)
       and the account service (sign-up / sign-in / password reset).

Table access is expressed with simple equality filters and a single order
clause, which is all the job board needs. Every method performs exactly one
network call.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Optional


class BackendService(ABC):
    """
    Abstract interface for the hosted data/auth service.

    Contract:
        - Auth methods return the provider's JSON objects as dicts
        - Table methods return rows as dicts
        - `access_token`, when given, makes the call on behalf of that user
          so the provider's row-level policies apply to it
        - All failures raise ExternalServiceError
    """

    # ── Auth ──────────────────────────────────────────────────────────────

    @abstractmethod
    async def get_user(self, access_token: str) -> Optional[Dict[str, Any]]:
        """
        Verify an access token and return the user it belongs to.

        Returns:
            The provider's user object ({id, email, user_metadata, ...}),
            or None when the provider returned no user.

        Raises:
            ExternalServiceError: Token rejected or provider unreachable.
        """
        ...

    @abstractmethod
    async def sign_in_with_password(self, email: str, password: str) -> Dict[str, Any]:
        """Exchange credentials for a session ({access_token, refresh_token, user, ...})."""
        ...

    @abstractmethod
    async def sign_up(
        self, email: str, password: str, metadata: Mapping[str, Any]
    ) -> Dict[str, Any]:
        """Register a new auth user; `metadata` is stored as user metadata."""
        ...

    @abstractmethod
    async def reset_password_for_email(self, email: str, redirect_to: str) -> None:
        ...

    # ── Tables ────────────────────────────────────────────────────────────

    @abstractmethod
    async def select(
        self,
        table: str,
        *,
        columns: str = "*",
        filters: Optional[Mapping[str, str]] = None,
        order: Optional[str] = None,
        access_token: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """
        Read rows.

        Args:
            filters: column → value, combined with AND equality
            order:   "<column>.asc" or "<column>.desc"
        """
        ...

    @abstractmethod
    async def insert(
        self,
        table: str,
        row: Mapping[str, Any],
        *,
        access_token: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Insert one row and return it as stored (with generated columns)."""
        ...

    @abstractmethod
    async def update(
        self,
        table: str,
        values: Mapping[str, Any],
        *,
        filters: Mapping[str, str],
        access_token: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Update matching rows and return them. No match → empty list."""
        ...

    @abstractmethod
    async def delete(
        self,
        table: str,
        *,
        filters: Mapping[str, str],
        access_token: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Delete matching rows and return them. No match → empty list."""
        ...

    # ── Lifecycle ─────────────────────────────────────────────────────────

    @abstractmethod
    async def health_check(self) -> bool:
        """Lightweight reachability probe for GET /health."""
        ...

    async def close(self) -> None:
        """Release network resources. Default: nothing to release."""
        return None

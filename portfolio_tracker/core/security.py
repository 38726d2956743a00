from dataclasses import dataclass
from typing import Optional, Protocol

import httpx

from portfolio_tracker.core.logger import logger


@dataclass(frozen=True)
class Caller:
    """Authenticated identity resolved from a bearer token."""
    id: str
    email: Optional[str] = None


class CallerVerifier(Protocol):
    def verify(self, token: str) -> Optional[Caller]:
        """Return the caller behind ``token`` or None when the token is rejected."""
        ...


class SupabaseCallerVerifier:
    """
    Resolves access tokens through the Supabase Auth ``/auth/v1/user`` endpoint.
    Any provider or transport failure is treated as a rejected token.
    """

    def __init__(self, base_url: str, api_key: str, timeout: float = 5.0):
        self.base_url = (base_url or "").rstrip("/")
        self.api_key = api_key
        self.timeout = timeout

    def verify(self, token: str) -> Optional[Caller]:
        if not token:
            return None
        if not self.base_url:
            logger.error("SUPABASE_URL is not configured, rejecting token")
            return None

        try:
            response = httpx.get(
                f"{self.base_url}/auth/v1/user",
                headers={
                    "apikey": self.api_key,
                    "Authorization": f"Bearer {token}",
                },
                timeout=self.timeout,
            )
        except httpx.HTTPError as e:
            logger.error(f"Auth provider request failed: {e}")
            return None

        if response.status_code != 200:
            logger.warning(f"Auth getUser rejected token: HTTP {response.status_code}")
            return None

        try:
            data = response.json()
        except ValueError as e:
            logger.error(f"Auth provider returned invalid JSON: {e}")
            return None

        user_id = data.get("id") if isinstance(data, dict) else None
        if not user_id:
            logger.warning("Auth provider response has no user id")
            return None

        return Caller(id=str(user_id), email=data.get("email"))

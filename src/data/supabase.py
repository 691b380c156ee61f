"""Supabase Auth client: resolves session tokens to user ids."""

import logging

import httpx

from src.config import settings

logger = logging.getLogger(__name__)


class SupabaseAuthClient:
    def __init__(self, base_url: str | None = None, anon_key: str | None = None):
        self.base_url = (base_url or settings.supabase_url).rstrip("/")
        self.anon_key = anon_key or settings.supabase_anon_key

    async def get_user_id(self, access_token: str) -> str | None:
        """Return the Supabase user id for a valid access token, else None."""
        if not self.base_url:
            logger.debug("Supabase URL not configured, rejecting token")
            return None

        headers = {
            "apikey": self.anon_key,
            "Authorization": f"Bearer {access_token}",
        }
        try:
            async with httpx.AsyncClient(timeout=10.0) as client:
                resp = await client.get(f"{self.base_url}/auth/v1/user", headers=headers)
                if resp.status_code in (401, 403):
                    return None
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPError as e:
            logger.warning("Supabase user lookup failed: %s", e)
            return None

        return data.get("id")

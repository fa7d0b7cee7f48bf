"""Batch lookups against the Twitter API used for wallet decoration."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import httpx
from loguru import logger

from nftquery.core.config import settings
from nftquery.domain import TwitterProfile
from nftquery.errors import IdentityServiceError

USERS_BY_PATH = "/2/users/by"
USER_FIELDS = "profile_image_url,description"


class TwitterClient:
    """Thin wrapper around the Twitter v2 user lookup endpoint."""

    def __init__(
        self,
        *,
        base_url: str | None = None,
        bearer_token: str | None = None,
        timeout: float | None = None,
        batch_size: int | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url or str(settings.twitter_api_base_url)
        self.bearer_token = bearer_token if bearer_token is not None else settings.twitter_bearer_token
        self.timeout = timeout or settings.twitter_timeout_seconds
        self.batch_size = batch_size or settings.twitter_batch_size
        headers = {"Authorization": f"Bearer {self.bearer_token}"} if self.bearer_token else {}
        self.client = httpx.Client(
            base_url=self.base_url,
            timeout=self.timeout,
            headers=headers,
            transport=transport,
        )

    @property
    def enabled(self) -> bool:
        return bool(self.bearer_token)

    def fetch_users(self, handles: Sequence[str]) -> list[dict[str, Any]]:
        params = {"usernames": ",".join(handles), "user.fields": USER_FIELDS}
        logger.debug("Twitter GET {} for {} handle(s)", USERS_BY_PATH, len(handles))
        try:
            response = self.client.get(USERS_BY_PATH, params=params)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise IdentityServiceError("failed to load twitter profile(s)") from exc

        payload = response.json()
        users = payload.get("data") if isinstance(payload, dict) else None
        return users if isinstance(users, list) else []

    def batch(self, handles: Sequence[str]) -> dict[str, TwitterProfile | None]:
        """Resolve ``handles`` to profiles; unknown handles map to ``None``."""

        results: dict[str, TwitterProfile | None] = {handle: None for handle in handles}
        if not handles:
            return results

        by_username: dict[str, TwitterProfile] = {}
        unique = list(dict.fromkeys(handles))
        for start in range(0, len(unique), self.batch_size):
            for user in self.fetch_users(unique[start : start + self.batch_size]):
                username = user.get("username")
                if not isinstance(username, str):
                    continue
                by_username[username.lower()] = _profile_from_payload(user)

        for handle in handles:
            results[handle] = by_username.get(handle.lower())
        return results

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> "TwitterClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def _profile_from_payload(user: dict[str, Any]) -> TwitterProfile:
    return TwitterProfile(
        handle=user["username"],
        profile_image_url=user.get("profile_image_url"),
        description=user.get("description"),
    )


class TwitterProfileBatcher:
    """Batcher resolving twitter handles through :class:`TwitterClient`."""

    name = "twitter profile"

    def __init__(self, client: TwitterClient) -> None:
        self._client = client
        self._warned = False

    def missing(self, key: str) -> None:
        return None

    def execute(self, keys: Sequence[str]) -> dict[str, TwitterProfile | None]:
        if not self._client.enabled:
            if not self._warned:
                logger.warning("Twitter bearer token is not configured; skipping profile lookups")
                self._warned = True
            return {key: None for key in keys}
        return self._client.batch(keys)


__all__ = ["TwitterClient", "TwitterProfileBatcher"]

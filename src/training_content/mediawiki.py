from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any

import requests


log = logging.getLogger("training_content.mediawiki")


class MediaWikiError(RuntimeError):
    pass


@dataclass
class MediaWikiClient:
    api_url: str
    user_agent: str
    session: requests.Session

    max_attempts: int = 5

    def _request(self, params: dict[str, Any]) -> dict[str, Any]:
        params = {"format": "json", "formatversion": 2, **params}
        headers = {"User-Agent": self.user_agent}
        backoff = 1
        for attempt in range(self.max_attempts):
            resp = self.session.get(self.api_url, params=params, headers=headers, timeout=30)
            resp.raise_for_status()
            data = resp.json()
            if "error" not in data:
                return data
            error = data["error"]
            code = str(error.get("code", ""))
            info = str(error.get("info", ""))
            if code == "ratelimited" or "rate limit" in info.lower():
                if attempt < self.max_attempts - 1:
                    log.warning("rate limited; backing off %ss", backoff)
                    time.sleep(backoff)
                    backoff *= 2
                    continue
            raise MediaWikiError(f"MediaWiki API error: {error}")
        raise MediaWikiError("MediaWiki API error: exceeded retry attempts")

    def query(self, params: dict[str, Any]) -> dict[str, Any] | None:
        """Run an ``action=query`` request and return its ``query`` object.

        Returns None instead of raising when the request fails, so callers can
        treat an unreachable or erroring wiki as "no data".
        """
        try:
            data = self._request({"action": "query", **params})
        except (MediaWikiError, requests.RequestException) as exc:
            log.warning("query failed params=%s: %s", params, exc)
            return None
        result = data.get("query")
        if not isinstance(result, dict):
            return None
        return result

    def get_page_content(self, title: str) -> str | None:
        data = self._request(
            {
                "action": "query",
                "prop": "revisions",
                "titles": title,
                "rvprop": "content",
                "rvslots": "main",
            }
        )
        pages = data.get("query", {}).get("pages") or []
        if not pages:
            return None
        page = pages[0]
        if page.get("missing") or page.get("invalid"):
            return None
        revisions = page.get("revisions") or []
        if not revisions:
            return None
        # Hidden or suppressed revisions come back without a content slot.
        content = (revisions[0].get("slots") or {}).get("main", {}).get("content")
        if not isinstance(content, str):
            return None
        return content

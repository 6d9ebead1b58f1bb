"""
Clients for the third-party lookup and image providers behind /places.

DuckDuckGo's Instant Answer API supplies text summaries and related topics;
Unsplash supplies images when an access key is configured.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import quote

import requests

DUCKDUCKGO_INSTANT = "https://api.duckduckgo.com/"
UNSPLASH_SEARCH = "https://api.unsplash.com/search/photos"
UNSPLASH_FALLBACK = "https://source.unsplash.com/collection/190727/400x300"

REQUEST_TIMEOUT = 15  # seconds
MAX_RELATED = 8
MAX_INFO_SECTIONS = 10
MEDIA_PER_PAGE = 6

FORWARD_HEADERS = {
    "User-Agent": "MyHeritageSite/1.0 (contact@example.com)",
    "Accept": "application/json",
}


class UpstreamError(Exception):
    """Raised when an upstream provider answers with a non-2xx status."""

    def __init__(self, message: str, status: Optional[int] = None, body: str = ""):
        super().__init__(message)
        self.status = status
        self.body = body


def fetch_json(
    url: str,
    params: Optional[dict] = None,
    headers: Optional[dict] = None,
    timeout: float = REQUEST_TIMEOUT,
) -> Any:
    """
    Fetches a URL with the forward headers and decodes the body.

    Args:
        url (str): The URL to fetch.
        params (dict, optional): Query string parameters.
        headers (dict, optional): Extra headers, merged over the defaults.
        timeout (float): Request timeout in seconds.

    Returns:
        Any: The decoded JSON body, or the raw text if it is not JSON.

    Raises:
        UpstreamError: If the provider responds with a non-2xx status.
    """
    response = requests.get(
        url,
        params=params,
        headers={**FORWARD_HEADERS, **(headers or {})},
        timeout=timeout,
    )
    if not response.ok:
        raise UpstreamError(
            f"Upstream request failed with {response.status_code}",
            status=response.status_code,
            body=response.text,
        )
    try:
        return response.json()
    except ValueError:
        return response.text


def _first_related_url(data: dict) -> str:
    topics = data.get("RelatedTopics") or []
    if topics and isinstance(topics[0], dict):
        return topics[0].get("FirstURL") or ""
    return ""


def _flatten_related(topics: list) -> list[dict]:
    related: list[dict] = []
    for topic in topics:
        if not isinstance(topic, dict):
            continue
        if topic.get("Text") and topic.get("FirstURL"):
            related.append({"text": topic["Text"], "url": topic["FirstURL"]})
        elif isinstance(topic.get("Topics"), list):
            # Disambiguation sections nest their topics one level down.
            for sub in topic["Topics"]:
                if isinstance(sub, dict) and sub.get("Text") and sub.get("FirstURL"):
                    related.append({"text": sub["Text"], "url": sub["FirstURL"]})
        if len(related) >= MAX_RELATED:
            break
    return related


@dataclass
class DuckDuckGoClient:
    """Text lookups against the DuckDuckGo Instant Answer API."""

    base_url: str = DUCKDUCKGO_INSTANT
    timeout: float = REQUEST_TIMEOUT

    def _query(self, q: str, skip_disambig: bool) -> dict:
        params = {
            "q": q,
            "format": "json",
            "no_html": 1,
            "skip_disambig": 1 if skip_disambig else 0,
        }
        data = fetch_json(self.base_url, params=params, timeout=self.timeout)
        return data if isinstance(data, dict) else {}

    def search(self, q: str) -> dict:
        data = self._query(q, skip_disambig=True)
        topics = data.get("RelatedTopics")
        return {
            "query": q,
            "title": data.get("Heading") or q,
            "abstract": data.get("Abstract") or data.get("AbstractText") or "",
            "abstractSource": data.get("AbstractSource") or _first_related_url(data),
            "url": data.get("AbstractURL") or _first_related_url(data),
            "related": _flatten_related(topics) if isinstance(topics, list) else [],
        }

    def info(self, title: str) -> dict:
        data = self._query(title, skip_disambig=False)
        lead_text = (
            data.get("Abstract") or data.get("AbstractText") or "No summary available."
        )
        sections = []
        topics = data.get("RelatedTopics")
        if isinstance(topics, list):
            for topic in topics[:MAX_INFO_SECTIONS]:
                if isinstance(topic, dict) and topic.get("Text"):
                    text = topic["Text"]
                    sections.append(
                        {"line": text.split(" - ")[0] or "Related", "text": text}
                    )
        return {"lead": {"sections": [{"text": lead_text}]}, "sections": sections}


@dataclass
class UnsplashClient:
    """Image search against Unsplash, with keyless fallback URLs."""

    access_key: str = ""
    base_url: str = UNSPLASH_SEARCH
    timeout: float = REQUEST_TIMEOUT
    per_page: int = MEDIA_PER_PAGE

    def media(self, title: str) -> list[dict]:
        if not self.access_key:
            src = f"{UNSPLASH_FALLBACK}?{quote(title, safe='')}"
            return [{"src": src, "alt": title} for _ in range(self.per_page)]

        params = {
            "query": title,
            "per_page": self.per_page,
            "orientation": "landscape",
        }
        data = fetch_json(
            self.base_url,
            params=params,
            headers={"Authorization": f"Client-ID {self.access_key}"},
            timeout=self.timeout,
        )
        results = data.get("results") if isinstance(data, dict) else None
        images = []
        for photo in results or []:
            urls = photo.get("urls") or {}
            images.append(
                {
                    "src": urls.get("regular") or urls.get("small"),
                    "alt": photo.get("alt_description") or title,
                }
            )
        return images

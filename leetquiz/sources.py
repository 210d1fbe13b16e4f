"""Candidate problems fetched from the Notion tracker database."""
from __future__ import annotations

import logging
import random
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence

import httpx
from notion_client import AsyncClient
from notion_client.errors import HTTPResponseError, RequestTimeoutError
from notion_client.helpers import async_collect_paginated_api

from .errors import SourceFetchError
from .models import Candidate


logger = logging.getLogger(__name__)

NAME_PROPERTY = "Name"
TAGS_PROPERTY = "Tags"
DIFFICULTY_PROPERTY = "Select"
RECENTLY_ATTEMPTED_PROPERTY = "RevisedFor2026"


def _title(prop: Optional[Dict[str, Any]]) -> str:
    if not prop or prop.get("type") != "title":
        return "unknownTitle"
    parts = prop.get("title") or []
    return parts[0].get("plain_text", "") if parts else ""


def _tags(prop: Optional[Dict[str, Any]]) -> str:
    if not prop or prop.get("type") != "multi_select":
        return "unknownTags"
    return ", ".join(tag["name"] for tag in prop.get("multi_select") or [])


def _select(prop: Optional[Dict[str, Any]]) -> Optional[str]:
    if not prop or prop.get("type") != "select" or not prop.get("select"):
        return None
    return prop["select"].get("name")


def _checkbox(prop: Optional[Dict[str, Any]]) -> bool:
    if not prop or prop.get("type") != "checkbox":
        return False
    return bool(prop.get("checkbox"))


def page_to_candidate(page: Dict[str, Any]) -> Candidate:
    """Map a full Notion page onto a ``Candidate``."""

    properties = page.get("properties")
    if page.get("object") != "page" or not isinstance(properties, dict) or "id" not in page:
        raise SourceFetchError(f"Unexpected result format for Notion object {page.get('id')!r}")
    try:
        return Candidate(
            id=page["id"],
            name=_title(properties.get(NAME_PROPERTY)),
            tags=_tags(properties.get(TAGS_PROPERTY)),
            difficulty=_select(properties.get(DIFFICULTY_PROPERTY)),
            recently_attempted=_checkbox(properties.get(RECENTLY_ATTEMPTED_PROPERTY)),
        )
    except (KeyError, TypeError, AttributeError, ValueError) as exc:
        raise SourceFetchError(f"Malformed properties on Notion page {page['id']}") from exc


class CandidateSource(ABC):
    """Anything that can list candidate problems."""

    @abstractmethod
    async def fetch_candidates(self) -> List[Candidate]:
        """Return every candidate; raise ``SourceFetchError`` on failure."""


class NotionCandidateSource(CandidateSource):
    """Reads every page of the tracker database."""

    def __init__(self, client: AsyncClient, database_id: str) -> None:
        if not database_id:
            raise SourceFetchError("DATABASE_ID is not defined")
        self._client = client
        self._database_id = database_id

    @classmethod
    def from_token(cls, token: str, database_id: str, timeout: float = 30.0) -> "NotionCandidateSource":
        return cls(AsyncClient(auth=token, timeout_ms=int(timeout * 1000)), database_id)

    async def fetch_candidates(self) -> List[Candidate]:
        try:
            pages = await async_collect_paginated_api(
                self._client.databases.query, database_id=self._database_id
            )
        except (HTTPResponseError, RequestTimeoutError, httpx.HTTPError) as exc:
            raise SourceFetchError(f"Error fetching database {self._database_id}: {exc}") from exc
        candidates = [page_to_candidate(page) for page in pages]
        logger.info("Fetched %d candidates from Notion", len(candidates))
        return candidates


def select_candidates(
    candidates: Sequence[Candidate],
    count: int = 1,
    difficulty: str = "Medium",
    rng: Optional[random.Random] = None,
) -> List[Candidate]:
    """Randomly sample recently attempted candidates of the wanted difficulty."""

    eligible = [
        candidate
        for candidate in candidates
        if candidate.difficulty == difficulty and candidate.recently_attempted
    ]
    rng = rng or random.Random()
    return rng.sample(eligible, min(count, len(eligible)))


__all__ = ["CandidateSource", "NotionCandidateSource", "page_to_candidate", "select_candidates"]

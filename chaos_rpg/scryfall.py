"""Scryfall client: rate-limited, cached card lookups over HTTP.

The core never calls this module. Presentation code awaits a lookup, turns
the record into a Card with card_from_scryfall(), and hands that to
GameStore.add_card_to_hand().

Endpoints used:

    GET /cards/search?q=...     → {"data": [card, ...]}   cached
    GET /cards/random[?q=...]   → card                    never cached
    GET /cards/named?exact=...  → card                    cached
    GET /cards/{id}             → card                    cached

Scryfall asks for 50–100 ms between requests; the client sleeps as needed
to keep at least `rate_limit_ms` between the start of consecutive requests.
"""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from typing import Any

import httpx

from .config import AppConfig
from .models import Card

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.scryfall.com"

# Offline fallback hand for when the API is unreachable
DEFAULT_CARDS: list[Card] = [
    Card(id="default-1", name="Lightning Bolt", mana_cost="{R}", type_line="Instant",
         oracle_text="Lightning Bolt deals 3 damage to any target."),
    Card(id="default-2", name="Grizzly Bears", mana_cost="{1}{G}", type_line="Creature — Bear",
         oracle_text="", power="2", toughness="2"),
    Card(id="default-3", name="Counterspell", mana_cost="{U}{U}", type_line="Instant",
         oracle_text="Counter target spell."),
    Card(id="default-4", name="Healing Salve", mana_cost="{W}", type_line="Instant",
         oracle_text="Choose one — Target player gains 3 life; or prevent the next 3 damage."),
    Card(id="default-5", name="Dark Ritual", mana_cost="{B}", type_line="Instant",
         oracle_text="Add {B}{B}{B}."),
]


def card_from_scryfall(record: dict[str, Any], card_id: str | None = None) -> Card:
    """Convert a Scryfall card object. Every field but the name is optional."""
    image_uris = record.get("image_uris") or {}
    return Card(
        id=card_id or f"card-{uuid.uuid4().hex[:12]}",
        scryfall_id=record.get("id"),
        name=record.get("name", "Unknown Card"),
        mana_cost=record.get("mana_cost"),
        type_line=record.get("type_line"),
        oracle_text=record.get("oracle_text"),
        image_url=image_uris.get("normal"),
        power=record.get("power"),
        toughness=record.get("toughness"),
    )


def criteria_query(
    colors: list[str] | None = None,
    types: list[str] | None = None,
    cmc_min: int | None = None,
    cmc_max: int | None = None,
    keywords: list[str] | None = None,
) -> str:
    """Build a Scryfall search string, e.g. "color:rg (type:creature) cmc<=3"."""
    parts: list[str] = []
    if colors:
        parts.append(f"color:{''.join(colors)}")
    if types:
        parts.append("(" + " OR ".join(f"type:{t}" for t in types) + ")")
    if cmc_min is not None:
        parts.append(f"cmc>={cmc_min}")
    if cmc_max is not None:
        parts.append(f"cmc<={cmc_max}")
    if keywords:
        parts.extend(f"keyword:{kw}" for kw in keywords)
    return " ".join(parts)


class ScryfallClient:
    """Async client for the Scryfall REST API.

    Args:
        base_url:      API root. Defaults to https://api.scryfall.com.
        rate_limit_ms: Minimum spacing between requests in milliseconds.
        timeout:       HTTP timeout in seconds.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        rate_limit_ms: int = 100,
        timeout: float = 30.0,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._delay = rate_limit_ms / 1000
        self._timeout = timeout
        self._cache: dict[str, Any] = {}
        self._last_request = 0.0

    @classmethod
    def from_config(cls, config: AppConfig) -> ScryfallClient:
        return cls(
            base_url=config.scryfall_base_url,
            rate_limit_ms=config.scryfall_rate_limit_ms,
            timeout=config.scryfall_timeout,
        )

    async def _rate_limit(self) -> None:
        wait = self._delay - (time.monotonic() - self._last_request)
        if wait > 0:
            await asyncio.sleep(wait)
        self._last_request = time.monotonic()

    @staticmethod
    def _cache_key(path: str, params: dict[str, str] | None) -> str:
        if not params:
            return path
        return path + "?" + "&".join(f"{k}={v}" for k, v in sorted(params.items()))

    async def _get(
        self, path: str, params: dict[str, str] | None = None, use_cache: bool = True
    ) -> Any:
        key = self._cache_key(path, params)
        if use_cache and key in self._cache:
            logger.debug("scryfall cache hit %s", key)
            return self._cache[key]

        await self._rate_limit()
        url = f"{self._base_url}{path}"
        logger.debug("scryfall GET %s params=%s", url, params)
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.get(url, params=params)
                resp.raise_for_status()
        except httpx.ConnectError as e:
            raise ScryfallError(f"Cannot connect to Scryfall at {self._base_url}") from e
        except httpx.HTTPStatusError as e:
            raise ScryfallError(
                f"Scryfall returned HTTP {e.response.status_code} for {path}"
            ) from e
        except httpx.TimeoutException as e:
            raise ScryfallError(f"Scryfall timed out after {self._timeout}s") from e

        data = resp.json()
        if use_cache:
            self._cache[key] = data
        return data

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def search_cards(self, query: str, **options: str) -> dict[str, Any]:
        return await self._get("/cards/search", {"q": query, **options})

    async def random_card(self, query: str = "") -> dict[str, Any]:
        params = {"q": query} if query else None
        return await self._get("/cards/random", params, use_cache=False)

    async def named_card(self, name: str) -> dict[str, Any]:
        return await self._get("/cards/named", {"exact": name})

    async def card_by_id(self, card_id: str) -> dict[str, Any]:
        return await self._get(f"/cards/{card_id}")

    # ------------------------------------------------------------------
    # Cache
    # ------------------------------------------------------------------

    def clear_cache(self) -> None:
        self._cache.clear()

    def cache_stats(self) -> dict[str, Any]:
        return {"size": len(self._cache), "keys": list(self._cache)}


class ScryfallError(RuntimeError):
    """Raised when Scryfall cannot be reached or returns an error status."""

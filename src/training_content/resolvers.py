from __future__ import annotations

import logging
from typing import Any

from .mediawiki import MediaWikiClient


log = logging.getLogger("training_content.resolvers")

# Only the first batch of links is read; there is no "continue" handling, so a
# base page linking to more than this many pages is truncated.
MAX_COMPONENT_LINKS = 500


def _first_page(result: dict[str, Any]) -> dict[str, Any]:
    pages = result["pages"]
    if isinstance(pages, dict):
        pages = list(pages.values())
    return pages[0]


def resolve_components(client: MediaWikiClient, base_page: str) -> list[str]:
    result = client.query({"prop": "links", "titles": base_page, "pllimit": MAX_COMPONENT_LINKS})
    if result is None:
        return []
    try:
        links = _first_page(result).get("links") or []
        titles = [str(link["title"]) for link in links]
    except (KeyError, IndexError, TypeError, AttributeError):
        log.warning("malformed links response for %s", base_page)
        return []
    if len(titles) >= MAX_COMPONENT_LINKS:
        log.warning(
            "%s links to %s or more pages; only the first %s are loaded",
            base_page,
            MAX_COMPONENT_LINKS,
            MAX_COMPONENT_LINKS,
        )
    return titles


def _count(value: Any) -> int | None:
    if value is None:
        return 0
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _language_stats(raw: Any) -> list[tuple[str, dict[str, Any]]]:
    # The API returns a list of {code, total, translated}; a mapping keyed by
    # language code is accepted too.
    if isinstance(raw, dict):
        items = [(str(code), stats) for code, stats in raw.items()]
    else:
        items = [
            (str(stats.get("code") or ""), stats) for stats in raw or [] if isinstance(stats, dict)
        ]
    return [(code, stats) for code, stats in items if isinstance(stats, dict)]


def resolve_translations(client: MediaWikiClient, base_page: str | None) -> list[str]:
    """Language codes with at least one translated unit of ``base_page``.

    Languages whose group has no translatable units, and languages with no
    translated units yet, are both left out.
    """
    if not base_page:
        return []
    result = client.query({"meta": "messagegroupstats", "mgsgroup": f"page-{base_page}"})
    if result is None:
        return []
    langs: list[str] = []
    for code, stats in _language_stats(result.get("messagegroupstats")):
        total = _count(stats.get("total"))
        translated = _count(stats.get("translated"))
        if total is None or translated is None:
            log.warning("non-numeric translation stats for %s/%s: %s", base_page, code, stats)
            continue
        if total <= 0 or translated <= 0:
            continue
        if code:
            langs.append(code)
    return langs

from __future__ import annotations

import json
import logging
import re
from typing import Any

from .mediawiki import MediaWikiClient
from .models import (
    ContentKind,
    ContentRecord,
    Translation,
    record_from_mapping,
    translation_from_fields,
)
from .resolvers import resolve_translations
from .wiki_parser import WikiSlideParser


log = logging.getLogger("training_content.assembler")


class AssemblyError(RuntimeError):
    pass


def slug_from_title(title: str) -> str:
    name = title.rsplit(":", 1)[-1].rsplit("/", 1)[-1]
    slug = re.sub(r"[\s_]+", "-", name.strip().lower())
    return re.sub(r"[^a-z0-9-]", "", slug).strip("-")


class ContentAssembler:
    """Builds one content record, with its translations, from a wiki page.

    The page itself holds JSON metadata. When that JSON names a ``wiki_page``,
    the title/body (and quiz for slides) come from that page's wikitext, and
    each translated subpage ``<wiki_page>/<lang>`` becomes one translation.
    """

    def __init__(self, client: MediaWikiClient, content_kind: ContentKind):
        self.client = client
        self.content_kind = ContentKind(content_kind)

    def assemble(self, page_title: str) -> ContentRecord | None:
        raw = self.client.get_page_content(page_title)
        if raw is None:
            log.info("page does not exist: %s", page_title)
            return None
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise AssemblyError(f"page {page_title} does not hold valid JSON") from exc
        if data is None:
            return None
        if not isinstance(data, dict):
            raise AssemblyError(f"page {page_title} JSON is not an object")

        try:
            return self._build(page_title, data)
        except (ValueError, TypeError, KeyError, AttributeError) as exc:
            raise AssemblyError(f"page {page_title} holds malformed content: {exc}") from exc

    def _build(self, page_title: str, data: dict[str, Any]) -> ContentRecord:
        translations: dict[str, Translation] = {}
        wiki_page = data.get("wiki_page")
        if wiki_page:
            wiki_page = str(wiki_page)
            data = {**data, **self.fields_from_wiki_page(wiki_page)}
            for lang in resolve_translations(self.client, wiki_page):
                fields = self.fields_from_wiki_page(f"{wiki_page}/{lang}")
                translations[lang] = translation_from_fields(self.content_kind, fields)

        slug = str(data.get("slug") or slug_from_title(wiki_page or page_title))
        return record_from_mapping(self.content_kind, data, slug, translations)

    def fields_from_wiki_page(self, wiki_page: str) -> dict[str, Any]:
        wikitext = self.client.get_page_content(wiki_page)
        if wikitext is None:
            raise AssemblyError(f"referenced page does not exist: {wiki_page}")
        parser = WikiSlideParser(wikitext)
        if self.content_kind is ContentKind.SLIDE:
            return {"title": parser.title(), "content": parser.content(), "assessment": parser.quiz()}
        return {"name": parser.title(), "description": parser.content()}

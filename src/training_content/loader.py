from __future__ import annotations

import glob
import logging
import os
import re

import requests
import yaml

from .assembler import AssemblyError, ContentAssembler
from .cache import ContentCache
from .config import LoaderConfig
from .diagnostics import DiagnosticSink
from .mediawiki import MediaWikiClient, MediaWikiError
from .models import Collection, ContentRecord, is_valid, record_from_mapping
from .resolvers import resolve_components


log = logging.getLogger("training_content.loader")

NUMERIC_ID_PREFIX_RE = re.compile(r"^[0-9]+-")


def slug_from_filename(path: str, trim_numeric_id_prefix: bool = False) -> str:
    slug = os.path.basename(path)
    if slug.endswith(".yml"):
        slug = slug[: -len(".yml")]
    if trim_numeric_id_prefix:
        slug = NUMERIC_ID_PREFIX_RE.sub("", slug)
    return slug


class CollectionBuilder:
    def __init__(self) -> None:
        self._records: list[ContentRecord] = []

    def __len__(self) -> int:
        return len(self._records)

    def append(self, record: ContentRecord) -> None:
        self._records.append(record)

    def build(self) -> Collection:
        return tuple(self._records)


class TrainingLoader:
    """Loads one kind of training content and publishes it to the cache.

    Local YAML files are trusted: any read or parse failure aborts the load.
    Wiki pages are not: a page that is missing, fails to assemble or fails
    validation is skipped and the rest of the batch continues.
    """

    def __init__(
        self,
        config: LoaderConfig,
        cache: ContentCache,
        diagnostics: DiagnosticSink,
        client: MediaWikiClient | None = None,
    ):
        self.config = config
        self.cache = cache
        self.diagnostics = diagnostics
        self.client = client

    def load_local_content(self) -> None:
        builder = CollectionBuilder()
        self._load_from_yaml(builder)
        self._write_to_cache(builder)

    def load_local_and_wiki_content(self) -> None:
        builder = CollectionBuilder()
        self._load_from_yaml(builder)
        self._load_from_wiki(builder)
        self._write_to_cache(builder)

    def _load_from_yaml(self, builder: CollectionBuilder) -> None:
        for path in sorted(glob.glob(self.config.local_file_pattern)):
            builder.append(self.new_from_file(path))
        log.info("loaded %s local %s records", len(builder), self.config.content_kind.value)

    def new_from_file(self, path: str) -> ContentRecord:
        slug = slug_from_filename(path, self.config.trim_numeric_id_prefix)
        with open(path, encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
        if not isinstance(data, dict):
            raise ValueError(f"{path} must hold a YAML mapping")
        return record_from_mapping(self.config.content_kind, data, slug)

    def _load_from_wiki(self, builder: CollectionBuilder) -> None:
        base_page = self.config.wiki_base_page
        if self.client is None or not base_page:
            log.warning("wiki phase requested without a wiki client and base page; skipping")
            return
        assembler = ContentAssembler(self.client, self.config.content_kind)
        pages = resolve_components(self.client, base_page)
        added = 0
        for wiki_page in pages:
            try:
                record = assembler.assemble(wiki_page)
            except (AssemblyError, MediaWikiError, requests.RequestException) as exc:
                log.warning("skip wiki page %s: %s", wiki_page, exc)
                continue
            if not is_valid(record):
                self.diagnostics.capture(
                    "Invalid wiki training content",
                    "warn",
                    {"page": wiki_page, "content": record.to_dict() if record else None},
                )
                continue
            builder.append(record)
            added += 1
        log.info("loaded %s of %s wiki pages linked from %s", added, len(pages), base_page)

    def _write_to_cache(self, builder: CollectionBuilder) -> None:
        self.cache.write(self.config.cache_key, builder.build())

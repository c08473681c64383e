from __future__ import annotations

import argparse
import dataclasses
import logging

import requests

from .cache import ContentCache, JsonFileCache, PostgresContentCache
from .config import Config, load_config, loader_config_for
from .db import ensure_schema, get_conn
from .diagnostics import DiagnosticSink, LoggingDiagnostics, PostgresDiagnostics
from .loader import TrainingLoader
from .logging import configure_logging
from .mediawiki import MediaWikiClient
from .models import ContentKind


log = logging.getLogger("training_content")


class _CountingCache:
    def __init__(self, inner: ContentCache):
        self.inner = inner
        self.count = 0

    def write(self, key, value) -> None:
        self.inner.write(key, value)
        self.count = len(value)


def build_cache(cfg: Config) -> ContentCache:
    if cfg.pg_dsn:
        return PostgresContentCache(cfg.pg_dsn)
    return JsonFileCache(cfg.cache_dir)


def build_diagnostics(cfg: Config) -> DiagnosticSink:
    if cfg.pg_dsn:
        return PostgresDiagnostics(cfg.pg_dsn)
    return LoggingDiagnostics()


def main() -> None:
    parser = argparse.ArgumentParser(description="Load training content into the cache")
    parser.add_argument("--kind", choices=["slide", "module", "all"], default="all")
    parser.add_argument("--wiki", action="store_true", help="also load content from the wiki")
    parser.add_argument("--pattern", default=None, help="override the local YAML glob pattern")
    parser.add_argument("--cache-key", default=None)
    args = parser.parse_args()

    configure_logging()
    cfg = load_config()
    kinds = list(ContentKind) if args.kind == "all" else [ContentKind(args.kind)]
    if len(kinds) > 1 and (args.pattern or args.cache_key):
        raise SystemExit("--pattern and --cache-key need a single --kind")

    client = None
    if args.wiki:
        client = MediaWikiClient(cfg.mw_api_url, cfg.mw_user_agent, requests.Session())
        log.info("mw_api_url=%s", cfg.mw_api_url)

    if cfg.pg_dsn:
        with get_conn(cfg.pg_dsn) as conn:
            ensure_schema(conn)

    diagnostics = build_diagnostics(cfg)
    for kind in kinds:
        loader_cfg = loader_config_for(cfg, kind)
        if args.pattern:
            loader_cfg = dataclasses.replace(loader_cfg, local_file_pattern=args.pattern)
        if args.cache_key:
            loader_cfg = dataclasses.replace(loader_cfg, cache_key=args.cache_key)
        cache = _CountingCache(build_cache(cfg))
        loader = TrainingLoader(loader_cfg, cache, diagnostics, client=client)
        if args.wiki:
            loader.load_local_and_wiki_content()
        else:
            loader.load_local_content()
        print(f"summary kind={kind.value} key={loader_cfg.cache_key} records={cache.count}")


if __name__ == "__main__":
    main()

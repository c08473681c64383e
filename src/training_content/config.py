from __future__ import annotations

import os
from dataclasses import dataclass

from .models import ContentKind


META_WIKI_API_URL = "https://meta.wikimedia.org/w/api.php"


@dataclass(frozen=True)
class LoaderConfig:
    content_kind: ContentKind
    cache_key: str
    local_file_pattern: str
    trim_numeric_id_prefix: bool = False
    wiki_base_page: str | None = None

    def __post_init__(self) -> None:
        try:
            kind = ContentKind(self.content_kind)
        except ValueError as exc:
            raise ValueError(f"unknown content kind: {self.content_kind!r}") from exc
        object.__setattr__(self, "content_kind", kind)
        if not isinstance(self.cache_key, str) or not self.cache_key:
            raise ValueError("cache_key must not be empty")
        if not isinstance(self.local_file_pattern, str) or not self.local_file_pattern:
            raise ValueError("local_file_pattern must not be empty")
        if not isinstance(self.trim_numeric_id_prefix, bool):
            raise ValueError("trim_numeric_id_prefix must be a bool")
        if self.wiki_base_page is not None and (
            not isinstance(self.wiki_base_page, str) or not self.wiki_base_page.strip()
        ):
            raise ValueError("wiki_base_page must be None or a page title")


@dataclass(frozen=True)
class Config:
    mw_api_url: str = META_WIKI_API_URL
    mw_user_agent: str = "TrainingContentLoader/0.1"

    pg_dsn: str | None = None
    cache_dir: str = ".cache/training"

    slides_path: str = "training_content/slides/*.yml"
    modules_path: str = "training_content/modules/*.yml"
    slides_wiki_page: str | None = None
    modules_wiki_page: str | None = None


def load_config() -> Config:
    def opt(name: str) -> str | None:
        value = os.getenv(name, "").strip()
        return value or None

    api_url = os.getenv("MW_API_URL", META_WIKI_API_URL)
    if not api_url.startswith(("http://", "https://")):
        raise RuntimeError("MW_API_URL must be an http(s) URL")

    cfg = Config(
        mw_api_url=api_url,
        mw_user_agent=os.getenv("MW_USER_AGENT", "TrainingContentLoader/0.1"),
        pg_dsn=os.getenv("DATABASE_URL"),
        cache_dir=os.getenv("TRAINING_CACHE_DIR", ".cache/training"),
        slides_path=os.getenv("TRAINING_SLIDES_PATH", "training_content/slides/*.yml"),
        modules_path=os.getenv("TRAINING_MODULES_PATH", "training_content/modules/*.yml"),
        slides_wiki_page=opt("TRAINING_SLIDES_WIKI_PAGE"),
        modules_wiki_page=opt("TRAINING_MODULES_WIKI_PAGE"),
    )
    return cfg


def loader_config_for(cfg: Config, kind: ContentKind | str) -> LoaderConfig:
    kind = ContentKind(kind)
    if kind is ContentKind.SLIDE:
        return LoaderConfig(
            content_kind=kind,
            cache_key="slides",
            local_file_pattern=cfg.slides_path,
            trim_numeric_id_prefix=True,
            wiki_base_page=cfg.slides_wiki_page,
        )
    return LoaderConfig(
        content_kind=kind,
        cache_key="modules",
        local_file_pattern=cfg.modules_path,
        trim_numeric_id_prefix=False,
        wiki_base_page=cfg.modules_wiki_page,
    )

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Mapping, Union


class ContentKind(str, enum.Enum):
    SLIDE = "slide"
    MODULE = "module"


@dataclass(frozen=True)
class SlideTranslation:
    title: str
    content: str
    assessment: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"title": self.title, "content": self.content, "assessment": self.assessment}


@dataclass(frozen=True)
class ModuleTranslation:
    name: str
    description: str

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "description": self.description}


Translation = Union[SlideTranslation, ModuleTranslation]


def _translations_dict(translations: Mapping[str, Translation] | None) -> dict[str, Any]:
    if translations is None:
        return {}
    return {"translations": {lang: t.to_dict() for lang, t in translations.items()}}


@dataclass(frozen=True)
class Slide:
    slug: str
    title: str
    content: str
    assessment: dict[str, Any] | None = None
    id: int | None = None
    summary: str | None = None
    wiki_page: str | None = None
    # None for file-sourced slides; always a mapping for wiki-sourced ones.
    translations: dict[str, SlideTranslation] | None = None

    kind = ContentKind.SLIDE

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "kind": self.kind.value,
            "slug": self.slug,
            "id": self.id,
            "title": self.title,
            "summary": self.summary,
            "content": self.content,
            "assessment": self.assessment,
            "wiki_page": self.wiki_page,
        }
        out.update(_translations_dict(self.translations))
        return out


@dataclass(frozen=True)
class Module:
    slug: str
    name: str
    description: str = ""
    id: int | None = None
    slide_slugs: tuple[str, ...] = field(default_factory=tuple)
    wiki_page: str | None = None
    translations: dict[str, ModuleTranslation] | None = None

    kind = ContentKind.MODULE

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "kind": self.kind.value,
            "slug": self.slug,
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "slide_slugs": list(self.slide_slugs),
            "wiki_page": self.wiki_page,
        }
        out.update(_translations_dict(self.translations))
        return out


ContentRecord = Union[Slide, Module]
Collection = tuple[ContentRecord, ...]


def _str(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _opt_int(value: Any) -> int | None:
    if value is None or value == "":
        return None
    return int(value)


def _slide_slug(entry: Any) -> str:
    # Module slide lists are either plain slugs or mappings like {slug: intro}.
    if isinstance(entry, Mapping):
        return str(entry["slug"])
    return str(entry)


def translation_from_fields(kind: ContentKind, fields: Mapping[str, Any]) -> Translation:
    if kind is ContentKind.SLIDE:
        return SlideTranslation(
            title=_str(fields.get("title")),
            content=_str(fields.get("content")),
            assessment=fields.get("assessment"),
        )
    return ModuleTranslation(
        name=_str(fields.get("name")),
        description=_str(fields.get("description")),
    )


def record_from_mapping(
    kind: ContentKind,
    data: Mapping[str, Any],
    slug: str,
    translations: Mapping[str, Translation] | None = None,
) -> ContentRecord:
    """Map parsed YAML or wiki JSON onto the typed record for ``kind``.

    ``translations`` is passed through as-is, so ``None`` marks a file-sourced
    record and an empty mapping a wiki-sourced record with no translations.
    """
    wiki_page = data.get("wiki_page") or None
    trans = dict(translations) if translations is not None else None
    if kind is ContentKind.SLIDE:
        return Slide(
            slug=slug,
            title=_str(data.get("title")),
            content=_str(data.get("content")),
            assessment=data.get("assessment"),
            id=_opt_int(data.get("id")),
            summary=data.get("summary"),
            wiki_page=wiki_page,
            translations=trans,
        )
    slides = data.get("slides") or data.get("slide_slugs") or ()
    return Module(
        slug=slug,
        name=_str(data.get("name")),
        description=_str(data.get("description")),
        id=_opt_int(data.get("id")),
        slide_slugs=tuple(_slide_slug(s) for s in slides),
        wiki_page=wiki_page,
        translations=trans,
    )


def is_valid(record: ContentRecord | None) -> bool:
    if record is None or not record.slug:
        return False
    if record.wiki_page and record.translations is None:
        return False
    if isinstance(record, Slide):
        return bool(record.title) and bool(record.content)
    return bool(record.name)

import json

import pytest
import requests
import yaml

from training_content.config import LoaderConfig
from training_content.loader import TrainingLoader, slug_from_filename
from training_content.models import ContentKind, Slide


class FakeWiki:
    def __init__(self, pages: dict, links: list, stats: dict | None = None, fail: set | None = None):
        self.pages = pages
        self.links = links
        self.stats = stats or {}
        self.fail = fail or set()

    def get_page_content(self, title):
        if title in self.fail:
            raise requests.ConnectionError(f"cannot reach {title}")
        return self.pages.get(title)

    def query(self, params):
        if params.get("prop") == "links":
            return {"pages": [{"title": params["titles"], "links": [{"title": t} for t in self.links]}]}
        base = params["mgsgroup"][len("page-") :]
        return {"messagegroupstats": self.stats.get(base, [])}


class FakeCache:
    def __init__(self):
        self.writes = []

    def write(self, key, value):
        self.writes.append((key, value))


class FakeDiagnostics:
    def __init__(self):
        self.captured = []

    def capture(self, message, level, extra):
        self.captured.append((message, level, extra))


def _write_slides(directory):
    (directory / "002-pillars.yml").write_text("id: 2\ntitle: Pillars\ncontent: Five of them\n")
    (directory / "001-intro.yml").write_text("id: 1\ntitle: Intro\ncontent: Welcome\n")


def _config(tmp_path, **overrides):
    values = dict(
        content_kind=ContentKind.SLIDE,
        cache_key="slides",
        local_file_pattern=str(tmp_path / "*.yml"),
        trim_numeric_id_prefix=True,
        wiki_base_page="Training/Slides",
    )
    values.update(overrides)
    return LoaderConfig(**values)


def _wiki_page(slug, title):
    return json.dumps({"slug": slug, "title": title, "content": f"{title} body"})


def test_slug_from_filename_trim():
    assert slug_from_filename("slides/042-overview.yml", True) == "overview"
    assert slug_from_filename("slides/042-overview.yml", False) == "042-overview"
    assert slug_from_filename("modules/overview.yml", True) == "overview"


def test_load_local_content_publishes_sorted_file_records(tmp_path):
    _write_slides(tmp_path)
    cache = FakeCache()

    TrainingLoader(_config(tmp_path), cache, FakeDiagnostics()).load_local_content()

    assert len(cache.writes) == 1
    key, collection = cache.writes[0]
    assert key == "slides"
    assert isinstance(collection, tuple)
    assert [r.slug for r in collection] == ["intro", "pillars"]
    assert all(r.translations is None for r in collection)


def test_load_local_content_publishes_empty_collection(tmp_path):
    cache = FakeCache()

    TrainingLoader(_config(tmp_path), cache, FakeDiagnostics()).load_local_content()

    assert cache.writes == [("slides", ())]


def test_wiki_phase_appends_after_local_prefix(tmp_path):
    _write_slides(tmp_path)
    wiki = FakeWiki(
        {"Training/B": _wiki_page("b", "B"), "Training/A": _wiki_page("a", "A")},
        links=["Training/B", "Training/A"],
    )
    cache = FakeCache()
    loader = TrainingLoader(_config(tmp_path), cache, FakeDiagnostics(), client=wiki)

    loader.load_local_content()
    loader.load_local_and_wiki_content()

    local_only = cache.writes[0][1]
    combined = cache.writes[1][1]
    assert combined[: len(local_only)] == local_only
    assert [r.slug for r in combined[len(local_only) :]] == ["b", "a"]
    assert all(r.translations == {} for r in combined[len(local_only) :])


def test_wiki_phase_skips_missing_invalid_and_failing_pages(tmp_path):
    wiki = FakeWiki(
        {
            "Training/Good": _wiki_page("good", "Good"),
            "Training/Invalid": json.dumps({"slug": "invalid", "title": "No content"}),
            "Training/NoTranslation": json.dumps({"wiki_page": "Untranslated"}),
            "Untranslated": "== Untranslated ==\nBody",
            "Training/Last": _wiki_page("last", "Last"),
        },
        links=[
            "Training/Missing",
            "Training/Good",
            "Training/Invalid",
            "Training/Unreachable",
            "Training/NoTranslation",
            "Training/Last",
        ],
        stats={"Untranslated": [{"code": "de", "total": 2, "translated": 1}]},
        fail={"Training/Unreachable"},
    )
    cache = FakeCache()
    diagnostics = FakeDiagnostics()

    TrainingLoader(_config(tmp_path), cache, diagnostics, client=wiki).load_local_and_wiki_content()

    (key, collection), = cache.writes
    assert [r.slug for r in collection] == ["good", "last"]
    messages = [(m, level, extra["page"]) for m, level, extra in diagnostics.captured]
    assert messages == [
        ("Invalid wiki training content", "warn", "Training/Missing"),
        ("Invalid wiki training content", "warn", "Training/Invalid"),
    ]
    assert diagnostics.captured[0][2]["content"] is None
    assert diagnostics.captured[1][2]["content"]["slug"] == "invalid"


def test_local_parse_failure_aborts_without_publishing(tmp_path):
    (tmp_path / "001-broken.yml").write_text("title: [unclosed\n")
    cache = FakeCache()
    loader = TrainingLoader(_config(tmp_path), cache, FakeDiagnostics())

    with pytest.raises(yaml.YAMLError):
        loader.load_local_content()

    assert cache.writes == []


def test_wiki_phase_without_base_page_still_publishes(tmp_path):
    _write_slides(tmp_path)
    cache = FakeCache()
    loader = TrainingLoader(_config(tmp_path, wiki_base_page=None), cache, FakeDiagnostics())

    loader.load_local_and_wiki_content()

    assert len(cache.writes) == 1
    assert [r.slug for r in cache.writes[0][1]] == ["intro", "pillars"]
    assert all(isinstance(r, Slide) for r in cache.writes[0][1])


def test_wiki_phase_skips_page_with_malformed_fields(tmp_path):
    wiki = FakeWiki(
        {
            "Training/Bad": json.dumps({"slug": "bad", "id": "intro", "title": "Bad", "content": "x"}),
            "Training/Good": _wiki_page("good", "Good"),
        },
        links=["Training/Bad", "Training/Good"],
    )
    cache = FakeCache()

    TrainingLoader(_config(tmp_path), cache, FakeDiagnostics(), client=wiki).load_local_and_wiki_content()

    (key, collection), = cache.writes
    assert [r.slug for r in collection] == ["good"]


def test_wiki_phase_ignores_non_numeric_translation_stats(tmp_path):
    wiki = FakeWiki(
        {
            "Training/Bad": json.dumps({"slug": "bad", "wiki_page": "Bad page"}),
            "Bad page": "== Bad ==\nBody",
            "Training/Good": _wiki_page("good", "Good"),
        },
        links=["Training/Bad", "Training/Good"],
        stats={"Bad page": [{"code": "de", "total": "n/a", "translated": 1}]},
    )
    cache = FakeCache()

    TrainingLoader(_config(tmp_path), cache, FakeDiagnostics(), client=wiki).load_local_and_wiki_content()

    (key, collection), = cache.writes
    assert [r.slug for r in collection] == ["bad", "good"]
    assert collection[0].translations == {}

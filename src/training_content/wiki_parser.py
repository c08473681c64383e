from __future__ import annotations

import re
from typing import Any


TRANSLATE_TAG_RE = re.compile(r"</?translate>")
UNIT_MARKER_RE = re.compile(r"<!--T:\d+-->")
LANGUAGES_TAG_RE = re.compile(r"<languages\s*/>", re.IGNORECASE)
HEADING_RE = re.compile(r"^[ \t]*(={2,6})[ \t]*(.+?)[ \t]*\1[ \t]*$", re.MULTILINE)
QUIZ_RE = re.compile(r"\{\{\s*Training module quiz\s*\|(.*?)\}\}", re.IGNORECASE | re.DOTALL)
ANSWER_KEY_RE = re.compile(r"^answer_?(\d+)$")
EXPLANATION_KEY_RE = re.compile(r"^explanation_?(\d+)$")


def _clean(wikitext: str) -> str:
    text = TRANSLATE_TAG_RE.sub("", wikitext)
    text = UNIT_MARKER_RE.sub("", text)
    text = LANGUAGES_TAG_RE.sub("", text)
    return text


def _template_params(body: str) -> dict[str, str]:
    params: dict[str, str] = {}
    for part in body.split("|"):
        if "=" not in part:
            continue
        key, value = part.split("=", 1)
        params[key.strip().lower()] = value.strip()
    return params


class WikiSlideParser:
    """Extracts title, body and quiz from one training page's wikitext.

    The page title is the first heading; everything after it (minus the quiz
    template) is the body. Translate extension markup is dropped so translated
    subpages parse the same way as their source page.
    """

    def __init__(self, wikitext: str | None):
        self._text = _clean(wikitext or "")
        heading = HEADING_RE.search(self._text)
        if heading:
            self._title = heading.group(2).strip()
            self._body = self._text[heading.end() :]
        else:
            self._title = ""
            self._body = self._text
        self._quiz_match = QUIZ_RE.search(self._body)

    def title(self) -> str:
        return self._title

    def content(self) -> str:
        body = QUIZ_RE.sub("", self._body)
        return re.sub(r"\n{3,}", "\n\n", body).strip()

    def quiz(self) -> dict[str, Any] | None:
        if not self._quiz_match:
            return None
        params = _template_params(self._quiz_match.group(1))
        answers: dict[int, dict[str, Any]] = {}
        for key, value in params.items():
            answer = ANSWER_KEY_RE.match(key)
            if answer:
                idx = int(answer.group(1))
                answers.setdefault(idx, {"id": idx, "text": "", "explanation": ""})["text"] = value
                continue
            explanation = EXPLANATION_KEY_RE.match(key)
            if explanation:
                idx = int(explanation.group(1))
                answers.setdefault(idx, {"id": idx, "text": "", "explanation": ""})[
                    "explanation"
                ] = value
        correct = params.get("correct_answer_id", "")
        return {
            "question": params.get("question", ""),
            "correct_answer_id": int(correct) if correct.isdigit() else None,
            "answers": [answers[idx] for idx in sorted(answers)],
        }

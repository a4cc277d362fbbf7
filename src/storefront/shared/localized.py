"""Multilingual text stored as a ``{vi, zh}`` pair.

Vietnamese is the source language and always present; the Chinese half is
filled in later by the translation pipeline. Readers ask for a language and
fall back to Vietnamese when that half is still empty.
"""

import unicodedata

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import String

from storefront.domain import storefront

SOURCE_LANGUAGE = "vi"
SUPPORTED_LANGUAGES = ("vi", "zh")


@storefront.value_object
class LocalizedText:
    vi: String(required=True, max_length=5000)
    zh: String(max_length=5000, default="")

    @invariant.post
    def source_text_must_not_be_blank(self):
        if not (self.vi or "").strip():
            raise ValidationError({"vi": ["Vietnamese text is required"]})

    def in_language(self, lang: str | None = None) -> str:
        if lang == "zh" and self.zh:
            return self.zh
        return self.vi

    def is_translated(self, lang: str = "zh") -> bool:
        return bool(getattr(self, lang, None))

    def with_translation(self, lang: str, text: str) -> "LocalizedText":
        if lang not in SUPPORTED_LANGUAGES:
            raise ValidationError({"lang": [f"Unsupported language: {lang}"]})
        values = {"vi": self.vi, "zh": self.zh or ""}
        values[lang] = text
        return LocalizedText(**values)

    def to_dict(self) -> dict:
        return {"vi": self.vi, "zh": self.zh or ""}


def localize(value, lang: str | None = None) -> str:
    """Display text for ``lang`` from a LocalizedText, a ``{vi, zh}`` dict or a plain string."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, LocalizedText):
        return value.in_language(lang)
    if isinstance(value, dict):
        return value.get(lang or SOURCE_LANGUAGE) or value.get(SOURCE_LANGUAGE) or value.get("en") or ""
    return str(value)


def as_pair(value) -> dict:
    """Normalize a stored multilingual value into a ``{vi, zh}`` dict."""
    if isinstance(value, LocalizedText):
        return value.to_dict()
    if isinstance(value, dict):
        return {"vi": value.get("vi") or "", "zh": value.get("zh") or ""}
    text = "" if value is None else str(value)
    return {"vi": text, "zh": ""}


def fold(text: str | None) -> str:
    """Lower-case and strip Vietnamese diacritics so "Bàn gỗ" compares equal to "ban go"."""
    if not text:
        return ""
    text = text.replace("đ", "d").replace("Đ", "D")
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(ch for ch in decomposed if unicodedata.category(ch) != "Mn").lower()


def format_vnd(amount: float | int | None) -> str:
    """Render an amount the way the shop prints prices: ``1.234.000 ₫``."""
    value = int(round(amount or 0))
    return f"{value:,}".replace(",", ".") + " ₫"

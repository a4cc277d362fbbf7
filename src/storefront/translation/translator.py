"""Machine translation adapters.

GoogleFreeTranslator talks to Google's free web endpoint through
deep-translator (no API key). FakeTranslator is deterministic and offline.
"""

from abc import ABC, abstractmethod

from deep_translator import GoogleTranslator

from shared.settings import get_settings

# Our language codes mapped to what GoogleTranslator expects
_LANG_MAP: dict[str, str] = {
    "vi": "vi",
    "zh": "zh-CN",
    "en": "en",
}


class TranslationError(Exception):
    """The translation service could not translate a piece of text."""


class Translator(ABC):
    @abstractmethod
    def translate(self, text: str, source: str, target: str) -> str: ...


class GoogleFreeTranslator(Translator):
    def translate(self, text: str, source: str, target: str) -> str:
        if not text or not text.strip():
            return text or ""

        try:
            result = GoogleTranslator(
                source=_LANG_MAP.get(source, source),
                target=_LANG_MAP.get(target, target),
            ).translate(text)
        except Exception as exc:
            raise TranslationError(f"Google translation failed: {exc}") from exc

        if not result:
            raise TranslationError(f"Empty translation for {text[:40]!r}")
        return result


class FakeTranslator(Translator):
    """Prefixes text with the target language, e.g. ``[zh] Bàn gỗ``."""

    def __init__(self):
        self.calls: list[tuple[str, str, str]] = []
        self.failing_texts: set[str] = set()

    def fail_on(self, *texts: str) -> None:
        self.failing_texts.update(texts)

    def translate(self, text: str, source: str, target: str) -> str:
        self.calls.append((text, source, target))
        if text in self.failing_texts:
            raise TranslationError(f"Simulated failure for {text!r}")
        return f"[{target}] {text}"


_translator: Translator | None = None


def get_translator() -> Translator:
    global _translator
    if _translator is None:
        _translator = FakeTranslator() if get_settings().translator_backend == "fake" else GoogleFreeTranslator()
    return _translator


def set_translator(translator: Translator) -> None:
    global _translator
    _translator = translator


def reset_translator() -> None:
    global _translator
    _translator = None

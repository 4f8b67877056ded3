from __future__ import annotations

import unicodedata
from functools import lru_cache
from typing import Callable, Dict, List, Protocol


class Tokenizer(Protocol):
    def tokenize(self, text: str | None) -> List[str]: ...


def _is_punct_or_symbol(ch: str) -> bool:
    # Unicode general categories P* (punctuation) and S* (symbols)
    return unicodedata.category(ch)[0] in ("P", "S")


class SimpleTokenizer:
    """
    Lowercase, turn punctuation/symbol runs into a single space and split on
    whitespace. No stemming or stopwords; scripts written without spaces
    (e.g. Japanese) come out as one long token per space/punctuation-delimited run.
    """

    def tokenize(self, text: str | None) -> List[str]:
        if not text:
            return []
        out: list[str] = []
        prev_sep = False
        for ch in str(text).lower():
            if _is_punct_or_symbol(ch):
                if not prev_sep:
                    out.append(" ")
                prev_sep = True
            else:
                out.append(ch)
                prev_sep = False
        return "".join(out).split()


_TOKENIZERS: Dict[str, Callable[[], Tokenizer]] = {
    "simple": SimpleTokenizer,
}


def register_tokenizer(name: str, factory: Callable[[], Tokenizer]) -> None:
    _TOKENIZERS[name] = factory
    get_tokenizer.cache_clear()


@lru_cache(maxsize=None)
def get_tokenizer(name: str = "simple") -> Tokenizer:
    try:
        factory = _TOKENIZERS[name]
    except KeyError:
        raise ValueError(f"Unknown tokenizer: {name!r} (available: {', '.join(sorted(_TOKENIZERS))})") from None
    return factory()


def tokenize(text: str | None) -> List[str]:
    return get_tokenizer("simple").tokenize(text)

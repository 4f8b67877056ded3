from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from typing import Any, List, Sequence, Tuple, TypeVar

from app.services.tokenizer import SimpleTokenizer, Tokenizer

R = TypeVar("R")

TOKEN_HIT = 1.0
EXACT_TAG_BONUS = 0.5

_default_tokenizer = SimpleTokenizer()


def _field(record: Any, name: str) -> Any:
    # Records may be pydantic models, plain objects or dicts loaded from JSON
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


def _text(value: Any) -> str | None:
    if isinstance(value, str):
        return value
    # numbers become text; bools and NaN (pandas empty cells) do not
    if isinstance(value, (int, float)) and not isinstance(value, bool) and not (isinstance(value, float) and math.isnan(value)):
        return str(value)
    return None


def _tags(record: Any) -> List[str]:
    tags = _field(record, "tags")
    if not isinstance(tags, Iterable) or isinstance(tags, (str, bytes)):
        return []
    return [t for t in map(_text, tags) if t is not None]


def score(query: str | None, record: Any, tokenizer: Tokenizer | None = None) -> float:
    """
    Relevance of ``record`` for ``query``.

    Each query token (repeats count again) scores 1 when it occurs anywhere in
    the tokenized description + tags, and another 0.5 when it equals one of the
    record's tags as a whole (case-insensitive).
    """
    tok = tokenizer or _default_tokenizer
    q = tok.tokenize(query)
    tags = _tags(record)
    description = _text(_field(record, "description")) or ""
    hay = set(tok.tokenize(f"{description} {' '.join(tags)}"))
    if not q or not hay:
        return 0.0

    s = 0.0
    for t in q:
        if t in hay:
            s += TOKEN_HIT
    exact = {t.lower() for t in tags}
    for t in q:
        if t in exact:
            s += EXACT_TAG_BONUS
    return s


def rank(
    query: str | None,
    records: Sequence[R],
    k: int = 10,
    tokenizer: Tokenizer | None = None,
) -> List[Tuple[R, float]]:
    """Return up to ``k`` (record, score) pairs with score > 0, best first.

    Ties keep the order of ``records`` (sorted() is stable).
    """
    if k <= 0 or not records:
        return []
    scored = [(r, score(query, r, tokenizer)) for r in records]
    hits = [pair for pair in scored if pair[1] > 0]
    hits = sorted(hits, key=lambda pair: pair[1], reverse=True)
    return hits[:k]


def top_k(
    query: str | None,
    records: Sequence[R],
    k: int = 10,
    tokenizer: Tokenizer | None = None,
) -> List[R]:
    return [r for r, _ in rank(query, records, k=k, tokenizer=tokenizer)]

from __future__ import annotations

from functools import lru_cache
from typing import List, Sequence, Tuple, TypeVar

from app.core.config import settings
from app.services.scoring import rank, score, top_k
from app.services.tokenizer import Tokenizer, get_tokenizer

R = TypeVar("R")


class Ranker:
    """
    Keyword ranker over an in-memory snapshot of records. Holds only the
    tokenizer strategy, so one instance can serve concurrent requests.

    Every call re-scores the whole collection. If record volume grows, an
    inverted index (token -> record ids) is the natural next step.
    """

    def __init__(self, tokenizer: Tokenizer) -> None:
        self.tokenizer = tokenizer

    def score(self, query: str, record) -> float:
        return score(query, record, self.tokenizer)

    def rank(self, query: str, records: Sequence[R], k: int = 10) -> List[Tuple[R, float]]:
        return rank(query, records, k=k, tokenizer=self.tokenizer)

    def top_k(self, query: str, records: Sequence[R], k: int = 10) -> List[R]:
        return top_k(query, records, k=k, tokenizer=self.tokenizer)


@lru_cache(maxsize=1)
def get_ranker() -> Ranker:
    return Ranker(get_tokenizer(settings.tokenizer))

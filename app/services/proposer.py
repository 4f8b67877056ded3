from __future__ import annotations

import json
import logging
from functools import lru_cache
from typing import Any, List

import openai
from openai import AsyncOpenAI

from app.core.config import settings
from app.services.uploads import StoredUpload

logger = logging.getLogger(__name__)

UNREADABLE_DESCRIPTION = "This file could not be read; please enter a description manually."

SYSTEM_PROMPT = (
    "You are the librarian of a company document archive. From the file information below, produce\n"
    "(1) description: what this document is (100-200 characters)\n"
    "(2) tags: up to 10 tags, mostly nouns\n"
    "as JSON with exactly the fields description and tags.\n"
    f'If the file cannot be read, set description to "{UNREADABLE_DESCRIPTION}"\n'
    'Start the description with "This file is ..." and write nothing but the explanation.'
)


class ProposalError(RuntimeError):
    """The completion API call itself failed."""


def fallback_description(original_name: str) -> str:
    return f'Description of "{original_name}" (AI proposal)'


def build_messages(upload: StoredUpload) -> list[dict[str, str]]:
    user = f"File name: {upload.original_name}\nMIME: {upload.mime or 'unknown'}\nSize: {upload.size} bytes"
    if upload.preview:
        user += f"\nPreview:\n{upload.preview}"
    else:
        user += "\n(binary file, no content preview)"
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": user},
    ]


def parse_proposal(raw: str | None, original_name: str, max_tags: int | None = None) -> tuple[str, List[str]]:
    """Pull (description, tags) out of a completion; malformed output gives a placeholder and no tags."""
    limit = settings.max_tags if max_tags is None else max_tags
    try:
        parsed: Any = json.loads(raw or "{}")
    except (TypeError, ValueError):
        logger.warning("Completion for %s was not valid JSON", original_name)
        parsed = {}
    if not isinstance(parsed, dict):
        parsed = {}
    description = parsed.get("description")
    if not isinstance(description, str) or not description.strip():
        description = fallback_description(original_name)
    tags_raw = parsed.get("tags")
    tags: List[str] = []
    if isinstance(tags_raw, list):
        tags = [str(t).strip() for t in tags_raw if t is not None and str(t).strip()]
    return description.strip(), tags[:limit]


class _Proposer:
    def __init__(self, client: Any | None = None, backend: str | None = None) -> None:
        self._client = client
        mode = backend or settings.proposer_backend
        if mode == "auto":
            mode = "openai" if (client is not None or settings.openai_api_key) else "static"
        if mode not in ("openai", "static"):
            raise ValueError(f"Unknown proposer backend: {mode!r}")
        self.mode = mode

    def _ensure_client(self) -> Any:
        if self._client is None:
            self._client = AsyncOpenAI(api_key=settings.openai_api_key)
        return self._client

    async def propose(self, upload: StoredUpload) -> tuple[str, List[str]]:
        if self.mode == "static":
            return fallback_description(upload.original_name), []
        try:
            client = self._ensure_client()
            resp = await client.chat.completions.create(
                model=settings.openai_model,
                messages=build_messages(upload),
                temperature=settings.openai_temperature,
                response_format={"type": "json_object"},
            )
        except openai.OpenAIError as e:
            logger.error("Completion request for %s failed: %s", upload.original_name, e)
            raise ProposalError(str(e)) from e
        raw = resp.choices[0].message.content if resp.choices else None
        return parse_proposal(raw, upload.original_name)


@lru_cache(maxsize=1)
def get_proposer() -> _Proposer:
    return _Proposer()

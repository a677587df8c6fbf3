from __future__ import annotations

import re
from typing import List

from bs4 import BeautifulSoup

WHITESPACE_RE = re.compile(r"\s+")
PUNCT_GAP_RE = re.compile(r"\s+([.,;:!?)\]])")


def html_to_text(raw: str | None) -> str:
    if not raw:
        return ""
    if "<" not in raw:
        return WHITESPACE_RE.sub(" ", raw).strip()
    soup = BeautifulSoup(raw, "html.parser")
    text = WHITESPACE_RE.sub(" ", soup.get_text(separator=" ", strip=True))
    return PUNCT_GAP_RE.sub(r"\1", text)


def chunk_text_for_telegram(text: str, limit: int = 3500) -> List[str]:
    if not text:
        return []
    if len(text) <= limit:
        return [text]
    chunks: List[str] = []
    buffer = ""
    for paragraph in text.split("\n\n"):
        candidate = paragraph if not buffer else buffer + "\n\n" + paragraph
        if len(candidate) <= limit:
            buffer = candidate
            continue
        if buffer:
            chunks.append(buffer)
            buffer = ""
        if len(paragraph) <= limit:
            buffer = paragraph
            continue
        for idx in range(0, len(paragraph), limit):
            chunks.append(paragraph[idx : idx + limit])
    if buffer:
        chunks.append(buffer)
    return chunks


def format_seconds(seconds: int) -> str:
    minutes, secs = divmod(max(0, int(seconds)), 60)
    return f"{minutes}:{secs:02d}"

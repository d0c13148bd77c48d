from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional

import discord


MESSAGE_MAX = 2000
EMBED_DESCRIPTION_MAX = 4096
MAX_EMBEDS = 10
# Discord rejects a message whose embeds total more than this
EMBED_TOTAL_MAX = 6000
EMBED_COLOR = 0x2B2D31
SECTION_JOIN = "\n\n---\n\n"
# Header-only sections ("Top movies (from 2026):") shorter than this are dropped
MIN_SECTION_CHARS = 50

POSTER_RE = re.compile(r"\[POSTER:(https://[^\]]+)\]")


@dataclass
class Section:
    text: str
    poster_url: Optional[str] = None


def strip_poster_directives(text: str) -> str:
    return POSTER_RE.sub("", text).strip()


def parse_response_sections(text: str) -> List[Section]:
    """Split an answer into sections, each owning the poster that follows it."""
    matches = list(POSTER_RE.finditer(text))
    if not matches:
        return [Section(text.strip())]
    if len(matches) == 1:
        return [Section(strip_poster_directives(text), matches[0].group(1))]

    sections: List[Section] = []
    last = 0
    for m in matches:
        body = text[last:m.start()].strip()
        if body:
            sections.append(Section(body, m.group(1)))
        last = m.end()
    remaining = text[last:].strip()
    if remaining:
        sections.append(Section(remaining))
    return [s for s in sections if len(s.text) > MIN_SECTION_CHARS or s.poster_url]


def chunk_text(text: str, limit: int = MESSAGE_MAX) -> List[str]:
    """Split text into message-sized chunks, preferring line then word breaks.

    A break point in the first half of the window is rejected so chunks do not
    come out tiny; in that case the next preference (or a hard cut) is used.
    """
    chunks: List[str] = []
    remaining = text
    min_break = limit // 2
    while remaining:
        if len(remaining) <= limit:
            chunks.append(remaining)
            break
        cut = remaining.rfind("\n", 0, limit + 1)
        if cut < min_break:
            cut = remaining.rfind(" ", 0, limit + 1)
        if cut < min_break:
            cut = limit
        chunks.append(remaining[:cut])
        remaining = remaining[cut:].strip()
    return chunks


def build_embeds(sections: List[Section]) -> List[discord.Embed]:
    embeds: List[discord.Embed] = []
    remaining = EMBED_TOTAL_MAX
    for section in sections[:MAX_EMBEDS]:
        if remaining <= 0:
            break
        description = section.text[:min(EMBED_DESCRIPTION_MAX, remaining)]
        remaining -= len(description)
        embed = discord.Embed(description=description, color=EMBED_COLOR)
        if section.poster_url:
            embed.set_thumbnail(url=section.poster_url)
        embeds.append(embed)
    return embeds

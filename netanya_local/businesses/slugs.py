# netanya_local/businesses/slugs.py
from __future__ import annotations

import logging
import re
import time
from typing import Literal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from netanya_local.businesses.models import Business

logger = logging.getLogger(__name__)

MAX_SLUG_SUFFIX = 1000
FALLBACK_SLUG = "business"

HEBREW_TO_LATIN = {
    "א": "a", "ב": "b", "ג": "g", "ד": "d", "ה": "h", "ו": "v", "ז": "z",
    "ח": "ch", "ט": "t", "י": "y", "כ": "k", "ך": "k", "ל": "l", "מ": "m",
    "ם": "m", "נ": "n", "ן": "n", "ס": "s", "ע": "", "פ": "p", "ף": "p",
    "צ": "ts", "ץ": "ts", "ק": "k", "ר": "r", "ש": "sh", "ת": "t",
    # огласовки (никуд)
    "\u05B0": "e", "\u05B1": "e", "\u05B2": "a", "\u05B3": "o", "\u05B4": "i",
    "\u05B5": "e", "\u05B6": "e", "\u05B7": "a", "\u05B8": "a", "\u05B9": "o",
    "\u05BB": "u",
    # дагеш, метег и прочие знаки выбрасываем
    "\u05BC": "", "\u05BD": "", "\u05BF": "", "\u05C0": "", "\u05C1": "",
    "\u05C2": "", "\u05C3": "",
}

RUSSIAN_TO_LATIN = {
    "а": "a", "б": "b", "в": "v", "г": "g", "д": "d", "е": "e", "ё": "yo",
    "ж": "zh", "з": "z", "и": "i", "й": "y", "к": "k", "л": "l", "м": "m",
    "н": "n", "о": "o", "п": "p", "р": "r", "с": "s", "т": "t", "у": "u",
    "ф": "f", "х": "kh", "ц": "ts", "ч": "ch", "ш": "sh", "щ": "shch", "ъ": "",
    "ы": "y", "ь": "", "э": "e", "ю": "yu", "я": "ya",
}

_NON_SLUG_CHARS = re.compile(r"[^a-z0-9\s-]")
_SEPARATORS = re.compile(r"[\s-]+")


def transliterate(text: str) -> str:
    out = []
    for ch in text:
        if ch in HEBREW_TO_LATIN:
            out.append(HEBREW_TO_LATIN[ch])
        elif ch.lower() in RUSSIAN_TO_LATIN:
            # регистр не важен: слаг всё равно уходит в lower()
            out.append(RUSSIAN_TO_LATIN[ch.lower()])
        else:
            out.append(ch)
    return "".join(out)


def create_slug(text: str) -> str:
    """
    URL-safe slug: transliterate He/Ru to Latin, lowercase, keep ``[a-z0-9-]``.

    >>> create_slug("Кафе Москва")
    'kafe-moskva'
    """
    slug = transliterate(text).lower()
    slug = _NON_SLUG_CHARS.sub("", slug)
    slug = _SEPARATORS.sub("-", slug).strip("-")
    return slug or FALLBACK_SLUG


async def generate_unique_business_slug(
    session: AsyncSession,
    name: str,
    language: Literal["he", "ru"],
) -> str:
    base_slug = create_slug(name)
    column = Business.slug_he if language == "he" else Business.slug_ru

    async def _taken(candidate: str) -> bool:
        res = await session.execute(select(Business.id).where(column == candidate).limit(1))
        return res.first() is not None

    if not await _taken(base_slug):
        return base_slug

    for counter in range(1, MAX_SLUG_SUFFIX + 1):
        candidate = f"{base_slug}-{counter}"
        if not await _taken(candidate):
            return candidate

    logger.warning("Slug space exhausted for %r, falling back to timestamp suffix", base_slug)
    return f"{base_slug}-{int(time.time() * 1000)}"

"""Daily trading-psychology quote selection."""

import hashlib
from dataclasses import dataclass
from datetime import date, datetime
from functools import lru_cache
from pathlib import Path
from typing import Optional

import structlog
import yaml

from ..utils.time import get_reference_time

logger = structlog.get_logger(__name__)

QUOTES_FILE = Path(__file__).with_name("quotes.yaml")


@dataclass(frozen=True)
class Quote:
    """A single entry of the quote table."""
    id: int
    text: str
    author: str
    category: str


@dataclass(frozen=True)
class DailyQuote:
    """Quote selected for a trader on a given day."""
    quote: Quote
    date: date


@lru_cache(maxsize=1)
def load_quotes() -> tuple[Quote, ...]:
    """Load the quote table once per process."""
    with open(QUOTES_FILE) as f:
        raw = yaml.safe_load(f)

    quotes = tuple(Quote(**entry) for entry in raw["quotes"])
    logger.debug("Quote table loaded", count=len(quotes))
    return quotes


def _seed_index(seed: str, size: int) -> int:
    """Stable index for a seed string (independent of PYTHONHASHSEED)."""
    digest = hashlib.sha256(seed.encode("utf-8")).hexdigest()
    return int(digest[:16], 16) % size


def get_daily_quote(user_id: str, now: Optional[datetime] = None) -> DailyQuote:
    """
    Pick the quote of the day for a trader.

    The same trader sees the same quote all day; different traders and
    different days spread across the table.
    """
    today = get_reference_time(now).date()
    quotes = load_quotes()
    quote = quotes[_seed_index(f"{user_id}-{today.isoformat()}", len(quotes))]

    logger.info("Selected daily quote", quote_id=quote.id, user_id=user_id, date=today.isoformat())
    return DailyQuote(quote=quote, date=today)


def get_quotes_by_category(category: str) -> list[Quote]:
    return [q for q in load_quotes() if q.category == category]

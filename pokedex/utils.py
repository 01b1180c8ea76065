"""
Pokedex Utilities - Shared helper functions.
"""
import logging
from datetime import datetime
from typing import Optional, Union

from .config import SPRITES_URL

logger = logging.getLogger(__name__)


def official_artwork_url(pokemon_id: int) -> str:
    """Artwork URL derived from the catalog id (last resort for images)."""
    return f'{SPRITES_URL}/other/official-artwork/{pokemon_id}.png'


def sprite_url(pokemon_id: int, shiny: bool = False) -> str:
    """Front sprite URL for a catalog id, optionally the shiny variant."""
    if shiny:
        return f'{SPRITES_URL}/shiny/{pokemon_id}.png'
    return f'{SPRITES_URL}/{pokemon_id}.png'


def normalize_key(key: Union[str, int]) -> str:
    """Lookup key for the catalog: ids as-is, names stripped and lower-cased."""
    if isinstance(key, int):
        return str(key)
    return key.strip().lower()


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp from the backend. Returns None if unparseable."""
    if not value:
        return None
    try:
        # Backend sends JavaScript-style 'Z' suffixes
        return datetime.fromisoformat(value.replace('Z', '+00:00'))
    except (TypeError, ValueError):
        logger.debug(f'Unparseable timestamp: {value!r}')
        return None


def display_name(name: str) -> str:
    """Human-facing form of a catalog key ('mr-mime' -> 'Mr Mime')."""
    return ' '.join(part.capitalize() for part in name.split('-') if part)

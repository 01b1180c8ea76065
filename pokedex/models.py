"""
Pokedex Data Models - Core data structures.
"""
import time
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, List, Tuple, Literal

from .utils import official_artwork_url, parse_timestamp, sprite_url

Severity = Literal['success', 'error', 'info']


@dataclass(frozen=True)
class User:
    """Authenticated identity summary."""
    id: str
    name: str
    email: Optional[str] = None
    created_at: Optional[str] = None

    @classmethod
    def from_api(cls, data: dict) -> 'User':
        return cls(
            id=str(data.get('id', '')),
            name=data.get('name', ''),
            email=data.get('email'),
            created_at=data.get('createdAt'),
        )

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'createdAt': self.created_at,
        }


@dataclass(frozen=True)
class Credential:
    """Bearer token plus the identity it was issued for."""
    token: str
    user: User

    @classmethod
    def from_api(cls, data: dict) -> 'Credential':
        return cls(token=data['token'], user=User.from_api(data.get('user') or {}))

    def to_dict(self) -> dict:
        return {'token': self.token, 'user': self.user.to_dict()}


@dataclass(frozen=True)
class Stat:
    name: str
    base: int


@dataclass(frozen=True)
class Ability:
    name: str
    hidden: bool = False


@dataclass(frozen=True)
class Pokemon:
    """Catalog item from the public catalog. Never mutated once fetched."""
    id: int
    name: str
    types: Tuple[str, ...]
    height: int = 0
    weight: int = 0
    base_experience: Optional[int] = None
    stats: Tuple[Stat, ...] = ()
    abilities: Tuple[Ability, ...] = ()
    artwork: Optional[str] = None
    sprite: Optional[str] = None

    @classmethod
    def from_api(cls, data: dict) -> 'Pokemon':
        sprites = data.get('sprites') or {}
        other = sprites.get('other') or {}
        types = sorted(data.get('types') or [], key=lambda t: t.get('slot', 0))
        return cls(
            id=int(data['id']),
            name=data['name'],
            types=tuple(t['type']['name'] for t in types) or ('normal',),
            height=data.get('height') or 0,
            weight=data.get('weight') or 0,
            base_experience=data.get('base_experience'),
            stats=tuple(
                Stat(name=s['stat']['name'], base=s.get('base_stat', 0))
                for s in data.get('stats') or []
            ),
            abilities=tuple(
                Ability(name=a['ability']['name'], hidden=bool(a.get('is_hidden')))
                for a in data.get('abilities') or []
            ),
            artwork=(other.get('official-artwork') or {}).get('front_default'),
            sprite=sprites.get('front_default'),
        )

    @property
    def primary_type(self) -> str:
        return self.types[0]

    @property
    def image(self) -> str:
        """Best available image: artwork, then sprite, then computed URL."""
        return self.artwork or self.sprite or official_artwork_url(self.id)

    @property
    def shiny_sprite(self) -> str:
        return sprite_url(self.id, shiny=True)


@dataclass
class CaptureRecord:
    """A pokémon owned by a user, as stored by the backend."""
    id: str
    pokemon_id: int
    name: str
    image: Optional[str] = None
    user_id: Optional[str] = None
    caught_at: Optional[datetime] = None

    @classmethod
    def from_api(cls, data: dict) -> 'CaptureRecord':
        return cls(
            id=str(data['id']),
            pokemon_id=int(data['pokemonId']),
            name=data.get('name', ''),
            image=data.get('image'),
            user_id=data.get('userId'),
            caught_at=parse_timestamp(data.get('caughtAt')),
        )

    @property
    def image_url(self) -> str:
        return self.image or official_artwork_url(self.pokemon_id)


@dataclass
class Trainer:
    """Another user of the backend, with their captures."""
    id: str
    name: str
    email: Optional[str] = None
    pokemons: List[CaptureRecord] = field(default_factory=list)

    @classmethod
    def from_api(cls, data: dict) -> 'Trainer':
        pokemons = data.get('pokemons')
        if not isinstance(pokemons, list):
            pokemons = []
        return cls(
            id=str(data.get('id', '')),
            name=data.get('name', ''),
            email=data.get('email'),
            pokemons=[CaptureRecord.from_api(p) for p in pokemons],
        )


@dataclass
class BrowsePage:
    """One page of the catalog, in upstream order."""
    items: List[Pokemon]
    offset: int
    limit: int
    has_next: bool
    total: Optional[int] = None


@dataclass(frozen=True)
class DecoratedItem:
    """Catalog item merged with the user's ownership."""
    item: Pokemon
    owned: bool


@dataclass
class Notification:
    """Transient user-facing message."""
    id: str
    message: str
    severity: Severity = 'info'
    created_at: float = field(default_factory=time.time)


class BrowserState(Enum):
    IDLE = 'idle'
    LOADING_INITIAL = 'loading_initial'
    LOADING_MORE = 'loading_more'
    SEARCHING = 'searching'
    READY = 'ready'
    ERROR = 'error'

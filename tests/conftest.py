"""
Pytest configuration and shared fixtures for Pokedex tests.
"""
import asyncio
import json
import pytest
from pathlib import Path
from tempfile import TemporaryDirectory
from typing import Dict, List, Optional

import requests

from pokedex.api import NotFoundError
from pokedex.controllers import Navigator
from pokedex.managers import CaptureIndex, CredentialStore, NotificationQueue, SessionGuard
from pokedex.models import BrowsePage, CaptureRecord, Credential, Pokemon, User


def make_pokemon(pokemon_id: int, name: Optional[str] = None) -> Pokemon:
    return Pokemon(id=pokemon_id, name=name or f'mon-{pokemon_id}', types=('normal',))


def make_record(capture_id: str, pokemon_id: int, name: Optional[str] = None) -> CaptureRecord:
    return CaptureRecord(id=capture_id, pokemon_id=pokemon_id, name=name or f'mon-{pokemon_id}')


def make_response(status: int, body=None) -> requests.Response:
    """Real requests.Response carrying a JSON body."""
    response = requests.Response()
    response.status_code = status
    response._content = json.dumps(body).encode() if body is not None else b''
    return response


def pokeapi_detail(pokemon_id: int, name: str) -> dict:
    """Minimal PokeAPI /pokemon/{key} payload."""
    return {
        'id': pokemon_id,
        'name': name,
        'height': 4,
        'weight': 60,
        'base_experience': 112,
        'types': [
            {'slot': 2, 'type': {'name': 'flying', 'url': ''}},
            {'slot': 1, 'type': {'name': 'electric', 'url': ''}},
        ],
        'stats': [{'base_stat': 35, 'effort': 0, 'stat': {'name': 'hp', 'url': ''}}],
        'abilities': [{'ability': {'name': 'static', 'url': ''}, 'is_hidden': False, 'slot': 1}],
        'sprites': {
            'front_default': f'https://sprites.test/{pokemon_id}.png',
            'other': {'official-artwork': {'front_default': f'https://art.test/{pokemon_id}.png'}},
        },
    }


class FakeCatalogSource:
    """In-memory catalog of `total` items. Requests can be held open per offset."""

    def __init__(self, total: int = 100):
        self.total = total
        self.by_name: Dict[str, Pokemon] = {}
        for i in range(1, total + 1):
            item = make_pokemon(i)
            self.by_name[item.name] = item
        self.list_calls: List[tuple] = []
        self.gates: Dict[int, asyncio.Event] = {}
        self.errors: Dict[int, Exception] = {}

    def add(self, item: Pokemon):
        self.by_name[item.name] = item

    def hold(self, offset: int) -> asyncio.Event:
        """Block list() at this offset until the returned event is set."""
        self.gates[offset] = asyncio.Event()
        return self.gates[offset]

    async def list(self, limit: int, offset: int) -> BrowsePage:
        self.list_calls.append((limit, offset))
        if offset in self.gates:
            await self.gates[offset].wait()
        if offset in self.errors:
            raise self.errors[offset]
        ids = range(offset + 1, min(offset + limit, self.total) + 1)
        return BrowsePage(
            items=[make_pokemon(i) for i in ids],
            offset=offset,
            limit=limit,
            has_next=offset + limit < self.total,
        )

    async def get_by_key(self, key) -> Pokemon:
        key = str(key).strip().lower()
        if key.isdigit() and 0 < int(key) <= self.total:
            return make_pokemon(int(key))
        if key in self.by_name:
            return self.by_name[key]
        raise NotFoundError('Not Found', 404)


class FakeCaptureService:
    """Backend stand-in holding records server-side."""

    def __init__(self, records: Optional[List[CaptureRecord]] = None):
        self.records: List[CaptureRecord] = list(records or [])
        self.next_id = 1
        self.list_gate: Optional[asyncio.Event] = None
        self.write_gate: Optional[asyncio.Event] = None
        self.fail_with: Optional[Exception] = None

    async def list_mine(self) -> List[CaptureRecord]:
        snapshot = list(self.records)
        if self.list_gate is not None:
            await self.list_gate.wait()
        if self.fail_with:
            raise self.fail_with
        return snapshot

    async def catch(self, pokemon_id, name, image=None) -> CaptureRecord:
        if self.write_gate is not None:
            await self.write_gate.wait()
        if self.fail_with:
            raise self.fail_with
        record = CaptureRecord(id=f'cap-{self.next_id}', pokemon_id=pokemon_id, name=name, image=image)
        self.next_id += 1
        self.records.append(record)
        return record

    async def release(self, capture_id) -> CaptureRecord:
        if self.write_gate is not None:
            await self.write_gate.wait()
        if self.fail_with:
            raise self.fail_with
        record = next((r for r in self.records if r.id == capture_id), None)
        if record is None:
            raise NotFoundError('Pokémon não encontrado', 404, {'message': 'Pokémon não encontrado'})
        self.records.remove(record)
        return record


@pytest.fixture
def temp_dir():
    """Provide a temporary directory that's cleaned up after each test."""
    with TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def credentials_path(temp_dir):
    return temp_dir / 'session.json'


@pytest.fixture
def credential():
    return Credential(token='tok-1', user=User(id='u1', name='Ash', email='ash@example.com'))


@pytest.fixture
def navigator():
    return Navigator('pokemons')


@pytest.fixture
def store(credentials_path):
    return CredentialStore(credentials_path)


@pytest.fixture
def guard(store, navigator):
    return SessionGuard(store, navigator)


@pytest.fixture
def notifications():
    return NotificationQueue()


@pytest.fixture
def catalog():
    return FakeCatalogSource()


@pytest.fixture
def capture_service():
    return FakeCaptureService()


@pytest.fixture
def capture_index(capture_service, notifications):
    return CaptureIndex(capture_service, notifications)

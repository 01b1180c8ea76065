#!/usr/bin/env python3
"""
Pokedex - Command line client

Usage:
    pokedex login EMAIL              # Prompts for the password
    pokedex register EMAIL NAME
    pokedex browse --pages 2         # First two catalog pages
    pokedex search pikachu
    pokedex catch pikachu
    pokedex show 25                  # Details and caught status
    pokedex collection
    pokedex release CAPTURE_ID
    pokedex release-item pikachu
    pokedex trainers
    pokedex logout
"""
import os
import sys
import asyncio
import getpass
import logging
import argparse
from logging.handlers import RotatingFileHandler
from typing import Optional

from .config import API_URL, LOG_DIR, LOG_FILE, LOG_MAX_BYTES, LOG_BACKUP_COUNT
from .app import Pokedex
from .models import CaptureRecord, DecoratedItem, Pokemon
from .utils import display_name


def setup_logging(verbose: bool = False):
    """Configure logging with console and rotating file handler."""
    # Determine log level from environment or default to INFO
    level_name = 'DEBUG' if verbose else os.environ.get('POKEDEX_LOG_LEVEL', 'INFO').upper()
    level = getattr(logging, level_name, logging.INFO)

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(logging.Formatter(
        '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt='%H:%M:%S'
    ))
    console.setLevel(level)

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    root.addHandler(console)

    # File handler with rotation (skipped when LOG_DIR is not writable)
    try:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            LOG_FILE,
            maxBytes=LOG_MAX_BYTES,
            backupCount=LOG_BACKUP_COUNT,
            encoding='utf-8'
        )
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        file_handler.setLevel(logging.DEBUG)  # Always log DEBUG to file
        root.addHandler(file_handler)
    except (OSError, PermissionError) as e:
        root.warning(f'Could not create log file: {e}')

    # Quiet down noisy libraries
    logging.getLogger('urllib3').setLevel(logging.WARNING)
    logging.getLogger('requests').setLevel(logging.WARNING)
    logging.getLogger('asyncio').setLevel(logging.WARNING)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='pokedex', description='Browse and capture pokémon')
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging')
    commands = parser.add_subparsers(dest='command', required=True)

    login = commands.add_parser('login', help='Log in and save the session')
    login.add_argument('email')

    register = commands.add_parser('register', help='Create an account and log in')
    register.add_argument('email')
    register.add_argument('name')

    commands.add_parser('logout', help='Forget the saved session')

    browse = commands.add_parser('browse', help='List catalog pages')
    browse.add_argument('--pages', type=int, default=1, help='Number of pages (default: 1)')

    search = commands.add_parser('search', help='Look up one pokémon by name or id')
    search.add_argument('term')

    catch = commands.add_parser('catch', help='Capture a pokémon by name or id')
    catch.add_argument('key')

    show = commands.add_parser('show', help='Details of one pokémon and whether you caught it')
    show.add_argument('key')

    release = commands.add_parser('release', help='Release a captured pokémon')
    release.add_argument('capture_id')

    release_item = commands.add_parser('release-item', help='Release your capture of a pokémon by name or id')
    release_item.add_argument('key')

    commands.add_parser('collection', help='List your captured pokémon')
    commands.add_parser('trainers', help='List trainers and their captures')
    return parser


def print_items(items):
    for entry in items:
        item = entry.item if isinstance(entry, DecoratedItem) else entry
        mark = '*' if isinstance(entry, DecoratedItem) and entry.owned else ' '
        print(f' {mark} #{item.id:<5} {display_name(item.name):<20} {"/".join(item.types)}')


def print_detail(item: Pokemon, record: Optional[CaptureRecord]):
    print(f'#{item.id} {display_name(item.name)}  {"/".join(item.types)}')
    print(f'  height {item.height / 10:g} m, weight {item.weight / 10:g} kg')
    for stat in item.stats:
        print(f'  {stat.name:<16} {stat.base}')
    if item.abilities:
        print('  abilities: ' + ', '.join(display_name(a.name) for a in item.abilities))
    print(f'  image: {item.image}')
    print(f'  shiny: {item.shiny_sprite}')
    if record is None:
        print('  not caught')
    else:
        caught = record.caught_at.date().isoformat() if record.caught_at else '?'
        print(f'  caught {caught} (capture {record.id})')


def print_notifications(app: Pokedex):
    for notification in app.notifications.items:
        print(f'[{notification.severity}] {notification.message}')


async def run(args) -> int:
    app = Pokedex()
    command = args.command

    if command == 'login':
        password = getpass.getpass('Password: ')
        ok = await app.login(args.email, password)
    elif command == 'register':
        password = getpass.getpass('Password: ')
        ok = await app.register(args.email, args.name, password)
    else:
        await app.start()
        ok = app.session.is_authenticated
        if not ok and command != 'logout':
            print('Not logged in. Run: pokedex login EMAIL')
            return 1

        if command == 'logout':
            app.logout()
            ok = True
        elif command == 'browse':
            for _ in range(args.pages - 1):
                if not await app.browser.load_more():
                    break
            if app.browser.error:
                print(f'Catalog unavailable: {app.browser.error}')
            print_items(app.browser.visible())
        elif command == 'search':
            await app.browser.search(args.term)
            print_items(app.browser.visible())
        elif command == 'catch':
            ok = await app.catch(args.key) is not None
        elif command == 'show':
            found = await app.detail(args.key)
            ok = found is not None
            if found:
                print_detail(*found)
        elif command == 'release':
            ok = await app.release(args.capture_id)
        elif command == 'release-item':
            ok = await app.release_item(args.key) is not None
        elif command == 'collection':
            await app.collection.load()
            for entry in app.collection.entries:
                caught = entry.record.caught_at.date().isoformat() if entry.record.caught_at else '?'
                print(f' {entry.record.id}  {display_name(entry.record.name):<20} caught {caught}')
        elif command == 'trainers':
            await app.trainers.load()
            for trainer in app.trainers.trainers:
                names = ', '.join(display_name(p.name) for p in trainer.pokemons) or '-'
                print(f' {trainer.name} <{trainer.email}>: {names}')

    print_notifications(app)
    return 0 if ok else 1


def main():
    """Entry point for the pokedex command."""
    args = build_parser().parse_args()
    setup_logging(args.verbose)
    logging.getLogger(__name__).debug(f'Backend: {API_URL}')
    sys.exit(asyncio.run(run(args)))


if __name__ == '__main__':
    main()

"""
Pokedex Configuration - All constants and settings.
"""
import os
from pathlib import Path

# ============================================
# NETWORK ENDPOINTS
# ============================================

# Backend for authentication and captured pokémon
API_URL = os.environ.get('POKEDEX_API_URL', 'http://localhost:3000/api')

# Public, read-only catalog
POKEAPI_URL = os.environ.get('POKEDEX_POKEAPI_URL', 'https://pokeapi.co/api/v2')

# Sprite repository used when a record carries no image of its own
SPRITES_URL = 'https://raw.githubusercontent.com/PokeAPI/sprites/master/sprites/pokemon'

REQUEST_TIMEOUT = float(os.environ.get('POKEDEX_REQUEST_TIMEOUT', '10'))

# ============================================
# PATHS
# ============================================

DATA_DIR = Path(os.environ.get('POKEDEX_DATA_DIR', Path.home() / '.pokedex'))
CREDENTIALS_PATH = DATA_DIR / 'session.json'

# Logging directory
LOG_DIR = DATA_DIR / 'logs'
LOG_FILE = LOG_DIR / 'pokedex.log'
LOG_MAX_BYTES = 5 * 1024 * 1024  # 5MB per file
LOG_BACKUP_COUNT = 5

# ============================================
# BROWSING
# ============================================

PAGE_SIZE = 20  # Catalog items per "load more"

# ============================================
# NOTIFICATIONS
# ============================================

NOTIFICATION_TIMEOUT = 5.0  # seconds before a notification expires

SEVERITIES = ('success', 'error', 'info')

# ============================================
# VIEWS
# ============================================

LOGIN_VIEW = 'login'
REGISTER_VIEW = 'register'
HOME_VIEW = 'pokemons'

# Views reachable without a session
PUBLIC_VIEWS = frozenset({LOGIN_VIEW, REGISTER_VIEW})

"""
Pokedex Controllers - View navigation.
"""
from .navigation import Navigator

__all__ = ['Navigator']

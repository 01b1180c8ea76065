"""
Pokedex - Catalog browser client with captured-pokémon sync.
"""
__version__ = '0.1.0'

"""
Pokedex API modules - External service integrations.
"""
from .gateway import Gateway, AuthenticatedGateway, ApiError, UnauthorizedError, NotFoundError
from .pokeapi import CatalogSource
from .auth import AuthService
from .captures import CaptureService
from .users import UserService

__all__ = [
    'Gateway', 'AuthenticatedGateway', 'ApiError', 'UnauthorizedError', 'NotFoundError',
    'CatalogSource', 'AuthService', 'CaptureService', 'UserService',
]

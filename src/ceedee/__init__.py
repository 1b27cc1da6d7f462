"""
ceedee - Directory name resolver for shell jumps

Keeps a live index of a directory tree, ranks candidates by how often the
shell history cd'd into them, and resolves short names to full paths.

Usage:
    from ceedee import Config, Server, Client

    server = Server(Config(root='~/src', port=2020))
    server.start_background()

    Client(2020).get('last')   # [Exact('/home/me/src/top/next/last')]
"""

from .client import Client
from .config import Config
from .errors import CeedeeError, ConfigError, NotFound, ServiceUnavailable
from .resolver import Exact, Match, Partial, Resolver
from .service import Server
from .store import DirectoryStore

__version__ = '0.1.0'

__all__ = [
    'CeedeeError', 'Client', 'Config', 'ConfigError', 'DirectoryStore',
    'Exact', 'Match', 'NotFound', 'Partial', 'Resolver', 'Server',
    'ServiceUnavailable',
]

"""
ceedee Client

Talks to a running ceedee service. A "not_found" answer is an empty
result; only transport failures raise.
"""

from typing import List

import requests

from .errors import CeedeeError, ServiceUnavailable
from .resolver import Match, decode_matches


class Client:
    """HTTP client for the resolver service."""

    def __init__(self, port: int, host: str = 'localhost', timeout: float = 2.0):
        self.port = port
        self.base_url = f"http://{host}:{port}"
        self.timeout = timeout
        self.session = requests.Session()

    def get(self, name: str) -> List[Match]:
        """Look up a directory name. Returns [] when nothing matches."""
        try:
            resp = self.session.post(f"{self.base_url}/get", json={'name': name}, timeout=self.timeout)
        except requests.ConnectionError as e:
            raise ServiceUnavailable(self.port, e) from e
        except requests.RequestException as e:
            raise CeedeeError(f"Request to {self.base_url} failed: {e}") from e

        try:
            data = resp.json()
        except ValueError:
            data = {}

        if resp.status_code == 404 and data.get('kind') == 'not_found':
            return []
        if resp.status_code != 200:
            raise CeedeeError(data.get('error') or f"HTTP {resp.status_code} from {self.base_url}")
        return decode_matches(data.get('dirs', ''))

    def close(self):
        self.session.close()

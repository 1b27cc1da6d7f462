"""
ceedee Configuration

One plain record with defaults applied once at construction.
Values come from CEEDEE_* environment variables; CLI flags override them.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .errors import ConfigError

DEFAULT_PORT = 2020
DEFAULT_SKIP_DIRS = '.git,.hg'
DEFAULT_HIST_FILE = '.zhistfile'
DEFAULT_MONITOR_INTERVAL = 10.0  # seconds between history file polls
DEFAULT_DIR_INTERVAL = 3600.0    # seconds between full re-index passes


def parse_skip_list(value: Optional[str]) -> List[str]:
    """Split a comma-separated skip list, dropping blank items."""
    if not value:
        return []
    return [item.strip() for item in value.split(',') if item.strip()]


@dataclass
class Config:
    port: int = DEFAULT_PORT
    host: str = 'localhost'
    root: str = ''
    skip_list: List[str] = field(default_factory=lambda: parse_skip_list(DEFAULT_SKIP_DIRS))
    hist_file: str = ''
    home: str = ''
    monitor_interval: float = DEFAULT_MONITOR_INTERVAL
    dir_interval: float = DEFAULT_DIR_INTERVAL
    verbose: bool = False

    def __post_init__(self):
        if not self.home:
            self.home = str(Path.home())
        if not self.hist_file:
            self.hist_file = os.path.join(self.home, DEFAULT_HIST_FILE)
        if self.root:
            self.root = os.path.abspath(os.path.expanduser(self.root))

    @classmethod
    def from_env(cls, environ=None) -> 'Config':
        """Build a config from CEEDEE_* environment variables."""
        env = os.environ if environ is None else environ
        try:
            return cls(
                port=int(env.get('CEEDEE_PORT', DEFAULT_PORT)),
                host=env.get('CEEDEE_HOST', 'localhost'),
                root=env.get('CEEDEE_ROOT', ''),
                skip_list=parse_skip_list(env.get('CEEDEE_SKIP_DIRS', DEFAULT_SKIP_DIRS)),
                hist_file=env.get('CEEDEE_HIST_FILE', ''),
                home=env.get('CEEDEE_HOME', ''),
                monitor_interval=float(env.get('CEEDEE_MONITOR_INTERVAL', DEFAULT_MONITOR_INTERVAL)),
                dir_interval=float(env.get('CEEDEE_DIR_INTERVAL', DEFAULT_DIR_INTERVAL)),
                verbose=env.get('CEEDEE_DEBUG', '0') == '1',
            )
        except ValueError as e:
            raise ConfigError(f"Invalid CEEDEE_* environment value: {e}") from e

    def validate(self, server: bool = True) -> 'Config':
        if not 0 < self.port < 65536:
            raise ConfigError(f"Port out of range: {self.port}")
        if server:
            if not self.root:
                raise ConfigError("You must enter a root path")
            if self.monitor_interval <= 0:
                raise ConfigError(f"monitor-interval must be positive, got {self.monitor_interval}")
            if self.dir_interval <= 0:
                raise ConfigError(f"dir-interval must be positive, got {self.dir_interval}")
        return self

"""
ceedee CLI

Client mode (default):
    ceedee last            -> best full path for "last"
    ceedee -l last         -> every candidate
Server mode:
    ceedee --server --root ~/src [--daemon]
"""

import argparse
import os
import subprocess
import sys
from typing import List, Optional

from .client import Client
from .config import Config, parse_skip_list
from .errors import CeedeeError, ConfigError, ServiceUnavailable
from .resolver import Exact
from .service import run

DAEMON_FLAGS = ('-d', '--daemon')


def build_parser(defaults: Config) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='ceedee', description='Jump to directories by name')
    parser.add_argument('name', nargs='?', help='directory name to look up')
    parser.add_argument('--server', action='store_true', help='run in server mode')
    parser.add_argument('-d', '--daemon', action='store_true',
                        help='daemonize when running in server mode')
    parser.add_argument('--hist-file', help='the history file to search (default: <home>/.zhistfile)')
    parser.add_argument('--home', default=defaults.home, help='directory substituted for a leading ~')
    parser.add_argument('-l', '--list', action='store_true', help='list all matching directories')
    parser.add_argument('--port', type=int, default=defaults.port, help='connect/listen to this port')
    parser.add_argument('--skip-dirs', default=','.join(defaults.skip_list),
                        help='a comma-separated list of directories to skip while indexing')
    parser.add_argument('--root', default=defaults.root, help='the path to index')
    parser.add_argument('--monitor-interval', type=float, default=defaults.monitor_interval,
                        help='seconds between history file polls')
    parser.add_argument('--dir-interval', type=float, default=defaults.dir_interval,
                        help='seconds between full re-index passes')
    parser.add_argument('--verbose', action='store_true', default=defaults.verbose,
                        help='enable verbose logging')
    return parser


def config_from_args(args: argparse.Namespace, defaults: Config) -> Config:
    return Config(
        port=args.port,
        host=defaults.host,
        root=args.root,
        skip_list=parse_skip_list(args.skip_dirs),
        hist_file=args.hist_file or os.environ.get('CEEDEE_HIST_FILE', ''),
        home=args.home,
        monitor_interval=args.monitor_interval,
        dir_interval=args.dir_interval,
        verbose=args.verbose,
    )


def daemonize(argv: List[str]) -> int:
    """Relaunch this command without the daemon flag in its own session."""
    args = [sys.executable, '-m', 'ceedee'] + [a for a in argv if a not in DAEMON_FLAGS]
    proc = subprocess.Popen(
        args,
        stdin=subprocess.DEVNULL,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
        start_new_session=True,
    )
    print(f"Started ceedee in daemon mode with pid {proc.pid}")
    return 0


def lookup(config: Config, name: str, list_all: bool = False) -> int:
    """Print the match(es) for `name`. Exit code 1 means no match."""
    client = Client(config.port, host=config.host)
    try:
        matches = client.get(name)
    except ServiceUnavailable as e:
        print(e, file=sys.stderr)
        return 1
    finally:
        client.close()

    if not matches:
        return 1
    if list_all or not isinstance(matches[0], Exact):
        for match in matches:
            print(match.value)
        return 0
    print(matches[0].value)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    try:
        defaults = Config.from_env()
    except ConfigError as e:
        print(f"ceedee: {e}", file=sys.stderr)
        return 2

    parser = build_parser(defaults)
    args = parser.parse_args(argv)
    config = config_from_args(args, defaults)

    if not args.server:
        if not args.name:
            parser.error("No directory supplied")
        try:
            return lookup(config.validate(server=False), args.name, list_all=args.list)
        except CeedeeError as e:
            print(f"ceedee: {e}", file=sys.stderr)
            return 1

    try:
        config.validate()
    except ConfigError as e:
        print(f"ceedee: {e}", file=sys.stderr)
        return 2

    if args.daemon:
        return daemonize(argv)

    try:
        run(config)
    except CeedeeError as e:
        print(f"ceedee: Unable to start server: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"ceedee: Unable to listen on port {config.port}: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())

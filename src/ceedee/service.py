#!/usr/bin/env python3
"""
ceedee Service - Directory resolver daemon

Indexes a directory tree, re-ranks it from shell history, and answers
"where is <name>?" over HTTP so a shell function can jump there.

Endpoints:
  POST /get     {"name": "last"} -> {"dirs": "e;/path/to/last"}
  GET  /health  liveness + index stats
  GET  /stats   index, history and lookup counters

Usage:
    CEEDEE_ROOT=/path/to/index python -m ceedee.service
"""

import threading
import time
from typing import Optional

from flask import Flask, request, jsonify
from werkzeug.serving import make_server

from .config import Config
from .errors import NotFound
from .history import HistoryIngestor, HistoryWatcher
from .indexer import FilesystemIndexer
from .resolver import Resolver, encode_matches
from .store import DirectoryStore

app = Flask(__name__)

# Global instances (set when a Server is built)
resolver: Optional[Resolver] = None
server: Optional['Server'] = None


# ============================================================================
# API Endpoints
# ============================================================================

@app.route('/get', methods=['GET', 'POST'])
def get_directory():
    """
    Resolve a directory name.

    POST body: {"name": "last"}   (or GET /get?name=last)

    404 with kind "not_found" is the normal "no match" answer, not a failure.
    """
    start = time.time()
    if request.method == 'POST':
        data = request.get_json(silent=True) or {}
        name = data.get('name', '')
    else:
        name = request.args.get('name', '')

    if not name:
        return jsonify({'error': 'name required', 'kind': 'bad_request'}), 400
    if resolver is None:
        return jsonify({'error': 'Resolver not initialized', 'kind': 'unavailable'}), 503

    try:
        matches = resolver.resolve(name)
    except NotFound as e:
        return jsonify({'error': str(e), 'kind': e.kind}), 404

    return jsonify({
        'dirs': encode_matches(matches),
        'ms': (time.time() - start) * 1000
    })


@app.route('/health')
def health():
    if resolver is None:
        return jsonify({'status': 'starting'}), 503
    return jsonify({
        'status': 'ok',
        'stats': resolver.store.stats()
    })


@app.route('/stats')
def stats():
    if server is None:
        return jsonify({'error': 'Server not initialized'}), 503
    return jsonify(server.stats())


# ============================================================================
# Server lifecycle
# ============================================================================

class Server:
    """
    Owns the store, the background indexer, the history watcher and the
    HTTP listener.

    The first index pass runs inside the constructor, so the store is
    populated before start() accepts any query.
    """

    def __init__(self, config: Config):
        global resolver, server

        self.config = config.validate()
        self.store = DirectoryStore(verbose=config.verbose)
        self.resolver = Resolver(self.store)
        self.indexer = FilesystemIndexer(
            self.store,
            config.root,
            skip_list=config.skip_list,
            interval=config.dir_interval,
            verbose=config.verbose,
        )
        self.ingestor = HistoryIngestor(self.store, config.home, verbose=config.verbose)
        self.watcher = HistoryWatcher(
            config.hist_file,
            config.monitor_interval,
            on_delta=self.ingestor.ingest,
            on_error=self.ingestor.stop,
            verbose=config.verbose,
        )

        self._http = make_server(config.host, config.port, app, threaded=True)
        self._serving = threading.Event()

        try:
            self.indexer.reindex()
            self.indexer.start()
            self.watcher.start()
        except Exception:
            self.stop()
            raise

        resolver = self.resolver
        server = self

    @property
    def port(self) -> int:
        return self._http.server_port

    def start(self):
        """Serve requests until stop() is called. Blocks."""
        print(f"[service] Listening on http://{self.config.host}:{self.port}")
        self._serving.set()
        self._http.serve_forever()

    def start_background(self) -> threading.Thread:
        self._serving.set()
        thread = threading.Thread(target=self.start, name='ceedee-http', daemon=True)
        thread.start()
        return thread

    def stop(self):
        global resolver, server
        if server is self:
            resolver = None
            server = None

        if self._serving.is_set():
            self._http.shutdown()
            self._serving.clear()
        self._http.server_close()
        self.indexer.stop()
        self.watcher.stop()
        self.ingestor.stop()

    def stats(self) -> dict:
        last_pass = self.indexer.last_pass
        return {
            'root': self.indexer.root,
            'store': self.store.stats(),
            'last_pass': last_pass.to_dict() if last_pass else None,
            'history': self.ingestor.stats(),
            'lookups': self.resolver.stats(),
        }


# ============================================================================
# Main
# ============================================================================

def run(config: Config):
    print("=" * 60)
    print("ceedee - Directory Resolver Service")
    print("=" * 60)
    print(f"Root: {config.root}")
    print(f"Skip: {', '.join(config.skip_list) or '-'}")
    print(f"History: {config.hist_file} (every {config.monitor_interval}s)")
    print(f"Re-index every {config.dir_interval}s")
    print()

    svc = Server(config)
    try:
        svc.start()
    except KeyboardInterrupt:
        pass
    finally:
        svc.stop()


if __name__ == '__main__':
    run(Config.from_env())

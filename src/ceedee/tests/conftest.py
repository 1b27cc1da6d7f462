import shutil
from pathlib import Path

import pytest

from ceedee.indexer import FilesystemIndexer
from ceedee.resolver import Resolver
from ceedee.store import DirectoryStore

TESTDATA = Path(__file__).parent / 'testdata'
HOME = '/this/home'


def make_tree(root: Path, *dirs: str) -> Path:
    for d in dirs:
        (root / d).mkdir(parents=True, exist_ok=True)
    return root


@pytest.fixture
def tree(tmp_path):
    """Index root holding top/next/last, foo and a skipped ignore/ subtree."""
    root = tmp_path / 'root'
    return make_tree(root, 'top/next/last', 'foo', 'ignore/inner')


@pytest.fixture
def store():
    return DirectoryStore()


@pytest.fixture
def indexer(store, tree):
    idx = FilesystemIndexer(store, str(tree), skip_list=['ignore'])
    idx.reindex()
    return idx


@pytest.fixture
def resolver(store, indexer):
    return Resolver(store)


@pytest.fixture
def histfile(tmp_path):
    path = tmp_path / 'histfile'
    shutil.copy(TESTDATA / 'histfile', path)
    return path

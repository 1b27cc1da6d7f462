import threading

from ceedee.store import DirectoryStore, base_name


def test_base_name():
    assert base_name('/r/top/next') == 'next'
    assert base_name('/r/top/next/') == 'next'
    assert base_name('/') == '/'


def test_apply_pass_creates_entries(store):
    generation, added, removed = store.apply_pass(['/r', '/r/foo', '/r/top/foo'])

    assert generation == 1
    assert added == 3
    assert removed == []
    assert store.get('foo') == ['/r/foo', '/r/top/foo']
    assert 'r' in store
    assert store.get('missing') is None


def test_repeated_pass_leaves_store_identical(store):
    paths = ['/r', '/r/b/x', '/r/a/x', '/r/x']
    store.apply_pass(paths)
    before = store.entry('x')

    _, added, removed = store.apply_pass(paths)

    assert added == 0
    assert removed == []
    assert store.entry('x') == before


def test_reconcile_sweeps_unseen_paths(store):
    store.apply_pass(['/r', '/r/next', '/r/rand/next', '/r/deleted'])

    _, _, removed = store.apply_pass(['/r', '/r/rand/next'])

    assert sorted(removed) == ['/r/deleted', '/r/next']
    assert store.get('next') == ['/r/rand/next']
    # Empty entries are dropped, not kept around
    assert 'deleted' not in store
    assert store.names_containing('del') == []


def test_history_never_creates_entries(store):
    store.apply_pass(['/r', '/r/foo'])

    assert not store.upsert_history_candidate('/elsewhere/bar', 3)
    assert 'bar' not in store
    assert store.apply_history({'/elsewhere/bar': 1, '/h/foo': 2}) == 1
    assert store.get('foo') == ['/h/foo', '/r/foo']


def test_history_counts_accumulate_across_batches(store):
    store.apply_pass(['/r', '/r/a/foo', '/r/b/foo'])

    store.apply_history({'/r/a/foo': 1, '/r/b/foo': 2})
    assert store.get('foo')[0] == '/r/b/foo'

    store.apply_history({'/r/a/foo': 3})
    entry = store.entry('foo')
    assert [(c['path'], c['count']) for c in entry['history']] == [
        ('/r/a/foo', 4), ('/r/b/foo', 2)
    ]


def test_deleted_directory_with_history_is_swept(store):
    store.apply_pass(['/r', '/r/foo', '/r/x/foo'])
    store.apply_history({'/r/x/foo': 5})

    store.apply_pass(['/r', '/r/foo'])

    assert store.get('foo') == ['/r/foo']
    assert store.entry('foo')['history'] == []


def test_history_only_paths_survive_passes(store):
    store.apply_pass(['/r', '/r/foo'])
    store.apply_history({'/this/home/testdata/foo': 2})

    store.apply_pass(['/r', '/r/foo'])

    assert store.get('foo') == ['/this/home/testdata/foo', '/r/foo']


def test_history_only_paths_go_with_last_directory_on_disk(store):
    store.apply_pass(['/r', '/r/foo'])
    store.apply_history({'/this/home/testdata/foo': 2})

    _, _, removed = store.apply_pass(['/r'])

    assert sorted(removed) == ['/r/foo', '/this/home/testdata/foo']
    assert store.get('foo') is None
    assert 'foo' not in store
    assert store.names_containing('fo') == []


def test_standalone_upsert_is_swept_by_next_pass(store):
    store.upsert_path_candidate('/r/manual')
    assert store.get('manual') == ['/r/manual']

    store.apply_pass(['/r'])

    assert store.get('manual') is None


def test_stats(store):
    store.apply_pass(['/r', '/r/foo', '/r/a/foo'])
    stats = store.stats()

    assert stats == {'names': 2, 'paths': 3, 'tracked': 3, 'generation': 1}


def test_readers_never_see_unsorted_lists():
    store = DirectoryStore()
    layouts = [
        ['/r'] + [f'/r/{"d/" * i}x' for i in range(10)],
        ['/r'] + [f'/r/{"d/" * i}x' for i in range(0, 10, 2)],
    ]
    store.apply_pass(layouts[0])
    stop = threading.Event()
    problems = []

    def writer():
        n = 0
        while not stop.is_set():
            store.apply_pass(layouts[n % 2])
            store.apply_history({f'/r/{"d/" * (n % 10)}x': n % 3 + 1})
            n += 1

    def reader():
        while not stop.is_set():
            entry = store.entry('x')
            if entry is None:
                problems.append('entry vanished')
                continue
            depths = [c['depth'] for c in entry['paths']]
            counts = [c['count'] for c in entry['history']]
            if depths != sorted(depths):
                problems.append(f'unsorted paths {depths}')
            if counts != sorted(counts, reverse=True):
                problems.append(f'unsorted history {counts}')

    threads = [threading.Thread(target=writer)] + [threading.Thread(target=reader) for _ in range(3)]
    for t in threads:
        t.start()
    stop.wait(0.5)
    stop.set()
    for t in threads:
        t.join()

    assert problems == []

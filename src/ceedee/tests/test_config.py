import pytest

from ceedee.config import Config, parse_skip_list
from ceedee.errors import ConfigError


def test_parse_skip_list():
    assert parse_skip_list('.git,.hg') == ['.git', '.hg']
    assert parse_skip_list(' a , ,b,') == ['a', 'b']
    assert parse_skip_list('') == []
    assert parse_skip_list(None) == []


def test_defaults():
    config = Config(home='/this/home')

    assert config.port == 2020
    assert config.skip_list == ['.git', '.hg']
    assert config.hist_file == '/this/home/.zhistfile'
    assert config.monitor_interval == 10
    assert config.dir_interval == 3600
    assert not config.verbose


def test_from_env(tmp_path):
    config = Config.from_env({
        'CEEDEE_PORT': '9909',
        'CEEDEE_ROOT': str(tmp_path),
        'CEEDEE_SKIP_DIRS': 'ignore',
        'CEEDEE_HOME': '/this/home',
        'CEEDEE_HIST_FILE': '/tmp/hist',
        'CEEDEE_MONITOR_INTERVAL': '1',
        'CEEDEE_DIR_INTERVAL': '0.5',
        'CEEDEE_DEBUG': '1',
    })

    assert config.port == 9909
    assert config.root == str(tmp_path)
    assert config.skip_list == ['ignore']
    assert config.hist_file == '/tmp/hist'
    assert config.monitor_interval == 1.0
    assert config.dir_interval == 0.5
    assert config.verbose


def test_from_env_rejects_garbage():
    with pytest.raises(ConfigError):
        Config.from_env({'CEEDEE_PORT': 'not-a-port'})


def test_root_is_made_absolute(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert Config(root='sub').root == str(tmp_path / 'sub')


@pytest.mark.parametrize('kwargs', [
    {'root': ''},
    {'root': '/r', 'port': 70000},
    {'root': '/r', 'port': 0},
    {'root': '/r', 'monitor_interval': 0},
    {'root': '/r', 'dir_interval': -1},
])
def test_validate_rejects(kwargs):
    with pytest.raises(ConfigError):
        Config(**kwargs).validate()


def test_client_mode_needs_no_root():
    assert Config(port=2020).validate(server=False).port == 2020

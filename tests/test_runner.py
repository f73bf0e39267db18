import json

from unittest.mock import Mock, patch

import pytest

import runexp

from confprime import runner


@pytest.fixture
def user_cfg(tmp_path):
    path = tmp_path / 'cfg.json'
    path.write_text(json.dumps({
        'save_url': 'http://localhost:5000/save_data',
        'logfile': str(tmp_path / 'logs' / 'test.log'),
        'save_retry_delay_ms': 0,
    }))
    return path


def test_load_config_defaults():
    cfg = runner.load_config()
    assert cfg['save_max_attempts'] == 3
    assert cfg['save_retry_delay_ms'] == 250
    assert cfg['condition_prefix'] == 'hmcondition'
    assert cfg['post_trial_gap_ms'] == 800


def test_load_config_merges_user_file(user_cfg):
    cfg = runner.load_config(str(user_cfg))
    assert cfg['save_url'] == 'http://localhost:5000/save_data'
    assert cfg['save_retry_delay_ms'] == 0
    assert cfg['save_max_attempts'] == 3


def test_parse_args():
    args = runexp.parse_args(['-c', 'lmcondition', '-D', '2', '--realtime'])
    assert args.condition == 'lmcondition'
    assert args.dummy == 2
    assert args.realtime
    assert args.config is None


def test_realtime_needs_dummy():
    with pytest.raises(SystemExit):
        runexp.parse_args(['--realtime'])


def test_command_line_overrides_config(user_cfg):
    r = runner.Runner(runexp.parse_args(
        ['-f', str(user_cfg), '-u', 'http://example.org/save',
         '-c', 'lmcondition']))
    assert r.cfg['save_url'] == 'http://example.org/save'
    assert r.cfg['condition_prefix'] == 'lmcondition'
    assert r.logfile.parent.is_dir()


@patch('requests.Session.close')
@patch('requests.Session.post')
def test_dummy_run_from_command_line(post, close, user_cfg):
    post.return_value = Mock(status_code=200)
    assert runexp.main(['-f', str(user_cfg), '-D', '2']) == 0
    close.assert_called_once()

    # a header, 80 trials and the closing question per participant
    assert post.call_count == 2*82
    first = post.call_args_list[0]
    assert first.args[0] == 'http://localhost:5000/save_data'
    assert first.kwargs['json']['filename'].startswith('hmcondition_')
    assert first.kwargs['json']['filedata'].startswith('participant_id,')


@patch('requests.Session.post')
def test_dummy_run_survives_dead_endpoint(post, user_cfg):
    post.return_value = Mock(status_code=500)
    assert runexp.main(['-f', str(user_cfg), '-D', '1']) == 0
    assert post.call_count == 3*82

from functools import partial

import logbook
import pytest

from netenv import get_logger, get_setting, load_settings


def test_load_settings_defaults_only(tmp_path):
    settings = load_settings(str(tmp_path / 'missing.yml'))
    assert settings['loaded'] is False
    assert get_setting(settings, 'output') == '/etc/network-environment'
    assert get_setting(settings, 'routes:reader') == 'netifaces'
    assert get_setting(settings, 'logging:handler') == 'stderr'
    assert get_setting(settings, 'logging:syslog:port') == 514


def test_load_settings_override(tmp_path):
    settings_file = tmp_path / 'network-environment.yml'
    settings_file.write_text('output: /run/network-environment\n'
                             'logging:\n'
                             '  level: debug\n')
    settings = load_settings(str(settings_file))
    assert settings['loaded'] is True
    assert get_setting(settings, 'output') == '/run/network-environment'
    assert get_setting(settings, 'logging:level') == 'debug'
    # Falls back to the defaults for anything not overridden.
    assert get_setting(settings, 'logging:handler') == 'stderr'


def test_load_settings_empty_file(tmp_path):
    settings_file = tmp_path / 'network-environment.yml'
    settings_file.write_text('')
    settings = load_settings(str(settings_file))
    assert settings['loaded'] is True
    assert get_setting(settings, 'filter_cidr') == ''


def test_get_setting():
    settings = {'a': {'b': 1}, 'defaults': {'a': {'c': 2}, 'd': 3}}
    assert get_setting(settings, 'a:b') == 1
    assert get_setting(settings, 'a:c') == 2
    assert get_setting(settings, 'd') == 3
    assert get_setting(settings, 'e', 'nope') == 'nope'
    assert get_setting(settings, 'a:c', check_defaults=False) is None


def test_get_logger(tmp_path, mocker):
    handler_class = mocker.patch('logbook.StderrHandler')
    getter = partial(get_setting, load_settings(str(tmp_path / 'no.yml')))
    logger = get_logger(getter, 'test')
    assert logger.name == 'network-environment-test'
    handler_class.assert_called_once_with(
        level=logbook.INFO, format_string='{record.level_name}: '
        '{record.message}')
    handler_class.return_value.push_application.assert_called_once_with()
    # Configured once per process.
    assert get_logger(getter, 'other') is logger


def test_get_logger_syslog(tmp_path, mocker):
    settings_file = tmp_path / 'network-environment.yml'
    settings_file.write_text('logging:\n'
                             '  handler: syslog\n'
                             '  level: warning\n'
                             '  syslog:\n'
                             '    facility: daemon\n')
    handler_class = mocker.patch('logbook.SyslogHandler')
    getter = partial(get_setting, load_settings(str(settings_file)))
    get_logger(getter, 'test')
    kwargs = handler_class.call_args[1]
    assert kwargs['facility'] == 'daemon'
    assert kwargs['level'] == logbook.WARNING
    assert 'address' not in kwargs


def test_get_logger_falls_back_to_stderr(tmp_path, mocker):
    settings_file = tmp_path / 'network-environment.yml'
    settings_file.write_text('logging:\n'
                             '  handler: syslog\n'
                             '  syslog:\n'
                             '    host: loghost.invalid\n')
    mocker.patch('socket.getaddrinfo', side_effect=OSError('no such host'))
    syslog_class = mocker.patch('logbook.SyslogHandler')
    stderr_class = mocker.patch('logbook.StderrHandler')
    getter = partial(get_setting, load_settings(str(settings_file)))
    get_logger(getter, 'test', fail_to_local=True)
    syslog_class.assert_not_called()
    stderr_class.return_value.push_application.assert_called_once_with()


def test_get_logger_unknown_handler_fallback(tmp_path, mocker):
    settings_file = tmp_path / 'network-environment.yml'
    settings_file.write_text('logging:\n'
                             '  handler: carrierpigeon\n')
    stderr_class = mocker.patch('logbook.StderrHandler')
    getter = partial(get_setting, load_settings(str(settings_file)))
    logger = get_logger(getter, 'test', fail_to_local=True)
    assert logger.name == 'network-environment-test'
    stderr_class.return_value.push_application.assert_called_once_with()


def test_get_logger_unknown_handler(tmp_path):
    settings_file = tmp_path / 'network-environment.yml'
    settings_file.write_text('logging:\n'
                             '  handler: carrierpigeon\n')
    getter = partial(get_setting, load_settings(str(settings_file)))
    with pytest.raises(ValueError) as e:
        get_logger(getter, 'test')
    assert 'carrierpigeon' in str(e.value)

# Quantopian, Inc. licenses this file to you under the Apache License, Version
# 2.0 (the "License"); you may not use this file except in compliance with the
# License. You may obtain a copy of the License at
#
#   http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS, WITHOUT
# WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied. See the
# License for the specific language governing permissions and limitations under
# the License.

import logbook
import os
import socket
from stopit import ThreadingTimeout
import yaml

package_dir = os.path.abspath(os.path.dirname(__file__))
defaults_file = os.path.join(package_dir, 'default-settings.yml')
default_settings_file = '/etc/network-environment.yml'
got_logger = None


def load_settings(settings_file=default_settings_file):
    """Load settings from `settings_file` on top of the packaged defaults

    A missing settings file is not an error; the returned dictionary then
    only carries the defaults. `settings['loaded']` tells which happened.
    """
    if settings_file and os.path.exists(settings_file):
        with open(settings_file) as f:
            settings = yaml.safe_load(f) or {}
        settings['loaded'] = True
    else:
        settings = {'loaded': False}

    with open(defaults_file) as f:
        settings['defaults'] = yaml.safe_load(f)

    return settings


def get_setting(settings, setting, default=None, check_defaults=True):
    """Get a possibly recursive setting from a dictionary

    "settings" is a dictionary. "setting" is a colon-separated list of keys.
    Recurses through "settings" looking for the specified setting, and returns
    the specified default if the setting isn't present and there's no
    preconfigured default setting.
    """
    if check_defaults:
        defaults = settings.get('defaults', {})
    for key in setting.split(':'):
        try:
            settings = settings[key]
        except Exception:
            if check_defaults:
                return get_setting(defaults, setting, default,
                                   check_defaults=False)
            return default
    return settings


def get_logger(setting_getter, name, fail_to_local=False):
    global got_logger
    if got_logger:
        # Logging is configured once per process.
        return got_logger

    logger = logbook.Logger('network-environment-' + name)

    configured_name = setting_getter('logging:handler') or 'stderr'
    handler_name = configured_name.lower() + 'handler'
    handler_name = next((d for d in dir(logbook)
                         if d.lower() == handler_name), None)
    if handler_name:
        handler = logbook.__dict__[handler_name]
    elif fail_to_local:
        handler_name = configured_name
        handler = None
    else:
        raise ValueError('Unknown logging handler {}'.format(
            configured_name))
    kwargs = {
        'level': logbook.__dict__[setting_getter('logging:level').upper()],
        'format_string': setting_getter('logging:format'),
    }
    if handler_name == 'SyslogHandler':
        kwargs['application_name'] = 'network-environment'
        kwargs['facility'] = setting_getter('logging:syslog:facility')
        hostname = setting_getter('logging:syslog:host')
        if hostname:
            port = setting_getter('logging:syslog:port')
            try:
                addrinfo = socket.getaddrinfo(
                    hostname, port, socket.AF_INET, socket.SOCK_DGRAM)[0]
            except Exception:
                if not fail_to_local:
                    raise
                handler = None
            else:
                kwargs['socktype'] = addrinfo[1]
                kwargs['address'] = addrinfo[4]

    if handler:
        if fail_to_local:
            try:
                with ThreadingTimeout(5, swallow_exc=False):
                    handler = handler(**kwargs)
            except Exception:
                handler = None
        else:
            handler = handler(**kwargs)

    if handler is None:
        handler = logbook.StderrHandler(level=kwargs['level'],
                                        format_string=kwargs['format_string'])
        handler.push_application()
        logger.warning('Failed to create {}, falling back to stderr',
                       handler_name)
    else:
        handler.push_application()

    got_logger = logger
    return got_logger

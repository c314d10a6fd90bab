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

import argparse
from functools import partial
import ipaddress
import sys

from netenv import (
    default_settings_file,
    get_logger,
    get_setting,
    load_settings,
)
from netenv.environment import Config, write_environment
from netenv.routes import get_route_reader


def parse_cidr(value):
    """Parse a network in address/prefix-length form

    Host bits may be set, e.g. 10.0.0.5/24 is 10.0.0.0/24. A bare address,
    a netmask instead of a prefix length, or a value that isn't a string is
    rejected.
    """
    if not isinstance(value, str) or '/' not in value:
        raise ValueError('Cannot parse CIDR {}'.format(value))
    prefix_length = value.split('/', 1)[1]
    # Netmask notation (10.0.0.0/255.255.255.0) is not a prefix length.
    if not prefix_length.isdigit():
        raise ValueError('Cannot parse CIDR {}'.format(value))
    try:
        return ipaddress.ip_network(value, strict=False)
    except ValueError:
        raise ValueError('Cannot parse CIDR {}'.format(value))


def cidr_argument(value):
    try:
        return parse_cidr(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def parse_args(args=None):
    parser = argparse.ArgumentParser(
        description='Write the host\'s interface addresses and default '
        'interface to an environment file.')
    parser.add_argument('-o', dest='output_path', metavar='PATH',
                        help='Environment file to write (default '
                        '/etc/network-environment)')
    parser.add_argument('-i', dest='default_iface', metavar='NAME',
                        help='Default interface; skips the route lookup')
    parser.add_argument('-f', dest='filter_network', metavar='CIDR',
                        type=cidr_argument,
                        help='Leave out IPv4 addresses in this network')
    parser.add_argument('-c', dest='settings', metavar='PATH',
                        default=default_settings_file,
                        help='Settings file (default %(default)s)')

    return parser.parse_args(args)


def build_config(args, setting_getter):
    output_path = args.output_path or setting_getter('output')
    default_iface = args.default_iface or \
        setting_getter('default_interface') or ''
    filter_network = args.filter_network
    if filter_network is None:
        filter_cidr = setting_getter('filter_cidr')
        if filter_cidr:
            filter_network = parse_cidr(filter_cidr)
    return Config(output_path, default_iface, filter_network)


def main(args=None):
    args = parse_args(args)
    setting_getter = partial(get_setting, load_settings(args.settings))
    log = get_logger(setting_getter, 'cli', fail_to_local=True)

    try:
        config = build_config(args, setting_getter)
        route_reader = get_route_reader(setting_getter('routes:reader'))
    except ValueError as e:
        log.error('{}', e)
        sys.exit(1)

    try:
        write_environment(config, route_reader=route_reader, log=log)
    except Exception as e:
        log.error('Failed to write {}: {}', config.output_path, e)
        sys.exit(1)


if __name__ == '__main__':
    main()

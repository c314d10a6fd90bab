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

from collections import namedtuple
import os

from netenv.interfaces import list_interfaces, render_environment
from netenv.routes import (
    NetifacesRouteReader,
    RouteError,
    default_interface_name,
)

Config = namedtuple('Config', ['output_path', 'default_iface',
                               'filter_network'])


def temp_path_for(output_path):
    return output_path + '.tmp'


def resolve_default_iface(config, route_reader, log=None):
    if config.default_iface:
        return config.default_iface
    try:
        return default_interface_name(route_reader)
    except (RouteError, OSError) as e:
        # Not every host has a default route, or a readable routing table.
        if log:
            log.warning('{}', e)
        return ''


def write_environment(config, route_reader=None, interface_lister=None,
                      log=None):
    """Write the environment file described by `config`

    The temporary file next to the output file is created first, so failing
    to create it raises before the network is looked at. The file contents
    are rendered completely in memory before anything is written, and the
    temporary file is only renamed over the output file after that
    succeeds, so readers never see a partial file. A failed rename is not
    reported; the old output file stays in place.

    Returns the text that was written.
    """
    if route_reader is None:
        route_reader = NetifacesRouteReader()
    if interface_lister is None:
        interface_lister = list_interfaces

    temp_path = temp_path_for(config.output_path)
    with open(temp_path, 'w') as temp_file:
        default_iface = resolve_default_iface(config, route_reader, log=log)
        text = render_environment(config, interface_lister(), default_iface)
        temp_file.write(text)

    try:
        os.rename(temp_path, config.output_path)
    except OSError as e:
        if log:
            log.debug('Failed to rename {} to {}: {}', temp_path,
                      config.output_path, e)
    else:
        if log:
            log.debug('Wrote {}', config.output_path)

    return text

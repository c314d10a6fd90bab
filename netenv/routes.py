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
import netifaces
import socket
import struct

RTF_UP = 0x0001

Route = namedtuple('Route', ['gateway', 'interface', 'default'])


class RouteError(Exception):
    pass


class NoDefaultRoute(RouteError):
    pass


class RouteHasNoInterface(RouteError):
    pass


class RouteTableReader(object):
    """Source of IPv4 routes for default interface lookup

    Subclasses implement `routes()`, returning an iterable of `Route` in
    routing table order.
    """

    def routes(self):
        raise NotImplementedError()


class NetifacesRouteReader(RouteTableReader):
    def routes(self):
        gateways = netifaces.gateways()
        for gateway, interface, is_default in \
                gateways.get(netifaces.AF_INET, ()):
            yield Route(gateway, interface or None, bool(is_default))


class ProcRouteReader(RouteTableReader):
    """Read the kernel routing table from /proc/net/route"""

    def __init__(self, path='/proc/net/route'):
        self.path = path

    def routes(self):
        with open(self.path) as f:
            lines = f.read().strip().split('\n')
        # First line is the column header.
        for line in lines[1:]:
            fields = line.split()
            if len(fields) < 8:
                continue
            interface, destination, gateway, flags = fields[:4]
            mask = fields[7]
            if not int(flags, 16) & RTF_UP:
                continue
            gateway = socket.inet_ntoa(struct.pack('<L', int(gateway, 16)))
            default = destination == '00000000' and mask == '00000000'
            yield Route(gateway, interface if interface != '*' else None,
                        default)


route_readers = {
    'netifaces': NetifacesRouteReader,
    'proc': ProcRouteReader,
}


def get_route_reader(name):
    try:
        return route_readers[name]()
    except KeyError:
        raise ValueError('Unknown route reader {}'.format(name))


def default_interface_name(reader):
    """Return the name of the interface carrying the default route

    Raises RouteHasNoInterface if the default route has no interface and
    NoDefaultRoute if there isn't one.
    """
    for route in reader.routes():
        if route.default:
            if not route.interface:
                raise RouteHasNoInterface(
                    'found default route but could not determine interface')
            return route.interface
    raise NoDefaultRoute('unable to find default route')

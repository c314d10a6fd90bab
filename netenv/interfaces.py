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
import ipaddress
import netifaces

Interface = namedtuple('Interface', ['name', 'addresses'])


def list_interfaces():
    """Return an Interface for every network device on the host

    Addresses are strings, IPv4 ones first, each family in the order the
    kernel reports them. Errors reading a device's addresses are not caught.
    """
    results = []
    for device in netifaces.interfaces():
        families = netifaces.ifaddresses(device)
        addresses = [a['addr']
                     for family in (netifaces.AF_INET, netifaces.AF_INET6)
                     for a in families.get(family, ())
                     if a.get('addr')]
        results.append(Interface(device, addresses))
    return results


def parse_address(addr):
    """Parse "addr", "addr/prefix" or "addr%scope" into an IP address

    IPv4-mapped IPv6 addresses come back as the IPv4 address they carry.
    Returns None for anything that isn't an address.
    """
    addr = addr.split('/', 1)[0].split('%', 1)[0]
    try:
        ip = ipaddress.ip_address(addr)
    except ValueError:
        return None
    if ip.version == 6 and ip.ipv4_mapped:
        return ip.ipv4_mapped
    return ip


def is_global_unicast(ip):
    return not (ip.is_unspecified or ip.is_loopback or ip.is_multicast or
                ip.is_link_local)


def key_prefix(name):
    return name.upper().replace('.', '_')


def first_ipv4(addresses, filter_network=None):
    for addr in addresses:
        ip = parse_address(addr)
        if ip is None or ip.version != 4:
            continue
        if filter_network is not None and ip in filter_network:
            continue
        return ip
    return None


def first_ipv6(addresses):
    for addr in addresses:
        ip = parse_address(addr)
        if ip is not None and ip.version == 6 and is_global_unicast(ip):
            return ip
    return None


def environment_lines(config, interfaces, default_iface):
    yield 'DEFAULT_IFACE={}'.format(default_iface)

    for interface in interfaces:
        prefix = key_prefix(interface.name)
        is_default = bool(default_iface) and interface.name == default_iface

        ip = first_ipv4(interface.addresses, config.filter_network)
        if ip is not None:
            yield '{}_IPV4={}'.format(prefix, ip)
            if is_default:
                yield 'DEFAULT_IPV4={}'.format(ip)

        # The filter network only applies to IPv4.
        ip = first_ipv6(interface.addresses)
        if ip is not None:
            yield '{}_IPV6={}'.format(prefix, ip)
            if is_default:
                yield 'DEFAULT_IPV6={}'.format(ip)


def render_environment(config, interfaces, default_iface):
    return ''.join(line + '\n' for line in
                   environment_lines(config, interfaces, default_iface))

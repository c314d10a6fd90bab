import logbook
import pytest

import netenv.netenv
from netenv.environment import Config
from netenv.interfaces import Interface
from netenv.routes import Route, RouteTableReader


class FakeRouteReader(RouteTableReader):
    def __init__(self, *routes):
        self._routes = routes

    def routes(self):
        return iter(self._routes)


@pytest.fixture
def route_reader():
    return FakeRouteReader


@pytest.fixture
def no_default_route():
    return FakeRouteReader(Route('0.0.0.0', 'eth1', False))


@pytest.fixture
def eth0_default_route():
    return FakeRouteReader(Route('192.168.1.1', 'eth0', True))


@pytest.fixture
def interfaces():
    return [
        Interface('lo', ['127.0.0.1', '::1']),
        Interface('eth0', ['192.168.1.10', 'fe80::1%eth0',
                           '2001:db8::10']),
        Interface('eth0.100', ['10.0.0.5/24', 'fe80::1/64',
                               '2001:db8::1/64']),
    ]


@pytest.fixture
def config():
    def make_config(output_path='/etc/network-environment', default_iface='',
                    filter_network=None):
        return Config(output_path, default_iface, filter_network)
    return make_config


@pytest.fixture
def log_handler():
    with logbook.TestHandler() as handler:
        yield handler


@pytest.fixture(autouse=True)
def reset_logger():
    yield
    netenv.netenv.got_logger = None

from orchestriq.client import Client
from orchestriq.containers import Containers
from orchestriq.images import Images
from orchestriq.networks import Networks
from orchestriq.transport import Transport
from orchestriq.volumes import Volumes
from tests import mock
from tests import unittest


class ClientTest(unittest.TestCase):

    def test_managers_share_the_transport(self):
        transport = mock.create_autospec(Transport, instance=True)
        transport.verbose = True
        client = Client(transport)

        assert isinstance(client.containers, Containers)
        assert isinstance(client.images, Images)
        assert isinstance(client.networks, Networks)
        assert isinstance(client.volumes, Volumes)
        assert client.containers.transport is transport
        assert client.containers.verbose
        assert client.volumes.transport is transport

    @mock.patch('orchestriq.client.get_transport', autospec=True)
    def test_from_env(self, get_transport):
        get_transport.return_value.verbose = False
        client = Client.from_env({'DOCKER_HOST': 'unix:///var/run/docker.sock'}, verbose=True)
        get_transport.assert_called_once_with(
            {'DOCKER_HOST': 'unix:///var/run/docker.sock'}, verbose=True, version=None)
        assert client.transport is get_transport.return_value

    def test_context_manager_closes_transport(self):
        transport = mock.create_autospec(Transport, instance=True)
        transport.verbose = False
        with Client(transport):
            pass
        transport.close.assert_called_once_with()

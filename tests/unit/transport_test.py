import pytest
from requests.exceptions import ConnectionError as RequestsConnectionError
from requests.exceptions import ReadTimeout

from orchestriq import __version__
from orchestriq.config.environment import Environment
from orchestriq.errors import ArgumentInvalid
from orchestriq.errors import ConnectionError
from orchestriq.transport import docker_client
from orchestriq.transport import encode_params
from orchestriq.transport import get_transport
from orchestriq.transport import Transport
from tests import mock
from tests import unittest
from tests.helpers import fake_response


def fake_api_client():
    client = mock.Mock(base_url='http+docker://localhost', api_version='1.41', timeout=60)
    client._url.side_effect = lambda pathfmt, *args: \
        'http+docker://localhost/v1.41' + pathfmt.format(*args)
    return client


class EncodeParamsTest(unittest.TestCase):

    def test_booleans_and_none(self):
        assert encode_params({'all': True, 'force': False, 'tag': None, 't': 'app'}) == {
            'all': 'true',
            'force': 'false',
            't': 'app',
        }

    def test_empty(self):
        assert encode_params(None) is None
        assert encode_params({}) is None


class TransportTest(unittest.TestCase):

    def setUp(self):
        self.client = fake_api_client()
        self.transport = Transport(self.client)

    def test_send(self):
        response = fake_response(200, {'Id': 'abc'})
        self.client.request.return_value = response

        assert self.transport.send(
            'containers/create', method='POST', params={'name': 'web'}, json={'Image': 'busybox'}
        ) is response
        self.client.request.assert_called_once_with(
            'POST', 'http+docker://localhost/v1.41/containers/create',
            params={'name': 'web'},
            headers=None,
            data=None,
            json={'Image': 'busybox'},
            stream=False,
            timeout=60,
        )

    def test_streaming_requests_have_no_timeout(self):
        self.transport.send('/images/create', method='POST', stream=True)
        _, kwargs = self.client.request.call_args
        assert kwargs['timeout'] is None
        assert self.client.request.call_args[0][1] == 'http+docker://localhost/v1.41/images/create'

    def test_connection_error(self):
        self.client.request.side_effect = RequestsConnectionError()
        with pytest.raises(ConnectionError) as excinfo:
            self.transport.send('_ping')
        assert 'http+docker://localhost' in excinfo.value.msg

    def test_read_timeout(self):
        self.client.request.side_effect = ReadTimeout()
        with pytest.raises(ConnectionError) as excinfo:
            self.transport.send('containers/json')
        assert 'timeout: 60' in excinfo.value.msg

    def test_verbose_logging(self):
        self.client.request.return_value = fake_response(200, [])
        transport = Transport(self.client, verbose=True)
        with self.assertLogs('orchestriq.transport', level='INFO') as logs:
            transport.send('containers/json', params={'all': True})
        assert "engine GET /containers/json <- {'all': 'true'}" in logs.output[0]
        assert 'engine GET /containers/json -> 200 OK' in logs.output[1]

    def test_iter_body(self):
        response = fake_response(200, b'{"status": "a"}\n{"status": "b"}\n')
        assert b''.join(self.transport.iter_body(response)) == b'{"status": "a"}\n{"status": "b"}\n'


class DockerClientTest(unittest.TestCase):

    @mock.patch('orchestriq.transport.APIClient', autospec=True)
    def test_docker_client_from_environment(self, api_client):
        docker_client(Environment({
            'DOCKER_HOST': 'tcp://192.168.59.103:2375',
            'ORCHESTRIQ_API_VERSION': '1.41',
            'ORCHESTRIQ_HTTP_TIMEOUT': '300',
        }))
        _, kwargs = api_client.call_args
        assert kwargs['base_url'] == 'tcp://192.168.59.103:2375'
        assert kwargs['version'] == '1.41'
        assert kwargs['timeout'] == 300
        assert kwargs['user_agent'] == 'orchestriq/{}'.format(__version__)

    @mock.patch('orchestriq.transport.APIClient', autospec=True)
    def test_docker_client_defaults(self, api_client):
        docker_client(Environment())
        _, kwargs = api_client.call_args
        assert kwargs['version'] == 'auto'
        assert kwargs['timeout'] == 60

    @mock.patch('orchestriq.transport.APIClient', autospec=True)
    def test_explicit_version_wins(self, api_client):
        docker_client(Environment({'ORCHESTRIQ_API_VERSION': '1.41'}), version='1.43')
        assert api_client.call_args[1]['version'] == '1.43'

    def test_invalid_timeout(self):
        with pytest.raises(ArgumentInvalid):
            docker_client(Environment({'ORCHESTRIQ_HTTP_TIMEOUT': 'forever'}))

    @mock.patch('orchestriq.transport.APIClient')
    def test_get_transport_verbose_from_environment(self, api_client):
        transport = get_transport({'ORCHESTRIQ_VERBOSE': '1'})
        assert transport.verbose
        assert transport.client is api_client.return_value

    @mock.patch('orchestriq.transport.APIClient')
    def test_get_transport_quiet(self, api_client):
        assert not get_transport({'ORCHESTRIQ_VERBOSE': 'false'}).verbose

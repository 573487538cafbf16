import logging
import pprint

from docker import APIClient
from docker.errors import DockerException
from docker.errors import TLSParameterError
from docker.utils import kwargs_from_env
from requests.exceptions import ConnectionError as RequestsConnectionError
from requests.exceptions import ReadTimeout
from requests.exceptions import SSLError

from . import __version__
from .config.environment import Environment
from .const import DEFAULT_API_VERSION
from .const import HTTP_TIMEOUT
from .errors import ArgumentInvalid
from .errors import ConnectionError

log = logging.getLogger(__name__)


def encode_params(params):
    """Drop unset parameters and spell booleans the way the Engine's
    query parser expects them.
    """
    if not params:
        return None
    encoded = {}
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, bool):
            value = 'true' if value else 'false'
        encoded[key] = value
    return encoded


def format_params(params, max_lines=10):
    if not params:
        return '()'
    lines = pprint.pformat(params).split('\n')
    extra = '\n...' if len(lines) > max_lines else ''
    return '\n'.join(lines[:max_lines]) + extra


class Transport:
    """Executes requests against the Engine through a docker-py
    `APIClient` session and hands back the raw `requests.Response`.
    """

    def __init__(self, client, verbose=False):
        self.client = client
        self.verbose = verbose

    @property
    def base_url(self):
        return self.client.base_url

    @property
    def api_version(self):
        return self.client.api_version

    def send(self, path, method='GET', params=None, headers=None, data=None,
             json=None, stream=False):
        url = self.client._url('/{0}', path.lstrip('/'))
        params = encode_params(params)
        if self.verbose:
            log.info("engine %s /%s <- %s", method, path.lstrip('/'), format_params(params))

        try:
            response = self.client.request(
                method, url,
                params=params,
                headers=headers,
                data=data,
                json=json,
                stream=stream,
                timeout=None if stream else self.client.timeout,
            )
        except SSLError as e:
            raise ConnectionError('SSL error: {}'.format(e))
        except ReadTimeout:
            raise ConnectionError(
                'An HTTP request to the Engine took too long to complete '
                '(timeout: {} seconds).'.format(self.client.timeout))
        except RequestsConnectionError:
            raise ConnectionError(
                "Couldn't connect to the Docker daemon at {}. "
                "Is it running?".format(self.client.base_url))

        if self.verbose:
            log.info("engine %s /%s -> %s %s", method, path.lstrip('/'),
                     response.status_code, response.reason)
        return response

    def iter_body(self, response):
        return response.iter_content(chunk_size=None)

    def close(self):
        self.client.close()


def docker_client(environment, version=None):
    """
    Returns a docker-py client configured using environment variables
    according to the same logic as the official Docker client.
    """
    try:
        kwargs = kwargs_from_env(environment=environment)
    except TLSParameterError:
        raise ArgumentInvalid(
            "TLS configuration is invalid - make sure your DOCKER_TLS_VERIFY "
            "and DOCKER_CERT_PATH are set correctly.")

    kwargs['version'] = (
        version or environment.get('ORCHESTRIQ_API_VERSION') or DEFAULT_API_VERSION
    )

    timeout = environment.get('ORCHESTRIQ_HTTP_TIMEOUT')
    if timeout:
        try:
            kwargs['timeout'] = int(timeout)
        except ValueError:
            raise ArgumentInvalid(
                "ORCHESTRIQ_HTTP_TIMEOUT must be a number of seconds, got '{}'".format(timeout))
    else:
        kwargs['timeout'] = HTTP_TIMEOUT

    kwargs['user_agent'] = 'orchestriq/{}'.format(__version__)

    try:
        return APIClient(**kwargs)
    except DockerException as e:
        raise ConnectionError(str(e))


def get_transport(environment=None, verbose=False, version=None):
    if environment is None:
        environment = Environment.from_env_file(None)
    elif not isinstance(environment, Environment):
        environment = Environment(environment)
    client = docker_client(environment, version=version)
    verbose = verbose or environment.get_boolean('ORCHESTRIQ_VERBOSE')
    if verbose:
        log.info("Docker base_url: %s", client.base_url)
        log.info("Docker API version: %s", client.api_version)
    return Transport(client, verbose=verbose)

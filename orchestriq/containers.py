import logging

from .config import validate_options
from .container import Container
from .container import CreatedContainer
from .errors import ArgumentInvalid
from .errors import DaemonError
from .errors import handle_daemon_errors
from .errors import OrchestriqError
from .networks import Networks
from .result import Result
from .service import compile_template
from .template import ContainerTemplate

log = logging.getLogger(__name__)


class Containers:
    def __init__(self, transport, verbose=False):
        self.transport = transport
        self.verbose = verbose
        self.networks = Networks(transport)

    def new_template(self, name=None):
        return ContainerTemplate(name)

    def compile(self, template):
        return compile_template(template, verbose=self.verbose)

    def create(self, template):
        """Create the containers of a template, or a single container from
        raw Engine create options.

        Services are created one after the other in declaration order.  When
        one fails, the error carries the containers created so far in
        `created`; they are not removed.  A service on several networks is
        created on the first one, then connected to the others.

        Returns a :class:`CreatedContainer` for a single service, otherwise
        a list of them in creation order.
        """
        if isinstance(template, ContainerTemplate):
            return self._create_from_template(template)
        if isinstance(template, dict):
            return self._create_from_options(template)
        raise ArgumentInvalid(
            "Containers are created from a ContainerTemplate or a mapping of "
            "create options, got {}.".format(type(template).__name__))

    def _create_from_template(self, template):
        compiled = self.compile(template)
        created = []
        for service, (name, body) in zip(template.services.values(), compiled):
            try:
                with handle_daemon_errors('create container', name):
                    container = self._create(name, body)
                created.append(container)
                for network in service.networks[1:]:
                    self.networks.connect(network, container.id, aliases=[service.name])
            except OrchestriqError as e:
                e.created = list(created)
                raise

        if len(created) == 1:
            return created[0]
        return created

    def _create_from_options(self, options):
        validate_options('create', options)
        body = dict(options)
        name = body.pop('name', None)
        with handle_daemon_errors('create container', name or body['Image']):
            return self._create(name, body)

    def _create(self, name, body):
        log.info("Creating %s", name or body['Image'])
        response = self.transport.send(
            'containers/create', method='POST', params={'name': name}, json=body)
        if not response.ok:
            raise DaemonError.from_response(response)

        result = response.json()
        for warning in result.get('Warnings') or []:
            log.warning("%s: %s", name or result['Id'][:12], warning)
        return CreatedContainer(result['Id'], name)

    def list(self, all=True):
        response = self.transport.send('containers/json', params={'all': all})
        if not response.ok:
            raise DaemonError.from_response(response).with_context('list containers')
        return [Container.from_ps(c) for c in response.json()]

    def lookup(self, id_or_name):
        response = self.transport.send('containers/{}/json'.format(id_or_name))
        return Result.from_response(response, 'inspect container', id_or_name)

    def inspect(self, id_or_name):
        return self.lookup(id_or_name).unwrap()

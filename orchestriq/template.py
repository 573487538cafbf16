"""
The declarative side of container creation: a template holding shared
environment settings, one or more named services and the networks,
volumes, secrets and configs those services use.
"""
import logging
import os

from .config import validate_options
from .config.environment import parse_environment
from .config.types import Healthcheck
from .config.types import StackConfig
from .config.types import StackNetwork
from .config.types import StackSecret
from .config.types import StackVolume
from .config.types import VolumeSpec
from .errors import ArgumentConflict
from .errors import ArgumentInvalid
from .errors import PreconditionFailed
from .utils import normalize_name

log = logging.getLogger(__name__)


def schema_options(options):
    """Render typed option values back into their plain form for validation."""
    result = dict(options)
    if result.get('volumes'):
        result['volumes'] = [
            v.as_config() if isinstance(v, VolumeSpec) else v
            for v in result['volumes']
        ]
    if isinstance(result.get('healthcheck'), Healthcheck):
        result['healthcheck'] = result['healthcheck'].repr()
    return {k: v for k, v in result.items() if v is not None}


def parse_port(port):
    port = str(port)
    if '/' not in port:
        port = '{}/tcp'.format(port)
    return port


def check_new_name(kind, name, declared):
    if not isinstance(name, str) or not name:
        raise ArgumentInvalid("A {} name must be a non-empty string.".format(kind))
    if name in declared:
        raise ArgumentConflict(
            "{} '{}' is already defined in this template.".format(kind.capitalize(), name))


class Service:
    def __init__(self, name, image=None, container_name=None, user=None,
                 command=None, entrypoint=None, env_files=None,
                 environment=None, volumes=None, ports=None, healthcheck=None,
                 networks=None, secrets=None):
        self.name = name
        self.image = image
        self.container_name = container_name
        self.user = user
        self.command = command
        self.entrypoint = entrypoint
        self.env_files = list(env_files or [])
        self.environment = parse_environment(environment)
        self.volumes = [VolumeSpec.parse(v) for v in volumes or []]
        self.ports = [parse_port(p) for p in ports or []]
        self.healthcheck = Healthcheck.parse(healthcheck)
        self.networks = list(networks or [])
        self.secrets = list(secrets or [])

    @property
    def effective_container_name(self):
        return self.container_name or self.name

    def add_volume(self, volume):
        self.volumes.append(VolumeSpec.parse(volume))
        return self

    def add_port(self, port):
        validate_options('service', {'ports': [port]})
        self.ports.append(parse_port(port))
        return self

    def add_env_files(self, *paths):
        validate_options('service', {'env_files': list(paths)})
        self.env_files.extend(paths)
        return self

    def set_environment(self, mapping=None, **values):
        self.environment.update(parse_environment(mapping))
        self.environment.update(values)
        return self

    def set_healthcheck(self, healthcheck=None, **options):
        healthcheck = healthcheck if healthcheck is not None else options
        validate_options('service', schema_options({'healthcheck': healthcheck}))
        self.healthcheck = Healthcheck.parse(healthcheck)
        return self

    def add_network(self, name):
        validate_options('service', {'networks': [name]})
        if name not in self.networks:
            self.networks.append(name)
        return self

    def add_secret(self, name):
        validate_options('service', {'secrets': [name]})
        if name not in self.secrets:
            self.secrets.append(name)
        return self

    def __repr__(self):
        return '<Service: {}>'.format(self.name)


class ContainerTemplate:
    """A set of services created together, sharing env files and an
    environment that each service may override.
    """

    def __init__(self, name=None):
        if name is not None:
            validate_options('template', {'name': name})
            name = normalize_name(name)
        self.name = name
        self.env_files = []
        self.environment = {}
        self.services = {}
        self.networks = {}
        self.volumes = {}
        self.secrets = {}
        self.configs = {}

    def add_env_files(self, *paths):
        validate_options('template', {'env_files': list(paths)})
        self.env_files.extend(paths)
        return self

    def set_environment(self, mapping=None, **values):
        if mapping is not None:
            validate_options('template', {'environment': mapping})
        self.environment.update(parse_environment(mapping))
        self.environment.update(values)
        return self

    def add_service(self, name, **options):
        check_new_name('service', name, self.services)
        validate_options('service', schema_options(options))
        service = Service(name, **options)
        self.services[name] = service
        log.debug("Added service %s to template %s", name, self.name)
        return service

    def add_network(self, name, **options):
        check_new_name('network', name, self.networks)
        validate_options('stack_network', options)
        network = StackNetwork(name, **options)
        self.networks[name] = network
        return network

    def add_volume(self, name, **options):
        check_new_name('volume', name, self.volumes)
        validate_options('stack_volume', options)
        volume = StackVolume(name, **options)
        self.volumes[name] = volume
        return volume

    def add_secret(self, name, file=None, external=None):
        check_new_name('secret', name, self.secrets)
        validate_options('stack_secret', {
            k: v for k, v in (('file', file), ('external', external)) if v is not None
        })
        secret = StackSecret(name, file, external)
        if secret.file and not os.path.isfile(secret.file):
            log.warning(
                'Secret "%s" uses the file "%s", which does not exist yet.',
                name, secret.file)
        self.secrets[name] = secret
        return secret

    def add_config(self, name, file):
        check_new_name('config', name, self.configs)
        validate_options('stack_config', {'file': file})
        config = StackConfig(name, file)
        if not os.path.isfile(config.file):
            raise PreconditionFailed(
                "Couldn't find the file of config \"{}\": {}".format(name, config.file))
        self.configs[name] = config
        return config

    def check_references(self):
        """Every network and secret a service uses must be declared on the
        template.
        """
        for service in self.services.values():
            for network in service.networks:
                if network not in self.networks:
                    raise ArgumentInvalid(
                        'Service "{}" uses an undefined network "{}"'.format(
                            service.name, network))
            for secret in service.secrets:
                if secret not in self.secrets:
                    raise ArgumentInvalid(
                        'Service "{}" uses an undefined secret "{}"'.format(
                            service.name, secret))

    def get_service(self, name):
        try:
            return self.services[name]
        except KeyError:
            raise ArgumentInvalid("No such service: {}".format(name))

    @property
    def service_names(self):
        return list(self.services)

    def __len__(self):
        return len(self.services)

    def __repr__(self):
        return '<ContainerTemplate: {} ({} services)>'.format(self.name, len(self.services))

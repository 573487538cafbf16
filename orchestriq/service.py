"""
Compilation of template services into bodies for POST /containers/create.
"""
import logging

from docker.types import Healthcheck as EngineHealthcheck
from docker.utils import split_command

from .config.environment import resolve_environment
from .config.types import VolumeSpec
from .const import SECRETS_PATH
from .errors import ArgumentInvalid
from .utils import nanoseconds_from_duration

log = logging.getLogger(__name__)


def format_environment(environment):
    def format_env(key, value):
        if value is None:
            return key
        if isinstance(value, bytes):
            value = value.decode('utf-8')
        return '{key}={value}'.format(key=key, value=value)

    return [format_env(*item) for item in environment.items()]


def build_volume_options(volumes):
    """Split volumes into the `Volumes` map (anonymous volumes) and the
    `Binds` list, in which named volumes precede bind mounts.
    """
    container_volumes = {v.target: {} for v in volumes if v.is_anonymous}
    named = [v.binding() for v in volumes if v.is_named_volume]
    binds = [v.binding() for v in volumes if v.is_bind]
    return container_volumes, named + binds


def build_healthcheck(healthcheck):
    if healthcheck is None or not healthcheck.test:
        return None
    if not healthcheck.has_settings:
        return None
    if healthcheck.disable:
        return {'Test': ['NONE']}

    engine_healthcheck = EngineHealthcheck(
        test=healthcheck.test,
        interval=nanoseconds_from_duration(healthcheck.interval),
        timeout=nanoseconds_from_duration(healthcheck.timeout),
        retries=healthcheck.retries,
        start_period=nanoseconds_from_duration(healthcheck.start_period),
    )
    return {k: v for k, v in engine_healthcheck.items() if v is not None}


def build_exposed_ports(ports):
    return {port: {} for port in ports}


def build_secret_binds(service, secrets):
    """File secrets are bind-mounted read-only below /run/secrets."""
    binds = []
    for name in service.secrets:
        secret = secrets.get(name)
        if secret is None:
            raise ArgumentInvalid(
                'Service "{}" uses an undefined secret "{}"'.format(service.name, name))
        if secret.external:
            log.warning(
                'Service "%s" uses secret "%s" which is external. External '
                'secrets are not available to containers created outside '
                'a swarm.', service.name, name)
            continue
        target = '{}/{}'.format(SECRETS_PATH, name)
        binds.append(VolumeSpec.bind(secret.file, target, 'ro').binding())
    return binds


def build_networking_config(service):
    """Only the first network is attached at creation, the others are
    connected once the container exists.
    """
    if not service.networks:
        return {}
    return {
        'EndpointsConfig': {
            service.networks[0]: {'Aliases': [service.name]},
        },
    }


def build_command(command):
    if isinstance(command, str):
        return split_command(command)
    return command


def get_container_create_options(service, template=None, verbose=False):
    """Return the Engine's create body for one service.  Keys whose value
    is empty are left out.
    """
    if not service.image:
        raise ArgumentInvalid(
            "Service '{}' has no image. An image is required to create "
            "a container.".format(service.name))

    environment = resolve_environment(
        template.env_files if template is not None else [],
        template.environment if template is not None else {},
        service.env_files,
        service.environment,
        verbose=verbose,
    )
    volumes, binds = build_volume_options(service.volumes)
    binds += build_secret_binds(service, template.secrets if template is not None else {})

    container_options = {
        'Image': service.image,
        'User': service.user,
        'Cmd': build_command(service.command),
        'Entrypoint': build_command(service.entrypoint),
        'Env': format_environment(environment),
        'Healthcheck': build_healthcheck(service.healthcheck),
        'Volumes': volumes,
        'ExposedPorts': build_exposed_ports(service.ports),
        'NetworkingConfig': build_networking_config(service),
    }
    container_options = {k: v for k, v in container_options.items() if v}

    host_config = {}
    if binds:
        host_config['Binds'] = binds
    if service.networks:
        host_config['NetworkMode'] = service.networks[0]
    container_options['HostConfig'] = host_config
    return container_options


def compile_template(template, verbose=False):
    """Compile every service of the template, in declaration order, into
    `(container_name, body)` pairs.  Nothing is sent.
    """
    if not template.services:
        raise ArgumentInvalid(
            "The container template must define at least one service.")
    template.check_references()

    compiled = []
    for service in template.services.values():
        options = get_container_create_options(service, template, verbose=verbose)
        log.debug("Compiled service %s: %s", service.name, options)
        compiled.append((service.effective_container_name, options))
    return compiled

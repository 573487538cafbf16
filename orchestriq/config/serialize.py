import os

import yaml

from ..const import COMPOSE_FILE_EXTENSIONS
from ..const import COMPOSE_FILE_PREFIX
from ..errors import ArgumentInvalid
from ..utils import timestamp_millis
from . import types


def serialize_config_type(dumper, data):
    representer = dumper.represent_str
    return representer(data.repr())


def serialize_string(dumper, data):
    """ Ensure boolean-like strings are quoted in the output """
    representer = dumper.represent_str

    if isinstance(data, bytes):
        data = data.decode('utf-8')

    if data.lower() in ('y', 'n', 'yes', 'no', 'on', 'off', 'true', 'false'):
        return dumper.represent_scalar('tag:yaml.org,2002:str', data, style='"')
    return representer(data)


class ComposeDumper(yaml.SafeDumper):
    pass


ComposeDumper.add_representer(str, serialize_string)
ComposeDumper.add_representer(types.VolumeSpec, serialize_config_type)


def serialize_ns_time_value(value):
    result = (value, 'ns')
    table = [
        (1000., 'us'),
        (1000., 'ms'),
        (1000., 's'),
        (60., 'm'),
        (60., 'h')
    ]
    for stage in table:
        tmp = value / stage[0]
        if tmp == int(value / stage[0]):
            value = tmp
            result = (int(value), stage[1])
        else:
            break
    return '{}{}'.format(*result)


def denormalize_healthcheck(healthcheck):
    if healthcheck.disable:
        return {'disable': True}
    result = healthcheck.repr()
    result.pop('disable', None)
    for key in ('interval', 'timeout', 'start_period'):
        if isinstance(result.get(key), int):
            result[key] = serialize_ns_time_value(result[key])
    return result


def denormalize_service(service, template):
    """Compose has no top-level env files or environment, so the template's
    are folded into each service.
    """
    environment = dict(template.environment)
    environment.update(service.environment)

    service_dict = {
        'image': service.image,
        'container_name': service.container_name,
        'user': service.user,
        'command': service.command,
        'entrypoint': service.entrypoint,
        'env_file': template.env_files + service.env_files,
        'environment': environment,
        'volumes': [
            v if not v.is_anonymous else v.target for v in service.volumes
        ],
        'expose': service.ports,
        'networks': service.networks,
        'secrets': service.secrets,
    }
    if service.healthcheck is not None and service.healthcheck.test:
        service_dict['healthcheck'] = denormalize_healthcheck(service.healthcheck)
    return {k: v for k, v in service_dict.items() if v}


def denormalize_volumes(template):
    """Named volumes a service mounts must be declared at the top level."""
    volumes = {name: volume.repr() for name, volume in template.volumes.items()}
    for service in template.services.values():
        for volume in service.volumes:
            if volume.is_named_volume:
                volumes.setdefault(volume.source, {})
    return volumes


def denormalize_template(template):
    if not template.services:
        raise ArgumentInvalid(
            "Unable to generate a compose file: the template has no services.")
    template.check_references()
    result = {
        'services': {
            name: denormalize_service(service, template)
            for name, service in template.services.items()
        },
    }

    resources = {
        'networks': {name: n.repr() for name, n in template.networks.items()},
        'volumes': denormalize_volumes(template),
        'secrets': {name: s.repr() for name, s in template.secrets.items()},
        'configs': {name: c.repr() for name, c in template.configs.items()},
    }
    for key, config_dict in resources.items():
        if config_dict:
            result[key] = config_dict

    if template.name:
        result = dict({'name': template.name}, **result)
    return result


def serialize_template(template):
    return yaml.dump(
        denormalize_template(template),
        Dumper=ComposeDumper,
        default_flow_style=False,
        indent=2,
        width=80,
        allow_unicode=True,
        sort_keys=False,
    )


def default_compose_path(template):
    directory = template.name or str(timestamp_millis())
    return os.path.join(os.getcwd(), directory, 'docker', 'docker-compose.yml')


def check_compose_path(path):
    basename = os.path.basename(path)
    if not basename.lower().endswith(COMPOSE_FILE_EXTENSIONS):
        raise ArgumentInvalid(
            "The compose file path ({}) must end with .yml or .yaml.".format(path))
    if not basename.startswith(COMPOSE_FILE_PREFIX):
        raise ArgumentInvalid(
            'The compose file name ({}) must start with "{}".'.format(
                basename, COMPOSE_FILE_PREFIX))


def write_compose_file(template, path=None):
    """Write the template as a compose file and return the path written."""
    path = path or default_compose_path(template)
    check_compose_path(path)
    content = serialize_template(template)

    directory = os.path.dirname(os.path.abspath(path))
    os.makedirs(directory, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as fh:
        fh.write(content)
    return path

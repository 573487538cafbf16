"""
Types for the objects a container template and the option sets are built from.
"""
import base64
import os
import posixpath
import re
from collections import namedtuple

from docker.auth import encode_header

from ..const import DEFAULT_REGISTRY
from ..errors import ArgumentConflict
from ..errors import ArgumentInvalid
from ..errors import ArgumentMissing

VALID_EMAIL = re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$')
BIND_PREFIXES = ('/', '.', '~')


class VolumeSpec(namedtuple('_VolumeSpec', 'type source target mode')):
    """One of three shapes: an anonymous volume (no source), a named volume
    or a bind mount of a host path.
    """
    ANONYMOUS = 'anonymous'
    NAMED = 'volume'
    BIND = 'bind'

    def __new__(cls, type, source, target, mode=None):
        if type not in (cls.ANONYMOUS, cls.NAMED, cls.BIND):
            raise ArgumentInvalid("Unknown volume type '{}'".format(type))
        if type == cls.ANONYMOUS and source:
            raise ArgumentInvalid(
                "Anonymous volume {} can not specify a source".format(target))
        if type != cls.ANONYMOUS and not source:
            raise ArgumentInvalid(
                "Volume {} of type '{}' requires a source".format(target, type))
        if not target or not posixpath.isabs(target):
            raise ArgumentInvalid(
                "Volume target '{}' must be an absolute container path".format(target))
        return super().__new__(cls, type, source, posixpath.normpath(target), mode)

    @classmethod
    def anonymous(cls, target):
        return cls(cls.ANONYMOUS, None, target)

    @classmethod
    def named(cls, name, target, mode=None):
        return cls(cls.NAMED, name, target, mode)

    @classmethod
    def bind(cls, source, target, mode=None):
        return cls(cls.BIND, resolve_host_path(source), target, mode)

    @classmethod
    def parse(cls, volume_config):
        if isinstance(volume_config, cls):
            return volume_config
        if isinstance(volume_config, dict):
            return cls._parse_dict(volume_config)

        parts = volume_config.split(':')
        if len(parts) > 3:
            raise ArgumentInvalid(
                "Volume %s has incorrect format, should be "
                "[source:]target[:mode]" % volume_config)

        if len(parts) == 1:
            return cls.anonymous(parts[0])

        source, target = parts[0], parts[1]
        mode = parts[2] if len(parts) == 3 else None
        if source.startswith(BIND_PREFIXES):
            return cls.bind(source, target, mode)
        return cls.named(source, target, mode)

    @classmethod
    def _parse_dict(cls, volume_dict):
        type = volume_dict.get('type', cls.NAMED)
        source = volume_dict.get('source')
        target = volume_dict.get('target')
        mode = 'ro' if volume_dict.get('read_only') else None
        if type == cls.BIND:
            return cls.bind(source, target, mode)
        if type == cls.NAMED and source:
            return cls.named(source, target, mode)
        if type in (cls.NAMED, cls.ANONYMOUS):
            return cls.anonymous(target)
        raise ArgumentInvalid("Unsupported volume type '{}'".format(type))

    @property
    def is_anonymous(self):
        return self.type == self.ANONYMOUS

    @property
    def is_named_volume(self):
        return self.type == self.NAMED

    @property
    def is_bind(self):
        return self.type == self.BIND

    def binding(self):
        if self.is_anonymous:
            return None
        return self.repr()

    def repr(self):
        parts = [self.source, self.target, self.mode]
        return ':'.join(p for p in parts if p)

    def as_config(self):
        config = {'type': self.type, 'target': self.target}
        if self.source:
            config['source'] = self.source
        if self.mode == 'ro':
            config['read_only'] = True
        return config


def resolve_host_path(path):
    if not path:
        return path
    return os.path.abspath(os.path.expanduser(path))


class Healthcheck(namedtuple('_Healthcheck', 'test interval timeout retries start_period disable')):

    def __new__(cls, test=None, interval=None, timeout=None, retries=None,
                start_period=None, disable=None):
        if isinstance(test, str):
            test = ['CMD-SHELL', test]
        return super().__new__(
            cls, list(test or []), interval, timeout, retries, start_period, disable)

    @classmethod
    def parse(cls, config):
        if config is None or isinstance(config, cls):
            return config
        return cls(**config)

    @property
    def has_settings(self):
        return any(
            getattr(self, field) is not None
            for field in ('interval', 'timeout', 'retries', 'start_period', 'disable')
        )

    def repr(self):
        return {
            field: value for field, value in self._asdict().items()
            if value is not None and value != []
        }


class RegistryAuth(namedtuple('_RegistryAuth', 'username password email serveraddress')):

    @classmethod
    def parse(cls, config, serveraddress=None):
        if config is None or isinstance(config, cls):
            return config
        email = config.get('email')
        if email is not None and not VALID_EMAIL.match(email):
            raise ArgumentInvalid(
                'The registry "email" you provided ({}) must be a valid email '
                'address.'.format(email))
        return cls(
            config['username'],
            config['password'],
            email,
            config.get('serveraddress') or serveraddress or DEFAULT_REGISTRY,
        )

    def header(self):
        return encode_header({k: v for k, v in self._asdict().items() if v is not None})


class RemoteAuth(namedtuple('_RemoteAuth', 'type username password token')):
    BASIC = 'Basic'
    BEARER = 'Bearer'

    @classmethod
    def parse(cls, config):
        if config is None or isinstance(config, cls):
            return config
        return cls(
            config['type'],
            config.get('username'),
            config.get('password'),
            config.get('token'),
        )

    def header(self):
        if self.type == self.BEARER:
            return 'Bearer {}'.format(self.token)
        credentials = '{}:{}'.format(self.username, self.password).encode('utf-8')
        return 'Basic {}'.format(base64.b64encode(credentials).decode('ascii'))


def without_empty(mapping):
    return {k: v for k, v in mapping.items() if v is not None and v != {}}


class StackNetwork(namedtuple('_StackNetwork',
                              'name driver driver_opts ipam internal attachable enable_ipv6 external labels')):
    """A network declared at the top of a template.  An external network
    already exists and is only referenced, so it carries no driver settings.
    """

    def __new__(cls, name, driver=None, driver_opts=None, ipam=None, internal=None,
                attachable=None, enable_ipv6=None, external=None, labels=None):
        if external and (driver or driver_opts or ipam):
            raise ArgumentConflict(
                'Network "{}" is external, so its driver settings can not be '
                'set.'.format(name))
        return super().__new__(
            cls, name, driver, driver_opts, ipam, internal, attachable,
            enable_ipv6, external, labels)

    def repr(self):
        if self.external:
            return {'external': True}
        result = self._asdict()
        del result['name']
        del result['external']
        return without_empty(result)


class StackVolume(namedtuple('_StackVolume', 'name driver driver_opts external labels')):

    def __new__(cls, name, driver=None, driver_opts=None, external=None, labels=None):
        if external and (driver or driver_opts):
            raise ArgumentConflict(
                'Volume "{}" is external, so its driver settings can not be '
                'set.'.format(name))
        return super().__new__(cls, name, driver, driver_opts, external, labels)

    def repr(self):
        if self.external:
            return {'external': True}
        return without_empty({
            'driver': self.driver,
            'driver_opts': self.driver_opts,
            'labels': self.labels,
        })


class StackSecret(namedtuple('_StackSecret', 'name file external')):
    """A secret read from a host file, or an external one managed by swarm."""

    def __new__(cls, name, file=None, external=None):
        if file and external:
            raise ArgumentConflict(
                'Secret "{}" can not be both external and read from a file.'.format(name))
        if not file and not external:
            raise ArgumentMissing(
                'Secret "{}" needs a file, or must be marked external.'.format(name))
        return super().__new__(cls, name, resolve_host_path(file), bool(external))

    def repr(self):
        if self.external:
            return {'external': True}
        return {'file': self.file}


class StackConfig(namedtuple('_StackConfig', 'name file')):

    def __new__(cls, name, file):
        return super().__new__(cls, name, resolve_host_path(file))

    def repr(self):
        return {'file': self.file}

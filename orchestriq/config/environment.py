import logging
import os
import re

import dotenv

from ..errors import ArgumentInvalid
from ..errors import PreconditionFailed

log = logging.getLogger(__name__)


def split_env(env):
    if isinstance(env, bytes):
        env = env.decode('utf-8', 'replace')
    key = value = None
    if '=' in env:
        key, value = env.split('=', 1)
    else:
        key = env
    if re.search(r'\s', key):
        raise ArgumentInvalid(
            "environment variable name '{}' may not contain whitespace.".format(key)
        )
    return key, value


def parse_environment(environment):
    """Accept a mapping or a list of KEY=VALUE strings."""
    if not environment:
        return {}
    if isinstance(environment, dict):
        return dict(environment)
    return dict(split_env(e) for e in environment)


def env_vars_from_file(filename):
    """
    Read in a line delimited file of environment variables.
    """
    if not os.path.exists(filename):
        raise PreconditionFailed("Couldn't find env file: {}".format(filename))
    elif not os.path.isfile(filename):
        raise PreconditionFailed("{} is not a file.".format(filename))

    return dotenv.dotenv_values(dotenv_path=filename, encoding='utf-8-sig', interpolate=False)


def env_vars_from_files(filenames, verbose=False):
    env = {}
    for filename in filenames or []:
        if not os.path.isabs(filename):
            if verbose:
                log.warning("Skipping env file '%s': only absolute paths are read.", filename)
            else:
                log.debug("Skipping relative env file '%s'", filename)
            continue
        # a bare KEY line has no value to pass on
        env.update(
            (key, value) for key, value in env_vars_from_file(filename).items()
            if value is not None
        )
    return env


def resolve_environment(template_env_files, template_environment,
                        service_env_files, service_environment, verbose=False):
    """Merge the four environment sources of a service.  Later sources win:
    template env files, template environment, service env files, service
    environment.
    """
    env = {}
    env.update(env_vars_from_files(template_env_files, verbose))
    env.update(parse_environment(template_environment))
    env.update(env_vars_from_files(service_env_files, verbose))
    env.update(parse_environment(service_environment))
    return env


class Environment(dict):
    """Client configuration: an optional `.env` file overlaid with the
    process environment.
    """

    @classmethod
    def from_env_file(cls, base_dir, env_file=None):
        def _initialize():
            result = cls()
            if base_dir is None:
                return result
            env_file_path = os.path.join(base_dir, env_file or '.env')
            try:
                return cls(env_vars_from_file(env_file_path))
            except PreconditionFailed:
                pass
            return result

        instance = _initialize()
        instance.update(os.environ)
        return instance

    def get_boolean(self, key, default=False):
        # Convert a value to a boolean using "common sense" rules.
        # Unset, empty, "0" and "false" (i-case) yield False.
        # All other values yield True.
        value = self.get(key)
        if not value:
            return default
        if value.lower() in ['0', 'false']:
            return False
        return True

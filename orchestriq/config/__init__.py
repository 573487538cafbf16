# flake8: noqa
from .environment import Environment
from .environment import resolve_environment
from .types import Healthcheck
from .types import RegistryAuth
from .types import RemoteAuth
from .types import VolumeSpec
from .validation import validate_options

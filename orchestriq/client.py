from .containers import Containers
from .images import Images
from .networks import Networks
from .transport import get_transport
from .volumes import Volumes


class Client:
    """Entry point bundling the managers that share one Transport."""

    def __init__(self, transport):
        self.transport = transport
        self.containers = Containers(transport, verbose=transport.verbose)
        self.images = Images(transport)
        self.networks = Networks(transport)
        self.volumes = Volumes(transport)

    @classmethod
    def from_env(cls, environment=None, verbose=False, version=None):
        return cls(get_transport(environment, verbose=verbose, version=version))

    def close(self):
        self.transport.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

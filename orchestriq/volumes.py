import logging

from .config import validate_options
from .errors import DaemonError
from .errors import handle_daemon_errors
from .result import Result

log = logging.getLogger(__name__)


class Volumes:
    def __init__(self, transport):
        self.transport = transport

    def list(self):
        response = self.transport.send('volumes')
        if not response.ok:
            raise DaemonError.from_response(response).with_context('list volumes')
        return response.json().get('Volumes') or []

    def create(self, name=None, driver=None, driver_opts=None, labels=None):
        body = {
            k: v for k, v in (
                ('name', name), ('driver', driver),
                ('driver_opts', driver_opts), ('labels', labels),
            ) if v is not None
        }
        validate_options('volume_create', body)

        driver_name = 'the default driver'
        if driver:
            driver_name = 'driver "{}"'.format(driver)
        log.info('Creating volume "{}" with {}'.format(name or '<anonymous>', driver_name))

        body = {
            'Name': name,
            'Driver': driver,
            'DriverOpts': driver_opts,
            'Labels': labels,
        }
        with handle_daemon_errors('create volume', name):
            response = self.transport.send(
                'volumes/create', method='POST',
                json={k: v for k, v in body.items() if v is not None})
            if not response.ok:
                raise DaemonError.from_response(response)
        return response.json()['Name']

    def lookup(self, name):
        response = self.transport.send('volumes/{}'.format(name))
        return Result.from_response(response, 'inspect volume', name)

    def inspect(self, name):
        return self.lookup(name).unwrap()

    def remove(self, name, force=False):
        """Remove a volume.  Returns False when no such volume exists."""
        log.info("Removing volume %s", name)
        response = self.transport.send(
            'volumes/{}'.format(name), method='DELETE', params={'force': force})
        if response.status_code == 404:
            log.debug("Volume %s not found.", name)
            return False
        if not response.ok:
            raise DaemonError.from_response(response).with_context('remove volume', name)
        return True

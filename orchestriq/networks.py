import logging

from .config import validate_options
from .errors import DaemonError
from .errors import handle_daemon_errors

log = logging.getLogger(__name__)


class Networks:
    def __init__(self, transport):
        self.transport = transport

    def list(self):
        response = self.transport.send('networks')
        if not response.ok:
            raise DaemonError.from_response(response).with_context('list networks')
        return response.json()

    def create(self, name, driver=None, labels=None, options=None,
               internal=False, attachable=False, check_duplicate=True):
        validate_options('network', {
            k: v for k, v in (
                ('name', name), ('driver', driver), ('labels', labels),
                ('options', options), ('internal', internal),
                ('attachable', attachable), ('check_duplicate', check_duplicate),
            ) if v is not None
        })

        driver_name = 'the default driver'
        if driver:
            driver_name = 'driver "{}"'.format(driver)
        log.info("Creating network \"{}\" with {}".format(name, driver_name))

        body = {
            'Name': name,
            'Driver': driver,
            'Options': options,
            'Labels': labels,
            'Internal': internal,
            'Attachable': attachable,
            'CheckDuplicate': check_duplicate,
        }
        body = {k: v for k, v in body.items() if v is not None}

        with handle_daemon_errors('create network', name):
            response = self.transport.send('networks/create', method='POST', json=body)
            if not response.ok:
                raise DaemonError.from_response(response)

        result = response.json()
        if result.get('Warning'):
            log.warning(result['Warning'])
        return result['Id']

    def connect(self, network, container, aliases=None):
        body = {'Container': container}
        if aliases:
            body['EndpointConfig'] = {'Aliases': aliases}
        log.debug("Connecting %s to network %s", container, network)

        with handle_daemon_errors('connect to network', network):
            response = self.transport.send(
                'networks/{}/connect'.format(network), method='POST', json=body)
            if not response.ok:
                raise DaemonError.from_response(response)

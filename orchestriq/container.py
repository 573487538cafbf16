from collections import namedtuple
from functools import reduce


class CreatedContainer(namedtuple('_CreatedContainer', 'id name')):

    @property
    def short_id(self):
        return self.id[:12]


class Container:
    """
    Represents a Docker container, constructed from the output of
    GET /containers/json.
    """
    def __init__(self, dictionary):
        self.dictionary = dictionary

    @classmethod
    def from_ps(cls, dictionary):
        return cls(dictionary)

    @property
    def id(self):
        return self.dictionary['Id']

    @property
    def short_id(self):
        return self.id[:12]

    @property
    def names(self):
        return [name.lstrip('/') for name in self.dictionary.get('Names') or []]

    @property
    def name(self):
        return get_container_name(self.dictionary)

    @property
    def image(self):
        return self.dictionary.get('Image')

    @property
    def state(self):
        return self.dictionary.get('State')

    @property
    def status(self):
        return self.dictionary.get('Status')

    @property
    def labels(self):
        return self.get('Labels') or {}

    @property
    def ports(self):
        return self.get('Ports') or []

    @property
    def mounts(self):
        return self.get('Mounts') or []

    @property
    def is_running(self):
        return self.state == 'running'

    @property
    def human_readable_ports(self):
        def format_port(port):
            private = '{}/{}'.format(port['PrivatePort'], port.get('Type', 'tcp'))
            if not port.get('PublicPort'):
                return private
            return '{}:{}->{}'.format(port.get('IP', ''), port['PublicPort'], private)

        return ', '.join(format_port(port) for port in self.ports)

    def get(self, key):
        """Return a value from the container or None if the value is not set.

        :param key: a string using dotted notation for nested dictionary
                    lookups
        """
        def get_value(dictionary, key):
            return (dictionary or {}).get(key)

        return reduce(get_value, key.split('.'), self.dictionary)

    def __repr__(self):
        return '<Container: {} ({})>'.format(self.name, self.id[:6])

    def __eq__(self, other):
        if type(self) != type(other):
            return False
        return self.id == other.id

    def __hash__(self):
        return self.id.__hash__()


def get_container_name(container):
    if not container.get('Name') and not container.get('Names'):
        return None
    # inspect
    if 'Name' in container:
        return container['Name'].lstrip('/')
    # ps
    shortest_name = min(container['Names'], key=lambda n: len(n.split('/')))
    return shortest_name.split('/')[-1]

from collections import namedtuple

from .errors import DaemonError


class Result(namedtuple('_Result', 'kind value error')):
    """Outcome of a read against the Engine: a value, an absent resource
    (HTTP 404), or an error.
    """
    FOUND = 'found'
    MISSING = 'missing'
    ERROR = 'error'

    @classmethod
    def found(cls, value):
        return cls(cls.FOUND, value, None)

    @classmethod
    def missing(cls):
        return cls(cls.MISSING, None, None)

    @classmethod
    def failed(cls, error):
        return cls(cls.ERROR, None, error)

    @classmethod
    def from_response(cls, response, operation, resource=None):
        if response.status_code == 404:
            return cls.missing()
        if not response.ok:
            return cls.failed(
                DaemonError.from_response(response).with_context(operation, resource))
        return cls.found(response.json())

    @property
    def is_found(self):
        return self.kind == self.FOUND

    @property
    def is_missing(self):
        return self.kind == self.MISSING

    @property
    def is_error(self):
        return self.kind == self.ERROR

    def unwrap(self):
        if self.is_error:
            raise self.error
        return self.value

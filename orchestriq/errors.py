import contextlib


class OrchestriqError(Exception):
    def __init__(self, msg):
        super().__init__(msg)
        self.msg = msg
        # containers created before a multi-service create failed
        self.created = []

    def __str__(self):
        return self.msg


class ArgumentError(OrchestriqError):
    pass


class ArgumentInvalid(ArgumentError):
    pass


class ArgumentMissing(ArgumentError):
    pass


class ArgumentConflict(ArgumentError):
    pass


class PreconditionFailed(OrchestriqError):
    pass


class StreamParseError(OrchestriqError):
    pass


class ConnectionError(OrchestriqError):
    pass


class DaemonError(OrchestriqError):
    """
    The Engine answered with a non-success status, or reported an error
    while streaming a response.
    """
    def __init__(self, msg, status_code=None, explanation=None,
                 operation=None, resource=None):
        super().__init__(msg)
        self.status_code = status_code
        self.explanation = explanation if explanation is not None else msg
        self.operation = operation
        self.resource = resource

    @classmethod
    def from_response(cls, response):
        explanation = get_error_message(response)
        if response.status_code == 404 and cls is DaemonError:
            cls = NotFound
        return cls(explanation, status_code=response.status_code, explanation=explanation)

    def with_context(self, operation, resource=None):
        target = ' {}'.format(resource) if resource else ''
        error = type(self)(
            'Unable to {}{}: {}'.format(operation, target, self.explanation),
            status_code=self.status_code,
            explanation=self.explanation,
            operation=operation,
            resource=resource,
        )
        error.created = self.created
        return error


class NotFound(DaemonError):
    pass


class StreamOutputError(DaemonError):
    pass


def get_error_message(response):
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict) and body.get('message'):
        return body['message']
    return response.reason or 'HTTP {}'.format(response.status_code)


@contextlib.contextmanager
def handle_daemon_errors(operation, resource=None):
    try:
        yield
    except DaemonError as e:
        if e.operation is not None:
            raise
        raise e.with_context(operation, resource) from e

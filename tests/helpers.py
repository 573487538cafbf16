import contextlib
import io
import json
import os
from http.client import responses

import requests


def fake_response(status_code=200, body=None, reason=None):
    """Build a `requests.Response` as the Transport would return it.  The
    body can be read whole (`json()`) or streamed (`iter_content()`).
    """
    if isinstance(body, (dict, list)):
        body = json.dumps(body)
    if isinstance(body, str):
        body = body.encode('utf-8')
    body = body or b''

    response = requests.Response()
    response.status_code = status_code
    response.reason = reason if reason is not None else responses.get(status_code, '')
    response._content = body
    response.raw = io.BytesIO(body)
    return response


def ndjson(*events):
    return [json.dumps(event).encode('utf-8') + b'\n' for event in events]


def write_file(path, content):
    with open(path, 'w') as fh:
        fh.write(content)


def read_file(path):
    with open(path) as fh:
        return fh.read()


@contextlib.contextmanager
def cd(path):
    """
    A context manager which changes the working directory to the given
    path, and then changes it back to its previous value on exit.
    """
    prev_cwd = os.getcwd()
    os.chdir(path)
    try:
        yield
    finally:
        os.chdir(prev_cwd)

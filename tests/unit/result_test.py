import pytest

from orchestriq.errors import DaemonError
from orchestriq.result import Result
from tests import unittest
from tests.helpers import fake_response


class ResultTest(unittest.TestCase):

    def test_found(self):
        result = Result.found({'Id': 'abc'})
        assert result.is_found
        assert not result.is_missing
        assert not result.is_error
        assert result.unwrap() == {'Id': 'abc'}

    def test_missing(self):
        result = Result.missing()
        assert result.is_missing
        assert result.unwrap() is None

    def test_failed(self):
        error = DaemonError('boom')
        result = Result.failed(error)
        assert result.is_error
        assert result.error is error
        with pytest.raises(DaemonError):
            result.unwrap()

    def test_from_response(self):
        assert Result.from_response(fake_response(200, {'Id': 'abc'}), 'inspect image').value == {'Id': 'abc'}
        assert Result.from_response(fake_response(404, {'message': 'gone'}), 'inspect image').is_missing

        result = Result.from_response(fake_response(500, {'message': 'boom'}), 'inspect image', 'app')
        assert result.is_error
        assert result.error.msg == 'Unable to inspect image app: boom'

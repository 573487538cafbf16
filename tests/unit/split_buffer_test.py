import pytest

from .. import unittest
from orchestriq.errors import StreamParseError
from orchestriq.utils import json_stream
from orchestriq.utils import split_buffer


class SplitBufferTest(unittest.TestCase):
    def test_single_line_chunks(self):
        def reader():
            yield b'abc\n'
            yield b'def\n'
            yield b'ghi\n'

        self.assert_produces(reader, ['abc\n', 'def\n', 'ghi\n'])

    def test_no_end_separator(self):
        def reader():
            yield b'abc\n'
            yield b'def\n'
            yield b'ghi'

        self.assert_produces(reader, ['abc\n', 'def\n', 'ghi'])

    def test_multiple_line_chunk(self):
        def reader():
            yield b'abc\ndef\nghi'

        self.assert_produces(reader, ['abc\n', 'def\n', 'ghi'])

    def test_chunked_line(self):
        def reader():
            yield b'a'
            yield b'b'
            yield b'c'
            yield b'\n'
            yield b'd'

        self.assert_produces(reader, ['abc\n', 'd'])

    def test_preserves_unicode_sequences_within_lines(self):
        string = "a•c\n"

        def reader():
            yield string.encode('utf-8')

        self.assert_produces(reader, [string])

    def test_trailing_garbage_in_json_stream(self):
        def reader():
            yield b'{"status": "ok"}\n'
            yield b'{"status": "trunc'

        stream = json_stream(reader())
        assert next(stream) == {'status': 'ok'}
        with pytest.raises(StreamParseError):
            next(stream)

    def assert_produces(self, reader, expectations):
        split = split_buffer(reader())

        for (actual, expected) in zip(split, expectations):
            assert type(actual) == type(expected)
            assert actual == expected

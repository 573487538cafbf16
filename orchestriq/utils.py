import json.decoder
import logging
import time

from .const import REMOTE_CONTEXT_PREFIXES
from .const import TAR_EXTENSIONS
from .errors import ArgumentInvalid
from .errors import StreamParseError
from .timeparse import timeparse


json_decoder = json.JSONDecoder()
log = logging.getLogger(__name__)


def stream_as_text(stream):
    """Given a stream of bytes or text, if any of the items in the stream
    are bytes convert them to text.
    """
    for data in stream:
        if not isinstance(data, str):
            data = data.decode('utf-8', 'replace')
        yield data


def line_splitter(buffer, separator='\n'):
    index = buffer.find(str(separator))
    if index == -1:
        return None
    return buffer[:index + 1], buffer[index + 1:]


def split_buffer(stream, splitter=None, decoder=lambda a: a):
    """Given a generator which yields strings and a splitter function,
    joins all input, splits on the separator and yields each chunk.

    Unlike string.split(), each chunk includes the trailing
    separator, except for the last one if none was found on the end
    of the input.
    """
    splitter = splitter or line_splitter
    buffered = ''

    for data in stream_as_text(stream):
        buffered += data
        while True:
            buffer_split = splitter(buffered)
            if buffer_split is None:
                break

            item, buffered = buffer_split
            yield item

    if buffered.strip():
        try:
            yield decoder(buffered)
        except Exception as e:
            log.error(
                'Failed to decode the following data chunk from the Engine:'
                '\n%s' % repr(buffered)
            )
            raise StreamParseError(str(e))


def json_splitter(buffer):
    """Attempt to parse a json object from a buffer. If there is at least one
    object, return it and the rest of the buffer, otherwise return None.
    """
    buffer = buffer.strip()
    try:
        obj, index = json_decoder.raw_decode(buffer)
        rest = buffer[json.decoder.WHITESPACE.match(buffer, index).end():]
        return obj, rest
    except ValueError:
        return None


def json_stream(stream):
    """Given a stream of text, return a stream of json objects.
    This handles streams which are inconsistently buffered (some entries may
    be newline delimited, and others are not).
    """
    return split_buffer(stream, json_splitter, json_decoder.decode)


def is_url(path):
    return path.startswith(REMOTE_CONTEXT_PREFIXES)


def is_tarball(path):
    return path.lower().endswith(TAR_EXTENSIONS)


def parse_repository_tag(repo_path):
    """Splits image identification into base image path, tag/digest
    and it's separator.

    Example:

    >>> parse_repository_tag('user/repo@sha256:digest')
    ('user/repo', 'sha256:digest', '@')
    >>> parse_repository_tag('localhost:5000/repo:v1')
    ('localhost:5000/repo', 'v1', ':')
    """
    tag_separator = ":"
    digest_separator = "@"

    if digest_separator in repo_path:
        repo, tag = repo_path.rsplit(digest_separator, 1)
        return repo, tag, digest_separator

    repo, tag = repo_path, ""
    if tag_separator in repo_path:
        repo, tag = repo_path.rsplit(tag_separator, 1)
        if "/" in tag:
            repo, tag = repo_path, ""

    return repo, tag, tag_separator


def nanoseconds_from_duration(value):
    """Durations are either integer nanoseconds or Go-style strings
    such as '1m30s'.
    """
    if value is None or isinstance(value, int):
        return value
    parsed = timeparse(value)
    if parsed is None:
        raise ArgumentInvalid(
            "Invalid duration '{}'. Use units from largest to smallest, "
            "for example '1m30s'.".format(value))
    return int(parsed * 1000000000)


def normalize_name(name):
    return '_'.join(name.split()).lower()


def timestamp_millis():
    return int(time.time() * 1000)

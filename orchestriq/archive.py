import logging
import os
import tempfile

from docker.utils.build import tar

from .const import ARCHIVE_PREFIX
from .const import DEFAULT_DOCKERFILE

log = logging.getLogger(__name__)


def read_dockerignore(directory):
    dockerignore = os.path.join(directory, '.dockerignore')
    if not os.path.exists(dockerignore):
        return []
    with open(dockerignore) as fh:
        return [
            line for line in (raw.strip() for raw in fh.read().splitlines())
            if line and not line.startswith('#')
        ]


def build_archive(directory, dockerfile=DEFAULT_DOCKERFILE, exclude=None):
    """Write an uncompressed tar of `directory` to a new temporary file and
    return its path.  The caller owns the file.

    `.dockerignore` patterns and `exclude` are honoured, except that the
    Dockerfile itself is always part of the archive.
    """
    directory = os.path.abspath(directory)
    patterns = read_dockerignore(directory) + list(exclude or [])

    fd, path = tempfile.mkstemp(prefix=ARCHIVE_PREFIX, suffix='.tar')
    try:
        with os.fdopen(fd, 'wb') as fileobj:
            tar(directory, exclude=patterns, dockerfile=(dockerfile, None), fileobj=fileobj)
    except BaseException:
        os.unlink(path)
        raise

    log.debug("Archived build context %s to %s", directory, path)
    return path

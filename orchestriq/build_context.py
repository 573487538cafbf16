"""
Resolution of an image build context into something the Engine's /build
endpoint accepts: a remote URL, an existing tarball, or a tarball built
from a local directory.
"""
import contextlib
import logging
import os
import shutil
from collections import namedtuple

from .archive import build_archive
from .const import BACKUP_SUFFIX
from .const import DEFAULT_DOCKERFILE
from .errors import ArgumentInvalid
from .errors import PreconditionFailed
from .utils import is_tarball
from .utils import is_url
from .utils import timestamp_millis

log = logging.getLogger(__name__)


class BuildContext(namedtuple('_BuildContext', 'remote tar_path is_temporary')):

    @property
    def is_remote(self):
        return self.remote is not None


def resolve_dockerfile_dir(context_dir, dockerfile_path):
    if not dockerfile_path:
        return context_dir
    if not os.path.isabs(dockerfile_path):
        dockerfile_path = os.path.join(context_dir, dockerfile_path)
    return os.path.abspath(dockerfile_path)


def same_directory(a, b):
    return os.path.realpath(a) == os.path.realpath(b)


def backup_name(dockerfile_name):
    return '{}_{}{}'.format(dockerfile_name, timestamp_millis(), BACKUP_SUFFIX)


@contextlib.contextmanager
def dockerfile_swap(context_dir, dockerfile_dir, dockerfile_name):
    """Place `dockerfile_dir/dockerfile_name` in the context directory for
    the duration of the block.

    A same-named file already present in the context is copied aside under
    a timestamped name first.  On exit, on every path, the injected copy is
    removed and the original is moved back.  Yields the backup's file name,
    or None when the context had no such file.
    """
    target = os.path.join(context_dir, dockerfile_name)
    source = os.path.join(dockerfile_dir, dockerfile_name)
    backup = None

    try:
        if os.path.lexists(target):
            candidate = os.path.join(context_dir, backup_name(dockerfile_name))
            try:
                shutil.copy2(target, candidate)
            except BaseException:
                if os.path.lexists(candidate):
                    os.unlink(candidate)
                raise
            backup = candidate
            log.debug("Backed up %s to %s", target, backup)

        shutil.copyfile(source, target)
        yield os.path.basename(backup) if backup else None
    finally:
        if backup is not None:
            os.replace(backup, target)
            log.debug("Restored %s", target)
        elif os.path.lexists(target):
            os.unlink(target)


@contextlib.contextmanager
def assemble_context(context=None, dockerfile_name=DEFAULT_DOCKERFILE,
                     dockerfile_path=None, archive_builder=build_archive):
    """Yield a BuildContext for the given context argument.

    Tarballs produced here are temporary and are deleted when the block
    exits, whatever the outcome of the request made inside it.
    """
    dockerfile_name = dockerfile_name or DEFAULT_DOCKERFILE
    if context is None:
        context = os.getcwd()

    if is_url(context):
        yield BuildContext(context, None, False)
        return

    if not os.path.exists(context):
        raise PreconditionFailed("The build context ({}) must exist.".format(context))

    if not os.path.isdir(context):
        if not is_tarball(context):
            raise ArgumentInvalid(
                "The build context path ({}) must be a directory or a tar "
                "archive.".format(context))
        yield BuildContext(None, context, False)
        return

    context_dir = os.path.abspath(context)
    dockerfile_dir = resolve_dockerfile_dir(context_dir, dockerfile_path)

    if same_directory(dockerfile_dir, context_dir):
        if not os.path.isfile(os.path.join(context_dir, dockerfile_name)):
            raise PreconditionFailed(
                'The build context ({}) must contain a Dockerfile named "{}".'.format(
                    context_dir, dockerfile_name))
        tar_path = archive_builder(context_dir, dockerfile_name)
    else:
        if not os.path.isdir(dockerfile_dir):
            raise PreconditionFailed(
                "The path you provided for the Dockerfile ({}) doesn't exist.".format(
                    dockerfile_path))
        if not os.path.isfile(os.path.join(dockerfile_dir, dockerfile_name)):
            raise PreconditionFailed(
                "The path you provided for the Dockerfile ({}) doesn't have a "
                "file called {}.".format(dockerfile_path, dockerfile_name))

        with dockerfile_swap(context_dir, dockerfile_dir, dockerfile_name) as backup:
            exclude = [backup] if backup else None
            tar_path = archive_builder(context_dir, dockerfile_name, exclude=exclude)

    try:
        yield BuildContext(None, tar_path, True)
    finally:
        if os.path.exists(tar_path):
            os.unlink(tar_path)
            log.debug("Removed temporary build context %s", tar_path)

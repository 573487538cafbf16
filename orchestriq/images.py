import json
import logging
import sys
from collections import namedtuple

from . import progress_stream
from .build_context import assemble_context
from .config import validate_options
from .config.types import RegistryAuth
from .config.types import RemoteAuth
from .const import DEFAULT_TAG
from .dockerfile import DockerfileBuilder
from .errors import ArgumentConflict
from .errors import ArgumentInvalid
from .errors import DaemonError
from .errors import handle_daemon_errors
from .progress_stream import stream_output
from .result import Result
from .utils import is_url
from .utils import parse_repository_tag

log = logging.getLogger(__name__)


BUILD_OPTION_FIELDS = [
    'name',
    'tag',
    'context',
    'dockerfile_name',
    'dockerfile_path',
    'authorization',
    'no_cache',
    'remove_intermediate',
    'force_remove_intermediate',
    'pull_base_images',
    'network_mode',
    'platform',
    'labels',
    'build_args',
    'outputs',
    'verbose',
]

# Options copied to a /build query parameter of another name, unchanged.
BUILD_PARAMS = [
    ('no_cache', 'nocache'),
    ('remove_intermediate', 'rm'),
    ('force_remove_intermediate', 'forcerm'),
    ('pull_base_images', 'pull'),
    ('network_mode', 'networkmode'),
    ('platform', 'platform'),
    ('dockerfile_name', 'dockerfile'),
]


class BuildImageOptions(namedtuple('_BuildImageOptions', BUILD_OPTION_FIELDS)):

    @classmethod
    def parse(cls, options):
        validate_options('build', options)
        values = {field: options.get(field) for field in BUILD_OPTION_FIELDS}
        values['authorization'] = RemoteAuth.parse(values['authorization'])
        build_options = cls(**values)
        if ':' in build_options.name:
            raise ArgumentInvalid(
                'The image name "{}" must not contain ":". Use the "tag" option '
                'to set the tag.'.format(build_options.name))
        return build_options

    @property
    def reference(self):
        tag = self.tag or DEFAULT_TAG
        if ':' in tag:
            return tag
        return '{}:{}'.format(self.name, tag)


def build_params(options):
    params = {'t': options.reference}
    for option, param in BUILD_PARAMS:
        value = getattr(options, option)
        if value is not None:
            params[param] = value

    if options.labels is not None:
        params['labels'] = json.dumps(options.labels)
    if options.build_args is not None:
        params['buildargs'] = json.dumps(options.build_args)
    if options.outputs is not None:
        params['outputs'] = ','.join(
            '{}={}'.format(output['key'], output['value']) for output in options.outputs)
    if options.verbose is not None:
        params['q'] = not options.verbose
    return params


def output_stream(verbose):
    return sys.stdout if verbose else None


def registry_repository(registry_url, repo):
    host = registry_url.split('://', 1)[-1].rstrip('/')
    return '{}/{}'.format(host, repo)


class Images:
    def __init__(self, transport):
        self.transport = transport

    def new_dockerfile(self):
        return DockerfileBuilder()

    def list(self, all=False):
        response = self.transport.send('images/json', params={'all': all})
        if not response.ok:
            raise DaemonError.from_response(response).with_context('list images')
        return response.json()

    def lookup(self, name):
        response = self.transport.send('images/{}/json'.format(name))
        return Result.from_response(response, 'inspect image', name)

    def inspect(self, name):
        return self.lookup(name).unwrap()

    def history(self, name):
        with handle_daemon_errors('read the history of image', name):
            response = self.transport.send('images/{}/history'.format(name))
            if not response.ok:
                raise DaemonError.from_response(response)
        return response.json()

    def _stream_events(self, response, verbose):
        return stream_output(self.transport.iter_body(response), output_stream(verbose))

    def pull(self, image, tag=None, registry_url=None, authentication=None,
             platform=None, verbose=False, stream=False):
        """Pull an image.  Returns its digest, or the generator of progress
        events when `stream` is set.
        """
        validate_options('pull', {
            k: v for k, v in (
                ('tag', tag), ('registry_url', registry_url),
                ('authentication', authentication), ('platform', platform),
                ('verbose', verbose), ('stream', stream),
            ) if v is not None
        })

        repo, embedded_tag, separator = parse_repository_tag(image)
        if embedded_tag and tag:
            raise ArgumentConflict(
                'The image "{}" already has a tag; do not also pass the "tag" '
                'option.'.format(image))

        if registry_url:
            if is_url(image):
                raise ArgumentInvalid(
                    'An image URL cannot be combined with the "registry_url" option.')
            repo = registry_repository(registry_url, repo)

        params = {'fromImage': repo, 'platform': platform}
        if separator == '@':
            params['fromImage'] = '{}@{}'.format(repo, embedded_tag)
            reference = params['fromImage']
        else:
            params['tag'] = embedded_tag or tag or DEFAULT_TAG
            reference = '{}:{}'.format(repo, params['tag'])

        headers = {}
        auth = RegistryAuth.parse(authentication, serveraddress=registry_url)
        if auth is not None:
            headers['X-Registry-Auth'] = auth.header()

        log.info('Pulling {}...'.format(reference))
        with handle_daemon_errors('pull image', reference):
            response = self.transport.send(
                'images/create', method='POST', params=params, headers=headers,
                stream=True)
            if not response.ok:
                raise DaemonError.from_response(response)

        events = self._stream_events(response, verbose)
        if stream:
            return events
        with handle_daemon_errors('pull image', reference):
            return progress_stream.get_digest_from_pull(events)

    def push(self, image, tag=None, registry_url=None, authentication=None,
             verbose=False, stream=False):
        """Push an image.  Returns the pushed digest, or the generator of
        progress events when `stream` is set.
        """
        validate_options('push', {
            k: v for k, v in (
                ('tag', tag), ('registry_url', registry_url),
                ('authentication', authentication),
                ('verbose', verbose), ('stream', stream),
            ) if v is not None
        })

        repo, embedded_tag, separator = parse_repository_tag(image)
        if embedded_tag and tag:
            raise ArgumentConflict(
                'The image "{}" already has a tag; do not also pass the "tag" '
                'option.'.format(image))
        tag = embedded_tag or tag

        headers = {}
        auth = RegistryAuth.parse(authentication, serveraddress=registry_url)
        if auth is not None:
            headers['X-Registry-Auth'] = auth.header()

        reference = '{}{}{}'.format(repo, separator, tag) if tag else repo
        log.info('Pushing {}...'.format(reference))
        with handle_daemon_errors('push image', reference):
            response = self.transport.send(
                'images/{}/push'.format(repo), method='POST', params={'tag': tag},
                headers=headers, stream=True)
            if not response.ok:
                raise DaemonError.from_response(response)

        events = self._stream_events(response, verbose)
        if stream:
            return events
        with handle_daemon_errors('push image', reference):
            return progress_stream.get_digest_from_push(events)

    def tag(self, image, repository=None, tag=None, force=None):
        validate_options('tag', {
            k: v for k, v in (
                ('repository', repository), ('tag', tag), ('force', force),
            ) if v is not None
        })
        with handle_daemon_errors('tag image', image):
            response = self.transport.send(
                'images/{}/tag'.format(image), method='POST',
                params={'repo': repository, 'tag': tag, 'force': force})
            if not response.ok:
                raise DaemonError.from_response(response)
        return True

    def remove(self, image, tag=None, force=None, noprune=None):
        """Remove an image.  Returns False when the image does not exist."""
        validate_options('remove', {
            k: v for k, v in (
                ('tag', tag), ('force', force), ('noprune', noprune),
            ) if v is not None
        })
        if tag:
            image = '{}:{}'.format(image, tag)

        log.info("Removing image %s", image)
        response = self.transport.send(
            'images/{}'.format(image), method='DELETE',
            params={'force': force, 'noprune': noprune})
        if response.status_code == 404:
            log.debug("Image %s not found.", image)
            return False
        if response.status_code == 409:
            error = DaemonError.from_response(response)
            raise DaemonError(
                'Unable to remove image {}: the image is in use ({}).'.format(
                    image, error.explanation),
                status_code=409, explanation=error.explanation,
                operation='remove image', resource=image)
        if not response.ok:
            raise DaemonError.from_response(response).with_context('remove image', image)
        return True

    def build(self, name, **options):
        """Build an image.  Returns the id of the built image, or the
        generator of progress events when `stream` is set.

        Every option is checked before the build context is touched.  A
        temporary context archive is gone by the time this returns.
        """
        options = dict(options, name=name)
        stream = options.pop('stream', False)
        build_options = BuildImageOptions.parse(options)
        params = build_params(build_options)
        reference = params['t']

        log.info('Building {}'.format(reference))
        with assemble_context(build_options.context,
                              build_options.dockerfile_name,
                              build_options.dockerfile_path) as context:
            with handle_daemon_errors('build image', reference):
                response = self._send_build(context, params, build_options.authorization)
                if not response.ok:
                    raise DaemonError.from_response(response)

        events = self._stream_events(response, build_options.verbose)
        if stream:
            return events
        with handle_daemon_errors('build image', reference):
            return progress_stream.get_image_id_from_build(events)

    def _send_build(self, context, params, authorization):
        if context.is_remote:
            headers = {}
            if authorization is not None:
                headers['Authorization'] = authorization.header()
            return self.transport.send(
                'build', method='POST', params=dict(params, remote=context.remote),
                headers=headers, stream=True)

        with open(context.tar_path, 'rb') as fileobj:
            return self.transport.send(
                'build', method='POST', params=params,
                headers={'Content-Type': 'application/x-tar'},
                data=fileobj, stream=True)

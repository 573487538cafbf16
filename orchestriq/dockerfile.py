"""
Assembly of Dockerfiles, one instruction at a time.  Like compose files,
a Dockerfile is rendered to text and then written to disk.
"""
import json
import os
import re

from docker.utils import split_command

from .const import DEFAULT_DOCKERFILE
from .errors import ArgumentConflict
from .errors import ArgumentInvalid
from .errors import PreconditionFailed

VALID_ARG_NAME = re.compile(r'^[a-zA-Z_][a-zA-Z0-9_]*$')
VALID_ENV_NAME = re.compile(r'^[^\s=]+$')
VALID_STAGE_NAME = re.compile(r'^[a-zA-Z][a-zA-Z0-9_.-]*$')
VALID_PORT = re.compile(r'^\d{1,5}(/(tcp|udp|sctp))?$')
NEEDS_QUOTES = re.compile(r'[\s"\'\\]')

ENV_ENTRIES_PER_LINE = 5
CONTINUATION = ' \\\n    '


def quote_value(value):
    value = str(value)
    if value and not NEEDS_QUOTES.search(value):
        return value
    return json.dumps(value, ensure_ascii=False)


def exec_form(instruction, command):
    if isinstance(command, str):
        command = split_command(command)
    if not command or not all(isinstance(part, str) for part in command):
        raise ArgumentInvalid(
            "{} requires a command string or a list of strings.".format(instruction))
    return json.dumps(list(command), ensure_ascii=False)


def non_empty_strings(instruction, values):
    values = list(values)
    if not values or not all(isinstance(v, str) and v.strip() for v in values):
        raise ArgumentInvalid(
            "{} requires one or more non-empty strings.".format(instruction))
    return values


class DockerfileBuilder:
    """Collects Dockerfile instructions in order.

    A stage starts with :meth:`from_image`; only ARG and comments may come
    before the first one.  CMD and ENTRYPOINT can each be set once per
    stage, and COPY --from only refers to an earlier named stage.
    Every method returns the builder so calls can be chained.
    """

    def __init__(self):
        self.lines = []
        self.stages = []
        self._current_stage = None
        self._has_from = False
        self._used = set()

    def _add(self, line):
        self.lines.append(line)
        return self

    def _instruction(self, line):
        if not self._has_from:
            raise PreconditionFailed(
                "{} must follow a FROM instruction.".format(line.split(' ', 1)[0]))
        return self._add(line)

    def _once_per_stage(self, instruction):
        if instruction in self._used:
            raise ArgumentConflict(
                "{} is already set for this build stage.".format(instruction))
        self._used.add(instruction)

    def comment(self, text):
        for line in str(text).splitlines() or ['']:
            self._add('# {}'.format(line).rstrip())
        return self

    def from_image(self, image, stage=None):
        non_empty_strings('FROM', [image])
        line = 'FROM {}'.format(image)
        if stage is not None:
            if not isinstance(stage, str) or not VALID_STAGE_NAME.match(stage):
                raise ArgumentInvalid("Invalid build stage name '{}'.".format(stage))
            if stage in self.stages:
                raise ArgumentConflict("Build stage '{}' is already defined.".format(stage))
            self.stages.append(stage)
            line = '{} AS {}'.format(line, stage)

        # stages are separated by a blank line unless a comment introduces them
        if self._has_from and not self.lines[-1].startswith('#'):
            self._add('')
        self._has_from = True
        self._current_stage = stage
        self._used = set()
        return self._add(line)

    def arg(self, name, default=None):
        if not isinstance(name, str) or not VALID_ARG_NAME.match(name):
            raise ArgumentInvalid("Invalid build argument name '{}'.".format(name))
        if default is None:
            return self._add('ARG {}'.format(name))
        return self._add('ARG {}={}'.format(name, quote_value(default)))

    def args(self, mapping=None, **values):
        """Declare several build arguments.  Those without a default come first."""
        values = dict(mapping or {}, **values)
        ordered = sorted(values.items(), key=lambda item: item[1] is not None)
        for name, default in ordered:
            self.arg(name, default)
        return self

    def copy(self, src, dest, from_stage=None, chown=None):
        sources = non_empty_strings('COPY', src if isinstance(src, (list, tuple)) else [src])
        non_empty_strings('COPY', [dest])

        flags = []
        if from_stage is not None:
            if from_stage not in self.stages or from_stage == self._current_stage:
                raise ArgumentInvalid(
                    "COPY --from refers to '{}', which is not an earlier build "
                    "stage.".format(from_stage))
            flags.append('--from={}'.format(from_stage))
        if chown is not None:
            flags.append('--chown={}'.format(chown))

        paths = sources + [dest]
        if any(NEEDS_QUOTES.search(p) for p in paths):
            paths = [json.dumps(paths, ensure_ascii=False)]
        return self._instruction(' '.join(['COPY'] + flags + paths))

    def run(self, *commands, batch=False):
        commands = non_empty_strings('RUN', commands)
        if batch:
            return self._instruction('RUN ' + (CONTINUATION + '&& ').join(commands))
        for command in commands:
            self._instruction('RUN {}'.format(command))
        return self

    def env(self, mapping=None, **values):
        values = dict(mapping or {}, **values)
        if not values:
            raise ArgumentInvalid("ENV requires at least one variable.")
        entries = []
        for key, value in values.items():
            if not isinstance(key, str) or not VALID_ENV_NAME.match(key):
                raise ArgumentInvalid("Invalid environment variable name '{}'.".format(key))
            entries.append('{}={}'.format(key, quote_value('' if value is None else value)))

        lines = [
            ' '.join(entries[i:i + ENV_ENTRIES_PER_LINE])
            for i in range(0, len(entries), ENV_ENTRIES_PER_LINE)
        ]
        return self._instruction('ENV ' + CONTINUATION.join(lines))

    def volume(self, *paths):
        paths = non_empty_strings('VOLUME', paths)
        return self._instruction('VOLUME {}'.format(json.dumps(paths, ensure_ascii=False)))

    def expose(self, *ports):
        ports = [str(port) for port in ports]
        if not ports:
            raise ArgumentInvalid("EXPOSE requires at least one port.")
        for port in ports:
            if not VALID_PORT.match(port):
                raise ArgumentInvalid(
                    "Invalid port '{}', should be <port>[/<protocol>].".format(port))
        return self._instruction('EXPOSE {}'.format(' '.join(ports)))

    def workdir(self, path):
        non_empty_strings('WORKDIR', [path])
        return self._instruction('WORKDIR {}'.format(path))

    def user(self, user, group=None):
        if isinstance(user, int):
            user = str(user)
        non_empty_strings('USER', [user])
        if group is not None:
            return self._instruction('USER {}:{}'.format(user, group))
        return self._instruction('USER {}'.format(user))

    def cmd(self, command):
        line = 'CMD {}'.format(exec_form('CMD', command))
        self._once_per_stage('CMD')
        return self._instruction(line)

    def entrypoint(self, command):
        line = 'ENTRYPOINT {}'.format(exec_form('ENTRYPOINT', command))
        self._once_per_stage('ENTRYPOINT')
        return self._instruction(line)

    def render(self):
        if not self._has_from:
            raise PreconditionFailed("The Dockerfile has no FROM instruction.")
        return '\n'.join(self.lines).strip() + '\n'

    def write(self, path):
        """Write the Dockerfile and return the path written.  When `path`
        is a directory the file is named Dockerfile.
        """
        if os.path.isdir(path):
            path = os.path.join(path, DEFAULT_DOCKERFILE)
        content = self.render()

        directory = os.path.dirname(os.path.abspath(path))
        os.makedirs(directory, exist_ok=True)
        with open(path, 'w', encoding='utf-8') as fh:
            fh.write(content)
        return path

    def __str__(self):
        return self.render()

    def __repr__(self):
        return '<DockerfileBuilder: {} instructions>'.format(
            sum(1 for line in self.lines if line and not line.startswith('#')))

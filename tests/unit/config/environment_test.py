import codecs
import logging
import os
import shutil
import tempfile

import pytest
from ddt import data
from ddt import ddt
from ddt import unpack

from orchestriq.config.environment import env_vars_from_file
from orchestriq.config.environment import Environment
from orchestriq.config.environment import parse_environment
from orchestriq.config.environment import resolve_environment
from orchestriq.errors import ArgumentInvalid
from orchestriq.errors import PreconditionFailed
from tests import mock
from tests import unittest
from tests.helpers import write_file


@ddt
class EnvironmentTest(unittest.TestCase):
    def test_get_simple(self):
        env = Environment({
            'FOO': 'bar',
            'BAR': '1',
            'BAZ': ''
        })

        assert env.get('FOO') == 'bar'
        assert env.get('BAR') == '1'
        assert env.get('BAZ') == ''

    def test_get_boolean(self):
        env = Environment({
            'FOO': '',
            'BAR': '0',
            'BAZ': 'FALSE',
            'FOOBAR': 'true',
        })

        assert env.get_boolean('FOO') is False
        assert env.get_boolean('BAR') is False
        assert env.get_boolean('BAZ') is False
        assert env.get_boolean('FOOBAR') is True
        assert env.get_boolean('UNDEFINED') is False

    def test_from_env_file_overlays_process_environment(self):
        tmpdir = tempfile.mkdtemp('env_file')
        self.addCleanup(shutil.rmtree, tmpdir)
        write_file(os.path.join(tmpdir, '.env'), 'ORCHESTRIQ_TEST_ONLY_IN_FILE=file\nPATH=nope\n')

        env = Environment.from_env_file(tmpdir)
        assert env['ORCHESTRIQ_TEST_ONLY_IN_FILE'] == 'file'
        assert env['PATH'] == os.environ['PATH']

    def test_from_env_file_without_file(self):
        tmpdir = tempfile.mkdtemp('env_file')
        self.addCleanup(shutil.rmtree, tmpdir)
        env = Environment.from_env_file(tmpdir)
        assert dict(env) == dict(os.environ)

    @data(
        ('unicode exclude test', '\ufeffPARK_BOM=박봄\n', {'PARK_BOM': '박봄'}),
        ('export prefixed test', 'export PREFIXED_VARS=yes\n', {"PREFIXED_VARS": "yes"}),
        ('quoted vars test', "QUOTED_VARS='yes'\n", {"QUOTED_VARS": "yes"}),
        ('double quoted vars test', 'DOUBLE_QUOTED_VARS="yes"\n', {"DOUBLE_QUOTED_VARS": "yes"}),
        ('blank lines test', 'A=1\n\n\nB=2\n', {"A": "1", "B": "2"}),
        ('value with equals test', 'URL=postgres://db?ssl=true\n', {"URL": "postgres://db?ssl=true"}),
    )
    @unpack
    def test_env_vars(self, test_name, content, expected):
        tmpdir = tempfile.mkdtemp('env_file')
        self.addCleanup(shutil.rmtree, tmpdir)
        file_abs_path = str(os.path.join(tmpdir, ".env"))
        with codecs.open(file_abs_path, 'w', encoding='utf-8') as f:
            f.write(content)
        assert env_vars_from_file(file_abs_path) == expected, '"{}" Failed'.format(test_name)

    def test_env_vars_from_missing_file(self):
        with pytest.raises(PreconditionFailed) as excinfo:
            env_vars_from_file('/definitely/not/here.env')
        assert "Couldn't find env file" in excinfo.value.msg

    def test_env_vars_from_directory(self):
        tmpdir = tempfile.mkdtemp('env_file')
        self.addCleanup(shutil.rmtree, tmpdir)
        with pytest.raises(PreconditionFailed):
            env_vars_from_file(tmpdir)


class ParseEnvironmentTest(unittest.TestCase):
    def test_parse_mapping(self):
        assert parse_environment({'A': '1'}) == {'A': '1'}

    def test_parse_list(self):
        assert parse_environment(['A=1', 'B=x=y', 'C']) == {'A': '1', 'B': 'x=y', 'C': None}

    def test_parse_empty(self):
        assert parse_environment(None) == {}
        assert parse_environment([]) == {}

    def test_whitespace_in_name(self):
        with pytest.raises(ArgumentInvalid):
            parse_environment(['MY VAR=1'])


class ResolveEnvironmentTest(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.mkdtemp('env_files')
        self.addCleanup(shutil.rmtree, self.tmpdir)
        self.template_file = os.path.join(self.tmpdir, 'template.env')
        self.service_file = os.path.join(self.tmpdir, 'service.env')
        write_file(self.template_file, 'SHARED=template-file\nFROM_TEMPLATE_FILE=1\n')
        write_file(self.service_file, 'SHARED=service-file\nFROM_SERVICE_FILE=1\n')

    def test_service_environment_wins(self):
        env = resolve_environment(
            [self.template_file], {'SHARED': 'template-env'},
            [self.service_file], {'SHARED': 'service-env'},
        )
        assert env['SHARED'] == 'service-env'

    def test_precedence_order(self):
        assert resolve_environment(
            [self.template_file], {}, [], {})['SHARED'] == 'template-file'
        assert resolve_environment(
            [self.template_file], {'SHARED': 'template-env'}, [], {})['SHARED'] == 'template-env'
        assert resolve_environment(
            [self.template_file], {'SHARED': 'template-env'},
            [self.service_file], {})['SHARED'] == 'service-file'

    def test_keys_from_every_source_are_kept(self):
        env = resolve_environment(
            [self.template_file], {'A': '1'}, [self.service_file], {'B': '2'})
        assert env == {
            'SHARED': 'service-file',
            'FROM_TEMPLATE_FILE': '1',
            'FROM_SERVICE_FILE': '1',
            'A': '1',
            'B': '2',
        }

    def test_env_file_lines_without_a_value_are_ignored(self):
        env_file = os.path.join(self.tmpdir, 'bare.env')
        write_file(env_file, 'A=1\n\nJUSTAKEY\nexport B=2\n')
        env = resolve_environment([env_file], {}, [], {})
        assert env == {'A': '1', 'B': '2'}

    def test_relative_env_file_is_skipped(self):
        with self.assertLogs('orchestriq.config.environment', level=logging.WARNING) as logs:
            env = resolve_environment(['relative.env'], {}, [], {'A': '1'}, verbose=True)
        assert env == {'A': '1'}
        assert 'relative.env' in logs.output[0]

    def test_relative_env_file_is_skipped_quietly(self):
        with mock.patch('orchestriq.config.environment.log', autospec=True) as log:
            env = resolve_environment(['relative.env'], {}, [], {}, verbose=False)
        assert env == {}
        log.warning.assert_not_called()

    def test_missing_absolute_env_file(self):
        with pytest.raises(PreconditionFailed):
            resolve_environment([os.path.join(self.tmpdir, 'missing.env')], {}, [], {})

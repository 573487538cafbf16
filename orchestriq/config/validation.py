import json
import logging
import os

from jsonschema import Draft4Validator
from jsonschema.exceptions import best_match

from ..errors import ArgumentInvalid
from ..errors import ArgumentMissing


log = logging.getLogger(__name__)

_schema = None


def get_schema_path():
    return os.path.dirname(os.path.abspath(__file__))


def load_jsonschema():
    global _schema
    if _schema is None:
        filename = os.path.join(get_schema_path(), 'options_schema.json')
        with open(filename, encoding='utf-8') as fh:
            _schema = json.load(fh)
    return _schema


def get_validator(operation):
    schema = load_jsonschema()
    if operation not in schema['definitions']:
        raise ValueError("No option schema for '{}'".format(operation))
    return Draft4Validator({
        '$schema': schema['$schema'],
        '$ref': '#/definitions/{}'.format(operation),
        'definitions': schema['definitions'],
    })


def path_string(path):
    return ".".join(c if isinstance(c, str) else '[{}]'.format(c) for c in path)


def anglicize_json_type(json_type):
    if json_type.startswith(('a', 'e', 'i', 'o', 'u')):
        return 'an ' + json_type
    return 'a ' + json_type


def handle_error(error, operation):
    path = path_string(error.absolute_path)
    prefix = "The '{}' option".format(path) if path else "The {} options".format(operation)

    if error.validator == 'required':
        missing = error.message.split("'")[1] if "'" in error.message else error.message
        return ArgumentMissing(
            "{} must include '{}', which is required.".format(prefix, missing))

    if error.validator == 'additionalProperties':
        return ArgumentInvalid(
            "{} contains unsupported settings: {}".format(
                prefix, error.message.split('(')[-1].rstrip(')')))

    if error.validator == 'type':
        types = error.validator_value
        if isinstance(types, str):
            types = [types]
        return ArgumentInvalid("{} must be {}.".format(
            prefix, " or ".join(anglicize_json_type(t) for t in types)))

    if error.validator in ('minLength', 'minItems', 'minProperties'):
        return ArgumentInvalid("{} must not be empty.".format(prefix))

    if error.validator == 'oneOf':
        return ArgumentInvalid("{} has an invalid value {!r}.".format(prefix, error.instance))

    return ArgumentInvalid("{} is invalid: {}".format(prefix, error.message))


def validate_options(operation, options):
    """Check a loosely-typed option mapping against the schema of an
    operation.  Raises ArgumentMissing or ArgumentInvalid before any side
    effect takes place.
    """
    if not isinstance(options, dict):
        raise ArgumentInvalid(
            "The {} options must be a mapping, got {}.".format(operation, type(options).__name__))

    error = best_match(get_validator(operation).iter_errors(options))
    if error is not None:
        log.debug("Rejected %s options: %s", operation, error.message)
        raise handle_error(error, operation)
    return options

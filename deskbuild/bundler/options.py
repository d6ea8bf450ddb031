"""Bundler options passed between the build tool and the bundler process.

The CLI encodes its options into the child environment; the bundler-side
configuration factory decodes them again. Values come back as strings, so
``parse_options`` coerces booleans and numbers.
"""
import math
import re
from typing import Any, Mapping
from urllib.parse import parse_qsl, urlencode

from deskbuild.context import BuildContext
from deskbuild.domain.constants import (
    DEBUG_ENV_VAR,
    OPTIONS_ENV_VAR,
    ROOT_ENV_VAR,
    STANDALONE_ENV_VAR,
)

_NUMERIC_RE = re.compile(r'^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$')

DEFAULT_EXCLUDE = r'(node_modules|bower_components)'


def encode_environment(ctx: BuildContext) -> dict[str, str]:
    """Environment variables describing this invocation to the bundler."""
    options = {k: _encode(v) for k, v in ctx.options.items() if v is not None and not k.startswith('_')}
    options.setdefault('debug', _encode(ctx.debug))
    options.setdefault('standalone', _encode(ctx.standalone))
    return {
        OPTIONS_ENV_VAR: urlencode(options),
        DEBUG_ENV_VAR: _encode(ctx.debug),
        STANDALONE_ENV_VAR: _encode(ctx.standalone),
        ROOT_ENV_VAR: ctx.root,
    }


def parse_options(environ: Mapping[str, str], overrides: Mapping[str, Any] | None = None) -> dict[str, Any]:
    """Merge defaults, encoded environment options, and explicit overrides."""
    overrides = dict(overrides or {})
    debug = environ.get(DEBUG_ENV_VAR) == 'true'

    options: dict[str, Any] = {
        'debug': debug,
        'minimize': not debug,
        'sourcemaps': True,
        'devtool': 'cheap-source-map',
        'exclude': DEFAULT_EXCLUDE,
        'outputSourceMap': '[file].map',
        'outputFileName': '[name].js',
    }
    options.update(parse_qsl(environ.get(OPTIONS_ENV_VAR, '')))
    options.update(overrides)
    options = {k: coerce(v) for k, v in options.items()}

    if options.get('debug') and 'devtool' not in overrides:
        options['devtool'] = 'source-map'
    return options


def coerce(value: Any) -> Any:
    """``"true"``/``"false"`` to bool, numeric strings to rounded ints."""
    if value == 'true':
        return True
    if value == 'false':
        return False
    if isinstance(value, str) and _NUMERIC_RE.match(value.strip()):
        return math.floor(float(value) + 0.5)
    return value


def _encode(value: Any) -> str:
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, (list, tuple)):
        return ','.join(str(v) for v in value)
    return str(value)

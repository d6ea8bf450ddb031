"""Shared constants: installation layout, placeholder patterns, defaults.

Centralizes the paths and patterns shared across the configuration,
package, output, and bundler modules. Layout paths are relative to the
installation root carried by the build context.
"""

import re

from deskbuild.domain.enums import AssetType

# ── Installation Layout ─────────────────────────────────────────────────

CONF_DIR = ('src', 'conf')
PACKAGES_DIR = ('src', 'packages')
THEMES_DIR = ('src', 'themes')
CLIENT_DIR = ('src', 'client')
SERVER_DIR = ('src', 'server')
TEMPLATES_DIR = ('src', 'templates')
DIST_DIR = ('dist',)

CUSTOM_CONF_FILE = '900-custom.json'
METADATA_FILE = 'metadata.json'
FONT_STYLE_FILE = 'style.css'

CLIENT_SETTINGS_TEMPLATE = TEMPLATES_DIR + ('dist', 'settings.js')
CLIENT_MANIFEST_TEMPLATE = TEMPLATES_DIR + ('dist', 'packages.js')
PACKAGE_TEMPLATES_DIR = TEMPLATES_DIR + ('package',)
WEBSERVER_TEMPLATES_DIR = TEMPLATES_DIR + ('webserver',)

SERVER_SETTINGS_FILE = SERVER_DIR + ('settings.json',)
SERVER_MANIFEST_FILE = SERVER_DIR + ('packages.json',)
CLIENT_SETTINGS_FILE = DIST_DIR + ('settings.js',)
CLIENT_MANIFEST_FILE = DIST_DIR + ('packages.js',)

# ── Placeholders ────────────────────────────────────────────────────────

ROOT_TOKEN = '%ROOT%'
PLACEHOLDER_RE = re.compile(r'%([A-Za-z0-9_\-.]+)%')
ENV_NAME_RE = re.compile(r'[A-Z]*')

# Left in place for downstream consumers (server runtime, dist templates)
RESERVED_TOKENS = frozenset({
    '%VERSION%',
    '%DIST%',
    '%DROOT%',
    '%UID%',
    '%USERNAME%',
})

CONFIG_TEMPLATE_TOKEN = '%CONFIG%'
PACKAGES_TEMPLATE_TOKEN = '%PACKAGES%'
PACKAGE_NAME_TOKEN = 'EXAMPLE'

# ── Assets ──────────────────────────────────────────────────────────────

ASSET_EXTENSIONS = {
    '.js': AssetType.JAVASCRIPT.value,
    '.css': AssetType.STYLESHEET.value,
    '.html': AssetType.HTML.value,
}

BROADWAY_PRELOAD = {
    'type': AssetType.JAVASCRIPT.value,
    'src': '/vendor/zlib.js',
}

# ── Process Environment ─────────────────────────────────────────────────

ROOT_ENV_VAR = 'DESKBUILD_ROOT'
OPTIONS_ENV_VAR = 'DESKBUILD_OPTIONS'
DEBUG_ENV_VAR = 'DESKBUILD_DEBUG'
STANDALONE_ENV_VAR = 'DESKBUILD_STANDALONE'

# ── Bundler ─────────────────────────────────────────────────────────────

DEFAULT_BUNDLER = 'webpack'
DEFAULT_BUNDLER_ARGS = ['--progress', '--hide-modules']
WATCH_ARGS = ['--watch']

# Runtime global of the client library and its template loader package
CLIENT_GLOBAL = 'OSjs'
SCHEME_LOADER = 'osjs-scheme-loader'

# ── External Test Tooling ───────────────────────────────────────────────

DEFAULT_LINT_FILES = [
    'src/*.js',
    'src/build/*.js',
    'src/server/node/*.js',
    'src/server/node/**/*.js',
    'src/client/javascript/*.js',
    'src/client/javascript/**/*.js',
    'src/packages/default/**/*.js',
    '!src/packages/default/**/locales.js',
]
DEFAULT_UNIT_FILES = 'src/server/test/node/*.js'
SERVER_ENTRYPOINT = ('src', 'server', 'node', 'server.js')

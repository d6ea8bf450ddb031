"""Shared test fixtures."""

import json
import os
import subprocess

import pytest

from deskbuild.context import BuildContext


# ── Sample Installation ─────────────────────────────────────────────────

BASE_CONF = {
    'client': {
        'Preloads': {'vendor': {'type': 'javascript', 'src': '/vendor/lib.js'}},
        'VFS': {'MaxUploadSize': 2097152},
        'Fonts': {'default': 'Karla', 'list': ['Arial']},
        'Connection': {'Type': 'http'},
    },
    'server': {
        'http': {'port': 8000},
        'dist': '%ROOT%/dist',
        'proxies': {},
    },
    'mime': {
        'mapping': {'.js': 'application/javascript', '.css': 'text/css', 'text/plain': 'txt'},
    },
    'broadway': {'enabled': False},
    'repositories': ['default'],
    'packages': {'ForceEnable': [], 'ForceDisable': []},
    'themes': {'icons': ['default'], 'sounds': ['default'], 'styles': ['default']},
}

PACKAGES = {
    'Alpha': {'className': 'ApplicationAlpha', 'preload': ['main.js', 'main.css'], 'autostart': True},
    'Beta': {'className': 'ApplicationBeta', 'enabled': False},
    'Ext': {'type': 'extension', 'conf': ['conf.json'], 'build': {'webpack': True}},
    'Svc': {'type': 'service', 'className': 'ServiceSvc'},
}

WEBSERVER_TEMPLATES = {
    'nginx.conf': 'root %DISTDIR%;\nlisten %PORT%;\ntypes {\n%MIMES%\n}\n',
    'lighttpd.conf': 'server.document-root = "%DISTDIR%"\nserver.port = %PORT%\nmimetype.assign = (\n%MIMES%\n)\n',
    'apache_vhost.conf': 'DocumentRoot %DISTDIR%\n%MIMES%\n',
    'dev-htaccess.conf': '# dev\n%MIMES%\n%PROXIES%\n',
    'prod-htaccess.conf': '# prod\n%MIMES%\n%PROXIES%\n',
}


def write_json(path, data):
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(data, f)


def write_text(path, text):
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        f.write(text)


@pytest.fixture
def installation(tmp_path):
    """A minimal installation tree; returns its root path."""
    root = str(tmp_path / 'app')
    src = os.path.join(root, 'src')

    write_json(os.path.join(src, 'conf', '100-base.json'), BASE_CONF)
    write_json(os.path.join(src, 'conf', '200-port.json'), {'server': {'http': {'port': 8080}}})

    for name, metadata in PACKAGES.items():
        write_json(os.path.join(src, 'packages', 'default', name, 'metadata.json'), metadata)
    write_json(os.path.join(src, 'packages', 'default', 'Ext', 'conf.json'), {'ext': {'enabled': True}})

    write_text(os.path.join(src, 'themes', 'fonts', 'Karla', 'style.css'), 'body {}')
    write_text(os.path.join(src, 'themes', 'fonts', 'NoStyle', 'README'), '')
    write_json(os.path.join(src, 'themes', 'icons', 'default', 'metadata.json'),
               {'name': 'default', 'title': 'Default Icons'})
    write_json(os.path.join(src, 'themes', 'sounds', 'default', 'metadata.json'),
               {'name': 'default', 'title': 'Default Sounds'})
    write_json(os.path.join(src, 'themes', 'styles', 'default', 'metadata.json'),
               {'name': 'default', 'title': 'Default Style'})
    write_json(os.path.join(src, 'themes', 'styles', 'hidden', 'metadata.json'),
               {'name': 'hidden', 'title': 'Hidden Style'})

    write_text(os.path.join(src, 'templates', 'dist', 'settings.js'), 'var settings = %CONFIG%;\n')
    write_text(os.path.join(src, 'templates', 'dist', 'packages.js'), 'var packages = %PACKAGES%;\n')
    write_json(os.path.join(src, 'templates', 'package', 'application', 'metadata.json'),
               {'className': 'ApplicationEXAMPLE', 'name': 'EXAMPLE'})
    write_text(os.path.join(src, 'templates', 'package', 'application', 'main.js'), '// EXAMPLE\n')
    for name, text in WEBSERVER_TEMPLATES.items():
        write_text(os.path.join(src, 'templates', 'webserver', name), text)

    os.makedirs(os.path.join(src, 'server'))
    os.makedirs(os.path.join(src, 'client'))
    return root


@pytest.fixture
def make_ctx(installation):
    """Factory for build contexts rooted at the sample installation."""
    def _make(**kwargs) -> BuildContext:
        kwargs.setdefault('root', installation)
        kwargs.setdefault('environ', {})
        kwargs.setdefault('platform', 'linux')
        return BuildContext(**kwargs)
    return _make


@pytest.fixture
def ctx(make_ctx):
    return make_ctx()


class FakeRun:
    """Stand-in for ``subprocess.run``; commands whose cwd contains a ``failing`` entry exit 1."""

    def __init__(self):
        self.calls = []
        self.failing = []

    def __call__(self, command, cwd=None, env=None):
        self.calls.append({'command': command, 'cwd': cwd, 'env': env})
        code = 1 if any(f in cwd for f in self.failing) else 0
        return subprocess.CompletedProcess(command, code)


@pytest.fixture
def fake_run(monkeypatch):
    fake = FakeRun()
    monkeypatch.setattr('deskbuild.task_runner.subprocess.run', fake)
    return fake

"""Tests for BuildContext."""

import os

from deskbuild.context import BuildContext


class TestBuildContext:

    def test_explicit_root_wins(self, tmp_path, monkeypatch):
        monkeypatch.setenv('DESKBUILD_ROOT', '/elsewhere')
        ctx = BuildContext.from_environment(root=str(tmp_path))
        assert ctx.root == str(tmp_path)

    def test_root_from_environment(self, tmp_path, monkeypatch):
        monkeypatch.setenv('DESKBUILD_ROOT', str(tmp_path))
        assert BuildContext.from_environment().root == str(tmp_path)

    def test_root_defaults_to_working_directory(self, tmp_path, monkeypatch):
        monkeypatch.delenv('DESKBUILD_ROOT', raising=False)
        monkeypatch.chdir(tmp_path)
        assert BuildContext.from_environment().root == os.getcwd()

    def test_environment_snapshot(self, monkeypatch):
        monkeypatch.setenv('DESKBUILD_TEST_VALUE', 'x')
        ctx = BuildContext.from_environment(root='/srv/app')
        monkeypatch.setenv('DESKBUILD_TEST_VALUE', 'y')
        assert ctx.environ['DESKBUILD_TEST_VALUE'] == 'x'

    def test_option_default(self):
        ctx = BuildContext(root='/srv/app', options={'name': None, 'out': 'x'})
        assert ctx.option('name', 'fallback') == 'fallback'
        assert ctx.option('out') == 'x'

    def test_path(self):
        assert BuildContext(root='/srv/app').path('src', 'conf') == os.path.join('/srv/app', 'src', 'conf')

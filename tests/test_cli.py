"""Tests for the command-line entry point."""

import os

import pytest

from deskbuild.cli import build_parser, main, task_options


class TestParser:

    def test_task_options(self):
        args = build_parser().parse_args(['config:set', '--name', 'a.b', '--value', '1', '--import', 'x.json'])
        options = task_options(args)
        assert options['name'] == 'a.b'
        assert options['value'] == '1'
        assert options['import'] == 'x.json'
        assert 'root' not in options
        assert 'command' not in options

    def test_global_options_on_subcommand(self):
        args = build_parser().parse_args(['build', '--debug', '--standalone', '--root', '/srv/app'])
        assert args.debug and args.standalone
        assert args.root == '/srv/app'

    def test_run_passes_remaining_arguments(self):
        args = build_parser().parse_args(['run', '--', '--port', '9000'])
        assert task_options(args)['args'] == ['--port', '9000']


class TestMain:

    def test_config_get(self, installation, capsys):
        main(['config:get', '--root', installation, '--name', 'server.http.port'])
        assert 'server.http.port = 8080' in capsys.readouterr().out

    def test_root_from_environment(self, installation, monkeypatch, capsys):
        monkeypatch.setenv('DESKBUILD_ROOT', installation)
        main(['config:get', '--name', 'repositories'])
        assert 'repositories = ["default"]' in capsys.readouterr().out

    def test_missing_name_exits_1(self, installation, capsys):
        with pytest.raises(SystemExit) as exc:
            main(['config:get', '--root', installation])
        assert exc.value.code == 1
        assert 'Error: You need to give --name' in capsys.readouterr().err

    def test_missing_configuration_exits_1(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc:
            main(['config:get', '--root', str(tmp_path), '--name', 'x'])
        assert exc.value.code == 1
        assert 'Configuration directory not found' in capsys.readouterr().err

    def test_failed_command_exits_1(self, installation, fake_run, capsys):
        fake_run.failing.append('client')
        with pytest.raises(SystemExit) as exc:
            main(['build:core', '--root', installation])
        assert exc.value.code == 1
        assert 'exited with status 1' in capsys.readouterr().err

    def test_generate_package(self, installation):
        main(['generate:package', '--root', installation, '--name', 'mine/Demo'])
        assert os.path.isdir(os.path.join(installation, 'src', 'packages', 'mine', 'Demo'))

    def test_no_command_prints_help(self, capsys):
        main([])
        assert 'usage: deskbuild' in capsys.readouterr().out

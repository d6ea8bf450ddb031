"""Build tasks and their registration.

Every task takes ``(runner, ctx)``; tasks that need configuration read the
tree fresh, so edits made earlier in a sequence are visible to later tasks.
Required options are checked before anything touches the filesystem.
"""
import glob
import json
import logging
import os
from typing import Any, Mapping

from deskbuild.bundler.config_factory import create_configuration, create_package_configuration
from deskbuild.bundler.runner import BundlerRunner
from deskbuild.config.editor import ConfigEditor
from deskbuild.config.tree import ConfigurationTree, get_configuration, thaw
from deskbuild.config.tree_reader import ConfigTreeReader
from deskbuild.context import BuildContext
from deskbuild.domain.constants import DEFAULT_LINT_FILES, DEFAULT_UNIT_FILES, METADATA_FILE, SERVER_ENTRYPOINT
from deskbuild.domain.enums import PackageType
from deskbuild.errors import ValidationError
from deskbuild.output.client_settings_builder import ClientSettingsBuilder
from deskbuild.output.manifest_builder import ManifestBuilder
from deskbuild.output.server_settings_builder import ServerSettingsBuilder
from deskbuild.output.webserver_config_builder import WebserverConfigBuilder
from deskbuild.packages.discovery import PackageDiscovery
from deskbuild.packages.generator import PackageGenerator
from deskbuild.task_runner import TaskRunner
from deskbuild.themes import ThemeDiscovery

logger = logging.getLogger(__name__)

BUILD_SEQUENCE = ['build:config', 'build:manifest', 'build:themes', 'build:core', 'build:packages']
TEST_SEQUENCE = ['lint', 'unit']


def _require(ctx: BuildContext, *names: str) -> None:
    for name in names:
        if ctx.option(name) in (None, ''):
            raise ValidationError(f"You need to give --{name}")


def _read_tree(ctx: BuildContext) -> ConfigurationTree:
    return ConfigTreeReader(ctx).read()


def _format(value: Any) -> str:
    if isinstance(value, (Mapping, list, tuple)):
        return json.dumps(thaw(value))
    return str(value)


# ── Configuration ───────────────────────────────────────────────────────

def config_get(runner: TaskRunner, ctx: BuildContext) -> Any:
    _require(ctx, 'name')
    name = ctx.option('name')
    value = get_configuration(_read_tree(ctx), name)
    print(f"{name} = {_format(value)}")
    return value


def config_set(runner: TaskRunner, ctx: BuildContext) -> Any:
    name = ctx.option('name')
    editor = ConfigEditor(ctx, ctx.option('out'))
    value = editor.set(name, ctx.option('value'), ctx.option('import'))
    print(f"{name or ctx.option('import')} = {_format(value)}")
    return value


def config_add(runner: TaskRunner, ctx: BuildContext) -> Any:
    _require(ctx, 'name', 'value')
    name = ctx.option('name')
    value = ConfigEditor(ctx).add(_read_tree(ctx), name, ctx.option('value'), ctx.option('key'))
    print(f"{name} = {_format(value)}")
    return value


def config_remove(runner: TaskRunner, ctx: BuildContext) -> Any:
    _require(ctx, 'name')
    if not ctx.option('key') and ctx.option('value') is None:
        raise ValidationError("You need to give --key or --value")
    name = ctx.option('name')
    value = ConfigEditor(ctx).remove(_read_tree(ctx), name, ctx.option('value'), ctx.option('key'))
    print(f"{name} = {_format(value)}")
    return value


# ── Build Outputs ───────────────────────────────────────────────────────

def build_config(runner: TaskRunner, ctx: BuildContext) -> None:
    logger.info("Building configuration")
    cfg = _read_tree(ctx)
    discovery = PackageDiscovery(ctx, cfg)

    def client():
        themes = ThemeDiscovery(ctx, cfg).get_metadata()
        autostart = discovery.get_metadata(lambda meta, name: meta.autostart)
        builder = ClientSettingsBuilder(ctx, cfg)
        return builder.write(builder.build(themes, autostart))

    def server():
        extensions = discovery.get_metadata(lambda meta, name: meta.type == PackageType.EXTENSION.value)
        builder = ServerSettingsBuilder(ctx, cfg)
        return builder.write(builder.build(extensions))

    runner.run_parallel(client, server)


def build_manifest(runner: TaskRunner, ctx: BuildContext) -> None:
    logger.info("Building manifest")
    cfg = _read_tree(ctx)
    packages = PackageDiscovery(ctx, cfg).get_metadata()
    builder = ManifestBuilder(ctx)
    runner.run_parallel(lambda: builder.write_client(packages), lambda: builder.write_server(packages))


def build_themes(runner: TaskRunner, ctx: BuildContext) -> None:
    BundlerRunner(runner, _read_tree(ctx)).build_themes()


def build_core(runner: TaskRunner, ctx: BuildContext) -> None:
    BundlerRunner(runner, _read_tree(ctx)).build_core()


def build_packages(runner: TaskRunner, ctx: BuildContext) -> None:
    logger.info("Building packages")
    BundlerRunner(runner, _read_tree(ctx)).build_packages()


def build_package(runner: TaskRunner, ctx: BuildContext) -> None:
    _require(ctx, 'name')
    BundlerRunner(runner, _read_tree(ctx)).build_package(ctx.option('name'))


def build(runner: TaskRunner, ctx: BuildContext) -> None:
    runner.run_sequence(BUILD_SEQUENCE)


def watch(runner: TaskRunner, ctx: BuildContext) -> None:
    BundlerRunner(runner, _read_tree(ctx)).watch(ctx.option('package'), bool(ctx.option('themes')))


# ── External Tooling ────────────────────────────────────────────────────

def lint(runner: TaskRunner, ctx: BuildContext) -> None:
    args = ['eslint']
    for pattern in DEFAULT_LINT_FILES:
        if pattern.startswith('!'):
            args += ['--ignore-pattern', pattern[1:]]
        else:
            args.append(pattern)
    runner.shell(args)


def unit(runner: TaskRunner, ctx: BuildContext) -> None:
    files = sorted(glob.glob(ctx.path(DEFAULT_UNIT_FILES)))
    runner.shell(['mocha', '--bail', '--reporter', 'spec', '--timeout', '2000'] + files)


def test(runner: TaskRunner, ctx: BuildContext) -> None:
    runner.run_sequence(TEST_SEQUENCE)


def run(runner: TaskRunner, ctx: BuildContext) -> None:
    logger.info("Starting server")
    runner.shell(['node', ctx.path(*SERVER_ENTRYPOINT)] + list(ctx.option('args', [])))


# ── Generators ──────────────────────────────────────────────────────────

def generate_package(runner: TaskRunner, ctx: BuildContext) -> str:
    _require(ctx, 'name')
    return PackageGenerator(ctx).generate(ctx.option('name'), ctx.option('type'), ctx.option('dest'))


def generate_config(runner: TaskRunner, ctx: BuildContext) -> str:
    flavor = ctx.option('type')
    if flavor not in WebserverConfigBuilder.get_supported_types():
        supported = ', '.join(WebserverConfigBuilder.get_supported_types())
        raise ValidationError(f"You need to give --type ({supported})")

    text = WebserverConfigBuilder(ctx, _read_tree(ctx)).generate(flavor, ctx.option('out'), ctx.option('env', 'dev'))
    if flavor != 'htaccess' and not ctx.option('out'):
        print(text)
    return text


def bundler_config(runner: TaskRunner, ctx: BuildContext) -> dict[str, Any]:
    """Print (or write to ``--out``) the bundler configuration document."""
    package = ctx.option('package')
    if package:
        metadata = PackageDiscovery(ctx, _read_tree(ctx)).get_package_metadata(package)
        result = create_package_configuration(ctx, ctx.path(metadata.src, METADATA_FILE))
    else:
        result = create_configuration(ctx)

    text = json.dumps(result, indent=2)
    out = ctx.option('out')
    if out:
        os.makedirs(os.path.dirname(os.path.abspath(out)), exist_ok=True)
        with open(out, 'w', encoding='utf-8') as f:
            f.write(text)
        logger.info("Wrote %s", out)
    else:
        print(text)
    return result


def show_help(runner: TaskRunner, ctx: BuildContext) -> None:
    print("Available tasks:")
    for task in runner.get_tasks():
        print(f"  {task.name:<18} {task.help}")


# ── Registration ────────────────────────────────────────────────────────

DEFAULT_TASKS = [
    ('config:get', config_get, 'Print a configuration value (--name)'),
    ('config:set', config_set, 'Set a value in the custom fragment (--name, --value | --import, --out)'),
    ('config:add', config_add, 'Add to a list or mapping (--name, --value, --key)'),
    ('config:remove', config_remove, 'Remove from a list or mapping (--name, --value | --key)'),
    ('build:config', build_config, 'Write client and server settings'),
    ('build:manifest', build_manifest, 'Write package manifests'),
    ('build:themes', build_themes, 'Bundle themes'),
    ('build:core', build_core, 'Bundle the client core'),
    ('build:packages', build_packages, 'Bundle every enabled package'),
    ('build:package', build_package, 'Bundle one package (--name repo/package)'),
    ('build', build, 'Run the full build'),
    ('watch', watch, 'Rebuild on change (--package, --themes)'),
    ('lint', lint, 'Run eslint'),
    ('unit', unit, 'Run server unit tests'),
    ('test', test, 'Run lint and unit'),
    ('run', run, 'Start the server'),
    ('generate:package', generate_package, 'Scaffold a package (--name repo/package, --type, --dest)'),
    ('generate:config', generate_config, 'Generate web-server configuration (--type, --out, --env)'),
    ('bundler:config', bundler_config, 'Print bundler configuration (--package, --out)'),
    ('help', show_help, 'List tasks'),
]


def register_default_tasks(runner: TaskRunner) -> TaskRunner:
    for name, func, help_text in DEFAULT_TASKS:
        runner.register(name, func, help_text)
    return runner

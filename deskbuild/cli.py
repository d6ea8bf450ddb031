"""CLI for deskbuild."""

import argparse
import logging
import sys

from deskbuild.context import BuildContext
from deskbuild.errors import BuildError
from deskbuild.task_runner import TaskRunner
from deskbuild.tasks import DEFAULT_TASKS, register_default_tasks

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Parser-only arguments that never reach the task options
_GLOBAL_ARGS = ('command', 'root', 'debug', 'standalone', 'bundler_args', 'import_file')


def _global_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(add_help=False)
    parser.add_argument('--root', help='Installation root (default: $DESKBUILD_ROOT or the working directory)')
    parser.add_argument('--debug', action='store_true', help='Debug build and verbose logging')
    parser.add_argument('--standalone', action='store_true', help='Standalone client build')
    parser.add_argument('--repositories', help='Comma-separated package repositories')
    parser.add_argument('--bundler-arg', dest='bundler_args', action='append', default=[],
                        help='Extra argument passed to the bundler (repeatable)')
    return parser


def _task_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(add_help=False)
    parser.add_argument('--name', help='Configuration key or repo/package name')
    parser.add_argument('--value', help='Value (JSON literals are decoded)')
    parser.add_argument('--key', help='Mapping entry key')
    parser.add_argument('--import', dest='import_file', help='JSON file to import')
    parser.add_argument('--out', help='Output file')
    parser.add_argument('--type', help='Package type or web-server flavor')
    parser.add_argument('--dest', help='Destination directory for generated packages')
    parser.add_argument('--env', default='dev', help='htaccess flavor: dev or prod (default: dev)')
    parser.add_argument('--package', help='Package to watch or configure (repo/package)')
    parser.add_argument('--themes', action='store_true', help='Watch themes')
    return parser


def build_parser() -> argparse.ArgumentParser:
    global_parser = _global_parser()
    task_parser = _task_parser()

    parser = argparse.ArgumentParser(prog='deskbuild', description='Web desktop build tool')
    subparsers = parser.add_subparsers(dest='command')

    for name, _, help_text in DEFAULT_TASKS:
        sub = subparsers.add_parser(name, help=help_text, parents=[global_parser, task_parser])
        if name == 'run':
            sub.add_argument('args', nargs=argparse.REMAINDER, help='Arguments passed to the server')
    return parser


def task_options(args: argparse.Namespace) -> dict:
    options = {k: v for k, v in vars(args).items() if k not in _GLOBAL_ARGS}
    options['import'] = getattr(args, 'import_file', None)
    if options.get('args') and options['args'][0] == '--':
        options['args'] = options['args'][1:]
    return options


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return

    logging.basicConfig(level=logging.DEBUG if args.debug else logging.INFO, format=LOG_FORMAT)

    ctx = BuildContext.from_environment(
        root=args.root,
        debug=args.debug,
        standalone=args.standalone,
        options=task_options(args),
        bundler_args=list(args.bundler_args),
    )
    runner = register_default_tasks(TaskRunner(ctx))

    try:
        runner.run(args.command)
    except (BuildError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == '__main__':
    main()

"""Bundler configuration documents for the core client and for packages.

The bundler consumes these as plain data (``bundler:config`` prints them as
JSON); plugin entries name the bundler plugin and its options, and loader
``test`` patterns are regular-expression source strings.
"""
import os
from copy import deepcopy
from typing import Any

from deskbuild.bundler.options import parse_options
from deskbuild.config.merge import merge_object
from deskbuild.config.paths import fix_win_path
from deskbuild.context import BuildContext
from deskbuild.domain.constants import CLIENT_DIR, CLIENT_GLOBAL, DIST_DIR, SCHEME_LOADER
from deskbuild.packages.metadata_reader import MetadataReader

BANNER = """
/**
 * Web desktop platform build
 *
 * Generated file, do not edit. Distributed under the Simplified BSD License.
 * @preserve
 */
"""

# Files in dist/ that a clean core build must keep
CLEAN_EXCLUDE = ['packages', 'vendor', '.htaccess', '.gitignore']


def _extract(use: list) -> dict[str, Any]:
    return {'extract': {'fallback': 'style-loader', 'use': use}}


def _plugin(name: str, options: Any = None) -> dict[str, Any]:
    return {'plugin': name, 'options': options}


def get_plugins(ctx: BuildContext, options: dict[str, Any]) -> list[dict[str, Any]]:
    plugins = [
        _plugin('BannerPlugin', {'banner': BANNER, 'raw': True}),
        _plugin('ExtractTextPlugin', '[name].css'),
    ]

    if options.get('clean'):
        if options.get('package'):
            package_root = os.path.dirname(options['package'])
            plugins.insert(0, _plugin('CleanWebpackPlugin', {
                'paths': [os.path.basename(package_root)],
                'root': os.path.dirname(package_root),
                'exclude': [],
            }))
        else:
            plugins.insert(0, _plugin('CleanWebpackPlugin', {
                'paths': [ctx.path(*DIST_DIR, '*')],
                'root': ctx.root,
                'exclude': CLEAN_EXCLUDE,
            }))

    if options.get('minimize'):
        plugins.append(_plugin('UglifyJsPlugin', {
            'comments': '@preserve',
            'minimize': True,
            'rebase': False,
            'sourceMap': options.get('sourcemaps') is True,
        }))
    return plugins


def create_configuration(ctx: BuildContext, overrides: dict[str, Any] | None = None) -> dict[str, Any]:
    """Base bundler configuration shared by the core and every package."""
    options = parse_options(ctx.environ, overrides)
    css_loader = {
        'loader': 'css-loader',
        'options': {'sourceMap': options['sourcemaps'], 'minimize': options['minimize']},
    }

    return {
        'options': options,
        'bundler': {
            'plugins': get_plugins(ctx, options),
            'devtool': options['devtool'],
            'watchOptions': {'ignored': r'\.tmp$'},
            'resolve': {'modules': [fix_win_path(ctx.path(*CLIENT_DIR, 'javascript'), ctx.platform)]},
            'entry': {},
            'output': {
                'sourceMapFilename': options['outputSourceMap'],
                'filename': options['outputFileName'],
            },
            'module': {
                'loaders': [
                    {'test': r'(scheme|dialogs)\.html$', 'loader': SCHEME_LOADER},
                    {'test': r'\.(png|jpe?g|ico)$', 'loader': 'file-loader'},
                    {'test': r'\.html$', 'loader': 'html-loader'},
                    {
                        'test': r'\.js$',
                        'exclude': options['exclude'],
                        'use': {
                            'loader': 'babel-loader',
                            'options': {'presets': ['es2015'], 'cacheDirectory': True, 'plugins': []},
                        },
                    },
                    dict({'test': r'\.css$'}, **_extract([css_loader])),
                    dict({'test': r'\.less$'}, **_extract([
                        deepcopy(css_loader),
                        {'loader': 'less-loader', 'options': {'sourceMap': options['sourcemaps']}},
                    ])),
                ],
            },
        },
    }


def create_package_configuration(
    ctx: BuildContext,
    metadata_file: str,
    overrides: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Bundler configuration for one package, built on the base configuration."""
    overrides = dict(overrides or {}, package=metadata_file)
    metadata = MetadataReader(ctx).read_one(metadata_file)
    package_root = os.path.dirname(os.path.abspath(metadata_file))
    dest = ctx.path(*DIST_DIR, 'packages', *metadata.name.split('/'))

    result = create_configuration(ctx, overrides)
    bundler = merge_object(result['bundler'], {
        'resolve': {'modules': [fix_win_path(package_root, ctx.platform)]},
        'entry': {'main': [fix_win_path(a.src, ctx.platform) for a in metadata.preload if a.src]},
        'output': {
            'publicPath': f'./packages/{metadata.name}',
            'path': fix_win_path(dest, ctx.platform),
        },
        'externals': {CLIENT_GLOBAL: CLIENT_GLOBAL},
    })
    bundler['module']['loaders'].append({
        'test': r'((\w+)\.(eot|svg|ttf|woff|woff2))$',
        'loader': 'file-loader?name=[name].[ext]',
    })
    return result

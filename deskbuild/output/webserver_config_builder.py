"""Web-server configuration snippets rendered from templates.

Templates live in ``src/templates/webserver`` and carry ``%DISTDIR%``,
``%MIMES%``, ``%PORT%`` (and ``%PROXIES%`` for .htaccess) placeholders.
"""
import logging
import os
from typing import Any, Callable

from deskbuild.config.tree import get_configuration
from deskbuild.context import BuildContext
from deskbuild.domain.constants import DIST_DIR, WEBSERVER_TEMPLATES_DIR
from deskbuild.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def _extension_mimes(mapping: Any) -> list[tuple[str, str]]:
    """``(extension, type)`` pairs for dot-prefixed mime mapping keys."""
    if not hasattr(mapping, 'items'):
        return []
    return [(ext, str(mime)) for ext, mime in mapping.items() if ext.startswith('.')]


def apache_mimes(mapping: Any) -> str:
    """Apache vhosts rely on the server's own mime.types."""
    return ''


def lighttpd_mimes(mapping: Any) -> str:
    return ',\n'.join(f'  "{ext}" => "{mime}"' for ext, mime in _extension_mimes(mapping))


def nginx_mimes(mapping: Any) -> str:
    return '\n'.join(f'        {mime} {ext[1:]};' for ext, mime in _extension_mimes(mapping))


def htaccess_mimes(mapping: Any) -> str:
    return '\n'.join(f'  AddType {mime} {ext}' for ext, mime in _extension_mimes(mapping))


def htaccess_proxies(proxies: Any) -> str:
    """RewriteRule lines for string proxies whose key is a pattern, not a path."""
    if not hasattr(proxies, 'items'):
        return ''
    return '\n'.join(
        f'     RewriteRule {pattern} {target} [P]'
        for pattern, target in proxies.items()
        if not pattern.startswith('/') and isinstance(target, str)
    )


class WebserverConfigBuilder:
    """Renders web-server configuration for one of the supported flavors."""

    TEMPLATES: dict[str, str] = {
        'apache': 'apache_vhost.conf',
        'lighttpd': 'lighttpd.conf',
        'nginx': 'nginx.conf',
    }
    MIME_FORMATTERS: dict[str, Callable[[Any], str]] = {
        'apache': apache_mimes,
        'lighttpd': lighttpd_mimes,
        'nginx': nginx_mimes,
    }
    HTACCESS_TEMPLATES = {
        'dev': 'dev-htaccess.conf',
        'prod': 'prod-htaccess.conf',
    }

    def __init__(self, ctx: BuildContext, cfg: Any):
        self.ctx = ctx
        self.cfg = cfg

    @classmethod
    def get_supported_types(cls) -> list[str]:
        return sorted(list(cls.TEMPLATES) + ['htaccess'])

    def generate(self, flavor: str | None, out: str | None = None, env: str = 'dev') -> str:
        """Render ``flavor`` and write it.

        ``htaccess`` always writes ``dist/.htaccess``; other flavors write to
        ``out`` when given. Returns the rendered text.

        Raises:
            ValidationError: Unknown flavor.
            NotFoundError: The flavor's template is missing.
        """
        if flavor == 'htaccess':
            text = self.render_htaccess(env)
            out = self.ctx.path(*DIST_DIR, '.htaccess')
        elif flavor in self.TEMPLATES:
            text = self.render(flavor)
        else:
            raise ValidationError(f"No such configuration type: {flavor}")

        if out:
            os.makedirs(os.path.dirname(os.path.abspath(out)), exist_ok=True)
            with open(out, 'w', encoding='utf-8') as f:
                f.write(text)
            logger.info("Wrote %s", out)
        return text

    def render(self, flavor: str) -> str:
        mimes = self.MIME_FORMATTERS[flavor](get_configuration(self.cfg, 'mime.mapping', {}))
        text = self._template(self.TEMPLATES[flavor])
        text = text.replace('%DISTDIR%', self.ctx.path(*DIST_DIR), 1)
        text = text.replace('%MIMES%', mimes, 1)
        text = text.replace('%PORT%', str(get_configuration(self.cfg, 'server.http.port', '')), 1)
        return text

    def render_htaccess(self, env: str = 'dev') -> str:
        name = self.HTACCESS_TEMPLATES['dev' if env == 'dev' else 'prod']
        text = self._template(name)
        text = text.replace('%MIMES%', htaccess_mimes(get_configuration(self.cfg, 'mime.mapping', {})), 1)
        text = text.replace('%PROXIES%', htaccess_proxies(get_configuration(self.cfg, 'server.proxies', {})), 1)
        return text

    def _template(self, name: str) -> str:
        path = self.ctx.path(*WEBSERVER_TEMPLATES_DIR, name)
        if not os.path.isfile(path):
            raise NotFoundError(f"Template not found: {path}")
        with open(path, encoding='utf-8') as f:
            return f.read()

"""Tests for web-server configuration generation."""

import os

import pytest

from deskbuild.config.tree_reader import ConfigTreeReader
from deskbuild.errors import NotFoundError, ValidationError
from deskbuild.output.webserver_config_builder import (
    WebserverConfigBuilder,
    htaccess_mimes,
    htaccess_proxies,
    lighttpd_mimes,
    nginx_mimes,
)


class TestMimeFormatters:

    def setup_method(self):
        self.mapping = {'.js': 'application/javascript', 'text/plain': 'txt'}

    def test_nginx(self):
        assert nginx_mimes(self.mapping) == '        application/javascript js;'

    def test_lighttpd(self):
        assert lighttpd_mimes(self.mapping) == '  ".js" => "application/javascript"'

    def test_htaccess(self):
        assert htaccess_mimes(self.mapping) == '  AddType application/javascript .js'

    def test_htaccess_proxies(self):
        proxies = {'^/api/(.*)': 'http://localhost:9000/$1', '/direct': 'http://x', 'obj': {'target': 'x'}}
        assert htaccess_proxies(proxies) == '     RewriteRule ^/api/(.*) http://localhost:9000/$1 [P]'

    def test_non_mapping_input(self):
        assert htaccess_mimes(None) == ''
        assert htaccess_proxies([]) == ''


class TestWebserverConfigBuilder:

    def _builder(self, ctx):
        return WebserverConfigBuilder(ctx, ConfigTreeReader(ctx).read())

    def test_supported_types(self):
        assert WebserverConfigBuilder.get_supported_types() == ['apache', 'htaccess', 'lighttpd', 'nginx']

    def test_nginx(self, ctx, installation):
        text = self._builder(ctx).generate('nginx')
        assert f'root {installation}/dist;' in text
        assert 'listen 8080;' in text
        assert 'application/javascript js;' in text

    def test_writes_out_file(self, ctx, tmp_path):
        out = str(tmp_path / 'conf' / 'lighttpd.conf')
        text = self._builder(ctx).generate('lighttpd', out)
        with open(out) as f:
            assert f.read() == text

    def test_apache_has_no_mime_lines(self, ctx):
        assert 'AddType' not in self._builder(ctx).generate('apache')

    def test_htaccess_written_to_dist(self, ctx, installation):
        text = self._builder(ctx).generate('htaccess')
        assert text.startswith('# dev')
        assert '  AddType text/css .css' in text
        with open(os.path.join(installation, 'dist', '.htaccess')) as f:
            assert f.read() == text

    def test_htaccess_prod(self, ctx):
        assert self._builder(ctx).generate('htaccess', env='prod').startswith('# prod')

    def test_unknown_flavor(self, ctx):
        with pytest.raises(ValidationError):
            self._builder(ctx).generate('iis')

    def test_missing_template(self, ctx, installation):
        os.remove(os.path.join(installation, 'src', 'templates', 'webserver', 'nginx.conf'))
        with pytest.raises(NotFoundError):
            self._builder(ctx).generate('nginx')

"""Tests for ConfigEditor."""

import json
import os

import pytest

from conftest import write_json, write_text
from deskbuild.config.editor import ConfigEditor, build_tree, guess_value
from deskbuild.config.tree_reader import ConfigTreeReader
from deskbuild.errors import ParseError, ValidationError


def _custom(installation):
    with open(os.path.join(installation, 'src', 'conf', '900-custom.json')) as f:
        return json.load(f)


class TestHelpers:

    def test_guess_value_decodes_json_literals(self):
        assert guess_value('true') is True
        assert guess_value('12') == 12
        assert guess_value('["a"]') == ['a']

    def test_guess_value_keeps_plain_strings(self):
        assert guess_value('hello') == 'hello'

    def test_build_tree(self):
        assert build_tree(['a', 'b', 'c'], 1) == {'a': {'b': {'c': 1}}}

    def test_build_tree_keeps_dotted_parts(self):
        assert build_tree(['mime', 'mapping', '.py'], 'x') == {'mime': {'mapping': {'.py': 'x'}}}


class TestConfigEditor:

    def test_set_writes_custom_fragment(self, ctx, installation):
        assert ConfigEditor(ctx).set('server.http.port', '9090') == 9090
        assert _custom(installation) == {'server': {'http': {'port': 9090}}}

    def test_set_is_visible_in_tree(self, ctx):
        ConfigEditor(ctx).set('client.Debug', 'true')
        assert ConfigTreeReader(ctx).read()['client']['Debug'] is True

    def test_set_merges_with_existing_custom_values(self, ctx, installation):
        editor = ConfigEditor(ctx)
        editor.set('a.b', '1')
        editor.set('a.c', '2')
        assert _custom(installation) == {'a': {'b': 1, 'c': 2}}

    def test_set_without_value(self, ctx):
        with pytest.raises(ValidationError):
            ConfigEditor(ctx).set('a.b')

    def test_set_without_name(self, ctx):
        with pytest.raises(ValidationError):
            ConfigEditor(ctx).set(None, '1')

    def test_set_import_file(self, ctx, installation, tmp_path):
        imported = str(tmp_path / 'import.json')
        write_json(imported, {'x': {'y': 1}})
        ConfigEditor(ctx).set(None, import_file=imported)
        assert _custom(installation) == {'x': {'y': 1}}

    def test_set_import_under_key(self, ctx, installation, tmp_path):
        imported = str(tmp_path / 'import.json')
        write_json(imported, ['a', 'b'])
        ConfigEditor(ctx).set('list', import_file=imported)
        assert _custom(installation) == {'list': ['a', 'b']}

    def test_set_import_non_object_without_key(self, ctx, tmp_path):
        imported = str(tmp_path / 'import.json')
        write_json(imported, [1])
        with pytest.raises(ValidationError):
            ConfigEditor(ctx).set(None, import_file=imported)

    def test_set_custom_output_file(self, ctx, installation):
        ConfigEditor(ctx, '950-local.json').set('a', '1')
        assert os.path.isfile(os.path.join(installation, 'src', 'conf', '950-local.json'))

    def test_corrupt_custom_fragment(self, ctx, installation):
        write_text(os.path.join(installation, 'src', 'conf', '900-custom.json'), '{')
        with pytest.raises(ParseError):
            ConfigEditor(ctx).set('a', '1')

    def test_add_appends_to_list(self, ctx, installation):
        cfg = ConfigTreeReader(ctx).read()
        assert ConfigEditor(ctx).add(cfg, 'repositories', 'extra') == ['default', 'extra']
        assert ConfigTreeReader(ctx).read()['repositories'] == ('default', 'extra')

    def test_add_does_not_duplicate(self, ctx):
        cfg = ConfigTreeReader(ctx).read()
        assert ConfigEditor(ctx).add(cfg, 'repositories', 'default') == ['default']

    def test_add_mapping_entry(self, ctx, installation):
        cfg = ConfigTreeReader(ctx).read()
        ConfigEditor(ctx).add(cfg, 'mime.mapping', 'text/x-python', entry_key='.py')
        assert ConfigTreeReader(ctx).read()['mime']['mapping']['.py'] == 'text/x-python'
        assert _custom(installation) == {'mime': {'mapping': {'.py': 'text/x-python'}}}

    def test_add_to_non_list(self, ctx):
        cfg = ConfigTreeReader(ctx).read()
        with pytest.raises(ValidationError):
            ConfigEditor(ctx).add(cfg, 'server', 'x')

    def test_remove_from_list(self, ctx):
        editor = ConfigEditor(ctx)
        editor.add(ConfigTreeReader(ctx).read(), 'repositories', 'extra')
        assert editor.remove(ConfigTreeReader(ctx).read(), 'repositories', 'default') == ['extra']
        assert ConfigTreeReader(ctx).read()['repositories'] == ('extra',)

    def test_remove_mapping_entry_from_custom_fragment(self, ctx):
        editor = ConfigEditor(ctx)
        editor.add(ConfigTreeReader(ctx).read(), 'mime.mapping', 'text/x-python', entry_key='.py')
        assert '.py' in ConfigTreeReader(ctx).read()['mime']['mapping']

        editor.remove(ConfigTreeReader(ctx).read(), 'mime.mapping', entry_key='.py')
        mapping = ConfigTreeReader(ctx).read()['mime']['mapping']
        assert '.py' not in mapping
        assert mapping['.js'] == 'application/javascript'

    def test_remove_base_layer_entry_is_refused(self, ctx, installation):
        with pytest.raises(ValidationError, match='100-base.json'):
            ConfigEditor(ctx).remove(ConfigTreeReader(ctx).read(), 'mime.mapping', entry_key='.css')
        assert ConfigTreeReader(ctx).read()['mime']['mapping']['.css'] == 'text/css'
        assert not os.path.exists(os.path.join(installation, 'src', 'conf', '900-custom.json'))

    def test_remove_entry_defined_in_overlay_is_refused(self, ctx, installation, tmp_path):
        overlay_conf = str(tmp_path / 'overlay' / 'conf' / '100-overlay.json')
        write_json(overlay_conf, {'mime': {'mapping': {'.md': 'text/markdown'}}})
        write_json(os.path.join(installation, 'src', 'conf', '500-overlays.json'), {
            'overlays': {'mine': {'path': str(tmp_path / 'overlay'), 'conf': ['conf']}},
        })
        with pytest.raises(ValidationError, match='100-overlay.json'):
            ConfigEditor(ctx).remove(ConfigTreeReader(ctx).read(), 'mime.mapping', entry_key='.md')

    def test_remove_unknown_entry(self, ctx):
        mapping = ConfigEditor(ctx).remove(ConfigTreeReader(ctx).read(), 'mime.mapping', entry_key='.nope')
        assert mapping['.js'] == 'application/javascript'

# -*- coding: utf-8 -*-
"""
Tests for the marking engine (scripts, JSX, TypeScript and components).
"""

import pytest

from core.marker import mark, mark_js, has_import_binding
from i18nmark_enums import ImportType
from i18nmark_exceptions import ParseError
from models.config_model import MarkOptions, ImportBinding
from parser.js_parser import parse_script


class TestScriptMarking:

    def test_strings_and_templates(self, sample_js, mark_options):
        """Plain strings become tagged templates, templates get the tag prefix."""
        result = mark(sample_js, mark_options, "src/a.js")
        assert result == (
            "const greeting = i18n`你好世界`;\n"
            "const welcome = i18n`你好，${name}`;\n"
            "console.log('hello');\n"
        )

    def test_nothing_to_mark(self, mark_options):
        assert mark("const a = 'hello';\n", mark_options, "a.js") is None

    def test_idempotent(self, sample_js, mark_options):
        """Marking already tagged text changes nothing."""
        once = mark(sample_js, mark_options, "a.js")
        assert mark(once, mark_options, "a.js") is None

    def test_double_quotes_and_escapes(self, mark_options):
        result = mark('const s = "含`反引号";\n', mark_options, "a.js")
        assert result == "const s = i18n`含\\`反引号`;\n"

    def test_module_specifiers_skipped(self, mark_options):
        source = (
            "import x from './中文';\n"
            "const m = require('./模块');\n"
            "export { y } from './导出';\n"
        )
        assert mark(source, mark_options, "a.js") is None

    def test_export_default_value_marked(self, mark_options):
        assert mark("export default '中文';\n", mark_options, "a.js") == "export default i18n`中文`;\n"

    def test_object_keys_skipped(self, mark_options):
        result = mark("const o = { '键': '值' };\n", mark_options, "a.js")
        assert result == "const o = { '键': i18n`值` };\n"

    def test_nested_in_template_marked_once(self, mark_options):
        """Only the outer template is tagged; inner literals stay untouched."""
        result = mark("const s = `外层${'内层'}`;\n", mark_options, "a.js")
        assert result == "const s = i18n`外层${'内层'}`;\n"

    def test_foreign_tagged_template_skipped(self, mark_options):
        assert mark("const s = css`中文`;\n", mark_options, "a.js") is None

    def test_ignore_comment(self, mark_options):
        source = "// i18n-ignore\nconst a = '忽略';\nconst b = '标记';\n"
        result = mark(source, mark_options, "a.js")
        assert "'忽略'" in result
        assert "i18n`标记`" in result

    def test_custom_tag(self):
        result = mark("const a = '你好';\n", MarkOptions(tag_name="t"), "a.js")
        assert result == "const a = t`你好`;\n"

    def test_syntax_error(self, mark_options):
        with pytest.raises(ParseError):
            mark("const = '你好';\n", mark_options, "broken.js")


class TestJsxMarking:

    def test_text_and_attribute(self, mark_options):
        source = 'const el = <div title="标题">你好</div>;\n'
        result = mark(source, mark_options, "a.jsx")
        assert result == 'const el = <div title={i18n`标题`}>{i18n`你好`}</div>;\n'

    def test_text_whitespace_preserved(self, mark_options):
        source = "const el = (\n  <p>\n    你好\n  </p>\n);\n"
        result = mark(source, mark_options, "a.jsx")
        assert "<p>\n    {i18n`你好`}\n  </p>" in result

    def test_ignored_attribute(self):
        options = MarkOptions(tag_name="i18n", ignore_attrs=["className"])
        source = 'const el = <div className="样式" title="标题" />;\n'
        result = mark(source, options, "a.jsx")
        assert 'className="样式"' in result
        assert "title={i18n`标题`}" in result

    def test_tsx(self, mark_options):
        source = "const el: JSX.Element = <span>你好</span>;\n"
        result = mark(source, mark_options, "a.tsx")
        assert "<span>{i18n`你好`}</span>" in result


class TestTypeScriptMarking:

    def test_type_literals_skipped(self, mark_options):
        source = "type T = '类型';\nconst a: string = '值';\n"
        result = mark(source, mark_options, "a.ts")
        assert "type T = '类型';" in result
        assert "const a: string = i18n`值`;" in result


class TestImportInjection:

    @pytest.fixture
    def options(self):
        return MarkOptions(tag_name="i18n", import_binding=ImportBinding(path="@/i18n"))

    def test_import_added(self, options):
        result = mark("const a = '你好';\n", options, "a.js")
        assert result == "import i18n from '@/i18n';\nconst a = i18n`你好`;\n"

    def test_import_not_duplicated(self, options):
        source = "import i18n from '@/i18n';\nconst a = '你好';\n"
        result = mark(source, options, "a.js")
        assert result.count("import i18n") == 1

    def test_no_import_when_nothing_marked(self, options):
        assert mark("const a = 'hi';\n", options, "a.js") is None

    def test_marked_output_is_stable(self, options):
        once = mark("const a = '你好';\n", options, "a.js")
        assert mark(once, options, "a.js") is None

    def test_named_and_namespace_forms(self):
        named = ImportBinding(path="@/i18n", import_type=ImportType.NAMED, name="i18n")
        namespace = ImportBinding(path="@/i18n", import_type=ImportType.NAMESPACE, name="i18n")
        assert named.render() == "import { i18n } from '@/i18n';\n"
        assert namespace.render() == "import * as i18n from '@/i18n';\n"

    def test_structural_check(self):
        """An import of another name or form does not count."""
        tree = parse_script("import { i18n } from '@/i18n';\n")
        assert has_import_binding(tree, ImportBinding("@/i18n", ImportType.NAMED, "i18n"))
        assert not has_import_binding(tree, ImportBinding("@/i18n", ImportType.DEFAULT, "i18n"))
        assert not has_import_binding(tree, ImportBinding("@/other", ImportType.NAMED, "i18n"))


class TestComponentMarking:

    def test_template_and_script(self, sample_vue, mark_options):
        result = mark(sample_vue, mark_options, "App.vue")
        assert ':title="i18n`标题`"' in result
        assert "{{ i18n`你好` }}" in result
        assert "msg: i18n`消息`" in result

    def test_idempotent(self, sample_vue, mark_options):
        once = mark(sample_vue, mark_options, "App.vue")
        assert mark(once, mark_options, "App.vue") is None

    def test_directive_expression(self, mark_options):
        source = "<template>\n  <comp :label=\"ok ? '是' : '否'\" />\n</template>\n"
        result = mark(source, mark_options, "A.vue")
        assert ":label=\"ok ? i18n`是` : i18n`否`\"" in result

    def test_interpolation_expression(self, mark_options):
        source = "<template>\n  <p>{{ '你好' + name }}</p>\n</template>\n"
        result = mark(source, mark_options, "A.vue")
        assert "{{ i18n`你好` + name }}" in result

    def test_ignore_comment_skips_next_node(self, mark_options):
        source = (
            "<template>\n"
            "  <div>\n"
            "    <!-- i18n-ignore -->\n"
            "    <span>忽略</span>\n"
            "    <span>标记</span>\n"
            "  </div>\n"
            "</template>\n"
        )
        result = mark(source, mark_options, "A.vue")
        assert "<span>忽略</span>" in result
        assert "<span>{{ i18n`标记` }}</span>" in result

    def test_import_in_script_setup(self):
        options = MarkOptions(tag_name="i18n", import_binding=ImportBinding(path="@/i18n"))
        source = "<script setup>\nconst a = '你好'\n</script>\n"
        result = mark(source, options, "A.vue")
        assert result == "<script setup>\nimport i18n from '@/i18n';\nconst a = i18n`你好`\n</script>\n"

    def test_template_only_adds_no_import(self):
        options = MarkOptions(tag_name="i18n", import_binding=ImportBinding(path="@/i18n"))
        source = "<template>\n  <p>你好</p>\n</template>\n"
        result = mark(source, options, "A.vue")
        assert "import" not in result
        assert "{{ i18n`你好` }}" in result

"""
Tests for the block tree renderer.
"""

import pytest

from inku.context import Context
from inku.template.diagnostics import EXPRESSION, ITERABLE, Diagnostics
from inku.template.nodes import ForNode, IfNode, TextNode, VariableNode
from inku.template.parser import TemplateParseError
from inku.template.renderer import TemplateRenderer, render, render_template


class TestTemplateRenderer:

    def setup_method(self):
        self.diagnostics = Diagnostics()
        self.renderer = TemplateRenderer(self.diagnostics)

    def test_for_over_sequence(self):
        tree = (ForNode("v", "items", (VariableNode("v"),)),)
        assert self.renderer.render(tree, {"items": ["a", "b"]}) == "ab"

    def test_for_over_integer_range(self):
        tree = (ForNode("v", "3", (VariableNode("v"),)),)
        assert self.renderer.render(tree, {}) == "012"

    def test_for_over_zero_renders_nothing(self):
        tree = (ForNode("v", "0", (TextNode("x"),)),)
        assert self.renderer.render(tree, {}) == ""
        assert not self.diagnostics

    def test_for_over_computed_count(self):
        tree = (ForNode("i", "n / 2", (VariableNode("i"),)),)
        assert self.renderer.render(tree, {"n": 6}) == "012"

    def test_for_over_integral_float_literal(self):
        tree = (ForNode("i", "2.0", (VariableNode("i"),)),)
        assert self.renderer.render(tree, {}) == "01"
        assert not self.diagnostics

    def test_for_over_fractional_float(self):
        tree = (ForNode("i", "n / 4", (TextNode("x"),)),)
        assert self.renderer.render(tree, {"n": 6}) == ""
        assert len(self.diagnostics.of_kind(ITERABLE)) == 1

    def test_for_over_array_like_string(self):
        tree = (ForNode("v", "items", (VariableNode("v"), TextNode(";"))),)
        assert self.renderer.render(tree, {"items": "[1, 'two']"}) == "1;two;"

    def test_for_over_unsupported_value(self):
        tree = (TextNode("<"), ForNode("v", "value", (TextNode("x"),)), TextNode(">"))

        for value in ("plain text", -1, True, {"a": 1}, None):
            assert self.renderer.render(tree, {"value": value}) == "<>"

        assert len(self.diagnostics.of_kind(ITERABLE)) == 5

    def test_for_over_unevaluable(self):
        tree = (ForNode("v", "missing", (TextNode("x"),)),)
        assert self.renderer.render(tree, {}) == ""
        assert len(self.diagnostics.of_kind(EXPRESSION)) == 1
        assert not self.diagnostics.of_kind(ITERABLE)

    def test_loop_variable_shadows_and_does_not_leak(self):
        ctx = Context({"v": "outer", "items": [1, 2]})
        tree = (
            ForNode("v", "items", (VariableNode("v"),)),
            TextNode("|"),
            VariableNode("v"),
        )

        assert self.renderer.render(tree, ctx) == "12|outer"
        assert ctx["v"] == "outer"

    def test_variable_rendering(self):
        ctx = {"s": "x", "n": 2.0, "b": False, "none": None, "list": [1, 2]}
        tree = tuple(VariableNode(name) for name in ("s", "n", "b", "none", "list"))
        assert self.renderer.render(tree, ctx) == "x2false1,2"

    def test_unevaluable_variable_renders_empty(self):
        tree = (TextNode("["), VariableNode("missing +"), TextNode("]"))

        assert self.renderer.render(tree, {}) == "[]"
        diag = self.diagnostics.of_kind(EXPRESSION)[0]
        assert "missing +" in diag.message

    def test_if_branches(self):
        tree = (IfNode("n > 1", (TextNode("many"),), (TextNode("one"),)),)

        assert self.renderer.render(tree, {"n": 2}) == "many"
        assert self.renderer.render(tree, {"n": 1}) == "one"

    def test_if_without_else(self):
        tree = (IfNode("flag", (TextNode("on"),)),)
        assert self.renderer.render(tree, {"flag": []}) == ""
        assert self.renderer.render(tree, {"flag": {}}) == ""
        assert self.renderer.render(tree, {"flag": [0]}) == "on"

    def test_unevaluable_condition_takes_else_branch(self):
        tree = (IfNode("missing", (TextNode("yes"),), (TextNode("no"),)),)
        assert self.renderer.render(tree, {}) == "no"
        assert len(self.diagnostics.of_kind(EXPRESSION)) == 1

    def test_render_function(self):
        tree = (VariableNode("a"),)
        assert render(tree, {"a": 1}) == "1"


class TestRenderTemplate:

    def test_nested_for(self):
        text = "{{for(x in [1,2])}}{{for(y in [3,4])}}{{?x}}{{?y}};{{endfor}}{{endfor}}"
        assert render_template(text) == "13;14;23;24;"

    def test_nested_if(self):
        text = "{{if(a)}}A{{if(b)}}B{{else}}b{{endif}}{{endif}}."

        assert render_template(text, {"a": True, "b": True}) == "AB."
        assert render_template(text, {"a": True, "b": False}) == "Ab."
        assert render_template(text, {"a": False, "b": True}) == "."

    def test_if_inside_for(self):
        text = "{{for(n in 4)}}{{if(n % 2 === 0)}}{{?n}}{{endif}}{{endfor}}"
        assert render_template(text) == "02"

    def test_loop_over_objects(self):
        text = "{{for(u in users)}}{{?u.name}}({{?u.age}}) {{endfor}}"
        users = [{"name": "Ann", "age": 30}, {"name": "Bob", "age": 25}]
        assert render_template(text, {"users": users}) == "Ann(30) Bob(25) "

    def test_unmatched_endfor_keeps_surrounding_text(self):
        diagnostics = Diagnostics()
        result = render_template("<p>{{?a}}</p>{{endfor}}<p>tail</p>", {"a": 1}, diagnostics)

        assert result == "<p>1</p><p>tail</p>"
        assert len(diagnostics) == 1

    def test_unclosed_for_is_hard_error(self):
        with pytest.raises(TemplateParseError):
            render_template("{{for(x in [1])}}{{?x}}")

    def test_whitespace_is_significant(self):
        text = "<ul>\n{{for(i in 2)}}  <li>{{?i}}</li>\n{{endfor}}</ul>"
        assert render_template(text) == "<ul>\n  <li>0</li>\n  <li>1</li>\n</ul>"

    def test_include_markers_are_left_untouched(self):
        text = '{{for(i in 2)}}{{include("p.html", n="{{?i}}")}}{{endfor}}{{!include("q.html")}}'
        assert render_template(text) == (
            '{{include("p.html", n="0")}}{{include("p.html", n="1")}}{{!include("q.html")}}'
        )

    @pytest.mark.parametrize("text,ctx", [
        ("plain <b>html</b>", {}),
        ("{{for(x in items)}}<i>{{?x}}</i>{{endfor}}", {"items": ["a", "b"]}),
        ("{{if(ok)}}yes{{else}}no{{endif}} and {{?n * 2}}", {"ok": False, "n": 21}),
        ("{{for(x in [1,2])}}{{for(y in [3,4])}}{{?x}}{{?y}};{{endfor}}{{endfor}}", {}),
    ])
    def test_render_is_idempotent_on_its_output(self, text, ctx):
        once = render_template(text, ctx)
        assert render_template(once, ctx) == once

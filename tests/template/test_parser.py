"""
Tests for the block tree builder.
"""

import pytest

from inku.template.diagnostics import STRUCTURE, Diagnostics
from inku.template.lexer import tokenize
from inku.template.nodes import ForNode, IfNode, TextNode, VariableNode, format_tree
from inku.template.parser import BlockTreeBuilder, TemplateParseError, build, parse_template


class TestBlockTreeBuilder:

    def setup_method(self):
        self.diagnostics = Diagnostics()

    def _parse(self, text):
        return parse_template(text, self.diagnostics, path="doc.html")

    def test_flat_text_and_variables(self):
        tree = self._parse("a{{?x}}b")
        assert tree == (TextNode("a"), VariableNode("x"), TextNode("b"))

    def test_for_block(self):
        tree = self._parse("{{for(v in items)}}[{{?v}}]{{endfor}}")

        assert tree == (
            ForNode(
                var_name="v",
                iterable_expr="items",
                children=(TextNode("["), VariableNode("v"), TextNode("]")),
            ),
        )

    def test_nested_blocks(self):
        tree = self._parse(
            "{{for(x in xs)}}{{if(x > 1)}}{{for(y in ys)}}{{?y}}{{endfor}}{{endif}}{{endfor}}"
        )

        outer = tree[0]
        assert isinstance(outer, ForNode)
        inner_if = outer.children[0]
        assert isinstance(inner_if, IfNode)
        assert inner_if.condition == "x > 1"
        inner_for = inner_if.children[0]
        assert isinstance(inner_for, ForNode)
        assert inner_for.children == (VariableNode("y"),)

    def test_nested_if_blocks(self):
        tree = self._parse("{{if(a)}}A{{if(b)}}B{{endif}}{{endif}}")

        outer = tree[0]
        assert isinstance(outer, IfNode)
        assert outer.children[0] == TextNode("A")
        assert outer.children[1] == IfNode(condition="b", children=(TextNode("B"),))

    def test_else_branch(self):
        tree = self._parse("{{if(ok)}}yes{{else}}no{{endif}}")
        assert tree == (
            IfNode(condition="ok", children=(TextNode("yes"),), else_children=(TextNode("no"),)),
        )

    def test_deep_nesting(self):
        depth = 300
        text = "{{for(i in 1)}}" * depth + "x" + "{{endfor}}" * depth
        tree = self._parse(text)

        node = tree[0]
        for _ in range(depth - 1):
            assert isinstance(node, ForNode)
            node = node.children[0]
        assert node.children == (TextNode("x"),)

    def test_unmatched_endfor_is_ignored(self):
        tree = self._parse("before{{endfor}}after")

        assert tree == (TextNode("before"), TextNode("after"))
        assert len(self.diagnostics.of_kind(STRUCTURE)) == 1
        assert "{{endfor}}" in self.diagnostics.of_kind(STRUCTURE)[0].message

    def test_unmatched_endif_and_else_are_ignored(self):
        tree = self._parse("a{{endif}}b{{else}}c")

        assert tree == (TextNode("a"), TextNode("b"), TextNode("c"))
        assert len(self.diagnostics) == 2

    def test_else_inside_for_is_ignored(self):
        tree = self._parse("{{for(x in xs)}}a{{else}}b{{endfor}}")

        assert tree[0].children == (TextNode("a"), TextNode("b"))
        assert len(self.diagnostics) == 1

    def test_unclosed_for_raises(self):
        with pytest.raises(TemplateParseError, match="Unclosed 'for' block") as exc:
            self._parse("x{{for(v in items)}}{{?v}}")
        assert exc.value.path == "doc.html"
        assert "doc.html" in str(exc.value)

    def test_unclosed_if_raises(self):
        with pytest.raises(TemplateParseError, match="Unclosed 'if' block"):
            self._parse("{{if(a)}}text")

    def test_mismatched_close_raises(self):
        with pytest.raises(TemplateParseError, match="Unexpected 'endif' inside 'for' block"):
            self._parse("{{if(a)}}{{for(x in xs)}}{{endif}}{{endfor}}")

    def test_else_in_for_inside_if_raises(self):
        with pytest.raises(TemplateParseError, match="Unexpected 'else' inside 'for' block"):
            self._parse("{{if(a)}}{{for(x in xs)}}1{{else}}2{{endfor}}{{endif}}")

    def test_malformed_for_header_raises(self):
        with pytest.raises(TemplateParseError, match="Malformed for header"):
            self._parse("{{for(items)}}{{endfor}}")

    def test_multiple_else_raises(self):
        with pytest.raises(TemplateParseError, match="Multiple 'else'"):
            self._parse("{{if(a)}}1{{else}}2{{else}}3{{endif}}")

    def test_if_without_condition_raises(self):
        with pytest.raises(TemplateParseError, match="'if' without condition"):
            self._parse("{{if( )}}x{{endif}}")

    def test_build_without_diagnostics_collector(self):
        tree = build(tokenize("a{{endfor}}"))
        assert tree == (TextNode("a"),)

    def test_builder_class(self):
        builder = BlockTreeBuilder(self.diagnostics)
        assert builder.build(tokenize("{{?a}}")) == (VariableNode("a"),)

    def test_tree_is_immutable(self):
        tree = self._parse("{{for(v in xs)}}{{?v}}{{endfor}}")
        with pytest.raises(AttributeError):
            tree[0].var_name = "other"
        assert isinstance(tree[0].children, tuple)

    def test_format_tree(self):
        tree = self._parse("{{if(a)}}{{?b}}{{else}}c{{endif}}")
        dump = format_tree(tree)

        assert "IfNode('a')" in dump
        assert "  VariableNode('b')" in dump
        assert "else:" in dump
        assert "  TextNode('c')" in dump

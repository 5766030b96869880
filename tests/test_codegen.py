"""Tests for PHP code generation."""

import pytest

from hah import HahConfig, Tag, escape_html, generate_php, render

LF = HahConfig(newline="\n")


def php(source: str, **kwargs) -> str:
    return render(source, config=LF, **kwargs)


class TestTags:
    def test_children_on_own_lines(self):
        assert php("ul\n  li One\n  li Two\n") == "<ul>\n    <li>One</li>\n    <li>Two</li>\n</ul>"

    def test_self_closing(self):
        assert php("br") == "<br />"
        assert php('img(src="a.png")') == '<img src="a.png" />'

    def test_non_self_closing_tag(self):
        assert php("div") == "<div></div>"

    def test_non_self_closing_is_whole_name(self):
        assert php("divider") == "<divider />"

    def test_custom_non_self_closing(self):
        config = HahConfig(newline="\n", non_self_closing="span|i")
        assert render("span", config=config) == "<span></span>"
        assert render("div", config=config) == "<div />"

    def test_literal_attribute_escaped(self):
        assert php('a(title="a & <b>") x') == '<a title="a &amp; &lt;b&gt;">x</a>'

    def test_shorthand_and_attribute_order(self):
        assert php('a.btn#go(href="/" rel="next") Go') == '<a class="btn" id="go" href="/" rel="next">Go</a>'

    def test_expression_attribute(self):
        assert php('a(@href="/u/$id") Me') == '<a href="<?php echo "/u/$id"; ?>">Me</a>'

    def test_no_empty_attribute(self):
        assert php("a Link\n  @title=? $t\n") == (
            "<a<?php echo ((HahNode::pick($t) == '')?'':' title=\"'"
            ".htmlentities(HahNode::pick($t), ENT_QUOTES).'\"'); ?>>Link</a>"
        )

    def test_siblings_at_top_level(self):
        assert php("p A\np B") == "<p>A</p><p>B</p>"

    def test_singular_chain_is_inline(self):
        source = "html\n  body\n    div#main\n      p Hello\n"
        assert php(source) == '<html><body><div id="main"><p>Hello</p></div></body></html>'

    def test_nested_blocks_indent_by_level(self):
        source = "div\n  ul\n    li a\n    li b\n"
        assert php(source) == (
            "<div>\n"
            "    <ul>\n"
            "        <li>a</li>\n"
            "        <li>b</li>\n"
            "    </ul>\n"
            "</div>"
        )


class TestVariables:
    def test_assignment(self):
        assert php("p= $name") == "<p><?php echo $name; ?></p>"

    def test_function_chain_innermost_first(self):
        assert php("p=a,b $x") == "<p><?php echo b(a($x)); ?></p>"

    def test_date(self):
        assert php('span="M_d,_Y" $when') == '<span><?php echo HahNode::date("M d, Y",$when); ?></span>'

    def test_money(self):
        assert php("span=$ $price") == "<span><?php echo HahNode::money($price); ?></span>"

    def test_number(self):
        assert php("span=# $n") == "<span><?php echo number_format($n); ?></span>"

    def test_list(self):
        assert php('$items(list="ol")') == '<?php echo HahNode::htmllist($items,"ol"); ?>'

    def test_table(self):
        assert php('$rows(table="people")') == '<?php echo HahNode::table($rows,"people"); ?>'

    def test_suppressed_when_empty(self):
        assert php("p=? $name") == (
            "<?php if (HahNode::pick($name) != '') { ?>"
            "<p><?php echo HahNode::pick($name); ?></p>"
            "<?php } ?>"
        )


class TestCodeBlocks:
    def test_statement(self):
        assert php("- $x = 1") == "<?php $x = 1; ?>"

    def test_block_with_children(self):
        source = "- foreach ($items as $item)\n  li= $item\n  li x\n"
        assert php(source) == (
            "<?php foreach ($items as $item) { ?>\n"
            "    <li><?php echo $item; ?></li>\n"
            "    <li>x</li>\n"
            "<?php } ?>"
        )

    def test_if_else_chain_shares_braces(self):
        source = "?$x > 0\n  positive\n:\n  negative\n"
        assert php(source) == (
            "<?php if ($x > 0) { ?><positive /><?php } else { ?><negative /><?php } ?>"
        )

    def test_elseif(self):
        source = "?$a\n  a\n:$b\n  b\n:\n  c\n"
        assert php(source) == (
            "<?php if ($a) { ?><a /><?php } elseif ($b) { ?><b /><?php } else { ?><c /><?php } ?>"
        )


class TestSubDocuments:
    def test_forwards_parameters_and_overrides(self):
        output = php('!$header(size="20")', params={"color": "red", "size": "10"})
        assert output == (
            '<?php $__subhahdoc = new HahDocument("$header"); '
            "$__subhahdoc->set('color',$color); "
            "$__subhahdoc->set('size',\"20\"); "
            "echo $__subhahdoc; unset($__subhahdoc);  ?>"
        )

    def test_literal_values_are_php_strings(self):
        output = php(r'!$h(path="C:\dir")')
        assert r"""$__subhahdoc->set('path',"C:\\dir"); """ in output

    def test_document_class_configurable(self):
        config = HahConfig(newline="\n", document_class="View")
        assert render("!$h", config=config).startswith('<?php $__subhahdoc = new View("$h"); ')


class TestRaw:
    def test_raw_block_verbatim(self):
        assert php("<div>\n  <b>x</b>\n</div>\n") == "<div>\n  <b>x</b>\n</div>\n"

    def test_doctype_then_markup(self):
        assert php("<!html5\np Hi\n") == "<!DOCTYPE HTML>\n<p>Hi</p>"


class TestConfig:
    def test_default_newline_is_crlf(self):
        assert render("ul\n  li a\n  li b") == "<ul>\r\n    <li>a</li>\r\n    <li>b</li>\r\n</ul>"

    def test_indent_newline_and_runtime(self):
        config = HahConfig(indent="\t", newline="\n", runtime_class="Hah")
        assert render("ul\n  li=$ $p\n  li x", config=config) == (
            "<ul>\n\t\t<li><?php echo Hah::money($p); ?></li>\n\t\t<li>x</li>\n</ul>"
        )


class TestHelpers:
    def test_escape_html(self):
        assert escape_html("a & \"b\" <c> 'd'") == "a &amp; &quot;b&quot; &lt;c&gt; 'd'"

    def test_unknown_kind_rejected(self):
        class Stray(Tag):
            kind = None

        with pytest.raises(TypeError):
            generate_php(Stray("x"))

import html

import pytest

from markdown_alternate import html_converter
from markdown_alternate.html_converter import SUPPRESSED_TAGS, TAG_RULES, convert

BASE_URL = "https://example.org"


@pytest.mark.parametrize("fragment", ["", "   ", "\n\t\n"])
def test_empty_input_yields_empty_output(fragment):
    assert convert(fragment, BASE_URL) == ""


def test_headings_and_paragraphs():
    result = convert("<h2>Title</h2><p>Text</p><p></p><h6>Small</h6>", BASE_URL)

    assert result == "## Title\n\nText\n\n###### Small\n"


def test_line_break_and_horizontal_rule():
    assert convert("<p>a<br>b</p>", BASE_URL) == "a  \nb\n"
    assert convert("<p>a</p><hr><p>b</p>", BASE_URL) == "a\n\n---\n\nb\n"


def test_blockquote_prefixes_every_line():
    result = convert("<blockquote><p>one</p><p>two</p></blockquote>", BASE_URL)

    assert result == "> one\n> \n> two\n"


def test_pre_block_keeps_text_verbatim_and_language():
    fragment = (
        '<pre><code class="hljs language-python">x = 1\n'
        'if x &lt; 2:\n    pass</code></pre>'
    )

    assert convert(fragment, BASE_URL) == "```python\nx = 1\nif x < 2:\n    pass\n```\n"


def test_pre_without_code_has_no_language():
    assert convert("<pre>a  b</pre>", BASE_URL) == "```\na  b\n```\n"


def test_pre_keeps_whitespace_only_lines():
    assert convert("<pre>a\n   \nb</pre>", BASE_URL) == "```\na\n   \nb\n```\n"
    assert convert("<pre>a\n\t\nb</pre><p>c</p>", BASE_URL) == "```\na\n\t\nb\n```\n\nc\n"


def test_emphasis_and_empty_wrappers():
    result = convert("<p><strong>bold</strong> and <em>it</em><b> </b><i></i></p>", BASE_URL)

    assert result == "**bold** and *it*\n"


def test_inline_code_uses_raw_text():
    assert convert("<p>Use <code>&lt;b&gt;</code> tags</p>", BASE_URL) == "Use `<b>` tags\n"
    assert convert("<p><code>a `tick`</code></p>", BASE_URL) == "`` a `tick` ``\n"


@pytest.mark.parametrize(
    ("href", "target"),
    [
        ("/a/b", "https://example.org/a/b"),
        ("a/b", "https://example.org/a/b"),
        ("https://x.com/y", "https://x.com/y"),
        ("//cdn.example.org/x", "//cdn.example.org/x"),
        ("#section", "#section"),
        ("mailto:a@b.com", "mailto:a@b.com"),
    ],
)
def test_link_targets_are_absolutized(href, target):
    assert convert(f'<p><a href="{href}">link</a></p>', BASE_URL) == f"[link]({target})\n"


def test_link_without_href_or_text():
    assert convert("<p><a>just text</a></p>", BASE_URL) == "just text\n"
    assert convert('<p><a href="/p"></a></p>', BASE_URL) == "[/p](https://example.org/p)\n"


def test_image_is_cleaned_and_titled():
    fragment = (
        '<p><img src="images/a.jpg#joomlaImage://local-images/a.jpg?width=10&amp;height=5" '
        'alt="A" title=\'Say "cheese"\'></p>'
    )

    assert convert(fragment, BASE_URL) == (
        '![A](https://example.org/images/a.jpg "Say \\"cheese\\"")\n'
    )


def test_image_without_title_or_src():
    assert convert('<p><img src="/x.png" alt=""></p>', BASE_URL) == "![](https://example.org/x.png)\n"
    assert convert('<p>a<img src="" alt="none"></p>', BASE_URL) == "a\n"


def test_base_url_with_site_root():
    result = convert('<p><img src="images/x.png"></p>', "https://ex.org/site/")

    assert result == "![](https://ex.org/site/images/x.png)\n"


def test_lists_number_per_list():
    result = convert("<ol><li>a</li><li>b</li></ol><ol><li>c</li></ol>", BASE_URL)

    assert result == "1. a\n2. b\n\n1. c\n"


def test_nested_list_items_are_not_counted():
    fragment = "<ol><li>a<ol><li>x</li><li>y</li></ol></li><li>b</li></ol>"

    assert convert(fragment, BASE_URL) == "1. a\n   1. x\n   2. y\n2. b\n"


def test_unordered_list():
    assert convert("<ul><li>x</li><li> y </li></ul>", BASE_URL) == "- x\n- y\n"


def test_table_with_header_pads_and_truncates_rows():
    fragment = (
        "<table><thead><tr><th>A</th><th>B</th><th>C</th></tr></thead>"
        "<tbody><tr><td>c1</td><td>c2</td></tr>"
        "<tr><td>1</td><td>2</td><td>3</td><td>4</td></tr></tbody></table>"
    )

    assert convert(fragment, BASE_URL) == (
        "| A | B | C |\n"
        "| --- | --- | --- |\n"
        "| c1 | c2 |  |\n"
        "| 1 | 2 | 3 |\n"
    )


def test_table_header_detected_from_th_cells():
    fragment = "<table><tr><th>H</th></tr><tr><td><b>v</b></td></tr></table>"

    assert convert(fragment, BASE_URL) == "| H |\n| --- |\n| **v** |\n"


def test_table_without_header_gets_blank_header_and_escaped_pipes():
    fragment = "<table><tr><td>a|b</td><td>c</td></tr></table>"

    assert convert(fragment, BASE_URL) == "|  |  |\n| --- | --- |\n| a\\|b | c |\n"


def test_table_without_header_is_as_wide_as_its_widest_row():
    fragment = "<table><tr></tr><tr><td>a</td><td>b</td></tr></table>"

    assert convert(fragment, BASE_URL) == "|  |  |\n| --- | --- |\n|  |  |\n| a | b |\n"


def test_empty_table_emits_nothing():
    assert convert("<p>a</p><table></table><p>b</p>", BASE_URL) == "a\n\nb\n"


def test_transparent_block_and_inline_tags():
    assert convert("<div><span>a</span> <span>b</span></div>", BASE_URL) == "a b\n"
    assert convert("<section><p>x</p></section><aside>y</aside>", BASE_URL) == "x\n\ny\n"


def test_strikethrough():
    assert convert("<p><del>old</del> new <s></s></p>", BASE_URL) == "~~old~~ new\n"


def test_suppressed_tags_emit_nothing():
    fragment = (
        "<p>a</p><script>alert(1)</script><style>p{}</style>"
        "<form><input value='x'><button>Go</button></form><p>b</p>"
    )

    assert convert(fragment, BASE_URL) == "a\n\nb\n"


def test_every_suppressed_tag_has_a_rule():
    for tag in SUPPRESSED_TAGS:
        assert TAG_RULES[tag](None, BASE_URL, 0) == ""


def test_unknown_tags_are_transparent():
    assert convert("<p><custom-tag>inside</custom-tag></p>", BASE_URL) == "inside\n"


def test_whitespace_collapses_but_word_boundaries_stay():
    assert convert("<p>  hello\n   world  </p>", BASE_URL) == "hello world\n"
    assert convert("<p><em>a</em> <strong>b</strong></p>", BASE_URL) == "*a* **b**\n"


def test_non_breaking_space_is_kept():
    assert convert("<p>10&nbsp;kg</p>", BASE_URL) == "10\u00a0kg\n"


def test_comments_are_dropped():
    assert convert("<p>a<!-- hidden -->b</p>", BASE_URL) == "ab\n"


def test_whitespace_collapse_is_idempotent():
    once = convert("<p>alpha   beta\n\tgamma &amp; delta</p>", BASE_URL)
    twice = convert(f"<p>{html.escape(once)}</p>", BASE_URL)

    assert once == "alpha beta gamma & delta\n"
    assert twice == once


def test_conversion_is_deterministic():
    fragment = '<h1>T</h1><p>x <a href="/y">y</a></p><table><tr><td>1</td></tr></table>'

    assert convert(fragment, BASE_URL) == convert(fragment, BASE_URL)


def test_malformed_html_is_recovered():
    assert convert("<p>unclosed <b>bold", BASE_URL) == "unclosed **bold**\n"


def test_deep_nesting_is_flattened():
    fragment = "<div>" * 150 + "deep <b>text</b>" + "</div>" * 150

    assert convert(fragment, BASE_URL) == "deep text\n"


def test_parse_failure_falls_back_to_plain_text(monkeypatch):
    def broken_parser(*args, **kwargs):
        raise RuntimeError("parser exploded")

    monkeypatch.setattr(html_converter, "BeautifulSoup", broken_parser)

    assert convert("<p>a</p><b>b</b>", BASE_URL) == "ab\n"

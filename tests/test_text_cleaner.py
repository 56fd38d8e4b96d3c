import yaml

from markdown_alternate.text_cleaner import (
    clean_text,
    collapse_whitespace,
    decode_entities,
    escape_table_cell,
    strip_tags,
    trim,
    yaml_quote,
)


def test_collapse_whitespace_keeps_non_breaking_spaces():
    assert collapse_whitespace("a \n\t b\u00a0c") == "a b\u00a0c"
    assert collapse_whitespace("") == ""


def test_strip_tags_and_decode_entities():
    assert strip_tags("<p>a <b>b</b></p>") == "a b"
    assert decode_entities("Tom &amp; Jerry &euro; &#39;") == "Tom & Jerry € '"


def test_clean_text():
    assert clean_text("  <p>Caf&eacute; <br/>au lait</p> ") == "Café au lait"
    assert clean_text(None) == ""
    assert clean_text(42) == "42"
    assert clean_text("&lt;b&gt; is bold") == "<b> is bold"


def test_trim_leaves_non_breaking_space():
    assert trim("\n \u00a0x\t") == "\u00a0x"


def test_yaml_quote_round_trips():
    for value in ['Say "hi"', "back\\slash", "it's", "two\nlines", "key: value # not a comment"]:
        quoted = yaml_quote(value)
        assert quoted.startswith('"') and quoted.endswith('"')
        assert yaml.safe_load(f"v: {quoted}")["v"] == value


def test_escape_table_cell():
    assert escape_table_cell(" a|b \n\n c ") == "a\\|b c"

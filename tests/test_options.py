import logging

from markdown_alternate.options import RenderOptions


def test_everything_is_shown_by_default():
    options = RenderOptions.from_mapping(None)

    assert options == RenderOptions()
    assert all([
        options.show_date, options.show_description, options.show_author, options.show_images,
        options.show_category, options.show_tags, options.show_fields,
    ])


def test_mapping_values_are_read_as_booleans():
    options = RenderOptions.from_mapping({
        "show_date": "0",
        "show_tags": 0,
        "show_images": "1",
        "show_author": "false",
        "read_more_label": "More",
    })

    assert options.show_date is False
    assert options.show_tags is False
    assert options.show_images is True
    assert options.show_author is False
    assert options.read_more_label == "More"


def test_unknown_keys_are_ignored(caplog):
    caplog.set_level(logging.WARNING)

    options = RenderOptions.from_mapping({"show_link": 1})

    assert options == RenderOptions()
    assert "show_link" in caplog.text

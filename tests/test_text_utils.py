"""Tests for HTML entity decoding."""

from services.text_utils import decode_html_entities


def test_decodes_ampersand():
    assert decode_html_entities("A &amp; B") == "A & B"


def test_decodes_all_supported_entities():
    text = "&lt;b&gt; &quot;hi&quot; it&#39;s&nbsp;me"
    assert decode_html_entities(text) == "<b> \"hi\" it's me"


def test_empty_and_none():
    assert decode_html_entities("") == ""
    assert decode_html_entities(None) == ""


def test_idempotent_on_decoded_text():
    decoded = decode_html_entities("Tom &amp; Jerry &lt;3")
    assert decode_html_entities(decoded) == decoded


def test_unknown_entities_untouched():
    assert decode_html_entities("&eacute;&#x27;") == "&eacute;&#x27;"


def test_replacements_apply_in_sequence():
    # "&amp;" is decoded first, so a double-escaped entity decodes fully
    assert decode_html_entities("&amp;lt;") == "<"

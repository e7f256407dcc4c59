import logging

import pytest

from parsing.errors import MalformedArrayError
from parsing.value_decoder import (
    DecodedValue,
    collect_block_array,
    decode_escapes,
    decode_scalar,
    decode_value,
    item_name,
    parse_inline_array,
    strip_quotes,
)


def test_inline_array_decodes_in_order():
    assert decode_value('["a", "b", "c"]').value == ["a", "b", "c"]


def test_inline_array_mixed_quotes_and_escapes():
    assert decode_value(r"""['x', "\ue670", bare]""").value == ["x", "\ue670", "bare"]


def test_inline_array_quoted_comma_kept():
    assert parse_inline_array('["a,b", "c"]') == ["a,b", "c"]


def test_inline_array_empty_and_trailing_comma():
    assert decode_value("[]").value == []
    assert decode_value('["a", "b",]').value == ["a", "b"]


@pytest.mark.parametrize("token", ['["a", , "b"]', '["a" x, "b"]', '["a]'])
def test_malformed_inline_array_falls_back_to_empty(token, caplog):
    with caplog.at_level(logging.WARNING, logger="parsing.value_decoder"):
        assert decode_value(token).value == ""
    assert "Failed to parse inline array" in caplog.text


def test_parse_inline_array_raises_for_non_array():
    with pytest.raises(MalformedArrayError):
        parse_inline_array('"a"')


def test_block_array_collects_items_and_reports_consumed():
    lines = [
        "      volume_icons:",
        '        - "x"',
        "",
        '        - "y"',
        "      other: 1",
    ]
    assert decode_value("", lines, 0, 6) == DecodedValue(["x", "y"], 3)


def test_block_array_opened_with_lone_bracket():
    lines = ["    icons: [", "      - one", "      - 'two'", "  next:"]
    assert decode_value("[", lines, 0, 4) == DecodedValue(["one", "two"], 2)


def test_block_array_without_items_is_empty_sentinel():
    lines = ["      label:", "      other: 1"]
    assert collect_block_array(lines, 1, 6) == DecodedValue("", 0)


def test_block_array_stops_at_document_end():
    lines = ["  list:", "    - a"]
    assert decode_value("", lines, 0, 2) == DecodedValue(["a"], 1)


def test_scalar_quote_stripping():
    assert decode_value('"hello"').value == "hello"
    assert decode_value("'%H:%M'").value == "%H:%M"
    assert strip_quotes("'mismatched\"") == "'mismatched\""


def test_plain_scalar_is_idempotent():
    assert decode_scalar("plain text") == "plain text"
    assert decode_scalar(decode_scalar("plain text")) == "plain text"


def test_scalar_ending_with_colon_is_kept():
    assert decode_value("value:").value == "value:"


def test_unicode_hex_and_control_escapes():
    assert decode_escapes(r"\uf015") == "\uf015"
    assert decode_escapes(r"\x41\tB") == "A\tB"
    assert decode_escapes(r"line\nnext") == "line\nnext"


def test_escape_free_backslashes_untouched():
    assert decode_escapes(r"C:\\Program Files\\yasb") == r"C:\\Program Files\\yasb"
    assert decode_scalar(r'"\d+\.\d+"') == r"\d+\.\d+"


def test_windows_path_with_stray_escape_kept_verbatim():
    assert decode_scalar(r"'C:\users\temp'") == r"C:\users\temp"
    assert decode_escapes(r"C:\new\folder\x") == r"C:\new\folder\x"
    assert decode_escapes(r"\t\\") == "\t\\"


def test_quote_escape_decoded_once_triggered():
    assert decode_escapes(r"\u0041\"b\"") == 'A"b"'


def test_surrogate_pair_joined():
    assert decode_escapes(r"\ud83d\ude00") == "\U0001f600"


def test_lone_surrogate_leaves_text_unchanged():
    assert decode_escapes(r"\ud83d x") == r"\ud83d x"


@pytest.mark.parametrize(
    "token,expected",
    [
        ('"home"', "home"),
        ("'clock'", "clock"),
        ("volume", "volume"),
        ("cpu  # trailing comment", "cpu"),
        ('""', None),
        ("", None),
    ],
)
def test_item_name(token, expected):
    assert item_name(token) == expected

import pytest

from clickwire import escape


def test_escapes_string():
    assert escape.string(r"f\o'o '' b\'ar'") == r"'f\\o\'o \'\' b\\\'ar\''"


def test_escapes_identifier():
    assert escape.identifier(r"f\o`o `` b\`ar`") == r"`f\\o\`o \`\` b\\\`ar\``"


def test_empty_inputs():
    assert escape.string("") == "''"
    assert escape.identifier("") == "``"


def test_string_leaves_backticks_alone():
    assert escape.string("a`b") == "'a`b'"


def test_identifier_leaves_quotes_alone():
    assert escape.identifier("a'b") == "`a'b`"


@pytest.mark.parametrize("text", ["plain", "with space", "x?y", "ünï"])
def test_plain_text_is_only_wrapped(text):
    assert escape.string(text) == f"'{text}'"
    assert escape.identifier(text) == f"`{text}`"
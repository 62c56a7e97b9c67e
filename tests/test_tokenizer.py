"""Tests for the command-string tokenizer."""

import pytest

from proxycmd.exceptions import CommandSyntaxError
from proxycmd.tokenizer import join_args, parse_args, strip_outer_html, tokenize


def test_empty_input_yields_no_tokens():
    result = tokenize("")
    assert result.ok
    assert result.tokens == []


def test_blank_input_yields_no_tokens():
    assert tokenize("    ").tokens == []


def test_splits_on_spaces():
    assert tokenize("heal party leader").tokens == ["heal", "party", "leader"]


def test_consecutive_spaces_collapse():
    assert tokenize("  a   b  ").tokens == ["a", "b"]


def test_single_quotes_group_words():
    assert tokenize("a 'b c' d").tokens == ["a", "b c", "d"]


def test_double_quotes_group_words():
    assert tokenize('heal "party leader"').tokens == ["heal", "party leader"]


def test_escaped_quote_is_literal():
    assert tokenize('a \\" b').tokens == ["a", '"', "b"]


def test_escaped_space_joins_token():
    assert tokenize("a\\ b c").tokens == ["a b", "c"]


def test_escaped_backslash():
    assert tokenize("a\\\\b").tokens == ["a\\b"]


def test_other_quote_type_inside_quotes_is_literal():
    assert tokenize("\"it's here\"").tokens == ["it's here"]


def test_quote_mid_token_is_literal():
    assert tokenize("don't stop").tokens == ["don't", "stop"]


def test_closing_quote_continues_token():
    assert tokenize("'a b'c d").tokens == ["a bc", "d"]


def test_empty_quotes_produce_no_token():
    assert tokenize("a '' b").tokens == ["a", "b"]


def test_markup_span_is_atomic():
    assert tokenize("<tag>x y</tag> z").tokens == ["<tag>x y</tag>", "z"]


def test_markup_span_shields_quotes_and_backslashes():
    raw = "link <a href=\"x y\">it's \\here</a> end"
    assert tokenize(raw).tokens == ["link", "<a href=\"x y\">it's \\here</a>", "end"]


def test_markup_span_appends_to_current_token():
    assert tokenize("pre<b>x y</b>post").tokens == ["pre<b>x y</b>post"]


def test_markup_span_inside_quotes():
    assert tokenize("'a <b>c</b> d'").tokens == ["a <b>c</b> d"]


def test_unterminated_single_quote():
    result = tokenize("'unterminated")
    assert not result.ok
    assert result.error == "Expected '"
    assert result.tokens == []


def test_unterminated_double_quote():
    assert tokenize('say "hello').error == 'Expected "'


def test_lone_quote_is_unterminated():
    assert tokenize("a '").error == "Expected '"


def test_trailing_backslash():
    assert tokenize("trailing\\").error == "Unexpected end of line"


def test_unclosed_markup():
    assert tokenize("<a>no close").error == "HTML parsing failure"


def test_markup_does_not_cross_lines():
    assert tokenize("<a>x\n</a>").error == "HTML parsing failure"


def test_parse_args_returns_tokens():
    assert parse_args("a 'b c'") == ["a", "b c"]


def test_parse_args_raises_syntax_error():
    with pytest.raises(CommandSyntaxError) as exc_info:
        parse_args("trailing\\")
    assert str(exc_info.value) == "Unexpected end of line"
    assert exc_info.value.reason == "Unexpected end of line"


@pytest.mark.parametrize(
    "raw",
    ["heal me", "  spaced   out  ", "x", "one two three four"],
)
def test_plain_input_matches_whitespace_split(raw):
    assert tokenize(raw).tokens == raw.split()


def test_join_args_round_trip():
    tokens = ["heal", "party leader", "now"]
    assert join_args(tokens) == 'heal "party leader" now'
    assert tokenize(join_args(tokens)).tokens == tokens


# --- strip_outer_html ---

def test_strip_outer_html_removes_wrapper():
    assert strip_outer_html("<FONT>!heal me</FONT>") == "!heal me"


def test_strip_outer_html_removes_inner_close_open_pair():
    assert strip_outer_html("<FONT>a</FONT><FONT color=\"red\">b</FONT>") == "ab"


def test_strip_outer_html_keeps_inner_markup():
    assert strip_outer_html("say <b>bold</b> words") == "say <b>bold</b> words"


def test_strip_outer_html_plain_text_unchanged():
    assert strip_outer_html("!heal") == "!heal"

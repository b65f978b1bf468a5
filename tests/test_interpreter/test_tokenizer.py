"""
Tests for the command line tokenizer and parser.
"""

import pytest

from domain.exceptions import CommandParseError
from interpreter.tokenizer import parse_command, split_location, tokenize


class TestTokenize:
    """Tests for quote-aware tokenizing."""

    def test_whitespace_split(self):
        assert tokenize("show   store  S1") == ["show", "store", "S1"]

    def test_quoted_segment_is_one_token(self):
        tokens = tokenize('define store S1 name Main address "1 Main  St"')
        assert tokens[-1] == "1 Main  St"

    def test_unterminated_quote(self):
        with pytest.raises(CommandParseError) as exc_info:
            tokenize('define store S1 address "1 Main St')
        assert exc_info.value.line == 'define store S1 address "1 Main St'


class TestParseCommand:
    """Tests for verb, target and keyword extraction."""

    def test_compound_verb(self):
        command = parse_command("DEFINE Store S1 Name Main Address Here")

        assert command.name == "define store"
        assert command.target == "S1"
        assert command.args == {"name": "Main", "address": "Here"}

    def test_single_word_verb(self):
        command = parse_command("add_basket_item B1 product P1 item_count 2")

        assert command.name == "add_basket_item"
        assert command.target == "B1"
        assert command.args == {"product": "P1", "item_count": "2"}

    def test_free_text_keyword_joins_rest(self):
        command = parse_command("create_event D1 event customer fell in aisle 3")
        assert command.args["event"] == "customer fell in aisle 3"

    def test_values_keep_case(self):
        command = parse_command("define product P1 name GreenApple")
        assert command.args["name"] == "GreenApple"

    def test_missing_value(self):
        with pytest.raises(CommandParseError):
            parse_command("define store S1 name")

    def test_empty_line(self):
        with pytest.raises(CommandParseError):
            parse_command("   ")

    def test_verb_without_object(self):
        with pytest.raises(CommandParseError):
            parse_command("define")


class TestSplitLocation:

    def test_split(self):
        assert split_location("S1:A1:SH1", 3, "") == ("S1", "A1", "SH1")

    @pytest.mark.parametrize("value", ["S1", "S1:A1:SH1", "S1:", ":A1"])
    def test_wrong_arity_or_empty_part(self, value: str):
        with pytest.raises(CommandParseError):
            split_location(value, 2, "line")

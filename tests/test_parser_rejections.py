import pytest

from mcp_dice_notation.errors import DiceError, ExpressionTooDeepError, LexError, ParseError
from mcp_dice_notation.parser import format_expression, parse, parse_request


@pytest.mark.parametrize(
    ("text", "prefix", "position"),
    [
        ("3+", "[UNEXPECTED_END]", 2),
        ("(2+3", "[UNEXPECTED_END]", 4),
        ("2*", "[UNEXPECTED_END]", 2),
        ("-", "[UNEXPECTED_END]", 1),
        ("(2+3]", "[MISMATCHED_PARENTHESES]", 4),
        ("2+3)", "[MISMATCHED_PARENTHESES]", 3),
        (")", "[MISMATCHED_PARENTHESES]", 0),
        ("kh3", "[UNEXPECTED_TOKEN]", 0),
        ("2 + adv", "[UNEXPECTED_TOKEN]", 4),
        ("3 4", "[UNEXPECTED_TOKEN]", 2),
        ("(2)d6", "[UNEXPECTED_TOKEN]", 3),
        ("d20 adv 3", "[UNEXPECTED_TOKEN]", 8),
        ("2 % 3", "[UNEXPECTED_TOKEN]", 2),
        ("()", "[MISMATCHED_PARENTHESES]", 1),
    ],
)
def test_parse_rejections(text, prefix, position):
    with pytest.raises(ParseError) as exc:
        parse(text)
    assert str(exc.value).startswith(prefix)
    assert exc.value.position == position


@pytest.mark.parametrize(
    ("text", "prefix", "position"),
    [
        ("3$4", "[UNRECOGNIZED_CHARACTER]", 1),
        ("2d6 + x", "[UNRECOGNIZED_WORD]", 6),
        ("4ddl", "[UNRECOGNIZED_WORD]", 1),
    ],
)
def test_lex_errors_surface_from_parse(text, prefix, position):
    with pytest.raises(LexError) as exc:
        parse(text)
    assert str(exc.value).startswith(prefix)
    assert exc.value.position == position


def test_truncated_input_reports_expected_and_found():
    with pytest.raises(ParseError) as exc:
        parse("3+")
    assert exc.value.found == "end of input"
    assert "number" in exc.value.expected


@pytest.mark.parametrize("text", ["", "   "])
def test_empty_input_is_rejected(text):
    with pytest.raises(DiceError) as exc:
        parse_request(text)
    assert str(exc.value).startswith("[UNPARSEABLE_INPUT]")


def test_dice_errors_are_value_errors():
    with pytest.raises(ValueError):
        parse("3+")


def test_dice_error_carries_only_code_and_message():
    error = DiceError("Something broke.", code="CUSTOM")
    assert error.code == "CUSTOM"
    assert error.args == ("[CUSTOM] Something broke.",)
    assert not hasattr(error, "detail")


def test_deep_nesting_is_rejected():
    with pytest.raises(ExpressionTooDeepError) as exc:
        parse("(" * 5000 + "1" + ")" * 5000)
    assert str(exc.value).startswith("[EXPRESSION_TOO_DEEP]")
    assert exc.value.stage == "parse"


def test_long_chain_parses_but_does_not_format():
    # The operator loop is iterative; the left-leaning tree it builds is not.
    root = parse("+".join(["1"] * 5000))
    with pytest.raises(ExpressionTooDeepError) as exc:
        format_expression(root)
    assert exc.value.stage == "format"
    with pytest.raises(DiceError):
        parse_request("+".join(["1"] * 5000))

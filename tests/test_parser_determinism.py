from mcp_dice_notation.parser import format_expression, parse, parse_request


def test_parse_is_deterministic():
    text = "(4d6kh3 + d20adv) * 2 - 1"
    a = parse_request(text)
    b = parse_request(text)

    assert a.root == b.root
    assert a.normalized_expression == b.normalized_expression


def test_normalized_expression_parses_to_same_tree():
    text = "[2d10dl1 - -3] ÷ (d% + 4D)"
    root = parse(text)
    assert parse(format_expression(root)) == root

import pytest

from exprcalc.scanner import ScanError, Token, TokenKind, TokenStream, scan

K = TokenKind


def kinds(code: str) -> list[TokenKind]:
    return [token.kind for token in scan(code)]


@pytest.mark.parametrize(
    "code, expected_kinds",
    [
        pytest.param("", [K.END]),
        pytest.param("+", [K.PLUS, K.END]),
        pytest.param("-", [K.MINUS, K.END]),
        pytest.param("/", [K.DIVIDE, K.END]),
        pytest.param("*", [K.MULTIPLY, K.END]),
        pytest.param("**", [K.POWER, K.END]),
        pytest.param("* *", [K.MULTIPLY, K.MULTIPLY, K.END]),
        pytest.param("2 ** 3 ^ 4", [K.NUMBER, K.POWER, K.NUMBER, K.POWER, K.NUMBER, K.END]),
        pytest.param("%!,=|", [K.MODULO, K.FACTORIAL, K.COMMA, K.EQUALS, K.BAR, K.END]),
        pytest.param("[1]", [K.LPAREN, K.NUMBER, K.RPAREN, K.END]),
        pytest.param("+103+1", [K.PLUS, K.NUMBER, K.PLUS, K.NUMBER, K.END]),
        pytest.param(
            "+2 - 3 / 6 * 7",
            [K.PLUS, K.NUMBER, K.MINUS, K.NUMBER, K.DIVIDE, K.NUMBER, K.MULTIPLY, K.NUMBER, K.END],
        ),
        pytest.param(
            "(123.20 + 1.21) * 40",
            [K.LPAREN, K.NUMBER, K.PLUS, K.NUMBER, K.RPAREN, K.MULTIPLY, K.NUMBER, K.END],
        ),
        pytest.param("1 $ 2 @", [K.NUMBER, K.NUMBER, K.END]),
        pytest.param(" \t\n", [K.END]),
    ],
)
def test_scan_kinds(code: str, expected_kinds: list[TokenKind]) -> None:
    assert kinds(code) == expected_kinds


@pytest.mark.parametrize(
    "code, expected_value",
    [
        pytest.param("1", 1.0),
        pytest.param("103", 103.0),
        pytest.param("321.23", 321.23),
        pytest.param(".5", 0.5),
        pytest.param("5.", 5.0),
        pytest.param("1E3", 1000.0),
        pytest.param("2.5E2", 250.0),
    ],
)
def test_scan_numbers(code: str, expected_value: float) -> None:
    tokens = scan(code)
    assert tokens == [
        Token(kind=K.NUMBER, position=0, lexeme=code, value=expected_value),
        Token(kind=K.END, position=len(code)),
    ]


def test_lowercase_exponent_is_not_part_of_number() -> None:
    tokens = scan("1e3")
    assert [t.kind for t in tokens] == [K.NUMBER, K.IDENTIFIER, K.NUMBER, K.END]
    assert tokens[1].lexeme == "e"


def test_identifiers_are_letters_only() -> None:
    tokens = scan("max(min(3, 2), some_Func2(4))")
    identifiers = [t.lexeme for t in tokens if t.kind is K.IDENTIFIER]
    assert identifiers == ["max", "min", "some", "Func"]
    assert kinds("max()") == [K.IDENTIFIER, K.LPAREN, K.RPAREN, K.END]


def test_positions() -> None:
    tokens = scan("12 + abc*(3.5)")
    assert [(t.kind, t.position) for t in tokens] == [
        (K.NUMBER, 0),
        (K.PLUS, 3),
        (K.IDENTIFIER, 5),
        (K.MULTIPLY, 8),
        (K.LPAREN, 9),
        (K.NUMBER, 10),
        (K.RPAREN, 13),
        (K.END, 14),
    ]


def test_end_appears_exactly_once() -> None:
    tokens = scan("1 + 2 * (3)")
    assert [t.kind for t in tokens].count(K.END) == 1
    assert tokens[-1].kind is K.END
    assert all(t.kind is not K.NONE for t in tokens)


@pytest.mark.parametrize("code", ["123.45.3", "1E", "1 + .", "2E3E4"])
def test_malformed_number(code: str) -> None:
    with pytest.raises(ScanError) as exc_info:
        scan(code)
    assert "Malformed number" in exc_info.value.errmsg
    assert str(exc_info.value).startswith("[Scanner error]")


def test_malformed_number_position() -> None:
    with pytest.raises(ScanError) as exc_info:
        scan("10 + 1.2.3")
    assert exc_info.value.position == 5
    assert exc_info.value.excerpt("10 + 1.2.3") == "10 + 1.2.3\n     ^"


def test_stream_keeps_yielding_end() -> None:
    stream = TokenStream(scan("7"))
    assert stream.advance().kind is K.NUMBER
    for _ in range(3):
        assert stream.peek().kind is K.END
        assert stream.advance().kind is K.END
    assert stream.peek().kind is K.END


def test_stream_peek_does_not_advance() -> None:
    stream = TokenStream(scan("1 + 2"))
    assert stream.peek() == stream.peek()
    assert stream.advance().kind is K.NUMBER
    assert stream.peek().kind is K.PLUS

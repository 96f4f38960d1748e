import enum
import logging
from dataclasses import dataclass
from typing import Optional, cast

from exprcalc.scanner import Token, TokenKind, TokenStream
from exprcalc.utils import CalcError, PrintableEnum

logger = logging.getLogger(__name__)


class ParseError(CalcError):
    label = "Parser error"


class NodeKind(PrintableEnum):
    NUMBER = enum.auto()
    PLUS = enum.auto()
    MINUS = enum.auto()
    MULTIPLY = enum.auto()
    DIVIDE = enum.auto()
    MODULO = enum.auto()
    FACTORIAL = enum.auto()
    BAR = enum.auto()
    PREFIX_PLUS = enum.auto()
    PREFIX_MINUS = enum.auto()


@dataclass(frozen=True)
class Node:
    operator: NodeKind
    left: Optional["Node"] = None
    right: Optional["Node"] = None
    value: Optional[float] = None

    @classmethod
    def number(cls, value: float) -> "Node":
        return cls(operator=NodeKind.NUMBER, value=value)


INFIX_BINDING_POWER = {
    TokenKind.PLUS: (1, 2),
    TokenKind.MINUS: (1, 2),
    TokenKind.MULTIPLY: (3, 4),
    TokenKind.DIVIDE: (3, 4),
    TokenKind.MODULO: (3, 4),
}

PREFIX_BINDING_POWER = {
    TokenKind.PLUS: 5,
    TokenKind.MINUS: 5,
}

POSTFIX_BINDING_POWER = {
    TokenKind.FACTORIAL: 7,
}

OPERATORS = {
    TokenKind.PLUS,
    TokenKind.MINUS,
    TokenKind.MULTIPLY,
    TokenKind.DIVIDE,
    TokenKind.MODULO,
    TokenKind.FACTORIAL,
}

INFIX_NODES = {
    TokenKind.PLUS: NodeKind.PLUS,
    TokenKind.MINUS: NodeKind.MINUS,
    TokenKind.MULTIPLY: NodeKind.MULTIPLY,
    TokenKind.DIVIDE: NodeKind.DIVIDE,
    TokenKind.MODULO: NodeKind.MODULO,
}

PREFIX_NODES = {
    TokenKind.PLUS: NodeKind.PREFIX_PLUS,
    TokenKind.MINUS: NodeKind.PREFIX_MINUS,
}

POSTFIX_NODES = {
    TokenKind.FACTORIAL: NodeKind.FACTORIAL,
}

CLOSING_TOKENS = {
    TokenKind.LPAREN: TokenKind.RPAREN,
    TokenKind.BAR: TokenKind.BAR,
}


def parse(tokens: list[Token]) -> Node:
    stream = TokenStream(tokens)
    root = _parse_expr(stream, 0, prev_token=Token(kind=TokenKind.NONE, position=0))
    trailing = stream.peek()
    if trailing.kind is not TokenKind.END:
        raise _unexpected_token_error(trailing)
    return root


def _unexpected_token_error(token: Token) -> ParseError:
    return ParseError(f"Unexpected token {token} at position {token.position}", position=token.position)


def _end_of_input_error(prev_token: Token, token: Token) -> ParseError:
    logger.debug("Operand expected: prev_token=%s token=%s", prev_token, token)
    if prev_token.kind in OPERATORS:
        return ParseError(
            f"Operator {prev_token.kind} at position {prev_token.position} expects an operand, but gets end of input",
            position=prev_token.position,
        )
    elif prev_token.kind is TokenKind.NONE:
        return ParseError("Empty expression", position=token.position)
    else:
        return ParseError(
            f"Unexpected end of input after {prev_token.kind} at position {prev_token.position}",
            position=token.position,
        )


def _parse_enclosed(stream: TokenStream, opening: Token) -> Node:
    inner = _parse_expr(stream, 0, prev_token=opening)
    closing = stream.advance()
    if closing.kind is not CLOSING_TOKENS[opening.kind]:
        raise ParseError(f"Unmatched {opening.kind} at position {opening.position}", position=opening.position)
    return inner


def _parse_lhs(stream: TokenStream, prev_token: Token) -> Node:
    token = stream.advance()
    if token.kind is TokenKind.NUMBER:
        return Node.number(cast(float, token.value))
    elif token.kind is TokenKind.LPAREN:
        return _parse_enclosed(stream, token)
    elif token.kind is TokenKind.BAR:
        return Node(operator=NodeKind.BAR, left=_parse_enclosed(stream, token))
    elif token.kind is TokenKind.END:
        raise _end_of_input_error(prev_token, token)
    elif token.kind in OPERATORS:
        r_bp = PREFIX_BINDING_POWER.get(token.kind)
        if r_bp is None:
            raise ParseError(
                f"Operator {token.kind} at position {token.position} cannot be used as a prefix",
                position=token.position,
            )
        operand = _parse_expr(stream, r_bp, prev_token=token)
        return Node(operator=PREFIX_NODES[token.kind], left=operand)
    else:
        raise _unexpected_token_error(token)


def _parse_expr(stream: TokenStream, min_bp: int, prev_token: Token) -> Node:
    lhs = _parse_lhs(stream, prev_token)

    while True:
        op = stream.peek()
        if op.kind is TokenKind.END:
            break
        if op.kind not in OPERATORS and op.kind not in CLOSING_TOKENS.values():
            raise _unexpected_token_error(op)

        if op.kind in POSTFIX_BINDING_POWER:
            if POSTFIX_BINDING_POWER[op.kind] < min_bp:
                break
            stream.advance()
            lhs = Node(operator=POSTFIX_NODES[op.kind], left=lhs)
            continue

        if op.kind in INFIX_BINDING_POWER:
            l_bp, r_bp = INFIX_BINDING_POWER[op.kind]
            if l_bp < min_bp:
                break
            stream.advance()
            rhs = _parse_expr(stream, r_bp, prev_token=op)
            lhs = Node(operator=INFIX_NODES[op.kind], left=lhs, right=rhs)
            continue

        break

    return lhs


def format_tree(node: Optional[Node]) -> str:
    """Indented dump of a tree, one node per line, children below their parent"""
    lines: list[str] = []
    stack: list[tuple[Optional[Node], int]] = [(node, 0)]
    while stack:
        current, depth = stack.pop()
        pad = "  " * depth
        if current is None:
            lines.append(f"{pad}<empty>")
        elif current.operator is NodeKind.NUMBER:
            lines.append(f"{pad}{current.operator} {current.value!r}")
        else:
            lines.append(f"{pad}{current.operator}")
            # right first so the left child is printed first
            for child in (current.right, current.left):
                if child is not None:
                    stack.append((child, depth + 1))
    return "\n".join(lines)

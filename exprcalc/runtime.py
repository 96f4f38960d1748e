import logging
import math
import operator
from typing import Callable, Optional

from exprcalc.parser import Node, NodeKind, format_tree, parse
from exprcalc.scanner import scan
from exprcalc.utils import CalcError

logger = logging.getLogger(__name__)

# 171! does not fit into a float
MAX_FACTORIAL_OPERAND = 170


class EvaluationError(CalcError):
    label = "Evaluation error"


def build_tree(code: str) -> Node:
    tokens = scan(code)
    try:
        tree = parse(tokens)
    except RecursionError:
        raise CalcError("Expression is nested too deeply") from None
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("Parsed %r into:\n%s", code, format_tree(tree))
    return tree


def evaluate(code: str) -> float:
    return evaluate_tree(build_tree(code))


def evaluate_tree(node: Optional[Node]) -> float:
    """Post-order walk with an explicit stack, long operator chains build left-deep trees.

    An absent subtree evaluates to 0.
    """
    results: list[float] = []
    stack: list[tuple[Optional[Node], bool]] = [(node, False)]
    while stack:
        current, children_done = stack.pop()
        if current is None:
            results.append(0.0)
        elif current.operator is NodeKind.NUMBER:
            if current.value is None:
                raise EvaluationError("Internal error, number node without a value")
            results.append(current.value)
        elif current.operator in BINARY_IMPLS:
            if children_done:
                right_res = results.pop()
                left_res = results.pop()
                results.append(BINARY_IMPLS[current.operator](left_res, right_res))
            else:
                stack.append((current, True))
                stack.append((current.right, False))
                stack.append((current.left, False))
        elif current.operator in UNARY_IMPLS:
            if children_done:
                results.append(UNARY_IMPLS[current.operator](results.pop()))
            else:
                stack.append((current, True))
                stack.append((current.left, False))
        else:
            raise EvaluationError(f"Internal error, unexpected node {current.operator}")
    return results.pop()


def divide(a: float, b: float) -> float:
    """Float division that yields inf or nan on a zero divisor instead of raising"""
    if b != 0.0:
        return a / b
    if a == 0.0 or math.isnan(a):
        return math.nan
    return math.copysign(math.inf, a) * math.copysign(1.0, b)


def modulo(a: float, b: float) -> float:
    """Floating remainder carrying the sign of the dividend"""
    if b == 0.0 or math.isinf(a):
        return math.nan
    return math.fmod(a, b)


def factorial(n: float) -> float:
    if n < 0 or not (math.isinf(n) or n.is_integer()):
        raise EvaluationError(f"Factorial is only defined for non-negative integers, got {n}")
    if n > MAX_FACTORIAL_OPERAND:
        return math.inf
    result = 1.0
    for i in range(2, int(n) + 1):
        result *= i
    return result


BINARY_IMPLS: dict[NodeKind, Callable[[float, float], float]] = {
    NodeKind.PLUS: operator.add,
    NodeKind.MINUS: operator.sub,
    NodeKind.MULTIPLY: operator.mul,
    NodeKind.DIVIDE: divide,
    NodeKind.MODULO: modulo,
}

UNARY_IMPLS: dict[NodeKind, Callable[[float], float]] = {
    NodeKind.PREFIX_PLUS: lambda a: a,
    NodeKind.PREFIX_MINUS: operator.neg,
    NodeKind.BAR: abs,
    NodeKind.FACTORIAL: factorial,
}

"""
Boolean expression trees over region indices.

A cell is defined by a logical combination of its regions.  The tree has
four node kinds:

- ``Leaf(i)``: membership of region ``i``
- ``And(left, right)``: intersection, spelled ``^`` (or ``&``)
- ``Or(left, right)``: union, spelled ``|``
- ``Not(operand)``: complement, spelled ``~``

Trees are built directly or with the operators, e.g.
``Leaf(0) ^ ~Leaf(1) | Leaf(2)``.  Python's precedence applies: ``~`` binds
tightest, then ``&``, then ``^``, then ``|``.  There is no text parser.

Copyright (c) 2025 Richard DeVaul
MIT License
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, FrozenSet

from csgeom.errors import InvalidParameterError


# =============================================================================
# Nodes
# =============================================================================

@dataclass(frozen=True)
class Expression:
    """Base class for all expression nodes."""

    def __xor__(self, other: "Expression") -> "And":
        return And(self, _check_node(other))

    def __and__(self, other: "Expression") -> "And":
        return And(self, _check_node(other))

    def __or__(self, other: "Expression") -> "Or":
        return Or(self, _check_node(other))

    def __invert__(self) -> "Not":
        return Not(self)

    def accept(self, visitor: "ExpressionVisitor") -> Any:
        """Accept a visitor for traversal."""
        method_name = f"visit_{self.__class__.__name__}"
        method = getattr(visitor, method_name, visitor.generic_visit)
        return method(self)


@dataclass(frozen=True)
class Leaf(Expression):
    """Reference to a region by its position in the cell's region list."""
    index: int

    def __post_init__(self):
        if isinstance(self.index, bool) or not isinstance(self.index, int) or self.index < 0:
            raise InvalidParameterError(f"region index must be a non-negative int, got {self.index!r}")


@dataclass(frozen=True)
class And(Expression):
    """Intersection of two sub-expressions."""
    left: Expression
    right: Expression


@dataclass(frozen=True)
class Or(Expression):
    """Union of two sub-expressions."""
    left: Expression
    right: Expression


@dataclass(frozen=True)
class Not(Expression):
    """Complement of a sub-expression."""
    operand: Expression


class ExpressionVisitor:
    """Base class for expression visitors."""

    def generic_visit(self, node: Expression) -> Any:
        raise NotImplementedError(f"No visitor for {node.__class__.__name__}")


def _check_node(node) -> Expression:
    if not isinstance(node, Expression):
        raise TypeError(f"expected an Expression, got {type(node).__name__}")
    return node


# =============================================================================
# Evaluation
# =============================================================================

def evaluate(expr: Expression, leaf_value: Callable[[int], bool]) -> bool:
    """Evaluate ``expr`` with each leaf ``i`` resolved by ``leaf_value(i)``.

    AND and OR short-circuit; leaf lookups must be free of side effects.
    """
    if isinstance(expr, Leaf):
        return bool(leaf_value(expr.index))
    elif isinstance(expr, And):
        return evaluate(expr.left, leaf_value) and evaluate(expr.right, leaf_value)
    elif isinstance(expr, Or):
        return evaluate(expr.left, leaf_value) or evaluate(expr.right, leaf_value)
    elif isinstance(expr, Not):
        return not evaluate(expr.operand, leaf_value)
    else:
        raise TypeError(f"Unknown expression node: {type(expr).__name__}")


class _IndexCollector(ExpressionVisitor):

    def visit_Leaf(self, node: Leaf) -> FrozenSet[int]:
        return frozenset((node.index,))

    def visit_And(self, node: And) -> FrozenSet[int]:
        return node.left.accept(self) | node.right.accept(self)

    visit_Or = visit_And

    def visit_Not(self, node: Not) -> FrozenSet[int]:
        return node.operand.accept(self)


class _InfixFormatter(ExpressionVisitor):

    def visit_Leaf(self, node: Leaf) -> str:
        return str(node.index)

    def visit_And(self, node: And) -> str:
        return f"({node.left.accept(self)} ^ {node.right.accept(self)})"

    def visit_Or(self, node: Or) -> str:
        return f"({node.left.accept(self)} | {node.right.accept(self)})"

    def visit_Not(self, node: Not) -> str:
        return f"~{node.operand.accept(self)}"


def referenced_indices(expr: Expression) -> FrozenSet[int]:
    """All region indices referenced by ``expr``."""
    return _check_node(expr).accept(_IndexCollector())


def to_infix(expr: Expression) -> str:
    """Fully parenthesized infix rendering, for messages and logs."""
    return _check_node(expr).accept(_InfixFormatter())


def intersection(*exprs: Expression) -> Expression:
    """Left-folded ``And`` of one or more expressions."""
    return _fold(And, exprs)


def union(*exprs: Expression) -> Expression:
    """Left-folded ``Or`` of one or more expressions."""
    return _fold(Or, exprs)


def _fold(node_type, exprs):
    if not exprs:
        raise ValueError(f"{node_type.__name__} needs at least one operand")
    result = _check_node(exprs[0])
    for e in exprs[1:]:
        result = node_type(result, _check_node(e))
    return result


__all__ = [
    'Expression', 'Leaf', 'And', 'Or', 'Not', 'ExpressionVisitor',
    'evaluate', 'referenced_indices', 'to_infix', 'intersection', 'union',
]

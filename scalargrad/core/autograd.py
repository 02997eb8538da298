"""
Scalar autograd engine.

Every Node wraps a single float and remembers which operation produced it
and from which operand nodes. compute_gradients() walks that graph backwards
and accumulates d(root)/d(node) into each node's gradient.

    x = constant(2.0)
    y = constant(3.0)
    z = constant(4.0)

    out = add(multiply(x, y), z)
    compute_gradients(out)

    x.gradient -> 3.0
    y.gradient -> 2.0
    z.gradient -> 1.0

Values are computed eagerly when a node is built and are never recomputed.
After update() moves a parameter, every node previously derived from it
still holds the old value; rebuild the expression to see the new one.
"""

import math
import sys
from enum import Enum
from typing import Optional, TextIO, Union


class Operation(Enum):
    """Tag of the operation that produced a derived node."""

    ADD = "add"
    MULTIPLY = "multiply"
    POWER = "power"
    RELU = "relu"


class Node:
    """Scalar value with a derivative accumulator and its producing operation."""

    __slots__ = ('value', 'gradient', 'operation', 'operands')

    def __init__(self, value, operation: Optional[Operation] = None, operands=()):
        self.value = float(value)
        self.gradient = 0.0
        self.operation = operation
        self.operands = tuple(operands)

    def __repr__(self):
        op = self.operation.value if self.operation else "leaf"
        return f"Node(value={self.value:.4f}, gradient={self.gradient:.4f}, op={op})"

    @property
    def is_leaf(self) -> bool:
        return self.operation is None

    # -- method forms of the graph-building operations --

    def add(self, other):
        return add(self, other)

    def subtract(self, other):
        return subtract(self, other)

    def multiply(self, other):
        return multiply(self, other)

    def power(self, exponent):
        return power(self, exponent)

    def squared(self):
        return squared(self)

    def relu(self):
        return relu(self)

    # -- operator sugar --

    def __add__(self, other):
        return add(self, other)

    def __radd__(self, other):
        return add(other, self)

    def __sub__(self, other):
        return subtract(self, other)

    def __rsub__(self, other):
        return subtract(other, self)

    def __mul__(self, other):
        return multiply(self, other)

    def __rmul__(self, other):
        return multiply(other, self)

    def __pow__(self, other):
        return power(self, other)

    def __rpow__(self, other):
        return power(other, self)

    def __neg__(self):
        return multiply(self, constant(-1.0))


Operand = Union[Node, int, float]


def _as_node(x: Operand) -> Node:
    return x if isinstance(x, Node) else constant(x)


def _powf(base: float, exponent: float) -> float:
    """Real exponentiation with C pow() results instead of exceptions or complex numbers."""
    try:
        return math.pow(base, exponent)
    except ValueError:
        # 0 ** negative, or negative ** non-integer
        if base == 0.0:
            return math.inf
        return math.nan
    except OverflowError:
        if base < 0 and exponent.is_integer() and exponent % 2 == 1:
            return -math.inf
        return math.inf


# ============================================================================
# GRAPH-BUILDING OPERATIONS
# ============================================================================

def constant(x) -> Node:
    """Leaf node holding x. Parameters and inputs are both constants."""
    return Node(x)


def add(a: Operand, b: Operand) -> Node:
    a, b = _as_node(a), _as_node(b)
    return Node(a.value + b.value, Operation.ADD, (a, b))


def subtract(a: Operand, b: Operand) -> Node:
    """a + (b * -1). Not a primitive: adds a -1 constant and the negated b to the graph."""
    a, b = _as_node(a), _as_node(b)
    return add(a, multiply(b, constant(-1.0)))


def multiply(a: Operand, b: Operand) -> Node:
    a, b = _as_node(a), _as_node(b)
    return Node(a.value * b.value, Operation.MULTIPLY, (a, b))


def power(base: Operand, exponent: Operand) -> Node:
    """
    base ** exponent using real floating-point exponentiation.

    A negative base with a non-integer exponent gives NaN, a zero base with a
    negative exponent gives inf. Neither is an error.

    Only the base is differentiable: compute_gradients() never writes a
    contribution into the exponent node.
    """
    base, exponent = _as_node(base), _as_node(exponent)
    return Node(_powf(base.value, exponent.value), Operation.POWER, (base, exponent))


def squared(v: Operand) -> Node:
    return power(v, constant(2.0))


def relu(v: Operand) -> Node:
    v = _as_node(v)
    return Node(max(0.0, v.value), Operation.RELU, (v,))


# ============================================================================
# ACCESSORS
# ============================================================================

def value(node: Node) -> float:
    return node.value


def gradient(node: Node) -> float:
    """
    Last accumulated derivative of the most recent compute_gradients() root.

    Reads 0.0 if no propagation has reached this node yet. There is no
    staleness tracking.
    """
    return node.gradient


# ============================================================================
# GRADIENT PROPAGATION
# ============================================================================

def _topological_order(root: Node) -> list[Node]:
    """Nodes reachable from root, every operand before the nodes that use it."""
    order = []
    visited = set()
    stack = [(root, False)]
    while stack:
        node, expanded = stack.pop()
        if expanded:
            order.append(node)
            continue
        if id(node) in visited:
            continue
        visited.add(id(node))
        stack.append((node, True))
        # reversed so operand[0] is explored first
        for operand in reversed(node.operands):
            if id(operand) not in visited:
                stack.append((operand, False))
    return order


def reset_gradients(root: Node) -> None:
    """Set gradient to 0.0 on root and everything reachable from it."""
    for node in _topological_order(root):
        node.gradient = 0.0


def _propagate(node: Node) -> None:
    """Push node.gradient into its operands by the operation's local derivative."""
    op = node.operation
    g = node.gradient

    if op is None:
        return

    if op is Operation.ADD:
        for operand in node.operands:
            operand.gradient += g

    elif op is Operation.MULTIPLY:
        lhs, rhs = node.operands
        lhs.gradient += rhs.value * g
        rhs.gradient += lhs.value * g

    elif op is Operation.POWER:
        # exponent treated as a constant
        base, exponent = node.operands
        base.gradient += exponent.value * _powf(base.value, exponent.value - 1.0) * g

    elif op is Operation.RELU:
        (operand,) = node.operands
        operand.gradient += g if operand.value > 0 else 0.0


def compute_gradients(root: Node) -> None:
    """
    Reverse-mode differentiation of root with respect to every node it depends on.

    Resets all reachable gradients to 0, seeds root.gradient = 1, then visits
    nodes in reverse topological order so each one has received the
    contributions of all its users before pushing into its own operands.
    A node used along several paths ends up with the sum over those paths.
    """
    order = _topological_order(root)
    for node in order:
        node.gradient = 0.0

    root.gradient = 1.0
    for node in reversed(order):
        _propagate(node)


# ============================================================================
# PARAMETER UPDATE
# ============================================================================

def update(node: Node, learning_rate: float) -> None:
    """
    One gradient-descent step: value -= gradient * learning_rate.

    Uses whatever gradient the node currently holds. Before any
    compute_gradients() call that is 0.0 and the update is a no-op.
    """
    node.value -= node.gradient * learning_rate


# ============================================================================
# DEBUG
# ============================================================================

def dump(node: Node, file: Optional[TextIO] = None) -> None:
    """Print value and gradient of node and every node under it. Debug only."""
    out = file if file is not None else sys.stdout
    stack = [(node, 0)]
    while stack:
        current, depth = stack.pop()
        op = current.operation.value if current.operation else "leaf"
        print(
            f"{'  ' * depth}value = {current.value}, gradient = {current.gradient} ({op})",
            file=out,
        )
        for operand in reversed(current.operands):
            stack.append((operand, depth + 1))

from scalargrad.core.autograd import (
    Node,
    Operation,
    constant,
    add,
    subtract,
    multiply,
    power,
    squared,
    relu,
    value,
    gradient,
    compute_gradients,
    reset_gradients,
    update,
    dump,
)

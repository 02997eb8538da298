"""
scalargrad quickstart: build an expression, differentiate it, train a tiny net.

    python examples/quickstart.py
"""

import scalargrad
from scalargrad.config import ScalargradConfig
from scalargrad.core.autograd import (
    add,
    compute_gradients,
    constant,
    dump,
    multiply,
    relu,
    squared,
)


# -- Step 1: Build an expression graph -------------------------------------
# Every node computes its value as soon as it is created.

x = constant(2.0)
y = constant(3.0)
z = constant(4.0)

out = relu(add(multiply(x, y), squared(z)))  # relu(x*y + z^2) = 22
print(f"out = {out.value}")


# -- Step 2: Differentiate --------------------------------------------------

compute_gradients(out)
print(f"d(out)/dx = {x.gradient}")  # y = 3
print(f"d(out)/dy = {y.gradient}")  # x = 2
print(f"d(out)/dz = {z.gradient}")  # 2z = 8
print()

dump(out)
print()


# -- Step 3: Train a linear network on y = x0 + x1 --------------------------

scalargrad.init(ScalargradConfig(layer_sizes=[2, 1], seed=7, iterations=1000, log_every=0))

from scalargrad.core.nn import NeuralNet
from scalargrad.core.training import train

net = NeuralNet.from_config(scalargrad.get_config())
stats = train(net)

print(f"loss: {stats['initial_loss']:.4f} -> {stats['final_loss']:.4f}")
net.dump()
print(f"9 + 4 = {net.forward([9.0, 4.0])[0].value:.3f}")

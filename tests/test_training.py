"""
Tests for the training loop, the MSE loss, and process-wide configuration.
"""

import pytest


@pytest.fixture
def fast_config():
    from scalargrad.config import ScalargradConfig
    return ScalargradConfig(
        layer_sizes=[2, 1],
        seed=11,
        learning_rate=1e-4,
        iterations=200,
        log_every=50,
    )


@pytest.fixture
def uninitialized(monkeypatch):
    import scalargrad
    monkeypatch.setattr(scalargrad, "_config", None)
    monkeypatch.setattr(scalargrad, "_initialized", False)


# ============================================================================
# CONFIG TESTS
# ============================================================================

class TestConfig:
    def test_defaults(self):
        from scalargrad.config import ScalargradConfig
        config = ScalargradConfig()
        assert config.layer_sizes == [2, 1]
        assert config.learning_rate == 1e-4
        assert config.iterations == 1000

    def test_get_config_before_init_raises(self, uninitialized):
        import scalargrad
        with pytest.raises(RuntimeError):
            scalargrad.get_config()

    def test_init_installs_config(self, uninitialized, fast_config):
        import scalargrad
        scalargrad.init(fast_config)
        assert scalargrad.get_config() is fast_config

    def test_init_rejects_single_layer_size(self, uninitialized):
        import scalargrad
        from scalargrad.config import ScalargradConfig
        with pytest.raises(ValueError):
            scalargrad.init(ScalargradConfig(layer_sizes=[2]))


# ============================================================================
# LOSS TESTS
# ============================================================================

class TestMeanSquaredError:
    def test_value(self):
        from scalargrad.core.autograd import constant
        from scalargrad.core.training import mean_squared_error
        loss = mean_squared_error(
            [constant(1.0), constant(4.0)],
            [constant(3.0), constant(4.0)],
        )
        assert loss.value == pytest.approx(2.0)  # ((1-3)^2 + 0) / 2

    def test_gradient_flows_through_subtract(self):
        from scalargrad.core.autograd import compute_gradients, constant
        from scalargrad.core.training import mean_squared_error
        p = constant(1.0)
        t = constant(3.0)
        loss = mean_squared_error([p], [t])
        compute_gradients(loss)
        assert p.gradient == pytest.approx(-4.0)  # 2 * (1 - 3)
        assert t.gradient == pytest.approx(4.0)

    def test_length_mismatch(self):
        from scalargrad.core.autograd import constant
        from scalargrad.core.training import mean_squared_error
        with pytest.raises(ValueError):
            mean_squared_error([constant(1.0)], [])

    def test_empty(self):
        from scalargrad.core.training import mean_squared_error
        with pytest.raises(ValueError):
            mean_squared_error([], [])


# ============================================================================
# TRAINING TESTS
# ============================================================================

class TestTrain:
    def test_linear_model_reduces_loss(self):
        """predicted = w*x + b on a single pair, 1000 steps at lr 1e-4."""
        from scalargrad.config import ScalargradConfig
        from scalargrad.core.nn import NeuralNet, UniformInitializer
        from scalargrad.core.training import Sample, train

        net = NeuralNet([1, 1], UniformInitializer(seed=3))
        config = ScalargradConfig(layer_sizes=[1, 1], learning_rate=1e-4, iterations=1000, log_every=0)
        stats = train(net, [Sample((2.0,), 10.0)], config)

        assert stats["iterations"] == 1000
        assert len(stats["losses"]) == 1000
        assert stats["mean_loss"] < stats["initial_loss"]
        assert stats["final_loss"] < stats["initial_loss"]

    def test_default_dataset(self, fast_config):
        from scalargrad.core.nn import NeuralNet
        from scalargrad.core.training import train
        net = NeuralNet.from_config(fast_config)
        stats = train(net, config=fast_config)
        assert stats["iterations"] == 200
        assert stats["final_loss"] < stats["initial_loss"]

    def test_every_parameter_moves(self, fast_config):
        from scalargrad.core.nn import NeuralNet
        from scalargrad.core.training import train
        net = NeuralNet.from_config(fast_config)
        before = [p.value for p in net.parameters()]
        train(net, config=fast_config)
        after = [p.value for p in net.parameters()]
        assert all(b != a for b, a in zip(before, after))

    def test_uses_global_config(self, uninitialized, fast_config):
        import scalargrad
        from scalargrad.core.nn import NeuralNet
        from scalargrad.core.training import train
        scalargrad.init(fast_config)
        stats = train(NeuralNet.from_config(fast_config))
        assert stats["iterations"] == fast_config.iterations

    def test_without_config_or_init_raises(self, uninitialized):
        from scalargrad.core.nn import NeuralNet
        from scalargrad.core.training import train
        with pytest.raises(RuntimeError):
            train(NeuralNet([2, 1]))

    def test_respects_cancellation(self, fast_config):
        from scalargrad.core.nn import NeuralNet
        from scalargrad.core.training import train
        calls = []

        def cancel_check():
            calls.append(1)
            return len(calls) > 3

        stats = train(NeuralNet.from_config(fast_config), config=fast_config, cancel_check=cancel_check)
        assert stats["iterations"] == 3

    def test_cancelled_before_any_step(self, fast_config):
        from scalargrad.core.nn import NeuralNet
        from scalargrad.core.training import train
        stats = train(NeuralNet.from_config(fast_config), config=fast_config, cancel_check=lambda: True)
        assert stats["iterations"] == 0
        assert stats["final_loss"] is None
        assert stats["losses"] == []

    def test_empty_dataset(self, fast_config):
        from scalargrad.core.nn import NeuralNet
        from scalargrad.core.training import train
        with pytest.raises(ValueError):
            train(NeuralNet([2, 1]), [], fast_config)

    def test_multi_output_network_rejected(self, fast_config):
        from scalargrad.core.nn import NeuralNet
        from scalargrad.core.training import train
        with pytest.raises(ValueError):
            train(NeuralNet([2, 2]), config=fast_config)

    def test_logs_progress(self, fast_config, caplog):
        import logging
        from scalargrad.core.nn import NeuralNet
        from scalargrad.core.training import train
        with caplog.at_level(logging.INFO, logger="scalargrad.core.training"):
            train(NeuralNet.from_config(fast_config), config=fast_config)
        messages = [r.getMessage() for r in caplog.records]
        # steps 0, 50, 100, 150 plus the summary line
        assert sum(1 for m in messages if m.startswith("[Train] step=")) == 4
        assert any(m.startswith("[Train] Done") for m in messages)

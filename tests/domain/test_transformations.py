import logging

import numpy as np
import pytest

from core.domain.transformations import (
    Chain,
    CompiledExpression,
    ParameterParseError,
    Step,
    WeightPositionError,
)
from core.domain.transforms import ExpressionError, UnknownTransformError


class TestStep:
    def test_explicit_parameters(self) -> None:
        step = Step.parse("narrow 0.1, 0.9")
        assert step.name == "narrow"
        assert step.parameters == (0.1, 0.9)

    def test_missing_parameters_take_defaults(self) -> None:
        assert Step.parse("narrow 0.1").parameters == (0.1, 0.8)
        assert Step.parse("narrow").parameters == (0.2, 0.8)

    def test_excess_parameters_warn(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING):
            step = Step.parse("invert 3")
        assert step.parameters == ()
        assert "Too many parameters" in caplog.text

    def test_non_numeric_parameter(self) -> None:
        with pytest.raises(ParameterParseError) as excinfo:
            Step.parse("exp abc")
        assert "abc" in str(excinfo.value)
        assert "exp" in str(excinfo.value)

    def test_unknown_transform(self) -> None:
        with pytest.raises(UnknownTransformError, match="bogus"):
            Step.parse("bogus 1")

    def test_arguments_keep_written_values(self) -> None:
        step = Step.parse("inward 3")
        assert step.arguments == (3.0,)
        assert step.parameters == (-3.0,)
        assert str(step) == "inward 3.0"

    def test_str(self) -> None:
        assert str(Step.parse("narrow")) == "narrow 0.2, 0.8"
        assert str(Step.parse("sin")) == "sin"

    def test_seeded_random_is_reproducible(self) -> None:
        first = Step.parse("random 4", np.random.default_rng(11))
        second = Step.parse("random 4", np.random.default_rng(11))
        assert first.parameters == second.parameters
        assert len(first.parameters) == 6


class TestChain:
    def test_serial_evaluation(self) -> None:
        chain = Chain.parse("narrow 0.2, 0.8 > invert")
        assert chain.evaluate(0.5) == pytest.approx(0.5)
        assert chain.evaluate(0.35) == pytest.approx(0.75)

    def test_default_weight(self) -> None:
        assert Chain.parse("triangle > invert").weight == 1.0

    def test_terminal_weight_sets_chain_weight(self) -> None:
        chain = Chain.parse("triangle > weight 0.4")
        assert chain.weight == pytest.approx(0.4)

    @pytest.mark.parametrize("text", ["weight 2 > invert", "x > weight 2 > invert"])
    def test_weight_must_be_last(self, text: str) -> None:
        with pytest.raises(WeightPositionError):
            Chain.parse(text)

    def test_empty_chain(self) -> None:
        with pytest.raises(ExpressionError):
            Chain(())

    def test_weight_step_scales_running_value(self) -> None:
        assert Chain.parse("x > weight 3").evaluate(0.5) == pytest.approx(1.5)


class TestCompiledExpression:
    @pytest.mark.parametrize("x", [0.0, 0.2, 0.5, 0.9, 1.0])
    def test_parallel_average(self, x: float) -> None:
        expression = CompiledExpression.parse("x & invert")
        assert expression.total_weight == 2
        assert expression.evaluate(x) == pytest.approx(0.5)

    def test_weight_applies_twice(self) -> None:
        # the weight step scales its chain and also weights it in the average
        expression = CompiledExpression.parse("x > weight 3 & invert")
        assert expression.total_weight == pytest.approx(4)
        assert expression.evaluate(0.0) == pytest.approx(0.25)
        assert expression.evaluate(0.5) == pytest.approx(0.5)
        assert expression.evaluate(1.0) == pytest.approx(0.75)

    def test_single_weighted_chain_cancels(self) -> None:
        assert CompiledExpression.parse("x > weight 2").evaluate(0.3) == pytest.approx(0.3)

    @pytest.mark.parametrize("text", ["x > weight 0", "x > weight 1 & invert > weight -1"])
    def test_zero_total_weight(self, text: str) -> None:
        with pytest.raises(ExpressionError):
            CompiledExpression.parse(text)

    def test_cost_counters(self) -> None:
        expression = CompiledExpression.parse("triangle > invert & sin")
        assert expression.step_count == 3
        assert expression.cheap_step_count == 2
        assert not expression.is_fast

    @pytest.mark.parametrize(
        "text, fast",
        [
            ("x", True),
            ("triangle > invert > narrow", True),
            ("x > x & x > x", False),
            ("sin", False),
            ("exp 3", False),
            ("random 4 > repeat 3", True),
        ],
    )
    def test_is_fast(self, text: str, fast: bool) -> None:
        assert CompiledExpression.parse(text).is_fast is fast

    def test_definition_is_normalized_with_parameters(self) -> None:
        expression = CompiledExpression.parse("  Triangle 0.3 >> invert & exp 3 ")
        assert expression.definition == "triangle 0.3 > invert & exp 3.0"

    def test_empty_definition_is_identity(self) -> None:
        expression = CompiledExpression.parse("")
        assert expression.definition == "x"
        assert expression.evaluate(0.42) == 0.42

    def test_definition_recompiles_to_same_curve(self) -> None:
        expression = CompiledExpression.parse("inward 3 > peak 0.3 & cos > weight 0.5")
        again = CompiledExpression.parse(expression.definition)
        for x in np.linspace(0, 1, 21):
            assert again.evaluate(float(x)) == pytest.approx(expression.evaluate(float(x)))

    def test_errors_abort_whole_expression(self) -> None:
        with pytest.raises(UnknownTransformError, match="tirangle"):
            CompiledExpression.parse("x & tirangle 0.3")

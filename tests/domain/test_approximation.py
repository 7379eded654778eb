import numpy as np
import pytest

from core.domain.approximation import Approximation
from core.domain.transformations import CompiledExpression
from core.domain.value_objects import BoundedRange, RepeatPolicy


def expression(text: str) -> CompiledExpression:
    return CompiledExpression.parse(text)


class TestApproximation:
    def test_table_layout(self) -> None:
        table = Approximation(expression("x"), 10)
        assert len(table) == 12
        assert table.samples[-1] == table.samples[-2] == pytest.approx(1.0)
        assert np.allclose(table.samples[:11], np.linspace(0, 1, 11))

    def test_interpolates_between_samples(self) -> None:
        table = Approximation(expression("x"), 10)
        assert table.evaluate(0.55) == pytest.approx(0.55)
        assert table.evaluate(1.0) == pytest.approx(1.0)
        assert table.evaluate(0.0) == pytest.approx(0.0)

    def test_matches_expression_at_nodes(self) -> None:
        exact = expression("triangle 0.3")
        table = Approximation(exact, 10)
        for i in range(11):
            assert table.evaluate(i / 10) == pytest.approx(exact.evaluate(i / 10))

    def test_error_bound_for_cheap_expression(self) -> None:
        exact = expression("trapez 0.2, 0.6 > invert & triangle 0.3 > narrow 0.1, 0.9")
        table = Approximation(exact, 1000)
        xs = np.linspace(0, 1, 10000)
        deviation = max(abs(table.evaluate(float(x)) - exact.evaluate(float(x))) for x in xs)
        assert deviation < 1e-3

    def test_initial_output_range(self) -> None:
        output = BoundedRange(0, 100, RepeatPolicy.NONE)
        table = Approximation(expression("x"), 10, output)
        assert table.evaluate(0.5) == pytest.approx(50)

    def test_rescale(self) -> None:
        table = Approximation(expression("sin"), 100)
        unit = BoundedRange(0, 1, RepeatPolicy.NONE)
        wide = BoundedRange(10, 20, RepeatPolicy.NONE)
        table.rescale(unit, wide)
        assert table.evaluate(0.5) == pytest.approx(20)
        assert table.minimum == pytest.approx(10)
        assert table.maximum == pytest.approx(20)
        table.rescale(wide, unit)
        assert table.evaluate(0.5) == pytest.approx(1.0)
        assert table.evaluate(0.25) == pytest.approx(np.sin(np.pi / 4), abs=1e-3)

    def test_samples_outside_output_are_kept_raw(self) -> None:
        output = BoundedRange(0, 1, RepeatPolicy.NONE)
        table = Approximation(expression("constant 2"), 10, output)
        assert table.maximum == pytest.approx(2.0)
        wide = BoundedRange(0, 10, RepeatPolicy.NONE)
        table.rescale(output, wide)
        table.rescale(wide, output)
        assert np.allclose(table.samples, 2.0)

    def test_invalid_resolution(self) -> None:
        with pytest.raises(ValueError):
            Approximation(expression("x"), 0)

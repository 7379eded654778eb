import pytest

from core.domain.grammar import (
    IDENTITY_DEFINITION,
    normalize_definition,
    split_chains,
    split_steps,
    split_tokens,
)


class TestNormalizeDefinition:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("  > Triangle 0.3 >> invert > > exp 3 & ", "triangle 0.3 > invert > exp 3"),
            ("a > & b", "a & b"),
            ("a &> b", "a & b"),
            ("a & & b", "a & b"),
            ("a >& > b", "a & b"),
            ("\tsin\n>\tinvert", "sin > invert"),
            ("SIN", "sin"),
        ],
    )
    def test_canonical_form(self, raw: str, expected: str) -> None:
        assert normalize_definition(raw) == expected

    @pytest.mark.parametrize("raw", ["", "   ", " >& ", "\n\t"])
    def test_empty_becomes_identity(self, raw: str) -> None:
        assert normalize_definition(raw) == IDENTITY_DEFINITION

    @pytest.mark.parametrize(
        "raw",
        [
            "triangle 0.3 > invert > exp 3 & sin weight 0.4",
            ">> a >> > b &>& c &",
            "\tNarrow 0.2, 0.8\n> > EXP -2",
            "",
        ],
    )
    def test_idempotent(self, raw: str) -> None:
        once = normalize_definition(raw)
        assert normalize_definition(once) == once


class TestSplitting:
    def test_split_chains(self) -> None:
        assert split_chains("a > b & c") == ["a > b", "c"]

    def test_split_steps(self) -> None:
        assert split_steps("narrow 0.2, 0.8 > invert") == ["narrow 0.2, 0.8", "invert"]

    @pytest.mark.parametrize("step", ["narrow 0.2, 0.8", "narrow 0.2,0.8", " narrow  0.2 ,0.8 "])
    def test_split_tokens(self, step: str) -> None:
        assert split_tokens(step) == ["narrow", "0.2", "0.8"]

    def test_split_tokens_without_parameters(self) -> None:
        assert split_tokens("invert") == ["invert"]

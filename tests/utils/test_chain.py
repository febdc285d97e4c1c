# -*- coding: utf-8 -*-
"""Tests for utils/chain.py - causal chains and their reduction."""

import pytest

from utils.chain import CausalChain, Cause, reduce
from utils.errors import UserError


class TestCausalChain:
    def test_empty_chain_is_rejected(self):
        with pytest.raises(ValueError):
            CausalChain([])

    def test_defaults_to_internal(self):
        assert CausalChain(["boom"]).caused_by is Cause.INTERNAL

    def test_top_and_root(self):
        chain = CausalChain(["outer", "middle", "inner"])
        assert chain.top == "outer"
        assert chain.root == "inner"
        assert len(chain) == 3

    def test_context_layers_on_top(self):
        chain = CausalChain.from_message("inner").context("outer")
        assert list(chain) == ["outer", "inner"]

    def test_context_keeps_cause(self):
        chain = CausalChain.from_message("inner", Cause.USER).context("outer")
        assert chain.is_user_error

    def test_equality_includes_cause(self):
        assert CausalChain(["a"]) == CausalChain(["a"])
        assert CausalChain(["a"]) != CausalChain(["a"], Cause.USER)


class TestRendering:
    def test_short_form_is_top_message(self):
        chain = CausalChain(["outer", "inner"])
        assert str(chain) == "outer"
        assert f"{chain}" == "outer"

    def test_alternate_form_joins_messages(self):
        chain = CausalChain(["outer", "middle", "inner"])
        assert f"{chain:#}" == "outer: middle: inner"

    def test_debug_form_single_message(self):
        assert format(CausalChain(["only"]), "?") == "only"

    def test_debug_form_single_cause(self):
        chain = CausalChain(["outer", "inner"])
        assert f"{chain:?}" == "outer\n\nCaused by:\n    inner"

    def test_debug_form_numbers_causes(self):
        chain = CausalChain(["outer", "middle", "inner"])
        assert f"{chain:?}" == "outer\n\nCaused by:\n    0: middle\n    1: inner"

    def test_unknown_format_spec(self):
        with pytest.raises(ValueError):
            format(CausalChain(["x"]), "x")


class TestFromException:
    def test_follows_explicit_cause(self):
        try:
            try:
                raise KeyError("deck")
            except KeyError as ex:
                raise RuntimeError("Failed to draw a card") from ex
        except RuntimeError as ex:
            chain = CausalChain.from_exception(ex)

        assert list(chain) == ["Failed to draw a card", "'deck'"]
        assert chain.caused_by is Cause.INTERNAL

    def test_follows_implicit_context(self):
        try:
            try:
                raise ValueError("inner")
            except ValueError:
                raise RuntimeError("outer")
        except RuntimeError as ex:
            chain = CausalChain.from_exception(ex)

        assert list(chain) == ["outer", "inner"]

    def test_suppressed_context_is_skipped(self):
        try:
            try:
                raise ValueError("inner")
            except ValueError:
                raise RuntimeError("outer") from None
        except RuntimeError as ex:
            chain = CausalChain.from_exception(ex)

        assert list(chain) == ["outer"]

    def test_empty_message_falls_back_to_type_name(self):
        assert list(CausalChain.from_exception(TimeoutError())) == ["TimeoutError"]

    def test_user_error_on_top_is_user_caused(self):
        assert CausalChain.from_exception(UserError("Name too long")).caused_by is Cause.USER

    def test_user_error_further_down_is_internal(self):
        error = RuntimeError("outer")
        error.__cause__ = UserError("inner")
        assert CausalChain.from_exception(error).caused_by is Cause.INTERNAL

    def test_wrapped_user_error_repeats_message(self):
        chain = CausalChain.from_exception(UserError(ValueError("Not a number")))
        assert list(chain) == ["Not a number", "Not a number"]

    def test_cycle_terminates(self):
        a = RuntimeError("a")
        b = RuntimeError("b")
        a.__cause__ = b
        b.__cause__ = a
        assert list(CausalChain.from_exception(a)) == ["a", "b"]


class TestReduce:
    def test_single_message_is_fixed_point(self):
        chain = CausalChain(["X"])
        assert reduce(chain) == chain

    def test_collapses_adjacent_duplicates(self):
        chain = CausalChain(["A", "A", "B"])
        assert list(reduce(chain)) == ["A", "B"]

    def test_keeps_non_adjacent_duplicates(self):
        chain = CausalChain(["A", "A", "B", "A"])
        assert list(reduce(chain)) == ["A", "B", "A"]

    def test_collapses_long_runs(self):
        chain = CausalChain(["A", "B", "B", "B", "C", "C"])
        assert list(reduce(chain)) == ["A", "B", "C"]

    @pytest.mark.parametrize(
        "messages",
        [["X"], ["A", "A"], ["A", "B", "A"], ["A", "A", "B", "A"], ["A", "B", "B", "C", "C", "C"]],
    )
    def test_is_idempotent(self, messages):
        chain = CausalChain(messages)
        assert reduce(reduce(chain)) == reduce(chain)

    def test_keeps_cause(self):
        chain = CausalChain(["Name too long", "Name too long"], Cause.USER)
        reduced = reduce(chain)
        assert reduced.is_user_error
        assert list(reduced) == ["Name too long"]

    def test_renders_specific_to_root(self):
        chain = CausalChain(["outer", "outer", "inner"])
        assert f"{reduce(chain):#}" == "outer: inner"
        assert reduce(chain).root == "inner"

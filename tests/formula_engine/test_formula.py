"""
Tests for the Formula facade.
"""

import pytest

from formula_engine import (
    BindingError,
    Formula,
    FormulaLimits,
    FormulaState,
    FunctionCallError,
    LimitExceededError,
    ParseError,
    StateError,
    StructureError,
)


@pytest.fixture
def formula():
    engine = Formula()
    engine.register_function("LEFT", 2, lambda args: args[0])
    engine.register_function("RIGHT", 2, lambda args: args[1])
    engine.register_function("ROUND", 1, lambda args: float(round(args[0])))
    return engine


def parse_ok(formula, text):
    result = formula.parse(text)
    assert result.success, result.message
    return result


class TestParse:
    """Tests for Formula.parse."""

    def test_success(self, formula):
        result = parse_ok(formula, "x+3*(y-2)")
        assert result.error is None
        assert result.message == ""
        assert [v.name for v in formula.get_variables()] == ["x", "y"]
        assert formula.state == FormulaState.PARSED

    def test_failure_returns_error(self, formula):
        result = formula.parse("1+3*(5-2)-")
        assert not result.success
        assert isinstance(result.error, ParseError)
        assert result.position == 10
        assert formula.root is None
        assert formula.state == FormulaState.EMPTY

    def test_failure_discards_previous_formula(self, formula):
        parse_ok(formula, "x+1")
        assert not formula.parse("1)").success
        assert formula.get_variables() == []
        assert not formula.evaluate().success

    def test_failure_keeps_tokens_for_diagnostics(self, formula):
        formula.parse("(1))")
        assert formula.tokens == ("(", "1", ")", ")")

    def test_arity_mismatch(self, formula):
        result = formula.parse("LEFT(1,2,3)")
        assert not result.success
        assert isinstance(result.error, StructureError)

    def test_unregistered_function(self, formula):
        result = formula.parse("MAX(1,2)")
        assert not result.success
        assert isinstance(result.error, ParseError)

    def test_limits_are_reported_as_failures(self):
        formula = Formula(FormulaLimits(max_expression_length=3))
        result = formula.parse("1+2+3")
        assert not result.success
        assert isinstance(result.error, LimitExceededError)

    def test_long_operator_chain_is_reported(self):
        formula = Formula()
        result = formula.parse("+".join(["1"] * 512))
        assert not result.success
        assert isinstance(result.error, LimitExceededError)
        assert result.error.limit_name == "max_ast_depth"
        assert formula.root is None

    def test_chain_within_depth_limit_evaluates(self):
        formula = Formula()
        parse_ok(formula, "+".join(["1"] * 200))
        assert formula.evaluate().value == 200
        assert formula.dump_tree().count("BinaryOp") == 199

    def test_function_registered_after_parse_needs_reparse(self):
        formula = Formula()
        assert not formula.parse("HALF(4)").success
        formula.register_function("HALF", 1, lambda args: args[0] / 2)
        assert formula.has_function("HALF")
        parse_ok(formula, "HALF(4)")
        assert formula.evaluate().value == 2


class TestSetVariables:
    """Tests for Formula.set_variables."""

    def test_binds_values(self, formula):
        parse_ok(formula, "x+y")
        assert formula.set_variables({"x": 1, "y": 2}).success
        assert formula.state == FormulaState.BOUND
        assert all(v.has_value for v in formula.get_variables())

    def test_unknown_variable(self, formula):
        parse_ok(formula, "x")
        result = formula.set_variables({"q": 1})
        assert not result.success
        assert isinstance(result.error, BindingError)
        assert result.message == "Unknown variable q"
        assert result.position is None

    def test_unknown_variable_binds_nothing(self, formula):
        parse_ok(formula, "x+y")
        assert not formula.set_variables({"x": 1, "q": 2}).success
        assert not any(v.has_value for v in formula.get_variables())

    def test_rejects_non_numeric_value(self, formula):
        parse_ok(formula, "x")
        result = formula.set_variables({"x": "3"})
        assert not result.success
        assert result.error.variable == "x"

    def test_reports_remaining_unbound(self, formula):
        parse_ok(formula, "x+y")
        result = formula.set_variables({"x": 1})
        assert not result.success
        assert result.message == "Variable y not yet assigned"
        assert formula.state == FormulaState.PARSED

    def test_bindings_accumulate(self, formula):
        parse_ok(formula, "x+y")
        formula.set_variables({"x": 1})
        assert formula.set_variables({"y": 2}).success
        assert formula.evaluate().value == 3

    def test_empty_mapping_on_formula_without_variables(self, formula):
        parse_ok(formula, "1+1")
        assert formula.set_variables({}).success
        assert formula.set_variables(None).success


class TestEvaluate:
    """Tests for Formula.evaluate."""

    def test_before_parse(self):
        result = Formula().evaluate()
        assert not result.success
        assert isinstance(result.error, StateError)

    def test_unbound_variable_is_named(self, formula):
        parse_ok(formula, "a*b")
        formula.set_variables({"a": 2})
        result = formula.evaluate()
        assert not result.success
        assert result.message == "Variable b not set"

    def test_implicit_leading_zero(self, formula):
        parse_ok(formula, "-100-2+x-(y+z)")
        assert formula.set_variables({"x": 1, "y": 2.8, "z": 1.2}).success
        assert formula.evaluate().value == pytest.approx(-105.0)

    def test_registered_function(self, formula):
        parse_ok(formula, "ROUND(x+3*(y-2))")
        formula.set_variables({"x": 10, "y": 1.5})
        assert formula.evaluate().value == 8

    def test_function_composition(self, formula):
        parse_ok(formula, "RIGHT(LEFT(1,2), RIGHT(4,3))")
        assert formula.evaluate().value == 3
        assert formula.state == FormulaState.EVALUATED

    def test_rebinding_returns_to_bound(self, formula):
        parse_ok(formula, "x*2")
        formula.set_variables({"x": 2})
        assert formula.evaluate().value == 4
        formula.set_variables({"x": 5})
        assert formula.state == FormulaState.BOUND
        assert formula.evaluate().value == 10

    def test_evaluate_does_not_change_tree(self, formula):
        parse_ok(formula, "x-1")
        formula.set_variables({"x": 3})
        before = formula.dump_tree()
        formula.evaluate()
        assert formula.dump_tree() == before

    def test_function_returning_none_fails(self, formula):
        formula.register_function("F", 1, lambda args: None)
        parse_ok(formula, "F(1)+1")
        result = formula.evaluate()
        assert not result.success
        assert isinstance(result.error, FunctionCallError)
        assert "non-numeric" in result.message


class TestReparse:
    """Tests for re-parsing on one instance."""

    def test_previous_bindings_do_not_leak(self, formula):
        parse_ok(formula, "x+1")
        formula.set_variables({"x": 5})
        parse_ok(formula, "x+2")
        variables = formula.get_variables()
        assert [v.name for v in variables] == ["x"]
        assert not variables[0].has_value
        assert not formula.evaluate().success


class TestDiagnostics:
    """Tests for the diagnostic dumps."""

    def test_empty_dumps(self):
        formula = Formula()
        assert formula.dump_tokens() == "No tokens"
        assert formula.dump_variables() == "No variables"
        assert formula.dump_tree() == "No tree"

    def test_dumps(self, formula):
        parse_ok(formula, "LEFT(x, 2) - 1")
        formula.set_variables({"x": 4})
        assert formula.dump_tokens().splitlines() == [
            "LEFT", "(", "x", ",", "2", ")", "-", "1",
        ]
        assert formula.dump_variables() == "name:x----hasValue:true----value:4.0"
        assert formula.dump_tree() == (
            "BinaryOp op=-\n"
            "  FunctionCall name=LEFT, arity=2\n"
            "    Variable name=x val=4.0\n"
            "    Number val=2.0\n"
            "  Number val=1.0"
        )

    def test_unbound_variable_has_no_value(self, formula):
        parse_ok(formula, "x+y")
        formula.set_variables({"x": 1})
        assert formula.dump_variables().splitlines() == [
            "name:x----hasValue:true----value:1.0",
            "name:y----hasValue:false----value:None",
        ]
        assert "Variable name=y val=<unset>" in formula.dump_tree()


class TestConfiguration:
    """Tests for building a Formula from configuration."""

    def test_from_config_mapping(self):
        formula = Formula.from_config({"maxNestingDepth": 2})
        assert formula.limits.max_nesting_depth == 2
        assert not formula.parse("((1))").success

    def test_from_default_config(self):
        assert Formula.from_config(None).limits == FormulaLimits()

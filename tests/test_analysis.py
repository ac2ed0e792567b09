"""
Tests for cell parsing and static analysis: free references, declarations,
assignment checks and suspend points.
"""

import pytest
from cellscript import (
	AssignmentError,
	ParseError,
	find_awaits,
	find_references,
	parse_javascript,
)
from cellscript.errors import line_info
from cellscript.parser import parse_expression
from cellscript.walk import node_name


def inputs(source: str) -> list[str]:
	cell = parse_javascript(source)
	return list(dict.fromkeys(node_name(node) for node in cell.references))


def outputs(source: str) -> list[str] | None:
	declarations = parse_javascript(source).declarations
	if declarations is None:
		return None
	return [node_name(node) for node in declarations]


# =============================================================================
# Expression vs. program
# =============================================================================


class TestCellKind:
	def test_expression(self):
		cell = parse_javascript("x + y")
		assert cell.expression
		assert cell.declarations is None

	def test_object_literal_is_expression(self):
		cell = parse_javascript("{a: 1, b: x}")
		assert cell.expression
		assert inputs("{a: 1, b: x}") == ["x"]

	def test_declaration_is_program(self):
		cell = parse_javascript("let z = x + 1")
		assert not cell.expression
		assert outputs("let z = x + 1") == ["z"]

	def test_array_destructuring_declaration_is_program(self):
		cell = parse_javascript("let [a, b] = xs")
		assert not cell.expression
		assert outputs("let [a, b] = xs") == ["a", "b"]
		assert inputs("let [a, b] = xs") == ["xs"]

	def test_let_is_not_an_identifier(self):
		with pytest.raises(ParseError):
			parse_javascript("let + 1")

	def test_several_statements_are_program(self):
		assert not parse_javascript("a; b").expression

	def test_named_function_expression_is_program(self):
		cell = parse_javascript("function f(a) { return a + b; }")
		assert not cell.expression
		assert outputs("function f(a) { return a + b; }") == ["f"]

	def test_anonymous_arrow_is_expression(self):
		assert parse_javascript("(a) => a * k").expression

	def test_empty_cell_is_empty_program(self):
		cell = parse_javascript("")
		assert not cell.expression
		assert cell.references == []
		assert cell.declarations == []


# =============================================================================
# Free references
# =============================================================================


class TestReferences:
	def test_free_identifiers_in_order(self):
		assert inputs("b + a + b") == ["b", "a"]

	def test_references_repeat_per_occurrence(self):
		cell = parse_javascript("x + x")
		assert [node_name(node) for node in cell.references] == ["x", "x"]

	def test_globals_are_not_references(self):
		assert inputs("Math.max(x, y)") == ["x", "y"]

	def test_member_properties_are_not_references(self):
		assert inputs("a.b.c") == ["a"]

	def test_object_keys_are_not_references(self):
		assert inputs("({b: c})") == ["c"]

	def test_shorthand_properties_are_references(self):
		assert inputs("({c})") == ["c"]

	def test_parameters_are_bound(self):
		assert inputs("(a, {b}, [c], ...d) => a + b + c + d + e") == ["e"]

	def test_block_scoped_declarations(self):
		assert inputs("{ let a = 1; }\na") == ["a"]

	def test_var_is_function_scoped(self):
		assert inputs("{ var a = 1; }\na") == []
		assert outputs("{ var a = 1; }\na") == []

	def test_catch_parameter(self):
		assert inputs("try { f() } catch (e) { e }") == ["f"]

	def test_for_of_declaration(self):
		assert inputs("for (const x of xs) { g(x) }") == ["xs", "g"]

	def test_function_arguments(self):
		assert inputs("function f() { return arguments; }") == []

	def test_arrow_functions_have_no_arguments(self):
		assert inputs("() => arguments") == ["arguments"]

	def test_named_function_expression_binds_its_name(self):
		assert inputs("(function fact(n) { return n ? fact(n - 1) : 1; })") == []

	def test_class_heritage(self):
		assert inputs("class A extends B {}") == ["B"]
		assert outputs("class A extends B {}") == ["A"]

	def test_imports_are_bound(self):
		source = 'import {a as b, c} from "mod";\nb + c + d'
		assert inputs(source) == ["d"]
		assert outputs(source) == ["b", "c"]

	def test_custom_filter(self):
		cell = parse_javascript("Math.max(x, y)")
		nodes = find_references(cell.body, filter_reference=lambda node: True)
		assert [node_name(node) for node in nodes] == ["Math", "x", "y"]


class TestDeclarations:
	def test_destructuring(self):
		assert outputs("const {a, b: [c, ...d]} = e") == ["a", "c", "d"]
		assert inputs("const {a, b: [c, ...d]} = e") == ["e"]

	def test_defaults_in_patterns(self):
		assert outputs("let {a = 1, b: c = 2} = x") == ["a", "c"]

	def test_several_declarations_in_order(self):
		assert outputs("var a = 1, b = 2;\nfunction c() {}\nclass D {}") == [
			"a",
			"b",
			"c",
			"D",
		]

	def test_global_cannot_be_redefined(self):
		with pytest.raises(AssignmentError, match=r"Global 'Object' cannot be redefined \(1:4\)"):
			parse_javascript("let Object = 1")


# =============================================================================
# Assignment checks
# =============================================================================


class TestAssignments:
	def test_assignment_to_external(self):
		with pytest.raises(
			AssignmentError, match=r"Assignment to external variable 'x' \(1:0\)"
		):
			parse_javascript("x = 1")

	def test_destructuring_assignment_to_external(self):
		with pytest.raises(AssignmentError, match="Assignment to external variable 'x'"):
			parse_javascript("({a: x} = y)")

	def test_update_of_external(self):
		with pytest.raises(AssignmentError, match="external variable 'n'"):
			parse_javascript("n++")

	def test_augmented_assignment_of_external(self):
		with pytest.raises(AssignmentError, match="external variable 'n'"):
			parse_javascript("n += 1")

	def test_for_of_without_declaration(self):
		with pytest.raises(AssignmentError, match="external variable 'x'"):
			parse_javascript("for (x of y) {}")

	def test_assignment_in_nested_function(self):
		with pytest.raises(AssignmentError, match="external variable 'y'"):
			parse_javascript("function f() { y = 1 }")

	def test_assignment_to_global(self):
		with pytest.raises(AssignmentError, match="Assignment to global 'Object'"):
			parse_javascript("Object = 1")

	def test_local_assignment(self):
		cell = parse_javascript("let x; x = 1")
		assert cell.references == []

	def test_assignment_to_parameter(self):
		parse_javascript("function f(x) { x = 1; return x; }")

	def test_for_of_with_declaration(self):
		assert inputs("for (const x of y) {}") == ["y"]

	def test_error_position_accounts_for_wide_characters(self):
		with pytest.raises(AssignmentError) as info:
			parse_javascript('let s = "é"; x = 1')
		assert info.value.pos == 13
		assert (info.value.line, info.value.column) == (1, 13)

	def test_error_on_later_line(self):
		with pytest.raises(AssignmentError) as info:
			parse_javascript("let a = 1;\n  b = a")
		assert (info.value.line, info.value.column) == (2, 2)


# =============================================================================
# Suspend points
# =============================================================================


class TestAwaits:
	def test_await_expression(self):
		cell = parse_javascript("await x")
		assert cell.is_async
		assert len(find_awaits(cell.body)) == 1

	def test_for_await(self):
		cell = parse_javascript("for await (const x of y) {}")
		assert cell.is_async
		[node] = find_awaits(cell.body)
		assert node.type == "for_in_statement"

	def test_several_awaits(self):
		cell = parse_javascript("[await a, await b]")
		assert len(find_awaits(cell.body)) == 2

	def test_nested_function_is_not_searched(self):
		cell = parse_javascript("function f() { await g(); }")
		assert not cell.is_async
		assert find_awaits(cell.body) == []

	def test_async_arrow_cell_is_not_async(self):
		cell = parse_javascript("async () => await x")
		assert cell.expression
		assert not cell.is_async


# =============================================================================
# Syntax errors
# =============================================================================


class TestSyntaxErrors:
	def test_incomplete_expression(self):
		with pytest.raises(ParseError) as info:
			parse_javascript("x +")
		assert info.value.line == 1
		assert str(info.value).endswith(f"({info.value.line}:{info.value.column})")

	def test_error_on_second_line(self):
		with pytest.raises(ParseError) as info:
			parse_javascript("let a = 1;\nlet = = 2;")
		assert info.value.line == 2

	def test_parse_expression_rejects_statements(self):
		with pytest.raises(ParseError):
			parse_expression("if (a) b")

	def test_line_info(self):
		assert line_info("ab\ncd", 0) == (1, 0)
		assert line_info("ab\ncd", 4) == (2, 1)
		assert line_info("ab\ncd", 99) == (2, 2)

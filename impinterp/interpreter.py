"""Imp interpreter.

Imp is a small imperative language: integer and boolean values, arithmetic/comparison/logical operators, `let` and
`let mut` bindings, mutation, if/else, while loops and nested blocks with lexical scoping. Basic program flow:
    1. Parser: produces an AST from a line of text (see core/lexical.py for the grammar)
        - expressions are parsed by precedence climbing, instructions by recursive descent
    2. Evaluation: walks the AST against a Namespace that persists across lines (see core/evaluator.py)
        - blocks push a new frame, report every statement's outcome and keep going on errors
    3. Printing: the session/shell prints `<name> : <type> = <value>` for every result (see lang/session.py)

This module gathers the parser/evaluator core for callers that drive their own loop:

    namespace = Namespace.root()
    evaluate(parse("let mut x = 1"), namespace)
"""

from impinterp.core.evaluator import Evaluator, evaluate, evaluate_expr
from impinterp.core.lexical import parse
from impinterp.core.namespace import Namespace
from impinterp.core.value import UNIT, Boolean, Integer, Unit

__all__ = ["Boolean", "Evaluator", "Integer", "Namespace", "UNIT", "Unit", "evaluate", "evaluate_expr", "parse"]

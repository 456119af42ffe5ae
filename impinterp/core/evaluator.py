"""Tree-walking evaluator for the Imp language. Walks the syntax trees produced by lexical.py against a Namespace.

Expressions short-circuit on their first error. Blocks do not: every statement of a block is evaluated and its outcome
(a Value or an EvalError) is reported to the observer as it completes, so an error in one statement never stops its
siblings.
"""

import operator

from impinterp.core.syntax import (BinOp, Block, Const, ExprStmt, IfElse, Let, LetMut, Mutate, Sequence, Var,
                                   While)
from impinterp.core.value import INT_MAX, INT_MIN, UNIT, Boolean, Integer
from impinterp.lang.error import (ConditionTypeError, DivisionByZero, EvalError, GenericException, IntegerOverflow,
                                  InvalidOperation, UndefinedVariable)


def _truncating_div(left, right):
    quotient = abs(left) // abs(right)
    return quotient if (left < 0) == (right < 0) else -quotient


def _truncating_mod(left, right):
    return left - right * _truncating_div(left, right)


INTEGER_ARITHMETIC = {
    "+": operator.add,
    "-": operator.sub,
    "*": operator.mul,
    "/": _truncating_div,
    "%": _truncating_mod,
}

INTEGER_COMPARISONS = {
    "<": operator.lt,
    ">": operator.gt,
    "<=": operator.le,
    ">=": operator.ge,
    "==": operator.eq,
    "!=": operator.ne,
}

BOOLEAN_OPERATIONS = {
    "&&": lambda left, right: left and right,
    "||": lambda left, right: left or right,
    "==": operator.eq,
    "!=": operator.ne,
}


class Evaluator:
    """Interprets Instructions and Expressions. observer(instruction, outcome) is called for every statement of a
    Block or Sequence once it completes, with outcome either the resulting Value or the raised EvalError.
    """

    def __init__(self, observer=None):
        self.observer = observer

    def evaluate_expr(self, expr, namespace):
        """Returns Value of expr. Raises EvalError."""
        if isinstance(expr, Const):
            return expr.value

        elif isinstance(expr, Var):
            value = namespace.get(expr.name)
            if value is None:
                raise UndefinedVariable(expr.name)
            return value

        elif isinstance(expr, BinOp):
            left = self.evaluate_expr(expr.left, namespace)
            right = self.evaluate_expr(expr.right, namespace)
            return self.apply(expr, left, right)

        raise GenericException(f"cannot evaluate expression '{expr!r}'", internal=True)

    @staticmethod
    def apply(expr, left, right):
        """Applies expr.operator to already evaluated operands."""
        op = expr.operator

        if isinstance(left, Integer) and isinstance(right, Integer):
            if op in INTEGER_ARITHMETIC:
                if op in ("/", "%") and right.value == 0:
                    raise DivisionByZero(expr)

                result = INTEGER_ARITHMETIC[op](left.value, right.value)
                if not INT_MIN <= result <= INT_MAX:
                    raise IntegerOverflow(result)
                return Integer(result)

            elif op in INTEGER_COMPARISONS:
                return Boolean(INTEGER_COMPARISONS[op](left.value, right.value))

        elif isinstance(left, Boolean) and isinstance(right, Boolean) and op in BOOLEAN_OPERATIONS:
            return Boolean(BOOLEAN_OPERATIONS[op](left.value, right.value))

        raise InvalidOperation(left, op, right)

    def condition(self, expr, namespace):
        """Evaluates expr, which must be a Boolean. Returns its bool."""
        value = self.evaluate_expr(expr, namespace)
        if not isinstance(value, Boolean):
            raise ConditionTypeError(value)
        return value.value

    def evaluate(self, instruction, namespace):
        """Returns Value of instruction, updating namespace. Raises EvalError."""
        if isinstance(instruction, ExprStmt):
            return self.evaluate_expr(instruction.expr, namespace)

        elif isinstance(instruction, Let):
            value = self.evaluate_expr(instruction.expr, namespace)
            namespace.add(instruction.name, value)
            return value

        elif isinstance(instruction, LetMut):
            value = self.evaluate_expr(instruction.expr, namespace)
            namespace.add_mutable(instruction.name, value)
            return value

        elif isinstance(instruction, Mutate):
            value = self.evaluate_expr(instruction.expr, namespace)
            namespace.mutate(instruction.name, value)
            return value

        elif isinstance(instruction, IfElse):
            branch = instruction.then if self.condition(instruction.cond, namespace) else instruction.otherwise
            if isinstance(branch, Block):
                return self.evaluate_block(branch, namespace)
            return self.evaluate(branch, namespace)

        elif isinstance(instruction, While):
            while self.condition(instruction.cond, namespace):
                self.evaluate(instruction.body, namespace)
            return UNIT

        elif isinstance(instruction, Block):
            self.evaluate_block(instruction, namespace)
            return UNIT

        elif isinstance(instruction, Sequence):
            return self.evaluate_all(instruction.instructions, namespace)

        raise GenericException(f"cannot evaluate instruction '{instruction!r}'", internal=True)

    def evaluate_block(self, block, namespace):
        """Evaluates block's statements in a new frame. Returns the last statement's Value (Unit if it failed)."""
        namespace.enter_block()
        try:
            return self.evaluate_all(block.instructions, namespace)
        finally:
            namespace.exit_block()

    def evaluate_all(self, instructions, namespace):
        """Evaluates every instruction in order, reporting each outcome instead of stopping on the first error. Without
        an observer nothing would see the errors, so the first one is raised once every instruction has run.
        """
        result = UNIT
        first_error = None
        for instruction in instructions:
            try:
                result = self.evaluate(instruction, namespace)
            except EvalError as error:
                result = UNIT
                if first_error is None:
                    first_error = error
                self.report(instruction, error)
            else:
                self.report(instruction, result)

        if first_error is not None and self.observer is None:
            raise first_error
        return result

    def report(self, instruction, outcome):
        if self.observer is not None:
            self.observer(instruction, outcome)


def evaluate_expr(expr, namespace):
    """Returns Value of expr against namespace."""
    return Evaluator().evaluate_expr(expr, namespace)


def evaluate(instruction, namespace, observer=None):
    """Returns Value of instruction against namespace, reporting statements of blocks to observer."""
    return Evaluator(observer).evaluate(instruction, namespace)

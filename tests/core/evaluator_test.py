import unittest

from impinterp.core.evaluator import Evaluator, evaluate, evaluate_expr
from impinterp.core.lexical import parse
from impinterp.core.namespace import Namespace
from impinterp.core.syntax import BinOp, Const, Var
from impinterp.core.value import FALSE, TRUE, UNIT, Boolean, Integer
from impinterp.lang.error import (AlreadyDefined, ConditionTypeError, DivisionByZero, EvalError, IntegerOverflow,
                                  InvalidOperation, NotMutable, UndefinedVariable)


class ExpressionTestCase(unittest.TestCase):

    def setUp(self):
        self.ns = Namespace.root()

    def eval(self, text):
        return evaluate_expr(parse(text).expr, self.ns)

    def test_arithmetic(self):
        cases = {
            "1+1": Integer(2),
            "1+2*3": Integer(7),
            "(1+2)*3": Integer(9),
            "10 - 4 - 3": Integer(3),
            "7 / 2": Integer(3),
            "-7 / 2": Integer(-3),
            "7 / -2": Integer(-3),
            "7 % 3": Integer(1),
            "-7 % 2": Integer(-1),
            "7 % -2": Integer(1),
            "-2147483648 + 0": Integer(-2147483648),
        }
        for case, expected in cases.items():
            self.assertEqual(expected, self.eval(case), case)

    def test_comparisons(self):
        cases = {
            "6 % 3 == 1 - 2 / 2": TRUE,
            "1 < 2": TRUE,
            "2 > 2": FALSE,
            "2 >= 2": TRUE,
            "3 <= 2": FALSE,
            "1 != 2": TRUE,
            "(0 > 1) == true": FALSE,
            "true != false": TRUE,
        }
        for case, expected in cases.items():
            self.assertEqual(expected, self.eval(case), case)

    def test_logical(self):
        cases = {
            "true && false": FALSE,
            "true && true": TRUE,
            "false || true": TRUE,
            "false || false": FALSE,
            "1 < 2 && 2 < 3": TRUE,
        }
        for case, expected in cases.items():
            self.assertEqual(expected, self.eval(case), case)

    def test_invalid_operation(self):
        should_raise = ["true + 1", "(0 + 1) * true", "1 && 2", "true < false", "1 == true", "true % true"]
        for case in should_raise:
            self.assertRaises(InvalidOperation, self.eval, case)

        with self.assertRaises(InvalidOperation) as context:
            self.eval("true + 1")
        self.assertIn("+", str(context.exception))
        self.assertIn("bool", str(context.exception))
        self.assertIn("int", str(context.exception))

    def test_unknown_operator(self):
        self.assertRaises(InvalidOperation, evaluate_expr, BinOp(Const(Integer(1)), "**", Const(Integer(2))), self.ns)

    def test_division_by_zero(self):
        should_raise = ["1 / 0", "1 % 0", "0 / 0", "5 % (3 - 3)"]
        for case in should_raise:
            self.assertRaises(DivisionByZero, self.eval, case)

    def test_overflow(self):
        should_raise = ["2147483647 + 1", "-2147483648 - 1", "65536 * 65536", "-2147483648 / -1"]
        for case in should_raise:
            self.assertRaises(IntegerOverflow, self.eval, case)

    def test_variables(self):
        self.ns.add("x", Integer(4))
        self.assertEqual(Integer(4), evaluate_expr(Var("x"), self.ns))
        self.assertEqual(Integer(8), self.eval("x * 2"))
        self.assertRaises(UndefinedVariable, self.eval, "y")
        self.assertRaises(UndefinedVariable, self.eval, "x + y")

    def test_left_error_first(self):
        with self.assertRaises(UndefinedVariable) as context:
            self.eval("a + b")
        self.assertEqual("a", context.exception.name)


class InstructionTestCase(unittest.TestCase):

    def setUp(self):
        self.ns = Namespace.root()
        self.reported = []
        self.evaluator = Evaluator(observer=lambda instruction, outcome: self.reported.append((instruction, outcome)))

    def run_lines(self, *lines):
        result = None
        for line in lines:
            result = self.evaluator.evaluate(parse(line), self.ns)
        return result

    def test_let(self):
        self.assertEqual(Integer(1), self.run_lines("let x = 1"))
        self.assertEqual(Integer(1), self.ns.get("x"))
        self.assertEqual(TRUE, self.run_lines("let mut b = 1 < 2"))
        self.assertTrue(self.ns.is_mutable("b"))
        self.assertRaises(AlreadyDefined, self.run_lines, "let x = 2")
        self.assertEqual(Integer(1), self.ns.get("x"))

    def test_let_error_does_not_bind(self):
        self.assertRaises(UndefinedVariable, self.run_lines, "let x = y")
        self.assertIsNone(self.ns.get("x"))

    def test_mutate(self):
        self.run_lines("let x = 1")
        self.assertRaises(NotMutable, self.run_lines, "x = 2")
        self.assertEqual(Integer(3), self.run_lines("let mut y = 1", "y = 3"))
        self.assertEqual(Integer(3), self.run_lines("y"))
        self.assertRaises(NotMutable, self.run_lines, "z = 1")

    def test_if_else(self):
        self.assertEqual(Integer(1), self.run_lines("if (true) {1} else {2}"))
        self.assertEqual(Integer(2), self.run_lines("if (false) {1} else {2}"))
        self.assertEqual(Integer(1), self.run_lines("if true {if false {0} else {1}} else {2}"))
        self.assertEqual(UNIT, self.run_lines("if true {} else {2}"))
        self.assertEqual(Integer(3), self.run_lines("if false {1} else if false {2} else {3}"))

    def test_if_else_condition(self):
        self.assertRaises(ConditionTypeError, self.run_lines, "if 1 {1} else {2}")
        self.assertRaises(UndefinedVariable, self.run_lines, "if x {1} else {2}")

    def test_if_else_single_branch(self):
        self.run_lines("let mut a = 0", "let mut b = 0")
        self.run_lines("if a == 0 {a = 1} else {b = 1}")
        self.assertEqual(Integer(1), self.ns.get("a"))
        self.assertEqual(Integer(0), self.ns.get("b"))

    def test_if_else_scope(self):
        self.run_lines("let x = true", "let y = 10")
        self.assertEqual(Integer(11), self.run_lines("if x {let x = 1; {let x=2;x}; x+y} else {x}"))
        self.assertEqual(TRUE, self.ns.get("x"))
        self.assertEqual(1, self.ns.depth)

    def test_while(self):
        result = self.run_lines("let mut acc=1; let mut i=1; let n=6; while i<=n {acc=acc*i; i=i+1}")
        self.assertEqual(UNIT, result)
        self.assertEqual(Integer(720), self.ns.get("acc"))
        self.assertEqual(Integer(7), self.ns.get("i"))

    def test_while_false(self):
        self.assertEqual(UNIT, self.run_lines("while false {x}"))
        self.assertEqual([], self.reported)

    def test_while_condition(self):
        self.assertRaises(ConditionTypeError, self.run_lines, "while 0 {}")
        self.run_lines("let mut i = 0")
        self.assertRaises(ConditionTypeError, self.run_lines, "while i {}")

    def test_block(self):
        self.assertEqual(UNIT, self.run_lines("{let x = 2; x}"))
        self.assertIsNone(self.ns.get("x"))
        self.assertEqual(1, self.ns.depth)
        self.assertEqual(UNIT, self.run_lines("{}"))

    def test_block_shadowing(self):
        self.run_lines("let x = 1")
        self.run_lines("{let x = 2; x}")
        self.assertEqual(Integer(2), self.reported[-1][1])
        self.assertEqual(Integer(1), self.run_lines("x"))

    def test_block_keeps_going(self):
        self.run_lines("{let a = 1; a = 2; 1 / 0; let b = a + 1; b}")
        outcomes = [outcome for __, outcome in self.reported]
        self.assertEqual(Integer(1), outcomes[0])
        self.assertIsInstance(outcomes[1], NotMutable)
        self.assertIsInstance(outcomes[2], DivisionByZero)
        self.assertEqual([Integer(2), Integer(2)], outcomes[3:])
        self.assertEqual(["a", "a", "-", "b", "-"], [instruction.label for instruction, __ in self.reported])

    def test_sequence(self):
        self.assertEqual(Integer(3), self.run_lines("let a = 1; let b = 2; a + b"))
        self.assertEqual(Integer(2), self.ns.get("b"))
        self.assertEqual([Integer(1), Integer(2), Integer(3)], [outcome for __, outcome in self.reported])

    def test_sequence_keeps_going(self):
        self.assertEqual(Integer(5), self.run_lines("let a = 1; let a = 2; a = 3; let b = 5"))
        self.assertIsInstance(self.reported[1][1], EvalError)
        self.assertIsInstance(self.reported[2][1], EvalError)
        self.assertEqual(Integer(1), self.ns.get("a"))
        self.assertEqual(UNIT, self.run_lines("let c = 1; c = 2"))

    def test_block_frame_popped_on_interrupt(self):
        def interrupt(instruction, outcome):
            raise KeyboardInterrupt()

        evaluator = Evaluator(observer=interrupt)
        self.assertRaises(KeyboardInterrupt, evaluator.evaluate, parse("{let x = 1; x}"), self.ns)
        self.assertEqual(1, self.ns.depth)
        self.assertIsNone(self.ns.get("x"))


class NoObserverTestCase(unittest.TestCase):

    def setUp(self):
        self.ns = Namespace.root()

    def test_block_error_raised(self):
        self.assertRaises(InvalidOperation, evaluate, parse("{let x = 1; x + true}"), self.ns)
        self.assertEqual(1, self.ns.depth)
        self.assertEqual(Boolean(True), evaluate(parse("let t = true"), self.ns))

    def test_sequence_error_raised_after_all_statements(self):
        with self.assertRaises(NotMutable) as context:
            evaluate(parse("let x = 1; x = 2; let y = 3"), self.ns)
        self.assertEqual("x", context.exception.name)
        self.assertEqual(Integer(1), self.ns.get("x"))
        self.assertEqual(Integer(3), self.ns.get("y"))

    def test_first_error_raised(self):
        self.assertRaises(UndefinedVariable, evaluate, parse("{a; 1 / 0}"), self.ns)

    def test_error_free(self):
        self.assertEqual(Integer(2), evaluate(parse("let a = 1; a + 1"), self.ns))
        self.assertEqual(UNIT, evaluate(parse("{let b = 1; b}"), self.ns))


if __name__ == '__main__':
    unittest.main()

"""Session control for the Imp language. A session owns the namespace that persists across input lines, parses and
evaluates lines one at a time, and prints each result as `<name> : <type> = <value>`.
"""

from collections import deque

from impinterp.core.evaluator import Evaluator
from impinterp.core.lexical import parse
from impinterp.core.namespace import Namespace
from impinterp.core.syntax import Sequence
from impinterp.lang.error import EvalError, GenericException


class Session:
    """Governs an Imp session, with control over the scope of variables."""
    SH_FILE = "<stdin>"  # command-line interpreter filename
    HISTORY = 100        # number of result lines kept in results

    def __init__(self, error_handler, strict_mutability=False, show_ast=False, path=SH_FILE):
        self.error_handler = error_handler
        self.error_handler.register_file(path)

        self.path = path          # used for error messages
        self.show_ast = show_ast  # whether or not to print parsed trees

        self.namespace = Namespace.root(strict_mutability)
        self.namespace.enter_block()  # session scope, open for the whole session
        self.evaluator = Evaluator(observer=self.report)

        self.to_exec = {}  # dict of line num: (line, Instruction) to execute
        self.results = deque(maxlen=Session.HISTORY)  # latest result lines printed
        self.line_num = 0

    @staticmethod
    def preprocess_line(line, previous=""):
        """Preprocesses a line from the command-line. previous is the pending input of a line continuation, if any.
        Returns updated value of line and whether a line continuation is necessary.
        """
        if "//" in line:
            line = line[:line.index("//")]  # get rid of comments

        line = line.rstrip()
        if previous:
            line = previous + "\n" + line

        opened = line.count("{") + line.count("(")
        closed = line.count("}") + line.count(")")
        return line, opened > closed

    def add(self, expr, line_num=None):
        """Parses expr and queues it for execution. Raises ValueError if expr is empty and ParseError if it is
        malformed. Evaluation is delayed until run is called.
        """
        if not expr or expr.isspace():
            raise ValueError("empty input")

        if line_num is None:
            self.line_num += 1
            line_num = self.line_num
        self.error_handler.register_line(self.path, expr, line_num)  # in case error is raised

        instruction = parse(expr)
        if self.show_ast:
            print(instruction.display())
        self.to_exec[line_num] = (expr, instruction)

        self.error_handler.remove_line(self.path)  # error was not raised

    def run(self):
        """Evaluates this session's queued instructions in order, printing their results and reporting their errors.
        Interrupted evaluations leave the namespace as deep as it was before the instruction.
        """
        for line_num, (expr, instruction) in list(self.to_exec.items()):
            self.error_handler.register_line(self.path, expr, line_num)
            depth = self.namespace.depth

            try:
                result = self.evaluator.evaluate(instruction, self.namespace)
            except EvalError as error:
                self.report(instruction, error)
            else:
                if not isinstance(instruction, Sequence):  # statements were already reported
                    self.report(instruction, result)
            finally:
                del self.to_exec[line_num]
                self.namespace.unwind(depth)

            self.error_handler.remove_line(self.path)

    def report(self, instruction, outcome):
        """Prints the outcome of instruction: either its Value or the error it raised."""
        if isinstance(outcome, GenericException):
            self.error_handler.throw(outcome)
        else:
            result = Session.format_result(instruction, outcome)
            self.results.append(result)
            print(result)

    @staticmethod
    def format_result(instruction, value):
        return f"{instruction.label} : {value.type_tag} = {value}"

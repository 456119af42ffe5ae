"""Error handling for the Imp language. Only GenericExceptions should be encountered during running: if another type of
error is raised and makes it all the way to ErrorHandler, it is assumed to be an internal issue.

Two error domains exist: ParseErrors (malformed input text) and EvalErrors (semantic failures during evaluation).
Every line is independent, so neither kind is fatal in command-line mode.
"""

import sys

from termcolor import colored


class GenericException(Exception):
    """Templates an error message so that it can be used to throw an Imp error."""
    label = "error"

    def __init__(self, msg, exprs=None, start=0, end=-1, diagnosis=True, internal=False):
        """msg is a format string whose placeholders are filled with exprs. exprs[0] should be the offending expr
        that caused the error; start and end delimit the offending part of it.
        """
        if exprs is None:
            exprs = ""
        if not isinstance(exprs, (list, tuple)):
            exprs = [exprs]  # single offending expr: str, AST node or number
        exprs = [str(expr) for expr in exprs]

        self.msg = msg.format(*(colored(expr, attrs=["bold"]) for expr in exprs))  # color expr snippets
        self.plain_msg = msg.format(*exprs)
        self.expr = exprs[0]
        self.end = end if end != -1 else len(self.expr)  # needed for error display

        self.start = start
        self.diagnosis = diagnosis
        self.internal = internal

        super().__init__(self.plain_msg)


class ParseError(GenericException):
    """Raised on malformed input text. expr is the offending physical line, start/end the offending columns."""
    label = "parse error"


class EvalError(GenericException):
    """Superclass of all semantic failures raised while evaluating an instruction."""
    label = "evaluation error"

    def __init__(self, msg, exprs=None, **kwargs):
        kwargs.setdefault("diagnosis", False)  # the AST keeps no source positions
        super().__init__(msg, exprs, **kwargs)


class UndefinedVariable(EvalError):

    def __init__(self, name):
        super().__init__("variable '{}' is not defined", name)
        self.name = name


class InvalidOperation(EvalError):

    def __init__(self, left, operator, right):
        super().__init__("invalid operation: {} '{}' {} ({} {} {})",
                         (left.type_tag, operator, right.type_tag, left, operator, right))
        self.left, self.operator, self.right = left, operator, right


class ConditionTypeError(EvalError):
    """The Imp type error: a condition did not evaluate to a boolean."""

    def __init__(self, value):
        super().__init__("expected a boolean condition, got {} '{}'", (value.type_tag, value))
        self.value = value


class DivisionByZero(EvalError):

    def __init__(self, expr):
        super().__init__("division by zero in '{}'", expr)


class IntegerOverflow(EvalError):

    def __init__(self, number):
        super().__init__("integer overflow: '{}' does not fit in 32 bits", number)
        self.number = number


class NamespaceError(EvalError):
    """Superclass of errors raised by Namespace operations."""


class AlreadyDefined(NamespaceError):

    def __init__(self, name):
        super().__init__("'{}' is already defined in this block", name)
        self.name = name


class NotMutable(NamespaceError):

    def __init__(self, name):
        super().__init__("'{}' is not mutable", name)
        self.name = name


class NotDefined(NamespaceError):

    def __init__(self, name):
        super().__init__("cannot mutate '{}': not defined in any enclosing block", name)
        self.name = name


class CannotExitRoot(NamespaceError):

    def __init__(self):
        super().__init__("cannot exit root block")


class ErrorHandler:
    """Context manager that will silently suppress Python errors and raise custom Imp errors."""
    ERROR = "red"

    def __init__(self, fatal=True):
        self.fatal = fatal
        self.traceback = {}
        self.count = 0  # number of errors thrown so far

    def register_file(self, path):
        """Registers path in traceback."""
        self.traceback[path] = (None, None)

    def register_line(self, path, line, line_num):
        """Registers line in traceback given path. Should be called prior to Session add/run."""
        self.traceback[path] = (line, line_num)

    def remove_line(self, path):
        """Removes line from traceback given path. Should be called after successful Session add/run."""
        self.traceback[path] = (None, None)

    @staticmethod
    def diagnose(error):
        """Returns offending part of error.expr highlighted and bolded."""
        diagnosis = "  " + error.expr[:error.start]

        end = max(error.end, error.start + 1)
        diagnosis += colored(error.expr[error.start:end], ErrorHandler.ERROR, attrs=["bold"])
        diagnosis += error.expr[end:] + "\n"

        diagnosis += "  " + " " * error.start
        diagnosis += colored("^" + "~" * (end - error.start - 1), ErrorHandler.ERROR, attrs=["bold"])

        return diagnosis

    def throw(self, error):
        """Throws error using error and self.traceback. error must be a GenericException, and self.traceback must be a
        dict of file: (line, line_num) representing origination of error.
        """
        self.count += 1

        diagnosable = not error.internal and error.expr and error.diagnosis

        error_msg = ""
        lines = 0
        for file, (line, line_num) in self.traceback.items():  # assumes dict is insertion-ordered
            if line and not diagnosable:  # diagnosis already shows the offending line
                error_msg += f"  File '{file}', line {line_num}:\n"
                error_msg += f"    {line}\n"
                lines += 1

        if lines > 1:
            error_msg = "Traceback:\n" + error_msg

        if error.internal:
            error_msg += colored("[internal] ", ErrorHandler.ERROR, attrs=["bold"])

        error_msg += colored(f"{error.label}: ", ErrorHandler.ERROR, attrs=["bold"]) + error.msg
        print(error_msg)

        if diagnosable:
            print(ErrorHandler.diagnose(error))

        if self.fatal:
            sys.exit(1)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        do_exit = False
        if exc_type is KeyboardInterrupt:
            self.throw(GenericException("keyboard interrupt"))
        elif exc_type is SystemExit:
            do_exit = True
        elif exc_type is RecursionError:
            self.throw(GenericException("maximum nesting depth exceeded"))
        elif exc_type is not None and issubclass(exc_type, GenericException) and not exc_val.internal:
            self.throw(exc_val)
        elif exc_type is not None:
            self.throw(GenericException(f"unknown error: '{exc_type.__name__}: {exc_val}'", internal=True))
            do_exit = True

        return not do_exit

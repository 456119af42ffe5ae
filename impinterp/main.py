"""Runs the Imp interpreter in command-line mode, or evaluates lines given with -c. Also uses error handling context
manager. Called from the imp console script.

Python version must be >=3.8: error handling requires that dicts are insertion-ordered.
"""

import argparse
import os
import sys

from impinterp.lang.error import ErrorHandler
from impinterp.lang.session import Session
from impinterp.lang.shell import Shell


def get_parser():
    parser = argparse.ArgumentParser(prog="imp", description="Line-oriented interpreter for the Imp language.")
    parser.add_argument("-c", "--command", action="append", metavar="LINE",
                        help="line to evaluate (repeatable; if absent, goes to command-line mode)")
    parser.add_argument("--strict-mutability", action="store_true",
                        help="only the block that declared a variable decides whether it is mutable")
    parser.add_argument("--ast", action="store_true", help="print the syntax tree of every input before evaluating it")
    parser.add_argument("--no-color", action="store_true", help="disable colored error messages")
    return parser


def main(argv=None):
    """Runs Imp interpreter. Returns exit status: 1 if any -c line reported an error, else 0."""
    assert sys.version_info >= (3, 8), "imp cannot be run with python < 3.8"

    args = get_parser().parse_args(argv)
    if args.no_color:
        os.environ["ANSI_COLORS_DISABLED"] = "1"  # honored by termcolor

    error_handler = ErrorHandler(fatal=False)  # every line is independent
    sess = Session(error_handler, strict_mutability=args.strict_mutability, show_ast=args.ast)

    if args.command is None:
        with error_handler:
            Shell(sess).cmdloop()
        return 0

    for line in args.command:
        with error_handler:
            line, __ = Session.preprocess_line(line)
            if line:
                sess.add(line)
                sess.run()

    return 1 if error_handler.count else 0


if __name__ == "__main__":
    sys.exit(main())

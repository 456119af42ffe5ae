"""Tokenization and parsing of Imp source text into the syntax trees defined in syntax.py.

Imp grammar can be loosely defined as follows:

```
<input>     ::= <instr> (<sep> <instr>)*                ; more than one instr gives a Sequence
<instr>     ::= "let" "mut"? <id> "=" <expr>            ; declaration in the innermost block
              | <id> "=" <expr>                         ; mutation of a "let mut" variable
              | "if" <expr> <block> "else" (<block> | <if>)
              | "while" <expr> <block>
              | <block>
              | <expr>
<block>     ::= "{" (<instr> | <sep>)* "}"              ; statements separated by ";" or newlines
<expr>      ::= <atom> (<infix> <atom>)*                ; precedence climbing, see PRECEDENCE
<atom>      ::= "-"? <integer> | "true" | "false" | <id> | "(" <expr> ")"

<comment>   ::= "//" <char>*                            ; runs to the end of the line
```

Binary operators are all left-associative. From loosest to tightest: "||", "&&", comparisons, "+ -", "* / %".
The parser is untyped: `true + 1` parses fine and only fails at evaluation.
"""

import re
from dataclasses import dataclass

from impinterp.core.syntax import BinOp, Block, Const, ExprStmt, IfElse, Let, LetMut, Mutate, Sequence, Var, While
from impinterp.core.value import FALSE, INT_MAX, INT_MIN, TRUE, Integer
from impinterp.lang.error import GenericException, ParseError


KEYWORDS = {"let", "mut", "if", "else", "while", "true", "false"}

PRECEDENCE = {
    "||": 1,
    "&&": 2,
    "==": 3, "!=": 3, "<": 3, ">": 3, "<=": 3, ">=": 3,
    "+": 4, "-": 4,
    "*": 5, "/": 5, "%": 5,
}

TOKEN_SPEC = [
    ("COMMENT", r"//[^\n]*"),
    ("NEWLINE", r"\n"),
    ("SKIP", r"[ \t\r]+"),
    ("INT", r"[0-9]+"),
    ("ID", r"[A-Za-z_][A-Za-z0-9_]*"),
    ("OP", r"\|\||&&|==|!=|<=|>=|[<>+\-*/%=]"),
    ("PUNCT", r"[(){};]"),
    ("UNKNOWN", r"."),
]
TOKEN_RE = re.compile("|".join(f"(?P<{kind}>{pattern})" for kind, pattern in TOKEN_SPEC))


@dataclass(frozen=True)
class Token:
    kind: str  # one of INT, ID, KEYWORD, OP, PUNCT, SEP, EOF
    text: str
    pos: int   # offset in the source text


def tokenize(text):
    """Splits text into Tokens. Newlines become SEP tokens, except inside parentheses where they are ignored. Raises
    ParseError on any character that does not start a token.
    """
    tokens = []
    depth = 0
    for match in TOKEN_RE.finditer(text):
        kind, token = match.lastgroup, match.group()
        pos = match.start()

        if kind in ("COMMENT", "SKIP"):
            continue
        elif kind == "UNKNOWN":
            raise _error(text, pos, pos + 1, "unknown token '{1}'", token)
        elif kind == "NEWLINE":
            if depth == 0:
                tokens.append(Token("SEP", token, pos))
            continue
        elif kind == "ID" and token in KEYWORDS:
            kind = "KEYWORD"
        elif token == ";":
            kind = "SEP"
        elif token == "(":
            depth += 1
        elif token == ")":
            depth = max(depth - 1, 0)

        tokens.append(Token(kind, token, pos))

    tokens.append(Token("EOF", "", len(text)))
    return tokens


def _error(text, start, end, msg, *exprs):
    """Returns a ParseError pointing at text[start:end], diagnosed against the physical line containing start. The
    offending line is msg's placeholder {0}, exprs fill {1} onwards.
    """
    line_start = text.rfind("\n", 0, start) + 1
    line_end = text.find("\n", start)
    if line_end == -1:
        line_end = len(text)

    line = text[line_start:line_end]
    start -= line_start
    end -= line_start
    return ParseError(msg, (line, *exprs), start=start, end=max(end, start + 1))


class Parser:
    """Recursive-descent parser for instructions, with a precedence-climbing (Pratt) parser for expressions. One
    Parser parses one input text.
    """

    def __init__(self, text):
        self.text = text
        self.tokens = tokenize(text)
        self.idx = 0

    # token stream helpers

    @property
    def current(self):
        return self.tokens[self.idx]

    def peek(self, offset=1):
        return self.tokens[min(self.idx + offset, len(self.tokens) - 1)]

    def advance(self):
        token = self.current
        if token.kind != "EOF":
            self.idx += 1
        return token

    def at(self, kind, text=None):
        return self.current.kind == kind and (text is None or self.current.text == text)

    def expect(self, kind, text=None, what=None):
        if not self.at(kind, text):
            raise self.unexpected(what if what else f"'{text}'")
        return self.advance()

    def skip_separators(self):
        while self.at("SEP"):
            self.advance()

    def unexpected(self, expected):
        """Returns a ParseError for the current token, mentioning what was expected instead."""
        token = self.current
        expected = expected.replace("{", "{{").replace("}", "}}")
        if token.kind == "EOF":
            return _error(self.text, token.pos, token.pos + 1, "unexpected end of input, expected " + expected)
        elif token.kind == "SEP":
            return _error(self.text, token.pos, token.pos + 1, "unexpected end of statement, expected " + expected)
        return _error(self.text, token.pos, token.pos + len(token.text), "unexpected '{1}', expected " + expected,
                      token.text)

    # instructions

    def parse(self):
        """Parses the whole input: a single instruction, or a Sequence if there are several."""
        instructions = []
        self.skip_separators()
        while not self.at("EOF"):
            instructions.append(self.parse_instr())
            if not self.at("EOF"):
                if self.at("PUNCT", "}"):
                    raise _error(self.text, self.current.pos, self.current.pos + 1, "unmatched '}}'")
                elif self.at("PUNCT", ")"):
                    raise _error(self.text, self.current.pos, self.current.pos + 1, "unmatched ')'")
                self.expect("SEP", what="';' or a new line")
            self.skip_separators()

        if not instructions:
            raise _error(self.text, 0, 1, "empty input")
        elif len(instructions) == 1:
            return instructions[0]
        return Sequence(tuple(instructions))

    def parse_instr(self):
        token = self.current

        if token.kind == "KEYWORD" and token.text == "let":
            return self.parse_let()
        elif token.kind == "KEYWORD" and token.text == "if":
            return self.parse_if()
        elif token.kind == "KEYWORD" and token.text == "while":
            self.advance()
            cond = self.parse_expr()
            return While(cond, self.parse_block())
        elif token.kind == "PUNCT" and token.text == "{":
            return self.parse_block()
        elif token.kind == "ID" and self.peek().kind == "OP" and self.peek().text == "=":
            self.advance()
            self.advance()
            return Mutate(token.text, self.parse_expr())

        return ExprStmt(self.parse_expr())

    def parse_let(self):
        self.expect("KEYWORD", "let")
        mutable = self.at("KEYWORD", "mut")
        if mutable:
            self.advance()

        name = self.expect("ID", what="a variable name").text
        self.expect("OP", "=")
        expr = self.parse_expr()
        return LetMut(name, expr) if mutable else Let(name, expr)

    def parse_if(self):
        self.expect("KEYWORD", "if")
        cond = self.parse_expr()
        then = self.parse_block()

        offset = 0
        while self.peek(offset).kind == "SEP" and self.peek(offset).text == "\n":
            offset += 1
        if self.peek(offset).kind == "KEYWORD" and self.peek(offset).text == "else":
            self.idx += offset  # allow "}\nelse {"

        self.expect("KEYWORD", "else", what="'else'")
        if self.at("KEYWORD", "if"):
            return IfElse(cond, then, self.parse_if())
        return IfElse(cond, then, self.parse_block())

    def parse_block(self):
        """Parses "{" <instr>* "}" into a Block."""
        self.expect("PUNCT", "{")
        instructions = []
        self.skip_separators()

        while not self.at("PUNCT", "}"):
            if self.at("EOF"):
                raise self.unexpected("'}' to close block")
            instructions.append(self.parse_instr())
            if not self.at("PUNCT", "}"):
                self.expect("SEP", what="';', a new line or '}'")
            self.skip_separators()

        self.advance()
        return Block(tuple(instructions))

    # expressions

    def parse_expr(self, min_precedence=1):
        """Precedence climbing: parses a primary, then folds infix operators binding at least as tight as
        min_precedence. Left associativity comes from parsing right operands with a strictly higher minimum.
        """
        left = self.parse_primary()

        while self.current.kind == "OP" and PRECEDENCE.get(self.current.text, 0) >= min_precedence:
            operator = self.advance().text
            right = self.parse_expr(PRECEDENCE[operator] + 1)
            left = BinOp(left, operator, right)

        return left

    def parse_primary(self):
        token = self.current

        if token.kind == "INT":
            self.advance()
            return Const(self.integer(token.text, token))
        elif token.kind == "OP" and token.text == "-" and self.peek().kind == "INT":
            self.advance()
            digits = self.advance()
            return Const(self.integer("-" + digits.text, token, end=digits.pos + len(digits.text)))
        elif token.kind == "KEYWORD" and token.text in ("true", "false"):
            self.advance()
            return Const(TRUE if token.text == "true" else FALSE)
        elif token.kind == "ID":
            self.advance()
            return Var(token.text)
        elif token.kind == "PUNCT" and token.text == "(":
            self.advance()
            expr = self.parse_expr()
            self.expect("PUNCT", ")", what="')'")
            return expr

        raise self.unexpected("an operand")

    def integer(self, literal, token, end=None):
        number = int(literal)
        if not INT_MIN <= number <= INT_MAX:
            end = end if end is not None else token.pos + len(token.text)
            raise _error(self.text, token.pos, end, "integer literal '{1}' out of range", literal)
        return Integer(number)


def parse(text):
    """Parses text into a single Instruction. Raises ParseError on malformed input."""
    parser = Parser(text)
    instruction = parser.parse()

    if not parser.at("EOF"):
        raise GenericException("parser stopped before end of input", text, internal=True)
    return instruction

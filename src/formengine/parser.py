"""Parser for formula and rule expressions.

Grammar (loosest to tightest binding):
    expr        = binary ("?" expr ":" expr)?
    binary      = unary (BINOP unary)*          (precedence climbing, see BINARY_PRECEDENCE)
    unary       = ("+" | "-" | "!" | "~") unary | postfix
    postfix     = primary ("." NAME | "[" expr "]" | "(" args ")")*
    primary     = NUMBER | STRING | "true" | "false" | "null" | NAME
                | "(" expr ")" | "[" args "]"

Calls and array literals are accepted by the grammar but have no evaluation
rule, so they fail when evaluated rather than when parsed.
"""

import re
from dataclasses import dataclass
from functools import lru_cache

from . import ast
from .config import DEFAULT_CONFIG, EngineConfig
from .errors import ParseError
from .semantics import number


@dataclass
class Token:
    type: str
    value: str
    col: int


# Binary operators: precedence (higher binds tighter)
BINARY_PRECEDENCE = {
    "||": 1,
    "&&": 2,
    "==": 6,
    "!=": 6,
    "===": 6,
    "!==": 6,
    "<": 7,
    ">": 7,
    "<=": 7,
    ">=": 7,
    "+": 9,
    "-": 9,
    "*": 10,
    "/": 10,
    "%": 10,
    "**": 11,
}
RIGHT_ASSOCIATIVE = {"**"}
UNARY_OPERATORS = {"+", "-", "!", "~"}

_SIMPLE_ESCAPES = {"n": "\n", "r": "\r", "t": "\t", "b": "\b", "f": "\f", "v": "\v"}


class Lexer:
    """Tokeniser for a single expression."""

    KEYWORDS = {"true", "false", "null"}

    TOKEN_PATTERNS = [
        (re.compile(r"\s+"), "WS"),
        (re.compile(r"(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?"), "NUMBER"),
        (re.compile(r'"(?:\\.|[^"\\])*"'), "STRING"),
        (re.compile(r"'(?:\\.|[^'\\])*'"), "STRING"),
        (re.compile(r"(?:[^\W\d]|\$)(?:\w|\$)*"), "IDENT"),
        # operators and punctuation, longest first; the token type is the symbol
        (re.compile(r"===|!==|\*\*|==|!=|<=|>=|&&|\|\||[-+*/%<>!~?:()\[\].,]"), "OP"),
    ]

    def __init__(self, source: str):
        self.source = source
        self.pos = 0
        self.tokens: list[Token] = []
        self._tokenise()

    def _tokenise(self) -> None:
        while self.pos < len(self.source):
            for pattern, ttype in self.TOKEN_PATTERNS:
                m = pattern.match(self.source, self.pos)
                if m:
                    value = m.group(0)
                    col = self.pos + 1
                    if ttype == "OP":
                        ttype = value
                    elif ttype == "IDENT" and value in self.KEYWORDS:
                        ttype = value.upper()
                    if ttype != "WS":
                        self.tokens.append(Token(ttype, value, col))
                    self.pos += len(value)
                    break
            else:
                raise ParseError(f"unexpected char: {self.source[self.pos]!r}", self.pos + 1)

        self.tokens.append(Token("EOF", "", self.pos + 1))


def _unescape(body: str) -> str:
    out = []
    chars = iter(body)
    for c in chars:
        if c == "\\":
            nxt = next(chars, "")
            out.append(_SIMPLE_ESCAPES.get(nxt, nxt))
        else:
            out.append(c)
    return "".join(out)


class Parser:
    """Recursive descent parser with precedence climbing for binary operators."""

    def __init__(self, tokens: list[Token], max_depth: int = DEFAULT_CONFIG.max_depth):
        self.tokens = tokens
        self.pos = 0
        self.max_depth = max_depth
        self.depth = 0

    def peek(self, offset: int = 0) -> Token:
        idx = self.pos + offset
        if idx >= len(self.tokens):
            return self.tokens[-1]
        return self.tokens[idx]

    def at(self, *types: str) -> bool:
        return self.peek().type in types

    def consume(self, ttype: str) -> Token:
        tok = self.peek()
        if tok.type != ttype:
            raise ParseError(f"expected {ttype!r}, got {tok.type!r}", tok.col)
        self.pos += 1
        return tok

    def match(self, *types: str) -> Token | None:
        if self.at(*types):
            tok = self.peek()
            self.pos += 1
            return tok
        return None

    def _enter(self) -> None:
        self.depth += 1
        if self.depth > self.max_depth:
            raise ParseError("expression nested too deeply", self.peek().col)

    def _leave(self) -> None:
        self.depth -= 1

    def parse(self) -> ast.Expr:
        """Parse a complete expression; trailing tokens are an error."""
        if self.at("EOF"):
            raise ParseError("empty expression", self.peek().col)
        expr = self.parse_expr()
        tok = self.peek()
        if tok.type != "EOF":
            raise ParseError(f"unexpected token: {tok.value!r}", tok.col)
        return expr

    def parse_expr(self) -> ast.Expr:
        self._enter()
        test = self.parse_binary(0)
        if self.match("?"):
            consequent = self.parse_expr()
            self.consume(":")
            alternate = self.parse_expr()
            test = ast.ConditionalExpression(test=test, consequent=consequent, alternate=alternate)
        self._leave()
        return test

    def parse_binary(self, min_prec: int) -> ast.Expr:
        left = self.parse_unary()
        while True:
            op = self.peek().type
            prec = BINARY_PRECEDENCE.get(op)
            if prec is None or prec <= min_prec:
                return left
            self.pos += 1
            # right-associative operators let an equal-precedence operator bind to the right
            next_min = prec - 1 if op in RIGHT_ASSOCIATIVE else prec
            self._enter()
            right = self.parse_binary(next_min)
            self._leave()
            left = ast.BinaryExpression(operator=op, left=left, right=right)

    def parse_unary(self) -> ast.Expr:
        if tok := self.match(*UNARY_OPERATORS):
            self._enter()
            argument = self.parse_unary()
            self._leave()
            return ast.UnaryExpression(operator=tok.type, argument=argument)
        return self.parse_postfix()

    def parse_postfix(self) -> ast.Expr:
        """Parse member access and call suffixes."""
        expr = self.parse_primary()

        while True:
            if self.match("."):
                tok = self.peek()
                if not self.match("IDENT", "TRUE", "FALSE", "NULL"):
                    raise ParseError(f"expected property name, got {tok.type!r}", tok.col)
                prop = ast.Identifier(name=tok.value)
                expr = ast.MemberExpression(object=expr, property=prop, computed=False)
            elif self.match("["):
                prop = self.parse_expr()
                self.consume("]")
                expr = ast.MemberExpression(object=expr, property=prop, computed=True)
            elif self.match("("):
                args = self._parse_list(")")
                expr = ast.CallExpression(callee=expr, arguments=tuple(args))
            else:
                return expr

    def parse_primary(self) -> ast.Expr:
        if tok := self.match("NUMBER"):
            return ast.Literal(value=_number(tok.value), raw=tok.value)
        if tok := self.match("STRING"):
            return ast.Literal(value=_unescape(tok.value[1:-1]), raw=tok.value)
        if tok := self.match("TRUE"):
            return ast.Literal(value=True, raw=tok.value)
        if tok := self.match("FALSE"):
            return ast.Literal(value=False, raw=tok.value)
        if tok := self.match("NULL"):
            return ast.Literal(value=None, raw=tok.value)
        if tok := self.match("IDENT"):
            return ast.Identifier(name=tok.value)
        if self.match("("):
            expr = self.parse_expr()
            self.consume(")")
            return expr
        if self.match("["):
            return ast.ArrayExpression(elements=tuple(self._parse_list("]")))

        tok = self.peek()
        if tok.type == "EOF":
            raise ParseError("unexpected end of expression", tok.col)
        raise ParseError(f"unexpected token: {tok.value!r}", tok.col)

    def _parse_list(self, closer: str) -> list[ast.Expr]:
        items: list[ast.Expr] = []
        if not self.at(closer):
            items.append(self.parse_expr())
            while self.match(","):
                items.append(self.parse_expr())
        self.consume(closer)
        return items


def _number(text: str) -> int | float:
    return number(float(text))


def _tree_depth(node: ast.Expr) -> int:
    """Depth of the tree, computed without recursion."""
    deepest = 0
    stack = [(node, 1)]
    while stack:
        current, depth = stack.pop()
        deepest = max(deepest, depth)
        match current:
            case ast.MemberExpression(object=obj, property=prop):
                children = (obj, prop)
            case ast.UnaryExpression(argument=arg):
                children = (arg,)
            case ast.BinaryExpression(left=left, right=right):
                children = (left, right)
            case ast.ConditionalExpression(test=test, consequent=then_e, alternate=else_e):
                children = (test, then_e, else_e)
            case ast.CallExpression(callee=callee, arguments=args):
                children = (callee, *args)
            case ast.ArrayExpression(elements=elements):
                children = elements
            case _:
                children = ()
        stack.extend((child, depth + 1) for child in children)
    return deepest


@lru_cache(maxsize=1024)
def _parse_cached(source: str, max_length: int, max_depth: int) -> ast.Expr:
    if len(source) > max_length:
        raise ParseError(f"expression longer than {max_length} characters", max_length + 1)
    lexer = Lexer(source)
    expr = Parser(lexer.tokens, max_depth=max_depth).parse()
    if _tree_depth(expr) > max_depth:
        raise ParseError("expression nested too deeply", 1)
    return expr


def parse_expression(source: str, config: EngineConfig | None = None) -> ast.Expr:
    """Parse expression source into an AST.

    Raises ParseError on malformed syntax or when the configured limits are exceeded.
    Results are cached; the returned nodes are immutable.
    """
    if not isinstance(source, str):
        raise ParseError(f"expression must be a string, got {type(source).__name__}", 1)
    config = config or DEFAULT_CONFIG
    return _parse_cached(source, config.max_expression_length, config.max_depth)

"""
Condition expressions for //:if directives

Parses the raw condition text of an if directive into a small AST and
evaluates it against a constant table.

Grammar (loosest binding first):

    or          := and ( '||' and )*
    and         := comparison ( '&&' comparison )*
    comparison  := bit_or ( ('=='|'!='|'<'|'<='|'>'|'>=') bit_or )?
    bit_or      := bit_and ( '|' bit_and )*
    bit_and     := additive ( '&' additive )*
    additive    := term ( ('+'|'-') term )*
    term        := unary ( ('*'|'/') unary )*
    unary       := ('!'|'~'|'-') unary | primary
    primary     := NUMBER | IDENTIFIER | 'true' | 'false' | '(' or ')'

Typing rules:
- Integer and Float are both numeric and mix freely
- Comparing a numeric value with a Boolean is a TypeMismatchError
- '&&', '||' and '!' take Boolean operands and short-circuit
- Integer arithmetic wraps to signed 64 bits

Example:
    >>> expr = ExpressionParser("quality >= 4.0 && !LOW_POWER").parse()
    >>> ExpressionEvaluator(registry).truth_evaluate(expr)
    True
"""

import re
from dataclasses import dataclass
from typing import Callable, Dict, List, NoReturn, Optional, Union

from ..models.context import ConstantTable
from ..models.errors import (
    EvaluationError,
    ExpressionSyntaxError,
    TypeMismatchError,
    UndefinedConstantError,
)
from ..models.values import (
    INT64_MAX,
    Boolean,
    Float,
    GlobalValue,
    Integer,
    int64_wrap,
    numeric_is,
    typeName_get,
)


TOKEN_PATTERN = re.compile(
    r"""
    (?P<space>\s+)
  | (?P<number>
        0[xX][0-9a-fA-F_]+
      | 0[oO][0-7_]+
      | 0[bB][01_]+
      | [0-9][0-9_]*(?:\.[0-9_]*)?(?:[eE][+-]?[0-9]+)?
    )
  | (?P<name>[A-Za-z_][A-Za-z0-9_]*)
  | (?P<op>&&|\|\||==|!=|<=|>=|[<>!~+\-*/&|()])
    """,
    re.VERBOSE,
)

COMPARISON_OPS = ("==", "!=", "<", "<=", ">", ">=")


@dataclass(frozen=True)
class Token:
    kind: str       # "number", "name", "op" or "eof"
    text: str
    position: int


@dataclass(frozen=True)
class Literal:
    value: GlobalValue


@dataclass(frozen=True)
class Reference:
    name: str


@dataclass(frozen=True)
class Unary:
    op: str
    operand: "Expression"


@dataclass(frozen=True)
class Binary:
    """Arithmetic or bitwise operation"""
    op: str
    left: "Expression"
    right: "Expression"


@dataclass(frozen=True)
class Comparison:
    op: str
    left: "Expression"
    right: "Expression"


@dataclass(frozen=True)
class Logical:
    """Short-circuit '&&' or '||'"""
    op: str
    left: "Expression"
    right: "Expression"


Expression = Union[Literal, Reference, Unary, Binary, Comparison, Logical]


def tokens_make(source: str) -> List[Token]:
    """
    Split condition text into tokens

    Returns:
        Tokens in order, terminated by an "eof" token

    Raises:
        ExpressionSyntaxError: On a character that starts no token
    """
    tokens: List[Token] = []
    position = 0

    while position < len(source):
        match = TOKEN_PATTERN.match(source, position)
        if not match:
            raise ExpressionSyntaxError(
                f"unexpected character '{source[position]}' at column {position + 1} "
                f"in condition '{source}'"
            )
        kind = match.lastgroup
        if kind is not None and kind != "space":
            tokens.append(Token(kind=kind, text=match.group(), position=position))
        position = match.end()

    tokens.append(Token(kind="eof", text="", position=len(source)))
    return tokens


def number_parse(text: str) -> GlobalValue:
    """
    Convert a numeric literal token to Integer or Float

    Example:
        >>> number_parse("0xFF")
        Integer(value=255)
        >>> number_parse("4.0")
        Float(value=4.0)
    """
    digits = text.replace("_", "")
    prefix = digits[:2].lower()

    try:
        if prefix in ("0x", "0o", "0b"):
            value = int(digits[2:], {"0x": 16, "0o": 8, "0b": 2}[prefix])
        elif "." in digits or "e" in digits.lower():
            return Float(float(digits))
        else:
            value = int(digits, 10)
    except ValueError:
        raise ExpressionSyntaxError(f"malformed number '{text}'") from None

    if value > INT64_MAX:
        raise ExpressionSyntaxError(f"integer literal '{text}' does not fit in 64 bits")
    return Integer(value)


class ExpressionParser:
    """
    Recursive descent parser for condition text

    One method per precedence level; each consumes tokens from self.tokens
    starting at self.position.
    """

    def __init__(self, source: str):
        self.source = source
        self.tokens: List[Token] = []
        self.position = 0

    def parse(self) -> Expression:
        """
        Parse the whole condition

        Raises:
            ExpressionSyntaxError: Empty condition, unbalanced parentheses,
                                   dangling operators or trailing tokens
        """
        self.tokens = tokens_make(self.source)
        self.position = 0

        if self.peek().kind == "eof":
            raise ExpressionSyntaxError("empty condition")

        expression = self.or_parse()
        if self.peek().kind != "eof":
            self.error(f"unexpected '{self.peek().text}'")
        return expression

    def peek(self) -> Token:
        return self.tokens[self.position]

    def advance(self) -> Token:
        token = self.tokens[self.position]
        self.position += 1
        return token

    def op_match(self, *ops: str) -> Optional[str]:
        """Consume and return the next token if it is one of the given operators"""
        token = self.peek()
        if token.kind == "op" and token.text in ops:
            self.position += 1
            return token.text
        return None

    def or_parse(self) -> Expression:
        left = self.and_parse()
        while self.op_match("||"):
            left = Logical("||", left, self.and_parse())
        return left

    def and_parse(self) -> Expression:
        left = self.comparison_parse()
        while self.op_match("&&"):
            left = Logical("&&", left, self.comparison_parse())
        return left

    def comparison_parse(self) -> Expression:
        left = self.bitOr_parse()
        op = self.op_match(*COMPARISON_OPS)
        if op is None:
            return left

        expression = Comparison(op, left, self.bitOr_parse())
        if self.peek().kind == "op" and self.peek().text in COMPARISON_OPS:
            self.error("comparisons cannot be chained; use parentheses and '&&'")
        return expression

    def bitOr_parse(self) -> Expression:
        left = self.bitAnd_parse()
        while self.op_match("|"):
            left = Binary("|", left, self.bitAnd_parse())
        return left

    def bitAnd_parse(self) -> Expression:
        left = self.additive_parse()
        while self.op_match("&"):
            left = Binary("&", left, self.additive_parse())
        return left

    def additive_parse(self) -> Expression:
        left = self.term_parse()
        while True:
            op = self.op_match("+", "-")
            if op is None:
                return left
            left = Binary(op, left, self.term_parse())

    def term_parse(self) -> Expression:
        left = self.unary_parse()
        while True:
            op = self.op_match("*", "/")
            if op is None:
                return left
            left = Binary(op, left, self.unary_parse())

    def unary_parse(self) -> Expression:
        op = self.op_match("!", "~", "-")
        if op is not None:
            return Unary(op, self.unary_parse())
        return self.primary_parse()

    def primary_parse(self) -> Expression:
        token = self.peek()

        if token.kind == "number":
            self.advance()
            return Literal(number_parse(token.text))

        if token.kind == "name":
            self.advance()
            if token.text == "true":
                return Literal(Boolean(True))
            if token.text == "false":
                return Literal(Boolean(False))
            return Reference(token.text)

        if self.op_match("("):
            inner = self.or_parse()
            if not self.op_match(")"):
                self.error("missing closing parenthesis")
            return inner

        if token.kind == "eof":
            self.error("unexpected end of condition")
        self.error(f"unexpected '{token.text}'")

    def error(self, message: str) -> NoReturn:
        """
        Raise a syntax error pointing at the current token

        Raises:
            ExpressionSyntaxError: Always
        """
        column = self.peek().position + 1
        raise ExpressionSyntaxError(f"{message} at column {column} in condition '{self.source}'")


def integer_divide(left: int, right: int) -> int:
    """Integer division truncating toward zero"""
    quotient = abs(left) // abs(right)
    return quotient if (left < 0) == (right < 0) else -quotient


ARITHMETIC: Dict[str, Callable] = {
    "+": lambda a, b: a + b,
    "-": lambda a, b: a - b,
    "*": lambda a, b: a * b,
}

ORDERING: Dict[str, Callable] = {
    "==": lambda a, b: a == b,
    "!=": lambda a, b: a != b,
    "<": lambda a, b: a < b,
    "<=": lambda a, b: a <= b,
    ">": lambda a, b: a > b,
    ">=": lambda a, b: a >= b,
}


class ExpressionEvaluator:
    """
    Evaluates parsed expressions against a constant table

    Pure: evaluation never mutates the table and returns the same result
    for the same snapshot. Errors carry no file location; the engine
    attaches it.
    """

    def __init__(self, constants: ConstantTable):
        self.constants = constants

    def evaluate(self, expression: Expression) -> GlobalValue:
        """
        Evaluate an expression to a typed value

        Raises:
            UndefinedConstantError: Unknown identifier
            TypeMismatchError: Incompatible operand types
            EvaluationError: Division by zero
        """
        if isinstance(expression, Literal):
            return expression.value
        if isinstance(expression, Reference):
            return self.reference_resolve(expression.name)
        if isinstance(expression, Unary):
            return self.unary_apply(expression.op, self.evaluate(expression.operand))
        if isinstance(expression, Binary):
            return self.binary_apply(
                expression.op, self.evaluate(expression.left), self.evaluate(expression.right)
            )
        if isinstance(expression, Comparison):
            return self.comparison_apply(
                expression.op, self.evaluate(expression.left), self.evaluate(expression.right)
            )
        return self.logical_apply(expression)

    def truth_evaluate(self, expression: Expression) -> bool:
        """
        Evaluate an if condition to a plain bool

        Booleans are used as is; numbers are true when non-zero.
        """
        result = self.evaluate(expression)
        if isinstance(result, Boolean):
            return result.value
        return result.value != 0

    def reference_resolve(self, name: str) -> GlobalValue:
        value = self.constants.lookup(name)
        if value is None:
            raise UndefinedConstantError(name)
        return value

    def unary_apply(self, op: str, operand: GlobalValue) -> GlobalValue:
        if op == "!":
            if not isinstance(operand, Boolean):
                raise TypeMismatchError(f"'!' expects a boolean, got {typeName_get(operand)}")
            return Boolean(not operand.value)

        if op == "~":
            if not isinstance(operand, Integer):
                raise TypeMismatchError(f"'~' expects an integer, got {typeName_get(operand)}")
            return Integer(int64_wrap(~operand.value))

        # unary minus
        if isinstance(operand, Integer):
            return Integer(int64_wrap(-operand.value))
        if isinstance(operand, Float):
            return Float(-operand.value)
        raise TypeMismatchError("'-' expects a number, got boolean")

    def binary_apply(self, op: str, left: GlobalValue, right: GlobalValue) -> GlobalValue:
        if op in ("&", "|"):
            return self.bitwise_apply(op, left, right)

        if not (numeric_is(left) and numeric_is(right)):
            raise TypeMismatchError(
                f"'{op}' expects numbers, got {typeName_get(left)} and {typeName_get(right)}"
            )

        if isinstance(left, Integer) and isinstance(right, Integer):
            if op == "/":
                if right.value == 0:
                    raise EvaluationError("integer division by zero")
                return Integer(int64_wrap(integer_divide(left.value, right.value)))
            return Integer(int64_wrap(ARITHMETIC[op](left.value, right.value)))

        a, b = float(left.value), float(right.value)
        if op == "/":
            if b == 0.0:
                raise EvaluationError("division by zero")
            return Float(a / b)
        return Float(ARITHMETIC[op](a, b))

    def bitwise_apply(self, op: str, left: GlobalValue, right: GlobalValue) -> GlobalValue:
        if isinstance(left, Integer) and isinstance(right, Integer):
            if op == "&":
                return Integer(left.value & right.value)
            return Integer(left.value | right.value)

        if isinstance(left, Boolean) and isinstance(right, Boolean):
            if op == "&":
                return Boolean(left.value and right.value)
            return Boolean(left.value or right.value)

        raise TypeMismatchError(
            f"'{op}' expects two integers or two booleans, "
            f"got {typeName_get(left)} and {typeName_get(right)}"
        )

    def comparison_apply(self, op: str, left: GlobalValue, right: GlobalValue) -> GlobalValue:
        if numeric_is(left) and numeric_is(right):
            return Boolean(ORDERING[op](left.value, right.value))

        if isinstance(left, Boolean) and isinstance(right, Boolean):
            if op not in ("==", "!="):
                raise TypeMismatchError(f"'{op}' cannot order booleans")
            return Boolean(ORDERING[op](left.value, right.value))

        raise TypeMismatchError(
            f"cannot compare {typeName_get(left)} with {typeName_get(right)} using '{op}'"
        )

    def logical_apply(self, expression: Logical) -> GlobalValue:
        left = self.evaluate(expression.left)
        if not isinstance(left, Boolean):
            raise TypeMismatchError(
                f"'{expression.op}' expects booleans, got {typeName_get(left)}"
            )

        # short-circuit
        if expression.op == "&&" and not left.value:
            return left
        if expression.op == "||" and left.value:
            return left

        right = self.evaluate(expression.right)
        if not isinstance(right, Boolean):
            raise TypeMismatchError(
                f"'{expression.op}' expects booleans, got {typeName_get(right)}"
            )
        return right


def condition_evaluate(source: str, constants: ConstantTable) -> bool:
    """
    Parse and evaluate condition text in one step

    Example:
        >>> condition_evaluate("SAMPLES > 16", registry)
        True
    """
    return ExpressionEvaluator(constants).truth_evaluate(ExpressionParser(source).parse())

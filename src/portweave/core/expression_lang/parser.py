"""
Recursive descent parser for the portweave expression language.

Grammar (precedence low to high, JavaScript ordering):
    program      → "return"? expr ";"? EOF
    expr         → arrow | conditional
    arrow        → (IDENT | "(" (IDENT ("," IDENT)*)? ")") "=>" expr
    conditional  → nullish ("?" expr ":" expr)?
    nullish      → or ("??" or)*
    or           → and ("||" and)*
    and          → equality ("&&" equality)*
    equality     → relational (("==" | "!=" | "===" | "!==") relational)*
    relational   → additive (("<" | ">" | "<=" | ">=") additive)*
    additive     → multiply (("+" | "-") multiply)*
    multiply     → exponent (("*" | "/" | "%") exponent)*
    exponent     → unary ("**" exponent)?
    unary        → ("!" | "-" | "+" | "typeof") unary | postfix
    postfix      → primary ("." name | "?." name | "?."? "[" expr "]" | "(" args ")")*
    primary      → literal | IDENT | "(" expr ")" | array | object
    array        → "[" (expr ("," expr)*)? ","? "]"
    object       → "{" (key ":" expr | IDENT) ("," ...)* ","? "}"
"""

from __future__ import annotations

from functools import lru_cache

from portweave.core.errors import ExpressionError
from portweave.core.expression_lang.tokenizer import (
    ExpressionTokenError,
    Token,
    TokenKind,
    tokenize,
)
from portweave.core.ir.expressions import (
    ArrayLiteral,
    ArrowFunc,
    BinaryExpr,
    BinaryOp,
    CallExpr,
    ConditionalExpr,
    Expr,
    Identifier,
    Literal,
    MemberExpr,
    ObjectLiteral,
    UnaryExpr,
    UnaryOp,
)


class ExpressionParseError(ExpressionError):
    """Error during expression parsing."""


_EQUALITY_OPS: dict[TokenKind, BinaryOp] = {
    TokenKind.EQ: BinaryOp.EQ,
    TokenKind.NE: BinaryOp.NE,
    TokenKind.STRICT_EQ: BinaryOp.STRICT_EQ,
    TokenKind.STRICT_NE: BinaryOp.STRICT_NE,
}

_RELATIONAL_OPS: dict[TokenKind, BinaryOp] = {
    TokenKind.LT: BinaryOp.LT,
    TokenKind.GT: BinaryOp.GT,
    TokenKind.LE: BinaryOp.LE,
    TokenKind.GE: BinaryOp.GE,
}

_MULTIPLY_OPS: dict[TokenKind, BinaryOp] = {
    TokenKind.STAR: BinaryOp.MUL,
    TokenKind.SLASH: BinaryOp.DIV,
    TokenKind.PERCENT: BinaryOp.MOD,
}

_UNARY_OPS: dict[TokenKind, UnaryOp] = {
    TokenKind.NOT: UnaryOp.NOT,
    TokenKind.MINUS: UnaryOp.NEG,
    TokenKind.PLUS: UnaryOp.PLUS,
    TokenKind.TYPEOF: UnaryOp.TYPEOF,
}

# Tokens usable as a property name after "." (keywords included: obj.null is legal JS)
_NAME_KINDS = frozenset(
    {
        TokenKind.IDENT,
        TokenKind.TRUE,
        TokenKind.FALSE,
        TokenKind.NULL,
        TokenKind.UNDEFINED,
        TokenKind.TYPEOF,
        TokenKind.RETURN,
    }
)


class _Parser:
    """Recursive descent parser for expressions."""

    def __init__(self, tokens: list[Token]) -> None:
        self.tokens = tokens
        self.pos = 0

    @property
    def current(self) -> Token:
        return self.tokens[self.pos]

    def peek(self, offset: int = 0) -> Token:
        idx = self.pos + offset
        if idx < len(self.tokens):
            return self.tokens[idx]
        return self.tokens[-1]  # EOF

    def advance(self) -> Token:
        tok = self.tokens[self.pos]
        if self.pos < len(self.tokens) - 1:
            self.pos += 1
        return tok

    def expect(self, kind: TokenKind) -> Token:
        tok = self.current
        if tok.kind != kind:
            raise ExpressionParseError(
                f"Expected {kind}, got {tok.kind} ({tok.value!r})",
                tok.pos,
            )
        return self.advance()

    def match(self, *kinds: TokenKind) -> Token | None:
        if self.current.kind in kinds:
            return self.advance()
        return None

    # -- Grammar rules --

    def parse_program(self) -> Expr:
        """Optional 'return', one expression, optional ';'."""
        self.match(TokenKind.RETURN)
        expr = self.parse_expr()
        self.match(TokenKind.SEMICOLON)
        return expr

    def parse_expr(self) -> Expr:
        params = self._arrow_params()
        if params is not None:
            return ArrowFunc(params=params, body=self.parse_expr())
        return self.parse_conditional()

    def _arrow_params(self) -> list[str] | None:
        """Consume an arrow function head if one starts here."""
        if self.current.kind == TokenKind.IDENT and self.peek(1).kind == TokenKind.ARROW:
            name = self.advance().value
            self.advance()
            return [name]

        if self.current.kind != TokenKind.LPAREN:
            return None

        offset = 1
        names: list[str] = []
        while self.peek(offset).kind == TokenKind.IDENT:
            names.append(self.peek(offset).value)
            offset += 1
            if self.peek(offset).kind == TokenKind.COMMA:
                offset += 1
                continue
            break
        if self.peek(offset).kind != TokenKind.RPAREN or self.peek(offset + 1).kind != TokenKind.ARROW:
            return None

        for _ in range(offset + 2):
            self.advance()
        return names

    def parse_conditional(self) -> Expr:
        """nullish ('?' expr ':' expr)?"""
        test = self.parse_nullish()
        if self.match(TokenKind.QUESTION):
            consequent = self.parse_expr()
            self.expect(TokenKind.COLON)
            alternate = self.parse_expr()
            return ConditionalExpr(test=test, consequent=consequent, alternate=alternate)
        return test

    def parse_nullish(self) -> Expr:
        left = self.parse_or()
        while self.match(TokenKind.NULLISH):
            right = self.parse_or()
            left = BinaryExpr(op=BinaryOp.NULLISH, left=left, right=right)
        return left

    def parse_or(self) -> Expr:
        left = self.parse_and()
        while self.match(TokenKind.OR):
            right = self.parse_and()
            left = BinaryExpr(op=BinaryOp.OR, left=left, right=right)
        return left

    def parse_and(self) -> Expr:
        left = self.parse_equality()
        while self.match(TokenKind.AND):
            right = self.parse_equality()
            left = BinaryExpr(op=BinaryOp.AND, left=left, right=right)
        return left

    def parse_equality(self) -> Expr:
        left = self.parse_relational()
        while self.current.kind in _EQUALITY_OPS:
            op = _EQUALITY_OPS[self.advance().kind]
            right = self.parse_relational()
            left = BinaryExpr(op=op, left=left, right=right)
        return left

    def parse_relational(self) -> Expr:
        left = self.parse_additive()
        while self.current.kind in _RELATIONAL_OPS:
            op = _RELATIONAL_OPS[self.advance().kind]
            right = self.parse_additive()
            left = BinaryExpr(op=op, left=left, right=right)
        return left

    def parse_additive(self) -> Expr:
        """multiply (('+' | '-') multiply)*"""
        left = self.parse_multiply()
        while self.current.kind in (TokenKind.PLUS, TokenKind.MINUS):
            op = BinaryOp.ADD if self.current.kind == TokenKind.PLUS else BinaryOp.SUB
            self.advance()
            right = self.parse_multiply()
            left = BinaryExpr(op=op, left=left, right=right)
        return left

    def parse_multiply(self) -> Expr:
        """exponent (('*' | '/' | '%') exponent)*"""
        left = self.parse_exponent()
        while self.current.kind in _MULTIPLY_OPS:
            op = _MULTIPLY_OPS[self.advance().kind]
            right = self.parse_exponent()
            left = BinaryExpr(op=op, left=left, right=right)
        return left

    def parse_exponent(self) -> Expr:
        """unary ('**' exponent)?  -- right associative"""
        left = self.parse_unary()
        if self.match(TokenKind.STARSTAR):
            right = self.parse_exponent()
            return BinaryExpr(op=BinaryOp.POW, left=left, right=right)
        return left

    def parse_unary(self) -> Expr:
        if self.current.kind in _UNARY_OPS:
            op = _UNARY_OPS[self.advance().kind]
            return UnaryExpr(op=op, operand=self.parse_unary())
        return self.parse_postfix()

    def parse_postfix(self) -> Expr:
        """primary followed by member access, indexing and calls."""
        expr = self.parse_primary()
        while True:
            if self.match(TokenKind.DOT):
                expr = MemberExpr(obj=expr, prop=Literal(value=self._expect_name()))
            elif self.match(TokenKind.OPTIONAL_DOT):
                if self.match(TokenKind.LBRACKET):
                    index = self.parse_expr()
                    self.expect(TokenKind.RBRACKET)
                    expr = MemberExpr(obj=expr, prop=index, computed=True, optional=True)
                else:
                    expr = MemberExpr(
                        obj=expr, prop=Literal(value=self._expect_name()), optional=True
                    )
            elif self.match(TokenKind.LBRACKET):
                index = self.parse_expr()
                self.expect(TokenKind.RBRACKET)
                expr = MemberExpr(obj=expr, prop=index, computed=True)
            elif self.match(TokenKind.LPAREN):
                expr = CallExpr(callee=expr, args=self._parse_args(TokenKind.RPAREN))
            else:
                return expr

    def _expect_name(self) -> str:
        tok = self.current
        if tok.kind not in _NAME_KINDS:
            raise ExpressionParseError(f"Expected property name, got {tok.value!r}", tok.pos)
        return self.advance().value

    def _parse_args(self, closing: TokenKind) -> list[Expr]:
        """Comma separated expressions up to (and including) the closing token."""
        items: list[Expr] = []
        while self.current.kind != closing:
            items.append(self.parse_expr())
            if not self.match(TokenKind.COMMA):
                break
        self.expect(closing)
        return items

    def parse_primary(self) -> Expr:
        tok = self.current

        # Parenthesized expression
        if tok.kind == TokenKind.LPAREN:
            self.advance()
            expr = self.parse_expr()
            self.expect(TokenKind.RPAREN)
            return expr

        if tok.kind == TokenKind.LBRACKET:
            self.advance()
            return ArrayLiteral(items=self._parse_args(TokenKind.RBRACKET))

        if tok.kind == TokenKind.LBRACE:
            return self._parse_object()

        # Literals
        if tok.kind == TokenKind.INT:
            self.advance()
            return Literal(value=int(tok.value))
        if tok.kind == TokenKind.FLOAT:
            self.advance()
            return Literal(value=float(tok.value))
        if tok.kind == TokenKind.STRING:
            self.advance()
            return Literal(value=tok.value)
        if tok.kind == TokenKind.TRUE:
            self.advance()
            return Literal(value=True)
        if tok.kind == TokenKind.FALSE:
            self.advance()
            return Literal(value=False)
        if tok.kind in (TokenKind.NULL, TokenKind.UNDEFINED):
            self.advance()
            return Literal(value=None)

        if tok.kind == TokenKind.IDENT:
            self.advance()
            return Identifier(name=tok.value)

        raise ExpressionParseError(
            f"Unexpected token: {tok.kind} ({tok.value!r})",
            tok.pos,
        )

    def _parse_object(self) -> ObjectLiteral:
        self.expect(TokenKind.LBRACE)
        entries: list[tuple[str, Expr]] = []
        while self.current.kind != TokenKind.RBRACE:
            key_tok = self.current
            if key_tok.kind in _NAME_KINDS or key_tok.kind in (
                TokenKind.STRING,
                TokenKind.INT,
            ):
                self.advance()
            else:
                raise ExpressionParseError(f"Invalid object key: {key_tok.value!r}", key_tok.pos)

            if self.match(TokenKind.COLON):
                entries.append((key_tok.value, self.parse_expr()))
            elif key_tok.kind == TokenKind.IDENT:
                # Shorthand {source}
                entries.append((key_tok.value, Identifier(name=key_tok.value)))
            else:
                raise ExpressionParseError("Expected ':' after object key", self.current.pos)

            if not self.match(TokenKind.COMMA):
                break
        self.expect(TokenKind.RBRACE)
        return ObjectLiteral(entries=entries)


@lru_cache(maxsize=512)
def parse_expr(source: str) -> Expr:
    """Parse an expression string into an AST.

    Results are cached; the AST nodes are frozen so sharing them is safe.

    Args:
        source: Expression string (e.g., "source * 2", "value.trim()")

    Returns:
        Parsed expression AST.

    Raises:
        ExpressionParseError: If the expression is invalid (tokenizer
            failures are re-raised as parse errors).
    """
    if not source or not source.strip():
        raise ExpressionParseError("Empty expression", 0)

    try:
        tokens = tokenize(source)
    except ExpressionTokenError as e:
        raise ExpressionParseError(str(e), e.pos) from e

    parser = _Parser(tokens)
    expr = parser.parse_program()

    # Ensure all tokens consumed
    if parser.current.kind != TokenKind.EOF:
        raise ExpressionParseError(
            f"Unexpected token after expression: {parser.current.value!r}",
            parser.current.pos,
        )

    return expr

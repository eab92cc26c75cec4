"""Recursive-descent parser for the Exo language.

The parser pulls tokens from a :class:`~exo.lexer.TokenStream` with a
single token of lookahead and builds the AST defined in :mod:`exo.ast`.

Block-form constructs (``let``, ``if``, ``fn``, ``for``, ``return`` and
``{ ... }`` blocks) are recognised at the top of :meth:`Parser.expression`;
everything else goes through the precedence chain, lowest first::

    assignment -> equality -> comparison -> term -> factor
               -> exponential -> unary -> call -> primary

Expressions in a program or block are separated by ``;``. The separator
may be left out after an expression whose outermost form already ends in
a block, such as ``if c { ... }`` or ``fn f() { ... }``.
"""

from __future__ import annotations

from typing import List, Union

from .ast import (
    Binary, Unary, Call, Identifier, Assign, Literal, Let, Return,
    Block, If, Function, For, Program, Expression, ends_with_block,
)
from .errors import ParseError
from .lexer import Token, TokenStream, TOKEN_TEXT
from .values import NIL


LITERAL_TOKENS = ('INT', 'FLOAT', 'STRING', 'TRUE', 'FALSE', 'NIL')
CLOSING = ('RPAREN', 'RBRACE')


class Parser:
    def __init__(self, tokens: TokenStream):
        self.tokens = tokens
        self.lookahead: Token = tokens.next_token()
        # number of '(' and '{' currently waiting for their closing token
        self.open_delimiters = 0

    def advance(self) -> Token:
        token = self.lookahead
        self.lookahead = self.tokens.next_token()
        return token

    def check(self, kind: str) -> bool:
        return self.lookahead.type == kind

    def match(self, kind: str) -> bool:
        if self.check(kind):
            self.advance()
            return True
        return False

    def consume(self, kind: str) -> Token:
        if self.check(kind):
            return self.advance()
        token = self.lookahead
        if token.type == 'ILLEGAL':
            raise self.lexical_error(token)
        expected = TOKEN_TEXT.get(kind, kind)
        if token.type == 'EOF' and kind in CLOSING:
            raise ParseError('UnterminatedConstruct', f"unexpected end of input, expected '{expected}'",
                             token.line, token.column)
        raise ParseError('ExpectedToken', f"expected '{expected}', got {token.describe()}",
                         token.line, token.column)

    def consume_identifier(self) -> Token:
        token = self.lookahead
        if token.type == 'IDENT':
            return self.advance()
        if token.type == 'ILLEGAL':
            raise self.lexical_error(token)
        raise ParseError('ExpectedIdentifier', f"expected identifier, got {token.describe()}",
                         token.line, token.column)

    def lexical_error(self, token: Token) -> ParseError:
        return ParseError('LexicalError', token.value, token.line, token.column)

    def parse_program(self) -> Program:
        body: List[Expression] = []
        while not self.check('EOF'):
            expr = self.expression()
            body.append(expr)
            if ends_with_block(expr):
                self.match('SEMICOLON')
                continue
            if self.check('EOF'):
                break
            self.consume('SEMICOLON')
        return Program(body)

    def expression(self) -> Expression:
        kind = self.lookahead.type
        if kind == 'FOR':
            return self.for_expression()
        if kind == 'LBRACE':
            return self.block()
        if kind == 'LET':
            return self.let_expression()
        if kind == 'FN':
            return self.function_expression()
        if kind == 'IF':
            return self.if_expression()
        if kind == 'RETURN':
            return self.return_expression()
        return self.assignment()

    def return_expression(self) -> Return:
        keyword = self.consume('RETURN')
        if self.lookahead.type in ('SEMICOLON', 'RBRACE', 'EOF'):
            value = Literal(NIL, keyword.line, keyword.column)
        else:
            value = self.expression()
        return Return(value, keyword.line, keyword.column)

    def if_expression(self) -> If:
        keyword = self.consume('IF')
        condition = self.expression()
        consequence = self.expression()
        alternative = None
        if self.match('ELSE'):
            alternative = self.expression()
        return If(condition, consequence, alternative, keyword.line, keyword.column)

    def function_expression(self) -> Function:
        keyword = self.consume('FN')
        name = self.consume_identifier().value
        self.consume('LPAREN')
        self.open_delimiters += 1
        parameters: List[str] = []
        if not self.check('RPAREN'):
            parameters.append(self.consume_identifier().value)
            while self.match('COMMA'):
                parameters.append(self.consume_identifier().value)
        self.consume('RPAREN')
        self.open_delimiters -= 1
        body = self.expression()
        return Function(name, parameters, body, keyword.line, keyword.column)

    def let_expression(self) -> Let:
        keyword = self.consume('LET')
        name = self.consume_identifier().value
        self.consume('EQ')
        value = self.expression()
        return Let(name, value, keyword.line, keyword.column)

    def block(self) -> Block:
        brace = self.consume('LBRACE')
        self.open_delimiters += 1
        expressions: List[Expression] = []
        separated = True
        trailing_separator = False
        while not self.check('RBRACE'):
            token = self.lookahead
            if token.type == 'EOF':
                raise ParseError('UnterminatedConstruct', "unterminated block, expected '}'",
                                 token.line, token.column)
            if not separated:
                if token.type == 'ILLEGAL':
                    raise self.lexical_error(token)
                raise ParseError('ExpectedToken', f"expected ';', got {token.describe()}",
                                 token.line, token.column)
            expr = self.expression()
            expressions.append(expr)
            trailing_separator = self.match('SEMICOLON')
            separated = trailing_separator or ends_with_block(expr)
        close = self.consume('RBRACE')
        self.open_delimiters -= 1
        # an empty block, or one ending in ';', evaluates to nil
        if not expressions or trailing_separator:
            expressions.append(Literal(NIL, close.line, close.column))
        return Block(expressions, brace.line, brace.column)

    def for_expression(self) -> For:
        keyword = self.consume('FOR')
        variable = self.consume_identifier().value
        self.consume('IN')
        iterable = self.expression()
        if not self.check('LBRACE'):
            token = self.lookahead
            if token.type == 'ILLEGAL':
                raise self.lexical_error(token)
            raise ParseError('ExpectedToken', f"expected '{{' to start loop body, got {token.describe()}",
                             token.line, token.column)
        body = self.block()
        return For(variable, iterable, body, keyword.line, keyword.column)

    # Precedence chain

    def assignment(self) -> Expression:
        expr = self.equality()
        if self.check('EQ'):
            equals = self.advance()
            if not isinstance(expr, Identifier):
                raise ParseError('InvalidAssignmentTarget', 'invalid assignment target',
                                 equals.line, equals.column)
            value = self.assignment()
            return Assign(expr.name, value, expr.line, expr.column)
        return expr

    def equality(self) -> Expression:
        expr = self.comparison()
        while self.lookahead.type in ('EQEQ', 'BANGEQ'):
            op = self.advance()
            expr = Binary(expr, TOKEN_TEXT[op.type], self.comparison(), op.line, op.column)
        return expr

    def comparison(self) -> Expression:
        expr = self.term()
        while self.lookahead.type in ('LT', 'LE', 'GT', 'GE'):
            op = self.advance()
            expr = Binary(expr, TOKEN_TEXT[op.type], self.term(), op.line, op.column)
        return expr

    def term(self) -> Expression:
        expr = self.factor()
        while self.lookahead.type in ('PLUS', 'MINUS'):
            op = self.advance()
            expr = Binary(expr, TOKEN_TEXT[op.type], self.factor(), op.line, op.column)
        return expr

    def factor(self) -> Expression:
        expr = self.exponential()
        while self.lookahead.type in ('STAR', 'SLASH'):
            op = self.advance()
            expr = Binary(expr, TOKEN_TEXT[op.type], self.exponential(), op.line, op.column)
        return expr

    def exponential(self) -> Expression:
        expr = self.unary()
        while self.check('CARET'):
            op = self.advance()
            expr = Binary(expr, '^', self.unary(), op.line, op.column)
        return expr

    def unary(self) -> Expression:
        if self.lookahead.type in ('MINUS', 'BANG'):
            op = self.advance()
            operand = self.unary()
            return Unary(TOKEN_TEXT[op.type], operand, op.line, op.column)
        return self.call()

    def call(self) -> Expression:
        callee = self.primary()
        if not self.check('LPAREN'):
            return callee
        self.advance()
        self.open_delimiters += 1
        args: List[Expression] = []
        if not self.check('RPAREN'):
            args.append(self.expression())
            while self.match('COMMA'):
                args.append(self.expression())
        self.consume('RPAREN')
        self.open_delimiters -= 1
        return Call(callee, args, callee.line, callee.column)

    def primary(self) -> Expression:
        token = self.lookahead
        if token.type == 'LPAREN':
            self.advance()
            self.open_delimiters += 1
            expr = self.expression()
            self.consume('RPAREN')
            self.open_delimiters -= 1
            return expr
        if token.type == 'IDENT':
            self.advance()
            return Identifier(token.value, token.line, token.column)
        if token.type in LITERAL_TOKENS:
            self.advance()
            return Literal(token.value, token.line, token.column)
        if token.type == 'ILLEGAL':
            raise self.lexical_error(token)
        if token.type == 'EOF':
            kind = 'UnterminatedConstruct' if self.open_delimiters else 'UnexpectedToken'
            raise ParseError(kind, 'unexpected end of input', token.line, token.column)
        raise ParseError('UnexpectedToken', f"unexpected token: {token.describe()}",
                         token.line, token.column)


def parse_program(source: Union[str, TokenStream]) -> Program:
    """Parse Exo source (or an existing token stream) into a Program AST.

    Raises :class:`ParseError` on the first syntax error; no partial AST
    is returned.
    """
    tokens = TokenStream(source) if isinstance(source, str) else source
    parser = Parser(tokens)
    try:
        return parser.parse_program()
    except RecursionError:
        token = parser.lookahead
        raise ParseError('NestingTooDeep', 'expression nested too deeply',
                         token.line, token.column) from None

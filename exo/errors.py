"""Error types raised by the Exo parser and interpreter.

Both taxonomies carry a ``kind`` naming the failure, a human readable
message and the source position (1-based line and column) where the
problem was detected.
"""


class ExoError(Exception):
    """Base class for all located Exo errors."""
    label = 'Error'

    def __init__(self, kind: str, message: str, line: int = 0, column: int = 0):
        super().__init__(f"{self.label} at line {line} column {column}: {message}")
        self.kind = kind
        self.message = message
        self.line = line
        self.column = column


class ParseError(ExoError):
    """Raised when source text cannot be turned into an AST.

    Kinds: UnexpectedToken, ExpectedToken, ExpectedIdentifier,
    InvalidAssignmentTarget, UnterminatedConstruct, LexicalError,
    NestingTooDeep.
    """
    label = 'Parse error'


class ExoRuntimeError(ExoError):
    """Raised when evaluating an AST fails.

    Kinds: TypeMismatch, UndefinedOperatorForType, UndefinedVariable,
    ArityMismatch, NotCallable, DivisionByZero, NonBooleanCondition,
    NotIterable, Overflow, RecursionLimit, InternalError.
    """
    label = 'Runtime error'

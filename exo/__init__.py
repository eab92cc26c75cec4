# Exo language package
# This package provides a parser and tree-walking interpreter for Exo,
# a small expression-oriented scripting language.
from .errors import ExoError, ParseError, ExoRuntimeError
from .environment import Environment
from .lexer import Token, TokenStream, tokenize
from .parser import parse_program
from .interpreter import Interpreter, new_global_environment, run_program

__all__ = [
    'ExoError',
    'ParseError',
    'ExoRuntimeError',
    'Environment',
    'Token',
    'TokenStream',
    'tokenize',
    'parse_program',
    'Interpreter',
    'new_global_environment',
    'run_program',
]

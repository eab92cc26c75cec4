from .console import populate_console_environment
from exo.environment import Environment


def populate_standard_environment(env: Environment) -> Environment:
    """Bind every native function into ``env`` and return it."""
    for name, value in populate_console_environment().values.items():
        env.define(name, value)
    return env

import sys
from typing import Any, List

from exo.environment import Environment
from exo.values import NIL, NativeFunction, to_display


def populate_console_environment() -> Environment:
    console_env = Environment()

    def std_print(args: List[Any]) -> Any:
        sys.stdout.write(to_display(args[0]) + '\n')
        sys.stdout.flush()
        return NIL

    console_env.define('print', NativeFunction('print', 1, std_print))
    return console_env

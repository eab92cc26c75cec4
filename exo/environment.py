from typing import Any, Dict, Optional


class Environment:
    """A lexical scope mapping names to runtime values.

    Scopes form a chain through ``parent``. A child holds a reference to
    its parent, never a copy, so bindings added or changed through the
    parent are seen by every child and every closure that captured it.
    """
    def __init__(self, parent: Optional['Environment'] = None):
        self.parent = parent
        self.values: Dict[str, Any] = {}

    def lookup(self, name: str) -> Optional[Any]:
        """Return the value bound to ``name`` in the nearest scope, or None."""
        scope = self
        while scope is not None:
            if name in scope.values:
                return scope.values[name]
            scope = scope.parent
        return None

    def define(self, name: str, value: Any) -> None:
        # always binds here, shadowing any outer binding
        self.values[name] = value

    def assign(self, name: str, value: Any) -> bool:
        """Rebind ``name`` in the nearest scope that defines it.

        Returns False when no scope in the chain defines the name.
        """
        scope = self
        while scope is not None:
            if name in scope.values:
                scope.values[name] = value
                return True
            scope = scope.parent
        return False

    def child_scope(self) -> 'Environment':
        return Environment(parent=self)

    def __contains__(self, name: str) -> bool:
        return name in self.values

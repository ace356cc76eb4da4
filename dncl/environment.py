from typing import Dict, Optional

from dncl.objects import DnclObject


class Environment:
    """A scope mapping names to values, chained to its enclosing scope.

    Closures keep a reference to the scope they were defined in, and a
    function call runs in a child of that scope. Parents never refer to
    their children. No locking: one evaluation per chain at a time.
    """
    def __init__(self, parent: Optional['Environment'] = None):
        self.parent = parent
        self.values: Dict[str, DnclObject] = {}

    def __contains__(self, name: str) -> bool:
        return self.get(name) is not None

    def get(self, name: str) -> Optional[DnclObject]:
        if name in self.values:
            return self.values[name]
        if self.parent:
            return self.parent.get(name)
        return None

    def set(self, name: str, value: DnclObject):
        # Rebind in the innermost scope that already has the name, else define here
        scope = self._find(name)
        if scope is None:
            scope = self
        scope.values[name] = value

    def define(self, name: str, value: DnclObject):
        self.values[name] = value

    def child(self) -> 'Environment':
        return Environment(parent=self)

    def _find(self, name: str) -> Optional['Environment']:
        env: Optional[Environment] = self
        while env is not None:
            if name in env.values:
                return env
            env = env.parent
        return None

    def __repr__(self) -> str:
        return f"Environment({', '.join(self.values)})"

from dataclasses import dataclass, field
from typing import Any, Optional

@dataclass(eq=False)
class Variable:
    name      : str = ""
    value     : float = 0.0
    external  : bool = False
    pivotable : bool = False
    dummy     : bool = False
    solver    : Optional[Any] = field(default=None, repr=False)

def external(name="", value=0.0, solver=None):
    return Variable(name, value, external=True, solver=solver)

def slack(solver=None):
    return Variable(pivotable=True, solver=solver)

def dummy(solver=None):
    return Variable(dummy=True, solver=solver)

def objective(solver=None):
    return Variable(solver=solver)

def _prefix_(var):
    if var.dummy:
        return "d"
    if var.pivotable:
        return "s"
    if var.external:
        return "x"
    return "o"

class Names:
    """Printable names for variables.

    A variable keeps its own name unless that is taken; otherwise it gets
    a numbered name whose letter tells its kind (x, s, d, o).
    """

    def __init__(self, names=None):
        self.names = {} if names is None else names
        self.used  = set(self.names.values())
        self.counter = 0

    def _claim_(self, var, name):
        self.names[var] = name
        self.used.add(name)
        return name

    def get(self, var):
        name = self.names.get(var)
        if name is not None:
            return name
        if var.name and var.name not in self.used:
            return self._claim_(var, var.name)
        prefix = _prefix_(var)
        name = f"{prefix}{self.counter}"
        while name in self.used:
            self.counter += 1
            name = f"{prefix}{self.counter}"
        self.counter += 1
        return self._claim_(var, name)

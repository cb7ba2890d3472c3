import logging
import sys
from dataclasses import dataclass
from typing import Dict, Optional, Protocol

from .variables import Variable, Names

logger = logging.getLogger(__name__)

# Pivot elements at or below this magnitude are not invertible.
# Merged coefficients are compared against it relative to their operands.
EPSILON = sys.float_info.epsilon

class SolverSink(Protocol):
    def register(self, variable: Variable, subject: Variable) -> None: ...
    def unregister(self, variable: Variable, subject: Variable) -> None: ...
    def resync(self, variable: Variable) -> None: ...

@dataclass(eq=False)
class Term:
    variable    : Variable
    coefficient : float

    @property
    def value(self):
        return self.coefficient * self.variable.value

def promote(c):
    if isinstance(c, (int, float)):
        return Expression(None, float(c))
    elif isinstance(c, Variable):
        return Expression.from_variable(c)
    else:
        return c

class Expression:
    """A constant plus a set of terms, one per variable.

    Mutating methods work in place. When the expression holds a solver
    sink, the ``*_with_subject`` paths report every variable that starts
    or stops taking part in the row of ``subject``, and coefficient
    changes of external variables are reported through ``resync``.
    """

    def __init__(self, solver: Optional[SolverSink] = None, constant: float = 0.0):
        self.solver = solver
        self.constant = constant
        self.terms : Dict[Variable, Term] = {}
        self.ref_count = 1

    @classmethod
    def from_variable(cls, variable):
        expr = cls(variable.solver, 0.0)
        expr.add_variable(variable, 1.0)
        return expr

    def clone(self):
        copy = Expression(self.solver, self.constant)
        for v, t in self.terms.items():
            copy.terms[v] = Term(v, t.coefficient)
        return copy

    def set_constant(self, constant):
        self.constant = constant

    # ---term mutation---
    def add_variable_with_subject(self, variable, coefficient, subject):
        t = self.terms.get(variable)
        if t is not None:
            if coefficient == 0.0:
                del self.terms[variable]
                if subject is not None:
                    self._notify_("unregister", variable, subject)
            else:
                t.coefficient = coefficient
            return
        if coefficient == 0.0:
            return
        self.terms[variable] = Term(variable, coefficient)
        if subject is not None:
            self._notify_("register", variable, subject)

    def add_variable(self, variable, coefficient):
        self.add_variable_with_subject(variable, coefficient, None)

    def remove_variable_with_subject(self, variable, subject):
        if not self.terms:
            return
        if subject is not None:
            self._notify_("unregister", variable, subject)
        self.terms.pop(variable, None)

    def remove_variable(self, variable):
        self.remove_variable_with_subject(variable, None)

    def set_variable(self, variable, coefficient):
        self.terms[variable] = Term(variable, coefficient)
        if variable.external:
            self._notify_("resync", variable)

    def set_coefficient(self, variable, coefficient):
        if coefficient == 0.0:
            self.remove_variable(variable)
            return
        t = self.terms.get(variable)
        if t is not None:
            t.coefficient = coefficient
        else:
            self.add_variable(variable, coefficient)
        if variable.external:
            self._notify_("resync", variable)

    def coefficient_of(self, variable):
        t = self.terms.get(variable)
        if t is None:
            return 0.0
        return t.coefficient

    def _notify_(self, method, *args):
        if self.solver is not None:
            getattr(self.solver, method)(*args)

    # ---algebra---
    def add_expression(self, other, n=1.0, subject=None):
        """In place ``self += n * other``.

        Coefficients of variables present in both are summed; a sum that
        cancels to within EPSILON of its operands removes the term. Every
        term that appears or disappears is reported under ``subject``.
        """
        self.constant += n * other.constant
        for v, t in list(other.terms.items()):
            delta = n * t.coefficient
            if v in self.terms:
                old = self.terms[v].coefficient
                c = old + delta
                if abs(c) <= EPSILON * max(abs(old), abs(delta)):
                    c = 0.0
            else:
                c = delta
            self.add_variable_with_subject(v, c, subject)
        return self

    def times(self, multiplier):
        # Zero coefficients are left in place, pruning here would bypass the sink.
        self.constant *= multiplier
        for t in self.terms.values():
            t.coefficient *= multiplier
        return self

    def plus(self, constant):
        e = Expression(self.solver, constant)
        self.add_expression(e, 1.0, None)
        unref(e)
        return self

    def plus_variable(self, variable):
        e = Expression.from_variable(variable)
        self.add_expression(e, 1.0, None)
        unref(e)
        return self

    # ---reading---
    def value(self):
        res = self.constant
        for t in self.terms.values():
            res += t.value
        return res

    def foreach(self, func):
        for v, t in self.terms.items():
            assert v is t.variable
            func(t)

    def __iter__(self):
        return iter(list(self.terms.values()))

    def __len__(self):
        return len(self.terms)

    def __contains__(self, variable):
        return variable in self.terms

    @property
    def is_constant(self):
        return not self.terms

    # ---pivoting---
    def new_subject(self, subject):
        """Eliminate ``subject`` and rescale the rest by ``-1/c``.

        ``c`` is the coefficient ``subject`` had. Returns ``1/c``, or
        ``0.0`` when ``|c|`` does not exceed EPSILON.
        """
        c = self.coefficient_of(subject)
        reciprocal = 0.0
        if abs(c) > EPSILON:
            reciprocal = 1.0 / c
        self.terms.pop(subject, None)
        self.times(-1.0 * reciprocal)
        return reciprocal

    def change_subject(self, old_subject, new_subject):
        self.set_variable(old_subject, self.new_subject(new_subject))

    def get_pivotable_variable(self):
        if not self.terms:
            logger.warning("Expression %s is a constant", self)
            return None
        for v in self.terms:
            if v.pivotable:
                return v
        return None

    # ---functional operators, never notify---
    def __add__(self, other):
        other = promote(other)
        if not isinstance(other, Expression):
            return NotImplemented
        res = self.clone()
        res.solver = None
        return res.add_expression(other, 1.0)

    def __radd__(self, other):
        other = promote(other)
        if not isinstance(other, Expression):
            return NotImplemented
        return other + self

    def __sub__(self, other):
        other = promote(other)
        if not isinstance(other, Expression):
            return NotImplemented
        res = self.clone()
        res.solver = None
        return res.add_expression(other, -1.0)

    def __rsub__(self, other):
        other = promote(other)
        if not isinstance(other, Expression):
            return NotImplemented
        return other - self

    def __neg__(self):
        return self * -1.0

    def __mul__(self, other):
        if not isinstance(other, (int, float)):
            raise TypeError("Can only multiply an Expression by a scalar")
        res = self.clone()
        res.solver = None
        return res.times(other)

    def __rmul__(self, other):
        return self * other

    def __truediv__(self, other):
        if not isinstance(other, (int, float)):
            raise TypeError("Can only divide an Expression by a scalar")
        return self * (1.0 / other)

    # ---formatting---
    def format(self, names):
        # Zero coefficients left behind by times(0.0) still show, as 0.0*name.
        if not self.terms and self.constant == 0:
            return "0"
        parts = []
        if self.constant != 0:
            parts.append((self.constant < 0, str(abs(self.constant))))
        for v in sorted(self.terms, key=names.get):
            coef = self.terms[v].coefficient
            if abs(coef) == 1:
                parts.append((coef < 0, names.get(v)))
            else:
                parts.append((coef < 0, f"{abs(coef)}*{names.get(v)}"))
        negative, text = parts[0]
        out = ["-" + text if negative else text]
        for negative, text in parts[1:]:
            out.append((" - " if negative else " + ") + text)
        return "".join(out)

    def __str__(self):
        return self.format(Names())

    def __repr__(self):
        return f"<Expression {self} refs={self.ref_count}>"

def ref(expression):
    if expression is None:
        return None
    expression.ref_count += 1
    return expression

def unref(expression):
    if expression is None:
        return
    expression.ref_count -= 1
    if expression.ref_count == 0:
        expression.terms.clear()
        expression.solver = None

import logging
from collections import defaultdict

from .expression import unref

logger = logging.getLogger(__name__)

class Tableau:
    """Rows of the simplex tableau keyed by their basic variable.

    Serves as the notification sink of every row it holds: ``columns``
    maps each parametric variable to the basic variables whose rows
    mention it, and ``updated`` collects external variables whose value
    has to be refreshed.
    """

    def __init__(self):
        self.rows = {}
        self.columns = defaultdict(set)
        self.updated = set()

    # ---notifications from expressions---
    def register(self, variable, subject):
        self.columns[variable].add(subject)

    def unregister(self, variable, subject):
        column = self.columns.get(variable)
        if column is None:
            return
        column.discard(subject)
        if not column:
            del self.columns[variable]

    def resync(self, variable):
        self.updated.add(variable)

    # ---rows---
    def add_row(self, basic, expression):
        if basic in self.rows:
            old = self.remove_row(basic)
            if old is not expression:
                unref(old)
        expression.solver = self
        self.rows[basic] = expression
        for t in expression:
            self.register(t.variable, basic)
        if basic.external:
            self.resync(basic)

    def remove_row(self, basic):
        expression = self.rows.pop(basic)
        for t in expression:
            self.unregister(t.variable, basic)
        if basic.external:
            self.resync(basic)
        return expression

    def row(self, basic):
        return self.rows[basic]

    def is_basic(self, variable):
        return variable in self.rows

    def substitute_out(self, old, expression):
        for basic in list(self.columns.get(old, ())):
            row = self.rows[basic]
            multiplier = row.coefficient_of(old)
            row.remove_variable_with_subject(old, basic)
            row.add_expression(expression, multiplier, basic)
            if basic.external:
                self.resync(basic)
        self.columns.pop(old, None)

    def pivot(self, entry, exit):
        logger.debug("pivot: %r enters, %r leaves", entry, exit)
        expression = self.remove_row(exit)
        expression.change_subject(exit, entry)
        self.substitute_out(entry, expression)
        self.add_row(entry, expression)

    def pivotable_in(self, basic):
        return self.rows[basic].get_pivotable_variable()

    # ---values---
    def value_of(self, variable):
        row = self.rows.get(variable)
        if row is None:
            return 0.0
        return row.constant

    def update_externals(self):
        for v in self.updated:
            v.value = self.value_of(v)
        self.updated.clear()

    def clear(self):
        for expression in self.rows.values():
            unref(expression)
        self.rows.clear()
        self.columns.clear()
        self.updated.clear()

    def format(self, names):
        out = []
        for k, c in self.rows.items():
            out.append(f"{names.get(k)} = {c.format(names)}")
        return "\n".join(out)

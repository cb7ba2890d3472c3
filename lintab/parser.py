from importlib import resources
from lark import Lark, Transformer, v_args
from lark.exceptions import VisitError

from .expression import Expression
from .variables import Variable

def _load_parser_():
    lark_file = resources.files(__package__).joinpath("expression.lark")
    with lark_file.open("r", encoding="utf8") as f:
        grammar = f.read()
    return Lark(grammar, start="start", parser="lalr")

parser = _load_parser_()

def parse(text, variables, solver=None):
    """Build an Expression from text like ``2*width - left + 10``.

    ``variables`` maps names to Variable objects; it may also be a
    callable, which is then asked for every name.
    """
    tree = parser.parse(text)
    try:
        expr = ExpressionBuilder(variables).transform(tree)
    except VisitError as e:
        raise e.orig_exc from None
    expr.solver = solver
    return expr

def _scalar_(x):
    if isinstance(x, Expression):
        if x.is_constant:
            return x.constant
        return None
    return x

class ExpressionBuilder(Transformer):
    def __init__(self, variables):
        super().__init__()
        if callable(variables):
            self.lookup = variables
        else:
            self.lookup = variables.__getitem__

    @v_args(inline=True)
    def start(self, x):
        if isinstance(x, Expression):
            return x
        return Expression(None, x)

    @v_args(inline=True)
    def number(self, tok):
        return float(tok)

    @v_args(inline=True)
    def variable(self, tok):
        var = self.lookup(str(tok))
        if not isinstance(var, Variable):
            raise TypeError(f"{tok} does not name a variable")
        return Expression.from_variable(var)

    @v_args(inline=True)
    def add(self, lhs, rhs):
        return lhs + rhs

    @v_args(inline=True)
    def sub(self, lhs, rhs):
        return lhs - rhs

    @v_args(inline=True)
    def neg(self, x):
        return -x

    @v_args(inline=True)
    def mul(self, lhs, rhs):
        l = _scalar_(lhs)
        r = _scalar_(rhs)
        if l is not None and r is not None:
            return l * r
        if r is not None:
            return lhs * r
        if l is not None:
            return rhs * l
        raise ValueError("product of two variables is not linear")

    @v_args(inline=True)
    def div(self, lhs, rhs):
        r = _scalar_(rhs)
        if r is None:
            raise ValueError("division by a variable is not linear")
        if r == 0:
            raise ValueError("division by zero")
        return lhs / r

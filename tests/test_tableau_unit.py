import pytest

from lintab.expression import Expression
from lintab.tableau import Tableau
from lintab.variables import Names, external, slack


def _row(constant, *terms):
    e = Expression(None, constant)
    for v, c in terms:
        e.add_variable(v, c)
    return e


def test_add_row_registers_columns(x, s) -> None:
    t = Tableau()
    t.add_row(x, _row(10.0, (s, 2.0)))
    assert t.is_basic(x)
    assert t.row(x).solver is t
    assert t.columns[s] == {x}
    assert t.updated == {x}


def test_remove_row_unregisters_columns(x, s) -> None:
    t = Tableau()
    row = _row(10.0, (s, 2.0))
    t.add_row(x, row)
    assert t.remove_row(x) is row
    assert s not in t.columns
    assert not t.is_basic(x)
    with pytest.raises(KeyError):
        t.remove_row(x)


def test_add_row_replaces_existing_row(x) -> None:
    s1, s2 = slack(), slack()
    t = Tableau()
    old = _row(1.0, (s1, 1.0))
    t.add_row(x, old)
    t.add_row(x, _row(2.0, (s2, 1.0)))
    assert s1 not in t.columns
    assert t.columns[s2] == {x}
    assert t.row(x).constant == 2.0
    assert old.ref_count == 0


def test_add_row_same_expression_again(x, s) -> None:
    t = Tableau()
    row = _row(1.0, (s, 1.0))
    t.add_row(x, row)
    t.add_row(x, row)
    assert row.ref_count == 1
    assert s in row
    assert t.columns[s] == {x}


def test_substitute_out(x, y, s) -> None:
    t = Tableau()
    t.add_row(y, _row(3.0, (s, 1.0)))
    replacement = _row(-5.0, (x, 0.5))
    t.substitute_out(s, replacement)
    assert t.row(y).constant == -2.0
    assert t.row(y).coefficient_of(x) == 0.5
    assert s not in t.row(y)
    assert s not in t.columns
    assert t.columns[x] == {y}
    assert y in t.updated


def test_pivot(x, y, s) -> None:
    # x = 10 + 2*s, y = 3 + s; bring s into the basis in place of x
    t = Tableau()
    t.add_row(x, _row(10.0, (s, 2.0)))
    t.add_row(y, _row(3.0, (s, 1.0)))
    t.pivot(s, x)
    assert not t.is_basic(x)
    assert t.row(s).constant == -5.0
    assert t.row(s).coefficient_of(x) == 0.5
    assert t.row(y).constant == -2.0
    assert t.row(y).coefficient_of(x) == 0.5
    assert s not in t.columns
    assert t.columns[x] == {s, y}

    t.update_externals()
    assert x.value == 0.0
    assert y.value == -2.0
    assert t.updated == set()


def test_pivot_keeps_columns_consistent() -> None:
    a, b = external("a"), external("b")
    s1, s2 = slack(), slack()
    t = Tableau()
    t.add_row(a, _row(1.0, (s1, 1.0), (s2, -1.0)))
    t.add_row(b, _row(2.0, (s1, 2.0)))
    t.pivot(s2, a)
    for basic, row in t.rows.items():
        for term in row:
            assert basic in t.columns[term.variable]
    for var, basics in t.columns.items():
        for basic in basics:
            assert var in t.row(basic)


def test_pivotable_in(x, s) -> None:
    t = Tableau()
    t.add_row(x, _row(1.0, (s, 1.0)))
    assert t.pivotable_in(x) is s


def test_value_of_parametric_is_zero(x, s) -> None:
    t = Tableau()
    t.add_row(x, _row(7.0, (s, 1.0)))
    assert t.value_of(x) == 7.0
    assert t.value_of(s) == 0.0


def test_clear(x, s) -> None:
    t = Tableau()
    row = _row(7.0, (s, 1.0))
    t.add_row(x, row)
    t.clear()
    assert t.rows == {}
    assert not t.columns
    assert row.ref_count == 0


def test_format(x, y, s) -> None:
    t = Tableau()
    t.add_row(x, _row(10.0, (y, 2.0)))
    assert t.format(Names()) == "x = 10.0 + 2.0*y"

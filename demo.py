import logging

from lintab.parser import parse
from lintab.tableau import Tableau
from lintab.variables import Names, external, slack

# Horizontal rows of
#
#   H:|-8-[child1]-12-[child2]-8-|
#
# with the width of child1 carried by a slack variable.

def grid():
    t = Tableau()
    v = {n: external(n, solver=t) for n in [
        "super.start", "super.end",
        "child1.start", "child1.end",
        "child2.start", "child2.end",
    ]}
    w = slack(t)
    v["w"] = w

    t.add_row(v["child1.start"], parse("super.start + 8", v))
    t.add_row(v["child1.end"], parse("super.start + 8 + w", v))
    t.add_row(v["child2.start"], parse("super.start + 20 + w", v))
    t.add_row(v["child2.end"], parse("super.end - 8", v))

    names = Names({var: name for name, var in v.items()})
    print(t.format(names))
    print("----")
    t.pivot(t.pivotable_in(v["child1.end"]), v["child1.end"])
    print(t.format(names))
    t.update_externals()
    for name, var in v.items():
        print(f"  {name} = {var.value}")

if __name__ == "__main__":
    logging.basicConfig(level=logging.DEBUG)
    grid()

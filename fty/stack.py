from .imports import *

class StkUnderflowError(IndexError):
    """Popping more cells than a stack holds.

    Carries the program file and instruction pointer line where it happened.
    """
    def __init__(self, what: str, filename: str = "", line: int = None):
        self.what, self.filename, self.line = what, filename, line
        super().__init__(f"{filename}({line}): {what}")


class Stack(list):
    """
    A pure python stack of cells. It's really just a list where:
    - pushing appends the value, so the top of stack is s[-1].
    - iterating and printing go from the bottom to the top.

    Bounds are checked by the Runtime, which knows where it is executing.
    """
    def __init__(self, name: str, data=()):
        super().__init__(data)
        self.name = name

    def __repr__(self):
        return f"{self.name}Stk{list(self)}"

    def push(self, value: int):
        return super().append(value)

    def top(self) -> int:
        return self[-1]

    def has(self, count: int) -> bool:
        return len(self) >= count

    def assertEq(self, expectedList):
        assert expectedList == list(self), f"{expectedList} != {list(self)}"


def testStack():
    s = Stack("Data", range(3))
    s.push(3)
    assert 3 == s.top()
    assert 3 == s.pop()
    assert s.has(3)
    assert not s.has(4)
    s.assertEq([0, 1, 2])
    assert "DataStk[0, 1, 2]" == repr(s)

def testUnderflowMessage():
    err = StkUnderflowError("data stack underflow", "prog.fty", 22)
    assert "prog.fty(22): data stack underflow" == str(err)
    assert isinstance(err, IndexError)
    assert 22 == err.line

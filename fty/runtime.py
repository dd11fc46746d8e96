# The forthytwo execution engine.
#
# The Runtime owns a data stack, a return stack and the program memory: a
# list of lines, each a list of cells. The instruction pointer is a
# (line, column) pair. There is no call or return instruction:
# - pushing CALL (42) pops the cell below it and runs it with doOpcode. Below
#   FIRST_USER that is an intrinsic, otherwise it calls that line.
# - running off the end of a line returns to the saved (line, column).
#
# A call saves the instruction pointer on the return stack as two cells: the
# line is pushed first, then the column, so a return pops column then line.

from .imports import *
from .instr import FIRST_USER, CALL
from .stack import Stack, StkUnderflowError
from .actions import INTRINSICS

log = logging.getLogger(__name__)


class Runtime(object):
    def __init__(self, out=None, inp=None):
        self.ds = Stack("Data")    # data stack
        self.rs = Stack("Return")  # return stack, (line, column) pairs
        self.program: List[List[int]] = []

        self.ipLine: int = FIRST_USER
        self.ipCol: int = 0
        self.filename: str = ""

        # emit and read use these, defaulting to the process streams
        self.out = out if out is not None else sys.stdout
        self.inp = inp if inp is not None else sys.stdin

    def __repr__(self):
        return f"Runtime(ip={self.ip}, {self.ds!r}, {self.rs!r})"

    @property
    def ip(self) -> Tuple[int, int]:
        return (self.ipLine, self.ipCol)

    def fail(self, errTy, what: str):
        """Raise errTy tagged with the file and current line."""
        if errTy is StkUnderflowError:
            raise StkUnderflowError(what, self.filename, self.ipLine)
        raise errTy(f"{self.filename}({self.ipLine}): {what}")

    def require(self, count: int, what: str):
        """Check the data stack holds at least count cells."""
        if not self.ds.has(count):
            self.fail(StkUnderflowError, f"{what} needs {count} on the data stack")

    ##########################
    # Stacks

    def pushData(self, value: int):
        """Push a cell, calling the cell below it if value is CALL."""
        if value == CALL:
            self.doOpcode(self.popData())
        else:
            self.pushDataNoExec(value)

    def pushDataNoExec(self, value: int):
        self.ds.push(cell(value))

    def popData(self) -> int:
        if not self.ds: self.fail(StkUnderflowError, "data stack underflow")
        return self.ds.pop()

    def pushReturn(self, value: int):
        self.rs.push(cell(value))

    def popReturn(self) -> int:
        if not self.rs: self.fail(StkUnderflowError, "return stack underflow")
        return self.rs.pop()

    ##########################
    # Execution

    def doOpcode(self, opcode: int):
        """Run an intrinsic or call a line.

        Negative opcodes do nothing.
        """
        if opcode < 0: return
        if opcode < FIRST_USER:
            INTRINSICS[opcode](self)
            return

        log.debug("call %s from %s", opcode, self.ip)
        self.pushReturn(self.ipLine)
        self.pushReturn(self.ipCol)
        self.ipLine, self.ipCol = opcode, 0

    def computeStep(self):
        """Do exactly one of: wrap, execute one cell, or return."""
        if not (0 <= self.ipLine < len(self.program)):
            log.debug("wrap from %s", self.ip)
            self.ipLine, self.ipCol = FIRST_USER, 0
            return

        line = self.program[self.ipLine]
        if self.ipCol < len(line):
            value = line[self.ipCol]
            self.ipCol += 1
            self.pushData(value)
        else:
            col = self.popReturn()
            self.ipLine = self.popReturn()
            self.ipCol = col
            log.debug("return to %s", self.ip)

    def resetIp(self, line: int = FIRST_USER):
        self.ipLine, self.ipCol = line, 0

    def isAt(self, line: int, col: int) -> bool:
        return self.ipLine == line and self.ipCol == col

    ##########################
    # Program memory

    def compile(self, line: int, value: int):
        """Append value to a line.

        Reserved lines (below FIRST_USER and CALL itself) are silently ignored.
        """
        if line < FIRST_USER or line == CALL: return
        if len(self.program) <= line:
            self.program.extend([] for _ in range(line + 1 - len(self.program)))
        self.program[line].append(cell(value))

    def lineSize(self, line: int) -> int:
        if 0 <= line < len(self.program): return len(self.program[line])
        return 0

    def line(self, line: int) -> Tuple[int, ...]:
        if 0 <= line < len(self.program): return tuple(self.program[line])
        return ()

    def programSize(self) -> int:
        """The number of lines, including empty and reserved ones."""
        return len(self.program)

    ##########################
    # Inspection

    def dataStack(self) -> Tuple[int, ...]:
        """The data stack, bottom first."""
        return tuple(self.ds)

    def returnStack(self) -> Tuple[int, ...]:
        return tuple(self.rs)

    def setFileName(self, filename: str):
        self.filename = filename


def testFresh():
    rt = Runtime()
    assert (FIRST_USER, 0) == rt.ip
    assert () == rt.dataStack()
    assert () == rt.returnStack()
    assert 0 == rt.programSize()

def testWrapPastProgram():
    rt = Runtime()
    rt.compile(FIRST_USER, 1)
    rt.resetIp(FIRST_USER + 5)
    rt.computeStep()
    assert rt.isAt(FIRST_USER, 0)
    assert () == rt.dataStack()

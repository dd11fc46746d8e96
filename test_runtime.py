import io
import unittest

from fty.instr import Op, FIRST_USER, CALL
from fty.stack import StkUnderflowError
from fty.runtime import Runtime
from fty.imports import cell, isCell

L1 = FIRST_USER
L2 = FIRST_USER + 1
L3 = FIRST_USER + 2

def compileCall(rt, line, opcode):
    rt.compile(line, opcode)
    rt.compile(line, CALL)

def intrinsic(opcode, *operands):
    """Run an intrinsic on operands and return the whole data stack."""
    rt = Runtime()
    for v in operands: rt.pushData(v)
    rt.pushData(opcode)
    rt.pushData(CALL)
    assert () == rt.returnStack()
    return rt.dataStack()

def steps(rt, count):
    for _ in range(count): rt.computeStep()


class TestStacks(unittest.TestCase):
    def testBasics(self):
        rt = Runtime()
        rt.pushData(0)
        assert (0,) == rt.dataStack()
        rt.pushReturn(0)
        rt.pushReturn(1)
        assert 2 == len(rt.returnStack())
        assert 1 == rt.popReturn()

    def testPopEmpty(self):
        rt = Runtime()
        rt.setFileName("prog.fty")
        with self.assertRaises(StkUnderflowError) as cm:
            rt.popData()
        assert "prog.fty(21): data stack underflow" == str(cm.exception)
        with self.assertRaises(StkUnderflowError) as cm:
            rt.popReturn()
        assert "return stack underflow" == cm.exception.what

    def testNoExecPushesMagic(self):
        rt = Runtime()
        rt.pushDataNoExec(CALL)
        assert (CALL,) == rt.dataStack()

    def testCellsWrap(self):
        rt = Runtime()
        rt.pushDataNoExec(2**31)
        assert (-2**31,) == rt.dataStack()


class TestIntrinsics(unittest.TestCase):
    def testArithmetic(self):
        assert (5,) == intrinsic(Op.PLUS, 2, 3)
        assert (-1,) == intrinsic(Op.MINUS, 2, 3)
        assert (1,) == intrinsic(Op.MINUS, 3, 2)
        assert (6,) == intrinsic(Op.MULT, 2, 3)
        assert (0,) == intrinsic(Op.DIV, 2, 3)
        assert (2,) == intrinsic(Op.DIV, 4, 2)
        assert (1,) == intrinsic(Op.MOD, 3, 2)

    def testDivTruncates(self):
        assert (-3,) == intrinsic(Op.DIV, -7, 2)
        assert (-1,) == intrinsic(Op.MOD, -7, 2)
        assert (-3,) == intrinsic(Op.DIV, 7, -2)
        assert (1,) == intrinsic(Op.MOD, 7, -2)

    def testOverflowWraps(self):
        assert (-2**31,) == intrinsic(Op.PLUS, 2**31 - 1, 1)
        assert (-2**31,) == intrinsic(Op.DIV, -2**31, -1)
        assert (0,) == intrinsic(Op.MOD, -2**31, -1)

    def testDivByZero(self):
        with self.assertRaises(ZeroDivisionError):
            intrinsic(Op.DIV, 1, 0)
        with self.assertRaises(ZeroDivisionError):
            intrinsic(Op.MOD, 1, 0)

    def testLogic(self):
        for a, b, andR, orR in [(0, 0, 0, 0), (1, 0, 0, 1),
                                (0, 1, 0, 1), (1, 1, 1, 1), (-5, 7, 1, 1)]:
            assert (andR,) == intrinsic(Op.AND, a, b)
            assert (orR,) == intrinsic(Op.OR, a, b)
        assert (0,) == intrinsic(Op.NOT, 2)
        assert (1,) == intrinsic(Op.NOT, 0)

    def testSwapDupDrop(self):
        assert (3, 2) == intrinsic(Op.SWAP, 2, 3)
        assert (2, 3, 3) == intrinsic(Op.DUP, 2, 3)
        assert (2,) == intrinsic(Op.DROP, 2, 3)

    def testUnderflow(self):
        for opcode, operands in [(Op.SWAP, [2]), (Op.DUP, []),
                                 (Op.DROP, []), (Op.PLUS, []), (Op.LOOP, [])]:
            rt = Runtime()
            for v in operands: rt.pushData(v)
            rt.pushData(opcode)
            with self.assertRaises(StkUnderflowError):
                rt.pushData(CALL)
            assert tuple(operands) == rt.dataStack()

    def testCallOnEmptyStack(self):
        with self.assertRaises(StkUnderflowError):
            Runtime().pushData(CALL)

    def testEmit(self):
        out = io.StringIO()
        rt = Runtime(out=out)
        for v in [72, 105, 255, -1]:
            rt.pushData(v); rt.pushData(Op.EMIT); rt.pushData(CALL)
        assert "Hi" == out.getvalue()
        assert () == rt.dataStack()

    def testEmitHighCodeIsOneByte(self):
        out = io.TextIOWrapper(io.BytesIO(), encoding="utf-8")
        rt = Runtime(out=out)
        out.write("A")
        for v in [200, 254]:
            rt.pushData(v); rt.pushData(Op.EMIT); rt.pushData(CALL)
        assert b"A\xc8\xfe" == out.buffer.getvalue()

    def testReadDoesNotCall(self):
        rt = Runtime(inp=io.StringIO("*"))
        rt.pushData(Op.READ); rt.pushData(CALL)
        rt.pushData(Op.READ); rt.pushData(CALL)
        assert (CALL, -1) == rt.dataStack()

    def testExit(self):
        rt = Runtime()
        rt.pushData(3)
        rt.pushData(Op.EXIT)
        with self.assertRaises(SystemExit) as cm:
            rt.pushData(CALL)
        assert 3 == cm.exception.code

    def testReservedSlotsExit(self):
        rt = Runtime()
        rt.pushData(4)
        rt.pushData(FIRST_USER - 1)
        with self.assertRaises(SystemExit) as cm:
            rt.pushData(CALL)
        assert 4 == cm.exception.code

    def testNegativeOpcodeIgnored(self):
        rt = Runtime()
        rt.pushData(-1)
        rt.pushData(CALL)
        assert () == rt.dataStack()
        assert () == rt.returnStack()
        assert rt.isAt(FIRST_USER, 0)


class TestCompiler(unittest.TestCase):
    def testCompile(self):
        rt = Runtime()
        rt.compile(L1, 2)
        rt.compile(L1, 3)
        compileCall(rt, L1, Op.PLUS)
        assert FIRST_USER + 1 == rt.programSize()
        assert 4 == rt.lineSize(L1)
        assert (2, 3, Op.PLUS, CALL) == rt.line(L1)

    def testReservedLinesIgnored(self):
        rt = Runtime()
        rt.compile(0, 1)
        rt.compile(FIRST_USER - 1, 1)
        rt.compile(CALL, 1)
        assert 0 == rt.programSize()
        rt.compile(CALL + 1, 5)
        assert CALL + 2 == rt.programSize()
        assert 0 == rt.lineSize(CALL)
        assert (5,) == rt.line(CALL + 1)
        assert () == rt.line(1000)


class TestRunning(unittest.TestCase):
    def testRunning(self):
        rt = Runtime()
        rt.compile(L1, 2)
        rt.compile(L1, 3)
        compileCall(rt, L1, Op.PLUS)
        rt.resetIp()
        for expected in [1, 2, 3, 1]:
            rt.computeStep()
            assert expected == len(rt.dataStack())
        assert (5,) == rt.dataStack()

    def testCalling(self):
        rt = Runtime()
        compileCall(rt, L1, L2)
        rt.compile(L2, 2)
        rt.compile(L2, 3)
        compileCall(rt, L2, Op.PLUS)
        rt.resetIp()
        steps(rt, 2)
        assert rt.isAt(L2, 0)
        assert (L1, 2) == rt.returnStack()
        steps(rt, 4)
        assert (5,) == rt.dataStack()
        rt.computeStep()  # return
        assert rt.isAt(L1, 2)
        assert () == rt.returnStack()

    def testReturnUnderflow(self):
        rt = Runtime()
        rt.compile(L1, 1)
        rt.resetIp()
        rt.computeStep()
        with self.assertRaises(StkUnderflowError):
            rt.computeStep()

    def testLooping(self):
        rt = Runtime()
        # 21: 5 7 22 call
        rt.compile(L1, 5)
        rt.compile(L1, 7)
        compileCall(rt, L1, L2)
        # 22: swap 4 + swap 1 - loop
        compileCall(rt, L2, Op.SWAP)
        rt.compile(L2, 4)
        compileCall(rt, L2, Op.PLUS)
        compileCall(rt, L2, Op.SWAP)
        rt.compile(L2, 1)
        compileCall(rt, L2, Op.MINUS)
        compileCall(rt, L2, Op.LOOP)
        rt.resetIp()

        # 4 steps to enter, then 7 passes over a 12 cell line
        steps(rt, 4 + 7 * 12)
        assert (5 + 7 * 4,) == rt.dataStack()

    def testIf(self):
        # 21: 5 dup 2 mod 22 if dup 2 mod 22 23 ifElse
        # 22: 1 +
        # 23: 2 +
        rt = Runtime()
        rt.compile(L1, 5)
        compileCall(rt, L1, Op.DUP)
        rt.compile(L1, 2)
        compileCall(rt, L1, Op.MOD)
        rt.compile(L1, L2)
        compileCall(rt, L1, Op.IF)
        compileCall(rt, L1, Op.DUP)
        rt.compile(L1, 2)
        compileCall(rt, L1, Op.MOD)
        rt.compile(L1, L2)
        rt.compile(L1, L3)
        compileCall(rt, L1, Op.IF_ELSE)
        rt.compile(L2, 1)
        compileCall(rt, L2, Op.PLUS)
        rt.compile(L3, 2)
        compileCall(rt, L3, Op.PLUS)
        rt.resetIp()

        # 5 is odd so the if enters 22
        steps(rt, 9)
        assert rt.isAt(L2, 0)
        # 6 is even so the ifElse enters 23
        steps(rt, 13)
        assert rt.isAt(L3, 0)
        steps(rt, 4)
        assert rt.isAt(L1, 18)
        assert (8,) == rt.dataStack()

    def testIfFalseDoesNothing(self):
        assert () == intrinsic(Op.IF, 0, Op.EXIT)
        assert (7, 7) == intrinsic(Op.IF, 7, 1, Op.DUP)

    def testIfElseRunsOne(self):
        assert (3, 3) == intrinsic(Op.IF_ELSE, 3, 1, Op.DUP, Op.DROP)
        assert () == intrinsic(Op.IF_ELSE, 3, 0, Op.DUP, Op.DROP)

    def testWrapAround(self):
        rt = Runtime()
        rt.compile(L1, 1)
        rt.resetIp(L2)
        rt.computeStep()
        assert rt.isAt(L1, 0)
        assert () == rt.dataStack()


class TestCell(unittest.TestCase):
    def testWrap(self):
        assert 5 == cell(5)
        assert -2**31 == cell(2**31)
        assert -1 == cell(0xFFFFFFFF)

    def testRange(self):
        assert isCell(2**31 - 1)
        assert isCell(-2**31)
        assert not isCell(2**31)

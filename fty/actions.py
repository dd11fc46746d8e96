from .imports import *
from .instr import Op, FIRST_USER

log = logging.getLogger(__name__)

# Each intrinsic takes the Runtime and works on its stacks. Binary operations
# pop the right operand first, so "7 2 minus" is 7 - 2.

def _binary(rt):
    right = rt.popData()
    left = rt.popData()
    return left, right

def _truncDiv(rt, left: int, right: int) -> int:
    if right == 0: rt.fail(ZeroDivisionError, "division by zero")
    q = abs(left) // abs(right)
    return q if (left < 0) == (right < 0) else -q

##########################
# Arithmetic

def _PLUS(rt):
    left, right = _binary(rt)
    rt.pushDataNoExec(cell(left + right))

def _MINUS(rt):
    left, right = _binary(rt)
    rt.pushDataNoExec(cell(left - right))

def _MULT(rt):
    left, right = _binary(rt)
    rt.pushDataNoExec(cell(left * right))

# DIV and MOD truncate toward zero, the remainder has the sign of left.
def _DIV(rt):
    left, right = _binary(rt)
    rt.pushDataNoExec(cell(_truncDiv(rt, left, right)))

def _MOD(rt):
    left, right = _binary(rt)
    rt.pushDataNoExec(cell(left - right * _truncDiv(rt, left, right)))

##########################
# Logic: non-zero is true, results are 0 or 1

def _AND(rt):
    left, right = _binary(rt)
    rt.pushDataNoExec(int(bool(left) and bool(right)))

def _OR(rt):
    left, right = _binary(rt)
    rt.pushDataNoExec(int(bool(left) or bool(right)))

def _NOT(rt):
    rt.pushDataNoExec(int(not rt.popData()))

##########################
# Stack manipulation

def _SWAP(rt):
    rt.require(2, "swap")
    ds = rt.ds
    ds[-1], ds[-2] = ds[-2], ds[-1]

def _DUP(rt):
    rt.require(1, "dup")
    rt.pushDataNoExec(rt.ds.top())

def _DROP(rt):
    rt.popData()

##########################
# Control flow

# LOOP: restart the current line while the top of stack is non-zero. A zero is
# dropped and execution falls through.
def _LOOP(rt):
    rt.require(1, "loop")
    if rt.ds.top() == 0: rt.popData()
    else: rt.ipCol = 0

# IF: ( cond opcode -- ) run opcode when cond is true.
def _IF(rt):
    opcode = rt.popData()
    cond = rt.popData()
    if cond: rt.doOpcode(opcode)

# IF_ELSE: ( cond yes no -- ) run exactly one of yes or no.
def _IF_ELSE(rt):
    no = rt.popData()
    yes = rt.popData()
    cond = rt.popData()
    rt.doOpcode(yes if cond else no)

##########################
# IO

# EMIT writes one byte. Text streams without a byte buffer get the latin-1
# character with that code.
def _EMIT(rt):
    v = rt.popData()
    if not (0 <= v < 255): return
    out = rt.out
    buf = getattr(out, "buffer", None)
    if buf is None:
        out.write(chr(v))
        out.flush()
        return
    out.flush()
    buf.write(bytes([v]))
    buf.flush()

# READ pushes without exec so a read '*' (42) does not trigger a call.
# End of input reads as -1.
def _READ(rt):
    c = rt.inp.read(1)
    rt.pushDataNoExec(ord(c) if c else -1)

def _EXIT(rt):
    status = rt.popData()
    log.debug("exit status=%s", status)
    sys.exit(status)


_ACTIONS = {
    Op.PLUS: _PLUS,
    Op.MINUS: _MINUS,
    Op.MULT: _MULT,
    Op.DIV: _DIV,
    Op.MOD: _MOD,
    Op.AND: _AND,
    Op.OR: _OR,
    Op.NOT: _NOT,

    Op.SWAP: _SWAP,
    Op.DUP: _DUP,
    Op.DROP: _DROP,

    Op.LOOP: _LOOP,
    Op.IF: _IF,
    Op.IF_ELSE: _IF_ELSE,

    Op.EMIT: _EMIT,
    Op.READ: _READ,

    Op.EXIT: _EXIT,
}

# Indexed by opcode. Reserved slots without an intrinsic exit.
INTRINSICS: Tuple[Callable, ...] = tuple(
    _ACTIONS.get(opcode, _EXIT) for opcode in range(FIRST_USER))


def testIntrinsicsTable():
    assert FIRST_USER == len(INTRINSICS)
    assert _PLUS is INTRINSICS[Op.PLUS]
    assert _EXIT is INTRINSICS[Op.EXIT]
    assert all(INTRINSICS[op] is _EXIT for op in range(Op.EXIT, FIRST_USER))

from .imports import *
import enum

FIRST_USER = 21  # first line a program may define
CALL = 42        # the magic value: pushing it calls the value below it

class Op(enum.IntEnum):  # Intrinsic opcodes
    PLUS    = 0
    MINUS   = 1
    MULT    = 2
    DIV     = 3
    MOD     = 4
    AND     = 5
    OR      = 6
    NOT     = 7

    SWAP    = 8
    DUP     = 9
    DROP    = 10

    LOOP    = 11
    IF      = 12
    IF_ELSE = 13

    EMIT    = 14
    READ    = 15

    EXIT    = 16

    @classmethod
    def fromStr(cls, name: str) -> "Op":
        return cls[name.upper()]

    @classmethod
    def isIntrinsic(cls, opcode: int) -> bool:
        return 0 <= opcode < FIRST_USER


def testInstrAPI():
    assert 0 == Op.PLUS.value
    assert "IF_ELSE" == Op.IF_ELSE.name
    assert Op.DUP == Op(9)
    assert Op.DUP == Op.fromStr("dup")
    assert Op.isIntrinsic(Op.EXIT)
    assert Op.isIntrinsic(FIRST_USER - 1)
    assert not Op.isIntrinsic(FIRST_USER)
    assert not Op.isIntrinsic(-1)
    assert FIRST_USER <= CALL

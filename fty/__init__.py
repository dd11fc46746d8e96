# Python implementation of the forthytwo language.
#
# Programs are lines of integers. Every line is also a subroutine: pushing
# the magic value 42 pops the value below it and calls that line (or runs the
# intrinsic with that opcode when it is below FIRST_USER).

from .instr import Op, FIRST_USER, CALL
from .stack import StkUnderflowError
from .runtime import Runtime
from .parser import ParseError, parseFile, parseText, compileInto

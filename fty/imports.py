# These are imported by every module
from typing import Callable
from typing import Dict
from typing import List
from typing import Tuple

from dataclasses import dataclass
import logging
import sys

from ctypes import c_int32 as I32

# A cell is the only value in the language: data, opcode and line address.
Cell = I32
CELL_MIN = -2**31
CELL_MAX = 2**31 - 1

def cell(value: int) -> int:
    """Wrap a python int to a signed 32bit cell value."""
    return Cell(value).value

def isCell(value: int) -> bool:
    return CELL_MIN <= value <= CELL_MAX


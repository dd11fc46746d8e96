# Loads forthytwo source text into a Runtime.
#
# The text line number is the program line: line 1 of the file is line 1 of
# program memory. Lines below FIRST_USER and the CALL line are headers and
# never compiled. Blank lines and lines starting with '#' are comments.

from .imports import *
from .instr import FIRST_USER, CALL

from parsimonious import exceptions as peg
from parsimonious.grammar import Grammar
from parsimonious.nodes import NodeVisitor

log = logging.getLogger(__name__)

CHARS_IN_ERROR = 10  # max characters of bad source in an error
# Cells are ascii. latin-1 decodes any other byte (in comments) unchanged.
SOURCE_ENCODING = "latin-1"

GRAMMAR = Grammar(r'''
    line = _ (cell (sep cell)*)? _
    cell = ~"[+-]?[0-9]+"
    sep  = ~"[ \t\r\f\v]+"
    _    = ~"[ \t\r\f\v]*"
''')

class ParseError(ValueError): pass


class CellVisitor(NodeVisitor):
    """Flatten a parsed line into (position, text) of its cells."""
    def visit_cell(self, node, visitedChildren):
        return [(node.start, node.text)]

    def generic_visit(self, node, visitedChildren):
        return [token for child in visitedChildren for token in child]

_VISITOR = CellVisitor()

def parseTokens(text: str) -> List[Tuple[int, str]]:
    return _VISITOR.visit(GRAMMAR.parse(text))

def parseCells(text: str) -> List[int]:
    """Parse whitespace separated integers.

    Raises parsimonious' ParseError at the first bad token. The values are
    not range checked.
    """
    return [int(token) for _, token in parseTokens(text)]

def isComment(text: str) -> bool:
    stripped = text.strip()
    return not stripped or stripped.startswith('#')

def isCompiled(lineNo: int) -> bool:
    return lineNo >= FIRST_USER and lineNo != CALL

def parseLine(filename: str, lineNo: int, text: str) -> List[int]:
    def notANumber(pos):
        excerpt = text[pos:pos + CHARS_IN_ERROR]
        return ParseError(f"{filename}({lineNo}): not a number at '{excerpt}'")

    try:
        tokens = parseTokens(text)
    except peg.ParseError as e:
        raise notANumber(e.pos) from None

    cells = []
    for pos, token in tokens:
        value = int(token)
        if not isCell(value): raise notANumber(pos)
        cells.append(value)
    return cells

def sourceLines(text: str) -> List[str]:
    """Split on newlines only, so file line N is always program line N."""
    lines = text.split("\n")
    if lines[-1] == "": lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]

def parseText(filename: str, text: str) -> Dict[int, List[int]]:
    """Parse source text into {lineNo: cells} for every compiled line."""
    program = {}
    for lineNo, line in enumerate(sourceLines(text), start=1):
        if not isCompiled(lineNo) or isComment(line): continue
        program[lineNo] = parseLine(filename, lineNo, line)
    return program

def compileInto(rt, program: Dict[int, List[int]]):
    for lineNo in sorted(program):
        for value in program[lineNo]:
            rt.compile(lineNo, value)

def readProgram(path: str) -> Dict[int, List[int]]:
    try:
        with open(path, encoding=SOURCE_ENCODING, newline="") as f:
            text = f.read()
    except OSError as e:
        raise ParseError(f"Cannot open '{path}'") from e
    return parseText(path, text)

def parseFile(path: str, rt):
    """Compile the file at path into rt."""
    program = readProgram(path)
    compileInto(rt, program)
    rt.setFileName(path)
    log.debug("loaded %s: %s lines", path, len(program))
    return program


def testParseCells():
    assert [] == parseCells("")
    assert [] == parseCells("   \t")
    assert [1, -2, 3] == parseCells(" 1 -2\t+3 ")
    try: parseCells("1 two"); assert False
    except peg.ParseError as e: assert 2 == e.pos

def testCellsNeedSpace():
    assert [1, -2] == parseCells("1 -2")
    for text in ["1-2", "3+4", "12abc"]:
        try: parseCells(text); assert False, text
        except peg.ParseError: pass

def testSourceLines():
    assert ["1\f2", "", "3"] == sourceLines("1\f2\r\n\n3\n")
    assert ["# a\u2028b", "4"] == sourceLines("# a\u2028b\n4")

def testComment():
    assert isComment("")
    assert isComment("   # 1 2 3")
    assert not isComment(" 1 # 2")

def testIsCompiled():
    assert not isCompiled(1)
    assert not isCompiled(FIRST_USER - 1)
    assert isCompiled(FIRST_USER)
    assert not isCompiled(CALL)
    assert isCompiled(CALL + 1)

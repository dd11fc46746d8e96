# Runs forthytwo programs against a file of test cases.
#
# A test file is line oriented. Every non-comment line is a one character
# leader, a space and a parameter:
#
#   = name          start a new case
#   @ 22            the line the case calls
#   ^ 1 2 3         cells pushed (without exec) before running, bottom first
#   v 6             the expected data stack when the call returns
#
# A case runs until the call returns to the sentinel frame the runner pushed
# onto the return stack.

from .imports import *
from .instr import FIRST_USER
from .stack import StkUnderflowError
from .runtime import Runtime
from .parser import parseCells, isComment, compileInto
from .parser import sourceLines, SOURCE_ENCODING

from parsimonious import exceptions as peg

log = logging.getLogger(__name__)

DEFAULT_MAX_STEPS = 100000
SENTINEL = (0, 0)  # line 0 is never compiled

class CaseParseError(ValueError): pass


@dataclass
class Case(object):
    name: str
    startLine: int = None
    inputs: List[int] = None
    outputs: List[int] = None

    def __post_init__(self):
        if self.inputs is None: self.inputs = []
        if self.outputs is None: self.outputs = []


@dataclass
class CaseResult(object):
    case: Case
    passed: bool
    stack: Tuple[int, ...] = ()
    steps: int = 0
    reason: str = ""


##########################
# Parsing

def _error(filename, lineNo, msg):
    return CaseParseError(f"{filename}:{lineNo}: Parse error ({msg})")

def parseCases(filename: str, lines) -> List[Case]:
    """Parse an iterable of test file lines into cases."""
    cases = []

    def current(lineNo):
        if not cases: raise _error(filename, lineNo, "No test declared")
        return cases[-1]

    def numbers(lineNo, param, msg):
        try: return parseCells(param)
        except peg.ParseError: raise _error(filename, lineNo, msg) from None

    for lineNo, line in enumerate(lines, start=1):
        line = line.rstrip('\r\n')
        if isComment(line): continue
        if len(line) < 2:
            raise _error(filename, lineNo, "Missing line leader")
        if line[1] != ' ':
            raise _error(filename, lineNo, "Missing space in line leader")

        leader, param = line[0], line[2:]
        if leader == '=':
            cases.append(Case(param))
        elif leader == '@':
            case = current(lineNo)
            start = numbers(lineNo, param, "Can't parse start line")
            if len(start) != 1:
                raise _error(filename, lineNo, "Can't parse start line")
            if start[0] < FIRST_USER:
                raise _error(filename, lineNo, "Start line too low")
            case.startLine = start[0]
        elif leader == '^':
            current(lineNo).inputs.extend(
                numbers(lineNo, param, "Can't parse number"))
        elif leader == 'v':
            current(lineNo).outputs.extend(
                numbers(lineNo, param, "Can't parse number"))
        else:
            raise _error(filename, lineNo, "Bad line leader")
    return cases

def parseCaseFile(path: str) -> List[Case]:
    with open(path, encoding=SOURCE_ENCODING, newline="") as f:
        return parseCases(path, sourceLines(f.read()))


##########################
# Running

def runCase(program: Dict[int, List[int]], case: Case, filename: str = "",
            maxSteps: int = DEFAULT_MAX_STEPS, inp=None, out=None) -> CaseResult:
    rt = Runtime(out=out, inp=inp)
    rt.setFileName(filename)
    compileInto(rt, program)
    for value in case.inputs: rt.pushDataNoExec(value)

    # Running off the end of the called line returns to the sentinel.
    rt.pushReturn(SENTINEL[0])
    rt.pushReturn(SENTINEL[1])
    rt.resetIp(case.startLine if case.startLine is not None else FIRST_USER)

    def result(passed, steps, reason=""):
        return CaseResult(case=case, passed=passed, stack=rt.dataStack(),
                          steps=steps, reason=reason)

    steps = 0
    try:
        while not rt.isAt(*SENTINEL):
            if steps >= maxSteps:
                return result(False, steps, f"no return after {steps} steps")
            rt.computeStep()
            steps += 1
    except (StkUnderflowError, ZeroDivisionError) as e:
        return result(False, steps, str(e))
    except SystemExit as e:
        return result(False, steps, f"program called exit({e.code})")

    if list(rt.dataStack()) != case.outputs:
        return result(False, steps, f"expected {case.outputs}")
    return result(True, steps)

def runCases(program, cases: List[Case], filename: str = "",
             maxSteps: int = DEFAULT_MAX_STEPS, **kwargs) -> List[CaseResult]:
    results = []
    for case in cases:
        r = runCase(program, case, filename, maxSteps, **kwargs)
        log.debug("case %r passed=%s steps=%s", case.name, r.passed, r.steps)
        results.append(r)
    return results

def report(results: List[CaseResult], file=None) -> bool:
    """Print one line per case and a summary. Return whether all passed."""
    failed = 0
    for r in results:
        if r.passed:
            print(f"  ok    {r.case.name} ({r.steps} steps)", file=file)
            continue
        failed += 1
        print(f"  FAIL  {r.case.name}: {r.reason}", file=file)
        print(f"        got {list(r.stack)}", file=file)
    print(f"{len(results) - failed} passed, {failed} failed", file=file)
    return failed == 0


def testCaseDefaults():
    a, b = Case("a"), Case("b")
    a.inputs.append(1)
    assert [] == b.inputs
    assert None is a.startLine

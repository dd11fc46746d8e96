#!/usr/bin/python3
"""
Command line interpreter for forthytwo.

Run a program:

    forthytwo.py [--start N] [--push N ...] program.fty

or run a test case file against it:

    forthytwo.py --test program_test.txt program.fty
"""

import argparse
import logging
import sys

from fty.instr import FIRST_USER
from fty.stack import StkUnderflowError
from fty.runtime import Runtime
from fty.parser import ParseError, parseFile, readProgram
from fty import tester

log = logging.getLogger("forthytwo")

EXIT_ERROR = 1
EXIT_MAX_STEPS = 2

def argParser():
    ap = argparse.ArgumentParser(
        prog="forthytwo", description="forthytwo command line interpreter")
    ap.add_argument("file", help="forthytwo source file")
    ap.add_argument("--start", type=int, default=FIRST_USER,
                    help=f"start processing at line (default: {FIRST_USER})")
    ap.add_argument("--push", type=int, action="append", default=[],
                    metavar="N", help="push N to the data stack, can be repeated")
    ap.add_argument("--max-steps", type=int, default=None,
                    help="stop after this many steps")
    ap.add_argument("--test", metavar="TESTFILE",
                    help="run the test cases in TESTFILE against the program")
    ap.add_argument("--trace", action="store_true",
                    help="log calls and returns to stderr")
    return ap

def error(msg):
    print(f"forthytwo: {msg}", file=sys.stderr)
    return EXIT_ERROR

def run(args) -> int:
    rt = Runtime()
    rt.resetIp(args.start)
    for value in args.push: rt.pushDataNoExec(value)
    parseFile(args.file, rt)

    steps = 0
    while args.max_steps is None or steps < args.max_steps:
        rt.computeStep()
        steps += 1
    log.info("stopped after %s steps at %s", steps, rt.ip)
    return EXIT_MAX_STEPS

def runTests(args) -> int:
    program = readProgram(args.file)
    cases = tester.parseCaseFile(args.test)
    kwargs = {}
    if args.max_steps is not None: kwargs['maxSteps'] = args.max_steps
    results = tester.runCases(program, cases, args.file, **kwargs)
    return 0 if tester.report(results) else EXIT_ERROR

def main(argv=None) -> int:
    args = argParser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.trace else logging.WARNING,
        format="%(levelname)5s %(name)s: %(message)s")
    try:
        if args.test: return runTests(args)
        return run(args)
    except (ParseError, tester.CaseParseError) as e:
        return error(e)
    except (StkUnderflowError, ZeroDivisionError) as e:
        return error(e)
    except OSError as e:
        return error(f"Cannot open '{e.filename}'")


if __name__ == '__main__':
    sys.exit(main())

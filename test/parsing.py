"""
Parser behavioral tests (token walk, help, faults, outcomes).

Scope
- Validate the compiled-in command line: flags, typed options, repeated options,
  the hidden --omg alias, help and every fault with its message.
- Validate the value guard: numeric/appending options refuse a following known
  spelling, string options take it verbatim.
- Validate the Parser API: default records, custom tables, shell/raise modes,
  prompt tokenization and table validation.

Conventions
- Test method names follow CamelCase per project convention.
- Shell-mode exits are asserted with assertRaises(SystemExit) and captured stdout.
"""

from __future__ import annotations

import contextlib
import io
import unittest
from concurrent.futures import ThreadPoolExecutor
from unittest import TestCase

from clistruct import (
    Parser,
    Outcome,
    Option,
    Flag,
    ParsedConfig,
    cli,
    parse,
    evaluate,
    int16,
    uint16,
    uint32,
)
from clistruct.faults import (
    ParseError,
    ParseExit,
    HelpExit,
    UnknownOptionError,
    MissingValueError,
    OutOfRangeError,
    InvalidValueError,
    InvalidIntegerError,
    InvalidFloatError,
    MissingMandatoryFieldError,
    FaultCode,
)

# A complete, valid command line; tests append to it (last value wins).
BASE = ["-s", "-v", "-p", "1", "-f", "2.5", "--str", "x", "-m", "3"]

HELP = (
    "Usage: Cli [OPTIONS]\n"
    "\n"
    "Options:\n"
    "    -h, --help\n"
    "    -s, --some\n"
    "    -v, --verbose\n"
    "    -p, --param <PARAM>\n"
    "    -f, --float-value <FLOAT_VALUE>\n"
    "    --str <STR>\n"
    "    -m, --many-values <MANY_VALUES>\n"
)


def run(argv):
    """Run the compiled-in parser in shell mode, capturing stdout and the exit code."""
    buffer = io.StringIO()
    with contextlib.redirect_stdout(buffer):
        try:
            parse(argv)
        except SystemExit as exit:
            return exit.code, buffer.getvalue()
    return None, buffer.getvalue()


class TestCompiledCommandLine(TestCase):
    """Behavioral tests for the compiled-in option table."""

    def testFullParse(self):
        config = parse(["-s", "-v", "-p", "1", "-f", "2.5", "--str", "x", "-m", "3", "-m", "4"])
        self.assertEqual(config, ParsedConfig(True, True, 1, 2.5, "x", (3, 4)))

    def testLongSpellings(self):
        config = parse([
            "--some", "--verbose", "--param", "-7", "--float-value", "0.5",
            "--str", "hello world", "--many-values", "9",
        ])
        self.assertEqual(config.param, -7)
        self.assertEqual(config.float_value, 0.5)
        self.assertEqual(config.text, "hello world")
        self.assertEqual(config.many_values, (9,))

    def testRepeatedValuesKeepOrderAndDuplicates(self):
        config = parse(BASE + ["-m", "1", "--many-values", "3", "-m", "2"])
        self.assertEqual(config.many_values, (3, 1, 3, 2))

    def testLastValueWins(self):
        config = parse(BASE + ["--str", "a", "--str", "b", "-p", "5"])
        self.assertEqual(config.text, "b")
        self.assertEqual(config.param, 5)

    def testRepeatedFlagIsHarmless(self):
        self.assertTrue(parse(BASE + ["-s", "--some"]).flag_some)

    def testHiddenAliasSetsParam(self):
        self.assertEqual(parse(BASE + ["--omg", "7"]).param, 7)

    def testHiddenAliasNotAdvertised(self):
        self.assertNotIn("--omg", cli.help)

    def testExactZeroAccepted(self):
        self.assertEqual(parse(BASE + ["--param", "0"]).param, 0)

    def testNegativeNumberIsAValue(self):
        self.assertEqual(parse(BASE + ["-p", "-5"]).param, -5)

    def testStringTakesOptionLookalike(self):
        config = parse(["-v", "-p", "1", "-f", "1", "--str", "-s", "-m", "1", "-s"])
        self.assertEqual(config.text, "-s")

    def testStringTakesUnknownDashToken(self):
        self.assertEqual(parse(BASE + ["--str", "--nope"]).text, "--nope")

    def testHelpText(self):
        self.assertEqual(cli.help, HELP)

    def testHelpExitsZero(self):
        code, output = run(["--help"])
        self.assertEqual(code, 0)
        self.assertEqual(output, HELP)

    def testHelpWinsAnywhere(self):
        for argv in (["-p", "abc", "-h"], ["--nope", "--help"], BASE + ["-h"]):
            with self.subTest(argv=argv):
                code, output = run(argv)
                self.assertEqual(code, 0)
                self.assertEqual(output, HELP)

    def testHelpWinsOverStringValue(self):
        # "-h" after --str is still a help request, not the string value.
        outcome = evaluate(BASE + ["--str", "-h"])
        self.assertEqual(outcome.help, HELP)
        self.assertIsNone(outcome.config)

    def testUnknownOption(self):
        code, output = run(BASE + ["--nope"])
        self.assertEqual(code, 1)
        self.assertEqual(output, "Unknown option '--nope'\n")

    def testBarePositionalIsUnknown(self):
        outcome = evaluate(BASE + ["file.txt"])
        self.assertIsInstance(outcome.fault, UnknownOptionError)

    def testTrailingOptionMissingValue(self):
        code, output = run(BASE + ["--float-value"])
        self.assertEqual(code, 1)
        self.assertEqual(output, "Expected value for option '--float-value' but no value was provided\n")

    def testNumericOptionRefusesKnownSpelling(self):
        outcome = evaluate(["-p", "-s", "-v", "-f", "1", "--str", "x", "-m", "1"])
        self.assertIsInstance(outcome.fault, MissingValueError)
        self.assertEqual(str(outcome.fault), "Expected value for option '-p' but no value was provided")

    def testAppendingOptionRefusesHiddenSpelling(self):
        outcome = evaluate(BASE + ["-m", "--omg"])
        self.assertIsInstance(outcome.fault, MissingValueError)

    def testInvalidInteger(self):
        code, output = run(BASE + ["--param", "abc"])
        self.assertEqual(code, 1)
        self.assertEqual(output, "Value 'abc' of option '--param' is not a valid integer\n")

    def testZeroSpellingIsInvalid(self):
        outcome = evaluate(BASE + ["-p", "00"])
        self.assertIsInstance(outcome.fault, InvalidIntegerError)
        self.assertIsInstance(outcome.fault, InvalidValueError)

    def testInvalidFloat(self):
        outcome = evaluate(BASE + ["-f", "xyz"])
        self.assertIsInstance(outcome.fault, InvalidFloatError)
        self.assertEqual(str(outcome.fault), "Value 'xyz' of option '-f' is not a valid float")

    def testVeryLongIntegerOutOfRange(self):
        outcome = evaluate(BASE + ["-p", "9" * 5000])
        self.assertIsInstance(outcome.fault, OutOfRangeError)

    def testOutOfRange(self):
        code, output = run(BASE + ["-p", "40000"])
        self.assertEqual(code, 1)
        self.assertEqual(output, "Value '40000' of option '-p' out of range for int16 type\n")

    def testNegativeUnsignedOutOfRange(self):
        outcome = evaluate(BASE + ["-m", "-1"])
        self.assertIsInstance(outcome.fault, OutOfRangeError)
        self.assertEqual(outcome.fault.code, FaultCode.OUT_OF_RANGE)

    def testFloatOverflowOutOfRange(self):
        self.assertIsInstance(evaluate(BASE + ["-f", "1e39"]).fault, OutOfRangeError)

    def testFirstFaultWins(self):
        outcome = evaluate(["--nope", "-p", "abc"])
        self.assertIsInstance(outcome.fault, UnknownOptionError)

    def testMissingMandatoryField(self):
        code, output = run(["-s", "-v", "-p", "1", "-f", "1", "-m", "1"])
        self.assertEqual(code, 1)
        self.assertEqual(output, "--str was required but it was not provided\n")

    def testEveryMissingFieldReported(self):
        outcome = evaluate([])
        self.assertIsInstance(outcome.fault, ParseExit)
        self.assertEqual([str(fault) for fault in outcome.fault.exceptions], [
            "--some was required but it was not provided",
            "--verbose was required but it was not provided",
            "--param was required but it was not provided",
            "--float_value was required but it was not provided",
            "--str was required but it was not provided",
            "--many_values was required but it was not provided",
        ])
        for fault in outcome.fault.exceptions:
            self.assertIsInstance(fault, MissingMandatoryFieldError)

    def testEveryMissingFieldPrinted(self):
        code, output = run(["-s", "-v", "-p", "1"])
        self.assertEqual(code, 1)
        self.assertEqual(output.splitlines(), [
            "--float_value was required but it was not provided",
            "--str was required but it was not provided",
            "--many_values was required but it was not provided",
        ])

    def testParseFromString(self):
        config = parse("-s -v -p 1 -f 2.5 --str 'a b' -m 3")
        self.assertEqual(config.text, "a b")


class TestOutcome(TestCase):
    """Behavioral tests for evaluate() and Outcome."""

    def testSuccess(self):
        outcome = evaluate(BASE)
        self.assertIsInstance(outcome, Outcome)
        self.assertIsInstance(outcome.config, ParsedConfig)
        self.assertIsNone(outcome.fault)
        self.assertIsNone(outcome.help)
        self.assertEqual(outcome.status, 0)

    def testHelp(self):
        outcome = evaluate(["-p", "abc", "-h"])
        self.assertEqual(outcome.help, HELP)
        self.assertIsNone(outcome.config)
        self.assertEqual(outcome.status, 0)

    def testFault(self):
        outcome = evaluate(["--nope"])
        self.assertIsInstance(outcome.fault, ParseError)
        self.assertIsNone(outcome.config)
        self.assertEqual(outcome.status, 1)

    def testEvaluateNeverWrites(self):
        buffer = io.StringIO()
        with contextlib.redirect_stdout(buffer):
            evaluate(["--nope"])
            evaluate(["--help"])
        self.assertEqual(buffer.getvalue(), "")

    def testConcurrentRunsAreIndependent(self):
        def work(number):
            argv = [
                "-s", "-v", "-p", str(number), "-f", "1", "--str", "t%d" % number,
                *["-m", str(number)] * 20,
            ]
            expected = ParsedConfig(True, True, number, 1.0, "t%d" % number, (number,) * 20)
            return [evaluate(argv).config == expected for _ in range(200)]

        with ThreadPoolExecutor(max_workers=8) as executor:
            results = list(executor.map(work, range(1, 9)))
        self.assertTrue(all(all(runs) for runs in results))

    def testParseLogsSteps(self):
        with self.assertLogs("clistruct.parser", level="DEBUG") as logs:
            evaluate(BASE)
        self.assertTrue(any("selects 'param'" in line for line in logs.output))


class TestParser(TestCase):
    """Behavioral tests for custom Parser tables."""

    def makeParser(self, **options):
        return Parser(
            Flag("-v", "--verbose"),
            Option("-p", "--param", type=int16),
            Option("--level", type=uint16, mandatory=False, default=3),
            name="tool",
            shell=False,
            **options,
        )

    def testDefaultRecord(self):
        config = self.makeParser().parse(["-v", "--param", "3"])
        self.assertEqual(type(config).__name__, "Tool")
        self.assertEqual(config._fields, ("verbose", "param", "level"))
        self.assertEqual(tuple(config), (True, 3, 3))

    def testOptionalFieldOverridden(self):
        self.assertEqual(self.makeParser().parse("-v -p 3 --level 9").level, 9)

    def testHelperPrepended(self):
        parser = self.makeParser()
        self.assertEqual(parser.specs[0].names, ("-h", "--help"))
        self.assertIsNone(parser.specs[0].descr)
        self.assertEqual(parser.help, (
            "Usage: tool [OPTIONS]\n"
            "\n"
            "Options:\n"
            "    -h, --help\n"
            "    -v, --verbose\n"
            "    -p, --param <PARAM>\n"
            "    --level <LEVEL>\n"
        ))

    def testCustomHelperReplacesDefault(self):
        parser = Parser(Flag("--usage", helper=True), Flag("-v"), shell=False)
        self.assertNotIn("-h", parser.switches)
        with self.assertRaises(HelpExit):
            parser.parse(["--usage"])

    def testRaiseModeRaisesFaults(self):
        with self.assertRaises(UnknownOptionError):
            self.makeParser().parse(["--nope"])

    def testRaiseModeRaisesMissingFields(self):
        with self.assertRaises(ParseExit) as context:
            self.makeParser().parse([])
        self.assertEqual(len(context.exception.exceptions), 2)

    def testRaiseModeRaisesHelpExit(self):
        with self.assertRaises(HelpExit) as context:
            self.makeParser().parse(["-h"])
        self.assertEqual(context.exception.code, 0)
        self.assertEqual(context.exception.text, self.makeParser().help)

    def testParserStateResetBetweenRuns(self):
        parser = self.makeParser()
        parser.parse(["-v", "-p", "1"])
        with self.assertRaises(ParseExit):
            parser.parse([])

    def testPromptMustContainStrings(self):
        with self.assertRaises(TypeError):
            self.makeParser().evaluate([1, 2])
        with self.assertRaises(TypeError):
            self.makeParser().evaluate(42)

    def testDuplicateSpellingRejected(self):
        with self.assertRaises(ValueError):
            Parser(Flag("-v"), Flag("-v", dest="other"))

    def testDuplicateHiddenSpellingRejected(self):
        with self.assertRaises(ValueError):
            Parser(Flag("-v", "--verbose"), Option("-p", hidden=("--verbose",)))

    def testDuplicateFieldRejected(self):
        with self.assertRaises(ValueError):
            Parser(Flag("-a", dest="x"), Flag("-b", dest="x"))

    def testRecordFieldsMustMatch(self):
        with self.assertRaises(ValueError):
            Parser(Flag("-v"), record=ParsedConfig)

    def testSpecsMustBeArguments(self):
        with self.assertRaises(TypeError):
            Parser("-v")

    def testNameCannotBeEmpty(self):
        with self.assertRaises(ValueError):
            Parser(Flag("-v"), name=" ")

    def testRepeatedOptionAccumulates(self):
        parser = Parser(Option("-m", type=uint32, append=True), shell=False)
        self.assertEqual(parser.parse("-m 1 -m 2").m, (1, 2))


if __name__ == "__main__":
    unittest.main()

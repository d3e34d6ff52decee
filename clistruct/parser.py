"""
clistruct parser: walk an argument vector into a typed record.

What this module provides
- Parser: a flat, single-command parser built from a table of Flag/Option specs
  and a record type. It owns the whole lifecycle:
  • help first: any help spelling prints the usage text and exits 0;
  • a left-to-right walk over the tokens, looking each one up in the alias table;
  • value consumption, conversion and validation for options;
  • accumulation of repeated options;
  • mandatory-field enforcement, reporting every missing field at once.
- Outcome: the result of Parser.evaluate(), either a record, a fault or the help
  text, with the matching exit status.

Flow
- evaluate(argv) never exits: faults are captured into the outcome.
- parse(argv) is the thin top-level caller: it triggers the help/fault of the
  outcome (printing and exiting in shell mode, raising otherwise) and returns the
  record on success.

Quick start
    from clistruct import Parser, Flag, Option, int16

    parser = Parser(
        Flag("-v", "--verbose"),
        Option("-p", "--param", type=int16),
        name="tool",
    )
    config = parser.parse(["-v", "--param", "3"])   # tool(verbose=True, param=3)

Value policy
- An option needing a value fails with MissingValueError when nothing follows it.
- Numeric and appending options also refuse a following token that is itself a
  known spelling (it is reported as a missing value, not consumed). String options
  take the next token verbatim, whatever it looks like.
"""
import collections
import functools
import logging
import re
import shlex
import sys
from collections import deque
from collections.abc import Iterable
from typing import NamedTuple, Any

from .arguments import Option, Flag
from .faults import *
from .utils import *

logger = logging.getLogger(__name__)


@functools.cache
def _ordinal(number):
    """
    Return a human-friendly ordinal label for a 1-based position.

    - 1..10 are rendered as words ("first"…"tenth").
    - Other numbers use numeric ordinals with correct English suffixes.
    """
    try:
        return {
            1: "first",
            2: "second",
            3: "third",
            4: "fourth",
            5: "fifth",
            6: "sixth",
            7: "seventh",
            8: "eighth",
            9: "ninth",
            10: "tenth",
        }[number]
    except KeyError:
        pass

    # 11th, 12th, 13th (and 111th, 112th, 113th, …)
    if 10 < number % 100 < 20:
        return f"{number}th"

    return f'{number}%s' % {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")


class _Context:
    """
    State of a single run: the remaining tokens, the 1-based position of the
    current token, the fields filled so far and the fields seen. Owned by one
    _parseargs() call, so a parser can serve concurrent runs.
    """
    __slots__ = ("tokens", "index", "namespace", "seen")

    def __init__(self, tokens):
        self.tokens = deque(tokens)
        self.index = 1
        self.namespace = {}
        self.seen = set()


class Outcome(NamedTuple):
    """
    Result of a single parse.

    Exactly one of the three payloads is set:
    - config: the populated record (success);
    - fault: a ParseError, or a ParseExit bundling several of them;
    - help: the usage text (help was requested).
    """
    config: Any = None
    fault: ParseError | ParseExit | None = None
    help: str | None = None

    @property
    def status(self):
        """
        Process exit status matching this outcome: 1 on fault, 0 otherwise.
        """
        return 1 if self.fault is not None else 0


class Parser:
    """
    Flat command-line parser over a declarative spec table.

    Construction
    - specs: Flag/Option instances, in help order. A "-h, --help" helper flag is
      prepended unless the table already has a helper.
    - record: callable building the result from keyword fields (typically a
      NamedTuple class). Defaults to a namedtuple of every dest, in table order.
    - name: program name shown in "Usage: <name> [OPTIONS]".
    - shell: print and exit on help/faults (True) or raise them (False).
    - fancy/colorful: fault rendering chrome (see clistruct.faults).

    Invariants
    - every spelling (visible or hidden) selects exactly one spec;
    - every dest is unique and, when the record declares _fields, matches them;
    - the help text is built once and never changes;
    - nothing of a run is kept on the parser, concurrent parses are independent.
    """

    name = mirror("name")
    specs = mirror("specs")
    help = mirror("help")
    shell = mirror("shell")
    fancy = mirror("fancy")
    colorful = mirror("colorful")

    @property
    def switches(self):
        """
        Read-only view of the alias table (spelling → spec).
        """
        return dict(self._switches)

    def __init__(
            self,
            *specs,
            record=Unset,
            name="cli",
            shell=True,
            fancy=False,
            colorful=False,
    ):
        if not isinstance(name, str):
            raise TypeError("parser 'name' must be a string")
        elif not (name := name.strip()):
            raise ValueError("parser 'name' cannot be empty")

        for spec in specs:
            if not isinstance(spec, Option | Flag):
                raise TypeError("parser specs must be options or flags")

        if not any(getattr(spec, "helper", False) for spec in specs):
            specs = (Flag("-h", "--help", helper=True), *specs)

        switches = {}
        dests = []
        for spec in specs:
            for spelling in spec.spellings:
                if spelling in switches:
                    raise ValueError(f"parser spelling {spelling!r} is already in use")
                switches[spelling] = spec
            if getattr(spec, "helper", False):
                continue
            if spec.dest in dests:
                raise ValueError(f"parser field {spec.dest!r} is already in use")
            dests.append(spec.dest)

        if record is Unset:
            typename = "".join(map(str.title, re.split(r"\W|_", name)))
            record = collections.namedtuple(typename if typename.isidentifier() else "Record", dests)
        elif not callable(record):
            raise TypeError("parser 'record' must be callable")
        elif (fields := getattr(record, "_fields", Unset)) is not Unset and set(fields) != set(dests):
            raise ValueError("parser 'record' fields must match the option fields")

        self._name = name
        self._specs = specs
        self._switches = switches
        self._record = record
        self._shell = bool(shell)
        self._fancy = bool(fancy)
        self._colorful = bool(colorful)
        self._help = self._helper()

    def __repr__(self):
        return "parser(name=%r, specs=%d, shell=%r)" % (self._name, len(self._specs), self._shell)

    def __rich_repr__(self):
        for name in ("name", "specs", "shell", "fancy", "colorful"):
            yield name, getattr(self, name)

    def _helper(self):
        """
        Build the fixed usage text.

        layout
            Usage: <name> [OPTIONS]

            Options:
                -h, --help
                -p, --param <PARAM>

        Hidden spellings are never listed; value-taking options show their metavar.
        """
        lines = ["Usage: %s [OPTIONS]" % self._name, "", "Options:"]
        for spec in self._specs:
            line = "    " + ", ".join(spec.names)
            if isinstance(spec, Option):
                line += " <%s>" % spec.metavar
            lines.append(line)
        return "\n".join(lines) + "\n"

    def trigger(self, fault, /, **options):
        """
        Surface a fault (or the help exit) with this parser's rendering context.
        """
        trigger(
            fault,
            **options,
            prog=self._name,
            shell=self._shell,
            fancy=self._fancy,
            colorful=self._colorful,
        )

    def _getvalue(self, context, argument, input):
        """
        consume and convert the value following an option.

        parameters
        - context: _Context, the state of the current run.
        - argument: Option, the spec selected by 'input'.
        - input: str, the spelling actually used (reported in messages).

        returns
        - the converted value.

        faults
        - MissingValueError: nothing follows, or (numeric/appending options) the next
          token is itself a known spelling.
        - OutOfRangeError: the converter raised OverflowError.
        - InvalidIntegerError / InvalidFloatError: the converter raised ValueError.
        """
        guarded = argument.append or argument.type.kind != "string"

        if not context.tokens or (guarded and context.tokens[0] in self._switches):
            raise MissingValueError(
                "Expected value for option '%s' but no value was provided" % input,
                title="missing option value",
                code=FaultCode.MISSING_VALUE,
                input=input,
                index=context.index,
                field=argument.name,
                hint="provide a value after %s at %s position (e.g., %s <%s>)" % (
                    input, _ordinal(context.index), input, argument.metavar
                ),
                docs=getdoc(FaultCode.MISSING_VALUE),
            )

        value = context.tokens.popleft()
        context.index += 1

        try:
            return argument.type(value)
        except OverflowError as exception:
            raise OutOfRangeError(
                "Value '%s' of option '%s' out of range for %s type" % (value, input, argument.type.__name__),
                title="value out of range",
                code=FaultCode.OUT_OF_RANGE,
                input=input,
                value=value,
                index=context.index,
                field=argument.name,
                hint="use a value that fits in %s" % argument.type.__name__,
                docs=getdoc(FaultCode.OUT_OF_RANGE),
                exception=exception,
            ) from exception
        except ValueError as exception:
            if argument.type.kind == "float":
                fault, code, kind = InvalidFloatError, FaultCode.INVALID_FLOAT, "float"
            else:
                fault, code, kind = InvalidIntegerError, FaultCode.INVALID_INTEGER, "integer"
            raise fault(
                "Value '%s' of option '%s' is not a valid %s" % (value, input, kind),
                title="invalid %s" % kind,
                code=code,
                input=input,
                value=value,
                index=context.index,
                field=argument.name,
                hint="use a base-10 %s; zero must be written exactly as '0'" % kind,
                docs=getdoc(code),
                exception=exception,
            ) from exception

    def _parse_option(self, context, argument, input):
        """
        store an option's value: the last one wins, appending options accumulate.
        """
        value = self._getvalue(context, argument, input)
        if argument.append:
            context.namespace[argument.dest].append(value)
        else:
            context.namespace[argument.dest] = value

    def _parse_flag(self, context, argument):
        """
        record a flag's presence; flags carry no value.
        """
        context.namespace[argument.dest] = True

    def _finalize(self, context):
        """
        check the mandatory fields once the walk is over.

        every unseen mandatory field becomes one MissingMandatoryFieldError; they are
        all bundled into a single ParseExit so each one is reported before exiting.
        """
        exceptions = []
        for spec in self._specs:
            if not spec.mandatory or spec.dest in context.seen:
                continue
            exceptions.append(MissingMandatoryFieldError(
                "--%s was required but it was not provided" % spec.name,
                title="missing mandatory field",
                code=FaultCode.MISSING_MANDATORY_FIELD,
                field=spec.name,
                hint="pass %s" % " or ".join(spec.names),
                docs=getdoc(FaultCode.MISSING_MANDATORY_FIELD),
            ))

        if exceptions:
            raise ParseExit(exceptions)

    def _parseargs(self, tokens):
        """
        parse argv-like tokens into the record.

        phases
        - setup: create the state of this run and seed the namespace with every default.
        - help: any helper spelling anywhere ends the run with the usage text.
        - loop: pop a token, look it up in the alias table (unknown → fault), then
          flags set their field and options consume one value.
        - finalize: mandatory check, then build the record.
        """
        context = _Context(tokens)

        for spec in self._specs:
            if getattr(spec, "helper", False):
                continue
            context.namespace[spec.dest] = list(spec.default) if spec.arity == "many" else spec.default

        # help wins anywhere, including the token after a string option
        for token in context.tokens:
            if getattr(self._switches.get(token), "helper", False):
                logger.debug("help requested by %r", token)
                raise HelpExit(self._help)

        while context.tokens:
            token = context.tokens.popleft()

            try:
                argument = self._switches[token]
            except KeyError:
                raise UnknownOptionError(
                    "Unknown option '%s'" % token,
                    title="unknown option",
                    code=FaultCode.UNKNOWN_OPTION,
                    input=token,
                    index=context.index,
                    hint="try '%s --help' to see all available options" % self._name,
                    docs=getdoc(FaultCode.UNKNOWN_OPTION),
                ) from None

            logger.debug("%s position: %r selects %r", _ordinal(context.index), token, argument.name)

            if isinstance(argument, Option):
                self._parse_option(context, argument, token)
            elif isinstance(argument, Flag):
                self._parse_flag(context, argument)
            else:
                raise RuntimeError("unexpected argument")

            context.seen.add(argument.dest)
            context.index += 1

        self._finalize(context)

        fields = {}
        for name, object in context.namespace.items():
            fields[name] = tuple(object) if isinstance(object, list) else object
        return self._record(**fields)

    @staticmethod
    def _tokenize(prompt):
        """
        Normalize a prompt into a list of tokens.

        - Unset: sys.argv[1:].
        - str: shell-like string, split via shlex.split.
        - Iterable[str]: pre-tokenized sequence, kept verbatim.
        """
        if prompt is Unset:
            return sys.argv[1:]
        elif isinstance(prompt, str):
            return shlex.split(prompt)
        elif isinstance(prompt, Iterable):
            tokens = list(prompt)
            for token in tokens:
                if not isinstance(token, str):
                    raise TypeError("parse() argument must be a string or an iterable of strings")
            return tokens
        raise TypeError("parse() argument must be a string or an iterable of strings")

    def evaluate(self, prompt=Unset, /):
        """
        Parse without leaving the process: return an Outcome.

        Parameters
        - prompt: Unset (sys.argv[1:]), a shell-like str, or an iterable of str.

        Raises
        - TypeError: only for a malformed prompt (not a user input error).
        """
        tokens = self._tokenize(prompt)
        try:
            config = self._parseargs(tokens)
        except HelpExit as exit:
            return Outcome(help=exit.text)
        except (ParseError, ParseExit) as fault:
            logger.debug("parse failed: %s", fault)
            return Outcome(fault=fault)
        return Outcome(config=config)

    def parse(self, prompt=Unset, /):
        """
        Parse and act on the outcome.

        - help: printed, exit status 0 (HelpExit raised when shell is False);
        - fault: printed, exit status 1 (the fault is raised when shell is False);
        - success: the record is returned.
        """
        outcome = self.evaluate(prompt)
        if outcome.help is not None:
            self.trigger(HelpExit(outcome.help))
        elif outcome.fault is not None:
            self.trigger(outcome.fault)
        return outcome.config


__all__ = (
    "Parser",
    "Outcome",
)

"""
The compiled-in command line: its record, its option table and its parser.

CLI surface
    -h, --help                        print the usage text and exit 0
    -s, --some                        flag, mandatory
    -v, --verbose                     flag, mandatory
    -p, --param <PARAM>               int16, mandatory (also accepts the hidden --omg)
    -f, --float-value <FLOAT_VALUE>   float32, mandatory
    --str <STR>                       string, mandatory
    -m, --many-values <MANY_VALUES>   uint32, mandatory, repeatable

Example
    >>> parse(["-s", "-v", "-p", "1", "-f", "2.5", "--str", "x", "-m", "3", "-m", "4"])
    ParsedConfig(flag_some=True, flag_verbose=True, param=1, float_value=2.5, text='x', many_values=(3, 4))
"""
from typing import NamedTuple

from .arguments import Option, Flag
from .parser import Parser
from .utils import Unset
from .values import int16, float32, string, uint32


class ParsedConfig(NamedTuple):
    """
    Typed result of a successful parse; immutable once returned.

    Fields start at their zero value and are filled in as tokens are consumed;
    many_values keeps insertion order and duplicates.
    """
    flag_some: bool = False
    flag_verbose: bool = False
    param: int = 0
    float_value: float = 0.0
    text: str = ""
    many_values: tuple[int, ...] = ()

    def debug(self, name="Cli"):
        """
        Render the record in the block layout used by the command's debug dump
        (lines inside the braces are tab-indented):

            Cli {
                some: true
                ...
                many_values: [
                1,
                ]
            }
        """
        lines = [
            "%s {" % name,
            "\tsome: %s" % ("true" if self.flag_some else "false"),
            "\tverbose: %s" % ("true" if self.flag_verbose else "false"),
            "\tparam: %d" % self.param,
            "\tfloat_value: %f" % self.float_value,
            "\tstr: %s" % self.text,
            "\tmany_values: [",
        ]
        lines.extend("\t%d," % value for value in self.many_values)
        lines.extend(["\t]", "}"])
        return "\n".join(lines) + "\n"


OPTIONS = (
    Flag("-s", "--some", dest="flag_some"),
    Flag("-v", "--verbose", dest="flag_verbose"),
    # --omg is kept working for old scripts but never advertised.
    Option("-p", "--param", hidden=("--omg",), type=int16),
    Option("-f", "--float-value", type=float32),
    Option("--str", dest="text", type=string),
    Option("-m", "--many-values", type=uint32, append=True),
)

cli = Parser(*OPTIONS, record=ParsedConfig, name="Cli")


def parse(prompt=Unset, /):
    """
    Parse the process arguments (or the given prompt) with the compiled-in table.

    Prints help and exits 0 on -h/--help; prints the diagnostic and exits 1 on any
    fault; returns the ParsedConfig otherwise.
    """
    return cli.parse(prompt)


def evaluate(prompt=Unset, /):
    """
    Same as parse() but never exits: returns the parser Outcome.
    """
    return cli.evaluate(prompt)


__all__ = (
    "ParsedConfig",
    "OPTIONS",
    "cli",
    "parse",
    "evaluate",
)

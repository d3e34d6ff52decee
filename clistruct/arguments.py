r"""
clistruct option specifications.

Overview
- Specs
  • Flag: named, presence-only switch (no payload), e.g. -v/--verbose. Seeing it
    stores True in its field.
  • Option: named, value-bearing option with one or more aliases (e.g. -p/--param).
    It consumes exactly one following token per occurrence; with append=True every
    occurrence adds one value to an ordered sequence.

- Introspection & representation
  • ArgumentType metaclass provides stable __repr__/__rich_repr__ and exposes the
    fields listed in __introspectable__ as read-only properties.

Metadata (sanitized on construction)
- names: one or more shell-style spellings, kept in declaration order (help lists
  them in that order). Must match r"--?[^\W\d_](-?[^\W_]+)*" and be unique.
- hidden: extra spellings that are accepted but never shown in help.
- name: canonical option name, the first long spelling with dashes turned into
  underscores ("--float-value" → "float_value"). Used in diagnostics.
- dest: field name in the resulting record, defaults to name.
- mandatory: the field must be seen at least once (default True, except helpers).
- descr: optional description, kept for introspection (the fixed help layout
  does not render it).
- Option only
  • type: a converter from clistruct.values (int16, float32, string, ...).
  • append: accumulate one value per occurrence instead of overwriting.
  • default: value for a non-mandatory field that never appears.
  • metavar: label in help, defaults to name in upper case.
- Flag only
  • helper: marks the help flag; helpers are terminal and never mandatory.

Quick example:
    >>> from clistruct.arguments import Option, Flag
    >>> from clistruct.values import int16
    >>> Option("-p", "--param", type=int16, hidden=("--omg",)).arity
    'one'
    >>> Flag("-v", "--verbose", dest="flag_verbose").name
    'verbose'
"""
import builtins
import functools
import operator
import re

from rich.text import Text

from .utils import *
from .values import Converter, string


class ArgumentType(type):
    """
    Metaclass that turns specs into introspectable, read-only descriptors.

    Responsibilities
    - Derive __typename__ from the class name (camel-case split with hyphens), used
      in messages.
    - Expose every name listed in __introspectable__ as a read-only property
      mirroring the private "_<name>" field.
    - Provide stable __repr__/__rich_repr__ implementations.
    """
    __introspectable__ = ()

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            """
            Example
            - flag(names=('-v', '--verbose'), name='verbose', hidden=(), ...)
            """
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_names(cls, metadata, /):
    r"""
    Internal: validate and normalize the spellings of a named spec.

    Responsibilities
    - names: required, each a non-empty shell-style option name. Duplicates are
      rejected. Order is preserved (it is the help order).
    - hidden: optional, same rules; must not repeat a visible name.
    - name: the first long name (or the first name) without dashes.
    - dest: defaults to name when Unset; must be a valid Python identifier.

    Raises
    - TypeError: names missing or not strings.
    - ValueError: empty, malformed, duplicated names or an invalid dest.
    """
    if not metadata["names"]:
        raise TypeError(f"{cls.__typename__} must specify at least one name")

    seen = []
    for key in ("names", "hidden"):
        if isinstance(metadata[key], str):
            raise TypeError(f"{cls.__typename__} '{key}' must be an iterable of strings")
        sanitized = []
        for name in metadata[key]:
            if not isinstance(name, str):
                raise TypeError(f"{cls.__typename__} names must be strings")
            elif not (name := name.strip()):
                raise ValueError(f"{cls.__typename__} names cannot be empty-strings")
            elif not re.fullmatch(r"--?[^\W\d_](-?[^\W_]+)*", name):
                raise ValueError(f"{cls.__typename__} names must be valid shell-style option names (unicodes are allowed)")
            elif name in seen:
                raise ValueError(f"{cls.__typename__} names cannot contain duplicates")
            seen.append(name)
            sanitized.append(name)
        metadata[key] = tuple(sanitized)

    longs = [name for name in metadata["names"] if name.startswith("--")]
    metadata["name"] = (longs or metadata["names"])[0].lstrip("-").replace("-", "_")

    if not isinstance(dest := coalesce(metadata["dest"], metadata["name"]), str):
        raise TypeError(f"{cls.__typename__} 'dest' must be a string")
    elif not dest.isidentifier():
        raise ValueError(f"{cls.__typename__} 'dest' must be a valid identifier")
    metadata["dest"] = dest

    if not isinstance(descr := metadata["descr"], str | Text | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = coalesce(descr)


class Option(metaclass=ArgumentType):
    """
    Named, value-bearing option specification.

    Every occurrence consumes exactly one following token, converted with 'type'.
    Single-valued options keep the last value seen; with append=True the values
    are accumulated in order (duplicates kept).

    Properties
    - The names listed in __introspectable__ are exposed as read-only attributes.
    - arity: "one" or "many" (append).
    - spellings: visible names followed by hidden ones.
    """

    __introspectable__ = (
        "names",
        "name",
        "hidden",
        "dest",
        "type",
        "append",
        "mandatory",
        "default",
        "metavar",
        "descr",
    )

    def __init__(
            self,
            *names,
            hidden=(),
            dest=Unset,
            type=string,
            append=False,
            mandatory=True,
            default=Unset,
            metavar=Unset,
            descr=Unset,
    ):
        """
        Construct an Option spec.

        Parameters
        - names: one or more str, e.g. "-p", "--param".
        - hidden: spellings accepted by the parser but left out of help.
        - dest: record field name; defaults to the canonical name.
        - type: Converter (see clistruct.values).
        - append: accumulate one value per occurrence.
        - mandatory: the option must appear at least once.
        - default: fallback for non-mandatory options; defaults to the converter's
          zero value (or an empty sequence with append).
        - metavar: help label; defaults to name in upper case.
        - descr: short description (not rendered by the fixed help layout, kept for
          introspection).
        """
        metadata = {
            "names": names,
            "hidden": hidden,
            "dest": dest,
            "descr": descr,
        }
        _sanitize_names(cls := builtins.type(self), metadata)

        if not isinstance(type, Converter):
            raise TypeError(f"{cls.__typename__} 'type' must be a converter")

        if not isinstance(metavar, str | Unset):
            raise TypeError(f"{cls.__typename__} 'metavar' must be a string")
        elif isinstance(metavar, str) and not (metavar := metavar.strip()):
            raise ValueError(f"{cls.__typename__} 'metavar' cannot be empty")

        if append:
            if default is not Unset:
                raise TypeError(f"appending {cls.__typename__} cannot specify a 'default'")
            default = ()

        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        self._type = type
        self._append = bool(append)
        self._mandatory = bool(mandatory)
        self._default = coalesce(default, type.default)
        self._metavar = coalesce(metavar, self._name.upper())

    @property
    def arity(self):
        return "many" if self._append else "one"

    @property
    def spellings(self):
        return self._names + self._hidden


class Flag(metaclass=ArgumentType):
    """
    Named, presence-only option specification.

    Seeing any of its spellings stores True in the field; repeating it is harmless.
    A helper flag (help) short-circuits the parse and is never mandatory.
    """

    __introspectable__ = (
        "names",
        "name",
        "hidden",
        "dest",
        "mandatory",
        "helper",
        "descr",
    )

    def __init__(
            self,
            *names,
            hidden=(),
            dest=Unset,
            mandatory=True,
            helper=False,
            descr=Unset,
    ):
        metadata = {
            "names": names,
            "hidden": hidden,
            "dest": dest,
            "descr": descr,
        }
        _sanitize_names(builtins.type(self), metadata)

        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        self._helper = bool(helper)
        # Helper flags terminate the parse; they cannot be required.
        self._mandatory = bool(mandatory) and not self._helper

    default = False
    arity = "none"

    @property
    def spellings(self):
        return self._names + self._hidden


__all__ = (
    # Classes (specifications)
    "Option",
    "Flag",
)

# Keep the metaclass out of star-imports and docs.
del ArgumentType

r"""
Argot argument model: the matchable units of a command grammar.

Overview
- Argument: abstract base. Every argument consumes a prefix of a token list:
    extract(tokens) -> (remaining, values)
  and raises a CommandException subclass when it cannot. Faults carry the
  number of tokens this argument consumed before failing ("consumed"); the
  command rewrites it to the absolute count.

- Variants
  • Constant: a literal keyword, optionally case-insensitive; consumes exactly one token.
  • Variable: a typed positional value, required or defaulted.
  • Flag / Flags: named switches (-x, --xx) matched out of order as one grammar position.
  • Variadic: the trailing catch-all; converts every remaining token.

- Description
  • usage: short synopsis token ("run", "<name>", "[name]", "[-x] [--xx]", "[name...]").
  • legend: (label, text) rows for the parameter table of the help output.

Validation highlights (raised as TypeError/ValueError at construction)
- Constant text must be non-empty after trimming and not only dashes.
- Variable/Variadic names must match r"[A-Za-z0-9_-]+".
- Flag names must match r"[A-Za-z]+" and be unique inside a Flags set.
- Defaults (and found values) must satisfy converter.supports().
- descr must be a non-empty string (or rich Text) when provided.

Flag state machine (Flags.extract)
- Scan: stop at the first token that is not flag syntax or names an unknown flag.
- Recognize: reset the flag to its "found" value (parameterless flags), else mark it pending.
- Lookahead: when the next token does not look like a flag, try to convert it;
  keep it on success, leave it in place on failure (rollback). A pending flag
  that got no value raises FlagValueRequiredError.
- Every declared flag yields a value, in declaration order.

Quick example:
    >>> from argot.arguments import Constant, Variable, Flag, Flags
    >>> Constant("run").extract(["run", "fast"])
    (['fast'], [])
    >>> Flags(Flag("n", int, default=1)).extract(["-n", "3", "rest"])
    (['rest'], [3])
"""
import copy
import re
from abc import abstractmethod

from rich.text import Text

from . import converters
from .converters import IntegerConverter
from .faults import *
from .utils import *

# Token syntax: "-x" for one-letter flags, "--xx..." for longer ones.
_FLAG = re.compile(r"-(?P<short>[A-Za-z])|--(?P<long>[A-Za-z][A-Za-z]+)")


def switch(name, /):
    """
    Render a flag name as its command-line token: "-x" or "--name".
    """
    return ("-" if len(name) == 1 else "--") + name


def parse_switch(token, /):
    """
    Return the flag name a token spells, or None when it is not flag syntax.
    """
    if not isinstance(token, str) or not (match := _FLAG.fullmatch(token)):
        return None
    return match["short"] or match["long"]


def _sanitize_descr(cls, descr, /):
    """
    Internal: validate an optional description (None when Unset).
    """
    if not isinstance(descr, str | Text | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    return coalesce(descr)


def _sanitize_name(cls, name, pattern, /):
    """
    Internal: validate a variable or flag name against its pattern.
    """
    if not isinstance(name, str):
        raise TypeError(f"{cls.__typename__} name must be a string")
    elif not re.fullmatch(pattern, name):
        raise ValueError(f"invalid {cls.__typename__} name {name!r}")
    return name


def _sanitize_value(cls, converter, label, value, /):
    """
    Internal: check that a default-like value belongs to the converter's domain.
    """
    if value is not Unset and not converter.supports(value):
        raise TypeError(
            f"{cls.__typename__} {label} {value!r} is not supported by {type(converter).__typename__}"
        )
    return value


def _details(converter, default=Unset, /):
    """
    Internal: "(base: 16, default: 7)"-style suffix for legend rows.
    """
    details = []
    if isinstance(converter, IntegerConverter):
        details.append("base: %d" % converter.radix)
    if default is not Unset:
        details.append("default: %s" % (default,))
    return " (%s)" % ", ".join(details) if details else ""


class Argument(metaclass=IntrospectableType):
    """
    One matchable grammar unit.

    Subclasses implement extract() and usage; legend defaults to no rows.
    Instances are immutable and can be shared between commands.
    """

    @abstractmethod
    def extract(self, tokens, /):
        """
        Consume a prefix of tokens.

        Returns
        - (remaining, values): the unconsumed tokens (list) and the extracted
          values (list, possibly empty).

        Raises
        - CommandException subclasses; options["consumed"] counts the tokens
          this argument consumed before failing.
        """
        raise NotImplementedError

    @property
    @abstractmethod
    def usage(self):
        raise NotImplementedError

    @property
    def legend(self):
        return []


class Constant(Argument):
    """
    A literal keyword token (e.g. the "add" in "todo add <item>").
    """

    __introspectable__ = ("text", "insensitive")

    def __init__(self, text, /, insensitive=False):
        cls = type(self)
        if not isinstance(text, str):
            raise TypeError(f"{cls.__typename__} text must be a string")
        elif not (text := text.strip()) or not text.strip("-"):
            raise ValueError(f"invalid {cls.__typename__} {text!r}")
        self._text = text
        self._insensitive = bool(insensitive)

    def matches(self, token, /):
        if self._insensitive:
            return token.lower() == self._text.lower()
        return token == self._text

    def extract(self, tokens, /):
        if not tokens or not self.matches(tokens[0]):
            raise ArgNotFoundError(
                "expected %r" % self._text,
                title="keyword not found",
                code=FaultCode.ARG_NOT_FOUND,
                consumed=0,
                argument=self,
                token=tokens[0] if tokens else None,
                hint="start with %r (case %s)" % (self._text, "insensitive" if self._insensitive else "sensitive"),
            )
        return list(tokens[1:]), []

    @property
    def usage(self):
        return self._text


class Variable(Argument):
    """
    A typed positional value; required unless a default is given.

    Parameters
    - name: str matching r"[A-Za-z0-9_-]+"
    - converter: Converter | str/int/bool/float shorthand (default: string)
    - base: integer base shorthand (only with integer converters)
    - default: value used when the token list is exhausted
    - descr: short help text
    """

    __introspectable__ = ("name", "converter", "default", "descr")

    def __init__(self, name, converter=None, /, *, base=Unset, default=Unset, descr=Unset):
        cls = type(self)
        self._name = _sanitize_name(cls, name, r"[A-Za-z0-9_-]+")
        self._converter = converters.resolve(converter, base)
        self._default = _sanitize_value(cls, self._converter, "default", default)
        self._descr = _sanitize_descr(cls, descr)

    @property
    def required(self):
        return self._default is Unset

    def extract(self, tokens, /):
        if not tokens:
            if self._default is Unset:
                raise ArgNotFoundError(
                    "missing value for %r" % self._name,
                    title="missing value",
                    code=FaultCode.ARG_NOT_FOUND,
                    consumed=0,
                    argument=self,
                    hint="add a value for <%s>" % self._name,
                )
            return [], [self._default]
        return list(tokens[1:]), [self._converter.convert(tokens[0])]

    @property
    def usage(self):
        return ("<%s>" if self._default is Unset else "[%s]") % self._name

    @property
    def legend(self):
        return [(self._name, "%s%s" % (self._descr or "", _details(self._converter, self._default)))]


class Flag(metaclass=IntrospectableType):
    """
    Declaration of a single named switch inside a Flags set.

    Parameters
    - name: str matching r"[A-Za-z]+" (one letter renders as -x, more as --xx)
    - converter: Converter | shorthand (default: string)
    - base: integer base shorthand (only with integer converters)
    - default: value yielded when the flag is absent (required)
    - found: value yielded when the flag is present without a value
      (parameterless flags); when Unset the flag needs a value token
    - descr: short help text
    """

    __introspectable__ = ("name", "converter", "default", "found", "descr")

    def __init__(self, name, converter=None, /, *, base=Unset, default=Unset, found=Unset, descr=Unset):
        cls = type(self)
        self._name = _sanitize_name(cls, name, r"[A-Za-z]+")
        self._converter = converters.resolve(converter, base)
        if default is Unset:
            raise TypeError(f"{cls.__typename__} {switch(name)} must specify a 'default'")
        self._default = _sanitize_value(cls, self._converter, "default", default)
        self._found = _sanitize_value(cls, self._converter, "found value", found)
        self._descr = _sanitize_descr(cls, descr)

    @property
    def switch(self):
        return switch(self._name)

    @property
    def parameterless(self):
        return self._found is not Unset


class Flags(Argument):
    """
    A set of flags occupying one position of the grammar.

    The flags may appear in any order and any subset; each consumes its own
    token plus an optional value token. Extraction works on a fresh value map
    per call, so one Flags instance can serve any number of executions.
    """

    __introspectable__ = ("flags",)

    def __init__(self, *flags):
        cls = type(self)
        if not flags:
            raise TypeError(f"{cls.__typename__} must contain at least one flag")
        names = set()
        for flag in flags:
            if not isinstance(flag, Flag):
                raise TypeError(f"{cls.__typename__} items must be flags")
            elif flag.name in names:
                raise ValueError(f"{cls.__typename__} cannot contain duplicate flag {flag.switch!r}")
            names.add(flag.name)
        self._flags = tuple(flags)
        self._lookup = {flag.name: flag for flag in flags}

    def __len__(self):
        return len(self._flags)

    def __iter__(self):
        return iter(self._flags)

    def __contains__(self, name):
        return name in self._lookup

    def joined(self, flag, /):
        """
        Return a new set with one more flag appended (sets are immutable).
        """
        return type(self)(*self._flags, flag)

    def extract(self, tokens, /):
        tokens = list(tokens)
        values = {flag.name: flag.default for flag in self._flags}
        seen = set()
        position = 0

        while position < len(tokens):
            # Scan: anything that is not a known flag ends the run.
            if (flag := self._lookup.get(parse_switch(tokens[position]))) is None:
                break

            if flag.name in seen:
                trigger(DuplicatedFlagWarning(
                    "flag %r was already provided; the last value wins" % flag.switch,
                    title="duplicated flag",
                    code=FaultCode.DUPLICATED_FLAG,
                    argument=flag,
                    hint="keep a single %s" % flag.switch,
                ))
            seen.add(flag.name)

            # Recognize: parameterless flags start from their found value.
            if flag.parameterless:
                values[flag.name] = flag.found
            position += 1

            # Lookahead: a non-flag token may carry the value; keep it only if it converts.
            # Valued flags without such a token still try the empty text (booleans read it as true).
            following = tokens[position] if position < len(tokens) else None
            candidate = following if following is not None and parse_switch(following) is None else ""
            if candidate or not flag.parameterless:
                try:
                    values[flag.name] = flag.converter.convert(candidate)
                except InvalidValueError:
                    pass
                else:
                    if candidate:
                        position += 1
                    continue

            if not flag.parameterless:
                raise FlagValueRequiredError(
                    "flag %r requires a value" % flag.switch,
                    title="missing flag value",
                    code=FaultCode.FLAG_VALUE_REQUIRED,
                    consumed=position,
                    argument=flag,
                    token=following,
                    hint="pass a value right after it (for example: %s <value>)" % flag.switch,
                )

        return tokens[position:], [values[flag.name] for flag in self._flags]

    @property
    def usage(self):
        return " ".join("[%s]" % flag.switch for flag in self._flags)

    @property
    def legend(self):
        return [
            (flag.switch, "%s%s" % (flag.descr or "", _details(flag.converter, flag.default)))
            for flag in self._flags
        ]


class Variadic(Argument):
    """
    Zero or more trailing values; must be the last argument of a command.
    """

    __introspectable__ = ("name", "converter", "descr")

    def __init__(self, name, converter=None, /, *, base=Unset, descr=Unset):
        cls = type(self)
        self._name = _sanitize_name(cls, name, r"[A-Za-z0-9_-]+")
        self._converter = converters.resolve(converter, base)
        self._descr = _sanitize_descr(cls, descr)

    def extract(self, tokens, /):
        values = []
        for index, token in enumerate(tokens):
            try:
                values.append(self._converter.convert(token))
            except InvalidValueError as fault:
                raise copy.replace(fault, consumed=index, argument=self) from None
        return [], values

    @property
    def usage(self):
        return "[%s...]" % self._name

    @property
    def legend(self):
        return [(self._name, "%s%s" % (self._descr or "", _details(self._converter)))]


__all__ = (
    # Base class (subclass it for custom arguments, see Builder.add_argument)
    "Argument",

    # Variants
    "Constant",
    "Variable",
    "Flag",
    "Flags",
    "Variadic",

    # Helpers
    "switch",
    "parse_switch",
)

"""
Argot command layer: build, compile, and execute token grammars.

What this module provides
- command(descr): start a fluent Builder for a new command.
- Builder surfaces (each call returns the surface describing what is still legal):
  • Builder: constants, required variables, flags, custom arguments, a
    defaulted variable, a variadic tail, compile.
  • ClosingBuilder: after the first defaulted variable only more defaulted
    variables, a variadic tail, or compile remain.
  • Compiler: after the variadic tail only compile/to_group remain.
- Command: the compiled, immutable grammar.
  • execute(tokens, handler=None) -> consumed count; invokes the handler once
    on a clean, complete match.
  • extract(tokens) -> (consumed, values) without invocation.
  • degree(tokens) -> compatibility degree, never raises for grammar faults.

Core ideas
- Sticky build error: builder surfaces share one draft. The first validation
  failure is stored there; every later call is a no-op and compile() raises it.
- Ordered, prefix-consuming extraction: each argument eats a prefix of the
  remaining tokens; the first failing argument aborts the match and its fault
  is re-raised with the absolute consumed count (compatibility degree).
- Trailing tokens after a full grammar match are an UnknownArgsError.

Quick start
    from argot import command

    greet = (
        command("greet someone")
        .add_constant("hello")
        .add_parameterless_flag("loud", bool)
        .add_variable("name", descr="who to greet")
        .compile()
    )

    greet.execute(["hello", "--loud", "world"], lambda loud, name: print(name.upper() if loud else name))
"""
import copy

from rich.console import Group
from rich.table import Table
from rich.text import Text

from . import binding
from .converters import BooleanConverter
from .arguments import *
from .faults import *
from .faults import ordinal
from .utils import *


class _Draft:
    """
    Internal: mutable state shared by all builder surfaces of one command.
    """

    __slots__ = ("descr", "arguments", "flags", "fault")

    def __init__(self, descr):
        self.descr = descr
        self.arguments = []
        self.flags = None  # index of the open Flags set, if any
        self.fault = None

    def fail(self, exception):
        self.fault = InvalidDeclarationError(
            "invalid declaration at %s argument: %s" % (ordinal(len(self.arguments) + 1), exception),
            title="invalid declaration",
            code=FaultCode.INVALID_DECLARATION,
            index=len(self.arguments) + 1,
            exception=exception,
            hint="fix the command declaration; later builder calls are ignored until then",
        )

    def append(self, factory, /, *args, **kwargs):
        """
        Build an argument and append it, recording any validation failure.
        """
        if self.fault is not None:
            return
        try:
            argument = factory(*args, **kwargs)
        except (TypeError, ValueError) as exception:
            return self.fail(exception)
        self.flags = None
        self.arguments.append(argument)

    def join(self, *args, **kwargs):
        """
        Add a flag to the open Flags set (opening one when needed).
        """
        if self.fault is not None:
            return
        try:
            flag = Flag(*args, **kwargs)
            if self.flags is None:
                self.arguments.append(Flags(flag))
                self.flags = len(self.arguments) - 1
            else:
                self.arguments[self.flags] = self.arguments[self.flags].joined(flag)
        except (TypeError, ValueError) as exception:
            self.fail(exception)


class Compiler:
    """
    Terminal builder surface: compile the grammar.
    """

    def __init__(self, draft, /):
        self._draft = draft

    @property
    def fault(self):
        """
        The sticky build error (InvalidDeclarationError) or None.
        """
        return self._draft.fault

    def compile(self):
        """
        Freeze the argument sequence into a Command.

        Raises
        - InvalidDeclarationError: the sticky build error, if any.
        - NoArgumentsError: nothing was declared.
        """
        if self._draft.fault is not None:
            raise self._draft.fault
        if not self._draft.arguments:
            raise NoArgumentsError(
                "a command needs at least one argument",
                title="empty command",
                code=FaultCode.NO_ARGUMENTS,
                hint="declare a constant, variable, flag, or variadic before compiling",
            )
        return Command(self._draft.arguments, descr=self._draft.descr)

    def to_group(self, group, handler, /):
        """
        Compile and add the command with its handler to a group.

        Returns
        - the compiled Command.
        """
        group.add(command := self.compile(), handler)
        return command


class ClosingBuilder(Compiler):
    """
    Builder surface after a defaulted variable: only optional tails remain.
    """

    def add_variable(self, name, converter=None, /, *, base=Unset, default=Unset, descr=Unset):
        """
        Add another defaulted variable; a required one here is a build error.
        """
        if default is Unset and self._draft.fault is None:
            self._draft.fail(ValueError(f"required variable {name!r} cannot follow a defaulted variable"))
        self._draft.append(Variable, name, converter, base=base, default=default, descr=descr)
        return ClosingBuilder(self._draft)

    def add_variadic(self, name, converter=None, /, *, base=Unset, descr=Unset):
        """
        Add the trailing catch-all; nothing may follow it.
        """
        self._draft.append(Variadic, name, converter, base=base, descr=descr)
        return Compiler(self._draft)


class Builder(ClosingBuilder):
    """
    Full builder surface for a new command.

    Every method validates its input; the first failure becomes the sticky
    build error (see fault) and all later calls on any surface are no-ops.
    """

    def add_argument(self, argument, /):
        """
        Add a custom Argument instance.

        Returns
        - Compiler when the argument is a Variadic, Builder otherwise.
        """
        def accept(argument):
            if not isinstance(argument, Argument):
                raise TypeError(f"{argument!r} is not an argument")
            return argument

        self._draft.append(accept, argument)
        if isinstance(argument, Variadic):
            return Compiler(self._draft)
        return self

    def add_constant(self, text, /, insensitive=False):
        """
        Add a literal keyword.
        """
        self._draft.append(Constant, text, insensitive)
        return self

    def add_variable(self, name, converter=None, /, *, base=Unset, default=Unset, descr=Unset):
        """
        Add a positional value.

        Returns
        - Builder for a required variable.
        - ClosingBuilder when a default is given.
        """
        self._draft.append(Variable, name, converter, base=base, default=default, descr=descr)
        if default is Unset:
            return self
        return ClosingBuilder(self._draft)

    def add_flag(self, name, converter=None, /, *, base=Unset, default=Unset, descr=Unset):
        """
        Add a flag that takes a value token (e.g. "--count 3").

        Consecutive flag additions share one grammar position.
        """
        self._draft.join(name, converter, base=base, default=default, descr=descr)
        return self

    def add_parameterless_flag(self, name, converter=bool, /, *, found=Unset, missing=Unset, descr=Unset):
        """
        Add a flag whose presence alone conveys a value (e.g. "--verbose").

        For boolean converters, found defaults to True and missing to False;
        a following "true"/"false" token still overrides the found value.
        """
        if converter is bool or converter is BooleanConverter:
            converter = BooleanConverter(True)
        if isinstance(converter, BooleanConverter):
            found = coalesce(found, True)
            missing = coalesce(missing, False)
        self._draft.join(name, converter, default=missing, found=found, descr=descr)
        return self


class Command(metaclass=IntrospectableType):
    """
    A compiled grammar: an ordered, immutable sequence of arguments.

    Commands are built through command(...). They can be executed any number
    of times; each execution resets the params buffer, so a Command must not
    be executed concurrently from several threads without external locking.
    """

    __introspectable__ = ("arguments", "descr", "params")
    __displayable__ = ("descr", "arguments")

    def __init__(self, arguments, /, descr=Unset):
        arguments = tuple(arguments)
        if not arguments:
            raise ValueError(f"{type(self).__typename__} needs at least one argument")
        for position, argument in enumerate(arguments, 1):
            if not isinstance(argument, Argument):
                raise TypeError(f"{type(self).__typename__} items must be arguments")
            if isinstance(argument, Variadic) and position != len(arguments):
                raise ValueError(f"{type(self).__typename__} variadic must be the last argument")
        self._arguments = arguments
        self._descr = coalesce(descr)
        self._params = []

    def extract(self, tokens, /):
        """
        Match tokens against the grammar without invoking anything.

        Returns
        - (consumed, values)

        Raises
        - the first failing argument's fault, re-raised with consumed/index set
          to the absolute count of tokens matched so far.
        - UnknownArgsError when tokens remain after the last argument.
        """
        tokens = list(tokens)
        consumed = 0
        values = []

        for argument in self._arguments:
            try:
                remaining, extracted = argument.extract(tokens)
            except CommandException as fault:
                total = consumed + fault.consumed
                raise copy.replace(fault, consumed=total, index=total + 1) from None
            consumed += len(tokens) - len(remaining)
            tokens = remaining
            values.extend(extracted)

        if tokens:
            raise UnknownArgsError(
                "unexpected %s %r" % ("argument" if len(tokens) == 1 else "arguments", " ".join(tokens)),
                title="unknown arguments",
                code=FaultCode.UNKNOWN_ARGS,
                consumed=consumed,
                index=consumed + 1,
                leftover=tokens,
                hint="remove the extra input; expected: %s" % self.usage,
            )

        return consumed, values

    def execute(self, tokens, handler=None, /):
        """
        Match tokens and, on a complete match, invoke the handler once.

        Parameters
        - tokens: sequence of str
        - handler: callable receiving the extracted values positionally, or
          None to validate the grammar only.

        Returns
        - the number of tokens consumed (the full input length on success).

        Raises
        - extraction faults (see extract()), with consumed/index set.
        - BindingError when the values do not fit the handler's signature;
          the handler is not invoked.
        """
        consumed, args = self.prepare(tokens, handler)
        if handler is not None:
            handler(*args)
        return consumed

    def prepare(self, tokens, handler=None, /):
        """
        Match tokens and bind the values to the handler, without invoking it.

        Returns
        - (consumed, args): args are the call arguments for the handler (the
          raw values when no handler is given).

        Raises
        - extraction faults and BindingError, as execute() does.
        """
        self._params = []
        consumed, self._params = self.extract(tokens)

        if handler is None:
            return consumed, tuple(self._params)

        try:
            return consumed, binding.bind(handler, self._params)
        except BindingError as fault:
            raise copy.replace(fault, consumed=consumed) from None

    def degree(self, tokens, /):
        """
        Compatibility degree: how many tokens the grammar matches before failing.
        """
        try:
            consumed, _ = self.extract(tokens)
        except CommandException as fault:
            return fault.consumed
        return consumed

    @property
    def usage(self):
        """
        One-line synopsis, e.g. "copy files: > cp [-r] <src> <dst>".
        """
        synopsis = "> " + " ".join(argument.usage for argument in self._arguments)
        return f"{self._descr}: {synopsis}" if self._descr else synopsis

    @property
    def legend(self):
        return [row for argument in self._arguments for row in argument.legend]

    def __rich__(self):
        """
        Synopsis followed by a two-column parameter table (when any rows exist).
        """
        synopsis = Text.assemble(
            (f"{self._descr}: " if self._descr else "", "bold"),
            ("> ", "dim"),
            " ".join(argument.usage for argument in self._arguments),
        )
        if not (legend := self.legend):
            return synopsis

        table = Table.grid(padding=(0, 2))
        table.add_column(style="cyan", no_wrap=True)
        table.add_column()
        for label, description in legend:
            table.add_row(Text("  " + label), Text(description))
        return Group(synopsis, table)


def command(descr=Unset, /):
    """
    Start building a new command.

    Parameters
    - descr: optional short description shown in the synopsis.

    Returns
    - Builder
    """
    if not isinstance(descr, str | Unset):
        raise TypeError("command() argument must be a string")
    return Builder(_Draft((descr.strip() if isinstance(descr, str) else descr) or Unset))


__all__ = (
    "Builder",
    "ClosingBuilder",
    "Compiler",
    "Command",
    "command",
)

"""
Argot groups: dispatch one token list over several commands.

What this module provides
- Pair(command, handler): one entry of a group.
- Group: an ordered list of pairs.
  • add(command, handler) -> Group (chainable)
  • execute_all(tokens) -> number of handlers invoked (run-all)
  • execute_first(tokens) -> index of the first matching pair, or -1 (run-first)
  • call(index, *params): invoke a handler directly, bypassing matching
  • nearest(tokens) -> index of the pair with the highest compatibility degree
- invoke(group, prompt): convenience runner (run-first) that reports an
  UnknownCommandError when nothing matches.

Semantics
- A pair "matches" when its command consumes every token and its handler
  accepts the extracted values. Any CommandException raised on the way
  (extraction, leftovers, binding) means "did not match" and dispatch moves on.
  The handler itself runs outside that check: whatever it raises propagates.
- Duplicate grammars are legal; run-all invokes every matching handler.

Quick start
    from argot import Group, command

    group = Group()
    command("list").add_constant("ls").to_group(group, lambda: print("listing"))
    command("remove").add_constant("rm").add_variable("path").to_group(group, lambda path: print("removing", path))

    group.execute_first(["rm", "notes.txt"])  # -> 1
"""
import shlex
import sys
import warnings
from collections.abc import Iterable
from typing import NamedTuple

from rich.console import Group as Renderables
from rich.text import Text

from .commands import Command
from .faults import *
from .faults import console
from .utils import *


class Pair(NamedTuple):
    command: Command
    handler: object


class Group(metaclass=IntrospectableType):
    """
    Ordered (command, handler) pairs with run-all and run-first dispatch.

    Groups are mutable only through add(); executing never changes them.
    """

    __displayable__ = ("pairs",)

    def __init__(self, *pairs):
        self._pairs = []
        for command, handler in pairs:
            self.add(command, handler)

    @property
    def pairs(self):
        return tuple(self._pairs)

    def add(self, command, handler=None, /):
        """
        Append a command with its handler (None validates the grammar only).

        Returns
        - the group itself, for chaining.
        """
        if not isinstance(command, Command):
            raise TypeError(f"{type(self).__typename__} 'command' must be a compiled command")
        if handler is not None and not callable(handler):
            raise TypeError(f"{type(self).__typename__} 'handler' must be callable")
        self._pairs.append(Pair(command, handler))
        return self

    def _match(self, index, tokens, /):
        """
        Internal: match and bind one pair; return (fault, None) or (None, args).
        """
        command, handler = self._pairs[index]
        try:
            _, args = command.prepare(tokens, handler)
        except CommandException as fault:
            return fault, None
        return None, args

    def _invoke(self, index, args, /):
        if (handler := self._pairs[index].handler) is not None:
            handler(*args)

    def _attempt(self, index, tokens, /):
        """
        Internal: execute one pair; return its fault, or None when it matched.

        Only matching and binding faults are returned; the handler runs
        outside of them, so whatever it raises propagates.
        """
        fault, args = self._match(index, tokens)
        if fault is None:
            self._invoke(index, args)
        return fault

    def execute_all(self, tokens, /):
        """
        Execute every pair against the same tokens.

        Returns
        - the number of handlers that were invoked.
        """
        tokens = list(tokens)
        return sum(self._attempt(index, tokens) is None for index in range(len(self._pairs)))

    def execute_first(self, tokens, /):
        """
        Execute pairs in order until one matches.

        Returns
        - the index of the matching pair, or -1 when none does.
        """
        tokens = list(tokens)
        for index in range(len(self._pairs)):
            if self._attempt(index, tokens) is None:
                return index
        return -1

    def call(self, index, /, *params):
        """
        Invoke the indexed handler directly with the given parameters.

        Returns
        - whatever the handler returns.
        """
        handler = self._pairs[index].handler
        if handler is None:
            raise TypeError(f"{type(self).__typename__} pair {index} has no handler")
        return handler(*params)

    def nearest(self, tokens, /):
        """
        Index of the command with the highest compatibility degree (earliest on ties), or -1.
        """
        tokens = list(tokens)
        best, degree = -1, -1
        for index, (command, _) in enumerate(self._pairs):
            if (current := command.degree(tokens)) > degree:
                best, degree = index, current
        return best

    def __len__(self):
        return len(self._pairs)

    def __iter__(self):
        return iter(self._pairs)

    def __getitem__(self, index):
        return self._pairs[index]

    def __rich__(self):
        renderables = []
        for command, _ in self._pairs:
            if renderables:
                renderables.append(Text(""))
            renderables.append(command)
        return Renderables(*renderables)


def _tokenize(prompt, /):
    """
    Internal: normalize a runner prompt into a list of tokens.
    """
    if prompt is Unset:
        return sys.argv[1:]
    elif isinstance(prompt, str):
        return shlex.split(prompt)
    elif isinstance(prompt, Iterable):
        tokens = []
        for item in prompt:
            if not isinstance(item, str):
                raise TypeError("invoke() prompt must be a string or an iterable of strings")
            if item := item.strip():
                tokens.append(item)
        return tokens
    raise TypeError("invoke() prompt must be a string or an iterable of strings")


def invoke(group, prompt=Unset, /, shell=False, fancy=False, colorful=True, deferred=False):
    """
    Run a group against a prompt (run-first) and report when nothing matches.

    Parameters
    - group: Group
    - prompt:
      • Unset: read tokens from sys.argv[1:].
      • str: shell-like string; split via shlex.split.
      • Iterable[str]: pre-tokenized sequence; items are trimmed, empty ones dropped.
    - shell, fancy, colorful, deferred: forwarded to trigger() (see argot.faults).

    Returns
    - the index of the matching pair; -1 when nothing matched and the
      UnknownCommandError was deferred.

    Raises
    - UnknownCommandError (outside shell mode) when no command matches. Its
      options carry "nearest" (index or -1) and "fault" (the nearest command's
      fault, or None).
    """
    if not isinstance(group, Group):
        raise TypeError("invoke() first argument must be a group")
    tokens = _tokenize(prompt)

    faults = []
    matched, args = -1, None
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        for index in range(len(group)):
            fault, args = group._match(index, tokens)
            if fault is None:
                matched = index
                break
            faults.append(fault)

    # Warnings raised while matching are surfaced with the runner's options.
    for record in caught:
        if isinstance(record.message, CommandWarning):
            trigger(record.message, shell=shell, fancy=fancy, colorful=colorful)
        else:
            warnings.warn_explicit(record.message, record.category, record.filename, record.lineno)

    if matched >= 0:
        group._invoke(matched, args)
        return matched

    # Same ordering as Group.nearest: highest degree, earliest on ties.
    nearest = max(range(len(faults)), key=lambda index: (faults[index].consumed, -index), default=-1)
    fault = faults[nearest] if nearest >= 0 else None

    if shell:
        console.print(group)

    trigger(
        UnknownCommandError(
            "no command matches %r" % shlex.join(tokens),
            title="unknown command",
            code=FaultCode.UNKNOWN_COMMAND,
            nearest=nearest,
            fault=fault,
            hint=(fault.options.get("hint") if fault is not None else None) or "no commands are registered",
        ),
        shell=shell,
        fancy=fancy,
        colorful=colorful,
        deferred=deferred,
    )
    return -1


__all__ = (
    "Pair",
    "Group",
    "invoke",
)

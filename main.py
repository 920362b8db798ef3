from rich.pretty import pprint

from argot import *

__prog__ = "notes"

notes = Group()

command("list notes").add_constant("ls").add_parameterless_flag("all", descr="include archived").to_group(
    notes, lambda all: pprint({"list": "all" if all else "active"})
)
command("add a note").add_constant("add").add_flag("p", int, default=0, descr="priority").add_variadic(
    "words", descr="note text"
).to_group(notes, lambda priority, *words: pprint({"add": " ".join(words), "priority": priority}))


if __name__ == '__main__':
    invoke(notes, shell=True, fancy=True)

"""
Camdo command layer: named, invocable units with an ordered argument schema.

What this module provides
- CommandSpec: binds an invocation name to an ordered tuple of ArgumentSpec and
  a handler `run(bound)`. The handler receives one value per ArgumentSpec (a
  string, or None for an omitted optional argument) and returns an opaque
  result, or an awaitable resolving to one.
- command(...): decorator/factory producing a CommandSpec from a handler.

Schema rules (checked at construction, i.e. at registration time)
- at most one capture argument, and it must be the last entry.
- argument ids are unique within a command.
- the invocation name is a single whitespace-free token, matched case-sensitively.

Type references are deliberately left unresolved: a command may name a type
that is defined later (or never, which is reported when the command is
dispatched, see camdo.faults.UnknownTypeError).

Quick start
    from camdo import command

    @command("echo", args=[{"id": "sentence", "type": "small_size", "capture": True}])
    def echo(bound):
        sentence, = bound
        return {"title": "echo", "description": sentence}
"""
import re
from collections.abc import Iterable, Mapping

from .arguments import ArgumentSpec, _extras, _summary
from .utils import *


def _sanitize_arguments(cls, metadata, /):
    """
    Internal: coerce the argument schema and enforce capture placement.

    Responsibilities
    - args: iterable of ArgumentSpec or mappings, normalized to a tuple.
    - ids must be unique (they name the slots in faults and usage).
    - capture: at most one spec, and only in the last position.

    Raises
    - TypeError: when args is not iterable or holds invalid entries.
    - ValueError: on duplicate ids or misplaced/duplicated capture specs.
    """
    if isinstance(arguments := metadata["args"], str | Mapping) or not isinstance(arguments, Iterable):
        raise TypeError(f"{cls.__typename__} 'args' must be an iterable of argument specs")

    arguments = tuple(map(ArgumentSpec.coerce, arguments))

    ids = set()
    for argument in arguments:
        if argument.id in ids:
            raise ValueError(f"{cls.__typename__} argument ids cannot contain duplicates ({argument.id!r})")
        ids.add(argument.id)

    captures = [index for index, argument in enumerate(arguments) if argument.capture]
    if len(captures) > 1:
        raise ValueError(f"{cls.__typename__} cannot declare more than one capture argument")
    if captures and captures[0] != len(arguments) - 1:
        raise ValueError(
            f"{cls.__typename__} capture argument {arguments[captures[0]].id!r} must be the last argument"
        )

    metadata["args"] = arguments


class CommandSpec(metaclass=SpecType):
    """
    Named command definition (schema + handler).

    Properties
    - id / name: the invocation name (first token of an incoming line).
    - description: optional human-readable text (None when omitted).
    - args: tuple of ArgumentSpec, in positional order.
    - run: the handler; `spec(bound)` forwards to it.
    - usage: one-line usage string, e.g. "echo <sentence...>".
    """

    __introspectable__ = (
        "id",
        "description",
        "args",
        "run",
    )
    __displayable__ = (
        "id",
        "description",
        "args",
    )

    def __new__(cls, id, run, /, args=(), description=Unset):
        metadata = {
            "id": id,
            "run": run,
            "args": args,
            "description": description,
        }
        sanitize_text(cls, metadata, "id")
        sanitize_text(cls, metadata, "description", optional=True)

        if re.search(r"\s", metadata["id"]):
            raise ValueError(f"{cls.__typename__} 'id' cannot contain whitespace")
        if not callable(metadata["run"]):
            raise TypeError(f"{cls.__typename__} 'run' must be callable")

        _sanitize_arguments(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    def __call__(self, bound, /):
        return self._run(bound)

    @property
    def name(self):
        return self._id

    @property
    def usage(self):
        return " ".join((self._id, *(argument.usage for argument in self._args)))

    @classmethod
    def coerce(cls, object, /):
        """
        Return `object` as a CommandSpec.

        Accepts a CommandSpec (returned unchanged) or a mapping with the keys
        'id', 'run' and any of 'args', 'description'.
        """
        if isinstance(object, cls):
            return object
        if isinstance(object, Mapping):
            try:
                return cls(object["id"], object["run"], **_extras(cls, object, "id", "run"))
            except KeyError as error:
                raise TypeError(f"{cls.__typename__} mapping is missing {error.args[0]!r}") from None
        raise TypeError(f"{cls.__typename__} must be defined from a mapping or a {cls.__name__}")


def command(id=Unset, /, args=(), description=Unset):
    """
    Create a CommandSpec or return a decorator to build it later.

    Invocation modes
    - Decorator with metadata:
        @command("echo", args=[ArgumentSpec("sentence", capture=True)])
        def echo(bound): ...

    - Bare decorator (name from the function, underscores become hyphens):
        @command
        def ping(bound): ...

    Behavior
    - The description defaults to the first line of the handler's docstring.
    - Returns the CommandSpec, which stays callable: spec(bound) runs the handler.
    """
    if callable(id):
        return command()(id)

    @rename("command")
    def wrapper(run, /):
        if not callable(run):
            raise TypeError("@command() must be applied to a callable")
        return CommandSpec(
            coalesce(id, getattr(run, "__name__", "").replace("_", "-")),
            run,
            args=args,
            description=coalesce(description, _summary(run)),
        )

    return wrapper


__all__ = (
    "CommandSpec",
    "command",
)

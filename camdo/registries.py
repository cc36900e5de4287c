"""
Camdo registries: instance-scoped stores for argument types and commands.

Both registries are read-only Mappings keyed by id (`in`, `get`, `[]`, `len`,
iteration) with a single write path, define(), that is last-write-wins and never
raises on a duplicate id. They are owned by a Dispatcher instance, so several
dispatchers can live in one process without sharing definitions.

CommandRegistry additionally notifies subscribers when a new command id appears,
which is how handler bindings get wired for commands defined after them.
"""
from collections.abc import Mapping

from .arguments import ArgumentType
from .commands import CommandSpec
from .logs import logger

logger = logger.getChild("registries")


class Registry(Mapping):
    """
    Base id → spec store.

    Subclasses set __kind__ to the spec class used to coerce definitions.
    """
    __kind__ = None

    def __init__(self):
        self._entries = {}

    def __getitem__(self, id, /):
        return self._entries[id]

    def __iter__(self):
        return iter(self._entries)

    def __len__(self):
        return len(self._entries)

    def __repr__(self):
        return "%s(%s)" % (type(self).__name__, ", ".join(map(repr, self._entries)))

    def define(self, spec, /):
        """
        Store `spec` under its id, replacing any previous definition.

        Accepts a spec instance or its mapping form. Returns the stored spec.
        """
        spec = self.__kind__.coerce(spec)
        replaced = spec.id in self._entries
        self._entries[spec.id] = spec
        logger.debug("%s %r %s", self.__kind__.__typename__, spec.id, "redefined" if replaced else "defined")
        return spec

    def lookup(self, id, /):
        """
        Return the spec registered under `id`, or None.
        """
        return self._entries.get(id)


class TypeRegistry(Registry):
    __kind__ = ArgumentType


class CommandRegistry(Registry):
    __kind__ = CommandSpec

    def __init__(self):
        super().__init__()
        self._subscribers = []

    def subscribe(self, callback, /):
        """
        Call `callback(command)` whenever a command id is defined for the first time.

        Overwrites do not notify: subscribers resolve commands by id when they
        run, so they pick up the replacement on their own.
        """
        if not callable(callback):
            raise TypeError("subscribe() argument must be callable")
        self._subscribers.append(callback)
        return callback

    def unsubscribe(self, callback, /):
        try:
            self._subscribers.remove(callback)
        except ValueError:
            raise ValueError("unsubscribe() argument is not subscribed") from None

    def define(self, spec, /):
        spec = CommandSpec.coerce(spec)
        fresh = spec.id not in self
        super().define(spec)
        if fresh:
            for callback in tuple(self._subscribers):
                callback(spec)
        return spec


__all__ = (
    "Registry",
    "TypeRegistry",
    "CommandRegistry",
)

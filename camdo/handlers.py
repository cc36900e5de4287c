"""
Camdo handler bindings: adapters between a transport and a dispatcher.

A binding is the capability set the dispatcher needs from a transport:
- event(resolve, command): subscribe. Called by the dispatcher once per command
  known when the binding is added, and once per command defined afterwards. The
  binding wires its own listener (chat gateway, terminal, socket...) and calls
  `resolve(tokens)` with the raw tokens that followed the command name whenever
  that command is invoked on its transport.
- send(result): emit. Receives every payload produced for invocations that came
  through this binding: handler results and argument-fault payloads alike.

The dispatcher never looks inside the transport; several bindings can attach
the same dispatcher to several transports at once.

Example (in-memory transport)
    from camdo import handler

    outbox = []
    listeners = {}

    @handler("memory", send=outbox.append)
    def memory(resolve, command):
        listeners.setdefault(command.name, resolve)
"""
from collections.abc import Mapping

from .arguments import _extras
from .utils import *


class HandlerBinding(metaclass=SpecType):
    """
    Event-source/sink adapter registered on a Dispatcher.

    Properties
    - id: identifier used for bookkeeping and removal.
    - event: subscribe callable, event(resolve, command).
    - send: sink callable, send(result).
    """

    __introspectable__ = (
        "id",
        "event",
        "send",
    )
    __displayable__ = (
        "id",
    )

    def __new__(cls, id, event, send, /):
        metadata = {
            "id": id,
            "event": event,
            "send": send,
        }
        sanitize_text(cls, metadata, "id")

        if not callable(metadata["event"]):
            raise TypeError(f"{cls.__typename__} 'event' must be callable")
        if not callable(metadata["send"]):
            raise TypeError(f"{cls.__typename__} 'send' must be callable")

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    @classmethod
    def coerce(cls, object, /):
        """
        Return `object` as a HandlerBinding.

        Accepts a HandlerBinding (returned unchanged) or a mapping with the keys
        'id', 'event' and 'send'.
        """
        if isinstance(object, cls):
            return object
        if isinstance(object, Mapping):
            try:
                _extras(cls, object, "id", "event", "send")
                return cls(object["id"], object["event"], object["send"])
            except KeyError as error:
                raise TypeError(f"{cls.__typename__} mapping is missing {error.args[0]!r}") from None
        raise TypeError(f"{cls.__typename__} must be defined from a mapping or a {cls.__name__}")


def handler(id, /, send):
    """
    Decorator building a HandlerBinding whose subscribe step is the decorated function.

    Usage
        @handler("terminal", send=print)
        def terminal(resolve, command):
            ...

    Returns
    - the HandlerBinding, ready for Dispatcher.add_handler().
    """
    @rename("handler")
    def wrapper(event, /):
        if not callable(event):
            raise TypeError("@handler() must be applied to a callable")
        return HandlerBinding(id, event, send)

    return wrapper


__all__ = (
    "HandlerBinding",
    "handler",
)

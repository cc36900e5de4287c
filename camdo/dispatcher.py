"""
Camdo dispatcher: from a text line to a result in a sink.

Dispatch cycle (one per incoming line, stateless once its result is sent)
- tokenize: split on whitespace; first token is the command name, the rest are
  argument tokens. Blank lines produce nothing.
- lookup: exact, case-sensitive match in the command registry. Unmatched lines
  are ignored (the stream may carry unrelated traffic) and only logged.
- resolve: camdo.resolver.resolve(). Argument faults become a payload sent to the
  sink and end the cycle; configuration faults go through trigger() and end the
  cycle without any sink call. The handler never runs in either case.
- invoke: run(bound). A plain value is sent immediately. An awaitable is wrapped
  in an asyncio task on the running loop; the sink is called when it settles.
  Other cycles keep running meanwhile and results may arrive in any order.
- send: the result is forwarded verbatim.

Handler faults are not converted: a synchronous raise propagates out of
dispatch(), an asynchronous one is left on its task (awaiting the task, or the
loop's exception handler, sees it).

Runtime flags
- shell: render configuration faults on stderr instead of raising them.
- fancy / colorful: Rich panel chrome and colours for rendered faults.
- color: colour put in argument-fault payloads.

Quick start
    from camdo import Dispatcher

    dispatcher = Dispatcher()

    @dispatcher.argtype("small_size")
    def small_size(raw):
        return len(raw) < 5

    @dispatcher.command("echo", args=[{"id": "sentence", "type": "small_size", "capture": True}])
    def echo(bound):
        return {"title": "echo", "description": bound[0]}

    dispatcher.dispatch("echo hi!", print)  # {'title': 'echo', 'description': 'hi!'}
"""
import asyncio
import inspect
from collections.abc import Iterable

from . import arguments, commands, handlers
from .faults import *
from .faults import DEFAULT_COLOR
from .handlers import HandlerBinding
from .logs import logger
from .registries import TypeRegistry, CommandRegistry
from .resolver import resolve
from .utils import *

logger = logger.getChild("dispatcher")


def tokenize(line, /):
    """
    Split a line into (name, tokens).

    Whitespace runs of any length separate tokens; leading and trailing
    whitespace is insignificant. Returns None for a blank line.
    """
    if not isinstance(line, str):
        raise TypeError("tokenize() argument must be a string")
    if not (parts := line.split()):
        return None
    name, *tokens = parts
    return name, tuple(tokens)


def _sanitized(tokens, /):
    """
    Internal: trimmed, non-empty string tokens from a binding-supplied iterable.
    """
    if isinstance(tokens, str) or not isinstance(tokens, Iterable):
        raise TypeError("resolve() argument must be an iterable of strings")
    sanitized = []
    for token in tokens:
        if not isinstance(token, str):
            raise TypeError("resolve() argument must be an iterable of strings")
        if token := token.strip():
            sanitized.append(token)
    return tuple(sanitized)


class Dispatcher:
    """
    Transport-agnostic command dispatcher.

    Owns its type registry, command registry and handler bindings, so several
    dispatchers can coexist in one process without sharing definitions.

    Definition surface
    - define_type(spec) / @dispatcher.argtype(...)
    - define_command(spec) / @dispatcher.command(...)
    - add_handler(binding) / @dispatcher.handler(...), remove_handler(id)

    Input surface
    - dispatch(line, send): full cycle from a raw text line.
    - execute(name, tokens, send): cycle from pre-split tokens (used by bindings).
    """

    def __init__(self, *, shell=False, fancy=False, colorful=True, color=DEFAULT_COLOR):
        self._types = TypeRegistry()
        self._commands = CommandRegistry()
        self._bindings = {}
        self._pending = set()

        self._shell = bool(shell)
        self._fancy = bool(fancy)
        self._colorful = bool(colorful)
        self._color = color

        self._commands.subscribe(self._attach)

    def __repr__(self):
        return "dispatcher(types=%r, commands=%r, bindings=%r)" % (
            tuple(self._types), tuple(self._commands), tuple(self._bindings)
        )

    types = property(lambda self: self._types)
    commands = property(lambda self: self._commands)
    bindings = mirror("bindings")
    pending = mirror("pending")
    shell = mirror("shell")
    fancy = mirror("fancy")
    colorful = mirror("colorful")
    color = mirror("color")

    # --- definitions ---

    def define_type(self, spec, /):
        """
        Register an ArgumentType (or its mapping form), replacing any previous
        definition with the same id. Returns the stored spec.
        """
        return self._types.define(spec)

    def define_command(self, spec, /):
        """
        Register a CommandSpec (or its mapping form), replacing any previous
        definition with the same id. Type references are not checked here.
        Returns the stored spec.
        """
        return self._commands.define(spec)

    def argtype(self, *args, **kwargs):
        """
        Decorator form of define_type(); arguments as in camdo.argtype().
        """
        if len(args) == 1 and callable(args[0]) and not kwargs:
            return self.define_type(arguments.argtype(args[0]))

        @rename("argtype")
        def wrapper(validate, /):
            return self.define_type(arguments.argtype(*args, **kwargs)(validate))

        return wrapper

    def command(self, *args, **kwargs):
        """
        Decorator form of define_command(); arguments as in camdo.command().
        """
        if len(args) == 1 and callable(args[0]) and not kwargs:
            return self.define_command(commands.command(args[0]))

        @rename("command")
        def wrapper(run, /):
            return self.define_command(commands.command(*args, **kwargs)(run))

        return wrapper

    def handler(self, id, /, send):
        """
        Decorator form of add_handler(); the decorated function is the binding's event.
        """
        @rename("handler")
        def wrapper(event, /):
            return self.add_handler(handlers.handler(id, send=send)(event))

        return wrapper

    # --- bindings ---

    def add_handler(self, binding, /):
        """
        Register a HandlerBinding (or its mapping form).

        behavior
        - binding.event(resolve, command) is called once for every command known
          now, and once for every command id defined later.
        - a binding registered under an existing id replaces (and detaches) it.
        - if event raises, the binding is unregistered again (any binding it
          replaced is restored) and the error propagates.

        returns
        - the stored binding.
        """
        binding = HandlerBinding.coerce(binding)
        previous = self._bindings.pop(binding.id, None)
        self._bindings[binding.id] = binding

        try:
            for command in tuple(self._commands.values()):
                self._subscribe(binding, command)
        except BaseException:
            del self._bindings[binding.id]
            if previous is not None:
                self._bindings[previous.id] = previous
            logger.debug("binding %r rolled back", binding.id)
            raise

        if previous is not None:
            logger.debug("binding %r replaced", previous.id)
        logger.debug("binding %r added", binding.id)
        return binding

    def remove_handler(self, id, /):
        """
        Detach and return the binding registered under `id`.

        The binding's transport wiring is opaque and stays in place, but every
        resolve callback it received becomes a no-op.
        """
        try:
            binding = self._bindings.pop(id)
        except KeyError:
            raise KeyError(f"no binding registered under {id!r}") from None
        logger.debug("binding %r removed", id)
        return binding

    def _attach(self, command, /):
        for binding in tuple(self._bindings.values()):
            self._subscribe(binding, command)

    def _subscribe(self, binding, command, /):
        name = command.id

        @rename("resolve")
        def resolve(tokens, /):
            if self._bindings.get(binding.id) is not binding:
                logger.debug("binding %r is detached, ignoring %r", binding.id, name)
                return None
            return self.execute(name, tokens, binding.send)

        binding.event(resolve, command)

    # --- dispatch ---

    def dispatch(self, line, send, /):
        """
        Run one dispatch cycle for a raw text line.

        returns
        - the asyncio.Task carrying an asynchronous handler, otherwise None.
        """
        if not callable(send):
            raise TypeError("dispatch() second argument must be callable")
        if (parts := tokenize(line)) is None:
            return None
        name, tokens = parts
        return self._cycle(name, tokens, send)

    def execute(self, name, tokens, send, /):
        """
        Run one dispatch cycle for an already split invocation.

        `tokens` are the raw strings that followed the command name. They are
        not split again, but each one is stripped of surrounding whitespace and
        entries left empty are dropped, so ["hi", "", " !"] binds like
        ["hi", "!"] (a capture argument receives "hi !").
        """
        if not isinstance(name, str):
            raise TypeError("execute() first argument must be a string")
        if not callable(send):
            raise TypeError("execute() third argument must be callable")
        return self._cycle(name, _sanitized(tokens), send)

    def _cycle(self, name, tokens, send, /):
        if (command := self._commands.lookup(name)) is None:
            logger.debug("ignored line for unknown command %r", name)
            return None

        try:
            bound = resolve(command, tokens, self._types)
        except ArgumentError as fault:
            logger.info("rejected %r: %s", name, fault)
            send(fault.__replace__(color=self._color).__result__())
            return None
        except ConfigurationError as fault:
            self.trigger(fault)
            return None

        logger.debug("running %r with %r", name, bound)
        result = command.run(bound)

        if inspect.isawaitable(result):
            return self._defer(name, result, send)

        send(result)
        return None

    def _defer(self, name, awaitable, send, /):
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            raise RuntimeError(f"command {name!r} returned an awaitable outside of a running event loop") from None

        async def settle():
            result = await awaitable
            logger.debug("settled %r", name)
            send(result)

        task = loop.create_task(settle(), name="camdo:%s" % name)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def drain(self):
        """
        Wait until every pending asynchronous cycle has settled.

        Faults raised by handlers stay on their tasks; drain() only waits.
        """
        while self._pending:
            await asyncio.wait(tuple(self._pending))

    def trigger(self, fault, /, **options):
        """
        Surface a configuration fault with this dispatcher's runtime flags.
        """
        trigger(fault, **{"shell": self._shell, "fancy": self._fancy, "colorful": self._colorful} | options)


__all__ = (
    "Dispatcher",
    "tokenize",
)

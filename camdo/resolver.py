"""
Camdo argument resolver: bind raw tokens to a command's argument schema.

resolve(command, tokens, types) walks command.args left to right, consuming
tokens positionally, and returns a tuple with one bound value per ArgumentSpec
(a string, or None for an omitted optional argument).

Per argument
1. capture specs take every remaining token joined with one space; nothing is
   processed after them. No remaining token counts as "no token".
2. other specs take exactly the next token, if any.
3. no token: default_value when set (trusted, never validated), None when the
   argument is not required, otherwise MissingArgumentError.
4. a token and a type reference: the type is looked up in `types`; a missing
   type is a configuration fault (UnknownTypeError), a rejected token is an
   InvalidArgumentError whose message reads
       argument "<id>" does not accept `<raw>`.
5. a token and no type reference: accepted as-is.

The first failure wins: resolution stops and the fault is raised. Surplus tokens
past the end of the schema are discarded.
"""
from .faults import *
from .logs import logger
from .utils import *

logger = logger.getChild("resolver")


def _bind(command, argument, index, raw, types):
    """
    Internal: return the bound value for one argument (raw is None when no token).
    """
    if raw is None:
        if argument.default_value is not None:
            return argument.default_value
        if not argument.required:
            return None
        raise MissingArgumentError(
            'argument "%s" is required.' % argument.id,
            title="missing argument",
            code=FaultCode.MISSING_ARGUMENT,
            hint="pass a value at the %s position (usage: %s)" % (ordinal(index), command.usage),
            argument=argument,
            command=command,
            index=index,
            docs=getdoc(FaultCode.MISSING_ARGUMENT),
        )

    if argument.type is None:
        return raw

    if (type := types.get(argument.type)) is None:
        raise UnknownTypeError(
            'argument "%s" of command "%s" references an undefined type "%s".' % (
                argument.id, command.id, argument.type
            ),
            title="unknown argument type",
            code=FaultCode.UNKNOWN_TYPE,
            hint="define the type %r before dispatching %r" % (argument.type, command.id),
            argument=argument,
            command=command,
            index=index,
            value=raw,
            docs=getdoc(FaultCode.UNKNOWN_TYPE),
        )

    if not type.validate(raw):
        raise InvalidArgumentError(
            'argument "%s" does not accept `%s`.' % (argument.id, raw),
            title="invalid argument",
            code=FaultCode.INVALID_ARGUMENT,
            hint="the %s position expects %s (usage: %s)" % (
                ordinal(index), type.description or "a valid %s" % type.id, command.usage
            ),
            argument=argument,
            command=command,
            index=index,
            value=raw,
            docs=getdoc(FaultCode.INVALID_ARGUMENT),
        )

    return raw


def resolve(command, tokens, types, /):
    """
    Resolve `tokens` against `command.args`, looking types up in `types`.

    parameters
    - command: CommandSpec whose schema is resolved.
    - tokens: sequence of raw strings that followed the command name.
    - types: mapping of type id -> ArgumentType (usually a TypeRegistry).

    returns
    - tuple of bound values, in schema order.

    raises
    - MissingArgumentError / InvalidArgumentError: user faults.
    - UnknownTypeError: configuration fault.
    """
    tokens = tuple(tokens)
    bound = []
    cursor = 0

    for index, argument in enumerate(command.args, 1):
        if argument.capture:
            raw = " ".join(tokens[cursor:]) if cursor < len(tokens) else None
            cursor = len(tokens)
        elif cursor < len(tokens):
            raw = tokens[cursor]
            cursor += 1
        else:
            raw = None

        bound.append(_bind(command, argument, index, raw, types))

    if cursor < len(tokens):
        logger.debug("discarded %d surplus token(s) for %r", len(tokens) - cursor, command.id)

    return tuple(bound)


__all__ = (
    "resolve",
)

r"""
Camdo argument specifications and decorators.

Overview
- Specs
  • ArgumentType: a named predicate (`validate(raw) -> bool`) that argument
    specs reference by id. Registered in a dispatcher's type registry.
  • ArgumentSpec: one ordered slot of a command's schema (id, type reference,
    required/default resolution, capture-all).

- Decorators
  • @argtype(...): build an ArgumentType around a predicate function.

- Mapping form
  • Both specs accept their original definition surface as a mapping through
    coerce(), e.g. {"id": "small_size", "validate": ...} or
    {"id": "sentence", "type": "small_size", "capture": True}.

Metadata (sanitized on construction)
- id: non-empty string (trimmed).
- description: Unset | non-empty string; becomes None when omitted.
- ArgumentSpec only
  • type: Unset | non-empty string | ArgumentType (reduced to its id). The id is
    not resolved here; lookup happens lazily when a command is dispatched.
  • required: bool (default True).
  • default_value: Unset | str; used when the argument is omitted. Not validated.
  • capture: bool; consume all remaining tokens joined by one space.

Quick example:
    >>> from camdo.arguments import ArgumentSpec, argtype
    >>> @argtype("small_size")
    ... def small_size(raw):
    ...     return len(raw) < 5
    ...
    >>> sentence = ArgumentSpec("sentence", type="small_size", capture=True)
    >>> sentence.usage
    '<sentence...>'
"""
import inspect
from collections.abc import Mapping

from .utils import *


class ArgumentType(metaclass=SpecType):
    """
    Named validator for raw argument tokens.

    The validator is trusted to be a pure, terminating predicate: it is stored
    exactly as given and `spec.validate(x)` is `validate(x)`. Calling the type
    itself coerces the answer to a bool.
    """

    __introspectable__ = (
        "id",
        "validate",
        "description",
    )
    __displayable__ = (
        "id",
        "description",
    )

    def __new__(cls, id, validate, /, description=Unset):
        metadata = {
            "id": id,
            "validate": validate,
            "description": description,
        }
        sanitize_text(cls, metadata, "id")
        sanitize_text(cls, metadata, "description", optional=True)

        if not callable(metadata["validate"]):
            raise TypeError(f"{cls.__typename__} 'validate' must be callable")

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    def __call__(self, raw, /):
        return bool(self._validate(raw))

    @classmethod
    def coerce(cls, object, /):
        """
        Return `object` as an ArgumentType.

        Accepts an ArgumentType (returned unchanged) or a mapping with the keys
        'id', 'validate' and optionally 'description'.
        """
        if isinstance(object, cls):
            return object
        if isinstance(object, Mapping):
            try:
                return cls(object["id"], object["validate"], **_extras(cls, object, "id", "validate"))
            except KeyError as error:
                raise TypeError(f"{cls.__typename__} mapping is missing {error.args[0]!r}") from None
        raise TypeError(f"{cls.__typename__} must be defined from a mapping or an {cls.__name__}")


class ArgumentSpec(metaclass=SpecType):
    """
    Positional slot of a command's argument schema.

    Resolution (see camdo.resolver)
    - capture specs take every remaining token, joined with a single space.
    - other specs take exactly one token.
    - a missing token binds default_value, else None when not required, else fails.
    - a present token is checked against the referenced ArgumentType, if any.
    """

    __introspectable__ = (
        "id",
        "type",
        "required",
        "default_value",
        "capture",
        "description",
    )

    def __new__(
            cls,
            id,
            /,
            type=Unset,
            required=True,
            default_value=Unset,
            capture=False,
            description=Unset,
    ):
        if isinstance(type, ArgumentType):
            type = type.id

        metadata = {
            "id": id,
            "type": type,
            "required": required,
            "default_value": default_value,
            "capture": capture,
            "description": description,
        }
        sanitize_text(cls, metadata, "id")
        sanitize_text(cls, metadata, "type", optional=True)
        sanitize_text(cls, metadata, "description", optional=True)

        if not isinstance(metadata["required"], bool):
            raise TypeError(f"{cls.__typename__} 'required' must be a boolean")
        if not isinstance(metadata["capture"], bool):
            raise TypeError(f"{cls.__typename__} 'capture' must be a boolean")
        # Defaults are trusted raw values: no trimming, empty strings allowed.
        if not isinstance(metadata["default_value"], str | Unset | None):
            raise TypeError(f"{cls.__typename__} 'default_value' must be a string")
        metadata["default_value"] = coalesce(metadata["default_value"])

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    @property
    def optional(self):
        """
        True when omitting the argument does not fail resolution.
        """
        return not self._required or self._default_value is not None

    @property
    def usage(self):
        """
        Usage label: <id> for required slots, [id] for optional ones, and a
        trailing "..." for capture slots.
        """
        label = self._id + ("..." if self._capture else "")
        return ("[%s]" if self.optional else "<%s>") % label

    @classmethod
    def coerce(cls, object, /):
        """
        Return `object` as an ArgumentSpec.

        Accepts an ArgumentSpec (returned unchanged) or a mapping with the key
        'id' and any of 'type', 'required', 'default_value', 'capture',
        'description'.
        """
        if isinstance(object, cls):
            return object
        if isinstance(object, Mapping):
            try:
                return cls(object["id"], **_extras(cls, object, "id"))
            except KeyError as error:
                raise TypeError(f"{cls.__typename__} mapping is missing {error.args[0]!r}") from None
        raise TypeError(f"{cls.__typename__} must be defined from a mapping or an {cls.__name__}")


def _extras(cls, mapping, /, *excluded):
    """
    Internal: keyword arguments of a mapping definition, minus positional keys.

    Unknown keys are rejected so that typos ("defualt_value") fail loudly
    instead of silently producing a required argument.
    """
    parameters = inspect.signature(cls.__new__).parameters
    extras = {}
    for key, value in mapping.items():
        if key in excluded:
            continue
        if key == "cls" or key not in parameters or parameters[key].kind is not inspect.Parameter.POSITIONAL_OR_KEYWORD:
            raise TypeError(f"{cls.__typename__} got an unexpected field {key!r}")
        extras[key] = value
    return extras


def argtype(id=Unset, /, description=Unset):
    """
    Decorator/factory for defining an argument type from a predicate.

    Usage
    - With an explicit id:
        @argtype("small_size")
        def small_size(raw): return len(raw) < 5

    - Bare, using the function name (underscores become hyphens):
        @argtype
        def small_size(raw): ...

    Behavior
    - The description defaults to the first line of the function's docstring.
    - Returns the ArgumentType; calling it validates a raw token.
    """
    if callable(id):
        return argtype()(id)

    @rename("argtype")
    def wrapper(validate, /):
        if not callable(validate):
            raise TypeError("@argtype() must be applied to a callable")
        return ArgumentType(
            coalesce(id, getattr(validate, "__name__", "").replace("_", "-")),
            validate,
            description=coalesce(description, _summary(validate)),
        )

    return wrapper


def _summary(callback, /):
    """
    Internal: first docstring line of a callable, or Unset when there is none.
    """
    if doc := inspect.getdoc(callback):
        return doc.strip().splitlines()[0]
    return Unset


__all__ = (
    # Classes (specifications)
    "ArgumentType",
    "ArgumentSpec",

    # Decorators
    "argtype",
)

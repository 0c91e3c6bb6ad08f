r"""
Stratum option declarations, builder and registry.

Overview
- OptionSpec: immutable declaration of one configuration option.
  • key: canonical long name; dot segments denote nesting ("part1.value1").
  • shortflag: optional single-token alias ("-n").
  • description: optional help text.
  • default: a Value; its tag is the option's declared type. An UNKNOWN default
    means "no declared type" and is only legal for required options (the
    format pass reports it otherwise).
  • required / hidden flags.

- OptionBuilder: mutable, fluent builder with an explicit build().
  Builders obtained from a registry (registry.option(key)) register the built
  spec on build(), replacing any previous declaration in place.

- OptionRegistry: insertion-ordered key → OptionSpec mapping with a shortflag
  index built on demand.

- option(key): free factory returning an unbound OptionBuilder.

Representation
- OptionType metaclass provides stable __repr__/__rich_repr__ and publishes the
  fields listed in __introspectable__ as read-only properties.

Validation highlights (raised as OptionError)
- keys must match r"[^\W\d][\w-]*(\.[^\W\d][\w-]*)*".
- shortflags must match r"[^\W_][\w.-]*" and must not read as a number once
  prefixed with "-" (that token would be classified as a value).
- explicit None is rejected for shortflag/description; omit them instead.

Quick example:
    >>> registry = OptionRegistry()
    >>> registry.option("numOpt").shortflag("n").default(3.14).description("a number").build()
    option-spec(key='numOpt', shortflag='n', description='a number', default=value(number, 3.140000), required=False, hidden=False)
"""
import functools
import operator
import re
from collections.abc import Mapping

from .faults import OptionError
from .utils import Unset, mirror, rename
from .values import NUMERIC, Value

KEY = re.compile(r"[^\W\d][\w-]*(\.[^\W\d][\w-]*)*")
SHORTFLAG = re.compile(r"[^\W_][\w.-]*")


class OptionType(type):
    """
    Metaclass that turns declaration classes into introspectable, sealed types.

    Responsibilities
    - Expose the names in __introspectable__ as read-only properties mirroring
      the private backing fields (self._name).
    - Provide compact __repr__/__rich_repr__ implementations.
    - Seal the class against subclassing when created with sealed=True.
    """
    __introspectable__ = ()

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
                if name not in namespace
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        if options.get("sealed", False):
            @rename("__init_subclass__")
            def __init_subclass__(cls, **options):  # NOQA: F-841
                raise TypeError(f"type {self.__name__!r} is not an acceptable base type")
            self.__init_subclass__ = classmethod(__init_subclass__)

        return self


def _sanitize_key(key, /):
    if not isinstance(key, str):
        raise TypeError("option key must be a string")
    if not (key := key.strip()):
        raise OptionError("option key must be a non-empty string")
    if not KEY.fullmatch(key):
        raise OptionError(f"invalid option key {key!r}")
    return key


def _sanitize_shortflag(shortflag, /):
    if shortflag is Unset:
        return None
    if not isinstance(shortflag, str):
        raise TypeError("option shortflag must be a string (omit it to declare none)")
    if not (shortflag := shortflag.strip()):
        raise OptionError("option shortflag must be a non-empty string")
    if not SHORTFLAG.fullmatch(shortflag):
        raise OptionError(f"invalid option shortflag {shortflag!r}")
    if NUMERIC.fullmatch("-" + shortflag):
        raise OptionError(f"option shortflag {shortflag!r} would read as a negative number")
    return shortflag


def _sanitize_description(description, /):
    if description is Unset:
        return None
    if not isinstance(description, str):
        raise TypeError("option description must be a string (omit it to declare none)")
    if not (description := description.strip()):
        raise OptionError("option description must be a non-empty string")
    return description


def _sanitize_default(default, /):
    if default is Unset:
        return Value()
    try:
        return Value(default)
    except TypeError:
        raise OptionError(
            "option default must be an int, float, bool, str or value, not %r" % type(default).__name__
        ) from None


class OptionSpec(metaclass=OptionType, sealed=True):
    """
    Immutable declaration of one configuration option.

    The declared type is the tag of `default`; read it through `type`.
    `default` returns a copy, so callers cannot alter a declaration through it.
    """
    __introspectable__ = (
        "key",
        "shortflag",
        "description",
        "default",
        "required",
        "hidden",
    )
    __slots__ = ("_key", "_shortflag", "_description", "_default", "_required", "_hidden")

    def __init__(
            self,
            key,
            /,
            shortflag=Unset,
            description=Unset,
            default=Unset,
            required=False,
            hidden=False,
    ):
        fields = {
            "_key": _sanitize_key(key),
            "_shortflag": _sanitize_shortflag(shortflag),
            "_description": _sanitize_description(description),
            "_default": _sanitize_default(default),
            "_required": bool(required),
            "_hidden": bool(hidden),
        }
        for name, value in fields.items():
            object.__setattr__(self, name, value)

    def __setattr__(self, name, value, /):
        raise AttributeError("option specs are read-only")

    def __delattr__(self, name, /):
        raise AttributeError("option specs are read-only")

    @property
    def default(self):
        return self._default.copy()

    @property
    def type(self):
        return self._default.type

    @property
    def flags(self):
        """
        command-line spellings of this option, long form first.
        """
        if self._shortflag is None:
            return ("--" + self._key,)
        return ("--" + self._key, "-" + self._shortflag)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        fields = {name: getattr(self, "_" + name) for name in type(self).__introspectable__}
        fields |= overrides
        key = fields.pop("key")
        for name in ("shortflag", "description"):
            if fields[name] is None:
                fields[name] = Unset
        return type(self)(key, **fields)


class OptionBuilder:
    """
    Fluent, mutable builder for OptionSpec.

    Every setter returns the builder; build() validates and returns a fresh
    OptionSpec. When bound to a registry, build() also registers the spec,
    replacing an existing declaration with the same key in place.

    Example
    - option("strOpt").shortflag("s").default("string").required(True).build()
    """

    def __init__(self, key, /, *, registry=Unset, spec=Unset):
        self._registry = registry
        self._fields = {"key": _sanitize_key(key)}
        if spec is not Unset:
            self._fields |= {
                "shortflag": spec.shortflag if spec.shortflag is not None else Unset,
                "description": spec.description if spec.description is not None else Unset,
                "default": spec.default,
                "required": spec.required,
                "hidden": spec.hidden,
            }

    @property
    def key(self):
        return self._fields["key"]

    def shortflag(self, shortflag, /):
        self._fields["shortflag"] = shortflag
        return self

    def description(self, description, /):
        self._fields["description"] = description
        return self

    def default(self, default, /):
        self._fields["default"] = default
        return self

    def required(self, required=True, /):
        self._fields["required"] = required
        return self

    def hidden(self, hidden=True, /):
        self._fields["hidden"] = hidden
        return self

    def build(self):
        fields = dict(self._fields)
        spec = OptionSpec(fields.pop("key"), **fields)
        if self._registry is not Unset:
            self._registry.add(spec, replace=True)
        return spec

    def __repr__(self):
        return "option-builder(%s)" % ", ".join("%s=%r" % item for item in self._fields.items())


def option(key, /):
    """
    return an unbound OptionBuilder for `key`.
    """
    return OptionBuilder(key)


class OptionRegistry(Mapping):
    """
    Insertion-ordered collection of OptionSpec keyed by canonical key.

    behavior
    - add(spec) appends a declaration; re-adding a key raises OptionError
      unless replace=True, which swaps the spec while keeping its position.
    - option(key) returns a builder bound to this registry, pre-filled with the
      current declaration when the key already exists.
    - shortflags() builds the shortflag → key index (first declaration wins;
      duplicates are reported by the format pass, not here).
    """

    def __init__(self, specs=(), /):
        self._specs = {}
        for spec in specs:
            self.add(spec)

    def add(self, spec, /, *, replace=False):
        if not isinstance(spec, OptionSpec):
            raise TypeError("add() argument must be an option spec")
        if spec.key in self._specs and not replace:
            raise OptionError(f"option {spec.key!r} is already declared")
        self._specs[spec.key] = spec
        return spec

    def option(self, key, /):
        key = _sanitize_key(key)
        return OptionBuilder(key, registry=self, spec=self._specs.get(key, Unset))

    def remove(self, key, /):
        return self._specs.pop(key)

    def copy(self):
        return type(self)(self._specs.values())

    def shortflags(self):
        index = {}
        for spec in self._specs.values():
            if spec.shortflag is not None:
                index.setdefault(spec.shortflag, spec.key)
        return index

    def visible(self):
        """
        iterate over the non-hidden declarations in registry order.
        """
        return (spec for spec in self._specs.values() if not spec.hidden)

    def __getitem__(self, key, /):
        return self._specs[key]

    def __iter__(self):
        return iter(self._specs)

    def __len__(self):
        return len(self._specs)

    def __copy__(self):
        return self.copy()

    def __repr__(self):
        return "option-registry(%s)" % ", ".join(map(repr, self._specs))


# Remove the metaclass from the module namespace; OptionSpec carries it.
del OptionType


__all__ = (
    "OptionSpec",
    "OptionBuilder",
    "OptionRegistry",
    "option",
)

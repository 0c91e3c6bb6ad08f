"""
Stratum resolution engine: defaults, then a config file, then the command line.

What this module provides
- Layer: the precedence layer an entry came from (DEFAULT < FILE < COMMAND_LINE).
- ResolvedMap: the flat key → Value result. Lookups of missing keys through
  get() return an empty Value; stray keys (not declared in the registry) are
  kept and reported by `strays`.
- Resolution: (values, log, success, help_requested, registry).
- ResolutionEngine: runs the resolution once per call over an argv-style list.

Algorithm (resolve)
1. format pass (validation.check_format); an error aborts before any token is
   read unless the log is SILENT.
2. seed every option's default.
3. locate a config file: "--config PATH" (or its shortflag) beats a sole
   positional argument, which beats the engine path. Load it
   through the reader table, flatten it and merge it, coercing values of
   declared options to their declared type.
4. scan the tokens once with a single pending option:
   • flag → pending option (bool options are set to true right away); an
     unknown long flag becomes a pending text "wildcard" stray entry, an
     unknown short flag only warns.
   • value → parsed against the pending option's type, then the pending
     option is cleared; a value with nothing pending is discarded.
   • malformed token → error record.
5. help check, then reserved entries are stripped and the result validated.

Success
- resolution fails when any error was recorded (the format pass, the config
  file, a malformed token or the final validation), whether or not the log
  threshold kept the record, and never when the threshold is SILENT.
  Unknown flags, orphaned and unparsable values are warnings.

load(path, resolution) merges a config file into a finished resolution, below
its command-line entries.
"""
import os
from collections.abc import Mapping
from enum import IntEnum
from typing import NamedTuple

from .documents import READERS, flatten, reader_for
from .faults import DiagnosticLog, DocumentError, FaultCode, Severity, error, info, warning, worst
from .options import OptionRegistry, OptionSpec
from .tokens import TokenKind, classify
from .utils import Unset, coalesce
from .validation import check_format, validate
from .values import DataType, Value

HELP = "help"
CONFIG = "config"


class Layer(IntEnum):
    """
    precedence layers, lowest first.
    """
    DEFAULT = 1
    FILE = 2
    COMMAND_LINE = 3


class ResolvedMap(Mapping):
    """
    Flat key → Value mapping produced by a resolution.

    - values are copied on the way in and out.
    - layer(key) tells which precedence layer set the entry.
    - declared(key) is False for stray entries (unknown flags, undeclared
      document keys); `strays` lists them in insertion order.
    """

    def __init__(self, declared=(), /):
        self._entries = {}
        self._declared = frozenset(declared)

    def set(self, key, value, layer, /):
        self._entries[key] = (Value(value), Layer(layer))

    def discard(self, key, /):
        self._entries.pop(key, None)

    def get(self, key, default=Unset, /):
        """
        return the value for `key`, or an empty Value when it is absent.
        """
        try:
            return self[key]
        except KeyError:
            return coalesce(default, Value())

    def layer(self, key, /):
        return self._entries[key][1]

    def declared(self, key, /):
        return key in self._declared

    @property
    def strays(self):
        return tuple(key for key in self._entries if key not in self._declared)

    def __getitem__(self, key, /):
        return self._entries[key][0].copy()

    def __iter__(self):
        return iter(self._entries)

    def __len__(self):
        return len(self._entries)

    def __repr__(self):
        return "resolved-map(%s)" % ", ".join(
            "%s=%s" % (key, value.render()) for key, (value, _) in self._entries.items()
        )


class Resolution(NamedTuple):
    values: ResolvedMap
    log: DiagnosticLog
    success: bool
    help_requested: bool
    registry: OptionRegistry


class _Pending(NamedTuple):
    # option awaiting a value: canonical key and the type its value parses to
    key: str
    type: DataType


def _succeeded(log, /):
    return log.silent or log.worst is not Severity.ERROR


def _coerce(value, datatype, /):
    """
    convert a document value to `datatype`, or return None when incompatible.
    """
    if value.empty:
        return None
    source = value.type
    if datatype is DataType.UNKNOWN or source is datatype:
        return value
    if source is DataType.INT and datatype is DataType.NUMBER:
        return Value(float(value.as_int()))
    if source is DataType.NUMBER and datatype is DataType.INT and value.as_number().is_integer():
        return Value(int(value.as_number()))
    if source is DataType.TEXT:
        parsed = Value.parse(value.as_text(), datatype)
        return None if parsed.empty else parsed
    return None


class ResolutionEngine:
    """
    Resolve an OptionRegistry against argv-style tokens and an optional file.

    Options
    - help: inject the hidden "help" option (bool, default false) and call
      `helper(registry)` when it resolves to true.
    - config: inject the hidden "config" option (text path) used to locate the
      config file.
    - level: minimum severity kept in the diagnostic log (Severity or name).
    - readers: extension → reader table used to load config files.
    - path: config file used when the command line names none.

    The host registry is never mutated; each resolution works on a copy with
    the reserved options prepended.
    """

    def __init__(
            self,
            registry,
            /,
            *,
            help=True,
            config=True,
            level=Severity.WARNING,
            readers=READERS,
            helper=Unset,
            path=Unset,
    ):
        if not isinstance(registry, OptionRegistry):
            raise TypeError("ResolutionEngine() argument must be an option registry")
        self._registry = registry
        self._help = bool(help)
        self._config = bool(config)
        self._level = Severity.coerce(level)
        self._readers = dict(readers)
        self._helper = helper
        self._path = path

    @property
    def level(self):
        return self._level

    @level.setter
    def level(self, level):
        self._level = Severity.coerce(level)

    @property
    def path(self):
        return coalesce(self._path)

    @path.setter
    def path(self, path):
        self._path = path

    def prepare(self):
        """
        return the working registry: reserved options first, then the host's.

        a reserved option is skipped when the host declares the same key, and
        only takes its shortflag ("h", "c") when no host option uses it.
        a host-declared "config" option is an ordinary option: no file is
        located through it.
        """
        taken = {spec.shortflag for spec in self._registry.values()}
        registry = OptionRegistry()
        if self._help and HELP not in self._registry:
            registry.add(OptionSpec(
                HELP,
                shortflag="h" if "h" not in taken else Unset,
                description="show this help message",
                default=False,
                hidden=True,
            ))
        if self._config and CONFIG not in self._registry:
            registry.add(OptionSpec(
                CONFIG,
                shortflag="c" if "c" not in taken else Unset,
                description="read option values from a config file (json or csv)",
                default=str(coalesce(self._path, "")),
                hidden=True,
            ))
        for spec in self._registry.values():
            registry.add(spec)
        return registry

    def resolve(self, tokens, /):
        tokens = list(tokens)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("resolve() argument must be an iterable of strings")

        log = DiagnosticLog(self._level)
        registry = self.prepare()
        reserved = self._reserved(registry)

        findings = check_format(registry)
        log.extend(findings)
        if worst(findings) is Severity.ERROR and not log.silent:
            log.emit(error(
                "registry",
                "resolution aborted before reading the command line",
                code=FaultCode.ABORTED,
                hint="fix the option declarations reported above",
            ))
            return Resolution(ResolvedMap(registry), log, False, False, registry)

        values = ResolvedMap(registry)
        for spec in registry.values():
            values.set(spec.key, spec.default, Layer.DEFAULT)

        arguments = tokens[1:]
        index = registry.shortflags()
        path, consumed = self._locate(arguments, index)
        if path:
            self._merge(path, registry, reserved, values, log)

        self._scan(arguments, consumed, registry, index, values, log)

        help_requested = False
        if HELP in reserved:
            value = values.get(HELP)
            if value.type is DataType.BOOL and value.as_bool():
                help_requested = True
                log.emit(info(HELP, "help requested", code=FaultCode.HELP_REQUESTED))
                if self._helper is not Unset:
                    self._helper(registry)

        for key in reserved:
            values.discard(key)

        log.extend(validate(registry, values))

        return Resolution(values, log, _succeeded(log), help_requested, registry)

    def load(self, path, resolution, /):
        """
        merge the config file at `path` into an existing resolution.

        entries set on the command line are kept; the file only overrides
        defaults and earlier file entries. Records go to the resolution's log
        and the returned Resolution carries the updated success flag.
        """
        if not isinstance(resolution, Resolution):
            raise TypeError("load() second argument must be a resolution")
        path = os.fspath(path)
        self._merge(path, resolution.registry, self._reserved(resolution.registry), resolution.values, resolution.log)
        return resolution._replace(success=resolution.success and _succeeded(resolution.log))

    def _reserved(self, registry):
        return [key for key in (HELP, CONFIG) if key in registry and key not in self._registry]

    def _locate(self, arguments, index):
        """
        find the config file path; returns (path | None, consumed position | None).

        the command line is only searched when the reserved config option is
        in use; the engine path is the fallback in every case.
        """
        if self._config and CONFIG not in self._registry:
            for position, token in enumerate(arguments[:-1]):
                kind, key = classify(token)
                if (
                    kind is TokenKind.LONG_FLAG and key == CONFIG or
                    kind is TokenKind.SHORT_FLAG and index.get(key) == CONFIG
                ) and classify(arguments[position + 1]).kind is TokenKind.VALUE:
                    return arguments[position + 1], None

            if len(arguments) == 1 and classify(arguments[0]).kind is TokenKind.VALUE:
                return arguments[0], 0

        return os.fspath(coalesce(self._path, "")) or None, None

    def _merge(self, path, registry, reserved, values, log):
        """
        load `path` and merge its entries at the FILE layer; False on a read error.
        """
        try:
            tree = reader_for(path, self._readers)(path)
        except (OSError, UnicodeDecodeError, DocumentError) as exception:
            reason = getattr(exception, "strerror", None) or str(exception)
            log.emit(error(
                path,
                "config file could not be read (%s)" % reason.lower(),
                code=FaultCode.CONFIG_UNREADABLE,
                hint="check the path and that the file is valid json or key,value csv",
            ))
            return False

        log.emit(info(path, "config file loaded", code=FaultCode.CONFIG_LOADED))

        for skipped in tree.skipped:
            log.emit(warning(
                skipped,
                "arrays and nulls are not supported; entry ignored",
                code=FaultCode.UNSUPPORTED_NODE,
                hint="replace it with a scalar value or a nested section",
            ))

        for key, value in flatten(tree).items():
            if key in reserved or key in values and values.layer(key) is Layer.COMMAND_LINE:
                continue
            if key not in registry:
                values.set(key, value, Layer.FILE)
                log.emit(info(key, "undeclared entry kept from the config file", code=FaultCode.STRAY_ENTRY))
                continue
            spec = registry[key]
            if (coerced := _coerce(value, spec.type)) is None:
                log.emit(warning(
                    key,
                    "config file value %s is not a valid %s; keeping %s" % (
                        value.render(), spec.type.value, values.get(key).render() or "no value"
                    ),
                    code=FaultCode.INCOMPATIBLE_VALUE,
                    hint="write a %s value for this option" % spec.type.value,
                ))
                continue
            values.set(key, coerced, Layer.FILE)
            log.emit(info(key, "set to %s from the config file" % coerced.render(), code=FaultCode.DOCUMENT_VALUE))

        return True

    def _scan(self, arguments, consumed, registry, index, values, log):
        pending = None

        for position, token in enumerate(arguments):
            if position == consumed:
                continue

            kind, key = classify(token)
            match kind:
                case TokenKind.LONG_FLAG | TokenKind.SHORT_FLAG:
                    pending = self._flag(kind, key, token, registry, index, values, log)
                case TokenKind.VALUE:
                    if pending is None:
                        log.emit(warning(
                            token,
                            "value does not follow any option; ignored",
                            code=FaultCode.ORPHANED_VALUE,
                            hint="put it after the option it belongs to (for example: --key %s)" % token,
                        ))
                        continue
                    parsed = Value.parse(token, pending.type)
                    if parsed.empty:
                        log.emit(warning(
                            token,
                            "not a valid %s for %r; keeping %s" % (
                                pending.type.value, pending.key, values.get(pending.key).render() or "no value"
                            ),
                            code=FaultCode.UNPARSABLE_VALUE,
                            hint="pass a %s value after --%s" % (pending.type.value, pending.key),
                        ))
                    else:
                        values.set(pending.key, parsed, Layer.COMMAND_LINE)
                        log.emit(info(
                            pending.key,
                            "set to %s from the command line" % parsed.render(),
                            code=FaultCode.VALUE_ASSIGNED,
                        ))
                    pending = None
                case _:
                    log.emit(error(
                        token,
                        "malformed token",
                        code=FaultCode.MALFORMED_TOKEN,
                        hint="options are spelled --key or -shortflag and must name something",
                    ))
                    pending = None

    def _flag(self, kind, key, token, registry, index, values, log):
        """
        resolve one flag token to the pending option it opens (or None).
        """
        if kind is TokenKind.SHORT_FLAG:
            canonical = index.get(key)
        else:
            canonical = key if key in registry else None

        if canonical is None:
            if kind is TokenKind.LONG_FLAG:
                log.emit(warning(
                    token,
                    "unknown option; a following value is kept as text",
                    code=FaultCode.UNKNOWN_LONG_FLAG,
                    hint="check the spelling or run with --help to list the options",
                ))
                return _Pending(key, DataType.TEXT)
            log.emit(warning(
                token,
                "unknown shortflag; ignored",
                code=FaultCode.UNKNOWN_SHORT_FLAG,
                hint="check the spelling or run with --help to list the shortflags",
            ))
            return None

        spec = registry[canonical]
        if spec.type is DataType.BOOL:
            values.set(spec.key, Value(True), Layer.COMMAND_LINE)
            log.emit(info(spec.key, "flag present, set to true", code=FaultCode.FLAG_PRESENT))
        return _Pending(spec.key, spec.type)


__all__ = (
    "Layer",
    "ResolvedMap",
    "Resolution",
    "ResolutionEngine",
)

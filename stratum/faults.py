"""
Stratum faults: severities, fault codes, diagnostics and the diagnostic log.

Scope
- Severity: ordered levels (info < warning < error) plus SILENT, a threshold
  that suppresses every record and disables aborting.
- FaultCode: canonical, stable numeric identifiers for every condition the
  engine reports. Codes are grouped by phase so logs stay searchable.
- Diagnostic: one frozen (severity, subject, message) record with its code and
  a single hint; knows how to render itself through rich.
- DiagnosticLog: append-only sequence of diagnostics, filtered at emission by
  a minimum severity while still tracking the worst severity seen.
- Exceptions for programming errors (never raised for expected conditions):
  TypeMismatchError, OptionError, DocumentError.

UX goals
- Subject-first messages: every record names the token, key or path it is
  about, so a reader can find the culprit on the command line or in the file.
- Lowercased tone with readable styling (configurable via __styles__ in __main__).
"""
from collections import defaultdict
from collections.abc import Sequence
from enum import IntEnum
from types import MappingProxyType

from rich.console import Group
from rich.text import Text

from .utils import Unset


class Severity(IntEnum):
    """
    diagnostic severities, ordered so that comparisons read naturally.

    SILENT is only meaningful as a threshold: a log configured with it keeps no
    record and the engine never aborts.
    """
    INFO    = 1
    WARNING = 2
    ERROR   = 3
    SILENT  = 4

    @classmethod
    def coerce(cls, level, /):
        """
        accept a Severity, its name (case-insensitive) or its value.
        """
        if isinstance(level, cls):
            return level
        if isinstance(level, str):
            try:
                return cls[level.strip().upper()]
            except KeyError:
                raise ValueError(f"unknown severity {level!r}") from None
        return cls(level)


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - format (211xx): registry misconfiguration found before any token is read.
    - tokens (221xx): command-line tokens, flags and values.
    - documents (231xx): config-file loading and merging.
    - validation (241xx): post-resolution checks.
    - engine (251xx): engine-level notices.

    normalize() allows a host to remap codes to its own labels via a __codes__
    mapping in __main__ while keeping the numeric identity stable.
    """
    # --- format (211xx) ---
    MISSING_DEFAULT        = 21101
    DUPLICATED_SHORTFLAG   = 21102
    MISSING_DESCRIPTION    = 21103
    MISSING_SHORTFLAG      = 21104
    NESTING_CONFLICT       = 21105

    # --- tokens (221xx) ---
    MALFORMED_TOKEN        = 22101
    UNKNOWN_LONG_FLAG      = 22102
    UNKNOWN_SHORT_FLAG     = 22103
    ORPHANED_VALUE         = 22104
    UNPARSABLE_VALUE       = 22105
    VALUE_ASSIGNED         = 22106
    FLAG_PRESENT           = 22107

    # --- documents (231xx) ---
    CONFIG_LOADED          = 23101
    CONFIG_UNREADABLE      = 23102
    INCOMPATIBLE_VALUE     = 23103
    STRAY_ENTRY            = 23104
    UNSUPPORTED_NODE       = 23105
    DOCUMENT_VALUE         = 23106
    EXPORT_CONFLICT        = 23107

    # --- validation (241xx) ---
    EMPTY_VALUE            = 24101
    MISSING_OPTION         = 24102

    # --- engine (251xx) ---
    HELP_REQUESTED         = 25101
    ABORTED                = 25102

    def normalize(self):
        """
        return a host-normalized string for this code.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class TypeMismatchError(TypeError):
    """
    Raised when a Value accessor disagrees with the value's tag.

    This is a programming error: callers must check Value.type (or use the
    accessor matching the option's declared type).
    """


class OptionError(ValueError):
    """
    Raised for malformed option declarations (bad key, bad shortflag,
    unsupported default).
    """


class DocumentError(ValueError):
    """
    Raised when a document tree cannot be built or written (conflicting dot
    paths, unsupported native values).
    """


class Diagnostic:
    """
    One immutable diagnostic record.

    fields
    - severity: Severity
    - subject: str, the token, key or path the record is about
    - message: str, one lowercase sentence
    - code: FaultCode
    - hint: str | None, one actionable suggestion
    - options: render-time context (prog, colorful) injected via copy.replace()
    """
    __slots__ = ("_severity", "_subject", "_message", "_code", "_hint", "_options")

    def __init__(self, severity, subject, message, /, code, hint=None, **options):
        object.__setattr__(self, "_severity", Severity.coerce(severity))
        object.__setattr__(self, "_subject", str(subject))
        object.__setattr__(self, "_message", str(message))
        object.__setattr__(self, "_code", FaultCode(code))
        object.__setattr__(self, "_hint", hint)
        object.__setattr__(self, "_options", MappingProxyType(options))

    severity = property(lambda self: self._severity)
    subject = property(lambda self: self._subject)
    message = property(lambda self: self._message)
    code = property(lambda self: self._code)
    hint = property(lambda self: self._hint)
    options = property(lambda self: self._options)

    def __setattr__(self, name, value, /):
        raise AttributeError("diagnostics are read-only")

    def __delattr__(self, name, /):
        raise AttributeError("diagnostics are read-only")

    def __eq__(self, other):
        if not isinstance(other, Diagnostic):
            return NotImplemented
        return (self._severity, self._subject, self._message, self._code) == \
            (other._severity, other._subject, other._message, other._code)

    def __hash__(self):
        return hash((self._severity, self._subject, self._message, self._code))

    def __repr__(self):
        return "diagnostic(severity=%s, subject=%r, message=%r, code=%s)" % (
            self._severity.name.lower(), self._subject, self._message, self._code.name
        )

    def __str__(self):
        return "[%s] %s: %s" % (self._severity.name.lower(), self._subject, self._message)

    def __rich__(self):
        main = __import__("__main__")
        colorful = self._options.get("colorful", True)

        styles = defaultdict(str, {
            "prog-name": "bold #E6E6F0",  # near-white program name
            "info-code": "bold #7DD3FC",  # calm blue for notices
            "warning-code": "bold #FFB400",  # amber for warnings
            "error-code": "bold #00E5FF",  # neon cyan for errors
            "info-title": "#A3A3A3",
            "warning-title": "bold #FFC2E0",
            "error-title": "bold #FF4DA6",
            "subject": "bold #FFD600",  # amber subject token
            "message": "#C8C8D0",
            "hint-arrow": "#9CE19C dim",
            "hint": "italic #9CE19C",
        } | getattr(main, "__styles__", {}))

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            return Text(str(fragment), styles[style] if colorful else "")

        kind = self._severity.name.lower()
        prog = self._options.get("prog") or getattr(main, "__prog__", "stratum")

        header = Text.assemble(
            "[ ",
            text(prog, "prog-name"),
            " — ",
            text(self._code.normalize(), kind + "-code"),
            " | ",
            text(kind, kind + "-title"),
            " ]"
        )
        body = Text.assemble(text(self._subject, "subject"), ": ", text(self._message, "message"))
        if not self._hint:
            return Group(header, body)
        hint = Text.assemble(text(" → ", "hint-arrow"), text(self._hint, "hint"))
        return Group(header, body, hint)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        options = {**self._options}
        fields = {
            "severity": self._severity,
            "subject": self._subject,
            "message": self._message,
            "code": self._code,
            "hint": self._hint,
        }
        for name, value in overrides.items():
            if name in fields:
                fields[name] = value
            else:
                options[name] = value
        return type(self)(
            fields["severity"],
            fields["subject"],
            fields["message"],
            code=fields["code"],
            hint=fields["hint"],
            **options
        )


def info(subject, message, /, code, hint=None):
    return Diagnostic(Severity.INFO, subject, message, code=code, hint=hint)


def warning(subject, message, /, code, hint=None):
    return Diagnostic(Severity.WARNING, subject, message, code=code, hint=hint)


def error(subject, message, /, code, hint=None):
    return Diagnostic(Severity.ERROR, subject, message, code=code, hint=hint)


def worst(diagnostics, /):
    """
    return the worst severity among `diagnostics`, or None for an empty input.
    """
    return max((diagnostic.severity for diagnostic in diagnostics), default=None)


class DiagnosticLog(Sequence):
    """
    Append-only, ordered diagnostic log.

    behavior
    - emit() drops records below the configured minimum severity; SILENT drops
      every record.
    - worst tracks the worst severity ever emitted, filtered or not, so callers
      can decide on aborting independently of what is displayed.
    - the log is a read-only Sequence for consumers; records are never mutated
      after append.
    """

    def __init__(self, level=Severity.WARNING, /):
        self._level = Severity.coerce(level)
        self._records = []
        self._worst = None

    @property
    def level(self):
        return self._level

    @property
    def worst(self):
        return self._worst

    @property
    def silent(self):
        return self._level is Severity.SILENT

    def emit(self, diagnostic, /):
        if not isinstance(diagnostic, Diagnostic):
            raise TypeError("emit() argument must be a diagnostic")
        if self._worst is None or diagnostic.severity > self._worst:
            self._worst = diagnostic.severity
        if diagnostic.severity >= self._level:
            self._records.append(diagnostic)
        return diagnostic

    def extend(self, diagnostics, /):
        for diagnostic in diagnostics:
            self.emit(diagnostic)

    def about(self, subject, /):
        """
        return the records whose subject equals `subject`.
        """
        return tuple(record for record in self._records if record.subject == subject)

    def at(self, severity, /):
        """
        return the records of exactly `severity`.
        """
        severity = Severity.coerce(severity)
        return tuple(record for record in self._records if record.severity is severity)

    def __getitem__(self, index):
        if isinstance(index, slice):
            return tuple(self._records[index])
        return self._records[index]

    def __len__(self):
        return len(self._records)

    def __repr__(self):
        return "diagnostic-log(level=%s, records=%d, worst=%s)" % (
            self._level.name.lower(),
            len(self._records),
            self._worst.name.lower() if self._worst is not None else Unset,
        )


__all__ = (
    "Severity",
    "FaultCode",
    "TypeMismatchError",
    "OptionError",
    "DocumentError",
    "Diagnostic",
    "DiagnosticLog",
    "worst",
)

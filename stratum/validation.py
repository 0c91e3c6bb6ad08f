"""
Stratum validation: the checks that run before and after resolution.

check_format(registry)
- runs before any token is read and reports registry misconfiguration:
  • error: a non-required option without a default (no declared type).
  • error: a shortflag claimed by more than one option.
  • warning: an option with no description.
  • warning: an option with no shortflag.
  • warning: a key that is both a value and a section ("a" and "a.b"); such a
    registry cannot be written back as a nested document.
  hidden options are exempt from the warnings.

validate(registry, resolved)
- runs after the scan:
  • error: a resolved value that is still empty.
  • error: a non-hidden option missing from the resolved map.

Both are pure functions returning lists of Diagnostic records; pair them
with faults.worst() to decide on failure.
"""
from collections import defaultdict

from .faults import FaultCode, error, warning
from .values import DataType


def check_format(registry, /):
    diagnostics = []
    owners = defaultdict(list)

    for spec in registry.values():
        if spec.type is DataType.UNKNOWN and not spec.required:
            diagnostics.append(error(
                spec.key,
                "optional option has no default value, so its type is unknown",
                code=FaultCode.MISSING_DEFAULT,
                hint="give it a default (for example: .default(0)) or mark it required",
            ))
        if spec.shortflag is not None:
            owners[spec.shortflag].append(spec.key)
        if spec.hidden:
            continue
        if spec.description is None:
            diagnostics.append(warning(
                spec.key,
                "option has no description",
                code=FaultCode.MISSING_DESCRIPTION,
                hint="add .description(...) so the help screen can explain it",
            ))
        if spec.shortflag is None:
            diagnostics.append(warning(
                spec.key,
                "option has no shortflag",
                code=FaultCode.MISSING_SHORTFLAG,
                hint="add .shortflag(...) to offer a short spelling",
            ))

    for shortflag, keys in owners.items():
        for key in keys[1:]:
            diagnostics.append(error(
                key,
                "shortflag %r is already used by option %r" % ("-" + shortflag, keys[0]),
                code=FaultCode.DUPLICATED_SHORTFLAG,
                hint="pick a shortflag no other option uses",
            ))

    for key, spec in registry.items():
        if spec.hidden or not any(other.startswith(key + ".") for other in registry):
            continue
        diagnostics.append(warning(
            key,
            "option is also the section of nested options",
            code=FaultCode.NESTING_CONFLICT,
            hint="rename either %r or its nested options to serialize them as a document" % key,
        ))

    return diagnostics


def validate(registry, resolved, /):
    diagnostics = []

    for key, value in resolved.items():
        if value.empty:
            diagnostics.append(error(
                key,
                "no value was provided",
                code=FaultCode.EMPTY_VALUE,
                hint="pass it on the command line (--%s <value>) or in the config file" % key,
            ))

    for spec in registry.visible():
        if spec.key not in resolved:
            diagnostics.append(error(
                spec.key,
                "declared option is missing from the resolved values",
                code=FaultCode.MISSING_OPTION,
                hint="pass it on the command line (--%s <value>) or in the config file" % spec.key,
            ))

    return diagnostics


__all__ = (
    "check_format",
    "validate",
)

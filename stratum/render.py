"""
Stratum rendering: help screens, value tables and diagnostics through rich.

Nothing here affects resolution; these helpers only read a registry, a
ResolvedMap or a DiagnosticLog.

Palette keys
- usage-label, program-name, usage-section, description-section
- option-name, required-name, type-name, default-value, option-description
- table-border, key-column, stray-key, layer-name
- log-title

Customization
- Define a mapping named __styles__ in __main__ to override any palette entry.
- When colorful is False, styling is suppressed.
"""
import copy
from collections import defaultdict

from rich.console import Console, Group
from rich.table import Table
from rich.text import Text

from .utils import Unset, coalesce
from .values import DataType


def _palette(colorful):
    styles = defaultdict(str, {
        # === Head sections ===
        "usage-label": "bold #00E6FF",  # CYAN → signature info color
        "program-name": "bold #FF4D94",  # MAGENTA-PINK → brand pop
        "usage-section": "bold #36C5F0",  # SKY-BLUE → softer than cyan
        "description-section": "italic #A3A3A3",  # Neutral gray

        # === Options ===
        "option-name": "bold #00E6FF",
        "required-name": "bold #22C55E",
        "type-name": "bold #FFD600",  # AMBER for types
        "default-value": "#D1D5DB",
        "option-description": "#9CA3AF",

        # === Tables ===
        "table-border": "#4B5563",  # Slate border
        "key-column": "bold #36C5F0",
        "stray-key": "italic #F97316",  # ORANGE for undeclared keys
        "layer-name": "#9CA3AF",

        # === Log ===
        "log-title": "bold #FFFFFF",
    } | getattr(__import__("__main__"), "__styles__", {}))

    def styler(style):
        return styles[style] if colorful else ""

    def text(fragment, style=""):
        if isinstance(fragment, Text):
            return fragment if colorful else Text(fragment.plain)
        return Text(str(fragment), styler(style))

    return styler, text


def _metavar(spec):
    return "<%s>" % (spec.type.value if spec.type is not DataType.UNKNOWN else "value")


def usage(registry, name, /, *, colorful=True):
    """
    build the usage line: program name, then every visible option in registry order.

    required options are bare, optional ones bracketed, bool options take no
    metavar.
    """
    styler, text = _palette(colorful)
    line = Text()
    line.append("usage", styler("usage-label")).append(": ")
    line.append(text(name, "program-name"))

    for spec in registry.values():
        if spec.hidden:
            continue
        flag = text("-" + spec.shortflag if spec.shortflag else "--" + spec.key, "usage-section")
        if spec.type is not DataType.BOOL:
            flag = Text.assemble(flag, " ", text(_metavar(spec), "type-name"))
        line.append(" ")
        line.append(flag if spec.required else Text.assemble("[", flag, "]"))
    return line


def help(registry, name, /, *, description=Unset, colorful=True):
    """
    build the full help renderable: usage, description and the options table.
    """
    styler, text = _palette(colorful)
    renders = [usage(registry, name, colorful=colorful)]

    if description := coalesce(description):
        renders.append(Text())
        renders.append(text(description, "description-section"))

    table = Table(box=None, show_header=False, pad_edge=False, padding=(0, 2, 0, 0))
    table.add_column("flags", no_wrap=True)
    table.add_column("type", no_wrap=True)
    table.add_column("default")
    table.add_column("description")

    for spec in registry.values():
        if spec.hidden:
            continue
        flags = Text(", ").join(
            text(flag, "required-name" if spec.required else "option-name") for flag in reversed(spec.flags)
        )
        default = spec.default
        details = text(coalesce(spec.description, ""), "option-description")
        if spec.required:
            details = Text.assemble(details, " " if details.plain else "", text("(required)", "required-name"))
        table.add_row(
            flags,
            text(_metavar(spec), "type-name"),
            text("" if default.empty else "default: " + default.render(), "default-value"),
            details,
        )

    if table.row_count:
        renders.append(Text())
        renders.append(text("options:", "usage-label"))
        renders.append(table)

    return Group(*renders)


def values(resolved, /, *, colorful=True, title=Unset):
    """
    build a table of resolved values: key, type, value and source layer.
    """
    styler, text = _palette(colorful)
    table = Table(
        title=coalesce(title),
        border_style=styler("table-border"),
        header_style=styler("log-title"),
    )
    table.add_column("key", no_wrap=True)
    table.add_column("type", no_wrap=True)
    table.add_column("value")
    table.add_column("source", no_wrap=True)

    for key in resolved:
        value = resolved[key]
        stray = not resolved.declared(key)
        table.add_row(
            text(key + (" (undeclared)" if stray else ""), "stray-key" if stray else "key-column"),
            text(value.render_type(), "type-name"),
            value.__rich__() if colorful else Text(value.render()),
            text(resolved.layer(key).name.lower().replace("_", "-"), "layer-name"),
        )
    return table


def diagnostics(log, /, *, prog="stratum", colorful=True):
    """
    build one renderable per record, with prog/colorful injected.
    """
    return Group(*(copy.replace(record, prog=prog, colorful=colorful) for record in log))


def show(renderable, /, *, console=Unset, stderr=False):
    """
    print a renderable to `console` (a fresh Console when Unset).
    """
    if console is Unset:
        console = Console(stderr=stderr)
    console.print(renderable)


__all__ = (
    "usage",
    "help",
    "values",
    "diagnostics",
    "show",
)

"""
Stratum host-facing configuration object.

Config bundles a registry, an engine and the rich renderers behind one small
API:

    from stratum import Config

    conf = Config()
    conf.description("A simple example")
    conf.option("numOpt").shortflag("n").default(3.14).description("a number").build()
    conf.option("strOpt").shortflag("s").default("string").required(True).description("a string").build()
    conf.option("part1.value1").shortflag("p1v1").default("p1v1").description("nested value").build()

    if conf.parse():                      # sys.argv by default
        print(conf["part1.value1"].as_text())
        conf.serialize("settings.json")   # nested json (or .csv for key,value lines)
    else:
        conf.log()                        # render the diagnostics

Behavior
- option(key) returns a builder bound to the registry; calling it again for an
  existing key starts from the current declaration (adjust, then build()).
- parse(argv) resolves defaults, then the config file, then the command line
  and returns the success flag. A "--help" run prints the help screen.
- conf[key] returns the resolved Value, or an empty Value when the key is
  unknown or parse() has not run.
"""
import os.path
import sys

from . import render
from .documents import READERS, ExportFormat, clashes, dump
from .engine import ResolutionEngine
from .faults import FaultCode, Severity, warning
from .options import OptionRegistry
from .utils import Unset, coalesce
from .values import Value


class Config:
    """
    Option declarations plus the result of the last parse().

    Options
    - name: program name for help and diagnostics (defaults to argv[0]'s basename).
    - help / config: inject the reserved hidden "help" and "config" options.
    - level: minimum severity kept in the diagnostic log.
    - readers: extension → reader table for config files.
    - colorful: style rich output.
    - console: rich Console used for help, tables and logs (stderr for logs
      when Unset).
    """

    def __init__(
            self,
            name=Unset,
            /,
            *,
            help=True,
            config=True,
            level=Severity.WARNING,
            readers=READERS,
            colorful=True,
            console=Unset,
    ):
        self._name = name
        self._description = None
        self._colorful = bool(colorful)
        self._console = console
        self._registry = OptionRegistry()
        self._engine = ResolutionEngine(
            self._registry,
            help=help,
            config=config,
            level=level,
            readers=readers,
            helper=self._helper,
        )
        self._resolution = None
        self._argv0 = None

    @property
    def name(self):
        if self._name is not Unset:
            return self._name
        return os.path.basename(self._argv0) if self._argv0 else "stratum"

    @property
    def registry(self):
        return self._registry

    @property
    def resolution(self):
        """
        the last Resolution, or None before parse().
        """
        return self._resolution

    @property
    def values(self):
        if self._resolution is None:
            raise RuntimeError("parse() has not run yet")
        return self._resolution.values

    def option(self, key, /):
        return self._registry.option(key)

    def add(self, spec, /):
        return self._registry.add(spec, replace=True)

    def description(self, description=Unset, /):
        """
        set the program description shown in help (or return it when omitted).
        """
        if description is Unset:
            return self._description
        self._description = description
        return self

    def config(self, path, /):
        """
        use `path` as the config file when the command line names none.

        the path applies even with config=False, which only turns off the
        command-line "--config" option. After parse(), the file is also merged
        into the current values right away: command-line entries are kept and
        the success flag reflects any read error.
        """
        self._engine.path = os.fspath(path)
        if self._resolution is not None:
            self._resolution = self._engine.load(path, self._resolution)
        return self

    def log(self, level=Unset, /):
        """
        set the minimum severity (when given) or render the last diagnostic log.
        """
        if level is not Unset:
            self._engine.level = level
            return self
        if self._resolution is None:
            return self
        render.show(
            render.diagnostics(self._resolution.log, prog=self.name, colorful=self._colorful),
            console=self._console,
            stderr=True,
        )
        return self

    def parse(self, argv=Unset, /):
        tokens = list(coalesce(argv, sys.argv))
        self._argv0 = tokens[0] if tokens else None
        self._resolution = self._engine.resolve(tokens)
        return self._resolution.success

    def _helper(self, registry):
        render.show(
            render.help(registry, self.name, description=self._description, colorful=self._colorful),
            console=self._console,
        )

    def print(self):
        """
        render a table of the resolved values.
        """
        render.show(render.values(self.values, colorful=self._colorful, title=self.name), console=self._console)

    def serialize(self, path, format=None, /):
        """
        write the resolved values as a nested json document or flat csv lines.

        format is an ExportFormat (or "json"/"csv"); by default it follows the file
        extension and falls back to json.

        undeclared entries whose path conflicts with another key ("a" and
        "a.b") cannot be nested; they are left out of json output with a
        warning in the log.
        """
        values = self.values
        flat = dict(values)
        if ExportFormat.select(path, format) is ExportFormat.JSON:
            for key in values.strays:
                if not clashes(key, flat):
                    continue
                del flat[key]
                self._resolution.log.emit(warning(
                    key,
                    "undeclared entry conflicts with another key; left out of %s" % os.fspath(path),
                    code=FaultCode.EXPORT_CONFLICT,
                    hint="rename the entry or export as csv to keep it",
                ))
        dump(path, flat, format)

    def __getitem__(self, key, /):
        if self._resolution is None:
            return Value()
        return self._resolution.values.get(key)

    def __contains__(self, key, /):
        return self._resolution is not None and key in self._resolution.values

    def __repr__(self):
        return "config(name=%r, options=%r, parsed=%r)" % (
            self.name, tuple(self._registry), self._resolution is not None
        )


__all__ = (
    "Config",
)

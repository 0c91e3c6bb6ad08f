"""
Stratum document trees: the in-memory shape of a config file.

Model
- Scalar: a leaf holding one Value.
- Branch: an ordered key → node mapping (nodes are Scalars or Branches).
  Branch.skipped lists the dot paths dropped while building the tree from
  native data (arrays and nulls are not representable and are never partially
  flattened).

Operations
- flatten(branch) → {"a.b.c": Value, ...}, depth first, keys joined with ".".
- unflatten(mapping) → Branch, splitting dot paths and reusing intermediate
  branches. A path that is both a leaf and a prefix ("a" and "a.b") raises
  DocumentError.
- clashes(key, keys) tells whether `key` conflicts that way with any of `keys`.
- from_native(obj) / to_native(branch): convert from/to plain dict trees
  (what json.load produces and json.dump consumes).

Formats
- JSON: nested document (structured markup). The default for unknown or
  missing extensions.
- CSV: flat "key,value" lines. Values use Value.render(): decimal numbers,
  true/false, double-quoted text (embedded quotes doubled). Bare values are
  inferred back as bool, int, number, or text, in that order.

Readers are plain callables path → Branch, selected by extension through
reader_for(path, readers); the engine accepts any such table.
"""
import json
import os.path
from collections.abc import Mapping, MutableMapping
from enum import Enum

from .faults import DocumentError
from .values import DataType, INTEGER, NUMERIC, Value


class Scalar:
    """
    leaf node holding one Value (copied on the way in and out).
    """
    __slots__ = ("_value",)

    def __init__(self, value, /):
        self._value = Value(value)

    @property
    def value(self):
        return self._value.copy()

    @property
    def type(self):
        return self._value.type

    def __repr__(self):
        return "scalar(%s)" % self._value.render()


class Branch(MutableMapping):
    """
    ordered key → node mapping; the root of every document tree.
    """

    def __init__(self, items=(), /):
        self._children = {}
        self.skipped = []
        for key, node in dict(items).items():
            self[key] = node

    def __getitem__(self, key, /):
        return self._children[key]

    def __setitem__(self, key, node, /):
        if not isinstance(key, str) or not key:
            raise DocumentError("document keys must be non-empty strings")
        if not isinstance(node, (Scalar, Branch)):
            node = Scalar(node)
        self._children[key] = node

    def __delitem__(self, key, /):
        del self._children[key]

    def __iter__(self):
        return iter(self._children)

    def __len__(self):
        return len(self._children)

    def __repr__(self):
        return "branch(%s)" % ", ".join("%r: %r" % item for item in self._children.items())


def flatten(branch, /, prefix=""):
    """
    flatten a Branch into {dot.path: Value}, depth first in document order.
    """
    if not isinstance(branch, Branch):
        raise TypeError("flatten() argument must be a branch")
    flat = {}
    for key, node in branch.items():
        path = prefix + "." + key if prefix else key
        if isinstance(node, Branch):
            flat |= flatten(node, path)
        else:
            flat[path] = node.value
    return flat


def unflatten(mapping, /):
    """
    build a Branch from {dot.path: Value | scalar}.

    intermediate branches are created on first use and reused afterwards.
    """
    if not isinstance(mapping, Mapping):
        raise TypeError("unflatten() argument must be a mapping")
    root = Branch()
    for path, value in mapping.items():
        *parents, leaf = path.split(".")
        node = root
        for depth, segment in enumerate(parents):
            child = node.get(segment)
            if child is None:
                child = node[segment] = Branch()
            elif not isinstance(child, Branch):
                raise DocumentError(
                    "path %r crosses the value at %r" % (path, ".".join(parents[:depth + 1]))
                )
            node = child
        if isinstance(node.get(leaf), Branch):
            raise DocumentError("path %r is already a section of the document" % path)
        node[leaf] = Scalar(value)
    return root


def clashes(key, keys, /):
    """
    True when `key` and some other dot path in `keys` cannot share one document
    (one is the section of the other, as "a" and "a.b").
    """
    return any(
        other != key and (other.startswith(key + ".") or key.startswith(other + "."))
        for other in keys
    )


def from_native(object, /, prefix=""):
    """
    convert a plain dict tree into a Branch.

    arrays and nulls are skipped; their dot paths are collected in the
    returned branch's `skipped` list (nested skips bubble up to the root).
    """
    if not isinstance(object, Mapping):
        raise DocumentError("a document must be a mapping at its top level")
    branch = Branch()
    for key, item in object.items():
        key = str(key)
        path = prefix + "." + key if prefix else key
        if isinstance(item, Mapping):
            child = from_native(item, path)
            branch.skipped.extend(child.skipped)
            child.skipped = []
            branch[key] = child
        elif DataType.of(item) is DataType.UNKNOWN:
            branch.skipped.append(path)
        else:
            branch[key] = Scalar(item)
    return branch


def to_native(branch, /):
    """
    convert a Branch into a plain dict tree; empty scalars are omitted.
    """
    native = {}
    for key, node in branch.items():
        if isinstance(node, Branch):
            native[key] = to_native(node)
        elif not (value := node.value).empty:
            native[key] = value.native()
    return native


def parse_flat_value(raw, /):
    """
    infer a Value from one rendered CSV field.
    """
    raw = raw.strip()
    if len(raw) >= 2 and raw.startswith('"') and raw.endswith('"'):
        return Value(raw[1:-1].replace('""', '"'))
    if raw in ("true", "false"):
        return Value(raw == "true")
    if INTEGER.fullmatch(raw):
        return Value(int(raw))
    if NUMERIC.fullmatch(raw):
        return Value(float(raw))
    if raw:
        return Value(raw)
    return Value()


def read_json(path, /):
    with open(path, encoding="utf-8") as stream:
        try:
            object = json.load(stream)
        except (json.JSONDecodeError, UnicodeDecodeError) as exception:
            raise DocumentError("%s: %s" % (path, exception)) from None
    return from_native(object)


def read_csv(path, /):
    flat = {}
    skipped = []
    with open(path, encoding="utf-8") as stream:
        try:
            lines = stream.readlines()
        except UnicodeDecodeError as exception:
            raise DocumentError("%s: %s" % (path, exception)) from None
    for number, line in enumerate(lines, start=1):
        if not (line := line.strip()) or line.startswith("#"):
            continue
        key, separator, raw = line.partition(",")
        if not separator or not (key := key.strip()):
            raise DocumentError("%s:%d: expected a 'key,value' line" % (path, number))
        if (value := parse_flat_value(raw)).empty:
            skipped.append(key)
            continue
        flat[key] = value
    branch = unflatten(flat)
    branch.skipped = skipped
    return branch


def write_json(path, branch, /):
    try:
        text = json.dumps(to_native(branch), indent=4, allow_nan=False)
    except ValueError as exception:
        raise DocumentError("cannot write %s: %s" % (path, exception)) from None
    with open(path, "w", encoding="utf-8") as stream:
        stream.write(text + "\n")


def write_csv(path, flat, /):
    with open(path, "w", encoding="utf-8") as stream:
        for key, value in flat.items():
            if not (value := Value(value)).empty:
                stream.write("%s,%s\n" % (key, value.render()))


class ExportFormat(Enum):
    JSON = "json"
    CSV = "csv"

    @classmethod
    def of(cls, path, /):
        """
        guess the format from a file extension (JSON when unrecognized).
        """
        extension = os.path.splitext(os.fspath(path))[1].lower().lstrip(".")
        try:
            return cls(extension)
        except ValueError:
            return cls.JSON

    @classmethod
    def select(cls, path, format=None, /):
        """
        return `format` as an ExportFormat, or the one guessed from `path`.
        """
        return cls(format) if format is not None else cls.of(path)


READERS = {
    ".json": read_json,
    ".csv": read_csv,
}


def reader_for(path, readers=READERS, /):
    """
    pick the reader for `path` by extension, falling back to the JSON reader.
    """
    extension = os.path.splitext(os.fspath(path))[1].lower()
    try:
        return readers[extension]
    except KeyError:
        return readers.get(".json", read_json)


def load(path, readers=READERS, /):
    return reader_for(path, readers)(path)


def dump(path, flat, format=None, /):
    """
    write a flat {dot.path: Value} map as a nested JSON document or flat CSV.
    """
    match ExportFormat.select(path, format):
        case ExportFormat.CSV:
            write_csv(path, flat)
        case ExportFormat.JSON:
            write_json(path, unflatten(flat))


__all__ = (
    "Scalar",
    "Branch",
    "flatten",
    "unflatten",
    "clashes",
    "from_native",
    "to_native",
    "parse_flat_value",
    "read_json",
    "read_csv",
    "write_json",
    "write_csv",
    "ExportFormat",
    "READERS",
    "reader_for",
    "load",
    "dump",
)

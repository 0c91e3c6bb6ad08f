"""
Stratum values: the single-slot, tagged container every option resolves to.

Overview
- DataType: closed set of tags {UNKNOWN, INT, NUMBER, BOOL, TEXT}.
- Value: holds exactly one payload of the tagged type, or nothing (UNKNOWN).
  • Explicit accessors only (as_int/as_number/as_bool/as_text); a mismatch
    between accessor and tag raises TypeMismatchError.
  • No implicit conversions: int(value), float(value) and bool(value) are not
    supported, so type mistakes stay visible at the call site.
  • copy() duplicates the payload; move() hands it over and empties the source;
    assign() drops the old payload before taking the new one.
- Value.parse(token, datatype): the command-line conversion policy.

Rendering
- render(): canonical scalar text (ints decimal, numbers fixed-point, bools as
  true/false, text double-quoted).
- render_type(): tag name for usage lines and diagnostics.

Quick example:
    >>> value = Value(3.14)
    >>> value.type is DataType.NUMBER, value.as_number()
    (True, 3.14)
    >>> Value.parse("F", DataType.BOOL).as_bool()
    False
    >>> Value.parse("0", DataType.BOOL).as_bool()
    True
"""
import re
from enum import Enum

from rich.text import Text

from .faults import TypeMismatchError
from .utils import Unset

# decimal literal with optional sign, fraction and exponent ("-3", "-.5", "1e-3")
NUMERIC = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
INTEGER = re.compile(r"[+-]?[0-9]+")

# only these spellings parse to false; every other token is true
FALSEHOODS = frozenset(("false", "f"))


class DataType(Enum):
    """
    tags of the Value container.
    """
    UNKNOWN = "unknown"
    INT = "int"
    NUMBER = "number"
    BOOL = "bool"
    TEXT = "text"

    @classmethod
    def of(cls, payload, /):
        """
        return the tag a native payload would receive, or UNKNOWN.

        bool is checked before int since bool is an int subclass.
        """
        if isinstance(payload, bool):
            return cls.BOOL
        if isinstance(payload, int):
            return cls.INT
        if isinstance(payload, float):
            return cls.NUMBER
        if isinstance(payload, str):
            return cls.TEXT
        return cls.UNKNOWN


class Value:
    """
    Tagged, single-slot dynamic container.

    Construction
    - Value()            → UNKNOWN (empty)
    - Value(3)           → INT
    - Value(3.0)         → NUMBER
    - Value(True)        → BOOL
    - Value("text")      → TEXT
    - Value(other_value) → copy of other_value

    Anything else raises TypeError.
    """
    __slots__ = ("_type", "_data")

    def __init__(self, payload=Unset, /):
        self._type = DataType.UNKNOWN
        self._data = None
        if payload is not Unset:
            self.assign(payload)

    @classmethod
    def unknown(cls):
        return cls()

    @classmethod
    def parse(cls, token, datatype, /):
        """
        convert a command-line token to a Value of `datatype`.

        rules
        - INT: base-10 integer (optional sign); anything else → UNKNOWN.
        - NUMBER: decimal floating literal; anything else → UNKNOWN.
        - BOOL: "false"/"f" in any case → false; any other token → true
          (so "0" and "no" are true).
        - TEXT: always the literal token. UNKNOWN (no declared type) parses as
          TEXT as well.
        """
        if not isinstance(token, str):
            raise TypeError("parse() first argument must be a string")
        match DataType(datatype):
            case DataType.INT:
                return cls(int(token)) if INTEGER.fullmatch(token) else cls()
            case DataType.NUMBER:
                return cls(float(token)) if NUMERIC.fullmatch(token) else cls()
            case DataType.BOOL:
                return cls(token.lower() not in FALSEHOODS)
            case _:
                return cls(token)

    @property
    def type(self):
        return self._type

    @property
    def empty(self):
        """
        True when the value is UNKNOWN or holds no payload.
        """
        return self._type is DataType.UNKNOWN or self._data is None

    def assign(self, payload, /):
        """
        replace the payload (and tag) in place and return self.

        the previous payload is released before the new one is taken, so a
        Value never holds two payloads at once.
        """
        if isinstance(payload, Value):
            if payload is self:
                return self
            datatype, data = payload._type, payload._data
        elif (datatype := DataType.of(payload)) is DataType.UNKNOWN:
            raise TypeError("unsupported payload type %r for a value" % type(payload).__name__)
        else:
            data = payload

        self._release()
        self._type = datatype
        self._data = data
        return self

    def copy(self):
        """
        return an independent Value with the same tag and payload.
        """
        return type(self)(self)

    def move(self):
        """
        hand the payload over to a new Value and leave this one empty.
        """
        other = type(self)()
        other._type, other._data = self._type, self._data
        self._release()
        return other

    def _release(self):
        self._type = DataType.UNKNOWN
        self._data = None

    def _expect(self, datatype, accessor):
        if self._type is not datatype:
            raise TypeMismatchError(
                "%s() called on a %s value" % (accessor, self._type.value)
            )
        return self._data

    def as_int(self):
        return self._expect(DataType.INT, "as_int")

    def as_number(self):
        return self._expect(DataType.NUMBER, "as_number")

    def as_bool(self):
        return self._expect(DataType.BOOL, "as_bool")

    def as_text(self):
        return self._expect(DataType.TEXT, "as_text")

    def native(self):
        """
        return the raw payload (None when empty).
        """
        return self._data

    def render(self):
        """
        canonical scalar rendering used by tables and flat serialization.
        """
        match self._type:
            case DataType.INT:
                return "%d" % self._data
            case DataType.NUMBER:
                return "%f" % self._data
            case DataType.BOOL:
                return "true" if self._data else "false"
            case DataType.TEXT:
                return '"%s"' % self._data.replace('"', '""')
            case _:
                return ""

    def render_type(self):
        return self._type.value

    def __copy__(self):
        return self.copy()

    def __deepcopy__(self, memo, /):
        return self.copy()

    def __int__(self):
        raise TypeMismatchError("values do not convert implicitly; use as_int()")

    def __float__(self):
        raise TypeMismatchError("values do not convert implicitly; use as_number()")

    def __bool__(self):
        raise TypeMismatchError("values do not convert implicitly; use as_bool() or empty")

    def __str__(self):
        return self.render()

    def __repr__(self):
        if self.empty:
            return "value(unknown)"
        return "value(%s, %s)" % (self._type.value, self.render())

    def __rich__(self):
        style = {
            DataType.INT: "bold #FFD600",
            DataType.NUMBER: "bold #FFD600",
            DataType.BOOL: "bold #22C55E",
            DataType.TEXT: "#36C5F0",
        }.get(self._type, "dim")
        return Text(self.render() if not self.empty else "(unknown)", style)


__all__ = (
    "DataType",
    "Value",
)

r"""
Stratum token classifier.

classify(token) sorts one command-line token into a TokenKind, in this order:

1. ""                         → UNKNOWN
2. starts with "-":
   a. whole token is a decimal number ("-3", "-3.14", "-1e5") → VALUE
   b. starts with "--"        → LONG_FLAG  (key = token[2:])
   c. otherwise               → SHORT_FLAG (key = token[1:])
   a flag with nothing after its dashes ("-", "--") is UNKNOWN
3. anything else              → VALUE

The numeric check runs before the prefix checks so a negative number can be
passed as the value of the preceding flag:

    >>> classify("-3.14")
    Token(kind=<TokenKind.VALUE: 'value'>, key='-3.14')
    >>> classify("--foo").key, classify("-f").kind.name
    ('foo', 'SHORT_FLAG')
"""
from enum import Enum
from typing import NamedTuple

from .values import NUMERIC


class TokenKind(Enum):
    UNKNOWN = "unknown"
    LONG_FLAG = "long-flag"
    SHORT_FLAG = "short-flag"
    VALUE = "value"

    @property
    def flag(self):
        return self in (TokenKind.LONG_FLAG, TokenKind.SHORT_FLAG)


class Token(NamedTuple):
    kind: TokenKind
    key: str


def classify(token, /):
    """
    classify one command-line token.

    returns
    - Token(kind, key): key is the flag name without dashes for flags, the raw
      token for values and unknown tokens.
    """
    if not isinstance(token, str):
        raise TypeError("classify() argument must be a string")

    if not token:
        return Token(TokenKind.UNKNOWN, token)

    if not token.startswith("-"):
        return Token(TokenKind.VALUE, token)

    if NUMERIC.fullmatch(token):
        return Token(TokenKind.VALUE, token)

    if token.startswith("--"):
        kind, key = TokenKind.LONG_FLAG, token[2:]
    else:
        kind, key = TokenKind.SHORT_FLAG, token[1:]

    # bare dashes name nothing
    if not key:
        return Token(TokenKind.UNKNOWN, token)
    return Token(kind, key)


__all__ = (
    "TokenKind",
    "Token",
    "classify",
)

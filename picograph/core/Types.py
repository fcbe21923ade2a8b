import re
from enum import Enum
from typing import Any


class PinDirection(Enum):
    INPUT = "input"
    OUTPUT = "output"


class PinKind(Enum):
    EXEC = "exec"
    NUMBER = "number"
    BOOLEAN = "boolean"
    STRING = "string"
    TABLE = "table"
    ANY = "any"

    @property
    def is_exec(self) -> bool:
        return self is PinKind.EXEC

    @staticmethod
    def compatible(source: 'PinKind', target: 'PinKind') -> bool:
        # exec only ever connects to exec; "any" absorbs every data kind
        if source.is_exec or target.is_exec:
            return source is target
        if source is PinKind.ANY or target is PinKind.ANY:
            return True
        return source is target

    @staticmethod
    def parse(value: Any) -> 'PinKind':
        if isinstance(value, PinKind):
            return value
        try:
            return PinKind(str(value).strip().lower())
        except ValueError:
            return PinKind.ANY


class Omitted:
    """
    Marker for an argument slot the user left empty.

    There is exactly one instance, ``OMIT``. It never compares equal to any
    Lua expression string, so user data can not be mistaken for it.
    """
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "OMIT"

    def __bool__(self):
        return False


OMIT = Omitted()


LIFECYCLE_EVENTS = ("_init", "_update", "_update60", "_draw")

# PICO-8 number literals: decimal, hex and binary, with optional fraction
NUMERIC_TEXT = re.compile(
    r"^-?(?:0x[0-9a-f]+(?:\.[0-9a-f]*)?|0b[01]+(?:\.[01]*)?|\d+(?:\.\d*)?|\.\d+)$",
    re.IGNORECASE,
)

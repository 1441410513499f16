"""
Errors raised while compiling a signature and while binding a call.

Definition-time problems are SignatureErrors and keep the routine from
ever becoming callable. Call-time problems are ArgumentErrors; they are
reported against the caller's file and line rather than anything inside
this package.
"""

import sys
from typing import Iterable, Optional, Tuple

ANON = "__ANON__"


class SignatureError(Exception):
    """A signature that cannot be compiled."""
    def __init__(self, reason: str, *params: str):
        self.reason = reason
        self.params: Tuple[str, ...] = tuple(params)
        super().__init__(self._format())

    def _format(self) -> str:
        match self.params:
            case ():
                return self.reason
            case (one,):
                return f"{self.reason}: {one}"
            case (first, second, *_):
                return f"{self.reason}: {first} and {second}"


class MalformedSignature(SignatureError):
    """Signature text that does not tokenize or parse."""
    def __init__(self, reason: str, text: Optional[str] = None):
        self.text = text
        if text is not None:
            reason = f"{reason} in {text!r}"
        super().__init__(reason)


class ArgumentError(TypeError):
    """Base class for failures binding a call's arguments."""
    def __init__(self, reason: str, routine: Optional[str] = None, location: Optional[Tuple[str, int]] = None):
        self.reason = reason
        self.routine = routine or ANON
        self.filename, self.lineno = location if location else caller_location()
        super().__init__(f"{self.routine}() {reason} at {self.filename} line {self.lineno}.")


class MissingArgument(ArgumentError):
    def __init__(self, name: str, routine: Optional[str] = None, location=None):
        self.name = name
        super().__init__(f"missing required argument {name}", routine, location)


class UnexpectedNamedArgument(ArgumentError):
    def __init__(self, keys: Iterable, routine: Optional[str] = None, location=None):
        self.keys = tuple(keys)
        shown = ", ".join(str(k) for k in self.keys)
        super().__init__(f"does not take {shown} as named argument(s)", routine, location)


class MalformedNamedArguments(ArgumentError):
    def __init__(self, count: int, target: Optional[str] = None, routine: Optional[str] = None, location=None):
        self.count = count
        self.target = target
        what = f" for {target}" if target else ""
        super().__init__(f"got an odd number of key/value elements ({count}){what}", routine, location)


class NotAReference(ArgumentError):
    def __init__(self, name: str, expected: str, got: object, routine: Optional[str] = None, location=None):
        self.name = name
        self.expected = expected
        super().__init__(f"expected {expected} for {name}, got {type(got).__name__}", routine, location)


# =================================================================
# Caller attribution
# =================================================================

_PACKAGE = __name__.rpartition(".")[0] or "methsig"


def _is_internal(frame) -> bool:
    module = frame.f_globals.get("__name__", "")
    return module == _PACKAGE or module.startswith(_PACKAGE + ".")


def caller_location(depth: int = 1) -> Tuple[str, int]:
    """Returns (filename, line) of the first frame outside this package.

    Starts `depth` frames above this function and walks outward, so
    errors raised deep inside the binder still point at the call site.
    """
    try:
        frame = sys._getframe(depth)
    except ValueError:
        return ("<unknown>", 0)
    while frame is not None and _is_internal(frame):
        frame = frame.f_back
    if frame is None:
        return ("<unknown>", 0)
    return (frame.f_code.co_filename, frame.f_lineno)

"""
Defines the core data types for signature compilation.

This module provides the parsed parameter descriptor, the assembled
signature model, and the binding plan the compiler lowers a signature
into. All of them are built once, at definition time, and are read-only
afterwards.
"""

from dataclasses import dataclass, field
from types import CodeType
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Tuple

SCALAR = "scalar"
ARRAY = "array"
HASH = "hash"

SIGILS = {"$": SCALAR, "@": ARRAY, "%": HASH}
SIGIL_CHARS = {v: k for k, v in SIGILS.items()}

POSITIONAL = "positional"
NAMED = "named"

# Binding modes
COPY = "copy"
ALIAS = "alias"
READONLY = "ro"

# Step sources
FROM_INVOCANT = "invocant"
FROM_INDEX = "index"
FROM_SLURP = "slurp"
FROM_DEREF = "deref"
FROM_NAMED = "named"

RAW_ARGS = "@_"


class Ref:
    """A mutable handle to a scalar, used for `\\$name` parameters.

    Python has no way to rebind a caller's variable, so a scalar alias
    binds the handle itself. Writes through `.value` are seen by
    everyone holding the same Ref.
    """
    __slots__ = ("value",)

    def __init__(self, value: Any = None):
        self.value = value

    def __repr__(self) -> str:
        return f"Ref({self.value!r})"

    def __eq__(self, other):
        if not isinstance(other, Ref):
            return NotImplemented
        return self is other or self.value == other.value

    __hash__ = object.__hash__


@dataclass(frozen=True)
class Parameter:
    """One parsed parameter clause."""
    name: str
    sigil: str
    role: str = POSITIONAL
    index: Optional[int] = None
    is_ref_alias: bool = False
    traits: FrozenSet[str] = frozenset()
    default: Optional[str] = None
    optional_mark: bool = False
    required_mark: bool = False
    is_at_underscore: bool = False
    text: str = ""

    @property
    def var(self) -> str:
        """The parameter as spelled in the signature, e.g. `$this`."""
        return SIGIL_CHARS[self.sigil] + self.name

    @property
    def is_named(self) -> bool:
        return self.role == NAMED

    @property
    def is_slurpy(self) -> bool:
        if self.is_at_underscore:
            return False
        return self.sigil in (ARRAY, HASH) and not self.is_ref_alias

    @property
    def is_optional(self) -> bool:
        if self.required_mark:
            return False
        return self.optional_mark or self.default is not None or self.is_named

    @property
    def is_alias(self) -> bool:
        return self.is_ref_alias or "alias" in self.traits

    @property
    def is_readonly(self) -> bool:
        return "ro" in self.traits

    def __repr__(self) -> str:
        extra = f", default={self.default!r}" if self.default is not None else ""
        where = ":" if self.is_named else f"#{self.index}"
        return f"Parameter({where}{self.var}{extra})"


@dataclass
class Signature:
    """The assembled signature of one routine.

    Filled in parameter by parameter by the assembler, which keeps the
    ordering invariants; treated as immutable once assembly finishes.
    """
    invocant: Optional[str] = None
    positional: List[Parameter] = field(default_factory=list)
    named: List[Parameter] = field(default_factory=list)

    @property
    def has_invocant(self) -> bool:
        return self.invocant is not None

    @property
    def has_named(self) -> bool:
        return bool(self.named)

    @property
    def has_positional(self) -> bool:
        return bool(self.positional)

    @property
    def has_optional_positional(self) -> bool:
        return any(p.is_optional for p in self.bindable_positional)

    @property
    def slurpy_count(self) -> int:
        return sum(1 for p in self.parameters if p.is_slurpy)

    @property
    def bindable_positional(self) -> List[Parameter]:
        return [p for p in self.positional if not p.is_at_underscore]

    @property
    def parameters(self) -> List[Parameter]:
        """All parameters in declaration order (positionals always precede named)."""
        return self.positional + self.named

    @property
    def takes_raw_args(self) -> bool:
        return any(p.is_at_underscore for p in self.positional)

    def __repr__(self) -> str:
        return f"Signature(invocant={self.invocant!r}, pos={self.positional!r}, named={self.named!r})"


@dataclass(frozen=True)
class BindStep:
    """A single binding operation of a compiled plan."""
    target: str
    var: str
    sigil: str
    source: str
    index: Optional[int] = None
    key: Optional[str] = None
    required: bool = False
    default: Optional[CodeType] = None
    default_text: Optional[str] = None
    mode: str = COPY
    # The argument must be a reference of the sigil's kind (`\@x`, `:\%h`)
    deref: bool = False

    @property
    def has_default(self) -> bool:
        return self.default is not None


@dataclass(frozen=True)
class BindingPlan:
    """An ordered, immutable list of binding steps for one signature.

    `named_start` is the argument index at which the key/value tail of
    named arguments begins, or None when the signature has no named
    parameters.
    """
    steps: Tuple[BindStep, ...]
    name: str = "__ANON__"
    named_start: Optional[int] = None
    has_invocant: bool = False
    takes_raw_args: bool = False
    env_globals: Mapping[str, Any] = field(default_factory=dict, repr=False, compare=False)
    env_locals: Mapping[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @property
    def has_named(self) -> bool:
        return self.named_start is not None

    @property
    def targets(self) -> List[str]:
        return [s.target for s in self.steps]

    def bind(self, args, kwargs: Optional[Dict[str, Any]] = None, *, routine: Optional[str] = None) -> Dict[str, Any]:
        """Bind an argument list, returning the bound names in plan order."""
        from methsig.methsig_interpreter import Binder  # local import to avoid cycle
        return Binder(self).bind(args, kwargs, routine=routine)

    def __str__(self) -> str:
        from methsig.methsig_printer import Printer
        return Printer().pformat(self)

"""
Executes a compiled BindingPlan against one call's arguments.

A Binder holds no state between calls: every call builds its own
mapping of bound names and hands it back only if every step succeeded,
so one plan can serve any number of concurrent calls.
"""

import collections.abc
from types import MappingProxyType
from typing import Any, Dict, Optional, Sequence

from methsig.methsig_datatypes import (
    BindingPlan, BindStep, Ref,
    ARRAY, HASH, SCALAR, ALIAS, READONLY,
    FROM_INVOCANT, FROM_SLURP, FROM_NAMED,
)
from methsig.methsig_errors import (
    MissingArgument, UnexpectedNamedArgument, MalformedNamedArguments, NotAReference
)

_REF_KINDS = {
    ARRAY: (collections.abc.MutableSequence, "a list"),
    HASH: (collections.abc.MutableMapping, "a dict"),
    SCALAR: (Ref, "a Ref"),
}


def freeze(value: Any) -> Any:
    """Returns a read-only view of `value` for `is ro` parameters."""
    match value:
        case list() | tuple():
            return tuple(value)
        case dict() | MappingProxyType():
            return MappingProxyType(dict(value))
        case set() | frozenset():
            return frozenset(value)
        case _:
            return value


def pairs_to_dict(items: Sequence, target: Optional[str] = None, routine: Optional[str] = None) -> Dict[Any, Any]:
    if len(items) % 2:
        raise MalformedNamedArguments(len(items), target, routine)
    return dict(zip(items[0::2], items[1::2]))


class Binder:
    def __init__(self, plan: BindingPlan):
        self.plan = plan

    def bind(self, args, kwargs: Optional[Dict[str, Any]] = None, *, routine: Optional[str] = None) -> Dict[str, Any]:
        """Runs every step of the plan, returning {local name: value}."""
        plan = self.plan
        routine = routine or plan.name
        args = tuple(args)
        bound: Dict[str, Any] = {}
        named: Optional[Dict[Any, Any]] = None

        if kwargs and not plan.has_named:
            raise UnexpectedNamedArgument(kwargs.keys(), routine)
        if plan.has_named:
            tail = args[plan.named_start + (1 if plan.has_invocant else 0):]
            named = pairs_to_dict(tail, routine=routine)
            named.update(kwargs or {})

        for step in plan.steps:
            if step.source == FROM_INVOCANT:
                if not args:
                    raise MissingArgument(step.var, routine)
                bound[step.target] = args[0]
                args = args[1:]
                continue

            if self._present(step, args, named):
                value = self._fetch(step, args, named, routine)
            elif step.required:
                raise MissingArgument(step.var, routine)
            elif step.has_default:
                value = self._default(step, bound)
            else:
                value = self._empty(step)
            bound[step.target] = self._apply_mode(step, value)

        if named:
            raise UnexpectedNamedArgument(named.keys(), routine)
        return bound

    def _present(self, step: BindStep, args: tuple, named) -> bool:
        if step.source == FROM_NAMED:
            return step.key in named
        return len(args) > step.index

    def _fetch(self, step: BindStep, args: tuple, named, routine: str) -> Any:
        if step.source == FROM_SLURP:
            rest = args[step.index:]
            if step.sigil == HASH:
                return pairs_to_dict(rest, step.var, routine)
            return list(rest)
        if step.source == FROM_NAMED:
            value = named.pop(step.key)
        else:
            value = args[step.index]
        if step.deref:
            kind, expected = _REF_KINDS[step.sigil]
            if not isinstance(value, kind):
                raise NotAReference(step.var, expected, value, routine)
        return value

    def _default(self, step: BindStep, bound: Dict[str, Any]) -> Any:
        # One flat namespace: lambdas and comprehensions in a default
        # resolve free names through globals only
        scope = {**self.plan.env_globals, **self.plan.env_locals, **bound}
        value = eval(step.default, scope)
        if step.sigil == ARRAY and not isinstance(value, list):
            value = list(value)
        elif step.sigil == HASH and not isinstance(value, dict):
            value = dict(value)
        return value

    def _empty(self, step: BindStep) -> Any:
        if step.sigil == ARRAY:
            return []
        if step.sigil == HASH:
            return {}
        return None

    def _apply_mode(self, step: BindStep, value: Any) -> Any:
        if step.mode == ALIAS or value is None:
            return value
        if step.sigil == ARRAY and step.source == FROM_NAMED:
            value = list(value)
        elif step.sigil == HASH and step.source == FROM_NAMED:
            value = dict(value)
        if step.mode == READONLY:
            return freeze(value)
        return value

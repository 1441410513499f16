"""
A pretty-printer for signatures and binding plans.

Plans are rendered as the Python prelude they stand for, one line per
step, which is what debug tracing shows.
"""

from methsig.methsig_datatypes import (
    Parameter, Signature, BindStep, BindingPlan,
    HASH, ALIAS, READONLY,
    FROM_INVOCANT, FROM_SLURP, FROM_DEREF, FROM_NAMED,
)


class Printer:
    """Formats methsig objects into readable strings."""

    def __init__(self, indent_width=4):
        self._indent_char = " " * indent_width
        self._handlers = self._create_handlers()

    def pformat(self, obj, level=0):
        """Public entry point to format an object."""
        handler = self._handlers.get(type(obj))
        if handler is None:
            return repr(obj)
        return handler(obj, level)

    def _create_handlers(self):
        return {
            BindingPlan: self._pformat_plan,
            BindStep: self._pformat_step,
            Signature: self._pformat_signature,
            Parameter: self._pformat_parameter,
        }

    def _pformat_plan(self, plan, level):
        indent = self._indent_char * level
        lines = []
        named_emitted = False
        for step in plan.steps:
            if step.source == FROM_NAMED and not named_emitted:
                lines.append(f"named = pairs(args[{plan.named_start}:])")
                named_emitted = True
            lines.append(self._pformat_step(step, 0))
        if plan.has_named:
            lines.append("reject(named)")
        if plan.takes_raw_args:
            lines.append("_ = args")
        if not lines:
            return f"{indent}pass"
        return "\n".join(indent + line for line in lines)

    def _pformat_step(self, step, level):
        indent = self._indent_char * level
        if step.source == FROM_INVOCANT:
            return f"{indent}{step.target} = shift(args)"

        rhs = self._source_expr(step)
        if step.has_default:
            rhs = f"{rhs} if {self._presence_expr(step)} else ({step.default_text})"
        elif step.required:
            rhs = f"{rhs} if {self._presence_expr(step)} else missing({step.var!r})"
        if step.mode == ALIAS:
            rhs = f"alias({rhs})"
        elif step.mode == READONLY:
            rhs = f"freeze({rhs})"
        return f"{indent}{step.target} = {rhs}"

    def _source_expr(self, step):
        if step.source == FROM_NAMED:
            if step.deref:
                return f"deref(named.pop({step.key!r}))"
            return f"named.pop({step.key!r})"
        if step.source == FROM_SLURP:
            if step.sigil == HASH:
                return f"pairs(args[{step.index}:])"
            return f"list(args[{step.index}:])"
        if step.source == FROM_DEREF:
            return f"deref(args[{step.index}])"
        return f"args[{step.index}]"

    def _presence_expr(self, step):
        if step.source == FROM_NAMED:
            return f"{step.key!r} in named"
        return f"len(args) > {step.index}"

    def _pformat_signature(self, sig, level):
        parts = [self._pformat_parameter(p, level) for p in sig.parameters]
        body = ", ".join(parts)
        if sig.has_invocant:
            body = f"{sig.invocant}: {body}" if body else f"{sig.invocant}:"
        return f"({body})"

    def _pformat_parameter(self, param, level):
        if param.is_at_underscore:
            return "@_"
        text = param.var
        if param.is_ref_alias:
            text = "\\" + text
        if param.is_named:
            text = ":" + text
        if param.required_mark:
            text += "!"
        elif param.optional_mark:
            text += "?"
        for trait in sorted(param.traits):
            text += f" is {trait}"
        if param.default is not None:
            text += f" = {param.default}"
        return text

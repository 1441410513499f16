"""
Lowers a validated Signature into a BindingPlan.

`compile_signature` is the single entry point used by the declaration
layer: signature text in, immutable plan out, or a SignatureError.
"""

import os
import sys
from dataclasses import dataclass, field
from types import CodeType
from typing import Any, Mapping, Optional

from methsig.methsig_datatypes import (
    Parameter, Signature, BindStep, BindingPlan,
    SCALAR, COPY, ALIAS, READONLY,
    FROM_INVOCANT, FROM_INDEX, FROM_SLURP, FROM_DEREF, FROM_NAMED,
)
from methsig.methsig_errors import ANON, MalformedSignature, SignatureError
from methsig.methsig_parser import python_name, split_proto
from methsig.methsig_transformer import SignatureAssembler, SignatureTransformer


@dataclass
class CompileOptions:
    """How one signature is compiled.

    `invocant` is the implied invocant of a method-style signature
    (e.g. "$self"), or None for plain functions. `env_globals` and
    `env_locals` are the namespace default expressions are evaluated in.
    """
    invocant: Optional[str] = None
    allow_alias: bool = True
    name: str = ANON
    env_globals: Mapping[str, Any] = field(default_factory=dict)
    env_locals: Mapping[str, Any] = field(default_factory=dict)
    debug: bool = field(default_factory=lambda: bool(os.environ.get("METHSIG_DEBUG")))


def _dbg(options: CompileOptions, *parts):
    if options.debug:
        print("[DBG]", *parts, file=sys.stderr)


def parse_signature(text: str, options: Optional[CompileOptions] = None) -> Signature:
    """Splits, parses and assembles signature text into a Signature."""
    options = options or CompileOptions()
    transformer = SignatureTransformer()
    trees = [transformer.parse_clause(clause) for clause in split_proto(text)]
    invocant, nodes = transformer.take_invocant(trees, options.invocant)
    assembler = SignatureAssembler(invocant)
    for node in nodes:
        _dbg(options, "clause:", node["text"].strip())
        param = assembler.add(transformer.transform_clause(node))
        _dbg(options, "param:", repr(param))
    return assembler.signature


class PlanCompiler:
    def __init__(self, options: Optional[CompileOptions] = None):
        self.options = options or CompileOptions()

    def compile(self, sig: Signature) -> BindingPlan:
        steps = []
        if sig.has_invocant:
            steps.append(BindStep(
                target=python_name(sig.invocant.lstrip("$")),
                var=sig.invocant,
                sigil=SCALAR,
                source=FROM_INVOCANT,
                required=True,
            ))
        for param in sig.bindable_positional:
            steps.append(self._step_for(param))
        for param in sig.named:
            steps.append(self._step_for(param))

        return BindingPlan(
            steps=tuple(steps),
            name=self.options.name,
            named_start=len(sig.positional) if sig.has_named else None,
            has_invocant=sig.has_invocant,
            takes_raw_args=sig.takes_raw_args,
            env_globals=self.options.env_globals,
            env_locals=self.options.env_locals,
        )

    def _step_for(self, param: Parameter) -> BindStep:
        if param.is_named:
            source = FROM_NAMED
        elif param.is_ref_alias:
            source = FROM_DEREF
        elif param.is_slurpy:
            source = FROM_SLURP
        else:
            source = FROM_INDEX

        default = None
        if param.default is not None:
            default = self._compile_default(param)

        return BindStep(
            target=python_name(param.name),
            var=param.var,
            sigil=param.sigil,
            source=source,
            index=param.index,
            key=param.name if param.is_named else None,
            required=not param.is_optional and not param.is_slurpy,
            default=default,
            default_text=param.default,
            mode=self._mode_for(param),
            deref=param.is_ref_alias,
        )

    def _mode_for(self, param: Parameter) -> str:
        if param.is_alias:
            if not self.options.allow_alias:
                raise SignatureError(f"The alias trait was used on {param.var}, but aliasing is not available")
            return ALIAS
        if param.is_readonly:
            return READONLY
        return COPY

    def _compile_default(self, param: Parameter) -> CodeType:
        source = SignatureTransformer().transform_default(param.default)
        try:
            return compile(source, f"<default for {param.var}>", "eval")
        except SyntaxError as e:
            raise MalformedSignature(f"invalid default for {param.var} ({e.msg})", param.text) from e


def compile_signature(text: str, options: Optional[CompileOptions] = None) -> BindingPlan:
    """Compiles signature text into a BindingPlan.

    Raises SignatureError (or MalformedSignature) if the text cannot
    be compiled.
    """
    options = options or CompileOptions()
    sig = parse_signature(text, options)
    plan = PlanCompiler(options).compile(sig)
    if options.debug:
        from methsig.methsig_printer import Printer
        _dbg(options, f"plan for {options.name}():\n" + Printer().pformat(plan))
    return plan

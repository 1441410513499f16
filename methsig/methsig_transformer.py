"""
Transforms parameter-clause parse trees into Parameters, and assembles
them into a Signature, checking each one against what has been
accepted so far.
"""

import dataclasses
from typing import Iterable, List, Optional, Set, Tuple

from methsig.methsig_datatypes import (
    Parameter, Signature, SIGILS, ARRAY, NAMED, POSITIONAL
)
from methsig.methsig_errors import MalformedSignature, SignatureError
from methsig.methsig_parser import (
    SignatureParser, PARAM_GRAMMAR, find_nodes, first_node, node_offset, python_name
)

# Preceding characters after which `@name`/`%name` is an operand, not an operator
_OPERAND_LEAD = frozenset("([{,=:")


class SignatureTransformer:
    def __init__(self):
        self.parser = SignatureParser(PARAM_GRAMMAR)

    def parse_clause(self, clause: str) -> dict:
        return self.parser.parse(clause.strip(), start_rule="clause")

    def invocant_of(self, tree: dict) -> Optional[str]:
        node = first_node(tree, "invocant_name")
        if node is None:
            return None
        name = node["text"]
        return name if name.startswith("$") else "$" + name

    def take_invocant(self, trees: List[dict], default: Optional[str]) -> Tuple[Optional[str], List[dict]]:
        """Strips an `IDENT:` invocant prefix from the first clause.

        Only method-style signatures (`default` is not None) may carry one.
        Returns the invocant and the `parameter` nodes left to transform.
        """
        invocant = default
        for i, tree in enumerate(trees):
            name = self.invocant_of(tree)
            if name is None:
                continue
            if default is None:
                raise MalformedSignature(f"invocant {name} given outside a method", tree["text"])
            if i:
                raise MalformedSignature(f"invocant {name} must come first", tree["text"])
            invocant = name
        params = [first_node(tree, "parameter") for tree in trees]
        return invocant, [p for p in params if p is not None]

    def transform_clause(self, node: dict) -> Parameter:
        """Lowers a clause (or its `parameter` node) into a Parameter.

        The index of a positional parameter is left unset; the assembler
        numbers positionals as it accepts them.
        """
        text = node["text"].strip()
        if first_node(node, "raw_args") is not None:
            return Parameter(name="_", sigil=ARRAY, is_at_underscore=True, text=text)

        param = first_node(node, "param")
        mark = first_node(param, "mark")
        mark = mark["text"] if mark else ""
        default = first_node(param, "expression")
        return Parameter(
            name=first_node(param, "ident")["text"],
            sigil=SIGILS[first_node(param, "sigil")["text"]],
            role=NAMED if first_node(param, "named_mark") else POSITIONAL,
            is_ref_alias=first_node(param, "ref_mark") is not None,
            traits=frozenset(t["text"] for t in find_nodes(param, "trait_name")),
            default=default["text"].strip() if default else None,
            optional_mark=mark == "?",
            required_mark=mark == "!",
            text=text,
        )

    def transform_default(self, expr: str) -> str:
        """Rewrites `$name` references in a default expression to local names.

        `@name` and `%name` are rewritten only where they stand as operands,
        so `a % b` keeps its meaning. String literals are left alone, apart
        from the replacement fields of f-strings.
        """
        tree = self.parser.parse(expr, start_rule="expression")
        refs = sorted(find_nodes(tree, "var_ref"), key=lambda n: (n["line"], n["col"]))
        out = []
        pos = 0
        for ref in refs:
            start = node_offset(expr, ref)
            if ref["text"][0] != "$":
                lead = expr[:start].rstrip()
                if lead and lead[-1] not in _OPERAND_LEAD:
                    continue
            out.append(expr[pos:start])
            out.append(python_name(ref["text"][1:]))
            pos = start + len(ref["text"])
        out.append(expr[pos:])
        return "".join(out)


def parse_param(clause: str) -> Parameter:
    """Parses one clause such as `:$name is ro = 'x'` into a Parameter."""
    transformer = SignatureTransformer()
    tree = transformer.parse_clause(clause)
    if transformer.invocant_of(tree) is not None:
        raise MalformedSignature("invocant prefix in a parameter clause", clause.strip())
    return transformer.transform_clause(tree)


def desigil(expr: str) -> str:
    return SignatureTransformer().transform_default(expr)


class SignatureAssembler:
    def __init__(self, invocant: Optional[str] = None):
        self.signature = Signature(invocant=invocant)
        self._index = 0
        self._seen: Set[str] = set()
        if invocant is not None:
            self._seen.add(python_name(invocant.lstrip("$")))

    def assemble(self, params: Iterable[Parameter]) -> Signature:
        for param in params:
            self.add(param)
        return self.signature

    def add(self, param: Parameter) -> Parameter:
        """Checks `param` against the accepted parameters and appends it."""
        if not param.is_named:
            param = dataclasses.replace(param, index=self._index)
            self._index += 1
        if param.is_at_underscore:
            # Raw-args passthrough takes a position but is otherwise inert
            self.signature.positional.append(param)
            return param

        self.check(param)
        self._seen.add(python_name(param.name))
        if param.is_named:
            self.signature.named.append(param)
        else:
            self.signature.positional.append(param)
        return param

    def check(self, param: Parameter):
        sig = self.signature
        if param.is_slurpy and sig.slurpy_count >= 1:
            raise SignatureError("multiple slurpy parameters", self._slurpy().var, param.var)

        if param.is_named:
            if sig.has_optional_positional:
                optional = [p for p in sig.bindable_positional if p.is_optional][-1]
                raise SignatureError("named parameter mixed with optional positional", param.var, optional.var)
        elif sig.has_named:
            raise SignatureError("positional parameter after named parameter", param.var, sig.named[-1].var)

        if param.required_mark and param.default is not None:
            raise SignatureError("required parameter with a default", param.var)
        if python_name(param.name) in self._seen:
            raise SignatureError("duplicate parameter", param.var)

    def _slurpy(self) -> Parameter:
        return next(p for p in self.signature.parameters if p.is_slurpy)

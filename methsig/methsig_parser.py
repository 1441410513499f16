"""
Runs the koine grammars that describe signature text.

`methsig_proto.yaml` only cuts a signature into top-level clauses, since
default expressions routinely contain commas of their own.
`methsig_param.yaml` describes a single clause, down to the tokens of
its default expression. Lowering the parse trees into Parameters is
the transformer's job.
"""

import keyword
from pathlib import Path
from typing import Dict, Iterator, List, Optional

from koine import Parser

from methsig.methsig_errors import MalformedSignature

GRAMMAR_DIR = Path(__file__).parent / "grammar"
PROTO_GRAMMAR = "methsig_proto"
PARAM_GRAMMAR = "methsig_param"


class SignatureParser:
    """Parses text with one of the signature grammars.

    Compiled grammars are cached on the class, so creating a parser is cheap.
    """

    _grammars: Dict[str, Parser] = {}

    def __init__(self, grammar: str = PARAM_GRAMMAR):
        if grammar not in SignatureParser._grammars:
            grammar_path = GRAMMAR_DIR / f"{grammar}.yaml"
            SignatureParser._grammars[grammar] = Parser.from_file(str(grammar_path))
        self.grammar = grammar
        self.parser = SignatureParser._grammars[grammar]

    def parse(self, text: str, start_rule: Optional[str] = None) -> dict:
        """Returns the koine AST for `text`, or raises MalformedSignature."""
        parse_out = self.parser.parse(text, start_rule=start_rule)
        if parse_out.get("status") != "success":
            raise MalformedSignature(parse_out.get("message") or "syntax error", text)
        ast = parse_out["ast"]
        if isinstance(ast, list) and len(ast) == 1:
            ast = ast[0]
        return ast


def find_nodes(node, tag: str) -> Iterator[dict]:
    """Yields the AST nodes tagged `tag`, without descending into a match."""
    match node:
        case list():
            for item in node:
                yield from find_nodes(item, tag)
        case {"tag": found} if found == tag:
            yield node
        case {"tag": _}:
            yield from find_nodes(node.get("children") or [], tag)
        case dict():
            # Named children
            yield from find_nodes(list(node.values()), tag)


def first_node(node, tag: str) -> Optional[dict]:
    return next(find_nodes(node, tag), None)


def node_offset(text: str, node: dict) -> int:
    """Character offset in `text` of a node's 1-based line/col position."""
    line_start = 0
    for _ in range(node["line"] - 1):
        line_start = text.index("\n", line_start) + 1
    return line_start + node["col"] - 1


def split_proto(text: str) -> List[str]:
    """Splits signature text into trimmed top-level clauses.

    >>> split_proto("$a, $hash = { this => 42, that => 23 }")
    ['$a', '$hash = { this => 42, that => 23 }']
    """
    if not text:
        return []
    tree = SignatureParser(PROTO_GRAMMAR).parse(text)
    return [clause["text"].strip() for clause in find_nodes(tree, "clause")]


def python_name(name: str) -> str:
    """The local name a parameter is bound to (`class` -> `class_`)."""
    return name + "_" if keyword.iskeyword(name) else name

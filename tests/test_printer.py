import pytest

from methsig.methsig_compiler import CompileOptions, compile_signature, parse_signature
from methsig.methsig_printer import Printer


@pytest.fixture
def printer():
    return Printer(indent_width=2)


# Test cases: (id, signature, method, expected_prelude)
PLAN_CASES = [
    ("empty", "", False, "pass"),
    ("positional", "$a, $b", False,
        "a = args[0] if len(args) > 0 else missing('$a')\n"
        "b = args[1] if len(args) > 1 else missing('$b')"),
    ("defaults", "$this = 23, $that = $this", False,
        "this = args[0] if len(args) > 0 else (23)\n"
        "that = args[1] if len(args) > 1 else ($this)"),
    ("slurpy", "$x, @rest", False,
        "x = args[0] if len(args) > 0 else missing('$x')\n"
        "rest = list(args[1:])"),
    ("hash_slurpy", "%opts", False, "opts = pairs(args[0:])"),
    ("method", "$key", True,
        "self = shift(args)\n"
        "key = args[0] if len(args) > 0 else missing('$key')"),
    ("named", ":$year!, :$month = 1", False,
        "named = pairs(args[0:])\n"
        "year = named.pop('year') if 'year' in named else missing('$year')\n"
        "month = named.pop('month') if 'month' in named else (1)\n"
        "reject(named)"),
    ("modes", "\\@foo, $x is ro", False,
        "foo = alias(deref(args[0]) if len(args) > 0 else missing('@foo'))\n"
        "x = freeze(args[1] if len(args) > 1 else missing('$x'))"),
    ("named_ref", ":\\@xs", False,
        "named = pairs(args[0:])\n"
        "xs = alias(deref(named.pop('xs')))\n"
        "reject(named)"),
    ("raw", "@_", True, "self = shift(args)\n_ = args"),
]

@pytest.mark.parametrize("test_id, text, is_method, expected", PLAN_CASES, ids=[c[0] for c in PLAN_CASES])
def test_pformat_plan(printer, test_id, text, is_method, expected):
    options = CompileOptions(invocant="$self" if is_method else None)
    assert printer.pformat(compile_signature(text, options)) == expected


def test_plan_is_indented_by_level(printer):
    plan = compile_signature("$a, @b")
    assert printer.pformat(plan, level=1) == (
        "  a = args[0] if len(args) > 0 else missing('$a')\n"
        "  b = list(args[1:])"
    )

def test_plan_str_uses_printer():
    plan = compile_signature("@rest")
    assert str(plan) == "rest = list(args[0:])"


SIGNATURE_CASES = [
    ("plain", "$a, $b", "($a, $b)"),
    ("marks", "$a!, $b?", "($a!, $b?)"),
    ("traits_sorted", "$a is ro is alias = 1", "($a is alias is ro = 1)"),
    ("named_ref", ":\\@xs", "(:\\@xs)"),
    ("raw", "@_", "(@_)"),
]

@pytest.mark.parametrize("test_id, text, expected", SIGNATURE_CASES, ids=[c[0] for c in SIGNATURE_CASES])
def test_pformat_signature(printer, test_id, text, expected):
    assert printer.pformat(parse_signature(text)) == expected


def test_pformat_signature_with_invocant(printer):
    sig = parse_signature("$class: $x", CompileOptions(invocant="$self"))
    assert printer.pformat(sig) == "($class: $x)"
    sig = parse_signature("$class:", CompileOptions(invocant="$self"))
    assert printer.pformat(sig) == "($class:)"


def test_unknown_objects_fall_back_to_repr(printer):
    assert printer.pformat(42) == "42"

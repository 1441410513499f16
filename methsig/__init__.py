"""
methsig: parameter-list signatures for Python routines.

Compiles signature text such as `$class: $name, :$verbose = False` into
a binding plan, and provides the `func` and `method` decorators that run
that plan as a prelude to every call.
"""

from methsig.methsig_datatypes import Parameter, Signature, BindStep, BindingPlan, Ref
from methsig.methsig_errors import (
    SignatureError, MalformedSignature,
    ArgumentError, MissingArgument, UnexpectedNamedArgument, MalformedNamedArguments, NotAReference,
)
from methsig.methsig_parser import split_proto
from methsig.methsig_transformer import parse_param
from methsig.methsig_compiler import CompileOptions, compile_signature, parse_signature
from methsig.methsig_config import Config, load_config
from methsig.methsig_printer import Printer
from methsig.methsig_runtime import Declarator, func, method

__all__ = [
    "Parameter", "Signature", "BindStep", "BindingPlan", "Ref",
    "SignatureError", "MalformedSignature",
    "ArgumentError", "MissingArgument", "UnexpectedNamedArgument", "MalformedNamedArguments", "NotAReference",
    "split_proto", "parse_param",
    "CompileOptions", "compile_signature", "parse_signature",
    "Config", "load_config",
    "Printer",
    "Declarator", "func", "method",
]

__version__ = "0.1.0"

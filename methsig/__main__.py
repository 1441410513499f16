import argparse
import sys

from methsig.methsig_compiler import CompileOptions, compile_signature
from methsig.methsig_config import Config
from methsig.methsig_errors import SignatureError
from methsig.methsig_parser import split_proto
from methsig.methsig_printer import Printer


def render(text: str, *, split: bool = False, method: bool = False, config: Config = None) -> str:
    """Compiles (or only splits) a signature and returns the printable result."""
    if split:
        return "\n".join(split_proto(text))
    config = config or Config.from_env()
    options = CompileOptions(
        invocant=config.invocant if method else None,
        allow_alias=config.allow_alias,
        debug=config.debug,
    )
    return Printer().pformat(compile_signature(text, options))


def repl(args) -> int:
    print("methsig REPL v0.1")
    print("Type 'exit' or press Ctrl+D to quit.")
    while True:
        try:
            line = input(">> ").strip()
        except EOFError:
            print("\nExiting.")
            break
        if not line:
            continue
        if line == "exit":
            break
        try:
            print(render(line, split=args.split, method=args.method))
        except SignatureError as e:
            print(f"Error: {e}", file=sys.stderr)
    return 0


def main(argv=None) -> int:
    """Compile a signature given on the command line, otherwise start the REPL."""
    parser = argparse.ArgumentParser(
        prog="methsig",
        description="Compile a parameter signature and print its binding plan.",
    )
    parser.add_argument("signature", nargs="?", help="Signature text, e.g. '$a, $b = 42, :$c'.")
    parser.add_argument("--split", action="store_true", help="Only split into top-level clauses.")
    parser.add_argument("--method", action="store_true", help="Imply the method invocant ($self).")
    args = parser.parse_args(argv)

    if args.signature is None:
        return repl(args)
    try:
        print(render(args.signature, split=args.split, method=args.method))
    except SignatureError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    try:
        raise SystemExit(main())
    except KeyboardInterrupt:
        print("\nExiting.")

import argparse
import logging
import sys
from pathlib import Path

from .diagnostics import EmissionError
from .generator import DEFAULT_ATTRIBUTE, GeneratorConfig, generate_to_directory

logger = logging.getLogger(__name__)


def cmd_generate(args: argparse.Namespace) -> int:
    root = Path(args.root)
    if not root.is_dir():
        print(f"Not a directory: {root}", file=sys.stderr)
        return 2

    config = GeneratorConfig(
        attribute_name=args.attribute,
        namespace=args.namespace,
        emit_attribute_source=not args.no_attribute_source,
        emit_to_string=not args.no_to_string,
    )
    try:
        result = generate_to_directory(root, Path(args.out), config)
    except EmissionError as e:
        print(f"Generation failed: {e}", file=sys.stderr)
        return 1

    for name in result.hint_names:
        print(name)
    for name, messages in result.diagnostics.items():
        for message in messages:
            print(f"{name}: {message}", file=sys.stderr)
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser("csemit")
    sub = p.add_subparsers(required=True)

    s = sub.add_parser("generate", help="Emit C# partial types for decorated Python classes")
    s.add_argument("root", help="Directory of Python modules to scan")
    s.add_argument("--attribute", default=DEFAULT_ATTRIBUTE, help=f"Marker attribute (default: {DEFAULT_ATTRIBUTE})")
    s.add_argument("--out", required=True, help="Output directory for .g.cs files")
    s.add_argument("--namespace", help="Namespace for all generated types instead of the module path")
    s.add_argument("--no-attribute-source", action="store_true", help="Do not emit the marker attribute's source")
    s.add_argument("--no-to-string", action="store_true", help="Do not emit ToString overrides")
    s.add_argument("-v", "--verbose", action="store_true", help="Log emission details")
    s.set_defaults(func=cmd_generate)

    return p


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())

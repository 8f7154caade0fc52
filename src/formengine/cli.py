"""Command-line entry point.

Usage:
    formengine check templates/nshev.json templates/smoke.yaml
    formengine run templates/nshev.json draft.json
    formengine run templates/nshev.json draft.json -v
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from .config import EngineConfig
from .engine import compute, validate
from .errors import TemplateError
from .lint import check_template
from .models import SubmitResult
from .service import load_template


def _check(args: argparse.Namespace, config: EngineConfig) -> int:
    failed = 0
    for path in args.templates:
        try:
            template = load_template(path)
        except TemplateError as e:
            print(f"  FAIL  {e}")
            failed += 1
            continue

        errors = check_template(template, config)
        status = "OK" if not errors else "FAIL"
        print(f"  {status:4s}  {path} ({template.id})")
        for error in errors:
            print(f"        {error}")
        if errors:
            failed += 1

    print()
    if failed:
        print(f"  {failed}/{len(args.templates)} templates have problems")
        return 1
    print("  All clear.")
    return 0


def _run(args: argparse.Namespace, config: EngineConfig) -> int:
    try:
        template = load_template(args.template)
    except TemplateError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    try:
        values = json.loads(Path(args.values).read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        print(f"Error: cannot read values from {args.values}: {e}", file=sys.stderr)
        return 2
    if not isinstance(values, dict):
        print(f"Error: {args.values} must contain a JSON object", file=sys.stderr)
        return 2

    computed = compute(values, template, config)
    errors = validate(computed, template, config)
    result = SubmitResult(ok=not errors, errors=errors)
    print(json.dumps({"values": computed, **result.to_wire()}, indent=2))
    return 0 if result.ok else 1


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog="formengine", description="Evaluate form templates")
    parser.add_argument("--verbose", "-v", action="store_true", help="log skipped formulas and rules")
    sub = parser.add_subparsers(dest="command", required=True)

    check = sub.add_parser("check", help="lint template files")
    check.add_argument("templates", nargs="+", type=Path)

    run = sub.add_parser("run", help="compute and validate a values file against a template")
    run.add_argument("template", type=Path)
    run.add_argument("values", type=Path, help="JSON object of field id -> value")

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    config = EngineConfig.from_env()

    if args.command == "check":
        sys.exit(_check(args, config))
    sys.exit(_run(args, config))


if __name__ == "__main__":
    main()

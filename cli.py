# TreeDiff v0.1.0
#!/usr/bin/env python3
"""
TreeDiff CLI

Command-line interface for comparing and validating JSON documents.
"""
import argparse
import json
import logging
import sys

from config import settings


MARKERS = {
    "added": "+",
    "deleted": "-",
    "modified": "~",
    "unchanged": " ",
}


def _load(path: str):
    from diffcore import parse_json_file

    parsed = parse_json_file(path)
    if parsed is None:
        print(f"Error: Could not parse {path}", file=sys.stderr)
        sys.exit(2)
    return parsed.value


def render_node(node, show_unchanged: bool = False) -> list[str]:
    """Render one diff node (and its subtree) as report lines."""
    from diffcore import Classification, build_readable_path, serialize

    lines = []
    kind = node.classification.value
    changed = node.classification != Classification.UNCHANGED

    if node.children is None and (changed or show_unchanged):
        label = f"{MARKERS[kind]} {build_readable_path(node.path)}"
        if node.classification == Classification.ADDED:
            lines.append(f"{label}: {serialize(node.new_value, node.value_kind)}")
        elif node.classification == Classification.DELETED:
            lines.append(f"{label}: {serialize(node.old_value, node.value_kind)}")
        elif node.classification == Classification.MODIFIED:
            lines.append(
                f"{label}: {serialize(node.old_value, node.value_kind)}"
                f" -> {serialize(node.new_value, node.value_kind)}"
            )
        else:
            lines.append(f"{label}: {serialize(node.old_value, node.value_kind)}")

    for child in node.children or ():
        lines.extend(render_node(child, show_unchanged))

    return lines


def render(result, show_unchanged: bool = False) -> str:
    """Render a DiffResult as a plain-text report."""
    stats = result.stats
    lines = render_node(result.root, show_unchanged)
    lines.append("")
    lines.append(
        f"{stats.added} added, {stats.deleted} deleted, "
        f"{stats.modified} modified, {stats.unchanged} unchanged"
    )
    return "\n".join(lines)


def compare_files(args) -> int:
    """Compare two JSON files and print differences."""
    from diffcore import compare, DiffConfigError

    before = _load(args.before)
    after = _load(args.after)

    options = settings.diff_options()
    if args.max_depth is not None:
        options.max_depth = args.max_depth
    if args.ignore_key:
        options.ignore_keys = options.ignore_keys | frozenset(args.ignore_key)
    if args.mode:
        options.sequence_diff_mode = args.mode
    if args.no_detect_cycles:
        options.detect_cycles = False

    try:
        result = compare(before, after, options)
    except DiffConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    if args.json:
        print(json.dumps(result.to_dict(), indent=2, default=str))
        return 0 if result.is_identical else 1

    print(f"\nComparing: {args.before} vs {args.after}")
    print("=" * 60)

    if result.is_identical:
        print("Files are identical")
    else:
        print(render(result, args.show_unchanged))

    return 0 if result.is_identical else 1


def validate_file(args) -> int:
    """Validate a JSON file and report the first syntax error."""
    from diffcore import validate_json

    try:
        with open(args.file, encoding="utf-8") as f:
            text = f.read()
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    validation = validate_json(text)
    if validation.is_valid:
        print(f"{args.file}: valid JSON")
        return 0

    print(f"{args.file}: {validation.error}", file=sys.stderr)
    return 1


def format_file(args) -> int:
    """Pretty-print a JSON file to stdout."""
    from diffcore import validate_json, format_json

    try:
        with open(args.file, encoding="utf-8") as f:
            text = f.read()
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    validation = validate_json(text)
    if not validation.is_valid:
        print(f"{args.file}: {validation.error}", file=sys.stderr)
        return 1

    print(format_json(text, indent=args.indent))
    return 0


def run_server(host: str = "127.0.0.1", port: int = 8000, reload: bool = False):
    """Run the FastAPI server."""
    import uvicorn
    uvicorn.run(
        "api.main:app",
        host=host,
        port=port,
        reload=reload,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="TreeDiff CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # compare
    compare_parser = subparsers.add_parser("compare", help="Compare two JSON files")
    compare_parser.add_argument("before", help="Before/baseline file")
    compare_parser.add_argument("after", help="After/new file")
    compare_parser.add_argument("--max-depth", type=int, help="Stop comparing below this depth")
    compare_parser.add_argument("--ignore-key", action="append", help="Object key to skip (repeatable)")
    compare_parser.add_argument("--mode", choices=["lcs", "positional"], help="Array diff mode")
    compare_parser.add_argument("--no-detect-cycles", action="store_true", help="Disable cycle detection")
    compare_parser.add_argument("--show-unchanged", action="store_true", help="Include unchanged values")
    compare_parser.add_argument("--json", action="store_true", help="Print the diff tree as JSON")

    # validate
    validate_parser = subparsers.add_parser("validate", help="Validate a JSON file")
    validate_parser.add_argument("file", help="JSON file to validate")

    # format
    format_parser = subparsers.add_parser("format", help="Pretty-print a JSON file")
    format_parser.add_argument("file", help="JSON file to format")
    format_parser.add_argument("--indent", type=int, default=2, help="Indent width")

    # serve
    serve_parser = subparsers.add_parser("serve", help="Run the API server")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Host to bind to")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to listen on")
    serve_parser.add_argument("--reload", action="store_true", help="Enable auto-reload")

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=settings.log_level(),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    if not args.command:
        parser.print_help()
        return 0

    if args.command == "compare":
        return compare_files(args)
    elif args.command == "validate":
        return validate_file(args)
    elif args.command == "format":
        return format_file(args)
    elif args.command == "serve":
        run_server(args.host, args.port, args.reload)
    return 0


if __name__ == "__main__":
    sys.exit(main())

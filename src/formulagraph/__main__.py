#!/usr/bin/env python3
"""
CLI for formulagraph.

Usage:
    python -m formulagraph list [--category NAME]
    python -m formulagraph check FORMULA [--x VALUE [--y VALUE]]
    python -m formulagraph build FORMULA_OR_ID [--param NAME=VALUE ...]
                                 [--resolution N] [--json FILE] [--stl FILE]

Examples:
    # Browse the catalog
    python -m formulagraph list

    # Check a typed formula and its domain at x = -1
    python -m formulagraph check "y = \\ln(x)" --x -1

    # Build a catalog shape and export it
    python -m formulagraph build torus --param R=4 --stl torus.stl

    # Build a typed formula
    python -m formulagraph build "z = \\sin(x)\\cos(y)" --resolution 80 --json egg.json
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Dict

from .catalog import get_formula, ordered_formulas
from .classifier import classify, classify_custom, validate_syntax
from .config import load_config
from .domain import check as check_domain
from .engine import build_geometry
from .expr import DiagnosticCollector, ExpressionError, SyntaxFault
from .formula import FormulaSpec, ParameterSet
from .geometry import Mesh


def parse_param(param_str: str) -> tuple:
    """Parse a parameter string like 'name=value' into (name, float value)."""
    if '=' not in param_str:
        raise ValueError(f"Invalid parameter format: {param_str} (expected name=value)")

    name, value_str = param_str.split('=', 1)
    name = name.strip()
    try:
        return (name, float(value_str.strip()))
    except ValueError:
        raise ValueError(f"Parameter '{name}' needs a number, got '{value_str.strip()}'") from None


def _resolve(target: str) -> FormulaSpec:
    """A catalog id, or else formula text to classify."""
    try:
        return get_formula(target)
    except KeyError:
        pass
    spec = classify_custom(target)
    if spec is None:
        raise KeyError(f"'{target}' is neither a catalog id nor a valid formula")
    return spec


def cmd_list(args):
    """List catalog formulas in browsing order."""
    specs = ordered_formulas(args.catalog)
    if args.category:
        specs = [s for s in specs if s.category.lower() == args.category.lower()]

    for spec in specs:
        print(f"  {spec.id:<28} {spec.kind.label:<20} {spec.display_name}")
    print(f"{len(specs)} formula(s)")
    return 0


def cmd_check(args):
    """Check formula text for syntax errors and report its kind."""
    status = validate_syntax(args.formula)
    if not status.ok:
        print(f"Error: {status.message}", file=sys.stderr)
        return 1

    try:
        variables, kind = classify(args.formula)
    except ExpressionError as e:
        print(f"Error: {e.diagnostic.message}", file=sys.stderr)
        return 1

    print(f"OK: {kind.label}")
    print(f"  variables: {', '.join(variables) or '(none)'}")

    if args.x is not None:
        domain = check_domain(args.formula, args.x, args.y)
        if domain.is_valid:
            print(f"  defined at x = {args.x:g}")
        else:
            print(f"  undefined: {domain.reason}")
    return 0


def cmd_build(args):
    """Build geometry for a catalog id or formula text."""
    try:
        spec = _resolve(args.formula)
    except KeyError as e:
        print(f"Error: {e.args[0]}", file=sys.stderr)
        return 2

    params = ParameterSet.from_defs(spec.parameters)
    overrides: Dict[str, float] = {}
    for param_str in args.param or []:
        try:
            name, value = parse_param(param_str)
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 2
        if name in params:
            params.set(name, value)
        else:
            overrides[name] = value

    values = {**params.values(), **overrides}
    if args.resolution is not None:
        values["resolution"] = args.resolution

    try:
        config = load_config(args.config)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    diagnostics = DiagnosticCollector()
    try:
        geometry = build_geometry(spec, values, config=config, diagnostics=diagnostics)
    except SyntaxFault as e:
        print(e.diagnostic.format(), file=sys.stderr)
        return 1

    print(f"{spec.display_name} ({spec.kind.label})")
    if isinstance(geometry, Mesh):
        print(f"Result: mesh with {geometry.vertex_count} vertices, "
              f"{geometry.triangle_count} triangles")
    else:
        closed = ", closed" if geometry.closed else ""
        print(f"Result: polyline with {geometry.point_count} points{closed}")
    if diagnostics.diagnostics:
        print(diagnostics.format_all(show_source=False))

    if args.json:
        from .io import geometry_to_json
        used = {name: value for name, value in values.items() if name != "resolution"}
        doc = geometry_to_json(geometry, spec, used, generator={"name": "formulagraph"})
        Path(args.json).write_text(json.dumps(doc, indent=2), encoding='utf-8')
        print(f"Exported to: {args.json}")

    if args.stl:
        if not isinstance(geometry, Mesh):
            print("Warning: Cannot export a polyline to STL", file=sys.stderr)
        else:
            from .io import write_stl
            write_stl(geometry, args.stl, name=spec.id)
            print(f"Exported to: {args.stl}")

    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog='python -m formulagraph',
        description='Formula to geometry engine',
    )
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging')

    subparsers = parser.add_subparsers(dest='action', required=True)

    # list command
    list_parser = subparsers.add_parser('list', help='List catalog formulas')
    list_parser.add_argument('--category', help='Only list one category')
    list_parser.add_argument('--catalog', type=Path, metavar='FILE',
                             help='Formula catalog YAML to use instead of the bundled one')

    # check command
    check_parser = subparsers.add_parser('check', help='Check formula text for errors')
    check_parser.add_argument('formula', help='Formula text, e.g. "y = x^2"')
    check_parser.add_argument('--x', type=float, help='Check the domain at this x')
    check_parser.add_argument('--y', type=float, help='y for the domain check')

    # build command
    build_parser = subparsers.add_parser('build', help='Build geometry')
    build_parser.add_argument('formula', help='Catalog id or formula text')
    build_parser.add_argument('-p', '--param', action='append', metavar='NAME=VALUE',
                              help='Parameter value (can be repeated)')
    build_parser.add_argument('-r', '--resolution', type=int, help='Samples per sweep')
    build_parser.add_argument('--config', type=Path, metavar='FILE',
                              help='Engine settings YAML')
    build_parser.add_argument('--json', metavar='FILE', help='Write geometry JSON')
    build_parser.add_argument('--stl', metavar='FILE', help='Write binary STL (meshes only)')

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
    )

    if args.action == 'list':
        return cmd_list(args)
    elif args.action == 'check':
        return cmd_check(args)
    elif args.action == 'build':
        return cmd_build(args)
    else:
        parser.print_help()
        return 1


if __name__ == '__main__':
    sys.exit(main())

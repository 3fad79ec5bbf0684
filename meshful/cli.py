"""
Command line interface for meshful.

Usage:
    meshful info part.stl [--json]
    meshful convert part.stl part.obj
    meshful validate part.obj
    meshful init-config [.meshful.json]

``python -m meshful`` and ``python main.py`` run the same interface.

Global options (before the sub-command):
    --config PATH     explicit .meshful.json
    --verbose, -v     DEBUG logging
    --log-json PATH   additional JSON-lines log file
    --strict          reject NaN/Inf coordinates when reading STL
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

from meshful.errors import MeshError
from meshful.geometry.mesh_stats import calculate_mesh_statistics
from meshful.io import read_mesh, write_mesh
from meshful.io.validator import validate_mesh
from meshful.logging_config import LogContext, setup_logging
from meshful.project_config import ProjectConfig, create_sample_config, load_config

logger = logging.getLogger("meshful.cli")


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def cmd_info(args: argparse.Namespace, config: ProjectConfig) -> int:
    mesh = read_mesh(args.path, strict=config.stl.strict)
    stats = calculate_mesh_statistics(mesh)
    if args.json:
        print(json.dumps(stats.to_dict(), indent=2))
    else:
        print(stats.summary())
    return 0


def cmd_convert(args: argparse.Namespace, config: ProjectConfig) -> int:
    mesh = read_mesh(args.source, strict=config.stl.strict)
    write_mesh(
        args.destination,
        mesh,
        header=args.header or config.stl.header,
        write_materials=config.obj.write_mtl,
        default_color=config.obj.default_color,
    )
    logger.info("Converted %s -> %s (%d triangles)",
                args.source, args.destination, len(mesh))
    return 0


def cmd_validate(args: argparse.Namespace, config: ProjectConfig) -> int:
    mesh = read_mesh(args.path, strict=config.stl.strict)
    report = validate_mesh(mesh)
    print(report.summary())
    return 0 if report.is_valid else 1


def cmd_init_config(args: argparse.Namespace, config: ProjectConfig) -> int:
    path = create_sample_config(args.path)
    print(path)
    return 0


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="meshful",
        description="Inspect and convert triangle meshes (binary STL, OBJ/MTL).",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--config", "-c",
        default=None,
        help="Path to a .meshful.json configuration file.",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable DEBUG logging.",
    )
    parser.add_argument(
        "--log-json",
        default=None,
        dest="log_json",
        help="Also write JSON-lines logs to this file.",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Reject NaN/Inf coordinates when reading binary STL.",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    info = commands.add_parser("info", help="Print mesh statistics.")
    info.add_argument("path", help="STL or OBJ file.")
    info.add_argument("--json", action="store_true", help="Print statistics as JSON.")
    info.set_defaults(handler=cmd_info, mesh_path="path")

    convert = commands.add_parser("convert", help="Convert between STL and OBJ.")
    convert.add_argument("source", help="Input STL or OBJ file.")
    convert.add_argument("destination", help="Output STL or OBJ file.")
    convert.add_argument("--header", default=None, help="Binary STL header text.")
    convert.set_defaults(handler=cmd_convert, mesh_path="source")

    validate = commands.add_parser("validate", help="Check mesh integrity.")
    validate.add_argument("path", help="STL or OBJ file.")
    validate.set_defaults(handler=cmd_validate, mesh_path="path")

    init_config = commands.add_parser("init-config", help="Write a sample config file.")
    init_config.add_argument("path", nargs="?", default=".meshful.json")
    init_config.set_defaults(handler=cmd_init_config, mesh_path=None)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)

    mesh_path = getattr(args, args.mesh_path) if args.mesh_path else None
    config = load_config(mesh_path=mesh_path, explicit_config=args.config)
    if args.strict:
        config.stl.strict = True

    level = logging.DEBUG if args.verbose else config.logging.level_number
    setup_logging(
        level=level,
        json_file=args.log_json or config.logging.json_file,
        use_colors=config.logging.use_colors and sys.stderr.isatty(),
    )

    try:
        with LogContext(command=args.command):
            return args.handler(args, config)
    except (MeshError, OSError, ValueError) as exc:
        logger.error("%s: %s", type(exc).__name__, exc)
        return 1
    except Exception as exc:
        logger.critical("Unexpected error: %s", exc, exc_info=True)
        return 2


"""Inspect a map descriptor: strategy, projection, tile tiers, sample transforms.

This module contains the inspection logic and its argparse entry point
(``maplat-inspect``).
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional, Sequence

from maplat.errors import MaplatError
from maplat.logging_setup import configure_logging
from maplat.projection.registry import ProjectionRegistry
from maplat.schemas import CLIConfig, InternalConfig, ParamConfig, UserConfig, resolve_config
from maplat.source.factory import SourceFactory, load_descriptor
from maplat.source.tile import MaplatSource

__all__ = ['inspect_map', 'format_report', 'load_user_config_dict', 'main']

logger = logging.getLogger(__name__)


def load_user_config_dict(config_path: str) -> dict:
    """Load a user config JSON file as a raw dict.

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    ValueError
        If the file does not hold a JSON object.
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path}")
    with open(path, encoding="utf-8") as f:
        doc = json.load(f)
    if not isinstance(doc, dict):
        raise ValueError(f"User config {path} must be a JSON object")
    return doc


def _source_report(source: MaplatSource, registry: ProjectionRegistry,
                   point: Optional[Sequence[float]]) -> dict[str, Any]:
    entry = source.projection
    report: dict[str, Any] = {
        "map_id": source.map_id,
        "strategy": source.strategy.kind,
        "projection": entry.code,
        "units": entry.units,
        "extent": list(entry.extent),
        "world_extent": list(entry.world_extent),
        "url": source.url,
    }
    if source.tile_grid is not None:
        report["tiles"] = [
            {"z": z, "resolution": res, "columns": cols, "rows": rows}
            for z, (res, (cols, rows)) in enumerate(
                zip(source.tile_grid.resolutions, source.tile_grid.tier_sizes))
        ]
    if point is not None:
        report["point"] = {
            "input": list(point),
            registry.reference_code: list(registry.transform(point, entry.code, registry.reference_code)),
            registry.geographic_code: list(registry.transform(point, entry.code, registry.geographic_code)),
        }
    return report


def inspect_map(
    descriptor_path: str,
    map_id: Optional[str] = None,
    point: Optional[Sequence[float]] = None,
    config: Optional[InternalConfig] = None,
    registry: Optional[ProjectionRegistry] = None,
) -> list[dict[str, Any]]:
    """Build every source of a descriptor file and describe it.

    Parameters
    ----------
    descriptor_path : str
        Path to the JSON map descriptor.
    map_id : str, optional
        Overrides the descriptor's map ID.
    point : sequence of float, optional
        A coordinate in each map's own projection to transform to the
        reference and geographic projections.
    config : InternalConfig, optional
        Resolved configuration; defaults are used when omitted.
    registry : ProjectionRegistry, optional
        Registry to register with; a fresh one when omitted.

    Returns
    -------
    list of dict
        One report per source: the main map, then its sub maps.
    """
    config = config or resolve_config(ParamConfig())
    registry = registry or ProjectionRegistry.from_config(config)
    factory = SourceFactory(registry, config)

    descriptor = load_descriptor(descriptor_path, map_id)
    sources = factory.build_all(descriptor)
    return [_source_report(source, registry, point) for source in sources]


def format_report(reports: list[dict[str, Any]]) -> str:
    lines = []
    for report in reports:
        lines.append(f"{report['map_id']}")
        lines.append(f"  strategy:     {report['strategy']}")
        lines.append(f"  projection:   {report['projection']} ({report['units']})")
        lines.append(f"  extent:       {report['extent']}")
        lines.append(f"  world extent: {report['world_extent']}")
        lines.append(f"  url:          {report['url']}")
        for tier in report.get("tiles", []):
            lines.append(f"  tier z={tier['z']}: {tier['columns']}x{tier['rows']} tiles, "
                         f"resolution {tier['resolution']}")
        if "point" in report:
            for code, value in report["point"].items():
                lines.append(f"  point {code}: {value}")
    return "\n".join(lines)


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="maplat-inspect",
        description="Inspect the projection and tile grid of a Maplat map descriptor",
    )
    parser.add_argument("descriptor", help="Path to a map descriptor JSON file")
    parser.add_argument("--map-id", help="Override the descriptor's mapID")
    parser.add_argument("--point", nargs=2, type=float, metavar=("X", "Y"),
                        help="Transform this map coordinate to the reference and geographic projections")
    parser.add_argument("--config", help="Path to a user config JSON file")
    parser.add_argument("--json", action="store_true", help="Print the report as JSON")
    parser.add_argument("--log-file", help="Also write log records to this file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args(argv)

    cli_cfg = CLIConfig(
        log_level="DEBUG" if args.verbose else None,
        log_file=args.log_file,
    )
    try:
        user_cfg = UserConfig.model_validate(load_user_config_dict(args.config)) if args.config else None
        config = resolve_config(ParamConfig(), user_cfg, cli_cfg)
    except (OSError, ValueError) as exc:
        # JSONDecodeError and pydantic's ValidationError are both ValueErrors
        configure_logging(cli_cfg.log_level or "INFO")
        logger.error("Invalid config %s: %s", args.config, exc)
        return 1
    configure_logging(config.logging.level, config.logging.log_file)

    try:
        reports = inspect_map(args.descriptor, args.map_id, args.point, config)
    except (MaplatError, OSError) as exc:
        logger.error("%s", exc)
        return 1

    if args.json:
        print(json.dumps(reports, indent=2))
    else:
        print(format_report(reports))
    return 0


if __name__ == "__main__":
    sys.exit(main())

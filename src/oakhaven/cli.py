from __future__ import annotations

import json
import logging
import sys
from collections import Counter
from typing import Any, Dict

from .config import build_settings, parse_args
from .errors import OakhavenError
from .fov.shadowcast import VisibilityEngine
from .generation.factory import LevelFactory
from .logging_config import configure_logging
from .map.model import MapData


def summarize(map_data: MapData, fov_radius: int = 8) -> Dict[str, Any]:
    """Compact, diffable description of a generated level."""
    visible = VisibilityEngine(map_data).compute(*map_data.start, fov_radius) if map_data.start else set()
    tiles = Counter(kind.value for _, _, kind in map_data.iter_tiles())
    props = Counter(p.type for p in map_data.props)
    return {
        "level": map_data.level,
        "biome": map_data.biome.value,
        "theme": map_data.theme.value,
        "size": [map_data.width, map_data.height],
        "start": list(map_data.start) if map_data.start else None,
        "rooms": len(map_data.rooms),
        "tiles": dict(sorted(tiles.items())),
        "props": dict(sorted(props.items())),
        "npcs": [n.name for n in map_data.npcs],
        "visible_from_start": len(visible),
        "signature": map_data.signature(),
    }


def main(argv=None) -> int:
    args = parse_args(argv)
    configure_logging(logging.DEBUG if args.debug else logging.WARNING)

    try:
        settings = build_settings(args)
        map_data = LevelFactory(settings).generate(args.level)
    except (OakhavenError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    if args.ascii:
        print("\n".join(map_data.to_ascii()))
    else:
        # JSON so runs can be diffed across seeds and versions
        print(json.dumps(summarize(map_data, settings.fov_radius), indent=2, sort_keys=True))
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))

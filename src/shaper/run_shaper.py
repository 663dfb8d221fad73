#!/usr/bin/env python3
"""
Mesh Shaper - command-line bake and export.

Load a mesh, apply taper / twist / bend and scale, export the result.

Usage:
    mesh-shaper model.stl --twist 3.1416 -o outputs/model_twisted.stl
    mesh-shaper model.stl --twist 90 --bend 30 --degrees --target 40 0 40
    mesh-shaper model.obj --scale 1 2 1 --config shaper.json --verbose
"""

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from .common.config import ShaperConfig, ScalePolicy
from .common.mesh_ops import compute_mesh_stats
from .modifiers import ModifierParams
from .session import ShaperSession

logger = logging.getLogger(__name__)


def run_shaper(
    input_path: Path,
    output_path: Optional[Path],
    params: ModifierParams,
    user_scale,
    target_dims,
    config: ShaperConfig
) -> dict:
    """
    Load, bake and export one mesh.
    
    Args:
        input_path: Source mesh file
        output_path: Destination (defaults to config.get_output_path)
        params: Modifier parameters (radians)
        user_scale: Per-axis user scale
        target_dims: Per-axis absolute target sizes, or None
        config: Shaper configuration
        
    Returns:
        Summary dictionary
    """
    summary = {
        "timestamp": datetime.now().isoformat(),
        "config": config.to_dict(),
        "input": str(input_path),
        "params": params.to_dict(),
        "errors": []
    }
    
    session = ShaperSession(config)
    session.load_file(input_path)
    session.params = params
    session.set_scale(user_scale=user_scale, target_dims=target_dims)
    
    summary["uniforms"] = session.uniforms().to_dict()
    
    baked = session.bake()
    written = session.export(baked, output_path)
    
    summary["output"] = str(written)
    summary["effective_scale"] = baked.effective_scale.tolist()
    summary["stats"] = compute_mesh_stats(baked.mesh)
    return summary


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Mesh Shaper - bake taper, twist, bend and scale into a mesh"
    )
    parser.add_argument(
        "input",
        type=Path,
        help="Mesh file to shape (.stl, .obj)"
    )
    parser.add_argument(
        "--output", "-o",
        type=Path,
        default=None,
        help="Output mesh path (default: <output-dir>/<name>_shaped.<format>)"
    )
    parser.add_argument("--twist", type=float, default=0.0, help="Twist angle over full height")
    parser.add_argument("--bend", type=float, default=0.0, help="Bend angle over full height")
    parser.add_argument("--taper", type=float, default=0.0, help="Taper amount (about -1 to 1)")
    parser.add_argument(
        "--degrees",
        action="store_true",
        help="Read --twist and --bend in degrees instead of radians"
    )
    parser.add_argument(
        "--scale", "-s",
        type=float,
        nargs=3,
        default=[1.0, 1.0, 1.0],
        metavar=("X", "Y", "Z"),
        help="User scale per axis"
    )
    parser.add_argument(
        "--target", "-t",
        type=float,
        nargs=3,
        default=None,
        metavar=("X", "Y", "Z"),
        help="Absolute target size per axis (0 = keep)"
    )
    parser.add_argument(
        "--scale-policy",
        choices=[p.value for p in ScalePolicy],
        default=None,
        help="Flat-axis handling for --target"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=None,
        help="JSON config file"
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help="Output directory (when --output is not given)"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose logging"
    )
    
    args = parser.parse_args(argv)
    
    # Setup logging
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )
    
    # Build config
    config = ShaperConfig.from_json(args.config) if args.config else ShaperConfig()
    if args.scale_policy:
        config.scale_policy = ScalePolicy(args.scale_policy)
    if args.output_dir:
        config.output_dir = args.output_dir
    
    if args.degrees:
        params = ModifierParams.from_degrees(args.twist, args.bend, args.taper)
    else:
        params = ModifierParams(twist=args.twist, bend=args.bend, taper=args.taper)
    
    logger.info(f"Shaping {args.input}: {params.to_dict()}")
    
    try:
        summary = run_shaper(
            input_path=args.input,
            output_path=args.output,
            params=params,
            user_scale=args.scale,
            target_dims=args.target,
            config=config
        )
    except Exception as e:
        logger.error(f"Shaping failed: {e}")
        summary = {
            "timestamp": datetime.now().isoformat(),
            "input": str(args.input),
            "errors": [{"stage": type(e).__name__, "error": str(e)}]
        }
    
    # Save summary
    summary_path = config.output_dir / "run_summary.json"
    summary_path.parent.mkdir(parents=True, exist_ok=True)
    with open(summary_path, 'w') as f:
        json.dump(summary, f, indent=2)
    
    logger.info(f"Summary saved to: {summary_path}")
    
    if summary["errors"]:
        sys.exit(1)
    
    logger.info(f"COMPLETE: {summary['output']}")
    return 0


if __name__ == "__main__":
    main()

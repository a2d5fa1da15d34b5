"""
Quick local test helper: runs the classic pipeline on a local image and writes
an RGBA PNG to disk. This bypasses the API and download layers.
"""

from __future__ import annotations

import argparse
from pathlib import Path

# Ensure project root is importable when running from scripts/
import sys

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from classic_service import config
from classic_service.params import MattingParams
from classic_service.pipeline import process_image_bytes


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Remove a flat background from a local image")
    parser.add_argument("--input", required=True, help="Path to the input image")
    parser.add_argument("--output", required=True, help="Path to write the RGBA PNG")
    parser.add_argument("--max-size", default=None, help="Longest output edge (128-4096)")
    parser.add_argument("--tol", default=None, help="Distance at or below which pixels are background (1-200)")
    parser.add_argument("--hard", default=None, help="Upper distance threshold (5-400, > tol)")
    parser.add_argument("--feather", default=None, help="Edge feather multiplier (0.5-10)")
    parser.add_argument("--despeckle", default=None, help="Despeckle rounds (0-3)")
    parser.add_argument("--matte", default=None, help="Optional #RRGGBB color to flatten onto")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    input_path = Path(args.input)
    output_path = Path(args.output)
    if not input_path.exists():
        raise FileNotFoundError(f"Input file not found: {input_path}")

    params = MattingParams.from_raw(
        max_size=args.max_size,
        tol=args.tol,
        hard=args.hard,
        feather=args.feather,
        despeckle=args.despeckle,
        matte=args.matte,
        default_max_size=config.get_settings().default_max_size,
    )
    png_bytes = process_image_bytes(input_path.read_bytes(), params)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(png_bytes)
    print(f"Wrote RGBA output to {output_path}")


if __name__ == "__main__":
    main()

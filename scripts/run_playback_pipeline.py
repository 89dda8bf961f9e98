#!/usr/bin/env python3
"""ADCP ensemble screening runner.

Usage:
    python scripts/run_playback_pipeline.py scripts/user_config.py
    python scripts/run_playback_pipeline.py scripts/user_config.py --input data/transect_01.jsonl
    python scripts/run_playback_pipeline.py --input data/transect_01.jsonl --base-dir /tmp/screened

Note: User config in scripts/user_config.py, expert defaults in adcpscreen.schemas.param
"""

import sys
import argparse
from pathlib import Path

# Add src to path
project_root = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(project_root / "src"))

from adcpscreen.cli import run_playback_pipeline


def main():
    parser = argparse.ArgumentParser(description="Screen recorded ADCP ensembles")
    parser.add_argument("config", nargs="?", help="Path to user config file")
    parser.add_argument("--input", dest="input_file", help="JSONL ensemble file to replay")
    parser.add_argument("--base-dir", help="Output directory")
    parser.add_argument("--source", choices=["live", "playback"], help="Source tag for frames")
    parser.add_argument("--pace", type=float, dest="pace_seconds",
                        help="Seconds between replayed frames")
    parser.add_argument("--max-runtime", type=int, help="Max runtime in minutes")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    run_playback_pipeline(
        args.config,
        cli_args={
            "input_file": args.input_file,
            "base_dir": args.base_dir,
            "source": args.source,
            "pace_seconds": args.pace_seconds,
        },
        max_runtime=args.max_runtime,
        verbose=args.verbose,
    )


if __name__ == "__main__":
    main()

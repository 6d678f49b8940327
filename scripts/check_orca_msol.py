#!/usr/bin/env python3
"""
mSOL vault scan launcher script.

Sums the mSOL held in every Orca whirlpool vault using configs/mainnet.yaml
and prints a per-pool breakdown and a total.
"""

import asyncio
import sys
from pathlib import Path

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from msolscan.runner.pipeline import main


if __name__ == "__main__":
    config = project_root / "configs" / "mainnet.yaml"

    try:
        sys.exit(asyncio.run(main(["--config", str(config), *sys.argv[1:]])))
    except KeyboardInterrupt:
        print("\nScan interrupted by user.", file=sys.stderr)
        sys.exit(130)

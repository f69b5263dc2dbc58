"""Rail route assembly from disconnected track-segment polylines.

Logic lives in pure functions under `railchain/`; scripts and the CLI orchestrate I/O.
"""

from __future__ import annotations

__version__ = "0.1.0"

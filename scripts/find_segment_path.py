"""Find a path of connected segments between two segment ids.

Run:
  python scripts/find_segment_path.py 4019799 4019800 --list
"""

from __future__ import annotations

from bootstrap import ensure_repo_root_on_path

ensure_repo_root_on_path(__file__)

from railchain.diagnostics.find_path import main  # noqa: E402

if __name__ == "__main__":
    raise SystemExit(main())

"""Zipped dataset support: datasets may ship as `segments.geojson.zip` or `segments.zip`."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from zipfile import ZipFile

LOGGER = logging.getLogger(__name__)


def archive_candidates(path: Path) -> list[Path]:
    """Archive names tried for `path`, in order: `<name>.zip`, then `<stem>.zip`."""
    path = Path(path)
    return list(dict.fromkeys([path.with_name(path.name + ".zip"), path.with_suffix(".zip")]))


def _find_member(zf: ZipFile, name: str) -> str:
    files = [n for n in zf.namelist() if n and not n.endswith("/")]
    matches = [n for n in files if Path(n).name == name]
    if len(matches) != 1:
        raise ValueError(
            f"{zf.filename} must contain exactly one file named {name!r} "
            f"(found {len(matches)} among {len(files)} file(s))"
        )
    return matches[0]


def ensure_unzipped(path: Path) -> Path:
    """Return `path`, extracting it from a sibling archive first when it is missing.

    The member is matched by basename, so archives with a top-level folder work too. It is
    written to a temporary sibling and renamed, so an interrupted extraction never leaves a
    truncated dataset behind.
    """
    path = Path(path)
    if path.exists():
        return path

    archive = next((p for p in archive_candidates(path) if p.exists()), None)
    if archive is None:
        tried = ", ".join(str(p) for p in archive_candidates(path))
        raise FileNotFoundError(f"Dataset not found: {path} (also tried {tried})")

    path.parent.mkdir(parents=True, exist_ok=True)
    partial = path.with_name(path.name + ".part")
    with ZipFile(archive) as zf:
        member = _find_member(zf, path.name)
        with zf.open(member) as src, partial.open("wb") as dst:
            shutil.copyfileobj(src, dst)
    if partial.stat().st_size <= 0:
        partial.unlink()
        raise RuntimeError(f"Extraction failed: {archive} -> {path} is empty")
    partial.replace(path)
    LOGGER.info("Extracted %s from %s", path.name, archive)
    return path

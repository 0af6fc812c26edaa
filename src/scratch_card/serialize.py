from __future__ import annotations

import csv
import json
import platform
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Optional

from .core.card import Card


def ensure_parent(path: Path, *, mkdirs: bool) -> None:
    parent = path.parent
    if not parent.exists() and mkdirs:
        parent.mkdir(parents=True, exist_ok=True)


def write_json(path: Path, data: object, *, mkdirs: bool, overwrite: bool) -> None:
    if path.exists() and not overwrite:
        raise FileExistsError(
            f"Refusing to overwrite existing file without --force: {path}"
        )
    ensure_parent(path, mkdirs=mkdirs)
    text = json.dumps(data, ensure_ascii=True, sort_keys=True, indent=2)
    path.write_text(text + "\n", encoding="utf-8")


def build_run_meta(
    *,
    app_version: str,
    params_hash: str,
    seed: Optional[int],
    rng_engine: str,
) -> Dict[str, object]:
    return {
        "app_version": app_version,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "python_version": sys.version.split()[0],
        "platform": platform.system().lower(),
        "params_hash": params_hash,
        "seed": seed,
        "rng_engine": rng_engine,
        "hash_algorithm": "sha256",
    }


def card_to_dict(card: Card) -> Dict[str, object]:
    return {
        "rows": card.rows,
        "cols": card.cols,
        "symbols": [list(row) for row in card.symbols],
        "winning_symbol": card.winning_symbol,
        "winning_cells": sorted(list(c) for c in card.winning_cells),
        "fingerprint": card.fingerprint(),
    }


def emit_report_json(
    path: Path,
    *,
    report: Dict[str, object],
    run_meta: Dict[str, object],
    mkdirs: bool,
    overwrite: bool,
) -> None:
    write_json(path, {"run_meta": run_meta, "report": report}, mkdirs=mkdirs, overwrite=overwrite)


def emit_summary_csv(
    path: Path,
    *,
    freqs: Dict[str, int],
    outcomes: Optional[Dict[str, int]],
    mkdirs: bool,
    overwrite: bool,
) -> None:
    if path.exists() and not overwrite:
        raise FileExistsError(
            f"Refusing to overwrite existing file without --force: {path}"
        )
    ensure_parent(path, mkdirs=mkdirs)
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(["symbol", "total"])
        for symbol in sorted(freqs.keys()):
            writer.writerow([symbol, freqs[symbol]])
        if outcomes:
            writer.writerow([])
            writer.writerow(["outcome", "games"])
            for name in sorted(outcomes.keys()):
                writer.writerow([name, outcomes[name]])

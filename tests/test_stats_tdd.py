from __future__ import annotations

import csv
import json
from pathlib import Path

import pytest

from scratch_card.serialize import build_run_meta, emit_report_json, emit_summary_csv
from scratch_card.stats import (
    chi2_wilson_hilferty_pvalue,
    extra_winning_rate,
    filler_frequencies,
    run_simulation,
    summarize,
)
from scratch_card.symbols import SYMBOLS


def test_simulation_is_reproducible_per_seed():
    a = run_simulation(games=20, rows=3, cols=3, seed=77)
    b = run_simulation(games=20, rows=3, cols=3, seed=77)
    assert [c.fingerprint() for c in a.cards] == [c.fingerprint() for c in b.cards]
    assert [r.reveals for r in a.results] == [r.reveals for r in b.results]


def test_summary_counts_every_game_as_won():
    run = run_simulation(games=50, rows=3, cols=3, seed=1)
    report = summarize(run)
    assert report["games"] == 50
    assert report["outcomes"] == {"won": 50, "exhausted": 0}
    assert 3 <= report["mean_moves"] <= 9
    assert report["mean_moves_to_win"] == report["mean_moves"]
    assert 0.0 <= report["extra_winning_symbol_rate"] <= 1.0
    p = report["tests"]["non_winning_filler_uniformity"]["chi2"]["p_value"]
    assert 0.0 <= p <= 1.0


def test_filler_frequencies_cover_non_triple_cells():
    run = run_simulation(games=10, rows=2, cols=3, seed=2)
    freqs = filler_frequencies(run.cards)
    assert set(freqs) == set(SYMBOLS)
    assert sum(freqs.values()) == 10 * (6 - 3)


def test_extra_winning_rate_empty():
    assert extra_winning_rate([]) == 0.0


def test_chi2_pvalue_bounds():
    assert chi2_wilson_hilferty_pvalue(0.0, 0) == 1.0
    assert chi2_wilson_hilferty_pvalue(1000.0, 7) < 0.001
    assert chi2_wilson_hilferty_pvalue(7.0, 7) > 0.3


def test_report_and_csv_emission(tmp_path: Path):
    report = summarize(run_simulation(games=5, rows=3, cols=3, seed=3))
    meta = build_run_meta(app_version="0.0.0", params_hash="sha256:x", seed=3, rng_engine="py_random")
    out = tmp_path / "nested" / "report.json"
    emit_report_json(out, report=report, run_meta=meta, mkdirs=True, overwrite=False)
    data = json.loads(out.read_text(encoding="utf-8"))
    assert data["report"]["games"] == 5
    assert data["run_meta"]["seed"] == 3

    with pytest.raises(FileExistsError):
        emit_report_json(out, report=report, run_meta=meta, mkdirs=True, overwrite=False)

    summary = tmp_path / "summary.csv"
    emit_summary_csv(
        summary, freqs=report["filler_frequencies"], outcomes=report["outcomes"], mkdirs=True, overwrite=False
    )
    rows = list(csv.reader(summary.open(encoding="utf-8")))
    assert rows[0] == ["symbol", "total"]
    assert ["outcome", "games"] in rows

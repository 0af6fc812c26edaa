from __future__ import annotations

import logging
import secrets
import sys
from pathlib import Path
from typing import Optional

import typer

from .config import resolve_parameters
from .core import GameState, generate_card
from .errors import ConstructionError, RevealError
from .logging_setup import setup_logging
from .render import render_card
from .rng import create_rng, derive_seed
from .serialize import (
    build_run_meta,
    card_to_dict,
    emit_report_json,
    emit_summary_csv,
    write_json,
)
from .session import play_game
from .stats import run_simulation, summarize
from .strategy import PromptStrategy, RandomStrategy, Strategy
from .version import __version__

app = typer.Typer(help="Scratch card game CLI")

logger = logging.getLogger(__name__)

STRATEGIES = ("random", "interactive")


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(0)


@app.callback()
def common_options(
    version: bool = typer.Option(
        False,
        "--version",
        help="Show application version and exit",
        is_eager=True,
        callback=_version_callback,
    ),
) -> None:
    pass


def _collect_overrides(**values: object) -> dict:
    overrides = {}
    for key, value in values.items():
        if value is None:
            continue
        overrides[key.replace("__", ".")] = value
    return overrides


def _resolve(config: Optional[str], overrides: dict) -> tuple[dict, str]:
    resolved, params_hash, _cfg_path_unused = resolve_parameters(
        config_path_str=config, cli_overrides=overrides
    )
    setup_logging(
        level=str(resolved.get("log_level", "WARNING")),
        log_file=resolved.get("log_file"),
    )
    return resolved, params_hash


@app.command()
def play(
    config: str = typer.Option(None, "--config", help="Path to config file (YAML/JSON)"),
    rows: int = typer.Option(None, "--rows", help="Card rows (default 3)"),
    cols: int = typer.Option(None, "--cols", help="Card columns (default 3)"),
    seed: int = typer.Option(None, "--seed", help="Seed for a reproducible card and moves"),
    rng_engine: str = typer.Option(None, "--rng-engine", help="py_random|numpy_pcg64"),
    strategy: str = typer.Option(None, "--strategy", help="random|interactive"),
    show_steps: bool = typer.Option(
        True, "--show-steps/--no-show-steps", help="Render the card after each reveal"
    ),
    out_card: str = typer.Option(None, "--out-card", help="Write the card layout as JSON"),
    log_level: str = typer.Option(None, "--log-level", help="DEBUG|INFO|WARNING|ERROR"),
    log_file: str = typer.Option(None, "--log-file", help="Log file path"),
    force: bool = typer.Option(False, "--force", help="Overwrite outputs if they exist"),
    no_mkdirs: bool = typer.Option(False, "--no-mkdirs", help="Do not create parent directories"),
) -> None:
    """Play one game on a freshly generated card."""
    resolved, params_hash = _resolve(
        config,
        _collect_overrides(
            rows=rows,
            cols=cols,
            seed__value=seed,
            seed__engine=rng_engine,
            strategy=strategy,
            out_card=out_card,
            log_level=log_level,
            log_file=log_file,
        ),
    )

    n_rows = int(resolved.get("rows", 3))
    n_cols = int(resolved.get("cols", 3))
    engine = str(resolved["seed"].get("engine", "py_random"))
    seed_value = resolved["seed"].get("value")
    strategy_name = str(resolved.get("strategy", "random")).strip().lower()
    if strategy_name not in STRATEGIES:
        typer.echo(f"Unknown strategy: {strategy_name} (expected one of {STRATEGIES})", err=True)
        raise typer.Exit(code=2)

    if seed_value is None:
        card_rng = create_rng(engine)
        move_rng = create_rng(engine)
    else:
        card_rng = create_rng(engine, derive_seed(int(seed_value), 0, "card"))
        move_rng = create_rng(engine, derive_seed(int(seed_value), 0, "moves"))

    try:
        card = generate_card(n_rows, n_cols, rng=card_rng)
    except ConstructionError as exc:
        for reason in exc.reasons:
            logger.error(reason)
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=2)

    if resolved.get("out_card"):
        run_meta = build_run_meta(
            app_version=__version__,
            params_hash=params_hash,
            seed=seed_value,
            rng_engine=engine,
        )
        write_json(
            Path(resolved["out_card"]),
            {"run_meta": run_meta, "card": card_to_dict(card)},
            mkdirs=(not no_mkdirs),
            overwrite=force,
        )

    state = GameState(card)
    chooser: Strategy
    max_invalid: Optional[int] = 100
    if strategy_name == "interactive":
        # a person may retype bad cells any number of times
        chooser = PromptStrategy()
        max_invalid = None
        typer.echo(render_card(state))
    else:
        chooser = RandomStrategy(move_rng)

    def on_reveal(st: GameState, cell: tuple[int, int], symbol: str) -> None:
        if show_steps:
            typer.echo(f"\nScratched {cell}: {symbol}")
            typer.echo(render_card(st))

    def on_reject(st: GameState, exc: RevealError) -> None:
        typer.echo(str(exc), err=True)

    result = play_game(
        state, chooser, on_reveal=on_reveal, on_reject=on_reject, max_invalid=max_invalid
    )

    if result.won:
        typer.echo(f"\nWinner! Three of {', '.join(result.matched_symbols)} in {result.moves} moves.")
    else:
        typer.echo(f"\nNo match after all {result.moves} cells.")
    typer.echo(render_card(state, show_all=True))
    raise typer.Exit(code=0)


@app.command()
def simulate(
    config: str = typer.Option(None, "--config", help="Path to config file (YAML/JSON)"),
    games: int = typer.Option(None, "--games", help="Number of games to play (default 1000)"),
    rows: int = typer.Option(None, "--rows", help="Card rows (default 3)"),
    cols: int = typer.Option(None, "--cols", help="Card columns (default 3)"),
    seed: int = typer.Option(None, "--seed", help="Base seed; random when omitted"),
    rng_engine: str = typer.Option(None, "--rng-engine", help="py_random|numpy_pcg64"),
    out_report: str = typer.Option(None, "--out-report", help="report.json output path"),
    summary_csv: str = typer.Option(None, "--summary-csv", help="Path to summary.csv (optional)"),
    log_level: str = typer.Option(None, "--log-level", help="DEBUG|INFO|WARNING|ERROR"),
    log_file: str = typer.Option(None, "--log-file", help="Log file path"),
    force: bool = typer.Option(False, "--force", help="Overwrite outputs if they exist"),
    no_mkdirs: bool = typer.Option(False, "--no-mkdirs", help="Do not create parent directories"),
) -> None:
    """Play many random games and report outcome and symbol statistics."""
    resolved, params_hash = _resolve(
        config,
        _collect_overrides(
            games=games,
            rows=rows,
            cols=cols,
            seed__value=seed,
            seed__engine=rng_engine,
            out_report=out_report,
            summary_csv=summary_csv,
            log_level=log_level,
            log_file=log_file,
        ),
    )

    n_games = int(resolved.get("games", 1000))
    n_rows = int(resolved.get("rows", 3))
    n_cols = int(resolved.get("cols", 3))
    engine = str(resolved["seed"].get("engine", "py_random"))
    seed_value = resolved["seed"].get("value")
    if seed_value is None:
        seed_value = secrets.randbits(63)
        logger.info("No seed given, using %d", seed_value)

    try:
        run = run_simulation(
            games=n_games, rows=n_rows, cols=n_cols, seed=int(seed_value), rng_engine=engine
        )
    except ConstructionError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=2)

    report = summarize(run)
    outcomes = report["outcomes"]
    typer.echo(f"Played {report['games']} games on {n_rows}x{n_cols} cards (seed {seed_value})")
    typer.echo(f"Outcomes: {outcomes}")
    typer.echo(f"Mean moves: {report['mean_moves']}")
    typer.echo(f"Cards with extra winning symbols: {report['extra_winning_symbol_rate']:.2%}")

    if resolved.get("out_report"):
        run_meta = build_run_meta(
            app_version=__version__,
            params_hash=params_hash,
            seed=int(seed_value),
            rng_engine=engine,
        )
        emit_report_json(
            Path(resolved["out_report"]),
            report=report,
            run_meta=run_meta,
            mkdirs=(not no_mkdirs),
            overwrite=force,
        )
        typer.echo(f"Report written to {resolved['out_report']}")

    if resolved.get("summary_csv"):
        freqs = report.get("filler_frequencies", {})
        if not isinstance(freqs, dict):
            freqs = {}
        emit_summary_csv(
            Path(resolved["summary_csv"]),
            freqs=freqs,
            outcomes=outcomes if isinstance(outcomes, dict) else None,
            mkdirs=(not no_mkdirs),
            overwrite=force,
        )

    raise typer.Exit(code=0)


def main(_argv: list[str] | None = None) -> int:
    try:
        app(args=_argv, standalone_mode=True)
        return 0
    except SystemExit as e:
        return int(e.code) if e.code is not None else 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())

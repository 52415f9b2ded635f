from __future__ import annotations

import argparse
import logging
import sys
import threading

from .console import format_scoreboard, run_menu
from .game_basics import deserialize_board, is_valid_state
from .paths import STORE_ENV, resolve_store_path
from .ranking import RankingIOError, load, save
from .solver import solve_state
from .tactics import fork_moves, immediate_winning_moves


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="ttt",
        description="Tic-tac-toe with a persistent scoreboard",
        epilog=f"The scoreboard path may also be given through ${STORE_ENV}.",
    )
    p.add_argument("store", nargs="?", help="Path to the scoreboard file, e.g. ./scores.db")
    p.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    p.add_argument("--version", action="store_true", help="Print version and exit")
    p.add_argument(
        "--info",
        action="store_true",
        help="Print environment and dependency info and exit",
    )
    p.add_argument(
        "--scoreboard",
        action="store_true",
        help="Print the scoreboard and exit without starting the menu",
    )
    p.add_argument(
        "--solve",
        metavar="BOARD",
        help="Print the best move for a board (9 digits, 0=empty,1=X,2=O; O moves first) and exit",
    )
    return p


def _print_info() -> None:
    import importlib.util
    import platform

    print(f"python={sys.version.split()[0]} platform={platform.platform()}")
    for pkg in ["numpy"]:
        spec = importlib.util.find_spec(pkg)
        if spec is None:
            print(f"{pkg}=<not installed>")
        else:
            mod = __import__(pkg)
            ver = getattr(mod, "__version__", "?")
            print(f"{pkg}={ver}")


def _solve(raw: str) -> int:
    try:
        b = deserialize_board(raw.strip())
    except ValueError as exc:
        logging.error("%s", exc)
        return 2
    if not is_valid_state(b):
        logging.error("Board is not a valid reachable state.")
        return 2
    res = solve_state(b)
    if res['best_move'] is None:
        logging.info("outcome=%s no move available", res['outcome'].value)
        return 0
    p = res['to_move']
    logging.info(
        "to_move=%s best=%d value=%d wins=%s forks=%s",
        p.name,
        res['best_move'] + 1,
        res['value'],
        [m + 1 for m in immediate_winning_moves(b, p)],
        [m + 1 for m in fork_moves(b, p)],
    )
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    ns = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if getattr(ns, "verbose", False) else logging.INFO,
                        format="[%(levelname)s] %(message)s")

    # Early exits
    if ns.version:
        try:
            from importlib.metadata import version as _ver

            print(_ver("ttt-ladder"))
        except Exception:
            print("unknown")
        return 0
    if ns.info:
        _print_info()
        return 0
    if ns.solve is not None:
        return _solve(ns.solve)

    path = resolve_store_path(ns.store)
    if path is None:
        parser.print_usage(sys.stderr)
        print(f"ttt: error: a scoreboard file is required (argument or ${STORE_ENV})", file=sys.stderr)
        return 1

    try:
        store = load(path)
    except RankingIOError as exc:
        logging.error("error reading from file: %s", exc)
        return 1

    if ns.scoreboard:
        sys.stdout.write(format_scoreboard(store))
        return 0

    run_menu(store, cancel=threading.Event())

    try:
        save(store, path)
    except (RankingIOError, ValueError) as exc:
        logging.error("error writing to file: %s", exc)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())

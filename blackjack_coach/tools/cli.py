from __future__ import annotations

import argparse
import logging
import random
import sys
from typing import Callable, List, Optional

from ..config import db_path, load_config
from ..db.store import SqliteStatsStore
from ..db.writer import StatsWriter
from ..errors import StrategyLookupError
from ..logging_setup import setup_logging
from ..strategy.cards import UPCARDS, deal_cards, matchup_label, parse_item_key
from ..strategy.oracle import chart
from ..trainer.scheduler import TrainingScheduler
from .diag import install_and_init

logger = logging.getLogger(__name__)

# Consecutive failed draws before the drill gives up
MAX_FAILED_DRAWS = 5


def run_drill(
    scheduler: TrainingScheduler,
    input_fn: Callable[[str], str] = input,
    output: Callable[[str], None] = print,
    rng: Optional[random.Random] = None,
    max_hands: Optional[int] = None,
) -> int:
    """Interactive drill loop. Returns the number of graded hands."""
    rng = rng or random.Random()
    graded = 0
    failed_draws = 0
    output("Actions: H=hit S=stand D=double P=split R=surrender | x=skip q=quit")
    while max_hands is None or graded < max_hands:
        try:
            presented = scheduler.next_item()
        except StrategyLookupError as exc:
            failed_draws += 1
            logger.error("Drill draw failed (%d in a row): %s", failed_draws, exc)
            if failed_draws >= MAX_FAILED_DRAWS:
                output("Strategy data looks corrupted; ending the session.")
                return graded
            output("Could not look up that hand, dealing another.")
            continue
        failed_draws = 0
        item = presented.item
        cards = " ".join(deal_cards(item.category, rng))
        tag = " [review]" if presented.served_from_queue else ""
        choices = "/".join(a.value for a in presented.available_actions)
        output(f"\n{item.category.label} ({cards}) vs dealer {item.upcard.upcard_label}{tag}")

        while True:
            try:
                answer = input_fn(f"{choices}> ").strip()
            except EOFError:
                answer = "q"
            if answer.lower() == "q":
                scheduler.skip()
                return graded
            if answer.lower() == "x":
                scheduler.skip()
                break
            result = scheduler.submit(answer)
            if result is None:
                output(f"Choose one of {choices}")
                continue
            graded += 1
            if result.is_correct:
                output(f"Correct! Streak {result.streak}, session {result.session_accuracy}%")
            else:
                output(f"Wrong: you chose {result.user_action.label}, correct is {result.correct_action.label}.")
                output(f"  {result.explanation}")
                if presented.hint:
                    output(f"  Tip: {presented.hint}")
            break
    return graded


def _print_chart(output: Callable[[str], None] = print) -> None:
    header = "      " + " ".join(f"{u.upcard_label:>3}" for u in UPCARDS)
    for kind, rows in chart().items():
        output(f"\n{kind.upper()}")
        output(header)
        for hand, symbols in rows:
            output(f"{hand:>5} " + " ".join(f"{s:>3}" for s in symbols))


def main(argv: Optional[List[str]] = None) -> int:
    p = argparse.ArgumentParser(prog="blackjack-coach", description="Basic strategy drill trainer")
    p.add_argument("--config", default=None, help="Configuration file path")
    p.add_argument("--db", default=None, help="Override the stats database path")
    sub = p.add_subparsers(dest="command")

    drill = sub.add_parser("drill", help="Run an interactive drill session")
    drill.add_argument("--mode", choices=["critical", "hard", "balanced", "random"], default=None)
    drill.add_argument("--hands", type=int, default=None, help="Stop after this many graded hands")
    drill.add_argument("--seed", type=int, default=None)

    sub.add_parser("stats", help="Show lifetime statistics")
    weak = sub.add_parser("weak-spots", help="Show the worst-played hands")
    weak.add_argument("--min-attempts", type=int, default=None)
    weak.add_argument("--limit", type=int, default=None)
    sub.add_parser("queue", help="Show the mistake queue")
    sub.add_parser("chart", help="Print the basic strategy chart")
    sub.add_parser("reset", help="Erase all statistics")

    args = p.parse_args(argv)
    command = args.command or "drill"

    setup_logging(overwrite=False)
    if command == "chart":
        _print_chart()
        return 0

    if args.config is None:
        install_and_init()
    config = load_config(args.config)
    writer = StatsWriter(SqliteStatsStore(args.db or db_path(config)))
    writer.start()
    try:
        seed = getattr(args, "seed", None)
        scheduler = TrainingScheduler.from_config(config, store=writer, rng=random.Random(seed))
        if command == "drill":
            mode = getattr(args, "mode", None)
            if mode:
                scheduler.set_mode(mode)
            n = run_drill(scheduler, max_hands=getattr(args, "hands", None), rng=random.Random(seed))
            s = scheduler.session_stats()
            print(f"\nSession: {s['correct']}/{n} correct ({s['accuracy']}%), best streak {s['best_streak']}")
        elif command == "stats":
            s = scheduler.lifetime_stats()
            print(f"Hands: {s['total_hands']}  Correct: {s['total_correct']}  "
                  f"Accuracy: {s['accuracy']}%  Best streak: {s['best_streak']}")
        elif command == "weak-spots":
            spots = scheduler.weak_spots(args.min_attempts, args.limit)
            if not spots:
                print("Not enough data yet")
            for w in spots:
                print(f"{w.label:<16} {w.accuracy * 100:5.1f}%  {w.correct}/{w.attempts}  avg {w.avg_time_s:.2f}s")
        elif command == "queue":
            q = scheduler.queue_stats()
            print(f"{q['count']} hands in review")
            for e in q['entries']:
                category, upcard = parse_item_key(e.item_key)
                print(f"  {matchup_label(category, upcard):<16} {e.consecutive_correct}/{scheduler.config.graduation_threshold}")
        elif command == "reset":
            scheduler.reset()
            print("Statistics erased")
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    finally:
        writer.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())

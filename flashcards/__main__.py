"""CLI interface for Flashcards.

Usage:
    python -m flashcards add "question" "answer"   Add a new flashcard
    python -m flashcards list                      List all flashcards
    python -m flashcards view 3                    View a flashcard
    python -m flashcards delete 3                  Delete a flashcard
    python -m flashcards reset                     Reset all card statistics
    python -m flashcards quiz                      Start a quiz session
    python -m flashcards stats                     Show deck statistics
"""

import argparse
import logging
import sys
from pathlib import Path

from backend.config import settings
from backend.errors import FlashcardError, NoCardsAvailableError
from backend.models.card import Card, Difficulty
from backend.models.deck import CardStore
from backend.srs.difficulty import DifficultyThresholds
from backend.srs.session import OUTCOME_KEYS, Outcome, QuizSession, SessionSummary, start_session
from backend.storage import open_deck, save

logger = logging.getLogger(__name__)

DIFFICULTY_MARKERS = {
    Difficulty.EASY: "🟢",
    Difficulty.MEDIUM: "🟡",
    Difficulty.HARD: "🔴",
}

OUTCOME_MESSAGES = {
    Outcome.CORRECT_EASY: "✨ Marked as correct & easy!",
    Outcome.CORRECT_MEDIUM: "👍 Marked as correct but medium difficulty!",
    Outcome.WRONG: "📚 Marked as wrong - review this one more!",
}


def _format_rate(card: Card) -> str:
    rate = card.metadata.success_rate
    return f"{rate * 100:.0f}%" if rate is not None else "0%"


def cmd_add(args: argparse.Namespace, store: CardStore) -> None:
    """Add a new flashcard."""
    card_id = store.add(args.question, args.answer)
    save(store, args.file)
    print(f"Added flashcard #{card_id}: {store.get(card_id).question}")


def cmd_list(args: argparse.Namespace, store: CardStore) -> None:
    """List every flashcard followed by deck statistics."""
    if not store:
        print("No flashcards found. Add some with 'flashcards add <question> <answer>'")
        return

    print(f"Flashcards in deck ({len(store)}):")
    for card in store.list_cards():
        meta = card.metadata
        print(
            f"#{card.id} {DIFFICULTY_MARKERS[meta.difficulty]} [{card.question[:30].strip()}] "
            f"Success: {_format_rate(card)} ({meta.correct_count}/{meta.times_reviewed})"
        )
        if meta.times_reviewed > 0:
            last = meta.last_reviewed.isoformat() if meta.last_reviewed else "Never"
            print(f"    Last reviewed: {last}")
        print()

    _print_deck_stats(store)


def _print_deck_stats(store: CardStore) -> None:
    stats = store.stats()
    rate = stats.success_rate or 0.0
    print("📈 Deck Statistics:")
    print(f"   {'Total cards:':<22} {stats.total_cards}")
    print(f"   {'Total reviews:':<22} {stats.total_reviews}")
    print(f"   {'Overall success rate:':<22} {rate * 100:.1f}%")
    for difficulty, count in stats.by_difficulty.items():
        print(f"   {difficulty.value + ':':<22} {count}")


def cmd_stats(args: argparse.Namespace, store: CardStore) -> None:
    """Show deck statistics."""
    _print_deck_stats(store)


def cmd_view(args: argparse.Namespace, store: CardStore) -> None:
    """Show a single flashcard with its statistics."""
    card = store.get(args.id)
    meta = card.metadata
    print(f"📄 Flashcard #{card.id}:")
    print(f"❓ Question: {card.question}")
    print(f"💡 Answer: {card.answer}")
    print()
    print("📊 Statistics:")
    print(f"   Difficulty: {DIFFICULTY_MARKERS[meta.difficulty]} {meta.difficulty.value}")
    print(f"   Times reviewed: {meta.times_reviewed}")
    print(f"   Correct answers: {meta.correct_count}")
    if meta.success_rate is None:
        print("   Success rate: Not yet reviewed")
    else:
        print(f"   Success rate: {meta.success_rate * 100:.1f}%")
        last = meta.last_reviewed.isoformat() if meta.last_reviewed else "Never"
        print(f"   Last reviewed: {last}")


def cmd_delete(args: argparse.Namespace, store: CardStore) -> None:
    """Delete a flashcard."""
    store.delete(args.id)
    save(store, args.file)
    print(f"🗑️  Deleted flashcard #{args.id}")


def cmd_reset(args: argparse.Namespace, store: CardStore) -> None:
    """Reset all statistics after confirmation."""
    if not store:
        print("❌ No flashcards to reset.")
        return

    if not args.yes:
        answer = input(
            "⚠️  Are you sure you want to reset all statistics? This cannot be undone. (y/N): "
        )
        if answer.strip().lower() != "y":
            print("❌ Reset cancelled.")
            return

    store.reset_statistics()
    save(store, args.file)
    print("🔄 Reset all flashcard statistics.")


def _ask_outcome() -> Outcome | None:
    """Prompt until a valid rating is entered. Returns None on quit or EOF."""
    while True:
        try:
            key = input("Rate your performance (c/g/w/q): ").strip().lower()
        except EOFError:
            return None
        if key == "q":
            return None
        if key in OUTCOME_KEYS:
            return OUTCOME_KEYS[key]
        print("Invalid input! Use: c (correct/easy), g (got it/medium), w (wrong/hard), q (quit)")


def run_quiz(quiz: QuizSession) -> SessionSummary:
    """Drive an interactive quiz over a started session."""
    print("🎯 Starting quiz! Press Enter to see the answer, then rate your performance:")
    print("Ratings: (c)orrect + easy, (g)ot it but medium, (w)rong/hard, (q)uit\n")

    total = len(quiz.order)
    while not quiz.is_finished:
        position = total - quiz.remaining + 1
        question, answer = quiz.present()
        card_id = quiz.current_card_id

        print(f"--- Card {position}/{total} ---")
        print(f"❓ Question: {question}")
        try:
            input("Press Enter to reveal answer...")
        except EOFError:
            outcome = None
        else:
            print(f"✅ Answer: {answer}")
            print()
            outcome = _ask_outcome()
        if outcome is None:
            print("Quiz ended early!")
            quiz.quit()
            break
        quiz.grade(card_id, outcome)
        print(OUTCOME_MESSAGES[outcome] + "\n")

    return quiz.summary()


def print_quiz_summary(summary: SessionSummary) -> None:
    print("🎉 Quiz Complete!")
    print(
        f"📊 Results: {summary.correct_count}/{summary.total_presented} correct "
        f"({summary.accuracy * 100:.1f}%)"
    )


def cmd_quiz(args: argparse.Namespace, store: CardStore) -> None:
    """Run an interactive quiz session and save the results."""
    max_cards = args.max_cards if args.max_cards is not None else settings.default_max_cards
    try:
        quiz = start_session(
            store,
            max_count=max_cards,
            thresholds=DifficultyThresholds.from_settings(settings),
            seed=args.seed,
        )
    except NoCardsAvailableError as exc:
        print(exc)
        return
    # Grades already recorded are kept even if the quiz is interrupted
    try:
        summary = run_quiz(quiz)
    finally:
        save(store, args.file)
    print_quiz_summary(summary)


COMMANDS = {
    "add": cmd_add,
    "list": cmd_list,
    "view": cmd_view,
    "delete": cmd_delete,
    "reset": cmd_reset,
    "quiz": cmd_quiz,
    "stats": cmd_stats,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="flashcards",
        description="A CLI flashcard application",
    )
    parser.add_argument("-v", "--verbose", action="store_true")
    parser.add_argument(
        "-f", "--file", type=Path, default=settings.data_file, help="Deck file to use"
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # add
    add_parser = subparsers.add_parser("add", help="Add a new flashcard")
    add_parser.add_argument("question", help="The question for the flashcard")
    add_parser.add_argument("answer", help="The answer for the flashcard")

    # list / stats
    subparsers.add_parser("list", help="List all flashcards")
    subparsers.add_parser("stats", help="Show deck statistics")

    # view / delete
    view_parser = subparsers.add_parser("view", help="View a specific flashcard by ID")
    view_parser.add_argument("id", type=int, help="The ID of the flashcard to view")
    delete_parser = subparsers.add_parser("delete", help="Delete a flashcard by ID")
    delete_parser.add_argument("id", type=int, help="The ID of the flashcard to delete")

    # reset
    reset_parser = subparsers.add_parser("reset", help="Reset all card statistics")
    reset_parser.add_argument("-y", "--yes", action="store_true", help="Skip the confirmation")

    # quiz
    quiz_parser = subparsers.add_parser("quiz", help="Start a quiz session")
    quiz_parser.add_argument("--max-cards", type=int, default=None, help="Max cards per session")
    quiz_parser.add_argument("--seed", type=int, default=None, help="Seed for the card order")

    return parser


def main(argv: list[str] | None = None) -> None:
    """Entry point for the Flashcards CLI application."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose or settings.debug:
        logging.basicConfig(level=logging.DEBUG)

    if not args.command:
        parser.print_help()
        return

    try:
        store = open_deck(args.file)
        COMMANDS[args.command](args, store)
    except FlashcardError as exc:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"❌ {exc}", file=sys.stderr)
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()

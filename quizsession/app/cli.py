from __future__ import annotations

"""CLI for quizsession: run a timed quiz in the terminal and inspect history."""

import argparse
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from analytics.metrics import strong_topics, topic_stats, weak_topics
from analytics.prepare import entries_frame
from analytics.smoothing import ewma_percentage
from storage.store import HistoryRepository
from ..config.config import analytics_config, load_config, validate_config
from ..errors import QuizSessionError
from ..models import QuestionStatus, QuizScore, QuizSession, SessionState
from ..results.recorder import HistoryRecorder
from ..session.questions import load_questions, prepare_questions
from ..util.logging_config import configure_logging
from ..util.randomness import make_rng, seed_if_needed
from .engine import QuizEngine
from .explain import enable as explain_enable

_log = logging.getLogger(__name__)

HELP = (
    "Commands: <option number> select | n next | p previous | g N go to | m mark | "
    "u unmark | s skip | c clear | pause | resume | t time | submit | ? help"
)

_STATUS_MARKS = {
    QuestionStatus.NOT_ANSWERED: " ",
    QuestionStatus.ANSWERED: "x",
    QuestionStatus.MARKED: "?",
    QuestionStatus.ANSWERED_MARKED: "!",
    QuestionStatus.SKIPPED: "-",
}


def _build_ui() -> dict[str, Any]:
    def ask(prompt: str) -> str:
        return input(prompt)

    def inform(msg: str) -> None:
        print(msg)

    return {"ask": ask, "inform": inform}


def _fmt_seconds(value: Optional[float]) -> str:
    if value is None:
        return "--:--"
    s = int(round(value))
    return f"{s // 60:02d}:{s % 60:02d}"


def _show_question(engine: QuizEngine, inform: Callable[[str], None]) -> None:
    session = engine.session
    attempt = session.current_attempt
    nav = engine.navigation
    q = attempt.question
    strip = "".join(f"[{_STATUS_MARKS[a.status]}]" for a in session.attempts)
    timer = engine.timer_view()
    inform("")
    inform(f"{strip}  answered {nav.answered_count}/{nav.total_questions}, time left {_fmt_seconds(timer.time_remaining)}")
    inform(f"Q{session.current_question_index + 1}. {q.prompt}  ({attempt.status.value})")
    for i, opt in enumerate(q.options, start=1):
        chosen = "*" if opt.id == attempt.selected_option_id else " "
        inform(f"  {chosen}{i}) {opt.text}")


def _show_score(session: QuizSession, inform: Callable[[str], None]) -> None:
    score = session.score
    by_id = {q.id: q for q in session.questions}
    inform("\nSession Summary:")
    inform(f"Score: {score.correct}/{score.total} ({score.percentage:.1f}%) - {'PASSED' if score.passed else 'not passed'}")
    inform(
        f"Incorrect: {score.incorrect}  Unanswered: {score.unanswered}  Skipped: {score.skipped}  Marked: {score.marked}"
    )
    inform(f"Time: {_fmt_seconds(score.total_time_spent)} (avg {score.average_time_per_question:.1f}s/question)")
    for b in score.breakdown:
        if b.is_correct:
            continue
        correct = by_id[b.question_id].option(b.correct_answer)
        inform(f"- {b.question_text} -> {correct.text if correct else b.correct_answer}" + (f" ({b.explanation})" if b.explanation else ""))


def run_quiz(engine: QuizEngine, ui: dict[str, Any]) -> Optional[QuizScore]:
    """Drive an already started engine from a line-based ask/inform UI."""
    ask, inform = ui["ask"], ui["inform"]
    inform(HELP)
    while True:
        session = engine.session
        if session is None:
            return None
        if session.state is SessionState.FINISHED:
            break
        if session.state is SessionState.PAUSED:
            if ask("Paused. Type 'resume' to continue: ").strip().lower() == "resume":
                engine.resume()
            continue
        _show_question(engine, inform)
        raw = ask("> ").strip()
        cmd = raw.lower()
        if engine.session.state is SessionState.FINISHED:
            inform("Time is up.")
            break
        if cmd.isdigit():
            idx = int(cmd) - 1
            options = engine.session.current_attempt.question.options
            if 0 <= idx < len(options):
                engine.select_option(options[idx].id)
            else:
                inform("No such option.")
        elif cmd == "n":
            engine.next_question()
        elif cmd == "p":
            engine.previous_question()
        elif cmd.startswith("g "):
            try:
                engine.go_to_question(int(cmd[2:]) - 1)
            except ValueError:
                inform("Usage: g N")
        elif cmd == "m" and session.settings.allow_mark_for_review:
            engine.mark_for_review()
        elif cmd == "u":
            engine.unmark_question()
        elif cmd == "s" and session.settings.allow_skip:
            engine.skip_question()
        elif cmd == "c":
            engine.clear_answer()
        elif cmd == "pause":
            engine.pause()
        elif cmd == "t":
            view = engine.timer_view()
            inform(f"Elapsed {_fmt_seconds(view.time_elapsed)}, remaining {_fmt_seconds(view.time_remaining)} ({view.level})")
        elif cmd == "submit":
            if not engine.navigation.can_submit:
                inform("Answer at least one question before submitting.")
                continue
            engine.submit()
        else:
            inform(HELP)
    session = engine.session
    if session.score is not None:
        _show_score(session, inform)
    return session.score


def _print_history(repo: HistoryRepository, subject: str, cfg: Dict[str, Any]) -> None:
    log = repo.get(subject)
    agg = log.aggregate
    print(f"Subject: {log.subject}")
    print(
        f"Attempts: {agg.total_attempts}  Average: {agg.average_score:.1f}%  Best: {agg.best_score:.1f}%  "
        f"Time: {_fmt_seconds(agg.total_time_spent)}  Improvement: {agg.improvement_rate:+.1f}%"
    )
    for e in reversed(log.entries):
        print(f"  {e.completed_at:%Y-%m-%d %H:%M}  {e.score.obtained}/{e.score.total}  {e.score.percentage:.1f}%")
    acfg = analytics_config(cfg)
    stats = topic_stats(log.entries)
    strong = strong_topics(stats, acfg)
    weak = weak_topics(stats, acfg)
    if strong:
        print("Strong topics: " + ", ".join(strong))
    if weak:
        print("Weak topics: " + ", ".join(weak))


def _write_report(repo: HistoryRepository, subject: str, outdir: Path, cfg: Dict[str, Any]) -> int:
    from analytics.plots import plot_topics, plot_trend

    acfg = analytics_config(cfg)
    log = repo.get(subject)
    if not log.entries:
        print(f"No history for {log.subject}")
        return 2
    outdir.mkdir(parents=True, exist_ok=True)
    df = ewma_percentage(entries_frame(log.entries), span=acfg.smoothing_span)
    plot_trend(df, last=acfg.trend_window, title=log.subject, save_path=outdir / f"trend_{log.subject}.png")
    stats = topic_stats(log.entries)
    plot_topics(
        stats,
        weak_threshold=acfg.weak_threshold,
        strong_threshold=acfg.strong_threshold,
        save_path=outdir / f"topics_{log.subject}.png",
    )
    df.to_csv(outdir / f"history_{log.subject}.csv", index=False)
    print(f"Reports saved to: {outdir.resolve()}")
    return 0


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(prog="quizsession")
    p.add_argument("--verbose", "-v", action="count", default=0)
    sub = p.add_subparsers(dest="cmd", required=True)

    rp = sub.add_parser("run")
    rp.add_argument("questions", help="YAML or JSON question file")
    rp.add_argument("--config", default=None)
    rp.add_argument("--subject", default="general")
    rp.add_argument("--time-limit", dest="time_limit", type=int, default=None, help="Total time limit in seconds")
    rp.add_argument("--questions", dest="n_questions", type=int, default=None)
    rp.add_argument("--explain", action="store_true")
    rp.add_argument("--no-history", dest="no_history", action="store_true")
    rp.add_argument("--data-dir", dest="data_dir", default=None)

    hp = sub.add_parser("history")
    hp.add_argument("subject", nargs="?", default=None)
    hp.add_argument("--config", default=None)
    hp.add_argument("--clear", action="store_true")
    hp.add_argument("--export", default=None, help="Write the subject's attempts as NDJSON")
    hp.add_argument("--data-dir", dest="data_dir", default=None)

    op = sub.add_parser("report")
    op.add_argument("subject")
    op.add_argument("--out", default="reports")
    op.add_argument("--config", default=None)
    op.add_argument("--data-dir", dest="data_dir", default=None)

    args = p.parse_args(argv)
    configure_logging(logging.DEBUG if args.verbose > 1 else logging.INFO if args.verbose else logging.WARNING)

    try:
        cfg = validate_config(load_config(args.config))
    except QuizSessionError as e:
        print(f"ERROR: {e}")
        return 2
    hist_cfg = cfg["history"]
    repo = HistoryRepository(args.data_dir or hist_cfg["data_dir"], cap=hist_cfg["cap"])

    if args.cmd == "run":
        seed = seed_if_needed()
        if seed is not None:
            _log.info("Seeded RNG with SEED=%s", seed)
        if args.explain:
            explain_enable(True)
        if args.n_questions is not None:
            cfg["quiz"]["questions_per_session"] = args.n_questions
        try:
            bank = load_questions(args.questions)
            engine = QuizEngine.from_config(
                cfg,
                recorder=None if args.no_history or not hist_cfg["enabled"] else HistoryRecorder(repo),
            )
        except QuizSessionError as e:
            print(f"ERROR: {e}")
            return 2
        questions = prepare_questions(bank, engine.settings, make_rng(seed))
        with engine:
            engine.start(questions, subject=args.subject, total_time_limit=args.time_limit)
            if engine.session.state is not SessionState.ACTIVE:
                print("No questions to ask.")
                return 2
            try:
                run_quiz(engine, _build_ui())
            except (KeyboardInterrupt, EOFError):
                print("\nAborted; submitting what you have.")
                if engine.submit() is not None:
                    _show_score(engine.session, print)
        if engine.last_history is not None:
            agg = engine.last_history.aggregate
            print(f"History: {agg.total_attempts} attempts, average {agg.average_score:.1f}%, best {agg.best_score:.1f}%")
        return 0

    if args.cmd == "history":
        if args.clear:
            cleared = repo.clear(args.subject)
            print(f"Cleared: {', '.join(cleared) if cleared else 'nothing'}")
            return 0
        if args.subject is None:
            subjects = repo.list_subjects()
            if not subjects:
                print("No history yet.")
            for s in subjects:
                agg = repo.get(s).aggregate
                print(f"{s}: {agg.total_attempts} attempts, average {agg.average_score:.1f}%")
            return 0
        if args.export:
            n = repo.export_ndjson(args.subject, Path(args.export))
            print(f"Exported {n} attempts to {args.export}")
            return 0
        _print_history(repo, args.subject, cfg)
        return 0

    if args.cmd == "report":
        return _write_report(repo, args.subject, Path(args.out), cfg)

    return 0


if __name__ == "__main__":
    raise SystemExit(main())

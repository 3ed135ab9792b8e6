#!/usr/bin/env python3
"""
Main entry point for the FactCheck pipeline.
Allows running the package with: python -m factcheck
"""
import sys
from typing import List, Optional

from .config import get_config, InterviewLevel, Tone
from .errors import FactCheckError, ReasoningServiceError, SessionStateError
from .interview.events import EventType
from .interview.models import CandidateSubmission, SessionSettings, SessionState
from .interview.prompts import TIME_EXCEEDED_MARKER
from .interview.schemas import AnalysisReport, FeedbackReport
from . import FactCheckOrchestrator

USAGE = (
    "Usage: python -m factcheck <github-url> [<github-url> ...] --resume=resume.txt "
    "[--jd=jd.txt] [--level=intern|junior|mid3|mid5] [--time-limit=SECONDS] "
    "[--tone=neutral|direct|analytical] [--token=GITHUB_TOKEN] [--tolerate]"
)


def _read_text(path: str, what: str) -> str:
    try:
        with open(path, encoding="utf-8") as f:
            return f.read()
    except OSError as e:
        print(f"❌ Could not read {what} file '{path}': {e}")
        sys.exit(1)


def _print_report(report: AnalysisReport):
    ev = report.evaluation
    print("\n" + "=" * 50)
    print("📊 FACT-CHECK REPORT")
    print("=" * 50)
    for label, metric in (
        ("Architecture", ev.architecture),
        ("Code Quality", ev.code_quality),
        ("Problem Solving", ev.problem_solving),
        ("Tech Proficiency", ev.tech_proficiency),
        ("Completeness", ev.project_completeness),
        ("Consistency", ev.consistency),
        ("Growth Potential", ev.growth_potential),
    ):
        print(f"   {label:<18} {metric.score:>5.0f}  {metric.reason}")
    print(f"\n📝 JD: {report.summary.jd_analysis}")
    print(f"🔎 Alignment: {report.summary.alignment_analysis}")
    print("\n🚩 Claims:")
    for i, item in enumerate(report.items, start=1):
        print(f"   [{i}] {item.verdict.value:<11} {item.topic} (mismatch {item.score:.0f})")
        print(f"       claim: {item.resume_claim}")


def _print_feedback(feedback: Optional[FeedbackReport]):
    print("\n" + "=" * 50)
    print("🎯 INTERVIEW FEEDBACK")
    print("=" * 50)
    if feedback is None:
        print("No feedback was produced.")
        return
    print(f"🛡️  Defense Score: {feedback.defense_score:.1f}/10")
    print(f"🧠 Logic: {feedback.logic_score:.1f}/5 - {feedback.logic_reasoning}")
    print(f"🔧 Solution: {feedback.solution_score:.1f}/5 - {feedback.solution_reasoning}")
    print(f"💭 {feedback.feedback_summary}")
    for title, entries in (("✅ Strengths", feedback.positive_feedback),
                           ("⚠️  To improve", feedback.constructive_feedback),
                           ("📌 Action items", feedback.action_items)):
        print(title)
        for entry in entries:
            print(f"   - {entry}")


def _choose_item(report: AnalysisReport):
    if not report.items:
        print("\n✅ No claims to discuss.")
        return None
    flagged = report.flagged() or report.items
    default = report.items.index(flagged[0]) + 1
    while True:
        choice = input(f"\nPick a claim to be interviewed on [1-{len(report.items)}] (Enter = {default}, q = quit): ").strip()
        if choice.lower() == "q":
            return None
        if not choice:
            return report.items[default - 1]
        if choice.isdigit() and 1 <= int(choice) <= len(report.items):
            return report.items[int(choice) - 1]
        print("❌ Invalid choice.")


def main(argv: Optional[List[str]] = None):
    """Command-line interface for the fact-check pipeline."""
    argv = sys.argv[1:] if argv is None else argv

    # Load configuration from environment
    try:
        config = get_config()
    except ValueError as e:
        print(f"❌ Configuration Error: {e}")
        sys.exit(1)

    urls: List[str] = []
    resume_path = None
    jd_path = None
    level = config.level
    tone = config.tone
    time_limit = config.per_turn_seconds
    token = config.github_token
    tolerate = False

    for arg in argv:
        if arg.startswith("--resume="):
            resume_path = arg.split("=", 1)[1]
        elif arg.startswith("--jd="):
            jd_path = arg.split("=", 1)[1]
        elif arg.startswith("--level="):
            try:
                level = InterviewLevel(arg.split("=", 1)[1].lower())
            except ValueError:
                print("❌ Invalid level. Use --level=intern, junior, mid3 or mid5")
                sys.exit(1)
        elif arg.startswith("--tone="):
            try:
                tone = Tone(arg.split("=", 1)[1].lower())
            except ValueError:
                print("❌ Invalid tone. Use --tone=neutral, direct or analytical")
                sys.exit(1)
        elif arg.startswith("--time-limit="):
            try:
                time_limit = int(arg.split("=", 1)[1]) or None
            except ValueError:
                print("❌ Invalid time limit. Use --time-limit=SECONDS (0 disables)")
                sys.exit(1)
        elif arg.startswith("--token="):
            token = arg.split("=", 1)[1] or None
        elif arg == "--tolerate":
            tolerate = True
        elif arg in ("-h", "--help"):
            print(USAGE)
            return
        elif arg.startswith("--"):
            print(f"❌ Unknown option: {arg}")
            print(USAGE)
            sys.exit(1)
        else:
            urls.append(arg)

    if not urls or not resume_path:
        print(USAGE)
        sys.exit(1)

    submission = CandidateSubmission(
        repository_urls=urls,
        level=level,
        time_limit_seconds=time_limit,
        tone=tone,
        jd_type="text",
        job_description=_read_text(jd_path, "JD") if jd_path else "",
        doc_type="resume",
        resume_text=_read_text(resume_path, "resume"),
        repository_token=token,
    )

    orchestrator = FactCheckOrchestrator.from_config(config)

    print(f"🎯 Level: {level.value} | 🎨 Tone: {tone.value} | ⏱️  Time limit: {time_limit or 'none'}")
    print(f"📁 Detailed logs: {config.log_file}")
    print("🔍 Collecting repository evidence and fact-checking claims...")

    try:
        report = orchestrator.analyze(submission, tolerate_failures=tolerate)
    except FactCheckError as e:
        print(f"❌ {e}")
        sys.exit(1)

    if orchestrator.last_failures:
        print(f"⚠️  Skipped: {', '.join(orchestrator.last_failures)}")
    print(f"📦 Evidence: {orchestrator.last_source_summary}")
    _print_report(report)

    item = _choose_item(report)
    if item is None:
        return

    settings = SessionSettings(level=level, time_limit_seconds=time_limit, tone=tone)
    orchestrator.event_bus.subscribe(
        EventType.COUNTDOWN_TICK,
        lambda event: print(f"   ⏳ Ending in {event.data['remaining']}...")
    )
    session = orchestrator.start_interview(item, settings)

    print("\n" + "=" * 50)
    print(f"🎙️  Interview: {item.topic}   (/finish to end early, /exit to cancel)")
    print("=" * 50)
    print(f"🤖 {session.transcript[-1].text}")

    while session.state is SessionState.AWAITING_ANSWER and not session.cancelled:
        answer = input(f"[{session.question_count}] > ")
        command = answer.strip().lower()

        if command == "/exit":
            session.cancel()
            print("🚪 Interview cancelled.")
            return
        if command == "/finish":
            print("🛑 Finishing interview...")
            try:
                session.force_finish()
            except ReasoningServiceError as e:
                print(f"❌ {e}")
            break

        if session.time_remaining == 0:
            print("⏰ Time exceeded.")
            answer = TIME_EXCEEDED_MARKER

        try:
            reply = session.submit(answer)
        except SessionStateError as e:
            print(f"❌ {e}")
            break
        except ReasoningServiceError as e:
            print(f"❌ {e}")
            continue
        if reply:
            print(f"🤖 {reply}")

    if session.state is SessionState.TERMINATED:
        _print_feedback(session.feedback)
    print(f"📈 Session metrics: {orchestrator.get_metrics()}")


if __name__ == "__main__":
    main()

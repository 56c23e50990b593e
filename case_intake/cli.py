"""
CLI Interface for the case intake interview.

Runs an intake interview in the terminal, asking follow-ups when an answer
needs clarification and moving through the interview phases.
"""

import argparse
import json
import logging
import sys
from typing import Callable, Optional

from .config import AnalysisDepth, IntakeSettings
from .phases import CONVERSATION_PHASES, phase_sequence
from .session import InterviewSession


def print_header():
    """Print CLI header."""
    print("""
╔═══════════════════════════════════════════════════════════════╗
║                                                               ║
║     CASE INTAKE - Legal Interview                             ║
║                                                               ║
║     Tell us what happened, one question at a time             ║
║                                                               ║
╚═══════════════════════════════════════════════════════════════╝
    """)


def format_status(session: InterviewSession) -> str:
    """Phase position, completeness and open gaps as display text."""
    orchestrator = session.orchestrator
    sequence = phase_sequence(orchestrator.depth)
    current = orchestrator.current_phase
    position = sequence.index(current) + 1
    gaps = orchestrator.information_gaps

    lines = [
        "",
        f"Phase: {CONVERSATION_PHASES[current].name} ({position}/{len(sequence)})",
        f"Questions in phase: {orchestrator.progress.questions_in_phase}",
        f"Completeness: {orchestrator.completeness}%",
    ]
    if gaps.critical:
        lines.append("Still missing: " + ", ".join(gaps.critical))
    return "\n".join(lines)


def run_interactive_interview(
    session: InterviewSession,
    input_fn: Optional[Callable[[str], str]] = None
) -> dict:
    """
    Run an interactive interview in the terminal.

    Commands: 'status' shows progress, 'new' starts a new case, 'quit' ends
    the interview. Returns the interview summary.
    """
    input_fn = input_fn or input
    question = session.start()
    last_phase = session.orchestrator.current_phase
    print(f"\n[{CONVERSATION_PHASES[last_phase].name}]")

    while True:
        print(f"\n{question}")
        try:
            response = input_fn("\nYour answer: ").strip()
        except EOFError:
            break

        command = response.lower()
        if command == "quit":
            break
        if command == "status":
            print(format_status(session))
            continue
        if command == "new":
            question = session.new_case()
            last_phase = session.orchestrator.current_phase
            print("\nStarting a new case.")
            print(f"\n[{CONVERSATION_PHASES[last_phase].name}]")
            continue

        result = session.respond(response)
        decision = result.decision

        if decision.transitioned:
            print(f"\n✓ {CONVERSATION_PHASES[decision.previous_phase].name} complete")
            print(f"\n[{CONVERSATION_PHASES[decision.next_phase].name}]")
        if decision.should_follow_up:
            print(f"\n(follow-up: {decision.follow_up_reason})")

        question = result.next_question
        if result.finished:
            print(f"\n{question}")
            break

    summary = session.summary()
    print("""
╔═══════════════════════════════════════════════════════════════╗
║                    INTERVIEW COMPLETE                         ║
╚═══════════════════════════════════════════════════════════════╝
""")
    print(format_status(session))
    return summary


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Legal case intake interview",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Standard interview
  python -m case_intake.cli --country Sweden

  # Quick interview (opening, timeline, details, closing)
  python -m case_intake.cli --depth quick

  # Word questions with an LLM (GROQ_API_KEY, OPENAI_API_KEY or local Ollama)
  python -m case_intake.cli --llm

  # Write the interview summary to a file
  python -m case_intake.cli --output summary.json
        """
    )

    parser.add_argument(
        "--depth", "-d",
        choices=[d.value for d in AnalysisDepth],
        help="Analysis depth (default: INTAKE_ANALYSIS_DEPTH or standard)"
    )

    parser.add_argument(
        "--country", "-c",
        help="Jurisdiction of the case (default: INTAKE_COUNTRY)"
    )

    parser.add_argument(
        "--llm",
        action="store_true",
        help="Word questions with an LLM provider instead of the question bank"
    )

    parser.add_argument(
        "--output", "-o",
        help="Write the interview summary as JSON to this file"
    )

    parser.add_argument(
        "--list-phases",
        action="store_true",
        help="List the interview phases and exit"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Show debug logging"
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    try:
        settings = IntakeSettings.from_env()
    except ValueError as exc:
        print(f"Error: {exc}")
        sys.exit(1)

    if args.depth:
        settings.depth = AnalysisDepth.from_string(args.depth)
    if args.country:
        settings.country = args.country
    if args.llm:
        settings.use_llm = True

    print_header()

    if args.list_phases:
        print(f"Interview Phases ({settings.depth.value}):\n")
        for i, phase in enumerate(phase_sequence(settings.depth), 1):
            info = CONVERSATION_PHASES[phase]
            print(f"  {i}. {info.name}")
            print(f"     {info.description}")
            print(f"     Minimum questions: {info.min_questions}\n")
        return

    print("Type 'status' to see progress, 'new' to start over, 'quit' to stop.")

    session = InterviewSession(settings)
    summary = run_interactive_interview(session)

    if args.output:
        with open(args.output, "w") as f:
            json.dump(summary, f, indent=2)
        print(f"\nSummary saved to: {args.output}")


if __name__ == "__main__":
    main()

"""
Phase prompt templates for the question generator.

These prompts configure an LLM to word the next interview question. The
interview engine decides which phase governs the question and whether a
follow-up is needed; the model only phrases the question.
"""

from typing import Iterable, Optional

from ..phases import CONVERSATION_PHASES, ConversationPhase, coerce_phase

INTAKE_INTERVIEWER_SYSTEM_PROMPT = """
ROLE: Legal intake interviewer
OBJECTIVE: Gather the facts of a legal case so a lawyer can assess it

You are interviewing a person about a legal problem they are facing.
Your goal is to collect a complete, chronological and specific account that
can later be turned into a case report.

INTERVIEW STYLE:
- Ask ONE focused question at a time
- Use plain, empathetic language; the user is not a lawyer
- Never give legal advice or predict the outcome of the case
- Never repeat a question the user has already answered
- Keep questions short enough to be read aloud

OUTPUT FORMAT:
Reply with the next question only, without preamble or numbering.
"""


_PHASE_GUIDANCE = {
    ConversationPhase.OPENING: (
        '- Ask open-ended questions like "Can you tell me what happened?"\n'
        "- Let the user speak freely without interruption\n"
        "- Listen for key themes and parties\n"
        "- Build trust and rapport"
    ),
    ConversationPhase.TIMELINE: (
        '- Ask "When did this start?" and "When did X happen?"\n'
        "- Request specific dates, times, or timeframes\n"
        "- Build a chronological sequence\n"
        "- Identify any deadlines or time-sensitive issues"
    ),
    ConversationPhase.DETAILS: (
        '- Ask "Who was involved?" and "Where did this happen?"\n'
        "- Request specific names, titles, and roles\n"
        "- Clarify locations and settings\n"
        '- Understand the "how" of each event'
    ),
    ConversationPhase.LEGAL: (
        "- Ask about contracts, agreements, or written terms\n"
        "- Identify legal relationships (employer-employee, landlord-tenant, etc.)\n"
        "- Explore obligations and rights under {country} law\n"
        "- Look for potential violations or breaches"
    ),
    ConversationPhase.EVIDENCE: (
        '- Ask "Do you have any documents related to this?"\n'
        "- Request emails, messages, contracts, receipts\n"
        "- Identify potential witnesses\n"
        "- Look for photos, videos, or recordings"
    ),
    ConversationPhase.IMPACT: (
        '- Ask "How has this affected you financially?"\n'
        "- Explore emotional and psychological impact\n"
        "- Identify ongoing consequences\n"
        "- Quantify losses where possible"
    ),
    ConversationPhase.CLOSING: (
        "- Review any gaps in the story\n"
        "- Ask clarifying questions\n"
        "- Confirm key facts\n"
        "- Prepare user for report generation"
    ),
}


def get_phase_guidance(phase, country: str = "") -> str:
    """Phase-specific interviewing guidance as a bullet list."""
    phase = coerce_phase(phase)
    return _PHASE_GUIDANCE[phase].format(country=country.strip() or "the applicable")


def get_phase_prompt_enhancement(phase, country: str = "") -> str:
    """
    Render the current phase as a prompt section.

    Args:
        phase: The phase governing the next question
        country: Jurisdiction, mentioned in the legal guidance

    Returns:
        Markdown block describing the phase objective, goals and
        transition criteria
    """
    info = CONVERSATION_PHASES[coerce_phase(phase)]
    goals = "\n".join(f"- {objective}" for objective in info.objectives)

    return f"""
## CURRENT INTERVIEW PHASE: {info.name.upper()}

**Phase Objective:** {info.description}

**Key Goals:**
{goals}

**What to Focus On:**
{get_phase_guidance(info.phase, country)}

**Transition Criteria:**
- Ask at least {info.min_questions} questions in this phase
- Ensure: {', '.join(info.completion_criteria)}
- Move to next phase when objectives are met or user has no more information

**Remember:** Stay in this phase until objectives are met. Don't rush to next phase.
"""


def build_system_prompt(
    phase,
    country: str = "",
    gaps: Optional[Iterable[str]] = None
) -> str:
    """
    Full system prompt for the question generator.

    Args:
        phase: The phase governing the next question
        country: Jurisdiction of the case
        gaps: Critical information still missing, most important first

    Returns:
        System prompt string
    """
    prompt = INTAKE_INTERVIEWER_SYSTEM_PROMPT + get_phase_prompt_enhancement(phase, country)

    gaps = list(gaps or [])
    if gaps:
        prompt += f"""
**Still Missing (address when natural):**
{chr(10).join(f'- {gap}' for gap in gaps)}
"""
    return prompt


def create_question_prompt(
    phase,
    last_answer: str,
    history: Iterable[tuple] = ()
) -> str:
    """
    User message asking the model for the next question.

    Args:
        phase: The phase governing the next question
        last_answer: The user's latest answer
        history: Recent (question, answer) pairs, oldest first

    Returns:
        Prompt string for the LLM
    """
    info = CONVERSATION_PHASES[coerce_phase(phase)]
    history_text = "\n".join(f"Q: {q}\nA: {a}\n" for q, a in history)

    return f"""
INTERVIEW_STAGE: {info.name}

CONVERSATION SO FAR:
{history_text if history_text else "The interview has just started."}

LATEST ANSWER:
{last_answer.strip() if last_answer and last_answer.strip() else "(no answer)"}

---

Ask the next question for the {info.name} phase.
"""

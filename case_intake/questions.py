"""
Question generator for the intake interview.

Words the next substantive question for the phase chosen by the
orchestrator. An LLM provider is used when one is configured; otherwise,
or when generation fails, questions come from a fixed per-phase bank so an
interview can always continue.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from .errors import GenerationError
from .llm.base import LLMProvider, Message
from .phases import ConversationPhase, coerce_phase
from .prompts import build_system_prompt, create_question_prompt

logger = logging.getLogger(__name__)

OPENING_QUESTION = "Can you tell me in your own words what happened and what you need help with?"

QUESTION_BANK: dict[ConversationPhase, tuple[str, ...]] = {
    ConversationPhase.OPENING: (
        OPENING_QUESTION,
        "Who are the people or organisations involved in this?",
        "What is the main thing you would like to achieve?",
    ),
    ConversationPhase.TIMELINE: (
        "When did this start? An approximate date is fine.",
        "What happened next, and when?",
        "Are there any deadlines or dates coming up that matter?",
        "Is money being claimed, and how much?",
    ),
    ConversationPhase.DETAILS: (
        "Who exactly was involved? Please give names and roles if you can.",
        "Where did this take place?",
        "Can you walk me through how it happened, step by step?",
        "Why do you think the other party acted this way?",
    ),
    ConversationPhase.LEGAL: (
        "Was there a contract or written agreement between you?",
        "What was the relationship between you and the other party, for example employer, landlord or seller?",
        "What did each side promise or owe the other?",
    ),
    ConversationPhase.EVIDENCE: (
        "Do you have any documents related to this, such as emails, messages, contracts or receipts?",
        "Did anyone else see what happened?",
        "Do you have photos, recordings or other records?",
    ),
    ConversationPhase.IMPACT: (
        "How has this affected you financially?",
        "How has this affected you personally or your family?",
        "Is the situation still ongoing?",
    ),
    ConversationPhase.CLOSING: (
        "Is there anything important we haven't covered yet?",
        "Is everything you've told me correct as far as you know?",
    ),
}

# Number of recent exchanges sent to the model
HISTORY_WINDOW = 6


class QuestionGenerator:
    """Produces the wording of the next question."""

    def __init__(self, provider: Optional[LLMProvider] = None, country: str = ""):
        self.provider = provider
        self.country = country

    @property
    def uses_llm(self) -> bool:
        return self.provider is not None and self.provider.is_available()

    def opening_question(self) -> str:
        return OPENING_QUESTION

    def fallback_question(self, phase, asked_in_phase: int = 0) -> str:
        """Static bank question, rotating through the phase's questions."""
        bank = QUESTION_BANK[coerce_phase(phase)]
        return bank[asked_in_phase % len(bank)]

    def next_question(
        self,
        phase,
        answer: str,
        history: Iterable[tuple] = (),
        gaps: Optional[Iterable[str]] = None,
        asked_in_phase: int = 0
    ) -> str:
        """
        Word the next question for `phase`.

        Args:
            phase: Phase governing the question
            answer: The user's latest answer
            history: Recent (question, answer) pairs, oldest first
            gaps: Critical information still missing
            asked_in_phase: Questions already asked in this phase

        Returns:
            The question text
        """
        phase = coerce_phase(phase)
        if not self.uses_llm:
            return self.fallback_question(phase, asked_in_phase)

        messages = [
            Message(role="system", content=build_system_prompt(phase, self.country, gaps)),
            Message(role="user", content=create_question_prompt(
                phase, answer, list(history)[-HISTORY_WINDOW:]
            )),
        ]
        try:
            response = self.provider.chat(messages)
        except GenerationError as exc:
            logger.warning("Question generation failed, using question bank: %s", exc)
            return self.fallback_question(phase, asked_in_phase)

        question = response.content.strip().strip('"').strip()
        if not question:
            logger.warning("Provider %s returned an empty question, using question bank", self.provider.name)
            return self.fallback_question(phase, asked_in_phase)
        return question

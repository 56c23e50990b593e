"""
Prompt templates for the case intake question generator.
"""

from .phase_prompts import (
    INTAKE_INTERVIEWER_SYSTEM_PROMPT,
    get_phase_guidance,
    get_phase_prompt_enhancement,
    build_system_prompt,
    create_question_prompt
)

__all__ = [
    "INTAKE_INTERVIEWER_SYSTEM_PROMPT",
    "get_phase_guidance",
    "get_phase_prompt_enhancement",
    "build_system_prompt",
    "create_question_prompt"
]

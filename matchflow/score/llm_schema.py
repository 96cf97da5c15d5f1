"""
LLM judgement schema.

Defines a dataclass for the part of a provider response the engine
actually uses: the model's niche-match score plus qualitative
strengths, concerns and reasoning.  Any other fields a provider sends
back (including its own ``overall``) are dropped at parse time.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class LLMJudgement:
    """Validated result of an LLM niche evaluation."""

    niche_match: int
    strengths: List[str]
    concerns: List[str]
    reasoning: str

"""
Transcript Analyzer - Structured Extraction with LangChain

Asks a chat model to read a call transcript and return an
AnalysisPayload. The existing account context is passed along so the
model reports what is new rather than restating what is known; the
reconcilers deduplicate regardless.
"""

import logging
from typing import Any, Optional

from pydantic import ValidationError

from ...core.entities import Account
from ...core.exceptions import AnalysisError
from ...core.vocabulary import BUSINESS_AREAS, KEY_METRICS, MEDDICC_CATEGORIES, StakeholderRole
from .schemas import AnalysisPayload


logger = logging.getLogger(__name__)


ANALYSIS_SYSTEM_PROMPT = """You are a sales analyst for a construction CapEx software company.
Read the call transcript and extract structured account intelligence.

Business area ids: {area_ids}
Metric ids: {metric_ids}
Stakeholder roles: {roles}
MEDDICC categories for gaps: {meddicc}

Rules:
- Only report observations supported by the transcript
- Use null for metrics that were not mentioned
- Use "Unknown" when a person's buying role is unclear
- Phrase information gaps as questions to ask on the next call"""

ANALYSIS_USER_TEMPLATE = """Existing account context:
{context}

Transcript:
{transcript}"""


def build_account_context(account: Optional[Account]) -> str:
    """Summarize what is already known so the model focuses on new facts."""
    if account is None:
        return "No prior calls."

    known_people = ", ".join(
        f"{s.name} ({s.role})" for s in account.stakeholders if s.name
    ) or "none"
    open_questions = "; ".join(g.question for g in account.open_gaps()) or "none"
    known_metrics = ", ".join(
        f"{key}={metric.value}" for key, metric in account.metrics.items()
        if metric.value is not None
    ) or "none"

    return (
        f"Account: {account.name}\n"
        f"Prior calls: {len(account.transcripts)}\n"
        f"Known stakeholders: {known_people}\n"
        f"Known metrics: {known_metrics}\n"
        f"Open questions: {open_questions}"
    )


class TranscriptAnalyzer:
    """Runs transcript analysis through a structured-output chain."""

    def __init__(self, llm_provider=None):
        """
        Args:
            llm_provider: LLMProvider instance (optional, created from settings)
        """
        self._provider = llm_provider
        self._chain = None

    def _get_provider(self):
        if self._provider is None:
            from ...config.providers import LLMProvider
            self._provider = LLMProvider()
        return self._provider

    def _get_chain(self):
        if self._chain is None:
            from langchain_core.prompts import ChatPromptTemplate

            prompt = ChatPromptTemplate.from_messages([
                ("system", ANALYSIS_SYSTEM_PROMPT),
                ("human", ANALYSIS_USER_TEMPLATE)
            ])
            structured_llm = self._get_provider().with_structured_output(AnalysisPayload)
            self._chain = prompt | structured_llm
        return self._chain

    def analyze(self, transcript: str, account: Optional[Account] = None) -> AnalysisPayload:
        """
        Analyze a transcript.

        Raises AnalysisError when the model call fails or returns nothing usable.
        """
        if not transcript or not transcript.strip():
            raise AnalysisError("Transcript is empty")

        input_vars = {
            "area_ids": ", ".join(area.id for area in BUSINESS_AREAS),
            "metric_ids": ", ".join(metric.id for metric in KEY_METRICS),
            "roles": ", ".join(role.value for role in StakeholderRole),
            "meddicc": ", ".join(MEDDICC_CATEGORIES),
            "context": build_account_context(account),
            "transcript": transcript,
        }

        try:
            output: Any = self._get_chain().invoke(input_vars)
        except Exception as e:
            logger.error("Transcript analysis failed: %s", e)
            raise AnalysisError(f"Transcript analysis failed: {e}") from e

        if output is None:
            raise AnalysisError("Failed to parse transcript analysis")
        if isinstance(output, AnalysisPayload):
            return output
        try:
            return AnalysisPayload.model_validate(output)
        except ValidationError as e:
            logger.error("Transcript analysis returned an unusable payload: %s", e)
            raise AnalysisError(f"Failed to parse transcript analysis: {e}") from e

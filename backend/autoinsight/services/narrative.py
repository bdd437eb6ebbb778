"""
Narrative (business) insight collaborators.

The insight generator asks a NarrativeCollaborator for free-form business
commentary on a dataset summary. Production wiring uses Groq (primary) and
Gemini (fallback); tests and offline runs use the in-process collaborators.
Every failure surfaces as CollaboratorError.
"""
import os
import json
import logging
import re
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from typing import Any, Dict, List, Optional, Sequence

from groq import Groq

from autoinsight.core.config import Settings, get_settings
from autoinsight.core.errors import CollaboratorError
from autoinsight.core.sanitization import sanitize_for_prompt
from autoinsight.core.schemas import AIInsight

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "You are a business intelligence expert. Be specific, quantitative, and actionable."

_NUMBERED_LINE = re.compile(r'^\d+\.')
_TAGGED_INSIGHT = re.compile(r'\[(\w+)\]\s*([^:]+):\s*(.+)')


class NarrativeCollaborator(ABC):
    """Turns a structured dataset summary into free-form business commentary."""

    @abstractmethod
    def generate_narrative(self, summary: Dict[str, Any], sample_rows: Sequence[Dict[str, Any]]) -> str:
        """
        Return numbered lines of commentary.

        Raises:
            CollaboratorError: On network, timeout or service failure
        """


class StaticNarrativeCollaborator(NarrativeCollaborator):
    """Returns a fixed reply and remembers what it was asked."""

    def __init__(self, text: str):
        self.text = text
        self.calls: List[Dict[str, Any]] = []

    def generate_narrative(self, summary, sample_rows):
        self.calls.append({"summary": summary, "sample_rows": list(sample_rows)})
        return self.text


class FailingNarrativeCollaborator(NarrativeCollaborator):
    """Always fails. Used to exercise the local fallback."""

    def __init__(self, message: str = "Narrative service unavailable"):
        self.message = message

    def generate_narrative(self, summary, sample_rows):
        raise CollaboratorError(self.message)


def _json_default(value: Any) -> str:
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return str(value)


def build_prompt(summary: Dict[str, Any], sample_rows: Sequence[Dict[str, Any]]) -> str:
    """Business-intelligence prompt asking for `N. [TYPE] Title: Description` lines."""
    safe_summary = dict(summary)
    safe_summary["columns"] = [
        {**col, "name": sanitize_for_prompt(col.get("name"), 60)}
        for col in summary.get("columns", [])
    ]
    safe_rows = [
        {sanitize_for_prompt(k, 60): sanitize_for_prompt(v, 80) for k, v in row.items()}
        for row in sample_rows
    ]

    return f"""As a business intelligence expert, analyze this dataset and provide 3-5 actionable business insights:

Dataset Summary:
{json.dumps(safe_summary, indent=2, default=_json_default)}

Sample Data (first {len(safe_rows)} rows):
{json.dumps(safe_rows, indent=2, default=_json_default)}

Please provide insights in this format:
1. [INSIGHT_TYPE] Title: Description with specific numbers and actionable recommendations.

Focus on:
- Business opportunities and risks
- Performance patterns and trends
- Operational efficiency insights
- Customer/market behavior (if applicable)
- Revenue/cost optimization opportunities

Be specific, quantitative, and actionable."""


class AINarrativeCollaborator(NarrativeCollaborator):
    """Groq first, Gemini second; fails when neither is configured or both error."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self._groq_client: Optional[Groq] = None
        self._gemini_model = None  # lazy, avoids importing google SDK unless needed

    @classmethod
    def is_configured(cls) -> bool:
        return bool(os.getenv("GROQ_API_KEY") or os.getenv("GEMINI_API_KEY"))

    def _get_groq_client(self) -> Optional[Groq]:
        if self._groq_client is None:
            api_key = os.getenv("GROQ_API_KEY")
            if api_key:
                self._groq_client = Groq(api_key=api_key)
                logger.info("Groq AI client initialized")
        return self._groq_client

    def _get_gemini_model(self):
        if self._gemini_model is None:
            api_key = os.getenv("GEMINI_API_KEY")
            if api_key:
                import google.generativeai as genai
                genai.configure(api_key=api_key)
                self._gemini_model = genai.GenerativeModel(self.settings.gemini_model)
                logger.info(f"Gemini AI fallback initialized with model: {self.settings.gemini_model}")
        return self._gemini_model

    def _call_groq(self, prompt: str) -> Optional[str]:
        client = self._get_groq_client()
        if not client:
            return None
        response = client.chat.completions.create(
            model=self.settings.groq_model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt}
            ],
            max_tokens=self.settings.narrative_max_tokens,
            temperature=0.3,
            timeout=self.settings.narrative_timeout_seconds,
        )
        return response.choices[0].message.content

    def _call_gemini(self, prompt: str) -> Optional[str]:
        model = self._get_gemini_model()
        if not model:
            return None
        response = model.generate_content(
            f"{SYSTEM_PROMPT}\n\n{prompt}",
            request_options={"timeout": self.settings.narrative_timeout_seconds},
        )
        return response.text

    def generate_narrative(self, summary, sample_rows):
        if not self.is_configured():
            raise CollaboratorError("No AI providers configured (set GROQ_API_KEY or GEMINI_API_KEY)")

        prompt = build_prompt(summary, sample_rows)
        errors = []

        try:
            result = self._call_groq(prompt)
            if result:
                logger.debug("Narrative response from Groq")
                return result
        except Exception as e:
            error_str = str(e).lower()
            if "rate" in error_str or "limit" in error_str or "429" in error_str:
                logger.warning(f"Groq rate limited, trying Gemini fallback: {e}")
            else:
                logger.warning(f"Groq error, trying fallback: {e}")
            errors.append(f"groq: {e}")

        try:
            result = self._call_gemini(prompt)
            if result:
                logger.info("Narrative response from Gemini (fallback)")
                return result
        except Exception as e:
            logger.warning(f"Gemini fallback also failed: {e}")
            errors.append(f"gemini: {e}")

        raise CollaboratorError("; ".join(errors) or "Empty narrative response")


def request_narrative(
    collaborator: NarrativeCollaborator,
    summary: Dict[str, Any],
    sample_rows: Sequence[Dict[str, Any]],
    timeout: float,
) -> str:
    """
    Call a collaborator on a worker thread and wait at most `timeout` seconds.

    Raises:
        CollaboratorError: If the call fails or does not finish in time
    """
    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="narrative")
    future = executor.submit(collaborator.generate_narrative, summary, sample_rows)
    try:
        text = future.result(timeout=timeout)
    except FutureTimeoutError:
        future.cancel()
        raise CollaboratorError(f"Narrative request timed out after {timeout:g}s")
    except CollaboratorError:
        raise
    except Exception as e:
        raise CollaboratorError(f"Narrative request failed: {e}") from e
    finally:
        # do not block on a request that is still running
        executor.shutdown(wait=False)

    if not isinstance(text, str) or not text.strip():
        raise CollaboratorError("Empty narrative response")
    return text


def parse_narrative(text: str) -> List[AIInsight]:
    """
    Parse numbered `N. [TYPE] Title: Description` lines into business insights.

    Lines without the bracket tag fall back to a `N. Title: Description`
    split; lines matching neither are dropped.
    """
    insights = []
    for line in text.split('\n'):
        line = line.strip()
        if not line or not _NUMBERED_LINE.match(line):
            continue

        match = _TAGGED_INSIGHT.search(line)
        if match:
            _, title, description = match.groups()
            insights.append(AIInsight(
                type='business',
                title=title.strip(),
                description=description.strip(),
                severity='medium',
                actionable=True,
                recommendation=description.strip(),
            ))
            continue

        colon = line.find(':')
        if colon <= 0:
            continue
        head = line[:colon]
        title = head.split(' ', 1)[1].strip() if ' ' in head else head.strip()
        description = line[colon + 1:].strip()
        if not title or not description:
            continue
        insights.append(AIInsight(
            type='business',
            title=title,
            description=description,
            severity='medium',
            actionable=True,
        ))

    return insights

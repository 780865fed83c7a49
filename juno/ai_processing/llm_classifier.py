"""
LLM Job Classifier

Sends a job description and the sender profile to a hosted LLM and turns the
structured reply into a ClassificationResult. Failures are raised so the
workflow orchestrator can retry rate-limited calls.
"""

from typing import Any, Dict, List, Optional

from .job_classifier import ClassificationResult
from .llm_manager import LLMManager, LLMResponse, get_llm_manager
from ..profile import Profile
from ..utils import get_logger

logger = get_logger(__name__)

NO_PROFILE_TEXT = (
    "No profile information provided. Use placeholders like [Your Name], [Your Email], etc."
)

PROFILE_LABELS = (
    ("name", "Name"),
    ("email", "Email"),
    ("phone", "Phone"),
    ("portfolio", "Portfolio"),
    ("linkedin", "LinkedIn"),
    ("figma", "Figma"),
    ("resume_link", "Resume"),
    ("bio", "Bio"),
)

RESPONSE_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "isEntryLevel": {
            "type": "BOOLEAN",
            "description": "True if the job description is for an entry-level, fresher, or junior role "
                           "(0-2 years exp), or if no experience is mentioned.",
        },
        "emailSubject": {
            "type": "STRING",
            "description": "A professional, catchy email subject line for the job application.",
        },
        "emailBody": {
            "type": "STRING",
            "description": "A personalized, concise, and enthusiastic job application email body.",
        },
        "reason": {
            "type": "STRING",
            "description": "A short reason for the classification.",
        },
    },
    "required": ["isEntryLevel", "emailSubject", "emailBody", "reason"],
}


class LLMError(Exception):
    """Raised when the LLM call fails or returns an unusable payload."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class RateLimitError(LLMError):
    """The provider rejected the call because of rate limiting."""


def build_profile_prompt(profile: Profile) -> str:
    """List only the profile fields that are filled in."""
    lines: List[str] = [
        f"- {label}: {getattr(profile, attr)}"
        for attr, label in PROFILE_LABELS
        if getattr(profile, attr)
    ]
    return "\n".join(lines) if lines else NO_PROFILE_TEXT


def build_analysis_prompt(description: str, profile: Profile) -> str:
    return f"""Analyze this job description for entry-level suitability.

PROFILE INFORMATION:
{build_profile_prompt(profile)}

GUIDELINES:
- Only include profile fields that are provided above. Do NOT include fields that are not in the profile information.
- If a profile field is missing, do not mention it in the email at all (not even as a placeholder).
- The email should be polite, energetic, and professional.
- Focus on "willingness to learn" and "entry-level passion".
- Ensure the tone fits the role (e.g., designer vs developer).
- Include contact information (email, phone, LinkedIn, Figma, Portfolio) only if they are provided in the profile.

REJECTION:
- reject if >2 years exp is hard-required.

JOB:
{description}
"""


def _raise_for_response(response: LLMResponse) -> None:
    message = response.error or "LLM request failed"
    if response.status == 429 or "429" in message or "RESOURCE_EXHAUSTED" in message:
        raise RateLimitError(message, status=response.status)
    raise LLMError(message, status=response.status)


class LLMJobClassifier:
    """Classifies job descriptions through the configured LLM provider."""

    def __init__(self, llm_manager: Optional[LLMManager] = None):
        self.llm_manager = llm_manager or get_llm_manager()

    async def classify(self, description: str, profile: Optional[Profile] = None) -> ClassificationResult:
        """
        Classify one job description.

        Raises:
            RateLimitError: The provider is throttling requests
            LLMError: Any other provider failure or a malformed response
        """
        profile = profile or Profile()
        response = await self.llm_manager.generate_structured_response(
            prompt=build_analysis_prompt(description, profile),
            response_schema=RESPONSE_SCHEMA,
        )

        if not response.success:
            logger.warning(f"LLM analysis failed: {response.error}")
            _raise_for_response(response)

        if not response.data:
            raise LLMError("LLM response did not contain a JSON object")

        try:
            return ClassificationResult.from_dict(response.data)
        except ValueError as e:
            raise LLMError(f"Malformed LLM response: {e}") from e

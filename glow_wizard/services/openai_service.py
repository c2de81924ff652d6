import openai
from typing import Any, Optional
import json
import logging

import pydantic

from glow_wizard.core.config import settings
from glow_wizard.core.exceptions import (
    MalformedResponseError,
    RateLimitError,
    UpstreamError,
    UpstreamTimeoutError,
)
from glow_wizard.core.monitoring import track_ai_service, ai_service_tokens
from glow_wizard.schemas.photo import PhotoAnalysisResult
from glow_wizard.schemas.recommendation import RecommendationPayload, RecommendationResult

logger = logging.getLogger(__name__)

DERMATOLOGY_SYSTEM_PROMPT = "You are a dermatology expert providing personalized skincare recommendations."

OUTPUT_FORMAT = """{
    "recommendations": [
      {
        "category": "Cleanser|Moisturizer|Treatment",
        "product": "Brand Name Product",
        "ingredients": ["Hyaluronic Acid", "Niacinamide"],
        "routine": "Morning|Night|Both",
        "reasoning": "Explanation for this recommendation"
      }
    ]
  }"""

ANSWER_LABELS = {
    "hydration": "Daily water intake (glasses)",
    "sunExposure": "Sun exposure",
    "sleepHours": "Sleep (hours per night)",
    "stressLevel": "Stress level",
}


def get_age_group(age: Any) -> str:
    """Map an age to the age group used in prompts"""
    if not isinstance(age, (int, float)) or isinstance(age, bool):
        return "Unknown"
    if age < 18:
        return "Teen (13-17)"
    if age < 30:
        return "Young adult (18-29)"
    if age < 45:
        return "Adult (30-44)"
    if age < 60:
        return "Mature (45-59)"
    return "Senior (60+)"


def _describe_photos(photo_analysis: Optional[PhotoAnalysisResult]) -> str:
    if photo_analysis is None or not photo_analysis.success or photo_analysis.summary is None:
        return "No significant findings detected"

    summary = photo_analysis.summary
    lines = [
        f"{summary.processed_photos} of {summary.total_photos} photos processed "
        f"(average quality {summary.average_quality}/100, "
        f"{summary.recommended_for_analysis} recommended for analysis)"
    ]
    for photo in photo_analysis.photos:
        notes = "; ".join(photo.processing_notes) or "no issues"
        lines.append(f"- {photo.format.value} photo, quality {photo.quality.score}/100: {notes}")
    return "\n  ".join(lines)


class RecommendationService:
    """Generates skincare recommendations through the OpenAI chat API"""

    def __init__(self, client: Optional[openai.AsyncOpenAI] = None):
        self._client = client

    @property
    def client(self) -> openai.AsyncOpenAI:
        if self._client is None:
            # Retries are disabled: timeouts and rate limits surface to the caller
            self._client = openai.AsyncOpenAI(
                api_key=settings.OPENAI_API_KEY,
                timeout=settings.OPENAI_TIMEOUT_SECONDS,
                max_retries=0
            )
        return self._client

    def build_prompt(self, payload: RecommendationPayload) -> str:
        """
        Build the chain-of-thought prompt from the validated profile,
        normalized answers and photo analysis
        """
        profile = payload.profile
        concerns = profile.get("concerns") or []

        prompt_parts = [
            "**User Profile Analysis**",
            f"Skin Type: {profile.get('skinType', 'Unknown')}",
            f"Primary Concerns: {', '.join(concerns) if concerns else 'None reported'}",
            f"Age Group: {get_age_group(profile.get('age'))}",
            f"Location: {profile.get('location', 'Unknown')}",
        ]

        if payload.normalized_answers:
            prompt_parts.append("\n**Lifestyle Questionnaire**")
            for key, value in payload.normalized_answers.items():
                prompt_parts.append(f"{ANSWER_LABELS.get(key, key)}: {value}")

        prompt_parts.extend([
            "\n**Photo Analysis**",
            _describe_photos(payload.photo_analysis),
            "\n**Recommendation Steps**",
            "1. Analyze skin type and concerns",
            "2. Identify key ingredients to recommend",
            "3. Suggest specific products from our approved list",
            "4. Create morning/night routine",
            "\n**Required Output Format**",
            OUTPUT_FORMAT,
        ])

        return "\n".join(prompt_parts)

    def parse_ai_response(self, response_text: Optional[str]) -> RecommendationResult:
        """Extract and validate the JSON object embedded in the model answer"""
        if not response_text:
            raise MalformedResponseError("Empty response from AI")

        json_start = response_text.find("{")
        json_end = response_text.rfind("}") + 1
        if json_start == -1 or json_end <= json_start:
            raise MalformedResponseError("No JSON object found in AI response")

        try:
            data = json.loads(response_text[json_start:json_end])
        except json.JSONDecodeError as e:
            raise MalformedResponseError(f"Invalid JSON in AI response: {e}") from e

        if not isinstance(data, dict) or not isinstance(data.get("recommendations"), list):
            raise MalformedResponseError("Invalid response format from AI")

        try:
            return RecommendationResult.model_validate(data)
        except pydantic.ValidationError as e:
            raise MalformedResponseError(f"Invalid recommendation entries: {e.error_count()} errors") from e

    @track_ai_service("openai", "generate_recommendations")
    async def generate_recommendations(self, payload: RecommendationPayload) -> RecommendationResult:
        """
        Ask the model for recommendations.

        Raises:
            RateLimitError: the API answered 429
            UpstreamTimeoutError: no answer within OPENAI_TIMEOUT_SECONDS
            MalformedResponseError: the answer is not a recommendation list
            UpstreamError: any other API failure
        """
        prompt = self.build_prompt(payload)
        logger.info(f"Generated prompt preview (first 300 chars): {prompt[:300]}")

        prompt_tokens = len(prompt.split()) * 1.3
        ai_service_tokens.labels(service="openai", type="prompt").inc(int(prompt_tokens))

        try:
            response = await self.client.chat.completions.create(
                model=settings.OPENAI_MODEL,
                messages=[
                    {"role": "system", "content": DERMATOLOGY_SYSTEM_PROMPT},
                    {"role": "user", "content": prompt}
                ],
                temperature=settings.OPENAI_TEMPERATURE,
                max_tokens=settings.OPENAI_MAX_TOKENS
            )
        except openai.RateLimitError as e:
            logger.warning(f"OpenAI rate limit: {e}")
            raise RateLimitError("Please wait before making new requests") from e
        except openai.APITimeoutError as e:
            logger.warning(f"OpenAI timeout: {e}")
            raise UpstreamTimeoutError("Response took too long") from e
        except openai.APIError as e:
            logger.error(f"OpenAI API error: {e}")
            raise UpstreamError(str(e)) from e

        usage = getattr(response, "usage", None)
        if usage is not None and isinstance(getattr(usage, "completion_tokens", None), int):
            ai_service_tokens.labels(service="openai", type="completion").inc(usage.completion_tokens)

        return self.parse_ai_response(response.choices[0].message.content)


recommendation_service = RecommendationService()

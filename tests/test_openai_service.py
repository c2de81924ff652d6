import pytest
import json
from unittest.mock import AsyncMock, MagicMock

import httpx
import openai

from glow_wizard.core.exceptions import (
    MalformedResponseError,
    RateLimitError,
    UpstreamError,
    UpstreamTimeoutError,
)
from glow_wizard.schemas.photo import PhotoAnalysisResult, PhotoSummary
from glow_wizard.schemas.recommendation import RecommendationPayload
from glow_wizard.services.openai_service import RecommendationService, get_age_group

OPENAI_REQUEST = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")

SAMPLE_ANSWER = {
    "recommendations": [
        {
            "category": "Moisturizer",
            "product": "La Roche-Posay Toleriane Double Repair",
            "ingredients": ["Ceramides", "Niacinamide"],
            "routine": "Night",
            "reasoning": "Restores the barrier for dry, sensitive skin"
        }
    ]
}

@pytest.fixture
def payload(valid_profile):
    return RecommendationPayload(
        profile=valid_profile,
        normalized_answers={"hydration": 6, "sunExposure": "high"},
        photo_analysis=PhotoAnalysisResult(
            success=True,
            summary=PhotoSummary(
                total_photos=2,
                processed_photos=1,
                failed_photos=1,
                ai_compatible_photos=1,
                average_quality=100,
                recommended_for_analysis=1
            ),
            ready_for_ai=True
        )
    )

def _completion(content):
    completion = MagicMock()
    completion.choices = [MagicMock()]
    completion.choices[0].message.content = content
    completion.usage.completion_tokens = 120
    return completion

def _service(create):
    client = MagicMock()
    client.chat.completions.create = create
    return RecommendationService(client=client)


@pytest.mark.parametrize("age,group", [
    (13, "Teen (13-17)"),
    (18, "Young adult (18-29)"),
    (44, "Adult (30-44)"),
    (45, "Mature (45-59)"),
    (72, "Senior (60+)"),
    ("29", "Unknown"),
    (None, "Unknown"),
])
def test_age_group(age, group):
    assert get_age_group(age) == group


class TestPrompt:

    def test_prompt_includes_profile_answers_and_photos(self, payload):
        prompt = RecommendationService(client=MagicMock()).build_prompt(payload)

        assert "Skin Type: combination" in prompt
        assert "Primary Concerns: acne, redness" in prompt
        assert "Age Group: Young adult (18-29)" in prompt
        assert "Daily water intake (glasses): 6" in prompt
        assert "Sun exposure: high" in prompt
        assert "1 of 2 photos processed" in prompt
        assert '"recommendations"' in prompt

    def test_prompt_without_photos(self, valid_profile):
        prompt = RecommendationService(client=MagicMock()).build_prompt(RecommendationPayload(profile=valid_profile))

        assert "No significant findings detected" in prompt
        assert "Lifestyle Questionnaire" not in prompt


class TestParseResponse:

    def test_json_embedded_in_prose(self):
        service = RecommendationService(client=MagicMock())
        text = "Here is your routine:\n```json\n" + json.dumps(SAMPLE_ANSWER) + "\n```\nStay consistent!"

        result = service.parse_ai_response(text)

        assert result.recommendations[0].product == "La Roche-Posay Toleriane Double Repair"
        assert result.recommendations[0].ingredients == ["Ceramides", "Niacinamide"]

    def test_extra_keys_are_kept(self):
        service = RecommendationService(client=MagicMock())
        answer = dict(SAMPLE_ANSWER, disclaimer="Consult a dermatologist")

        result = service.parse_ai_response(json.dumps(answer))

        assert result.model_dump()["disclaimer"] == "Consult a dermatologist"

    @pytest.mark.parametrize("text", [
        None,
        "",
        "I cannot help with that.",
        "{not valid json}",
        '{"advice": "drink water"}',
        '{"recommendations": "use sunscreen"}',
    ])
    def test_malformed_answers(self, text):
        with pytest.raises(MalformedResponseError):
            RecommendationService(client=MagicMock()).parse_ai_response(text)


class TestGenerateRecommendations:

    @pytest.mark.asyncio
    async def test_success(self, payload):
        create = AsyncMock(return_value=_completion(json.dumps(SAMPLE_ANSWER)))
        service = _service(create)

        result = await service.generate_recommendations(payload)

        assert result.recommendations[0].category == "Moisturizer"
        kwargs = create.call_args.kwargs
        assert kwargs["model"] == "gpt-4o"
        assert kwargs["messages"][0]["role"] == "system"
        assert "Skin Type: combination" in kwargs["messages"][1]["content"]

    @pytest.mark.asyncio
    async def test_rate_limit(self, payload):
        error = openai.RateLimitError(
            "Rate limit reached",
            response=httpx.Response(429, request=OPENAI_REQUEST),
            body=None
        )
        service = _service(AsyncMock(side_effect=error))

        with pytest.raises(RateLimitError) as exc_info:
            await service.generate_recommendations(payload)

        assert exc_info.value.status_code == 429
        assert exc_info.value.error_code == "API_RATE_LIMIT"

    @pytest.mark.asyncio
    async def test_timeout(self, payload):
        service = _service(AsyncMock(side_effect=openai.APITimeoutError(request=OPENAI_REQUEST)))

        with pytest.raises(UpstreamTimeoutError) as exc_info:
            await service.generate_recommendations(payload)

        assert exc_info.value.status_code == 504

    @pytest.mark.asyncio
    async def test_api_error(self, payload):
        error = openai.InternalServerError(
            "Upstream failure",
            response=httpx.Response(500, request=OPENAI_REQUEST),
            body=None
        )
        service = _service(AsyncMock(side_effect=error))

        with pytest.raises(UpstreamError) as exc_info:
            await service.generate_recommendations(payload)

        assert exc_info.value.error_code == "API_ERROR"

    @pytest.mark.asyncio
    async def test_unparseable_answer(self, payload):
        service = _service(AsyncMock(return_value=_completion("Sorry, no JSON today")))

        with pytest.raises(MalformedResponseError) as exc_info:
            await service.generate_recommendations(payload)

        assert exc_info.value.error_code == "RESPONSE_PARSE_ERROR"

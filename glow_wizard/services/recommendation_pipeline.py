"""
Recommendation pipeline - runs the per-request steps in order:
profile validation, answer normalization, photo URL validation, photo
analysis and finally the recommendation model call.

Validation failures raise before any outbound request is made.
"""
import logging
from typing import Optional

from glow_wizard.core.exceptions import ValidationError
from glow_wizard.schemas.recommendation import (
    AuthenticatedUser,
    RecommendationPayload,
    RecommendationRequest,
    RecommendationResponse,
)
from glow_wizard.services.openai_service import RecommendationService, recommendation_service
from glow_wizard.services.photo_service import format_photos_for_ai, validate_photo_urls
from glow_wizard.services.profile_service import process_questionnaire_answers, validate_profile_data
from glow_wizard.utils.sanitize import prevent_injection_attacks, sanitize_profile

logger = logging.getLogger(__name__)


class RecommendationPipeline:

    def __init__(self, service: Optional[RecommendationService] = None):
        self.service = service or recommendation_service

    async def run(self, request: RecommendationRequest, user: AuthenticatedUser) -> RecommendationResponse:
        profile_check = validate_profile_data(request.profile_data)
        if not profile_check.valid:
            logger.info(f"Rejected profile for user {user.uid}: {profile_check.errors}")
            raise ValidationError("Profile validation failed", errors=profile_check.errors)

        if not prevent_injection_attacks([request.profile_data, request.questionnaire_answers]):
            logger.warning(f"Rejected request with banned patterns for user {user.uid}")
            raise ValidationError("Request contains disallowed content", errors=["Disallowed content detected"])

        normalized_answers = process_questionnaire_answers(request.questionnaire_answers)

        photo_check = validate_photo_urls(request.photos)
        if not photo_check.success:
            errors = [e.model_dump(by_alias=True) for e in photo_check.errors] or [
                {"error": photo_check.error, "message": photo_check.message}
            ]
            raise ValidationError(photo_check.message, errors=errors)

        photo_analysis = await format_photos_for_ai(photo_check.validated_urls)
        if not photo_analysis.success:
            logger.warning(f"Photo analysis failed: {photo_analysis.error} - {photo_analysis.message}")

        payload = RecommendationPayload(
            profile=sanitize_profile(request.profile_data),
            normalized_answers=normalized_answers,
            validated_photos=photo_check.validated_urls,
            photo_analysis=photo_analysis
        )
        recommendations = await self.service.generate_recommendations(payload)

        return RecommendationResponse(
            success=True,
            recommendations=recommendations,
            user=user,
            photoAnalysis=photo_analysis
        )

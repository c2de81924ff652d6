from fastapi import APIRouter, Depends
import logging

from glow_wizard.api.deps import get_current_user
from glow_wizard.core.exceptions import (
    GlowWizardException,
    InternalError,
    UpstreamError,
    ValidationError,
)
from glow_wizard.core.monitoring import recommendation_requests
from glow_wizard.schemas.recommendation import (
    AuthenticatedUser,
    RecommendationRequest,
    RecommendationResponse,
)
from glow_wizard.services.recommendation_pipeline import RecommendationPipeline

router = APIRouter()
logger = logging.getLogger(__name__)

_pipeline = RecommendationPipeline()

def get_pipeline() -> RecommendationPipeline:
    return _pipeline

@router.post("/apirecommendations", response_model=RecommendationResponse)
async def create_recommendations(
    payload: RecommendationRequest,
    current_user: AuthenticatedUser = Depends(get_current_user),
    pipeline: RecommendationPipeline = Depends(get_pipeline)
):
    """Validate the submitted profile, questionnaire and photos and return AI recommendations"""
    try:
        result = await pipeline.run(payload, current_user)
    except ValidationError:
        recommendation_requests.labels(outcome="invalid").inc()
        raise
    except UpstreamError as e:
        recommendation_requests.labels(outcome="upstream").inc()
        logger.error(f"Recommendation model failed for user {current_user.uid}: {e.error_code} {e.message}")
        raise
    except GlowWizardException:
        recommendation_requests.labels(outcome="internal").inc()
        raise
    except Exception as e:
        recommendation_requests.labels(outcome="internal").inc()
        logger.error(f"[SERVER ERROR] {e}", exc_info=True)
        raise InternalError(str(e)) from e

    recommendation_requests.labels(outcome="success").inc()
    return result

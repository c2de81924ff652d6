from .photo import (
    ImageFormat,
    ValidatedPhoto,
    PhotoUrlError,
    PhotoUrlValidationResult,
    AccessibilityResult,
    PhotoDimensions,
    PhotoQuality,
    PhotoMetadata,
    MetadataResult,
    FormattedPhoto,
    PhotoProcessingError,
    PhotoSummary,
    PhotoAnalysisResult
)
from .recommendation import (
    RecommendationRequest,
    AuthenticatedUser,
    RecommendationItem,
    RecommendationResult,
    RecommendationPayload,
    RecommendationResponse
)
from .profile import (
    QuestionnaireAnswers,
    ProfileResponse,
    ProfileSaveResponse
)

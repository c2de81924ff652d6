from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from glow_wizard.schemas.photo import PhotoAnalysisResult, ValidatedPhoto


class RecommendationRequest(BaseModel):
    """Body of POST /apirecommendations"""
    model_config = ConfigDict(populate_by_name=True)

    profile_data: Dict[str, Any] = Field(..., alias="profileData")
    questionnaire_answers: Dict[str, Any] = Field(default_factory=dict, alias="questionnaireAnswers")
    # Shape is checked by the photo URL validator so its error codes reach the caller
    photos: Any = None


class AuthenticatedUser(BaseModel):
    uid: str
    email: Optional[str] = None
    authTime: Optional[int] = None


class RecommendationItem(BaseModel):
    model_config = ConfigDict(extra="allow")

    category: Optional[str] = None
    product: Optional[str] = None
    ingredients: List[str] = []
    routine: Optional[str] = None
    reasoning: Optional[str] = None


class RecommendationResult(BaseModel):
    """Parsed model output; extra keys from the model are relayed untouched"""
    model_config = ConfigDict(extra="allow")

    recommendations: List[RecommendationItem]


class RecommendationPayload(BaseModel):
    """Structured input handed to the recommendation model"""
    profile: Dict[str, Any]
    normalized_answers: Dict[str, Any] = {}
    validated_photos: List[ValidatedPhoto] = []
    photo_analysis: Optional[PhotoAnalysisResult] = None


class RecommendationResponse(BaseModel):
    success: bool = True
    recommendations: RecommendationResult
    user: AuthenticatedUser
    photoAnalysis: Optional[PhotoAnalysisResult] = None

from typing import Any, Dict, List, Optional

from pydantic import BaseModel


class QuestionnaireAnswers(BaseModel):
    """Normalized questionnaire; absent or unparseable answers are omitted, never null"""
    hydration: Optional[int] = None
    sunExposure: Optional[str] = None
    sleepHours: Optional[float] = None
    stressLevel: Optional[int] = None


class ProfileResponse(BaseModel):
    success: bool = True
    profile: Dict[str, Any]


class ProfileSaveResponse(BaseModel):
    success: bool = True
    errors: List[str] = []

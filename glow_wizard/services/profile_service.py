"""
Profile Service - validates profile records, normalizes questionnaire
answers and reads/writes profiles in the document store
"""
from collections.abc import Mapping
from datetime import datetime
from typing import Any, Dict, Optional
import logging
import math
import re

from pymongo.database import Database
from pymongo.errors import PyMongoError

from glow_wizard.core.config import settings
from glow_wizard.core.exceptions import ProfileStoreError
from glow_wizard.schemas.profile import QuestionnaireAnswers
from glow_wizard.utils.field_validator import FieldRule, FieldValidationResult, validate_fields

logger = logging.getLogger(__name__)

SKIN_TYPES = ("dry", "oily", "combination", "normal", "sensitive")
SKIN_CONCERNS = ("acne", "wrinkles", "redness", "dryness", "dark spots", "sensitivity")

PROFILE_FIELD_RULES = [
    FieldRule(key="name", type="string", min_length=1),
    FieldRule(key="age", type="number", min=13, max=120),
    FieldRule(key="skinType", type="string", allowed=SKIN_TYPES),
    FieldRule(key="concerns", type="array", allowed=SKIN_CONCERNS),
    FieldRule(key="location", type="string", min_length=2),
]

PROFILES_COLLECTION = "profiles"
# Rule-listed fields plus the caller e-mail taken from the identity token
STORED_PROFILE_FIELDS = tuple(rule.key for rule in PROFILE_FIELD_RULES) + ("email",)

_LEADING_INT = re.compile(r"^\s*[+-]?\d+")
_LEADING_FLOAT = re.compile(r"^\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def validate_profile_data(profile_data: Any) -> FieldValidationResult:
    """Check a submitted profile against PROFILE_FIELD_RULES"""
    return validate_fields(profile_data, PROFILE_FIELD_RULES, subject="Profile data")


def _parse_int(value: Any) -> Optional[int]:
    """Integer parse that accepts a numeric prefix ("7 glasses" -> 7)"""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(value) if math.isfinite(value) else None
    match = _LEADING_INT.match(str(value))
    return int(match.group()) if match else None


def _parse_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value) if not math.isnan(value) else None
    match = _LEADING_FLOAT.match(str(value))
    return float(match.group()) if match else None


def _parse_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        # Multi-select answers arrive as lists: ["High", "Midday"] -> "high,midday"
        return ",".join("" if v is None else str(v) for v in value).lower()
    return str(value).lower()


ANSWER_PARSERS = {
    "hydration": _parse_int,
    "sunExposure": _parse_text,
    "sleepHours": _parse_float,
    "stressLevel": _parse_int,
}


def process_questionnaire_answers(answers: Any) -> Dict[str, Any]:
    """
    Normalize questionnaire answers from the frontend format.

    Recognized keys are coerced to their canonical type; keys that fail to
    parse are dropped and unknown keys are ignored.
    """
    if not isinstance(answers, Mapping):
        return {"error": "Answers must be an object."}

    processed = {}
    for key, parse in ANSWER_PARSERS.items():
        if key in answers:
            value = parse(answers[key])
            if value is not None:
                processed[key] = value

    return QuestionnaireAnswers(**processed).model_dump(exclude_none=True)


def handle_profile_error(error: Exception) -> ProfileStoreError:
    """Log a document store failure and wrap it for the caller to raise"""
    logger.error(f"Profile Processor Error: {error}")
    return ProfileStoreError(str(error) if settings.DEBUG else "Profile processing error.")


def save_profile(db: Optional[Database], user_id: str, profile_data: Mapping[str, Any]) -> None:
    """
    Merge-upsert a validated profile keyed by user id.

    Only STORED_PROFILE_FIELDS are written; any other key in profile_data
    is ignored. Raises ProfileStoreError.
    """
    if not user_id:
        raise ProfileStoreError("Missing userId in profile data.")
    if db is None:
        raise handle_profile_error(RuntimeError("Document store is not connected"))

    document = {key: profile_data[key] for key in STORED_PROFILE_FIELDS if key in profile_data}
    document.update({"userId": user_id, "updatedAt": datetime.utcnow()})
    try:
        db[PROFILES_COLLECTION].update_one(
            {"_id": user_id},
            {"$set": document},
            upsert=True
        )
    except PyMongoError as e:
        raise handle_profile_error(e) from e
    logger.info(f"Saved profile for user {user_id}")


def get_profile(db: Optional[Database], user_id: str) -> Optional[Dict[str, Any]]:
    """Return the stored profile or None when absent; raises ProfileStoreError"""
    if not user_id or not isinstance(user_id, str):
        raise ProfileStoreError("Invalid userId.")
    if db is None:
        raise handle_profile_error(RuntimeError("Document store is not connected"))

    try:
        document = db[PROFILES_COLLECTION].find_one({"_id": user_id})
    except PyMongoError as e:
        raise handle_profile_error(e) from e
    if document is None:
        return None
    document.pop("_id", None)
    return document

import html
import json
import re
from collections.abc import Mapping
from typing import Any, Dict, Optional

from email_validator import validate_email, EmailNotValidError

BANNED_PATTERNS = re.compile(r"(\bSELECT\b|\bINSERT\b|\bDELETE\b|;|--)", re.IGNORECASE)

def normalize_email(email: str) -> str:
    """Return the canonical form of an e-mail address, or an empty string if it is invalid"""
    if not email:
        return ""
    try:
        return validate_email(email.strip(), check_deliverability=False).normalized.lower()
    except EmailNotValidError:
        return ""

def sanitize_user_input(data: Dict[str, Any]) -> Dict[str, str]:
    """Escape free text, normalize e-mail and trim URL inputs"""
    sanitized = html.escape(str(data.get("stringInput") or ""), quote=True)
    return {
        "stringInput": sanitized,
        "emailInput": normalize_email(str(data.get("emailInput") or "")),
        "urlInput": str(data.get("urlInput") or "").strip(),
    }

def prevent_injection_attacks(data: Any) -> bool:
    """True when the serialized payload contains none of the banned SQL fragments"""
    return BANNED_PATTERNS.search(json.dumps(data, default=str)) is None

def sanitize_profile(profile: Mapping[str, Any], email: Optional[str] = None) -> Dict[str, Any]:
    """
    Escape the free-text values of a validated profile before it is stored
    or placed in a prompt. The caller's e-mail, when given, is normalized
    and attached as "email".
    """
    sanitized = {}
    for key, value in profile.items():
        if isinstance(value, str):
            value = sanitize_user_input({"stringInput": value})["stringInput"]
        sanitized[key] = value
    if email:
        sanitized["email"] = sanitize_user_input({"emailInput": email})["emailInput"]
    return sanitized

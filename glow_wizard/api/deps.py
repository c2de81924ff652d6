from typing import Optional
import logging

from fastapi import Header
from pymongo.database import Database
from starlette.concurrency import run_in_threadpool

from glow_wizard.database import get_database
from glow_wizard.core.security import extract_bearer_token, verify_id_token
from glow_wizard.schemas.recommendation import AuthenticatedUser

logger = logging.getLogger(__name__)

def get_db() -> Optional[Database]:
    return get_database()

async def get_current_user(
    authorization: Optional[str] = Header(None)
) -> AuthenticatedUser:
    """Resolve the caller from the Firebase bearer token; raises AuthenticationError"""
    token = extract_bearer_token(authorization)

    token_preview = token[:20] if len(token) > 20 else token
    logger.info(f"Verifying token: {token_preview}...")

    # firebase_admin fetches signing keys synchronously
    identity = await run_in_threadpool(verify_id_token, token)
    return AuthenticatedUser(**identity)

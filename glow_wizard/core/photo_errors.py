"""
Photo processing error handling and standardized error envelopes
"""
from enum import Enum
from typing import Dict, Any
from datetime import datetime
import asyncio
import logging
import socket
import traceback

import aiohttp
import pydantic

from glow_wizard.core.config import settings
from glow_wizard.core.exceptions import ValidationError

logger = logging.getLogger(__name__)

class PhotoErrorType(Enum):
    """Photo pipeline error types"""
    CONNECTION_REFUSED = "CONNECTION_REFUSED"
    URL_NOT_FOUND = "URL_NOT_FOUND"
    REQUEST_TIMEOUT = "REQUEST_TIMEOUT"
    HTTP_ERROR = "HTTP_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    TYPE_ERROR = "TYPE_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"

class PhotoErrorHandler:
    """
    Centralized error handling for the photo pipeline.
    Maps raised exceptions to a standardized error response.
    """

    MODULE_NAME = "photo-analyzer"

    USER_MESSAGES = {
        PhotoErrorType.CONNECTION_REFUSED: (
            "Unable to connect to photo URL",
            "Check network connectivity and URL accessibility",
        ),
        PhotoErrorType.URL_NOT_FOUND: (
            "Photo URL domain not found",
            "Verify the URL domain is correct and accessible",
        ),
        PhotoErrorType.REQUEST_TIMEOUT: (
            "Photo processing request timed out",
            "Photo URL may be slow to respond or unavailable",
        ),
    }

    @classmethod
    def classify(cls, error: BaseException) -> PhotoErrorType:
        """Determine the error type of an exception raised while processing photos"""
        if isinstance(error, aiohttp.ClientConnectorError):
            if isinstance(getattr(error, "os_error", None), socket.gaierror):
                return PhotoErrorType.URL_NOT_FOUND
            return PhotoErrorType.CONNECTION_REFUSED
        if isinstance(error, asyncio.TimeoutError):
            return PhotoErrorType.REQUEST_TIMEOUT
        if isinstance(error, aiohttp.ClientResponseError):
            return PhotoErrorType.HTTP_ERROR
        if isinstance(error, (ValidationError, pydantic.ValidationError)):
            return PhotoErrorType.VALIDATION_ERROR
        if isinstance(error, TypeError):
            return PhotoErrorType.TYPE_ERROR
        return PhotoErrorType.UNKNOWN_ERROR

    @classmethod
    def handle(cls, error: BaseException) -> Dict[str, Any]:
        """
        Convert an exception into the standardized photo error response

        Args:
            error: Exception raised during photo processing

        Returns:
            Dictionary with success=False, error code, message and details
        """
        error_type = cls.classify(error)
        response = {
            "success": False,
            "timestamp": datetime.utcnow().isoformat(),
            "module": cls.MODULE_NAME,
            "error": error_type.value,
            "message": "An unexpected error occurred during photo processing",
            "details": None,
        }

        if error_type in cls.USER_MESSAGES:
            response["message"], response["details"] = cls.USER_MESSAGES[error_type]
        elif error_type == PhotoErrorType.HTTP_ERROR:
            response["message"] = f"HTTP {error.status}: {error.message}"
            response["details"] = {
                "statusCode": error.status,
                "statusText": error.message,
                "url": str(error.request_info.real_url) if error.request_info else None,
            }
        elif error_type == PhotoErrorType.VALIDATION_ERROR:
            response["message"] = str(error)
            response["details"] = "Input data validation failed"
        elif error_type == PhotoErrorType.TYPE_ERROR:
            response["message"] = "Invalid data type provided"
            response["details"] = str(error)
        else:
            response["message"] = str(error) or "Unknown error occurred"
            response["details"] = {
                "name": type(error).__name__,
                "stack": "".join(traceback.format_exception(type(error), error, error.__traceback__))
                if settings.DEBUG else None,
            }

        logger.error(
            f"Photo Analyzer Error: {error_type.value}",
            extra={"error_type": error_type.value, "raw_error": str(error)[:500]}
        )

        return response

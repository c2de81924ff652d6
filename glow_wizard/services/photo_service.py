"""
Photo Service - validates photo URLs, probes their accessibility and
estimates metadata and quality for the recommendation model.

Dimensions and quality are heuristics computed from the HEAD response
(file size and format); images are never downloaded or decoded.
"""
import asyncio
import ipaddress
import logging
import math
import re
import time
from datetime import datetime
from typing import Any, List, Optional, Union
from urllib.parse import urlsplit

import aiohttp
import pydantic
from pydantic import HttpUrl, TypeAdapter

from glow_wizard.core.config import settings
from glow_wizard.core.exceptions import AccessibilityError
from glow_wizard.core.monitoring import photo_probes_total, photo_quality_score
from glow_wizard.core.photo_errors import PhotoErrorHandler
from glow_wizard.schemas.photo import (
    AccessibilityResult,
    FormattedPhoto,
    ImageFormat,
    MetadataResult,
    PhotoAnalysisResult,
    PhotoDimensions,
    PhotoMetadata,
    PhotoProcessingError,
    PhotoQuality,
    PhotoSummary,
    PhotoUrlError,
    PhotoUrlValidationResult,
    ValidatedPhoto,
)

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = (".jpg", ".jpeg", ".png", ".webp")

MIN_FILE_SIZE = 1024
MAX_FILE_SIZE = 10 * 1024 * 1024

# Bytes-to-pixels multipliers for the dimension estimate
COMPRESSION_RATIOS = {
    ImageFormat.PNG: 6,
    ImageFormat.JPEG: 10,
    ImageFormat.WEBP: 12,
}
DEFAULT_COMPRESSION_RATIO = 10
BYTES_PER_PIXEL = 3

# Quality scoring policy
OPTIMAL_MIN_FILE_SIZE = 100_000
OPTIMAL_MAX_FILE_SIZE = 5_000_000
QUALITY_SCORE_OFFSET = 50
SUITABLE_MIN_RAW_SCORE = 30
MAX_SUITABLE_ISSUES = 3
RECOMMENDED_MIN_SCORE = 60
LOW_QUALITY_SCORE = 50

_HTTP_URL = TypeAdapter(HttpUrl)
_SCHEME = re.compile(r"^https?://", re.IGNORECASE)
_HOST_LABEL = re.compile(r"^[a-z0-9\u00a1-\uffff]([a-z0-9\u00a1-\uffff-]*[a-z0-9\u00a1-\uffff])?$", re.IGNORECASE)
_TLD = re.compile(r"^([a-z\u00a1-\uffff]{2,}|xn--[a-z0-9-]{2,})$", re.IGNORECASE)


def _js_round(value: float) -> int:
    """Round half up"""
    return int(math.floor(value + 0.5))


def _is_ip_address(host: str) -> bool:
    try:
        ipaddress.ip_address(host.strip("[]"))
        return True
    except ValueError:
        return False


def is_valid_photo_url(url: str) -> bool:
    """
    Strict URL check: http/https scheme is mandatory, the host needs a
    top-level domain, and underscores, trailing dots and protocol-relative
    URLs are rejected.

    The host is taken from the URL as written; HttpUrl would rewrite
    shorthand hosts such as "999" or "0x7f.1" into IPv4 addresses.
    """
    if not _SCHEME.match(url) or re.search(r"\s", url):
        return False
    try:
        _HTTP_URL.validate_python(url)
        host = urlsplit(url).hostname
    except (pydantic.ValidationError, ValueError):
        return False

    if not host:
        return False
    # Only literal dotted-quad IPv4 or bracketed IPv6 hosts skip the TLD check
    if _is_ip_address(host):
        return True
    if host.endswith("."):
        return False

    labels = host.split(".")
    if len(labels) < 2 or not _TLD.match(labels[-1]):
        return False
    return all(_HOST_LABEL.match(label) for label in labels)


def detect_image_format(url: str) -> ImageFormat:
    """Infer the image format from the URL"""
    url_lower = url.lower()
    if ".png" in url_lower:
        return ImageFormat.PNG
    if ".webp" in url_lower:
        return ImageFormat.WEBP
    if ".jpeg" in url_lower or ".jpg" in url_lower:
        return ImageFormat.JPEG
    return ImageFormat.UNKNOWN


def _validate_single_url(url: Any, index: int) -> Union[ValidatedPhoto, PhotoUrlError]:
    if not isinstance(url, str) or not url.strip():
        return PhotoUrlError(
            index=index,
            error="INVALID_URL_FORMAT",
            message=f"Photo {index + 1}: URL must be a non-empty string"
        )

    trimmed_url = url.strip()
    if not is_valid_photo_url(trimmed_url):
        return PhotoUrlError(
            index=index,
            error="MALFORMED_URL",
            message=f"Photo {index + 1}: URL format is invalid"
        )

    url_lower = trimmed_url.lower()
    if not any(extension in url_lower for extension in SUPPORTED_EXTENSIONS):
        return PhotoUrlError(
            index=index,
            error="UNSUPPORTED_FORMAT",
            message=f"Photo {index + 1}: Must be JPG, JPEG, PNG, or WebP format"
        )

    return ValidatedPhoto(original_url=trimmed_url, index=index, format=detect_image_format(trimmed_url))


def validate_photo_urls(photo_urls: Any) -> PhotoUrlValidationResult:
    """
    Validate the list of photo URLs submitted with a request.

    Each element is checked independently; the result is successful only
    if no element failed.
    """
    if not isinstance(photo_urls, list):
        return PhotoUrlValidationResult(
            success=False,
            error="INVALID_INPUT",
            message="Photo URLs must be provided as an array"
        )

    if not photo_urls:
        return PhotoUrlValidationResult(
            success=False,
            error="EMPTY_ARRAY",
            message="At least one photo URL must be provided"
        )

    max_photos = settings.MAX_PHOTOS_PER_REQUEST
    if len(photo_urls) > max_photos:
        return PhotoUrlValidationResult(
            success=False,
            error="TOO_MANY_PHOTOS",
            message=f"Maximum of {max_photos} photos allowed per analysis"
        )

    validated_urls: List[ValidatedPhoto] = []
    errors: List[PhotoUrlError] = []

    for index, url in enumerate(photo_urls):
        try:
            outcome = _validate_single_url(url, index)
        except Exception as e:
            logger.warning(f"Unexpected error validating photo {index + 1}: {e}")
            outcome = PhotoUrlError(index=index, error="VALIDATION_ERROR", message=f"Photo {index + 1}: {e}")

        if isinstance(outcome, PhotoUrlError):
            errors.append(outcome)
        else:
            validated_urls.append(outcome)

    if errors:
        return PhotoUrlValidationResult(
            success=False,
            error="VALIDATION_FAILED",
            validated_urls=validated_urls,
            errors=errors,
            message=f"{len(errors)} of {len(photo_urls)} photos failed validation"
        )

    return PhotoUrlValidationResult(
        success=True,
        validated_urls=validated_urls,
        message=f"All {len(photo_urls)} photos validated successfully"
    )


def _check_probe_response(content_type: Optional[str], content_length: int) -> None:
    if not content_type or not content_type.startswith("image/"):
        raise AccessibilityError("INVALID_CONTENT_TYPE", f"Invalid content type: {content_type}")
    if content_length == 0:
        raise AccessibilityError("EMPTY_FILE", "Image file appears to be empty")
    if content_length < MIN_FILE_SIZE or content_length > MAX_FILE_SIZE:
        raise AccessibilityError("FILE_SIZE_OUT_OF_RANGE", f"Image file size out of range: {content_length} bytes")


def _parse_content_length(raw: Optional[str]) -> int:
    try:
        return int(raw or 0)
    except (TypeError, ValueError):
        return 0


async def verify_photo_accessibility(photo_url: str) -> AccessibilityResult:
    """
    HEAD-probe a photo URL.

    The probe has its own timeout and redirect limit and is never retried.
    Failures are returned, not raised.
    """
    timeout = aiohttp.ClientTimeout(total=settings.PHOTO_PROBE_TIMEOUT_SECONDS)
    try:
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.head(
                photo_url,
                allow_redirects=True,
                max_redirects=settings.PHOTO_PROBE_MAX_REDIRECTS
            ) as response:
                if not 200 <= response.status < 300:
                    result = AccessibilityResult(
                        accessible=False,
                        error="HTTP_ERROR",
                        status_code=response.status,
                        message=f"HTTP {response.status}: {response.reason}"
                    )
                else:
                    content_type = response.headers.get("Content-Type")
                    content_length = _parse_content_length(response.headers.get("Content-Length"))
                    _check_probe_response(content_type, content_length)
                    result = AccessibilityResult(
                        accessible=True,
                        content_type=content_type,
                        content_length=content_length,
                        last_modified=response.headers.get("Last-Modified"),
                        etag=response.headers.get("ETag")
                    )

    except AccessibilityError as e:
        result = AccessibilityResult(accessible=False, error=e.error, message=e.message)
    except asyncio.TimeoutError:
        logger.warning(f"Photo accessibility check timed out: {photo_url}")
        result = AccessibilityResult(
            accessible=False,
            error="TIMEOUT",
            message="Photo accessibility check timed out"
        )
    except aiohttp.TooManyRedirects as e:
        result = AccessibilityResult(accessible=False, error="NETWORK_ERROR", message=f"Too many redirects: {e}")
    except aiohttp.ClientResponseError as e:
        result = AccessibilityResult(
            accessible=False,
            error="HTTP_ERROR",
            status_code=e.status,
            message=f"HTTP {e.status}: {e.message}"
        )
    except aiohttp.ClientError as e:
        logger.warning(f"Network error probing {photo_url}: {e}")
        result = AccessibilityResult(accessible=False, error="NETWORK_ERROR", message=str(e))

    photo_probes_total.labels(outcome="accessible" if result.accessible else result.error).inc()
    return result


def estimate_dimensions(file_size: int, image_format: ImageFormat) -> PhotoDimensions:
    """Estimate a square resolution from the compressed file size"""
    compression_ratio = COMPRESSION_RATIOS.get(image_format, DEFAULT_COMPRESSION_RATIO)
    estimated_pixels = file_size * compression_ratio / BYTES_PER_PIXEL
    side = _js_round(math.sqrt(estimated_pixels))
    return PhotoDimensions(width=side, height=side)


def assess_image_quality(
    file_size: int,
    dimensions: Optional[PhotoDimensions],
    image_format: ImageFormat
) -> PhotoQuality:
    """
    Score how suitable a photo is for AI analysis.

    Suitability is decided on the raw score; the reported score is offset
    by QUALITY_SCORE_OFFSET and clamped to 0-100.
    """
    score = 0
    issues: List[str] = []

    if file_size < OPTIMAL_MIN_FILE_SIZE:
        issues.append("File size may be too small for detailed analysis")
        score -= 10
    elif file_size > OPTIMAL_MAX_FILE_SIZE:
        issues.append("File size is very large, may affect processing speed")
        score -= 5
    else:
        score += 20

    if dimensions is not None:
        if dimensions.width < 300 or dimensions.height < 300:
            issues.append("Image resolution may be too low for accurate analysis")
            score -= 15
        elif dimensions.width >= 800 and dimensions.height >= 600:
            score += 25
        else:
            score += 15

    if image_format in (ImageFormat.JPEG, ImageFormat.PNG):
        score += 10
    elif image_format == ImageFormat.WEBP:
        score += 5
    else:
        issues.append("Image format may not be optimal for analysis")
        score -= 10

    suitable = score >= SUITABLE_MIN_RAW_SCORE and len(issues) < MAX_SUITABLE_ISSUES
    final_score = max(0, min(100, score + QUALITY_SCORE_OFFSET))

    return PhotoQuality(score=final_score, issues=issues, suitable=suitable)


async def extract_photo_metadata(photo_url: str) -> MetadataResult:
    """Probe a photo and derive its estimated metadata"""
    accessibility = await verify_photo_accessibility(photo_url)
    if not accessibility.accessible:
        return MetadataResult(
            success=False,
            error=accessibility.error,
            status_code=accessibility.status_code,
            message=f"Photo not accessible: {accessibility.message}",
            url=photo_url
        )

    metadata = PhotoMetadata(
        url=photo_url,
        content_type=accessibility.content_type,
        file_size=accessibility.content_length or 0,
        last_modified=accessibility.last_modified,
        format=detect_image_format(photo_url),
        timestamp=datetime.utcnow().isoformat()
    )

    if accessibility.content_length and accessibility.content_type:
        metadata.dimensions = estimate_dimensions(accessibility.content_length, metadata.format)

    metadata.quality = assess_image_quality(metadata.file_size, metadata.dimensions, metadata.format)
    photo_quality_score.observe(metadata.quality.score)

    return MetadataResult(success=True, metadata=metadata, url=photo_url)


def _format_photo(photo: ValidatedPhoto, metadata: PhotoMetadata) -> FormattedPhoto:
    quality = metadata.quality
    notes = []
    if quality.score < LOW_QUALITY_SCORE:
        notes.append("Low quality image - analysis may be limited")
    notes.extend(quality.issues)

    return FormattedPhoto(
        id=f"photo_{int(time.time() * 1000)}_{photo.index}",
        url=photo.original_url,
        format=metadata.format,
        quality=quality,
        dimensions=metadata.dimensions,
        file_size=metadata.file_size,
        content_type=metadata.content_type,
        ai_compatible=quality.suitable,
        processing_notes=notes
    )


def summarize_photos(total: int, photos: List[FormattedPhoto], failed: int) -> PhotoSummary:
    processed = len(photos)
    average_quality = _js_round(sum(p.quality.score for p in photos) / processed) if processed else 0
    return PhotoSummary(
        total_photos=total,
        processed_photos=processed,
        failed_photos=failed,
        ai_compatible_photos=sum(1 for p in photos if p.ai_compatible),
        average_quality=average_quality,
        recommended_for_analysis=sum(
            1 for p in photos if p.ai_compatible and p.quality.score >= RECOMMENDED_MIN_SCORE
        )
    )


async def format_photos_for_ai(validated_photos: List[Union[ValidatedPhoto, dict]]) -> PhotoAnalysisResult:
    """
    Probe every validated photo concurrently and prepare them for the
    recommendation model. A photo that fails its probe is recorded in
    processing_errors and does not affect its siblings.
    """
    if not isinstance(validated_photos, list) or not validated_photos:
        return PhotoAnalysisResult(
            success=False,
            error="INVALID_INPUT",
            message="Validated photos array is required"
        )

    try:
        photos = [ValidatedPhoto.model_validate(p) for p in validated_photos]
        results = await asyncio.gather(
            *(extract_photo_metadata(photo.original_url) for photo in photos),
            return_exceptions=True
        )

        formatted_photos: List[FormattedPhoto] = []
        processing_errors: List[PhotoProcessingError] = []

        for photo, result in zip(photos, results):
            if isinstance(result, Exception):
                logger.error(f"Error processing photo {photo.original_url}: {result}")
                processing_errors.append(PhotoProcessingError(
                    url=photo.original_url,
                    error="PROCESSING_ERROR",
                    message=str(result)
                ))
            elif not result.success:
                processing_errors.append(PhotoProcessingError(
                    url=photo.original_url,
                    error=result.error,
                    status_code=result.status_code,
                    message=result.message
                ))
            else:
                formatted_photos.append(_format_photo(photo, result.metadata))

        summary = summarize_photos(len(photos), formatted_photos, len(processing_errors))
        logger.info(
            f"Processed {summary.processed_photos}/{summary.total_photos} photos, "
            f"{summary.recommended_for_analysis} recommended for analysis"
        )

        return PhotoAnalysisResult(
            success=True,
            photos=formatted_photos,
            summary=summary,
            processing_errors=processing_errors or None,
            timestamp=datetime.utcnow().isoformat(),
            ready_for_ai=summary.recommended_for_analysis > 0
        )

    except Exception as e:
        error_response = PhotoErrorHandler.handle(e)
        return PhotoAnalysisResult(
            success=False,
            error=error_response["error"],
            message=error_response["message"]
        )

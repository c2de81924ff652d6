from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Snake-case attributes, camelCase on the wire"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ImageFormat(str, Enum):
    JPEG = "JPEG"
    PNG = "PNG"
    WEBP = "WebP"
    UNKNOWN = "UNKNOWN"


class ValidatedPhoto(CamelModel):
    original_url: str
    index: int
    format: ImageFormat


class PhotoUrlError(CamelModel):
    index: int
    error: str  # INVALID_URL_FORMAT, MALFORMED_URL, UNSUPPORTED_FORMAT, VALIDATION_ERROR
    message: str


class PhotoUrlValidationResult(CamelModel):
    success: bool
    error: Optional[str] = None  # INVALID_INPUT, EMPTY_ARRAY, TOO_MANY_PHOTOS, VALIDATION_FAILED
    message: str
    validated_urls: List[ValidatedPhoto] = []
    errors: List[PhotoUrlError] = []


class AccessibilityResult(CamelModel):
    """Outcome of a HEAD probe against a photo URL"""
    accessible: bool
    content_type: Optional[str] = None
    content_length: Optional[int] = None
    last_modified: Optional[str] = None
    etag: Optional[str] = None
    error: Optional[str] = None  # TIMEOUT, HTTP_ERROR, NETWORK_ERROR, INVALID_CONTENT_TYPE, EMPTY_FILE, FILE_SIZE_OUT_OF_RANGE
    status_code: Optional[int] = None
    message: Optional[str] = None


class PhotoDimensions(CamelModel):
    """Square estimate derived from file size, never decoded"""
    width: int
    height: int
    aspect_ratio: str = "1.00"
    estimated: bool = True


class PhotoQuality(CamelModel):
    score: int
    issues: List[str] = []
    suitable: bool = False


class PhotoMetadata(CamelModel):
    url: str
    content_type: Optional[str] = None
    file_size: int = 0
    last_modified: Optional[str] = None
    format: ImageFormat
    timestamp: str
    dimensions: Optional[PhotoDimensions] = None
    quality: Optional[PhotoQuality] = None


class MetadataResult(CamelModel):
    success: bool
    metadata: Optional[PhotoMetadata] = None
    error: Optional[str] = None
    status_code: Optional[int] = None
    message: Optional[str] = None
    url: Optional[str] = None


class FormattedPhoto(CamelModel):
    """Photo entry handed to the recommendation model"""
    id: str
    url: str
    type: str = "image_url"
    format: ImageFormat
    quality: PhotoQuality
    dimensions: Optional[PhotoDimensions] = None
    file_size: int
    content_type: Optional[str] = None
    ai_compatible: bool
    processing_notes: List[str] = []


class PhotoProcessingError(CamelModel):
    url: str
    error: str
    status_code: Optional[int] = None
    message: Optional[str] = None


class PhotoSummary(CamelModel):
    total_photos: int
    processed_photos: int
    failed_photos: int
    ai_compatible_photos: int
    average_quality: int
    recommended_for_analysis: int


class PhotoAnalysisResult(CamelModel):
    success: bool
    photos: List[FormattedPhoto] = []
    summary: Optional[PhotoSummary] = None
    processing_errors: Optional[List[PhotoProcessingError]] = None
    timestamp: Optional[str] = None
    ready_for_ai: bool = Field(False, alias="readyForAI")
    error: Optional[str] = None
    message: Optional[str] = None

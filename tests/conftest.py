import pytest
from httpx import AsyncClient, ASGITransport
from unittest.mock import AsyncMock, MagicMock

from glow_wizard.main import app
from glow_wizard.api.deps import get_current_user, get_db
from glow_wizard.api.v1.recommendations import get_pipeline
from glow_wizard.schemas.photo import PhotoAnalysisResult, PhotoSummary
from glow_wizard.schemas.recommendation import AuthenticatedUser, RecommendationResult
from glow_wizard.services.recommendation_pipeline import RecommendationPipeline

TEST_USER = AuthenticatedUser(uid="user-123", email="Jane.Doe@Gmail.com", authTime=1700000000)

@pytest.fixture
def valid_profile():
    """Profile that passes every field rule"""
    return {
        "name": "Jane",
        "age": 29,
        "skinType": "combination",
        "concerns": ["acne", "redness"],
        "location": "Austin, TX"
    }

@pytest.fixture
def sample_recommendations():
    """Parsed model output"""
    return RecommendationResult.model_validate({
        "recommendations": [
            {
                "category": "Cleanser",
                "product": "CeraVe Foaming Facial Cleanser",
                "ingredients": ["Niacinamide", "Ceramides"],
                "routine": "Both",
                "reasoning": "Gentle cleansing for combination, acne-prone skin"
            }
        ]
    })

@pytest.fixture
def mock_recommendation_service(sample_recommendations):
    """Mock recommendation model service for tests"""
    mock = MagicMock()
    mock.generate_recommendations = AsyncMock(return_value=sample_recommendations)
    return mock

@pytest.fixture
def mock_db():
    """Mock document store; every collection resolves to the same mock"""
    mock_db = MagicMock()
    collection = MagicMock()
    collection.find_one.return_value = None
    mock_db.__getitem__.return_value = collection
    return mock_db

@pytest.fixture
def sample_photo_analysis():
    return PhotoAnalysisResult(
        success=True,
        photos=[],
        summary=PhotoSummary(
            total_photos=1,
            processed_photos=0,
            failed_photos=1,
            ai_compatible_photos=0,
            average_quality=0,
            recommended_for_analysis=0
        ),
        ready_for_ai=False
    )

@pytest.fixture
async def client():
    """Create unauthenticated test client"""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()

@pytest.fixture
async def auth_client(mock_recommendation_service, mock_db):
    """Test client with identity, document store and model service overridden"""
    app.dependency_overrides[get_current_user] = lambda: TEST_USER
    app.dependency_overrides[get_db] = lambda: mock_db
    app.dependency_overrides[get_pipeline] = lambda: RecommendationPipeline(service=mock_recommendation_service)

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()

"""Sentiment API integration tests."""

from datetime import datetime

import pytest
from httpx import ASGITransport, AsyncClient

from api.config.database import get_db, get_session_factory
from api.endpoints.sentiment import get_batch_processor, get_classifier
from api.main import app
from api.models import BatchSentimentAnalysis
from conftest import InMemoryConversations, RecordingStore, make_classifier
from processor.processors import BatchSentimentProcessor

BATCH_URL = "/api/v1/sentiment/batch"


@pytest.fixture
async def client(session_factory):
    """Async HTTP client wired to the in-memory database and a fake classifier."""

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_classifier] = lambda: make_classifier()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


class TestBatchEndpoint:
    """POST /sentiment/batch"""

    async def test_january_batch(self, client: AsyncClient, january_conversations):
        response = await client.post(BATCH_URL, json={"startDate": "2024-01-01", "endDate": "2024-01-31"})

        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Batch sentiment analysis completed."
        assert data["overall_sentiment"] == "Positive: 2, Negative: 1, Neutral: 0, Unknown: 0"
        assert data["conversations_processed"] == 3
        assert data["batch_analysis_id"]

    async def test_no_conversations(self, client: AsyncClient):
        response = await client.post(BATCH_URL, json={"startDate": "2024-01-01", "endDate": "2024-01-31"})

        assert response.status_code == 200
        assert response.json() == {"message": "No conversations found in the specified date range."}

    async def test_preflight(self, client: AsyncClient):
        response = await client.options(BATCH_URL)

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"
        assert "POST" in response.headers["access-control-allow-methods"]
        assert "content-type" in response.headers["access-control-allow-headers"]

    async def test_browser_preflight(self, client: AsyncClient):
        response = await client.options(
            BATCH_URL,
            headers={
                "Origin": "https://dashboard.example.com",
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "content-type",
            },
        )

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] in ("*", "https://dashboard.example.com")

    async def test_invalid_json(self, client: AsyncClient):
        response = await client.post(
            BATCH_URL,
            content="{not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid JSON body"}

    async def test_missing_field(self, client: AsyncClient):
        response = await client.post(BATCH_URL, json={"startDate": "2024-01-01"})

        assert response.status_code == 400
        assert response.json() == {"error": "Missing required field: endDate"}

    async def test_start_after_end(self, client: AsyncClient):
        response = await client.post(BATCH_URL, json={"startDate": "2024-02-01", "endDate": "2024-01-01"})

        assert response.status_code == 400
        assert response.json() == {"error": "startDate cannot be after endDate."}

    async def test_invalid_date_format(self, client: AsyncClient):
        response = await client.post(BATCH_URL, json={"startDate": "yesterday", "endDate": "2024-01-01"})

        assert response.status_code == 400
        assert "Invalid date format" in response.json()["error"]

    async def test_classifier_not_configured(self, client: AsyncClient):
        app.dependency_overrides[get_classifier] = lambda: None

        response = await client.post(BATCH_URL, json={"startDate": "2024-01-01", "endDate": "2024-01-31"})

        assert response.status_code == 503
        assert "not initialized" in response.json()["error"]

    async def test_summary_write_failure(self, client: AsyncClient):
        app.dependency_overrides[get_batch_processor] = lambda: BatchSentimentProcessor(
            conversations=InMemoryConversations({"c1": [("lead", "thanks")]}),
            store=RecordingStore(fail_summary=True),
            classifier=make_classifier(),
        )

        response = await client.post(BATCH_URL, json={"startDate": "2024-01-01", "endDate": "2024-01-31"})

        assert response.status_code == 500
        assert response.json()["error"].startswith("Database error storing batch analysis")


class TestConversationEndpoint:
    """POST /sentiment/conversation"""

    async def test_analyze_conversation(self, client: AsyncClient, january_conversations):
        response = await client.post("/api/v1/sentiment/conversation", json={"conversationId": "conv-jan-2"})

        assert response.status_code == 200
        assert response.json() == {
            "conversation_id": "conv-jan-2",
            "sentiment": "bad",
            "description": "Customer is upset.",
        }

    async def test_not_found(self, client: AsyncClient):
        response = await client.post("/api/v1/sentiment/conversation", json={"conversationId": "missing"})

        assert response.status_code == 404
        assert response.json() == {"error": "Conversation missing not found"}

    async def test_classification_failure(self, client: AsyncClient, january_conversations):
        app.dependency_overrides[get_classifier] = lambda: make_classifier("not json")

        response = await client.post("/api/v1/sentiment/conversation", json={"conversationId": "conv-jan-1"})

        assert response.status_code == 502
        assert "Failed to parse JSON" in response.json()["error"]


class TestBatchHistory:
    """GET /sentiment/batches and /sentiment/batches/{id}"""

    async def test_list_newest_first(self, client: AsyncClient, session_factory):
        db = session_factory()
        try:
            for batch_id, day in (("batch-old", 1), ("batch-new", 2)):
                db.add(
                    BatchSentimentAnalysis(
                        id=batch_id,
                        start_date="2024-01-01",
                        end_date="2024-01-31",
                        overall_sentiment="Positive: 1, Negative: 0, Neutral: 0, Unknown: 0",
                        positive_count=1,
                        conversation_ids='["c1"]',
                        created_at=datetime(2024, 2, day),
                    )
                )
            db.commit()
        finally:
            db.close()

        response = await client.get("/api/v1/sentiment/batches")

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 2
        assert [b["id"] for b in data["data"]] == ["batch-new", "batch-old"]
        assert data["data"][0]["positive_count"] == 1

        response = await client.get("/api/v1/sentiment/batches", params={"limit": 1})
        assert [b["id"] for b in response.json()["data"]] == ["batch-new"]

    async def test_get_batch_with_details(self, client: AsyncClient, january_conversations):
        created = await client.post(BATCH_URL, json={"startDate": "2024-01-01", "endDate": "2024-01-31"})
        batch_id = created.json()["batch_analysis_id"]

        response = await client.get(f"/api/v1/sentiment/batches/{batch_id}")

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == batch_id
        assert data["conversation_ids"] == ["conv-jan-1", "conv-jan-2", "conv-jan-3"]
        assert [(d["conversation_id"], d["sentiment"]) for d in data["details"]] == [
            ("conv-jan-1", "good"),
            ("conv-jan-2", "bad"),
            ("conv-jan-3", "good"),
        ]

    async def test_get_missing_batch(self, client: AsyncClient):
        response = await client.get("/api/v1/sentiment/batches/nope")

        assert response.status_code == 404
        assert response.json() == {"error": "Batch analysis nope not found"}

    async def test_invalid_limit(self, client: AsyncClient):
        response = await client.get("/api/v1/sentiment/batches", params={"limit": 0})

        assert response.status_code == 400


class TestHealth:

    async def test_api_health(self, client: AsyncClient):
        response = await client.get("/api/v1/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["database"] == "connected"
        assert data["classifier"] in ("configured", "not_configured")

    async def test_root_health(self, client: AsyncClient):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"


class TestErrorShapeAndRequestIds:
    """Framework-level errors and request tracing."""

    async def test_unknown_path(self, client: AsyncClient):
        response = await client.get("/api/v1/sentiment/unknown")

        assert response.status_code == 404
        assert response.json() == {"error": "Not Found"}

    async def test_wrong_method(self, client: AsyncClient):
        response = await client.delete("/api/v1/sentiment/batches")

        assert response.status_code == 405
        assert response.json() == {"error": "Method Not Allowed"}
        assert "GET" in response.headers["allow"]

    async def test_request_id_generated(self, client: AsyncClient):
        response = await client.get("/api/v1/sentiment/batches")

        assert response.headers["x-request-id"]

    async def test_request_id_propagated(self, client: AsyncClient):
        response = await client.get("/api/v1/sentiment/batches", headers={"X-Request-ID": "dash-123"})

        assert response.headers["x-request-id"] == "dash-123"

    async def test_browser_timestamps(self, client: AsyncClient, january_conversations):
        response = await client.post(
            BATCH_URL,
            json={"startDate": "2024-01-01T00:00:00.000Z", "endDate": "2024-01-31T23:59:59.999Z"},
        )

        assert response.status_code == 200
        assert response.json()["conversations_processed"] == 3

"""Claude AI integration for conversation sentiment classification.

The model is asked for a strict JSON object ``{"sentiment", "description"}``.
Replies are parsed first, then validated against a schema, so callers see
one of three distinct failures: API, parse, or format.
"""

import json
from dataclasses import dataclass
from typing import Optional

import structlog
from anthropic import APIError, AsyncAnthropic
from pydantic import BaseModel, ConfigDict, ValidationError as PydanticValidationError

from processor.config import settings
from processor.domain import MODEL_SENTIMENTS
from processor.errors import (
    ClassificationApiError,
    ClassificationError,
    ClassificationFormatError,
    ClassificationParseError,
)

logger = structlog.get_logger()

SENTIMENT_SYSTEM_PROMPT = (
    "You are a sentiment analysis expert. Analyze the sentiment of the following "
    "conversation transcript. Respond ONLY with a JSON object containing exactly two "
    "keys: \"sentiment\" (string, one of \"Positive\", \"Negative\", or \"Neutral\") and "
    "\"description\" (string, a brief explanation of the sentiment, max 1-2 sentences). "
    "Do not include any other text."
)

EMPTY_TRANSCRIPT_DESCRIPTION = "No content to analyze."


class SentimentPayload(BaseModel):
    """Schema the model's JSON reply must satisfy."""

    model_config = ConfigDict(extra="ignore", strict=True)

    sentiment: str
    description: str


@dataclass
class SentimentClassification:
    """Sentiment of one transcript as reported by the model."""

    sentiment: str
    description: str
    raw_response: str = ""


@dataclass
class ClassificationResult:
    """Either a classification or the error that prevented one."""

    classification: Optional[SentimentClassification] = None
    error: Optional[ClassificationError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class SentimentClassifier:
    """Classifies conversation transcripts with Claude."""

    def __init__(
        self,
        client: Optional[AsyncAnthropic] = None,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ):
        """Initialize classifier.

        Args:
            client: Anthropic client; built from settings when omitted
            model: Model name override
            max_tokens: Output token ceiling override
            temperature: Sampling temperature override
        """
        self.client = client or AsyncAnthropic(
            api_key=settings.ANTHROPIC_API_KEY,
            max_retries=settings.CLAUDE_MAX_RETRIES,
            timeout=settings.CLAUDE_TIMEOUT,
        )
        self.model = model or settings.CLAUDE_MODEL
        self.max_tokens = max_tokens or settings.SENTIMENT_MAX_TOKENS
        self.temperature = settings.SENTIMENT_TEMPERATURE if temperature is None else temperature

    async def classify_sentiment(self, transcript: str) -> SentimentClassification:
        """Classify the sentiment of a transcript.

        Empty or whitespace-only transcripts are Neutral without a model call.

        Raises:
            ClassificationApiError: If the API call fails
            ClassificationParseError: If the reply is not valid JSON
            ClassificationFormatError: If the reply lacks required keys
        """
        if not transcript or not transcript.strip():
            return SentimentClassification(
                sentiment="Neutral",
                description=EMPTY_TRANSCRIPT_DESCRIPTION,
            )

        try:
            response = await self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
                system=SENTIMENT_SYSTEM_PROMPT,
                messages=[
                    {
                        "role": "user",
                        "content": transcript,
                    }
                ],
            )
        except APIError as e:
            logger.error("Claude API error during sentiment analysis", error=str(e))
            raise ClassificationApiError(f"Claude API error: {e}") from e

        if not response.content:
            raise ClassificationParseError("Claude returned no content for sentiment analysis.")

        raw_response = response.content[0].text
        return self._parse_sentiment_response(raw_response)

    async def try_classify_sentiment(self, transcript: str) -> ClassificationResult:
        """Classify a transcript, returning failures as data instead of raising."""
        try:
            return ClassificationResult(classification=await self.classify_sentiment(transcript))
        except ClassificationError as e:
            return ClassificationResult(error=e)

    def _parse_sentiment_response(self, response: str) -> SentimentClassification:
        """Parse and validate a sentiment reply from Claude."""
        # Whole reply first, so valid non-object JSON is a format error
        try:
            data = json.loads(response)
        except json.JSONDecodeError:
            try:
                data = json.loads(self._extract_json(response))
            except (json.JSONDecodeError, ValueError) as e:
                logger.warning("Failed to parse sentiment response", error=str(e))
                raise ClassificationParseError(
                    "Failed to parse JSON response from Claude for sentiment analysis."
                ) from e

        if not isinstance(data, dict):
            raise ClassificationFormatError(
                "Claude returned invalid JSON format for sentiment analysis (expected an object)."
            )

        try:
            payload = SentimentPayload.model_validate(data)
        except PydanticValidationError as e:
            missing = sorted(
                str(err["loc"][0]) for err in e.errors() if err.get("loc")
            )
            logger.warning("Sentiment response failed validation", fields=missing)
            raise ClassificationFormatError(
                "Claude returned invalid JSON format for sentiment analysis "
                f"(invalid or missing keys: {', '.join(missing)})."
            ) from e

        if payload.sentiment not in MODEL_SENTIMENTS:
            # Passed through unchanged; the batch maps it to moderate
            logger.warning("Unexpected sentiment value from Claude", sentiment=payload.sentiment)

        return SentimentClassification(
            sentiment=payload.sentiment,
            description=payload.description,
            raw_response=response,
        )

    def _extract_json(self, text: str) -> str:
        """Extract a JSON object from a reply that may contain other text."""
        start = text.find("{")
        end = text.rfind("}") + 1

        if start != -1 and end > start:
            return text[start:end]

        raise ValueError("No JSON object found in response")


def create_sentiment_classifier() -> Optional[SentimentClassifier]:
    """Build the classifier from settings.

    Returns None when no API key is configured.
    """
    if not settings.ANTHROPIC_API_KEY:
        logger.warning("ANTHROPIC_API_KEY is not set; sentiment classification disabled")
        return None
    return SentimentClassifier()

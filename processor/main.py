"""Command-line entry point for running a batch sentiment analysis.

Usage:
    python -m processor.main --start-date 2024-01-01 --end-date 2024-01-31
"""

import asyncio
import json
import logging
import sys
from argparse import ArgumentParser
from typing import List, Optional

import structlog

from processor.config import settings
from processor.errors import SentimentPipelineError, ValidationError
from processor.integrations.claude import create_sentiment_classifier
from processor.processors.batch_sentiment import BatchSentimentProcessor
from processor.services.analysis_store import AnalysisStore
from processor.services.conversations import ConversationService

logger = structlog.get_logger()


def configure_logging() -> None:
    """Configure stdlib logging and structlog for the CLI."""
    # stdout is reserved for the result JSON
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer() if settings.LOG_FORMAT == "json" else structlog.dev.ConsoleRenderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def build_processor() -> BatchSentimentProcessor:
    """Wire a batch processor against the configured database and model."""
    from processor.database import SessionLocal

    return BatchSentimentProcessor(
        conversations=ConversationService(SessionLocal),
        store=AnalysisStore(SessionLocal),
        classifier=create_sentiment_classifier(),
    )


def parse_args(argv: Optional[List[str]] = None):
    parser = ArgumentParser(description="Run a batch sentiment analysis over a date range")
    parser.add_argument("--start-date", required=True, help="ISO 8601 start date (e.g. 2024-01-01)")
    parser.add_argument("--end-date", required=True, help="ISO 8601 end date, inclusive")
    return parser.parse_args(argv)


async def run(start_date: str, end_date: str, processor: BatchSentimentProcessor) -> dict:
    """Run one batch and return the response payload."""
    result = await processor.process(start_date, end_date)
    return result.to_payload()


def main(argv: Optional[List[str]] = None, processor: Optional[BatchSentimentProcessor] = None) -> int:
    """Main entry point.

    Returns:
        Exit code: 0 on success, 2 on invalid input, 1 on other failures
    """
    args = parse_args(argv)
    configure_logging()

    try:
        payload = asyncio.run(run(args.start_date, args.end_date, processor or build_processor()))
    except ValidationError as e:
        print(json.dumps({"error": str(e)}))
        return 2
    except SentimentPipelineError as e:
        logger.error("Batch sentiment analysis failed", error=str(e))
        print(json.dumps({"error": str(e)}))
        return 1

    print(json.dumps(payload))
    return 0


if __name__ == "__main__":
    sys.exit(main())

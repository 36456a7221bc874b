"""
ResumeRank composition root and main entry point.

Builds every client the analysis pipeline needs exactly once and
injects them into the orchestrator.
"""

import sys
from typing import Optional

from resumerank.core.analysis import AIAnalysisClient, AnalysisOrchestrator, InferenceService
from resumerank.core.quota_guard import QuotaGuard
from resumerank.core.rate_limiter import create_rate_limiter
from resumerank.data.database import DatabaseManager
from resumerank.data.repositories import (
    ActivityLogRepository,
    CandidateRepository,
    JobRepository,
    QuotaRepository,
)
from resumerank.services.activity_logger import ActivityLogger
from resumerank.services.blob_store import create_blob_store
from resumerank.services.broadcaster import create_broadcaster
from resumerank.services.gemini_service import GeminiInferenceService
from resumerank.utils.config import AppSettings, get_settings


def build_orchestrator(
    app_settings: Optional[AppSettings] = None,
    db_manager: Optional[DatabaseManager] = None,
    inference: Optional[InferenceService] = None,
) -> AnalysisOrchestrator:
    """
    Wire the analysis pipeline from settings.

    Args:
        app_settings: Settings to build from (defaults to the global settings)
        db_manager: Database manager shared by repositories and backends
        inference: Inference backend (defaults to Gemini)

    Returns:
        A ready-to-use orchestrator
    """
    app_settings = app_settings or get_settings()
    db_manager = db_manager or DatabaseManager(app_settings.database)

    ai_client = AIAnalysisClient(
        inference or GeminiInferenceService(app_settings.ai),
        max_attempts=app_settings.ai.max_attempts,
        backoff_base_seconds=app_settings.ai.backoff_base_seconds,
    )

    return AnalysisOrchestrator(
        candidates=CandidateRepository(db_manager),
        jobs=JobRepository(db_manager),
        rate_limiter=create_rate_limiter(app_settings.rate_limit, db_manager),
        quota_guard=QuotaGuard(QuotaRepository(db_manager)),
        blob_store=create_blob_store(app_settings.storage, db_manager),
        ai_client=ai_client,
        broadcaster=create_broadcaster(app_settings.broadcast, db_manager),
        activity_logger=ActivityLogger(ActivityLogRepository(db_manager)),
        max_bulk_candidates=app_settings.analysis.max_bulk_candidates,
        bulk_concurrency=app_settings.analysis.bulk_concurrency,
    )


def main() -> int:
    """
    Main entry point for ResumeRank.

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    from resumerank.cli import app

    try:
        app()
    except KeyboardInterrupt:
        print("\nInterrupted by user.")
        return 130
    except SystemExit as e:
        return e.code if isinstance(e.code, int) else 0
    return 0


if __name__ == "__main__":
    sys.exit(main())

"""
Utility modules for ResumeRank.

This package contains shared utilities used across the application:
- config: Configuration management
- logger: Logging infrastructure
- constants: Application-wide constants
"""

from resumerank.utils.config import (
    AppSettings,
    get_settings,
    reload_settings,
    settings,
    ROOT_DIR,
    DATA_DIR,
)
from resumerank.utils.constants import (
    APP_NAME,
    VERSION,
    ActivityAction,
    AnalysisStage,
    CandidateStatus,
    JobStatus,
    Recommendation,
)
from resumerank.utils.logger import (
    setup_logging,
    get_logger,
    audit_log,
    sanitize_for_logging,
    LoggerMixin,
)

__all__ = [
    # Config
    "AppSettings",
    "get_settings",
    "reload_settings",
    "settings",
    "ROOT_DIR",
    "DATA_DIR",
    # Constants
    "APP_NAME",
    "VERSION",
    "ActivityAction",
    "AnalysisStage",
    "CandidateStatus",
    "JobStatus",
    "Recommendation",
    # Logger
    "setup_logging",
    "get_logger",
    "audit_log",
    "sanitize_for_logging",
    "LoggerMixin",
]

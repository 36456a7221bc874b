"""
AI resume analysis.

Provides the inference-backed analysis client and the orchestrator
that runs single and bulk analyses.
"""

from .ai_client import AIAnalysisClient, parse_analysis_response, strip_code_fences
from .inference import InferenceService
from .orchestrator import AnalysisOrchestrator
from .prompts import build_analysis_prompt

__all__ = [
    "AIAnalysisClient",
    "AnalysisOrchestrator",
    "InferenceService",
    "build_analysis_prompt",
    "parse_analysis_response",
    "strip_code_fences",
]

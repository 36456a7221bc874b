"""
Core business logic modules for ResumeRank.

Submodules:
- errors: Analysis error taxonomy
- retry: Retry with backoff
- quota_guard: AI credit admission
- rate_limiter: Per-user sliding-window throttling
- analysis: AI client and the analysis orchestrator
"""

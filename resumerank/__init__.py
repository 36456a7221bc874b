"""
ResumeRank: asynchronous AI resume analysis pipeline.

Scores candidate resumes against job descriptions with an external
inference service, enforcing per-user quota and rate limits.
"""

from resumerank.utils.constants import APP_NAME, VERSION

__app_name__ = APP_NAME
__version__ = VERSION

__all__ = ["__app_name__", "__version__"]

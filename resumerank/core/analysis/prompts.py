"""
Prompt templates for AI resume analysis.
"""

RESUME_ANALYSIS_PROMPT = """
You are an expert HR recruiter analyzing a resume for a job position.

**Job Description:**
{job_description}

**Task:**
Analyze the resume document provided and evaluate how well this candidate matches the job requirements. Provide a detailed assessment.

**Response Format (JSON only, no markdown):**
{{
  "score": <number between 0-100>,
  "summary": "<2-3 sentence overview>",
  "strengths": ["<strength 1>", "<strength 2>", "<strength 3>"],
  "weaknesses": ["<weakness 1>", "<weakness 2>"],
  "recommendation": "<HIRE|INTERVIEW|REJECT>"
}}

**Scoring Guidelines:**
- 90-100: Exceptional match, all key requirements met
- 70-89: Strong match, most requirements met
- 50-69: Moderate match, some requirements met
- 30-49: Weak match, few requirements met
- 0-29: Poor match, minimal requirements met

Be objective and specific. Focus on skills, experience, and qualifications.
"""

CONNECTION_CHECK_PROMPT = 'Say "Hello World"'


def build_analysis_prompt(job_description: str) -> str:
    """Fill the recruiter prompt with the job description text."""
    return RESUME_ANALYSIS_PROMPT.format(job_description=job_description.strip())

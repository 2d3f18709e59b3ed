SYSTEM_PROMPT = "You are an expert ATS resume analyzer. Always respond with valid JSON."

_RESULT_SCHEMA = """{
  "atsScore": number (0-100),
  "overallScore": number (0-100),
  "strengths": ["strength1", "strength2", ...],
  "weaknesses": ["weakness1", "weakness2", ...],
  "recommendations": [
    {
      "category": "string",
      "priority": "high/medium/low",
      "description": "string",
      "impact": number (0-100)
    }
  ],
  "skillsAnalysis": {
    "presentSkills": ["skill1", "skill2", ...],
    "missingSkills": ["skill1", "skill2", ...],
    "skillsMatch": number (0-100),
    "industryRelevance": number (0-100)
  },
  "sectionAnalysis": {
    "contactInfo": {"score": number, "feedback": "string"},
    "summary": {"score": number, "feedback": "string"},
    "experience": {"score": number, "feedback": "string"},
    "education": {"score": number, "feedback": "string"},
    "skills": {"score": number, "feedback": "string"}
  },
  "keywordAnalysis": {
    "density": number (0-100),
    "relevantKeywords": ["keyword1", "keyword2", ...],
    "missingKeywords": ["keyword1", "keyword2", ...]
  },
  "formatting": {
    "score": number (0-100),
    "issues": ["issue1", "issue2", ...],
    "suggestions": ["suggestion1", "suggestion2", ...]
  },
  "industryBenchmark": {
    "industry": "string",
    "averageScore": number,
    "percentile": number
  },
  "estimatedReading": {
    "timeSeconds": number,
    "difficulty": "easy/medium/hard"
  }
}"""


def build_analysis_prompt(resume_text: str, job_role: str, analysis_type: str) -> str:
    return (
        "You are an expert ATS (Applicant Tracking System) resume analyzer and career consultant.\n"
        "Analyze the following resume and provide a comprehensive evaluation.\n\n"
        f"Resume Text:\n{resume_text}\n\n"
        f"Job Role/Industry: {job_role}\n\n"
        f"Analysis Type: {analysis_type}\n\n"
        "Please provide a detailed analysis in the following JSON format:\n"
        f"{_RESULT_SCHEMA}\n\n"
        "Focus on:\n"
        "1. ATS compatibility and keyword optimization\n"
        "2. Content quality and relevance to the job role\n"
        "3. Structure and formatting\n"
        "4. Skills alignment with industry requirements\n"
        "5. Achievement quantification\n"
        "6. Professional presentation\n\n"
        "Provide specific, actionable recommendations that will improve the resume's effectiveness."
    )

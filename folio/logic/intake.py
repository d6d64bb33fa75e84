import json
import logging

import requests
from bs4 import BeautifulSoup

from folio.logic.validator import ValidationResult, validate
from folio.models.errors import IntakeError
from folio.models.settings import Settings

logger = logging.getLogger(__name__)

MAX_SOURCE_CHARS = 6000

# -----------------------------------------------------------------------------
# HELPER FUNCTIONS
# -----------------------------------------------------------------------------

def extract_text(html: str) -> str:
    """Plain text of an HTML résumé / profile page, one block per line."""
    soup = BeautifulSoup(html, "lxml")
    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()
    return soup.get_text(separator="\n", strip=True)


def clean_json_string(json_str):
    if not json_str: return ""
    start = json_str.find('{')
    end = json_str.rfind('}')
    if start != -1 and end != -1:
        return json_str[start:end+1]
    return json_str


def build_prompt(source_text: str) -> str:
    return f"""
You turn loosely written career information into structured portfolio data.
Use only facts present in the SOURCE. Leave a field as an empty string (or an
empty list) when the source does not mention it. Never invent URLs.

SOURCE:
{source_text[:MAX_SOURCE_CHARS]}

OUTPUT FORMAT (Pure JSON only):
{{
  "personalDetails": {{
    "name": "", "title": "", "email": "", "phone": "",
    "linkedin": "", "github": "", "summary": "2-3 sentences, first person",
    "leetcode": "", "hackerrank": "", "resumeUrl": "", "profilePictureUrl": ""
  }},
  "education": [{{"institution": "", "degree": "", "fieldOfStudy": "", "startDate": "YYYY-MM", "endDate": "YYYY-MM", "description": ""}}],
  "workExperience": [{{"company": "", "jobTitle": "", "startDate": "YYYY-MM", "endDate": "YYYY-MM or Present", "responsibilities": [""]}}],
  "skills": [{{"category": "", "name": "", "level": 0}}],
  "projects": [{{"name": "", "description": "", "technologies": [""], "link": "", "imageUrl": ""}}],
  "achievements": [{{"title": "", "description": ""}}],
  "certifications": [{{"name": "", "issuingOrganization": "", "date": "", "credentialUrl": ""}}],
  "seo": {{"title": "Name - Title", "description": "one sentence for search engines"}}
}}
Skill "level" is an integer from 0 to 100.
"""


def call_ollama_json(prompt: str, settings: Settings) -> str:
    data = {
        "model": settings.model_name,
        "prompt": prompt,
        "format": "json",
        "stream": False,
        "options": {
            "num_ctx": 8192,
            "temperature": 0.2
        }
    }
    try:
        response = requests.post(settings.ollama_url, json=data, timeout=settings.timeout_seconds)
        response.raise_for_status()
        return response.json()['response']
    except (requests.RequestException, ValueError, KeyError) as e:
        raise IntakeError(f"Ollama Error: {e}") from e


# -----------------------------------------------------------------------------
# MAIN LOGIC
# -----------------------------------------------------------------------------

def draft_record(source_text: str, settings: Settings) -> ValidationResult:
    """
    Asks the model for a first draft and runs it through the validator.
    Transport and JSON problems raise IntakeError; a draft that does not fit
    the schema comes back as field errors so they can be shown and fixed.
    """
    if not source_text or not source_text.strip():
        raise IntakeError("Nothing to work from: the intake text is empty.")

    logger.info("Requesting draft from %s (%s)", settings.model_name, settings.ollama_url)
    raw_json = call_ollama_json(build_prompt(source_text), settings)

    try:
        data = json.loads(clean_json_string(raw_json))
    except ValueError as e:
        raise IntakeError(f"Model did not return valid JSON: {e}") from e

    result = validate(data)
    if not result.ok:
        logger.warning("Draft rejected by validator with %d error(s)", len(result.errors))
    return result

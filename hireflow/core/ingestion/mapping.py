"""
Mapping of screening-workflow output onto CandidateRecord.

The workflow has answered with both snake_case (our column names) and
camelCase keys. For every field the aliases are tried in order and the
first present, non-null value wins; the snake_case name always comes
first, so it takes precedence when both are sent.
"""

import re
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from hireflow.core.exceptions import PipelineStepError
from hireflow.data.models.candidate import CandidateRecord, SkillAnalysis
from hireflow.utils.constants import GrowthPotential
from hireflow.utils.logger import get_logger

logger = get_logger(__name__)

STEP = "mapping"

FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "name": ("name", "candidate_name", "candidateName"),
    "email": ("email",),
    "phone": ("phone",),
    "location": ("location",),
    "match_score": ("match_score", "matchScore"),
    "predictive_score": ("predictive_score", "predictiveScore"),
    "bias_score": ("bias_score", "biasScore"),
    "skills_analysis": ("skills_analysis", "skillsAnalysis", "skills"),
    "robust_points": ("robust_points", "robustPoints", "robust"),
    "lacking_points": ("lacking_points", "lackingPoints", "lacking"),
    "growth_potential": ("growth_potential", "growthPotential"),
    "total_experience": ("total_experience", "totalExperience"),
    "relevant_experience": ("relevant_experience", "relevantExperience"),
}


def pick(payload: dict[str, Any], field_name: str) -> Any:
    """First non-null value among a field's aliases."""
    for alias in FIELD_ALIASES[field_name]:
        value = payload.get(alias)
        if value is not None:
            return value
    return None


def name_from_filename(filename: str) -> str:
    """'jane_doe-resume.pdf' -> 'Jane Doe Resume'."""
    stem = Path(filename).stem
    words = re.sub(r"[_\-.]+", " ", stem).split()
    return " ".join(word.capitalize() for word in words) or "Unknown Candidate"


def _score(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip().rstrip("%").strip()
    try:
        return round(float(value))
    except (TypeError, ValueError):
        logger.warning(f"Ignoring non-numeric score {value!r}")
        return None


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _text_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)):
        return []
    return [str(item).strip() for item in value if item is not None and str(item).strip()]


def _skills(value: Any) -> list[SkillAnalysis]:
    """Accepts [{name, match}], [{skill, score}], ["python"] or {"python": 80}."""
    if isinstance(value, dict):
        value = [{"name": name, "match": match} for name, match in value.items()]
    if not isinstance(value, list):
        return []

    skills = []
    for item in value:
        if isinstance(item, str):
            name, match = item, 0
        elif isinstance(item, dict):
            name = item.get("name") or item.get("skill")
            match = next(
                (item[key] for key in ("match", "score", "match_score") if item.get(key) is not None),
                0,
            )
        else:
            continue
        if not name or not str(name).strip():
            continue
        skills.append(SkillAnalysis(name=str(name), match=_score(match) or 0))
    return skills


def _growth(value: Any) -> Optional[GrowthPotential]:
    if value is None:
        return None
    try:
        return GrowthPotential(str(value).strip().lower())
    except ValueError:
        logger.warning(f"Unknown growth potential {value!r}")
        return None


def _experience(value: Any) -> Optional[str]:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return f"{value:g} years"
    return _text(value)


def unwrap_analysis(payload: Any) -> dict[str, Any]:
    """
    Reduce a proxy response body to the analysis object.

    n8n "respond with all items" wraps the object in a list; a body the
    proxy could not parse arrives as ``{"raw": text}`` and is rejected.
    """
    if isinstance(payload, list) and payload and isinstance(payload[0], dict):
        payload = payload[0]
    if not isinstance(payload, dict) or not payload:
        raise PipelineStepError(STEP, "Screening service returned no analysis object")
    if set(payload) == {"raw"}:
        raise PipelineStepError(STEP, "Screening service returned a non-JSON body")
    return payload


def map_analysis(
    payload: Any,
    *,
    job_id: str,
    user_id: str,
    filename: str,
    resume_url: Optional[str],
) -> CandidateRecord:
    """
    Build a validated CandidateRecord from a screening response body.

    Raises:
        PipelineStepError: if the body is not an analysis object or the
            mapped values fail validation.
    """
    analysis = unwrap_analysis(payload)

    try:
        return CandidateRecord(
            job_id=job_id,
            user_id=user_id,
            name=_text(pick(analysis, "name")) or name_from_filename(filename),
            email=_text(pick(analysis, "email")),
            phone=_text(pick(analysis, "phone")),
            location=_text(pick(analysis, "location")),
            match_score=_score(pick(analysis, "match_score")),
            predictive_score=_score(pick(analysis, "predictive_score")),
            bias_score=_score(pick(analysis, "bias_score")),
            skills_analysis=_skills(pick(analysis, "skills_analysis")),
            robust_points=_text_list(pick(analysis, "robust_points")),
            lacking_points=_text_list(pick(analysis, "lacking_points")),
            growth_potential=_growth(pick(analysis, "growth_potential")),
            total_experience=_experience(pick(analysis, "total_experience")),
            relevant_experience=_experience(pick(analysis, "relevant_experience")),
            resume_url=resume_url,
            parsed_data=analysis,
        )
    except ValidationError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
        raise PipelineStepError(STEP, f"Invalid analysis payload ({fields})") from e

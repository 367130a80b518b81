"""
Tests for hireflow.core.ingestion.mapping: analysis payload -> CandidateRecord.
"""

import pytest

from hireflow.core.exceptions import PipelineStepError
from hireflow.core.ingestion.mapping import map_analysis, name_from_filename, unwrap_analysis
from hireflow.utils.constants import CandidateStatus, GrowthPotential

CONTEXT = {
    "job_id": "job-42",
    "user_id": "user-1",
    "filename": "jane_doe.pdf",
    "resume_url": "https://files.example.com/storage/v1/object/public/resumes/user-1/1_jane_doe.pdf",
}


def mapped(payload):
    return map_analysis(payload, **CONTEXT)


class TestNamingConventions:
    def test_camel_and_snake_case_map_to_same_score(self):
        assert mapped({"matchScore": 91}).match_score == 91
        assert mapped({"match_score": 91}).match_score == 91

    def test_snake_case_wins_when_both_present(self):
        record = mapped({"match_score": 91, "matchScore": 40, "robust_points": ["a"], "robustPoints": ["b"]})
        assert record.match_score == 91
        assert record.robust_points == ["a"]

    def test_null_snake_case_falls_through_to_camel_case(self):
        assert mapped({"match_score": None, "matchScore": 64}).match_score == 64

    def test_camel_case_payload(self):
        record = mapped(
            {
                "candidateName": "John Smith",
                "predictiveScore": 70,
                "biasScore": 5,
                "skillsAnalysis": [{"skill": "Go", "score": 80}],
                "lackingPoints": ["No Kubernetes"],
                "growthPotential": "Medium",
                "totalExperience": 7,
                "relevantExperience": "3 years",
            }
        )
        assert record.name == "John Smith"
        assert record.predictive_score == 70
        assert record.bias_score == 5
        assert record.skills_analysis[0].name == "Go"
        assert record.skills_analysis[0].match == 80
        assert record.lacking_points == ["No Kubernetes"]
        assert record.growth_potential == GrowthPotential.MEDIUM.value
        assert record.total_experience == "7 years"
        assert record.relevant_experience == "3 years"


class TestFullPayload:
    def test_all_fields_mapped(self, sample_analysis):
        record = mapped(sample_analysis)

        assert record.job_id == "job-42"
        assert record.user_id == "user-1"
        assert record.name == "Jane Doe"
        assert record.email == "jane@example.com"
        assert record.phone == "+1 555 0100"
        assert record.location == "Berlin"
        assert (record.match_score, record.predictive_score, record.bias_score) == (84, 78, 12)
        assert [(s.name, s.match) for s in record.skills_analysis] == [("Python", 95), ("Kubernetes", 40)]
        assert record.robust_points == ["Strong API design", "Mentoring"]
        assert record.growth_potential == "high"
        assert record.resume_url == CONTEXT["resume_url"]
        assert record.parsed_data == sample_analysis
        assert record.status == CandidateStatus.NEW.value

    def test_list_wrapped_payload(self, sample_analysis):
        assert mapped([sample_analysis]).name == "Jane Doe"


class TestCoercion:
    @pytest.mark.parametrize("raw, expected", [("91", 91), ("91%", 91), (90.6, 91), (None, None), (True, None), ("n/a", None)])
    def test_scores(self, raw, expected):
        assert mapped({"match_score": raw}).match_score == expected

    def test_skills_as_dict(self):
        record = mapped({"skills": {"Python": 90, "SQL": "70"}})
        assert [(s.name, s.match) for s in record.skills_analysis] == [("Python", 90), ("SQL", 70)]

    def test_skills_as_strings(self):
        record = mapped({"skills_analysis": ["Python", "", "Docker"]})
        assert [s.name for s in record.skills_analysis] == ["Python", "Docker"]

    def test_single_string_point_becomes_list(self):
        assert mapped({"robust": "Great communicator"}).robust_points == ["Great communicator"]

    def test_unknown_growth_potential_is_dropped(self):
        assert mapped({"growth_potential": "stellar"}).growth_potential is None


class TestDefaults:
    def test_name_from_filename_when_missing(self):
        assert mapped({"match_score": 50}).name == "Jane Doe"

    @pytest.mark.parametrize(
        "filename, expected",
        [("jane_doe-resume.pdf", "Jane Doe Resume"), ("CV.docx", "Cv"), ("___.pdf", "Unknown Candidate")],
    )
    def test_name_from_filename(self, filename, expected):
        assert name_from_filename(filename) == expected


class TestRejection:
    def test_out_of_range_score_is_a_mapping_error(self):
        with pytest.raises(PipelineStepError) as exc:
            mapped({"match_score": 150})
        assert exc.value.step == "mapping"
        assert "match_score" in exc.value.message

    def test_raw_text_body_is_rejected(self):
        with pytest.raises(PipelineStepError, match="non-JSON"):
            unwrap_analysis({"raw": "Workflow was started"})

    @pytest.mark.parametrize("payload", [None, {}, [], "text", 42])
    def test_non_object_is_rejected(self, payload):
        with pytest.raises(PipelineStepError, match="no analysis object"):
            unwrap_analysis(payload)

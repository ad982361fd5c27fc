from datetime import datetime

import pytest
from bson import ObjectId

from hamkar.core.exceptions import InvalidStateError
from hamkar.models import developer as developer_model
from hamkar.models import employer as employer_model
from hamkar.models import job_request as job_request_model
from hamkar.models import project as project_model
from hamkar.models.account import AccountKind
from hamkar.models.job_request import JobRequestStatus, check_transition

FULL_DEVELOPER = {
    "first_name": "Sara",
    "last_name": "Ahmadi",
    "email": "sara@mail.hamkar.io",
    "phone": "0912",
    "city": "Tehran",
    "skills": ["python"],
    "experience_years": 4,
    "github_url": "https://github.com/sara",
    "portfolio_url": "https://sara.dev",
    "resume_url": "/uploads/resumes/resume-1.pdf",
    "profile_picture": "/uploads/profile-pictures/p.png",
}


class TestProfileCompletion:
    def test_empty_profile_is_zero(self):
        assert developer_model.profile_completion({}) == 0

    def test_full_profile_is_hundred(self):
        assert developer_model.profile_completion(FULL_DEVELOPER) == 100
        assert developer_model.is_profile_complete(FULL_DEVELOPER)

    def test_monotonic_in_filled_fields(self):
        doc = {}
        previous = 0
        for field, value in FULL_DEVELOPER.items():
            doc[field] = value
            current = developer_model.profile_completion(doc)
            assert isinstance(current, int)
            assert 0 <= current <= 100
            assert current >= previous
            previous = current

    def test_empty_values_do_not_count(self):
        doc = dict(FULL_DEVELOPER, skills=[], city="  ", github_url=None)
        assert developer_model.profile_completion(doc) == round(8 / 11 * 100)

    def test_zero_experience_counts_as_filled(self):
        with_zero = dict(FULL_DEVELOPER, experience_years=0)
        assert developer_model.profile_completion(with_zero) == 100

    def test_threshold(self):
        doc = {field: FULL_DEVELOPER[field] for field in developer_model.REQUIRED_PROFILE_FIELDS}
        doc["github_url"] = FULL_DEVELOPER["github_url"]
        # 8 of 11 fields
        assert developer_model.profile_completion(doc) == 73
        assert not developer_model.is_profile_complete(doc)

    def test_employer_completion(self):
        doc = {"company_name": "Acme", "email": "hr@acme.io", "phone": "1", "city": "Shiraz"}
        assert employer_model.profile_completion(doc) == 40
        doc.update(description="We build", industry="Software")
        assert employer_model.profile_completion(doc) == 60


def test_public_profile_strips_password_hash():
    doc = dict(FULL_DEVELOPER, _id=ObjectId(), password_hash="$2b$04$abc", projects=[ObjectId()])
    profile = developer_model.public_profile(doc)
    assert "password_hash" not in profile
    assert profile["full_name"] == "Sara Ahmadi"
    assert profile["total_projects"] == 1


class TestTransitions:
    @pytest.mark.parametrize("target", [JobRequestStatus.ACCEPTED, JobRequestStatus.REJECTED])
    def test_developer_decides_pending(self, target):
        check_transition(JobRequestStatus.PENDING, target, AccountKind.DEVELOPER)

    def test_employer_withdraws_pending(self):
        check_transition(JobRequestStatus.PENDING, JobRequestStatus.WITHDRAWN, AccountKind.EMPLOYER)

    @pytest.mark.parametrize(
        "target,party",
        [
            (JobRequestStatus.ACCEPTED, AccountKind.EMPLOYER),
            (JobRequestStatus.REJECTED, AccountKind.EMPLOYER),
            (JobRequestStatus.WITHDRAWN, AccountKind.DEVELOPER),
            (JobRequestStatus.PENDING, AccountKind.DEVELOPER),
            (JobRequestStatus.PENDING, AccountKind.EMPLOYER),
        ],
    )
    def test_wrong_party_is_rejected(self, target, party):
        with pytest.raises(InvalidStateError):
            check_transition(JobRequestStatus.PENDING, target, party)

    @pytest.mark.parametrize(
        "current",
        [JobRequestStatus.ACCEPTED, JobRequestStatus.REJECTED, JobRequestStatus.WITHDRAWN],
    )
    def test_terminal_states_have_no_exit(self, current):
        for target, party in job_request_model.TRANSITIONS.items():
            with pytest.raises(InvalidStateError):
                check_transition(current, target, party)


def test_formatted_salary_and_interview_flag():
    doc = {
        "_id": ObjectId(),
        "salary_offer": 85000,
        "status": "accepted",
        "interview_date": datetime(2025, 1, 10, 9, 0),
    }
    assert job_request_model.formatted_salary(doc) == "$85,000"
    assert job_request_model.has_interview_scheduled(doc)
    assert not job_request_model.has_interview_scheduled(dict(doc, status="pending"))
    assert job_request_model.summary(doc)["salary_offer"] == "$85,000"


def test_project_visibility():
    owner = ObjectId()
    private = {"developer_id": owner, "is_public": False}
    assert project_model.can_view(private, owner)
    assert not project_model.can_view(private, ObjectId())
    assert not project_model.can_view(private, None)
    assert project_model.can_view(private, None, is_admin=True)
    assert project_model.can_view({"developer_id": owner, "is_public": True}, None)

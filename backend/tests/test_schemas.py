"""
Tests for request/record schemas
"""

from datetime import date

import pytest
from pydantic import ValidationError

from careerhub.schemas import JobFilters, JobHighlights, JobPatch
from factories import make_job_form


class TestJobFormData:
    def test_valid_form(self):
        form = make_job_form()
        assert form.category == "tech"
        assert str(form.apply_link) == "https://acme.example.com/careers/123"

    def test_inverted_salary_rejected(self):
        with pytest.raises(ValidationError):
            make_job_form(salary_min=100000, salary_max=50000)

    def test_equal_salaries_allowed(self):
        assert make_job_form(salary_min=70000, salary_max=70000).salary_min == 70000

    @pytest.mark.parametrize(
        "field,value",
        [
            ("title", "ab"),
            ("employer_name", "A"),
            ("description", "Too short"),
            ("qualifications", []),
            ("responsibilities", []),
            ("salary_min", -1),
            ("apply_link", "not a url"),
            ("category", "astrology"),
        ],
    )
    def test_field_validation(self, field, value):
        with pytest.raises(ValidationError):
            make_job_form(**{field: value})

    def test_plain_date_expiry_accepted(self):
        assert make_job_form(expiry_date=date(2026, 6, 1)).expiry_date == date(2026, 6, 1)


class TestJobPatch:
    def test_unset_fields_are_not_dumped(self):
        patch = JobPatch(salary_min=0, city="")
        assert patch.model_dump(exclude_unset=True) == {"salary_min": 0, "city": ""}

    def test_null_required_field_rejected(self):
        with pytest.raises(ValidationError):
            JobPatch(title=None)

    def test_null_link_allowed(self):
        assert JobPatch(google_link=None).model_dump(exclude_unset=True) == {"google_link": None}


class TestJobFilters:
    def test_active_and_expired_are_exclusive(self):
        with pytest.raises(ValidationError):
            JobFilters(is_active=True, is_expired=True)


class TestJobHighlights:
    def test_accepts_capitalised_and_field_names(self):
        stored = JobHighlights.model_validate({"Qualifications": ["a"], "Responsibilities": ["b"]})
        built = JobHighlights(qualifications=["a"], responsibilities=["b"])
        assert stored == built
        assert built.model_dump(by_alias=True) == {
            "Qualifications": ["a"],
            "Responsibilities": ["b"],
            "Benefits": None,
        }

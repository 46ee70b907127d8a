"""
User profile data models for roadmate.

A profile is the logged-in user's public card: display name, headline,
bio, skills (rated 1-10) and education history. Skill and education ids
are assigned by the server.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

MIN_PROFICIENCY = 1
MAX_PROFICIENCY = 10


class Skill(BaseModel):
    """
    A skill with a self-assessed proficiency.

    Example:
        >>> Skill(id="s1", name="Go", proficiency=7)
    """

    id: str
    name: str = Field(..., min_length=1)
    proficiency: int = Field(..., ge=MIN_PROFICIENCY, le=MAX_PROFICIENCY)


class Education(BaseModel):
    """
    A school entry. Years are inclusive; ``end_year`` may equal ``start_year``.

    The wire format spells the years ``startyear`` / ``endyear``.
    """

    id: str
    school: str = Field(..., min_length=1)
    degree: str = Field(..., min_length=1)
    major: str = Field(..., min_length=1)
    start_year: int = Field(..., alias="startyear", gt=0)
    end_year: int = Field(..., alias="endyear", gt=0)

    model_config = ConfigDict(populate_by_name=True)

    @model_validator(mode="after")
    def check_years(self) -> Education:
        if self.end_year < self.start_year:
            raise ValueError("end year before start year")
        return self

    @property
    def years(self) -> str:
        if self.start_year == self.end_year:
            return str(self.start_year)
        return f"{self.start_year}-{self.end_year}"


class UserProfile(BaseModel):
    """The logged-in user's profile."""

    username: str = Field(..., min_length=1)
    name: str = ""
    headline: str = ""
    bio: str = ""
    skills: list[Skill] = Field(default_factory=list)
    educations: list[Education] = Field(default_factory=list)

    @field_validator("skills", "educations", mode="before")
    @classmethod
    def none_as_empty(cls, v: object) -> object:
        return [] if v is None else v

    @classmethod
    def default_for(cls, username: str) -> UserProfile:
        """Profile shown before the server has been asked: just the username."""
        return cls(username=username, name=username)

    def sort_entries(self) -> None:
        """Order entries the way the server lists them."""
        self.skills.sort(key=lambda s: (-s.proficiency, s.name.lower()))
        self.educations.sort(key=lambda e: (-e.start_year, e.school.lower()))

    def get_skill(self, skill_id: str) -> Skill | None:
        for skill in self.skills:
            if skill.id == skill_id:
                return skill
        return None

    def get_education(self, education_id: str) -> Education | None:
        for education in self.educations:
            if education.id == education_id:
                return education
        return None

"""User and job schemas.

These models are both the API request/response bodies and the records
persisted in the data file, so field aliases match the stored JSON.
"""

from typing import List

from pydantic import BaseModel, ConfigDict, Field


class Job(BaseModel):
    """A job on a user's list. Title is the lookup key, but is not unique."""

    model_config = ConfigDict(populate_by_name=True)

    title: str
    description: str
    end_date: str = Field(..., alias="endDate")


class UserInput(BaseModel):
    """Fields accepted when creating a user."""

    name: str
    surname: str
    username: str
    email: str
    password: str


class User(UserInput):
    """Stored user. ``password`` holds the bcrypt hash for registered users."""

    jobs: List[Job] = Field(default_factory=list)

    def find_job_index(self, title: str) -> int:
        """Index of the first job with this title, or -1."""
        return next(
            (i for i, job in enumerate(self.jobs) if job.title == title),
            -1,
        )


class AddJobRequest(BaseModel):
    """Body of the unprotected add-job route; the caller names the user."""

    username: str
    job: Job

"""
JobBoard Backend - Job and User Response Schemas
=================================================

What:  Pydantic models for the JSON bodies returned by the job and admin routes.
How:   Rows come back from the data service as dicts; the models validate the
       known columns and keep any extra columns the provider adds.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class EmployerSummary(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None


class Job(BaseModel):
    """
    A job listing.

    `date` is the ISO calendar date of the job (YYYY-MM-DD), `pay` is free text.
    `employer` is only present on listings that embed the owner's profile.
    """

    model_config = ConfigDict(extra="allow")

    id: str
    title: str
    date: str
    pay: str
    employer_id: str
    created_at: Optional[str] = None
    employer: Optional[EmployerSummary] = None


class User(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    name: str
    email: str
    role: str
    created_at: Optional[str] = None


class JobResponse(BaseModel):
    job: Job


class JobListResponse(BaseModel):
    jobs: List[Job] = Field(description="Listings, newest first")


class UserListResponse(BaseModel):
    users: List[User] = Field(description="Registered users, newest first")


class AdminOverviewResponse(BaseModel):
    users: List[User]
    jobs: List[Job]


class SuccessResponse(BaseModel):
    success: bool = True


class ProfileResponse(BaseModel):
    """The caller's own users row. The admin has none, so `user` is null."""

    user: Optional[User] = None
    is_admin: bool = False

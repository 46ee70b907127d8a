"""
Server synchronisation: the API gateway and the optimistic sync service.

Example:
    >>> from roadmate.core.sync import HttpSyncGateway, SyncService
    >>> gateway = HttpSyncGateway("http://localhost:8080", token)
    >>> service = SyncService(store, gateway, username="alice")
"""

from roadmate.core.sync.gateway import (
    EDUCATIONS_PATH,
    PROFILE_PATH,
    PROJECTS_PATH,
    SKILLS_PATH,
    ApiGateway,
    HttpSyncGateway,
    ProfileGateway,
    SyncGateway,
)
from roadmate.core.sync.models import (
    AddEducationRequest,
    AddSkillRequest,
    CreateProjectRequest,
    CreateTaskRequest,
    EditProjectRequest,
    ProjectDetails,
    ProjectResponse,
    TaskDTO,
    UpdateEducationRequest,
    UpdateProfileRequest,
    UpdateSkillRequest,
)
from roadmate.core.sync.service import SyncService

__all__ = [
    "AddEducationRequest",
    "AddSkillRequest",
    "ApiGateway",
    "CreateProjectRequest",
    "CreateTaskRequest",
    "EDUCATIONS_PATH",
    "EditProjectRequest",
    "HttpSyncGateway",
    "PROFILE_PATH",
    "PROJECTS_PATH",
    "ProfileGateway",
    "ProjectDetails",
    "ProjectResponse",
    "SKILLS_PATH",
    "SyncGateway",
    "SyncService",
    "TaskDTO",
    "UpdateEducationRequest",
    "UpdateProfileRequest",
    "UpdateSkillRequest",
]

"""
Roadmate - shared project boards.

Client core for Roadmate: a cached, optimistically synchronised view of the
user's projects, their members and their kanban boards.
"""

__version__ = "0.1.0"

# Re-export core models for convenience
from roadmate.core.projects.models import Project, ProjectMember, TaskItem, TaskStatus

__all__ = ["Project", "ProjectMember", "TaskItem", "TaskStatus", "__version__"]

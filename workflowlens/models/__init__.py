"""SQLAlchemy ORM models: one file per table."""

from workflowlens.models.commit import Commit
from workflowlens.models.project import Project
from workflowlens.models.recommendation import Recommendation

__all__ = [
    "Commit",
    "Project",
    "Recommendation",
]

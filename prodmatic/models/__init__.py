"""
SQLAlchemy ORM models.

All models imported here to ensure they are registered with Base.metadata.
Import order matters: base models before dependent models.
"""

from prodmatic.models.base import Base, SoftDeleteMixin, TimestampMixin, UUIDMixin
from prodmatic.models.user import User
from prodmatic.models.organization import Organization
from prodmatic.models.member import OrgMember, OrgRole
from prodmatic.models.invitation import Invitation
from prodmatic.models.activity_log import ActivityLog
from prodmatic.models.product import Product, ProductLifecycle
from prodmatic.models.sprint import Sprint, SprintStatus
from prodmatic.models.idea import Idea, IdeaPriority, IdeaStatus
from prodmatic.models.task import Task, TaskPriority, TaskStatus, TaskType
from prodmatic.models.release import (
    Changelog,
    ChangelogType,
    ChangelogVisibility,
    ChecklistCategory,
    ChecklistItem,
    Release,
    ReleaseStatus,
    ReleaseType,
)
from prodmatic.models.okr import KeyResult, KeyResultStatus, KeyResultType, Okr, OkrStatus
from prodmatic.models.roadmap import RoadmapItem, RoadmapItemType, RoadmapLane, RoadmapStatus
from prodmatic.models.experiment import Experiment, ExperimentStatus, ExperimentType
from prodmatic.models.team import Team, TeamMember
from prodmatic.models.document import Document, DocumentStatus, DocumentType
from prodmatic.models.persona import Persona
from prodmatic.models.feature_flag import FeatureFlag
from prodmatic.models.kpi import Kpi, KpiFrequency
from prodmatic.models.research import (
    Customer,
    Insight,
    InsightImpact,
    InsightSource,
    Interview,
    InterviewStatus,
)

__all__ = [
    "Base",
    "SoftDeleteMixin",
    "TimestampMixin",
    "UUIDMixin",
    "User",
    "Organization",
    "OrgMember",
    "OrgRole",
    "Invitation",
    "ActivityLog",
    "Product",
    "ProductLifecycle",
    "Sprint",
    "SprintStatus",
    "Idea",
    "IdeaPriority",
    "IdeaStatus",
    "Task",
    "TaskPriority",
    "TaskStatus",
    "TaskType",
    "Release",
    "ReleaseStatus",
    "ReleaseType",
    "ChecklistItem",
    "ChecklistCategory",
    "Changelog",
    "ChangelogType",
    "ChangelogVisibility",
    "Okr",
    "OkrStatus",
    "KeyResult",
    "KeyResultStatus",
    "KeyResultType",
    "RoadmapItem",
    "RoadmapItemType",
    "RoadmapLane",
    "RoadmapStatus",
    "Experiment",
    "ExperimentStatus",
    "ExperimentType",
    "Team",
    "TeamMember",
    "Document",
    "DocumentStatus",
    "DocumentType",
    "Persona",
    "FeatureFlag",
    "Kpi",
    "KpiFrequency",
    "Customer",
    "Interview",
    "InterviewStatus",
    "Insight",
    "InsightImpact",
    "InsightSource",
]

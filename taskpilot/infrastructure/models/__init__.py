"""ORM models used by the application infrastructure."""

from .activity_log import ActivityLogModel
from .invitation import InvitationModel
from .notification import NotificationModel
from .organization import OrganizationMemberModel, OrganizationModel
from .project import ProjectMemberModel, ProjectModel
from .sprint import SprintModel
from .task import (
    TaskAttachmentModel,
    TaskCommentModel,
    TaskModel,
    TaskStatusModel,
    task_assignee_table,
    task_reporter_table,
)
from .user import UserModel
from .workspace import WorkspaceMemberModel, WorkspaceModel

__all__ = [
    "ActivityLogModel",
    "InvitationModel",
    "NotificationModel",
    "OrganizationMemberModel",
    "OrganizationModel",
    "ProjectMemberModel",
    "ProjectModel",
    "SprintModel",
    "TaskAttachmentModel",
    "TaskCommentModel",
    "TaskModel",
    "TaskStatusModel",
    "UserModel",
    "WorkspaceMemberModel",
    "WorkspaceModel",
    "task_assignee_table",
    "task_reporter_table",
]

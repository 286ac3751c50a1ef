"""Shared fixtures: a throwaway SQLite database and a small seeded tenant."""

from __future__ import annotations

from datetime import timedelta
from types import SimpleNamespace

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from taskpilot.infrastructure import models
from taskpilot.infrastructure.database import Base
from taskpilot.utils import now_in_app_naive_datetime


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def engine(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'taskpilot-test.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    with session_factory() as session:
        yield session


@pytest.fixture
def seeded(db_session):
    """Seed one organization with a workspace, a project, four users and a task.

    * alice reports task-1 and is a workspace member
    * bob and carol are assigned to task-1 and are project members
    * dave only belongs to the organization
    """

    users = {
        name: models.UserModel(
            id=f"user-{name}",
            email=f"{name}@example.com",
            first_name=name.capitalize(),
            last_name="Tester",
        )
        for name in ("alice", "bob", "carol", "dave")
    }
    db_session.add_all(users.values())

    organization = models.OrganizationModel(id="org-1", name="Acme", slug="acme")
    workspace = models.WorkspaceModel(
        id="ws-1", organization_id="org-1", name="Engineering", slug="engineering"
    )
    project = models.ProjectModel(
        id="proj-1",
        workspace_id="ws-1",
        name="Launch",
        slug="launch",
        description="Ship the thing",
    )
    todo = models.TaskStatusModel(id="status-todo", name="To Do", color="#999", category="TODO")
    done = models.TaskStatusModel(id="status-done", name="Done", color="#0f0", category="DONE")
    db_session.add_all([organization, workspace, project, todo, done])
    db_session.flush()

    db_session.add_all(
        [
            *(
                models.OrganizationMemberModel(organization_id="org-1", user_id=user.id)
                for user in users.values()
            ),
            models.WorkspaceMemberModel(workspace_id="ws-1", user_id="user-alice"),
            models.WorkspaceMemberModel(workspace_id="ws-1", user_id="user-bob"),
            models.ProjectMemberModel(project_id="proj-1", user_id="user-bob"),
            models.ProjectMemberModel(project_id="proj-1", user_id="user-carol"),
        ]
    )

    task = models.TaskModel(
        id="task-1",
        project_id="proj-1",
        status_id="status-todo",
        title="Write docs",
        slug="write-docs",
        priority="HIGH",
        task_number=7,
        due_date=now_in_app_naive_datetime() + timedelta(hours=3),
    )
    task.assignees = [users["bob"], users["carol"]]
    task.reporters = [users["alice"]]
    db_session.add(task)
    db_session.flush()

    comment = models.TaskCommentModel(
        id="comment-1", task_id="task-1", author_id="user-alice", content="Looks good"
    )
    db_session.add(comment)
    db_session.commit()

    return SimpleNamespace(
        organization_id="org-1",
        workspace_id="ws-1",
        project_id="proj-1",
        task_id="task-1",
        comment_id="comment-1",
        users={name: user.id for name, user in users.items()},
    )

"""
Shared fixtures for unit tests.

Organisation used throughout the tests:

    Company (dept-root)
    ├── Engineering (dept-eng)
    │   ├── Backend (dept-backend)
    │   │   └── Platform (dept-platform)
    │   └── Legacy (dept-legacy, inactive)
    └── Sales (dept-sales)
"""

from unittest.mock import AsyncMock, Mock

import pytest

from fakes import (
    InMemoryDepartmentRepository,
    InMemoryTaskRepository,
    InMemoryUserRepository,
    task_request,
)
from taskhub.application.services.dashboard_service import DashboardService
from taskhub.application.services.task_service import TaskService
from taskhub.config import Settings
from taskhub.domain.events.base import EventDispatcher
from taskhub.domain.models.department import Department
from taskhub.domain.models.user import Role, UserProfile
from taskhub.domain.services.hierarchy_service import DepartmentHierarchyService
from taskhub.domain.services.storage_service import StorageService


@pytest.fixture
def departments():
    return [
        Department(id="dept-root", name="Company"),
        Department(id="dept-eng", name="Engineering", parent_id="dept-root"),
        Department(id="dept-backend", name="Backend", parent_id="dept-eng"),
        Department(id="dept-platform", name="Platform", parent_id="dept-backend"),
        Department(id="dept-legacy", name="Legacy", parent_id="dept-eng", is_active=False),
        Department(id="dept-sales", name="Sales", parent_id="dept-root"),
    ]


@pytest.fixture
def users():
    profiles = [
        UserProfile(id="u-staff", name="Sam Staff", role=Role.STAFF, department_id="dept-backend"),
        UserProfile(id="u-staff2", name="Kim Staff", role=Role.STAFF, department_id="dept-backend"),
        UserProfile(id="u-platform", name="Pat Platform", role=Role.STAFF, department_id="dept-platform"),
        UserProfile(id="u-sales", name="Lee Sales", role=Role.STAFF, department_id="dept-sales"),
        UserProfile(id="u-manager", name="Max Manager", role=Role.MANAGER,
                    department_id="dept-eng", managed_department_id="dept-eng"),
        UserProfile(id="u-sales-manager", name="Ana Sales", role=Role.MANAGER,
                    department_id="dept-sales", managed_department_id="dept-sales"),
        UserProfile(id="u-hr", name="Hana HR", role=Role.HR_ADMIN, department_id="dept-root"),
        UserProfile(id="u-hr-manager", name="Remy HR", role=Role.HR_ADMIN,
                    department_id="dept-root", managed_department_id="dept-sales"),
        UserProfile(id="u-inactive", name="Old Account", role=Role.STAFF,
                    department_id="dept-backend", is_active=False),
    ]
    return {profile.id: profile for profile in profiles}


@pytest.fixture
def ctx(users):
    """Get the caller context of a test user."""
    def _ctx(user_id):
        return users[user_id].to_context()
    return _ctx


@pytest.fixture
def make_request():
    return task_request


@pytest.fixture
def settings():
    return Settings(_env_file=None, environment="testing", max_file_size_mb=1, max_task_storage_mb=2)


@pytest.fixture
def task_repository(users):
    repository = InMemoryTaskRepository(users)
    repository.projects.add("proj-1")
    return repository


@pytest.fixture
def department_repository(departments):
    return InMemoryDepartmentRepository(departments)


@pytest.fixture
def user_repository(users):
    return InMemoryUserRepository(users)


@pytest.fixture
def hierarchy_service(department_repository):
    return DepartmentHierarchyService(department_repository)


@pytest.fixture
def storage_service():
    storage = Mock(spec=StorageService)
    storage.validate_upload = Mock(return_value=None)
    storage.upload = AsyncMock(side_effect=lambda path, content, content_type=None: path)
    storage.create_signed_url = AsyncMock(return_value="https://files.example.com/signed")
    storage.delete = AsyncMock(return_value=True)
    return storage


@pytest.fixture
def event_dispatcher():
    return EventDispatcher()


@pytest.fixture
def task_service(task_repository, hierarchy_service, storage_service, event_dispatcher, settings):
    return TaskService(
        task_repository=task_repository,
        hierarchy_service=hierarchy_service,
        storage_service=storage_service,
        event_dispatcher=event_dispatcher,
        settings=settings,
    )


@pytest.fixture
def dashboard_service(task_repository, hierarchy_service, user_repository):
    return DashboardService(task_repository, hierarchy_service, user_repository)

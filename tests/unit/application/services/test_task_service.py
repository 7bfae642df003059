"""
Unit tests for TaskService.
"""

from datetime import date
from unittest.mock import AsyncMock, Mock

import pytest

from taskhub.application.dto.task_dto import TaskFilterDTO
from taskhub.application.services.task_service import TaskService
from taskhub.domain.models.base import (
    AuthorizationError,
    ConflictError,
    DepthExceededError,
    NotFoundError,
    ValidationError,
)
from taskhub.domain.models.task import TaskStatus
from taskhub.domain.models.task_log import TaskLogAction
from taskhub.domain.services.notification_service import NotificationService
from taskhub.infrastructure.events.event_setup import setup_event_handlers


@pytest.fixture
def notifier():
    service = Mock(spec=NotificationService)
    service.notify = AsyncMock()
    return service


class TestCreateTask:
    """Test cases for task and subtask creation."""

    @pytest.mark.asyncio
    async def test_staff_creates_task(self, task_service, task_repository, make_request, ctx):
        """Test a staff member creates a task in their own department."""
        staff = ctx("u-staff")
        result = await task_service.create_task(
            make_request(assignee_ids=["u-staff", "u-staff2", "u-platform"]), staff
        )

        view = await task_service.get_by_id(result.id, staff)
        assert view.status == TaskStatus.TO_DO
        assert view.department_id == "dept-backend"
        assert view.owner_id == "u-staff"
        assert len(view.assignments) == 3
        assert view.priority_label == "MEDIUM"
        assert view.can_edit is True

        logs = task_repository.logs_for(result.id)
        assert [entry.action for entry in logs] == [TaskLogAction.CREATED]
        assert logs[0].metadata["source"] == "task_service"

    @pytest.mark.asyncio
    async def test_create_rejects_invalid_input(self, task_service, task_repository, make_request, ctx):
        """Test domain validation runs before anything is stored."""
        with pytest.raises(ValidationError):
            await task_service.create_task(make_request(priority=11), ctx("u-staff"))
        with pytest.raises(ValidationError):
            await task_service.create_task(make_request(assignee_ids=[]), ctx("u-staff"))
        assert task_repository.tasks == {}

    @pytest.mark.asyncio
    async def test_create_with_unknown_assignee(self, task_service, task_repository, make_request, ctx):
        """Test unknown assignees are reported as missing users."""
        with pytest.raises(NotFoundError) as exc_info:
            await task_service.create_task(make_request(assignee_ids=["u-ghost"]), ctx("u-staff"))
        assert exc_info.value.entity_type == "User"
        assert task_repository.tasks == {}

    @pytest.mark.asyncio
    async def test_create_with_inactive_assignee(self, task_service, make_request, ctx):
        """Test inactive users cannot be assigned."""
        with pytest.raises(ValidationError, match="Inactive"):
            await task_service.create_task(make_request(assignee_ids=["u-inactive"]), ctx("u-staff"))

    @pytest.mark.asyncio
    async def test_create_with_unknown_project(self, task_service, task_repository, make_request, ctx):
        """Test the project must exist."""
        with pytest.raises(NotFoundError, match="Project"):
            await task_service.create_task(make_request(project_id="proj-404"), ctx("u-staff"))
        assert task_repository.tasks == {}

    @pytest.mark.asyncio
    async def test_create_subtask(self, task_service, task_repository, make_request, ctx):
        """Test subtasks take the parent's department and project."""
        parent = await task_service.create_task(
            make_request(assignee_ids=["u-staff", "u-platform"], project_id="proj-1"), ctx("u-staff")
        )
        child = await task_service.create_task(
            make_request(title="Draft charts", parent_task_id=parent.id,
                         due_date=date(2025, 12, 15), assignee_ids=["u-platform"]),
            ctx("u-platform")
        )

        stored = task_repository.tasks[child.id]
        assert stored.parent_task_id == parent.id
        assert stored.department_id == "dept-backend"
        assert stored.project_id == "proj-1"

    @pytest.mark.asyncio
    async def test_subtask_of_subtask_is_rejected(self, task_service, task_repository, make_request, ctx):
        """Test tasks nest at most one level deep."""
        staff = ctx("u-staff")
        parent = await task_service.create_task(make_request(), staff)
        child = await task_service.create_task(
            make_request(parent_task_id=parent.id, due_date=date(2025, 12, 1)), staff
        )

        with pytest.raises(DepthExceededError):
            await task_service.create_task(
                make_request(title="Too deep", parent_task_id=child.id, due_date=date(2025, 11, 1)), staff
            )
        assert len(task_repository.tasks) == 2
        assert all(task.title != "Too deep" for task in task_repository.tasks.values())

    @pytest.mark.asyncio
    async def test_subtask_requires_parent_assignee(self, task_service, make_request, ctx):
        """Test only assignees of the parent may add subtasks."""
        parent = await task_service.create_task(make_request(), ctx("u-staff"))

        with pytest.raises(AuthorizationError):
            await task_service.create_task(
                make_request(parent_task_id=parent.id, due_date=date(2025, 12, 1)), ctx("u-staff2")
            )

    @pytest.mark.asyncio
    async def test_subtask_with_missing_parent(self, task_service, make_request, ctx):
        """Test the parent task must exist."""
        with pytest.raises(NotFoundError, match="Task"):
            await task_service.create_task(make_request(parent_task_id="missing"), ctx("u-staff"))

    @pytest.mark.asyncio
    async def test_subtask_due_after_parent(self, task_service, make_request, ctx):
        """Test subtasks cannot be due after their parent."""
        parent = await task_service.create_task(make_request(), ctx("u-staff"))
        with pytest.raises(ValidationError, match="after the parent"):
            await task_service.create_task(
                make_request(parent_task_id=parent.id, due_date=date(2026, 1, 15)), ctx("u-staff")
            )

    @pytest.mark.asyncio
    async def test_recurring_subtask_is_rejected(self, task_service, make_request, ctx):
        """Test subtasks cannot recur."""
        parent = await task_service.create_task(make_request(), ctx("u-staff"))
        with pytest.raises(ValidationError, match="cannot be recurring"):
            await task_service.create_task(
                make_request(parent_task_id=parent.id, due_date=date(2025, 12, 1), recurring_interval=7),
                ctx("u-staff")
            )

    @pytest.mark.asyncio
    async def test_create_notifies_assignees(self, task_service, event_dispatcher, notifier, make_request, ctx):
        """Test new assignees other than the creator are notified."""
        setup_event_handlers(event_dispatcher, notifier)

        await task_service.create_task(make_request(assignee_ids=["u-staff", "u-staff2"]), ctx("u-staff"))

        notifier.notify.assert_awaited_once()
        kwargs = notifier.notify.await_args.kwargs
        assert kwargs["user_id"] == "u-staff2"
        assert kwargs["notification_type"] == "TASK_ASSIGNED"

    @pytest.mark.asyncio
    async def test_failed_save_sends_no_notification(self, task_service, task_repository,
                                                     event_dispatcher, notifier, make_request, ctx):
        """Test notifications are only sent after a successful commit."""
        setup_event_handlers(event_dispatcher, notifier)
        task_repository.fail_when(lambda task: True)

        with pytest.raises(RuntimeError):
            await task_service.create_task(make_request(assignee_ids=["u-staff2"]), ctx("u-staff"))

        notifier.notify.assert_not_awaited()
        assert task_repository.tasks == {}
        assert task_repository.logs == []


class TestTaskQueries:
    """Test cases for visibility of tasks."""

    @pytest.mark.asyncio
    async def test_get_missing_task(self, task_service, ctx):
        """Test a missing task returns None."""
        assert await task_service.get_by_id("missing", ctx("u-staff")) is None

    @pytest.mark.asyncio
    async def test_unrelated_staff_cannot_view(self, task_service, make_request, ctx):
        """Test staff outside the task cannot view it."""
        result = await task_service.create_task(make_request(), ctx("u-staff"))
        with pytest.raises(AuthorizationError):
            await task_service.get_by_id(result.id, ctx("u-sales"))

    @pytest.mark.asyncio
    async def test_hr_admin_views_without_edit(self, task_service, make_request, ctx):
        """Test HR admins see tasks outside their scope as read only."""
        result = await task_service.create_task(make_request(), ctx("u-staff"))
        view = await task_service.get_by_id(result.id, ctx("u-hr"))
        assert view.can_edit is False

    @pytest.mark.asyncio
    async def test_visible_tasks_per_role(self, task_service, make_request, ctx):
        """Test list visibility for staff, managers and HR admins."""
        own = await task_service.create_task(make_request(title="Own"), ctx("u-staff"))
        platform = await task_service.create_task(
            make_request(title="Platform", assignee_ids=["u-platform"]), ctx("u-platform")
        )
        sales = await task_service.create_task(
            make_request(title="Sales", assignee_ids=["u-sales"]), ctx("u-sales")
        )

        staff_ids = {view.id for view in await task_service.get_visible_tasks(ctx("u-staff"))}
        manager_ids = {view.id for view in await task_service.get_visible_tasks(ctx("u-manager"))}
        hr_views = await task_service.get_visible_tasks(ctx("u-hr"))

        assert staff_ids == {own.id}
        assert manager_ids == {own.id, platform.id}
        assert {view.id for view in hr_views} == {own.id, platform.id, sales.id}
        assert not any(view.can_edit for view in hr_views)

    @pytest.mark.asyncio
    async def test_visible_tasks_with_department_filter(self, task_service, make_request, ctx):
        """Test managers can narrow the list to one department."""
        await task_service.create_task(make_request(title="Backend"), ctx("u-staff"))
        platform = await task_service.create_task(
            make_request(title="Platform", assignee_ids=["u-platform"]), ctx("u-platform")
        )

        views = await task_service.get_visible_tasks(
            ctx("u-manager"), TaskFilterDTO(department_id="dept-platform")
        )
        assert [view.id for view in views] == [platform.id]

    @pytest.mark.asyncio
    async def test_get_subtasks(self, task_service, make_request, ctx):
        """Test listing subtasks of a visible task."""
        staff = ctx("u-staff")
        parent = await task_service.create_task(make_request(), staff)
        child = await task_service.create_task(
            make_request(parent_task_id=parent.id, due_date=date(2025, 12, 1)), staff
        )

        subtasks = await task_service.get_subtasks(parent.id, staff)
        assert [view.id for view in subtasks] == [child.id]


class TestUpdateTask:
    """Test cases for field updates."""

    @pytest.mark.asyncio
    async def test_update_title_logs_change(self, task_service, task_repository, make_request, ctx):
        """Test updates record the changed field."""
        staff = ctx("u-staff")
        result = await task_service.create_task(make_request(), staff)

        view = await task_service.update_title(result.id, "Prepare annual report", staff)

        assert view.title == "Prepare annual report"
        updated = task_repository.logs_for(result.id, TaskLogAction.UPDATED)
        assert updated[0].metadata["changes"] == {
            "title": {"from": "Prepare quarterly report", "to": "Prepare annual report"}
        }

    @pytest.mark.asyncio
    async def test_noop_update_is_not_logged(self, task_service, task_repository, make_request, ctx):
        """Test an update that changes nothing leaves no UPDATED entry."""
        staff = ctx("u-staff")
        result = await task_service.create_task(make_request(tags=["finance"]), staff)

        await task_service.add_tag(result.id, "finance", staff)
        assert task_repository.logs_for(result.id, TaskLogAction.UPDATED) == []

    @pytest.mark.asyncio
    async def test_update_requires_edit_rights(self, task_service, make_request, ctx):
        """Test users without edit rights cannot update."""
        result = await task_service.create_task(make_request(), ctx("u-staff"))

        with pytest.raises(AuthorizationError):
            await task_service.update_title(result.id, "Mine now", ctx("u-sales"))
        with pytest.raises(AuthorizationError):
            await task_service.update_priority(result.id, 9, ctx("u-hr"))

    @pytest.mark.asyncio
    async def test_manager_edits_subordinate_task(self, task_service, make_request, ctx):
        """Test managers edit tasks of their hierarchy."""
        result = await task_service.create_task(
            make_request(assignee_ids=["u-platform"]), ctx("u-platform")
        )
        view = await task_service.update_priority(result.id, 9, ctx("u-manager"))
        assert view.priority == 9
        assert view.priority_label == "CRITICAL"

    @pytest.mark.asyncio
    async def test_invalid_priority_update(self, task_service, task_repository, make_request, ctx):
        """Test invalid updates leave the stored task unchanged."""
        staff = ctx("u-staff")
        result = await task_service.create_task(make_request(), staff)

        with pytest.raises(ValidationError):
            await task_service.update_priority(result.id, 0, staff)
        assert task_repository.tasks[result.id].priority == 5

    @pytest.mark.asyncio
    async def test_deadline_bounds(self, task_service, make_request, ctx):
        """Test parent and subtask deadlines constrain each other."""
        staff = ctx("u-staff")
        parent = await task_service.create_task(make_request(), staff)
        child = await task_service.create_task(
            make_request(parent_task_id=parent.id, due_date=date(2025, 12, 1)), staff
        )

        with pytest.raises(ValidationError, match="after the parent"):
            await task_service.update_deadline(child.id, date(2026, 1, 31), staff)
        with pytest.raises(ValidationError, match="earlier than a subtask"):
            await task_service.update_deadline(parent.id, date(2025, 11, 1), staff)

        view = await task_service.update_deadline(parent.id, date(2025, 12, 1), staff)
        assert view.due_date == date(2025, 12, 1)

    @pytest.mark.asyncio
    async def test_subtask_cannot_enable_recurrence(self, task_service, make_request, ctx):
        """Test recurrence cannot be enabled on a subtask."""
        staff = ctx("u-staff")
        parent = await task_service.create_task(make_request(), staff)
        child = await task_service.create_task(
            make_request(parent_task_id=parent.id, due_date=date(2025, 12, 1)), staff
        )
        with pytest.raises(ValidationError):
            await task_service.update_recurring(child.id, True, 7, staff)

    @pytest.mark.asyncio
    async def test_assignee_management(self, task_service, task_repository, make_request, ctx):
        """Test adding and removing assignees."""
        staff = ctx("u-staff")
        result = await task_service.create_task(make_request(), staff)

        view = await task_service.add_assignee(result.id, "u-staff2", staff)
        assert view.assignee_ids == ["u-staff", "u-staff2"]

        with pytest.raises(ValidationError, match="Inactive"):
            await task_service.add_assignee(result.id, "u-inactive", staff)

        view = await task_service.remove_assignee(result.id, "u-staff2", staff)
        assert view.assignee_ids == ["u-staff"]

        with pytest.raises(ConflictError):
            await task_service.remove_assignee(result.id, "u-staff", staff)
        assert task_repository.tasks[result.id].assignee_ids == ["u-staff"]

    @pytest.mark.asyncio
    async def test_comments(self, task_service, make_request, ctx):
        """Test posting and editing comments."""
        result = await task_service.create_task(
            make_request(assignee_ids=["u-staff", "u-staff2"]), ctx("u-staff")
        )

        view = await task_service.add_comment(result.id, "Started on this", ctx("u-staff2"))
        comment_id = view.comments[0].id

        with pytest.raises(AuthorizationError):
            await task_service.update_comment(result.id, comment_id, "Edited", ctx("u-staff"))

        view = await task_service.update_comment(result.id, comment_id, "Halfway done", ctx("u-staff2"))
        assert view.comments[0].content == "Halfway done"
        assert view.comments[0].is_edited


class TestStatusAndRecurrence:
    """Test cases for status changes and recurring tasks."""

    @pytest.mark.asyncio
    async def test_recurring_chain(self, task_service, task_repository, make_request, ctx):
        """Test completing recurring tasks keeps generating successors."""
        staff = ctx("u-staff")
        result = await task_service.create_task(
            make_request(recurring_interval=7, due_date=date(2025, 1, 13), tags=["weekly"]), staff
        )

        first = await task_service.update_status(result.id, TaskStatus.COMPLETED, staff)
        successor = task_repository.tasks[first.next_recurring_task_id]
        assert successor.due_date == date(2025, 1, 20)
        assert successor.status == TaskStatus.TO_DO
        assert successor.assignee_ids == ["u-staff"]
        assert successor.tags == ["weekly"]
        assert first.warnings == []

        second = await task_service.update_status(successor.id, TaskStatus.COMPLETED, staff)
        assert task_repository.tasks[second.next_recurring_task_id].due_date == date(2025, 1, 27)

        generated = task_repository.logs_for(result.id, TaskLogAction.RECURRING_TASK_GENERATED)
        assert generated[0].metadata["next_task_id"] == successor.id
        assert generated[0].metadata["next_due_date"] == "2025-01-20"

    @pytest.mark.asyncio
    async def test_recompleting_generates_nothing(self, task_service, task_repository, make_request, ctx):
        """Test completing an already completed task creates no successor."""
        staff = ctx("u-staff")
        result = await task_service.create_task(make_request(recurring_interval=7), staff)

        await task_service.update_status(result.id, TaskStatus.COMPLETED, staff)
        again = await task_service.update_status(result.id, TaskStatus.COMPLETED, staff)

        assert again.next_recurring_task_id is None
        assert len(task_repository.tasks) == 2

    @pytest.mark.asyncio
    async def test_plain_task_completion(self, task_service, task_repository, make_request, ctx):
        """Test completing a non-recurring task creates no successor."""
        staff = ctx("u-staff")
        result = await task_service.create_task(make_request(), staff)

        view = await task_service.update_status(result.id, TaskStatus.COMPLETED, staff)

        assert view.status == TaskStatus.COMPLETED
        assert view.completed_at is not None
        assert len(task_repository.tasks) == 1
        changes = task_repository.logs_for(result.id, TaskLogAction.UPDATED)[0].metadata["changes"]
        assert changes == {"status": {"from": "TO_DO", "to": "COMPLETED"}}

    @pytest.mark.asyncio
    async def test_failed_generation_keeps_completion(self, task_service, task_repository, make_request, ctx):
        """Test a failing successor does not undo the completion."""
        staff = ctx("u-staff")
        result = await task_service.create_task(make_request(recurring_interval=7), staff)
        task_repository.fail_when(lambda task: task.id != result.id)

        view = await task_service.update_status(result.id, TaskStatus.COMPLETED, staff)

        assert view.status == TaskStatus.COMPLETED
        assert view.next_recurring_task_id is None
        assert len(view.warnings) == 1
        assert task_repository.tasks[result.id].status == TaskStatus.COMPLETED
        assert len(task_repository.tasks) == 1
        assert task_repository.logs_for(result.id, TaskLogAction.RECURRING_TASK_GENERATED) == []

    @pytest.mark.asyncio
    async def test_deactivated_assignee_blocks_successor(self, task_service, task_repository,
                                                         users, make_request, ctx):
        """Test no successor is generated while an assignee is inactive."""
        staff = ctx("u-staff")
        result = await task_service.create_task(
            make_request(recurring_interval=7, assignee_ids=["u-staff", "u-staff2"]), staff
        )
        users["u-staff2"].is_active = False

        view = await task_service.update_status(result.id, TaskStatus.COMPLETED, staff)

        assert view.status == TaskStatus.COMPLETED
        assert view.next_recurring_task_id is None
        assert len(view.warnings) == 1
        assert "u-staff2" in view.warnings[0]
        assert list(task_repository.tasks) == [result.id]
        assert task_repository.logs_for(result.id, TaskLogAction.RECURRING_TASK_GENERATED) == []

    @pytest.mark.asyncio
    async def test_invalid_status(self, task_service, make_request, ctx):
        """Test unknown statuses are rejected."""
        staff = ctx("u-staff")
        result = await task_service.create_task(make_request(), staff)
        with pytest.raises(ValidationError):
            await task_service.update_status(result.id, "DONE", staff)

    @pytest.mark.asyncio
    async def test_status_change_notifies_assignees(self, task_service, event_dispatcher,
                                                    notifier, make_request, ctx):
        """Test status changes notify the other assignees."""
        result = await task_service.create_task(
            make_request(assignee_ids=["u-staff", "u-staff2"]), ctx("u-staff")
        )
        setup_event_handlers(event_dispatcher, notifier)

        await task_service.update_status(result.id, TaskStatus.IN_PROGRESS, ctx("u-staff2"))

        notifier.notify.assert_awaited_once()
        kwargs = notifier.notify.await_args.kwargs
        assert kwargs["user_id"] == "u-staff"
        assert kwargs["notification_type"] == "STATUS_CHANGED"


class TestArchiveAndDelete:
    """Test cases for archival and deletion."""

    @pytest.mark.asyncio
    async def test_manager_archives_with_subtasks(self, task_service, task_repository, make_request, ctx):
        """Test archiving cascades to subtasks."""
        staff = ctx("u-staff")
        parent = await task_service.create_task(make_request(), staff)
        child = await task_service.create_task(
            make_request(parent_task_id=parent.id, due_date=date(2025, 12, 1)), staff
        )

        view = await task_service.archive_task(parent.id, ctx("u-manager"))

        assert view.is_archived
        assert task_repository.tasks[child.id].is_archived
        cascade = task_repository.logs_for(child.id, TaskLogAction.ARCHIVED)
        assert cascade[0].metadata["cascade_from_parent"] == parent.id
        assert await task_service.get_visible_tasks(staff) == []

    @pytest.mark.asyncio
    async def test_staff_cannot_archive(self, task_service, make_request, ctx):
        """Test archiving is reserved to managers."""
        result = await task_service.create_task(make_request(), ctx("u-staff"))
        with pytest.raises(AuthorizationError):
            await task_service.archive_task(result.id, ctx("u-staff"))

    @pytest.mark.asyncio
    async def test_archive_twice(self, task_service, make_request, ctx):
        """Test archiving an archived task conflicts."""
        result = await task_service.create_task(make_request(), ctx("u-staff"))
        await task_service.archive_task(result.id, ctx("u-manager"))
        with pytest.raises(ConflictError):
            await task_service.archive_task(result.id, ctx("u-manager"))

    @pytest.mark.asyncio
    async def test_unarchive(self, task_service, task_repository, make_request, ctx):
        """Test unarchiving restores the task."""
        result = await task_service.create_task(make_request(), ctx("u-staff"))
        await task_service.archive_task(result.id, ctx("u-manager"))

        view = await task_service.unarchive_task(result.id, ctx("u-staff"))

        assert not view.is_archived
        assert task_repository.logs_for(result.id, TaskLogAction.UNARCHIVED)

    @pytest.mark.asyncio
    async def test_owner_deletes_task(self, task_service, task_repository, make_request, ctx):
        """Test the owner may delete a task without subtasks."""
        result = await task_service.create_task(make_request(), ctx("u-staff"))

        assert await task_service.delete_task(result.id, ctx("u-staff")) is True
        assert result.id not in task_repository.tasks
        assert task_repository.logs_for(result.id, TaskLogAction.DELETED)

    @pytest.mark.asyncio
    async def test_delete_with_subtasks(self, task_service, make_request, ctx):
        """Test tasks with subtasks cannot be deleted."""
        staff = ctx("u-staff")
        parent = await task_service.create_task(make_request(), staff)
        await task_service.create_task(
            make_request(parent_task_id=parent.id, due_date=date(2025, 12, 1)), staff
        )
        with pytest.raises(ConflictError):
            await task_service.delete_task(parent.id, staff)

    @pytest.mark.asyncio
    async def test_assignee_cannot_delete(self, task_service, make_request, ctx):
        """Test assignees who are not the owner cannot delete."""
        result = await task_service.create_task(
            make_request(assignee_ids=["u-staff", "u-staff2"]), ctx("u-staff")
        )
        with pytest.raises(AuthorizationError):
            await task_service.delete_task(result.id, ctx("u-staff2"))

    @pytest.mark.asyncio
    async def test_delete_missing_task(self, task_service, ctx):
        """Test deleting a missing task."""
        with pytest.raises(NotFoundError):
            await task_service.delete_task("missing", ctx("u-staff"))


class TestTaskFiles:
    """Test cases for task attachments."""

    @pytest.mark.asyncio
    async def test_upload_and_download(self, task_service, storage_service, make_request, ctx):
        """Test uploading a file and getting a download link."""
        staff = ctx("u-staff")
        result = await task_service.create_task(make_request(), staff)

        uploaded = await task_service.upload_file(result.id, b"%PDF-1.4", "plan.pdf", "application/pdf", staff)

        storage_service.validate_upload.assert_called_once_with("plan.pdf", "application/pdf", 8, 0)
        path = storage_service.upload.await_args.args[0]
        assert path == f"tasks/{result.id}/{uploaded.id}-plan.pdf"
        assert [f.id for f in await task_service.list_files(result.id, staff)] == [uploaded.id]

        url = await task_service.get_file_download_url(result.id, uploaded.id, staff)
        assert url == "https://files.example.com/signed"
        storage_service.create_signed_url.assert_awaited_once_with(path, 3600)

    @pytest.mark.asyncio
    async def test_delete_file(self, task_service, storage_service, make_request, ctx):
        """Test deleting a file removes the stored object."""
        staff = ctx("u-staff")
        result = await task_service.create_task(make_request(), staff)
        uploaded = await task_service.upload_file(result.id, b"data", "notes.txt", "text/plain", staff)

        await task_service.delete_file(result.id, uploaded.id, staff)

        assert await task_service.list_files(result.id, staff) == []
        storage_service.delete.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_upload_rolls_back_stored_file(self, task_service, task_repository,
                                                 storage_service, make_request, ctx):
        """Test the stored object is removed when the task update fails."""
        staff = ctx("u-staff")
        result = await task_service.create_task(make_request(), staff)
        task_repository.fail_when(lambda task: bool(task.files))

        with pytest.raises(RuntimeError):
            await task_service.upload_file(result.id, b"data", "notes.txt", "text/plain", staff)

        storage_service.delete.assert_awaited_once()
        assert task_repository.tasks[result.id].files == []

    @pytest.mark.asyncio
    async def test_upload_requires_edit_rights(self, task_service, storage_service, make_request, ctx):
        """Test viewers without edit rights cannot upload."""
        result = await task_service.create_task(make_request(), ctx("u-staff"))
        with pytest.raises(AuthorizationError):
            await task_service.upload_file(result.id, b"data", "notes.txt", "text/plain", ctx("u-hr"))
        storage_service.upload.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_storage_not_configured(self, task_repository, hierarchy_service, settings, make_request, ctx):
        """Test file operations need a storage service."""
        service = TaskService(task_repository, hierarchy_service, settings=settings)
        result = await service.create_task(make_request(), ctx("u-staff"))
        with pytest.raises(ValidationError, match="storage"):
            await service.upload_file(result.id, b"data", "notes.txt", "text/plain", ctx("u-staff"))


class TestTaskLogs:
    """Test cases for the audit trail."""

    @pytest.mark.asyncio
    async def test_logs_in_order(self, task_service, make_request, ctx):
        """Test the log lists actions oldest first."""
        staff = ctx("u-staff")
        result = await task_service.create_task(make_request(), staff)
        await task_service.update_description(result.id, "Include charts", staff)

        logs = await task_service.get_task_logs(result.id, staff)
        assert [entry.action for entry in logs] == ["CREATED", "UPDATED"]
        assert logs[1].metadata["changes"]["description"]["to"] == "Include charts"

    @pytest.mark.asyncio
    async def test_logs_require_view_rights(self, task_service, make_request, ctx):
        """Test users who cannot view a task cannot read its log."""
        result = await task_service.create_task(make_request(), ctx("u-staff"))
        with pytest.raises(AuthorizationError):
            await task_service.get_task_logs(result.id, ctx("u-sales"))

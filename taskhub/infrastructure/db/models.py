"""
SQLAlchemy models for the database.
Maps domain entities to database tables.
"""

from sqlalchemy import (
    Column, Integer, String, DateTime, Text, Boolean,
    Date, ForeignKey, JSON, Index, Table
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


class DepartmentModel(Base):
    """Department table"""
    __tablename__ = 'departments'

    id = Column(String(36), primary_key=True)
    name = Column(String(255), nullable=False)
    parent_id = Column(String(36), ForeignKey('departments.id'))
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    parent = relationship("DepartmentModel", remote_side=[id], backref="children")

    __table_args__ = (
        Index('idx_departments_parent', 'parent_id'),
    )


class UserProfileModel(Base):
    """User profile table"""
    __tablename__ = 'user_profiles'

    id = Column(String(36), primary_key=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True)
    role = Column(String(20), nullable=False, default="STAFF")
    department_id = Column(String(36), ForeignKey('departments.id'), nullable=False)
    managed_department_id = Column(String(36), ForeignKey('departments.id'))
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


class ProjectModel(Base):
    """Project table"""
    __tablename__ = 'projects'

    id = Column(String(36), primary_key=True)
    name = Column(String(255), nullable=False)
    description = Column(Text)
    department_id = Column(String(36), ForeignKey('departments.id'))
    is_archived = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    tasks = relationship("TaskModel", back_populates="project")


task_tags = Table(
    'task_tags',
    Base.metadata,
    Column('task_id', String(36), ForeignKey('tasks.id', ondelete='CASCADE'), primary_key=True),
    Column('tag_id', Integer, ForeignKey('tags.id', ondelete='CASCADE'), primary_key=True),
)


class TagModel(Base):
    """Tag table"""
    __tablename__ = 'tags'

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False, unique=True)


class TaskModel(Base):
    """Task table"""
    __tablename__ = 'tasks'

    id = Column(String(36), primary_key=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, default="")
    priority = Column(Integer, nullable=False, default=5)
    due_date = Column(Date, nullable=False)
    status = Column(String(20), nullable=False, default="TO_DO")

    owner_id = Column(String(36), ForeignKey('user_profiles.id'), nullable=False)
    department_id = Column(String(36), ForeignKey('departments.id'), nullable=False)
    project_id = Column(String(36), ForeignKey('projects.id'))
    parent_task_id = Column(String(36), ForeignKey('tasks.id'))

    recurring_interval = Column(Integer)
    is_archived = Column(Boolean, default=False, nullable=False)
    start_date = Column(Date)
    completed_at = Column(DateTime(timezone=True))

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    project = relationship("ProjectModel", back_populates="tasks")
    parent_task = relationship("TaskModel", remote_side=[id], backref="subtasks")
    assignments = relationship(
        "TaskAssignmentModel", back_populates="task", cascade="all, delete-orphan"
    )
    tags = relationship("TagModel", secondary=task_tags)
    comments = relationship(
        "TaskCommentModel", back_populates="task", cascade="all, delete-orphan",
        order_by="TaskCommentModel.created_at"
    )
    files = relationship(
        "TaskFileModel", back_populates="task", cascade="all, delete-orphan",
        order_by="TaskFileModel.uploaded_at"
    )

    # Indexes
    __table_args__ = (
        Index('idx_tasks_department_status', 'department_id', 'status'),
        Index('idx_tasks_owner', 'owner_id'),
        Index('idx_tasks_parent', 'parent_task_id'),
        Index('idx_tasks_due_date', 'due_date'),
    )


class TaskAssignmentModel(Base):
    """Task assignment table"""
    __tablename__ = 'task_assignments'

    task_id = Column(String(36), ForeignKey('tasks.id', ondelete='CASCADE'), primary_key=True)
    user_id = Column(String(36), ForeignKey('user_profiles.id'), primary_key=True)
    assigned_by = Column(String(36), ForeignKey('user_profiles.id'), nullable=False)
    assigned_at = Column(DateTime(timezone=True), server_default=func.now())

    task = relationship("TaskModel", back_populates="assignments")

    __table_args__ = (
        Index('idx_task_assignments_user', 'user_id'),
    )


class TaskCommentModel(Base):
    """Task comment table"""
    __tablename__ = 'task_comments'

    id = Column(String(36), primary_key=True)
    task_id = Column(String(36), ForeignKey('tasks.id', ondelete='CASCADE'), nullable=False)
    author_id = Column(String(36), ForeignKey('user_profiles.id'), nullable=False)
    content = Column(Text, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True))

    task = relationship("TaskModel", back_populates="comments")


class TaskFileModel(Base):
    """Task attachment table"""
    __tablename__ = 'task_files'

    id = Column(String(36), primary_key=True)
    task_id = Column(String(36), ForeignKey('tasks.id', ondelete='CASCADE'), nullable=False)
    file_name = Column(String(255), nullable=False)
    file_size = Column(Integer, nullable=False)
    file_type = Column(String(100), nullable=False)
    storage_path = Column(String(500), nullable=False)
    uploaded_by = Column(String(36), ForeignKey('user_profiles.id'), nullable=False)
    uploaded_at = Column(DateTime(timezone=True), server_default=func.now())

    task = relationship("TaskModel", back_populates="files")


class TaskLogModel(Base):
    """Task audit log table. Rows outlive the task they describe."""
    __tablename__ = 'task_logs'

    id = Column(Integer, primary_key=True, autoincrement=True)
    task_id = Column(String(36), nullable=False)
    user_id = Column(String(36), nullable=False)
    action = Column(String(40), nullable=False)
    log_metadata = Column('metadata', JSON, default=dict)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        Index('idx_task_logs_task', 'task_id', 'created_at'),
    )

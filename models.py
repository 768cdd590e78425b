from sqlalchemy import Column, Date, DateTime, ForeignKey, Text, Index, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.dialects.postgresql import UUID, JSONB
from sqlalchemy.sql import func
from core.database import Base
import uuid


USER_ROLES = ("admin", "trainer", "client")
PLAN_STATUSES = ("draft", "active", "completed", "archived")
SESSION_TYPES = ("group", "personal")


class User(Base):
    __tablename__ = "users"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    email = Column(Text, unique=True, nullable=False)
    username = Column(Text, unique=True, nullable=False)
    password_hash = Column(Text, nullable=False)
    full_name = Column(Text, nullable=True)
    role = Column(Text, default="client", nullable=False)  # 'admin', 'trainer', 'client'
    status = Column(Text, default="active", nullable=False)  # 'active', 'inactive'
    # A client's trainer. Null for trainers and admins.
    trainer_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    workspace = relationship("Workspace", back_populates="trainer", uselist=False)

    __table_args__ = (
        CheckConstraint("role IN ('admin', 'trainer', 'client')", name="ck_users_role"),
        Index("ix_users_trainer_id", "trainer_id"),
    )

    @property
    def display_name(self) -> str:
        return self.full_name or self.username

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


class Workspace(Base):
    """
    A trainer's business workspace.

    Plans are scoped to a workspace; the workspace logo is used as
    header branding on exported PDFs.
    """
    __tablename__ = "workspaces"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    trainer_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    name = Column(Text, nullable=False)
    logo = Column(Text, nullable=True)  # Local file path of the logo image

    trainer = relationship("User", back_populates="workspace")

    __table_args__ = (
        Index("ix_workspaces_trainer_id", "trainer_id"),
    )


class WorkoutPlan(Base):
    """
    A generated workout plan.

    `content` holds the normalized PlanContent document and is written once;
    a regenerated plan is a new row. `notion_page_id` is only set when the
    best-effort Notion mirror succeeded, so a null value with an otherwise
    valid row is expected.

    Neither the date range nor status transitions are enforced.
    """
    __tablename__ = "workout_plans"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    workspace_id = Column(UUID(as_uuid=True), ForeignKey("workspaces.id", ondelete="CASCADE"), nullable=False)
    trainer_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    client_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    title = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    content = Column(JSONB, nullable=False, default=dict)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    status = Column(Text, default="draft", nullable=False)  # 'draft', 'active', 'completed', 'archived'

    # Generation metadata
    session_type = Column(Text, nullable=True)  # 'group', 'personal'
    generation_provider = Column(Text, nullable=True)  # provider that produced `content`
    notion_page_id = Column(Text, nullable=True)

    trainer = relationship("User", foreign_keys=[trainer_id])
    client = relationship("User", foreign_keys=[client_id])
    workspace = relationship("Workspace")

    __table_args__ = (
        CheckConstraint(
            "status IN ('draft', 'active', 'completed', 'archived')",
            name="ck_workout_plans_status",
        ),
        Index("ix_workout_plans_trainer_id", "trainer_id"),
        Index("ix_workout_plans_client_id", "client_id"),
        Index("ix_workout_plans_workspace_id", "workspace_id"),
    )

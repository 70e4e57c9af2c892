"""Initial schema for groups, role templates, appointments and memberships."""

from __future__ import annotations
from typing import Union, Sequence

from alembic import op
import sqlalchemy as sa
from rolegraph.models.types import GUID

# revision identifiers, used by Alembic.
revision: str = "0001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

PERMISSIONS = (
    "MANAGE_GROUP",
    "INVITE_MEMBERS",
    "REMOVE_MEMBERS",
    "APPOINT_ROLE",
    "CREATE_ROLE",
    "DELEGATE_APPOINTMENT",
    "CREATE_TASKS",
    "ASSIGN_TASKS",
    "REVIEW_TASKS",
    "VIEW_ALL_MEMBERS",
    "EDIT_MEMBER_INFO",
    "VIEW_STATS",
    "VIEW_REPORTS",
    "MANAGE_GAMES",
    "VIEW_GAME_RECORDS",
)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    """Initial schema for groups, role templates, appointments and memberships."""
    group_type_ref = sa.Enum("class", "study", "team", "other", name="group_type", native_enum=False)
    task_type_ref = sa.Enum("homework", "practice", "exam", "other", name="task_type", native_enum=False)
    permission_ref = sa.Enum(*PERMISSIONS, name="permission", native_enum=False, length=32)

    op.create_table(
        "groups",
        sa.Column("id", GUID(), nullable=False),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("description", sa.String(length=1024), nullable=True),
        sa.Column("type", group_type_ref, nullable=False),
        sa.Column("creator_id", GUID(), nullable=False),
        sa.Column("max_members", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_groups")),
    )
    op.create_index("ix_groups_creator", "groups", ["creator_id"], unique=False)
    op.create_table(
        "role_templates",
        sa.Column("id", GUID(), nullable=False),
        sa.Column("group_id", GUID(), nullable=False),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("description", sa.String(length=512), nullable=True),
        sa.Column("level", sa.Integer(), nullable=False),
        sa.Column("is_system", sa.Boolean(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["group_id"], ["groups.id"], name=op.f("fk_role_templates_group_id_groups"), ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_role_templates")),
        sa.UniqueConstraint("group_id", "name", name="uq_role_templates_group_name"),
    )
    op.create_index("ix_role_templates_group_level", "role_templates", ["group_id", "level"], unique=False)
    op.create_table(
        "role_permissions",
        sa.Column("role_template_id", GUID(), nullable=False),
        sa.Column("permission", permission_ref, nullable=False),
        sa.ForeignKeyConstraint(
            ["role_template_id"],
            ["role_templates.id"],
            name=op.f("fk_role_permissions_role_template_id_role_templates"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("role_template_id", "permission", name=op.f("pk_role_permissions")),
    )
    op.create_table(
        "role_appointments",
        sa.Column("from_role_id", GUID(), nullable=False),
        sa.Column("to_role_id", GUID(), nullable=False),
        sa.Column("can_delegate", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["from_role_id"],
            ["role_templates.id"],
            name=op.f("fk_role_appointments_from_role_id_role_templates"),
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["to_role_id"],
            ["role_templates.id"],
            name=op.f("fk_role_appointments_to_role_id_role_templates"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("from_role_id", "to_role_id", name=op.f("pk_role_appointments")),
    )
    op.create_index("ix_role_appointments_to_role", "role_appointments", ["to_role_id"], unique=False)
    op.create_table(
        "group_members",
        sa.Column("id", GUID(), nullable=False),
        sa.Column("group_id", GUID(), nullable=False),
        sa.Column("user_id", GUID(), nullable=False),
        sa.Column("role_template_id", GUID(), nullable=False),
        sa.Column("can_delegate", sa.Boolean(), nullable=False),
        sa.Column("joined_at", sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["group_id"], ["groups.id"], name=op.f("fk_group_members_group_id_groups"), ondelete="CASCADE"),
        sa.ForeignKeyConstraint(
            ["role_template_id"],
            ["role_templates.id"],
            name=op.f("fk_group_members_role_template_id_role_templates"),
            ondelete="RESTRICT",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_group_members")),
        sa.UniqueConstraint("group_id", "user_id", name="uq_group_members_group_user"),
    )
    op.create_index("ix_group_members_user", "group_members", ["user_id"], unique=False)
    op.create_index("ix_group_members_role", "group_members", ["role_template_id"], unique=False)
    op.create_table(
        "group_invitations",
        sa.Column("id", GUID(), nullable=False),
        sa.Column("group_id", GUID(), nullable=False),
        sa.Column("invited_by_id", GUID(), nullable=False),
        sa.Column("code", sa.String(length=64), nullable=False),
        sa.Column("max_uses", sa.Integer(), nullable=False),
        sa.Column("used_count", sa.Integer(), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("default_role", sa.String(length=120), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["group_id"], ["groups.id"], name=op.f("fk_group_invitations_group_id_groups"), ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_group_invitations")),
        sa.UniqueConstraint("code", name="uq_group_invitations_code"),
    )
    op.create_index("ix_group_invitations_group", "group_invitations", ["group_id"], unique=False)
    op.create_table(
        "group_tasks",
        sa.Column("id", GUID(), nullable=False),
        sa.Column("group_id", GUID(), nullable=False),
        sa.Column("created_by_id", GUID(), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.String(length=2048), nullable=True),
        sa.Column("type", task_type_ref, nullable=False),
        sa.Column("due_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("is_published", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["group_id"], ["groups.id"], name=op.f("fk_group_tasks_group_id_groups"), ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_group_tasks")),
    )
    op.create_index("ix_group_tasks_group", "group_tasks", ["group_id"], unique=False)


def downgrade() -> None:
    """Drops all tables."""
    op.drop_index("ix_group_tasks_group", table_name="group_tasks")
    op.drop_table("group_tasks")
    op.drop_index("ix_group_invitations_group", table_name="group_invitations")
    op.drop_table("group_invitations")
    op.drop_index("ix_group_members_role", table_name="group_members")
    op.drop_index("ix_group_members_user", table_name="group_members")
    op.drop_table("group_members")
    op.drop_index("ix_role_appointments_to_role", table_name="role_appointments")
    op.drop_table("role_appointments")
    op.drop_table("role_permissions")
    op.drop_index("ix_role_templates_group_level", table_name="role_templates")
    op.drop_table("role_templates")
    op.drop_index("ix_groups_creator", table_name="groups")
    op.drop_table("groups")

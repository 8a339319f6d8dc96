"""initial messaging schema

Revision ID: 3c1f9a7d2b10
Revises:
Create Date: 2026-10-18 09:00:00

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "3c1f9a7d2b10"
down_revision = None
branch_labels = None
depends_on = None

user_role = sa.Enum("adopter", "shelter", "admin", name="user_role")
pet_status = sa.Enum("available", "pending", "adopted", name="pet_status")
conversation_status = sa.Enum("active", "archived", "closed", name="conversation_status")
message_status = sa.Enum("sent", "delivered", "read", name="message_status")


def _timestamps():
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("first_name", sa.String(length=100), nullable=False),
        sa.Column("last_name", sa.String(length=100), nullable=False),
        sa.Column("phone", sa.String(length=20), nullable=True),
        sa.Column("city", sa.String(length=100), nullable=True),
        sa.Column("role", user_role, nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )
    op.create_index(op.f("ix_users_id"), "users", ["id"], unique=False)
    op.create_index(op.f("ix_users_created_at"), "users", ["created_at"], unique=False)

    op.create_table(
        "shelters",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("website", sa.String(length=255), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_shelters_id"), "shelters", ["id"], unique=False)
    op.create_index(op.f("ix_shelters_user_id"), "shelters", ["user_id"], unique=False)
    op.create_index(op.f("ix_shelters_created_at"), "shelters", ["created_at"], unique=False)

    op.create_table(
        "pets",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("shelter_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("type", sa.String(length=32), nullable=False),
        sa.Column("breed", sa.String(length=255), nullable=True),
        sa.Column("images", sa.JSON(), nullable=True),
        sa.Column("status", pet_status, nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["shelter_id"], ["shelters.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_pets_id"), "pets", ["id"], unique=False)
    op.create_index(op.f("ix_pets_shelter_id"), "pets", ["shelter_id"], unique=False)
    op.create_index(op.f("ix_pets_created_at"), "pets", ["created_at"], unique=False)

    op.create_table(
        "conversations",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("adopter_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("shelter_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("pet_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("status", conversation_status, nullable=False),
        sa.Column("last_message_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["adopter_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["shelter_id"], ["shelters.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["pet_id"], ["pets.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_conversations_id"), "conversations", ["id"], unique=False)
    op.create_index(op.f("ix_conversations_adopter_id"), "conversations", ["adopter_id"], unique=False)
    op.create_index(op.f("ix_conversations_shelter_id"), "conversations", ["shelter_id"], unique=False)
    op.create_index(op.f("ix_conversations_pet_id"), "conversations", ["pet_id"], unique=False)
    op.create_index(
        op.f("ix_conversations_last_message_at"), "conversations", ["last_message_at"], unique=False
    )
    op.create_index(op.f("ix_conversations_created_at"), "conversations", ["created_at"], unique=False)
    op.create_index(
        "uq_conversations_adopter_shelter_pet",
        "conversations",
        ["adopter_id", "shelter_id", "pet_id"],
        unique=True,
        postgresql_where=sa.text("pet_id IS NOT NULL"),
    )
    op.create_index(
        "uq_conversations_adopter_shelter_no_pet",
        "conversations",
        ["adopter_id", "shelter_id"],
        unique=True,
        postgresql_where=sa.text("pet_id IS NULL"),
    )

    op.create_table(
        "messages",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("conversation_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("sender_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("status", message_status, nullable=False),
        sa.Column("read_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["conversation_id"], ["conversations.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["sender_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_messages_id"), "messages", ["id"], unique=False)
    op.create_index(op.f("ix_messages_conversation_id"), "messages", ["conversation_id"], unique=False)
    op.create_index(op.f("ix_messages_sender_id"), "messages", ["sender_id"], unique=False)
    op.create_index(op.f("ix_messages_status"), "messages", ["status"], unique=False)
    op.create_index(op.f("ix_messages_created_at"), "messages", ["created_at"], unique=False)


def downgrade() -> None:
    op.drop_table("messages")
    op.drop_table("conversations")
    op.drop_table("pets")
    op.drop_table("shelters")
    op.drop_table("users")

    bind = op.get_bind()
    for enum_type in (message_status, conversation_status, pet_status, user_role):
        enum_type.drop(bind, checkfirst=True)

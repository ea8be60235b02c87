"""Initial docshelf schema.

Revision ID: 001
Revises:
Create Date: 2026-10-19

Tables:
- users: accounts with an ADMIN/MEMBER role.
- categories, tags: shared taxonomy referenced by documents.
- documents: live document rows; ``version`` mirrors the newest snapshot.
- document_tags: many-to-many between documents and tags.
- document_versions: append-only snapshots, unique per (document, number).
- comments: reader comments.

Key design decisions:
- VARCHAR(36) primary keys hold service-generated UUID strings.
- documents.category_id has no ON DELETE action; a category in use cannot be
  deleted.
- Versions, comments and tag links cascade with their document.
"""

from alembic import op
import sqlalchemy as sa

revision = "001"
down_revision = None
branch_labels = None
depends_on = None

user_role = sa.Enum("ADMIN", "MEMBER", name="user_role")


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=True),
        sa.Column("role", user_role, nullable=False, server_default="MEMBER"),
        sa.Column("created_at", sa.DateTime, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime, server_default=sa.func.now()),
    )

    op.create_table(
        "categories",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("slug", sa.String(255), nullable=False, unique=True),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("created_at", sa.DateTime, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime, server_default=sa.func.now()),
    )

    op.create_table(
        "tags",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False, unique=True),
    )

    op.create_table(
        "documents",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("slug", sa.String(255), nullable=False, unique=True),
        sa.Column("subtitle", sa.String(500), nullable=True),
        sa.Column("content", sa.Text, nullable=False, server_default=""),
        sa.Column("published", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("version", sa.Integer, nullable=False, server_default="1"),
        sa.Column("author_id", sa.String(36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("category_id", sa.String(36), sa.ForeignKey("categories.id"), nullable=True),
        sa.Column("created_at", sa.DateTime, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime, server_default=sa.func.now()),
    )
    op.create_index("idx_documents_author_id", "documents", ["author_id"])
    op.create_index("idx_documents_category_id", "documents", ["category_id"])
    op.create_index("idx_documents_published_updated", "documents", ["published", "updated_at"])

    op.create_table(
        "document_tags",
        sa.Column(
            "document_id",
            sa.String(36),
            sa.ForeignKey("documents.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "tag_id",
            sa.String(36),
            sa.ForeignKey("tags.id", ondelete="CASCADE"),
            primary_key=True,
        ),
    )

    op.create_table(
        "document_versions",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "document_id",
            sa.String(36),
            sa.ForeignKey("documents.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("version_number", sa.Integer, nullable=False),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("subtitle", sa.String(500), nullable=False, server_default=""),
        sa.Column("content", sa.Text, nullable=False, server_default=""),
        sa.Column("created_at", sa.DateTime, server_default=sa.func.now()),
        sa.UniqueConstraint("document_id", "version_number"),
    )

    op.create_table(
        "comments",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("content", sa.Text, nullable=False),
        sa.Column(
            "document_id",
            sa.String(36),
            sa.ForeignKey("documents.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("author_id", sa.String(36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("created_at", sa.DateTime, server_default=sa.func.now()),
    )
    op.create_index("idx_comments_document_created", "comments", ["document_id", "created_at"])


def downgrade() -> None:
    op.drop_index("idx_comments_document_created", table_name="comments")
    op.drop_table("comments")
    op.drop_table("document_versions")
    op.drop_table("document_tags")
    op.drop_index("idx_documents_published_updated", table_name="documents")
    op.drop_index("idx_documents_category_id", table_name="documents")
    op.drop_index("idx_documents_author_id", table_name="documents")
    op.drop_table("documents")
    op.drop_table("tags")
    op.drop_table("categories")
    op.drop_table("users")
    user_role.drop(op.get_bind(), checkfirst=True)

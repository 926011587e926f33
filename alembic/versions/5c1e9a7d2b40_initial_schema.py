"""initial schema

Revision ID: 5c1e9a7d2b40
Revises:
Create Date: 2026-10-19 09:12:04.518227

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op
from link4coders.services.templates import TEMPLATE_CATALOG

# revision identifiers, used by Alembic.
revision: str = "5c1e9a7d2b40"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
    ]


def upgrade() -> None:
    templates = op.create_table(
        "templates",
        sa.Column("id", sa.String(length=50), primary_key=True),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("description", sa.String(length=500), nullable=True),
        sa.Column("preview_image_url", sa.String(length=2000), nullable=True),
        sa.Column("category", sa.String(length=50), nullable=False),
        sa.Column("is_premium", sa.Boolean(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("sort_order", sa.Integer(), nullable=False),
        sa.Column("tags", sa.JSON(), nullable=True),
        sa.Column("color_scheme", sa.JSON(), nullable=False),
        sa.Column("typography", sa.JSON(), nullable=False),
        *_timestamps(),
    )

    # Seed the catalog so users.theme_id can reference it
    op.bulk_insert(
        templates,
        [
            {
                "id": entry["id"],
                "name": entry["name"],
                "description": entry["description"],
                "preview_image_url": f"/templates/{entry['id']}.png",
                "category": "premium" if entry["is_premium"] else "free",
                "is_premium": entry["is_premium"],
                "is_active": True,
                "sort_order": sort_order,
                "tags": entry["tags"],
                "color_scheme": entry["color_scheme"],
                "typography": entry["typography"],
            }
            for sort_order, entry in enumerate(TEMPLATE_CATALOG)
        ],
    )

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("full_name", sa.String(length=100), nullable=True),
        sa.Column("profile_title", sa.String(length=150), nullable=True),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("avatar_url", sa.String(length=2000), nullable=True),
        sa.Column("github_username", sa.String(length=39), nullable=True),
        sa.Column("profile_slug", sa.String(length=50), nullable=True),
        sa.Column("location", sa.String(length=100), nullable=True),
        sa.Column("company", sa.String(length=100), nullable=True),
        sa.Column("website_url", sa.String(length=2000), nullable=True),
        sa.Column("twitter_username", sa.String(length=15), nullable=True),
        sa.Column("linkedin_url", sa.String(length=2000), nullable=True),
        sa.Column("tech_stacks", sa.JSON(), nullable=True),
        sa.Column(
            "theme_id",
            sa.String(length=50),
            sa.ForeignKey("templates.id"),
            server_default="developer-dark",
            nullable=False,
        ),
        sa.Column("category_order", sa.JSON(), nullable=True),
        sa.Column("is_public", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column("is_premium", sa.Boolean(), server_default=sa.false(), nullable=False),
        *_timestamps(),
    )
    op.create_index(op.f("ix_users_id"), "users", ["id"], unique=False)
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)
    op.create_index(op.f("ix_users_profile_slug"), "users", ["profile_slug"], unique=True)
    op.create_index(op.f("ix_users_github_username"), "users", ["github_username"], unique=False)

    op.create_table(
        "links",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("title", sa.String(length=100), nullable=False),
        sa.Column("url", sa.String(length=2000), nullable=False),
        sa.Column("description", sa.String(length=200), nullable=True),
        sa.Column("category", sa.String(length=20), nullable=False),
        sa.Column("position", sa.Integer(), server_default="0", nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column("click_count", sa.Integer(), server_default="0", nullable=False),
        sa.Column("icon_type", sa.String(length=50), nullable=True),
        sa.Column("platform_detected", sa.String(length=50), nullable=True),
        sa.Column("custom_icon_url", sa.String(length=2000), nullable=True),
        sa.Column("live_project_url", sa.String(length=2000), nullable=True),
        sa.Column("preview_status", sa.String(length=20), server_default="pending", nullable=False),
        sa.Column("preview_metadata", sa.JSON(), nullable=True),
        sa.Column("preview_fetched_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("preview_expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("preview_error", sa.Text(), nullable=True),
        sa.Column("preview_attempts", sa.Integer(), server_default="0", nullable=False),
        *_timestamps(),
    )
    op.create_index(op.f("ix_links_id"), "links", ["id"], unique=False)
    op.create_index(op.f("ix_links_user_id"), "links", ["user_id"], unique=False)
    op.create_index(op.f("ix_links_category"), "links", ["category"], unique=False)

    op.create_table(
        "appearance_settings",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("background_type", sa.String(length=20), nullable=False),
        sa.Column("background_color", sa.String(length=50), nullable=False),
        sa.Column("background_gradient", sa.JSON(), nullable=True),
        sa.Column("background_image_url", sa.String(length=2000), nullable=True),
        sa.Column("background_image_position", sa.String(length=50), nullable=False),
        sa.Column("background_image_size", sa.String(length=50), nullable=False),
        sa.Column("primary_font", sa.String(length=100), nullable=False),
        sa.Column("secondary_font", sa.String(length=100), nullable=False),
        sa.Column("font_size_base", sa.Integer(), nullable=False),
        sa.Column("font_size_heading", sa.Integer(), nullable=False),
        sa.Column("font_size_subheading", sa.Integer(), nullable=False),
        sa.Column("line_height_base", sa.Float(), nullable=False),
        sa.Column("line_height_heading", sa.Float(), nullable=False),
        sa.Column("text_primary_color", sa.String(length=50), nullable=False),
        sa.Column("text_secondary_color", sa.String(length=50), nullable=False),
        sa.Column("text_accent_color", sa.String(length=50), nullable=False),
        sa.Column("link_color", sa.String(length=50), nullable=False),
        sa.Column("link_hover_color", sa.String(length=50), nullable=False),
        sa.Column("border_color", sa.String(length=50), nullable=False),
        sa.Column("card_background_color", sa.String(length=50), nullable=False),
        sa.Column("card_border_radius", sa.Integer(), nullable=False),
        sa.Column("card_border_width", sa.Integer(), nullable=False),
        sa.Column("card_shadow", sa.String(length=100), nullable=False),
        sa.Column("card_backdrop_blur", sa.Integer(), nullable=False),
        sa.Column("profile_avatar_size", sa.Integer(), nullable=False),
        sa.Column("social_icon_size", sa.Integer(), nullable=False),
        sa.Column("social_icon_style", sa.String(length=20), nullable=False),
        sa.Column("social_icon_color", sa.String(length=50), nullable=False),
        sa.Column("social_icon_hover_color", sa.String(length=50), nullable=False),
        *_timestamps(),
    )
    op.create_index(op.f("ix_appearance_settings_id"), "appearance_settings", ["id"], unique=False)
    op.create_index(
        op.f("ix_appearance_settings_user_id"), "appearance_settings", ["user_id"], unique=True
    )


def downgrade() -> None:
    op.drop_index(op.f("ix_appearance_settings_user_id"), table_name="appearance_settings")
    op.drop_index(op.f("ix_appearance_settings_id"), table_name="appearance_settings")
    op.drop_table("appearance_settings")

    op.drop_index(op.f("ix_links_category"), table_name="links")
    op.drop_index(op.f("ix_links_user_id"), table_name="links")
    op.drop_index(op.f("ix_links_id"), table_name="links")
    op.drop_table("links")

    op.drop_index(op.f("ix_users_github_username"), table_name="users")
    op.drop_index(op.f("ix_users_profile_slug"), table_name="users")
    op.drop_index(op.f("ix_users_email"), table_name="users")
    op.drop_index(op.f("ix_users_id"), table_name="users")
    op.drop_table("users")

    op.drop_table("templates")

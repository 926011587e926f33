"""Template catalog and theme selection."""

import logging

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from link4coders.models.template import Template
from link4coders.models.user import DEFAULT_THEME_ID, User

logger = logging.getLogger(__name__)


TEMPLATE_CATALOG: list[dict] = [
    {
        "id": "developer-dark",
        "name": "Developer Dark",
        "description": (
            "The classic dark theme perfect for developers. "
            "Clean, professional, and easy on the eyes."
        ),
        "is_premium": False,
        "tags": ["dark", "glassmorphic", "professional"],
        "color_scheme": {
            "primary": "#54E0FF",
            "secondary": "#29ADFF",
            "accent": "#67E8F9",
            "background": "#18181a",
            "surface": "rgba(0, 0, 0, 0.20)",
            "text_primary": "#ffffff",
            "text_secondary": "#7a7a83",
            "border": "#33373b",
        },
        "typography": {
            "heading_font": "Sharp Grotesk",
            "body_font": "Sharp Grotesk",
            "heading_size": 32,
            "body_size": 16,
        },
    },
    {
        "id": "minimalist-light",
        "name": "Minimalist Light",
        "description": (
            "Clean and minimal light theme that puts your content first. "
            "Perfect for a professional look."
        ),
        "is_premium": False,
        "tags": ["light", "minimal", "clean"],
        "color_scheme": {
            "primary": "#2563eb",
            "secondary": "#1d4ed8",
            "accent": "#3b82f6",
            "background": "#ffffff",
            "surface": "#f8fafc",
            "text_primary": "#1e293b",
            "text_secondary": "#64748b",
            "border": "#e2e8f0",
        },
        "typography": {
            "heading_font": "Inter",
            "body_font": "Inter",
            "heading_size": 28,
            "body_size": 16,
        },
    },
    {
        "id": "github-focus",
        "name": "GitHub Focus",
        "description": (
            "Designed for open-source developers. "
            "Highlights your GitHub activity and contributions."
        ),
        "is_premium": False,
        "tags": ["github", "open-source", "dark"],
        "color_scheme": {
            "primary": "#238636",
            "secondary": "#1f6f2a",
            "accent": "#2ea043",
            "background": "#0d1117",
            "surface": "#161b22",
            "text_primary": "#f0f6fc",
            "text_secondary": "#8b949e",
            "border": "#30363d",
        },
        "typography": {
            "heading_font": "Sharp Grotesk",
            "body_font": "Sharp Grotesk",
            "heading_size": 24,
            "body_size": 14,
        },
    },
    {
        "id": "gta-vice-city",
        "name": "Miami Nights",
        "description": "Retro neon sunset inspired by 80s Miami nightlife.",
        "is_premium": False,
        "tags": ["retro", "neon", "colorful"],
        "color_scheme": {
            "primary": "#FF1493",
            "secondary": "#00CED1",
            "accent": "#FFD700",
            "background": "#1a0b2e",
            "surface": "rgba(255, 20, 147, 0.10)",
            "text_primary": "#ffffff",
            "text_secondary": "#f9a8d4",
            "border": "rgba(255, 20, 147, 0.40)",
        },
        "typography": {
            "heading_font": "Poppins",
            "body_font": "Poppins",
            "heading_size": 32,
            "body_size": 16,
        },
    },
    {
        "id": "cyberpunk-neon",
        "name": "Cyberpunk Neon",
        "description": "High-contrast neon glow on a pitch black grid.",
        "is_premium": True,
        "tags": ["neon", "futuristic", "dark"],
        "color_scheme": {
            "primary": "#00F5FF",
            "secondary": "#FF00FF",
            "accent": "#39FF14",
            "background": "#0D0D0D",
            "surface": "#1A1A1A",
            "text_primary": "#D1D5DB",
            "text_secondary": "#9CA3AF",
            "border": "rgba(0, 245, 255, 0.3)",
        },
        "typography": {
            "heading_font": "Orbitron",
            "body_font": "Roboto Mono",
            "heading_size": 32,
            "body_size": 16,
        },
    },
    {
        "id": "sunset-gradient",
        "name": "Sunset Gradient",
        "description": "Warm coral to peach gradient with soft cream cards.",
        "is_premium": True,
        "tags": ["warm", "gradient", "light"],
        "color_scheme": {
            "primary": "#FF6F61",
            "secondary": "#FF7E5F",
            "accent": "#FEB47B",
            "background": "#FF7E5F",
            "surface": "#FFF5EE",
            "text_primary": "#2C2C2C",
            "text_secondary": "#6E6E6E",
            "border": "#FFFFFF",
        },
        "typography": {
            "heading_font": "Poppins",
            "body_font": "Inter",
            "heading_size": 30,
            "body_size": 16,
        },
    },
]

TEMPLATES_BY_ID: dict[str, dict] = {entry["id"]: entry for entry in TEMPLATE_CATALOG}


def get_template_config(template_id: str | None) -> dict:
    """Look up a catalog entry, falling back to the default template."""
    return TEMPLATES_BY_ID.get(template_id or DEFAULT_THEME_ID, TEMPLATES_BY_ID[DEFAULT_THEME_ID])


def sync_template_catalog(db: Session) -> int:
    """Insert or update every catalog entry in the templates table.

    Returns the number of rows created.
    """
    created = 0
    for sort_order, entry in enumerate(TEMPLATE_CATALOG):
        template = db.query(Template).filter(Template.id == entry["id"]).first()
        if template is None:
            template = Template(id=entry["id"])
            db.add(template)
            created += 1

        template.name = entry["name"]
        template.description = entry["description"]
        template.preview_image_url = f"/templates/{entry['id']}.png"
        template.category = "premium" if entry["is_premium"] else "free"
        template.is_premium = entry["is_premium"]
        template.is_active = True
        template.sort_order = sort_order
        template.tags = entry["tags"]
        template.color_scheme = entry["color_scheme"]
        template.typography = entry["typography"]

    db.commit()
    if created:
        logger.info(f"Seeded {created} templates")
    return created


class TemplateService:
    """Service for listing templates and applying one to a profile."""

    def __init__(self, db: Session):
        self.db = db

    def list_templates(self, user: User) -> list[tuple[Template, bool]]:
        """Return active templates with whether the user may apply each one."""
        templates = (
            self.db.query(Template)
            .filter(Template.is_active.is_(True))
            .order_by(Template.sort_order, Template.id)
            .all()
        )
        return [(t, self.can_use(user, t)) for t in templates]

    @staticmethod
    def can_use(user: User, template: Template) -> bool:
        return not template.is_premium or bool(user.is_premium)

    def set_current_template(self, user: User, template_id: str) -> Template:
        """Apply a template to the user's profile."""
        template = (
            self.db.query(Template)
            .filter(Template.id == template_id, Template.is_active.is_(True))
            .first()
        )
        if template is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid template ID",
            )

        if not self.can_use(user, template):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Premium template requires premium subscription",
            )

        user.theme_id = template.id
        self.db.commit()
        self.db.refresh(user)
        logger.info(f"User {user.id} switched to template {template.id}")
        return template

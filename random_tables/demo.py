"""Create demo tables and templates for development/testing."""

import logging
import shutil

from random_tables.config import Services
from random_tables.storage import FileTableRepository, FileTemplateRepository

logger = logging.getLogger(__name__)

DEMO_TABLES = [
    {
        "name": "Colors",
        "description": "Five equally likely colors.",
        "entries": [{"content": c} for c in ("Red", "Blue", "Green", "Yellow", "Purple")],
    },
    {
        "name": "Animals",
        "description": "Common beasts; a wolf shows up more often than a bear.",
        "entries": [
            {"content": "Wolf", "weight": 3},
            {"content": "Raven", "weight": 2},
            {"content": "Bear"},
            {"content": "A {{Color::colors::Colors}} stag"},
        ],
    },
    {
        "name": "Weather",
        "description": "A d20 weather table.",
        "entries": [
            {"content": "Clear skies", "range": {"min": 1, "max": 8}},
            {"content": "Overcast", "range": {"min": 9, "max": 14}},
            {"content": "Rain", "range": {"min": 15, "max": 18}},
            {"content": "Storm", "range": {"min": 19, "max": 20}},
        ],
    },
    {
        "name": "NPC Names",
        "entries": [{"content": n} for n in ("Gareth", "Elena", "Morwen", "Tobias", "Ysolde")],
    },
    {
        "name": "Encounters",
        "description": "Roadside encounters built from other tables.",
        "entries": [
            {"content": "{{Name::npc-names::NPC Names}} chasing a {{Beast::animals::Animals}}"},
            {"content": "{{Beasts::animals::Animals::2:: and }} fighting in the {{Sky::weather::Weather}}"},
            {"content": "A peddler selling {{Colors::colors::Colors::3}} ribbons"},
        ],
    },
]

DEMO_TEMPLATES = [
    {
        "name": "Travel Day",
        "description": "Weather plus one encounter.",
        "template": "Weather: {{Weather::weather::Weather}}. On the road: {{Encounter::encounters::Encounters}}.",
    },
]


def create_demo_data(services: Services) -> None:
    """Wipe file-backed tables/templates and create fresh demo data."""
    for repo in (services.tables.repository, services.templates.repository):
        if isinstance(repo, (FileTableRepository, FileTemplateRepository)) and repo.root.exists():
            shutil.rmtree(repo.root)

    for table in DEMO_TABLES:
        services.tables.create_table(table["name"], table.get("description", ""), table["entries"])
    for tmpl in DEMO_TEMPLATES:
        services.templates.create_template(tmpl["name"], tmpl["template"], tmpl["description"])
    logger.info("created %d demo tables, %d demo templates", len(DEMO_TABLES), len(DEMO_TEMPLATES))

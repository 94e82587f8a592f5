"""Random tables: weighted/ranged tables whose entries can roll on other tables.

Core types live in random_tables.models and random_tables.templating; the
roll engine is random_tables.rolling. Transports: random_tables.mcp_server
(FastMCP over stdio) and random_tables.app (FastAPI).
"""

from .errors import (  # noqa: F401
    ConfigError,
    EmptyTableError,
    InvalidArgumentError,
    NotFoundError,
    RandomTablesError,
)
from .models import RandomTable, Range, RollResult, SavedTemplate, TableEntry, TemplateEvaluation  # noqa: F401
from .rng import DefaultRandomSource, RandomSource, SystemRandomSource  # noqa: F401
from .rolling import RollService, TemplateResolver  # noqa: F401
from .templating import MAX_RESOLUTION_DEPTH, RollTemplate, TemplateReference  # noqa: F401

"""Chaos RPG core: template generator, personality-driven content, game store.

Typical wiring, done once per session by the presentation layer:

    generator = TemplateGenerator()
    director = ContentDirector(generator, personality="default")
    store = GameStore()
    store.subscribe(render)

    store.start_new_game(1, ["Hero"])
    store.start_encounter(director.generate_encounter())
"""

# Re-export the public API so `import chaos_rpg` is enough for callers.

from .ai import PERSONALITIES, ContentDirector  # noqa: F401
from .config import DEFAULT_SETTINGS, AppConfig, configure_logging, load_config  # noqa: F401
from .errors import (  # noqa: F401
    ChaosRPGError,
    InvalidSaveDataError,
    InvalidSettingsError,
    NoActiveBossError,
    NotFoundError,
)
from .generator import EMPTY_RESULT, MAX_ROUNDS, TemplateGenerator  # noqa: F401
from .store import BOSS_CATALOG, GameStore  # noqa: F401

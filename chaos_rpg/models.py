"""Core domain models.

The generator, AI layer and store all exchange these types.
Pydantic is used for validation and serialisation at every data boundary,
including the save/load round trip.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field, model_validator

Phase = Literal["menu", "playing", "encounter", "boss", "victory", "defeat"]

QuestStatus = Literal["active", "completed"]

Zone = Literal["battlefield", "graveyard"]

ChangeType = Literal[
    "game_started",
    "game_loaded",
    "game_saved",
    "game_reset",
    "boss_encounter_started",
    "encounter_started",
    "boss_damaged",
    "boss_defeated",
    "turn_advanced",
    "card_added_to_hand",
    "card_played",
    "item_added_to_inventory",
    "quest_added",
    "quest_progress_updated",
    "location_changed",
    "settings_updated",
]


# ---------------------------------------------------------------------------
# Generator
# ---------------------------------------------------------------------------

class GeneratorEntry(BaseModel):
    """A named pool of template strings.

    `weight` is stored with the pool but does not influence selection.
    """

    weight: float = 1
    items: list[str] = Field(default_factory=list)


class GenerationRecord(BaseModel):
    generator: str
    result: str
    timestamp: float


# ---------------------------------------------------------------------------
# AI layer
# ---------------------------------------------------------------------------

class Personality(BaseModel):
    creativity: float = Field(ge=0, le=1)
    danger: float = Field(ge=0, le=1)
    humor: float = Field(ge=0, le=1)
    description: str = ""


class StoryEvent(BaseModel):
    timestamp: float
    content: dict[str, Any]
    personality: str


class Consequence(BaseModel):
    type: str
    description: str
    severity: str


class Mechanic(BaseModel):
    name: str
    effect: str
    trigger: str


class Environment(BaseModel):
    name: str
    effect: str
    visual: str


class Objective(BaseModel):
    description: str
    completed: bool = False
    primary: bool = False
    bonus: str | None = None  # reward text, bonus objectives only


class MoralOption(BaseModel):
    choice: str
    consequence: str
    alignment: str


class MoralChoice(BaseModel):
    situation: str
    options: list[MoralOption]


class QuestGiver(BaseModel):
    name: str
    type: str
    trustworthy: float


class Tactic(BaseModel):
    name: str
    description: str
    trigger: str
    threshold: float | None = None
    frequency: int | None = None


class BossDialogue(BaseModel):
    encounter_start: str
    half_health: str
    defeated: str


class AdaptiveStrategy(BaseModel):
    counter_creatures: bool
    counter_spells: bool
    focus_weakest: bool
    unpredictable: bool


class PhaseTransition(BaseModel):
    health_threshold: float
    name: str
    effect: str
    visual: str


class BossBehavior(BaseModel):
    tactics: list[Tactic]
    dialogue: BossDialogue
    adaptive_strategy: AdaptiveStrategy
    phase_transitions: list[PhaseTransition]


class Suggestion(BaseModel):
    action: str
    description: str
    priority: Literal["high", "medium", "low"]


class BattleSnapshot(BaseModel):
    """The slice of game state the AI layer reasons about.

    Built by the caller, usually via GameStore.battle_snapshot().
    """

    player_name: str | None = None
    player_health: int | None = None
    boss_health: int | None = None
    hand_size: int = 0
    creature_count: int = 0
    spell_count: int = 0


# ---------------------------------------------------------------------------
# Game entities
# ---------------------------------------------------------------------------

class Card(BaseModel):
    id: str
    name: str
    scryfall_id: str | None = None
    mana_cost: str | None = None
    type_line: str | None = None
    oracle_text: str | None = None
    image_url: str | None = None
    power: str | None = None
    toughness: str | None = None


class ManaPool(BaseModel):
    white: int = 0
    blue: int = 0
    black: int = 0
    red: int = 0
    green: int = 0
    colorless: int = 0


class Player(BaseModel):
    id: str
    name: str
    health: int = 20
    max_health: int = 20
    mana: ManaPool = Field(default_factory=ManaPool)
    hand: list[Card] = Field(default_factory=list)
    battlefield: list[Card] = Field(default_factory=list)
    graveyard: list[Card] = Field(default_factory=list)
    library: list[Card] = Field(default_factory=list)
    abilities: list[str] = Field(default_factory=list)
    experience: int = 0
    level: int = 1


class Boss(BaseModel):
    id: str
    name: str
    health: int
    max_health: int
    abilities: list[str] = Field(default_factory=list)
    weaknesses: list[str] = Field(default_factory=list)
    resistances: list[str] = Field(default_factory=list)
    difficulty: int = 1
    defeated: bool = False
    location: str | None = None
    # Filled in for generated bosses only
    title: str | None = None
    description: str | None = None
    loot: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _health_in_range(self) -> Boss:
        if not 0 <= self.health <= self.max_health:
            raise ValueError(
                f"boss health {self.health} outside [0, {self.max_health}]"
            )
        return self


class Encounter(BaseModel):
    title: str
    location: str
    weather: str
    difficulty: int = Field(ge=1, le=5)
    rewards: list[str] = Field(default_factory=list)
    special: str | None = None
    # AI enrichment
    ai_generated: bool = False
    personality: str | None = None
    narrative: str | None = None
    consequences: list[Consequence] = Field(default_factory=list)
    special_mechanics: list[Mechanic] = Field(default_factory=list)
    environment: Environment | None = None


class Quest(BaseModel):
    id: str = ""  # assigned by GameStore.add_quest
    title: str
    objective: str
    status: QuestStatus = "active"
    progress: int = Field(default=0, ge=0, le=100)
    rewards: list[str] = Field(default_factory=list)
    description: str | None = None
    difficulty: int | None = None
    time_limit: int | None = None
    # AI enrichment
    ai_enhanced: bool = False
    narrative: str | None = None
    objectives: list[Objective] = Field(default_factory=list)
    moral_choice: MoralChoice | None = None
    quest_giver: QuestGiver | None = None

    @model_validator(mode="after")
    def _status_matches_progress(self) -> Quest:
        if (self.status == "completed") != (self.progress >= 100):
            raise ValueError(
                f"quest status {self.status!r} does not match progress {self.progress}"
            )
        return self


class Item(BaseModel):
    id: str = ""  # assigned by GameStore.add_to_inventory
    name: str
    type: str = "treasure"
    description: str = ""


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------

class GameSettings(BaseModel):
    auto_tap_lands: bool = False
    show_card_previews: bool = True
    sound_volume: int = Field(default=50, ge=0, le=100)
    difficulty: str = "normal"
    ai_personality: str = "default"


class GameState(BaseModel):
    phase: Phase = "menu"
    current_turn: int = Field(default=0, ge=0)
    players: list[Player] = Field(default_factory=list)
    current_boss: Boss | None = None
    current_encounter: Encounter | None = None
    location: str | None = None
    inventory: list[Item] = Field(default_factory=list)
    quests: list[Quest] = Field(default_factory=list)
    defeated_boss_ids: list[str] = Field(default_factory=list)
    settings: GameSettings = Field(default_factory=GameSettings)


class GameData(BaseModel):
    bosses: list[Boss] = Field(default_factory=list)


class SaveData(BaseModel):
    version: str
    timestamp: float
    state: GameState
    game_data: GameData


class StateChange(BaseModel):
    """Typed notification handed to store observers with each mutation."""

    type: ChangeType
    payload: dict[str, Any] = Field(default_factory=dict)


class GameStats(BaseModel):
    turn_count: int
    bosses_defeated: int
    total_bosses: int
    active_quests: int
    completed_quests: int
    inventory_size: int
    players: int
    phase: Phase
    location: str | None

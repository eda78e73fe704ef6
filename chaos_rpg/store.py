"""Game state store: the single source of truth for a play session.

Every mutation is a named method. Each one swaps in new field values and then
notifies observers synchronously, in subscription order, each with its own copy of
the state and one StateChange. An observer that raises is logged and skipped;
the rest are still notified and the caller never sees the error.

Phases:

    menu ──start_new_game──▶ playing ⇄ encounter
                               ▲  ⇅
                               │ boss ──last catalog boss defeated──▶ victory
                               └─(other boss defeated)
    any phase ──reset_game──▶ menu

"defeat" is part of the Phase type but no operation enters it.

Card operations with an unknown player id are no-ops: nothing changes, no
event is emitted, a warning is logged.
"""

from __future__ import annotations

import logging
import time
import uuid
from collections.abc import Callable
from typing import Any

from pydantic import ValidationError

from .config import DEFAULT_SETTINGS
from .errors import (
    InvalidSaveDataError,
    InvalidSettingsError,
    NoActiveBossError,
    NotFoundError,
)
from .models import (
    BattleSnapshot,
    Boss,
    Card,
    ChangeType,
    Encounter,
    GameData,
    GameSettings,
    GameState,
    GameStats,
    Item,
    Player,
    Quest,
    SaveData,
    StateChange,
    Zone,
)

logger = logging.getLogger(__name__)

SAVE_VERSION = "1.0.0"
STARTING_LOCATION = "Starting Village"

Observer = Callable[[GameState, StateChange], None]

BOSS_CATALOG: list[Boss] = [
    Boss(
        id="vorthak-destroyer",
        name="Vorthak the Destroyer",
        health=150,
        max_health=150,
        abilities=["Chaos Storm", "Reality Rift", "Void Manipulation"],
        weaknesses=["white", "blue"],
        resistances=["black", "red"],
        difficulty=8,
        location="The Chaos Nexus",
    ),
    Boss(
        id="malachar-corrupted",
        name="Malachar the Corrupted",
        health=120,
        max_health=120,
        abilities=["Soul Drain", "Shadow Minions", "Corrupt Spells"],
        weaknesses=["white", "green"],
        resistances=["black"],
        difficulty=6,
        location="The Shadowlands",
    ),
    Boss(
        id="nethys-ancient",
        name="Nethys the Ancient",
        health=200,
        max_health=200,
        abilities=["Time Manipulation", "Ancient Knowledge", "Planar Binding"],
        weaknesses=["red", "green"],
        resistances=["blue", "white"],
        difficulty=9,
        location="The Temporal Sanctum",
    ),
]


def _new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


class GameStore:
    """Owns the GameState and the boss catalog for one session.

    Args:
        bosses:   Boss catalog. Defaults to a copy of BOSS_CATALOG.
        settings: Initial settings. Defaults to DEFAULT_SETTINGS.
    """

    def __init__(
        self,
        bosses: list[Boss] | None = None,
        settings: GameSettings | None = None,
    ) -> None:
        catalog = bosses if bosses is not None else BOSS_CATALOG
        self._data = GameData(bosses=[b.model_copy(deep=True) for b in catalog])
        self._state = GameState(
            settings=(settings or DEFAULT_SETTINGS).model_copy(deep=True)
        )
        self._observers: list[Observer] = []

    @property
    def state(self) -> GameState:
        """Deep copy of the current state. Mutating it has no effect."""
        return self._state.model_copy(deep=True)

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def subscribe(self, callback: Observer) -> None:
        self._observers.append(callback)

    def unsubscribe(self, callback: Observer) -> None:
        self._observers = [o for o in self._observers if o is not callback]

    def _notify(self, type: ChangeType, **payload: Any) -> None:
        change = StateChange(type=type, payload=payload)
        for callback in list(self._observers):
            # fresh copies per observer
            try:
                callback(self.state, change.model_copy(deep=True))
            except Exception:
                logger.exception("Observer %r failed on %s", callback, type)

    def _update(self, **fields: Any) -> None:
        self._state = self._state.model_copy(update=fields)

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    def start_new_game(
        self, player_count: int = 1, names: list[str] | None = None
    ) -> None:
        names = names or []
        players = [
            Player(
                id=f"player-{n}",
                name=names[n - 1] if n <= len(names) else f"Player {n}",
            )
            for n in range(1, max(player_count, 1) + 1)
        ]
        self._update(
            phase="playing",
            current_turn=1,
            players=players,
            current_boss=None,
            current_encounter=None,
            location=STARTING_LOCATION,
            inventory=[],
            quests=[],
            defeated_boss_ids=[],
        )
        logger.info("New game with %d player(s)", len(players))
        self._notify("game_started", player_count=len(players), names=[p.name for p in players])

    def end_turn(self) -> None:
        self._update(current_turn=self._state.current_turn + 1)
        self._notify("turn_advanced", turn=self._state.current_turn)

    def reset_game(self) -> None:
        """Back to the menu. Settings survive; catalog bosses are restored."""
        self._state = GameState(settings=self._state.settings.model_copy(deep=True))
        self._data = GameData(bosses=[
            b.model_copy(update={"health": b.max_health, "defeated": False})
            for b in self._data.bosses
        ])
        self._notify("game_reset")

    # ------------------------------------------------------------------
    # Encounters and bosses
    # ------------------------------------------------------------------

    def start_boss_encounter(self, boss: str | Boss) -> None:
        """Start a fight with a catalog boss (by id) or a given Boss."""
        if isinstance(boss, str):
            found = self._find_boss(boss)
            if found is None:
                raise NotFoundError(f"Boss '{boss}' not found")
            boss = found
        current = boss.model_copy(deep=True)
        self._update(phase="boss", current_boss=current, current_encounter=None)
        self._notify("boss_encounter_started", boss=current.model_dump())

    def start_encounter(self, encounter: Encounter) -> None:
        current = encounter.model_copy(deep=True)
        self._update(phase="encounter", current_encounter=current, current_boss=None)
        self._notify("encounter_started", encounter=current.model_dump())

    def damage_boss(self, amount: int) -> None:
        """Subtract `amount` (a non-negative int) from the current boss's health."""
        if isinstance(amount, bool) or not isinstance(amount, int) or amount < 0:
            raise ValueError(f"Damage must be a non-negative integer, got {amount!r}")
        boss = self._state.current_boss
        if boss is None:
            raise NoActiveBossError("No active boss to damage")

        boss = boss.model_copy(update={"health": max(0, boss.health - amount)})
        self._update(current_boss=boss)
        if boss.health == 0:
            self.defeat_boss()
            return
        self._notify("boss_damaged", damage=amount, boss=boss.model_dump())

    def defeat_boss(self) -> None:
        boss = self._state.current_boss
        if boss is None:
            raise NoActiveBossError("No active boss to defeat")

        boss = boss.model_copy(update={"health": 0, "defeated": True})
        self._data = GameData(bosses=[
            b.model_copy(update={"defeated": True}) if b.id == boss.id else b
            for b in self._data.bosses
        ])
        defeated = list(self._state.defeated_boss_ids)
        if boss.id not in defeated:
            defeated.append(boss.id)

        bosses = self._data.bosses
        victory = bool(bosses) and all(b.defeated for b in bosses)
        self._update(
            phase="victory" if victory else "playing",
            current_boss=None,
            defeated_boss_ids=defeated,
        )
        logger.info("Boss %s defeated (victory=%s)", boss.id, victory)
        self._notify("boss_defeated", boss=boss.model_dump(), victory=victory)

    def _find_boss(self, boss_id: str) -> Boss | None:
        for b in self._data.bosses:
            if b.id == boss_id:
                return b
        return None

    # ------------------------------------------------------------------
    # Cards
    # ------------------------------------------------------------------

    def _move_card(self, player_id: str, card: Card, zone: str) -> Card | None:
        """Remove `card` (by id) from every zone, then append it to `zone`.

        Returns the stored copy, or None if the player does not exist.
        """
        card = card.model_copy()
        players = []
        found = False
        for p in self._state.players:
            if p.id == player_id:
                zones = {
                    name: [c for c in getattr(p, name) if c.id != card.id]
                    for name in ("hand", "battlefield", "graveyard")
                }
                zones[zone].append(card)
                p = p.model_copy(update=zones)
                found = True
            players.append(p)
        if not found:
            return None
        self._update(players=players)
        return card

    def add_card_to_hand(self, player_id: str, card: Card) -> None:
        stored = self._move_card(player_id, card, "hand")
        if stored is None:
            logger.warning("add_card_to_hand: unknown player %r, ignored", player_id)
            return
        self._notify("card_added_to_hand", player_id=player_id, card=stored.model_dump())

    def play_card(self, player_id: str, card: Card, zone: Zone = "battlefield") -> None:
        """Move a card from hand to battlefield or graveyard."""
        if zone not in ("battlefield", "graveyard"):
            raise ValueError(f"Cannot play a card to zone {zone!r}")
        stored = self._move_card(player_id, card, zone)
        if stored is None:
            logger.warning("play_card: unknown player %r, ignored", player_id)
            return
        self._notify("card_played", player_id=player_id, card=stored.model_dump(), zone=zone)

    # ------------------------------------------------------------------
    # Inventory, quests, location, settings
    # ------------------------------------------------------------------

    def add_to_inventory(self, item: Item) -> Item:
        """Append a copy of `item` with a fresh id and return it."""
        stored = item.model_copy(update={"id": _new_id("item")})
        self._update(inventory=[*self._state.inventory, stored])
        self._notify("item_added_to_inventory", item=stored.model_dump())
        return stored

    def add_quest(self, quest: Quest) -> Quest:
        """Append a copy of `quest` as a fresh active quest and return it."""
        stored = quest.model_copy(
            update={"id": _new_id("quest"), "status": "active", "progress": 0}
        )
        self._update(quests=[*self._state.quests, stored])
        self._notify("quest_added", quest=stored.model_dump())
        return stored

    def update_quest_progress(self, quest_id: str, progress: int) -> None:
        progress = max(0, min(100, progress))
        quests = [
            q.model_copy(update={
                "progress": progress,
                "status": "completed" if progress >= 100 else "active",
            }) if q.id == quest_id else q
            for q in self._state.quests
        ]
        self._update(quests=quests)
        self._notify("quest_progress_updated", quest_id=quest_id, progress=progress)

    def change_location(self, location: str) -> None:
        self._update(location=location)
        self._notify("location_changed", location=location)

    def update_settings(self, fields: dict[str, Any]) -> GameSettings:
        """Merge known settings keys; unknown keys are ignored.

        Raises InvalidSettingsError (and changes nothing) if a value is invalid.
        """
        allowed = set(GameSettings.model_fields)
        merged = self._state.settings.model_dump()
        for key, value in fields.items():
            if key in allowed:
                merged[key] = value
            else:
                logger.debug("update_settings: ignoring unknown key %r", key)
        try:
            settings = GameSettings.model_validate(merged)
        except ValidationError as e:
            raise InvalidSettingsError(f"Invalid settings: {e}") from e
        self._update(settings=settings)
        self._notify("settings_updated", settings=settings.model_dump())
        return settings.model_copy()

    # ------------------------------------------------------------------
    # Save / load
    # ------------------------------------------------------------------

    def save_game(self) -> SaveData:
        save = SaveData(
            version=SAVE_VERSION,
            timestamp=time.time(),
            state=self._state.model_copy(deep=True),
            game_data=self._data.model_copy(deep=True),
        )
        self._notify("game_saved", version=save.version, timestamp=save.timestamp)
        return save

    def load_game(self, blob: SaveData | dict[str, Any]) -> None:
        """Restore state and boss catalog. Leaves the store untouched on error."""
        if isinstance(blob, SaveData):
            save = blob.model_copy(deep=True)
        else:
            if not isinstance(blob, dict) or not isinstance(blob.get("state"), dict):
                raise InvalidSaveDataError("Save data has no state")
            data = dict(blob)
            if "gameData" in data and "game_data" not in data:
                data["game_data"] = data.pop("gameData")
            data.setdefault("version", SAVE_VERSION)
            data.setdefault("timestamp", 0)
            data.setdefault("game_data", self._data.model_dump())
            try:
                save = SaveData.model_validate(data)
            except ValidationError as e:
                raise InvalidSaveDataError(f"Invalid save data: {e}") from e

        self._state = save.state
        self._data = save.game_data
        logger.info("Loaded save version %s", save.version)
        self._notify("game_loaded", version=save.version, timestamp=save.timestamp)

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------

    def get_player(self, player_id: str) -> Player | None:
        for p in self._state.players:
            if p.id == player_id:
                return p.model_copy(deep=True)
        return None

    def get_bosses(self) -> list[Boss]:
        return [b.model_copy(deep=True) for b in self._data.bosses]

    def get_undefeated_bosses(self) -> list[Boss]:
        return [b for b in self.get_bosses() if not b.defeated]

    def get_stats(self) -> GameStats:
        quests = self._state.quests
        return GameStats(
            turn_count=self._state.current_turn,
            bosses_defeated=len(self._state.defeated_boss_ids),
            total_bosses=len(self._data.bosses),
            active_quests=sum(1 for q in quests if q.status == "active"),
            completed_quests=sum(1 for q in quests if q.status == "completed"),
            inventory_size=len(self._state.inventory),
            players=len(self._state.players),
            phase=self._state.phase,
            location=self._state.location,
        )

    def battle_snapshot(self, player_id: str = "player-1") -> BattleSnapshot:
        """Summarise the fight from one player's point of view for the AI layer."""
        boss = self._state.current_boss
        player = self.get_player(player_id)
        if player is None:
            return BattleSnapshot(boss_health=boss.health if boss else None)

        def _is(card: Card, *kinds: str) -> bool:
            return any(k in (card.type_line or "") for k in kinds)

        return BattleSnapshot(
            player_name=player.name,
            player_health=player.health,
            boss_health=boss.health if boss else None,
            hand_size=len(player.hand),
            creature_count=sum(1 for c in player.battlefield if _is(c, "Creature")),
            spell_count=sum(1 for c in player.graveyard if _is(c, "Instant", "Sorcery")),
        )

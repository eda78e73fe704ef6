"""Template generator: named pools of strings with [placeholder] expansion.

A pool is a list of template strings. expand(name) picks one uniformly at
random and resolves placeholders:

  [identifier]   identifier is a run of word characters. If a pool with that
                 name is registered, the placeholder is replaced by a freshly
                 picked item of that pool; otherwise it is left as literal text.

Resolution runs in rounds. Each round replaces every registered placeholder
in the current text, and the next round scans the result again, so items
may themselves contain placeholders. After MAX_ROUNDS rounds expansion stops
even if placeholders remain; a pool that references itself therefore ends
with its literal placeholder in the output instead of looping.

Only top-level expand() calls are recorded in history().

Default pools are read from presets/generators.txt:

    # poolName
    first item
    second item with a [nestedPool]
"""

from __future__ import annotations

import logging
import random
import re
import time
import unicodedata
import uuid
from pathlib import Path

from .errors import NotFoundError
from .models import Boss, Card, Encounter, GenerationRecord, GeneratorEntry, Quest

logger = logging.getLogger(__name__)

MAX_ROUNDS = 10
EMPTY_RESULT = "Empty generator"
PLACEHOLDER = re.compile(r"\[(\w+)\]")

PRESETS_FILE = Path(__file__).parent / "presets" / "generators.txt"

CARD_TYPES = ["Creature", "Instant", "Sorcery", "Artifact", "Enchantment"]


def slugify(text: str) -> str:
    """"Vorthak the Destroyer" → "vorthak-the-destroyer"."""
    text = unicodedata.normalize("NFKD", text)
    text = text.encode("ascii", "ignore").decode("ascii").lower()
    text = re.sub(r"['\"]", "", text)
    text = re.sub(r"[^a-z0-9]+", "-", text)
    return text.strip("-") or "unnamed"


def load_presets(path: Path) -> dict[str, list[str]]:
    """Parse a sectioned preset file into {pool name: items}."""
    sections: dict[str, list[str]] = {}
    current: str | None = None
    if not path.is_file():
        logger.warning("Generator presets not found at %s", path)
        return sections
    for line in path.read_text().splitlines():
        line = line.strip()
        if line.startswith("# "):
            current = line[2:].strip()
            sections[current] = []
        elif line and current is not None:
            sections[current].append(line)
    return sections


class TemplateGenerator:
    """Registry of template pools plus the composite content builders.

    Args:
        rng:     Random source. Defaults to a fresh random.Random().
        presets: Preset file to load at construction, or None for an
                 empty registry.
    """

    def __init__(
        self,
        rng: random.Random | None = None,
        presets: Path | None = PRESETS_FILE,
    ) -> None:
        self._rng = rng or random.Random()
        self._entries: dict[str, GeneratorEntry] = {}
        self._history: list[GenerationRecord] = []
        if presets is not None:
            for name, items in load_presets(presets).items():
                self.register(name, items)

    # ------------------------------------------------------------------
    # Registry
    # ------------------------------------------------------------------

    def register(self, name: str, items: list[str], weight: float = 1) -> None:
        """Add a pool, replacing any existing pool with the same name."""
        self._entries[name] = GeneratorEntry(weight=weight, items=list(items))

    def get(self, name: str) -> GeneratorEntry | None:
        entry = self._entries.get(name)
        return entry.model_copy(deep=True) if entry is not None else None

    def names(self) -> list[str]:
        return list(self._entries)

    def export(self) -> dict[str, dict]:
        return {name: entry.model_dump() for name, entry in self._entries.items()}

    def import_entries(self, entries: dict[str, dict]) -> None:
        """Register every pool in an export() style mapping."""
        for name, data in entries.items():
            entry = GeneratorEntry.model_validate(data)
            self.register(name, entry.items, entry.weight)

    # ------------------------------------------------------------------
    # Expansion
    # ------------------------------------------------------------------

    def expand(self, name: str) -> str:
        entry = self._entries.get(name)
        if entry is None:
            raise NotFoundError(f"Generator '{name}' not found")

        result = self._resolve(self._select(name, entry))
        self._history.append(
            GenerationRecord(generator=name, result=result, timestamp=time.time())
        )
        logger.debug("expand %s -> %r", name, result)
        return result

    def _select(self, name: str, entry: GeneratorEntry) -> str:
        # Uniform pick; entry.weight is metadata only.
        if not entry.items:
            logger.warning("Generator %r is empty", name)
            return EMPTY_RESULT
        return self._rng.choice(entry.items)

    def _substitute(self, match: re.Match[str]) -> str:
        name = match.group(1)
        entry = self._entries.get(name)
        if entry is None:
            return match.group(0)
        return self._select(name, entry)

    def _has_registered_placeholder(self, text: str) -> bool:
        return any(name in self._entries for name in PLACEHOLDER.findall(text))

    def _resolve(self, text: str) -> str:
        for _ in range(MAX_ROUNDS):
            if not self._has_registered_placeholder(text):
                break
            text = PLACEHOLDER.sub(self._substitute, text)
        else:
            if self._has_registered_placeholder(text):
                logger.warning(
                    "Expansion stopped after %d rounds with placeholders left: %r",
                    MAX_ROUNDS, text,
                )

        unknown = sorted(
            {n for n in PLACEHOLDER.findall(text) if n not in self._entries}
        )
        if unknown:
            logger.debug("Unresolved placeholders left as text: %s", unknown)
        return text

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def history(self) -> list[GenerationRecord]:
        return list(self._history)

    def clear_history(self) -> None:
        self._history = []

    def stats(self) -> dict:
        return {
            "total_generators": len(self._entries),
            "generator_names": self.names(),
            "history_length": len(self._history),
        }

    # ------------------------------------------------------------------
    # Composite builders
    # ------------------------------------------------------------------

    def build_encounter(self) -> Encounter:
        return Encounter(
            title=self.expand("randomEncounter"),
            location=self.expand("encounterLocation"),
            weather=self.expand("weatherEffect"),
            difficulty=self._rng.randint(1, 5),
            rewards=[self.expand("treasure"), self.expand("rewardType")],
            special=self.expand("magicalEffect") if self._rng.random() < 0.3 else None,
        )

    def build_boss(self) -> Boss:
        name = self.expand("bossName")
        title = self.expand("bossTitle")
        health = self._rng.randint(100, 150)
        return Boss(
            id=slugify(f"{name} {title}"),
            name=f"{name} {title}",
            title=title,
            description=self.expand("bossEncounter"),
            health=health,
            max_health=health,
            difficulty=self._rng.randint(1, 5),
            abilities=[self.expand("magicalEffect"), self.expand("dungeonHazard")],
            weaknesses=[self.expand("manaColor")],
            loot=[
                self.expand("treasure"),
                self.expand("rewardType"),
                self.expand("customCardName"),
            ],
        )

    def build_quest(self) -> Quest:
        has_limit = self._rng.random() < 0.4
        return Quest(
            title=f"The {self.expand('cardQuality')} Quest",
            objective=self.expand("questObjective"),
            description=self.expand("randomEncounter"),
            difficulty=self._rng.randint(1, 5),
            time_limit=self._rng.randint(5, 14) if has_limit else None,
            rewards=[self.expand("treasure"), self.expand("rewardType")],
        )

    def build_card(self) -> Card:
        card_type = self._rng.choice(CARD_TYPES)
        card = Card(
            id=f"custom-{uuid.uuid4().hex[:9]}",
            name=self.expand("customCardName"),
            type_line=card_type,
            mana_cost=f"{{{self._rng.randint(1, 8)}}}",
            oracle_text=f"{self.expand('magicalEffect')} and {self.expand('rewardType')}",
        )
        if card_type == "Creature":
            card.power = str(self._rng.randint(1, 8))
            card.toughness = str(self._rng.randint(1, 8))
        return card

"""Personality-driven content layer on top of the template generator.

A personality is a fixed trait vector (creativity, danger, humor). The
thresholds below decide which extras a generated encounter or quest carries:

  creativity  > 0.7  high-tier narrative, one special mechanic,
                     unpredictable boss strategy
              > 0.6  bonus objective, moral choice, reality-bending tactic
              > 0.4  medium-tier narrative (else low tier)
  danger      > 0.8  "High Stakes" mechanic
              > 0.7  difficulty +1, severe consequences, turn-limit bonus,
                     untrusted quest givers allowed, overwhelming-force tactic
              > 0.6  boss focuses the weakest player
              < 0.4  difficulty -1
  humor       > 0.4  jokey NPC lines, > 0.2 friendly ones (else terse)

The environment effect is a Bernoulli trial with p = creativity.

ContentDirector never writes to the generator registry or the game store;
it only reads the personality and its inputs and returns richer records.
Every generated encounter is kept in a bounded story log.
"""

from __future__ import annotations

import logging
import random
import time
from collections import deque
from typing import Any

from .generator import TemplateGenerator
from .models import (
    AdaptiveStrategy,
    BattleSnapshot,
    Boss,
    BossBehavior,
    BossDialogue,
    Consequence,
    Encounter,
    Environment,
    Mechanic,
    MoralChoice,
    Objective,
    Personality,
    PhaseTransition,
    Quest,
    QuestGiver,
    StoryEvent,
    Suggestion,
    Tactic,
)

logger = logging.getLogger(__name__)

STORY_LOG_LIMIT = 50
RECENT_EVENTS = 10

PERSONALITIES: dict[str, Personality] = {
    "default": Personality(
        creativity=0.7, danger=0.5, humor=0.3,
        description="Balanced gameplay with moderate challenge",
    ),
    "cautious": Personality(
        creativity=0.5, danger=0.3, humor=0.2,
        description="Safe, predictable encounters with lower difficulty",
    ),
    "experimental": Personality(
        creativity=0.9, danger=0.6, humor=0.5,
        description="Creative, unpredictable scenarios with unique twists",
    ),
    "reckless": Personality(
        creativity=0.8, danger=0.9, humor=0.4,
        description="High-risk, high-reward encounters with intense challenges",
    ),
}

# ── Catalogs ──────────────────────────────────────────────

NARRATIVES = {
    "high": [
        "As you venture into {location}, the air shimmers with {weather}. "
        "Strange symbols appear on the ground, pulsing with otherworldly energy. "
        "What appears to be a simple encounter may be far more than it seems...",
        "The fabric of reality seems thin here at {location}. {weather} swirls "
        "around you in impossible patterns. You sense that your actions here will "
        "echo across multiple planes of existence.",
        "Ancient texts spoke of {location}, but nothing could prepare you for this. "
        "The {weather} carries whispers of forgotten magic, and you realize you've "
        "stepped into something extraordinary.",
    ],
    "medium": [
        "You arrive at {location} where {weather} makes visibility challenging. "
        "Your instincts tell you this encounter will test your skills.",
        "{location} stretches before you, shrouded in {weather}. The atmosphere "
        "is tense, suggesting imminent conflict.",
        "As you approach {location}, the {weather} intensifies. Something "
        "significant awaits you here.",
    ],
    "low": [
        "You reach {location}. The weather is {weather}.",
        "{location} appears ahead. Conditions: {weather}.",
        "Location: {location}. Current weather: {weather}.",
    ],
}

SPECIAL_MECHANICS = [
    Mechanic(name="Time Distortion", effect="Turn order reverses randomly", trigger="combat"),
    Mechanic(name="Mana Cascade", effect="Spells cost 1 less but have random effects", trigger="spell_cast"),
    Mechanic(name="Reality Shift", effect="Creatures swap controller each turn", trigger="turn_start"),
    Mechanic(name="Chaos Multiplication", effect="All numerical values doubled", trigger="always"),
    Mechanic(name="Planar Resonance", effect="Cards in graveyard can be cast", trigger="main_phase"),
]

HIGH_STAKES = Mechanic(
    name="High Stakes",
    effect="Winning grants double rewards, losing has severe consequences",
    trigger="always",
)

ENVIRONMENTS = [
    Environment(
        name="Unstable Mana Field",
        effect="All players draw an extra card each turn",
        visual="Shimmering magical auras",
    ),
    Environment(
        name="Temporal Anomaly",
        effect="Players may take two actions per turn",
        visual="Time appears to move in slow motion",
    ),
    Environment(
        name="Chaos Vortex",
        effect="Random card effects trigger spontaneously",
        visual="Swirling multicolored energy",
    ),
    Environment(
        name="Planar Convergence",
        effect="All colors of mana available",
        visual="Multiple planes visible in the sky",
    ),
]

QUEST_NARRATIVES = [
    "A mysterious figure approaches you with urgent news. {objective} "
    "The fate of countless lives may hang in the balance.",
    "Ancient prophecies speak of this moment. {objective} "
    "Only you can prevent the coming catastrophe.",
    "Time is running short. {objective} "
    "The longer you wait, the more dire the consequences.",
    'You discover a hidden message carved in stone: "{objective}" '
    "The meaning becomes clear - you must act.",
]

MORAL_CHOICES = [
    MoralChoice.model_validate({
        "situation": "You find the target weak and defenseless",
        "options": [
            {"choice": "Show mercy", "consequence": "Gain favor but lose reward", "alignment": "good"},
            {"choice": "Complete the contract", "consequence": "Full reward but moral cost", "alignment": "neutral"},
            {"choice": "Demand double payment", "consequence": "Risk confrontation", "alignment": "chaotic"},
        ],
    }),
    MoralChoice.model_validate({
        "situation": "You discover the quest giver lied about the situation",
        "options": [
            {"choice": "Confront them", "consequence": "Truth revealed but potential conflict", "alignment": "lawful"},
            {"choice": "Play along", "consequence": "Maintain relationship but enable deception", "alignment": "neutral"},
            {"choice": "Turn the tables", "consequence": "Chaotic outcome", "alignment": "chaotic"},
        ],
    }),
]

QUEST_GIVERS = [
    QuestGiver(name="Elder Sage Meridian", type="wizard", trustworthy=0.9),
    QuestGiver(name="Captain Ironheart", type="warrior", trustworthy=0.8),
    QuestGiver(name="Mysterious Stranger", type="rogue", trustworthy=0.4),
    QuestGiver(name="Village Elder", type="civilian", trustworthy=0.95),
    QuestGiver(name="Shadowy Figure", type="unknown", trustworthy=0.3),
]

TRUSTED_THRESHOLD = 0.7

BOSS_LINES = {
    "encounter_start": [
        '"So, {player}, you dare challenge {boss}? Your courage is admirable... and futile."',
        '"I\'ve been expecting you. Your journey ends here, at the hands of {boss}!"',
        '"How delightful! Fresh souls to add to my collection. Come, let us dance the dance of destruction!"',
    ],
    "half_health": [
        '"Impressive... but I\'ve only begun to show you my power!"',
        '"You think you\'re winning? This is merely the beginning of your nightmare!"',
        '"Enough games! Now you face my true strength!"',
    ],
    "defeated": [
        '"Impossible... how could mere mortals... defeat... {boss}..."',
        '"This... is not... the end... I will... return..."',
        '"You may have won this battle, but the war... is far from over..."',
    ],
}

PHASE_TRANSITIONS = [
    PhaseTransition(
        health_threshold=0.75, name="Anger",
        effect="Boss attacks become more aggressive",
        visual="Red aura surrounds the boss",
    ),
    PhaseTransition(
        health_threshold=0.5, name="Desperation",
        effect="Boss summons reinforcements",
        visual="Dark portals open around the battlefield",
    ),
    PhaseTransition(
        health_threshold=0.25, name="Final Stand",
        effect="Boss abilities power increased significantly",
        visual="Boss transforms into final form",
    ),
]

NPC_LINES = {
    "high": [
        '"{npc} here! You look like you\'ve seen a ghost. Or maybe a zombie. Hard to tell in this light."',
        '"Well, well, well... if it isn\'t the legendary {player}. I\'ve heard stories, mostly involving poor life choices."',
        '"I\'d offer you a quest, but last time someone accepted, they came back as a newt. They got better, eventually."',
    ],
    "medium": [
        '"Greetings, {player}. I may have something of interest for you."',
        '"Ah, {npc} at your service. Care to hear what I\'ve learned?"',
        '"You\'ve arrived at an opportune moment. I could use someone with your... particular talents."',
    ],
    "low": [
        '"I am {npc}. I have information."',
        '"{player}, approach."',
        '"There is work to be done."',
    ],
}


def _tier(value: float, high: float, medium: float) -> str:
    if value > high:
        return "high"
    if value > medium:
        return "medium"
    return "low"


class ContentDirector:
    """Wraps a TemplateGenerator with a selectable personality.

    Args:
        generator:   Generator whose composite builders supply base content.
        personality: Initial personality key.
        rng:         Random source for the layer's own choices.
    """

    def __init__(
        self,
        generator: TemplateGenerator,
        personality: str = "default",
        rng: random.Random | None = None,
    ) -> None:
        self._generator = generator
        self._rng = rng or random.Random()
        self._personality = "default"
        self._events: deque[StoryEvent] = deque(maxlen=STORY_LOG_LIMIT)
        if personality != "default":
            self.set_personality(personality)

    # ------------------------------------------------------------------
    # Personality
    # ------------------------------------------------------------------

    @property
    def personality_key(self) -> str:
        return self._personality

    def set_personality(self, key: str) -> None:
        if key not in PERSONALITIES:
            logger.warning(
                "Unknown personality %r, keeping %r", key, self._personality
            )
            return
        self._personality = key
        logger.info("AI personality set to %s", key)

    def get_personality(self) -> Personality:
        return PERSONALITIES[self._personality].model_copy()

    # ------------------------------------------------------------------
    # Encounters
    # ------------------------------------------------------------------

    def generate_encounter(self) -> Encounter:
        p = self.get_personality()
        base = self._generator.build_encounter()
        encounter = base.model_copy(update={
            "ai_generated": True,
            "personality": self._personality,
            "narrative": self._narrative(base, p),
            "consequences": self._consequences(p),
            "difficulty": self._scale_difficulty(base.difficulty, p),
            "special_mechanics": self._special_mechanics(p),
            "environment": self._environment(p),
        })
        self._record(encounter.model_dump())
        return encounter

    def _narrative(self, encounter: Encounter, p: Personality) -> str:
        templates = NARRATIVES[_tier(p.creativity, 0.7, 0.4)]
        return self._rng.choice(templates).format(
            location=encounter.location, weather=encounter.weather
        )

    def _consequences(self, p: Personality) -> list[Consequence]:
        consequences = []
        if p.danger > 0.7:
            consequences.append(Consequence(
                type="danger",
                description="Failure may result in permanent character changes",
                severity="high",
            ))
        if p.creativity > 0.8:
            consequences.append(Consequence(
                type="narrative",
                description="Your choices here will affect future story arcs",
                severity="medium",
            ))
        return consequences

    @staticmethod
    def _scale_difficulty(difficulty: int, p: Personality) -> int:
        if p.danger > 0.7:
            difficulty += 1
        elif p.danger < 0.4:
            difficulty -= 1
        return max(1, min(5, difficulty))

    def _special_mechanics(self, p: Personality) -> list[Mechanic]:
        mechanics = []
        if p.creativity > 0.7:
            mechanics.append(self._rng.choice(SPECIAL_MECHANICS).model_copy())
        if p.danger > 0.8:
            mechanics.append(HIGH_STAKES.model_copy())
        return mechanics

    def _environment(self, p: Personality) -> Environment | None:
        if self._rng.random() < p.creativity:
            return self._rng.choice(ENVIRONMENTS).model_copy()
        return None

    # ------------------------------------------------------------------
    # Quests
    # ------------------------------------------------------------------

    def generate_quest(self) -> Quest:
        p = self.get_personality()
        base = self._generator.build_quest()
        return base.model_copy(update={
            "ai_enhanced": True,
            "narrative": self._rng.choice(QUEST_NARRATIVES).format(objective=base.objective),
            "objectives": self._objectives(base, p),
            "moral_choice": self._rng.choice(MORAL_CHOICES).model_copy(deep=True) if p.creativity > 0.6 else None,
            "quest_giver": self._quest_giver(p),
        })

    @staticmethod
    def _objectives(quest: Quest, p: Personality) -> list[Objective]:
        objectives = [Objective(description=quest.objective, primary=True)]
        if p.creativity > 0.6:
            objectives.append(Objective(
                description="Complete the quest without losing any creatures",
                bonus="Extra rare card reward",
            ))
        if p.danger > 0.7:
            objectives.append(Objective(
                description="Complete within 10 turns",
                bonus="Legendary artifact",
            ))
        return objectives

    def _quest_giver(self, p: Personality) -> QuestGiver:
        if p.danger > 0.7:
            return self._rng.choice(QUEST_GIVERS).model_copy()
        trusted = [g for g in QUEST_GIVERS if g.trustworthy > TRUSTED_THRESHOLD]
        return self._rng.choice(trusted).model_copy()

    # ------------------------------------------------------------------
    # Bosses
    # ------------------------------------------------------------------

    def generate_boss_behavior(self, boss: Boss, snapshot: BattleSnapshot) -> BossBehavior:
        p = self.get_personality()
        return BossBehavior(
            tactics=self._tactics(p),
            dialogue=self._boss_dialogue(boss, snapshot),
            adaptive_strategy=AdaptiveStrategy(
                counter_creatures=snapshot.creature_count > 3,
                counter_spells=snapshot.spell_count > 5,
                focus_weakest=p.danger > 0.6,
                unpredictable=p.creativity > 0.7,
            ),
            phase_transitions=[t.model_copy() for t in PHASE_TRANSITIONS],
        )

    @staticmethod
    def _tactics(p: Personality) -> list[Tactic]:
        tactics = []
        if p.danger > 0.7:
            tactics.append(Tactic(
                name="Overwhelming Force",
                description="Boss summons additional minions when below 50% health",
                trigger="health_threshold",
                threshold=0.5,
            ))
        if p.creativity > 0.6:
            tactics.append(Tactic(
                name="Reality Manipulation",
                description="Boss changes battlefield rules randomly",
                trigger="turn_based",
                frequency=3,
            ))
        return tactics

    def _boss_dialogue(self, boss: Boss, snapshot: BattleSnapshot) -> BossDialogue:
        names = {"player": snapshot.player_name or "mortal", "boss": boss.name}
        return BossDialogue(**{
            moment: self._rng.choice(lines).format(**names)
            for moment, lines in BOSS_LINES.items()
        })

    # ------------------------------------------------------------------
    # Advice and flavor
    # ------------------------------------------------------------------

    def suggest_player_action(self, snapshot: BattleSnapshot) -> list[Suggestion]:
        """Rule-based hints for the player. Nothing here is enforced."""
        p = self.get_personality()
        suggestions = []

        if snapshot.boss_health is not None and snapshot.boss_health < 30:
            suggestions.append(Suggestion(
                action="aggressive",
                description="The boss is weakening. Press the attack!",
                priority="high",
            ))

        if snapshot.player_health is not None and snapshot.player_health < 10:
            if p.danger > 0.7:
                suggestions.append(Suggestion(
                    action="risky",
                    description="Go all-in! High risk, high reward!",
                    priority="medium",
                ))
            else:
                suggestions.append(Suggestion(
                    action="defensive",
                    description="Focus on survival and healing",
                    priority="high",
                ))

        if snapshot.hand_size > 7:
            suggestions.append(Suggestion(
                action="card_management",
                description="Consider discarding or playing cards to avoid losing them",
                priority="medium",
            ))

        return suggestions

    def generate_npc_dialogue(self, npc_name: str, player_name: str | None = None) -> str:
        p = self.get_personality()
        lines = NPC_LINES[_tier(p.humor, 0.4, 0.2)]
        return self._rng.choice(lines).format(
            npc=npc_name, player=player_name or "traveler"
        )

    # ------------------------------------------------------------------
    # Story log
    # ------------------------------------------------------------------

    def _record(self, content: dict[str, Any]) -> None:
        self._events.append(StoryEvent(
            timestamp=time.time(), content=content, personality=self._personality,
        ))

    def story_events(self) -> list[StoryEvent]:
        return list(self._events)

    def story_context(self) -> dict[str, Any]:
        events = self.story_events()
        return {
            "major_events": events,
            "recent_events": events[-RECENT_EVENTS:],
        }

    def reset(self) -> None:
        """Clear the story log. The personality is kept."""
        self._events.clear()

    def stats(self) -> dict[str, Any]:
        return {
            "personality": self._personality,
            "personality_config": self.get_personality(),
            "major_events": len(self._events),
        }

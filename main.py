"""Chaos RPG — demo launcher. Plays a short scripted session and prints events."""

import argparse
import asyncio
import random
from pathlib import Path

from chaos_rpg import (
    ContentDirector,
    GameStore,
    TemplateGenerator,
    configure_logging,
    load_config,
)
from chaos_rpg.models import GameState, Item, StateChange
from chaos_rpg.scryfall import DEFAULT_CARDS, ScryfallClient, ScryfallError, card_from_scryfall

ROOT = Path(__file__).parent
HAND_SIZE = 5


def print_change(state: GameState, change: StateChange) -> None:
    print(f"[{state.phase:>9} t{state.current_turn}] {change.type}")


async def draw_hand(client: ScryfallClient, count: int) -> list:
    response = await client.search_cards("cmc<=3 (type:creature OR type:instant OR type:sorcery)")
    records = response.get("data", [])
    return [card_from_scryfall(r) for r in records[:count]]


def main():
    parser = argparse.ArgumentParser(description="Chaos RPG demo session")
    parser.add_argument("--players", type=int, default=1)
    parser.add_argument("--names", nargs="*", default=["Hero"])
    parser.add_argument("--personality", default=None,
                        help="AI personality (default: CHAOS_RPG_PERSONALITY or 'default')")
    parser.add_argument("--seed", type=int, default=None,
                        help="Seed for reproducible content")
    parser.add_argument("--online", action="store_true",
                        help="Draw the opening hand from Scryfall")
    args = parser.parse_args()

    config = load_config(ROOT / ".env")
    configure_logging(config)

    rng = random.Random(args.seed)
    generator = TemplateGenerator(rng=rng)
    director = ContentDirector(generator, args.personality or config.personality, rng=rng)
    store = GameStore()
    store.subscribe(print_change)

    store.start_new_game(args.players, args.names)

    hand = DEFAULT_CARDS
    if args.online:
        try:
            hand = asyncio.run(draw_hand(ScryfallClient.from_config(config), HAND_SIZE))
        except ScryfallError as e:
            print(f"Scryfall unavailable ({e}); using the default hand")
    for card in hand:
        store.add_card_to_hand("player-1", card)

    encounter = director.generate_encounter()
    store.start_encounter(encounter)
    print(encounter.narrative)

    store.add_to_inventory(Item(name=generator.expand("treasure")))
    quest = store.add_quest(director.generate_quest())
    print(f"Quest: {quest.title}: {quest.objective}")

    player = store.get_player("player-1")
    store.play_card("player-1", player.hand[0])
    store.end_turn()

    boss = store.get_undefeated_bosses()[0]
    store.start_boss_encounter(boss.id)
    behavior = director.generate_boss_behavior(boss, store.battle_snapshot())
    print(behavior.dialogue.encounter_start)
    while store.state.current_boss is not None:
        store.damage_boss(rng.randint(20, 60))
        for hint in director.suggest_player_action(store.battle_snapshot()):
            print(f"  hint: {hint.description}")
    print(behavior.dialogue.defeated)

    store.update_quest_progress(quest.id, 100)
    print(store.get_stats().model_dump_json(indent=2))


if __name__ == "__main__":
    main()

"""Walkthrough: one archer, one ogre and two goblins on a 5 ft grid.

Run with:
    python examples/skirmish.py
"""

import asyncio
import logging

from autocover import (
    CoverChanged,
    CoverSettings,
    CoverTopic,
    CoverWorld,
    Entity,
    LocalScene,
    SizeClass,
)


def print_change(event: CoverChanged) -> None:
    print(
        f"  {event.target_id} vs {event.observer_id}: "
        f"{event.previous.value} -> {event.severity.value}"
    )


async def show_aggregates(world: CoverWorld, target_id: str) -> None:
    for aggregate in await world.get_aggregates(target_id):
        kinds = ", ".join(f"{r.kind.value}+{r.value}" for r in aggregate.rules if r.value)
        print(f"  [{aggregate.id}] {aggregate.label} on {target_id}: {kinds}")


async def main() -> None:
    logging.basicConfig(level=logging.INFO)
    settings = CoverSettings(grid_size=50)

    scene = LocalScene(grid_size=settings.grid_size)
    scene.add(
        Entity(id="archer", x=0, y=0),
        Entity(id="ogre", x=100, y=0, size=SizeClass.LARGE),
        Entity(id="giant", x=100, y=100, width=2, height=2, size=SizeClass.HUGE),
        Entity(id="goblin", x=300, y=0, size=SizeClass.SMALL),
        Entity(id="goblin-boss", x=300, y=200, size="sm"),
    )

    world = CoverWorld(scene, settings=settings)
    world.on_cover_changed(print_change)
    bus = world.bind()

    print("Archer shoots the goblin past the ogre:")
    await bus.publish(CoverTopic.ATTACK_DECLARED, attacker_id="archer", target_id="goblin")
    await show_aggregates(world, "goblin")

    print("Archer shoots the goblin boss past the giant, inside an attack context:")
    async with world.attack("archer", "goblin-boss") as attack:
        bonus = settings.bonus_for(attack.severity)
        print(f"  boss gets +{bonus.ac} AC, +{bonus.reflex} reflex")
        await show_aggregates(world, "goblin-boss")

    print("Ogre steps aside:")
    scene.require("ogre").move_to(100, 300)
    await bus.publish(CoverTopic.GEOMETRY_CHANGED, entity_id="ogre")
    await bus.publish(CoverTopic.GEOMETRY_CHANGED, entity_id="goblin")
    await show_aggregates(world, "goblin")

    print("Archer leaves the scene:")
    await world.record_cover("archer", "goblin", "lesser")
    scene.remove("archer")
    await bus.publish(CoverTopic.ENTITY_REMOVED, entity_id="archer")
    await show_aggregates(world, "goblin")


if __name__ == "__main__":
    asyncio.run(main())

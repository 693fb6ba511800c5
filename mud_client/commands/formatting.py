from __future__ import annotations

from collections.abc import Sequence

from mud_client.api.models import Item, Player, Room, Stats
from mud_client.resolver import describe_item


def next_level_xp(level: int) -> int:
    if level == 1:
        return 2000
    return int(55.6 * level**2 - 471.2 * level + 5256.5)


def format_stats(stats: Stats) -> list[str]:
    level = stats.base.level
    target = next_level_xp(level)
    needed = target - stats.dynamic.xp
    return [
        f"Level: {level}",
        f"HP: {stats.dynamic.hp}/{stats.base.max_hp}",
        f"MP: {stats.dynamic.mp}/{stats.base.max_mp}",
        f"XP: {stats.dynamic.xp}/{target} ({needed} more needed for next level)",
    ]


def room_lines(
    room: Room,
    *,
    players: Sequence[Player],
    floor_items: Sequence[Item],
    viewer_name: str,
) -> list[str]:
    lines = [room.name, room.description, ""]

    others = [p for p in players if p.name != viewer_name]
    if others:
        lines.append("You see:")
        lines.extend(f"  {p.name} is here." for p in others)
        lines.append("")

    if floor_items:
        lines.append("You also see:")
        lines.extend(f"  {describe_item(item)}" for item in floor_items)
        lines.append("")

    if room.exits:
        lines.append("Obvious exits:")
        for _exit_id, ex in room.exits:
            direction = f" ({ex.direction})" if ex.direction else ""
            lines.append(f"  {ex.name}{direction}")
    else:
        lines.append("There are no obvious exits.")
    return lines

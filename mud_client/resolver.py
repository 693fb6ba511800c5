from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from mud_client.api.models import Exit, Item, Player
from mud_client.core.errors import UnresolvedReference
from mud_client.core.result import Err, Ok
from mud_client.remote import RemoteActor

logger = logging.getLogger(__name__)

DIRECTION_ALIASES: dict[str, str] = {
    "n": "north",
    "s": "south",
    "e": "east",
    "w": "west",
    "ne": "northeast",
    "nw": "northwest",
    "se": "southeast",
    "sw": "southwest",
    "u": "up",
    "d": "down",
}

# Display only. Resolution walks open containers without a depth limit.
MAX_CONTAINER_DISPLAY_DEPTH = 5


def normalize_token(token: str) -> str:
    return token.strip().casefold()


def resolve_exit(token: str, exits: Sequence[tuple[str, Exit]]) -> str | None:
    """Return the id of the single exit matching `token`, else None.

    An exit matches when its id, its name or its direction starts with the token (or the
    token's alias expansion, so "n" also tries "north"). Zero and several matches are
    the same outcome for the caller.
    """

    norm = normalize_token(token)
    if not norm:
        return None
    expanded = DIRECTION_ALIASES.get(norm, norm)

    matches: list[str] = []
    for exit_id, ex in exits:
        direction = (ex.direction or "").casefold()
        if (
            exit_id.casefold().startswith(norm)
            or ex.name.casefold().startswith(norm)
            or (direction and (direction.startswith(norm) or direction.startswith(expanded)))
        ):
            matches.append(exit_id)

    return matches[0] if len(matches) == 1 else None


def resolve_player(name: str, players: Sequence[Player], *, exact: bool) -> Player | None:
    """Find a roster entry by name.

    `exact=True` is for commands that act on the player (give, attack); read-only
    lookups may ignore case.
    """

    wanted = name.strip()
    if exact:
        return next((p for p in players if p.name == wanted), None)
    key = wanted.casefold()
    return next((p for p in players if p.name.casefold() == key), None)


@dataclass(frozen=True, slots=True)
class ResolvedItem:
    id: int
    # None when the token was taken as a raw item id.
    name: str | None = None

    @property
    def label(self) -> str:
        return self.name or f"item #{self.id}"


async def load_container_items(actor: RemoteActor, container_id: int) -> list[Item]:
    """Fetch a container's children, skipping ids the backend refuses to describe."""

    contents = await actor.get_container_contents(container_id)
    if isinstance(contents, Err):
        logger.warning("Could not list container %s: %s", container_id, contents.message)
        return []

    items: list[Item] = []
    for child_id in contents.value:
        res = await actor.get_item(child_id)
        if isinstance(res, Ok):
            items.append(res.value)
        else:
            logger.warning("Could not load item %s in container %s: %s", child_id, container_id, res.message)
    return items


def _name_matches(item: Item, norm: str) -> bool:
    return item.name.casefold().startswith(norm)


async def _search_depth_first(
    actor: RemoteActor,
    items: Sequence[Item],
    norm: str,
    visited: set[int],
) -> Item | None:
    for item in items:
        if item.id in visited:
            continue
        visited.add(item.id)

        if _name_matches(item, norm):
            return item
        if item.is_container and item.is_open:
            children = await load_container_items(actor, item.id)
            found = await _search_depth_first(actor, children, norm, visited)
            if found is not None:
                return found
    return None


async def resolve_item(
    token: str,
    *,
    actor: RemoteActor,
    room_id: int | None = None,
    include_room: bool = True,
) -> ResolvedItem:
    """Resolve a partial item name to an item id.

    Search order: inventory (descending into open containers depth-first), then, if
    allowed, the current room's floor. The first prefix match wins. If nothing matches
    and the token is a number it is used as an id as-is; the backend rejects bad ids.
    """

    norm = normalize_token(token)
    if not norm:
        raise UnresolvedReference("No matching item found for ''")

    inventory = await actor.get_items()
    if isinstance(inventory, Ok):
        found = await _search_depth_first(actor, inventory.value, norm, visited=set())
        if found is not None:
            return ResolvedItem(id=found.id, name=found.name)
    else:
        logger.warning("Inventory lookup failed: %s", inventory.message)

    if include_room and room_id is not None:
        floor = await actor.get_room_items(room_id)
        if isinstance(floor, Ok):
            for item in floor.value:
                if _name_matches(item, norm):
                    return ResolvedItem(id=item.id, name=item.name)
        else:
            logger.warning("Room item lookup failed: %s", floor.message)

    try:
        item_id = int(token.strip())
    except ValueError:
        raise UnresolvedReference(f"No matching item found for '{token.strip()}'") from None
    if item_id < 0:
        raise UnresolvedReference(f"No matching item found for '{token.strip()}'")
    return ResolvedItem(id=item_id)


def describe_item(item: Item) -> str:
    label = item.name
    if item.count > 1:
        label += f" (x{item.count})"
    if item.is_container:
        label += " (open)" if item.is_open else " (closed)"
    return label


async def describe_container_contents(
    actor: RemoteActor,
    container_id: int,
    *,
    depth: int = 1,
    indent: str = "  ",
) -> list[str]:
    """Lines for a container's contents, expanding open sub-containers.

    Stops at MAX_CONTAINER_DISPLAY_DEPTH so cyclic or very deep nesting still
    terminates. Past the cap nothing is printed, not even "(empty)".
    """

    if depth > MAX_CONTAINER_DISPLAY_DEPTH:
        return []

    children = await load_container_items(actor, container_id)
    if not children:
        return [f"{indent}(empty)"]

    lines: list[str] = []
    for child in children:
        lines.append(f"{indent}{describe_item(child)}")
        if child.is_container and child.is_open:
            lines.extend(
                await describe_container_contents(actor, child.id, depth=depth + 1, indent=indent + "  ")
            )
    return lines

"""Queue building for quiz sessions.

Every session draws a fresh, uniformly shuffled order over the whole deck,
optionally cut down to a maximum number of cards. No ordering state is
persisted between sessions.
"""

import logging
import random
from collections.abc import Iterable

from backend.errors import InvalidInputError

logger = logging.getLogger(__name__)


def build_queue(
    card_ids: Iterable[int],
    max_count: int | None = None,
    rng: random.Random | None = None,
) -> list[int]:
    """Return a random permutation of card ids, truncated to ``max_count``.

    Args:
        card_ids: Identifiers of the cards to draw from.
        max_count: Maximum queue length (None means every card).
        rng: Random source; pass a seeded ``random.Random`` for a
            reproducible order.

    Returns:
        The shuffled ids, without repeats.
    """
    if max_count is not None and max_count < 0:
        raise InvalidInputError(f"max_count cannot be negative, got {max_count}")

    rng = rng or random.Random()
    # Sort first so the order depends only on the rng, never on mapping order.
    queue = sorted(set(card_ids))
    rng.shuffle(queue)

    if max_count is not None and max_count < len(queue):
        queue = queue[:max_count]

    logger.debug("Built queue of %d cards", len(queue))
    return queue

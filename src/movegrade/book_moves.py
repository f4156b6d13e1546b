"""Opening-book override for early moves."""

from __future__ import annotations

from collections.abc import Collection

from movegrade import classification_thresholds as t
from movegrade.domain.game_phase import GamePhase
from movegrade.MoveFacts import MoveFacts


def is_book_move(facts: MoveFacts, book_moves: Collection[str] | None = None) -> bool:
    """Return True when the move should be labelled ``book``.

    With known book moves for the position the answer is membership. Without
    them, a near-equal, material-neutral top-line move in the opening counts.
    """
    if facts.phase is not GamePhase.OPENING:
        return False
    if book_moves:
        return facts.move in book_moves
    return (
        facts.is_top_candidate
        and facts.eval_diff <= t.BOOK_MAX_LOSS
        and facts.material_delta == 0
        and abs(facts.score_before) <= t.BOOK_MAX_ABS_SCORE
    )

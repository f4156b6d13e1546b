from __future__ import annotations

from enum import StrEnum

OPENING_PLY_LIMIT = 20
ENDGAME_MATERIAL_LIMIT = 14
OPENING_MULTIPLIER = 1.6


class GamePhase(StrEnum):
    OPENING = "opening"
    MIDDLEGAME = "middlegame"
    ENDGAME = "endgame"

    @classmethod
    def resolve(cls, ply: int, total_material: int) -> GamePhase:
        """Opening by ply count first, then endgame by remaining material."""
        if ply <= OPENING_PLY_LIMIT:
            return cls.OPENING
        if total_material <= ENDGAME_MATERIAL_LIMIT:
            return cls.ENDGAME
        return cls.MIDDLEGAME

    @property
    def threshold_multiplier(self) -> float:
        return OPENING_MULTIPLIER if self is GamePhase.OPENING else 1.0

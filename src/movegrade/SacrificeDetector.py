"""Detector for sound material sacrifices."""

from __future__ import annotations

from movegrade.BaseMotifDetector import BaseMotifDetector
from movegrade.MotifContext import MotifContext
from movegrade.MotifFinding import MotifFinding

SACRIFICE_MATERIAL = -3
SACRIFICE_EVAL_TOLERANCE = 50


class SacrificeDetector(BaseMotifDetector):
    """Material given up over the best line while the evaluation holds."""

    motif = "sacrifice"

    def detect(self, context: MotifContext) -> list[MotifFinding]:
        if context.lookahead_delta > SACRIFICE_MATERIAL:
            return []
        if context.score_after < context.score_before - SACRIFICE_EVAL_TOLERANCE:
            return []
        return self.finding(context.move.to_square)

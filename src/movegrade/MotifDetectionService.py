"""Coordinate motif detectors and normalize findings."""

from __future__ import annotations

from collections.abc import Iterable

from movegrade.BaseMotifDetector import BaseMotifDetector
from movegrade.ForkDetector import ForkDetector
from movegrade.MotifContext import MotifContext
from movegrade.MotifFinding import MotifFinding
from movegrade.PinDetector import PinDetector
from movegrade.SacrificeDetector import SacrificeDetector
from movegrade.SkewerDetector import SkewerDetector

LINE_MOTIFS = frozenset({"fork", "pin", "skewer"})


class MotifDetectionService:
    """Run every detector and return each motif once, in detector order."""

    def __init__(self, detectors: Iterable[BaseMotifDetector] | None = None) -> None:
        self._detectors = tuple(detectors) if detectors is not None else default_detectors()

    def detect(self, context: MotifContext) -> list[MotifFinding]:
        findings: list[MotifFinding] = []
        seen: set[str] = set()
        for detector in self._detectors:
            for finding in detector.detect(context):
                if finding.motif in seen:
                    continue
                seen.add(finding.motif)
                findings.append(finding)
        return findings

    def motifs(self, context: MotifContext) -> list[str]:
        return [finding.motif for finding in self.detect(context)]


def default_detectors() -> tuple[BaseMotifDetector, ...]:
    return (ForkDetector(), PinDetector(), SkewerDetector(), SacrificeDetector())

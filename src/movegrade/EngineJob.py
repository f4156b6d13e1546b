from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field

import chess

from movegrade.domain.evaluation import EvaluationResult, PvLine
from movegrade.engine_protocol import evaluation_from_lines, pv_line_from_info
from movegrade.errors import MovegradeError

UpdateCallback = Callable[[PvLine], None]


@dataclass(slots=True)
class EngineJob:
    """One outstanding search, correlated by ``job_id``.

    Keeps the latest line per multipv rank while the engine streams updates.
    """

    job_id: str
    fen: str
    multipv: int
    on_update: UpdateCallback | None = None
    lines_by_rank: dict[int, PvLine] = field(default_factory=dict)
    rejection: MovegradeError | None = None

    def record(self, info: Mapping[str, object]) -> PvLine | None:
        if info.get("lowerbound") or info.get("upperbound"):
            return None
        line = pv_line_from_info(info)
        if line is None or line.rank > self.multipv:
            return None
        self.lines_by_rank[line.rank] = line
        if self.on_update is not None:
            self.on_update(line)
        return line

    def reject(self, error: MovegradeError) -> None:
        if self.rejection is None:
            self.rejection = error

    def result(self, best_move: chess.Move | str | None) -> EvaluationResult:
        return evaluation_from_lines(self.lines_by_rank, best_move, self.multipv)

import chess
import pytest

from movegrade.ForkDetector import ForkDetector
from movegrade.MotifContext import MotifContext
from movegrade.MotifDetectionService import MotifDetectionService
from movegrade.PinDetector import PinDetector
from movegrade.SacrificeDetector import SacrificeDetector
from movegrade.SkewerDetector import SkewerDetector


def _context(fen: str, uci: str, **scores) -> MotifContext:
    board = chess.Board(fen)
    move = chess.Move.from_uci(uci)
    after = board.copy(stack=False)
    after.push(move)
    return MotifContext(
        board_before=board,
        board_after=after,
        move=move,
        mover_color=board.turn,
        **scores,
    )


FORK = ("3q3k/8/8/6N1/8/8/8/4K3 w - - 0 1", "g5f7")
PIN = ("4k3/8/2n5/8/8/8/8/4KB2 w - - 0 1", "f1b5")
SKEWER = ("4q3/8/8/4k3/8/8/8/K6R w - - 0 1", "h1e1")
QUIET = ("4k3/8/8/8/8/8/4P3/4K3 w - - 0 1", "e2e3")


def test_knight_fork_on_king_and_queen() -> None:
    findings = ForkDetector().detect(_context(*FORK))

    assert [finding.motif for finding in findings] == ["fork"]
    assert findings[0].square == chess.F7


def test_bishop_pins_knight_to_king() -> None:
    findings = PinDetector().detect(_context(*PIN))

    assert [finding.motif for finding in findings] == ["pin"]


def test_rook_check_skewers_queen_behind_king() -> None:
    findings = SkewerDetector().detect(_context(*SKEWER))

    assert [finding.motif for finding in findings] == ["skewer"]


@pytest.mark.parametrize(
    "detector",
    [ForkDetector(), PinDetector(), SkewerDetector(), SacrificeDetector()],
)
def test_quiet_move_has_no_motif(detector) -> None:
    assert detector.detect(_context(*QUIET)) == []


def test_sacrifice_needs_material_and_a_holding_evaluation() -> None:
    detector = SacrificeDetector()

    sound = _context(*QUIET, score_before=40, score_after=20, lookahead_delta=-3)
    unsound = _context(*QUIET, score_before=40, score_after=-60, lookahead_delta=-3)
    cheap = _context(*QUIET, score_before=40, score_after=40, lookahead_delta=-2)

    assert [finding.motif for finding in detector.detect(sound)] == ["sacrifice"]
    assert detector.detect(unsound) == []
    assert detector.detect(cheap) == []


def test_service_reports_each_motif_once_in_detector_order() -> None:
    service = MotifDetectionService([SacrificeDetector(), ForkDetector(), SacrificeDetector()])
    context = _context(*FORK, score_before=0, score_after=0, lookahead_delta=-3)

    assert service.motifs(context) == ["sacrifice", "fork"]

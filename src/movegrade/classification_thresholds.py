"""Centipawn thresholds used by the move classifier.

All values are from the mover's perspective. Loss thresholds are scaled by the
phase multiplier; the remaining values are fixed.
"""

BEST_TOLERANCE = 5
GOOD_THRESHOLD = 15
INACCURACY_THRESHOLD = 40
MISTAKE_THRESHOLD = 100
BLUNDER_THRESHOLD = 300

MATE_SLIP_TOLERANCE = 3
FLIP_THRESHOLD = 120
CLEARLY_WINNING = 200
MODERATELY_AHEAD = 100
CLEARLY_LOSING = -200
LOSING_AFTER_MAJOR_LOSS = -150
NEAR_EQUAL = 50
SOUND_AFTER = -50
MAJOR_MATERIAL_LOSS = -5
PIECE_SACRIFICE = -3
LESSER_SACRIFICE = -1

BRILLIANT_GAP = 150
OVERWHELMING = 700
STANDOUT_ADVANTAGE = 200
ONLY_MOVE_GAP = 150
ONLY_MOVE_SECOND_LINE = -100
ONLY_MOVE_AFTER = -100
CONVERSION_AFTER = 150
CONVERSION_GAP = 100
GREAT_SWING = 120
COMPLEX_POSITION = 300

MISSED_FLAG_THRESHOLD = 150

BOOK_MAX_LOSS = 10
BOOK_MAX_ABS_SCORE = 80

LOOKAHEAD_PLIES = 4

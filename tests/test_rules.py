from chroma_blocks.game import ScoringRules


def _apply(score=0.0, combo=0, streak=0, k=4, colors=0, lines=0, length=8, hand=3):
    return ScoringRules().apply(score, combo, streak, k, colors, lines, length, hand)


def test_placement_reward_and_drought():
    update = _apply(score=10, k=4)
    assert update.score == 14
    assert update.gained == 4
    assert update.combo == 0
    assert update.no_break_streak == 1


def test_combo_survives_short_drought_and_resets_after_a_hand():
    update = _apply(combo=3, streak=1, hand=3)
    assert update.combo == 3
    assert update.no_break_streak == 2
    update = _apply(combo=3, streak=2, hand=3)
    assert update.combo == 0
    assert update.no_break_streak == 3
    # the streak keeps counting after the reset
    update = _apply(combo=0, streak=3, hand=3)
    assert update.no_break_streak == 4


def test_color_match_score():
    update = _apply(k=2, colors=3)
    assert update.combo == 1
    assert update.no_break_streak == 0
    # 2 for placement, 3 * 2 * (1 / 2) for the match
    assert update.score == 5


def test_line_score_uses_board_length_and_piece_size():
    update = _apply(k=4, lines=1, length=8)
    assert update.combo == 1
    assert update.score == 4 + 1 * 8 * 0.5 * 4


def test_colors_scored_before_lines():
    update = _apply(combo=1, streak=2, k=2, colors=6, lines=2, length=10)
    # color: combo 1 -> 3, +6*2*1.5; lines: combo 3 -> 5, +2*10*2.5*2
    assert update.combo == 5
    assert update.no_break_streak == 0
    assert update.score == 2 + 18 + 100


def test_odd_combo_gives_fractional_score():
    update = _apply(k=3, lines=1, length=9)
    assert update.score == 3 + 1 * 9 * 0.5 * 3


def test_custom_rules():
    rules = ScoringRules(color_group_size=4, color_block_points=1, combo_divisor=1)
    update = rules.apply(0, 0, 0, 2, 8, 0, 8, 3)
    assert update.combo == 2
    assert update.score == 2 + 8 * 1 * 2

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ScoreUpdate:
    score: float
    combo: int
    no_break_streak: int
    gained: float


@dataclass
class ScoringRules:
    color_group_size: int = 3
    color_block_points: int = 2
    combo_divisor: float = 2.0

    def apply(
        self,
        score: float,
        combo: int,
        no_break_streak: int,
        blocks_placed: int,
        color_blocks_removed: int,
        lines_broken: int,
        board_length: int,
        hand_size: int,
    ) -> ScoreUpdate:
        """Score one placement.

        Placement reward first, then color matches, then lines (which use the
        combo already raised by the color matches). A move that clears
        nothing extends the drought; once the drought reaches a full hand the
        combo drops to zero.
        """
        start = score
        score += blocks_placed

        if color_blocks_removed > 0:
            no_break_streak = 0
            combo += color_blocks_removed // self.color_group_size
            score += color_blocks_removed * self.color_block_points * (combo / self.combo_divisor)

        if lines_broken > 0:
            no_break_streak = 0
            combo += lines_broken
            score += lines_broken * board_length * (combo / self.combo_divisor) * blocks_placed
        elif color_blocks_removed == 0:
            no_break_streak += 1
            if no_break_streak >= hand_size:
                combo = 0

        return ScoreUpdate(score=score, combo=combo, no_break_streak=no_break_streak, gained=score - start)

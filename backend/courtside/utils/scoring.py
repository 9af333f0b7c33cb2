"""
Assignment Scorer: skill balance + repeat-pairing avoidance, lower is better.

pair_score = |level_a - level_b| + repeat_penalty + jitter

- repeat_penalty applies from round 2 onward, heavier for partners
  than for opponents
- jitter is a small draw from the caller's random.Random so identical
  inputs can produce different, still near-optimal, outcomes

The random source is always passed in; nothing here touches the global
random state.
"""

from __future__ import annotations

import random
import time
from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence, Set, Tuple, TypeVar

PARTNER_REPEAT_PENALTY = 6.0
OPPONENT_REPEAT_PENALTY = 3.0

# Cross-team opponent scores count for less than partner balance
OPPONENT_WEIGHT = 0.5

JITTER_SCALE = 0.5

TOP_CANDIDATES = 3
RANK_WEIGHTS = (3, 2, 1)

T = TypeVar("T")


def new_rng(seed: Optional[int] = None) -> random.Random:
    """Fresh random source for one invocation; clock-seeded unless *seed* is given."""
    if seed is None:
        seed = time.time_ns()
    return random.Random(seed)


class PairHistory:
    """
    Unordered player pairs that already shared a match earlier in the session.

    Built once per auto-arrange call from strictly earlier rounds; team
    side is ignored when recording.
    """

    def __init__(self):
        self._pairs: Set[FrozenSet[int]] = set()

    @classmethod
    def from_groups(cls, groups: Iterable[Sequence[int]]) -> "PairHistory":
        history = cls()
        for group in groups:
            history.record(group)
        return history

    def record(self, player_ids: Sequence[int]) -> None:
        ids = list(player_ids)
        for i in range(len(ids)):
            for j in range(i + 1, len(ids)):
                if ids[i] != ids[j]:
                    self._pairs.add(frozenset((ids[i], ids[j])))

    def repeated(self, player_a: int, player_b: int) -> bool:
        return frozenset((player_a, player_b)) in self._pairs

    def __len__(self) -> int:
        return len(self._pairs)


def pair_score(
    level_a: int,
    level_b: int,
    is_partner: bool,
    repeated_before: bool,
    rng: random.Random,
    round_number: int = 1,
) -> float:
    penalty = 0.0
    if repeated_before and round_number >= 2:
        penalty = PARTNER_REPEAT_PENALTY if is_partner else OPPONENT_REPEAT_PENALTY
    return abs(level_a - level_b) + penalty + rng.random() * JITTER_SCALE


def split_score(
    team1: Sequence[int],
    team2: Sequence[int],
    levels: Dict[int, int],
    history: PairHistory,
    rng: random.Random,
    round_number: int = 1,
) -> float:
    """
    Score a 2-vs-2 split.

    Both within-team partner scores, plus the four cross-team opponent
    scores down-weighted, plus the raw level-sum imbalance between teams.
    """
    total = 0.0
    for team in (team1, team2):
        a, b = team
        total += pair_score(levels[a], levels[b], True, history.repeated(a, b), rng, round_number)

    opponents = 0.0
    for a in team1:
        for b in team2:
            opponents += pair_score(levels[a], levels[b], False, history.repeated(a, b), rng, round_number)
    total += OPPONENT_WEIGHT * opponents

    total += abs(sum(levels[p] for p in team1) - sum(levels[p] for p in team2))
    return total


def possible_splits(four: Sequence[int]) -> List[Tuple[List[int], List[int]]]:
    """The three distinct 2-vs-2 splits of four players."""
    a, b, c, d = four
    return [([a, b], [c, d]), ([a, c], [b, d]), ([a, d], [b, c])]


def pick_from_top(scored: Sequence[Tuple[float, T]], rng: random.Random, top_n: int = TOP_CANDIDATES) -> T:
    """Weighted draw among the *top_n* lowest scores (3:2:1 by rank)."""
    if not scored:
        raise ValueError("pick_from_top needs at least one candidate")
    ranked = sorted(scored, key=lambda item: item[0])[:top_n]
    weights = RANK_WEIGHTS[: len(ranked)]
    return rng.choices([item for _, item in ranked], weights=weights, k=1)[0]


def best_split(
    four: Sequence[int],
    levels: Dict[int, int],
    history: PairHistory,
    rng: random.Random,
    round_number: int = 1,
) -> List[int]:
    """Pick a split for four players; returns team1 + team2 in slot order."""
    scored = [
        (split_score(team1, team2, levels, history, rng, round_number), team1 + team2)
        for team1, team2 in possible_splits(four)
    ]
    return pick_from_top(scored, rng)

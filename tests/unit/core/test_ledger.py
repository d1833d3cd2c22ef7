"""Unit tests for applying and reversing matches."""

from datetime import datetime, timezone

import pytest

from ladderkeeper.errors import InvalidInputError
from ladderkeeper.ledger import record_match, reverse_match
from ladderkeeper.models import Competitor

pytestmark = pytest.mark.unit

T0 = datetime(2024, 3, 1, tzinfo=timezone.utc)


def make_competitor(competitor_id: int, rating: float = 1000.0, **kwargs) -> Competitor:
    """Factory to create a Competitor for testing."""
    return Competitor(id=competitor_id, name=f"player-{competitor_id}", rating=rating, **kwargs)


class TestRecordMatch:
    """Tests for record_match."""

    def test_winner_gains_loser_loses(self):
        a, b = make_competitor(1), make_competitor(2)

        match, new_a, new_b = record_match(a, b, 11, 5, T0)

        assert match.winner_id == 1
        assert match.rating_a_before == 1000.0
        assert match.rating_a_after == 1023.0
        assert match.rating_b_after == 977.0
        assert match.delta_a == 23.0
        assert match.delta_b == -23.0
        assert match.created_at == T0
        assert new_a.rating == 1023.0
        assert new_b.rating == 977.0

    def test_counters_updated(self):
        """Win/loss counters and total matches move with the result."""
        a, b = make_competitor(1), make_competitor(2)

        _, new_a, new_b = record_match(a, b, 2, 7, T0)

        assert (new_a.wins, new_a.losses, new_a.draws, new_a.total_matches) == (0, 1, 0, 1)
        assert (new_b.wins, new_b.losses, new_b.draws, new_b.total_matches) == (1, 0, 0, 1)

    def test_draw_has_no_winner(self):
        a, b = make_competitor(1), make_competitor(2)

        match, new_a, new_b = record_match(a, b, 4, 4, T0)

        assert match.winner_id is None
        assert new_a.draws == 1
        assert new_b.draws == 1

    def test_inputs_not_mutated(self):
        """record_match returns new objects."""
        a, b = make_competitor(1), make_competitor(2)
        record_match(a, b, 11, 5, T0)
        assert a.rating == 1000.0
        assert a.total_matches == 0

    def test_k_factor_uses_matches_before(self):
        """A competitor on their 10th match still uses K=40."""
        a = make_competitor(1, total_matches=9)
        b = make_competitor(2, total_matches=9)

        match, _, _ = record_match(a, b, 11, 5, T0)

        assert match.delta_a == 23.0

    def test_self_match_rejected(self):
        a = make_competitor(1)
        with pytest.raises(InvalidInputError):
            record_match(a, a, 1, 0, T0)

    def test_negative_score_rejected(self):
        with pytest.raises(InvalidInputError):
            record_match(make_competitor(1), make_competitor(2), -1, 0, T0)


class TestReverseMatch:
    """Tests for reverse_match."""

    @pytest.mark.parametrize(("score_a", "score_b"), [(11, 5), (3, 9), (6, 6)])
    def test_exact_inverse(self, score_a, score_b):
        """Reversal restores the competitors exactly as they were."""
        a = make_competitor(1, rating=1040.5, wins=3, losses=2, draws=1, total_matches=6)
        b = make_competitor(2, rating=987.25, wins=1, losses=4, draws=1, total_matches=6)

        match, played_a, played_b = record_match(a, b, score_a, score_b, T0)
        restored_a, restored_b = reverse_match(match, played_a, played_b)

        assert restored_a == a
        assert restored_b == b

    def test_uses_stored_before_ratings(self):
        """Reversal does not re-run the formula: later drift is discarded."""
        a, b = make_competitor(1), make_competitor(2)
        match, played_a, played_b = record_match(a, b, 11, 5, T0)
        drifted_a = played_a.model_copy(update={"rating": 1100.0})

        restored_a, _ = reverse_match(match, drifted_a, played_b)

        assert restored_a.rating == 1000.0

    def test_wrong_competitors_rejected(self):
        a, b, c = make_competitor(1), make_competitor(2), make_competitor(3)
        match, played_a, _ = record_match(a, b, 11, 5, T0)

        with pytest.raises(InvalidInputError):
            reverse_match(match, played_a, c)

    def test_unapplied_match_rejected(self):
        """Reversing against competitors with no recorded matches fails."""
        a, b = make_competitor(1), make_competitor(2)
        match, _, _ = record_match(a, b, 11, 5, T0)

        with pytest.raises(InvalidInputError):
            reverse_match(match, a, b)

"""Tests for severity normalisation."""

import pytest

from osv_audit.core.severity import (
    CRITICAL,
    HIGH,
    LOW,
    MEDIUM,
    NONE,
    UNKNOWN,
    highest_label,
    highest_score,
    label_from_score,
    score_from_raw,
)


class TestScoreFromRaw:
    """Test raw severity conversion."""

    def test_numeric_scores(self):
        assert score_from_raw("9.8") == 9.8
        assert score_from_raw("7") == 7.0

    @pytest.mark.parametrize("vector,score", [
        ("CVSS:3.1/AV:N/AC:L/PR:N/UI:N/S:U/C:H/I:H/A:H", 9.8),
        ("CVSS:3.1/AV:N/AC:L/PR:N/UI:N/S:U/C:H/I:H/A:N", 8.5),
        ("CVSS:3.1/AV:N/AC:L/PR:N/UI:N/S:U/C:H/I:N/A:N", 7.5),
        ("CVSS:3.1/AV:N/AC:L/PR:N/UI:N/S:U/C:L/I:N/A:N", 4.0),
        ("CVSS:3.1/AV:N/AC:L/PR:N/UI:N/S:U/C:N/I:H/A:N", 5.0),
    ])
    def test_vector_heuristic(self, vector, score):
        assert score_from_raw(vector) == score

    def test_other_forms(self):
        assert score_from_raw("HIGH") is None
        assert score_from_raw("") is None
        assert score_from_raw(None) is None


class TestLabelFromScore:
    """Test score thresholds."""

    @pytest.mark.parametrize("score,label", [
        (10.0, CRITICAL),
        (9.0, CRITICAL),
        (8.9, HIGH),
        (7.0, HIGH),
        (6.9, MEDIUM),
        (4.0, MEDIUM),
        (3.9, LOW),
        (0.1, LOW),
        (0.0, NONE),
        (None, None),
    ])
    def test_thresholds(self, score, label):
        assert label_from_score(score) == label


class TestHighest:
    """Test aggregation over several severity entries."""

    def test_highest_score_wins(self):
        raw = ["5.3", "CVSS:3.1/AV:N/AC:L/PR:N/UI:N/S:U/C:H/I:H/A:H", "not-a-score"]
        assert highest_score(raw) == 9.8

    def test_highest_score_none_when_unresolvable(self):
        assert highest_score(["moderate"]) is None
        assert highest_score([]) is None

    def test_highest_label(self):
        assert highest_label(["LOW", "high", None, "MEDIUM"]) == HIGH
        assert highest_label(["NONE", "LOW"]) == LOW

    def test_highest_label_unknown(self):
        assert highest_label([None, "bogus"]) == UNKNOWN
        assert highest_label([]) == UNKNOWN

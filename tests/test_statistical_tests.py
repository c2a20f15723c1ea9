"""
Tests for statistical tests module.
"""

import math

import pytest
import numpy as np

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from netsig.validation.statistical_tests import (
    null_z_score,
    empirical_interval,
    summarize_null_distribution,
    bonferroni_correction,
    correct_p_values,
    fdr_correction,
)


class TestZScore:
    """Tests for z-scores against a null distribution."""

    def test_basic(self):
        """Test standardisation with the sample standard deviation."""
        assert null_z_score(4.0, [1.0, 2.0, 3.0]) == pytest.approx(2.0)

    def test_degenerate_distribution(self):
        """Test a null distribution without spread."""
        assert null_z_score(5.0, [5.0, 5.0]) == 0.0
        assert null_z_score(6.0, [5.0, 5.0]) == math.inf
        assert null_z_score(4.0, [5.0, 5.0]) == -math.inf


class TestIntervals:
    """Tests for empirical intervals and summaries."""

    def test_interval(self):
        """Test the central 90% interval."""
        lower, upper = empirical_interval(list(range(101)), level=0.9)
        assert lower == pytest.approx(5.0)
        assert upper == pytest.approx(95.0)

    def test_invalid_level(self):
        """Test that levels outside (0, 1) are rejected."""
        with pytest.raises(ValueError):
            empirical_interval([1.0, 2.0], level=1.5)

    def test_summary(self):
        """Test the summary of an extreme observed value."""
        np.random.seed(42)
        simulated = np.random.normal(0, 1, 500)
        summary = summarize_null_distribution(10.0, simulated)
        assert summary["outside_interval"] is True
        assert summary["z_score"] > 5
        assert summary["normal_p_value"] < 1e-6
        assert summary["ci_lower"] < summary["ci_upper"]


class TestMultipleTesting:
    """Tests for multiple testing corrections."""

    def test_bonferroni_all_significant(self):
        """Test Bonferroni when all are significant."""
        p_values = [0.001, 0.002, 0.003]
        significant, adjusted = bonferroni_correction(p_values, alpha=0.05)
        assert all(significant)
        assert adjusted == pytest.approx([0.003, 0.006, 0.009])

    def test_bonferroni_none_significant(self):
        """Test Bonferroni when none are significant."""
        p_values = [0.1, 0.2, 0.5]
        significant, adjusted = bonferroni_correction(p_values, alpha=0.05)
        assert not any(significant)
        # Adjusted values are capped at 1
        assert adjusted[2] == 1.0

    def test_bonferroni_empty(self):
        """Test Bonferroni with no tests."""
        assert bonferroni_correction([]) == ([], [])

    def test_fdr_bh(self):
        """Test Benjamini-Hochberg adjusted p-values."""
        significant, adjusted = fdr_correction([0.01, 0.02, 0.03, 0.5], alpha=0.05)
        assert significant == [True, True, True, False]
        assert adjusted[0] == pytest.approx(0.04)
        assert adjusted[2] == pytest.approx(0.04)
        assert adjusted[3] == pytest.approx(0.5)

    def test_fdr_adjusted_monotone(self):
        """Test that adjusted p-values follow the order of the raw ones."""
        raw = [0.04, 0.001, 0.3, 0.02, 0.01]
        _, adjusted = fdr_correction(raw)
        order = np.argsort(raw)
        sorted_adjusted = np.array(adjusted)[order]
        assert np.all(np.diff(sorted_adjusted) >= 0)

    def test_fdr_by_is_stricter(self):
        """Test that Benjamini-Yekutieli adjusts more than BH."""
        raw = [0.01, 0.02, 0.03]
        _, bh = fdr_correction(raw, method="bh")
        _, by = fdr_correction(raw, method="by")
        assert all(b >= a for a, b in zip(bh, by))

    def test_fdr_unknown_method(self):
        """Test that unknown methods are rejected."""
        with pytest.raises(ValueError):
            fdr_correction([0.01], method="holm")

    def test_correct_p_values_by_name(self):
        """Test that corrections are dispatched by name."""
        raw = [0.01, 0.02, 0.03, 0.5]
        assert correct_p_values(raw, "fdr") == fdr_correction(raw)
        assert correct_p_values(raw, "bonferroni") == bonferroni_correction(raw)
        with pytest.raises(ValueError):
            correct_p_values(raw, "holm")

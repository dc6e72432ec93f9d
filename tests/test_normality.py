import unittest

import numpy as np

from hypothesis_verdicts.critical_values import ChiSquaredCriticalTable, chi_squared_critical_value
from hypothesis_verdicts.errors import InvalidInputError, UnsupportedDegreesOfFreedomError
from hypothesis_verdicts.normality import (
    estimate_normal_parameters,
    normal_theoretical_frequencies,
    run_normality_test,
)
from hypothesis_verdicts.normality.fitting import open_tail_ranges

EMPIRICAL = [7, 12, 49, 66, 83, 67, 23, 13]
THEORETICAL = [5, 9, 46, 60, 89, 81, 19, 11]
RANGES = [(0, 5), (5, 10), (10, 15), (15, 20), (20, 25), (25, 30), (30, 35), (35, 40)]


class TestTheoreticalFrequencies(unittest.TestCase):
    def test_matching_frequencies_are_not_rejected(self):
        result = run_normality_test([5, 12, 18, 10, 5], [5.2, 11.8, 17.0, 11.0, 5.0], alpha=0.05)

        self.assertLess(result.statistic, 0.5)
        self.assertEqual(result.degrees_of_freedom, (4.0,))
        self.assertAlmostEqual(result.critical_value, chi_squared_critical_value(4, 0.05))
        self.assertTrue(result.not_rejected)
        self.assertEqual(result.decision, "Do not reject normality")
        self.assertEqual(result.notes, ())

    def test_externally_fitted_frequencies_lose_two_degrees_of_freedom(self):
        # Expected counts from a Normal fitted outside this library.
        result = run_normality_test(EMPIRICAL, THEORETICAL, alpha=0.05, estimated_parameters=2)

        self.assertAlmostEqual(result.statistic, 6.6256, places=3)
        self.assertEqual(result.degrees_of_freedom, (5.0,))
        self.assertAlmostEqual(result.critical_value, 11.0705, places=3)
        self.assertTrue(result.not_rejected)
        self.assertEqual(result.details["merged_bucket_count"], 8)

    def test_identical_frequencies_give_zero_statistic(self):
        result = run_normality_test(THEORETICAL, THEORETICAL)

        self.assertEqual(result.statistic, 0.0)
        self.assertTrue(result.not_rejected)

    def test_statistic_is_never_negative(self):
        rng = np.random.default_rng(7)
        for _ in range(20):
            observed = rng.integers(0, 40, size=6)
            expected = rng.uniform(5, 40, size=6)
            with self.subTest(observed=observed.tolist()):
                self.assertGreaterEqual(run_normality_test(observed, expected).statistic, 0.0)

    def test_poor_fit_is_rejected(self):
        result = run_normality_test([40, 2, 2, 2, 40], [10, 20, 26, 20, 10], alpha=0.05)

        self.assertTrue(result.rejected)
        self.assertEqual(result.decision, "Reject normality")
        self.assertLess(result.details["p_value"], 0.05)

    def test_statistic_equal_to_critical_value_is_not_rejected(self):
        statistic = run_normality_test(EMPIRICAL, THEORETICAL).statistic

        result = run_normality_test(EMPIRICAL, THEORETICAL, chi_squared_critical=lambda df, alpha: statistic)

        self.assertTrue(result.not_rejected)

    def test_sparse_buckets_are_merged(self):
        result = run_normality_test([1, 2, 20, 30, 20, 3, 0], [1.5, 2.5, 19.0, 30.0, 19.0, 2.5, 1.5], min_expected=5)

        buckets = result.details["buckets"]
        self.assertEqual(result.details["bucket_count"], 7)
        self.assertEqual([b.expected for b in buckets], [23.0, 30.0, 23.0])
        self.assertEqual([b.observed for b in buckets], [23.0, 30.0, 23.0])
        self.assertEqual([b.label for b in buckets], ["1 + 2 + 3", "4", "5 + 6 + 7"])
        self.assertEqual(result.degrees_of_freedom, (2.0,))
        self.assertEqual(len(result.notes), 1)
        self.assertIn("Merged 7 buckets into 3", result.notes[0])

    def test_zero_expected_bucket_is_merged_away(self):
        result = run_normality_test([1, 9, 10, 10, 10], [0, 10, 10, 10, 10])

        self.assertEqual(result.details["merged_bucket_count"], 4)
        self.assertEqual(result.degrees_of_freedom, (3.0,))

    def test_zero_expected_bucket_without_merging_fails(self):
        with self.assertRaises(InvalidInputError):
            run_normality_test([1, 9, 10, 10, 10], [0, 10, 10, 10, 10], min_expected=0)

    def test_mismatched_totals_are_noted(self):
        result = run_normality_test([10, 20, 30, 20], [10, 20, 30, 40])

        self.assertEqual(len(result.notes), 1)
        self.assertIn("sum to", result.notes[0])

    def test_length_mismatch_fails(self):
        with self.assertRaises(InvalidInputError):
            run_normality_test([1, 2, 3], [1, 2])

    def test_label_length_mismatch_fails(self):
        with self.assertRaises(InvalidInputError):
            run_normality_test(EMPIRICAL, THEORETICAL, labels=["a", "b"])

    def test_negative_counts_fail(self):
        with self.assertRaises(InvalidInputError):
            run_normality_test([5, -1, 10, 10], [5, 5, 10, 10])

    def test_needs_exactly_one_theoretical_input(self):
        with self.assertRaises(InvalidInputError):
            run_normality_test(EMPIRICAL)
        with self.assertRaises(InvalidInputError):
            run_normality_test(EMPIRICAL, THEORETICAL, ranges=RANGES)

    def test_empty_empirical_distribution_fails(self):
        with self.assertRaises(InvalidInputError):
            run_normality_test([0, 0, 0, 0], [5, 5, 5, 5])

    def test_too_few_buckets_fail(self):
        with self.assertRaises(UnsupportedDegreesOfFreedomError):
            run_normality_test([10, 12, 11], [11, 11, 11], estimated_parameters=2)

    def test_table_without_degrees_of_freedom_fails(self):
        table = ChiSquaredCriticalTable.standard(max_df=3)

        with self.assertRaises(UnsupportedDegreesOfFreedomError):
            run_normality_test(EMPIRICAL, THEORETICAL, chi_squared_critical=table)

    def test_invalid_significance_fails(self):
        with self.assertRaises(InvalidInputError):
            run_normality_test(EMPIRICAL, THEORETICAL, alpha=1.0)


class TestValueRanges(unittest.TestCase):
    def test_degrees_of_freedom_without_merging(self):
        result = run_normality_test(EMPIRICAL, ranges=RANGES, alpha=0.05, open_tails=True)

        self.assertEqual(result.details["merged_bucket_count"], len(RANGES))
        self.assertEqual(result.degrees_of_freedom, (float(len(RANGES) - 3),))
        self.assertEqual(result.details["estimated_parameters"], 2)
        self.assertAlmostEqual(result.details["expected_total"], sum(EMPIRICAL))
        self.assertAlmostEqual(result.details["mean"], 21.3125)
        self.assertEqual(result.notes, ())

    def test_fitted_normal_on_five_buckets_is_not_rejected(self):
        # Both fitted tail buckets fall just below 5; merging both would leave df = 0.
        counts = [5, 12, 18, 10, 5]
        ranges = [(0, 10), (10, 20), (20, 30), (30, 40), (40, 50)]

        for open_tails in (True, False):
            with self.subTest(open_tails=open_tails):
                result = run_normality_test(counts, ranges=ranges, alpha=0.05, open_tails=open_tails)

                self.assertLess(result.statistic, 1.0)
                self.assertEqual(result.degrees_of_freedom, (1.0,))
                self.assertEqual(result.details["merged_bucket_count"], 4)
                self.assertTrue(result.not_rejected)
                self.assertAlmostEqual(result.details["mean"], 24.6)
                self.assertTrue(any("no degrees of freedom" in note for note in result.notes))

    def test_agrees_with_theoretical_mode(self):
        counts = np.array(EMPIRICAL, dtype=float)
        mu, sigma = estimate_normal_parameters(counts, ranges=RANGES)
        expected = normal_theoretical_frequencies(open_tail_ranges(RANGES), counts.sum(), mu, sigma)

        from_ranges = run_normality_test(EMPIRICAL, ranges=RANGES, open_tails=True)
        from_frequencies = run_normality_test(EMPIRICAL, expected, estimated_parameters=2)

        self.assertAlmostEqual(from_ranges.statistic, from_frequencies.statistic)
        self.assertEqual(from_ranges.degrees_of_freedom, from_frequencies.degrees_of_freedom)
        self.assertEqual(from_ranges.not_rejected, from_frequencies.not_rejected)

    def test_bucket_labels_follow_ranges(self):
        result = run_normality_test(EMPIRICAL, ranges=RANGES, open_tails=True)

        labels = [b.label for b in result.details["buckets"]]
        self.assertEqual(labels[0], "(-inf, 5)")
        self.assertEqual(labels[1], "[5, 10)")
        self.assertEqual(labels[-1], "[35, +inf)")

    def test_closed_ranges_note_missing_probability(self):
        result = run_normality_test(EMPIRICAL, ranges=RANGES)

        self.assertLess(result.details["expected_total"], sum(EMPIRICAL))
        self.assertTrue(any("outside the given ranges" in note for note in result.notes))

    def test_open_bounds_in_ranges(self):
        ranges = [(-np.inf, 5)] + RANGES[1:-1] + [(35, np.inf)]

        explicit = run_normality_test(EMPIRICAL, ranges=ranges)
        flagged = run_normality_test(EMPIRICAL, ranges=RANGES, open_tails=True)

        # Open-tail midpoints reproduce the closed midpoints for equal widths.
        self.assertAlmostEqual(explicit.details["mean"], flagged.details["mean"])
        self.assertAlmostEqual(explicit.statistic, flagged.statistic)

    def test_raw_sample_is_used_for_parameters(self):
        sample = [1.0, 2.0, 2.5, 3.0, 4.0, 4.5, 5.0, 6.0]
        counts = [2, 2, 2, 2]
        ranges = [(0, 2.25), (2.25, 3.5), (3.5, 4.75), (4.75, 7)]

        result = run_normality_test(counts, ranges=ranges, sample=sample, min_expected=0, open_tails=True)

        self.assertAlmostEqual(result.details["mean"], float(np.mean(sample)))
        self.assertAlmostEqual(result.details["std"], float(np.std(sample, ddof=1)))

    def test_sample_size_must_match_counts(self):
        with self.assertRaises(InvalidInputError):
            run_normality_test([2, 2, 2, 2], ranges=RANGES[:4], sample=[1.0, 2.0, 3.0])

    def test_range_count_mismatch_fails(self):
        with self.assertRaises(InvalidInputError):
            run_normality_test(EMPIRICAL, ranges=RANGES[:-1])

    def test_overlapping_ranges_fail(self):
        with self.assertRaises(InvalidInputError):
            run_normality_test([10, 10, 10, 10], ranges=[(0, 5), (4, 10), (10, 15), (15, 20)])

    def test_estimated_parameters_cannot_be_overridden(self):
        with self.assertRaises(InvalidInputError):
            run_normality_test(EMPIRICAL, ranges=RANGES, estimated_parameters=1)

    def test_single_occupied_bucket_cannot_be_fitted(self):
        with self.assertRaises(InvalidInputError):
            run_normality_test([0, 30, 0, 0], ranges=RANGES[:4])


if __name__ == "__main__":
    unittest.main()

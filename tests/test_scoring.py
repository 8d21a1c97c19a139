"""
Unit tests for score aggregation.
"""

import unittest

from review.schema import ScoreEntry
from review.scoring import (
    MAX_CRITERION_SCORE,
    MAX_TOTAL_SCORE,
    SCORE_CRITERIA,
    average_score,
    criteria_total,
    find_reviewer_score,
    is_valid_total_score,
    replace_reviewer_score,
    score_entry_from_form,
    summarize_scores,
    validate_criteria,
)


def _score(admin_id, total, **extra):
    return ScoreEntry(admin_id=admin_id, total_score=total, **extra)


class TestScoring(unittest.TestCase):

    def test_average_of_empty_list_is_zero(self):
        self.assertEqual(average_score([]), 0)
        summary = summarize_scores([])
        self.assertEqual(summary.average_score, 0)
        self.assertEqual(summary.count, 0)

    def test_average_is_straight_mean(self):
        scores = [_score("r1", 10), _score("r2", 30)]
        self.assertEqual(average_score(scores), 20)

        summary = summarize_scores(scores)
        self.assertEqual(summary.average_score, 20)
        self.assertEqual(summary.count, 2)

    def test_fractional_average(self):
        scores = [_score("r1", 31), _score("r2", 32), _score("r3", 32)]
        self.assertAlmostEqual(average_score(scores), 31.6667, places=3)

    def test_find_reviewer_score(self):
        scores = [_score("r1", 10), _score("r2", 30)]
        self.assertEqual(find_reviewer_score(scores, "r2").total_score, 30)
        self.assertIsNone(find_reviewer_score(scores, "r3"))
        self.assertIsNone(find_reviewer_score(scores, None))

    def test_replace_keeps_one_entry_per_reviewer(self):
        scores = [_score("r1", 10), _score("r2", 30)]
        updated = replace_reviewer_score(scores, _score("r1", 25))

        self.assertEqual([s.admin_id for s in updated], ["r2", "r1"])
        self.assertEqual(updated[-1].total_score, 25)
        # input untouched
        self.assertEqual([s.total_score for s in scores], [10, 30])

    def test_replace_appends_new_reviewer(self):
        updated = replace_reviewer_score([_score("r1", 10)], _score("r2", 5))
        self.assertEqual(len(updated), 2)

    def test_total_score_bounds(self):
        self.assertTrue(is_valid_total_score(0))
        self.assertTrue(is_valid_total_score(40))
        self.assertTrue(is_valid_total_score(22.5))
        self.assertFalse(is_valid_total_score(-1))
        self.assertFalse(is_valid_total_score(40.5))

    def test_sub_scores_kept_as_extras(self):
        entry = _score("r1", 30, technical=8, story=9, note="not a number")
        self.assertEqual(entry.sub_scores, {"technical": 8, "story": 9})

    def test_sub_scores_dump_with_camel_case_fields(self):
        entry = _score("r1", 30, technical=8)
        dumped = entry.model_dump(by_alias=True, exclude_none=True)
        self.assertEqual(dumped["adminId"], "r1")
        self.assertEqual(dumped["totalScore"], 30)
        self.assertEqual(dumped["technical"], 8)


class TestScoreForm(unittest.TestCase):

    CRITERIA = {"technical": 8, "story": 7, "creativity": 9, "impact": 6}

    def test_criteria_sum_to_total(self):
        entry = score_entry_from_form({**self.CRITERIA, "comments": "Strong"}, "r1", "Judge One")

        self.assertEqual(entry.total_score, 30)
        self.assertEqual(entry.sub_scores, {"technical": 8, "story": 7, "creativity": 9, "impact": 6})
        self.assertEqual(entry.comments, "Strong")
        self.assertEqual(entry.admin_name, "Judge One")

    def test_sent_total_is_replaced_by_criteria_sum(self):
        entry = score_entry_from_form({**self.CRITERIA, "totalScore": 40}, "r1")
        self.assertEqual(entry.total_score, 30)

    def test_criteria_from_form_strings(self):
        entry = score_entry_from_form({"technical": "8.5", "story": "7", "creativity": "9", "impact": "6"}, "r1")
        self.assertEqual(entry.total_score, 30.5)

    def test_partial_criteria_rejected(self):
        with self.assertRaises(ValueError):
            score_entry_from_form({"totalScore": 30, "technical": 8}, "r1")

    def test_non_numeric_criterion_rejected(self):
        for bad in ("lots", "", None, True, float("inf"), "nan"):
            with self.subTest(bad=bad), self.assertRaises(ValueError):
                score_entry_from_form({**self.CRITERIA, "story": bad}, "r1")

    def test_total_only_form(self):
        entry = score_entry_from_form({"totalScore": "25", "comments": "ok"}, "r1")
        self.assertEqual(entry.total_score, 25)
        self.assertEqual(entry.sub_scores, {})

    def test_missing_total_rejected(self):
        with self.assertRaises(ValueError):
            score_entry_from_form({"comments": "no score"}, "r1")

    def test_identity_comes_from_arguments(self):
        entry = score_entry_from_form({"totalScore": 20, "adminId": "intruder", "adminName": "Nobody", "bonus": 5}, "r1", "Judge One")

        self.assertEqual(entry.admin_id, "r1")
        self.assertEqual(entry.admin_name, "Judge One")
        self.assertEqual(entry.sub_scores, {})


class TestCriteriaValidation(unittest.TestCase):

    def test_full_matching_set_passes(self):
        validate_criteria(_score("r1", 30, technical=8, story=7, creativity=9, impact=6))
        validate_criteria(_score("r1", 30))

    def test_criterion_out_of_range(self):
        for value in (-1, 10.5):
            with self.subTest(value=value), self.assertRaises(ValueError):
                validate_criteria(_score("r1", 20, technical=value))

    def test_total_must_match_full_set(self):
        with self.assertRaises(ValueError):
            validate_criteria(_score("r1", 35, technical=8, story=7, creativity=9, impact=6))

    def test_criteria_total(self):
        self.assertEqual(criteria_total({"technical": 8, "story": 7.5, "bonus": 3}), 15.5)
        self.assertEqual(len(SCORE_CRITERIA) * MAX_CRITERION_SCORE, MAX_TOTAL_SCORE)


if __name__ == "__main__":
    unittest.main()

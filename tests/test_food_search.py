# -*- coding: utf-8 -*-

from __future__ import annotations

import unittest

from harufit.foods.search import rank, score_record, search


def _names(records, field="name_kor"):
    return [r.get(field) for r in records]


class TestFoodSearchScoring(unittest.TestCase):
    def test_score_table(self) -> None:
        record = {"name_eng": "apple pie", "brand": "orchard"}
        self.assertEqual(score_record({"name_eng": "apple"}, "apple", "name_eng"), 1000)
        self.assertEqual(score_record({"name_eng": "pie", "brand": "apple"}, "apple", "name_eng"), 900)
        self.assertEqual(score_record(record, "apple", "name_eng"), 800)
        self.assertEqual(score_record(record, "orch", "name_eng"), 700)
        self.assertEqual(score_record(record, "pie", "name_eng"), 600)
        self.assertEqual(score_record(record, "chard", "name_eng"), 500)
        self.assertEqual(score_record(record, "banana", "name_eng"), 0)

    def test_name_and_brand_compare_case_insensitively(self) -> None:
        self.assertEqual(score_record({"name_eng": "Greek Yogurt"}, "greek yogurt", "name_eng"), 1000)
        self.assertEqual(score_record({"name_eng": "x", "brand": "FAGE"}, "fage", "name_eng"), 900)

    def test_missing_and_non_string_fields(self) -> None:
        self.assertEqual(score_record({"name_eng": None, "brand": None}, "ab", "name_eng"), 0)
        self.assertEqual(score_record({"name_eng": 12345}, "234", "name_eng"), 600)


class TestFoodSearch(unittest.TestCase):
    def setUp(self) -> None:
        self.kr = [
            {"name_kor": "사과주스", "calories": 120},
            {"name_kor": "사과", "calories": None},
            {"name_kor": "사과칩", "brand": "사과컴퍼니", "calories": 80},
        ]

    def test_apple_scenario(self) -> None:
        results = search(self.kr, "사과", "kr", limit=10, offset=0)
        self.assertEqual(_names(results), ["사과", "사과주스", "사과칩"])

    def test_short_queries_return_nothing(self) -> None:
        for query in ["", " ", "사", "  a  ", "\t"]:
            self.assertEqual(search(self.kr, query, "kr"), [])
            self.assertEqual(search([{"name_eng": "a"}], query, "us"), [])

    def test_query_is_trimmed_and_lowercased(self) -> None:
        records = [{"name_eng": "Banana"}]
        self.assertEqual(search(records, "  BANANA ", "us"), records)

    def test_name_field_depends_on_language(self) -> None:
        records = [{"name_kor": "바나나", "name_eng": "banana"}]
        self.assertEqual(search(records, "banana", "kr"), [])
        self.assertEqual(search(records, "바나나", "us"), [])
        self.assertEqual(search(records, "banana", "jp"), records)

    def test_calorie_records_lead_within_equal_scores_only(self) -> None:
        records = [
            {"id": 1, "name_eng": "oat milk", "calories": None},
            {"id": 2, "name_eng": "oat bar", "calories": 0},
            {"id": 3, "name_eng": "oat flakes", "calories": 370},
            {"id": 4, "name_eng": "oat", "calories": None},
            {"id": 5, "name_eng": "rolled oat", "calories": 350},
        ]
        results = search(records, "oat", "us", limit=10)
        self.assertEqual([r["id"] for r in results], [4, 3, 1, 2, 5])

    def test_ties_keep_dataset_order(self) -> None:
        records = [{"id": i, "name_eng": f"rice {i}", "calories": 100} for i in range(20)]
        results = search(records, "rice", "us", limit=20)
        self.assertEqual([r["id"] for r in results], list(range(20)))

    def test_scores_never_increase(self) -> None:
        records = [
            {"name_eng": "tea latte", "brand": "tea co"},
            {"name_eng": "green tea"},
            {"name_eng": "tea"},
            {"name_eng": "x", "brand": "tea"},
            {"name_eng": "y", "brand": "teahouse"},
            {"name_eng": "z", "brand": "black tea"},
        ]
        scores = [score for score, _ in rank(records, "tea", "us")]
        self.assertEqual(scores, sorted(scores, reverse=True))
        self.assertEqual(scores[0], 1000)
        self.assertEqual(len(scores), 6)

    def test_pages_are_contiguous_and_disjoint(self) -> None:
        records = [
            {"id": i, "name_eng": ("soup" if i % 7 == 0 else f"soup {i}"), "calories": (i % 3) or None}
            for i in range(53)
        ]
        full = search(records, "soup", "us", limit=1000)
        pages = []
        offset = 0
        while True:
            page = search(records, "soup", "us", limit=10, offset=offset)
            if not page:
                break
            pages.extend(page)
            offset += 10
        self.assertEqual([r["id"] for r in pages], [r["id"] for r in full])
        self.assertEqual(len({r["id"] for r in pages}), 53)

    def test_offset_past_end(self) -> None:
        self.assertEqual(search(self.kr, "사과", "kr", limit=10, offset=50), [])


if __name__ == "__main__":
    unittest.main()

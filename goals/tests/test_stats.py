from django.test import SimpleTestCase

from goals import stats


class ExtractTests(SimpleTestCase):
    def test_missing_payload(self):
        self.assertIsNone(stats.extract(None, stats.SKILL, "attack"))

    def test_empty_payload_yields_default_records(self):
        self.assertEqual(stats.extract({}, stats.SKILL, "attack"), {"experience": 0, "level": 1, "rank": 0})
        self.assertEqual(stats.extract({}, stats.BOSS, "zulrah"), {"kills": 0, "rank": 0})

    def test_non_object_payload_yields_default_record(self):
        self.assertEqual(stats.extract(["attack"], stats.BOSS, "vorkath"), {"kills": 0, "rank": 0})

    def test_unknown_goal_type(self):
        self.assertIsNone(stats.extract({"skills": {}}, "quest", "attack"))

    def test_record_is_returned_unmodified(self):
        record = {"experience": 13_034_431, "level": 99, "rank": 1200, "ehp": 1.5}
        payload = {"latestSnapshot": {"data": {"skills": {"attack": record}}}}

        self.assertEqual(stats.extract(payload, stats.SKILL, "attack"), record)

    def test_record_at_top_level_is_returned_unmodified(self):
        record = {"experience": 5, "level": 2, "rank": 1}

        self.assertEqual(stats.extract({"skills": {"attack": record}}, stats.SKILL, "attack"), record)

    def test_latest_snapshot_wins_over_other_locations(self):
        payload = {
            "latestSnapshot": {"data": {"bosses": {"zulrah": {"kills": 500}}}},
            "data": {"bosses": {"zulrah": {"kills": 400}}},
            "bosses": {"zulrah": {"kills": 300}},
        }

        self.assertEqual(stats.extract(payload, stats.BOSS, "zulrah")["kills"], 500)

    def test_falls_back_through_lookup_order(self):
        payload = {"data": {"skills": {"magic": {"experience": 10}}}, "skills": {"magic": {"experience": 5}}}
        self.assertEqual(stats.extract(payload, stats.SKILL, "magic")["experience"], 10)

        payload = {"latestSnapshot": {"data": {}}, "skills": {"magic": {"experience": 5}}}
        self.assertEqual(stats.extract(payload, stats.SKILL, "magic")["experience"], 5)

    def test_metric_names_are_case_sensitive(self):
        payload = {"skills": {"attack": {"experience": 99}}}

        self.assertEqual(stats.extract(payload, stats.SKILL, "Attack")["experience"], 0)

    def test_lookup_order_is_fixed(self):
        self.assertEqual(
            stats.LOOKUP_ORDER,
            (stats.from_latest_snapshot, stats.from_data, stats.from_root),
        )


class ValueForTests(SimpleTestCase):
    def test_reads_experience_or_kills(self):
        self.assertEqual(stats.value_for({"experience": 1000}, stats.SKILL), 1000)
        self.assertEqual(stats.value_for({"kills": 12}, stats.BOSS), 12)

    def test_missing_field(self):
        self.assertIsNone(stats.value_for({"level": 50}, stats.SKILL))
        self.assertIsNone(stats.value_for(None, stats.BOSS))

    def test_non_numeric_value_counts_as_zero(self):
        with self.assertLogs("goals.stats", level="WARNING"):
            self.assertEqual(stats.value_for({"kills": "lots"}, stats.BOSS), 0)

    def test_every_metric_is_known(self):
        self.assertEqual(len(stats.SKILLS), 24)
        self.assertIn("tzkal_zuk", stats.BOSSES)

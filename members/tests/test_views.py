from django.contrib.auth import get_user_model
from django.test import Client, TestCase

from members.models import Character


class RankAPITests(TestCase):
    def setUp(self) -> None:
        User = get_user_model()
        self.admin = User.objects.create_user("admin", password="pw", is_staff=True)
        self.member = User.objects.create_user("member", password="pw")
        Character.objects.create(wom_id=42, name="iron_bob", current_role="leader", ehb=650)
        self.client = Client()

    def test_requires_authentication(self) -> None:
        response = self.client.get("/api/members/42/rank/")

        self.assertEqual(response.status_code, 401)
        self.assertFalse(response.json()["success"])

    def test_classify_character(self) -> None:
        self.client.force_login(self.member)

        response = self.client.get("/api/members/42/rank/")

        self.assertEqual(response.status_code, 200)
        rank = response.json()["rank"]
        self.assertFalse(rank["has_correct_tier"])
        self.assertEqual(rank["expected_tier"], "supervisor")
        self.assertEqual(rank["category"], "fighter")

    def test_unknown_character_is_not_found(self) -> None:
        self.client.force_login(self.member)

        response = self.client.get("/api/members/7/rank/")

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["code"], "not_found")

    def test_fix_tier_is_admin_only(self) -> None:
        self.client.force_login(self.member)
        response = self.client.post("/api/members/42/rank/fix/")
        self.assertEqual(response.status_code, 403)

        self.client.force_login(self.admin)
        response = self.client.post("/api/members/42/rank/fix/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["character"]["current_role"], "supervisor")

    def test_rank_alerts(self) -> None:
        self.client.force_login(self.admin)

        response = self.client.get("/api/members/rank-alerts/")

        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertEqual(payload["count"], 1)
        self.assertEqual(payload["alerts"][0]["expected_tier"], "supervisor")
        self.assertEqual(payload["alerts"][0]["priority"], 2)

    def test_adjust_siege_score_validates_delta(self) -> None:
        self.client.force_login(self.admin)

        response = self.client.post(
            "/api/members/42/siege-score/",
            data={"delta": "lots"},
            content_type="application/json",
        )

        self.assertEqual(response.status_code, 400)

from django.contrib.auth import get_user_model
from django.test import Client, TestCase

from claims.models import Claim, ClaimCode, ClaimRequest
from members.models import Character


class ClaimAPITests(TestCase):
    def setUp(self) -> None:
        User = get_user_model()
        self.admin = User.objects.create_user("admin", password="pw", is_staff=True)
        self.player = User.objects.create_user("player", password="pw")
        self.rival = User.objects.create_user("rival", password="pw")
        Character.objects.create(wom_id=9, name="nine_lives")
        self.client = Client()

    def post(self, url, payload=None):
        return self.client.post(url, data=payload or {}, content_type="application/json")

    def test_requires_authentication(self) -> None:
        response = self.post("/api/claims/codes/redeem/", {"code": "ABCDEFGH"})

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["code"], "unauthenticated")

    def test_issue_and_redeem_code(self) -> None:
        self.client.force_login(self.admin)
        response = self.post("/api/claims/codes/issue/", {"wom_id": 9, "expiry_days": 0})
        self.assertEqual(response.status_code, 200)
        code = response.json()["code"]["code"]
        self.assertIsNone(response.json()["code"]["expires_at"])

        self.client.force_login(self.player)
        response = self.post("/api/claims/codes/redeem/", {"code": code})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["claim"]["wom_id"], 9)
        self.assertEqual(response.json()["claim"]["source"], "code")

        self.client.force_login(self.rival)
        response = self.post("/api/claims/codes/redeem/", {"code": code})
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["code"], "invalid_code")

    def test_issue_code_is_admin_only(self) -> None:
        self.client.force_login(self.player)

        response = self.post("/api/claims/codes/issue/", {"wom_id": 9})

        self.assertEqual(response.status_code, 403)
        self.assertFalse(ClaimCode.objects.exists())

    def test_issue_code_requires_wom_id(self) -> None:
        self.client.force_login(self.admin)

        response = self.post("/api/claims/codes/issue/", {"expiry_days": 1})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["code"], "invalid_input")

    def test_malformed_body(self) -> None:
        self.client.force_login(self.player)

        response = self.client.post("/api/claims/codes/redeem/", data="{not json", content_type="application/json")

        self.assertEqual(response.status_code, 400)

    def test_request_workflow(self) -> None:
        self.client.force_login(self.player)
        response = self.post("/api/claims/requests/", {"wom_id": 9, "message": "my alt"})
        self.assertEqual(response.status_code, 200)
        request_id = response.json()["request"]["id"]

        self.client.force_login(self.rival)
        response = self.post("/api/claims/requests/", {"wom_id": 9})
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()["code"], "duplicate_pending")

        self.client.force_login(self.admin)
        response = self.post(
            f"/api/claims/requests/{request_id}/process/",
            {"action": "approved", "admin_notes": "checked in game"},
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["request"]["status"], "approved")

        response = self.post(f"/api/claims/requests/{request_id}/process/", {"action": "denied"})
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()["code"], "not_pending")

        self.client.force_login(self.player)
        response = self.client.get("/api/claims/")
        self.assertEqual([claim["wom_id"] for claim in response.json()["claims"]], [9])

    def test_list_requests_by_status(self) -> None:
        ClaimRequest.objects.create(account=self.player, character_id=9, character_name="nine_lives")
        self.client.force_login(self.admin)

        response = self.client.get("/api/claims/requests/", {"status": "pending"})
        self.assertEqual(len(response.json()["requests"]), 1)

        response = self.client.get("/api/claims/requests/", {"status": "nope"})
        self.assertEqual(response.status_code, 400)

    def test_list_codes_filters_by_character(self) -> None:
        Character.objects.create(wom_id=10, name="ten")
        ClaimCode.objects.create(code="AAAAAAAA", character_id=9)
        ClaimCode.objects.create(code="BBBBBBBB", character_id=10)
        self.client.force_login(self.admin)

        response = self.client.get("/api/claims/codes/", {"wom_id": "10"})

        self.assertEqual([code["code"] for code in response.json()["codes"]], ["BBBBBBBB"])

    def test_revoke_code(self) -> None:
        ClaimCode.objects.create(code="AAAAAAAA", character_id=9)
        self.client.force_login(self.admin)

        response = self.post("/api/claims/codes/revoke/", {"code": "aaaaaaaa"})

        self.assertEqual(response.status_code, 200)
        self.assertFalse(ClaimCode.objects.exists())
        self.assertFalse(Claim.objects.exists())

from unittest import mock

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.test import TestCase

from claims import services
from claims.models import Claim, ClaimRequest
from clan_portal.errors import (
    AlreadyClaimed,
    DuplicatePending,
    InvalidInput,
    NotAuthorized,
    NotFound,
    NotPending,
)
from members.models import Character


class SubmitRequestTests(TestCase):
    def setUp(self):
        User = get_user_model()
        self.alice = User.objects.create_user("alice", password="pw")
        self.bob = User.objects.create_user("bob", password="pw")
        self.admin = User.objects.create_user("admin", password="pw", is_staff=True)
        self.character = Character.objects.create(wom_id=9, name="nine_lives", display_name="Nine Lives")

    def test_submit_creates_pending_request_with_name_snapshot(self):
        claim_request = services.submit_request(self.alice, 9, "  that's my main  ")

        self.assertEqual(claim_request.status, ClaimRequest.Status.PENDING)
        self.assertEqual(claim_request.character_name, "Nine Lives")
        self.assertEqual(claim_request.message, "that's my main")

        self.character.display_name = "Ten Lives"
        self.character.save()
        claim_request.refresh_from_db()
        self.assertEqual(claim_request.character_name, "Nine Lives")

    def test_duplicate_pending_then_resubmit_after_denial(self):
        first = services.submit_request(self.alice, 9)

        with self.assertRaises(DuplicatePending):
            services.submit_request(self.bob, 9)

        services.process_request(self.admin, first.pk, "denied", "not yours")
        second = services.submit_request(self.bob, 9)

        self.assertEqual(second.status, ClaimRequest.Status.PENDING)
        self.assertEqual(second.account, self.bob)

    def test_store_rejects_second_pending_row(self):
        ClaimRequest.objects.create(account=self.alice, character=self.character, character_name="Nine Lives")

        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                ClaimRequest.objects.create(account=self.bob, character=self.character, character_name="Nine Lives")

    def test_store_constraint_surfaces_as_duplicate_pending(self):
        ClaimRequest.objects.create(account=self.alice, character=self.character, character_name="Nine Lives")

        with mock.patch("claims.services.ClaimRequest.objects.filter") as filter_:
            filter_.return_value.exists.return_value = False
            with self.assertRaises(DuplicatePending):
                services.submit_request(self.bob, 9)

    def test_submit_for_claimed_character(self):
        Claim.objects.create(account=self.alice, character=self.character, source=Claim.Source.CODE)

        with self.assertRaises(AlreadyClaimed):
            services.submit_request(self.bob, 9)

    def test_submit_for_unknown_character(self):
        with self.assertRaises(NotFound):
            services.submit_request(self.alice, 404)


class ProcessRequestTests(TestCase):
    def setUp(self):
        User = get_user_model()
        self.alice = User.objects.create_user("alice", password="pw")
        self.bob = User.objects.create_user("bob", password="pw")
        self.admin = User.objects.create_user("admin", password="pw", is_staff=True)
        self.other_admin = User.objects.create_user("admin2", password="pw", is_staff=True)
        self.character = Character.objects.create(wom_id=9, name="nine_lives")
        self.claim_request = services.submit_request(self.alice, 9, "mine")

    def test_approve_creates_claim(self):
        processed = services.process_request(self.admin, self.claim_request.pk, "approved", "verified")

        self.assertEqual(processed.status, ClaimRequest.Status.APPROVED)
        self.assertEqual(processed.admin_notes, "verified")
        self.assertEqual(processed.processed_by, self.admin)
        self.assertIsNotNone(processed.processed_at)
        claim = Claim.objects.get(character_id=9)
        self.assertEqual(claim.account, self.alice)
        self.assertEqual(claim.source, Claim.Source.REQUEST)

    def test_deny_does_not_claim(self):
        processed = services.process_request(self.admin, self.claim_request.pk, "denied")

        self.assertEqual(processed.status, ClaimRequest.Status.DENIED)
        self.assertFalse(Claim.objects.exists())

    def test_second_decision_is_not_pending(self):
        services.process_request(self.admin, self.claim_request.pk, "approved")

        with self.assertRaises(NotPending):
            services.process_request(self.other_admin, self.claim_request.pk, "approved")
        with self.assertRaises(NotPending):
            services.process_request(self.other_admin, self.claim_request.pk, "denied")

        self.assertEqual(Claim.objects.filter(character_id=9).count(), 1)
        self.claim_request.refresh_from_db()
        self.assertEqual(self.claim_request.status, ClaimRequest.Status.APPROVED)

    def test_approval_after_code_redemption_fails_and_stays_pending(self):
        claim_code = services.issue_code(self.admin, 9, expiry_days=0)
        services.redeem_code(self.bob, claim_code.code)

        with self.assertRaises(AlreadyClaimed):
            services.process_request(self.admin, self.claim_request.pk, "approved")

        self.claim_request.refresh_from_db()
        self.assertEqual(self.claim_request.status, ClaimRequest.Status.PENDING)
        self.assertEqual(Claim.objects.get(character_id=9).account, self.bob)

    def test_lost_insert_race_keeps_request_pending(self):
        Claim.objects.create(account=self.bob, character=self.character, source=Claim.Source.CODE)

        with mock.patch("claims.services.is_claimed", return_value=False):
            with self.assertRaises(AlreadyClaimed):
                services.process_request(self.admin, self.claim_request.pk, "approved")

        self.claim_request.refresh_from_db()
        self.assertEqual(self.claim_request.status, ClaimRequest.Status.PENDING)

    def test_status_swap_lost_rolls_back_claim(self):
        # Simulate another admin moving the request between the read and the write.
        real_filter = ClaimRequest.objects.filter

        def racing_filter(*args, **kwargs):
            if kwargs.get("status") == ClaimRequest.Status.PENDING and "pk" in kwargs:
                ClaimRequest.objects.all().update(status=ClaimRequest.Status.DENIED)
            return real_filter(*args, **kwargs)

        with mock.patch.object(ClaimRequest.objects, "filter", side_effect=racing_filter):
            with self.assertRaises(NotPending):
                services.process_request(self.admin, self.claim_request.pk, "approved")

        self.assertFalse(Claim.objects.exists())

    def test_process_requires_admin(self):
        with self.assertRaises(NotAuthorized):
            services.process_request(self.alice, self.claim_request.pk, "approved")

    def test_invalid_decision(self):
        with self.assertRaises(InvalidInput):
            services.process_request(self.admin, self.claim_request.pk, "maybe")

    def test_unknown_request(self):
        with self.assertRaises(NotFound):
            services.process_request(self.admin, 12345, "denied")


class ListRequestTests(TestCase):
    def setUp(self):
        User = get_user_model()
        self.alice = User.objects.create_user("alice", password="pw")
        self.bob = User.objects.create_user("bob", password="pw")
        self.admin = User.objects.create_user("admin", password="pw", is_staff=True)
        Character.objects.create(wom_id=1, name="one")
        Character.objects.create(wom_id=2, name="two")
        first = services.submit_request(self.alice, 1)
        services.submit_request(self.bob, 2)
        services.process_request(self.admin, first.pk, "denied")

    def test_admin_sees_all_and_filters_by_status(self):
        self.assertEqual(services.list_requests(self.admin).count(), 2)
        pending = services.list_requests(self.admin, "pending")
        self.assertEqual([r.character_id for r in pending], [2])

    def test_member_sees_own_requests(self):
        self.assertEqual([r.character_id for r in services.list_requests(self.alice)], [1])

    def test_unknown_status(self):
        with self.assertRaises(InvalidInput):
            services.list_requests(self.admin, "archived")

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from clan_portal.errors import PortalError
from clan_portal.locks import JobLockError, job_lock
from members.services import refresh_roster


class Command(BaseCommand):
    help = "Reconcile clan members with the group roster on Wise Old Man."

    def add_arguments(self, parser):
        parser.add_argument(
            "--group-id",
            default=getattr(settings, "WOM_GROUP_ID", ""),
            help="Wise Old Man group id (default: WOM_GROUP_ID setting).",
        )
        parser.add_argument(
            "--no-lock",
            action="store_true",
            help="Run without the Redis job lock.",
        )

    def handle(self, *args, **options):
        group_id = str(options["group_id"] or "").strip()
        if not group_id:
            raise CommandError("A group id is required (--group-id or WOM_GROUP_ID).")

        try:
            if options["no_lock"]:
                result = refresh_roster(group_id)
            else:
                with job_lock("refresh_roster"):
                    result = refresh_roster(group_id)
        except JobLockError as exc:
            raise CommandError(str(exc)) from exc
        except PortalError as exc:
            raise CommandError(f"Roster refresh failed: {exc.message}") from exc

        for error in result.errors:
            self.stderr.write(error)
        self.stdout.write(
            self.style.SUCCESS(
                f"Roster refreshed: {result.added} added, {result.updated} updated, "
                f"{result.missing} missing upstream."
            )
        )

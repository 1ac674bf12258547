from django.core.management.base import BaseCommand

from goals.services import sync_all_open_goals


class Command(BaseCommand):
    help = "Refresh progress on every open goal from Wise Old Man."

    def handle(self, *args, **options):
        result = sync_all_open_goals()
        if result.error:
            self.stderr.write(f"Some characters were skipped: {result.error}")
        self.stdout.write(
            self.style.SUCCESS(
                f"Goals synced: {result.updated_count} updated, {result.completed_count} completed."
            )
        )

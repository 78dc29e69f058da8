"""Start, restart or re-arm the periodic inactivity nudge check."""

from django.conf import settings
from django.core.management.base import BaseCommand

from core.jobs.nudge_jobs import ensure_nudge_check_scheduled, restart_nudge_checks


class Command(BaseCommand):
    """Replace any scheduled nudge check with a single fresh one.

    The check reschedules itself after every run, so this runs once per
    deployment. ``--ensure`` only restarts a chain that has died, which
    makes it safe to run from cron.
    """

    help = "Schedule the periodic inactivity nudge check"

    def add_arguments(self, parser):
        parser.add_argument(
            "--delay",
            type=int,
            default=0,
            help="Seconds until the first run (default: run right away)",
        )
        parser.add_argument(
            "--ensure",
            action="store_true",
            help="Only schedule a run if none is scheduled or in flight",
        )

    def handle(self, *args, **options):
        if options["ensure"]:
            if ensure_nudge_check_scheduled():
                self.stdout.write(self.style.WARNING("Nudge check chain was re-armed"))
            else:
                self.stdout.write("Nudge check chain is alive")
            return

        removed = restart_nudge_checks(options["delay"])
        self.stdout.write(
            self.style.SUCCESS(
                f"Nudge check scheduled every {settings.NUDGE_CHECK_INTERVAL_SECONDS}s "
                f"(replaced {removed} existing)"
            )
        )

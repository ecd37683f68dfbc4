"""Recompute weekly performance records from the command line."""
from __future__ import annotations

from django.core.management.base import BaseCommand, CommandError

from performance import batch
from performance.exceptions import MalformedInput
from performance.periods import current_week, validate_week
from venues.models import Venue


class Command(BaseCommand):
    help = (
        "Recompute weekly performance for one venue or every active venue. "
        "Defaults to the current ISO week."
    )

    def add_arguments(self, parser):
        parser.add_argument("--venue", default="", help="Venue code. Defaults to every active venue.")
        parser.add_argument("--year", type=int, help="ISO year (requires --week).")
        parser.add_argument("--week", type=int, help="ISO week number (requires --year).")
        parser.add_argument("--all", action="store_true", help="Recompute every existing week instead of one.")
        parser.add_argument("--limit", type=int, default=None, help="With --all, newest N weeks per venue.")
        parser.add_argument("--create", action="store_true", help="Create the week if it does not exist yet.")
        parser.add_argument("--batch-size", type=int, default=None, help="Units per group (default: setting).")
        parser.add_argument("--delay", type=float, default=None, help="Seconds between groups (default: setting).")

    def handle(self, *args, **options):
        venues = Venue.objects.filter(is_active=True)
        if options["venue"]:
            venues = Venue.objects.filter(code=options["venue"])
            if not venues.exists():
                raise CommandError(f"Unknown venue code: {options['venue']}")
        venue_ids = list(venues.values_list("pk", flat=True))

        if options["all"]:
            units = batch.existing_weeks(venue_ids, limit=options["limit"])
        else:
            if (options["year"] is None) != (options["week"] is None):
                raise CommandError("--year and --week must be given together.")
            if options["year"] is None:
                period = current_week()
                year, week = period.year, period.week
            else:
                try:
                    year, week = validate_week(options["year"], options["week"])
                except MalformedInput as exc:
                    raise CommandError(str(exc)) from exc
            units = [batch.Unit(venue_id, year, week) for venue_id in venue_ids]

        if not units:
            self.stdout.write(self.style.WARNING("Nothing to recompute."))
            return

        outcomes = batch.recompute_units(
            units,
            create_missing=options["create"],
            batch_size=options["batch_size"],
            delay_seconds=options["delay"],
        )
        for outcome in outcomes:
            label = f"venue={outcome.venue_id} {outcome.year}-W{outcome.week_number:02d}"
            if outcome.success:
                self.stdout.write(f"  OK    {label}")
            else:
                self.stdout.write(self.style.ERROR(f"  ERROR {label}: {outcome.error}"))

        failed = sum(1 for outcome in outcomes if not outcome.success)
        self.stdout.write(
            self.style.SUCCESS(f"Done: {len(outcomes) - failed} recomputed, {failed} failed.")
        )

"""Errors that abort the recompute of one venue-week."""


class PerformanceError(Exception):
    """Base class for failures reported per (venue, year, week) unit."""


class MalformedInput(PerformanceError, ValueError):
    """Week, year or venue identifier is not usable. Raised before any I/O."""


class NotFound(PerformanceError):
    pass


class VenueNotFound(NotFound):
    def __init__(self, venue_id):
        self.venue_id = venue_id
        super().__init__(f"Venue {venue_id} does not exist.")


class WeekNotFound(NotFound):
    def __init__(self, venue_id, year, week_number):
        self.venue_id = venue_id
        self.year = year
        self.week_number = week_number
        super().__init__(
            f"Week {week_number}/{year} not found for venue {venue_id}.",
        )

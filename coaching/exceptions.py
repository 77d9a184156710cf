"""Error types raised at the boundary between the coaching core and its data sources."""


class TrainingDataError(Exception):
    """Base class for failures fetching training data from a collaborator."""


class ActivityFetchError(TrainingDataError):
    """Raised when the activity store cannot return activities for an athlete.

    Attributes:
        athlete_id: Athlete whose activities were requested
        reason: Opaque failure message from the store
    """

    def __init__(self, athlete_id, reason: str):
        self.athlete_id = athlete_id
        self.reason = reason
        super().__init__(f"Failed to fetch activities for athlete {athlete_id}: {reason}")


class TelemetryFetchError(TrainingDataError):
    """Raised when sample streams for an activity cannot be fetched."""

    def __init__(self, activity_id, reason: str):
        self.activity_id = activity_id
        self.reason = reason
        super().__init__(f"Failed to fetch streams for activity {activity_id}: {reason}")

"""Error taxonomy shared by the CLI, the API and the validation engine."""


class AppSecGymError(Exception):
    """Base class for gym errors surfaced to the user."""


class ChallengeNotFoundError(AppSecGymError, LookupError):
    """Raised when a challenge id is not in the catalog."""

    def __init__(self, challenge_id: str):
        super().__init__(f"Challenge {challenge_id} not found")
        self.challenge_id = challenge_id


class NoActiveChallengeError(AppSecGymError):
    """Raised when an operation needs an in-progress attempt and there is none."""

    def __init__(self, message: str = "No active challenge"):
        super().__init__(message)


class ToolExecutionError(AppSecGymError, RuntimeError):
    """An external tool could not be run or did not finish in time.

    Validators recover from this locally by awarding partial credit.
    """

    def __init__(self, command: str, reason: str):
        super().__init__(f"{command}: {reason}")
        self.command = command
        self.reason = reason

"""Runtime configuration for script interpretation."""

from pydantic import BaseModel, ConfigDict, Field


class WaitPolicy(BaseModel):
    """Polling cadence used by waitFor* commands and post-click waits."""

    model_config = ConfigDict(frozen=True)

    poll_interval: float = Field(
        default=1.0, ge=0, description="Seconds between probes"
    )
    max_attempts: int = Field(
        default=60, ge=1, description="Probes before the wait times out"
    )
    settle_delay: float = Field(
        default=1.0, ge=0, description="Pause after a click before waiting"
    )
    page_container: str = Field(
        default="css=body", description="Locator awaited after navigation"
    )

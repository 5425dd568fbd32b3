from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from socialscope.application.errors import MalformedWebhookError
from socialscope.domain.outcomes.run_outcome import RunOutcome, classify_run


class ApifyRunResource(BaseModel):
    model_config = ConfigDict(extra="allow")

    status: str | None = None
    default_dataset_id: str | None = Field(default=None, alias="defaultDatasetId")


class ApifyWebhookPayload(BaseModel):
    """Run-completion callback, either a webhook envelope or a bare run object."""

    model_config = ConfigDict(extra="allow")

    event: str | None = Field(default=None, validation_alias=AliasChoices("event", "eventType"))
    resource: ApifyRunResource | None = None
    # Bare run objects carry the run fields at the top level.
    status: str | None = None
    default_dataset_id: str | None = Field(default=None, alias="defaultDatasetId")

    def to_outcome(self) -> RunOutcome:
        run = self.resource if self.resource is not None else ApifyRunResource(
            status=self.status, defaultDatasetId=self.default_dataset_id
        )
        return classify_run(
            event=self.event, status=run.status, dataset_id=run.default_dataset_id
        )


def decode_webhook_body(body: bytes) -> ApifyWebhookPayload:
    """Validate a raw callback body; anything but a JSON object is rejected."""
    try:
        return ApifyWebhookPayload.model_validate_json(body)
    except ValidationError as exc:
        raise MalformedWebhookError(f"Invalid webhook body: {exc.errors()[0]['msg']}") from exc

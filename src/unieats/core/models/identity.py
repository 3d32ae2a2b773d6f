"""Identity asserted by the external issuer."""

from pydantic import BaseModel, ConfigDict, Field


class ExternalIdentity(BaseModel):
    """A verified identity produced by a successful handshake.

    Never persisted as-is; the user directory reconciles it with a local user.
    """

    model_config = ConfigDict(frozen=True)

    issuer: str = Field(description="Issuer that asserted the identity")
    subject_id: str = Field(description="Issuer-assigned stable subject identifier")
    email: str = Field(description="Email address (upn, email or first of emails)")
    display_name: str = Field(description="Human readable name")

"""
Location: python/turnkey_sdk/types.py

Summary:
    Pydantic models for turnkey-sdk. Defines the API credential, key
    selectors, the signing activity request, API stamps, activities and
    signature results exchanged with the signer service.

Usage:
    These models are imported by stamper.py, transport.py, poller.py,
    selector.py, applier.py and client.py. Wire models use camelCase
    aliases; always serialize them with by_alias=True.

Example:
    from turnkey_sdk.types import PublicKeySelector, SignRawPayloadRequest

    selector = PublicKeySelector(public_key="4Nd1m...")
    request = SignRawPayloadRequest.for_payload(
        organization_id="org-uuid",
        sign_with="4Nd1m...",
        payload=b"message bytes",
    )
    body = request.to_body()
"""

import time
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field, SecretStr, field_validator
from solders.pubkey import Pubkey


ACTIVITY_TYPE_SIGN_RAW_PAYLOAD = "ACTIVITY_TYPE_SIGN_RAW_PAYLOAD_V2"
PAYLOAD_ENCODING_HEX = "PAYLOAD_ENCODING_HEXADECIMAL"
HASH_FUNCTION_NOT_APPLICABLE = "HASH_FUNCTION_NOT_APPLICABLE"
STAMP_SCHEME_P256 = "SIGNATURE_SCHEME_TK_API_P256"


class Credential(BaseModel):
    """
    API credential used to stamp outbound requests.

    The private key is held as a SecretStr so it never shows up in
    repr(), logs or model dumps.

    Attributes:
        organization_id: Turnkey organization identifier
        api_public_key: Compressed P-256 public key, hex encoded
        api_private_key: P-256 private scalar, hex encoded
    """
    organization_id: str
    api_public_key: str
    api_private_key: SecretStr

    model_config = {"frozen": True}


# ---------------------------------------------------------------------------
# Key selectors
# ---------------------------------------------------------------------------


class ExampleKey(BaseModel):
    """Select the example key configured on the client."""
    kind: Literal["example"] = "example"

    model_config = {"frozen": True}


class PublicKeySelector(BaseModel):
    """
    Select a signing key by its Solana public key.

    Attributes:
        public_key: Pubkey, 32 raw bytes, or a base58 string
    """
    kind: Literal["public_key"] = "public_key"
    public_key: Union[Pubkey, bytes, str]

    model_config = {"frozen": True, "arbitrary_types_allowed": True}


class KeyIdSelector(BaseModel):
    """
    Select a signing key by its Turnkey private key id.

    Attributes:
        key_id: Private key id (UUID)
        public_key: Optional public key of that private key. When omitted
            the signature slot is found by verifying the signature.
    """
    kind: Literal["key_id"] = "key_id"
    key_id: str
    public_key: Optional[Union[Pubkey, bytes, str]] = None

    model_config = {"frozen": True, "arbitrary_types_allowed": True}


KeySelector = Annotated[
    Union[ExampleKey, PublicKeySelector, KeyIdSelector],
    Field(discriminator="kind"),
]


class SignerIdentity(BaseModel):
    """
    A resolved signing identity.

    Attributes:
        sign_with: Value sent as signWith (private key id or address)
        public_key: Public key whose signature slot receives the signature
    """
    sign_with: str
    public_key: Optional[Pubkey] = None

    model_config = {"frozen": True, "arbitrary_types_allowed": True}


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


def _timestamp_ms() -> str:
    return str(int(time.time() * 1000))


class SignRawPayloadParameters(BaseModel):
    """Parameters of a sign-raw-payload activity."""
    sign_with: str = Field(alias="signWith")
    payload: str
    encoding: str = PAYLOAD_ENCODING_HEX
    hash_function: str = Field(HASH_FUNCTION_NOT_APPLICABLE, alias="hashFunction")

    model_config = {"populate_by_name": True, "frozen": True}


class SignRawPayloadRequest(BaseModel):
    """
    Signing activity submitted to the service.

    Attributes:
        type: Activity type tag
        timestamp_ms: Milliseconds since epoch, as a string
        organization_id: Organization the activity belongs to
        parameters: What to sign and with which key
    """
    type: str = ACTIVITY_TYPE_SIGN_RAW_PAYLOAD
    timestamp_ms: str = Field(default_factory=_timestamp_ms, alias="timestampMs")
    organization_id: str = Field(alias="organizationId")
    parameters: SignRawPayloadParameters

    model_config = {"populate_by_name": True, "frozen": True}

    @classmethod
    def for_payload(
        cls,
        organization_id: str,
        sign_with: str,
        payload: bytes,
    ) -> "SignRawPayloadRequest":
        """
        Build a request that signs the given bytes as-is.

        Args:
            organization_id: Organization identifier
            sign_with: Resolved signer identity
            payload: Exact bytes to sign (hex encoded on the wire)

        Returns:
            A frozen SignRawPayloadRequest
        """
        return cls(
            organization_id=organization_id,
            parameters=SignRawPayloadParameters(
                sign_with=sign_with,
                payload=payload.hex(),
            ),
        )

    def to_body(self) -> bytes:
        """Serialize to the exact bytes that are stamped and sent."""
        return self.model_dump_json(by_alias=True).encode("utf-8")


class GetActivityRequest(BaseModel):
    """Query body for fetching an activity by id."""
    organization_id: str = Field(alias="organizationId")
    activity_id: str = Field(alias="activityId")

    model_config = {"populate_by_name": True, "frozen": True}

    def to_body(self) -> bytes:
        return self.model_dump_json(by_alias=True).encode("utf-8")


class WhoAmIRequest(BaseModel):
    """Query body for the whoami endpoint."""
    organization_id: str = Field(alias="organizationId")

    model_config = {"populate_by_name": True, "frozen": True}

    def to_body(self) -> bytes:
        return self.model_dump_json(by_alias=True).encode("utf-8")


class ApiStamp(BaseModel):
    """
    Authentication stamp sent in the X-Stamp header.

    Attributes:
        public_key: Compressed API public key, hex
        signature: DER-encoded ECDSA signature, hex
        scheme: Stamp scheme identifier
    """
    public_key: str = Field(alias="publicKey")
    signature: str
    scheme: str = STAMP_SCHEME_P256

    model_config = {"populate_by_name": True, "frozen": True}


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class ActivityStatus(str, Enum):
    """Lifecycle status reported by the service."""
    CREATED = "ACTIVITY_STATUS_CREATED"
    PENDING = "ACTIVITY_STATUS_PENDING"
    CONSENSUS_NEEDED = "ACTIVITY_STATUS_CONSENSUS_NEEDED"
    COMPLETED = "ACTIVITY_STATUS_COMPLETED"
    FAILED = "ACTIVITY_STATUS_FAILED"
    REJECTED = "ACTIVITY_STATUS_REJECTED"

    @property
    def is_terminal(self) -> bool:
        return self in (
            ActivityStatus.COMPLETED,
            ActivityStatus.FAILED,
            ActivityStatus.REJECTED,
        )


class SignRawPayloadResult(BaseModel):
    """Raw r/s/v values returned by a completed signing activity."""
    r: str
    s: str
    v: Optional[str] = None


class ActivityResult(BaseModel):
    """Result envelope of an activity."""
    sign_raw_payload_result: Optional[SignRawPayloadResult] = Field(
        None, alias="signRawPayloadResult"
    )

    model_config = {"populate_by_name": True}


class ActivityFailure(BaseModel):
    """Failure details of an activity."""
    code: Optional[int] = None
    message: Optional[str] = None


class Activity(BaseModel):
    """
    An asynchronous unit of work on the signer service.

    Attributes:
        id: Activity identifier
        organization_id: Owning organization
        status: Current lifecycle status
        type: Activity type tag
        result: Present once the activity completed
        failure: Present when the service reports a failure reason
    """
    id: str
    organization_id: Optional[str] = Field(None, alias="organizationId")
    status: ActivityStatus
    type: Optional[str] = None
    result: Optional[ActivityResult] = None
    failure: Optional[ActivityFailure] = None

    model_config = {"populate_by_name": True}

    @property
    def failure_reason(self) -> str:
        if self.failure is not None and self.failure.message:
            return self.failure.message
        return self.status.value


class ActivityResponse(BaseModel):
    """Response envelope of submit and get_activity calls."""
    activity: Activity


class SignatureResult(BaseModel):
    """
    Signature produced by a completed activity.

    Attributes:
        r: First half of the signature, hex
        s: Second half of the signature, hex
        v: Recovery id, if the curve has one
        activity_id: Activity that produced the signature
    """
    r: str
    s: str
    v: Optional[str] = None
    activity_id: Optional[str] = None

    model_config = {"frozen": True}

    @field_validator("r", "s")
    @classmethod
    def _must_be_hex(cls, value: str) -> str:
        try:
            bytes.fromhex(value)
        except ValueError as exc:
            raise ValueError("signature component must be hex") from exc
        return value

    @property
    def raw_signature_bytes(self) -> bytes:
        """The concatenated r || s bytes."""
        return bytes.fromhex(self.r + self.s)


class WhoAmIResponse(BaseModel):
    """Identity of the API key owner."""
    organization_id: str = Field(alias="organizationId")
    organization_name: str = Field(alias="organizationName")
    user_id: str = Field(alias="userId")
    username: str

    model_config = {"populate_by_name": True}


class FieldViolation(BaseModel):
    field: str
    description: str


class ErrorDetail(BaseModel):
    type_field: Optional[str] = Field(None, alias="@type")
    field_violations: list[FieldViolation] = Field(default_factory=list, alias="fieldViolations")

    model_config = {"populate_by_name": True}


class TurnkeyErrorResponse(BaseModel):
    """
    Error payload returned with non-2xx responses.

    Attributes:
        code: Service error code
        message: Human readable message
        details: Optional field-level details
    """
    code: int
    message: str
    details: list[ErrorDetail] = Field(default_factory=list)

    def describe(self) -> str:
        """Render the error with its field violations on one line."""
        parts = [f"code {self.code}: {self.message}"]
        for detail in self.details:
            for violation in detail.field_violations:
                parts.append(f"{violation.field}: {violation.description}")
        return "; ".join(parts)

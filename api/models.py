"""
API request and response models for the appliance tracker REST endpoints.

These Pydantic v2 models define the HTTP transport contract. They are
intentionally separate from the dataclasses in inventory/models.py and
auth/models.py, which own the internal domain representation. The wire names
(eletronico, consumo, status, gasto, descricao) are the ones existing clients
send; route handlers map between the two.

Appliance bodies are loosely typed: strings and numbers are accepted for
each field and every field may be omitted. Objects and arrays get 422.
"""

from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, field_validator

from inventory.models import Appliance

# ---------------------------------------------------------------------------
# Appliances
# ---------------------------------------------------------------------------


class ApplianceIn(BaseModel):
    """Request body for POST /eletronicos and PUT /eletronicos/{id}.

    PUT is a full replace, so an omitted field is written as null.

    Strings and numbers are accepted for every field (booleans for status) and
    handed to the table as is. SQLite's column affinity decides the stored
    form: consumo "35.5" is kept as the number 35.5, consumo "muito" as text.
    Text columns take numbers as their text form.
    """

    eletronico: Optional[Union[str, int, float]] = None
    consumo: Optional[Union[float, str]] = None
    status: Optional[Union[bool, int, float, str]] = None
    gasto: Optional[Union[str, int, float]] = None
    descricao: Optional[Union[str, int, float]] = None

    @field_validator("eletronico", "gasto", "descricao")
    @classmethod
    def number_as_text(cls, value: Union[str, int, float, None]) -> Optional[str]:
        """Text columns: numbers are accepted and stored as their text form."""
        if value is None or isinstance(value, str):
            return value
        return str(value)

    def to_domain(self) -> Appliance:
        return Appliance(
            name=self.eletronico,
            consumption=self.consumo,
            active=self.status,
            cost=self.gasto,
            description=self.descricao,
        )


class ApplianceOut(BaseModel):
    """One appliance as returned by every read and by POST /eletronicos."""

    model_config = ConfigDict(frozen=True)

    id: int
    eletronico: Optional[str]
    consumo: Optional[Union[float, str]]
    status: Optional[Union[bool, int, float, str]]
    gasto: Optional[str]
    descricao: Optional[str]

    @classmethod
    def from_domain(cls, appliance: Appliance) -> "ApplianceOut":
        """Factory Method: the domain-to-wire mapping lives next to the wire model."""
        return cls(
            id=appliance.id,
            eletronico=appliance.name,
            consumo=appliance.consumption,
            status=appliance.active,
            gasto=appliance.cost,
            descricao=appliance.description,
        )


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class RegisterRequest(BaseModel):
    """Request body for POST /registro. role is free-form and optional."""

    username: str
    password: str
    role: Optional[str] = None


class LoginRequest(BaseModel):
    username: str
    password: str


class LoginResponse(BaseModel):
    token: str


# ---------------------------------------------------------------------------
# Envelopes
# ---------------------------------------------------------------------------


class MessageResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    """Every error response has this shape: {"error": "<message>"}."""

    error: str


class HealthResponse(BaseModel):
    status: str = "healthy"
    version: str
    components: dict[str, str]

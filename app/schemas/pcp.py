"""Schemas for primary care physician lookup."""

from pydantic import AliasChoices, BaseModel, Field


class PCPLookupRequest(BaseModel):
    """Physician to look up. Name length is checked by the lookup itself."""

    doctor_name: str = Field(
        "",
        max_length=200,
        validation_alias=AliasChoices("doctor_name", "doctorName"),
    )
    location: str | None = Field(None, max_length=200)


class PCPContactRead(BaseModel):
    phone: str
    fax: str
    address: str
    confidence: str
    note: str

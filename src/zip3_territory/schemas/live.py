"""Schemas for the live assignment and roster endpoints.

Field names follow the column headers of the live CSV files.
"""

from __future__ import annotations

import re
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..models.domain import Assignment, Rep

_NON_DIGITS = re.compile(r"\D")


def format_phone(value: str) -> str:
    """Render ten-digit numbers as XXX-XXX-XXXX; anything else is kept as typed."""
    digits = _NON_DIGITS.sub("", value or "")
    if len(digits) == 11 and digits.startswith("1"):
        digits = digits[1:]
    if len(digits) != 10:
        return (value or "").strip()
    return f"{digits[:3]}-{digits[3:6]}-{digits[6:]}"


class AssignmentModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    region_id: str = Field(alias="Zipcode")
    rep_name: str = Field(alias="Sales_Rep")

    @classmethod
    def from_domain(cls, assignment: Assignment) -> "AssignmentModel":
        return cls(region_id=assignment.region_id, rep_name=assignment.rep_name)

    def to_domain(self) -> Assignment:
        return Assignment(region_id=self.region_id, rep_name=self.rep_name)


class AssignmentUpsertRequest(AssignmentModel):
    @field_validator("region_id", "rep_name")
    @classmethod
    def require_value(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("Zipcode and Sales_Rep are required")
        return value.strip()


class RepModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(alias="Name")
    email: str = Field(default="", alias="Email")
    phone: str = Field(default="", alias="Phone Number")

    @classmethod
    def from_domain(cls, rep: Rep) -> "RepModel":
        return cls(name=rep.name, email=rep.email, phone=rep.phone)

    def to_domain(self) -> Rep:
        return Rep(name=self.name, email=self.email, phone=self.phone)


class RepCreateRequest(RepModel):
    email: str = Field(alias="Email")
    phone: str = Field(alias="Phone Number")

    @field_validator("name", "email", "phone")
    @classmethod
    def require_value(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("Name, Email and Phone Number are required")
        return value.strip()

    @field_validator("phone")
    @classmethod
    def normalize_phone(cls, value: str) -> str:
        return format_phone(value)


class RepUpdateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: Optional[str] = Field(default=None, alias="Email")
    phone: Optional[str] = Field(default=None, alias="Phone Number")

    @field_validator("phone")
    @classmethod
    def normalize_phone(cls, value: Optional[str]) -> Optional[str]:
        return format_phone(value) if value else value


class RepDeleteResponse(BaseModel):
    deleted: str
    reassigned_regions: list[str] = Field(default_factory=list)
    reassigned_to: Optional[str] = None

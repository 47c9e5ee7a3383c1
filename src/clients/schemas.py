"""Payloads for client operations."""

from datetime import date
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from src.models.client import AmlGroup, EmploymentType, TaxScheme, VatStatus, ZusStatus


class ClientFields(BaseModel):
    """Optional client attributes shared by create and update payloads."""

    model_config = ConfigDict(populate_by_name=True)

    nip: str | None = Field(default=None, max_length=20)
    email: str | None = Field(default=None, max_length=255)
    phone: str | None = Field(default=None, max_length=50)
    pkd_code: str | None = Field(default=None, max_length=20, alias="pkdCode")
    company_start_date: date | None = Field(default=None, alias="companyStartDate")
    cooperation_start_date: date | None = Field(default=None, alias="cooperationStartDate")
    suspension_date: date | None = Field(default=None, alias="suspensionDate")
    company_specificity: str | None = Field(default=None, alias="companySpecificity")
    additional_info: str | None = Field(default=None, alias="additionalInfo")
    gtu_code: str | None = Field(default=None, max_length=20, alias="gtuCode")
    gtu_codes: list[str] | None = Field(default=None, alias="gtuCodes")
    aml_group: str | None = Field(default=None, max_length=50, alias="amlGroup")
    aml_group_enum: AmlGroup | None = Field(default=None, alias="amlGroupEnum")
    employment_type: EmploymentType | None = Field(default=None, alias="employmentType")
    vat_status: VatStatus | None = Field(default=None, alias="vatStatus")
    tax_scheme: TaxScheme | None = Field(default=None, alias="taxScheme")
    zus_status: ZusStatus | None = Field(default=None, alias="zusStatus")


class ClientCreate(ClientFields):
    """Payload for creating a client."""

    name: str = Field(min_length=1, max_length=255)
    receive_email_copy: bool = Field(default=False, alias="receiveEmailCopy")


class ClientUpdate(ClientFields):
    """Payload for partially updating a client; unset fields are left alone."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    receive_email_copy: bool | None = Field(default=None, alias="receiveEmailCopy")


class ClientFilters(BaseModel):
    """Filters and pagination for listing clients."""

    model_config = ConfigDict(populate_by_name=True)

    search: str | None = Field(default=None, min_length=1)
    employment_type: EmploymentType | None = Field(default=None, alias="employmentType")
    vat_status: VatStatus | None = Field(default=None, alias="vatStatus")
    tax_scheme: TaxScheme | None = Field(default=None, alias="taxScheme")
    zus_status: ZusStatus | None = Field(default=None, alias="zusStatus")
    aml_group_enum: AmlGroup | None = Field(default=None, alias="amlGroupEnum")
    gtu_code: str | None = Field(default=None, alias="gtuCode")
    receive_email_copy: bool | None = Field(default=None, alias="receiveEmailCopy")
    is_active: bool | None = Field(default=None, alias="isActive")
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1, le=100)


class ClientPage(BaseModel):
    """Paginated client list."""

    items: list[Any]
    total: int
    page: int
    limit: int

"""
Pydantic validation schemas

Records are stored and served with camelCase keys (``clientId``,
``caseNumber``, ``relatedTo`` ...); Python code uses the snake_case names.
"""
from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

from courtbell.utils.validators import (
    validate_date,
    validate_ifsc,
    validate_mobile,
    validate_photo_data_url,
    validate_time,
    validate_upi_id,
)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def reject_null(cls, v):
    """Patch fields that back a required record field may be omitted but not nulled"""
    if v is None:
        raise ValueError("cannot be null")
    return v


# ============================================================================
# Case Schemas
# ============================================================================

class Hearing(CamelModel):
    """A past court appearance, embedded in a case"""
    date: str
    notes: str = ""

    @field_validator("date", mode="before")
    @classmethod
    def check_date(cls, v):
        return validate_date(v)


class Expense(CamelModel):
    description: str = Field(..., min_length=1)
    amount: float = Field(..., ge=0)


class CaseCreate(CamelModel):
    title: str = Field(..., min_length=2)
    client_id: str = Field(..., min_length=1)
    junior_id: Optional[str] = None
    case_number: str = Field(..., min_length=1)
    court: str = Field(..., min_length=2)
    date: str
    time: str = "09:00"
    notes: Optional[str] = None
    history: List[Hearing] = Field(default_factory=list)
    expenses: List[Expense] = Field(default_factory=list)

    @field_validator("date", mode="before")
    @classmethod
    def check_date(cls, v):
        return validate_date(v)

    @field_validator("time")
    @classmethod
    def check_time(cls, v):
        return validate_time(v)


class Case(CaseCreate):
    id: str


class CasePatch(CamelModel):
    """Partial update; only fields explicitly sent are applied. Only
    ``junior_id`` and ``notes`` may be cleared with null."""
    title: Optional[str] = Field(None, min_length=2)
    client_id: Optional[str] = Field(None, min_length=1)
    junior_id: Optional[str] = None
    case_number: Optional[str] = Field(None, min_length=1)
    court: Optional[str] = Field(None, min_length=2)
    date: Optional[str] = None
    time: Optional[str] = None
    notes: Optional[str] = None
    history: Optional[List[Hearing]] = None
    expenses: Optional[List[Expense]] = None

    check_not_null = field_validator(
        "title", "client_id", "case_number", "court", "date", "time", "history", "expenses", mode="before"
    )(reject_null)

    @field_validator("date", mode="before")
    @classmethod
    def check_date(cls, v):
        return validate_date(v)

    @field_validator("time")
    @classmethod
    def check_time(cls, v):
        return validate_time(v)


# ============================================================================
# Client / Junior Schemas
# ============================================================================

class ClientCreate(CamelModel):
    name: str = Field(..., min_length=2)
    address: Optional[str] = None
    phone: Optional[str] = None


class Client(ClientCreate):
    id: str


class ClientPatch(CamelModel):
    name: Optional[str] = Field(None, min_length=2)
    address: Optional[str] = None
    phone: Optional[str] = None

    check_not_null = field_validator("name", mode="before")(reject_null)


class JuniorCreate(CamelModel):
    name: str = Field(..., min_length=2)
    qualification: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    whatsapp: Optional[str] = None


class Junior(JuniorCreate):
    id: str


class JuniorPatch(CamelModel):
    name: Optional[str] = Field(None, min_length=2)
    qualification: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    whatsapp: Optional[str] = None

    check_not_null = field_validator("name", mode="before")(reject_null)


# ============================================================================
# Transaction Schemas
# ============================================================================

RelatedKind = Literal["client", "junior", "other"]


class RelatedTo(CamelModel):
    type: RelatedKind
    id: str = Field(..., min_length=1)
    name: str = ""


class TransactionCreate(CamelModel):
    type: Literal["in", "out"]
    description: str = Field(..., min_length=1)
    amount: float = Field(..., gt=0)
    related_to: RelatedTo
    date: Optional[str] = None


class Transaction(TransactionCreate):
    id: str
    date: str


class TransactionSummary(CamelModel):
    total_income: float
    total_outcome: float
    net_balance: float


# ============================================================================
# Profile Schemas
# ============================================================================

class UserProfile(CamelModel):
    name: Optional[str] = None
    email: Optional[str] = None
    photo_data_url: Optional[str] = None
    mobile_number: Optional[str] = None
    address: Optional[str] = None
    bank_name: Optional[str] = None
    bank_account: Optional[str] = None
    account_type: Optional[str] = None
    ifsc_code: Optional[str] = None
    upi_id: Optional[str] = None

    @field_validator("photo_data_url")
    @classmethod
    def check_photo(cls, v):
        if v and not validate_photo_data_url(v):
            raise ValueError("Photo must be an inline image data URL")
        return v

    @field_validator("mobile_number")
    @classmethod
    def check_mobile(cls, v):
        if v and not validate_mobile(v.replace(" ", "")):
            raise ValueError("Invalid mobile number")
        return v

    @field_validator("ifsc_code")
    @classmethod
    def check_ifsc(cls, v):
        if v and not validate_ifsc(v):
            raise ValueError("Invalid IFSC code")
        return v.upper() if v else v

    @field_validator("upi_id")
    @classmethod
    def check_upi(cls, v):
        if v and not validate_upi_id(v):
            raise ValueError("Invalid UPI ID")
        return v


# ============================================================================
# Auth Schemas
# ============================================================================

class SignupRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)
    display_name: Optional[str] = None


class UserLogin(BaseModel):
    """Login schema"""
    email: EmailStr
    password: str


class ForgotPasswordRequest(BaseModel):
    """Forgot password - request reset link"""
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    """Reset password with token from email"""
    token: str = Field(..., min_length=1)
    password: str = Field(..., min_length=6)


class UserOut(BaseModel):
    id: str
    email: EmailStr
    display_name: Optional[str] = None
    is_active: bool
    created_at: datetime
    last_login_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserOut


# ============================================================================
# Legal Tools Schemas
# ============================================================================

class LegalToolsRequest(CamelModel):
    case_details: str = Field(..., min_length=1)


class LegalToolSuggestions(CamelModel):
    suggested_statutes: List[str] = Field(default_factory=list)
    suggested_case_law: List[str] = Field(default_factory=list)
    suggested_templates: List[str] = Field(default_factory=list)


# ============================================================================
# Reminder Schemas
# ============================================================================

PermissionValue = Literal["default", "granted", "denied"]


class ScheduledReminderOut(CamelModel):
    case_id: str
    title: str
    fire_at: datetime
    delay_seconds: float


class NoticeOut(CamelModel):
    id: str
    title: str
    description: str
    created_at: datetime
    expires_at: datetime


class NotificationOut(CamelModel):
    tag: str
    title: str
    body: str
    created_at: datetime


class PermissionState(CamelModel):
    permission: PermissionValue
    requested: bool = False


class PermissionUpdate(CamelModel):
    permission: Literal["granted", "denied"]

"""Company directory endpoints (recepcion+).

GET    /companies?search=  -> list
GET    /companies/{id}     -> detail
POST   /companies          -> create
PATCH  /companies/{id}     -> update
DELETE /companies/{id}     -> delete, or deactivate when referenced
"""

from __future__ import annotations

from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException, Path, Query
from pydantic import BaseModel, ConfigDict, Field

from hostal.api.auth import CurrentUser
from hostal.api.rbac import require_role
from hostal.api.serializers import record_to_dict
from hostal.infra.db import txn
from hostal.infra.repositories import companies_repository
from hostal.observability.correlation import get_correlation_id
from hostal.observability.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/companies", tags=["companies"])


class CreateCompanyRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., min_length=1)
    tax_id: str | None = None
    contact_person: str | None = None
    email: str | None = None
    phone: str | None = None
    discount_percent: Decimal | None = Field(None, ge=0, le=100)
    notes: str | None = None
    is_active: bool = True


class UpdateCompanyRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(None, min_length=1)
    tax_id: str | None = None
    contact_person: str | None = None
    email: str | None = None
    phone: str | None = None
    discount_percent: Decimal | None = Field(None, ge=0, le=100)
    notes: str | None = None
    is_active: bool | None = None


@router.get("")
def list_companies(
    search: str | None = Query(None, max_length=100),
    include_inactive: bool = Query(True),
    user: CurrentUser = Depends(require_role("recepcion")),
) -> list[dict]:
    with txn() as cur:
        companies = companies_repository.list_companies(
            cur, search=search, include_inactive=include_inactive
        )
    return [record_to_dict(c) for c in companies]


@router.get("/{company_id}")
def get_company(
    company_id: int = Path(..., description="Company ID"),
    user: CurrentUser = Depends(require_role("recepcion")),
) -> dict:
    with txn() as cur:
        company = companies_repository.get_company(cur, company_id)
    if company is None:
        raise HTTPException(status_code=404, detail="Company not found")
    return record_to_dict(company)


@router.post("", status_code=201)
def create_company(
    body: CreateCompanyRequest,
    user: CurrentUser = Depends(require_role("recepcion")),
) -> dict:
    with txn() as cur:
        company = companies_repository.insert_company(cur, body.model_dump())

    logger.info(
        "company created",
        extra={"extra_fields": {"correlationId": get_correlation_id(), "company_id": company.id}},
    )
    return record_to_dict(company)


@router.patch("/{company_id}")
def update_company(
    company_id: int = Path(..., description="Company ID"),
    body: UpdateCompanyRequest = ...,
    user: CurrentUser = Depends(require_role("recepcion")),
) -> dict:
    fields = body.model_dump(exclude_unset=True)
    if not fields:
        raise HTTPException(status_code=400, detail="No fields to update")

    with txn() as cur:
        company = companies_repository.update_company(cur, company_id, fields)
    if company is None:
        raise HTTPException(status_code=404, detail="Company not found")
    return record_to_dict(company)


@router.delete("/{company_id}")
def delete_company(
    company_id: int = Path(..., description="Company ID"),
    user: CurrentUser = Depends(require_role("recepcion")),
) -> dict:
    with txn() as cur:
        outcome = companies_repository.delete_company(cur, company_id)
    if outcome is None:
        raise HTTPException(status_code=404, detail="Company not found")

    logger.info(
        "company removed",
        extra={
            "extra_fields": {
                "correlationId": get_correlation_id(),
                "company_id": company_id,
                "outcome": outcome,
            }
        },
    )
    return {"id": company_id, "result": outcome}

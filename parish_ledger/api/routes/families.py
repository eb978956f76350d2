"""Family directory API routes (families and their members)."""

from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Request, status

from parish_ledger.api.deps import (
    PageParams,
    get_family_service,
    get_member_service,
    notify_after_response,
    parse_unit_filter,
)
from parish_ledger.schemas.common import Envelope, PagedEnvelope, PaginationResponse
from parish_ledger.schemas.families import (
    FamilyPayload,
    FamilyResponse,
    MemberPayload,
    MemberResponse,
)
from parish_ledger.services.family_service import FamilyService
from parish_ledger.services.member_service import MemberService

router = APIRouter(prefix="/api/families", tags=["families"])


@router.get("", response_model=PagedEnvelope[FamilyResponse])
async def list_families(
    unit_id: Optional[str] = Query(None, description="Unit id, or 'all'"),
    search: Optional[str] = Query(None, description="Head name, card number or address"),
    paging: PageParams = Depends(),
    service: FamilyService = Depends(get_family_service),
) -> PagedEnvelope[FamilyResponse]:
    """List families, newest first, with optional unit filter and search."""
    families, pagination = service.list_families(
        unit_id=parse_unit_filter(unit_id),
        search=search,
        page=paging.page,
        limit=paging.limit,
    )
    return PagedEnvelope(
        data=[FamilyResponse.model_validate(family) for family in families],
        pagination=PaginationResponse.model_validate(pagination),
    )


@router.post("", response_model=Envelope[FamilyResponse], status_code=status.HTTP_201_CREATED)
async def create_family(
    payload: FamilyPayload,
    request: Request,
    background_tasks: BackgroundTasks,
    service: FamilyService = Depends(get_family_service),
) -> Envelope[FamilyResponse]:
    """
    Register a family.

    A welcome e-mail is sent after the response when the family has an e-mail.

    Returns:
        201: The new family
        400: Unknown unit, blank card number or head name, bad e-mail
        409: Card number already registered
    """
    family = service.create_family(
        payload.unit_id,
        payload.card_no,
        payload.head_name,
        email=payload.email,
        **payload.details(),
    )
    notify_after_response(request, background_tasks)
    return Envelope(
        data=FamilyResponse.model_validate(family), message="Family created successfully"
    )


@router.get("/{family_id}", response_model=Envelope[FamilyResponse])
async def get_family(
    family_id: int, service: FamilyService = Depends(get_family_service)
) -> Envelope[FamilyResponse]:
    family = service.get_family(family_id)
    return Envelope(data=FamilyResponse.model_validate(family))


@router.put("/{family_id}", response_model=Envelope[FamilyResponse])
async def update_family(
    family_id: int,
    payload: FamilyPayload,
    service: FamilyService = Depends(get_family_service),
) -> Envelope[FamilyResponse]:
    family = service.update_family(
        family_id,
        payload.unit_id,
        payload.card_no,
        payload.head_name,
        email=payload.email,
        **payload.details(),
    )
    return Envelope(
        data=FamilyResponse.model_validate(family), message="Family updated successfully"
    )


@router.delete("/{family_id}", response_model=Envelope[FamilyResponse])
async def delete_family(
    family_id: int, service: FamilyService = Depends(get_family_service)
) -> Envelope[FamilyResponse]:
    """Delete a family together with its members and payments."""
    family = service.delete_family(family_id)
    return Envelope(
        data=FamilyResponse.model_validate(family), message="Family deleted successfully"
    )


@router.get("/{family_id}/members", response_model=Envelope[list[MemberResponse]])
async def list_members(
    family_id: int, service: MemberService = Depends(get_member_service)
) -> Envelope[list[MemberResponse]]:
    members = service.list_members(family_id)
    return Envelope(data=[MemberResponse.model_validate(member) for member in members])


@router.post(
    "/{family_id}/members",
    response_model=Envelope[MemberResponse],
    status_code=status.HTTP_201_CREATED,
)
async def add_member(
    family_id: int,
    payload: MemberPayload,
    service: MemberService = Depends(get_member_service),
) -> Envelope[MemberResponse]:
    """
    Add a member to a family.

    Returns:
        201: The new member
        404: Family not found
        409: The family already has a member with that name
    """
    member = service.add_member(family_id, payload.name, **payload.service_fields())
    return Envelope(
        data=MemberResponse.model_validate(member), message="Member added successfully"
    )


@router.put("/{family_id}/members/{member_id}", response_model=Envelope[MemberResponse])
async def update_member(
    family_id: int,
    member_id: int,
    payload: MemberPayload,
    service: MemberService = Depends(get_member_service),
) -> Envelope[MemberResponse]:
    member = service.update_member(
        family_id, member_id, payload.name, **payload.service_fields()
    )
    return Envelope(
        data=MemberResponse.model_validate(member), message="Member updated successfully"
    )


@router.delete("/{family_id}/members/{member_id}", response_model=Envelope[MemberResponse])
async def delete_member(
    family_id: int,
    member_id: int,
    service: MemberService = Depends(get_member_service),
) -> Envelope[MemberResponse]:
    member = service.delete_member(family_id, member_id)
    return Envelope(
        data=MemberResponse.model_validate(member), message="Member deleted successfully"
    )

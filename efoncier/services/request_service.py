"""
e-Foncier Backend: Citizen Request Service
===========================================

What:  Intake and processing of citizens' document requests.

Status workflow:
    ┌─────────────┐  approve  ┌──────────┐
    │ En attente  │──────────▶│ Approuvé │
    │ (pending)   │           └──────────┘
    │             │  reject   ┌──────────┐
    │             │──────────▶│ Rejeté   │
    └─────────────┘           └──────────┘

    Approved and rejected requests are final; any other move is a 409.
"""

import logging
import uuid
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from efoncier.exceptions import ConflictError, NotFoundError, ValidationError
from efoncier.models.document_request import DocumentRequest
from efoncier.models.parcel import utcnow
from efoncier.schemas.document_request import RequestCreate, RequestResponse, RequestStatusUpdate
from efoncier.vocabulary import REQUEST_PENDING, REQUEST_STATUSES, REQUEST_TRANSITIONS

logger = logging.getLogger(__name__)

REQUIRED_REQUEST_FIELDS = ("citizen_name", "parcel_reference", "document_type")


def _check_status(status: str) -> None:
    if status not in REQUEST_STATUSES:
        raise ValidationError(
            message=f"Invalid status '{status}'. Allowed: {', '.join(REQUEST_STATUSES)}",
            field="status",
        )


class RequestService:

    async def list_requests(self, db: AsyncSession, status: Optional[str] = None) -> List[RequestResponse]:
        query = select(DocumentRequest)
        if status and status != "all":
            query = query.where(DocumentRequest.status == status)
        query = query.order_by(DocumentRequest.created_at.desc())

        result = await db.execute(query)
        return [RequestResponse.model_validate(r) for r in result.scalars().all()]

    async def create_request(self, db: AsyncSession, payload: RequestCreate) -> RequestResponse:
        """
        Files a new request.

        Raises:
            ValidationError: a required field is blank, or the status is
            not part of the workflow (→ 400)
        """
        values = {}
        for field in REQUIRED_REQUEST_FIELDS:
            value = (getattr(payload, field) or "").strip()
            if not value:
                raise ValidationError(message=f"Invalid payload: missing {field}", field=field)
            values[field] = value

        status = (payload.status or "").strip() or REQUEST_PENDING
        _check_status(status)

        request = DocumentRequest(status=status, **values)
        db.add(request)
        await db.flush()

        logger.info(
            "Request %s filed by %s for parcel %s (%s)",
            request.id,
            request.citizen_name,
            request.parcel_reference,
            request.document_type,
        )
        return RequestResponse.model_validate(request)

    async def update_request_status(
        self,
        db: AsyncSession,
        request_id: uuid.UUID,
        payload: RequestStatusUpdate,
    ) -> RequestResponse:
        """
        Moves a request along the workflow.

        Raises:
            NotFoundError: unknown request (→ 404)
            ValidationError: status missing or outside the vocabulary (→ 400)
            ConflictError: transition not allowed from the current status (→ 409)
        """
        request = await db.get(DocumentRequest, request_id)
        if request is None:
            raise NotFoundError(resource="request", resource_id=str(request_id))

        status = (payload.status or "").strip()
        if not status:
            raise ValidationError(message="Invalid payload: missing status", field="status")
        _check_status(status)

        if status not in REQUEST_TRANSITIONS.get(request.status, ()):
            raise ConflictError(
                message=f"Cannot move request from '{request.status}' to '{status}'",
                context={"current": request.status, "requested": status},
            )

        previous = request.status
        request.status = status
        request.updated_at = utcnow()
        await db.flush()

        logger.info("Request %s: %s → %s", request.id, previous, status)
        return RequestResponse.model_validate(request)


request_service = RequestService()

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from gagyebu.api.deps import HouseholdAccess, get_household_access, get_receipts, parse_optional_uuid
from gagyebu.api.transactions import build_transaction_responses, load_transaction_or_404
from gagyebu.core.db import get_session
from gagyebu.models.transaction import utc_now_naive
from gagyebu.schemas.transaction import ReceiptResponse, TransactionResponse
from gagyebu.services.receipt_storage import (
    ReceiptStorage,
    ReceiptStorageError,
    ReceiptTooLargeError,
    ReceiptValidationError,
)

router = APIRouter(prefix="/households/{household_id}", tags=["receipts"])


@router.post("/receipts", response_model=ReceiptResponse, status_code=status.HTTP_201_CREATED)
async def upload_receipt(
    file: UploadFile = File(...),
    transaction_id: str | None = Form(default=None),
    access: HouseholdAccess = Depends(get_household_access),
    session: AsyncSession = Depends(get_session),
    storage: ReceiptStorage = Depends(get_receipts),
) -> ReceiptResponse:
    transaction = None
    if parse_optional_uuid(transaction_id, "transaction_id") is not None:
        transaction = await load_transaction_or_404(session, access, transaction_id)

    data = await file.read()
    try:
        stored = storage.save(
            data=data,
            filename=file.filename,
            content_type=file.content_type,
            user_id=access.user.id,
            transaction_id=transaction.id if transaction else None,
        )
    except ReceiptTooLargeError as exc:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=str(exc),
        ) from exc
    except ReceiptValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
            detail=str(exc),
        ) from exc
    except ReceiptStorageError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(exc),
        ) from exc

    if transaction is not None:
        transaction.receipt_url = stored.public_url
        transaction.updated_by = access.user.id
        transaction.updated_at = utc_now_naive()
        session.add(transaction)
        await session.commit()

    return ReceiptResponse(
        path=stored.path,
        public_url=stored.public_url,
        transaction_id=str(transaction.id) if transaction else None,
    )


@router.delete("/transactions/{transaction_id}/receipt", response_model=TransactionResponse)
async def delete_receipt(
    transaction_id: str,
    access: HouseholdAccess = Depends(get_household_access),
    session: AsyncSession = Depends(get_session),
    storage: ReceiptStorage = Depends(get_receipts),
) -> TransactionResponse:
    transaction = await load_transaction_or_404(session, access, transaction_id)
    if not transaction.receipt_url:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Transaction has no receipt",
        )
    path = storage.path_from_public_url(transaction.receipt_url)
    if path:
        try:
            storage.delete(path)
        except ReceiptStorageError as exc:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=str(exc),
            ) from exc

    transaction.receipt_url = None
    transaction.updated_by = access.user.id
    transaction.updated_at = utc_now_naive()
    session.add(transaction)
    await session.commit()
    await session.refresh(transaction)
    items = await build_transaction_responses(session, [transaction])
    return items[0]

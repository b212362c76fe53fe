"""
FastAPI router for invoices.

All routes delegate to use cases. No business logic here.
Failures propagate to the error boundary, which renders the error envelope.
"""

from fastapi import APIRouter, Depends, Query, status

from invoicing.application.billing.create_invoice import CreateInvoiceUseCase
from invoicing.application.billing.dtos import SearchInvoicesQuery
from invoicing.application.billing.get_invoice import GetInvoiceUseCase
from invoicing.application.billing.list_invoices import ListInvoicesUseCase
from invoicing.domain.result import Failure
from invoicing.interfaces.billing.dependencies import (
    get_create_invoice_use_case,
    get_get_invoice_use_case,
    get_list_invoices_use_case,
)
from invoicing.interfaces.billing.schemas import (
    CreateInvoiceRequest,
    FieldErrorSchema,
    InvoiceNumberExistsResponse,
    InvoicePageResponse,
    InvoicePreviewResponse,
    InvoiceResponse,
)
from invoicing.shared.errors.envelope import ErrorEnvelope

router = APIRouter(prefix="/invoices", tags=["invoices"])

ERROR_RESPONSES = {
    400: {"model": ErrorEnvelope, "description": "Invalid input"},
    500: {"model": ErrorEnvelope, "description": "Unexpected failure"},
}


@router.get(
    "",
    response_model=InvoicePageResponse,
    responses=ERROR_RESPONSES,
    summary="List invoices",
    description="Paged list of invoices, newest first.",
)
def list_invoices(
    page: int = Query(1, description="1-based page number"),
    page_size: int = Query(10, alias="pageSize", description="Invoices per page"),
    use_case: ListInvoicesUseCase = Depends(get_list_invoices_use_case),
) -> InvoicePageResponse:
    """Return one page of invoices."""
    return InvoicePageResponse.from_page(use_case.execute(page, page_size))


@router.get(
    "/search",
    response_model=list[InvoiceResponse],
    responses=ERROR_RESPONSES,
    summary="Search invoices",
    description="Search by client name (Client) or invoice number (InvoiceNumber).",
)
def search_invoices(
    search_type: str = Query(..., alias="searchType"),
    search_value: str = Query(..., alias="searchValue"),
    use_case: ListInvoicesUseCase = Depends(get_list_invoices_use_case),
) -> list[InvoiceResponse]:
    """Search invoices by client or by number."""
    results = use_case.search(
        SearchInvoicesQuery(search_type=search_type, search_value=search_value)
    )
    return [InvoiceResponse.from_entity(invoice) for invoice in results]


@router.get(
    "/number/{invoice_number}",
    response_model=InvoiceResponse,
    responses={**ERROR_RESPONSES, 404: {"model": ErrorEnvelope}},
    summary="Get invoice by number",
)
def get_invoice_by_number(
    invoice_number: str,
    use_case: GetInvoiceUseCase = Depends(get_get_invoice_use_case),
) -> InvoiceResponse:
    return InvoiceResponse.from_entity(use_case.by_number(invoice_number))


@router.get(
    "/number/{invoice_number}/exists",
    response_model=InvoiceNumberExistsResponse,
    responses=ERROR_RESPONSES,
    summary="Check whether an invoice number is taken",
)
def invoice_number_exists(
    invoice_number: str,
    use_case: GetInvoiceUseCase = Depends(get_get_invoice_use_case),
) -> InvoiceNumberExistsResponse:
    return InvoiceNumberExistsResponse(
        invoice_number=invoice_number,
        exists=use_case.number_exists(invoice_number),
    )


@router.post(
    "/preview",
    response_model=InvoicePreviewResponse,
    responses=ERROR_RESPONSES,
    summary="Check an invoice without issuing it",
    description=(
        "Runs every invoice check and returns the computed totals or the "
        "full list of violations. Nothing is stored."
    ),
)
def preview_invoice(
    request: CreateInvoiceRequest,
    use_case: CreateInvoiceUseCase = Depends(get_create_invoice_use_case),
) -> InvoicePreviewResponse:
    result = use_case.preview(request.to_command())
    if isinstance(result, Failure):
        return InvoicePreviewResponse(
            is_valid=False,
            errors=[FieldErrorSchema.from_domain(e) for e in result.validation_errors],
        )
    totals = result.value
    return InvoicePreviewResponse(
        is_valid=True,
        subtotal=totals.subtotal,
        tax_amount=totals.tax_amount,
        total=totals.total,
    )


@router.post(
    "",
    response_model=InvoiceResponse,
    status_code=status.HTTP_201_CREATED,
    responses={**ERROR_RESPONSES, 409: {"model": ErrorEnvelope}},
    summary="Issue an invoice",
)
def create_invoice(
    request: CreateInvoiceRequest,
    use_case: CreateInvoiceUseCase = Depends(get_create_invoice_use_case),
) -> InvoiceResponse:
    """Validate and store a new invoice."""
    return InvoiceResponse.from_entity(use_case.execute(request.to_command()))


@router.get(
    "/{invoice_id}",
    response_model=InvoiceResponse,
    responses={**ERROR_RESPONSES, 404: {"model": ErrorEnvelope}},
    summary="Get invoice by id",
)
def get_invoice(
    invoice_id: int,
    use_case: GetInvoiceUseCase = Depends(get_get_invoice_use_case),
) -> InvoiceResponse:
    return InvoiceResponse.from_entity(use_case.execute(invoice_id))

"""
FastAPI router for the catalog: clients and products.

All routes delegate to use cases. No business logic here.
"""

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import Response

from invoicing.application.billing.list_clients import ListClientsUseCase
from invoicing.application.billing.manage_products import ManageProductsUseCase
from invoicing.interfaces.billing.dependencies import (
    get_list_clients_use_case,
    get_manage_products_use_case,
)
from invoicing.interfaces.billing.schemas import (
    ClientResponse,
    CreateProductRequest,
    ProductResponse,
    ProductStatusResponse,
    UpdateProductRequest,
)
from invoicing.shared.errors.envelope import ErrorEnvelope

router = APIRouter(prefix="/catalog", tags=["catalog"])

ERROR_RESPONSES = {
    400: {"model": ErrorEnvelope, "description": "Invalid input"},
    500: {"model": ErrorEnvelope, "description": "Unexpected failure"},
}
PRODUCT_ERROR_RESPONSES = {**ERROR_RESPONSES, 404: {"model": ErrorEnvelope}}


@router.get(
    "/clients",
    response_model=list[ClientResponse],
    responses=ERROR_RESPONSES,
    summary="List clients",
)
def list_clients(
    use_case: ListClientsUseCase = Depends(get_list_clients_use_case),
) -> list[ClientResponse]:
    return [ClientResponse.from_entity(client) for client in use_case.execute()]


@router.get(
    "/products",
    response_model=list[ProductResponse],
    responses=ERROR_RESPONSES,
    summary="List products",
)
def list_products(
    use_case: ManageProductsUseCase = Depends(get_manage_products_use_case),
) -> list[ProductResponse]:
    return [ProductResponse.from_entity(p) for p in use_case.list_all()]


@router.get(
    "/products/active",
    response_model=list[ProductResponse],
    responses=ERROR_RESPONSES,
    summary="List active products",
)
def list_active_products(
    use_case: ManageProductsUseCase = Depends(get_manage_products_use_case),
) -> list[ProductResponse]:
    return [ProductResponse.from_entity(p) for p in use_case.list_active()]


@router.get(
    "/products/search",
    response_model=list[ProductResponse],
    responses=ERROR_RESPONSES,
    summary="Search products by name or description",
)
def search_products(
    term: str = Query(""),
    use_case: ManageProductsUseCase = Depends(get_manage_products_use_case),
) -> list[ProductResponse]:
    return [ProductResponse.from_entity(p) for p in use_case.search(term)]


@router.get(
    "/products/{product_id}",
    response_model=ProductResponse,
    responses=PRODUCT_ERROR_RESPONSES,
    summary="Get product by id",
)
def get_product(
    product_id: int,
    use_case: ManageProductsUseCase = Depends(get_manage_products_use_case),
) -> ProductResponse:
    return ProductResponse.from_entity(use_case.get(product_id))


@router.post(
    "/products",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        **ERROR_RESPONSES,
        409: {"model": ErrorEnvelope},
        422: {"model": ErrorEnvelope},
    },
    summary="Create a product",
)
def create_product(
    request: CreateProductRequest,
    use_case: ManageProductsUseCase = Depends(get_manage_products_use_case),
) -> ProductResponse:
    return ProductResponse.from_entity(use_case.create(request.to_command()))


@router.put(
    "/products/{product_id}",
    response_model=ProductResponse,
    responses={
        **PRODUCT_ERROR_RESPONSES,
        409: {"model": ErrorEnvelope},
        422: {"model": ErrorEnvelope},
    },
    summary="Update a product",
)
def update_product(
    product_id: int,
    request: UpdateProductRequest,
    use_case: ManageProductsUseCase = Depends(get_manage_products_use_case),
) -> ProductResponse:
    return ProductResponse.from_entity(
        use_case.update(product_id, request.to_command())
    )


@router.delete(
    "/products/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses=PRODUCT_ERROR_RESPONSES,
    summary="Delete a product",
)
def delete_product(
    product_id: int,
    use_case: ManageProductsUseCase = Depends(get_manage_products_use_case),
) -> Response:
    use_case.delete(product_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch(
    "/products/{product_id}/toggle-status",
    response_model=ProductStatusResponse,
    responses=PRODUCT_ERROR_RESPONSES,
    summary="Activate or deactivate a product",
)
def toggle_product_status(
    product_id: int,
    use_case: ManageProductsUseCase = Depends(get_manage_products_use_case),
) -> ProductStatusResponse:
    return ProductStatusResponse(
        id=product_id, is_active=use_case.toggle_status(product_id)
    )

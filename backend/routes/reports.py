# backend/routes/reports.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from config import settings
from repositories.errors import DataAccessError
from repositories.products import ProductRepository, get_product_repository
from schemas.product import ProductRecord, ProductReportFilter
from utils.pdf import generate_product_report_pdf

router = APIRouter(prefix="/products/reports", tags=["Reports"])


def _server_error() -> HTTPException:
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal Server Error")


# -----------------------------
# 1) Wyszukiwanie z filtrami
# -----------------------------
@router.get("", response_model=List[ProductRecord])
def report_filtered_products(
    product_name: str = Query("", alias="productName", description="Nazwa zawiera"),
    manufacturer: str = Query("", description="Producent zawiera"),
    sku: str = Query("", description="SKU zawiera"),
    repo: ProductRepository = Depends(get_product_repository),
):
    report_filter = ProductReportFilter(
        name_filter=product_name,
        manufacturer_filter=manufacturer,
        sku_filter=sku,
    )
    try:
        return repo.search_filtered(report_filter)
    except DataAccessError:
        raise _server_error()


# -----------------------------
# 2) Najlepiej zaopatrzone produkty
# -----------------------------
@router.get("/top", response_model=List[ProductRecord])
def report_top_products(
    limit: int = Query(settings.TOP_PRODUCTS_LIMIT, ge=1, le=100),
    repo: ProductRepository = Depends(get_product_repository),
):
    try:
        return repo.top_n(limit)
    except DataAccessError:
        raise _server_error()


# -----------------------------
# 3) Raport PDF do pobrania
# -----------------------------
@router.post("")
def download_product_report(
    report_filter: ProductReportFilter,
    repo: ProductRepository = Depends(get_product_repository),
):
    try:
        products = repo.search_filtered(report_filter)
    except DataAccessError:
        raise _server_error()

    return Response(
        content=generate_product_report_pdf(products, report_filter),
        media_type="application/pdf",
        headers={"Content-Disposition": 'attachment; filename="report.pdf"'},
    )


@router.options("")
def reports_options():
    return Response(status_code=status.HTTP_200_OK)


# Raporty: tylko GET i POST, pozostałe metody to 405
@router.api_route("", methods=["PUT", "DELETE", "PATCH"], include_in_schema=False)
def reports_method_not_allowed():
    raise HTTPException(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        headers={"Allow": "GET, POST, OPTIONS"},
    )

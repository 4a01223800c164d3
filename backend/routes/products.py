# backend/routes/products.py
import logging
from typing import Annotated, List

from fastapi import APIRouter, Depends, HTTPException, Path, Response, status

from repositories.errors import DataAccessError, MissingProductIdError, ProductRepositoryError
from repositories.products import ProductRepository, get_product_repository
from schemas.product import MAX_INT, MIN_INT, ProductCreated, ProductEvent, ProductRecord
from utils.notifications import ProductNotifier, get_notifier

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/products", tags=["Products"])

# IDs outside the ID column range are malformed input, not lookups
ProductId = Annotated[int, Path(ge=MIN_INT, le=MAX_INT)]


def _server_error() -> HTTPException:
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal Server Error")


# =========================
# KOLEKCJA PRODUKTÓW
# =========================
@router.get("", response_model=List[ProductRecord])
def list_products(repo: ProductRepository = Depends(get_product_repository)):
    try:
        return repo.list_all()
    except DataAccessError:
        raise _server_error()


@router.post("", status_code=status.HTTP_201_CREATED, response_model=ProductCreated)
def add_product(
    product: ProductRecord,
    repo: ProductRepository = Depends(get_product_repository),
    notifier: ProductNotifier = Depends(get_notifier),
):
    # The store assigns the ID; whatever the client sent is ignored
    try:
        product_id = repo.insert(product)
    except (DataAccessError, MissingProductIdError) as e:
        logger.error("Product insert failed: %s", e)
        raise _server_error()

    created = product.model_copy(update={"product_id": product_id})
    notifier.publish(ProductEvent(event="created", product_id=product_id, product=created))
    return ProductCreated(product_id=product_id)


@router.options("")
def products_options():
    return Response(status_code=status.HTTP_200_OK)


# =========================
# POJEDYNCZY PRODUKT
# =========================
@router.get("/{product_id}", response_model=ProductRecord)
def get_product(product_id: ProductId, repo: ProductRepository = Depends(get_product_repository)):
    try:
        product = repo.get_by_id(product_id)
    except DataAccessError:
        raise _server_error()
    if product is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    return product


@router.put("/{product_id}")
def update_product(
    product_id: ProductId,
    product: ProductRecord,
    repo: ProductRepository = Depends(get_product_repository),
    notifier: ProductNotifier = Depends(get_notifier),
):
    if product.product_id != product_id:
        logger.warning("Product id mismatch: path=%s body=%s", product_id, product.product_id)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Product id does not match path")

    try:
        repo.update(product)
    except ProductRepositoryError as e:
        logger.warning("Product update rejected: %s", e)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Product could not be updated")

    notifier.publish(ProductEvent(event="updated", product_id=product_id, product=product))
    return Response(status_code=status.HTTP_200_OK)


@router.delete("/{product_id}")
def delete_product(
    product_id: ProductId,
    repo: ProductRepository = Depends(get_product_repository),
    notifier: ProductNotifier = Depends(get_notifier),
):
    try:
        repo.delete(product_id)
    except DataAccessError:
        raise _server_error()

    notifier.publish(ProductEvent(event="deleted", product_id=product_id))
    return Response(status_code=status.HTTP_200_OK)


@router.options("/{product_id}")
def product_options(product_id: int):
    return Response(status_code=status.HTTP_200_OK)

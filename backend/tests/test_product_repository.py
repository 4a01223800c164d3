from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal

import pytest
from sqlalchemy.orm import sessionmaker

from database import Base, Gateway, create_db_engine
from repositories.errors import DataAccessError, InvalidProductError
from repositories.products import ProductRepository
from schemas.product import ProductRecord, ProductReportFilter


def test_insert_then_get_returns_same_product(repository, make_product):
    product = make_product()

    new_id = repository.insert(product)
    stored = repository.get_by_id(new_id)

    assert new_id > 0
    assert stored.model_dump() == {**product.model_dump(), "product_id": new_id}


def test_insert_ignores_client_supplied_id(repository, make_product):
    new_id = repository.insert(make_product(product_id=999))

    assert new_id != 999
    assert repository.get_by_id(999) is None


def test_price_is_stored_with_two_decimals(repository, make_product):
    new_id = repository.insert(make_product(price_per_unit=Decimal("3.456")))

    assert repository.get_by_id(new_id).price_per_unit == Decimal("3.46")


def test_get_missing_product_returns_none(repository):
    assert repository.get_by_id(12345) is None


def test_delete_then_get_is_not_found(repository, make_product):
    new_id = repository.insert(make_product())

    repository.delete(new_id)

    assert repository.get_by_id(new_id) is None


def test_delete_missing_product_is_not_an_error(repository):
    repository.delete(4242)

    assert repository.get_by_id(4242) is None


def test_list_all_empty_store_returns_empty_list(repository):
    assert repository.list_all() == []


def test_list_all_orders_by_id(repository, make_product):
    ids = [repository.insert(make_product(sku=f"SKU-{i}")) for i in range(3)]

    assert [p.product_id for p in repository.list_all()] == sorted(ids)


def test_update_without_id_fails_and_writes_nothing(repository, make_product):
    existing_id = repository.insert(make_product())

    with pytest.raises(InvalidProductError):
        repository.update(make_product(product_id=0, product_name="Changed"))

    assert repository.get_by_id(existing_id).product_name == "Blue Widget"


def test_update_replaces_all_columns(repository, make_product):
    new_id = repository.insert(make_product())
    changed = make_product(
        product_id=new_id,
        manufacturer="Globex",
        sku="GLX-9",
        upc="999",
        price_per_unit=Decimal("7.10"),
        quantity_on_hand=42,
        product_name="Red Gadget",
    )

    repository.update(changed)

    assert repository.get_by_id(new_id).model_dump() == changed.model_dump()


def test_update_unknown_id_is_silent(repository, make_product):
    repository.update(make_product(product_id=777))

    assert repository.get_by_id(777) is None


def test_top_n_sorted_by_quantity_descending(repository, make_product):
    for qty in [3, 50, 7, 12]:
        repository.insert(make_product(quantity_on_hand=qty))

    top = repository.top_n()

    assert [p.quantity_on_hand for p in top] == [50, 12, 7, 3]


def test_top_n_caps_result_size(repository, make_product):
    for qty in range(15):
        repository.insert(make_product(quantity_on_hand=qty))

    top = repository.top_n(10)

    assert len(top) == 10
    assert [p.quantity_on_hand for p in top] == list(range(14, 4, -1))


def test_search_by_name_is_case_insensitive(repository, make_product):
    repository.insert(make_product(product_name="Blue WIDGET"))
    repository.insert(make_product(product_name="widget stand"))
    repository.insert(make_product(product_name="Gadget"))

    found = repository.search_filtered(ProductReportFilter(name_filter="widget"))

    assert sorted(p.product_name for p in found) == ["blue widget", "widget stand"]


def test_search_combines_filters_with_and(repository, make_product):
    repository.insert(make_product(product_name="Widget", manufacturer="Acme", sku="A-1"))
    repository.insert(make_product(product_name="Widget", manufacturer="Globex", sku="G-1"))
    repository.insert(make_product(product_name="Gadget", manufacturer="Acme", sku="A-2"))

    found = repository.search_filtered(
        ProductReportFilter(name_filter="widget", manufacturer_filter="ACME")
    )

    assert len(found) == 1
    assert found[0].manufacturer == "acme"
    assert found[0].sku == "a-1"


def test_search_lowercases_text_but_not_upc(repository, make_product):
    repository.insert(make_product(upc="UPC-ABC", manufacturer="ACME", sku="XYZ"))

    found = repository.search_filtered(ProductReportFilter(sku_filter="xyz"))

    assert found[0].upc == "UPC-ABC"
    assert found[0].manufacturer == "acme"


def test_search_treats_wildcards_literally(repository, make_product):
    repository.insert(make_product(product_name="100% cotton"))
    repository.insert(make_product(product_name="1000 cotton"))

    found = repository.search_filtered(ProductReportFilter(name_filter="100%"))

    assert [p.product_name for p in found] == ["100% cotton"]


def test_search_without_filters_returns_everything(repository, make_product):
    for i in range(3):
        repository.insert(make_product(sku=f"S-{i}"))

    assert len(repository.search_filtered(ProductReportFilter())) == 3


def test_store_failure_raises_data_access_error(engine, repository):
    Base.metadata.drop_all(bind=engine)

    with pytest.raises(DataAccessError):
        repository.list_all()


# Records built without validation can still carry values no column holds
def _unchecked(**fields) -> ProductRecord:
    return ProductRecord.model_construct(**{"product_name": "Oversized", **fields})


def test_update_with_unrepresentable_price_raises_data_access_error(repository, make_product):
    product_id = repository.insert(make_product())

    with pytest.raises(DataAccessError):
        repository.update(_unchecked(product_id=product_id, price_per_unit=Decimal("1e30")))

    assert repository.get_by_id(product_id).price_per_unit == Decimal("12.50")


def test_insert_with_oversized_quantity_raises_data_access_error(repository):
    with pytest.raises(DataAccessError):
        repository.insert(_unchecked(quantity_on_hand=2**64))

    assert repository.list_all() == []


def test_lookup_and_delete_with_oversized_id_raise_data_access_error(repository):
    with pytest.raises(DataAccessError):
        repository.get_by_id(2**64)
    with pytest.raises(DataAccessError):
        repository.delete(2**64)


def test_concurrent_inserts_get_distinct_ids(tmp_path, make_product):
    engine = create_db_engine(f"sqlite:///{tmp_path / 'inventory.db'}")
    Base.metadata.create_all(bind=engine)
    repository = ProductRepository(Gateway(sessionmaker(bind=engine)))

    with ThreadPoolExecutor(max_workers=6) as pool:
        ids = list(pool.map(lambda i: repository.insert(make_product(sku=f"C-{i}")), range(20)))

    assert len(set(ids)) == 20
    assert len(repository.list_all()) == 20
    engine.dispose()

"""
Product management API routes, scoped to one of the caller's stores.
"""
from typing import Optional

from fastapi import APIRouter, Query, Response, status

from storedash.models.product import Product
from storedash.routers.deps import OwnedStore, Products
from storedash.schemas.product import ProductCreate, ProductListResponse, ProductUpdate

router = APIRouter(prefix="/stores/{store_id}/products", tags=["products"])


@router.get("", response_model=ProductListResponse)
async def list_products(
    store: OwnedStore,
    catalog: Products,
    collection_id: Optional[str] = Query(None, alias="collectionId"),
    category: Optional[str] = Query(None),
    q: Optional[str] = Query(None, description="Search by name or description"),
) -> ProductListResponse:
    """List the store's products, newest first."""
    products = await catalog.list_for_store(
        store.id,
        collection_id=collection_id,
        category=category,
        search=q,
    )
    return ProductListResponse(items=products, total=len(products))


@router.post("", response_model=Product, status_code=status.HTTP_201_CREATED)
async def create_product(store: OwnedStore, catalog: Products, body: ProductCreate) -> Product:
    return await catalog.create(store.id, body)


@router.get("/{product_id}", response_model=Product)
async def get_product(store: OwnedStore, catalog: Products, product_id: str) -> Product:
    return await catalog.get(store.id, product_id)


@router.patch("/{product_id}", response_model=Product)
async def update_product(
    store: OwnedStore,
    catalog: Products,
    product_id: str,
    body: ProductUpdate,
) -> Product:
    """Change some of a product's fields."""
    return await catalog.update(store.id, product_id, body)


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(store: OwnedStore, catalog: Products, product_id: str) -> Response:
    await catalog.delete(store.id, product_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

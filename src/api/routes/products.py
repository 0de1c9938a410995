"""Product catalog routes.

Reads are public; create, update and delete need an admin session.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Query, status

from core.dependencies import AdminDep, ProductManagerDep
from schemas.product import Product, ProductPayload

router = APIRouter(prefix="/api/products", tags=["Products"])


@router.get("", response_model=List[Dict[str, Any]], summary="List products")
def list_products(
    products: ProductManagerDep,
    name: Optional[str] = Query(None, description="Case-insensitive name filter"),
    min_price: Optional[float] = Query(None, ge=0),
    max_price: Optional[float] = Query(None, ge=0),
    sort_by: str = Query("name"),
    order: str = Query("asc"),
    fields: Optional[str] = Query(None, description="Comma-separated projection"),
) -> List[Dict[str, Any]]:
    return products.list_products(
        name=name,
        min_price=min_price,
        max_price=max_price,
        sort_by=sort_by,
        order=order,
        fields=fields,
    )


@router.get("/{product_id}", response_model=Product, summary="Get a product")
def get_product(product_id: str, products: ProductManagerDep) -> Product:
    return products.get_product(product_id)


@router.post(
    "",
    response_model=Product,
    status_code=status.HTTP_201_CREATED,
    summary="Create a product",
)
def create_product(
    req: ProductPayload,
    products: ProductManagerDep,
    admin: AdminDep,
) -> Product:
    return products.create_product(req)


@router.put("/{product_id}", response_model=Product, summary="Update a product")
def update_product(
    product_id: str,
    req: ProductPayload,
    products: ProductManagerDep,
    admin: AdminDep,
) -> Product:
    return products.update_product(product_id, req)


@router.delete("/{product_id}", summary="Delete a product")
def delete_product(
    product_id: str,
    products: ProductManagerDep,
    admin: AdminDep,
) -> dict:
    products.delete_product(product_id)
    return {"message": "Product deleted successfully"}

from typing import List
from fastapi import APIRouter, Depends, HTTPException, Response, status

from app.api.deps import get_product_service
from app.api.products.schemas import ProductResponse, ProductUpsert
from app.domain.products.service import ProductService

router = APIRouter(prefix="/products", tags=["Products"])


@router.get("", response_model=List[ProductResponse], status_code=status.HTTP_200_OK)
async def get_all_products(service: ProductService = Depends(get_product_service)):
    """List the products of the calling tenant"""
    products = await service.get_all_products()
    return [ProductResponse.model_validate(product) for product in products]


@router.get("/{product_id}", response_model=ProductResponse, status_code=status.HTTP_200_OK)
async def get_product(product_id: str, service: ProductService = Depends(get_product_service)):
    product = await service.get_product_by_id(product_id)
    if product is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    return ProductResponse.model_validate(product)


@router.put("/{product_id}", response_model=ProductResponse, status_code=status.HTTP_200_OK)
async def upsert_product(
    product_id: str,
    product_details: ProductUpsert,
    service: ProductService = Depends(get_product_service),
):
    """Create or replace a product under the calling tenant"""
    product = await service.upsert_product(product_id, product_details)
    return ProductResponse.model_validate(product)


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(product_id: str, service: ProductService = Depends(get_product_service)):
    if not await service.delete_product(product_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)

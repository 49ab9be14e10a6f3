"""Read-only product catalog tools."""

from typing import Any

from pydantic import BaseModel, Field

from catalog_agent.models.agent import AgentContext
from catalog_agent.services.catalog import CatalogService, Page, Product
from catalog_agent.tools.base import ToolDefinition

MAX_PAGE_SIZE = 25


class EmptyInput(BaseModel):
    """Empty input schema for tools that don't require parameters."""


class ListProductsInput(BaseModel):
    """Input schema for listing products."""

    only_uncategorized: bool = Field(
        default=False,
        description="If true, only return products without a category.",
    )
    page: int = Field(default=1, ge=1, description="Page number, starting at 1")
    page_size: int = Field(
        default=10,
        ge=1,
        description=f"Products per page (at most {MAX_PAGE_SIZE})",
    )


class SearchProductsInput(BaseModel):
    """Input schema for product search."""

    query: str = Field(..., min_length=1, description="Search term (name, description or brand)")
    limit: int = Field(default=10, ge=1, le=MAX_PAGE_SIZE, description="Maximum results per page")
    page: int = Field(default=1, ge=1, description="Page number, starting at 1")


class ProductIdInput(BaseModel):
    """Input schema for tools addressing one product."""

    id: str = Field(..., min_length=1, description="The product ID")


def summarize_product(product: Product, locale: str) -> dict[str, Any]:
    """Compact product representation for listings."""
    return {
        "id": product.id,
        "name": product.name,
        "brand": product.brand,
        "price": product.price,
        "category": product.category,
        "stock": product.total_stock,
        "has_description": bool(product.description(locale).strip()),
    }


def _page_payload(page: Page, locale: str) -> dict[str, Any]:
    return {
        "data": [summarize_product(p, locale) for p in page.items],
        "pagination": {
            "page": page.page,
            "page_size": page.page_size,
            "page_count": page.page_count,
            "total": page.total,
        },
    }


def create_list_categories_tool(catalog: CatalogService) -> ToolDefinition:
    async def list_categories_handler(args: BaseModel, context: AgentContext) -> list[str]:
        return await catalog.list_categories()

    return ToolDefinition(
        name="list_categories",
        description="Get the list of categories products may be assigned to.",
        input_schema_class=EmptyInput,
        handler=list_categories_handler,
    )


def create_list_products_tool(catalog: CatalogService) -> ToolDefinition:
    async def list_products_handler(args: ListProductsInput, context: AgentContext) -> dict[str, Any]:
        page_size = min(args.page_size, MAX_PAGE_SIZE)
        page = await catalog.get_products(args.page, page_size, only_uncategorized=args.only_uncategorized)
        payload = _page_payload(page, context.language)
        payload["message"] = f"Page {page.page} of {page.page_count} ({page_size} per page)"
        return payload

    return ToolDefinition(
        name="list_products",
        description='List products with optional filters and pagination. Use "page" to move between pages.',
        input_schema_class=ListProductsInput,
        handler=list_products_handler,
    )


def create_search_products_tool(catalog: CatalogService) -> ToolDefinition:
    async def search_products_handler(args: SearchProductsInput, context: AgentContext) -> dict[str, Any]:
        page = await catalog.search_products(args.query, context.language, args.limit, args.page)
        return _page_payload(page, context.language)

    return ToolDefinition(
        name="search_products",
        description='Search products by text (name, description, brand). Use "page" to see more results.',
        input_schema_class=SearchProductsInput,
        handler=search_products_handler,
    )


def create_get_product_details_tool(catalog: CatalogService) -> ToolDefinition:
    async def get_product_details_handler(args: ProductIdInput, context: AgentContext) -> Product:
        product = await catalog.get_product(args.id)
        if product is None:
            raise LookupError(f"Product {args.id} not found")
        return product

    return ToolDefinition(
        name="get_product_details",
        description="Get all information about a specific product by its ID.",
        input_schema_class=ProductIdInput,
        handler=get_product_details_handler,
    )

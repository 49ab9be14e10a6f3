"""Tools for the catalog agents."""

from catalog_agent.services.catalog import CatalogService
from catalog_agent.tools.audit_catalog import create_audit_catalog_tool
from catalog_agent.tools.base import ToolDefinition
from catalog_agent.tools.catalog_queries import (
    create_get_product_details_tool,
    create_list_categories_tool,
    create_list_products_tool,
    create_search_products_tool,
)
from catalog_agent.tools.registry import ToolsRegistry


def create_product_tools(catalog: CatalogService) -> list[ToolDefinition]:
    """Build the product agent's tool set on top of a catalog service."""
    return [
        create_list_categories_tool(catalog),
        create_list_products_tool(catalog),
        create_search_products_tool(catalog),
        create_get_product_details_tool(catalog),
        create_audit_catalog_tool(catalog),
    ]


__all__ = ["ToolDefinition", "ToolsRegistry", "create_product_tools"]

"""Catalog audit tool."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from catalog_agent.models.agent import AgentContext, Language
from catalog_agent.services.catalog import CatalogService, IssueType, Product
from catalog_agent.tools.base import ToolDefinition


class AuditCatalogInput(BaseModel):
    """Input schema for catalog audits."""

    issue_type: IssueType = Field(
        ...,
        alias="issueType",
        description="The kind of problem to audit for.",
    )
    locale: Language | None = Field(
        default=None,
        description="Language to check descriptions in (defaults to the conversation language).",
    )
    page: int | None = Field(
        default=None,
        ge=1,
        description="Page of results to return. Omit to get every affected product.",
    )
    page_size: int = Field(default=20, ge=1, le=50, description="Products per page when paging")

    model_config = ConfigDict(populate_by_name=True)


def _current_value(product: Product, issue_type: IssueType, locale: str) -> str:
    if issue_type == "low_stock":
        return f"{product.total_stock} (sum of {len(product.variants)} variants)"
    if issue_type == "missing_description":
        return f"{len(product.description(locale))} chars"
    if issue_type == "structure_issues":
        issues = []
        if not product.variants:
            issues.append("no variants")
        if any(not v.sku for v in product.variants):
            issues.append("variants without sku")
        return ", ".join(issues)
    return "N/A"


def create_audit_catalog_tool(catalog: CatalogService) -> ToolDefinition:
    async def audit_catalog_handler(args: AuditCatalogInput, context: AgentContext) -> list[dict[str, Any]]:
        locale = args.locale or context.language
        products = await catalog.get_audit_products(args.issue_type, locale)

        if args.page is not None:
            start = (args.page - 1) * args.page_size
            products = products[start : start + args.page_size]

        return [
            {
                "id": product.id,
                "name": product.name,
                "currentValue": _current_value(product, args.issue_type, locale),
            }
            for product in products
        ]

    return ToolDefinition(
        name="audit_catalog",
        description=(
            "Find products with a specific problem (missing description, low stock, no category, "
            "no images, structure issues). Low stock is the sum of variant stock. "
            'Large results are truncated: use "page" to walk through them.'
        ),
        input_schema_class=AuditCatalogInput,
        handler=audit_catalog_handler,
    )

"""Product agent: helps create, audit and optimize catalog products."""

from catalog_agent.agents.base import BaseAgent
from catalog_agent.config import AgentConfig
from catalog_agent.models.agent import AgentContext, AgentResponse, AgentRole, SuggestedAction
from catalog_agent.models.messages import SystemMessage, UserMessage
from catalog_agent.services.catalog import CatalogService, catalog_service
from catalog_agent.services.llm import LLMService
from catalog_agent.tools import create_product_tools

LANGUAGE_NAMES = {"es": "Spanish", "en": "English", "it": "Italian"}

PRODUCT_AGENT_PROMPT = """You are the Product Agent of an online kiteboarding store.
Your goal is to help create and optimize the products of the eCommerce catalog.
You can work with technical manuals, exported store data, JSON or free text.

CRITICAL RULES:
1. ALWAYS write product content in the 3 store languages (Spanish, English, Italian).
2. NEVER invent technical data, prices or colors you do not have. Ask the user instead.
3. Use list_categories before assigning a category.
4. Point out missing fields such as price, category, colors, sizes or technical description.
5. For catalog-wide questions use audit_catalog with pagination instead of listing every product."""


class ProductAgent(BaseAgent):
    """Reference agent over the product catalog."""

    role: AgentRole = "product_agent"

    def __init__(
        self,
        catalog: CatalogService | None = None,
        llm_service: LLMService | None = None,
        config: AgentConfig | None = None,
    ):
        super().__init__(
            PRODUCT_AGENT_PROMPT,
            tools=create_product_tools(catalog or catalog_service),
            llm_service=llm_service,
            config=config,
        )

    def build_system_messages(self, context: AgentContext) -> list[SystemMessage]:
        lines = [
            "Current context:",
            f"- Language: {LANGUAGE_NAMES[context.language]} ({context.language})",
            f"- Product ID: {context.current_product_id or 'New product'}",
        ]
        if context.files:
            attached = ", ".join(f"{f.name} ({f.content_type})" for f in context.files)
            lines.append(f"- Attached files: {attached}")

        return [
            SystemMessage(content=self.system_prompt),
            SystemMessage(content="\n".join(lines)),
        ]

    async def handle_message(self, message: str, context: AgentContext) -> AgentResponse:
        content = await self.run([UserMessage(content=message)], context)

        return AgentResponse(
            content=content,
            status="complete",
            suggested_actions=self._suggested_actions(context) or None,
        )

    def _suggested_actions(self, context: AgentContext) -> list[SuggestedAction]:
        actions = []
        if context.current_product_id:
            actions.append(
                SuggestedAction(
                    label="Generate description",
                    action="generate_description",
                    payload={"product_id": context.current_product_id},
                )
            )
        return actions

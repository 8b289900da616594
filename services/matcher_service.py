"""
Remote matcher: maps unresolved order lines to catalog items with Claude.

The orchestrator only depends on the RemoteMatcher protocol: one result
per input text, in input order. Brand/color inference across lines is
asked of the model but never relied on.
"""

from typing import Optional, Protocol
import json
import re
import structlog
from pydantic import ValidationError as PydanticValidationError

import anthropic

from config.settings import settings
from exceptions import RemoteMatchError
from models.catalog import CatalogItem
from models.remote_match import (
    NOT_FOUND_INDEX,
    RemoteMatchPayload,
    RemoteMatchItem,
    RemoteMatchResult,
)
from parsers.order_text_parser import coerce_quantity
from services.conversion_service import ConversionService, get_conversion_service

logger = structlog.get_logger(__name__)


class RemoteMatcher(Protocol):
    """Contract consumed by the resolution service."""

    async def match(
        self,
        catalog: list[CatalogItem],
        texts: list[str]
    ) -> list[RemoteMatchResult]:
        ...


def build_catalog_listing(catalog: list[CatalogItem]) -> str:
    """One line per catalog item, addressed by list index. Never truncated."""
    return "\n".join(
        f"Index: {index} | Item: {item.description} | Price: {item.price}"
        for index, item in enumerate(catalog)
    )


def build_request_listing(texts: list[str]) -> str:
    """Number the request lines so the model can keep them aligned."""
    return "\n".join(f"{number}. {text}" for number, text in enumerate(texts, start=1))


def to_match_result(item: RemoteMatchItem, catalog: list[CatalogItem]) -> RemoteMatchResult:
    """
    Convert one validated payload entry into a result.

    catalogIndex of -1, null or out of range is the not-found sentinel.
    """
    index = item.catalogIndex
    catalog_item = None
    if index is not None and index != NOT_FOUND_INDEX and 0 <= index < len(catalog):
        catalog_item = catalog[index]

    return RemoteMatchResult(
        original_request=item.originalRequest,
        quantity=coerce_quantity(item.quantity),
        catalog_item=catalog_item,
        conversion_note=item.conversionLog or None
    )


def parse_matcher_response(response_text: str, catalog: list[CatalogItem]) -> list[RemoteMatchResult]:
    """
    Validate the model's JSON and map it to results.

    Raises:
        RemoteMatchError: If the text is not JSON or does not match the schema
    """
    # Remove markdown code fences if present
    cleaned = response_text.strip()
    if cleaned.startswith("```"):
        cleaned = re.sub(r'^```(?:json)?\s*', '', cleaned)
        cleaned = re.sub(r'\s*```$', '', cleaned)

    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.error("matcher_json_parse_failed", response_preview=response_text[:500], error=str(e))
        raise RemoteMatchError("Matcher returned invalid JSON", details={"error": str(e)})

    try:
        payload = RemoteMatchPayload.model_validate(data)
    except PydanticValidationError as e:
        logger.error("matcher_payload_invalid", errors=e.error_count())
        raise RemoteMatchError(
            "Matcher response does not follow the expected schema",
            details={"errors": [{"loc": list(err["loc"]), "msg": err["msg"]} for err in e.errors()]}
        )

    return [to_match_result(item, catalog) for item in payload.mappedItems]


class ClaudeMatcherService:
    """
    Match order lines against the catalog using the Claude Messages API.

    One call per batch. The full catalog is sent every time.
    """

    SYSTEM_PROMPT_TEMPLATE = """You are an expert sales assistant at an electrical supply store.
Your task is to map a customer's unstructured order list to our product catalog.

CRITICAL BRAND & MATERIAL KNOWLEDGE:
- Brands often abbreviated: "MG" = Margirius, "LIZ" = Tramontina Liz, "ARIA" = Tramontina Aria, "EBONY" = Margirius Preto Brilhante.
- Colors for Conduletes/Eletrodutos/Luvas/Curvas: "CZ" or "CINZA" (Grey), "BR" or "BRANCO" (White), "PT" or "PRETO" (Black), "AL" or "ALUMINIO".
- Synonyms: "TOMADA" might match "MÓDULO" or "MOD" in the catalog if a complete set isn't found.

DEFAULT ATTRIBUTES:
- CABLES/WIRES ("cabo", "fio", "flex"): If the customer DOES NOT specify a color, YOU MUST MATCH TO BLACK ("PT", "PRETO").
  Example: "100m cabo 2.5mm" -> Match to "CABO FLEX 2,5MM PT" or "PRETO".

CONTEXT & PATTERN INFERENCE (VERY IMPORTANT):
- The customer list generally follows a strict theme based on the first few items.
- BRAND INFERENCE: If the first item of a category (e.g., switches/sockets) specifies a brand (e.g., "MG" or "LIZ"), assume ALL subsequent ambiguous items in that category are the SAME BRAND.
- MATERIAL/COLOR INFERENCE: If the first item of a conduit infrastructure (e.g., "eletroduto") specifies a color/material, assume ALL subsequent fittings (curvas, luvas, buchas) are the SAME COLOR/MATERIAL.

{conversion_instructions}

Rules:
1. The CUSTOMER REQUEST is a numbered list. Return EXACTLY one object per numbered line, in the SAME ORDER. Never split or merge lines.
2. Identify the quantity and the product of each line.
   - Extract the number strictly. If "100m", quantity is 100.
   - If no quantity is found, DEFAULT TO 1.
3. Find the best matching product in the catalog using fuzzy matching AND the inference rules above.
4. If a product is found, set "catalogIndex" to the Index shown in the catalog.
5. If no product matches with reasonable confidence, set "catalogIndex" to -1.

IMPORTANT: Return ONLY valid JSON, no markdown, no explanation, no code blocks.

Return JSON in this exact structure:
{{
  "mappedItems": [
    {{
      "originalRequest": "1 rolo cabo 2.5mm",
      "quantity": 100,
      "catalogIndex": 12,
      "conversionLog": "1 rolo = 100m"
    }}
  ]
}}"""

    def __init__(
        self,
        client: Optional[anthropic.AsyncAnthropic] = None,
        conversion_service: Optional[ConversionService] = None,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None
    ):
        self.conversion_service = conversion_service if conversion_service is not None else get_conversion_service()
        self.model = model or settings.matcher_model
        self.max_tokens = max_tokens or settings.matcher_max_tokens

        if client is not None:
            self.client = client
        elif settings.matcher_configured:
            self.client = anthropic.AsyncAnthropic(api_key=settings.anthropic_api_key)
        else:
            self.client = None

    @property
    def system_prompt(self) -> str:
        return self.SYSTEM_PROMPT_TEMPLATE.format(
            conversion_instructions=self.conversion_service.prompt_instructions()
        )

    def build_prompt(self, catalog: list[CatalogItem], texts: list[str]) -> str:
        return (
            f"CATALOG:\n{build_catalog_listing(catalog)}\n\n"
            f"CUSTOMER REQUEST:\n{build_request_listing(texts)}"
        )

    async def match(
        self,
        catalog: list[CatalogItem],
        texts: list[str]
    ) -> list[RemoteMatchResult]:
        """
        Send one batch of order lines to Claude.

        Args:
            catalog: Full catalog snapshot
            texts: Unresolved order lines, in order

        Returns:
            One RemoteMatchResult per text (the caller checks the count)

        Raises:
            RemoteMatchError: Missing API key, API failure or malformed response
        """
        if self.client is None:
            raise RemoteMatchError("Remote matcher not available. Set ANTHROPIC_API_KEY environment variable.")

        logger.info("matcher_request_started", lines=len(texts), catalog_size=len(catalog))

        try:
            response = await self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                system=self.system_prompt,
                messages=[{
                    "role": "user",
                    "content": self.build_prompt(catalog, texts)
                }]
            )
        except anthropic.APIError as e:
            logger.error("matcher_api_error", error=str(e))
            raise RemoteMatchError(f"Claude API error: {e}")

        response_text = "".join(
            block.text for block in response.content if getattr(block, "type", None) == "text"
        )
        if not response_text:
            raise RemoteMatchError("Matcher returned an empty response")

        logger.debug("matcher_response_received", response_length=len(response_text))

        results = parse_matcher_response(response_text, catalog)

        logger.info(
            "matcher_request_completed",
            lines=len(texts),
            results=len(results),
            matched=sum(1 for r in results if r.catalog_item is not None)
        )
        return results


# Singleton instance
_matcher_service: Optional[ClaudeMatcherService] = None


def get_matcher_service() -> ClaudeMatcherService:
    """Get or create ClaudeMatcherService instance."""
    global _matcher_service
    if _matcher_service is None:
        _matcher_service = ClaudeMatcherService()
    return _matcher_service

"""
Unit conversion rules for the electrical supply trade.

Customers often order in packaging units ("1 rolo de cabo") while the
catalog prices the base unit (meters). The rules here rewrite the
quantity for cache-resolved lines and are also rendered into the remote
matcher prompt.
"""

from dataclasses import dataclass
from typing import NamedTuple, Optional
import structlog

from config.settings import settings
from utils.text_utils import format_quantity

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ConversionRule:
    """Multiply the quantity when the text names both a trigger unit and a product word."""
    trigger_words: tuple[str, ...]
    applicable_product_words: tuple[str, ...]
    multiplier: float
    result_unit: str
    description: str

    @property
    def unit_suffix(self) -> str:
        return "m" if self.result_unit == "metros" else "un"

    def matches(self, text: str) -> bool:
        lowered = text.casefold()
        has_trigger = any(word in lowered for word in self.trigger_words)
        has_product = any(word in lowered for word in self.applicable_product_words)
        return has_trigger and has_product


class ConversionResult(NamedTuple):
    quantity: float
    note: Optional[str]


# Ordered, first match wins
CONVERSION_RULES: tuple[ConversionRule, ...] = (
    ConversionRule(
        trigger_words=("rolo", "rolos"),
        applicable_product_words=("cabo", "fio", "flex", "cordão", "cordao"),
        multiplier=100,
        result_unit="metros",
        description="1 rolo = 100 metros"
    ),
    ConversionRule(
        trigger_words=("caixa", "cx", "caixas"),
        applicable_product_words=("parafuso", "bucha", "prego"),
        multiplier=100,  # Most common box size for small screws/anchors
        result_unit="unidades",
        description="1 caixa = 100 unidades (padrão)"
    ),
)


class ConversionService:
    """
    Stateless quantity conversion.

    A quantity at or above the threshold is taken to be already expressed
    in the target unit ("200 metros de cabo") and is left alone.
    """

    def __init__(
        self,
        rules: tuple[ConversionRule, ...] = CONVERSION_RULES,
        quantity_threshold: Optional[float] = None
    ):
        self.rules = rules
        self.quantity_threshold = (
            quantity_threshold
            if quantity_threshold is not None
            else settings.conversion_quantity_threshold
        )

    def find_rule(self, text: str) -> Optional[ConversionRule]:
        """Return the first rule whose trigger and product words both appear in text."""
        for rule in self.rules:
            if rule.matches(text):
                return rule
        return None

    def apply(self, text: str, quantity: float) -> ConversionResult:
        """
        Apply the first matching conversion rule.

        Args:
            text: Order line text
            quantity: Parsed quantity

        Returns:
            ConversionResult with the new quantity and a note such as
            "1 rolo = 100m", or the unchanged quantity and no note
        """
        rule = self.find_rule(text)
        if rule is None or quantity >= self.quantity_threshold:
            return ConversionResult(quantity, None)

        converted = quantity * rule.multiplier
        note = (
            f"{format_quantity(quantity)} {rule.trigger_words[0]} = "
            f"{format_quantity(converted)}{rule.unit_suffix}"
        )

        logger.debug("conversion_applied", rule=rule.description, quantity=quantity, converted=converted)
        return ConversionResult(converted, note)

    @staticmethod
    def _rule_instruction(rule: ConversionRule) -> str:
        triggers = "\" or \"".join(rule.trigger_words)
        products = "\" or \"".join(rule.applicable_product_words)
        return (
            f"- IF request contains \"{triggers}\" AND product matches \"{products}\" "
            f"THEN multiply quantity by {format_quantity(rule.multiplier)}. "
            f"Log this as \"{rule.description}\"."
        )

    def prompt_instructions(self) -> str:
        """
        Render the rules as matcher prompt instructions.

        The quantity threshold is not part of the instructions, so the
        matcher may convert quantities this service would leave alone.
        """
        rule_lines = "\n".join(self._rule_instruction(rule) for rule in self.rules)

        return f"""UNIT CONVERSION RULES (STRICT):
The system must automatically convert specific units based on electrical industry standards:
{rule_lines}

EXAMPLES:
- "1 rolo de cabo 2.5mm" -> quantity: 100, conversionLog: "1 rolo = 100m"
- "2 rolos de fio 4mm" -> quantity: 200, conversionLog: "2 rolos = 200m"
- "100 metros de cabo" -> quantity: 100, conversionLog: null (no conversion needed)"""


# Singleton instance
_conversion_service: Optional[ConversionService] = None


def get_conversion_service() -> ConversionService:
    """Get or create ConversionService instance."""
    global _conversion_service
    if _conversion_service is None:
        _conversion_service = ConversionService()
    return _conversion_service

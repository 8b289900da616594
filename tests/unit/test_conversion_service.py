"""
Unit tests for ConversionService.

Run: pytest tests/unit/test_conversion_service.py -v
"""

import pytest

from services.conversion_service import (
    CONVERSION_RULES,
    ConversionRule,
    ConversionService,
)


class TestConversionServiceApply:
    """Tests for ConversionService.apply()"""

    def test_roll_of_cable_becomes_meters(self, conversion_service):
        """Should convert 1 rolo of cable into 100 meters with a note."""
        quantity, note = conversion_service.apply("1 rolo de cabo 2.5mm", 1)

        assert quantity == 100
        assert note == "1 rolo = 100m"

    def test_quantity_at_threshold_is_not_converted(self, conversion_service):
        """Should leave quantities already in meters alone."""
        quantity, note = conversion_service.apply("200 metros de cabo", 200)

        assert quantity == 200
        assert note is None

    def test_threshold_boundary(self, conversion_service):
        """19 converts, 20 does not."""
        assert conversion_service.apply("19 rolos de fio", 19).quantity == 1900
        assert conversion_service.apply("20 rolos de fio", 20) == (20, None)

    def test_box_of_screws_becomes_units(self, conversion_service):
        """Should convert boxes of screws into units with the un suffix."""
        quantity, note = conversion_service.apply("2 cx parafuso 6mm", 2)

        assert quantity == 200
        assert note == "2 caixa = 200un"

    def test_case_insensitive(self, conversion_service):
        """Should match trigger and product words regardless of case."""
        quantity, note = conversion_service.apply("3 ROLOS CABO FLEX", 3)

        assert quantity == 300
        assert note == "3 rolo = 300m"

    def test_accented_product_word(self, conversion_service):
        """Should match 'cordão' written in upper case."""
        quantity, _ = conversion_service.apply("1 ROLO CORDÃO PARALELO", 1)

        assert quantity == 100

    def test_trigger_without_product_word(self, conversion_service):
        """Should not convert when only the unit word appears."""
        assert conversion_service.apply("1 rolo de fita isolante", 1) == (1, None)

    def test_product_without_trigger_word(self, conversion_service):
        """Should not convert plain cable requests."""
        assert conversion_service.apply("5 cabo flex 4mm", 5) == (5, None)

    def test_fractional_quantity_note(self, conversion_service):
        """Should render fractional quantities without trailing zeros."""
        quantity, note = conversion_service.apply("1,5 rolo de fio", 1.5)

        assert quantity == 150
        assert note == "1.5 rolo = 150m"

    def test_first_matching_rule_wins(self):
        """Should apply only the first matching rule, never stacking."""
        rules = (
            ConversionRule(("rolo",), ("cabo",), 100, "metros", "1 rolo = 100 metros"),
            ConversionRule(("rolo",), ("cabo",), 50, "metros", "1 rolo = 50 metros"),
        )
        service = ConversionService(rules=rules, quantity_threshold=20)

        assert service.apply("1 rolo cabo", 1).quantity == 100

    def test_custom_threshold(self):
        """Should honour a configured threshold."""
        service = ConversionService(quantity_threshold=5)

        assert service.apply("5 rolos de cabo", 5) == (5, None)
        assert service.apply("4 rolos de cabo", 4).quantity == 400


class TestConversionServicePromptInstructions:
    """Tests for ConversionService.prompt_instructions()"""

    def test_lists_every_rule(self, conversion_service):
        """Should describe each rule for the matcher."""
        instructions = conversion_service.prompt_instructions()

        for rule in CONVERSION_RULES:
            assert rule.description in instructions
        assert '"rolo" or "rolos"' in instructions
        assert "multiply quantity by 100" in instructions


import logging
from decimal import Decimal

from tzpayroll.tax.paye import (
    TANZANIA_2024_PAYE_BRACKETS, BracketLine, TaxBracket, find_bracket, resolve_tax, validate_brackets,
)

GAPPED = (
    TaxBracket(0, 100, Decimal("0")),
    TaxBracket(200, None, Decimal("0.10")),
)

def test_non_positive_income_is_untaxed():
    for income in (0, -1, -250000):
        res = resolve_tax(income)
        assert res.total_tax == 0
        assert res.breakdown == ()

def test_tax_free_threshold_is_inclusive():
    res = resolve_tax(270000)
    assert res.total_tax == 0
    assert res.breakdown == (BracketLine("0 - 270,000 TZS", "0%", Decimal("0")),)

def test_next_shilling_moves_to_second_bracket():
    res = resolve_tax(270001)
    assert res.breakdown[0].bracket == "270,001 - 520,000 TZS"
    assert res.breakdown[0].rate == "8%"
    # 1 * 8% rounds to 0; ten shillings over is 0.8 -> 1
    assert res.total_tax == 0
    assert resolve_tax(270010).total_tax == 1

def test_second_bracket_scenario():
    res = resolve_tax(450000)
    assert res.total_tax == 14400
    assert res.breakdown == (BracketLine("270,001 - 520,000 TZS", "8%", Decimal("14400")),)

def test_breakdown_keeps_unrounded_amount():
    res = resolve_tax(450001)
    assert res.total_tax == 14400
    assert res.breakdown[0].amount == Decimal("14400.08")
    assert resolve_tax(1080000).breakdown[0].amount == 140000

def test_fixed_amount_is_added_for_higher_brackets():
    assert resolve_tax(520000).total_tax == 20000
    assert resolve_tax(760000).total_tax == 68000
    assert resolve_tax(800000).total_tax == 68000 + 10000

def test_top_bracket_is_unbounded():
    res = resolve_tax(1080000)
    assert res.total_tax == 140000
    assert res.breakdown[0].bracket == "1,040,001 - Above TZS"
    assert res.breakdown[0].rate == "30%"
    assert resolve_tax(10_000_000).total_tax == 128000 + 2_688_000

def test_single_bracket_contributes():
    for income in (300000, 600000, 900000, 5000000):
        assert len(resolve_tax(income).breakdown) == 1

def test_rounds_half_away_from_zero():
    # 6.25 * 0.08 = 0.5
    assert resolve_tax(Decimal("270006.25")).total_tax == 1

def test_no_matching_bracket_degrades_to_zero(caplog):
    with caplog.at_level(logging.WARNING, logger="tzpayroll.tax.paye"):
        res = resolve_tax(150, GAPPED)
    assert res.total_tax == 0
    assert res.breakdown == ()
    assert "No PAYE bracket" in caplog.text

def test_fraction_between_integer_bounds_matches_nothing():
    assert find_bracket(Decimal("270000.5"), TANZANIA_2024_PAYE_BRACKETS) is None
    assert resolve_tax(Decimal("270000.5")).breakdown == ()

def test_validate_brackets():
    assert validate_brackets(TANZANIA_2024_PAYE_BRACKETS) == []
    assert validate_brackets(()) == ["Bracket table is empty"]
    problems = validate_brackets(GAPPED)
    assert len(problems) == 1 and "not contiguous" in problems[0]
    bounded = (TaxBracket(0, 100, Decimal("0")), TaxBracket(101, 500, Decimal("0.1")))
    assert any("unbounded" in p for p in validate_brackets(bounded))

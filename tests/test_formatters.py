from decimal import Decimal

from tzpayroll.core.formatters import format_rate, format_tzs

def test_format_tzs():
    assert format_tzs(1200000) == "TSh 1,200,000"
    assert format_tzs(0) == "TSh 0"
    assert format_tzs(Decimal("999.5")) == "TSh 1,000"
    assert format_tzs(-5000) == "-TSh 5,000"
    assert format_tzs(435600, symbol="TZS") == "TZS 435,600"

def test_format_rate():
    assert format_rate(Decimal("0.08")) == "8%"
    assert format_rate(Decimal("0.30")) == "30%"
    assert format_rate(Decimal("0.005")) == "0.5%"
    assert format_rate(Decimal("0.035")) == "3.5%"
    assert format_rate(0.1) == "10%"

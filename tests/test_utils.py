import json
import logging
import logging.handlers
from decimal import Decimal

from tzpayroll.core.utils import atomic_write_json, round_money, setup_logging, to_decimal

def test_setup_logging_idempotent(tmp_path):
    tenant = "tmptest"
    logger1 = setup_logging(tenant)
    handlers_before = len(logger1.handlers)
    logger2 = setup_logging(tenant)
    handlers_after = len(logger2.handlers)
    assert handlers_before == handlers_after
    assert any(isinstance(h, logging.handlers.RotatingFileHandler) for h in logger2.handlers)
    assert logger2.name.endswith(".tmptest")

def test_round_money_half_away_from_zero():
    assert round_money(Decimal("2.5")) == 3
    assert round_money(Decimal("-2.5")) == -3
    assert round_money(Decimal("2.49")) == 2

def test_to_decimal():
    assert to_decimal(None) == 0
    assert to_decimal(0.1) == Decimal("0.1")
    assert to_decimal("12345") == 12345

def test_atomic_write_json(tmp_path):
    path = tmp_path / "out" / "run.json"
    atomic_write_json(str(path), {"paye": Decimal("14400")})
    assert json.loads(path.read_text()) == {"paye": "14400"}
    assert not path.with_suffix(".tmp").exists()

def test_round_money_beyond_default_precision():
    assert round_money(Decimal("1E+30") * Decimal("0.005")) == Decimal("5E+27")
    assert round_money(Decimal("123456789012345678901234567890.5")) == Decimal("123456789012345678901234567891")

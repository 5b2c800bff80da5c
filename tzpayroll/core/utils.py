import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path
import json
from decimal import Decimal, ROUND_HALF_UP, localcontext
from typing import Any

from tzpayroll.core.config import settings

def mkdir_safe(path: str):
    Path(path).mkdir(parents=True, exist_ok=True)

def atomic_write_json(path: str, obj: Any, default=str):
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    tmp = p.with_suffix(".tmp")
    with open(tmp, "w", encoding="utf-8") as f:
        json.dump(obj, f, indent=2, default=default)
    os.replace(str(tmp), str(p))

def setup_logging(tenant_id: str = "system", *, log_level: str = None):
    logger_name = f"{settings.APP_NAME}.{tenant_id}"
    logger = logging.getLogger(logger_name)
    if logger.handlers:
        return logger
    level = log_level or settings.LOG_LEVEL
    logger.setLevel(getattr(logging, level.upper()))
    mkdir_safe(settings.LOG_PATH)
    logfile = Path(settings.LOG_PATH) / f"{tenant_id}.log"
    handler = RotatingFileHandler(str(logfile), maxBytes=10_000_000, backupCount=5)
    formatter = logging.Formatter('%(asctime)s %(levelname)s %(name)s %(message)s')
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    if os.getenv("DEV", "").lower() in ("1","true","yes"):
        ch = logging.StreamHandler()
        ch.setFormatter(formatter)
        logger.addHandler(ch)
    logger.propagate = False
    return logger

WHOLE_UNIT = Decimal("1")

def to_decimal(value: Any) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))

def round_money(value: Decimal) -> Decimal:
    # half away from zero, whole shillings; precision grows with the amount
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, value.adjusted() + 2)
        return value.quantize(WHOLE_UNIT, rounding=ROUND_HALF_UP)

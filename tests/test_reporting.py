from datetime import datetime
from decimal import Decimal

from tranche_engine.config import PoolConfig
from tranche_engine.models import FirstLossCoverConfig
from tranche_engine.pool_calendar import to_timestamp
from tranche_engine.reporting import build_cover_rollforward
from tranche_engine.settlement import apply_loss, open_pool


def test_cover_rollforward_flags_cover_below_min_liquidity():
    cfg = PoolConfig(
        amount_decimals=0,
        first_loss_covers=(
            FirstLossCoverConfig("borrower", 10_000, 10_000, 0, min_liquidity=5_000),
            FirstLossCoverConfig("admin", 5_000, 20_000, 20_000, min_liquidity=10_000),
        ),
    )
    opening = open_pool(cfg, to_timestamp(datetime(2026, 1, 1)), 300_000, 100_000, [10_000, 50_000])
    res = apply_loss(opening, cfg, 8_000, to_timestamp(datetime(2026, 1, 15)))

    df = build_cover_rollforward(cfg, opening, [res]).set_index("First Loss Cover")

    assert df.loc["borrower", "Closing Assets"] == Decimal(2_000)
    assert df.loc["borrower", "Min Liquidity"] == Decimal(5_000)
    assert df.loc["borrower", "Sufficient"] == "NO"
    assert df.loc["admin", "Sufficient"] == "YES"
    assert df.loc["borrower", "Loss Covered"] == Decimal(8_000)

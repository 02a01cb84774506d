"""
Tests for trade lookups and display colors.
"""
from app.domain.entities.trade import DEFAULT_TRADE_COLOR, TradeCatalog, TradeType


TRADES = TradeCatalog(
    trades=[TradeType("plomberie", "Plombier", "#3B82F6")],
    step_colors={"plans-permis": "#0EA5E9"},
)


class TestTradeCatalog:
    """Tests for TradeCatalog."""

    def test_known_trade(self):
        assert "plomberie" in TRADES
        assert TRADES.color("plomberie") == "#3B82F6"
        assert TRADES.name("plomberie") == "Plombier"

    def test_unknown_trade_defaults(self):
        assert "soudure" not in TRADES
        assert TRADES.color("soudure") == DEFAULT_TRADE_COLOR
        assert TRADES.name("soudure") == "Autre"

    def test_step_color_overrides_trade(self):
        assert TRADES.schedule_color("plans-permis", "autre") == "#0EA5E9"
        assert TRADES.schedule_color("plomberie", "plomberie") == "#3B82F6"

    def test_explicit_color_wins(self):
        assert TRADES.display_color("manual-x", "plomberie", "#000000") == "#000000"
        assert TRADES.display_color("manual-x", "plomberie") == "#3B82F6"

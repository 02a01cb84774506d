"""
Trade Catalog - Trades (contractor categories) with display names and colors.
"""
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional, Sequence, Tuple

DEFAULT_TRADE_COLOR = "#DC2626"
DEFAULT_TRADE_NAME = "Autre"


@dataclass(frozen=True)
class TradeType:
    """A craft or contractor category (e.g. 'electricite' -> Électricien)."""
    id: str
    name: str
    color: str


class TradeCatalog:
    """
    Read-only trade lookups.

    Unknown trade ids resolve to DEFAULT_TRADE_COLOR / DEFAULT_TRADE_NAME.
    Step colors override the trade color for specific steps (preparation
    steps all use the generic 'autre' trade but keep distinct colors).
    """

    def __init__(
        self,
        trades: Sequence[TradeType] = (),
        step_colors: Optional[Mapping[str, str]] = None,
        default_color: str = DEFAULT_TRADE_COLOR,
        default_name: str = DEFAULT_TRADE_NAME,
    ):
        self._trades: Tuple[TradeType, ...] = tuple(trades)
        self._by_id: Mapping[str, TradeType] = MappingProxyType({t.id: t for t in self._trades})
        self._step_colors: Mapping[str, str] = MappingProxyType(dict(step_colors or {}))
        self.default_color = default_color
        self.default_name = default_name

    @property
    def trades(self) -> Tuple[TradeType, ...]:
        return self._trades

    def __contains__(self, trade_id: object) -> bool:
        return trade_id in self._by_id

    def color(self, trade_id: str) -> str:
        trade = self._by_id.get(trade_id)
        return trade.color if trade else self.default_color

    def name(self, trade_id: str) -> str:
        trade = self._by_id.get(trade_id)
        return trade.name if trade else self.default_name

    def schedule_color(self, step_id: str, trade_id: str) -> str:
        """Color for a scheduled step: step override first, then trade color."""
        return self._step_colors.get(step_id) or self.color(trade_id)

    def display_color(self, step_id: str, trade_id: str, trade_color: Optional[str] = None) -> str:
        """Explicit trade_color (manual tasks) wins over catalog colors."""
        return trade_color or self.schedule_color(step_id, trade_id)

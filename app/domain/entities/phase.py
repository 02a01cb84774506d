"""
Phase Catalog - Ordered construction phases and their scheduling defaults.

The catalog is built once (from YAML configuration or directly in tests)
and never mutated. Every scheduler receives it explicitly, so several
catalog versions can coexist in one process.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

from app.domain.exceptions import InvalidDurationError, UnknownPhaseError, ValidationError
from .trade import TradeCatalog

logger = logging.getLogger(__name__)


class PhaseGroup(Enum):
    """Broad family a phase belongs to."""
    PREPARATION = "preparation"
    GROS_OEUVRE = "gros_oeuvre"
    SECOND_OEUVRE = "second_oeuvre"
    FINITION = "finition"


@dataclass(frozen=True)
class Measurement:
    """On-site measurement to take once another phase is done."""
    after_phase_id: str
    notes: str = ""


@dataclass(frozen=True)
class Phase:
    """
    A named construction step.

    Attributes:
        id: Stable phase identifier (e.g. 'excavation-fondation')
        title: Display title
        phase_group: Preparation phases are scheduled backward, others forward
        position: Index in catalog order
        default_trade: Trade id responsible for the phase
        default_duration_days: Duration in business days (>= 1)
        supplier_lead_days: Calendar days before start to call the supplier
        fabrication_lead_days: Calendar days before start to launch fabrication
        measurement: Optional measurement requirement
    """

    id: str
    title: str
    phase_group: PhaseGroup
    position: int
    default_trade: str
    default_duration_days: int
    supplier_lead_days: int = 0
    fabrication_lead_days: int = 0
    measurement: Optional[Measurement] = None

    def __post_init__(self):
        if not isinstance(self.default_duration_days, int) or self.default_duration_days < 1:
            raise InvalidDurationError(self.default_duration_days, field=f"{self.id}.default_duration_days")
        if self.supplier_lead_days < 0:
            raise InvalidDurationError(self.supplier_lead_days, field=f"{self.id}.supplier_lead_days", minimum=0)
        if self.fabrication_lead_days < 0:
            raise InvalidDurationError(self.fabrication_lead_days, field=f"{self.id}.fabrication_lead_days", minimum=0)

    @property
    def is_preparation(self) -> bool:
        return self.phase_group is PhaseGroup.PREPARATION

    @property
    def measurement_required(self) -> bool:
        return self.measurement is not None


@dataclass(frozen=True)
class MandatoryDelay:
    """Minimum calendar gap required between the end of one phase and the start of another."""
    phase_id: str
    after_phase_id: str
    minimum_days: int
    reason: str


@dataclass(frozen=True)
class CatalogDefaults:
    """Fallback values for ids missing from the catalog tables."""
    duration_days: int = 5
    trade: str = "autre"
    supplier_lead_days: int = 0
    fabrication_lead_days: int = 0


class PhaseCatalog:
    """
    Immutable, ordered collection of phases plus the lookup tables that go with it.

    Lenient lookups (duration_for, trade_for, ...) return the documented
    defaults for unknown ids. Use get() when an unknown id is an error.
    """

    def __init__(
        self,
        phases: Sequence[Phase],
        trades: Optional[TradeCatalog] = None,
        stage_mapping: Optional[Mapping[str, str]] = None,
        mandatory_delays: Sequence[MandatoryDelay] = (),
        defaults: Optional[CatalogDefaults] = None,
    ):
        ordered = tuple(sorted(phases, key=lambda p: p.position))
        index: Dict[str, Phase] = {}
        for phase in ordered:
            if phase.id in index:
                raise ValidationError("phases", f"duplicate phase id '{phase.id}'")
            index[phase.id] = phase

        stage_mapping = dict(stage_mapping or {})
        for stage, phase_id in stage_mapping.items():
            if phase_id not in index:
                raise UnknownPhaseError(phase_id)

        for delay in mandatory_delays:
            for phase_id in (delay.phase_id, delay.after_phase_id):
                if phase_id not in index:
                    raise UnknownPhaseError(phase_id)

        for phase in ordered:
            if phase.measurement and phase.measurement.after_phase_id not in index:
                raise UnknownPhaseError(phase.measurement.after_phase_id)

        self._phases: Tuple[Phase, ...] = ordered
        self._index: Mapping[str, Phase] = MappingProxyType(index)
        self._positions: Mapping[str, int] = MappingProxyType(
            {phase.id: i for i, phase in enumerate(ordered)}
        )
        self._stage_mapping: Mapping[str, str] = MappingProxyType(stage_mapping)
        self._delays: Mapping[str, MandatoryDelay] = MappingProxyType(
            {delay.phase_id: delay for delay in mandatory_delays}
        )
        self.trades = trades or TradeCatalog()
        self.defaults = defaults or CatalogDefaults()

    # =========================================================================
    # Collection protocol
    # =========================================================================

    @property
    def phases(self) -> Tuple[Phase, ...]:
        return self._phases

    def __iter__(self) -> Iterator[Phase]:
        return iter(self._phases)

    def __len__(self) -> int:
        return len(self._phases)

    def __contains__(self, phase_id: object) -> bool:
        return phase_id in self._index

    # =========================================================================
    # Lookups
    # =========================================================================

    def get(self, phase_id: str) -> Phase:
        """Strict lookup; raises UnknownPhaseError."""
        phase = self._index.get(phase_id)
        if phase is None:
            raise UnknownPhaseError(phase_id)
        return phase

    def index_of(self, phase_id: str) -> Optional[int]:
        """Zero-based execution index of a phase, None if unknown."""
        return self._positions.get(phase_id)

    def duration_for(self, phase_id: str) -> int:
        phase = self._index.get(phase_id)
        if phase is None:
            logger.debug(f"Unknown phase '{phase_id}', using default duration {self.defaults.duration_days}")
            return self.defaults.duration_days
        return phase.default_duration_days

    def trade_for(self, phase_id: str) -> str:
        phase = self._index.get(phase_id)
        return phase.default_trade if phase else self.defaults.trade

    def supplier_lead_days_for(self, phase_id: str) -> int:
        phase = self._index.get(phase_id)
        if phase is None or not phase.supplier_lead_days:
            return self.defaults.supplier_lead_days
        return phase.supplier_lead_days

    def fabrication_lead_days_for(self, phase_id: str) -> int:
        phase = self._index.get(phase_id)
        if phase is None or not phase.fabrication_lead_days:
            return self.defaults.fabrication_lead_days
        return phase.fabrication_lead_days

    # =========================================================================
    # Stages and grouping
    # =========================================================================

    @property
    def stage_mapping(self) -> Mapping[str, str]:
        return self._stage_mapping

    def phases_from_stage(self, current_stage: Optional[str] = None) -> Tuple[Phase, ...]:
        """
        Slice the catalog starting at the phase matching a project stage.

        A missing or unknown stage schedules from the first phase.
        """
        if not current_stage:
            return self._phases

        start_phase_id = self._stage_mapping.get(current_stage)
        if start_phase_id is None:
            logger.warning(f"Unknown project stage '{current_stage}', scheduling from the first phase")
            return self._phases

        return self._phases[self._positions[start_phase_id]:]

    @staticmethod
    def split_preparation(phases: Sequence[Phase]) -> Tuple[List[Phase], List[Phase]]:
        """Split phases into (preparation, construction), keeping order."""
        preparation = [p for p in phases if p.is_preparation]
        construction = [p for p in phases if not p.is_preparation]
        return preparation, construction

    # =========================================================================
    # Mandatory delays
    # =========================================================================

    @property
    def mandatory_delays(self) -> Tuple[MandatoryDelay, ...]:
        return tuple(self._delays.values())

    def delay_for(self, phase_id: str) -> Optional[MandatoryDelay]:
        return self._delays.get(phase_id)

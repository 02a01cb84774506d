"""
Shared fixtures: a small synthetic phase catalog and in-memory databases.
"""
import pytest

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.models import Base, Project
from app.domain.entities.phase import (
    MandatoryDelay,
    Measurement,
    Phase,
    PhaseCatalog,
    PhaseGroup,
)
from app.domain.entities.trade import TradeCatalog, TradeType


def make_phase(phase_id, position, group, trade, duration, supplier=0, fabrication=0, measurement=None):
    return Phase(
        id=phase_id,
        title=phase_id.replace('-', ' ').title(),
        phase_group=group,
        position=position,
        default_trade=trade,
        default_duration_days=duration,
        supplier_lead_days=supplier,
        fabrication_lead_days=fabrication,
        measurement=measurement,
    )


@pytest.fixture
def catalog():
    """
    Seven-phase catalog:
        planification (5) -> plans-permis (30) | excavation-fondation (15) ->
        structure (15) -> fenetres-portes (5) -> gypse (15) -> cuisine-sdb (10)
    """
    phases = [
        make_phase("planification", 0, PhaseGroup.PREPARATION, "autre", 5),
        make_phase("plans-permis", 1, PhaseGroup.PREPARATION, "autre", 30),
        make_phase("excavation-fondation", 2, PhaseGroup.GROS_OEUVRE, "excavation", 15),
        make_phase("structure", 3, PhaseGroup.GROS_OEUVRE, "charpentier", 15),
        make_phase("fenetres-portes", 4, PhaseGroup.GROS_OEUVRE, "fenetre", 5, supplier=42, fabrication=28),
        make_phase("gypse", 5, PhaseGroup.FINITION, "gypse", 15),
        make_phase(
            "cuisine-sdb", 6, PhaseGroup.FINITION, "ebeniste", 10, supplier=35, fabrication=21,
            measurement=Measurement(after_phase_id="gypse", notes="Mesurer après le gypse"),
        ),
    ]
    trades = TradeCatalog(
        trades=[
            TradeType("excavation", "Excavation", "#78350F"),
            TradeType("charpentier", "Charpentier", "#B45309"),
            TradeType("plomberie", "Plombier", "#2563EB"),
            TradeType("electricite", "Électricien", "#FACC15"),
        ],
        step_colors={"planification": "#6366F1"},
    )
    return PhaseCatalog(
        phases=phases,
        trades=trades,
        stage_mapping={"permis": "plans-permis", "structure": "structure", "finition": "gypse"},
        mandatory_delays=[
            MandatoryDelay("structure", "excavation-fondation", 21, "concrete_curing"),
        ],
    )


@pytest.fixture(scope="function")
def test_db():
    """In-memory database with fresh tables and one project (id 1) per test."""
    engine = create_engine("sqlite:///:memory:", echo=False)
    Base.metadata.create_all(engine)
    Session = sessionmaker(bind=engine)
    session = Session()

    session.add(Project(id=1, name="Maison Tremblay"))
    session.commit()

    yield session

    session.close()
    Base.metadata.drop_all(engine)


@pytest.fixture
def shared_engine():
    """In-memory engine usable from several threads (TestClient, CliRunner)."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)

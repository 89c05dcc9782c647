"""In-memory scenario store: saved input snapshots and their results."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional
from uuid import uuid4

from invoice_roi.engine.calculator import ROIEngine
from invoice_roi.models.inputs import CalculatorInputs
from invoice_roi.models.results import CalculatorResults

logger = logging.getLogger(__name__)


class ScenarioNotFoundError(KeyError):
    """No scenario with the requested id."""


class StaleScenarioError(ValueError):
    """Supplied results do not match what the engine produces for the inputs."""


@dataclass(frozen=True)
class Scenario:
    """A named snapshot pairing one set of inputs with its results."""

    id: str
    scenario_name: str
    inputs: CalculatorInputs
    results: CalculatorResults
    created_at: datetime = field(default_factory=lambda: datetime.now(tz=timezone.utc))

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "scenario_name": self.scenario_name,
            "inputs": self.inputs.to_dict(),
            "results": self.results.to_dict(),
            "created_at": self.created_at.isoformat(),
        }


class ScenarioStore:
    """Keyed store of immutable scenarios.

    Results are always produced by the store's own engine so a loaded
    scenario can never disagree with its inputs. There is no update:
    saving again creates a new scenario.
    """

    def __init__(self, engine: Optional[ROIEngine] = None) -> None:
        self._engine = engine or ROIEngine()
        self._scenarios: dict[str, Scenario] = {}

    def __len__(self) -> int:
        return len(self._scenarios)

    def save(
        self,
        inputs: CalculatorInputs,
        results: Optional[CalculatorResults] = None,
    ) -> Scenario:
        computed = self._engine.compute(inputs)
        if results is not None and results != computed:
            raise StaleScenarioError(
                f"Results for '{inputs.scenario_name}' do not match its inputs"
            )
        scenario = Scenario(
            id=str(uuid4()),
            scenario_name=inputs.scenario_name,
            inputs=inputs,
            results=computed,
        )
        self._scenarios[scenario.id] = scenario
        logger.info(f"Saved scenario '{scenario.scenario_name}' ({scenario.id})")
        return scenario

    def list(self) -> list[Scenario]:
        """All scenarios, most recent first."""
        # Insertion order breaks created_at ties
        ordered = list(self._scenarios.values())
        ordered.reverse()
        return sorted(ordered, key=lambda s: s.created_at, reverse=True)

    def get(self, scenario_id: str) -> Scenario:
        try:
            return self._scenarios[scenario_id]
        except KeyError:
            raise ScenarioNotFoundError(scenario_id) from None

    def delete(self, scenario_id: str) -> Scenario:
        scenario = self.get(scenario_id)
        del self._scenarios[scenario_id]
        logger.info(f"Deleted scenario '{scenario.scenario_name}' ({scenario_id})")
        return scenario

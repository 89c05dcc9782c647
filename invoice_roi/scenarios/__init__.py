from .store import Scenario, ScenarioNotFoundError, ScenarioStore, StaleScenarioError

__all__ = ["Scenario", "ScenarioNotFoundError", "ScenarioStore", "StaleScenarioError"]

"""Capability registry.

Maps a capability (trajectory, platform, antenna, clutter, header) and a
parameter class to a provider factory. Callers hand over a parameter
object and get back an initialized provider without naming its class.
"""

from typing import Any, Callable, Dict, List, Tuple

from .errors import ConfigurationError

CAPABILITIES: Tuple[str, ...] = ("trajectory", "platform", "antenna", "clutter", "header")


class ModuleRegistry:

    def __init__(self):
        self._factories: Dict[str, Dict[type, Callable[[], Any]]] = {
            c: {} for c in CAPABILITIES
        }

    def register(self, capability: str, parameter_type: type,
                 factory: Callable[[], Any]) -> None:
        if capability not in self._factories:
            raise ConfigurationError(f"Unknown capability: {capability!r}")
        self._factories[capability][parameter_type] = factory

    def variants(self, capability: str) -> List[type]:
        """Parameter classes registered for a capability."""
        if capability not in self._factories:
            raise ConfigurationError(f"Unknown capability: {capability!r}")
        return list(self._factories[capability])

    def create(self, capability: str, parameters: Any) -> Any:
        """Construct and initialize the provider matching ``parameters``."""
        if capability not in self._factories:
            raise ConfigurationError(f"Unknown capability: {capability!r}")
        factory = self._factories[capability].get(type(parameters))
        if factory is None:
            raise ConfigurationError(
                f"No {capability} provider registered for {type(parameters).__name__}"
            )
        instance = factory()
        instance.initialize(parameters)
        return instance


def default_registry() -> ModuleRegistry:
    """Registry with every built-in provider."""
    from ..models import (
        BallisticTrajectory,
        GimbalAntenna,
        RainClutterModel,
        SeaClutterModel,
        ShipPlatform,
    )
    from ..scene.config import (
        AntennaParameters,
        BallisticParameters,
        RainClutterParameters,
        SeaClutterParameters,
        ShipParameters,
    )
    from .header import DopplerSensorHeader, HeaderParameters

    registry = ModuleRegistry()
    registry.register("trajectory", BallisticParameters, BallisticTrajectory)
    registry.register("platform", ShipParameters, ShipPlatform)
    registry.register("antenna", AntennaParameters, GimbalAntenna)
    registry.register("clutter", SeaClutterParameters, SeaClutterModel)
    registry.register("clutter", RainClutterParameters, RainClutterModel)
    registry.register("header", HeaderParameters, DopplerSensorHeader)
    return registry

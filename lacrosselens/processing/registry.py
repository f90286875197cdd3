"""Pluggable analysis modules that contribute focus areas to the prompts."""
import logging
from dataclasses import dataclass
from typing import Iterable, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalysisModule:
    """A named focus area appended to every analysis prompt while enabled."""

    name: str
    description: str
    focus: str
    version: str = "1.0"


class AnalysisModuleRegistry:
    """Holds the modules available to the analyzers.

    Built explicitly and handed to each analyzer, so tests can supply their
    own registry.
    """

    def __init__(self):
        self._modules: dict[str, AnalysisModule] = {}
        self._enabled: set[str] = set()

    def register(self, module: AnalysisModule, enabled: bool = True) -> None:
        if module.name in self._modules:
            logger.warning("Module %s already registered, replacing", module.name)
        self._modules[module.name] = module
        if enabled:
            self._enabled.add(module.name)
        else:
            self._enabled.discard(module.name)

    def unregister(self, name: str) -> bool:
        self._enabled.discard(name)
        return self._modules.pop(name, None) is not None

    def get(self, name: str) -> Optional[AnalysisModule]:
        return self._modules.get(name)

    def enable(self, name: str) -> None:
        if name not in self._modules:
            raise KeyError(f"Unknown analysis module: {name}")
        self._enabled.add(name)

    def disable(self, name: str) -> None:
        self._enabled.discard(name)

    def all(self) -> list[AnalysisModule]:
        return list(self._modules.values())

    def enabled(self) -> list[AnalysisModule]:
        return [module for module in self._modules.values() if module.name in self._enabled]

    def build_focus(self) -> str:
        """Focus text for every enabled module, in registration order."""
        sections = [module.focus.strip() for module in self.enabled()]
        if not sections:
            return ""
        return "ADDITIONAL FOCUS AREAS:\n\n" + "\n\n".join(sections)


DEFAULT_MODULES = [
    AnalysisModule(
        name="player",
        description="Individual technique and development",
        focus="""PLAYER DEVELOPMENT:
- Stick skills: cradle protection, catch and release, off-hand ability
- Dodging: split, roll, face and bull dodges, change of pace
- Off-ball movement: cuts, relocation, finding soft spots
- Athleticism, effort and coachability indicators""",
    ),
    AnalysisModule(
        name="tactical",
        description="Team systems and formations",
        focus="""TEAM SYSTEMS:
- Offensive sets (2-2-2, 1-4-1, 2-3-1, 3-3) and ball movement
- Defensive scheme (man or zone), slide packages and recovery
- Spacing and communication""",
    ),
    AnalysisModule(
        name="statistical",
        description="Countable events",
        focus="""STATISTICS:
- Name the shooter and assisting player on every goal
- Note ground balls, caused turnovers, saves and penalties with player numbers
- State explicitly when a shot is missed, saved or blocked""",
    ),
    AnalysisModule(
        name="transition",
        description="Clears, rides and fast breaks",
        focus="""TRANSITION:
- Clear formation, originating event and number of passes
- Ride formation and pressure level
- Whether the clear succeeded and what opportunity resulted""",
    ),
    AnalysisModule(
        name="faceoff",
        description="Face-off technique",
        focus="""FACE-OFFS:
- Technique used by each FOGO (clamp, rake, plunger, jump, laser)
- Clamp speed, counters, exit direction and wing play
- Which team color won possession and whether it led to a fast break""",
    ),
]


def create_default_registry(enabled: Optional[Iterable[str]] = None) -> AnalysisModuleRegistry:
    """Registry with the built-in modules; ``enabled`` limits which are switched on."""
    names = set(enabled) if enabled is not None else None
    registry = AnalysisModuleRegistry()
    for module in DEFAULT_MODULES:
        registry.register(module, enabled=names is None or module.name in names)
    logger.debug("Analysis registry initialised with %d modules", len(registry.all()))
    return registry

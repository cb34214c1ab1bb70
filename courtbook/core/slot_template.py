"""
Slot template: the fixed window duration and the canonical courts every new window gets.

Defaults come from settings (3 singles courts of 2 players, then 3 doubles courts of 4,
45-minute windows). Court indexes are assigned in template order starting at 0.
"""
from dataclasses import dataclass, field
from datetime import timedelta

from courtbook.config import settings
from courtbook.core.constants import GameMode


@dataclass(frozen=True)
class CourtTemplate:
    count: int
    capacity: int
    game_mode: GameMode


@dataclass(frozen=True)
class CourtSpec:
    court_index: int
    capacity: int
    game_mode: GameMode


@dataclass(frozen=True)
class SlotTemplate:
    duration: timedelta
    courts: tuple[CourtTemplate, ...] = field(default_factory=tuple)

    def court_specs(self) -> list[CourtSpec]:
        specs: list[CourtSpec] = []
        for tpl in self.courts:
            for _ in range(tpl.count):
                specs.append(CourtSpec(court_index=len(specs), capacity=tpl.capacity, game_mode=tpl.game_mode))
        return specs


def default_slot_template() -> SlotTemplate:
    return SlotTemplate(
        duration=timedelta(minutes=settings.window_duration_minutes),
        courts=(
            CourtTemplate(settings.singles_courts, settings.singles_capacity, GameMode.SINGLES),
            CourtTemplate(settings.doubles_courts, settings.doubles_capacity, GameMode.DOUBLES),
        ),
    )

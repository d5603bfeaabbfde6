from typing import Dict
from pydantic import BaseModel, Field, model_validator

from engine.model import WeaponType

# Preferred weapon swaps. A missing entry means the offered weapon is never
# an upgrade over the held one.
DEFAULT_WEAPON_UPGRADES: Dict[str, Dict[str, int]] = {
    "LASER_RIFLE": {"RAIL_GUN": 150, "SCATTER_GUN": 100, "MINI_BLASTER": 60},
    "MINI_BLASTER": {"RAIL_GUN": 120, "SCATTER_GUN": 80},
    "SCATTER_GUN": {"RAIL_GUN": 60},
    "RAIL_GUN": {},
}


class ActionWeights(BaseModel):
    """Multipliers applied to each action score before comparison."""
    move: float = Field(default=1.0, ge=0.0)
    shoot: float = Field(default=1.0, ge=0.0)
    shield: float = Field(default=1.0, ge=0.0)
    pickup: float = Field(default=1.0, ge=0.0)


class ScoringConfig(BaseModel):
    """Tunable constants of the action-scoring heuristics."""

    # Damage and kills
    points_per_damage: int = Field(default=10, ge=0)
    kill_bonus: int = Field(default=100, ge=0)

    # Pickups
    repair_kit_heal: int = Field(default=20, ge=0)
    pickup_bonus: int = Field(default=50, ge=0)
    repair_kit_value: int = Field(default=250, ge=0)
    shield_value: int = Field(default=100, ge=0)
    same_weapon_value: int = Field(default=5, ge=0)
    weapon_upgrades: Dict[str, Dict[str, int]] = Field(
        default_factory=lambda: {k: dict(v) for k, v in DEFAULT_WEAPON_UPGRADES.items()})

    # Control points
    capture_points: int = Field(default=200, ge=0)
    neutralize_points: int = Field(default=250, ge=0)
    mainframe_bonus: int = Field(default=200, ge=0)
    defend_bonus: int = Field(default=100, ge=0)
    defend_radius: int = Field(default=5, ge=0)
    guard_radius: int = Field(default=2, ge=0)
    hold_radius: int = Field(default=1, ge=0)
    distance_exponent: float = Field(default=1.5, gt=0.0)
    rush_exponent: float = Field(default=1.0, gt=0.0)

    # Team play
    assist_bonus: int = Field(default=100, ge=0)
    assist_min_distance: int = Field(default=3, ge=1)
    group_distance: int = Field(default=4, ge=1)
    grouping_points: int = Field(default=20, ge=0)

    # Multipliers
    mainframe_damage_multiplier: float = Field(default=1.5, ge=1.0)
    shield_mainframe_multiplier: float = Field(default=2.0, ge=1.0)
    defender_multiplier: float = Field(default=10.0, ge=1.0)

    weights: ActionWeights = Field(default_factory=ActionWeights)

    @model_validator(mode="after")
    def _check_exponents(self):
        if self.rush_exponent > self.distance_exponent:
            raise ValueError("rush_exponent must not exceed distance_exponent")
        for held, offers in self.weapon_upgrades.items():
            for name in [held, *offers]:
                if name not in WeaponType.__members__:
                    raise ValueError(f"Unknown weapon in upgrade table: {name}")
        return self

    def upgrade_value(self, held: WeaponType, offered: WeaponType) -> int:
        """Points for swapping held for offered, 0 when it is no upgrade."""
        return self.weapon_upgrades.get(held.name, {}).get(offered.name, 0)

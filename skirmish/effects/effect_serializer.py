"""
Serialization of effects.

Every concrete effect kind carries an `effect_type` literal, so a plain dict
produced by `EffectSerializer.serialize` is turned back into the right class
by the discriminated union below.
"""

from typing import Annotated, Any, Union

from catchery import log_warning
from pydantic import Field, TypeAdapter, ValidationError

from .base_effect import Effect
from .damage_over_time_effect import DamageOverTimeEffect
from .defensive_effect import DamageShieldEffect, RuneEffect
from .healing_over_time_effect import HealingOverTimeEffect
from .incapacitating_effect import IncapacitatingEffect
from .modifier_effect import ModifierEffect
from .resource_effect import ResourceDrainEffect, ResourceRestoreEffect
from .root_effect import RootEffect

AnyEffect = Annotated[
    Union[
        DamageOverTimeEffect,
        HealingOverTimeEffect,
        ResourceRestoreEffect,
        ResourceDrainEffect,
        RootEffect,
        RuneEffect,
        DamageShieldEffect,
        ModifierEffect,
        IncapacitatingEffect,
    ],
    Field(discriminator="effect_type"),
]

_EFFECT_ADAPTER: TypeAdapter[Any] = TypeAdapter(AnyEffect)


class EffectSerializer:
    """Centralized serialization for all effect types."""

    @staticmethod
    def serialize(effect: Effect) -> dict[str, Any]:
        """
        Serialize an effect to dictionary format.

        Args:
            effect (Effect): The effect to serialize.

        Returns:
            dict[str, Any]: JSON-compatible representation of the effect.

        """
        return effect.model_dump(mode="json")

    @staticmethod
    def deserialize(data: dict[str, Any]) -> Effect | None:
        """
        Deserialize an effect from dictionary data.

        Args:
            data (dict[str, Any]): Dictionary containing effect data.

        Returns:
            Effect | None: The effect, or None if the data is invalid.

        """
        try:
            return _EFFECT_ADAPTER.validate_python(data)
        except ValidationError as e:
            log_warning(
                f"Invalid effect data: {e.error_count()} validation error(s)",
                {"name": data.get("name"), "effect_type": data.get("effect_type")},
            )
            return None

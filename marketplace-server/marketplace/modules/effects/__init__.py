"""Post-settlement effects exports"""

from .dispatcher import EffectsDispatcher
from .handlers import DEFAULT_EFFECTS, EffectHandler
from .models import EffectContext, XpAction, purchase_achievements, sale_achievements

__all__ = [
    "DEFAULT_EFFECTS",
    "EffectContext",
    "EffectHandler",
    "EffectsDispatcher",
    "XpAction",
    "purchase_achievements",
    "sale_achievements",
]

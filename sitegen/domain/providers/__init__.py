from .catalog import ProviderCatalog
from .random_source import RandomSource, SequenceRandom, system_random
from .selector import ProviderSelector

__all__ = [
    "ProviderCatalog",
    "ProviderSelector",
    "RandomSource",
    "SequenceRandom",
    "system_random",
]

"""Built-in capability plugins."""

from kieai.plugins.flux_kontext import FluxKontextAPI, FluxKontextPlugin
from kieai.plugins.kling_v2_1 import (
    KlingV21API,
    KlingV21Model,
    KlingV21Plugin,
    create_kling_v21_plugin,
)
from kieai.plugins.midjourney import MidjourneyAPI, MidjourneyPlugin
from kieai.plugins.seedream_v4 import SeedreamV4API, SeedreamV4Model, SeedreamV4Plugin
from kieai.plugins.sora_v2 import SoraV2API, SoraV2Model, SoraV2Plugin

BUILTIN_PLUGINS = [
    KlingV21Plugin,
    SeedreamV4Plugin,
    SoraV2Plugin,
    FluxKontextPlugin,
    MidjourneyPlugin,
]

__all__ = [
    "BUILTIN_PLUGINS",
    "FluxKontextAPI",
    "FluxKontextPlugin",
    "KlingV21API",
    "KlingV21Model",
    "KlingV21Plugin",
    "create_kling_v21_plugin",
    "MidjourneyAPI",
    "MidjourneyPlugin",
    "SeedreamV4API",
    "SeedreamV4Model",
    "SeedreamV4Plugin",
    "SoraV2API",
    "SoraV2Model",
    "SoraV2Plugin",
]

"""Integrations for external services and libraries."""

from .animation_generator import (
    AnimationPayloadError,
    AnimationRequest,
    GenerationError,
    GeneratorSettings,
    generate_animation,
    handle_animation_request,
)
from .vlc_media import VlcMediaElement

__all__ = [
    "AnimationPayloadError",
    "AnimationRequest",
    "GenerationError",
    "GeneratorSettings",
    "VlcMediaElement",
    "generate_animation",
    "handle_animation_request",
]

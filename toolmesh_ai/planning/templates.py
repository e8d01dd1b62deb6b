"""Pre-built workflow templates for the ``orchestrate`` meta-tool.

A template is a function from caller parameters (camelCase keys) to a
ready-to-execute ``OrchestrationPlan``. Parameters listed in
``TEMPLATE_REQUIRED_PARAMETERS`` have no usable default and must be supplied;
the rest fall back to canned values.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Mapping, Optional

from toolmesh_ai.core.errors import ToolMeshError

from .models import OrchestrationPlan

TemplateFactory = Callable[[Mapping[str, Any]], OrchestrationPlan]


def _ai_influencer(params: Mapping[str, Any]) -> OrchestrationPlan:
    return OrchestrationPlan.model_validate(
        {
            "goal": "Create an AI influencer video with lip-synced speech",
            "steps": [
                {
                    "stepId": "step1",
                    "toolId": "image.generate.flux-pro-kontext",
                    "toolName": "FLUX Pro Kontext - Text to Image",
                    "input": {
                        "prompt": params.get("portraitPrompt")
                        or "Professional portrait of an attractive person, studio lighting",
                        "image_size": "portrait_4_3",
                    },
                    "description": "Generate the portrait image",
                },
                {
                    "stepId": "step2",
                    "toolId": "audio.tts",
                    "toolName": "XTTS v2 - Voice Cloning & TTS",
                    "input": {
                        "text": params.get("script") or "Hello, welcome to my channel!",
                        "audio_url": params.get("voiceReferenceUrl"),
                        "language": "en",
                    },
                    "description": "Generate speech from script",
                },
                {
                    "stepId": "step3",
                    "toolId": "audio.lip-sync",
                    "toolName": "SadTalker - Lip Sync",
                    "input": {},
                    "inputMappings": {
                        "face_image_url": "$step1.images[0].url",
                        "audio_url": "$step2.audio_file.url",
                    },
                    "description": "Create lip-synced video",
                },
            ],
            "estimatedCredits": 4.5,
            "estimatedDurationSeconds": 60,
        }
    )


def _music_video(params: Mapping[str, Any]) -> OrchestrationPlan:
    return OrchestrationPlan.model_validate(
        {
            "goal": "Create a music video from a text description",
            "steps": [
                {
                    "stepId": "step1",
                    "toolId": "music.generate",
                    "toolName": "CassetteAI Music Generator",
                    "input": {
                        "prompt": params.get("musicPrompt") or "Upbeat electronic music with synths",
                        "duration": params.get("duration") or 30,
                    },
                    "description": "Generate the music track",
                },
                {
                    "stepId": "step2",
                    "toolId": "image.generate.flux-pro-kontext",
                    "toolName": "FLUX Pro Kontext - Text to Image",
                    "input": {
                        "prompt": params.get("visualPrompt") or "Abstract colorful visualization, dynamic movement",
                        "image_size": "landscape_16_9",
                    },
                    "description": "Generate the visual keyframe",
                },
                {
                    "stepId": "step3",
                    "toolId": "video.generate.veo3-image-to-video",
                    "toolName": "Veo 3.1 - Image to Video",
                    "input": {
                        "prompt": params.get("motionPrompt") or "Smooth camera movement, dynamic visual effects",
                        "duration": "8s",
                    },
                    "inputMappings": {"image_url": "$step2.images[0].url"},
                    "description": "Animate the image into a video",
                },
            ],
            "estimatedCredits": 20,
            "estimatedDurationSeconds": 120,
        }
    )


def _product_visualization(params: Mapping[str, Any]) -> OrchestrationPlan:
    return OrchestrationPlan.model_validate(
        {
            "goal": "Create a 3D product visualization from a photo",
            "steps": [
                {
                    "stepId": "step1",
                    "toolId": "image.extract-layer",
                    "toolName": "Layer Extraction (Background Removal)",
                    "input": {"image_url": params.get("imageUrl")},
                    "description": "Remove background from product image",
                },
                {
                    "stepId": "step2",
                    "toolId": "image.upscale",
                    "toolName": "Creative Upscaler",
                    "input": {"scale": 2, "creativity": 0.3},
                    "inputMappings": {"image_url": "$step1.image.url"},
                    "description": "Enhance image resolution",
                },
                {
                    "stepId": "step3",
                    "toolId": "3d.image-to-3d",
                    "toolName": "Hunyuan3D v3 - Image to 3D",
                    "input": {"generate_texture": True, "target_face_count": 100000, "output_format": "glb"},
                    "inputMappings": {"image_url": "$step2.image.url"},
                    "description": "Convert to 3D model",
                },
            ],
            "estimatedCredits": 4,
            "estimatedDurationSeconds": 90,
        }
    )


def _audio_remix(params: Mapping[str, Any]) -> OrchestrationPlan:
    return OrchestrationPlan.model_validate(
        {
            "goal": "Separate stems from audio and create a remix",
            "steps": [
                {
                    "stepId": "step1",
                    "toolId": "audio.stem-separation",
                    "toolName": "Demucs - Stem Separation",
                    "input": {"audio_url": params.get("audioUrl"), "stems": 4},
                    "description": "Separate audio into stems",
                },
                {
                    "stepId": "step2",
                    "toolId": "music.generate",
                    "toolName": "CassetteAI Music Generator",
                    "input": {
                        "prompt": params.get("remixStyle") or "Lo-fi remix with chill beats and ambient pads",
                        "duration": params.get("duration") or 30,
                    },
                    "description": "Generate new backing track in remix style",
                },
            ],
            "estimatedCredits": 2.5,
            "estimatedDurationSeconds": 45,
        }
    )


WORKFLOW_TEMPLATES: Dict[str, TemplateFactory] = {
    "ai-influencer": _ai_influencer,
    "music-video": _music_video,
    "product-visualization": _product_visualization,
    "audio-remix": _audio_remix,
}

TEMPLATE_DESCRIPTIONS: Dict[str, str] = {
    "ai-influencer": "Portrait image, cloned-voice speech and a lip-synced talking-head video",
    "music-video": "Music track, visual keyframe and an animated video of the keyframe",
    "product-visualization": "Background removal, upscaling and a textured 3D model of a product photo",
    "audio-remix": "Stem separation of a track and a new backing track in a remix style",
}

TEMPLATE_PARAMETERS: Dict[str, List[str]] = {
    "ai-influencer": ["portraitPrompt", "script", "voiceReferenceUrl"],
    "music-video": ["musicPrompt", "duration", "visualPrompt", "motionPrompt"],
    "product-visualization": ["imageUrl"],
    "audio-remix": ["audioUrl", "remixStyle", "duration"],
}

TEMPLATE_REQUIRED_PARAMETERS: Dict[str, List[str]] = {
    "ai-influencer": ["voiceReferenceUrl"],
    "music-video": [],
    "product-visualization": ["imageUrl"],
    "audio-remix": ["audioUrl"],
}


class TemplateParameterError(ToolMeshError):
    """A workflow template was called without one of its required parameters."""

    def __init__(self, template: str, missing: List[str]):
        self.template = template
        self.missing = missing
        super().__init__(f"Template '{template}' is missing required parameters: {', '.join(missing)}")


def template_names() -> List[str]:
    return list(WORKFLOW_TEMPLATES)


def missing_template_parameters(name: str, params: Optional[Mapping[str, Any]] = None) -> List[str]:
    """Required parameters of template ``name`` that ``params`` leaves out or leaves empty."""
    params = params or {}
    return [key for key in TEMPLATE_REQUIRED_PARAMETERS.get(name, []) if params.get(key) in (None, "")]


def build_template_plan(
    name: str, params: Optional[Mapping[str, Any]] = None, *, goal: Optional[str] = None
) -> Optional[OrchestrationPlan]:
    """Instantiate template ``name``; ``None`` if no such template exists.

    ``goal`` replaces the template's canned goal when given.
    """
    factory = WORKFLOW_TEMPLATES.get(name)
    if factory is None:
        return None
    plan = factory(params or {})
    if goal:
        plan = plan.model_copy(update={"goal": goal})
    return plan

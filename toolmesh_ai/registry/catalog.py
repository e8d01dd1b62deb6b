"""Built-in tool catalog.

Every entry is a plain mapping in wire format (camelCase keys) so the catalog
reads the same way a tool registration payload does. ``builtin_tools()``
parses them into ``ToolDefinition`` instances; ``ToolRegistry.with_builtin_tools``
registers them.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from .models import ToolDefinition

# Provider list prices in USD, before markup.
PROVIDER_COSTS: Dict[str, float] = {
    "FLUX_PRO_KONTEXT": 0.05,
    "FLUX_2": 0.025,
    "NANO_BANANA": 0.25,
    "VIDEO_PER_SECOND": 0.10,
    "MUSIC_PER_MINUTE": 0.02,
    "SFX": 0.03,
    "UPSCALE": 0.03,
    "DESCRIBE": 0.01,
    "PROMPT_LAB": 0.001,
}

DEFAULT_MARKUP = 1.30

IMAGE_SIZES = ["square_hd", "square", "landscape_4_3", "landscape_16_9", "portrait_4_3", "portrait_16_9"]
ASPECT_RATIOS = ["16:9", "9:16", "1:1"]
VIDEO_DURATIONS = ["4s", "6s", "8s"]
IMAGE_MIME_TYPES = ["image/jpeg", "image/png", "image/webp"]


def _param(type_: str, description: Optional[str] = None, **extra: Any) -> Dict[str, Any]:
    param: Dict[str, Any] = {"type": type_}
    if description:
        param["description"] = description
    param.update(extra)
    return param


def _image_size(description: Optional[str] = None) -> Dict[str, Any]:
    return _param("string", description, enum=IMAGE_SIZES, default="landscape_4_3")


def _output_format(default: str = "jpeg", options: Optional[List[str]] = None) -> Dict[str, Any]:
    return _param("string", "Output image format", enum=options or ["jpeg", "png", "webp"], default=default)


def _num_images() -> Dict[str, Any]:
    return _param("number", "Number of images to generate", default=1, minimum=1, maximum=4)


def _flat(base_usd: float, credits: float) -> Dict[str, Any]:
    return {"baseUsdCost": base_usd, "credits": credits, "markup": DEFAULT_MARKUP}


def _per_unit(unit_cost: float, unit_type: str, unit_credits: float) -> Dict[str, Any]:
    return {
        "baseUsdCost": unit_cost,
        "perUnitCost": unit_cost,
        "unitType": unit_type,
        "credits": unit_credits,
        "perUnitCredits": unit_credits,
        "markup": DEFAULT_MARKUP,
    }


def _schema(properties: Dict[str, Any], required: List[str]) -> Dict[str, Any]:
    return {"type": "object", "properties": properties, "required": required}


BUILTIN_TOOLS: List[Dict[str, Any]] = [
    # Image generation
    {
        "id": "image.generate.flux-pro-kontext",
        "name": "FLUX Pro Kontext - Text to Image",
        "description": "Generate high-quality images from text prompts using FLUX Pro Kontext. "
        "Best for creative, versatile image generation with fast results.",
        "category": "image-generation",
        "endpoint": "fal-ai/flux-pro/kontext/text-to-image",
        "executionMode": "sync",
        "inputSchema": _schema(
            {
                "prompt": _param("string", "Text description of the image to generate"),
                "image_size": _image_size("Output image dimensions"),
                "num_images": _num_images(),
                "seed": _param("number", "Random seed for reproducibility"),
                "guidance_scale": _param("number", "Guidance scale for generation", default=3.5, minimum=1, maximum=20),
                "output_format": _output_format(),
            },
            ["prompt"],
        ),
        "outputDescription": "Array of generated image URLs",
        "outputMimeTypes": IMAGE_MIME_TYPES,
        "pricing": _flat(PROVIDER_COSTS["FLUX_PRO_KONTEXT"], 0.5),
        "tags": ["image", "text-to-image", "flux", "creative", "fast"],
    },
    {
        "id": "image.generate.flux-pro-kontext-edit",
        "name": "FLUX Pro Kontext - Image Editing",
        "description": "Edit an existing image using text instructions with FLUX Pro Kontext. "
        "Supports single image editing with natural language commands.",
        "category": "image-editing",
        "endpoint": "fal-ai/flux-pro/kontext/max",
        "executionMode": "sync",
        "inputSchema": _schema(
            {
                "prompt": _param("string", "Text instruction for how to edit the image"),
                "image_url": _param("string", "URL of the image to edit"),
                "image_size": _image_size("Output image dimensions"),
                "seed": _param("number", "Random seed for reproducibility"),
                "guidance_scale": _param("number", "Guidance scale", default=3.5),
                "output_format": _output_format(),
            },
            ["prompt", "image_url"],
        ),
        "outputDescription": "Edited image URL",
        "outputMimeTypes": IMAGE_MIME_TYPES,
        "pricing": _flat(PROVIDER_COSTS["FLUX_PRO_KONTEXT"], 0.5),
        "tags": ["image", "editing", "flux", "image-to-image"],
    },
    {
        "id": "image.generate.flux-pro-kontext-multi",
        "name": "FLUX Pro Kontext - Multi-Image Blending",
        "description": "Blend multiple reference images into a new image using FLUX Pro Kontext. "
        "Great for combining elements from different images.",
        "category": "image-editing",
        "endpoint": "fal-ai/flux-pro/kontext/max/multi",
        "executionMode": "sync",
        "inputSchema": _schema(
            {
                "prompt": _param("string", "Text description of how to blend the images"),
                "image_urls": _param(
                    "array",
                    "Array of image URLs to blend (first is base, others are references)",
                    items={"type": "string"},
                ),
                "image_size": _image_size(),
                "seed": _param("number", "Random seed"),
                "output_format": _output_format(),
            },
            ["prompt", "image_urls"],
        ),
        "outputDescription": "Blended image URL",
        "outputMimeTypes": IMAGE_MIME_TYPES,
        "pricing": _flat(PROVIDER_COSTS["FLUX_PRO_KONTEXT"], 1.0),
        "tags": ["image", "blending", "multi-image", "flux"],
    },
    {
        "id": "image.generate.flux-2",
        "name": "FLUX 2 - Text to Image",
        "description": "Generate photorealistic images with excellent text rendering using FLUX 2. "
        "Best for photorealistic content and images containing text.",
        "category": "image-generation",
        "endpoint": "fal-ai/flux-2",
        "executionMode": "sync",
        "inputSchema": _schema(
            {
                "prompt": _param("string", "Text description of the image to generate"),
                "image_size": _image_size(),
                "num_images": _num_images(),
                "seed": _param("number", "Random seed"),
                "guidance_scale": _param("number", default=3.5),
                "output_format": _output_format(),
            },
            ["prompt"],
        ),
        "outputDescription": "Array of generated image URLs",
        "outputMimeTypes": IMAGE_MIME_TYPES,
        "pricing": _flat(PROVIDER_COSTS["FLUX_2"], 0.65),
        "tags": ["image", "text-to-image", "flux-2", "photorealistic", "text-in-image"],
    },
    {
        "id": "image.generate.flux-2-edit",
        "name": "FLUX 2 - Image Editing",
        "description": "Edit images with photorealistic quality using FLUX 2. Best for realistic edits and modifications.",
        "category": "image-editing",
        "endpoint": "fal-ai/flux-2/edit",
        "executionMode": "sync",
        "inputSchema": _schema(
            {
                "prompt": _param("string", "Edit instruction"),
                "image_url": _param("string", "URL of image to edit"),
                "image_size": _image_size(),
                "seed": _param("number"),
                "output_format": _output_format(),
            },
            ["prompt", "image_url"],
        ),
        "outputDescription": "Edited image URL",
        "outputMimeTypes": IMAGE_MIME_TYPES,
        "pricing": _flat(PROVIDER_COSTS["FLUX_2"], 0.65),
        "tags": ["image", "editing", "flux-2", "photorealistic"],
    },
    {
        "id": "image.generate.nano-banana-pro",
        "name": "Nano Banana Pro - Text to Image",
        "description": "Generate images including 360° panoramas using Nano Banana Pro. "
        "Specialized for panoramic and immersive content.",
        "category": "image-generation",
        "endpoint": "fal-ai/nano-banana-pro",
        "executionMode": "sync",
        "inputSchema": _schema(
            {
                "prompt": _param("string", "Text description"),
                "image_size": _image_size(),
                "num_images": _num_images(),
                "seed": _param("number"),
                "output_format": _output_format(),
            },
            ["prompt"],
        ),
        "outputDescription": "Array of generated image URLs (supports 360° panorama)",
        "outputMimeTypes": IMAGE_MIME_TYPES,
        "pricing": _flat(PROVIDER_COSTS["NANO_BANANA"], 0.7),
        "tags": ["image", "text-to-image", "nano-banana", "360", "panorama"],
    },
    {
        "id": "image.generate.nano-banana-pro-edit",
        "name": "Nano Banana Pro - Image Editing",
        "description": "Edit images using Nano Banana Pro model.",
        "category": "image-editing",
        "endpoint": "fal-ai/nano-banana-pro/edit",
        "executionMode": "sync",
        "inputSchema": _schema(
            {
                "prompt": _param("string", "Edit instruction"),
                "image_url": _param("string", "URL of image to edit"),
                "image_size": _image_size(),
                "seed": _param("number"),
                "output_format": _output_format(),
            },
            ["prompt", "image_url"],
        ),
        "outputDescription": "Edited image URL",
        "outputMimeTypes": IMAGE_MIME_TYPES,
        "pricing": _flat(PROVIDER_COSTS["NANO_BANANA"], 0.7),
        "tags": ["image", "editing", "nano-banana"],
    },
    {
        "id": "image.generate.flux-controlnet-canny",
        "name": "FLUX ControlNet Canny",
        "description": "Generate images guided by edge detection (Canny) from a reference image. "
        "Great for maintaining structure while changing style.",
        "category": "image-generation",
        "endpoint": "fal-ai/flux-control-lora-canny",
        "executionMode": "sync",
        "inputSchema": _schema(
            {
                "prompt": _param("string", "Text description of the desired output"),
                "control_image_url": _param("string", "URL of the reference image for edge detection"),
                "image_size": _image_size(),
                "num_images": _num_images(),
                "seed": _param("number"),
                "guidance_scale": _param("number", default=3.5),
                "output_format": _output_format(),
            },
            ["prompt", "control_image_url"],
        ),
        "outputDescription": "Generated image guided by edge structure",
        "outputMimeTypes": IMAGE_MIME_TYPES,
        "pricing": _flat(PROVIDER_COSTS["FLUX_PRO_KONTEXT"], 0.5),
        "tags": ["image", "controlnet", "canny", "structure-guided"],
    },
    # Image processing and editing
    {
        "id": "image.upscale",
        "name": "Creative Upscaler",
        "description": "Upscale images 2x or 4x with AI-enhanced detail. Adds realistic detail while increasing resolution.",
        "category": "image-processing",
        "endpoint": "fal-ai/creative-upscaler",
        "executionMode": "sync",
        "inputSchema": _schema(
            {
                "image_url": _param("string", "URL of image to upscale"),
                "scale": _param("number", "Upscale factor", enum=[2, 4], default=2),
                "creativity": _param(
                    "number", "How much creative detail to add (0-1)", default=0.5, minimum=0, maximum=1
                ),
                "prompt": _param("string", "Optional text guidance for upscaling"),
                "output_format": _output_format("png"),
            },
            ["image_url"],
        ),
        "outputDescription": "Upscaled image URL",
        "outputMimeTypes": IMAGE_MIME_TYPES,
        "pricing": _flat(PROVIDER_COSTS["UPSCALE"], 0.5),
        "tags": ["image", "upscale", "enhance", "resolution"],
    },
    {
        "id": "image.face-swap",
        "name": "Face Swap",
        "description": "Swap faces between two images. Detects and replaces the face in the target image "
        "with the face from the source image.",
        "category": "image-editing",
        "endpoint": "fal-ai/face-swap",
        "executionMode": "queue",
        "inputSchema": _schema(
            {
                "source_image_url": _param("string", "URL of the image containing the face to use"),
                "target_image_url": _param("string", "URL of the image where the face will be placed"),
            },
            ["source_image_url", "target_image_url"],
        ),
        "outputDescription": "Image with swapped face",
        "outputMimeTypes": ["image/png"],
        "pricing": _flat(0.02, 2),
        "tags": ["image", "face-swap", "editing"],
    },
    {
        "id": "image.inpaint",
        "name": "Image Inpainting",
        "description": "Fill in or replace masked regions of an image using AI. "
        "Provide a mask to indicate which areas to regenerate.",
        "category": "image-editing",
        "endpoint": "fal-ai/flux-pro/v1.1/inpaint",
        "executionMode": "queue",
        "inputSchema": _schema(
            {
                "prompt": _param("string", "Description of what to generate in the masked area"),
                "image_url": _param("string", "URL of the original image"),
                "mask_url": _param("string", "URL of the mask image (white = areas to regenerate)"),
                "seed": _param("number"),
                "guidance_scale": _param("number", default=7.5),
                "output_format": _output_format("png"),
            },
            ["prompt", "image_url", "mask_url"],
        ),
        "outputDescription": "Inpainted image URL",
        "outputMimeTypes": ["image/png"],
        "pricing": _flat(0.03, 2),
        "tags": ["image", "inpainting", "editing", "mask"],
    },
    {
        "id": "image.outpaint",
        "name": "Image Outpainting",
        "description": "Extend an image beyond its borders using AI. "
        "Generates content for the expanded regions while maintaining consistency.",
        "category": "image-editing",
        "endpoint": "fal-ai/flux-pro/v1.1/outpaint",
        "executionMode": "queue",
        "inputSchema": _schema(
            {
                "prompt": _param("string", "Description of what to generate in the extended area"),
                "image_url": _param("string", "URL of the original image"),
                "top": _param("number", "Pixels to extend upward", default=0),
                "bottom": _param("number", "Pixels to extend downward", default=0),
                "left": _param("number", "Pixels to extend left", default=0),
                "right": _param("number", "Pixels to extend right", default=0),
                "seed": _param("number"),
                "output_format": _output_format("png"),
            },
            ["prompt", "image_url"],
        ),
        "outputDescription": "Extended image URL",
        "outputMimeTypes": ["image/png"],
        "pricing": _flat(0.03, 2),
        "tags": ["image", "outpainting", "extend", "editing"],
    },
    {
        "id": "image.extract-layer",
        "name": "Layer Extraction (Background Removal)",
        "description": "Extract the foreground subject from an image, removing the background. "
        "Returns an RGBA image with transparency.",
        "category": "image-processing",
        "endpoint": "fal-ai/birefnet",
        "executionMode": "queue",
        "inputSchema": _schema(
            {
                "image_url": _param("string", "URL of the image to extract from"),
                "operating_resolution": _param(
                    "string", "Processing resolution", enum=["1024x1024", "2048x2048"], default="1024x1024"
                ),
                "output_format": _output_format("png", ["png", "webp"]),
            },
            ["image_url"],
        ),
        "outputDescription": "RGBA image with transparent background",
        "outputMimeTypes": ["image/png"],
        "pricing": _flat(0.01, 0.5),
        "tags": ["image", "background-removal", "segmentation", "layer"],
    },
    # Video
    {
        "id": "video.generate.veo3",
        "name": "Veo 3.1 - Text to Video",
        "description": "Generate high-quality cinematic videos from text prompts using Google Veo 3.1. "
        "Best for premium, cinematic quality output.",
        "category": "video-generation",
        "endpoint": "fal-ai/veo3.1",
        "executionMode": "queue",
        "inputSchema": _schema(
            {
                "prompt": _param("string", "Text description of the video to generate"),
                "duration": _param("string", "Video duration", enum=VIDEO_DURATIONS, default="6s"),
                "aspect_ratio": _param("string", "Video aspect ratio", enum=ASPECT_RATIOS, default="16:9"),
                "generate_audio": _param("boolean", "Whether to generate audio", default=True),
            },
            ["prompt"],
        ),
        "outputDescription": "Video URL (MP4)",
        "outputMimeTypes": ["video/mp4"],
        "pricing": _per_unit(PROVIDER_COSTS["VIDEO_PER_SECOND"], "second", 2.2),
        "tags": ["video", "text-to-video", "veo", "cinematic", "premium"],
    },
    {
        "id": "video.generate.veo3-image-to-video",
        "name": "Veo 3.1 - Image to Video",
        "description": "Animate a still image into a video using Veo 3.1. Brings images to life with cinematic motion.",
        "category": "video-generation",
        "endpoint": "fal-ai/veo3.1/fast/image-to-video",
        "executionMode": "queue",
        "inputSchema": _schema(
            {
                "prompt": _param("string", "Description of the desired motion/animation"),
                "image_url": _param("string", "URL of the image to animate"),
                "duration": _param("string", enum=VIDEO_DURATIONS, default="6s"),
                "aspect_ratio": _param("string", enum=ASPECT_RATIOS, default="16:9"),
                "generate_audio": _param("boolean", default=True),
            },
            ["prompt", "image_url"],
        ),
        "outputDescription": "Animated video URL (MP4)",
        "outputMimeTypes": ["video/mp4"],
        "pricing": _per_unit(PROVIDER_COSTS["VIDEO_PER_SECOND"], "second", 2.2),
        "tags": ["video", "image-to-video", "veo", "animation"],
    },
    {
        "id": "video.generate.veo3-first-last-frame",
        "name": "Veo 3.1 - First/Last Frame Animation",
        "description": "Generate a video that transitions between a first frame and last frame image. "
        "Creates smooth interpolation between two keyframes.",
        "category": "video-generation",
        "endpoint": "fal-ai/veo3.1/fast/first-last-frame-to-video",
        "executionMode": "queue",
        "inputSchema": _schema(
            {
                "prompt": _param("string", "Description of the transition"),
                "first_frame_image_url": _param("string", "URL of the first frame image"),
                "last_frame_image_url": _param("string", "URL of the last frame image"),
                "duration": _param("string", enum=VIDEO_DURATIONS, default="6s"),
                "generate_audio": _param("boolean", default=True),
            },
            ["prompt", "first_frame_image_url", "last_frame_image_url"],
        ),
        "outputDescription": "Interpolated video URL (MP4)",
        "outputMimeTypes": ["video/mp4"],
        "pricing": _per_unit(PROVIDER_COSTS["VIDEO_PER_SECOND"], "second", 2.2),
        "tags": ["video", "frame-interpolation", "veo", "keyframe"],
    },
    {
        "id": "video.generate.ltx-text",
        "name": "LTX-2 - Text to Video",
        "description": "Generate videos from text prompts using LTX-2 19B. Fast and affordable option for video generation.",
        "category": "video-generation",
        "endpoint": "fal-ai/ltx-2-19b/text-to-video",
        "executionMode": "queue",
        "inputSchema": _schema(
            {
                "prompt": _param("string", "Text description of the video"),
                "duration": _param("string", enum=VIDEO_DURATIONS, default="6s"),
                "aspect_ratio": _param("string", enum=ASPECT_RATIOS, default="16:9"),
                "seed": _param("number"),
            },
            ["prompt"],
        ),
        "outputDescription": "Video URL (MP4)",
        "outputMimeTypes": ["video/mp4"],
        "pricing": _per_unit(0.05, "second", 1),
        "tags": ["video", "text-to-video", "ltx", "budget", "fast"],
    },
    {
        "id": "video.generate.ltx-image",
        "name": "LTX-2 - Image to Video",
        "description": "Animate an image into a video using LTX-2 19B. Fast and affordable image animation.",
        "category": "video-generation",
        "endpoint": "fal-ai/ltx-2-19b/image-to-video",
        "executionMode": "queue",
        "inputSchema": _schema(
            {
                "prompt": _param("string", "Description of desired motion"),
                "image_url": _param("string", "URL of image to animate"),
                "duration": _param("string", enum=VIDEO_DURATIONS, default="6s"),
                "seed": _param("number"),
            },
            ["prompt", "image_url"],
        ),
        "outputDescription": "Animated video URL (MP4)",
        "outputMimeTypes": ["video/mp4"],
        "pricing": _per_unit(0.05, "second", 1),
        "tags": ["video", "image-to-video", "ltx", "budget", "fast"],
    },
    {
        "id": "video.animate.wan",
        "name": "WAN Animate - Video Animation",
        "description": "Animate or transform videos using WAN v2.2. "
        "Supports video-to-video style transfer and animation replacement.",
        "category": "video-editing",
        "endpoint": "fal-ai/wan/v2.2-1.3b/animate/replace",
        "executionMode": "queue",
        "inputSchema": _schema(
            {
                "prompt": _param("string", "Description of desired animation style"),
                "video_url": _param("string", "URL of video to animate"),
                "image_url": _param("string", "Optional reference image for style"),
                "aspect_ratio": _param("string", enum=ASPECT_RATIOS, default="16:9"),
            },
            ["prompt"],
        ),
        "outputDescription": "Animated video URL (MP4)",
        "outputMimeTypes": ["video/mp4"],
        "pricing": _per_unit(0.05, "second", 2),
        "tags": ["video", "animation", "wan", "style-transfer"],
    },
    {
        "id": "video.video-to-audio",
        "name": "Video to Audio",
        "description": "Generate audio/sound effects for a video using MMAudio v2. "
        "Creates contextually appropriate audio from video content.",
        "category": "audio-generation",
        "endpoint": "fal-ai/mmaudio-v2",
        "executionMode": "queue",
        "inputSchema": _schema(
            {
                "video_url": _param("string", "URL of the video to generate audio for"),
                "prompt": _param("string", "Optional text description of desired audio"),
                "duration": _param("number", "Audio duration in seconds"),
            },
            ["video_url"],
        ),
        "outputDescription": "Video with generated audio (MP4)",
        "outputMimeTypes": ["video/mp4", "audio/wav"],
        "pricing": _flat(0.03, 1),
        "tags": ["audio", "video-to-audio", "sound-effects", "foley"],
    },
    # Audio and music
    {
        "id": "audio.tts",
        "name": "XTTS v2 - Voice Cloning & TTS",
        "description": "Generate speech from text with voice cloning. Provide a reference audio to clone any voice.",
        "category": "audio-generation",
        "endpoint": "fal-ai/xtts-v2",
        "executionMode": "queue",
        "inputSchema": _schema(
            {
                "text": _param("string", "Text to convert to speech"),
                "audio_url": _param("string", "URL of reference audio for voice cloning"),
                "language": _param(
                    "string",
                    "Language code",
                    enum=["en", "ja", "zh", "ko", "es", "fr", "de", "it", "pt", "ru"],
                    default="en",
                ),
            },
            ["text", "audio_url"],
        ),
        "outputDescription": "Generated speech audio URL (WAV)",
        "outputMimeTypes": ["audio/wav"],
        "pricing": _flat(0.02, 1),
        "tags": ["audio", "tts", "voice-cloning", "speech"],
    },
    {
        "id": "audio.transcribe",
        "name": "Whisper - Speech to Text",
        "description": "Transcribe audio or video files to text using Whisper large-v3. Supports 100+ languages "
        "with auto-detection, word-level timestamps, and translation to English.",
        "category": "audio-processing",
        "endpoint": "fal-ai/whisper",
        "executionMode": "queue",
        "inputSchema": _schema(
            {
                "audio_url": _param("string", "URL of the audio or video file to transcribe"),
                "language": _param("string", "Language code hint (auto-detected if omitted)"),
                "task": _param("string", "Task type", enum=["transcribe", "translate"], default="transcribe"),
                "chunk_level": _param("string", "Timestamp granularity", enum=["segment", "word"], default="segment"),
            },
            ["audio_url"],
        ),
        "outputDescription": "Transcribed text with timestamps and detected language",
        "outputMimeTypes": ["application/json"],
        "pricing": _flat(0.01, 1),
        "tags": ["audio", "transcription", "speech-to-text", "whisper", "subtitles"],
    },
    {
        "id": "audio.lip-sync",
        "name": "SadTalker - Lip Sync",
        "description": "Generate a talking-head video from a portrait image and audio. "
        "The face will lip-sync to the provided audio.",
        "category": "video-generation",
        "endpoint": "fal-ai/sadtalker",
        "executionMode": "queue",
        "inputSchema": _schema(
            {
                "face_image_url": _param("string", "URL of the portrait/face image"),
                "audio_url": _param("string", "URL of the audio to lip-sync to"),
                "still_mode": _param("boolean", "Minimal head movement", default=False),
                "preprocess": _param(
                    "string",
                    "Face preprocessing",
                    enum=["crop", "resize", "full", "extcrop", "extfull"],
                    default="crop",
                ),
            },
            ["face_image_url", "audio_url"],
        ),
        "outputDescription": "Lip-synced video URL (MP4)",
        "outputMimeTypes": ["video/mp4"],
        "pricing": _flat(0.04, 3),
        "tags": ["video", "lip-sync", "talking-head", "avatar"],
    },
    {
        "id": "music.generate",
        "name": "CassetteAI Music Generator",
        "description": "Generate original music from text descriptions. "
        "Specify genre, mood, tempo, and instruments for customized music creation.",
        "category": "music-generation",
        "endpoint": "CassetteAI/music-generator",
        "executionMode": "queue",
        "inputSchema": _schema(
            {
                "prompt": _param("string", "Description of the music (genre, mood, tempo, instruments)"),
                "duration": _param("number", "Duration in seconds", default=30, minimum=15, maximum=180),
            },
            ["prompt"],
        ),
        "outputDescription": "Generated music audio URL (MP3/WAV)",
        "outputMimeTypes": ["audio/mpeg", "audio/wav"],
        "pricing": _per_unit(PROVIDER_COSTS["MUSIC_PER_MINUTE"], "minute", 0.25),
        "tags": ["music", "generation", "audio", "composition"],
    },
    {
        "id": "audio.sfx",
        "name": "AudioLDM2 - Sound Effects",
        "description": "Generate sound effects from text descriptions. Create any sound effect from a text prompt.",
        "category": "audio-generation",
        "endpoint": "fal-ai/audioldm2",
        "executionMode": "queue",
        "inputSchema": _schema(
            {
                "prompt": _param("string", "Description of the sound effect to generate"),
                "duration": _param("number", "Duration in seconds", default=5, minimum=1, maximum=30),
                "num_inference_steps": _param("number", "Quality steps", default=50, minimum=10, maximum=100),
                "seed": _param("number"),
            },
            ["prompt"],
        ),
        "outputDescription": "Sound effect audio URL (WAV)",
        "outputMimeTypes": ["audio/wav"],
        "pricing": _flat(PROVIDER_COSTS["SFX"], 1),
        "tags": ["audio", "sound-effects", "sfx", "foley"],
    },
    {
        "id": "audio.stem-separation",
        "name": "Demucs - Stem Separation",
        "description": "Separate audio into individual stems: vocals, drums, bass, and other instruments. "
        "Professional audio isolation.",
        "category": "audio-processing",
        "endpoint": "fal-ai/demucs",
        "executionMode": "queue",
        "inputSchema": _schema(
            {
                "audio_url": _param("string", "URL of the audio to separate"),
                "stems": _param("number", "Number of stems (2 or 4)", enum=[2, 4], default=4),
            },
            ["audio_url"],
        ),
        "outputDescription": "Separated audio stems (vocals, drums, bass, other)",
        "outputMimeTypes": ["audio/wav"],
        "pricing": _flat(0.03, 2),
        "tags": ["audio", "stem-separation", "demucs", "remix"],
    },
    # 3D
    {
        "id": "3d.image-to-3d",
        "name": "Hunyuan3D v3 - Image to 3D",
        "description": "Convert a 2D image into a 3D model using Hunyuan3D v3. "
        "Supports GLB, OBJ, and FBX output formats with PBR materials.",
        "category": "3d-generation",
        "endpoint": "fal-ai/hunyuan3d-v3/image-to-3d",
        "executionMode": "queue",
        "inputSchema": _schema(
            {
                "image_url": _param("string", "URL of the image to convert to 3D"),
                "back_image_url": _param("string", "Optional URL of back view image"),
                "left_image_url": _param("string", "Optional URL of left view image"),
                "right_image_url": _param("string", "Optional URL of right view image"),
                "generate_texture": _param("boolean", "Generate PBR textures", default=True),
                "target_face_count": _param(
                    "number", "Target polygon count", default=40000, minimum=10000, maximum=1500000
                ),
                "output_format": _param("string", "Output 3D format", enum=["glb", "obj", "fbx"], default="glb"),
            },
            ["image_url"],
        ),
        "outputDescription": "3D model file URL (GLB/OBJ/FBX)",
        "outputMimeTypes": ["model/gltf-binary", "model/obj", "application/octet-stream"],
        "pricing": _flat(0.05, 3),
        "tags": ["3d", "image-to-3d", "3d-model", "mesh", "pbr"],
    },
    # Vision and text
    {
        "id": "vision.describe",
        "name": "Image Description (LLaVA)",
        "description": "Generate a detailed text description of an image using LLaVA vision model. "
        "Useful for image understanding and captioning.",
        "category": "vision",
        "endpoint": "fal-ai/llavav15-13b",
        "executionMode": "sync",
        "inputSchema": _schema(
            {
                "image_url": _param("string", "URL of the image to describe"),
                "prompt": _param(
                    "string", "Optional question about the image", default="Describe this image in detail."
                ),
                "max_tokens": _param("number", "Maximum response length", default=512),
            },
            ["image_url"],
        ),
        "outputDescription": "Text description of the image",
        "outputMimeTypes": ["text/plain"],
        "pricing": _flat(PROVIDER_COSTS["DESCRIBE"], 0.5),
        "tags": ["vision", "description", "captioning", "understanding"],
    },
    {
        "id": "text.llm",
        "name": "LLM Chat",
        "description": "Chat with hosted large language models through a unified interface. "
        "Useful for prompt optimization, text generation, and analysis.",
        "category": "text-generation",
        "endpoint": "fal-ai/any-llm",
        "executionMode": "sync",
        "inputSchema": _schema(
            {
                "prompt": _param("string", "The prompt/question to send to the LLM"),
                "system_prompt": _param("string", "Optional system prompt to set the behavior"),
                "model": _param("string", "Model to use", default="claude-sonnet-4-5"),
                "max_tokens": _param("number", "Maximum response tokens", default=1024),
            },
            ["prompt"],
        ),
        "outputDescription": "LLM text response",
        "outputMimeTypes": ["text/plain"],
        "pricing": _flat(PROVIDER_COSTS["PROMPT_LAB"], 0.1),
        "tags": ["text", "llm", "chat", "analysis", "prompt-optimization"],
    },
    # Training
    {
        "id": "training.flux-lora",
        "name": "FLUX LoRA Fast Training",
        "description": "Train a custom LoRA model on FLUX for personalized image generation. "
        "Upload training images to create a fine-tuned model.",
        "category": "training",
        "endpoint": "fal-ai/flux-lora-fast-training",
        "executionMode": "queue",
        "inputSchema": _schema(
            {
                "images_data_url": _param("string", "URL of training images ZIP file"),
                "trigger_word": _param("string", "Trigger word for the trained concept", default="ohwx"),
                "steps": _param("number", "Training steps", default=1000, minimum=100, maximum=5000),
                "learning_rate": _param("number", "Learning rate", default=0.0001),
                "create_masks": _param("boolean", "Auto-generate training masks", default=True),
            },
            ["images_data_url"],
        ),
        "outputDescription": "Trained LoRA model weights URL",
        "outputMimeTypes": ["application/octet-stream"],
        "pricing": _per_unit(0.003, "step", 0.03),
        "tags": ["training", "lora", "fine-tuning", "flux", "personalization"],
    },
    {
        "id": "training.flux-2",
        "name": "FLUX 2 LoRA Training",
        "description": "Train a custom LoRA model on FLUX 2 for photorealistic personalized generation.",
        "category": "training",
        "endpoint": "fal-ai/flux-2-trainer",
        "executionMode": "queue",
        "inputSchema": _schema(
            {
                "images_data_url": _param("string", "URL of training images ZIP file"),
                "trigger_word": _param("string", "Trigger word", default="ohwx"),
                "steps": _param("number", "Training steps", default=1000, minimum=100, maximum=5000),
                "learning_rate": _param("number", "Learning rate", default=0.0001),
            },
            ["images_data_url"],
        ),
        "outputDescription": "Trained LoRA model weights URL",
        "outputMimeTypes": ["application/octet-stream"],
        "pricing": _per_unit(0.005, "step", 0.05),
        "tags": ["training", "lora", "fine-tuning", "flux-2", "photorealistic"],
    },
    {
        "id": "training.lora-inference",
        "name": "LoRA Inference - Generate with Custom Model",
        "description": "Generate images using a previously trained LoRA model. "
        "Provide the LoRA weights URL and trigger word.",
        "category": "image-generation",
        "endpoint": "fal-ai/flux-2/lora",
        "executionMode": "queue",
        "inputSchema": _schema(
            {
                "prompt": _param("string", "Text prompt (include trigger word)"),
                "lora_url": _param("string", "URL of the trained LoRA weights"),
                "lora_scale": _param("number", "LoRA influence scale", default=1.0, minimum=0, maximum=2),
                "image_size": _image_size(),
                "num_images": _num_images(),
                "seed": _param("number"),
                "guidance_scale": _param("number", default=3.5),
                "output_format": _output_format(),
            },
            ["prompt", "lora_url"],
        ),
        "outputDescription": "Generated images using custom LoRA model",
        "outputMimeTypes": IMAGE_MIME_TYPES,
        "pricing": _flat(0.03, 1),
        "tags": ["image", "lora", "custom-model", "personalized"],
    },
]


def builtin_tools() -> List[ToolDefinition]:
    """Parse the built-in catalog into tool definitions."""
    return [ToolDefinition.model_validate(entry) for entry in BUILTIN_TOOLS]

"""Generative photorealistic render service.

Sends the current composite to a Gemini image model together with a fixed
compositing instruction and returns the generated image as PNG bytes. The
remote side is opaque: the only check on its answer is that it decodes as an
image.
"""

import base64
import logging
import os

from google import genai
from google.genai import types

from constants import AI_MODEL, AI_MODEL_ENV_VAR, AI_API_KEY_ENV_VARS, AI_RENDER_PROMPT
from services.image_loader import decode_image, DecodeError

logger = logging.getLogger(__name__)


class RemoteGenerationError(Exception):
    """Raised when the remote render fails or returns no usable image"""


def get_api_key():
    """Return the first API key found in the environment, or None"""
    for var in AI_API_KEY_ENV_VARS:
        value = os.getenv(var)
        if value:
            return value
    return None


def get_model_name() -> str:
    return os.getenv(AI_MODEL_ENV_VAR) or AI_MODEL


def create_client(api_key: str = None):
    """Create a Gemini client

    Args:
        api_key: Explicit key; falls back to GEMINI_API_KEY, GOOGLE_API_KEY, API_KEY

    Raises:
        RemoteGenerationError: If no key is available or the client cannot be built
    """
    api_key = api_key or get_api_key()
    if not api_key:
        raise RemoteGenerationError(
            "No API key found. Set GEMINI_API_KEY (or GOOGLE_API_KEY) in the environment."
        )
    try:
        return genai.Client(api_key=api_key)
    except Exception as e:
        raise RemoteGenerationError(f"Could not create Gemini client: {e}") from e


def extract_image_bytes(response) -> bytes:
    """Pull the first inline image out of a generate_content response

    Raises:
        RemoteGenerationError: If the response carries no image data
    """
    candidates = getattr(response, 'candidates', None) or []
    if not isinstance(candidates, (list, tuple)):
        raise RemoteGenerationError("Malformed response: candidates is not a list")

    for candidate in candidates:
        content = getattr(candidate, 'content', None)
        for part in getattr(content, 'parts', None) or []:
            inline = getattr(part, 'inline_data', None)
            data = getattr(inline, 'data', None)
            if not data:
                text = getattr(part, 'text', None)
                if text:
                    logger.info("Model text: %s", text)
                continue
            if isinstance(data, str):
                try:
                    data = base64.b64decode(data, validate=True)
                except ValueError as e:
                    raise RemoteGenerationError("Malformed image data in response") from e
            if not isinstance(data, (bytes, bytearray)):
                raise RemoteGenerationError(
                    f"Malformed image data in response: unexpected {type(data).__name__}"
                )
            return bytes(data)
    raise RemoteGenerationError("No image in response")


def generate_realistic_render(png_bytes: bytes, client=None, model: str = None,
                              prompt: str = AI_RENDER_PROMPT) -> bytes:
    """Turn a rough composite into a photorealistic image

    Args:
        png_bytes: PNG-encoded composite
        client: Gemini client (created from the environment when None)
        model: Model name (defaults to LAYERMASTER_AI_MODEL or the built-in model)
        prompt: Instruction sent alongside the image

    Returns:
        PNG bytes of the generated image

    Raises:
        RemoteGenerationError: On network/API failure, missing or undecodable image
    """
    if client is None:
        client = create_client()
    model = model or get_model_name()

    logger.info("Requesting realistic render from %s (%d bytes)", model, len(png_bytes))
    try:
        response = client.models.generate_content(
            model=model,
            contents=[
                types.Part.from_bytes(data=png_bytes, mime_type='image/png'),
                prompt,
            ],
        )
    except Exception as e:
        logger.error("AI generation error: %s", e)
        raise RemoteGenerationError(f"Remote render failed: {e}") from e

    try:
        image_bytes = extract_image_bytes(response)
        surface = decode_image(image_bytes)
    except DecodeError as e:
        raise RemoteGenerationError(f"Response image could not be decoded: {e}") from e
    except (TypeError, AttributeError, ValueError) as e:
        raise RemoteGenerationError(f"Malformed response: {e}") from e

    # Normalise to PNG whatever format the service answered in
    result = surface.encode_png()
    logger.info("Received %dx%d render", surface.width, surface.height)
    return result

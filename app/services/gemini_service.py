# /app/services/gemini_service.py

import os
from typing import Optional
from dotenv import load_dotenv
import google.generativeai as genai
from google.generativeai.types import GenerationConfig

# --- CONFIGURATION ---
load_dotenv()
# Used only when no key has been saved through the settings API.
DEFAULT_API_KEY = os.getenv("GOOGLE_API_KEY")

GEMINI_FLASH_MODEL = 'gemini-2.0-flash'


def resolve_api_key(stored_key: Optional[str]) -> Optional[str]:
    """A stored key takes precedence over the environment default."""
    return stored_key or DEFAULT_API_KEY


# --- CORE GENERATIVE FUNCTIONS ---

async def generate_text(prompt: str, api_key: str, temperature: float = 0.2) -> str:
    """
    Sends a single text prompt to Gemini and returns the generated text.
    Transport and HTTP errors from the SDK propagate to the caller.
    """
    try:
        genai.configure(api_key=api_key)
        model = genai.GenerativeModel(GEMINI_FLASH_MODEL)
        config = GenerationConfig(temperature=temperature)
        response = await model.generate_content_async(prompt, generation_config=config)
        if not response.parts:
            raise ValueError("AI model returned an empty response.")
        return response.text
    except Exception as e:
        print(f"ERROR in generate_text with Gemini API: {e}")
        raise

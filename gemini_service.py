# gemini_service.py - tree photo analysis through the Gemini REST API

import json
import logging

import requests

from config import get_secret, DEFAULT_GEMINI_MODEL
from carbon_calculator import CONDITIONS, normalize_condition

logger = logging.getLogger(__name__)

GEMINI_API_URL = "https://generativelanguage.googleapis.com/v1beta/models"
REQUEST_TIMEOUT = 60  # seconds
UNKNOWN_SPECIES = ("unknown", "tidak diketahui")

ANALYSIS_PROMPT = """You are an urban forestry expert helping with a tree inventory.
Analyze the tree in this photo and return:
- species: the common name of the tree species, or "Unknown" if it cannot be identified
- condition: one of Healthy, Damaged, Dead
- estimatedDbh: estimated diameter at breast height in centimeters
- estimatedHeight: estimated height in meters
- latitude, longitude: GPS coordinates if they are visible in the photo (for example a geotag overlay), otherwise 0
"""

RESPONSE_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "species": {"type": "STRING"},
        "condition": {"type": "STRING", "enum": list(CONDITIONS)},
        "estimatedDbh": {"type": "NUMBER"},
        "estimatedHeight": {"type": "NUMBER"},
        "latitude": {"type": "NUMBER"},
        "longitude": {"type": "NUMBER"},
    },
    "required": ["species", "condition", "estimatedDbh", "estimatedHeight", "latitude", "longitude"],
}


class TreeAnalysisError(Exception):
    """The vision model could not be reached or returned an unusable answer."""


def try_float(val):
    try:
        return float(val)
    except (TypeError, ValueError):
        return None


def is_unknown_species(species):
    return not species or species.strip().lower() in UNKNOWN_SPECIES


def build_request_body(base64_image, notes):
    prompt = ANALYSIS_PROMPT
    if notes:
        prompt += f"\nField notes from the surveyor: {notes}\n"
    return {
        "contents": [{
            "parts": [
                {"inline_data": {"mime_type": "image/jpeg", "data": base64_image}},
                {"text": prompt},
            ]
        }],
        "generationConfig": {
            "responseMimeType": "application/json",
            "responseSchema": RESPONSE_SCHEMA,
        },
    }


def parse_analysis_response(payload):
    """Turn a generateContent response into a tree analysis result dict."""
    try:
        text = payload["candidates"][0]["content"]["parts"][0]["text"]
        data = json.loads(text)
    except (KeyError, IndexError, TypeError, json.JSONDecodeError) as e:
        raise TreeAnalysisError(f"Unexpected response from the AI model: {e}") from e

    if not isinstance(data, dict):
        raise TreeAnalysisError("AI model did not return an object")

    latitude = try_float(data.get("latitude"))
    longitude = try_float(data.get("longitude"))
    dbh = try_float(data.get("estimatedDbh"))
    height = try_float(data.get("estimatedHeight"))

    return {
        "species": str(data.get("species") or "").strip(),
        "condition": normalize_condition(data.get("condition")),
        "estimated_dbh": dbh if dbh and dbh > 0 else None,
        "estimated_height": height if height and height > 0 else None,
        # 0 is the model's "not found" answer
        "latitude": latitude or None,
        "longitude": longitude or None,
    }


def analyze_tree_image(base64_image, notes=""):
    """
    Ask the Gemini model to identify a tree from a base64 JPEG.

    Raises:
        TreeAnalysisError: missing API key, network/HTTP failure or bad response.
    """
    api_key = get_secret("GEMINI_API_KEY")
    if not api_key:
        raise TreeAnalysisError("GEMINI_API_KEY is not configured.")
    model = get_secret("GEMINI_MODEL", DEFAULT_GEMINI_MODEL)

    url = f"{GEMINI_API_URL}/{model}:generateContent"
    headers = {"x-goog-api-key": api_key, "Content-Type": "application/json"}
    try:
        response = requests.post(
            url, headers=headers, json=build_request_body(base64_image, notes), timeout=REQUEST_TIMEOUT
        )
        response.raise_for_status()
        payload = response.json()
    except requests.exceptions.RequestException as e:
        logger.error(f"Network or API error calling Gemini model {model}: {e}", exc_info=True)
        raise TreeAnalysisError(f"AI request failed: {e}") from e
    except ValueError as e:
        logger.error(f"JSON decoding error from Gemini response: {e}", exc_info=True)
        raise TreeAnalysisError(f"AI response was not JSON: {e}") from e

    result = parse_analysis_response(payload)
    logger.info(f"AI analysis identified species {result['species']!r}")
    return result

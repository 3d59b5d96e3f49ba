import os
import logging
from typing import Optional
import requests

logger = logging.getLogger("ai-client")

# Gemini key comes from the environment (or .env); DO NOT hardcode in repo
GEMINI_API_KEY = os.environ.get("GEMINI_API_KEY")
if not GEMINI_API_KEY:
  logger.warning("GEMINI_API_KEY not set. AI calls will fail unless provided at runtime.")

GEMINI_MODEL = os.environ.get("GEMINI_MODEL", "gemini-2.5-flash")
GEMINI_TIMEOUT = float(os.environ.get("GEMINI_TIMEOUT", "120"))

OPTION_MARKER = "<<<OPTION>>>"
OPTION_COUNT = 4


def build_prompt(prompt: str, count: int = OPTION_COUNT) -> str:
  return f"""
Create {count} different possible implementations for this UI request: {prompt}.
For each option, return FULL HTML code with CSS and JS inside <html>...</html>.
Separate options with {OPTION_MARKER} marker.
Return only code, no explanations.
"""


class GeminiClient:
  """Minimal client for the Gemini generateContent REST endpoint.

  It performs a single POST per call using the key provided via environment.
  No retries: a failed call is a failed request.
  """

  def __init__(self, api_key: str = None, model: str = None, timeout: float = None):
    self.api_key = api_key or os.environ.get("GEMINI_API_KEY") or GEMINI_API_KEY
    if not self.api_key:
      raise RuntimeError("GEMINI_API_KEY must be set in environment")
    self.model = model or GEMINI_MODEL
    self.timeout = timeout or GEMINI_TIMEOUT
    self.url = f"https://generativelanguage.googleapis.com/v1beta/models/{self.model}:generateContent"

  def generate_text(self, text: str) -> str:
    payload = {"contents": [{"role": "user", "parts": [{"text": text}]}]}
    headers = {"x-goog-api-key": self.api_key, "Content-Type": "application/json"}

    logger.info("Sending request to Gemini (model=%s)", self.model)
    resp = requests.post(self.url, headers=headers, json=payload, timeout=self.timeout)
    try:
      resp.raise_for_status()
    except requests.HTTPError:
      logger.error("Gemini request failed: status=%s body=%.1000s", resp.status_code, resp.text)
      raise

    data = resp.json()
    result = _extract_text(data)
    if not result:
      feedback = data.get("promptFeedback") if isinstance(data, dict) else None
      logger.error("Gemini returned no text (promptFeedback=%s)", feedback)
      raise RuntimeError("Gemini response contained no text")
    logger.info("Gemini responded successfully (%d chars)", len(result))
    return result

  def generate_options(self, prompt: str) -> str:
    """Ask the model for several alternative UI documents; returns the raw, unsplit text."""
    if not prompt or not prompt.strip():
      raise ValueError("prompt is empty")
    return self.generate_text(build_prompt(prompt))

  def ping(self) -> Optional[str]:
    """Returns None if the model answers, otherwise the error message."""
    try:
      self.generate_text("ping")
      return None
    except Exception as e:
      logger.exception("Gemini ping failed")
      return str(e)


def _extract_text(data: dict) -> str:
  candidates = data.get("candidates") or []
  if not candidates:
    return ""
  parts = (candidates[0].get("content") or {}).get("parts") or []
  return "".join(p.get("text", "") for p in parts).strip()

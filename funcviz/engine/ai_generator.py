# funcviz/engine/ai_generator.py
"""
AI-assisted expression generation.

    result = generate_expression("a damped oscillation", "2d")
    result.expression   # always plottable
    result.error        # None, or a user-facing warning when the fallback was used

The text-generation service is an injected ExpressionGenerator, so the
evaluator / sampler never touch the network. One attempt only (no retries);
any failure -> FALLBACK_EXPRESSIONS[dimension] + a descriptive message.
"""

import re
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol

import google.generativeai as genai
import requests

from funcviz.config import settings
from . import utils
from .constants import Dimension, FALLBACK_EXPRESSIONS
from .expression_evaluator import validate_expression

logger = utils.setup_logger(__name__)


class GenerationError(RuntimeError):
    """The text-generation service could not produce a usable expression."""


@dataclass(frozen=True)
class GenerationResult:
    expression: str
    error: Optional[str] = None

    @property
    def used_fallback(self) -> bool:
        return self.error is not None


class ExpressionGenerator(Protocol):
    def generate(self, prompt: str, dimension: str) -> str:
        """Return raw model text for the prompt, or raise GenerationError."""
        ...


# ============================================================================
# PROMPTS
# ============================================================================

_DSL_RULES = (
    "Only return the expression itself, nothing else: no code fences, no explanation, no 'y ='. "
    "Use ^ for powers, * for multiplication, the constants PI and E, and only these functions: "
    "sin, cos, tan, asin, acos, atan, sinh, cosh, tanh, exp, log, log10, log2, sqrt, abs, pow, "
    "besselJ0, besselJ1, besselY0, besselY1, erf, erfc, erfcx, gamma, lngamma, digamma, "
    "sinc, sign, heaviside, lambertW, zeta, factorial, binomial."
)

SYSTEM_PROMPTS: Dict[str, str] = {
    Dimension.TWO_D: (
        "You are a mathematical function generator. "
        "Given a description, generate a mathematical expression for a 2D function y = f(x) "
        "in the single variable x. " + _DSL_RULES + " "
        'For example, if asked for "a sine wave", return "sin(x)".'
    ),
    Dimension.THREE_D: (
        "You are a mathematical function generator. "
        "Given a description, generate a mathematical expression for a 3D function z = f(x, y) "
        "in the variables x and y. " + _DSL_RULES + " "
        'For example, if asked for "a simple hill", return "x*x + y*y".'
    ),
}


# ============================================================================
# RESPONSE CLEANUP
# ============================================================================

_FENCE_RE = re.compile(r"```[a-zA-Z]*\n?")
_LABEL_RE = re.compile(r"^\s*(?:[yYzZ]|[a-zA-Z]\s*\(\s*x\s*(?:,\s*y\s*)?\))\s*=\s*")


def clean_generated_expression(text: str) -> str:
    """
    Strip decoration the model tends to add around a bare expression:
    ```code fences```, `backticks`, JavaScript 'Math.' prefixes, 'y = ' / 'f(x) = ' labels.
    """
    if not text:
        return ""
    s = str(text).strip()
    s = _FENCE_RE.sub("", s).replace("```", "")
    s = s.strip()
    s = re.sub(r"^`|`$", "", s).strip()
    s = re.sub(r"\bMath\.", "", s)
    s = _LABEL_RE.sub("", s)
    return s.rstrip(";").strip()


def extract_message_content(payload: Any) -> str:
    """
    Pull choices[0].message.content out of an OpenAI-style chat completion,
    validating the structure on the way.
    """
    if not isinstance(payload, dict):
        raise GenerationError("Invalid API response structure")
    choices = payload.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        raise GenerationError("Invalid API response structure")
    message = choices[0].get("message")
    if not isinstance(message, dict) or not isinstance(message.get("content"), str):
        raise GenerationError("Invalid API response structure")
    return message["content"].strip()


# ============================================================================
# BACKENDS
# ============================================================================

class GroqExpressionGenerator:
    """OpenAI-compatible chat-completions endpoint (Groq by default)."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        url: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.GROQ_API_KEY
        self.model = model or settings.GROQ_MODEL_NAME
        self.url = url or settings.GROQ_API_URL
        self.timeout = timeout if timeout is not None else settings.AI_REQUEST_TIMEOUT

    def generate(self, prompt: str, dimension: str) -> str:
        if not self.api_key:
            raise GenerationError("GROQ_API_KEY is not configured")

        try:
            r = requests.post(
                self.url,
                headers={
                    "Content-Type": "application/json",
                    "Authorization": f"Bearer {self.api_key}",
                },
                json={
                    "model": self.model,
                    "messages": [
                        {"role": "system", "content": SYSTEM_PROMPTS[dimension]},
                        {"role": "user", "content": prompt},
                    ],
                    "temperature": settings.AI_TEMPERATURE,
                    "max_tokens": settings.AI_MAX_TOKENS,
                },
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout as e:
            raise GenerationError(f"request timed out after {self.timeout:g}s") from e
        except requests.exceptions.RequestException as e:
            raise GenerationError(f"request failed: {e}") from e

        if not r.ok:
            logger.error(f"Groq API error body: {utils.truncate(r.text, 300)}")
            raise GenerationError(f"Groq API error: {r.status_code} {r.reason}")

        try:
            payload = r.json()
        except ValueError as e:
            raise GenerationError("API response was not valid JSON") from e

        return extract_message_content(payload)


class GeminiExpressionGenerator:
    """Google Gemini backend via google-generativeai."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model_name: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.GOOGLE_API_KEY
        self.model_name = model_name or settings.GEMINI_MODEL_NAME
        self.timeout = timeout if timeout is not None else settings.AI_REQUEST_TIMEOUT

    def generate(self, prompt: str, dimension: str) -> str:
        if not self.api_key:
            raise GenerationError("GOOGLE_API_KEY is not configured")

        try:
            genai.configure(api_key=self.api_key)
            model = genai.GenerativeModel(self.model_name, system_instruction=SYSTEM_PROMPTS[dimension])
            generation_config = genai.types.GenerationConfig(
                temperature=settings.AI_TEMPERATURE,
                max_output_tokens=settings.AI_MAX_TOKENS,
            )
            response = model.generate_content(
                prompt,
                generation_config=generation_config,
                request_options={"timeout": self.timeout},
            )
            text = response.text
        except Exception as e:
            raise GenerationError(f"Gemini API error: {e}") from e

        if not isinstance(text, str) or not text.strip():
            raise GenerationError("Gemini returned an empty response")
        return text.strip()


_PROVIDERS = {
    "groq": GroqExpressionGenerator,
    "gemini": GeminiExpressionGenerator,
}


def default_generator(provider: Optional[str] = None) -> ExpressionGenerator:
    name = (provider or settings.AI_PROVIDER or "groq").strip().lower()
    cls = _PROVIDERS.get(name)
    if cls is None:
        raise ValueError(f"Unknown AI provider '{name}' (expected one of: {', '.join(sorted(_PROVIDERS))})")
    return cls()


# ============================================================================
# ENTRY POINT
# ============================================================================

def generate_expression(
    prompt: str,
    dimension: str = Dimension.TWO_D,
    generator: Optional[ExpressionGenerator] = None,
) -> GenerationResult:
    """
    Ask the service for an expression. Never raises for service problems:
    falls back to sin(x) / sin(x)*cos(y) with a descriptive error instead.
    Raises ValueError for an empty prompt or an unknown dimension (caller errors).
    """
    if not prompt or not str(prompt).strip():
        raise ValueError("Prompt is required")
    if dimension not in Dimension.ALL:
        raise ValueError(f"dimension must be '2d' or '3d', got {dimension!r}")

    variables = ("x",) if dimension == Dimension.TWO_D else ("x", "y")

    try:
        gen = generator if generator is not None else default_generator()
        raw = gen.generate(str(prompt).strip(), dimension)
        expression = clean_generated_expression(raw)
        if not expression:
            raise GenerationError("the service returned an empty expression")
        problem = validate_expression(expression, variables)
        if problem:
            raise GenerationError(f"the service returned an unusable expression ({problem})")
    except Exception as e:
        fallback = FALLBACK_EXPRESSIONS[dimension]
        message = f"Could not generate function with AI: {e}. Using fallback expression instead."
        logger.error(message)
        return GenerationResult(expression=fallback, error=message)

    logger.info(f"Generated {dimension} expression for '{utils.truncate(str(prompt), 60)}': {expression}")
    return GenerationResult(expression=expression)

"""
Central application configuration.

Every tunable value lives here as a typed, documented field.
Any field can be overridden at runtime via an environment variable of the
same name (case-insensitive), e.g.:

    HIVE_API_KEY=... uvicorn app.main:app         # enable the Hive detector
    export DETECTOR_TIMEOUT_SEC=20                 # staging override

A `.env` file at the project root is loaded automatically.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,   # HIVE_API_KEY == hive_api_key
        extra="ignore",         # silently drop unknown env vars
    )

    # ------------------------------------------------------------------ #
    # Logging                                                             #
    # ------------------------------------------------------------------ #
    log_level: str = Field("INFO", description="Root log level for the service")

    # ------------------------------------------------------------------ #
    # Detector credentials (absent → detector reports unavailable)        #
    # ------------------------------------------------------------------ #
    hive_api_key: Optional[str] = Field(None, description="Hive AI API token")
    sightengine_api_user: Optional[str] = Field(None, description="SightEngine API user")
    sightengine_api_secret: Optional[str] = Field(None, description="SightEngine API secret")
    illuminarty_api_key: Optional[str] = Field(
        None, description="Illuminarty key (partnership access only)"
    )
    gemini_api_key: Optional[str] = Field(None, description="Google Gemini key (vision council)")
    openai_api_key: Optional[str] = Field(None, description="OpenAI key (vision council)")
    gptzero_api_key: Optional[str] = Field(None, description="GPTZero key (text detection)")
    originality_api_key: Optional[str] = Field(None, description="Originality.AI key (text detection)")

    # ------------------------------------------------------------------ #
    # Detector endpoints & models                                         #
    # ------------------------------------------------------------------ #
    hive_endpoint: str = Field(
        "https://api.thehive.ai/api/v2/task/sync", description="Hive synchronous task API"
    )
    sightengine_endpoint: str = Field(
        "https://api.sightengine.com/1.0/check.json", description="SightEngine check API"
    )
    gptzero_endpoint: str = Field(
        "https://api.gptzero.me/v2/predict/text", description="GPTZero prediction API"
    )
    originality_endpoint: str = Field(
        "https://api.originality.ai/api/v1/scan/ai", description="Originality.AI scan API"
    )
    openai_endpoint: str = Field(
        "https://api.openai.com/v1/chat/completions", description="OpenAI chat completions API"
    )
    gemini_model: str = Field("gemini-2.0-flash", description="Gemini vision council member")
    openai_model: str = Field("gpt-4o-mini", description="OpenAI vision council member")
    vision_temperature: float = Field(0.1, description="Sampling temperature for council members")
    vision_max_output_tokens: int = Field(1024, description="Max tokens per council response")

    # ------------------------------------------------------------------ #
    # Detector self-reported confidences                                  #
    # ------------------------------------------------------------------ #
    hive_default_confidence: float = Field(
        0.85, description="Used when Hive omits a confidence in its payload"
    )
    sightengine_confidence: float = Field(0.90, description="SightEngine result reliability")
    gptzero_confidence: float = Field(0.88, description="GPTZero result reliability")
    originality_confidence: float = Field(0.92, description="Originality.AI result reliability")
    heuristics_confidence: float = Field(0.60, description="Image metadata heuristics reliability")
    text_heuristics_confidence: float = Field(0.55, description="Text heuristics reliability")

    # ------------------------------------------------------------------ #
    # Provenance                                                          #
    # ------------------------------------------------------------------ #
    enable_c2pa: bool = Field(
        True, description="Read C2PA Content Credentials before running detectors"
    )

    # ------------------------------------------------------------------ #
    # Fan-out / HTTP                                                      #
    # ------------------------------------------------------------------ #
    detector_timeout_sec: float = Field(
        30.0, description="Per-detector budget; a timeout counts as unavailability"
    )
    http_timeout_sec: float = Field(30.0, description="aiohttp session total timeout")
    http_pool_limit: int = Field(
        20, description="Max concurrent connections across every detector and download"
    )
    http_user_agent: str = Field(
        "media-authenticity-verifier/0.1", description="User-Agent sent to providers and image hosts"
    )

    # ------------------------------------------------------------------ #
    # Ensemble policy                                                     #
    # ------------------------------------------------------------------ #
    fallback_weight: float = Field(
        0.10, description="Weight for detectors missing from the weight table"
    )
    dominant_min_confidence: float = Field(
        0.80, description="Primary detector confidence needed to count as dominant"
    )
    dominant_high_score: float = Field(75.0, description="Score ≥ this is a strong synthetic signal")
    dominant_low_score: float = Field(25.0, description="Score ≤ this is a strong authentic signal")
    dominant_weight: float = Field(0.70, description="Weight given to a dominant primary detector")
    secondary_weight_factor: float = Field(
        0.5, description="Multiplier applied to every other weight when boosted"
    )

    # ------------------------------------------------------------------ #
    # Verdict thresholds                                                  #
    # ------------------------------------------------------------------ #
    authentic_score_threshold: float = Field(30.0, description="Score < this → likely authentic")
    synthetic_score_threshold: float = Field(70.0, description="Score > this → likely synthetic")
    variance_moderate: float = Field(15.0, description="σ < this → detectors consistent")
    variance_high: float = Field(25.0, description="σ > this → detectors disagree")

    # ------------------------------------------------------------------ #
    # File Size Limits                                                    #
    # ------------------------------------------------------------------ #
    max_image_download_mb: int = Field(
        50, description="Max MB for URL / data-URI downloads"
    )
    max_image_upload_mb: int = Field(
        20, description="Max MB for multipart image uploads"
    )
    max_text_chars: int = Field(
        100_000, description="Max characters accepted by /verify/text"
    )
    pil_max_image_pixels: int = Field(
        20_000_000, description="PIL decompression-bomb guard (pixels)"
    )

    # ------------------------------------------------------------------ #
    # Derived byte-level properties (computed from MB fields)             #
    # ------------------------------------------------------------------ #
    @property
    def max_image_download_bytes(self) -> int:
        return self.max_image_download_mb * 1024 * 1024

    @property
    def max_image_upload_bytes(self) -> int:
        return self.max_image_upload_mb * 1024 * 1024


# Single shared instance; import this everywhere.
settings = Settings()

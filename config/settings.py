#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Settings - Centralized configuration management

Settings objects are passed explicitly into the pipeline, renderers and
API dependencies; get_settings() builds the default one from the
environment and .env.
"""

from functools import lru_cache
from pathlib import Path
from typing import List, Optional
from pydantic_settings import BaseSettings

from .constants import (
    PAGE_WIDTH_MM, PAGE_HEIGHT_MM,
    MARGIN_TOP_MM, MARGIN_RIGHT_MM, MARGIN_BOTTOM_MM, MARGIN_LEFT_MM,
    GENERATION_MAX_TOKENS, GENERATION_TEMPERATURE,
    RENDER_CONCURRENCY, RENDER_RETRIES, PRINT_SERVER_TIMEOUT,
)


# Base directory
BASE_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """Application settings"""

    # ========== API Keys ==========
    gemini_api_key: str = ""
    openai_api_key: str = ""

    # ========== Provider & Model ==========
    ai_provider: str = "gemini"  # gemini | openai
    ai_model: Optional[str] = None  # None = provider default
    ai_temperature: float = GENERATION_TEMPERATURE
    ai_max_tokens: int = GENERATION_MAX_TOKENS

    # ========== Page Layout ==========
    page_width_mm: float = PAGE_WIDTH_MM
    page_height_mm: float = PAGE_HEIGHT_MM
    margin_top_mm: float = MARGIN_TOP_MM
    margin_right_mm: float = MARGIN_RIGHT_MM
    margin_bottom_mm: float = MARGIN_BOTTOM_MM
    margin_left_mm: float = MARGIN_LEFT_MM
    cover_background_url: Optional[str] = None
    html_lang: str = "en"

    # ========== Locale Strings ==========
    toc_default_title: str = "Contents"
    introduction_default_title: str = "Introduction"
    conclusion_default_title: str = "Conclusion"
    rights_reserved_text: str = "All rights reserved."
    legal_notice_text: str = (
        "No part of this publication may be reproduced, distributed, or "
        "transmitted in any form or by any means, including photocopying, "
        "recording, or other electronic or mechanical methods, without the "
        "prior written permission of the publisher."
    )
    imprint_notice_text: str = ""

    # ========== Rendering ==========
    pdf_engine: str = "weasyprint"  # weasyprint | remote
    print_server_url: Optional[str] = None
    print_server_timeout: int = PRINT_SERVER_TIMEOUT
    render_concurrency: int = RENDER_CONCURRENCY
    render_retries: int = RENDER_RETRIES
    body_font_path: Optional[str] = None  # TTF for the canvas renderer
    heading_font_path: Optional[str] = None

    # ========== API ==========
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    cors_origins: List[str] = ["*"]
    generation_rate_limit: str = "10/minute"

    # ========== Directories ==========
    data_dir: Path = BASE_DIR / "data"
    storage_dir: Path = BASE_DIR / "data" / "storage"
    logs_dir: Path = BASE_DIR / "data" / "logs"
    database_path: Path = BASE_DIR / "data" / "books.db"

    class Config:
        env_file = str(BASE_DIR / ".env")
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"  # Allow extra fields from .env that aren't defined in model

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        # Create directories
        for dir_path in [
            self.data_dir,
            self.storage_dir,
            self.logs_dir,
            self.database_path.parent,
        ]:
            dir_path.mkdir(exist_ok=True, parents=True)

    def get_api_key(self) -> str:
        """Get API key based on provider"""
        if self.ai_provider == "gemini":
            if not self.gemini_api_key:
                raise ValueError("GEMINI_API_KEY not set in .env")
            return self.gemini_api_key
        elif self.ai_provider == "openai":
            if not self.openai_api_key:
                raise ValueError("OPENAI_API_KEY not set in .env")
            return self.openai_api_key
        else:
            raise ValueError(f"Unsupported provider: {self.ai_provider}")

    @property
    def page_margins_mm(self) -> tuple:
        """Content-page margins as (top, right, bottom, left)."""
        return (
            self.margin_top_mm,
            self.margin_right_mm,
            self.margin_bottom_mm,
            self.margin_left_mm,
        )


@lru_cache()
def get_settings() -> Settings:
    """Default settings built from the environment, created once."""
    return Settings()

from __future__ import annotations

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

WELCOME_TEXT = (
    "Use the menu on the top left to create your own categories "
    "and then add notepads to them.\n\n"
    "On the top right of the Dashboard there is a plus sign inside a circle.\n"
    "Tapping on it will open the Add Notepad window.\n"
    "Select a category, provide a title and text and save the new notepad.\n\n"
    "The smaller plus signs on the right of each category's name will open the same "
    "Add Notepad window with the category preselected.\n\n"
    "Click on a Notepad on the Dashboard and you will go to the View Notepad window "
    "where you can read it, edit it and delete it.\n\n"
    "The categories are managed from their own window where you can go "
    "by selecting Categories from the left menu(top left to open it).\n\n"
    "Be careful when deleting a category as this will delete all notepads in it.\n\n"
)


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="NOTEKEEPER_",
        extra="ignore",
        case_sensitive=False,
    )

    # Application
    debug: bool = False
    log_level: str = "INFO"

    # API
    api_prefix: str = "/api/v1"
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:8000",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:8000",
    ]
    trusted_hosts: list[str] = ["*"]
    root_path: str = ""

    # Document store
    store_backend: Literal["supabase", "memory"] = "supabase"

    # Supabase
    supabase_url: str
    supabase_anon_key: str

    # Onboarding
    default_category_name: str = "Sample category"
    welcome_notepad_title: str = "Read me"
    welcome_notepad_text: str = WELCOME_TEXT


settings = Settings()

# Copyright (c) 2025-2026 Gowtham Adamane Rao. All Rights Reserved.
#
# Licensed under the Prosperity Public License 3.0.0 (the "License").
# You may not use this file except in compliance with the License.
# You may obtain a copy of the License in the LICENSE file at the root
# of this repository, or at: https://prosperitylicense.com/versions/3.0.0
#
# Commercial use beyond a 30-day trial requires a separate license.
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Manages the application's configuration settings.
    Utilizes Pydantic's BaseSettings to allow for environment variable overrides.
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_prefix="PYNEOTRANSPARENCE_"
    )

    # --- Neo4j Database ---
    neo4j_uri: str = Field("neo4j://localhost:7687", description="Neo4j instance URI.")
    neo4j_user: str = Field("neo4j", description="Neo4j username.")
    neo4j_password: str = Field("password", description="Neo4j password.")
    neo4j_database: str = Field("neo4j", description="Neo4j target database name.")

    # --- Import Behavior ---
    batch_size: int = Field(
        default=500,
        description="Number of source rows written per transaction."
    )
    lab_name_similarity: float = Field(
        default=0.8,
        ge=0.0,
        le=1.0,
        description="Drug import: a lab name must score strictly above this to match an existing company."
    )
    locale: str = Field(
        default="fr",
        description="Locale used to upper-case source text before storage and matching."
    )

    # --- Source Files ---
    source_encoding: str = Field("utf-8", description="Character encoding of the source files.")


# Instantiate a global settings object to be used throughout the application
settings = Settings()

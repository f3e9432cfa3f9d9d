"""
Configuration management for image splitting
"""

import logging
from pathlib import Path
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator


class Settings(BaseSettings):
    """Library settings"""
    
    model_config = SettingsConfigDict(
        env_prefix="IMAGE_SPLITTING_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )
    
    # Grid split
    grid_rows: int = Field(
        default=3,
        description="Default number of grid rows"
    )
    grid_cols: int = Field(
        default=3,
        description="Default number of grid columns"
    )
    
    # Fixed-size split
    tile_width: int = Field(
        default=100,
        description="Default tile width in pixels"
    )
    tile_height: int = Field(
        default=100,
        description="Default tile height in pixels"
    )
    
    # Output
    default_format: str = Field(
        default="PNG",
        description="Encoding format when the source format is unknown"
    )
    output_dir: str = Field(
        default="./tiles",
        description="Default directory for saved tiles"
    )
    show_progress: bool = Field(
        default=False,
        description="Show a progress bar while saving tiles"
    )
    
    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )
    log_format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Logging format string"
    )
    log_file: Optional[str] = Field(
        default=None,
        description="Log file path"
    )
    
    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        """Validate logging level name"""
        level = v.upper()
        if level not in ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'):
            raise ValueError(f"Invalid log level: {v}")
        return level
    
    @field_validator('default_format')
    @classmethod
    def validate_default_format(cls, v):
        """Format names are stored upper-case, as Pillow reports them"""
        return v.upper()


def setup_logging(config: Optional[Settings] = None) -> logging.Logger:
    """
    Configure root logging from settings
    
    Args:
        config: Settings to use, defaults to the global instance
        
    Returns:
        Package logger
    """
    config = config or settings
    handlers = [logging.StreamHandler()]
    if config.log_file:
        log_path = Path(config.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path))
    
    logging.basicConfig(
        level=getattr(logging, config.log_level),
        format=config.log_format,
        handlers=handlers,
        force=True
    )
    
    return logging.getLogger("image_splitting")


# Create global settings instance
settings = Settings()

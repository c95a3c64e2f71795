"""Configuration module for the TAF timeline parser."""
import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


class Config:
    """Application configuration."""

    # Logging level
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

    # Software Version
    VERSION = os.getenv('VERSION', 'v0.0.0')

    # Length of a segment whose own time range could not be read
    DEFAULT_SEGMENT_HOURS = int(os.getenv('TAF_DEFAULT_SEGMENT_HOURS', '6'))

    # CLI output: table or json
    OUTPUT_FORMAT = os.getenv('TAF_OUTPUT_FORMAT', 'table').strip().lower()
    OUTPUT_FORMATS = ('table', 'json')

    # Shortest span a timeline block may have
    MIN_BLOCK_HOURS = 1

    # Month rollover heuristic (day-of-month thresholds)
    ROLLOVER_LATE_DAY = 25
    ROLLOVER_EARLY_DAY = 5

    # Visibility normalization
    METERS_TO_SM = 0.000621371
    GREATER_THAN_SM = 10
    CAVOK_METERS = 9999

    @classmethod
    def validate(cls):
        """Validate configuration."""
        if cls.DEFAULT_SEGMENT_HOURS <= 0:
            raise ValueError("TAF_DEFAULT_SEGMENT_HOURS must be positive")
        if cls.OUTPUT_FORMAT not in cls.OUTPUT_FORMATS:
            raise ValueError(
                f"TAF_OUTPUT_FORMAT must be one of {', '.join(cls.OUTPUT_FORMATS)}"
            )
        return True

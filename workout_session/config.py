import argparse
import os
from typing import List, Optional


class Config:
    """
    Central configuration manager for the workout session engine.
    Handles command-line argument parsing, debug modes, and session timing parameters.
    """

    def __init__(self):
        # Application mode settings
        self.debug_mode: str = "debug_no_save"

        # Session timing (seconds)
        self.prep_duration: int = int(os.getenv("WORKOUT_PREP_SECONDS", "3"))  # Countdown before timed work
        self.rest_duration: int = int(os.getenv("WORKOUT_REST_SECONDS", "60"))  # Rest between sets and exercises
        self.tick_interval: float = float(os.getenv("WORKOUT_TICK_INTERVAL", "1.0"))

        # Whether the HTTP host drives ticks itself or waits for clients to post them
        self.server_ticks: bool = os.getenv("WORKOUT_SERVER_TICKS", "true").lower() == "true"

        # Sessions with no user action for this long are dropped by the HTTP host
        self.session_ttl: float = float(os.getenv("WORKOUT_SESSION_TTL", "1800"))

        # Number of alerts kept on each session for rendering
        self.max_recent_alerts: int = 10

        # Human-readable descriptions for each debug mode
        self.mode_descriptions = {
            "debug": "Debug Mode (verbose transitions)",
            "debug_no_save": "Debug Mode (standard logging)",
            "non_debug": "Non-Debug Mode (minimal logging)"
        }

    def setup_from_args(self, argv: Optional[List[str]] = None):
        """
        Parse command line arguments and configure application settings.
        """
        parser = argparse.ArgumentParser(description="Workout Session Engine")
        parser.add_argument(
            "--mode",
            choices=["debug", "debug_no_save", "non_debug"],
            default="debug_no_save",
            help="Debug mode setting"
        )
        parser.add_argument(
            "--client-ticks",
            action="store_true",
            help="Let clients drive the countdown via POST /sessions/{id}/tick"
        )
        args = parser.parse_args(argv)

        self.debug_mode = args.mode
        if args.client_ticks:
            self.server_ticks = False

    @property
    def mode_description(self) -> str:
        """Get human-readable description of current mode"""
        return self.mode_descriptions[self.debug_mode]

# Global configuration instance - import this in other modules
config = Config()

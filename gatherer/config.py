"""
Gatherer Configuration

Loads default game parameters from environment variables with sensible defaults.
Runtime code never reads this class directly; it receives a ``GameSettings``
built from it (``GameSettings`` field defaults are read from here).
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env file if it exists
load_dotenv()


class Config:
    """Application configuration loaded from environment variables."""

    # Grid and layout
    GRID_SIZE: int = int(os.getenv("GATHERER_GRID_SIZE", "10"))
    NUM_NORMAL_RESOURCES: int = int(os.getenv("GATHERER_NUM_NORMAL_RESOURCES", "5"))
    NUM_GOLDEN_RESOURCES: int = int(os.getenv("GATHERER_NUM_GOLDEN_RESOURCES", "2"))
    NUM_HINDERED_TILES: int = int(os.getenv("GATHERER_NUM_HINDERED_TILES", "15"))

    # Movement costs (grass vs mud)
    NORMAL_COST: int = int(os.getenv("GATHERER_NORMAL_COST", "1"))
    HINDERED_COST: int = int(os.getenv("GATHERER_HINDERED_COST", "3"))

    # Resource values
    NORMAL_VALUE: int = int(os.getenv("GATHERER_NORMAL_VALUE", "10"))
    GOLDEN_VALUE: int = int(os.getenv("GATHERER_GOLDEN_VALUE", "50"))

    # Episode budget and the target score derived from it
    BUDGET: int = int(os.getenv("GATHERER_BUDGET", "200"))
    BENCHMARK_COST_PER_POINT: int = int(os.getenv("GATHERER_BENCHMARK_COST_PER_POINT", "4"))

    # Map generation
    MAX_GENERATION_ATTEMPTS: int = int(os.getenv("GATHERER_MAX_GENERATION_ATTEMPTS", "1000"))

    # Expert bot synchronisation
    CONFIRM_TIMEOUT: float = float(os.getenv("GATHERER_CONFIRM_TIMEOUT", "0.5"))
    POLL_INTERVAL: float = float(os.getenv("GATHERER_POLL_INTERVAL", "0.01"))
    MAX_ABORTED_CYCLES: int = int(os.getenv("GATHERER_MAX_ABORTED_CYCLES", "3"))
    BOT_EPISODES: int = int(os.getenv("GATHERER_BOT_EPISODES", "100"))

    # Local best-score cache
    HIGH_SCORE_PATH: Path = Path(os.getenv("GATHERER_HIGH_SCORE_PATH", "high_scores.json"))

    @classmethod
    def validate(cls) -> None:
        """Validate configuration and raise errors for values the game cannot use."""
        if cls.GRID_SIZE <= 0:
            raise ValueError("GATHERER_GRID_SIZE must be positive")

        if cls.NORMAL_COST <= 0 or cls.HINDERED_COST < cls.NORMAL_COST:
            raise ValueError(
                "GATHERER_HINDERED_COST must be >= GATHERER_NORMAL_COST and both must be positive"
            )

        if cls.CONFIRM_TIMEOUT <= 0 or cls.POLL_INTERVAL <= 0:
            raise ValueError(
                "GATHERER_CONFIRM_TIMEOUT and GATHERER_POLL_INTERVAL must be positive"
            )

        entities = 1 + cls.NUM_HINDERED_TILES + cls.NUM_NORMAL_RESOURCES + cls.NUM_GOLDEN_RESOURCES
        if entities > cls.GRID_SIZE * cls.GRID_SIZE:
            raise ValueError(
                f"{entities} entities cannot be placed on a {cls.GRID_SIZE}x{cls.GRID_SIZE} grid. "
                "Reduce GATHERER_NUM_HINDERED_TILES or the resource counts."
            )

    @classmethod
    def display(cls) -> str:
        """Return a formatted string showing current configuration."""
        lines = [
            "Gatherer Configuration:",
            f"  Grid: {cls.GRID_SIZE}x{cls.GRID_SIZE}",
            f"  Resources: {cls.NUM_NORMAL_RESOURCES} normal (+{cls.NORMAL_VALUE}), "
            f"{cls.NUM_GOLDEN_RESOURCES} golden (+{cls.GOLDEN_VALUE})",
            f"  Hindered tiles: {cls.NUM_HINDERED_TILES} (cost {cls.HINDERED_COST}, normal {cls.NORMAL_COST})",
            f"  Budget: {cls.BUDGET}",
            f"  Bot confirm timeout: {cls.CONFIRM_TIMEOUT}s (poll {cls.POLL_INTERVAL}s)",
        ]
        return "\n".join(lines)

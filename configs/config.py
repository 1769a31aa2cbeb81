from pathlib import Path
from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class WindowConfig:
    """
    Hounsfield window to render.
    Leave both bounds unset to render the full range of the image.
    """
    low: float | None = None
    high: float | None = None
    preset: str | None = None   # Name from WINDOW_PRESETS, used when low/high are unset

    def resolve(self, image_range: dict[str, float | None]) -> tuple[float, float]:
        """Picks the (low, high) bounds to render.

        Explicit bounds win over a preset; the preset applies only when both bounds are
        unset; a missing bound falls back to the image's own range.

        Args:
            image_range (dict[str, float | None]): The `{"low", "high"}` range-query document.

        Raises:
            ValueError: If a bound must come from the image range but the range is null.
        """
        if self.preset is not None and self.low is None and self.high is None:
            return WINDOW_PRESETS[self.preset]

        low = image_range["low"] if self.low is None else self.low
        high = image_range["high"] if self.high is None else self.high
        if low is None or high is None:
            raise ValueError(f"Image range {image_range} is not finite; pass --window.low and --window.high explicitly")
        return (float(low), float(high))


# Common CT windows as (low, high) in Hounsfield units.
WINDOW_PRESETS: dict[str, tuple[float, float]] = {
    "brain": (0.0, 80.0),
    "subdural": (-20.0, 180.0),
    "bone": (-450.0, 1050.0),
    "lung": (-1350.0, 150.0),
    "soft_tissue": (-160.0, 240.0),
}


@dataclass
class LogConfig:
    """
    Configuration for the UnifiedLogger.
    Matches arguments in src.utils.logger.UnifiedLogger.
    """
    name: str = "RENDER"
    base_dir: str = "./logs"
    level: str = "INFO"                    # DEBUG shows tag fallbacks and encoder details


@dataclass
class RenderConfig:
    """The Master Configuration Object for scripts/window_image.py."""
    input: Path = Path("./data/ct-brain.dcm")
    output: Path | None = None             # Defaults to '<input stem>_windowed.png' next to the input
    preview: Path | None = None            # Optional 3-panel preview image
    window: WindowConfig = field(default_factory=WindowConfig)
    log: LogConfig = field(default_factory=LogConfig)

    log_dir: Path = field(init=False)

    def __post_init__(self):
        """Resolves output paths and the per-run log directory."""
        self.input = Path(self.input)
        if self.output is None:
            self.output = self.input.with_name(f"{self.input.stem}_windowed.png")
        self.output = Path(self.output)
        if self.preview is not None:
            self.preview = Path(self.preview)

        if self.window.preset is not None and self.window.preset not in WINDOW_PRESETS:
            raise ValueError(f"Unknown window preset: '{self.window.preset}'. Available: {list(WINDOW_PRESETS.keys())}")

        # Format Run Name: {name}_{date}
        timestamp = datetime.now().strftime("%Y-%m-%d")
        self.log_dir = Path(self.log.base_dir) / f"{self.log.name.lower()}_{timestamp}"

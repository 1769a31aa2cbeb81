import logging
from pathlib import Path
import inspect

class UnifiedLogger:
    """
    Session logger for the rendering scripts.

    Writes to the console and to '<log_dir>/session.log'. Each line is tagged with the
    stage that wrote it: the class name when called from a method, 'Global' from a
    script function. Messages from the library modules (routes, rescale, windowing,
    delivery) go through the same handlers with their module logger names.
    """

    def __init__(
        self,
        log_dir: str | Path,
        name: str = "RENDER",
        level: int | str = logging.INFO,
    ) -> None:
        """Opens the session log.

        Args:
            log_dir (str | Path): Per-run directory, created if missing.
            name (str, optional): Logger name, also the fallback stage tag. Defaults to "RENDER".
            level (int | str, optional): Threshold, as a number or a name like "DEBUG". Defaults to logging.INFO.
        """
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)

        self.name = name
        self.level = logging.getLevelName(level.upper()) if isinstance(level, str) else level

        self._install_handlers()
        self.info(f"📝 Session log: {self.log_dir / 'session.log'}")

    def _install_handlers(self) -> None:
        """Replaces the root handlers with a session file and the console."""
        logging.basicConfig(
            level=self.level,
            format="%(asctime)s [%(levelname)s] %(message)s",
            encoding="utf-8",
            handlers=[
                logging.FileHandler(self.log_dir / "session.log", encoding="utf-8"),
                logging.StreamHandler()
            ],
            force=True
        )
        self.console = logging.getLogger(self.name)

    def _stage(self) -> str:
        """Tag of the code that called info/debug/... (two frames above this one)."""
        frame = inspect.currentframe()
        try:
            caller = frame.f_back.f_back if frame is not None and frame.f_back is not None else None
            if caller is None:
                return self.name
            owner = caller.f_locals.get('self')
            return type(owner).__name__ if owner is not None else "Global"
        finally:
            del frame

    def debug(self, msg: str) -> None:
        self.console.debug(f"[{self._stage()}] {msg}")

    def info(self, msg: str) -> None:
        self.console.info(f"[{self._stage()}] {msg}")

    def warning(self, msg: str) -> None:
        self.console.warning(f"[{self._stage()}] {msg}")

    def error(self, msg: str) -> None:
        self.console.error(f"[{self._stage()}] {msg}")

    def log_metrics(self, metrics: dict[str, float | None], prefix: str = "") -> None:
        """Writes a group of intensity values on one line.

        Args:
            metrics (dict[str, float | None]): e.g. the range document {'low': -1024.0, 'high': 3071.0}.
                None (a non-finite extremum) is written as 'n/a'.
            prefix (str, optional): A label for the group. Defaults to "".
        """
        values = " | ".join(f"{k}={v:.2f}" if v is not None else f"{k}=n/a" for k, v in metrics.items())
        self.console.info(f"[{self._stage()}] {prefix + ' ' if prefix else ''}{values}")

    def close(self) -> None:
        """Flushes every handler and detaches the session file."""
        self.info("📝 Session closed.")
        root = logging.getLogger()
        for handler in list(root.handlers):
            handler.flush()
            if isinstance(handler, logging.FileHandler):
                root.removeHandler(handler)
                handler.close()

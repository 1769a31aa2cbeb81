import sys
import draccus
from pathlib import Path

root_dir = Path(__file__).resolve().parent.parent
sys.path.append(str(root_dir))

from configs.config import RenderConfig
from src.api.delivery import FileImageSink
from src.api.routes import apply_hounsfield_windowing, get_hounsfield_range
from src.imaging.image import DicomImage
from src.transforms.rescale import apply_rescale
from src.transforms.windowing import Window, window
from src.utils.logger import UnifiedLogger
from src.utils.visualization import Visualizer


def main() -> None:
    """Renders one DICOM slice through a Hounsfield window.

    Args:
        cfg (RenderConfig): The Config object, auto-populated using Draccus (defaults + yaml + cli args).
    """
    cfg = draccus.parse(config_class=RenderConfig)
    logger = UnifiedLogger(log_dir=cfg.log_dir, name=cfg.log.name, level=cfg.log.level)
    logger.info(f"✅ Configuration Loaded.")
    logger.info(f"🖼️  Input: {cfg.input}")

    image = DicomImage.from_file(cfg.input)

    # 1. Range query
    hu_range = get_hounsfield_range(image).json()
    logger.log_metrics(hu_range, prefix="🔍 Hounsfield range")

    # 2. Windowing request
    req = Window(*cfg.window.resolve(hu_range))
    body = {"low": req.low, "high": req.high}
    response = apply_hounsfield_windowing(body, image, FileImageSink(cfg.output))
    if not response.ok:
        logger.error(f"❌ Windowing rejected ({response.status}): {response.body.decode('utf-8')}")
        sys.exit(1)
    logger.info(f"💾 Windowed image [{req.low}, {req.high}] saved to: {cfg.output}")

    # 3. Optional preview
    if cfg.preview is not None:
        hounsfield = apply_rescale(image)
        displayed = window(hounsfield, req, *image.declared_shape)
        Visualizer().create_grid(hounsfield, displayed, req).save(cfg.preview)
        logger.info(f"🗂️  Preview saved to: {cfg.preview}")

    logger.close()


if __name__ == "__main__":
    main()

import os
from pathlib import Path

RESOURCES_DIR = os.getenv("PIXIE_RESOURCES_DIR")  # None -> resolved next to the executable
BUNDLED_RESOURCES_DIR = Path(__file__).resolve().parent / "resources"
OUTPUT_DIR = os.getenv("PIXIE_OUTPUT_DIR", str(Path.cwd()))

SEGMENT_WIDTH = int(os.getenv("PIXIE_SEGMENT_WIDTH", "60"))
SEGMENT_HEIGHT = int(os.getenv("PIXIE_SEGMENT_HEIGHT", "80"))
MAX_WORKERS = int(os.getenv("PIXIE_MAX_WORKERS", str(os.cpu_count() or 4)))
STRICT_BATCH = os.getenv("PIXIE_STRICT_BATCH", "0") == "1"
EXPORT_PDF = os.getenv("PIXIE_EXPORT_PDF", "1") == "1"
LOG_LEVEL = os.getenv("PIXIE_LOG_LEVEL", "INFO")

TILE_SIZE = 16  # px per pattern cell
LEGEND_BLOCK_ENTRY_COUNT = 5
LEGEND_MAX_BLOCK_COLUMNS = 4
FONT_SIZE = 12
FONT_SIZE_BIG = 24
PREVIEW_SEED = 1234

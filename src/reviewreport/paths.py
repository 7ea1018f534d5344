from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class ProjectPaths:
    """Immutable container for project directory paths."""

    root: Path
    src: Path
    data_root: Path
    data_raw: Path
    data_cache: Path
    data_processed: Path
    reports_dir: Path
    figures_dir: Path
    tables_dir: Path

    def ensure_directories(self) -> None:
        """Create all data / report directories if they do not exist yet."""
        for p in [
            self.data_root,
            self.data_raw,
            self.data_cache,
            self.data_processed,
            self.reports_dir,
            self.figures_dir,
            self.tables_dir,
        ]:
            p.mkdir(parents=True, exist_ok=True)

    @classmethod
    def under(cls, root: Path) -> "ProjectPaths":
        """Standard layout rooted at ``root``."""
        root = Path(root)
        data_root = root / "data"
        reports_dir = root / "reports"
        return cls(
            root=root,
            src=root / "src",
            data_root=data_root,
            data_raw=data_root / "raw",
            data_cache=data_root / "cache",
            data_processed=data_root / "processed",
            reports_dir=reports_dir,
            figures_dir=reports_dir / "figures",
            tables_dir=reports_dir / "tables",
        )


ROOT = Path(__file__).resolve().parents[2]
SRC = ROOT / "src"

PATHS = ProjectPaths.under(ROOT)

__all__ = ["ProjectPaths", "PATHS", "ROOT", "SRC"]

from allocheck.dataloader.config_loader import ConfigLoader
from allocheck.dataloader.types import LoadResult
from allocheck.dataloader.workbook_loader import WorkbookLoader, normalize_sheet_name

__all__ = ["ConfigLoader", "LoadResult", "WorkbookLoader", "normalize_sheet_name"]

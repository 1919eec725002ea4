"""Document exporters: reconciliation workbooks and PDFs as bytes."""

from haulage_modules.export.excel import build_excel
from haulage_modules.export.pdf import build_pdf

__all__ = ["build_excel", "build_pdf"]

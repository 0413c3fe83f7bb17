"""CSV / Excel import preview, submission and workbook export."""

__version__ = "0.1.0"

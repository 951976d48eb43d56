from .export_utils import ExportUtils

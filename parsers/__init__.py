from .file_parser import FileParserFactory

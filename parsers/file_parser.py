import os
import pandas as pd
from abc import ABC, abstractmethod

NULL_TOKENS = ['nan', 'NaN', 'NULL', 'null', '', 'N/A', 'n/a']


class BaseParser(ABC):
    """Abstract base class for file parsers"""

    @abstractmethod
    def parse(self, file_path):
        """Parse file and return pandas DataFrame"""
        pass

    def parse_tables(self, file_path, base_name=None):
        """Parse file into a mapping of table name -> DataFrame"""
        base_name = base_name or os.path.splitext(os.path.basename(file_path))[0]
        return {base_name: self.parse(file_path)}

    def _clean_dataframe(self, df):
        """Clean and standardize the DataFrame"""
        # Remove completely empty rows and columns
        df = df.dropna(how='all').dropna(axis=1, how='all')

        # Strip whitespace from string columns, keeping missing cells missing
        for col in df.select_dtypes(include=['object', 'string']).columns:
            df[col] = df[col].map(lambda v: v.strip() if isinstance(v, str) else v)

        # Replace common null representations
        df = df.replace(NULL_TOKENS, pd.NA)

        return df.reset_index(drop=True)


class FileParserFactory:
    """Factory class to get appropriate parser for file type"""

    def __init__(self):
        from .csv_parser import CSVParser
        from .excel_parser import ExcelParser

        self.parsers = {
            'csv': CSVParser(),
            'xls': ExcelParser(),
            'xlsx': ExcelParser()
        }

    @property
    def supported_types(self):
        return set(self.parsers)

    def get_parser(self, file_type):
        """Get parser for specific file type"""
        parser = self.parsers.get(file_type.lower())
        if not parser:
            raise ValueError(f"Unsupported file type: {file_type}")
        return parser

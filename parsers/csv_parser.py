import pandas as pd
import logging
from .file_parser import BaseParser

ENCODINGS = ['utf-8', 'latin-1', 'cp1252', 'iso-8859-1']
SEPARATORS = [',', ';', '\t', '|']


class CSVParser(BaseParser):
    """Parser for CSV files"""

    def parse(self, file_path):
        """Parse CSV file and return pandas DataFrame"""
        try:
            # Try different encodings and separators
            for encoding in ENCODINGS:
                for sep in SEPARATORS:
                    try:
                        df = pd.read_csv(file_path, encoding=encoding, sep=sep)
                    except (UnicodeDecodeError, pd.errors.ParserError):
                        continue

                    # A wrong separator collapses every row into a single column
                    if len(df.columns) > 1:
                        logging.info(f"Successfully parsed CSV with encoding={encoding}, separator='{sep}'")
                        return self._clean_dataframe(df)

            # Single-column files: fall back to default settings
            df = pd.read_csv(file_path)
            return self._clean_dataframe(df)

        except Exception as e:
            logging.error(f"Error parsing CSV file {file_path}: {str(e)}")
            raise Exception(f"Failed to parse CSV file: {str(e)}")

import os
import pandas as pd
import logging
from .file_parser import BaseParser


class ExcelParser(BaseParser):
    """Parser for Excel files (.xls and .xlsx)"""

    def parse(self, file_path):
        """Parse Excel file and return the largest sheet as a DataFrame"""
        sheets = self.parse_sheets(file_path)

        largest_sheet = max(sheets.items(), key=lambda x: len(x[1]))
        logging.info(f"Using sheet '{largest_sheet[0]}' with {len(largest_sheet[1])} rows")

        return largest_sheet[1]

    def parse_tables(self, file_path, base_name=None):
        """One table per non-empty sheet, named <file>_<sheet>"""
        base_name = base_name or os.path.splitext(os.path.basename(file_path))[0]
        return {f"{base_name}_{sheet}": df for sheet, df in self.parse_sheets(file_path).items()}

    def parse_sheets(self, file_path):
        """Read every non-empty sheet into a cleaned DataFrame"""
        try:
            excel_file = pd.ExcelFile(file_path)
            all_sheets = {}

            for sheet_name in excel_file.sheet_names:
                try:
                    df = excel_file.parse(sheet_name=sheet_name)
                except Exception as e:
                    logging.warning(f"Could not read sheet '{sheet_name}': {str(e)}")
                    continue

                df = self._clean_dataframe(df)
                if not df.empty:
                    all_sheets[sheet_name] = df

            if not all_sheets:
                raise ValueError("Workbook has no non-empty sheets")

            return all_sheets

        except Exception as e:
            logging.error(f"Error parsing Excel file {file_path}: {str(e)}")
            raise Exception(f"Failed to parse Excel file: {str(e)}")

    def _clean_dataframe(self, df):
        """Clean the DataFrame and name unnamed columns"""
        # Handle unnamed columns (common in Excel files)
        df.columns = [f'Column_{i}' if str(col).startswith('Unnamed:') else str(col)
                      for i, col in enumerate(df.columns)]

        return super()._clean_dataframe(df)

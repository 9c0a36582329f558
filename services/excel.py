import logging
from io import BytesIO
from zipfile import BadZipFile

import openpyxl
from openpyxl.utils.datetime import WINDOWS_EPOCH
from openpyxl.utils.exceptions import InvalidFileException

from services.exceptions import WorkbookReadError


# Configure logging
logger = logging.getLogger(__name__)

# What openpyxl.load_workbook raises for files that aren't a readable xlsx
WORKBOOK_LOAD_ERRORS = (InvalidFileException, BadZipFile, KeyError, ValueError, TypeError, OSError)


class OpenPyXLFileHandler:
    """
    A file handler class that abstracts operations for reading Excel files using openpyxl.
    """

    def __init__(self, workbook=None):
        """
        Initialize the file handler with an existing workbook.
        """
        self.workbook = workbook

    @classmethod
    def from_file(cls, file_path, data_only=True):
        """
        Initialize the file handler with an Excel file from disk.

        Args:
            file_path (str): Path to the Excel file.
            data_only (bool): Whether to read the values instead of formulas.

        Returns:
            OpenPyXLFileHandler: An initialized file handler.

        Raises:
            WorkbookReadError: If the file can't be opened as a workbook.
        """
        logger.debug(f"File path we're loading the excel from is {file_path}")
        try:
            workbook = openpyxl.load_workbook(file_path, data_only=data_only)
        except WORKBOOK_LOAD_ERRORS as exc:
            raise WorkbookReadError(f"Could not open workbook: {exc}") from exc
        return cls(workbook=workbook)

    @classmethod
    def from_bytes(cls, data, data_only=True):
        """
        Initialize the file handler with the raw bytes of an .xlsx file.

        Raises:
            WorkbookReadError: If the bytes aren't a readable workbook.
        """
        try:
            workbook = openpyxl.load_workbook(BytesIO(data), data_only=data_only)
        except WORKBOOK_LOAD_ERRORS as exc:
            raise WorkbookReadError(f"Could not open workbook: {exc}") from exc
        return cls(workbook=workbook)

    @classmethod
    def from_sheets_data(cls, sheets_data):
        """
        Build a workbook from plain rows, header row first.

        Args:
            sheets_data (dict): Sheet name -> list of rows (each a list of cell values).

        Returns:
            OpenPyXLFileHandler: An initialized file handler.
        """
        handler = cls()
        handler._create_excel_file(sheets_data)
        return handler

    @property
    def epoch(self):
        """Date-serial epoch of the workbook (1900 or 1904 system)."""
        if self.workbook is None:
            return WINDOWS_EPOCH
        return getattr(self.workbook, "epoch", WINDOWS_EPOCH)

    def get_sheet_names(self):
        """
        Get the names of all sheets in the workbook.

        :return: List of sheet names
        :rtype: list[str]
        """
        if self.workbook is None:
            raise ValueError("Workbook is not loaded.")
        return self.workbook.sheetnames

    def get_sheet(self, sheet_name):
        """
        Get a specific sheet by name.

        :param sheet_name: Name of the sheet
        :type sheet_name: str
        :return: The sheet object
        :rtype: openpyxl.worksheet.worksheet.Worksheet
        """
        if self.workbook is None:
            raise ValueError("Workbook is not loaded.")
        return self.workbook[sheet_name]

    def get_headers(self, sheet, header_row=1):
        """
        Get headers from a specific row in a sheet.

        :param sheet: The sheet object
        :param header_row: The row number containing headers
        :return: List of headers, one per column up to the sheet's max column
        :rtype: list
        """
        return [sheet.cell(row=header_row, column=col).value for col in range(1, sheet.max_column + 1)]

    def get_rows(self, sheet, start_row):
        """
        Get all rows starting from a specific row.

        :param sheet: The sheet object
        :param start_row: The starting row number
        :return: List of rows, where each row is a tuple of cell values
        :rtype: list[tuple]
        """
        return list(sheet.iter_rows(min_row=start_row, values_only=True))

    def iter_sheets(self, header_row=1):
        """
        Yield (sheet_name, headers, data_rows) for every sheet, in workbook order.
        """
        for sheet_name in self.get_sheet_names():
            sheet = self.get_sheet(sheet_name)
            yield sheet_name, self.get_headers(sheet, header_row), self.get_rows(sheet, header_row + 1)

    def _create_excel_file(self, sheets_data):
        """
        Internal method to create a new Excel workbook with multiple sheets.

        Modifies:
            self.workbook: Sets this attribute to the newly created workbook.
        """
        self.workbook = openpyxl.Workbook()

        for idx, (sheet_name, rows) in enumerate(sheets_data.items(), start=1):
            # Add a new sheet or use the default active sheet
            if idx == 1:
                sheet = self.workbook.active
                sheet.title = sheet_name
            else:
                sheet = self.workbook.create_sheet(title=sheet_name)

            for row in rows:
                sheet.append(list(row))

    def close(self):
        if self.workbook is not None:
            self.workbook.close()

"""Typed shape of a document-intelligence extraction payload.

Stored in ``analysis_results.extracted_data`` using the camelCase aliases
(``tables`` / ``keyValuePairs`` / ``content``).
"""

from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field


class TableCell(BaseModel):
    """Single cell of an extracted table."""

    model_config = ConfigDict(populate_by_name=True)

    content: str = Field(default="", description="Cell text")
    row_index: int = Field(default=0, alias="rowIndex", description="Zero-based row index")
    column_index: int = Field(default=0, alias="columnIndex", description="Zero-based column index")


class ExtractedTable(BaseModel):
    """Table detected in the document."""

    model_config = ConfigDict(populate_by_name=True)

    row_count: int = Field(default=0, alias="rowCount")
    column_count: int = Field(default=0, alias="columnCount")
    cells: List[TableCell] = Field(default_factory=list)


class ExtractedData(BaseModel):
    """Structured content extracted from a document.

    Every field has an empty default so downstream scoring never deals with
    missing keys.
    """

    model_config = ConfigDict(populate_by_name=True)

    tables: List[ExtractedTable] = Field(default_factory=list)
    key_value_pairs: Dict[str, str] = Field(default_factory=dict, alias="keyValuePairs")
    content: str = Field(default="", description="Full raw text content")
    pages: int = Field(default=0, description="Number of pages analysed")

    def to_storage(self) -> Dict:
        """Serialize with the persisted camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)

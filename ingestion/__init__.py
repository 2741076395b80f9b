# =============================================================================
# ingestion/ - Data Source Processors
# =============================================================================
# Converters from raw data source input to normalized DataRecords:
# - csv_processor.py: CSV files, one record per row
# - json_processor.py: JSON documents, one record per object
# - text_processor.py: Plain text split into chunks, paragraphs or sentences
# - api_processor.py: Remote JSON APIs fetched with httpx
# - factory.py: get_data_processor() and the bounded preview()
#
# Processors are stateless and never touch the database.
# =============================================================================

from ingestion.api_processor import APIProcessor
from ingestion.base import DataProcessor, UnsupportedSourceTypeError, extract_text_content
from ingestion.csv_processor import CSVProcessor, parse_csv_line
from ingestion.factory import FILE_SOURCE_TYPES, get_data_processor, preview
from ingestion.json_processor import JSONProcessor
from ingestion.text_processor import TextProcessor

__all__ = [
    "APIProcessor",
    "CSVProcessor",
    "DataProcessor",
    "FILE_SOURCE_TYPES",
    "JSONProcessor",
    "TextProcessor",
    "UnsupportedSourceTypeError",
    "extract_text_content",
    "get_data_processor",
    "parse_csv_line",
    "preview",
]

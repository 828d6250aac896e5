"""Asset allocation table extraction."""
import re
from typing import List

from stockllm.models.schemas import AssetRecord
from stockllm.services.section_scanner import ScanResult

ASSET_SECTION_KEY = "assets"
COLUMN_SEPARATOR = "|"
ASSET_COLUMNS = ("name", "type", "invested_value", "current_value")

_SEPARATOR_ROW = re.compile(r"^[\s|:+-]*-[\s|:+-]*$")


def _is_header_row(line: str) -> bool:
    return "asset name" in line.lower()


def _is_separator_row(line: str) -> bool:
    return bool(_SEPARATOR_ROW.match(line))


def parse_asset_rows(section_body: str) -> List[AssetRecord]:
    """
    Extract asset rows from the body of the asset allocation section.

    Only ``|`` separated lines with exactly four non-empty cells become
    records; the header row, dash separator rows and anything with a
    different cell count are skipped. Values stay as written.

    Args:
        section_body: Text of the section (header line may be included)

    Returns:
        Records in the order the rows appear
    """
    records: List[AssetRecord] = []

    for raw_line in section_body.splitlines():
        line = raw_line.strip()
        if COLUMN_SEPARATOR not in line:
            continue
        if _is_header_row(line) or _is_separator_row(line):
            continue

        cells = [cell.strip() for cell in line.split(COLUMN_SEPARATOR)]
        cells = [cell for cell in cells if cell]
        if len(cells) != len(ASSET_COLUMNS):
            continue

        records.append(AssetRecord(**dict(zip(ASSET_COLUMNS, cells))))

    return records


def extract_asset_records(scan: ScanResult, key: str = ASSET_SECTION_KEY) -> List[AssetRecord]:
    """Parse the asset section of a scanned report, if it has one."""
    block = scan.get(key)
    if block is None:
        return []
    return parse_asset_rows(block.body)

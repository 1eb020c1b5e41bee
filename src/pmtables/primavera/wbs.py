"""
WBS Module - P3 work breakdown structure code formatting
The DIR table records the width of each WBS level and the separator that
follows it; stored codes are the level values run together.
"""

from typing import List, Optional
from ..model.row import MapRow


class P3WbsFormat:
    """Splits raw WBS codes using the layout held in a DIR row"""

    def __init__(self, row: MapRow):
        self.lengths: List[int] = []
        self.separators: List[str] = []
        self.elements: List[str] = []

        index = 1
        while True:
            suffix = f"{index:02d}"
            length = row.get_integer(f"WBSW_{suffix}")
            if not length:
                break
            self.lengths.append(length)
            self.separators.append(row.get_string(f"WBSS_{suffix}") or "")
            index += 1

    def parse_raw_value(self, value: str) -> None:
        """Split a stored code into level values interleaved with separators"""
        self.elements = []
        value_index = 0
        for element_index, element_length in enumerate(self.lengths):
            if value_index >= len(value):
                break
            if element_index > 0:
                self.elements.append(self.separators[element_index - 1])
            self.elements.append(value[value_index:value_index + element_length])
            value_index += element_length

    @property
    def formatted_value(self) -> str:
        return ''.join(self.elements)

    @property
    def formatted_parent_value(self) -> Optional[str]:
        """Formatted code without its last level, None at the top level"""
        if len(self.elements) > 2:
            return ''.join(self.elements[:-2])
        return None

    @property
    def level(self) -> int:
        return (len(self.elements) + 1) // 2

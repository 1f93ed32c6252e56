"""Cursor and address types for the four-level panel tree."""

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional, Tuple


class Level(IntEnum):
    SECTION = 0
    ITEM = 1
    SUB_ITEM = 2
    SUB_SUB_ITEM = 3


@dataclass(frozen=True)
class Address:
    """One node of the tree; trailing ``None`` fields mean a shallower node."""

    section: int
    item: Optional[int] = None
    sub_item: Optional[int] = None
    sub_sub_item: Optional[int] = None

    @property
    def level(self) -> Level:
        if self.sub_sub_item is not None:
            return Level.SUB_SUB_ITEM
        if self.sub_item is not None:
            return Level.SUB_ITEM
        if self.item is not None:
            return Level.ITEM
        return Level.SECTION


@dataclass
class Cursor:
    """Track the focused address inside an open panel."""

    level: Level = Level.SECTION
    section: int = 0
    item: int = 0
    sub_item: int = 0
    sub_sub_item: int = 0

    def indices(self) -> Tuple[int, int, int, int]:
        return (self.section, self.item, self.sub_item, self.sub_sub_item)

    def index_at(self, level: Level) -> int:
        return self.indices()[level]

    def set_index(self, level: Level, value: int) -> None:
        """Set the index for a level and reset everything below it."""
        if level == Level.SECTION:
            self.section = value
        elif level == Level.ITEM:
            self.item = value
        elif level == Level.SUB_ITEM:
            self.sub_item = value
        else:
            self.sub_sub_item = value
        self.reset_below(level)

    def reset_below(self, level: Level) -> None:
        """Reset navigation indices deeper than a specific level."""
        if level < Level.ITEM:
            self.item = 0
        if level < Level.SUB_ITEM:
            self.sub_item = 0
        if level < Level.SUB_SUB_ITEM:
            self.sub_sub_item = 0

    def address(self) -> Address:
        """Address of the current node; deeper stale fields are left out."""
        fields = [self.section, self.item, self.sub_item, self.sub_sub_item]
        for i in range(self.level + 1, 4):
            fields[i] = None
        return Address(*fields)

    def jump(self, address: Address) -> None:
        """Point the cursor at an address, setting ancestor levels as well."""
        self.section = address.section
        self.item = address.item or 0
        self.sub_item = address.sub_item or 0
        self.sub_sub_item = address.sub_sub_item or 0
        self.level = address.level

    def get_breadcrumb(self) -> str:
        """Generate breadcrumb string for the current position (1-based)."""
        parts = [str(i + 1) for i in self.indices()[: self.level + 1]]
        return " > ".join(parts)

    def reset(self) -> None:
        self.level = Level.SECTION
        self.section = self.item = self.sub_item = self.sub_sub_item = 0

"""Snapshot of one item kind in one account."""

from typing import Generic, Optional, Tuple, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from .records import ItemKind

T = TypeVar("T")


class Snapshot(BaseModel, Generic[T]):
    """
    All items of one kind in one account at one instant.

    Items keep remote enumeration order. A snapshot is immutable and is
    rebuilt for every comparison, never cached.

    An empty snapshot is ambiguous on its own: the account may be empty
    or enumeration may have failed. ``complete`` tells the two apart.
    """

    model_config = ConfigDict(frozen=True)

    kind: ItemKind
    account: str = ""
    items: Tuple[T, ...] = Field(default_factory=tuple)
    complete: bool = Field(True, description="False when enumeration stopped early")
    dropped: int = Field(0, description="Records skipped because they could not be mapped")
    error: Optional[str] = Field(None, description="Why enumeration stopped early")

    def __len__(self) -> int:
        return len(self.items)

    def __contains__(self, item) -> bool:
        return item in self.items

    @property
    def is_empty(self) -> bool:
        return not self.items

    def describe(self) -> str:
        """Short description used in logs and failure messages."""
        text = f"{len(self.items)} {self.kind.value} item(s) in {self.account or 'account'}"
        if not self.complete:
            text += f" (INCOMPLETE: {self.error})"
        if self.dropped:
            text += f" ({self.dropped} dropped)"
        return text

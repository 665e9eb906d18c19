"""Data models for subtitle blocks, aligned pairs and saved projects."""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class SrtBlock:
    """A single subtitle cue parsed from an SRT file."""

    index: int
    start: str
    end: str
    text: str
    translated: Optional[str] = None
    from_reference: bool = False

    @property
    def timecode(self) -> str:
        """Return the timecode line in SRT format."""
        return f"{self.start} --> {self.end}"

    @property
    def output_text(self) -> str:
        """Text written on serialization: the translation when there is one."""
        return self.translated or self.text

    def to_srt(self) -> str:
        """Convert block to an SRT cue (no trailing blank line)."""
        return f"{self.index}\n{self.timecode}\n{self.output_text}"

    def copy(self, **changes) -> "SrtBlock":
        """Create a copy with optional field changes."""
        return SrtBlock(
            index=changes.get('index', self.index),
            start=changes.get('start', self.start),
            end=changes.get('end', self.end),
            text=changes.get('text', self.text),
            translated=changes.get('translated', self.translated),
            from_reference=changes.get('from_reference', self.from_reference),
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.index,
            "startTime": self.start,
            "endTime": self.end,
            "originalText": self.text,
        }
        if self.translated is not None:
            data["translatedText"] = self.translated
        if self.from_reference:
            data["isFromReference"] = True
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SrtBlock":
        return cls(
            index=int(data["id"]),
            start=data.get("startTime", ""),
            end=data.get("endTime", ""),
            text=data.get("originalText", ""),
            translated=data.get("translatedText"),
            from_reference=bool(data.get("isFromReference", False)),
        )


@dataclass(frozen=True)
class AlignedBlock:
    """A source cue paired with the cue matched from a second track."""

    index: int
    start: str
    end: str
    source: str
    target: str

    def to_block(self) -> SrtBlock:
        return SrtBlock(self.index, self.start, self.end, self.source, translated=self.target)


@dataclass(frozen=True)
class StyleExample:
    """An (original, translation) pair used as few-shot context."""

    original: str
    translated: str

    @classmethod
    def flattened(cls, original: str, translated: str) -> "StyleExample":
        """Build an example with embedded line breaks replaced by spaces."""
        return cls(original.replace('\n', ' '), translated.replace('\n', ' '))


@dataclass(frozen=True)
class TrainingDiff:
    """A line where the human edit differs from the AI draft."""

    original: str
    ai_draft: str
    human_edit: str


@dataclass
class TranslationProject:
    """A saved translation session or imported training pair."""

    id: str
    file_name: str
    created_at: int  # epoch milliseconds
    blocks: List[SrtBlock] = field(default_factory=list)
    is_external_import: bool = False

    @classmethod
    def create(
        cls,
        file_name: str,
        blocks: List[SrtBlock],
        is_external_import: bool = False,
    ) -> "TranslationProject":
        """Create a new project with a fresh id and the current timestamp."""
        return cls(
            id=uuid.uuid4().hex,
            file_name=file_name,
            created_at=int(time.time() * 1000),
            blocks=list(blocks),
            is_external_import=is_external_import,
        )

    @property
    def has_translations(self) -> bool:
        return any(b.translated for b in self.blocks)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "fileName": self.file_name,
            "createdAt": self.created_at,
            "blocks": [b.to_dict() for b in self.blocks],
            "isExternalImport": self.is_external_import,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TranslationProject":
        return cls(
            id=str(data["id"]),
            file_name=data.get("fileName", ""),
            created_at=int(data.get("createdAt", 0)),
            blocks=[SrtBlock.from_dict(b) for b in data.get("blocks", [])],
            is_external_import=bool(data.get("isExternalImport", False)),
        )

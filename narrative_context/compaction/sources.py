"""
Context Sources

Assembles the engine's raw text from the sections a host gathers for a writing
request: the current scene, character notes, plot points, world notes and
summaries of earlier chapters. The host does the storage lookups; this only
formats what it was handed.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

SECTION_TITLES: dict[str, str] = {
    "historical": "Previous chapters",
    "world": "World notes",
    "plot": "Plot points",
    "characters": "Characters",
    "scene": "Current scene",
}


class ContextSources(BaseModel):
    """Narrative material for one request, each field already rendered as text."""

    scene: str = Field(default="", description="Text of the scene being written")
    characters: list[str] = Field(default_factory=list, description="One note per character")
    plot_points: list[str] = Field(default_factory=list, description="One note per plot point")
    world_notes: list[str] = Field(default_factory=list, description="World-building notes")
    chapter_summaries: list[str] = Field(default_factory=list, description="Summaries, oldest first")
    include_headers: bool = Field(default=True, description="Prefix each section with a title paragraph")

    def sections(self) -> list[tuple[str, list[str]]]:
        # Oldest and most static material first, the active scene last, so the
        # cursor naturally sits at the end of the assembled text
        return [
            ("historical", self.chapter_summaries),
            ("world", self.world_notes),
            ("plot", self.plot_points),
            ("characters", self.characters),
            ("scene", [self.scene] if self.scene else []),
        ]

    def assemble(self, joiner: str = "\n\n") -> str:
        blocks: list[str] = []
        for key, items in self.sections():
            entries = [item.strip() for item in items if item and item.strip()]
            if not entries:
                continue
            if self.include_headers:
                blocks.append(f"[{SECTION_TITLES[key]}]")
            blocks.extend(entries)
        return joiner.join(blocks)

"""Tutorial files made of toggleable sections.

A section opens with a heading line and closes with ``//*/``:

    /* 1. Constructors        inactive: the heading opens a block comment
    ...
    //*/

    //* 2. Prototypes         active: the heading is a line comment
    ...
    //*/

Because of the comment trick the file stays a valid program whichever
sections are switched on. Lines outside every section form the prelude,
which runs along with each section (typically ``"use strict";``).
"""

__all__ = ["Section", "Lesson", "BUNDLED_TUTORIAL", "load_lesson"]

import re
from dataclasses import dataclass, field
from pathlib import Path

from loguru import logger

from ._interp import Interpreter


BUNDLED_TUTORIAL = Path(__file__).parent / "lessons" / "prototypes.js"

_OPEN_RE = re.compile(r"^(/)?/\*\s*(\d+)\.\s*(.*?)\s*$")
_CLOSE_RE = re.compile(r"^//\*/\s*$")


@dataclass
class Section:
    """One toggleable snippet of a tutorial file.

    Attributes:
        number:  section number from the heading
        title:   heading text after the number
        active:  heading written as ``//*`` rather than ``/*``
        start:   0-based line index of the heading
        end:     0-based line index of the closing ``//*/``
    """
    number: int
    title: str
    active: bool
    start: int
    end: int


@dataclass
class Lesson:
    """A tutorial file split into its prelude and sections."""
    lines: list
    sections: list = field(default_factory=list)

    @classmethod
    def from_text(cls, text):
        lines = text.splitlines()
        lesson = cls(lines)
        current = None
        for index, line in enumerate(lines):
            if current is None:
                match = _OPEN_RE.match(line)
                if match:
                    current = (int(match.group(2)), match.group(3), bool(match.group(1)), index)
            elif _CLOSE_RE.match(line):
                number, title, active, start = current
                lesson.sections.append(Section(number, title, active, start, index))
                current = None
        if current is not None:
            number, title, active, start = current
            lesson.sections.append(Section(number, title, active, start, len(lines)))
        return lesson

    def section(self, number):
        for section in self.sections:
            if section.number == number:
                return section
        raise KeyError(f"No section {number}")

    def source(self, section):
        """Program text for one section: the prelude plus its body.

        Other sections are blanked rather than removed, so line numbers in
        errors still match the file.
        """
        keep = [True] * len(self.lines)
        for other in self.sections:
            for index in range(other.start, min(other.end + 1, len(self.lines))):
                keep[index] = False
        for index in range(section.start + 1, min(section.end, len(self.lines))):
            keep[index] = True
        return "\n".join(line if kept else "" for line, kept in zip(self.lines, keep))

    def select(self, numbers=None, run_all=False):
        """Sections to run: the requested numbers, all, or the active ones."""
        if numbers:
            return [self.section(number) for number in numbers]
        if run_all:
            return list(self.sections)
        return [section for section in self.sections if section.active]

    def run(self, section, output=None, strict=None):
        """Run one section in a fresh interpreter and return the interpreter."""
        logger.debug("running section {}. {}", section.number, section.title)
        interp = Interpreter(output=output, strict=strict)
        interp.run(self.source(section))
        return interp


def load_lesson(path=None) -> Lesson:
    """Read a tutorial file, the bundled prototypes tutorial by default."""
    path = Path(path) if path is not None else BUNDLED_TUTORIAL
    return Lesson.from_text(path.read_text(encoding="utf-8"))

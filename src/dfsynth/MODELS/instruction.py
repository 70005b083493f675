"""
Models for the instructions and build stages of a Dockerfile-style document.
"""
from typing import List, Optional
from pydantic import BaseModel, field_validator

FROM_KEYWORD = "FROM"
COMMENT_KEYWORD = "#"


class Instruction(BaseModel):
    """
    A single line of a build description: a keyword followed by its arguments.
    """
    tokens: List[str]

    @field_validator("tokens")
    @classmethod
    def require_keyword(cls, tokens: List[str]) -> List[str]:
        if not tokens:
            raise ValueError("an instruction needs at least a keyword token")
        return tokens

    @property
    def keyword(self) -> str:
        return self.tokens[0]

    @property
    def arguments(self) -> List[str]:
        return self.tokens[1:]

    @property
    def is_from(self) -> bool:
        return self.keyword == FROM_KEYWORD

    @property
    def is_comment(self) -> bool:
        return False

    def render(self) -> str:
        """Renders the instruction as one line, tokens separated by single spaces."""
        return " ".join(self.tokens)


class Comment(Instruction):
    """
    A comment line. Stored as the tokens ``["#", text]`` and rendered with an
    empty line in front of it, i.e. ``"\\n# text"``.
    """

    @classmethod
    def of(cls, text: str) -> "Comment":
        return cls(tokens=[COMMENT_KEYWORD, text])

    @property
    def text(self) -> str:
        return " ".join(self.tokens[1:])

    @property
    def is_comment(self) -> bool:
        return True

    def render(self) -> str:
        return f"\n{COMMENT_KEYWORD} {self.text}"


class Stage(BaseModel):
    """
    One FROM-delimited build stage. The first instruction is the FROM that opened it.
    """
    instructions: List[Instruction] = []

    @property
    def base_image(self) -> Optional[str]:
        if not self.instructions or len(self.instructions[0].tokens) < 2:
            return None
        return self.instructions[0].tokens[1]

    @property
    def name(self) -> Optional[str]:
        """The alias given with ``FROM image AS name``, if any."""
        if not self.instructions:
            return None
        tokens = self.instructions[0].tokens
        if len(tokens) >= 4 and tokens[2].upper() == "AS":
            return tokens[3]
        return None

    def __len__(self) -> int:
        return len(self.instructions)

# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Fluent builder for multi-stage Dockerfile-style instruction documents.
"""
import logging
from typing import List, Optional, Sequence, Union
from ..MODELS.instruction import COMMENT_KEYWORD, FROM_KEYWORD, Comment, Instruction, Stage
from ..MODELS.document_settings import DocumentSettings
from ..errors import DocumentSourceError, NoStageError, StageIndexError

logger = logging.getLogger(__name__)

# Instructions Docker accepts ahead of the first FROM.
PREAMBLE_KEYWORDS = {"ARG", COMMENT_KEYWORD}

Arguments = Union[str, Sequence[Union[str, int]]]


class InstructionDocument:
    """
    An ordered list of build stages, each an ordered list of instructions.

    Every mutation appends and returns the same document, so calls chain::

        doc = InstructionDocument()
        doc.from_("rust").run("cargo build --release")
        doc.from_("debian:buster-slim").cmd(["app"])
        print(doc.synth())

    A FROM always opens a new stage and becomes the target of the instructions
    that follow it. Comments and ``ARG`` may precede the first FROM; any other
    instruction issued before a FROM raises :class:`NoStageError`.
    """

    def __init__(self):
        self._preamble: List[Instruction] = []
        self._stages: List[Stage] = []
        self._current: Optional[Stage] = None

    # Construction

    def from_(self, image: str, name: Optional[str] = None) -> "InstructionDocument":
        """
        Opens a new stage based on ``image``.

        :param image: The base image reference.
        :param name: Optional stage alias, rendered as ``FROM image AS name``.
        """
        tokens = [FROM_KEYWORD, image]
        if name:
            tokens += ["AS", name]
        return self._open_stage(Instruction(tokens=tokens))

    def arg(self, kv: str) -> "InstructionDocument":
        return self._push(Instruction(tokens=["ARG", kv]))

    def run(self, command: str) -> "InstructionDocument":
        return self._push(Instruction(tokens=["RUN", command]))

    def copy(self, args: Arguments) -> "InstructionDocument":
        return self._push_keyword("COPY", args)

    def add(self, args: Arguments) -> "InstructionDocument":
        return self._push_keyword("ADD", args)

    def workdir(self, path: str) -> "InstructionDocument":
        return self._push(Instruction(tokens=["WORKDIR", path]))

    def user(self, name: str) -> "InstructionDocument":
        return self._push(Instruction(tokens=["USER", name]))

    def cmd(self, args: Arguments) -> "InstructionDocument":
        return self._push_keyword("CMD", args)

    def entrypoint(self, args: Arguments) -> "InstructionDocument":
        return self._push_keyword("ENTRYPOINT", args)

    def expose(self, ports: Arguments) -> "InstructionDocument":
        return self._push_keyword("EXPOSE", ports)

    def env(self, kv: str) -> "InstructionDocument":
        return self._push(Instruction(tokens=["ENV", kv]))

    def label(self, kv: str) -> "InstructionDocument":
        return self._push(Instruction(tokens=["LABEL", kv]))

    def comment(self, text: str) -> "InstructionDocument":
        """Adds a comment, rendered on its own line after an empty one."""
        return self._push(Comment.of(text))

    def append(self, tokens: Sequence[str]) -> "InstructionDocument":
        """
        Appends a raw token list, routing it by its keyword.

        A ``FROM`` opens a new stage, a ``#`` becomes a comment and anything
        else goes to the current stage.

        :param tokens: Keyword followed by its arguments.
        """
        tokens = list(tokens)
        if tokens and tokens[0] == FROM_KEYWORD:
            return self._open_stage(Instruction(tokens=tokens))
        if tokens and tokens[0] == COMMENT_KEYWORD:
            return self._push(Comment.of(" ".join(tokens[1:])))
        return self._push(Instruction(tokens=tokens))

    # Accessors

    def stages(self) -> int:
        """Returns the number of stages."""
        return len(self._stages)

    def stage(self, index: int) -> List[Instruction]:
        """
        Returns the instructions of stage ``index``.

        :raises StageIndexError: If ``index`` is negative or past the last stage.
        """
        if not 0 <= index < len(self._stages):
            raise StageIndexError(
                f"Stage index {index} out of range for a document with {len(self._stages)} stage(s)"
            )
        return list(self._stages[index].instructions)

    def stage_named(self, name: str) -> int:
        """
        Returns the index of the stage opened with ``AS name``.

        :raises StageIndexError: If no stage carries that name.
        """
        for index, stage in enumerate(self._stages):
            if stage.name is not None and stage.name.lower() == name.lower():
                return index
        raise StageIndexError(f"No stage named {name!r}")

    def preamble(self) -> List[Instruction]:
        """Returns the comments and ARGs that precede the first FROM."""
        return list(self._preamble)

    def instructions(self) -> List[Instruction]:
        """Returns every instruction in document order."""
        flat = list(self._preamble)
        for stage in self._stages:
            flat.extend(stage.instructions)
        return flat

    # Serialization

    def synth(self) -> str:
        """
        Renders the document, one instruction per line with no trailing newline.
        """
        return "\n".join(instruction.render() for instruction in self.instructions())

    def write(self, path: str, settings: Optional[DocumentSettings] = None) -> str:
        """
        Writes the rendered document to ``path``.

        :param path: Destination file.
        :param settings: Controls the output encoding.
        :return: The path written.
        :raises DocumentSourceError: If the file cannot be written.
        """
        settings = settings or DocumentSettings()
        try:
            with open(path, 'w', encoding=settings.encoding, newline='') as f:
                f.write(self.synth())
        except OSError as e:
            raise DocumentSourceError(f"Cannot write document to {path}: {e}") from e
        return path

    @classmethod
    def parse(cls, content: str) -> "InstructionDocument":
        """Parses a document from text."""
        from ..PARSERS.instruction_parser import InstructionParser
        return InstructionParser().parse_from_string(content)

    @classmethod
    def load(cls, path: str, settings: Optional[DocumentSettings] = None) -> "InstructionDocument":
        """Parses a document from a file."""
        from ..PARSERS.instruction_parser import InstructionParser
        return InstructionParser(settings).parse(path)

    def __str__(self) -> str:
        return self.synth()

    def __repr__(self) -> str:
        return f"InstructionDocument(stages={len(self._stages)}, instructions={len(self.instructions())})"

    # Internals

    def _open_stage(self, instruction: Instruction) -> "InstructionDocument":
        stage = Stage(instructions=[instruction])
        self._stages.append(stage)
        self._current = stage
        logger.debug("Opened stage %d from %s", len(self._stages) - 1, stage.base_image)
        return self

    def _push(self, instruction: Instruction) -> "InstructionDocument":
        if self._current is not None:
            self._current.instructions.append(instruction)
        elif instruction.keyword in PREAMBLE_KEYWORDS:
            self._preamble.append(instruction)
        else:
            raise NoStageError(
                f"{instruction.keyword} issued before any FROM; open a stage with from_() first"
            )
        return self

    def _push_keyword(self, keyword: str, args: Arguments) -> "InstructionDocument":
        return self._push(Instruction(tokens=[keyword] + _to_list(args)))


def _to_list(args: Arguments) -> List[str]:
    """
    Helper to ensure a value is a list of strings.
    """
    if isinstance(args, (str, int)):
        return [str(args)]
    return [str(arg) for arg in args]

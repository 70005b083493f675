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
Parser turning line-oriented instruction text back into an InstructionDocument.
"""
import codecs
import logging
from typing import Iterable, Optional, Union
from ..BUILDERS.instruction_document import InstructionDocument
from ..MODELS.instruction import COMMENT_KEYWORD
from ..MODELS.document_settings import DocumentSettings
from ..errors import DocumentSourceError

logger = logging.getLogger(__name__)

# Error handler that decodes bad byte runs to a lone surrogate; a strict
# decode never yields one, so any line holding it failed to decode.
UNDECODABLE_ERRORS = "dfsynth.undecodable"
_UNDECODABLE_MARK = "\udfff"


def _mark_undecodable(error: UnicodeDecodeError):
    return _UNDECODABLE_MARK, error.end


codecs.register_error(UNDECODABLE_ERRORS, _mark_undecodable)


class InstructionParser:
    """
    Parser for Dockerfile-style instruction lists.

    Each non-blank line becomes one instruction. Lines are separated by
    ``\\n`` only; a trailing ``\\r`` is dropped. Lines starting with ``#`` are
    comments; every other line is split on whitespace into tokens. Quoting,
    line continuations and heredocs are not interpreted.
    """
    def __init__(self, settings: Optional[DocumentSettings] = None):
        """
        Initializes the parser.

        :param settings: Decoding options; defaults to ``DocumentSettings()``.
        """
        self.settings = settings or DocumentSettings()

    def parse(self, path: str) -> InstructionDocument:
        """
        Parses a document from a file path.

        :param path: Path to the instruction file.
        :return: The parsed document.
        :raises DocumentSourceError: If the file cannot be opened or read.
        """
        try:
            with open(path, 'rb') as f:
                data = f.read()
        except OSError as e:
            raise DocumentSourceError(f"Cannot read document from {path}: {e}") from e
        return self.parse_bytes(data)

    def parse_bytes(self, data: bytes) -> InstructionDocument:
        """
        Decodes ``data`` as a whole with the configured encoding and parses it.

        :param data: Raw file content.
        :return: The parsed document.
        :raises DocumentSourceError: If decoding fails with strict decoding.
        """
        try:
            text = data.decode(self.settings.encoding, self._errors())
        except UnicodeDecodeError as e:
            raise DocumentSourceError(
                f"Content is not valid {self.settings.encoding} at byte {e.start}: {e}"
            ) from e
        except LookupError as e:
            raise DocumentSourceError(f"Unknown encoding {self.settings.encoding!r}") from e
        return self.parse_lines(text.split("\n"))

    def parse_from_string(self, content: str) -> InstructionDocument:
        """
        Parses a document from a string.

        :param content: Instruction text.
        :return: The parsed document.
        """
        return self.parse_lines(content.split("\n"))

    def parse_lines(self, lines: Iterable[Union[str, bytes]]) -> InstructionDocument:
        """
        Parses a document from an iterable of lines.

        ``bytes`` lines are decoded one by one with the configured encoding,
        which suits ASCII-compatible encodings; use :meth:`parse_bytes` for
        others. A line that fails to decode is skipped unless
        ``skip_undecodable`` is off.

        :param lines: Lines of text or raw bytes.
        :return: The parsed document.
        :raises DocumentSourceError: On an undecodable line with strict decoding.
        """
        document = InstructionDocument()
        seen = 0
        skipped = 0

        for number, raw in enumerate(lines, start=1):
            seen += 1
            line = self._decode(raw, number)
            if line is None:
                skipped += 1
                continue

            line = line.rstrip("\r\n")
            if not line.strip():
                continue

            stripped = line.lstrip()
            if stripped.startswith(COMMENT_KEYWORD):
                document.comment(_comment_text(stripped))
            else:
                document.append(stripped.split())

        logger.debug(
            "Parsed %d line(s) into %d stage(s), skipped %d undecodable line(s)",
            seen, document.stages(), skipped
        )
        return document

    def _errors(self) -> str:
        return UNDECODABLE_ERRORS if self.settings.skip_undecodable else "strict"

    def _decode(self, raw: Union[str, bytes], number: int) -> Optional[str]:
        if isinstance(raw, bytes):
            try:
                raw = raw.decode(self.settings.encoding, self._errors())
            except UnicodeDecodeError as e:
                raise DocumentSourceError(f"Line {number} is not valid {self.settings.encoding}: {e}") from e
        if _UNDECODABLE_MARK in raw:
            logger.warning("Skipping line %d: not valid %s", number, self.settings.encoding)
            return None
        return raw


def _comment_text(line: str) -> str:
    # "# text" -> "text"; only the one separating space belongs to the marker.
    body = line[len(COMMENT_KEYWORD):]
    if body.startswith(" "):
        body = body[1:]
    return body

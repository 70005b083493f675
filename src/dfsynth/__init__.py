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
dfsynth - Dockerfile synthesis

Build multi-stage Dockerfile-style instruction lists with a fluent API,
render them to text, and parse existing files back into the same structure.
"""

__version__ = "0.1.0"
__author__ = "Michael Maillet, Damien Davison, Sacha Davison"
__license__ = "Apache-2.0"

from .BUILDERS.instruction_document import InstructionDocument
from .MODELS.document_settings import DocumentSettings
from .MODELS.instruction import Comment, Instruction, Stage
from .PARSERS.instruction_parser import InstructionParser
from .errors import DocumentError, DocumentSourceError, NoStageError, StageIndexError

__all__ = [
    "InstructionDocument",
    "InstructionParser",
    "DocumentSettings",
    "Instruction",
    "Comment",
    "Stage",
    "DocumentError",
    "DocumentSourceError",
    "NoStageError",
    "StageIndexError",
]

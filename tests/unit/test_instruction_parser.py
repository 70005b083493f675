import pytest
from dfsynth import (
    Comment,
    DocumentSettings,
    DocumentSourceError,
    InstructionDocument,
    InstructionParser,
    NoStageError,
)


def tokens_of(instructions):
    return [i.tokens for i in instructions]


def test_parse_from_string():
    parser = InstructionParser()
    doc = parser.parse_from_string("FROM x\nRUN echo hi\n\nFROM y\nCMD a b")

    assert doc.stages() == 2
    assert tokens_of(doc.stage(0)) == [["FROM", "x"], ["RUN", "echo", "hi"]]
    assert tokens_of(doc.stage(1)) == [["FROM", "y"], ["CMD", "a", "b"]]


def test_parsed_matches_built_document():
    built = InstructionDocument().from_("x").run("echo hi").from_("y").cmd(["a", "b"])
    parsed = InstructionDocument.parse("FROM x\nRUN echo hi\n\nFROM y\nCMD a b")

    assert parsed.stages() == built.stages()
    for index in range(built.stages()):
        assert [i.render() for i in parsed.stage(index)] == [i.render() for i in built.stage(index)]
    assert parsed.synth() == built.synth()


def test_blank_lines_are_skipped():
    content = "FROM x\nRUN a\nCOPY b c\nFROM y\nUSER z"
    spaced = "\n\nFROM x\n   \nRUN a\n\t\nCOPY b c\n\n\nFROM y\nUSER z\n\n"
    parser = InstructionParser()
    assert tokens_of(parser.parse_from_string(spaced).instructions()) == \
        tokens_of(parser.parse_from_string(content).instructions())


def test_tokens_are_whitespace_delimited():
    doc = InstructionDocument.parse('FROM   x\nRUN  echo   "a b"')
    assert tokens_of(doc.stage(0)) == [["FROM", "x"], ["RUN", "echo", '"a', 'b"']]


def test_comments_round_trip():
    built = (
        InstructionDocument()
        .comment("Build image")
        .from_("rust")
        .comment("  indented")
        .comment("")
        .run("make")
    )
    parsed = InstructionDocument.parse(built.synth())

    assert tokens_of(parsed.instructions()) == tokens_of(built.instructions())
    assert all(isinstance(i, Comment) for i in parsed.instructions() if i.keyword == "#")
    assert parsed.synth() == built.synth()


def test_comment_without_space():
    doc = InstructionDocument.parse("#syntax=docker/dockerfile:1\nFROM x")
    assert doc.preamble()[0].text == "syntax=docker/dockerfile:1"


def test_global_args_before_from():
    doc = InstructionDocument.parse("ARG VERSION=3\nFROM python:${VERSION}\nRUN true")
    assert tokens_of(doc.preamble()) == [["ARG", "VERSION=3"]]
    assert doc.stages() == 1


def test_instruction_before_from_fails():
    with pytest.raises(NoStageError):
        InstructionDocument.parse("RUN echo hi\nFROM x")


def test_undecodable_lines_are_skipped():
    parser = InstructionParser()
    doc = parser.parse_lines([b"FROM x\n", b"RUN \xff\xfe\n", b"USER app\n"])
    assert tokens_of(doc.stage(0)) == [["FROM", "x"], ["USER", "app"]]


def test_undecodable_lines_fail_when_strict():
    parser = InstructionParser(DocumentSettings(skip_undecodable=False))
    with pytest.raises(DocumentSourceError):
        parser.parse_lines([b"FROM x\n", b"RUN \xff\n"])


def test_parse_file_with_crlf(tmp_path):
    path = tmp_path / "Dockerfile"
    path.write_bytes(b"FROM x\r\nRUN make\r\n\r\n# done\r\n")
    doc = InstructionParser().parse(str(path))
    assert tokens_of(doc.stage(0)) == [["FROM", "x"], ["RUN", "make"], ["#", "done"]]


def test_parse_file_with_other_encoding(tmp_path):
    path = tmp_path / "Dockerfile"
    path.write_bytes("FROM x\nLABEL author=Jürgen\n".encode("latin-1"))
    doc = InstructionParser(DocumentSettings(encoding="latin-1")).parse(str(path))
    assert doc.stage(0)[1].tokens == ["LABEL", "author=Jürgen"]


def test_missing_file_raises(tmp_path):
    with pytest.raises(DocumentSourceError):
        InstructionParser().parse(str(tmp_path / "missing"))


@pytest.mark.parametrize("encoding", ["utf-16", "utf-32", "utf-8-sig", "latin-1"])
def test_write_then_load_with_encoding(tmp_path, encoding):
    settings = DocumentSettings(encoding=encoding)
    doc = InstructionDocument().comment("build").from_("x").run("make").from_("y").cmd(["a", "b"])
    path = str(tmp_path / "Dockerfile")
    doc.write(path, settings)

    loaded = InstructionDocument.load(path, settings)
    assert loaded.stages() == 2
    assert tokens_of(loaded.instructions()) == tokens_of(doc.instructions())


def test_undecodable_bytes_in_file_skip_only_their_line(tmp_path):
    path = tmp_path / "Dockerfile"
    path.write_bytes(b"FROM x\nRUN \xff\xfe bad\nUSER app")
    doc = InstructionParser().parse(str(path))
    assert tokens_of(doc.stage(0)) == [["FROM", "x"], ["USER", "app"]]


def test_undecodable_file_fails_when_strict(tmp_path):
    path = tmp_path / "Dockerfile"
    path.write_bytes(b"FROM x\nRUN \xff\n")
    with pytest.raises(DocumentSourceError):
        InstructionParser(DocumentSettings(skip_undecodable=False)).parse(str(path))


def test_string_and_file_agree_on_line_breaks(tmp_path):
    content = "FROM x\nRUN a\x0cb\nUSER z\x85\nLABEL k=v w"
    path = tmp_path / "Dockerfile"
    path.write_bytes(content.encode("utf-8"))

    from_string = InstructionParser().parse_from_string(content)
    from_file = InstructionParser().parse(str(path))

    assert tokens_of(from_string.instructions()) == tokens_of(from_file.instructions())
    assert len(from_string.stage(0)) == 4
    assert from_string.stage(0)[1].tokens == ["RUN", "a", "b"]

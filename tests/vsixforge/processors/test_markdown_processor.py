# tests/vsixforge/processors/test_markdown_processor.py
from __future__ import annotations

import pytest

from vsixforge.content.files import FileEntry, readText
from vsixforge.core.errors import ProcessorError
from vsixforge.manifest.model import PackageOptions
from vsixforge.processors.base import Asset
from vsixforge.processors.markdown import ChangelogProcessor, ReadmeProcessor, guessBaseUrls


RAW = "https://github.com/pub/ext/raw/master"
BLOB = "https://github.com/pub/ext/blob/master"


def _readme(text: str, path: str = "extension/README.md") -> FileEntry:
    return FileEntry(path=path, contents=text.encode("utf-8"))


async def _process(processor, text: str, path: str = "extension/README.md") -> str:
    out = await processor.onFile(_readme(text, path))
    return await readText(out)


def test_guessBaseUrls_from_github_repository(makeManifest):
    urls = guessBaseUrls(makeManifest())
    assert urls.content == BLOB
    assert urls.images == RAW
    assert urls.repository == "https://github.com/pub/ext"


def test_guessBaseUrls_none_for_other_hosts(makeManifest):
    assert guessBaseUrls(makeManifest(repository="https://gitlab.com/pub/ext")) is None
    assert guessBaseUrls(makeManifest(repository=None)) is None


@pytest.mark.asyncio
async def test_relative_links_and_images_are_rewritten(makeManifest):
    processor = ReadmeProcessor(makeManifest())
    out = await _process(processor, "# Ext\n\n![logo](./img/a.png) see [docs](docs/x.md) and [web](https://example.com) [top](#top)\n")

    assert f"![logo]({RAW}/img/a.png)" in out
    assert f"[docs]({BLOB}/docs/x.md)" in out
    assert "[web](https://example.com)" in out
    assert "[top](#top)" in out
    assert processor.assets == [Asset(type="Microsoft.VisualStudio.Services.Content.Details", path="extension/README.md")]


@pytest.mark.asyncio
async def test_image_nested_in_link_text_is_rewritten(makeManifest):
    out = await _process(ReadmeProcessor(makeManifest()), "[![badge](img/b.png)](https://example.com)\n")
    assert out == f"[![badge]({RAW}/img/b.png)](https://example.com)\n"


@pytest.mark.asyncio
async def test_explicit_base_urls_win(makeManifest):
    options = PackageOptions(baseContentUrl="https://cdn.example.com/content", baseImagesUrl="https://cdn.example.com/img")
    out = await _process(ReadmeProcessor(makeManifest(repository=None), options), "![a](a.png) [b](b.md)\n")
    assert "![a](https://cdn.example.com/img/a.png)" in out
    assert "[b](https://cdn.example.com/content/b.md)" in out


@pytest.mark.asyncio
async def test_images_fall_back_to_content_base(makeManifest):
    options = PackageOptions(baseContentUrl="https://cdn.example.com/content")
    out = await _process(ReadmeProcessor(makeManifest(repository=None), options), "![a](a.png)\n")
    assert "![a](https://cdn.example.com/content/a.png)" in out


@pytest.mark.asyncio
async def test_relative_image_without_base_is_broken(makeManifest):
    processor = ReadmeProcessor(makeManifest(repository=None))
    with pytest.raises(ProcessorError) as excInfo:
        await _process(processor, "![a](./img/a.png)\n")
    assert "The image './img/a.png' will be broken in README.md" in str(excInfo.value)


@pytest.mark.asyncio
async def test_relative_link_without_base_is_broken(makeManifest):
    with pytest.raises(ProcessorError, match="The link 'docs/x.md' will be broken in CHANGELOG.md"):
        await _process(ChangelogProcessor(makeManifest(repository=None)), "[x](docs/x.md)\n", "extension/CHANGELOG.md")


@pytest.mark.asyncio
async def test_absolute_links_need_no_base(makeManifest):
    text = "[x](https://example.com/x) ![y](https://example.com/y.png)\n"
    assert await _process(ReadmeProcessor(makeManifest(repository=None)), text) == text


@pytest.mark.asyncio
async def test_img_tags_rewritten_with_images_base(makeManifest):
    out = await _process(ReadmeProcessor(makeManifest()), '<img src="images/shot.png" width="300">\n')
    assert out == f'<img src="{RAW}/images/shot.png" width="300">\n'


@pytest.mark.asyncio
async def test_relative_img_tag_without_base_is_broken(makeManifest):
    with pytest.raises(ProcessorError, match="The image will be broken in README.md"):
        await _process(ReadmeProcessor(makeManifest(repository=None)), '<img src="shot.png">\n')


@pytest.mark.asyncio
async def test_issue_references_become_links_for_github(makeManifest):
    out = await _process(ReadmeProcessor(makeManifest()), "Fixed #12 and other/repo#3.\n")
    assert out == (
        "Fixed [#12](https://github.com/pub/ext/issues/12) and "
        "[other/repo#3](https://github.com/other/repo/issues/3).\n"
    )


@pytest.mark.asyncio
async def test_issue_references_untouched_elsewhere(makeManifest):
    options = PackageOptions(baseContentUrl="https://gitlab.com/pub/ext/-/raw/main")
    text = "Fixed #12.\n"
    assert await _process(ReadmeProcessor(makeManifest(repository="https://gitlab.com/pub/ext"), options), text) == text


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "text, message",
    [
        ("![x](http://example.com/a.png)\n", "must come from an HTTPS source"),
        ("![x](https://example.com/badge.svg)\n", "SVGs are restricted in README.md"),
        ('<img src="data:image/svg+xml;base64,PHN2Zz4=">\n', "SVG data URLs are not allowed"),
        ('<svg width="10"><circle r="4"/></svg>\n', "SVG tags are not allowed in README.md"),
    ],
)
async def test_insecure_images_rejected(makeManifest, text, message):
    with pytest.raises(ProcessorError, match=message):
        await _process(ReadmeProcessor(makeManifest()), text)


@pytest.mark.asyncio
async def test_svg_from_trusted_host_allowed(makeManifest):
    text = "![build](https://img.shields.io/badge/build-passing-green.svg)\n"
    assert await _process(ReadmeProcessor(makeManifest()), text) == text


@pytest.mark.asyncio
async def test_placeholder_readme_rejected(makeManifest):
    with pytest.raises(ProcessorError, match="Make sure to edit the README.md file"):
        await _process(ReadmeProcessor(makeManifest()), 'This is the README for your extension "ext".\n')


@pytest.mark.asyncio
async def test_other_files_pass_through(makeManifest):
    processor = ReadmeProcessor(makeManifest(repository=None))
    entry = FileEntry(path="extension/docs/README.md", localPath="/does/not/exist")
    assert await processor.onFile(entry) is entry
    assert processor.assets == []


@pytest.mark.asyncio
async def test_path_match_is_case_insensitive_and_output_is_in_memory(makeManifest, tmp_path):
    source = tmp_path / "readme.md"
    source.write_text("# Hi\n", encoding="utf-8")
    processor = ChangelogProcessor(makeManifest())
    readme = ReadmeProcessor(makeManifest())

    out = await readme.onFile(FileEntry(path="extension/readme.md", localPath=str(source)))
    assert out.localPath is None
    assert out.contents == b"# Hi\n"
    assert await processor.onFile(out) is out


@pytest.mark.asyncio
async def test_invalid_utf8_is_decoded_lossily(makeManifest):
    processor = ReadmeProcessor(makeManifest())
    out = await processor.onFile(FileEntry(path="extension/README.md", contents=b"# Title\n\xff\xfe text\n"))
    text = await readText(out)
    assert text.startswith("# Title\n")
    assert "\ufffd" in text
    assert text.endswith(" text\n")

# tests/vsixforge/archive/test_writer.py
from __future__ import annotations

import json
import zipfile

import pytest

from vsixforge.archive.writer import FIXED_DATE_TIME, readManifestFromPackage, readVsixManifest, writeVsix
from vsixforge.content.files import FileEntry
from vsixforge.core.errors import AssemblyError



def _entries(tmp_path) -> list[FileEntry]:
    local = tmp_path / "main.js"
    local.write_text("console.log('hi');\n", encoding="utf-8")
    return [
        FileEntry(path="extension.vsixmanifest", contents=b'<PackageManifest xmlns="http://schemas.microsoft.com/developer/vsx-schema/2011"><Metadata><Identity Id="ext" Version="1.0.0" Publisher="pub"/></Metadata></PackageManifest>'),
        FileEntry(path="[Content_Types].xml", contents=b"<Types/>"),
        FileEntry(path="extension/package.json", contents=json.dumps({"name": "ext"}).encode()),
        FileEntry(path="extension/main.js", localPath=str(local)),
    ]


@pytest.mark.asyncio
async def test_entries_written_in_order_with_fixed_timestamps(tmp_path):
    target = await writeVsix(_entries(tmp_path), tmp_path / "ext.vsix")
    with zipfile.ZipFile(target) as zf:
        infos = zf.infolist()
        assert [i.filename for i in infos] == [
            "extension.vsixmanifest", "[Content_Types].xml", "extension/package.json", "extension/main.js",
        ]
        assert all(i.date_time == FIXED_DATE_TIME for i in infos)
        assert all(i.compress_type == zipfile.ZIP_DEFLATED for i in infos)
        assert zf.read("extension/main.js") == b"console.log('hi');\n"


@pytest.mark.asyncio
async def test_output_is_byte_identical_across_runs(tmp_path):
    first = await writeVsix(_entries(tmp_path), tmp_path / "a.vsix")
    second = await writeVsix(_entries(tmp_path), tmp_path / "b.vsix")
    assert first.read_bytes() == second.read_bytes()


@pytest.mark.asyncio
async def test_existing_package_is_replaced(tmp_path):
    target = tmp_path / "ext.vsix"
    target.write_bytes(b"stale")
    await writeVsix(_entries(tmp_path), target)
    assert zipfile.is_zipfile(target)


@pytest.mark.asyncio
async def test_read_manifests_back(tmp_path):
    target = await writeVsix(_entries(tmp_path), tmp_path / "ext.vsix")
    assert await readManifestFromPackage(target) == {"name": "ext"}
    assert (await readVsixManifest(target))["id"] == "ext"


@pytest.mark.asyncio
async def test_missing_manifest_in_package(tmp_path):
    target = await writeVsix([FileEntry(path="extension/a.txt", contents=b"a")], tmp_path / "ext.vsix")
    with pytest.raises(AssemblyError, match="Manifest not found"):
        await readManifestFromPackage(target)


@pytest.mark.asyncio
async def test_unreadable_package(tmp_path):
    bogus = tmp_path / "bogus.vsix"
    bogus.write_bytes(b"not a zip")
    with pytest.raises(AssemblyError, match="Failed to read package"):
        await readManifestFromPackage(bogus)

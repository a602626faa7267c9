"""Tests for package root discovery."""

import pytest
from conftest import ABSENT_DESCRIPTOR
from mrequire.errors import PackageNotFoundError
from mrequire.locations import ProcessContext
from mrequire.locations import directory_path_to_location
from mrequire.locator import EntryPoint
from mrequire.locator import ad_hoc_entry
from mrequire.locator import find_package_location_and_module_id
from mrequire.locator import find_package_path


@pytest.mark.asyncio
async def test_finds_nearest_ancestor_with_descriptor(write_tree, tmp_path):
    write_tree({"a/package.json": {}, "a/b/c/entry.py": ""})

    assert await find_package_path(tmp_path / "a" / "b" / "c") == tmp_path / "a"


@pytest.mark.asyncio
async def test_directory_itself_counts(write_tree, tmp_path):
    write_tree({"a/package.json": {}, "a/b/package.json": {}})

    assert await find_package_path(tmp_path / "a" / "b") == tmp_path / "a" / "b"


@pytest.mark.asyncio
async def test_directory_named_like_descriptor_is_skipped(write_tree, tmp_path):
    write_tree({"a/package.json": {}})
    (tmp_path / "a" / "b" / "package.json").mkdir(parents=True)

    assert await find_package_path(tmp_path / "a" / "b") == tmp_path / "a"


@pytest.mark.asyncio
async def test_reaching_the_root_fails(tmp_path):
    start = tmp_path / "x" / "y"
    start.mkdir(parents=True)

    with pytest.raises(PackageNotFoundError):
        await find_package_path(start, descriptor=ABSENT_DESCRIPTOR)


@pytest.mark.asyncio
async def test_entry_resolves_to_package_location_and_module_id(write_tree, tmp_path):
    write_tree({"a/b/package.json": {}, "a/b/c/entry.py": ""})
    context = ProcessContext(cwd=tmp_path)

    entry = await find_package_location_and_module_id("./a/b/c/entry.py", context)

    assert entry == EntryPoint(location=directory_path_to_location(tmp_path / "a" / "b"), id="c/entry")
    assert entry.location.endswith("/a/b/")


@pytest.mark.asyncio
async def test_entry_beside_descriptor(write_tree, tmp_path):
    write_tree({"pkg/package.json": {}, "pkg/main.py": ""})

    entry = await find_package_location_and_module_id(tmp_path / "pkg" / "main.py", ProcessContext(cwd=tmp_path))

    assert entry.id == "main"


@pytest.mark.asyncio
async def test_entry_without_package_names_the_file(write_tree, tmp_path):
    write_tree({"solo/tool.py": ""})

    with pytest.raises(PackageNotFoundError) as excinfo:
        await find_package_location_and_module_id(
            "solo/tool.py", ProcessContext(cwd=tmp_path), descriptor=ABSENT_DESCRIPTOR
        )

    assert excinfo.value.path == str(tmp_path / "solo" / "tool.py")
    assert isinstance(excinfo.value.__cause__, PackageNotFoundError)


def test_ad_hoc_entry_uses_containing_directory(tmp_path):
    entry = ad_hoc_entry("solo/tool.py", ProcessContext(cwd=tmp_path))

    assert entry == EntryPoint(location=directory_path_to_location(tmp_path / "solo"), id="tool")

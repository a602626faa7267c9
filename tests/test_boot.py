"""End-to-end tests for booting a program from an entry path."""

import sys

import pytest
from conftest import ABSENT_DESCRIPTOR
from mrequire.boot import boot
from mrequire.errors import NativeLoadError
from mrequire.errors import RequireError
from mrequire.locations import ProcessContext
from mrequire.locations import directory_path_to_location
from mrequire.package import PackageRegistry
from mrequire.settings import RequireSettings


@pytest.fixture
def context(tmp_path):
    return ProcessContext(cwd=tmp_path)


@pytest.mark.asyncio
async def test_boot_runs_entry_from_owning_package(write_tree, tmp_path, context):
    write_tree(
        {
            "a/b/package.json": {"name": "b"},
            "a/b/c/entry.py": 'exports.id = module.id\nexports.shared = require("../shared").value\n',
            "a/b/shared.py": "exports.value = 'shared'\n",
        }
    )
    registry = PackageRegistry()

    exports = await boot(["mrequire", "./a/b/c/entry.py"], context, registry)

    assert exports.id == "c/entry"
    assert exports.shared == "shared"
    assert directory_path_to_location(tmp_path / "a" / "b") in registry


@pytest.mark.asyncio
async def test_boot_without_descriptor_uses_ad_hoc_package(write_tree, tmp_path, context):
    write_tree(
        {
            "solo/tool.py": 'exports.id = module.id\nexports.sibling = require("./sibling").name\n',
            "solo/sibling.py": "exports.name = 'sibling'\n",
        }
    )
    registry = PackageRegistry(RequireSettings(descriptor=ABSENT_DESCRIPTOR))

    exports = await boot(["mrequire", "solo/tool.py"], context, registry)

    assert exports.id == "tool"
    assert exports.sibling == "sibling"
    package = await registry.load_package(directory_path_to_location(tmp_path / "solo"))
    assert package.name == ""


@pytest.mark.asyncio
async def test_boot_reads_argv_from_context(write_tree, tmp_path):
    write_tree({"pkg/package.json": {}, "pkg/main.py": "exports.ok = True\n"})
    context = ProcessContext(cwd=tmp_path, argv=("mrequire", "pkg/main.py"))

    exports = await boot(context=context, registry=PackageRegistry())

    assert exports.ok is True


@pytest.mark.asyncio
async def test_boot_without_entry_argument(context):
    with pytest.raises(RequireError, match="Usage"):
        await boot(["mrequire"], context)


@pytest.mark.asyncio
async def test_boot_missing_entry_surfaces_native_failure(write_tree, context):
    write_tree({"pkg/package.json": {}})

    with pytest.raises(NativeLoadError):
        await boot(["mrequire", "pkg/not_there.py"], context, PackageRegistry())


@pytest.mark.asyncio
async def test_program_sees_its_arguments_as_sys_argv(write_tree, context):
    write_tree({"pkg/package.json": {}, "pkg/main.py": "import sys\nexports.argv = list(sys.argv)\n"})
    launcher_argv = sys.argv

    exports = await boot(["mrequire", "pkg/main.py", "hello", "-o", "out.txt"], context, PackageRegistry())

    assert exports.argv == ["pkg/main.py", "hello", "-o", "out.txt"]
    assert sys.argv is launcher_argv


@pytest.mark.asyncio
async def test_sys_argv_is_restored_when_the_program_fails(write_tree, context):
    write_tree({"pkg/package.json": {}, "pkg/main.py": "raise RuntimeError('exploded')\n"})
    launcher_argv = sys.argv

    with pytest.raises(RuntimeError, match="exploded"):
        await boot(["mrequire", "pkg/main.py", "hello"], context, PackageRegistry())

    assert sys.argv is launcher_argv

"""Tests for package loading and module execution."""

import asyncio

import pytest
from mrequire.config import PackageDescription
from mrequire.errors import InvalidDescriptionError
from mrequire.errors import ModuleNotLoadedError
from mrequire.errors import ModuleReadError
from mrequire.errors import NativeLoadError
from mrequire.errors import RequireError
from mrequire.locations import directory_path_to_location
from mrequire.package import ModuleRequire
from mrequire.package import PackageRegistry
from mrequire.package import load_package
from mrequire.records import ModuleState
from mrequire.settings import RequireSettings

APP = {
    "package.json": {"name": "app", "main": "./lib/main.py"},
    "lib/main.py": 'helper = require("./helper")\nexports.greeting = helper.greet("world")\n',
    "lib/helper.py": 'def greet(name):\n    return f"hello {name}"\n\nexports.greet = greet\n',
}


@pytest.fixture
def app(write_tree, tmp_path):
    write_tree({f"app/{path}": content for path, content in APP.items()})
    return directory_path_to_location(tmp_path / "app")


@pytest.mark.asyncio
async def test_main_module_runs_with_dependencies(app):
    package = await load_package(app)

    exports = await package.require_async("")

    assert exports.greeting == "hello world"
    assert package.name == "app"
    assert package.main_id == "lib/main"


@pytest.mark.asyncio
async def test_load_discovers_and_loads_dependencies(app):
    package = await load_package(app)

    record = await package.load("lib/main")

    assert record.dependencies == ["./helper"]
    assert package.modules["lib/helper"].state is ModuleState.COMPILED


@pytest.mark.asyncio
async def test_modules_execute_once(app, write_tree, tmp_path):
    write_tree({"app/lib/counter.py": "import itertools\nexports.token = object()\n"})
    package = await load_package(app)

    first = await package.require_async("lib/counter")
    second = await package.require_async("lib/counter.py")

    assert first is second
    assert first.token is second.token


@pytest.mark.asyncio
async def test_module_exports_can_be_replaced(write_tree, tmp_path):
    write_tree({"pkg/package.json": {}, "pkg/answer.py": "module.exports = 42\n"})
    package = await load_package(directory_path_to_location(tmp_path / "pkg"))

    assert await package.require_async("answer") == 42


@pytest.mark.asyncio
async def test_native_modules_are_required_through_the_import_system(write_tree, tmp_path):
    write_tree({"pkg/package.json": {}, "pkg/main.py": 'json = require("json")\nexports.text = json.dumps([1])\n'})
    package = await load_package(directory_path_to_location(tmp_path / "pkg"))

    assert (await package.require_async("main")).text == "[1]"


@pytest.mark.asyncio
async def test_missing_native_module_is_recorded_then_raised_on_require(write_tree, tmp_path):
    write_tree({"pkg/package.json": {}})
    package = await load_package(directory_path_to_location(tmp_path / "pkg"))

    record = await package.load("mrequire_definitely_missing")

    assert record.state is ModuleState.NATIVE_FAILED
    with pytest.raises(NativeLoadError):
        package.require("mrequire_definitely_missing")


@pytest.mark.asyncio
async def test_require_cycles_see_partial_exports(write_tree, tmp_path):
    write_tree(
        {
            "pkg/package.json": {},
            "pkg/a.py": 'exports.name = "a"\nb = require("./b")\nexports.seen = b.seen\n',
            "pkg/b.py": 'a = require("./a")\nexports.seen = a.name\n',
        }
    )
    package = await load_package(directory_path_to_location(tmp_path / "pkg"))

    exports = await asyncio.wait_for(package.require_async("a"), timeout=5)

    assert exports.seen == "a"


@pytest.mark.asyncio
async def test_require_of_unloaded_module_fails(app):
    package = await load_package(app)

    with pytest.raises(ModuleNotLoadedError):
        package.require("lib/helper")


@pytest.mark.asyncio
async def test_dynamic_ids_load_asynchronously(app):
    package = await load_package(app)
    require = ModuleRequire(package, "lib/main")

    helper = await require.async_load("./helper")

    assert helper.greet("you") == "hello you"
    assert require.resolve("./helper") == "lib/helper"


@pytest.mark.asyncio
async def test_failed_execution_can_be_retried(write_tree, tmp_path):
    write_tree({"pkg/package.json": {}, "pkg/boom.py": "raise RuntimeError('boom')\n"})
    package = await load_package(directory_path_to_location(tmp_path / "pkg"))

    with pytest.raises(RuntimeError):
        await package.require_async("boom")

    record = package.modules["boom"]
    assert record.executed is False
    assert record.exports is None


@pytest.mark.asyncio
async def test_scope_is_injected_into_every_module(write_tree, tmp_path):
    write_tree({"pkg/package.json": {}, "pkg/main.py": "exports.value = answer\n"})
    registry = PackageRegistry(RequireSettings(scope={"answer": 42}))
    package = await registry.load_package(directory_path_to_location(tmp_path / "pkg"))

    assert (await package.require_async("main")).value == 42


@pytest.mark.asyncio
async def test_overlay_sections_apply_for_active_overlays(write_tree, tmp_path):
    description = {"main": "generic.py", "overlay": {"python": {"main": "native.py"}, "browser": {"main": "web.py"}}}
    write_tree({"pkg/package.json": description})
    package = await load_package(directory_path_to_location(tmp_path / "pkg"))

    assert package.main_id == "native"


@pytest.mark.asyncio
async def test_mapped_packages_are_shared_and_redirected(write_tree, tmp_path):
    write_tree(
        {
            "app/package.json": {"name": "app", "mappings": {"dep": "../dep"}},
            "app/main.py": 'exports.value = require("dep").value\nexports.util = require("dep/util").name\n',
            "dep/package.json": {"name": "dep", "main": "index.py"},
            "dep/index.py": 'exports.value = "from dep"\n',
            "dep/util.py": 'exports.name = require("./index").value.upper()\n',
        }
    )
    registry = PackageRegistry()
    package = await registry.load_package(directory_path_to_location(tmp_path / "app"))

    exports = await package.require_async("main")

    assert exports.value == "from dep"
    assert exports.util == "FROM DEP"
    dep = await registry.load_package(directory_path_to_location(tmp_path / "dep"))
    assert package.modules["dep"].redirect is dep
    assert package.modules["dep"].redirect_id == "index"


def test_mapping_locations_accept_strings_and_objects():
    description = PackageDescription(mappings={"dep": {"location": "../dep"}, "vendored": "vendor/lib"})

    assert description.mapping_locations("file:///work/app/") == {
        "dep": "file:///work/dep/",
        "vendored": "file:///work/app/vendor/lib/",
    }


@pytest.mark.asyncio
async def test_cycles_across_mapped_packages_terminate(write_tree, tmp_path):
    write_tree(
        {
            "a/package.json": {"mappings": {"b": "../b"}},
            "a/main.py": 'exports.name = "a"\nexports.other = require("b/main").name\n',
            "b/package.json": {"mappings": {"a": "../a"}},
            "b/main.py": 'exports.name = "b"\nexports.other = require("a/main").name\n',
        }
    )
    package = await load_package(directory_path_to_location(tmp_path / "a"))

    exports = await asyncio.wait_for(package.require_async("main"), timeout=5)

    assert exports.other == "b"


class TestRegistry:
    @pytest.mark.asyncio
    async def test_one_package_per_location(self, app):
        registry = PackageRegistry()

        first, second = await asyncio.gather(registry.load_package(app), registry.load_package(app.rstrip("/")))

        assert first is second
        assert app in registry

    @pytest.mark.asyncio
    async def test_pre_resolved_descriptions_bypass_descriptor(self, tmp_path, write_tree):
        write_tree({"adhoc/tool.py": "exports.ok = True\n"})
        location = directory_path_to_location(tmp_path / "adhoc")

        package = await load_package(location, descriptions={location: PackageDescription()})

        assert (await package.require_async("tool")).ok is True

    @pytest.mark.asyncio
    async def test_awaitable_descriptions_are_accepted(self, tmp_path):
        location = directory_path_to_location(tmp_path)

        async def describe():
            return {"name": "later"}

        package = await load_package(location, descriptions={location: describe()})

        assert package.name == "later"

    @pytest.mark.asyncio
    async def test_missing_descriptor_is_a_read_error(self, tmp_path):
        with pytest.raises(ModuleReadError):
            await load_package(directory_path_to_location(tmp_path))

    @pytest.mark.asyncio
    async def test_malformed_descriptor(self, tmp_path, write_tree):
        write_tree({"package.json": "{not json"})

        with pytest.raises(InvalidDescriptionError, match="not valid JSON"):
            await load_package(directory_path_to_location(tmp_path))

    @pytest.mark.asyncio
    async def test_invalid_descriptor_fields(self, tmp_path, write_tree):
        write_tree({"package.json": {"name": ["not", "a", "string"]}})

        with pytest.raises(InvalidDescriptionError):
            await load_package(directory_path_to_location(tmp_path))

    @pytest.mark.asyncio
    async def test_package_without_main(self, tmp_path, write_tree):
        write_tree({"package.json": {}})
        package = await load_package(directory_path_to_location(tmp_path))

        with pytest.raises(RequireError, match="no main module"):
            await package.require_async("")

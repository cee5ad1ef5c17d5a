"""Unit tests for solidus_core.recompile module.

The locator is built from stub resolvers and a fake compiler so no
compiler binary or network access is needed.
"""

from __future__ import annotations

import asyncio
import json
import time
from collections.abc import Callable
from typing import Any

import pytest

from solidus_core.errors import (
    CompilerNotFoundError,
    InvocationError,
    MetadataError,
    RecompilationError,
)
from solidus_core.locator import CompilerLocator
from solidus_core.models import RecompilationResult, ReformattedMetadata
from solidus_core.recompile import compiler_version, recompile, recompile_sync


def locator_for(stub_resolver_cls: type, compiler: Any) -> CompilerLocator:
    return CompilerLocator(resolvers=[stub_resolver_cls("cached_native", result=compiler)])


class TestCompilerVersion:
    """Tests for compiler_version()."""

    def test_reads_version(self, sample_metadata: dict[str, Any]) -> None:
        assert compiler_version(sample_metadata) == "0.8.20+commit.a1b79de6"

    @pytest.mark.parametrize(
        "metadata",
        [{}, {"compiler": {}}, {"compiler": {"version": ""}}, {"compiler": {"version": 8}}, []],
    )
    def test_missing_version(self, metadata: Any) -> None:
        with pytest.raises(MetadataError):
            compiler_version(metadata)


class TestRecompile:
    """Tests for recompile()."""

    @pytest.mark.asyncio
    async def test_end_to_end(
        self,
        sample_metadata: dict[str, Any],
        sample_sources: dict[str, str],
        make_output: Callable[..., str],
        fake_compiler_cls: type,
        stub_resolver_cls: type,
    ) -> None:
        """Test metadata and sources produce the target's artifacts."""
        compiler = fake_compiler_cls(make_output())
        locator = locator_for(stub_resolver_cls, compiler)

        result = await recompile(sample_metadata, sample_sources, locator=locator)

        assert isinstance(result, RecompilationResult)
        assert result.bytecode == "0x60806040"
        assert result.deployed_bytecode == "0x6080604052"
        assert not result.metadata.endswith("\n")

        sent = json.loads(compiler.inputs[0])
        assert sent["sources"]["contracts/A.sol"]["content"] == sample_sources["contracts/A.sol"]
        assert sent["settings"]["outputSelection"]["contracts/A.sol"]["A"]

    @pytest.mark.asyncio
    async def test_version_is_canonicalized(
        self,
        sample_metadata: dict[str, Any],
        sample_sources: dict[str, str],
        make_output: Callable[..., str],
        fake_compiler_cls: type,
        stub_resolver_cls: type,
    ) -> None:
        """Test the locator sees the v-prefixed version."""
        resolver = stub_resolver_cls("cached_native", result=fake_compiler_cls(make_output()))
        locator = CompilerLocator(resolvers=[resolver])

        await recompile(sample_metadata, sample_sources, locator=locator)

        assert resolver.calls == ["v0.8.20+commit.a1b79de6"]

    @pytest.mark.asyncio
    async def test_custom_reformatter(
        self,
        make_output: Callable[..., str],
        fake_compiler_cls: type,
        stub_resolver_cls: type,
    ) -> None:
        """Test a caller-supplied reformatter decides the input and target."""
        seen: dict[str, Any] = {}

        def reformatter(metadata: Any, sources: Any, log: Any) -> ReformattedMetadata:
            seen["sources"] = sources
            return ReformattedMetadata(
                input={"language": "Solidity", "sources": {}, "settings": {}},
                file_name="B.sol",
                contract_name="B",
            )

        compiler = fake_compiler_cls(make_output("B.sol", "B"))
        result = await recompile(
            {"compiler": {"version": "0.8.20+commit.a1b79de6"}},
            {"B.sol": "contract B {}"},
            reformatter=reformatter,
            locator=locator_for(stub_resolver_cls, compiler),
        )

        assert seen["sources"] == {"B.sol": "contract B {}"}
        assert result.bytecode == "0x60806040"

    @pytest.mark.asyncio
    async def test_compiler_errors_surface_generic(
        self,
        sample_metadata: dict[str, Any],
        sample_sources: dict[str, str],
        fake_compiler_cls: type,
        stub_resolver_cls: type,
    ) -> None:
        """Test a failed compilation raises without diagnostics."""
        output = json.dumps(
            {"errors": [{"severity": "error", "formattedMessage": "TypeError: nope"}]}
        )
        locator = locator_for(stub_resolver_cls, fake_compiler_cls(output))

        with pytest.raises(RecompilationError) as exc_info:
            await recompile(sample_metadata, sample_sources, locator=locator)

        assert "TypeError" not in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_empty_compiler_output(
        self,
        sample_metadata: dict[str, Any],
        sample_sources: dict[str, str],
        fake_compiler_cls: type,
        stub_resolver_cls: type,
    ) -> None:
        """Test an invocation failure propagates unchanged."""

        class Broken(fake_compiler_cls):  # type: ignore[misc,valid-type]
            def compile(self, input_json: str) -> str:
                raise InvocationError()

        locator = locator_for(stub_resolver_cls, Broken())
        with pytest.raises(InvocationError):
            await recompile(sample_metadata, sample_sources, locator=locator)

    @pytest.mark.asyncio
    async def test_compiler_not_found(
        self,
        sample_metadata: dict[str, Any],
        sample_sources: dict[str, str],
        stub_resolver_cls: type,
    ) -> None:
        """Test resolution failure propagates as solc not found."""
        locator = CompilerLocator(resolvers=[stub_resolver_cls("cached_native")])

        with pytest.raises(CompilerNotFoundError, match="solc not found"):
            await recompile(sample_metadata, sample_sources, locator=locator)

    @pytest.mark.asyncio
    async def test_compile_runs_off_the_event_loop(
        self,
        sample_metadata: dict[str, Any],
        sample_sources: dict[str, str],
        make_output: Callable[..., str],
        fake_compiler_cls: type,
        stub_resolver_cls: type,
    ) -> None:
        """Test other tasks keep running while the compiler works."""

        class SlowCompiler(fake_compiler_cls):  # type: ignore[misc,valid-type]
            def compile(self, input_json: str) -> str:
                time.sleep(0.5)
                return super().compile(input_json)

        ticks = 0

        async def ticker() -> None:
            nonlocal ticks
            while True:
                await asyncio.sleep(0.01)
                ticks += 1

        locator = locator_for(stub_resolver_cls, SlowCompiler(make_output()))
        task = asyncio.create_task(ticker())
        try:
            result = await recompile(sample_metadata, sample_sources, locator=locator)
        finally:
            task.cancel()

        assert result.bytecode == "0x60806040"
        assert ticks >= 10

    @pytest.mark.asyncio
    async def test_bad_metadata_skips_resolution(
        self,
        sample_metadata: dict[str, Any],
        stub_resolver_cls: type,
    ) -> None:
        """Test no compiler is looked up when sources are missing."""
        resolver = stub_resolver_cls("cached_native")
        locator = CompilerLocator(resolvers=[resolver])

        with pytest.raises(MetadataError):
            await recompile(sample_metadata, {}, locator=locator)

        assert resolver.calls == []


class TestRecompileSync:
    """Tests for recompile_sync()."""

    def test_runs_without_event_loop(
        self,
        sample_metadata: dict[str, Any],
        sample_sources: dict[str, str],
        make_output: Callable[..., str],
        fake_compiler_cls: type,
        stub_resolver_cls: type,
    ) -> None:
        locator = locator_for(stub_resolver_cls, fake_compiler_cls(make_output()))
        result = recompile_sync(sample_metadata, sample_sources, locator=locator)
        assert result.to_dict()["deployedBytecode"] == "0x6080604052"


class TestScenarioASol:
    """Tests for the single-contract A.sol scenario."""

    @pytest.mark.asyncio
    async def test_exact_result(
        self,
        make_output: Callable[..., str],
        fake_compiler_cls: type,
        stub_resolver_cls: type,
    ) -> None:
        """Test compiler output maps to the camelCase result document."""
        metadata = {
            "compiler": {"version": "0.8.20+commit.a1b79de6"},
            "language": "Solidity",
            "settings": {"compilationTarget": {"A.sol": "A"}},
            "sources": {"A.sol": {}},
        }
        output = make_output(
            "A.sol", "A", bytecode="6001", deployed_bytecode="6002", metadata=" {} "
        )
        locator = locator_for(stub_resolver_cls, fake_compiler_cls(output))

        result = await recompile(metadata, {"A.sol": "contract A {}"}, locator=locator)

        assert result.to_dict() == {
            "bytecode": "0x6001",
            "deployedBytecode": "0x6002",
            "metadata": "{}",
        }

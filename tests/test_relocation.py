"""Tests for jarsmith.relocation."""

from __future__ import annotations

import pytest

from conftest import make_class_file
from jarsmith.conventions import CORE_RELOCATIONS
from jarsmith.errors import RelocationError
from jarsmith.models import RelocationRule
from jarsmith.relocation import Relocator

PAPERLIB = "com/eintosti/buildsystem/util/external/paperlib"


@pytest.fixture
def relocator() -> Relocator:
    return Relocator(CORE_RELOCATIONS)


class TestRelocatePath:
    def test_class_path(self, relocator: Relocator) -> None:
        assert relocator.relocate_path("io/papermc/lib/PaperLib.class") == f"{PAPERLIB}/PaperLib.class"

    def test_nested_package(self, relocator: Relocator) -> None:
        assert relocator.relocate_path("org/bstats/bukkit/Metrics.class") == (
            "com/eintosti/buildsystem/util/external/bstats/bukkit/Metrics.class"
        )

    def test_unrelated_path(self, relocator: Relocator) -> None:
        assert relocator.relocate_path("de/eintosti/buildsystem/BuildSystem.class") == (
            "de/eintosti/buildsystem/BuildSystem.class"
        )

    def test_prefix_must_end_on_package_boundary(self, relocator: Relocator) -> None:
        assert relocator.relocate_path("org/bstatsextra/Foo.class") == "org/bstatsextra/Foo.class"

    def test_service_file_name(self, relocator: Relocator) -> None:
        assert relocator.relocate_path("META-INF/services/org.bstats.charts.CustomChart") == (
            "META-INF/services/com.eintosti.buildsystem.util.external.bstats.charts.CustomChart"
        )


class TestRelocateBytes:
    @pytest.mark.parametrize(
        ("before", "after"),
        [
            (b"io/papermc/lib/PaperLib", PAPERLIB.encode() + b"/PaperLib"),
            (b"Lio/papermc/lib/PaperLib;", b"L" + PAPERLIB.encode() + b"/PaperLib;"),
            (
                b"(Lio/papermc/lib/PaperLib;[Lio/papermc/lib/A;)V",
                b"(L" + PAPERLIB.encode() + b"/PaperLib;[L" + PAPERLIB.encode() + b"/A;)V",
            ),
            (b"io.papermc.lib.PaperLib", PAPERLIB.replace("/", ".").encode() + b".PaperLib"),
            (b"io/papermc/lib", PAPERLIB.encode()),
            (
                b"(ILorg/bstats/bukkit/Metrics;)V",
                b"(ILcom/eintosti/buildsystem/util/external/bstats/bukkit/Metrics;)V",
            ),
            (
                b"(ZJLio/papermc/lib/PaperLib;)V",
                b"(ZJL" + PAPERLIB.encode() + b"/PaperLib;)V",
            ),
            (
                b"[ILfr/mrmicky/fastboard/FastBoard;",
                b"[ILcom/eintosti/buildsystem/util/external/fastboard/FastBoard;",
            ),
            (
                b"(BCDFSLcom/cryptomorin/xseries/XMaterial;)Lio/papermc/lib/PaperLib;",
                b"(BCDFSLcom/eintosti/buildsystem/util/external/xseries/XMaterial;)L"
                + PAPERLIB.encode()
                + b"/PaperLib;",
            ),
        ],
    )
    def test_rewrites(self, relocator: Relocator, before: bytes, after: bytes) -> None:
        assert relocator.relocate_bytes(before) == after

    @pytest.mark.parametrize(
        "untouched",
        [
            b"xio/papermc/lib/PaperLib",
            b"com/example/io/papermc/lib/A",
            b"io/papermc/library/A",
            b"Lcom/example/Other;",
            b"ILcom/example/io/papermc/lib/A;",
            b"MyClassLio/papermc/lib/A",
        ],
    )
    def test_leaves_non_matches(self, relocator: Relocator, untouched: bytes) -> None:
        assert relocator.relocate_bytes(untouched) == untouched

    def test_text_lines(self, relocator: Relocator) -> None:
        text = "org.bstats.charts.SimplePie\nde.eintosti.Other\n"
        assert relocator.relocate_text(text) == (
            "com.eintosti.buildsystem.util.external.bstats.charts.SimplePie\nde.eintosti.Other\n"
        )


class TestRelocateClass:
    def test_rewrites_constant_pool(self, relocator: Relocator) -> None:
        original = make_class_file(
            "io/papermc/lib/PaperLib",
            ["Lorg/bstats/bukkit/Metrics;", "com.cryptomorin.xseries.XMaterial", "plain text"],
        )
        relocated = relocator.relocate_class(original)

        assert b"io/papermc/lib" not in relocated
        assert b"org/bstats" not in relocated
        assert b"com.cryptomorin.xseries" not in relocated
        assert PAPERLIB.encode() + b"/PaperLib" in relocated
        assert b"Lcom/eintosti/buildsystem/util/external/bstats/bukkit/Metrics;" in relocated
        assert b"com.eintosti.buildsystem.util.external.xseries.XMaterial" in relocated
        assert b"plain text" in relocated

    def test_rewrites_descriptors_after_primitives(self, relocator: Relocator) -> None:
        original = make_class_file(
            "de/eintosti/buildsystem/Scoreboards",
            ["(ZLfr/mrmicky/fastboard/FastBoard;)V", "(JLio/papermc/lib/PaperLib;)V"],
        )
        relocated = relocator.relocate_class(original)

        assert b"fr/mrmicky" not in relocated
        assert b"io/papermc" not in relocated
        assert b"(ZLcom/eintosti/buildsystem/util/external/fastboard/FastBoard;)V" in relocated
        assert b"(JL" + PAPERLIB.encode() + b"/PaperLib;)V" in relocated

    def test_result_is_well_formed(self, relocator: Relocator) -> None:
        original = make_class_file("io/papermc/lib/PaperLib", ["fr/mrmicky/fastboard/FastBoard"])
        relocated = relocator.relocate_class(original)
        # Re-parsing with no rules must succeed and leave the bytes alone
        assert Relocator([]).relocate_class(relocated) == relocated
        # Everything after the constant pool is untouched
        assert relocated[-14:] == original[-14:]

    def test_unrelated_class_unchanged(self, relocator: Relocator) -> None:
        original = make_class_file("de/eintosti/buildsystem/BuildSystem", ["hello"])
        assert relocator.relocate_class(original) == original

    def test_not_a_class_file(self, relocator: Relocator) -> None:
        with pytest.raises(RelocationError, match="not a class file"):
            relocator.relocate_class(b"PK\x03\x04 not a class", "Broken.class")

    def test_truncated_pool(self, relocator: Relocator) -> None:
        data = make_class_file("io/papermc/lib/PaperLib")
        with pytest.raises(RelocationError, match="truncated"):
            relocator.relocate_class(data[:14])

    def test_unknown_tag(self, relocator: Relocator) -> None:
        data = bytearray(make_class_file("a/B"))
        data[10] = 99
        with pytest.raises(RelocationError, match="unknown constant pool tag 99"):
            relocator.relocate_class(bytes(data))


class TestRelocateEntry:
    def test_service_file(self, relocator: Relocator) -> None:
        name, data = relocator.relocate_entry(
            "META-INF/services/org.bstats.charts.CustomChart", b"org.bstats.charts.SimplePie\n"
        )
        assert name.endswith("external.bstats.charts.CustomChart")
        assert data == b"com.eintosti.buildsystem.util.external.bstats.charts.SimplePie\n"

    def test_other_resources_untouched(self, relocator: Relocator) -> None:
        assert relocator.relocate_entry("config.yml", b"org.bstats: true\n") == (
            "config.yml",
            b"org.bstats: true\n",
        )

    def test_custom_rule(self) -> None:
        relocator = Relocator([RelocationRule(pattern="net.kyori", destination="shaded.kyori")])
        name, _ = relocator.relocate_entry("net/kyori/adventure/Audience.class", make_class_file("net/kyori/adventure/Audience"))
        assert name == "shaded/kyori/adventure/Audience.class"

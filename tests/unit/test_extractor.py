# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
from pathlib import Path

import pytest
from fakes import FakeClass, FakeHost

from vstscan.codec import DocumentCodec
from vstscan.extractor import MetadataExtractor, ModuleOpenError
from vstscan.hosts import ModuleInfoHost
from vstscan.model import AUDIO_EFFECT_CATEGORY, Record


def test_ph2_ext_001_prefers_first_audio_effect_class() -> None:
    host = FakeHost(
        modules={
            "/p/a.vst3": (
                FakeClass(name="Controller", category="Component Controller Class"),
                FakeClass(name="Effect", sub_categories=("Fx", "Delay")),
                FakeClass(name="Second Effect"),
            )
        }
    )

    record = MetadataExtractor(host=host).extract("/p/a.vst3")

    assert record.is_valid
    assert record.name == "Effect"
    assert record.category == AUDIO_EFFECT_CATEGORY
    assert record.sub_categories == ("Fx", "Delay")
    assert record.error_message == ""


def test_ph2_ext_002_falls_back_to_first_class() -> None:
    host = FakeHost(
        modules={
            "/p/a.vst3": (
                FakeClass(name="First", category="Component Controller Class"),
                FakeClass(name="Other", category="Plugin Compatibility Class"),
            )
        }
    )

    record = MetadataExtractor(host=host).extract("/p/a.vst3")

    assert record.is_valid
    assert record.name == "First"
    assert record.category == "Component Controller Class"


def test_ph2_ext_003_copies_every_class_field() -> None:
    host = FakeHost(
        default=(
            FakeClass(
                name="Foo",
                vendor="Acme",
                version="2.1.0",
                identifier="0123",
                sdk_version="VST 3.7.9",
                cardinality=2147483647,
                class_flags=3,
            ),
        )
    )

    record = MetadataExtractor(host=host).extract("/p/a.vst3")

    assert record == Record(
        path="/p/a.vst3",
        is_valid=True,
        name="Foo",
        vendor="Acme",
        version="2.1.0",
        category=AUDIO_EFFECT_CATEGORY,
        cid="0123",
        sdk_version="VST 3.7.9",
        cardinality=2147483647,
        flags=3,
    )


def test_ph2_ext_004_module_without_classes_is_invalid() -> None:
    host = FakeHost(modules={"/p/a.vst3": ()})

    record = MetadataExtractor(host=host).extract("/p/a.vst3")

    assert record == Record.failure("/p/a.vst3", "No plugin classes found")


def test_ph2_ext_005_open_failure_carries_host_reason() -> None:
    host = FakeHost(errors={"/p/a.vst3": ModuleOpenError("dlopen failed")})

    record = MetadataExtractor(host=host).extract("/p/a.vst3")

    assert not record.is_valid
    assert record.error_message == "dlopen failed"
    assert record.name == ""


def test_ph2_ext_006_unexpected_exception_never_propagates() -> None:
    host = FakeHost(errors={"/p/a.vst3": ValueError("corrupt factory")})

    record = MetadataExtractor(host=host).extract("/p/a.vst3")

    assert record == Record.failure("/p/a.vst3", "corrupt factory")


def test_ph2_ext_007_moduleinfo_host_reads_bundle_classes(
    tmp_path: Path, make_bundle
) -> None:
    bundle = make_bundle(
        tmp_path,
        "Foo",
        [
            {
                "CID": "AAAA",
                "Category": "Component Controller Class",
                "Name": "Foo Controller",
            },
            {
                "CID": "BBBB",
                "Category": AUDIO_EFFECT_CATEGORY,
                "Name": "Foo",
                "Version": "1.2.0",
                "SDKVersion": "VST 3.7.9",
                "Sub Categories": ["Fx", "EQ"],
                "Class Flags": 1,
                "Cardinality": 2147483647,
            },
        ],
    )
    binary = bundle / "Contents" / "x86_64-linux" / "Foo.so"

    record = MetadataExtractor(host=ModuleInfoHost()).extract(str(binary))

    assert record.is_valid
    assert record.path == str(binary)
    assert record.name == "Foo"
    assert record.vendor == "Acme"
    assert record.cid == "BBBB"
    assert record.sub_categories == ("Fx", "EQ")
    assert record.flags == 1
    assert record.cardinality == 2147483647


def test_ph2_ext_008_moduleinfo_host_opens_bundle_directory(
    tmp_path: Path, make_bundle
) -> None:
    bundle = make_bundle(tmp_path, "Bar", [{"Name": "Bar", "Vendor": "Other"}])

    module = ModuleInfoHost().open(str(bundle))

    assert [item.vendor for item in module.list_classes()] == ["Other"]


def test_ph2_ext_009_moduleinfo_host_rejects_paths_outside_bundles(
    tmp_path: Path,
) -> None:
    plain = tmp_path / "plain.so"
    plain.write_bytes(b"")

    with pytest.raises(ModuleOpenError, match="Not inside a VST3 bundle"):
        ModuleInfoHost().open(str(plain))


def test_ph2_ext_010_bundle_without_moduleinfo_is_invalid_record(
    tmp_path: Path, make_bundle
) -> None:
    bundle = make_bundle(tmp_path, "Legacy", None)

    record = MetadataExtractor(host=ModuleInfoHost()).extract(str(bundle))

    assert not record.is_valid
    assert "moduleinfo.json" in record.error_message


def test_ph2_ext_011_malformed_moduleinfo_is_invalid_record(
    tmp_path: Path, make_bundle
) -> None:
    bundle = make_bundle(tmp_path, "Broken", [])
    info_path = bundle / "Contents" / "Resources" / "moduleinfo.json"
    info_path.write_text("{ not json", encoding="utf-8")

    record = MetadataExtractor(host=ModuleInfoHost()).extract(str(bundle))

    assert not record.is_valid
    assert record.error_message.startswith("Malformed moduleinfo.json")


def test_ph2_ext_012_empty_moduleinfo_classes_is_invalid_record(
    tmp_path: Path, make_bundle
) -> None:
    bundle = make_bundle(tmp_path, "Hollow", [])

    record = MetadataExtractor(host=ModuleInfoHost()).extract(str(bundle))

    assert record == Record.failure(str(bundle), "No plugin classes found")


def test_ph2_ext_013_class_flags_are_stored_as_unsigned() -> None:
    host = FakeHost(default=(FakeClass(class_flags=-1),))

    record = MetadataExtractor(host=host).extract("/p/a.vst3")

    assert record.flags == 0xFFFFFFFF
    codec = DocumentCodec(clock=lambda: 1)
    assert codec.loads(codec.dumps([record])) == [record]


def test_ph2_ext_014_negative_moduleinfo_class_flags_round_trip(
    tmp_path: Path, make_bundle
) -> None:
    bundle = make_bundle(tmp_path, "Signed", [{"Name": "Signed", "Class Flags": -2}])
    codec = DocumentCodec(clock=lambda: 1)

    record = MetadataExtractor(host=ModuleInfoHost()).extract(str(bundle))

    assert record.is_valid
    assert record.flags == 0xFFFFFFFE
    assert codec.loads(codec.dumps([record])) == [record]

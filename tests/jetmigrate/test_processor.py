"""Tests for single-file search and replace."""

from __future__ import annotations

import os
import stat
from collections.abc import Callable
from pathlib import Path

import pytest

from jetmigrate.matcher import LineMatcher
from jetmigrate.processor import FileProcessor, should_check_artifacts

WriteFile = Callable[[str, str], Path]


@pytest.mark.unit
@pytest.mark.parametrize(
    ("path", "expected"),
    [
        ("build.gradle", True),
        ("app/build.gradle", True),
        ("app/build.gradle.kts", True),
        ("buildSrc/src/main/kotlin/Dependencies.kt", True),
        ("app/src/main/java/Example.java", False),
        ("app/proguard-rules.pro", False),
        ("res.xml", False),
        ("gradlew", False),
    ],
)
def test_should_check_artifacts(path: str, expected: bool) -> None:
    assert should_check_artifacts(Path(path)) is expected


@pytest.mark.unit
def test_import_is_rewritten(processor: FileProcessor, write_file: WriteFile, tmp_path: Path) -> None:
    relative = write_file("Example.java", "import android.support.animation.Force;\n")

    result = processor.process(relative, matcher_id=2)

    assert result.matcher_id == 2
    assert result.path == relative
    assert result.matches_found == 1
    assert result.changed
    assert (tmp_path / relative).read_text(encoding="utf-8") == (
        "import androidx.dynamicanimation.animation.Force;\n"
    )


@pytest.mark.unit
def test_xml_file_has_instances_replaced(processor: FileProcessor, write_file: WriteFile, tmp_path: Path) -> None:
    relative = write_file(
        "app/src/main/res/layout/activity_main.xml",
        "<android.support.design.widget.CoordinatorLayout\n"
        '    android:layout_width="match_parent"\n'
        '    android:layout_height="match_parent">\n'
        "</android.support.design.widget.CoordinatorLayout>\n",
    )

    result = processor.process(relative)

    assert result.matches_found == 2
    assert result.wildcard_imports == ()
    assert (tmp_path / relative).read_text(encoding="utf-8") == (
        "<androidx.coordinatorlayout.widget.CoordinatorLayout\n"
        '    android:layout_width="match_parent"\n'
        '    android:layout_height="match_parent">\n'
        "</androidx.coordinatorlayout.widget.CoordinatorLayout>\n"
    )


@pytest.mark.unit
def test_proguard_file_reports_glob_and_replaces_the_rest(
    processor: FileProcessor, write_file: WriteFile, tmp_path: Path
) -> None:
    relative = write_file(
        "proguard-rules.pro",
        "-keep class android.support.v4.app.Fragment { *; }\n"
        "-keep android.support.design.drawable.DrawableUtils\n"
        "    -dontwarn android.support.design.**\n"
        "-keepclassmembers,allowobfuscation class * extends android.arch.lifecycle.ViewModel\n",
    )

    result = processor.process(relative)

    assert result.matches_found == 3
    assert result.wildcard_imports == ("    -dontwarn android.support.design.**",)
    assert result.artifacts_found == ()
    assert (tmp_path / relative).read_text(encoding="utf-8") == (
        "-keep class androidx.fragment.app.Fragment { *; }\n"
        "-keep com.google.android.material.drawable.DrawableUtils\n"
        "    -dontwarn android.support.design.**\n"
        "-keepclassmembers,allowobfuscation class * extends androidx.lifecycle.ViewModel\n"
    )


@pytest.mark.unit
def test_kotlin_file_replaces_across_categories(
    processor: FileProcessor, write_file: WriteFile, tmp_path: Path
) -> None:
    relative = write_file(
        "app/src/main/java/Example.kt",
        "package com.example.kotlin\n"
        "import com.example.package\n"
        "import android.arch.lifecycle.ViewModel\n"
        "import android.databinding.*\n"
        "\n"
        "/**\n"
        " * Might or might not use [android.databinding.ObservableInt].\n"
        " */\n"
        "class Example {\n"
        "    @set:android.support.annotation.VisibleForTesting\n"
        "    var something: String? = null\n"
        "}\n",
    )

    result = processor.process(relative)

    assert result.matches_found == 3
    assert result.wildcard_imports == ("import android.databinding.*",)
    assert (tmp_path / relative).read_text(encoding="utf-8") == (
        "package com.example.kotlin\n"
        "import com.example.package\n"
        "import androidx.lifecycle.ViewModel\n"
        "import android.databinding.*\n"
        "\n"
        "/**\n"
        " * Might or might not use [androidx.databinding.ObservableInt].\n"
        " */\n"
        "class Example {\n"
        "    @set:androidx.annotation.VisibleForTesting\n"
        "    var something: String? = null\n"
        "}\n"
    )


@pytest.mark.unit
def test_build_file_suggests_artifact_without_rewriting(
    matcher: LineMatcher, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.chdir(tmp_path)
    build_file = Path("build.gradle")
    content = "dependencies {\n    implementation 'com.android.support:car:28.0.0'\n}\n"
    build_file.write_text(content, encoding="utf-8")

    result = FileProcessor(matcher).process(build_file)

    assert result.matches_found == 0
    assert not result.changed
    assert [mapping.replacement for mapping in result.artifacts_found] == ["androidx.car:car:1.0.0-alpha5"]
    assert build_file.read_text(encoding="utf-8") == content


@pytest.mark.unit
def test_repeated_artifact_is_reported_once(processor: FileProcessor, write_file: WriteFile) -> None:
    relative = write_file(
        "app/build.gradle",
        "implementation 'com.android.support:support-compat:28.0.0'\n"
        "testImplementation 'com.android.support:support-compat:28.0.0'\n"
        "implementation 'com.android.support:car:28.0.0'\n",
    )

    result = processor.process(relative)

    assert [mapping.key for mapping in result.artifacts_found] == [
        "com.android.support:support-compat",
        "com.android.support:car",
    ]
    assert "androidx.core:core:" in result.artifacts_found[0].replacement


@pytest.mark.unit
def test_artifacts_ignored_in_nested_module_sources(processor: FileProcessor, write_file: WriteFile) -> None:
    relative = write_file(
        "app/src/main/Dependencies.kt",
        'val CAR = "com.android.support:car:28.0.0"\n',
    )

    assert processor.process(relative).artifacts_found == ()


@pytest.mark.unit
def test_second_pass_is_a_no_op(processor: FileProcessor, write_file: WriteFile, tmp_path: Path) -> None:
    relative = write_file(
        "Example.java",
        "import android.support.v4.app.Fragment;\nimport android.support.annotation.NonNull;\n",
    )

    first = processor.process(relative)
    migrated = (tmp_path / relative).read_bytes()
    second = processor.process(relative)

    assert first.matches_found == 2
    assert second.matches_found == 0
    assert (tmp_path / relative).read_bytes() == migrated


@pytest.mark.unit
def test_unmatched_file_is_not_touched(processor: FileProcessor, write_file: WriteFile, tmp_path: Path) -> None:
    relative = write_file("Plain.java", "class Plain {}\n")
    target = tmp_path / relative
    os.utime(target, ns=(1_000_000_000_000_000_000, 1_000_000_000_000_000_000))
    before = target.stat()

    result = processor.process(relative)

    after = target.stat()
    assert result.matches_found == 0
    assert after.st_mtime_ns == before.st_mtime_ns
    assert after.st_ino == before.st_ino


@pytest.mark.unit
@pytest.mark.skipif(os.name != "posix", reason="POSIX permission bits")
def test_rewrite_preserves_permissions(processor: FileProcessor, write_file: WriteFile, tmp_path: Path) -> None:
    relative = write_file("gradle/script.gradle", "apply from: 'android.support.v4.app.Fragment'\n")
    target = tmp_path / relative
    target.chmod(0o750)

    result = processor.process(relative)

    assert result.matches_found == 1
    assert stat.S_IMODE(target.stat().st_mode) == 0o750
    assert [entry.name for entry in target.parent.iterdir()] == ["script.gradle"]


@pytest.mark.unit
def test_line_terminators_are_preserved(processor: FileProcessor, write_file: WriteFile, tmp_path: Path) -> None:
    relative = write_file(
        "Example.java",
        "// header\r\nimport android.support.v4.app.Fragment;\r\nclass A {}",
    )

    processor.process(relative)

    assert (tmp_path / relative).read_bytes() == (
        b"// header\r\nimport androidx.fragment.app.Fragment;\r\nclass A {}"
    )


@pytest.mark.unit
def test_empty_file_yields_no_matches(processor: FileProcessor, write_file: WriteFile) -> None:
    relative = write_file("Empty.java", "")

    assert processor.process(relative).matches_found == 0


@pytest.mark.unit
def test_non_utf8_file_raises_decode_error(processor: FileProcessor, tmp_path: Path) -> None:
    (tmp_path / "Binary.java").write_bytes(b"\xff\xfe\x00android.support")

    with pytest.raises(UnicodeDecodeError):
        processor.process(Path("Binary.java"))


@pytest.mark.unit
def test_missing_file_raises_os_error(processor: FileProcessor) -> None:
    with pytest.raises(FileNotFoundError):
        processor.process(Path("Missing.java"))
